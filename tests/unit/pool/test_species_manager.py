"""
Unit tests for evopop.pool.species_manager module.

Genomes are built with 'make_genome' (see conftest.py): with a compatibility
threshold of 0.1, genomes with equal weights share a species while genomes
whose weights differ by 0.5 or more do not.
"""

import pytest

from evopop.errors import InvariantError
from evopop.pool.species import Species
from evopop.pool.species_manager import CullResult, SpeciesManager


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def manager(config, rng):
    config.compatibility_threshold = 0.1
    config.species_stagnant_limit  = 2
    return SpeciesManager(config, rng)


def populated_species(make_genome, config, fitness_values, weight=0.0):
    species = Species(make_genome(fitness=fitness_values[0], weight=weight), config)
    for fitness in fitness_values[1:]:
        species.add_member(make_genome(fitness=fitness, weight=weight))
    return species


# ============================================================================
# Test Speciation
# ============================================================================

class TestSpeciate:
    """Test the assignment of genomes to species."""

    def test_incompatible_genomes_found_new_species(self, manager, make_genome):
        members = [make_genome(fitness=0.9, weight=0.0),
                   make_genome(fitness=0.8, weight=1.0),
                   make_genome(fitness=0.7, weight=0.0)]
        manager.speciate(members)
        assert len(manager.species) == 2
        assert manager.species[0].members == [members[0], members[2]]
        assert manager.species[1].members == [members[1]]
        assert manager.species[1].representative is members[1]

    def test_members_compatible_with_representative(self, manager, make_genome, config):
        members = [make_genome(fitness=1.0 - i / 10, weight=(i % 3) * 0.5) for i in range(9)]
        manager.speciate(members)
        for spec in manager.species:
            for genome in spec.members:
                assert Species.is_compatible(spec.representative, genome, config.compatibility_threshold)

    def test_first_match_wins(self, manager, make_genome, config):
        config.compatibility_threshold = 0.5
        manager.species = [Species(make_genome(fitness=0.5, weight=0.0), config, 1),
                           Species(make_genome(fitness=0.5, weight=1.0), config, 2)]
        # distance 0.4 to the first representative, 0 to the second
        genome = make_genome(fitness=0.3, weight=1.0)
        manager.speciate([genome])
        assert manager.species[0].members == [genome]

    def test_species_ids_are_unique(self, manager, make_genome):
        manager.speciate([make_genome(fitness=0.9, weight=w) for w in (0.0, 0.5, 1.0)])
        assert [spec.id for spec in manager.species] == [1, 2, 3]

    def test_species_order_is_preserved(self, manager, make_genome):
        manager.speciate([make_genome(fitness=0.9, weight=0.0), make_genome(fitness=0.8, weight=1.0)])
        ids = [spec.id for spec in manager.species]
        # the fitter genome now belongs to the second species
        manager.speciate([make_genome(fitness=0.9, weight=1.0), make_genome(fitness=0.8, weight=0.0)])
        assert [spec.id for spec in manager.species] == ids

    def test_unmatched_species_are_emptied(self, manager, make_genome):
        manager.speciate([make_genome(fitness=0.9, weight=0.0), make_genome(fitness=0.8, weight=1.0)])
        manager.speciate([make_genome(fitness=0.9, weight=0.0)])
        assert manager.species[1].members == []


class TestSpeciesRecords:
    """Test best genome, all-time best and stagnation updates."""

    def test_improvement_resets_stagnation(self, manager, make_genome):
        manager.speciate([make_genome(fitness=0.5)])
        manager.species[0].increment_stagnation()
        better = make_genome(fitness=0.8)
        manager.speciate([better, make_genome(fitness=0.6)])
        species = manager.species[0]
        assert species.best_genome is better
        assert species.all_time_best == 0.8
        assert species.stagnation == 0

    def test_no_improvement_increments_stagnation(self, manager, make_genome):
        manager.speciate([make_genome(fitness=0.5)])
        worse = make_genome(fitness=0.4)
        manager.speciate([worse])
        manager.speciate([make_genome(fitness=0.5)])
        species = manager.species[0]
        assert species.best_genome is not worse
        assert species.all_time_best == 0.5
        assert species.stagnation == 2

    def test_all_time_best_never_decreases(self, manager, make_genome):
        history = []
        for fitness in (0.3, 0.6, 0.2, 0.6, 0.9, 0.1):
            manager.speciate([make_genome(fitness=fitness)])
            history.append(manager.species[0].all_time_best)
        assert history == sorted(history)
        assert history[-1] == 0.9


# ============================================================================
# Test Ranking
# ============================================================================

class TestRankSpecies:

    def test_ranked_by_best_genome(self, manager, make_genome):
        manager.speciate([make_genome(fitness=0.9, weight=0.0),
                          make_genome(fitness=0.8, weight=1.0),
                          make_genome(fitness=0.7, weight=2.0)])
        manager.species.reverse()
        assert [spec.best_genome.fitness for spec in manager.rank_species()] == [0.9, 0.8, 0.7]

    def test_ties_keep_list_order(self, manager, make_genome):
        manager.speciate([make_genome(fitness=0.5, weight=0.0), make_genome(fitness=0.5, weight=1.0)])
        assert manager.rank_species() == manager.species

    def test_empty_species_are_left_out(self, manager, make_genome):
        manager.speciate([make_genome(fitness=0.9, weight=0.0), make_genome(fitness=0.8, weight=1.0)])
        manager.speciate([make_genome(fitness=0.9, weight=0.0)])
        assert manager.rank_species() == [manager.species[0]]


class TestKeepTopSpecies:

    def test_keeps_two_best(self, manager, make_genome):
        manager.speciate([make_genome(fitness=0.9, weight=0.0),
                          make_genome(fitness=0.8, weight=1.0),
                          make_genome(fitness=0.7, weight=2.0)])
        first, second, _ = manager.species
        manager.keep_top_species(2)
        assert manager.species == [first, second]

    def test_fewer_than_two_species(self, manager, make_genome):
        manager.speciate([make_genome(fitness=0.9), make_genome(fitness=0.8)])
        with pytest.raises(InvariantError):
            manager.keep_top_species(2)


# ============================================================================
# Test Culling
# ============================================================================

class TestRemoveMembers:

    def test_shared_fitness(self, manager, make_genome, config):
        manager.species = [populated_species(make_genome, config, [0.8, 0.6, 0.4, 0.2])]
        cull = manager.remove_members(0.5)
        survivors = manager.species[0].members
        assert [g.fitness for g in survivors] == [0.8, 0.6]
        assert [g.shared_fitness for g in survivors] == [pytest.approx(0.4), pytest.approx(0.3)]
        assert manager.species[0].average_fitness == pytest.approx(0.35)
        assert cull.total_average_fitness == pytest.approx(0.35)

    def test_total_sums_species_averages(self, manager, make_genome, config):
        manager.species = [populated_species(make_genome, config, [1.0, 1.0], weight=0.0),
                           populated_species(make_genome, config, [0.4], weight=1.0)]
        cull = manager.remove_members(1.0)
        # 1.0 / 2 for the first species, 0.4 for the second
        assert cull.total_average_fitness == pytest.approx(0.9)
        assert cull.average_species_fitness == pytest.approx(0.45)

    def test_stagnant_species_and_members_removed(self, manager, make_genome, config):
        healthy  = populated_species(make_genome, config, [0.5, 0.4], weight=0.0)
        stagnant = populated_species(make_genome, config, [0.9, 0.8], weight=1.0)
        stagnant.stagnation = 3
        manager.species = [healthy, stagnant]
        cull = manager.remove_members(1.0)
        assert cull.species == [healthy]
        assert manager.species == [healthy]
        survivors = [g for spec in cull.species for g in spec.members]
        assert not any(g in stagnant.members for g in survivors)

    def test_stagnation_at_limit_is_kept(self, manager, make_genome, config):
        species = populated_species(make_genome, config, [0.5], weight=0.0)
        other   = populated_species(make_genome, config, [0.9], weight=1.0)
        species.stagnation = 2
        other.stagnation   = 5
        manager.species = [species, other]
        assert manager.remove_members(1.0).species == [species]

    def test_all_stagnant_keeps_best(self, manager, make_genome, config):
        weaker = populated_species(make_genome, config, [0.5], weight=0.0)
        best   = populated_species(make_genome, config, [0.9], weight=1.0)
        weaker.stagnation = 3
        best.stagnation   = 4
        manager.species = [weaker, best]
        cull = manager.remove_members(1.0)
        assert cull.species == [best]
        assert best.stagnation == 0

    def test_empty_species_removed(self, manager, make_genome, config):
        empty = populated_species(make_genome, config, [0.5], weight=0.0)
        empty.members = []
        full  = populated_species(make_genome, config, [0.9], weight=1.0)
        manager.species = [empty, full]
        assert manager.remove_members(0.5).species == [full]

    def test_empty_cull(self):
        assert CullResult([], 0.0).average_species_fitness == 0.0


# ============================================================================
# Test Offspring Allocation
# ============================================================================

class TestAllocateOffspring:

    def test_proportional_allocation(self, manager, make_genome, config):
        strong = populated_species(make_genome, config, [0.75], weight=0.0)
        weak   = populated_species(make_genome, config, [0.25], weight=1.0)
        manager.species = [strong, weak]
        cull = manager.remove_members(1.0)
        plan = manager.allocate_offspring(cull, 10)
        # floor(0.75 * 10) - 1 and floor(0.25 * 10) - 1
        assert plan == [(strong, 6), (weak, 1)]
        assert sum(1 + n for _, n in plan) <= 10

    def test_non_positive_total_splits_evenly(self, manager, make_genome, config):
        first  = populated_species(make_genome, config, [0.0], weight=0.0)
        second = populated_species(make_genome, config, [0.0], weight=1.0)
        manager.species = [first, second]
        cull = manager.remove_members(1.0)
        assert manager.allocate_offspring(cull, 10) == [(first, 4), (second, 4)]

    def test_species_without_children_dropped_except_top_two(self, manager, make_genome, config):
        big   = populated_species(make_genome, config, [0.75]  , weight=0.0)
        small = populated_species(make_genome, config, [0.1875], weight=1.0)
        tiny  = populated_species(make_genome, config, [0.0625], weight=2.0)
        manager.species = [big, small, tiny]
        cull = manager.remove_members(1.0)
        plan = manager.allocate_offspring(cull, 10)
        # 'small' (no children) survives as one of the top two, 'tiny' does not
        assert plan == [(big, 6), (small, 0)]
        assert manager.species == [big, small]

    def test_protected_elite_is_made_room_for(self, manager, make_genome, config):
        first  = populated_species(make_genome, config, [1.0], weight=0.0)
        second = populated_species(make_genome, config, [0.0], weight=1.0)
        manager.species = [first, second]
        cull = manager.remove_members(1.0)
        plan = manager.allocate_offspring(cull, 10)
        # 9 children + 2 elites exceed 10: the largest allocation gives one up
        assert plan == [(first, 8), (second, 0)]

    def test_overallocation_is_trimmed(self, manager, make_genome, config):
        strong = populated_species(make_genome, config, [ 1.5], weight=0.0)
        weak   = populated_species(make_genome, config, [-0.5], weight=1.0)
        manager.species = [strong, weak]
        cull = manager.remove_members(1.0)
        # floor(1.5 * 10) - 1 = 14 children for 'strong'
        plan = manager.allocate_offspring(cull, 10)
        assert plan == [(strong, 8), (weak, 0)]
        assert sum(1 + n for _, n in plan) == 10

    def test_no_species(self, manager):
        with pytest.raises(InvariantError):
            manager.allocate_offspring(CullResult([], 0.0), 10)


# ============================================================================
# Test Copy
# ============================================================================

class TestCopy:

    def test_copy_is_independent(self, manager, make_genome):
        manager.speciate([make_genome(fitness=0.9, weight=0.0)])
        twin = manager.copy()
        twin.speciate([make_genome(fitness=0.9, weight=0.0), make_genome(fitness=0.9, weight=1.0)])
        assert len(manager.species) == 1
        assert manager.species[0].stagnation == 0
        assert len(twin.species) == 2

    def test_copy_continues_species_numbering(self, manager, make_genome):
        manager.speciate([make_genome(fitness=0.9, weight=0.0)])
        twin = manager.copy()
        twin.speciate([make_genome(fitness=0.9, weight=0.0), make_genome(fitness=0.9, weight=1.0)])
        assert [spec.id for spec in twin.species] == [1, 2]
        assert twin.next_species_id == 3
        assert manager.next_species_id == 2
