"""
Species Manager Module

This module implements the SpeciesManager class, which keeps the list of species
of a population across generations: it assigns genomes to species, culls species
and members, and decides how many offspring each species contributes.

Speciation:
Structural innovations usually lower fitness at first, and would be quickly
eliminated if every genome competed with the whole population. Organizing the
population into species of genetically similar genomes gives new structures time
to optimize before facing global competition.

Key Concepts:
- Representative: the founder of a species, used to test compatibility
- Compatibility Threshold: maximum genetic distance for same-species membership
- Explicit Fitness Sharing: each genome's fitness is divided by the size of its species
- Stagnation: species removed if they fail to improve over many generations

Classes:
    CullResult:     The species surviving a cull, with their summed average fitness
    SpeciesManager: Manages all species, handles speciation, culling and offspring allocation
"""

import logging
import math
import random
from dataclasses import dataclass
from typing      import TYPE_CHECKING

from evopop.errors       import InvariantError
from evopop.pool.species import Species
if TYPE_CHECKING:
    from evopop.genotype   import Genome
    from evopop.run.config import Config

logger = logging.getLogger(__name__)

@dataclass
class CullResult:
    """
    The outcome of 'SpeciesManager.remove_members()'.

    Attributes:
        species:               the surviving species, in species-list order
        total_average_fitness: sum of the surviving species' average (shared) fitness
    """
    species              : list[Species]
    total_average_fitness: float

    @property
    def average_species_fitness(self) -> float:
        """Mean of the surviving species' average fitness (0 when no species survived)."""
        if not self.species:
            return 0.0
        return self.total_average_fitness / len(self.species)

class SpeciesManager:
    """
    Manages the collection of species across generations.

    Species are kept in a list whose order is preserved across generations:
    new species are appended, and a genome joins the first species it is
    compatible with.

    Public Attributes:
        species:         The list of Species, in creation order
        next_species_id: ID given to the next species founded

    Public Methods:
        speciate(members):                  Assign genomes to species
        rank_species(species):              Species ordered by the fitness of their best genome
        keep_top_species(number):           Remove all but the best species
        remove_members(threshold):          Cull stagnant species and weak members
        allocate_offspring(cull, size):     Number of children of each reproducing species
        copy():                             Independent copy of the species list
    """

    def __init__(self, config: 'Config', rng: random.Random | None = None):
        """
        Parameters:
            config: Stores configuration parameters
            rng:    Source of randomness handed to new species
        """
        self.species        : list[Species] = []
        self.next_species_id: int           = 1   # ID of the next species founded
        self._config                        = config
        self._rng                           = rng

    def copy(self) -> 'SpeciesManager':
        """
        A manager holding copies of the species, so that a generation can be worked
        out without touching the current one. The copy numbers new species from
        where this manager stands.
        """
        twin = SpeciesManager.__new__(SpeciesManager)
        twin.next_species_id = self.next_species_id
        twin._config         = self._config
        twin._rng            = self._rng
        twin.species         = [spec.copy() for spec in self.species]
        return twin

    def speciate(self, members: list['Genome']) -> None:
        """
        Assign each genome to a species.

        Every species is emptied, then the genomes, expected by descending fitness,
        are assigned in turn to the FIRST species whose representative they are
        compatible with. A genome compatible with no species founds a new one,
        appended to the list.

        The first genome joining an existing species in a generation is its best:
        it is recorded as such, and the species' stagnation is reset if it improves
        on the species' all-time best fitness, incremented otherwise.

        Species receiving no genome are left empty (and are removed by the next cull).

        Parameters:
            members: the genomes to assign, sorted by descending fitness
        """
        for spec in self.species:
            spec.members = []

        threshold = self._config.compatibility_threshold
        for genome in members:
            for spec in self.species:
                if Species.is_compatible(spec.representative, genome, threshold):
                    if not spec.members:
                        spec.set_best(genome)
                        if genome.fitness > spec.all_time_best:
                            spec.set_goat(genome.fitness)
                            spec.reset_stagnation()
                        else:
                            spec.increment_stagnation()
                    spec.add_member(genome)
                    break
            else:
                spec = Species(genome, self._config, self.next_species_id, self._rng)
                self.next_species_id += 1
                self.species.append(spec)
                logger.debug("Genome %d founded species %d", genome.id, spec.id)

    def rank_species(self, species: list[Species] | None = None) -> list[Species]:
        """
        Order species by the fitness of their current best genome, best first.
        Ties keep the species-list order. Species without members are left out.

        Parameters:
            species: the species to rank (defaults to all species)
        """
        if species is None:
            species = self.species
        populated = [spec for spec in species if spec.members]
        return sorted(populated, key=lambda spec: spec.best_genome.fitness, reverse=True)

    def keep_top_species(self, number: int = 2) -> None:
        """
        Remove every species except the 'number' best ones.

        Raises:
            InvariantError: if fewer than 'number' species have members
        """
        ranked = self.rank_species()
        if len(ranked) < number:
            raise InvariantError(f"Only the top {number} species may reproduce, "
                                 f"but the population has {len(ranked)}")

        top = ranked[:number]
        for spec in self.species:
            if not any(spec is keep for keep in top):
                logger.debug("Species %d removed: not among the top %d species", spec.id, number)
        self.species = [spec for spec in self.species if any(spec is keep for keep in top)]

    def remove_members(self, threshold: float) -> CullResult:
        """
        Cull the species.

        Species that have stagnated for more than 'species_stagnant_limit' generations
        are removed together with their members. If that would remove every species,
        the best one is kept and its stagnation reset, so the population never dies out.
        Each remaining species keeps its fittest members (see 'Species.sift()'), whose
        shared fitness is computed from scratch:
            shared_fitness  = fitness / number of survivors
            average_fitness = sum(shared_fitness) / number of survivors
        Species left without members are removed.

        Parameters:
            threshold: fraction of each species surviving, in (0, 1]

        Returns:
            the surviving species and their summed average fitness
        """
        limit     = self._config.species_stagnant_limit
        populated = self.rank_species()
        if populated and all(spec.stagnation > limit for spec in populated):
            keeper = populated[0]
            keeper.reset_stagnation()
            logger.debug("Every species is stagnant; species %d kept", keeper.id)

        survivors     : list[Species] = []
        total_fitness : float         = 0.0
        for spec in self.species:
            if spec.stagnation > limit:
                logger.debug("Species %d removed: stagnant for %d generations", spec.id, spec.stagnation)
                continue

            spec.members = Species.sift(spec.members, threshold)
            if not spec.members:
                logger.debug("Species %d removed: no members", spec.id)
                continue

            member_count  = len(spec.members)
            species_total = 0.0
            for genome in spec.members:
                genome.shared_fitness = genome.fitness / member_count
                species_total        += genome.shared_fitness

            spec.average_fitness = species_total / member_count
            total_fitness       += spec.average_fitness
            survivors.append(spec)

        self.species = survivors
        return CullResult(list(survivors), total_fitness)

    def allocate_offspring(self, cull: CullResult, size: int) -> list[tuple[Species, int]]:
        """
        Decide how many children each surviving species contributes to the next generation.

        Each species gets floor(average_fitness / total_average_fitness * size) - 1 children,
        the -1 reserving the slot of its elite (an unmutated clone of its best genome).
        When the total average fitness is not positive, every species gets the same
        floor(size / number of species) - 1 children.

        Species allotted no children are removed, except the top two species, which
        always contribute at least their elite. If the plan exceeds 'size', children are
        withdrawn from the largest allocation, then elites from the lowest ranked species.

        Parameters:
            cull: the outcome of 'remove_members()'
            size: the number of genomes in the next generation

        Returns:
            (species, number of children) for every reproducing species, in species-list order;
            each species also contributes one elite, not counted in the number of children

        Raises:
            InvariantError: if no species survived the cull
        """
        if not cull.species:
            raise InvariantError("No species survived to reproduce")

        total     = cull.total_average_fitness
        protected = self.rank_species(cull.species)[:2]

        plan = []   # [species, number of children]
        for spec in cull.species:
            if total > 0:
                children = math.floor(spec.average_fitness / total * size) - 1
            else:
                children = math.floor(size / len(cull.species)) - 1

            if children <= 0 and not any(spec is top for top in protected):
                logger.debug("Species %d removed: no offspring allotted", spec.id)
                continue
            plan.append([spec, max(children, 0)])

        # Trim the plan down to 'size' genomes (children plus one elite per species)
        planned = sum(1 + children for _, children in plan)
        ranking = self.rank_species([spec for spec, _ in plan])
        while planned > size:
            largest = max(plan, key=lambda entry: entry[1])
            if largest[1] > 0:
                largest[1] -= 1
            else:
                weakest = ranking.pop()
                plan    = [entry for entry in plan if entry[0] is not weakest]
                logger.debug("Species %d removed: no room for its elite", weakest.id)
            planned -= 1

        self.species = [spec for spec, _ in plan]
        return [(spec, children) for spec, children in plan]
