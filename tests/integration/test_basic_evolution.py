"""
Integration tests for basic evolution.

These tests run whole evolutions, end-to-end, through the Population and
Trial interfaces. Every run is seeded, so it is reproducible.
"""

import random
import pytest

from evopop.genotype import Mutation
from evopop.phenotype import NetworkStandard
from evopop.pool import Population
from evopop.run.trial import Trial


# ============================================================================
# Helper Trial Class for XOR
# ============================================================================

class TrialXORTest(Trial):
    """Simplified XOR trial for integration testing."""

    def __init__(self, config, xor_dataset, seed=None):
        super().__init__(config, suppress_output=True, seed=seed)
        self.xor_dataset = xor_dataset
        self.history     = []

    def _evaluate_fitness(self, genome):
        """4 minus the summed squared error (4 for a perfect solution)."""
        network = NetworkStandard(genome)
        fitness = 4.0
        for sample in self.xor_dataset:
            output   = network.forward_pass(sample['input'])
            fitness -= float(output[0] - sample['output'][0]) ** 2
        return fitness

    def _report_progress(self):
        self.history.append(max(g.fitness for g in self.population.members))

    def _final_report(self):
        pass


# ============================================================================
# Test Population Evolution
# ============================================================================

class TestPopulationEvolution:
    """Evolve a population against a dataset with the default fitness."""

    def test_learns_sum(self, evolution_config, sum_dataset):
        population = Population(evolution_config, sum_dataset, rng=random.Random(42))
        population.evaluate()
        initial_best = max(g.fitness for g in population.members)

        for _ in range(evolution_config.max_number_generations):
            population.evolve()
            assert len(population.members) == evolution_config.population_size

        assert population.all_time_best >= initial_best
        assert population.all_time_best > 0.8

    def test_best_genome_reproduces_its_fitness(self, evolution_config, sum_dataset):
        population = Population(evolution_config, sum_dataset, rng=random.Random(7))
        for _ in range(10):
            population.evolve()

        champion = population.best_genome
        assert champion.evaluate(sum_dataset) == pytest.approx(1.0 / population.all_time_best - 1.0)

    def test_structural_growth(self, evolution_config, xor_dataset):
        evolution_config.add_node_rate       = 0.2
        evolution_config.add_connection_rate = 0.4
        population = Population(evolution_config, xor_dataset, rng=random.Random(3))
        for _ in range(15):
            population.evolve()

        assert any(genome.hidden_nodes for genome in population.members)
        for genome in population.members:
            # every evolved network can still be expressed and run
            NetworkStandard(genome).forward_pass([1.0, 0.0])

    def test_gated_evolution(self, evolution_config, xor_dataset):
        evolution_config.mutation = [Mutation.ADD_NODE, Mutation.ADD_CONNECTION, Mutation.MOD_WEIGHT]
        population = Population(evolution_config, xor_dataset, rng=random.Random(5))
        for genome in population.members[::2]:
            genome.mutate(Mutation.ADD_GATE)
        for _ in range(10):
            population.evolve()
        for genome in population.members:
            NetworkStandard(genome).forward_pass([0.0, 1.0])

    def test_checkpoint_resume_matches_uninterrupted_run(self, evolution_config, sum_dataset, tmp_path):
        evolution_config.add_node_rate       = 0.2
        evolution_config.add_connection_rate = 0.4
        rng        = random.Random(9)
        population = Population(evolution_config, sum_dataset, rng=rng)
        for _ in range(5):
            population.evolve()
        path = tmp_path / "checkpoint.json"
        population.save(str(path))

        resumed_rng = random.Random()
        resumed_rng.setstate(rng.getstate())
        resumed = Population.load(str(path), evolution_config, sum_dataset, rng=resumed_rng)
        for _ in range(5):
            population.evolve()
            resumed.evolve()

        assert [g.to_dict() for g in resumed.members] == [g.to_dict() for g in population.members]
        assert resumed.all_time_best == population.all_time_best
        assert resumed.generation == population.generation == 10


# ============================================================================
# Test Trial Evolution
# ============================================================================

class TestTrialXOR:
    """Run XOR trials end-to-end."""

    def test_xor_trial_progress(self, evolution_config, xor_dataset):
        evolution_config.activation_initial = 'logistic'
        trial = TrialXORTest(evolution_config, xor_dataset, seed=42)
        population = trial.run()

        assert population.generation == evolution_config.max_number_generations
        assert len(trial.history) == evolution_config.max_number_generations + 1
        assert population.all_time_best >= trial.history[0]
        # logistic outputs in (0, 1): the squared error of each sample is below 1
        assert all(0.0 < best <= 4.0 for best in trial.history)

    def test_xor_trial_with_threshold(self, evolution_config, xor_dataset):
        evolution_config.activation_initial        = 'logistic'
        evolution_config.fitness_termination_check = True
        evolution_config.fitness_threshold         = 2.9
        trial = TrialXORTest(evolution_config, xor_dataset, seed=1)
        population = trial.run()

        # a constant 0.5 output scores 3: the threshold is met quickly
        assert trial.failed is False
        assert max(g.fitness for g in population.members) >= 2.9
        assert population.generation < evolution_config.max_number_generations

    def test_seeded_trials_are_reproducible(self, evolution_config, xor_dataset):
        evolution_config.max_number_generations = 8
        history1 = TrialXORTest(evolution_config, xor_dataset, seed=13)
        history2 = TrialXORTest(evolution_config, xor_dataset, seed=13)
        history1.run()
        history2.run()
        assert history1.history == history2.history
