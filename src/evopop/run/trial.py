"""
Trial Module

This module defines the abstract base class for trials, with built-in
support for CPU-based parallelization of fitness evaluation using joblib.

A trial represents one independent run of the evolutionary algorithm, evolving
a population through generations until a solution is found or the maximum
number of generations is reached.
"""

import logging
import random
from abc        import ABC, abstractmethod
from joblib     import Parallel, delayed
from statistics import mean

from evopop.errors      import ConfigurationError
from evopop.genotype    import Genome
from evopop.pool        import Population
from evopop.run.config  import Config

logger = logging.getLogger(__name__)

class Trial(ABC):
    """
    Abstract base class for implementing a trial.

    Subclasses must implement:
    - _evaluate_fitness(genome): Evaluate fitness for a single genome
    - _report_progress(): Display progress after each generation
    - _final_report(): Display final results

    Subclasses can override:
    - _reset(): Reset trial-specific state (call super()._reset())
    - _terminate(): Custom termination logic (default: max generations + fitness threshold)

    Public Attributes:
        population: The population being evolved (None before 'run()')
        failed:     Whether the last run ended without reaching the fitness threshold

    Public Methods:
        run(num_jobs): Execute a complete trial

    Parallelization of fitness evaluation:
        num_jobs=1:  Serial evaluation (no parallelization)
        num_jobs>1:  Use specified number of parallel processes
        num_jobs=-1: Use all available CPU cores
    """

    def __init__(self, config: Config, suppress_output: bool = False, seed: int | None = None):
        """
        Initialize the trial.

        Parameters:
            config:          Configuration parameters
            suppress_output: If True, suppress progress and final reports
                             (useful when running many trials)
            seed:            Seed of the source of randomness of each run (None for unseeded)
        """
        self._config            : Config            = config
        self._generation_counter: int               = 0
        self._suppress_output   : bool              = suppress_output
        self._seed              : int | None        = seed
        self.population         : Population | None = None
        self.failed             : bool              = True

    def run(self, num_jobs: int = 1) -> Population:
        """
        Run the trial.

        Resets the trial state and runs the evolutionary
        algorithm until the terminate condition is met.

        Parameters:
            num_jobs: Number of parallel processes for fitness evaluation

        Returns:
            the evolved population
        """
        self._reset()

        rng = random.Random(self._seed) if self._seed is not None else None
        self.population = Population(self._config, rng=rng)

        self._evaluate_fitness_all(num_jobs)
        if not self._suppress_output:
            self._report_progress()

        while not self._terminate():
            self._generation_counter += 1

            self.population.evolve()
            self._evaluate_fitness_all(num_jobs)

            if not self._suppress_output:
                self._report_progress()

        logger.info("Trial finished after %d generations (%s)",
                    self._generation_counter, "failed" if self.failed else "succeeded")
        if not self._suppress_output:
            self._final_report()

        return self.population

    def _reset(self):
        """
        Reset the trial state before starting a new run.

        Subclasses overriding this should call super()._reset() and then
        initialize their problem-specific data.
        """
        self._generation_counter = 0
        self.population          = None
        self.failed              = True

    @abstractmethod
    def _evaluate_fitness(self, genome: Genome) -> float:
        """
        Evaluate and return the fitness of a genome.

        Higher fitness values indicate better performance and a higher
        share of offspring. The fitness must be a number, not NaN, and
        should not be negative.

        Parameters:
            genome: The genome to evaluate

        Returns:
            float: Fitness score for the genome
        """
        pass

    def _evaluate_fitness_all(self, num_jobs: int):
        """
        Evaluate fitness for all members of the population.

        Parameters:
            num_jobs: Number of parallel processes for fitness evaluation
        """
        members = self.population.members

        if num_jobs == 1:
            fitness_all = [self._evaluate_fitness(genome) for genome in members]
        else:
            fitness_all = Parallel(num_jobs)(delayed(self._evaluate_fitness)(g) for g in members)

        for genome, fitness in zip(members, fitness_all):
            genome.fitness = Population._checked_fitness(genome, fitness)

    @abstractmethod
    def _report_progress(self):
        """
        Report trial progress after each generation.
        Suppressed by setting 'self._suppress_output' to 'True'.
        """
        pass

    @abstractmethod
    def _final_report(self):
        """
        Produce final report at the end of the trial.
        Suppressed by setting 'self._suppress_output' to 'True'.
        """
        pass

    def _terminate(self) -> bool:
        """
        Determine whether the trial should terminate.

        This default implementation stops the trial after a maximum number
        of generations and (optionally) also stops it if a given measure of
        population fitness has reached a given threshold.

        Returns:
            bool: True if the trial should stop, False otherwise
        """
        terminate = self._generation_counter >= self._config.max_number_generations

        if self._config.fitness_termination_check:
            member_fitness = [genome.fitness for genome in self.population.members]

            if self._config.fitness_criterion == "max":
                overall_fitness = max(member_fitness)
            elif self._config.fitness_criterion == "mean":
                overall_fitness = mean(member_fitness)
            else:
                raise ConfigurationError(f"Invalid fitness criterion '{self._config.fitness_criterion}'")

            success   = overall_fitness >= self._config.fitness_threshold
            terminate = terminate or success

            if terminate:
                self.failed = not success

        return terminate
