"""
Population Module

This module implements the Population class, the evolutionary population manager.
The population owns the genomes of the current generation and the species they
are divided into, and drives the generational loop:

    evaluate -> sort -> detect stagnation -> speciate -> cull -> reallocate offspring -> mutate

Classes:
    Population: Generational coordinator managing genomes and species

Functions:
    default_fitness: Fitness of a genome over a dataset, 1 / (1 + error)
"""

import json
import logging
import math
import numbers
import random
from joblib    import Parallel, delayed
from typing    import Callable, TYPE_CHECKING

from evopop.cost                 import costs
from evopop.errors               import ConfigurationError, EvaluationError, IncompatibleOperatorError, InvariantError
from evopop.genotype             import ConnectionGene, Genome, InnovationTracker, Mutation
from evopop.pool.species         import Species
from evopop.pool.species_manager import CullResult, SpeciesManager
if TYPE_CHECKING:
    from evopop.run.config import Config

logger = logging.getLogger(__name__)

def default_fitness(genome: Genome, dataset: list[dict], cost: Callable) -> float:
    """
    Map the mean error of 'genome' over 'dataset' to a fitness in (0, 1]:
    higher is better, and a perfect network scores 1.
    """
    return 1.0 / (1.0 + genome.evaluate(dataset, cost))

class Population:
    """
    A population of evolving genomes.

    After every call to 'evolve()' the population holds exactly 'size' genomes,
    the offspring of the previous generation, not yet evaluated.

    Fitness is either assigned by the caller to every member before calling
    'evolve()', or computed by 'evolve()' itself when the first member has no
    fitness, running the fitness function against the dataset. The fitness
    function is called as fitness_fn(genome, dataset, cost) and returns the
    genome's fitness; when 'fitness_population' is set it is called once as
    fitness_fn(members, dataset, cost) and must set every member's fitness.

    Public Attributes:
        members:       The genomes of the current generation
        generation:    Number of completed generations
        stagnation:    Consecutive generations without improving 'all_time_best'
        all_time_best: Best fitness ever observed (-inf before the first generation)
        best_genome:   Copy of the genome that achieved 'all_time_best'
        size:          Number of genomes in every generation
        dataset:       Samples used to compute fitness ({"input": [...], "output": [...]})
        fitness_fn:    Function computing the fitness of a genome

    Public Properties:
        species:       The list of species

    Public Methods:
        evaluate(num_jobs):         Compute the fitness of every member
        evolve(num_jobs):           Advance the population by one generation
        replace_members(cull):      Breed the next generation out of the culled species
        mutate(genome):             Apply the mutation policy to a genome
        to_dict() / from_dict():    Convert to/from a dictionary (checkpoint)
        save(path) / load(path):    Write/read a JSON checkpoint
    """

    def __init__(self,
                 config    : 'Config',
                 dataset   : list[dict] | None     = None,
                 fitness_fn: Callable | None       = None,
                 rng       : random.Random | None  = None):
        """
        Create a population of 'population_size' networks, with inputs and outputs
        connected as required by 'initial_cxn_policy'.

        Parameters:
            config:     Stores configuration parameters
            dataset:    Samples used to compute fitness
            fitness_fn: Function computing the fitness of a genome (default: 'default_fitness')
            rng:        Source of randomness for every random draw of the evolution;
                        a seeded 'random.Random' reproduces a run exactly
        """
        self._init_state(config, dataset, fitness_fn, rng)

        self.members = [Genome(config, self._tracker, rng=rng) for _ in range(self.size)]

        if config.initial_cxn_policy == "none":
            pass  # already unconnected
        elif config.initial_cxn_policy == "full":
            self._connect_full()
        else:
            raise ConfigurationError(f"Invalid initial connection policy '{config.initial_cxn_policy}'")

    def _init_state(self, config, dataset, fitness_fn, rng) -> None:
        self._config          : 'Config'             = config
        self._rng             : random.Random | None = rng
        self._tracker         : InnovationTracker    = InnovationTracker(config.num_inputs, config.num_outputs)
        self._species_manager : SpeciesManager       = SpeciesManager(config, rng)

        self.dataset      : list[dict] | None = dataset
        self.fitness_fn   : Callable          = fitness_fn if fitness_fn is not None else default_fitness
        self.size         : int               = config.population_size
        self.members      : list[Genome]      = []
        self.generation   : int               = 0
        self.stagnation   : int               = 0
        self.all_time_best: float             = -math.inf
        self.best_genome  : Genome | None     = None

    @property
    def _random(self):
        return self._rng if self._rng is not None else random

    @property
    def species(self) -> list[Species]:
        return self._species_manager.species

    def _connect_full(self) -> None:
        """
        For each network, connect all inputs nodes to all output nodes.
        """
        config = self._config
        for genome in self.members:
            for input_node in genome.input_nodes:
                for output_node in genome.output_nodes:
                    innovation = self._tracker.get_innovation_number(input_node.id, output_node.id)
                    weight     = self._random.gauss(config.weight_init_mean, config.weight_init_stdev)
                    weight     = min(max(weight, config.min_weight), config.max_weight)
                    connection = ConnectionGene(input_node.id, output_node.id, weight, innovation, config)
                    genome.conn_genes[innovation] = connection

    # ===========================================================
    # Fitness
    # ===========================================================

    @staticmethod
    def _checked_fitness(genome: Genome, fitness) -> float:
        if isinstance(fitness, bool) or not isinstance(fitness, numbers.Real):
            raise EvaluationError(f"Fitness of genome {genome.id} is not a number: {fitness!r}")
        if not math.isfinite(fitness):
            raise EvaluationError(f"Fitness of genome {genome.id} is not finite: {fitness!r}")
        return float(fitness)

    def evaluate(self, num_jobs: int = 1) -> None:
        """
        Compute the fitness of every member against the dataset.

        Parameters:
            num_jobs: Number of parallel processes for fitness evaluation
                      1 = serial (no parallelization)
                     -1 = use all available CPU cores
                     >1 = use specified number of processes

        Raises:
            ConfigurationError: if the population has no dataset, or 'fitness_population'
                                is set but no population fitness function was given
            EvaluationError:    if a fitness is NaN, infinite or not a number
        """
        if self.dataset is None:
            raise ConfigurationError("Fitness must be computed, but the population has no dataset")
        cost = costs[self._config.cost]

        # The fitness function scores the whole population in one call
        if self._config.fitness_population:
            if self.fitness_fn is default_fitness:
                raise ConfigurationError("'fitness_population' requires a fitness function scoring "
                                         "the whole population")
            self.fitness_fn(self.members, self.dataset, cost)
            for genome in self.members:
                genome.fitness = self._checked_fitness(genome, genome.fitness)
            return

        if num_jobs == 1:
            fitness_all = [self.fitness_fn(genome, self.dataset, cost) for genome in self.members]
        else:
            fitness_all = Parallel(num_jobs)(delayed(self.fitness_fn)(genome, self.dataset, cost)
                                             for genome in self.members)
        for genome, fitness in zip(self.members, fitness_all):
            genome.fitness = self._checked_fitness(genome, fitness)

    # ===========================================================
    # Evolution
    # ===========================================================

    def evolve(self, num_jobs: int = 1) -> list[Genome]:
        """
        Advance the population by one generation.

        Step 1: if the first member has no fitness, evaluate every member;
                otherwise check the fitness the caller assigned
        Step 2: sort members by descending fitness (stable)
        Step 3: update the all-time best, or count one more generation of stagnation
        Step 4: divide the members into species
        Step 5: if the population stagnated for more than 'stagnant_limit'
                generations, only the top two species reproduce
        Step 6: cull, then breed the next generation

        The new generation is worked out on local copies, and becomes the state
        of the population only once it is complete.

        Parameters:
            num_jobs: Number of parallel processes for fitness evaluation (see 'evaluate()')

        Returns:
            the new members ('size' genomes, not yet evaluated)

        Raises:
            ConfigurationError: if fitness must be computed but cannot be (see 'evaluate()')
            EvaluationError:    if a fitness is NaN, infinite or not a number
            InvariantError:     if the top two species must reproduce but fewer exist,
                                or the next generation does not have 'size' members
        """
        if self.members[0].fitness is None:
            self.evaluate(num_jobs)
        else:
            for genome in self.members:
                genome.fitness = self._checked_fitness(genome, genome.fitness)

        members = sorted(self.members, key=lambda genome: genome.fitness, reverse=True)
        best    = members[0]

        all_time_best = self.all_time_best
        best_genome   = self.best_genome
        if best.fitness > self.all_time_best:
            all_time_best       = best.fitness
            best_genome         = best.clone()
            best_genome.fitness = best.fitness
            stagnation          = 0
        else:
            stagnation = self.stagnation + 1

        manager = self._species_manager.copy()
        manager.speciate(members)

        if stagnation > self._config.stagnant_limit:
            manager.keep_top_species(2)

        cull      = manager.remove_members(self._config.survival_threshold)
        offspring = self.replace_members(cull, manager)

        self.members          = offspring
        self._species_manager = manager
        self.all_time_best    = all_time_best
        self.best_genome      = best_genome
        self.stagnation       = stagnation
        self.generation      += 1

        logger.info("Generation %d: best fitness %.6f (all-time %.6f), %d species, stagnation %d",
                    self.generation, best.fitness, self.all_time_best, len(self.species), self.stagnation)
        return self.members

    def replace_members(self, cull: CullResult, manager: SpeciesManager | None = None) -> list[Genome]:
        """
        Breed the next generation out of the species that survived the cull.

        Phase 1: decide the number of children of each species (see 'SpeciesManager.allocate_offspring()')
        Phase 2: each reproducing species contributes an unmutated clone of its best
                 genome, then its children, each passed through the mutation policy
        Phase 3: while the generation is short of 'size' genomes (rounding),
                 add unmutated children of the best species

        Parameters:
            cull:    the outcome of 'SpeciesManager.remove_members()'
            manager: the species manager holding the culled species (default: the population's)

        Returns:
            the genomes of the next generation

        Raises:
            InvariantError: if the next generation does not have exactly 'size' genomes
        """
        if manager is None:
            manager = self._species_manager

        allocations = manager.allocate_offspring(cull, self.size)

        offspring = []
        for spec, num_children in allocations:
            offspring.append(spec.best_genome.clone())
            for _ in range(num_children):
                offspring.append(self.mutate(spec.get_child()))

        best_species = manager.rank_species()[0]
        while len(offspring) < self.size:
            offspring.append(best_species.get_child())

        if len(offspring) != self.size:
            raise InvariantError(f"Next generation has {len(offspring)} members instead of {self.size}")

        return offspring

    def mutate(self, genome: Genome) -> Genome:
        """
        Apply the mutation policy to a genome.

        A single random number r is drawn, uniform in [0, 1):
          r < add_node_rate        -> ADD_NODE
          r < add_connection_rate  -> ADD_CONNECTION (may fire together with ADD_NODE)
          r < weight_mutation_rate -> MOD_WEIGHT: every weight is either perturbed
                                      ('weight_perturb_prob') or replaced
        Operators missing from 'config.mutation' are skipped, and so are
        operators that would exceed a structural cap.

        Parameters:
            genome: the genome to mutate, modified in place

        Returns:
            the mutated genome
        """
        r = self._random.random()
        if r < self._config.add_node_rate:
            self._apply(genome, Mutation.ADD_NODE)
        if r < self._config.add_connection_rate:
            self._apply(genome, Mutation.ADD_CONNECTION)
        if r < self._config.weight_mutation_rate:
            self._apply(genome, Mutation.MOD_WEIGHT)
        return genome

    def _apply(self, genome: Genome, operator: Mutation) -> None:
        if operator not in self._config.mutation:
            logger.debug("Mutation %s skipped: not allowed", operator.value)
            return
        try:
            genome.mutate(operator)
        except IncompatibleOperatorError as e:
            logger.debug("Mutation %s skipped: %s", operator.value, e)

    # ===========================================================
    # Checkpoints
    # ===========================================================

    def to_dict(self) -> dict:
        """
        Convert the population to a dictionary representation.

        Returns:
            Dictionary with the following structure:
            {
                "generation"     : 12,
                "stagnation"     : 3,
                "all_time_best"  : 0.93,
                "best_genome"    : {...},          # see 'Genome.to_dict()', or None
                "members"        : [{...}, ...],   # see 'Genome.to_dict()'
                "species"        : [{...}, ...],   # see 'Species.to_dict()'
                "next_species_id": 9,
                "tracker"        : {...}           # see 'InnovationTracker.to_dict()'
            }
        """
        return {
            "generation"     : self.generation,
            "stagnation"     : self.stagnation,
            "all_time_best"  : self.all_time_best,
            "best_genome"    : self.best_genome.to_dict() if self.best_genome is not None else None,
            "members"        : [genome.to_dict() for genome in self.members],
            "species"        : [spec.to_dict() for spec in self.species],
            "next_species_id": self._species_manager.next_species_id,
            "tracker"        : self._tracker.to_dict()
        }

    @classmethod
    def from_dict(cls,
                  population_dict: dict,
                  config         : 'Config',
                  dataset        : list[dict] | None    = None,
                  fitness_fn     : Callable | None      = None,
                  rng            : random.Random | None = None) -> 'Population':
        """
        Restore a population from its dictionary representation.

        The innovation tracker is restored before any genome, so connections and
        splits seen before the checkpoint keep their numbers. Species members and
        best genomes are matched to the restored members by genome ID.

        Parameters:
            population_dict: the output of 'to_dict()'
            config:          Stores configuration parameters
            dataset:         Samples used to compute fitness
            fitness_fn:      Function computing the fitness of a genome
            rng:             Source of randomness

        Returns:
            the restored population
        """
        population = cls.__new__(cls)
        population._init_state(config, dataset, fitness_fn, rng)
        if population_dict.get("tracker") is not None:
            population._tracker = InnovationTracker.from_dict(population_dict["tracker"],
                                                              config.num_inputs, config.num_outputs)
        tracker = population._tracker

        population.members    = [Genome.from_dict(d, config, tracker, rng) for d in population_dict["members"]]
        population.size       = len(population.members)
        population.generation = population_dict["generation"]
        population.stagnation = population_dict["stagnation"]
        population.all_time_best = population_dict["all_time_best"]
        if population_dict.get("best_genome") is not None:
            population.best_genome = Genome.from_dict(population_dict["best_genome"], config, tracker, rng)

        genomes = {genome.id: genome for genome in population.members}
        manager = population._species_manager
        manager.species = [Species.from_dict(d, genomes, config, tracker, rng)
                           for d in population_dict.get("species", [])]
        manager.next_species_id = population_dict.get("next_species_id",
                                                      max((spec.id for spec in manager.species), default=0) + 1)

        return population

    def save(self, path: str) -> None:
        """
        Write the population to a JSON checkpoint file.
        """
        with open(path, "w") as f:
            json.dump(self.to_dict(), f)
        logger.info("Population saved to %s (generation %d)", path, self.generation)

    @classmethod
    def load(cls,
             path      : str,
             config    : 'Config',
             dataset   : list[dict] | None    = None,
             fitness_fn: Callable | None      = None,
             rng       : random.Random | None = None) -> 'Population':
        """
        Read a population from a JSON checkpoint file written by 'save()'.
        """
        with open(path) as f:
            population = cls.from_dict(json.load(f), config, dataset, fitness_fn, rng)
        logger.info("Population loaded from %s (generation %d)", path, population.generation)
        return population

    def __str__(self):
        return '\n'.join(str(genome) for genome in self.members)
