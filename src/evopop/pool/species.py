"""
Species Module

This module implements the Species class. A species is a cluster of
structurally compatible genomes that compete primarily within their own niche.

Classes:
    Species: A single species with its members, records and breeding logic
"""

import math
import random
from typing import TYPE_CHECKING

from evopop.genotype       import Genome
from evopop.pool.selection import select
if TYPE_CHECKING:
    from evopop.genotype   import InnovationTracker
    from evopop.run.config import Config

class Species:
    """
    A cluster of structurally compatible genomes.

    The population is divided into species by genetic similarity, so that new
    structures compete with similar genomes before facing the whole population.
    A genome joins the first species whose representative it is compatible with.
    The representative is the genome that founded the species and never changes,
    so the species' position in genome space does not drift.

    The species' membership is rebuilt from scratch every generation, while its
    records (all-time best fitness, stagnation) persist across generations.

    Public Attributes:
        id:              Species identifier
        representative:  Genome used for compatibility tests
        members:         The genomes that are part of this species in the current generation
        best_genome:     Fittest member of the current generation
        all_time_best:   Best fitness ever achieved by a member of this species
        average_fitness: Mean shared fitness of the surviving members (None until culled)
        stagnation:      Consecutive generations without improving 'all_time_best'

    Public Methods:
        is_compatible(representative, candidate, threshold): Compatibility predicate (static)
        sift(members, threshold):                             Keep the fittest fraction (static)
        get_child():                                          Produce one unmutated offspring
        add_member(genome):                                   Add a genome to the species
        set_best(genome):                                     Record the generation's best member
        set_goat(fitness):                                    Record a new all-time best fitness
        increment_stagnation():                               One more generation without improvement
        reset_stagnation():                                   Forget past stagnation
    """

    def __init__(self,
                 genome    : 'Genome',
                 config    : 'Config',
                 species_id: int                  = 0,
                 rng       : random.Random | None = None):
        """
        Found a new species.

        Parameters:
            genome:     the founder, which becomes representative, best and sole member
            config:     stores configuration parameters
            species_id: species identifier
            rng:        source of randomness used to breed (defaults to the 'random' module)
        """
        self._config: 'Config'             = config
        self._rng   : random.Random | None = rng

        self.id             : int              = species_id
        self.representative : 'Genome'         = genome
        self.members        : list['Genome']   = [genome]
        self.best_genome    : 'Genome'         = genome
        self.all_time_best  : float            = genome.fitness
        self.average_fitness: float | None     = None
        self.stagnation     : int              = 0

    @staticmethod
    def is_compatible(representative: 'Genome', candidate: 'Genome', threshold: float) -> bool:
        """
        Whether 'candidate' belongs with the species represented by 'representative':
        their genetic distance must be below 'threshold'.
        """
        return representative.distance(candidate) < threshold

    @staticmethod
    def sift(members: list['Genome'], threshold: float) -> list['Genome']:
        """
        Keep the fittest ceil(len(members) * threshold) members.

        Sorting is stable, so members with the same fitness keep their
        relative order. Any non-empty list keeps at least one member.

        Parameters:
            members:   the genomes to sift
            threshold: fraction of members to keep, in (0, 1]

        Returns:
            the surviving members, by descending fitness
        """
        ranked = sorted(members, key=lambda genome: genome.fitness, reverse=True)
        return ranked[:math.ceil(len(ranked) * threshold)]

    def get_child(self) -> 'Genome':
        """
        Produce one offspring from the members of the species.

        Two parents are picked with the configured selection scheme. Distinct
        parents are crossed over (the fitter parent contributes the disjoint and
        excess genes, ties going to the first pick); when the same genome is
        picked twice the child is its clone. The child is not mutated.

        Returns:
            a new genome with no fitness
        """
        rng  = self._rng if self._rng is not None else random
        pool = sorted(self.members, key=lambda genome: genome.fitness, reverse=True)

        parent1 = select(pool, rng, self._config)
        parent2 = select(pool, rng, self._config)
        if parent1 is parent2:
            return parent1.clone()

        fitter = parent1 if parent1.fitness >= parent2.fitness else parent2
        return parent1.crossover(parent2, fitter)

    def add_member(self, genome: 'Genome') -> None:
        self.members.append(genome)

    def set_best(self, genome: 'Genome') -> None:
        self.best_genome = genome

    def set_goat(self, fitness: float) -> None:
        self.all_time_best = fitness

    def increment_stagnation(self) -> None:
        self.stagnation += 1

    def reset_stagnation(self) -> None:
        self.stagnation = 0

    def copy(self) -> 'Species':
        """
        A copy of the species whose membership and records can change
        without affecting this one. Genomes are shared, not copied.
        """
        twin = Species.__new__(Species)
        twin.__dict__.update(self.__dict__)
        twin.members = list(self.members)
        return twin

    def to_dict(self) -> dict:
        """
        Convert the species to a dictionary representation.
        Members and best genome are referenced by genome ID; the representative,
        which is usually no longer part of the population, is stored in full.
        """
        return {
            "id"             : self.id,
            "representative" : self.representative.to_dict(),
            "best_genome"    : self.best_genome.id,
            "members"        : [genome.id for genome in self.members],
            "stagnation"     : self.stagnation,
            "all_time_best"  : self.all_time_best,
            "average_fitness": self.average_fitness
        }

    @classmethod
    def from_dict(cls,
                  species_dict: dict,
                  genomes     : dict[int, 'Genome'],
                  config      : 'Config',
                  tracker     : 'InnovationTracker',
                  rng         : random.Random | None = None) -> 'Species':
        """
        Restore a species from its dictionary representation.

        Parameters:
            species_dict: the output of 'to_dict()'
            genomes:      genome ID => genome, for the genomes already restored;
                          member IDs missing from it are dropped
            config:       stores configuration parameters
            tracker:      innovation tracker of the population
            rng:          source of randomness used to breed

        Returns:
            the restored species
        """
        rep_dict = species_dict["representative"]
        if rep_dict.get("id") in genomes:
            representative = genomes[rep_dict["id"]]
        else:
            representative = Genome.from_dict(rep_dict, config, tracker, rng)

        species = cls(representative, config, species_dict.get("id", 0), rng)
        species.members         = [genomes[gid] for gid in species_dict.get("members", []) if gid in genomes]
        species.best_genome     = genomes.get(species_dict.get("best_genome"), representative)
        species.stagnation      = species_dict["stagnation"]
        species.all_time_best   = species_dict["all_time_best"]
        species.average_fitness = species_dict.get("average_fitness")
        return species

    def __repr__(self):
        return (f"Species(id={self.id}, members={len(self.members)}, stagnation={self.stagnation}, "
                f"all_time_best={self.all_time_best}, average_fitness={self.average_fitness})")
