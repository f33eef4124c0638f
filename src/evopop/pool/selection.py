"""
Selection Module

This module implements the schemes used to select parents from the
breeding pool of a species.

Every scheme takes the pool sorted by descending fitness, a source of
randomness and the configuration, and returns one member of the pool.

Functions:
    power_selection:                 Bias the choice towards the head of the pool
    fitness_proportionate_selection: Roulette wheel selection
    tournament_selection:            Best-of-k tournament with geometric acceptance
    select:                          Dispatch to the scheme named in the configuration
"""

import random
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from evopop.genotype import Genome
    from evopop.run.config import Config

def power_selection(pool: list['Genome'], rng: random.Random, config: 'Config') -> 'Genome':
    """
    Pick the member at index floor(r ** power * len(pool)), r uniform in [0, 1).
    Higher powers concentrate the choice on the fittest members.
    """
    index = int(rng.random() ** config.selection_power * len(pool))
    return pool[index]

def fitness_proportionate_selection(pool: list['Genome'], rng: random.Random, config: 'Config') -> 'Genome':
    """
    Pick a member with probability proportional to its fitness.
    Fitness values are shifted to be non-negative; a pool where every
    member has the same fitness is sampled uniformly.
    """
    lowest  = min(genome.fitness for genome in pool)
    offset  = -lowest if lowest < 0 else 0.0
    weights = [genome.fitness + offset for genome in pool]
    total   = sum(weights)
    if total <= 0:
        return rng.choice(pool)

    threshold  = rng.random() * total
    cumulative = 0.0
    for genome, weight in zip(pool, weights):
        cumulative += weight
        if threshold < cumulative:
            return genome
    return pool[-1]

def tournament_selection(pool: list['Genome'], rng: random.Random, config: 'Config') -> 'Genome':
    """
    Draw 'tournament_size' contenders (fewer if the pool is smaller) and walk
    them from best to worst, accepting each with 'tournament_probability'.
    The i-th best is therefore chosen with probability p * (1 - p) ** i,
    and the worst contender takes whatever probability is left.
    """
    size        = min(config.tournament_size, len(pool))
    contenders  = sorted(rng.sample(pool, size), key=lambda g: g.fitness, reverse=True)
    probability = config.tournament_probability
    for contender in contenders[:-1]:
        if rng.random() < probability:
            return contender
    return contenders[-1]

selection_schemes = {
    "power"                : power_selection,
    "fitness_proportionate": fitness_proportionate_selection,
    "tournament"           : tournament_selection
    }

def select(pool: list['Genome'], rng: random.Random, config: 'Config') -> 'Genome':
    """
    Select a parent from 'pool' with the scheme named by 'config.selection'.

    Parameters:
        pool:   candidate parents, sorted by descending fitness (must not be empty)
        rng:    source of randomness
        config: stores configuration parameters

    Returns:
        the selected parent
    """
    return selection_schemes[config.selection](pool, rng, config)
