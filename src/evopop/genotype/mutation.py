"""
Mutation Operators Module

This module enumerates the mutation operators a genome understands, together
with the operator groups accepted by the configuration.

Classes:
    Mutation: Enumeration of the mutation operators

Constants:
    FFW:           Every operator valid for a feed-forward network
    NEAT_STANDARD: The operators used by the standard NEAT mutation policy
"""

from enum import Enum

class Mutation(Enum):
    """
    A mutation operator that can be applied to a genome via 'Genome.mutate()'.
    """
    ADD_NODE       = "add_node"
    SUB_NODE       = "sub_node"
    ADD_CONNECTION = "add_connection"
    SUB_CONNECTION = "sub_connection"
    MOD_WEIGHT     = "mod_weight"
    MOD_BIAS       = "mod_bias"
    MOD_ACTIVATION = "mod_activation"
    ADD_GATE       = "add_gate"
    SUB_GATE       = "sub_gate"

FFW = tuple(Mutation)

NEAT_STANDARD = (Mutation.ADD_NODE,
                 Mutation.ADD_CONNECTION,
                 Mutation.MOD_WEIGHT)

# Names accepted by the configuration for whole groups of operators
mutation_groups = {
    "all"          : FFW,
    "ffw"          : FFW,
    "neat_standard": NEAT_STANDARD
    }
