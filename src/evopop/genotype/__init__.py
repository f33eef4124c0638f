"""
Genotype Package

This package implements the genetic encoding of the evolved networks.

The genotype consists of two types of genes:
- Node genes:       Encode individual neurons with their parameters (bias, activation)
- Connection genes: Encode weighted, optionally gated, connections with innovation numbers

Modules:
    node_gene:          NodeType enumeration and NodeGene class
    connection_gene:    ConnectionGene class
    genome:             Genome class
    innovation_tracker: InnovationTracker class
    mutation:           Mutation enumeration and operator groups

Exported Classes:
    NodeType:          Enumeration for node types (INPUT, HIDDEN, OUTPUT)
    NodeGene:          Gene encoding a single network node
    ConnectionGene:    Gene encoding a weighted connection between nodes
    Genome:            Complete genome representing a neural network
    InnovationTracker: Tracker for innovation numbers, node IDs and genome IDs
    Mutation:          Enumeration of mutation operators
"""

from evopop.genotype.connection_gene    import ConnectionGene
from evopop.genotype.genome             import Genome
from evopop.genotype.innovation_tracker import InnovationTracker
from evopop.genotype.mutation           import Mutation, FFW, NEAT_STANDARD
from evopop.genotype.node_gene          import NodeType, NodeGene

__all__ = ['ConnectionGene',
           'Genome',
           'InnovationTracker',
           'Mutation',
           'FFW',
           'NEAT_STANDARD',
           'NodeGene',
           'NodeType']
