"""
Phenotype Package

This package expresses genomes as executable neural networks, used to measure
the error of a genome over a dataset.

Modules:
    network_base:     Abstract base class for network implementations
    network_standard: Standard object-oriented network implementation

Exported Classes:
    Connection:      A weighted, optionally gated, connection between two neurons
    Neuron:          A computational node applying activation functions
    NetworkBase:     Abstract base class for network implementations
    NetworkStandard: Object-oriented feedforward neural network
"""

from evopop.phenotype.network_base     import NetworkBase
from evopop.phenotype.network_standard import Connection, Neuron, NetworkStandard

__all__ = ['Connection',
           'Neuron',
           'NetworkBase',
           'NetworkStandard']
