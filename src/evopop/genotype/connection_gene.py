"""
Connection Gene Module

This module implements the ConnectionGene class.

Classes:
    ConnectionGene: Gene encoding a weighted, optionally gated, connection between nodes
"""

import random
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from evopop.run.config import Config

class ConnectionGene:
    """
    One directed, weighted edge of a genome's network.

    The innovation number is handed out by the population's InnovationTracker,
    so two genomes that grew the same edge independently carry the same number.
    Crossover and the distance metric line genes up by this number.

    When 'gater' names a node, the edge's signal is scaled by that node's output.
    Disabled edges stay in the genome (crossover may re-enable them) but carry
    no signal.

    Public Attributes:
        node_in:    ID of the source node
        node_out:   ID of the destination node
        weight:     Weight of the connection
        enabled:    Whether this connection is active in the network
        innovation: Innovation number uniquely identifying this connection
        gater:      ID of the node gating this connection (None if not gated)

    Public Methods:
        perturb_weight(rng): Add a bounded random change to the weight
        replace_weight(rng): Replace the weight with a fresh random value
    """

    def __init__(self,
                 node_in   : int,
                 node_out  : int,
                 weight    : float,
                 innovation: int,
                 config    : 'Config',
                 enabled   : bool       = True,
                 gater     : int | None = None):
        """
        Initialize a connection gene.

        Parameters:
            node_in:    ID of the source node
            node_out:   ID of the destination node
            weight:     Weight of the connection
            innovation: Number uniquely identifying this connection
            config:     Stores configuration parameters
            enabled:    Whether this connection is active in the network
            gater:      ID of the node gating this connection
        """
        self.node_in   : int        = node_in
        self.node_out  : int        = node_out
        self.weight    : float      = weight
        self.enabled   : bool       = enabled
        self.innovation: int        = innovation
        self.gater     : int | None = gater
        self._config   : 'Config'   = config

    def perturb_weight(self, rng: random.Random | None = None) -> None:
        """
        Add to the weight a uniform random value bounded by
        'weight_perturb_strength', then clamp it to the allowed range.
        """
        rng        = rng if rng is not None else random
        strength   = self._config.weight_perturb_strength
        new_weight = self.weight + rng.uniform(-strength, strength)
        self.weight = min(max(new_weight, self._config.min_weight), self._config.max_weight)  # Clip it

    def replace_weight(self, rng: random.Random | None = None) -> None:
        """
        Replace the weight with a uniform random value from the allowed range.
        """
        rng = rng if rng is not None else random
        self.weight = rng.uniform(self._config.min_weight, self._config.max_weight)

    def __repr__(self):
        return (f"ConnectionGene(node_in={self.node_in:03d}, node_out={self.node_out:03d},"
                f"weight={self.weight:+.6f}, enabled={self.enabled}, innovation={self.innovation:03d},"
                f"gater={self.gater})")

    def __str__(self):
        s  = f"[{self.innovation:03d},{'E' if self.enabled else 'D'},"
        s += f"{self.node_in:02d}=>{self.node_out:02d},{self.weight:+.02f}"
        if self.gater is not None:
            s += f",G{self.gater:02d}"
        return s + "]"
