"""
Node Gene Module.

This module implements the NodeGene class and NodeType enumeration.

Classes:
    NodeType: Enumeration for node types (INPUT, HIDDEN, OUTPUT)
    NodeGene: Gene encoding a single network node with parameters
"""

import random
from enum   import Enum
from typing import Callable, TYPE_CHECKING

from evopop.activations import activations, activation_codes
if TYPE_CHECKING:
    from evopop.run.config import Config

class NodeType(Enum):
    """
    Nodes come in three types: input, hidden, output.
    """
    INPUT  = "I"
    HIDDEN = "H"
    OUTPUT = "O"

class NodeGene:
    """
    One node of a genome's network: its role, bias and activation.

    Node ids come from the InnovationTracker. Splitting the same connection in
    two genomes yields the same hidden node id, which keeps the genes of
    related genomes aligned.

    The node computes its output as: activation(weighted_input + bias)

    Public Attributes:
        id:              Unique identifier for this node
        type:            Type of node (INPUT, HIDDEN, or OUTPUT)
        bias:            Bias value added to the node's weighted input
        activation_name: Name of the activation function (e.g., 'tanh', 'relu')
        activation:      The activation function itself (callable, None for input nodes)

    Public Methods:
        mutate_bias(rng):       Perturb the bias by a bounded random amount
        mutate_activation(rng): Switch to a different activation function
    """

    def __init__(self,
                 node_id        : int,
                 node_type      : NodeType,
                 config         : 'Config',
                 bias           : float | None = None,
                 activation_name: str   | None = None,
                 rng            : random.Random | None = None):
        """
        Initialize a node gene.
        If 'bias' is not specified, it is drawn from a normal distribution,
        according to the configuration file.
        If 'activation_name' is not specified, the default from
        the configuration file is used.

        Parameters:
            node_id:         Unique identifier for this node
            node_type:       Type of node (INPUT, HIDDEN, or OUTPUT)
            config:          Stores configuration parameters
            bias:            Bias value added to the node's weighted input
            activation_name: Name of activation function (e.g., 'tanh', 'relu')
            rng:             Source of randomness (defaults to the 'random' module)
        """
        rng = rng if rng is not None else random

        self._config: 'Config' = config
        self.id     : int      = node_id
        self.type   : NodeType = node_type

        if node_type == NodeType.INPUT:
            bias = 0.0
        elif bias is None:
            bias = rng.gauss(config.bias_init_mean, config.bias_init_stdev)
            bias = min(max(bias, config.min_bias), config.max_bias)
        self.bias: float = bias

        if node_type == NodeType.INPUT:
            self.activation_name = None
            self.activation      = None
        else:
            if activation_name is None:
                activation_name = config.activation_initial
            self.activation_name: str | None = activation_name
            self.activation: Callable[[float], float] | None = activations[activation_name]

    def mutate_bias(self, rng: random.Random | None = None) -> None:
        """
        Add to the bias a uniform random value bounded by
        'bias_perturb_strength', then clamp it to the allowed range.
        """
        rng      = rng if rng is not None else random
        strength = self._config.bias_perturb_strength
        new_bias = self.bias + rng.uniform(-strength, strength)
        self.bias = min(max(new_bias, self._config.min_bias), self._config.max_bias)

    def mutate_activation(self, rng: random.Random | None = None) -> None:
        """
        Switch to an activation function, different from the current one,
        chosen at random from 'activation_options'.
        """
        rng = rng if rng is not None else random

        # Remove current activation to ensure we select a NEW activation
        available_activations = [name for name in self._config.activation_options
                                 if name != self.activation_name]
        if available_activations:
            self.activation_name = rng.choice(available_activations)
            self.activation      = activations[self.activation_name]

    def __repr__(self):
        return (f"NodeGene(node_id={self.id:+03d}, node_type=NodeType.{self.type.name:6s},"
                f"bias={self.bias}, activation={self.activation_name})")

    def __str__(self):
        if self.type == NodeType.INPUT:
            return f"[{self.type.value}{self.id}]"
        act_code = activation_codes.get(self.activation_name, "???")
        return f"[{self.type.value}{self.id:02d},{act_code},{self.bias:+.02f}]"
