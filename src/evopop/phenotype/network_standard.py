"""
Standard Network Module

This module expresses a genome as an executable neural network, using an
object oriented approach to representing Nodes, Connections and the Network.

Classes:
    Connection:      A weighted, optionally gated, connection between two neurons
    Neuron:          A computational node applying activation functions
    NetworkStandard: A feedforward neural network from a genome
"""

from typing import Callable, Optional, TYPE_CHECKING

from evopop.genotype.node_gene     import NodeType
from evopop.phenotype.network_base import NetworkBase

if TYPE_CHECKING:
    from evopop.genotype import ConnectionGene, Genome, NodeGene

class Connection:
    """
    A weighted connection between two neurons in a neural network.

    Each connection wraps a ConnectionGene and provides read-only access to its
    properties. The connection transmits signals from a source neuron to a
    destination neuron, applying a weight multiplier to the signal; when gated,
    the signal is also multiplied by the output of the gater neuron.

    Public Properties:
        nodeID_in:  ID of the source neuron
        nodeID_out: ID of the destination neuron
        enabled:    Whether this connection is active in the network
        weight:     Weight multiplier applied to the transmitted signal
        innovation: Innovation number identifying this connection
        gater:      ID of the gater neuron (None if not gated)
    """

    def __init__(self, gene: "ConnectionGene"):
        """
        Parameters:
            gene: the gene encoding the Connection
        """
        self._gene: "ConnectionGene" = gene

    @property
    def nodeID_in(self) -> int:
        """The ID of the node/neuron representing the connection start."""
        return self._gene.node_in

    @property
    def nodeID_out(self) -> int:
        """The ID of the node/neuron representing the connection end."""
        return self._gene.node_out

    @property
    def enabled(self) -> bool:
        """Whether the connection is enabled."""
        return self._gene.enabled

    @property
    def weight(self) -> float:
        """The weight associated with this connection."""
        return self._gene.weight

    @property
    def innovation(self) -> int:
        """The ID associated with this connection."""
        return self._gene.innovation

    @property
    def gater(self) -> Optional[int]:
        """The ID of the node/neuron gating this connection."""
        return self._gene.gater

    def __repr__(self):
        return f"Connection(gene={self._gene})"

class Neuron:
    """
    A computational node (neuron) in a neural network.

    Input neurons simply pass through their input unchanged.
    Hidden and output neurons compute their output as:
        activation(weighted_input + bias)

    Public Attributes:
        output: The computed output value (None until calculated)

    Public Properties:
        id:         ID for this neuron
        type:       Neuron type (INPUT, HIDDEN, or OUTPUT)
        bias:       Bias value added to weighted input
        activation: Activation function applied to (weighted_input + bias)

    Public Methods:
        calculate_output(input_data): Compute and store the neuron's output value
    """

    def __init__(self, gene: "NodeGene"):
        """
        Parameters:
            gene: the gene encoding the Node/Neuron
        """
        self._gene : "NodeGene"      = gene
        self.output: Optional[float] = None

    @property
    def id(self) -> int:
        return self._gene.id

    @property
    def type(self) -> NodeType:
        return self._gene.type

    @property
    def bias(self) -> float:
        return self._gene.bias

    @property
    def activation(self) -> Optional[Callable[[float], float]]:
        return self._gene.activation

    def calculate_output(self, input_data: float) -> None:
        """
        Calculate the output of this node/neuron.
        The result is saved internally in 'self.output'.

        Parameters:
            input_data: the sum of the signals carried by the incoming connections
        """
        # an input node always outputs its input, un-modified
        if self.type == NodeType.INPUT:
            self.output = input_data
        else:
            if self.activation is None:
                raise ValueError(f"Neuron {self.id} of type {self.type.name} requires an activation function")
            self.output = self.activation(input_data + self.bias)

    def __repr__(self):
        return f"Neuron(gene={self._gene})"

class NetworkStandard(NetworkBase):
    """
    Object-oriented implementation of a feedforward neural network.

    The network is built of individual Neuron objects for each node (maintaining
    mutable state) and individual Connection objects for each connection, and is
    evaluated by iterating through the neurons in topological order, one input
    sample at a time.

    Public Methods:
        forward_pass(inputs): Process inputs through the network and return outputs
    """

    def __init__(self, genome: "Genome"):
        """
        Parameters:
            genome: the Genome encoding the network
        """
        super().__init__(genome)

        self._neurons: dict[int, Neuron] = {gene.id: Neuron(gene) for gene in genome.node_genes.values()}

        self._connections: dict[int, Connection] = {}
        for gene in genome.conn_genes.values():
            self._connections[gene.innovation] = Connection(gene)

        # For each neuron, build list of incoming connections (both enabled and disabled)
        self._incoming_connections: dict[int, list[Connection]] = {}   # neuron ID => [Connection instance]
        for conn in self._connections.values():
            self._incoming_connections.setdefault(conn.nodeID_out, []).append(conn)

    def _signal(self, conn: Connection) -> float:
        signal = conn.weight * self._neurons[conn.nodeID_in].output
        if conn.gater is not None:
            signal = signal * self._neurons[conn.gater].output
        return signal

    def forward_pass(self, inputs) -> list[float]:
        """
        Perform a complete forward pass through the network.

        Parameters:
            inputs: the network inputs (as many as input neurons)

        Returns:
            the results of passing the inputs through the network (as many as output neurons)
        """
        if len(inputs) != len(self._input_ids):
            raise ValueError(f"Expected {len(self._input_ids)} inputs, got {len(inputs)}")

        for neuron in self._neurons.values():
            neuron.output = None

        for i, input_id in enumerate(self._input_ids):
            self._neurons[input_id].calculate_output(inputs[i])

        # Propagate values through the network, in topological order
        for node_id in self._sorted_nodes:
            if self._neurons[node_id].type != NodeType.INPUT:
                conns_in   = self._incoming_connections.get(node_id, [])
                input_data = sum(self._signal(c) for c in conns_in if c.enabled)
                self._neurons[node_id].calculate_output(input_data)

        return [self._neurons[ID].output for ID in self._output_ids]

    def __str__(self):
        neurons_str     = "\n".join(f"  {neuron!r}" for neuron in self._neurons.values())
        connections_str = "\n".join(f"  {conn!r}" for conn in self._connections.values())
        return f"{neurons_str},\n\n{connections_str}"
