"""
Network Base Module

This module defines the abstract base class for networks expressed from a genome.

Classes:
    NetworkBase: Abstract base class defining the network interface
"""

from abc         import ABC, abstractmethod
from collections import deque, defaultdict
from typing      import Any, TYPE_CHECKING
import graphviz  # type: ignore

if TYPE_CHECKING:
    from evopop.genotype import Genome

class NetworkBase(ABC):
    """
    Abstract base class for neural network implementations.

    The base class provides:
        - Common initialization
        - Topological sort algorithm
        - Standard network introspection properties
        - Network visualization

    Public Properties (available to all subclasses):
        number_nodes:               Total number of nodes in the network
        number_nodes_hidden:        Number of hidden nodes in the network
        number_connections:         Total number of connections in the network
        number_connections_enabled: Number of enabled connections in the network
        number_gates:               Number of enabled, gated connections in the network

    Public Methods:
        forward_pass(inputs): Process inputs through the network and return outputs (abstract)
        visualize(view):      Draw the network with graphviz
    """

    def __init__(self, genome: 'Genome'):
        """
        Parameters:
            genome: The Genome encoding the network structure
        """
        self._genome       = genome
        self._input_ids    = sorted(gene.id for gene in genome.input_nodes)
        self._output_ids   = sorted(gene.id for gene in genome.output_nodes)
        self._sorted_nodes = self._topological_sort(genome)

    @property
    def number_nodes(self) -> int:
        """Total number of nodes in the network."""
        return len(self._genome.node_genes)

    @property
    def number_nodes_hidden(self) -> int:
        """Number of hidden nodes in the network."""
        return len(self._genome.node_genes) - len(self._input_ids) - len(self._output_ids)

    @property
    def number_connections(self) -> int:
        """Total number of connections in the network."""
        return len(self._genome.conn_genes)

    @property
    def number_connections_enabled(self) -> int:
        """Number of enabled connections in the network."""
        return sum(1 for conn in self._genome.conn_genes.values() if conn.enabled)

    @property
    def number_gates(self) -> int:
        """Number of enabled connections which are gated."""
        return sum(1 for conn in self._genome.conn_genes.values() if conn.enabled and conn.gater is not None)

    @abstractmethod
    def forward_pass(self, inputs: Any) -> Any:
        """
        Perform a complete forward pass through the network.

        Parameters:
            inputs: Network inputs (implementation-specific type)

        Returns:
            Network outputs (implementation-specific type)
        """
        pass

    @staticmethod
    def _topological_sort(genome: 'Genome') -> list[int]:
        """
        Perform topological sort using Kahn's algorithm.

        Sorts the network nodes in topological order, ensuring that all
        dependencies (incoming connections, and the gaters of incoming
        connections) are processed before each node.
        Assumes the network is a DAG (no cycles).

        Parameters:
            genome: The Genome containing node and connection genes

        Returns:
            List of node IDs in topological order
        """
        node_ids = sorted(genome.node_genes.keys())

        adjacency = defaultdict(list)
        in_degree = {node_id: 0 for node_id in node_ids}

        # Build graph from enabled connections and their gates
        for conn in genome.conn_genes.values():
            if conn.enabled:
                adjacency[conn.node_in].append(conn.node_out)
                in_degree[conn.node_out] += 1
                if conn.gater is not None:
                    adjacency[conn.gater].append(conn.node_out)
                    in_degree[conn.node_out] += 1

        # Start with nodes that have no incoming edges
        queue = deque([node_id for node_id in node_ids if in_degree[node_id] == 0])
        result = []

        while queue:
            node_id = queue.popleft()
            result.append(node_id)

            for neighbor in adjacency[node_id]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)

        return result

    def visualize(self, view: bool = True) -> graphviz.Digraph:
        """
        Visualize the network using Graphviz.

        Connections are drawn black when enabled and light gray when disabled;
        gates are drawn as dashed blue edges from the gater to the gated connection's end.

        Parameters:
            view: If True, automatically open the visualization after rendering

        Returns:
            graphviz.Digraph object representing the network
        """
        dot = graphviz.Digraph()
        dot.attr(rankdir='LR')  # Left to right layout
        dot.attr('graph', labelloc='t')

        common_attrs = {'color': 'black', 'style': 'filled', 'shape': 'circle', 'penwidth': '0.5',
                        'fontsize': '5', 'width': '0.5', 'height': '0.5', 'fixedsize': 'true'}
        fill_colors  = {'INPUT': 'lightgrey', 'HIDDEN': 'lightblue', 'OUTPUT': 'white'}

        hidden_ids = sorted(gene.id for gene in self._genome.hidden_nodes)
        clusters   = (('cluster_input' , 'source', 'Inputs' , self._input_ids),
                      ('cluster_hidden', 'same'  , 'Hidden' , hidden_ids),
                      ('cluster_output', 'sink'  , 'Outputs', self._output_ids))

        for cluster_name, rank, label, ids in clusters:
            if not ids:
                continue
            with dot.subgraph(name=cluster_name) as cluster:
                cluster.attr(rank=rank, label=label, style='invisible')
                for node_id in ids:
                    node_gene = self._genome.node_genes[node_id]
                    attrs = dict(common_attrs, fillcolor=fill_colors[node_gene.type.name])
                    if node_gene.activation_name is None:
                        attrs['label'] = f"id={node_id}"
                    else:
                        attrs['label'] = f"id={node_id}\\nbias={node_gene.bias:.2f}\\n{node_gene.activation_name}"
                    cluster.node(str(node_id), **attrs)

        for conn in self._genome.conn_genes.values():
            edge_attrs = {
                'label'     : f"i={conn.innovation},w={conn.weight:.2f}",
                'fontsize'  : '5',
                'penwidth'  : '0.5',
                'arrowsize' : '0.5',
                'labelfloat': 'false',
                'color'     : 'black' if conn.enabled else 'lightgray'
            }
            dot.edge(str(conn.node_in), str(conn.node_out), **edge_attrs)

            if conn.gater is not None:
                dot.edge(str(conn.gater), str(conn.node_out),
                         style='dashed', color='blue', penwidth='0.5', arrowsize='0.5',
                         label=f"gate i={conn.innovation}", fontsize='5')

        if view:
            dot.view(cleanup=True)

        return dot
