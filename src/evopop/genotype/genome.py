"""
Genome Module

This module implements the Genome class: the mutable, cloneable and
serializable network encoding evolved by a Population.

Classes:
    Genome: Complete genome representing a neural network structure
"""

import copy
import random
from typing import Callable, TYPE_CHECKING

from evopop.cost                        import costs
from evopop.errors                      import IncompatibleOperatorError
from evopop.genotype.connection_gene    import ConnectionGene
from evopop.genotype.innovation_tracker import InnovationTracker
from evopop.genotype.mutation           import Mutation
from evopop.genotype.node_gene          import NodeType, NodeGene
if TYPE_CHECKING:
    from evopop.run.config import Config

class Genome:
    """
    A NEAT genome representing a neural network as a collection of node and connection genes.

    A genome encodes the structure and parameters of a neural network at the genotype level:
    - Node genes: describe network nodes (input, hidden, output) with their parameters
    - Connection genes: describe weighted connections between nodes, each with a unique
      innovation number for tracking historical markings during crossover; a connection
      may be gated by a third node

    A minimal genome contains only input and output nodes with no connections. Via mutation
    operators, genomes grow and shrink, always maintaining a DAG structure. The output of a
    gater node is needed before the connection it gates can carry a signal, so gate
    dependencies (gater -> destination of the gated connection) are part of that DAG.

    Node numbering convention:
        - Input nodes:  [0, num_inputs)
        - Output nodes: [num_inputs, num_inputs + num_outputs)
        - Hidden nodes: [num_inputs + num_outputs, ...)

    Attributes:
        id:             Identifier of the genome, unique within its population
        fitness:        Fitness score (None until evaluated; higher is better)
        shared_fitness: Fitness divided by the surviving member count of its species
        node_genes:     Dictionary mapping node IDs to NodeGene objects
        conn_genes:     Dictionary mapping innovation numbers to ConnectionGene objects

    Public Properties:
        input_nodes:  List of all input node genes
        output_nodes: List of all output node genes
        hidden_nodes: List of all hidden node genes
        gates:        List of all gated connection genes

    Public Methods:
        mutate(operator):                Apply one mutation operator
        distance(other):                 Calculate genetic distance to another genome
        crossover(other, fitter_parent): Create offspring by crossing this genome with another
        clone():                         Create an independent copy with a new ID and no fitness
        evaluate(dataset, cost):         Mean error of the network over a dataset
        to_dict():                       Convert genome to dictionary representation

    Class Methods:
        from_dict(genome_dict, config, tracker): Create a genome from a dictionary description
    """

    def __init__(self,
                 config   : 'Config',
                 tracker  : InnovationTracker,
                 genome_id: int | None           = None,
                 rng      : random.Random | None = None):
        """
        Initialize a minimal Genome.

        A minimal genome describes the smallest possible network: only input and output
        nodes (whose number never changes and is retrieved from the configuration) and
        no connections.

        Parameters:
            config:    Stores configuration parameters
            tracker:   Innovation tracker shared by all genomes of the population
            genome_id: Identifier of the genome (a new one is drawn from 'tracker' if None)
            rng:       Source of randomness (defaults to the 'random' module)
        """
        self._config : 'Config'             = config
        self._tracker: InnovationTracker    = tracker
        self._rng    : random.Random | None = rng

        if genome_id is None:
            genome_id = tracker.next_genome_id()
        else:
            tracker.reserve_genome_id(genome_id)
        self.id: int = genome_id

        self.fitness       : float | None = None
        self.shared_fitness: float | None = None

        self.node_genes: dict[int, NodeGene]       = {}  # node ID => node gene
        self.conn_genes: dict[int, ConnectionGene] = {}  # innovation number => connection gene

        # By convention, input nodes are numbered: [0, NUMBER INPUT NODES)
        for node_id in range(config.num_inputs):
            self.node_genes[node_id] = NodeGene(node_id, NodeType.INPUT, config)

        # By convention, output nodes are numbered: [NUMBER INPUT NODES, NUMBER INPUT NODES + NUMBER OUTPUT NODES)
        for i in range(config.num_outputs):
            node_id = config.num_inputs + i
            self.node_genes[node_id] = NodeGene(node_id, NodeType.OUTPUT, config, rng=self._random)

    @property
    def _random(self):
        return self._rng if self._rng is not None else random

    @classmethod
    def from_dict(cls,
                  genome_dict: dict,
                  config     : 'Config',
                  tracker    : InnovationTracker,
                  rng        : random.Random | None = None) -> 'Genome':
        """
        Create a Genome from a dictionary description.

        Dictionary format:
            {
                "id": 7,                  # Optional, a new ID is assigned if missing
                "fitness": 0.5,           # Optional
                "activation": "sigmoid",  # Optional global activation for all nodes
                "nodes": [
                    {"id": 0, "type": "input"},
                    {"id": 1, "type": "input"},
                    {"id": 2, "type": "output", "bias": 0.0},
                    {"id": 3, "type": "hidden", "bias": 0.5, "activation": "relu"}
                ],
                "connections": [
                    {"from": 0, "to": 3, "weight":  0.5, "enabled": true},
                    {"from": 1, "to": 3, "weight": -0.3, "enabled": true, "gater": 0},
                    {"from": 3, "to": 2, "weight":  1.5, "enabled": true}
                ]
            }

        A node uses its own "activation" if present, then the global "activation",
        then the 'activation_initial' configuration value.

        Parameters:
            genome_dict: Dictionary describing the genome structure
            config:      Stores configuration parameters
            tracker:     Innovation tracker shared by all genomes of the population
            rng:         Source of randomness used by later mutations

        Returns:
            A new Genome object with the specified structure

        Raises:
            ValueError: If the structure is invalid (wrong node numbering, cycles, etc.)
            KeyError:   If required fields are missing from the dictionary
        """
        nodes_data   = genome_dict["nodes"]
        input_nodes  = [n for n in nodes_data if n["type"] == "input"]
        output_nodes = [n for n in nodes_data if n["type"] == "output"]
        hidden_nodes = [n for n in nodes_data if n["type"] == "hidden"]

        # Validate node numbering convention
        cls._validate_node_numbering(input_nodes, output_nodes, hidden_nodes,
                                     config.num_inputs, config.num_outputs)

        network_activation = genome_dict.get("activation", config.activation_initial)

        genome = cls.__new__(cls)
        genome._config  = config
        genome._tracker = tracker
        genome._rng     = rng

        genome_id = genome_dict.get("id")
        if genome_id is None:
            genome_id = tracker.next_genome_id()
        else:
            tracker.reserve_genome_id(genome_id)
        genome.id             = genome_id
        genome.fitness        = genome_dict.get("fitness")
        genome.shared_fitness = None
        genome.node_genes     = {}
        genome.conn_genes     = {}

        # Genes are stored in the order listed
        node_types = {"input": NodeType.INPUT, "hidden": NodeType.HIDDEN, "output": NodeType.OUTPUT}
        for node_data in nodes_data:
            ID        = node_data["id"]
            node_type = node_types[node_data["type"]]
            if node_type == NodeType.INPUT:
                genome.node_genes[ID] = NodeGene(ID, node_type, config)
                continue
            bias    = node_data.get("bias", 0.0)
            actname = node_data.get("activation", network_activation)
            genome.node_genes[ID] = NodeGene(ID, node_type, config, bias, actname)
            tracker.reserve_node_id(ID)

        # Add connections and validate network is acyclic
        for conn_data in genome_dict.get("connections", []):
            node_in  = conn_data["from"]
            node_out = conn_data["to"]
            weight   = conn_data["weight"]
            enabled  = conn_data.get("enabled", True)
            gater    = conn_data.get("gater")

            if node_in not in genome.node_genes:
                raise ValueError(f"Connection references non-existent source node: {node_in}")
            if node_out not in genome.node_genes:
                raise ValueError(f"Connection references non-existent destination node: {node_out}")
            if genome._would_create_cycle(node_in, node_out):
                raise ValueError(f"Connection from {node_in} to {node_out} would create a cycle")

            innovation = tracker.get_innovation_number(node_in, node_out)
            if innovation in genome.conn_genes:
                raise ValueError(f"Duplicate connection from {node_in} to {node_out}")
            genome.conn_genes[innovation] = ConnectionGene(node_in, node_out, weight, innovation,
                                                           config, enabled=enabled)

            if gater is not None:
                if gater not in genome.node_genes:
                    raise ValueError(f"Connection from {node_in} to {node_out} gated by non-existent node: {gater}")
                if genome._would_create_cycle(gater, node_out):
                    raise ValueError(f"Gating connection {node_in}->{node_out} by {gater} would create a cycle")
                genome.conn_genes[innovation].gater = gater

        return genome

    def to_dict(self) -> dict:
        """
        Convert the genome to a dictionary representation.

        This is the inverse operation of from_dict(); every node carries its
        activation explicitly, so the result does not depend on the configuration.

        Returns:
            Dictionary with the following structure:
            {
                "id": 7,
                "fitness": 0.5,
                "nodes": [
                    {"id": 0, "type": "input"},
                    {"id": 1, "type": "output", "bias": 0.0, "activation": "sigmoid"},
                    {"id": 2, "type": "hidden", "bias": 0.5, "activation": "relu"}
                ],
                "connections": [
                    {"from": 0, "to": 2, "weight": 0.5, "enabled": true, "gater": null},
                    {"from": 2, "to": 1, "weight": 1.5, "enabled": true, "gater": 0}
                ]
            }
        """
        # Genes are listed in the genome's own order
        type_names = {NodeType.INPUT: "input", NodeType.HIDDEN: "hidden", NodeType.OUTPUT: "output"}
        nodes = []
        for node in self.node_genes.values():
            if node.type == NodeType.INPUT:
                nodes.append({"id": node.id, "type": "input"})
                continue
            nodes.append({
                "id"        : node.id,
                "type"      : type_names[node.type],
                "bias"      : node.bias,
                "activation": node.activation_name
            })

        connections = []
        for conn in self.conn_genes.values():
            connections.append({
                "from"   : conn.node_in,
                "to"     : conn.node_out,
                "weight" : conn.weight,
                "enabled": conn.enabled,
                "gater"  : conn.gater
            })

        return {
            "id"         : self.id,
            "fitness"    : self.fitness,
            "nodes"      : nodes,
            "connections": connections
        }

    @staticmethod
    def _validate_node_numbering(input_nodes : list,
                                 output_nodes: list,
                                 hidden_nodes: list,
                                 num_inputs  : int,
                                 num_outputs : int) -> None:
        """
        Validate that nodes follow the numbering convention.

        Raises:
            ValueError: If node numbering doesn't follow the convention
        """
        input_ids = sorted([n["id"] for n in input_nodes])
        expected_input_ids = list(range(num_inputs))
        if input_ids != expected_input_ids:
            raise ValueError(f"Input nodes must be numbered {expected_input_ids}, got {input_ids}")

        output_ids = sorted([n["id"] for n in output_nodes])
        expected_output_ids = list(range(num_inputs, num_inputs + num_outputs))
        if output_ids != expected_output_ids:
            raise ValueError(f"Output nodes must be numbered {expected_output_ids}, got {output_ids}")

        hidden_ids = [n["id"] for n in hidden_nodes]
        min_hidden_id = num_inputs + num_outputs
        for hid in hidden_ids:
            if hid < min_hidden_id:
                raise ValueError(f"Hidden node {hid} has ID below minimum {min_hidden_id}")

        all_ids = input_ids + output_ids + hidden_ids
        if len(all_ids) != len(set(all_ids)):
            raise ValueError("Duplicate node IDs found in node list")

    @property
    def input_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.INPUT]

    @property
    def output_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.OUTPUT]

    @property
    def hidden_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.HIDDEN]

    @property
    def gates(self) -> list[ConnectionGene]:
        return [conn for conn in self.conn_genes.values() if conn.gater is not None]

    # ===========================================================
    # Similarity
    # ===========================================================

    def distance(self, other: 'Genome') -> float:
        """
        Calculate genetic distance between this genome and another.

        The genetic distance is the sum of two components:
        + a term calculated using the original NEAT formula, based on connection genes
        + a term quantifying the parameter difference between the matching nodes in the
          two networks, included when 'distance_includes_nodes' is set

        Parameters:
            other: the genome relative to which we are calculating the distance

        Returns:
            the genetic distance between this genome and 'other'
        """
        distance = self._distance_NEAT(other)
        if self._config.distance_includes_nodes:
            distance += self._distance_nodes(other)
        return distance

    def _distance_NEAT(self, other: 'Genome') -> float:
        """
        The original NEAT formula only looks at connections:
           distance = (c1 * E / N) + (c2 * D / N) + c3 * W̄

        Where:
        - E = number of excess connection genes
        - D = number of disjoint connection genes
        - N = number of connection genes in larger genome
        - W̄ = average weight difference of matching connection genes
        - c1, c2, c3 = weight of various terms (from configuration file)
        """
        innovs1 = set(self.conn_genes.keys())
        innovs2 = set(other.conn_genes.keys())
        if not innovs1 and not innovs2:
            return 0.0

        matching_innovs     =  innovs1 & innovs2
        non_matching_innovs = (innovs1 | innovs2) - matching_innovs

        max_innov1 = max(innovs1) if innovs1 else -1
        max_innov2 = max(innovs2) if innovs2 else -1

        # Excess   genes: beyond the smaller genome's max innovation number
        # Disjoint genes: within the overlapping range but not matching
        num_excess   = 0
        num_disjoint = 0
        for innov in non_matching_innovs:
            if innov > min(max_innov1, max_innov2):
                num_excess += 1
            else:
                num_disjoint += 1

        avg_weight_diff = 0.0
        if matching_innovs:
            weight_diff = sum(abs(self.conn_genes[i].weight - other.conn_genes[i].weight) for i in matching_innovs)
            avg_weight_diff = weight_diff / len(matching_innovs)

        N = max(len(self.conn_genes), len(other.conn_genes))
        return (self._config.distance_excess_coeff   * num_excess   / N +
                self._config.distance_disjoint_coeff * num_disjoint / N +
                self._config.distance_params_coeff   * avg_weight_diff)

    def _distance_nodes(self, other: 'Genome') -> float:
        """
        Average difference in bias, and in activation function, of the matching nodes.
        """
        matching_ids = set(self.node_genes.keys()) & set(other.node_genes.keys())

        params_diff = 0.0
        num_params  = 0
        for node_id in matching_ids:
            node1 = self.node_genes [node_id]
            node2 = other.node_genes[node_id]
            if node1.type == NodeType.INPUT:
                continue

            params_diff += abs(node1.bias - node2.bias)
            num_params  += 1
            if node1.activation_name != node2.activation_name:
                params_diff += 1.0
                num_params  += 1

        if num_params > 0:
            params_diff /= num_params

        return self._config.distance_params_coeff * params_diff

    # ===========================================================
    # Reproduction
    # ===========================================================

    def _empty_copy(self) -> 'Genome':
        """
        A genome with no genes sharing this genome's configuration,
        tracker and source of randomness, with a new ID and no fitness.
        """
        genome = Genome.__new__(Genome)
        genome._config        = self._config
        genome._tracker       = self._tracker
        genome._rng           = self._rng
        genome.id             = self._tracker.next_genome_id()
        genome.fitness        = None
        genome.shared_fitness = None
        genome.node_genes     = {}
        genome.conn_genes     = {}
        return genome

    def clone(self) -> 'Genome':
        """
        Create an independent copy of this genome.
        The copy receives a new ID and has no fitness.
        """
        twin = self._empty_copy()
        twin.node_genes = {nid: copy.copy(node) for nid, node in self.node_genes.items()}
        twin.conn_genes = {innov: copy.copy(conn) for innov, conn in self.conn_genes.items()}
        return twin

    def crossover(self, other: 'Genome', fitter_parent: 'Genome') -> 'Genome':
        """
        Perform NEAT crossover between this genome and another to create offspring.

        NEAT crossover rules:
        - Matching genes: randomly inherit from either parent
        - Disjoint/excess genes: inherit from fitter parent only

        Connections which, combined with the ones already inherited, would close
        a cycle are left out of the offspring; so are gates which would do so.

        Parameters:
            other:         the other parent genome
            fitter_parent: which parent is fitter (must be 'self' or 'other')

        Returns:
            New offspring genome
        """
        rng       = self._random
        offspring = self._empty_copy()

        innovs_self  = set(self.conn_genes.keys())
        innovs_other = set(other.conn_genes.keys())

        matching_innovs   = innovs_self  & innovs_other   # conn genes shared by both genomes
        only_self_innovs  = innovs_self  - innovs_other   # conn genes present only in 'self'
        only_other_innovs = innovs_other - innovs_self    # conn genes present only in 'other'

        # Choose the connection genes, in innovation order so that the result
        # depends only on the parents and the source of randomness
        inherited = []
        for innov in sorted(matching_innovs):
            conn_gene = copy.copy((self.conn_genes if rng.random() < 0.5 else other.conn_genes)[innov])

            # If parents disagree on enabled status, 75% chance of being enabled
            if self.conn_genes[innov].enabled != other.conn_genes[innov].enabled:
                conn_gene.enabled = rng.random() < 0.75
            inherited.append(conn_gene)

        extra_innovs = only_self_innovs if fitter_parent is self else only_other_innovs
        for innov in extra_innovs:
            inherited.append(copy.copy(fitter_parent.conn_genes[innov]))

        for conn_gene in sorted(inherited, key=lambda c: c.innovation):
            if offspring._would_create_cycle(conn_gene.node_in, conn_gene.node_out):
                continue
            offspring.conn_genes[conn_gene.innovation] = conn_gene
            if conn_gene.gater is not None and offspring._would_create_cycle(conn_gene.gater, conn_gene.node_out):
                conn_gene.gater = None

        # Collect the IDs of all nodes needed by the offspring's connections and gates
        node_ids = set(range(self._config.num_inputs + self._config.num_outputs))
        for conn_gene in offspring.conn_genes.values():
            node_ids.add(conn_gene.node_in)
            node_ids.add(conn_gene.node_out)
            if conn_gene.gater is not None:
                node_ids.add(conn_gene.gater)

        # Inherit node genes:
        # - matching nodes:     inherit randomly from either parent
        # - non-matching nodes: inherit from whichever parent has it
        for nid in sorted(node_ids):
            if nid in self.node_genes and nid in other.node_genes:
                node_gene = self.node_genes[nid] if rng.random() < 0.5 else other.node_genes[nid]
            elif nid in self.node_genes:
                node_gene = self.node_genes[nid]
            elif nid in other.node_genes:
                node_gene = other.node_genes[nid]
            else:
                raise RuntimeError(f"node ID {nid} cannot be found in either parent")
            offspring.node_genes[nid] = copy.copy(node_gene)

        return offspring

    # ===========================================================
    # Mutation
    # ===========================================================

    def mutate(self, operator: Mutation) -> 'Genome':
        """
        Apply a single mutation operator to this genome.

        Operators that find nothing to act on (e.g. SUB_NODE on a genome
        without hidden nodes) leave the genome unchanged.

        Parameters:
            operator: the mutation operator to apply

        Returns:
            this genome

        Raises:
            IncompatibleOperatorError: if the operator would exceed a structural
                                       cap; the genome is left unchanged
        """
        handlers = {
            Mutation.ADD_NODE      : self._mutate_add_node,
            Mutation.SUB_NODE      : self._mutate_delete_node,
            Mutation.ADD_CONNECTION: self._mutate_add_connection,
            Mutation.SUB_CONNECTION: self._mutate_delete_connection,
            Mutation.MOD_WEIGHT    : self._mutate_weights,
            Mutation.MOD_BIAS      : self._mutate_bias,
            Mutation.MOD_ACTIVATION: self._mutate_activation,
            Mutation.ADD_GATE      : self._mutate_add_gate,
            Mutation.SUB_GATE      : self._mutate_delete_gate
            }
        handlers[operator]()
        return self

    def _mutate_add_node(self) -> None:
        """
        Split an existing, enabled, connection by adding a new node.
        The connection to split is selected at random.
        """
        if len(self.node_genes) >= self._config.max_nodes:
            raise IncompatibleOperatorError(f"genome {self.id} already has the maximum number of nodes")

        enabled_conn_genes = [gene for gene in self.conn_genes.values() if gene.enabled]
        if not enabled_conn_genes:
            return
        split_conn_gene = self._random.choice(enabled_conn_genes)

        # The tracker hands out the same node ID and innovation numbers
        # every time this connection is split, in any genome
        new_node_id, innov1, innov2 = self._tracker.get_split_IDs(split_conn_gene)

        # The split was inherited and later disabled: re-enable its two halves
        if new_node_id in self.node_genes:
            if innov1 in self.conn_genes and innov2 in self.conn_genes:
                split_conn_gene.enabled = False
                self.conn_genes[innov1].enabled = True
                self.conn_genes[innov2].enabled = True
            return

        split_conn_gene.enabled = False
        self.node_genes[new_node_id] = NodeGene(new_node_id, NodeType.HIDDEN, self._config, rng=self._random)

        # input -> new node (weight = 1.0)
        conn1 = ConnectionGene(split_conn_gene.node_in, new_node_id, 1.0, innov1, self._config)
        self.conn_genes[innov1] = conn1

        # new node -> output (weight = old weight); the gate moves along with the signal it scaled
        conn2 = ConnectionGene(new_node_id, split_conn_gene.node_out, split_conn_gene.weight, innov2,
                               self._config, gater=split_conn_gene.gater)
        self.conn_genes[innov2] = conn2
        split_conn_gene.gater = None

    def _mutate_delete_node(self) -> None:
        """
        Randomly delete a hidden node and all its connections.
        """
        hidden_nodes = self.hidden_nodes
        if hidden_nodes:
            node_to_delete = self._random.choice(hidden_nodes)
            self._delete_node(node_to_delete.id)

    def _mutate_add_connection(self) -> None:
        """
        Add a new connection between two existing nodes.

        The two ends of the new connection are selected at random, however we cannot add a connection:
         + starting at an OUTPUT node
         + ending   at an INPUT  node
         + between two nodes already connected by a direct connection
         + which would create a cycle in the DAG network graph

        The method gives up after a maximum number of failed attempts.
        """
        if len(self.conn_genes) >= self._config.max_connections:
            raise IncompatibleOperatorError(f"genome {self.id} already has the maximum number of connections")

        rng = self._random
        connected_nodes = {(conn.node_in, conn.node_out) for conn in self.conn_genes.values()}

        NUM_ATTEMPTS = 20
        node_IDs = list(self.node_genes.keys())
        for _ in range(NUM_ATTEMPTS):
            node_in  = rng.choice(node_IDs)
            node_out = rng.choice(node_IDs)

            # Carry out quick checks first
            if self.node_genes[node_in].type == NodeType.OUTPUT:
                continue
            if self.node_genes[node_out].type == NodeType.INPUT:
                continue
            if (node_in, node_out) in connected_nodes:
                continue

            # Carry out expensive check last
            if self._would_create_cycle(node_in, node_out):
                continue

            innovation_num = self._tracker.get_innovation_number(node_in, node_out)
            weight         = rng.uniform(self._config.min_weight, self._config.max_weight)
            self.conn_genes[innovation_num] = ConnectionGene(node_in, node_out, weight, innovation_num, self._config)
            break

    def _mutate_delete_connection(self) -> None:
        """
        Randomly delete a connection (either enabled or disabled).
        """
        if self.conn_genes:
            connection_to_delete = self._random.choice(list(self.conn_genes.values()))
            self._delete_connection(connection_to_delete.innovation)

    def _mutate_weights(self) -> None:
        """
        Mutate every connection weight: with probability 'weight_perturb_prob'
        it is perturbed by a bounded amount, otherwise it is replaced.
        """
        rng = self._random
        for conn in self.conn_genes.values():
            if rng.random() < self._config.weight_perturb_prob:
                conn.perturb_weight(rng)
            else:
                conn.replace_weight(rng)

    def _mutate_bias(self) -> None:
        """
        Perturb the bias of a random hidden or output node.
        """
        nodes = self.hidden_nodes + self.output_nodes
        if nodes:
            self._random.choice(nodes).mutate_bias(self._random)

    def _mutate_activation(self) -> None:
        """
        Change the activation function of a random hidden or output node.
        """
        nodes = self.hidden_nodes + self.output_nodes
        if nodes:
            self._random.choice(nodes).mutate_activation(self._random)

    def _mutate_add_gate(self) -> None:
        """
        Let a random node gate a random ungated connection.
        Like '_mutate_add_connection()' it gives up after a number of attempts
        that would all create a cycle.
        """
        if len(self.gates) >= self._config.max_gates:
            raise IncompatibleOperatorError(f"genome {self.id} already has the maximum number of gates")

        ungated = [conn for conn in self.conn_genes.values() if conn.gater is None]
        if not ungated:
            return

        rng = self._random
        NUM_ATTEMPTS = 20
        node_IDs = list(self.node_genes.keys())
        for _ in range(NUM_ATTEMPTS):
            conn  = rng.choice(ungated)
            gater = rng.choice(node_IDs)
            if self._would_create_cycle(gater, conn.node_out):
                continue
            conn.gater = gater
            break

    def _mutate_delete_gate(self) -> None:
        """
        Remove the gate of a random gated connection.
        """
        gates = self.gates
        if gates:
            self._random.choice(gates).gater = None

    def _delete_node(self, node_id: int) -> None:
        """
        Delete a hidden node, all connections starting or ending at it and all gates it holds.

        Parameters:
            node_id: ID of the node to delete

        Raises:
            ValueError: If the node is not a hidden node
            KeyError:   If the node ID does not exist in the genome
        """
        if node_id not in self.node_genes:
            raise KeyError(f"Node with ID {node_id} does not exist in the genome")
        node = self.node_genes[node_id]

        if node.type != NodeType.HIDDEN:
            raise ValueError(f"Cannot delete node {node_id}: only hidden nodes can be deleted (node type is {node.type.name})")

        connections_to_remove = [innov for innov, conn in self.conn_genes.items()
                                 if conn.node_in == node_id or conn.node_out == node_id]
        for innov in connections_to_remove:
            self._delete_connection(innov)

        for conn in self.conn_genes.values():
            if conn.gater == node_id:
                conn.gater = None

        del self.node_genes[node_id]

    def _delete_connection(self, innovation_number: int) -> None:
        """
        Delete a connection from the genome.

        Raises:
            KeyError: If the innovation number does not exist in the genome
        """
        if innovation_number not in self.conn_genes:
            raise KeyError(f"Connection with innovation number {innovation_number} does not exist in the genome")

        del self.conn_genes[innovation_number]

    def _would_create_cycle(self, from_node: int, to_node: int) -> bool:
        """
        Check if adding an edge from_node -> to_node would create a cycle.
        Uses DFS to check if there's already a path from 'to_node' back to 'from_node'.
        Edges are all connections (both enabled and disabled) plus every gate
        dependency (gater -> destination of the gated connection).

        Parameters:
            from_node: proposed start of the new edge
            to_node:   proposed end   of the new edge

        Returns:
            whether adding the new edge would create a cycle in the network
        """
        if from_node == to_node:
            return True

        successors: dict[int, list[int]] = {}
        for conn_gene in self.conn_genes.values():
            successors.setdefault(conn_gene.node_in, []).append(conn_gene.node_out)
            if conn_gene.gater is not None:
                successors.setdefault(conn_gene.gater, []).append(conn_gene.node_out)

        visited = set()
        stack = [to_node]
        while stack:
            current = stack.pop()
            if current == from_node:
                return True   # found path 'to_node' -> 'from_node', would create cycle
            if current in visited:
                continue
            visited.add(current)
            stack.extend(successors.get(current, []))

        return False

    # ===========================================================
    # Evaluation
    # ===========================================================

    def evaluate(self, dataset: list[dict], cost: str | Callable = "mse") -> float:
        """
        Run the network on every sample of a dataset and average the cost.

        Parameters:
            dataset: list of samples, each a dictionary {"input": [...], "output": [...]}
            cost:    cost function, or the name of one (see 'evopop.cost')

        Returns:
            the mean error of the network over the dataset (lower is better)

        Raises:
            ValueError: If the dataset is empty
        """
        from evopop.phenotype.network_standard import NetworkStandard

        if not dataset:
            raise ValueError("Cannot evaluate a genome on an empty dataset")
        cost_fn = costs[cost] if isinstance(cost, str) else cost

        network = NetworkStandard(self)
        error   = 0.0
        for sample in dataset:
            outputs = network.forward_pass(sample["input"])
            error  += float(cost_fn(sample["output"], outputs))

        return error / len(dataset)

    def __str__(self):
        node_genes_str  = ''.join(str(node) for node in self.input_nodes)
        node_genes_str += ''.join(str(node) for node in self.hidden_nodes)
        node_genes_str += ''.join(str(node) for node in self.output_nodes)
        conn_genes_str  = ''.join(str(conn) for conn in self.conn_genes.values())
        fitness_str     = "None" if self.fitness is None else f"{self.fitness:.4f}"
        return f"Genome {self.id} (fitness={fitness_str})\nNodes: {node_genes_str}\nConns: {conn_genes_str}"
