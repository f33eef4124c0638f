"""
Innovation Tracker Module

This module implements the InnovationTracker class.

Classes:
    InnovationTracker: Tracker for innovation numbers, node IDs and genome IDs
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from evopop.genotype.connection_gene import ConnectionGene

class InnovationTracker:
    """
    Tracks structural changes across all genomes of a population.
    Ensures the same structural change gets the same innovation
    number (for connections) and ID (for nodes), and hands out
    the IDs of new genomes.

    Every population owns one tracker, shared by all of its genomes.
    """

    def __init__(self, num_inputs: int, num_outputs: int):
        """
        Parameters:
            num_inputs:  number of input nodes of every genome
            num_outputs: number of output nodes of every genome
        """
        self._next_innovation_number: int = 0
        self._next_node_id          : int = num_inputs + num_outputs
        self._next_genome_id        : int = 1

        # For each connection ever created, map its endpoints to its innovation number
        self._innovation_numbers: dict[tuple[int, int], int] = {}   # (node_in, node_out) -> innovation number

        # When a connection is split, tracks what node was created and
        # what innovation numbers were assigned to the new connections.
        self._split_IDs: dict[int, tuple[int, int, int]] = {}        # split innovation -> (new_node_id, innov1, innov2)

    def get_innovation_number(self, node_in: int, node_out: int) -> int:
        """
        Get innovation number for a connection, identified by its endpoints.
        Returns existing innovation number if this connection was created
        before, otherwise assigns a new innovation number.

        Parameters:
            node_in:  node ID for the 'from' end of the connection
            node_out: node ID for the 'to'   end of the connection

        Returns:
            connection ID (a.k.a. innovation number)
        """
        key = (node_in, node_out)

        # This is a new connection
        if key not in self._innovation_numbers:
            self._innovation_numbers[key] = self._next_innovation_number
            self._next_innovation_number += 1

        return self._innovation_numbers[key]

    def get_split_IDs(self, conn_to_split: 'ConnectionGene') -> tuple[int, int, int]:
        """
        Get node ID and innovation numbers for splitting a connection.
        If this exact connection has been split before, returns the same
        values, otherwise creates new ones.

        Parameters:
            conn_to_split: the connection being split

        Returns:
            3-tuple: (new_node_id, innovation1, innovation2)
            innovation1 is for the connection from the 'from' node of 'conn_to_split' to the new node
            innovation2 is for the connection from the new node to the 'to' node of 'conn_to_split'
        """
        key = conn_to_split.innovation

        # This connection hasn't been split before
        if key not in self._split_IDs:
            new_node_id = self._next_node_id
            self._next_node_id += 1

            innov1 = self.get_innovation_number(conn_to_split.node_in, new_node_id)
            innov2 = self.get_innovation_number(new_node_id, conn_to_split.node_out)

            self._split_IDs[key] = (new_node_id, innov1, innov2)

        return self._split_IDs[key]

    def next_genome_id(self) -> int:
        """
        Hand out the ID of a new genome.
        """
        genome_id = self._next_genome_id
        self._next_genome_id += 1
        return genome_id

    def reserve_node_id(self, node_id: int) -> None:
        """
        Make sure 'node_id' is never handed out to a new node.
        Used when genomes are restored from their serialized form.
        """
        self._next_node_id = max(self._next_node_id, node_id + 1)

    def reserve_genome_id(self, genome_id: int) -> None:
        """
        Make sure 'genome_id' is never handed out to a new genome.
        """
        self._next_genome_id = max(self._next_genome_id, genome_id + 1)

    def to_dict(self) -> dict:
        """
        Convert the tracker to a dictionary representation (JSON compatible).

        Returns:
            Dictionary with the following structure:
            {
                "next_innovation_number": 5,
                "next_node_id"          : 4,
                "next_genome_id"        : 61,
                "innovations"           : [[0, 2, 0], [1, 2, 1], ...],   # [node_in, node_out, innovation]
                "splits"                : [[0, 3, 2, 3], ...]            # [split innovation, new_node_id, innov1, innov2]
            }
        """
        return {
            "next_innovation_number": self._next_innovation_number,
            "next_node_id"          : self._next_node_id,
            "next_genome_id"        : self._next_genome_id,
            "innovations"           : [[node_in, node_out, innov]
                                       for (node_in, node_out), innov in self._innovation_numbers.items()],
            "splits"                : [[innov, *split_ids] for innov, split_ids in self._split_IDs.items()]
        }

    @classmethod
    def from_dict(cls, tracker_dict: dict, num_inputs: int, num_outputs: int) -> 'InnovationTracker':
        """
        Restore a tracker from its dictionary representation, so that structural
        changes made before the tracker was saved keep their numbers afterwards.
        """
        tracker = cls(num_inputs, num_outputs)
        tracker._next_innovation_number = tracker_dict["next_innovation_number"]
        tracker._next_node_id           = tracker_dict["next_node_id"]
        tracker._next_genome_id         = tracker_dict["next_genome_id"]
        for node_in, node_out, innov in tracker_dict["innovations"]:
            tracker._innovation_numbers[(node_in, node_out)] = innov
        for innov, new_node_id, innov1, innov2 in tracker_dict["splits"]:
            tracker._split_IDs[innov] = (new_node_id, innov1, innov2)
        return tracker
