"""
NEAT Innovation Tracker Module

This module implements the InnovationTracker class for the
NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    InnovationTracker: Run-wide tracker for innovation numbers and node IDs
"""

import logging
import threading
from typing import Iterable, TYPE_CHECKING

if TYPE_CHECKING:
    from evoneat.genotype.genome import Genome

logger = logging.getLogger(__name__)

class InnovationTracker:
    """
    Tracks structural changes across all genomes of one evolutionary run.

    The tracker hands out node IDs for new hidden nodes and innovation numbers
    for new connections. The same structural change (a connection between the
    same two nodes) requested more than once within one generation receives the
    same innovation number, which lets crossover align the resulting genes. The
    cache is cleared between generations, so the same edge arising again later
    gets a new number; the counters themselves never go back.

    One tracker is created per run and passed to every mutation call. All
    operations are guarded by a lock, so mutations may run in parallel.

    Public Properties:
        next_node_id:           The ID the next new node will receive
        next_innovation_number: The innovation number the next new connection will receive

    Public Methods:
        get_innovation_number(node_in, node_out): Get innovation number for a connection
        get_node_id():                            Allocate the ID of a new node
        reset_for_next_generation():              Forget this generation's connections
        prime_from_population(genomes):           Skip past IDs already used by genomes
    """

    def __init__(self, num_inputs: int, num_outputs: int):
        """
        Parameters:
            num_inputs:  number of input nodes (IDs [0, num_inputs))
            num_outputs: number of output nodes (IDs [num_inputs, num_inputs + num_outputs))
        """
        self._lock = threading.Lock()

        # Counters
        self._next_node_id          : int = num_inputs + num_outputs
        self._next_innovation_number: int = 0

        # Connections created during the current generation
        self._innovation_numbers: dict[tuple[int, int], int] = {}   # (node_in, node_out) -> innovation number

    @property
    def next_node_id(self) -> int:
        return self._next_node_id

    @property
    def next_innovation_number(self) -> int:
        return self._next_innovation_number

    def get_innovation_number(self, node_in: int, node_out: int) -> int:
        """
        Get innovation number for a connection, identified by its endpoints.
        Returns the existing innovation number if this connection was created
        during the current generation, otherwise assigns a new one.

        Parameters:
            node_in:  node ID for the 'from' end of the connection
            node_out: node ID for the 'to'   end of the connection

        Returns:
            connection ID (a.k.a. innovation number)
        """
        key = (node_in, node_out)
        with self._lock:

            # This is a new connection
            if key not in self._innovation_numbers:
                self._innovation_numbers[key] = self._next_innovation_number
                self._next_innovation_number += 1

            return self._innovation_numbers[key]

    def get_node_id(self) -> int:
        """
        Allocate the ID for a new node.
        """
        with self._lock:
            node_id = self._next_node_id
            self._next_node_id += 1
            return node_id

    def reset_for_next_generation(self) -> None:
        """
        Clear the per-generation connection cache. Counters are left untouched.
        """
        with self._lock:
            self._innovation_numbers.clear()

    def prime_from_population(self, genomes: Iterable['Genome']) -> None:
        """
        Advance both counters past the largest node ID and innovation number
        used by the given genomes (typically loaded from a file or seeded by
        hand), so that new mutations never reuse them.

        The per-generation connection cache is cleared as well: numbers cached
        before priming may already be used by the given genomes for other connections.

        Parameters:
            genomes: the genomes to scan
        """
        max_node_id    = -1
        max_innovation = -1
        for genome in genomes:
            if genome.node_genes:
                max_node_id = max(max_node_id, max(genome.node_genes))
            if genome.conn_genes:
                max_innovation = max(max_innovation, max(genome.conn_genes))

        with self._lock:
            self._next_node_id           = max(self._next_node_id,           max_node_id    + 1)
            self._next_innovation_number = max(self._next_innovation_number, max_innovation + 1)
            self._innovation_numbers.clear()

        logger.info("Innovation tracker primed: next node ID %d, next innovation %d",
                    self._next_node_id, self._next_innovation_number)
