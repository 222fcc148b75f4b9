"""
NEAT Genome Module

This module implements the Genome class for the NEAT
(NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    Genome: Complete genome representing a neural network structure
"""

import json
import random
from collections import deque
from pathlib     import Path
from typing      import TYPE_CHECKING

from evoneat.errors                      import SerializationError
from evoneat.genotype.connection_gene    import ConnectionGene
from evoneat.genotype.node_gene          import NodeType, NodeGene
if TYPE_CHECKING:
    from evoneat.genotype.innovation_tracker import InnovationTracker
    from evoneat.run.config                  import Config

class Genome:
    """
    A NEAT genome representing a neural network as a collection of node and connection genes.

    In the NEAT (NeuroEvolution of Augmenting Topologies) algorithm, a genome encodes
    the structure and parameters of a neural network at the genotype level. It consists of:
    - Node genes: describe network nodes (input, hidden, output)
    - Connection genes: describe weighted connections between nodes, each with a unique
      innovation number for tracking historical markings during crossover

    Connection genes are kept ordered by innovation number; crossover and the
    compatibility distance rely on this ordering to align two genomes in a single
    linear pass. A genome holds at most one connection gene per innovation number.

    Node numbering convention (for genomes created by 'minimal'):
        - Input nodes:  [0, num_inputs)
        - Output nodes: [num_inputs, num_inputs + num_outputs)
        - Hidden nodes: [num_inputs + num_outputs, ...)

    Public Attributes:
        node_genes:       Dictionary mapping node IDs to NodeGene objects (declaration order)
        conn_genes:       Dictionary mapping innovation numbers to ConnectionGene objects (innovation order)
        fitness:          Raw fitness, assigned by a fitness evaluator
        adjusted_fitness: Fitness shared among the members of the genome's species

    Public Properties:
        input_nodes:  List of all input node genes
        output_nodes: List of all output node genes
        hidden_nodes: List of all hidden node genes

    Public Methods:
        add_node_gene(node):               Add (or replace) a node gene
        add_connection_gene(connection):   Add (or replace) a connection gene
        copy():                            Deep copy of this genome
        mutate(config, tracker, rng):      Apply all mutation operators stochastically
        distance(other, config):           Compatibility distance to another genome
        prune():                           Copy keeping only the enabled part of the network
        to_dict() / to_json() / save():    Serialize the genome

    Class & Static Methods:
        minimal(num_inputs, num_outputs):          Genome with only input and output nodes
        crossover(parent_a, parent_b, rng):        Create offspring from two parents
        compatibility_distance(g1, g2, config):    Compatibility distance between two genomes
        from_dict() / from_json() / load():        Deserialize a genome
    """

    def __init__(self):
        """
        Initialize an empty genome (no node or connection genes).
        """
        self.node_genes: dict[int, NodeGene]       = {}  # node ID => node gene
        self.conn_genes: dict[int, ConnectionGene] = {}  # innovation number => connection gene

        self.fitness         : float = 0.0
        self.adjusted_fitness: float = 0.0

    @classmethod
    def minimal(cls, num_inputs: int, num_outputs: int) -> 'Genome':
        """
        Create a minimal genome: input and output nodes only, no connections.

        Parameters:
            num_inputs:  number of input nodes
            num_outputs: number of output nodes

        Returns:
            the new genome
        """
        genome = cls()

        # By convention, input nodes are numbered: [0, NUMBER INPUT NODES)
        for node_id in range(num_inputs):
            genome.add_node_gene(NodeGene(node_id, NodeType.INPUT))

        # By convention, output nodes are numbered: [NUMBER INPUT NODES, NUMBER INPUT NODES + NUMBER OUTPUT NODES)
        for i in range(num_outputs):
            genome.add_node_gene(NodeGene(num_inputs + i, NodeType.OUTPUT))

        return genome

    @property
    def input_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.INPUT]

    @property
    def output_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.OUTPUT]

    @property
    def hidden_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.HIDDEN]

    def add_node_gene(self, node: NodeGene) -> None:
        self.node_genes[node.id] = node

    def add_connection_gene(self, connection: ConnectionGene) -> None:
        """
        Add a connection gene, keeping the genes ordered by innovation number.
        A gene with the same innovation number as an existing one replaces it.

        Parameters:
            connection: the gene to add
        """
        innov = connection.innovation
        if innov in self.conn_genes or not self.conn_genes or innov > next(reversed(self.conn_genes)):
            self.conn_genes[innov] = connection
        else:
            self.conn_genes[innov] = connection
            self.conn_genes = dict(sorted(self.conn_genes.items()))

    def copy(self) -> 'Genome':
        """
        Create a deep copy of this genome: all genes are cloned, fitness values are kept.
        """
        genome = Genome()
        for node in self.node_genes.values():
            genome.node_genes[node.id] = node.copy()
        for conn in self.conn_genes.values():
            genome.conn_genes[conn.innovation] = conn.copy()
        genome.fitness          = self.fitness
        genome.adjusted_fitness = self.adjusted_fitness
        return genome

    # ------------------------------------------------------------------
    # Crossover
    # ------------------------------------------------------------------

    @staticmethod
    def crossover(parent_a: 'Genome', parent_b: 'Genome', rng: random.Random) -> 'Genome':
        """
        Perform NEAT crossover between two genomes to create offspring.

        NEAT crossover rules:
        - Node genes: all inherited from the fitter parent
        - Matching connection genes: inherited from either parent, with equal
          probability (weight and enabled flag come together from that parent)
        - Disjoint & excess connection genes: inherited only if they belong to the
          fitter parent; those of the less fit parent are discarded

        If both parents have the same fitness, 'parent_a' is treated as the fitter.

        Parameters:
            parent_a: first parent genome
            parent_b: second parent genome
            rng:      random number generator

        Returns:
            New offspring genome
        """
        fitter, weaker = (parent_a, parent_b) if parent_a.fitness >= parent_b.fitness else (parent_b, parent_a)

        offspring = Genome()

        # The offspring's node set is the fitter parent's node set
        for node in fitter.node_genes.values():
            offspring.node_genes[node.id] = node.copy()

        # Merge the two innovation-ordered connection lists
        conns_fitter = list(fitter.conn_genes.values())
        conns_weaker = list(weaker.conn_genes.values())
        i = j = 0
        while i < len(conns_fitter):
            conn_fitter = conns_fitter[i]

            # Skip genes unique to the less fit parent
            while j < len(conns_weaker) and conns_weaker[j].innovation < conn_fitter.innovation:
                j += 1

            # Matching gene: inherit from either parent
            if j < len(conns_weaker) and conns_weaker[j].innovation == conn_fitter.innovation:
                chosen = conn_fitter if rng.random() < 0.5 else conns_weaker[j]
                j += 1

            # Disjoint or excess gene of the fitter parent: always inherited
            else:
                chosen = conn_fitter

            offspring.conn_genes[chosen.innovation] = chosen.copy()
            i += 1

        return offspring

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def mutate(self, config: 'Config', tracker: 'InnovationTracker', rng: random.Random) -> None:
        """
        Apply to the current genome all possible mutation operations.

        The mutations are attempted in a fixed order, each one independently
        and with its own probability:
          + mutate the weight of one connection
          + add a connection
          + add a node
          + toggle the enabled flag of one connection

        Parameters:
            config:  stores configuration parameters (probabilities and magnitudes)
            tracker: allocates node IDs and innovation numbers for new structure
            rng:     random number generator
        """
        if rng.random() < config.weight_mutation_rate:
            self._mutate_weight(config, rng)
        if rng.random() < config.add_connection_rate:
            self._mutate_add_connection(config, tracker, rng)
        if rng.random() < config.add_node_rate:
            self._mutate_add_node(config, tracker, rng)
        if rng.random() < config.toggle_enable_rate:
            self._mutate_toggle_enable(rng)

    def _mutate_weight(self, config: 'Config', rng: random.Random) -> None:
        """
        Perturb or replace the weight of one random connection.
        """
        if not self.conn_genes:
            return
        conn = rng.choice(list(self.conn_genes.values()))
        if rng.random() < config.weight_shift_rate:
            conn.weight += rng.uniform(-1.0, 1.0) * config.weight_shift_strength
        else:
            conn.weight = rng.uniform(-config.new_connection_weight_range, config.new_connection_weight_range)

    def _mutate_add_connection(self, config: 'Config', tracker: 'InnovationTracker', rng: random.Random) -> None:
        """
        Add a new connection between two existing nodes.

        The two ends of the new connection are selected at random (the source
        among all nodes, the destination among non-input nodes), however we
        cannot add a connection:
         + from a node to itself
         + between two nodes already connected by a direct connection
         + which would create a cycle, unless recurrent networks are allowed

        The method gives up after a configured number of failed attempts.
        """
        sources = list(self.node_genes.values())
        targets = [node for node in sources if node.type != NodeType.INPUT]
        if not sources or not targets:
            return

        for _ in range(config.add_connection_attempts):
            node_in  = rng.choice(sources).id
            node_out = rng.choice(targets).id

            # Carry out quick checks first
            if node_in == node_out or self._connection_exists(node_in, node_out):
                continue

            # Carry out expensive check last
            if not config.allow_recurrent and self._path_exists(node_out, node_in):
                continue

            # Success - add connection gene to the genome and return
            weight     = rng.uniform(-config.new_connection_weight_range, config.new_connection_weight_range)
            innovation = tracker.get_innovation_number(node_in, node_out)
            self.add_connection_gene(ConnectionGene(node_in, node_out, weight, innovation))
            return

    def _mutate_add_node(self, config: 'Config', tracker: 'InnovationTracker', rng: random.Random) -> None:
        """
        Split a random enabled connection by adding a new hidden node.

        The split connection is disabled and replaced by two new connections:
        source -> new node (fixed weight from the configuration) and
        new node -> destination (the weight of the split connection).
        """
        enabled_conns = [conn for conn in self.conn_genes.values() if conn.enabled]
        if not enabled_conns:
            return

        old_conn = rng.choice(enabled_conns)
        old_conn.enabled = False

        new_node_id = tracker.get_node_id()
        self.add_node_gene(NodeGene(new_node_id, NodeType.HIDDEN))

        innov1 = tracker.get_innovation_number(old_conn.node_in, new_node_id)
        innov2 = tracker.get_innovation_number(new_node_id, old_conn.node_out)
        self.add_connection_gene(ConnectionGene(old_conn.node_in, new_node_id, config.add_node_new_link_weight, innov1))
        self.add_connection_gene(ConnectionGene(new_node_id, old_conn.node_out, old_conn.weight, innov2))

    def _mutate_toggle_enable(self, rng: random.Random) -> None:
        """
        Flip the enabled flag of one random connection.

        Re-enabling a connection is not checked for cycles; the add-connection
        check already considers disabled connections.
        """
        if not self.conn_genes:
            return
        conn = rng.choice(list(self.conn_genes.values()))
        conn.enabled = not conn.enabled

    def _connection_exists(self, node_in: int, node_out: int) -> bool:
        return any(c.node_in == node_in and c.node_out == node_out for c in self.conn_genes.values())

    def _path_exists(self, start_node: int, end_node: int) -> bool:
        """
        Check whether 'end_node' can be reached from 'start_node'.
        Uses BFS over ALL connections (both enabled and disabled): a disabled
        connection may be re-enabled later and must not close a cycle.

        Parameters:
            start_node: where the search starts
            end_node:   the node we are looking for

        Returns:
            whether a path from 'start_node' to 'end_node' exists
        """
        if start_node == end_node:
            return True

        visited = {start_node}
        queue   = deque([start_node])
        while queue:
            current = queue.popleft()
            for conn in self.conn_genes.values():
                if conn.node_in != current:
                    continue
                if conn.node_out == end_node:
                    return True
                if conn.node_out not in visited:
                    visited.add(conn.node_out)
                    queue.append(conn.node_out)

        return False

    # ------------------------------------------------------------------
    # Distance
    # ------------------------------------------------------------------

    @staticmethod
    def compatibility_distance(genome1: 'Genome', genome2: 'Genome', config: 'Config') -> float:
        """
        Calculate the compatibility distance between two genomes.

           distance = (c1 * E / N) + (c2 * D / N) + c3 * W̄

        Where:
        - E = number of excess connection genes (left over once the other genome is exhausted)
        - D = number of disjoint connection genes (non-matching, within the other genome's range)
        - N = number of connection genes in the larger genome, or 1 if that is below 20
        - W̄ = average weight difference of matching connection genes
        - c1, c2, c3 = weight of various terms (from configuration)

        Parameters:
            genome1: first genome
            genome2: second genome
            config:  stores configuration parameters

        Returns:
            the compatibility distance between the two genomes
        """
        conns1 = list(genome1.conn_genes.values())
        conns2 = list(genome2.conn_genes.values())

        num_excess   = 0
        num_disjoint = 0
        num_matching = 0
        weight_diff  = 0.0

        i = j = 0
        while i < len(conns1) or j < len(conns2):
            if i == len(conns1):
                num_excess += 1
                j += 1
            elif j == len(conns2):
                num_excess += 1
                i += 1
            elif conns1[i].innovation == conns2[j].innovation:
                num_matching += 1
                weight_diff  += abs(conns1[i].weight - conns2[j].weight)
                i += 1
                j += 1
            elif conns1[i].innovation < conns2[j].innovation:
                num_disjoint += 1
                i += 1
            else:
                num_disjoint += 1
                j += 1

        # Avoid over-penalizing small genomes
        N = max(len(conns1), len(conns2))
        if N < 20:
            N = 1

        avg_weight_diff = weight_diff / num_matching if num_matching > 0 else 0.0
        return (config.excess_coefficient      * num_excess   / N +
                config.disjoint_coefficient    * num_disjoint / N +
                config.weight_diff_coefficient * avg_weight_diff)

    def distance(self, other: 'Genome', config: 'Config') -> float:
        """
        Compatibility distance between this genome and another.
        """
        return Genome.compatibility_distance(self, other, config)

    # ------------------------------------------------------------------
    # Pruning
    # ------------------------------------------------------------------

    def prune(self) -> 'Genome':
        """
        Create a pruned copy of this genome.

        The copy keeps only the enabled connections and the nodes they touch.
        If no connection is enabled, the copy keeps only the input and output
        nodes so that it still describes a valid network.

        Returns:
            A new Genome object holding the active part of this genome
        """
        pruned = Genome()
        pruned.fitness = self.fitness

        enabled_conns = [conn for conn in self.conn_genes.values() if conn.enabled]
        if not enabled_conns:
            for node in self.node_genes.values():
                if node.type in (NodeType.INPUT, NodeType.OUTPUT):
                    pruned.add_node_gene(node.copy())
            return pruned

        active_ids = set()
        for conn in enabled_conns:
            active_ids.add(conn.node_in)
            active_ids.add(conn.node_out)

        # Keep declaration order of the surviving nodes
        for node in self.node_genes.values():
            if node.id in active_ids:
                pruned.add_node_gene(node.copy())
        for conn in enabled_conns:
            pruned.conn_genes[conn.innovation] = conn.copy()

        return pruned

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """
        Convert the genome to a dictionary representation.

        This is the inverse operation of from_dict().

        Returns:
            Dictionary with the following structure:
            {
                "nodes": [
                    {"id": 0, "type": "INPUT"},
                    {"id": 1, "type": "OUTPUT"},
                    {"id": 2, "type": "HIDDEN"}
                ],
                "connections": [
                    {"in_node_id": 0, "out_node_id": 2, "weight": 0.5, "enabled": true, "innovation_number": 0},
                    {"in_node_id": 2, "out_node_id": 1, "weight": 1.5, "enabled": true, "innovation_number": 1}
                ],
                "fitness": 0.0,
                "adjusted_fitness": 0.0
            }
        """
        nodes = [{"id": node.id, "type": node.type.name} for node in self.node_genes.values()]

        connections = []
        for conn in self.conn_genes.values():
            connections.append({
                "in_node_id"       : conn.node_in,
                "out_node_id"      : conn.node_out,
                "weight"           : conn.weight,
                "enabled"          : conn.enabled,
                "innovation_number": conn.innovation
            })

        return {
            "nodes"           : nodes,
            "connections"     : connections,
            "fitness"         : self.fitness,
            "adjusted_fitness": self.adjusted_fitness
        }

    @classmethod
    def from_dict(cls, genome_dict: dict) -> 'Genome':
        """
        Create a Genome from a dictionary description (see to_dict() for the format).

        Parameters:
            genome_dict: Dictionary describing the genome

        Returns:
            A new Genome object with the specified structure

        Raises:
            SerializationError: If fields are missing or malformed, or if the
                                structure is invalid (duplicate IDs, dangling connections)
        """
        try:
            genome = cls()

            for node_data in genome_dict["nodes"]:
                node_id = int(node_data["id"])
                if node_id in genome.node_genes:
                    raise ValueError(f"Duplicate node ID {node_id}")
                genome.add_node_gene(NodeGene(node_id, NodeType[node_data["type"]]))

            for conn_data in genome_dict.get("connections", []):
                enabled = conn_data.get("enabled", True)
                if not isinstance(enabled, bool):
                    raise ValueError(f"Flag 'enabled' must be a boolean, got {enabled!r}")
                conn = ConnectionGene(int(conn_data["in_node_id"]),
                                      int(conn_data["out_node_id"]),
                                      float(conn_data["weight"]),
                                      int(conn_data["innovation_number"]),
                                      enabled)
                if conn.innovation in genome.conn_genes:
                    raise ValueError(f"Duplicate innovation number {conn.innovation}")
                if conn.node_in not in genome.node_genes or conn.node_out not in genome.node_genes:
                    raise ValueError(f"Connection {conn.innovation} references a non-existent node")
                genome.add_connection_gene(conn)

            genome.fitness          = float(genome_dict.get("fitness", 0.0))
            genome.adjusted_fitness = float(genome_dict.get("adjusted_fitness", 0.0))

        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError(f"Invalid genome description: {e}") from e

        return genome

    def to_json(self, indent: int | None = 2) -> str:
        """
        Serialize the genome into a JSON string.
        """
        try:
            return json.dumps(self.to_dict(), indent=indent)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Error serializing genome to JSON: {e}") from e

    @classmethod
    def from_json(cls, text: str) -> 'Genome':
        """
        Deserialize a genome from a JSON string.
        """
        try:
            genome_dict = json.loads(text)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Error deserializing genome from JSON: {e}") from e
        return cls.from_dict(genome_dict)

    def save(self, path: str | Path) -> None:
        """
        Write the genome to a JSON file.
        """
        text = self.to_json()
        try:
            Path(path).write_text(text)
        except OSError as e:
            raise SerializationError(f"Error writing genome to '{path}': {e}") from e

    @classmethod
    def load(cls, path: str | Path) -> 'Genome':
        """
        Read a genome from a JSON file.
        """
        try:
            text = Path(path).read_text()
        except OSError as e:
            raise SerializationError(f"Error reading genome from '{path}': {e}") from e
        return cls.from_json(text)

    def __str__(self):
        lines = ["Nodes:"]
        for node in sorted(self.node_genes.values(), key=lambda n: n.id):
            lines.append(f"  Node {node.id}: {node.type.name}")
        lines.append("Connections (Innovation, In -> Out, Weight, Enabled):")
        for conn in self.conn_genes.values():
            lines.append(f"  Innov {conn.innovation}: {conn.node_in} -> {conn.node_out}, "
                         f"w={conn.weight:.3f}, {'E' if conn.enabled else 'D'}")
        return "\n".join(lines)

    def __repr__(self):
        return (f"Genome(nodes={len(self.node_genes)}, connections={len(self.conn_genes)}, "
                f"fitness={self.fitness})")
