"""
NEAT Connection Gene Module

This module implements the ConnectionGene class for the
NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    ConnectionGene: Gene encoding a weighted connection between nodes
"""

class ConnectionGene:
    """
    A gene describing a weighted connection between two nodes in a Neural Network.

    Each connection gene represents a directed edge in the neural network graph,
    connecting a source node to a destination node with an associated weight.
    The endpoints are node IDs, resolved through the node genes of the genome
    holding the connection. Connection genes are uniquely identified by their
    innovation number, which serves as a historical marker enabling proper gene
    alignment during crossover and distance calculation.

    Connections can be enabled or disabled, allowing NEAT to preserve structural
    information while temporarily deactivating pathways.

    Public Attributes:
        node_in:    ID of the source node
        node_out:   ID of the destination node
        weight:     Weight of the connection
        enabled:    Whether this connection is active in the network
        innovation: Innovation number uniquely identifying this connection

    Public Methods:
        copy(): Return an independent copy of this gene
    """

    def __init__(self,
                 node_in   : int,
                 node_out  : int,
                 weight    : float,
                 innovation: int,
                 enabled   : bool = True):
        """
        Initialize a connection gene.

        Parameters:
            node_in:    ID of the source node
            node_out:   ID of the destination node
            weight:     Weight of the connection
            innovation: Number uniquely identifying this connection
            enabled:    Whether this connection is active in the network
        """
        self.node_in   : int   = node_in
        self.node_out  : int   = node_out
        self.weight    : float = weight
        self.enabled   : bool  = enabled
        self.innovation: int   = innovation

    def copy(self) -> 'ConnectionGene':
        return ConnectionGene(self.node_in, self.node_out, self.weight, self.innovation, self.enabled)

    def __eq__(self, other):
        if not isinstance(other, ConnectionGene):
            return NotImplemented
        return (self.node_in, self.node_out, self.weight, self.enabled, self.innovation) == \
               (other.node_in, other.node_out, other.weight, other.enabled, other.innovation)

    __hash__ = None   # mutable

    def __repr__(self):
        return (f"ConnectionGene(node_in={self.node_in:03d}, node_out={self.node_out:03d}, "
                f"weight={self.weight:+.6f}, innovation={self.innovation:03d}, enabled={self.enabled})")

    def __str__(self):
        s  = f"[{self.innovation:03d},{'E' if self.enabled else 'D'},"
        s += f"{self.node_in:02d}=>{self.node_out:02d},{self.weight:+.02f}]"
        return s
