"""
NEAT Node Gene Module.

This module implements the NodeGene class and NodeType enumeration
for the NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    NodeType: Enumeration for node types (INPUT, HIDDEN, OUTPUT)
    NodeGene: Gene encoding a single network node
"""

from enum import Enum

class NodeType(Enum):
    """
    Nodes come in three types: input, hidden, output.
    """
    INPUT  = "I"
    HIDDEN = "H"
    OUTPUT = "O"

class NodeGene:
    """
    A gene describing a node in a Neural Network.

    A node gene is an immutable record made of an ID and a type. The ID is the
    node's identity: two genomes holding a node gene with the same ID hold
    "the same historical node", created once (at population seeding or by an
    add-node mutation) and inherited since.

    Node genes carry no parameters; the activation function applied by a
    node is chosen per role (hidden or output) by the configuration.

    Public Properties:
        id:   Unique identifier for this node
        type: Type of node (INPUT, HIDDEN, or OUTPUT)

    Public Methods:
        copy(): Return an identical node gene
    """

    __slots__ = ('_id', '_type')

    def __init__(self, node_id: int, node_type: NodeType):
        """
        Parameters:
            node_id:   Unique identifier for this node
            node_type: Type of node (INPUT, HIDDEN, or OUTPUT)
        """
        self._id  : int      = node_id
        self._type: NodeType = node_type

    @property
    def id(self) -> int:
        return self._id

    @property
    def type(self) -> NodeType:
        return self._type

    def copy(self) -> 'NodeGene':
        return NodeGene(self._id, self._type)

    def __eq__(self, other):
        if not isinstance(other, NodeGene):
            return NotImplemented
        return self._id == other._id and self._type == other._type

    def __hash__(self):
        return hash((self._id, self._type))

    def __repr__(self):
        return f"NodeGene(node_id={self._id}, node_type=NodeType.{self._type.name})"

    def __str__(self):
        return f"[{self._type.value}{self._id}]"
