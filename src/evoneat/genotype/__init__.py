"""
NEAT Genotype Package

This package implements the genotype representation for the NEAT (NeuroEvolution of
Augmenting Topologies) algorithm. It provides classes for encoding neural network
structures and parameters at the genetic level.

The NEAT genotype consists of two types of genes:
- Node genes:       Encode individual neurons (an ID and a type)
- Connection genes: Encode weighted connections between neurons with innovation numbers

Modules:
    node_gene:          NodeType enumeration and NodeGene class
    connection_gene:    ConnectionGene class
    genome:             Genome class
    innovation_tracker: InnovationTracker class

Exported Classes:
    NodeType:          Enumeration for node types (INPUT, HIDDEN, OUTPUT)
    NodeGene:          Gene encoding a single network node
    ConnectionGene:    Gene encoding a weighted connection between nodes
    Genome:            Complete genome representing a neural network
    InnovationTracker: Run-wide tracker for innovation numbers and node IDs
"""

from evoneat.genotype.connection_gene    import ConnectionGene
from evoneat.genotype.genome             import Genome
from evoneat.genotype.innovation_tracker import InnovationTracker
from evoneat.genotype.node_gene          import NodeType, NodeGene

__all__ = ['ConnectionGene',
           'Genome',
           'InnovationTracker',
           'NodeGene',
           'NodeType']
