"""
NEAT Phenotype Package

This package implements the phenotype representation for the NEAT (NeuroEvolution
of Augmenting Topologies) algorithm. It provides the classes expressing genomes as
executable neural networks.

Modules:
    network: Neurons, synapses and the network compiled from a genome

Exported Classes:
    NeuralNetwork: Feed-forward or recurrent network compiled from a genome
    Neuron:        A computational node applying an activation function
    Synapse:       A weighted link from a source neuron
"""

from evoneat.phenotype.network import NeuralNetwork, Neuron, Synapse

__all__ = ['NeuralNetwork',
           'Neuron',
           'Synapse']
