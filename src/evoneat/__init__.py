"""
NEAT (NeuroEvolution of Augmenting Topologies) - A Python implementation.

This package provides an implementation of the NEAT algorithm for evolving
the topology and weights of artificial neural networks through genetic algorithms.
Networks are feed-forward or, optionally, recurrent.

Main components:
- genotype: Genetic encoding (genomes, genes, innovation tracking)
- phenotype: Neural network expression (feed-forward and recurrent networks)
- pool: Population and speciation management
- run: Configuration, evaluator interfaces and trial execution
- activations: Activation functions for neural networks
- errors: Exceptions raised by the package

Example:
    >>> from evoneat import Config, NeuralNetwork, Trial
    >>> config = Config("config.ini")
    >>> class MyTrial(Trial):
    ...     def _evaluate_fitness(self, genome):
    ...         network = NeuralNetwork.create(genome, config)
    ...         # Implement fitness evaluation
    ...         pass
    >>> trial = MyTrial(config)
    >>> trial.run()
"""

__version__ = "0.1.0"

# Import main classes for convenient access
from evoneat.errors import NeatError, StructuralError, InputSizeError, SerializationError
from evoneat.genotype.node_gene import NodeType, NodeGene
from evoneat.genotype.connection_gene import ConnectionGene
from evoneat.genotype.genome import Genome
from evoneat.genotype.innovation_tracker import InnovationTracker
from evoneat.phenotype.network import NeuralNetwork
from evoneat.pool.species import Species
from evoneat.pool.population import Population
from evoneat.run.config import Config
from evoneat.run.evaluators import FitnessEvaluator, GoalEvaluator
from evoneat.run.trial import Trial

__all__ = [
    "Config",
    "ConnectionGene",
    "FitnessEvaluator",
    "Genome",
    "GoalEvaluator",
    "InnovationTracker",
    "InputSizeError",
    "NeatError",
    "NeuralNetwork",
    "NodeGene",
    "NodeType",
    "Population",
    "SerializationError",
    "Species",
    "StructuralError",
    "Trial",
]
