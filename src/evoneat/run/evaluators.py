"""
NEAT Evaluators Module

This module defines the interfaces through which a NEAT run is connected to a
problem domain.

Classes:
    FitnessEvaluator: Assigns fitness to every genome of a generation
    GoalEvaluator:    Decides whether a genome solves the problem
"""

from abc    import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from evoneat.genotype import Genome

class FitnessEvaluator(ABC):
    """
    Abstract base class for fitness evaluation.

    The Population calls 'evaluate' once per generation, with all of its genomes.
    Implementations must set the 'fitness' attribute of every genome; they may
    build a NeuralNetwork from each genome to do so. Genomes are independent, so
    they can be evaluated in parallel, provided each evaluation creates its own
    network.
    """

    @abstractmethod
    def evaluate(self, genomes: list['Genome']) -> None:
        """
        Set the fitness of each genome.

        Parameters:
            genomes: the genomes of the current generation
        """
        pass

class GoalEvaluator(ABC):
    """
    Abstract base class for a definitive pass/fail check, distinct from the
    continuous fitness score, used to decide when to stop evolving.
    """

    @abstractmethod
    def is_goal_met(self, genome: 'Genome') -> bool:
        pass
