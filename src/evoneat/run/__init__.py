"""
NEAT Run Package

This package connects the NEAT algorithm to a problem domain and drives complete runs.

Modules:
    config:     Config class, parsing INI configuration files
    evaluators: FitnessEvaluator and GoalEvaluator interfaces
    trial:      Trial class, one complete run of the algorithm

Exported Classes:
    Config:           Configuration parameters for a NEAT run
    FitnessEvaluator: Assigns fitness to every genome of a generation
    GoalEvaluator:    Decides whether a genome solves the problem
    Trial:            Abstract base class for one complete NEAT run
"""

from evoneat.run.config     import Config
from evoneat.run.evaluators import FitnessEvaluator, GoalEvaluator
from evoneat.run.trial      import Trial

__all__ = ['Config',
           'FitnessEvaluator',
           'GoalEvaluator',
           'Trial']
