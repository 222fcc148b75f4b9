"""
NEAT Trial Module

This module defines the abstract base class for NEAT trials with built-in
support for CPU-based parallelization using joblib.

A trial represents one independent run of the NEAT algorithm, evolving a
population through generations until a solution is found or the maximum
number of generations is reached.
"""

from abc     import ABC, abstractmethod
from joblib  import Parallel, delayed
from pathlib import Path
import random

from evoneat.errors         import StructuralError
from evoneat.genotype       import Genome
from evoneat.pool           import Population
from evoneat.run.config     import Config
from evoneat.run.evaluators import FitnessEvaluator, GoalEvaluator

class Trial(FitnessEvaluator, ABC):
    """
    Abstract base class for implementing a NEAT trial.

    A trial represents one independent run of the NEAT algorithm, evolving a
    population through generations until a solution is found or the maximum
    number of generations is reached. The trial is the population's fitness
    evaluator: it scores each genome with '_evaluate_fitness'.

    Subclasses must implement:
    - _evaluate_fitness(genome): Evaluate fitness for a single genome

    Subclasses can override:
    - _reset():           Reset trial-specific state (call super()._reset())
    - _report_progress(): Display progress after each generation
    - _final_report():    Display final results
    - _terminate():       Custom termination logic (default: fitness threshold + goal check)

    A subclass which also derives from GoalEvaluator is its own goal evaluator,
    unless another one is given to the constructor.

    Public Attributes:
        failed:        True unless the fitness threshold or the goal was reached
        all_time_best: Copy of the fittest genome seen during the run
        final_genome:  The genome produced by the run (pruned, if requested)

    Public Methods:
        evaluate(genomes):   Set the fitness of all genomes (FitnessEvaluator interface)
        run(seed_genome):    Execute a complete NEAT trial

    Parallelization of fitness evaluation:
        num_jobs=1:  Serial evaluation (no parallelization)
        num_jobs>1:  Use specified number of parallel processes
        num_jobs=-1: Use all available CPU cores
    """

    def __init__(self,
                 config         : Config,
                 num_jobs       : int = 1,
                 goal_evaluator : GoalEvaluator | None = None,
                 prune_champion : bool = True,
                 save_path      : str | Path | None = None,
                 suppress_output: bool = False):
        """
        Initialize the trial.

        Parameters:
            config:          Configuration parameters
            num_jobs:        Number of parallel processes for fitness evaluation
            goal_evaluator:  Optional pass/fail check used to stop the run early
            prune_champion:  Whether the final genome keeps only its enabled connections
            save_path:       If given, the final genome is saved there as JSON
            suppress_output: If True, suppress progress and final reports
                             (useful when running multiple trials)
        """
        if goal_evaluator is None and isinstance(self, GoalEvaluator):
            goal_evaluator = self

        self._config         : Config               = config
        self._num_jobs       : int                  = num_jobs
        self._goal_evaluator : GoalEvaluator | None = goal_evaluator
        self._prune_champion : bool                 = prune_champion
        self._save_path      : Path | None          = Path(save_path) if save_path is not None else None
        self._suppress_output: bool                 = suppress_output

        self._population        : Population | None = None
        self._generation_counter: int               = 0
        self._goal_met          : bool              = False

        self.failed       : bool          = True
        self.all_time_best: Genome | None = None
        self.final_genome : Genome | None = None

    @property
    def population(self) -> Population | None:
        return self._population

    def __getstate__(self):
        # Worker processes only need '_evaluate_fitness'; the population holds a lock
        state = self.__dict__.copy()
        state['_population'] = None
        return state

    def run(self, seed_genome: Genome | None = None, rng: random.Random | None = None) -> Genome | None:
        """
        Run the trial.

        Resets the trial state and runs the evolutionary
        algorithm until the terminate condition is met.

        Parameters:
            seed_genome: If given, the initial population is made of variations of this genome
            rng:         Random number generator for the population (seeded from the config if None)

        Returns:
            The final genome (see 'final_genome')
        """
        # Reset the trial state before starting a new run
        self._reset()

        # Create the initial population
        self._population = Population(self._config, self, rng=rng)
        if seed_genome is not None:
            self._population.seed_from_genome(seed_genome)
            self.all_time_best = seed_genome.copy()

        # Evolution loop
        while self._generation_counter < self._config.max_number_generations:

            # Evaluate the current generation, then breed the next one
            self._population.evolve()
            self._generation_counter = self._population.generation

            champion = self._population.champion
            new_best = self.all_time_best is None or champion.fitness > self.all_time_best.fitness
            if new_best:
                self.all_time_best = champion.copy()

            # Display progress after each generation
            if not self._suppress_output:
                self._report_progress(champion, new_best)

            if self._terminate(champion, new_best):
                break

        # Produce the final genome
        if self.all_time_best is not None:
            self.final_genome = self.all_time_best.prune() if self._prune_champion else self.all_time_best
            if self._save_path is not None:
                self.final_genome.save(self._save_path)

        # Produce final report
        if not self._suppress_output:
            self._final_report()

        return self.final_genome

    def _reset(self):
        """
        Reset the trial state before starting a new run.

        Subclasses should call super()._reset() and then
        initialize their problem-specific data.
        """
        self._population         = None
        self._generation_counter = 0
        self._goal_met           = False
        self.failed              = True
        self.all_time_best       = None
        self.final_genome        = None

    @abstractmethod
    def _evaluate_fitness(self, genome: Genome) -> float:
        """
        Evaluate and return the fitness of a genome.

        This method should build the genome's neural network, test it on the
        problem domain and compute a fitness score. Higher fitness values
        indicate better performance and higher probability of procreating.

        IMPORTANT: The fitness must be a positive number (or zero).

        Parameters:
            genome: The Genome to evaluate

        Returns:
            float: Fitness score for the genome
        """
        pass

    def _fitness_or_zero(self, genome: Genome) -> float:
        """
        A genome which cannot be expressed as a network gets zero fitness.
        """
        try:
            return self._evaluate_fitness(genome)
        except StructuralError:
            return 0.0

    def evaluate(self, genomes: list[Genome]) -> None:
        """
        Evaluate fitness for all genomes in the population.

        Uses serial or parallel evaluation based on 'num_jobs':
        - num_jobs=1: Sequential evaluation in single process
        - num_jobs>1 or -1: Parallel evaluation using joblib

        Parameters:
            genomes: the genomes whose 'fitness' is set
        """
        serialize = self._num_jobs == 1

        if serialize:
            for genome in genomes:
                genome.fitness = self._fitness_or_zero(genome)
        else:
            fitness_all = Parallel(self._num_jobs)(delayed(self._fitness_or_zero)(g) for g in genomes)
            for genome, fitness in zip(genomes, fitness_all):
                genome.fitness = fitness

    def _terminate(self, champion: Genome, new_best: bool) -> bool:
        """
        Determine whether the trial should stop before the maximum number of generations.

        This default implementation stops the trial if the champion of the last
        generation reaches the fitness threshold (if any), or if it passes the
        goal check. The goal is checked when a new best genome was found, and
        otherwise once every 'goal_check_interval' generations.

        Parameters:
            champion: the fittest genome of the last generation
            new_best: whether the champion is better than all previous genomes

        Returns:
            bool: True if the trial should stop, False otherwise
        """
        threshold = self._config.fitness_threshold
        if threshold is not None and champion.fitness >= threshold:
            self.failed = False
            return True

        if self._goal_evaluator is None:
            return False

        interval = self._config.goal_check_interval
        if new_best or (interval and self._generation_counter % interval == 0):
            if self._goal_evaluator.is_goal_met(champion):
                self._goal_met     = True
                self.failed        = False
                self.all_time_best = champion.copy()
                return True

        return False

    def _report_progress(self, champion: Genome, new_best: bool):
        """
        Report trial progress after each generation.

        This method is suppressed by setting 'suppress_output' to 'True',
        which we might do when running many trials.
        """
        print(f"Generation: {self._generation_counter:4d}, "
              f"Best Fitness: {champion.fitness:.3f}, "
              f"Species: {self._population.species_count}"
              f"{'  (new best)' if new_best else ''}")

    def _final_report(self):
        """
        Produce final report at the end of the trial.

        This method is suppressed by setting 'suppress_output' to 'True',
        which we might do when running many trials.
        """
        if self.final_genome is None:
            print("No viable genome was evolved or found.")
            return

        if self._goal_met:
            print(f"\nSUCCESS! Goal achieved in generation {self._generation_counter}")
        elif not self.failed:
            print(f"\nSUCCESS! Fitness threshold reached in generation {self._generation_counter}")
        else:
            print(f"\nFAILURE: no solution after {self._generation_counter} generations")

        print(f"\n--- {'Pruned ' if self._prune_champion else ''}Final Genome Topology "
              f"(fitness {self.final_genome.fitness:.3f}) ---")
        print(self.final_genome)
        if self._save_path is not None:
            print(f"Saved final genome to: {self._save_path.resolve()}")
