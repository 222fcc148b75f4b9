"""
NEAT Population Module

This module implements the Population class, the top-level orchestrator for the NEAT
evolutionary algorithm. The population manages the complete lifecycle of evolution,
one generation at a time.

Classes:
    Population: Top-level evolutionary coordinator managing genomes, species and generations
"""

import logging
import random
from typing import TYPE_CHECKING

from evoneat.genotype     import ConnectionGene, Genome, InnovationTracker
from evoneat.pool.species import Species

if TYPE_CHECKING:
    from evoneat.run.config     import Config
    from evoneat.run.evaluators import FitnessEvaluator

logger = logging.getLogger(__name__)

class Population:
    """
    A population of evolving genomes in the NEAT algorithm.

    The Population class represents the top-level container for the evolutionary
    process, managing a collection of genomes and coordinating their evolution
    through generations. It handles initialization, fitness evaluation (delegated
    to a FitnessEvaluator), speciation, stagnation removal and reproduction.

    Public Attributes:
        genomes: List of all genomes in the current generation

    Public Properties:
        generation:         Number of generations evolved so far
        species:            The current species
        species_count:      Number of current species
        innovation_tracker: The tracker shared by all mutations of this run
        champion:           Copy of the fittest genome of the last evaluated generation

    Public Methods:
        evolve():                 Evaluate the current generation and replace it with the next one
        best_genome():            Return the genome with highest fitness
        seed_from_genome(genome): Replace the population with variations of a given genome
    """

    def __init__(self,
                 config   : 'Config',
                 evaluator: 'FitnessEvaluator',
                 tracker  : InnovationTracker | None = None,
                 rng      : random.Random | None = None):
        """
        Initialize the population with 'population_size' randomly connected minimal genomes.

        Parameters:
            config:    Stores configuration parameters
            evaluator: Assigns fitness to the genomes of each generation
            tracker:   Innovation tracker (a new one is created if None)
            rng:       Random number generator (a new one, seeded with 'config.seed', if None)
        """
        if config.num_inputs is None or config.num_outputs is None:
            raise ValueError("The configuration must set 'num_inputs' and 'num_outputs'")

        self._config    = config
        self._evaluator = evaluator
        self._tracker   = tracker if tracker is not None else InnovationTracker(config.num_inputs, config.num_outputs)
        self._rng       = rng     if rng     is not None else random.Random(config.seed)

        self.genomes: list[Genome] = []
        self._species: list[Species] = []
        self._next_species_id: int = 0
        self._generation: int = 0
        self._champion: Genome | None = None

        self._initialize_genomes()

    def _initialize_genomes(self) -> None:
        """
        Create 'population_size' genomes with only input and output nodes, connected
        either fully (every input to every output) or by one random input->output connection.
        """
        config = self._config
        rng    = self._rng
        weight_range = config.new_connection_weight_range

        self.genomes = []
        for _ in range(config.population_size):
            genome = Genome.minimal(config.num_inputs, config.num_outputs)
            if config.start_fully_connected:
                pairs = [(inp.id, out.id) for inp in genome.input_nodes for out in genome.output_nodes]
            else:
                pairs = [(rng.choice(genome.input_nodes).id, rng.choice(genome.output_nodes).id)]

            for node_in, node_out in pairs:
                innovation = self._tracker.get_innovation_number(node_in, node_out)
                weight     = rng.uniform(-weight_range, weight_range)
                genome.add_connection_gene(ConnectionGene(node_in, node_out, weight, innovation))

            self.genomes.append(genome)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def species(self) -> list[Species]:
        return list(self._species)

    @property
    def species_count(self) -> int:
        return len(self._species)

    @property
    def innovation_tracker(self) -> InnovationTracker:
        return self._tracker

    @property
    def champion(self) -> Genome | None:
        return self._champion

    def best_genome(self) -> Genome | None:
        """
        Find and return the genome with the highest fitness in the population.

        Returns:
            The genome with the highest fitness value, or None if population is empty
        """
        if not self.genomes:
            return None
        return max(self.genomes, key=lambda genome: genome.fitness)

    def seed_from_genome(self, genome: Genome) -> None:
        """
        Replace the current genomes with a copy of 'genome' plus 'population_size - 1'
        copies of it, each mutated twice to create initial diversity.

        The innovation tracker is first primed with the seed, so that new
        mutations never reuse its node IDs or innovation numbers.
        """
        self._tracker.prime_from_population([genome])

        self.genomes = [genome.copy()]
        for _ in range(1, self._config.population_size):
            mutant = genome.copy()
            mutant.mutate(self._config, self._tracker, self._rng)
            mutant.mutate(self._config, self._tracker, self._rng)
            self.genomes.append(mutant)

    def evolve(self) -> None:
        """
        Run one generation of the NEAT algorithm.

        The steps are strictly ordered:
        1. Evaluation:  the fitness evaluator assigns fitness to every genome
        2. Speciation:  genomes are assigned to species, empty species are removed
        3. Culling:     fitness sharing, stagnation update, removal of stagnant species
        4. Reproduction: each species produces offspring in proportion to its adjusted fitness
        5. Advance the generation counter and clear the tracker's per-generation cache
        """
        self._evaluator.evaluate(self.genomes)
        best = self.best_genome()
        self._champion = best.copy() if best is not None else None

        self._speciate()
        self._update_and_cull_species()
        self._reproduce()

        self._generation += 1
        self._tracker.reset_for_next_generation()

    def _speciate(self) -> None:
        for species in self._species:
            species.reset(self._rng)

        threshold = self._config.compatibility_threshold
        for genome in self.genomes:
            for species in self._species:
                if Genome.compatibility_distance(genome, species.representative, self._config) < threshold:
                    species.add_member(genome)
                    break
            else:
                species = Species(self._next_species_id, genome)
                self._next_species_id += 1
                self._species.append(species)
                logger.debug("Generation %d: created species %d", self._generation, species.id)

        self._species = [species for species in self._species if species.members]

    def _update_and_cull_species(self) -> None:
        for species in self._species:
            species.calculate_adjusted_fitness()
            species.update_stagnation()

        # The last remaining species is never culled
        if len(self._species) > 1:
            limit = self._config.species_stagnation_limit
            surviving = []
            for species in self._species:
                if species.generations_without_improvement > limit:
                    logger.debug("Generation %d: removed stagnant species %d", self._generation, species.id)
                else:
                    surviving.append(species)
            self._species = surviving

    def _reproduce(self) -> None:
        config = self._config

        # Catastrophic extinction: start again from scratch
        if not self._species:
            logger.warning("Generation %d: all species went extinct, re-initializing the population",
                           self._generation)
            self._initialize_genomes()
            return

        total_adjusted = sum(species.adjusted_fitness_sum for species in self._species)

        next_generation: list[Genome] = []
        for species in self._species:
            if total_adjusted > 0:
                share = species.adjusted_fitness_sum / total_adjusted
            else:
                share = 1 / len(self._species)
            count = round(share * config.population_size)
            next_generation.extend(species.generate_offspring(count, config, self._tracker, self._rng))

        # Refill if rounding caused a shortfall
        while len(next_generation) < config.population_size:
            species = self._rng.choice(self._species)
            next_generation.extend(species.generate_offspring(1, config, self._tracker, self._rng))

        self.genomes = next_generation[:config.population_size]

    def __str__(self):
        return (f"Population(generation={self._generation}, genomes={len(self.genomes)}, "
                f"species={len(self._species)})")
