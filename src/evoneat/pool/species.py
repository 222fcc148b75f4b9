"""
NEAT Species Module

This module implements the Species class for the NEAT algorithm.
A species represents a cluster of genetically similar genomes
that compete primarily within their own niche.

Classes:
    Species: Represents a single species with members and stagnation tracking
"""

import math
import random
from typing import TYPE_CHECKING

from evoneat.genotype import Genome
if TYPE_CHECKING:
    from evoneat.genotype import InnovationTracker
    from evoneat.run.config import Config

class Species:
    """
    A species representing a cluster of genetically similar genomes in NEAT.

    In NEAT, the population is divided into species based on genetic similarity,
    allowing different evolutionary niches to develop independently. This protects
    innovative structures from being eliminated by competition with more mature
    solutions, as genomes only compete for resources within their own species.

    Each species maintains a representative genome used for distance calculations
    during speciation. A genome joins the first species whose representative is
    closer than the compatibility threshold.

    Public Attributes:
        id:                              Unique species identifier
        representative:                  Genome used for distance calculations during speciation
        members:                         The genomes that are part of this species
        top_fitness:                     Best raw fitness seen since the last reset
        generations_without_improvement: Stagnation counter

    Public Properties:
        average_fitness:      Mean raw fitness of the members (0.0 if there are none)
        adjusted_fitness_sum: Sum of the members' adjusted fitness

    Public Methods:
        add_member(genome):                                Add a genome to this species
        calculate_adjusted_fitness():                      Explicit fitness sharing among the members
        update_stagnation():                               Update the stagnation counter
        generate_offspring(count, config, tracker, rng):   Generate this species' share of the next generation
        reset(rng):                                        Prepare species for a new round of speciation

    Life Cycle:
    1. Created when a genome doesn't fit into existing species
    2. Accumulates members during speciation based on genetic similarity
    3. Shares fitness among its members and tracks stagnation
    4. Spawns offspring proportional to its share of the adjusted fitness
    5. Representative is re-drawn from the members each generation
    6. Removed if stagnant or left without members
    """

    def __init__(self, species_id: int, representative: Genome):
        """
        Initialize a new species; the representative is its first member.

        Parameters:
            species_id:     unique species identifier
            representative: the Genome that represents this species in the speciation process
        """
        self.id            : int          = species_id
        self.representative: Genome       = representative
        self.members       : list[Genome] = [representative]

        self.top_fitness                    : float = 0.0
        self.generations_without_improvement: int   = 0

    def add_member(self, genome: Genome) -> None:
        self.members.append(genome)

    @property
    def average_fitness(self) -> float:
        if not self.members:
            return 0.0
        return sum(genome.fitness for genome in self.members) / len(self.members)

    @property
    def adjusted_fitness_sum(self) -> float:
        return sum(genome.adjusted_fitness for genome in self.members)

    def calculate_adjusted_fitness(self) -> None:
        """
        Explicit fitness sharing: each member's raw fitness is divided by the species size.
        """
        size = len(self.members)
        for genome in self.members:
            genome.adjusted_fitness = genome.fitness / size

    def update_stagnation(self) -> None:
        """
        Compare the best raw fitness of the current members with the species' best.
        The stagnation counter is reset on improvement, incremented otherwise.
        """
        current_top = max((genome.fitness for genome in self.members), default=0.0)
        if current_top > self.top_fitness:
            self.top_fitness = current_top
            self.generations_without_improvement = 0
        else:
            self.generations_without_improvement += 1

    def generate_offspring(self,
                           count  : int,
                           config : 'Config',
                           tracker: 'InnovationTracker',
                           rng    : random.Random) -> list[Genome]:
        """
        Generate offspring for the next generation through elitism and reproduction.

        The spawning process:
        1. Sort all members by raw fitness (highest first)
        2. Copy the elite members unchanged: ceil(members * elitism fraction), at most 'count'
        3. Fill the remaining slots: with probability 'crossover_rate' (and at least
           two members) cross over two random members, otherwise clone a random member;
           mutate every such child once

        Parameters:
            count:   number of genomes this species should produce
            config:  stores configuration parameters
            tracker: innovation tracker used by mutation
            rng:     random number generator

        Returns:
            List of offspring genomes for the next generation
        """
        if count <= 0 or not self.members:
            return []

        self.members.sort(key=lambda genome: genome.fitness, reverse=True)

        elite_count = min(math.ceil(len(self.members) * config.species_elitism_fraction), count)
        offspring   = [genome.copy() for genome in self.members[:elite_count]]

        while len(offspring) < count:
            if len(self.members) > 1 and rng.random() < config.crossover_rate:
                parent1 = rng.choice(self.members)
                parent2 = rng.choice(self.members)
                child   = Genome.crossover(parent1, parent2, rng)
            else:
                child = rng.choice(self.members).copy()
            child.mutate(config, tracker, rng)
            offspring.append(child)

        return offspring

    def reset(self, rng: random.Random) -> None:
        """
        Resets the species in preparation of being assigned the genomes of a new generation.
        A new representative is drawn from the current members (the old one is kept if
        there are none), then the members are cleared and the best fitness is zeroed.
        """
        if self.members:
            self.representative = rng.choice(self.members)
        self.members     = []
        self.top_fitness = 0.0

    def __repr__(self):
        return (f"Species(id={self.id}, members={len(self.members)}, "
                f"stagnation={self.generations_without_improvement})")
