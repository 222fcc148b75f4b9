"""
Integration tests: configuration files driving complete runs.
"""

import pytest

from evoneat.phenotype import NeuralNetwork
from evoneat.pool import Population
from evoneat.run.config import Config
from evoneat.run.evaluators import FitnessEvaluator


class OutputSumEvaluator(FitnessEvaluator):
    """Rewards large outputs for an all-ones input."""

    def __init__(self, config):
        self.config = config

    def evaluate(self, genomes):
        for genome in genomes:
            network = NeuralNetwork.create(genome, self.config)
            genome.fitness = sum(network.activate([1.0] * self.config.num_inputs))


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text(
        "[POPULATION_INIT]\n"
        "population_size = 25\n"
        "num_inputs = 3\n"
        "num_outputs = 2\n"
        "start_fully_connected = True\n"
        "seed = 9\n"
        "\n"
        "[STRUCTURAL_MUTATIONS]\n"
        "add_node_rate = 0.2\n"
        "\n"
        "[NODE]\n"
        "hidden_activation = tanh\n"
        "output_activation = sigmoid\n"
    )
    return path


class TestConfigDrivenRun:
    """A configuration file fully determines a run."""

    def test_population_follows_config(self, config_file):
        config = Config(str(config_file))
        population = Population(config, OutputSumEvaluator(config))
        assert len(population.genomes) == 25
        assert all(len(g.conn_genes) == 6 for g in population.genomes)

    def test_seeded_runs_are_reproducible(self, config_file):
        results = []
        for _ in range(2):
            config = Config(str(config_file))
            population = Population(config, OutputSumEvaluator(config))
            for _ in range(5):
                population.evolve()
            results.append([g.to_dict() for g in population.genomes])
        assert results[0] == results[1]

    def test_champion_fitness_is_bounded(self, config_file):
        config = Config(str(config_file))
        population = Population(config, OutputSumEvaluator(config))
        champions = []
        for _ in range(10):
            population.evolve()
            champions.append(population.champion.fitness)
        # two sigmoid outputs
        assert all(0.0 <= fitness <= 2.0 for fitness in champions)
        assert max(champions) >= champions[0]
