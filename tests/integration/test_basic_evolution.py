"""
Integration tests for basic NEAT evolution.

These tests run the full loop (population, speciation, reproduction,
network compilation and activation) on small problems. They use a
fixed seed and check properties of the run rather than exact results.
"""

from evoneat.errors import StructuralError
from evoneat.genotype import Genome
from evoneat.phenotype import NeuralNetwork
from evoneat.pool import Population
from evoneat.run.evaluators import FitnessEvaluator, GoalEvaluator
from evoneat.run.trial import Trial


# ============================================================================
# Helper Classes for XOR
# ============================================================================

class TrialXORTest(Trial, GoalEvaluator):
    """Simplified XOR trial for integration testing."""

    def __init__(self, config, xor_inputs, xor_outputs, **kwargs):
        super().__init__(config, suppress_output=True, **kwargs)
        self.xor_inputs  = xor_inputs
        self.xor_outputs = xor_outputs
        self.networks_built = 0

    def _evaluate_fitness(self, genome):
        """Evaluate XOR fitness: 4 minus the squared error."""
        network = NeuralNetwork.create(genome, self._config)
        self.networks_built += 1
        fitness = 4.0
        for inputs, expected in zip(self.xor_inputs, self.xor_outputs):
            output = network.activate(inputs)
            fitness -= (output[0] - expected) ** 2
        return fitness

    def is_goal_met(self, genome):
        network = NeuralNetwork.try_create(genome, self._config)
        if isinstance(network, StructuralError):
            return False
        return all(round(network.activate(inputs)[0]) == expected
                   for inputs, expected in zip(self.xor_inputs, self.xor_outputs))


class XorEvaluator(FitnessEvaluator):
    """Plain evaluator, used directly by a Population."""

    def __init__(self, config, xor_inputs, xor_outputs):
        self.config = config
        self.xor_inputs = xor_inputs
        self.xor_outputs = xor_outputs

    def evaluate(self, genomes):
        for genome in genomes:
            network = NeuralNetwork.try_create(genome, self.config)
            if isinstance(network, StructuralError):
                genome.fitness = 0.0
                continue
            error = sum((network.activate(i)[0] - o) ** 2 for i, o in zip(self.xor_inputs, self.xor_outputs))
            genome.fitness = 4.0 - error


# ============================================================================
# Test Basic Evolution
# ============================================================================

class TestXOREvolution:
    """Evolve networks for the XOR problem."""

    def test_trial_improves_fitness(self, xor_config, xor_inputs, xor_outputs):
        trial = TrialXORTest(xor_config, xor_inputs, xor_outputs)
        final = trial.run()

        assert final is not None
        assert trial.networks_built >= xor_config.population_size
        # a constant output of 0.5 scores 3.0
        assert trial.all_time_best.fitness >= 2.5
        assert trial.all_time_best.fitness <= 4.0

    def test_final_genome_is_a_valid_network(self, xor_config, xor_inputs, xor_outputs):
        trial = TrialXORTest(xor_config, xor_inputs, xor_outputs, prune_champion=False)
        final = trial.run()
        NeuralNetwork.create(final.prune(), xor_config)
        network = NeuralNetwork.create(final, xor_config)
        outputs = [network.activate(inputs)[0] for inputs in xor_inputs]
        assert all(0.0 <= value <= 1.0 for value in outputs)

    def test_population_grows_structure(self, xor_config, xor_inputs, xor_outputs):
        xor_config.add_node_rate = 0.2
        xor_config.add_connection_rate = 0.3
        population = Population(xor_config, XorEvaluator(xor_config, xor_inputs, xor_outputs))
        for _ in range(10):
            population.evolve()
        assert any(genome.hidden_nodes for genome in population.genomes)
        assert len(population.genomes) == xor_config.population_size

    def test_feed_forward_genomes_stay_acyclic(self, xor_config, xor_inputs, xor_outputs):
        """Mutation never adds a cycle when recurrence is disallowed."""
        xor_config.add_node_rate = 0.2
        xor_config.add_connection_rate = 0.5
        xor_config.toggle_enable_rate = 0.0
        population = Population(xor_config, XorEvaluator(xor_config, xor_inputs, xor_outputs))
        for _ in range(10):
            population.evolve()
            for genome in population.genomes:
                NeuralNetwork.create(genome, xor_config)

    def test_recurrent_evolution(self, xor_config, xor_inputs, xor_outputs):
        xor_config.allow_recurrent = True
        xor_config.add_connection_rate = 0.5
        xor_config.add_node_rate = 0.2
        xor_config.max_number_generations = 10
        trial = TrialXORTest(xor_config, xor_inputs, xor_outputs, prune_champion=False)
        final = trial.run()
        network = NeuralNetwork.create(final, xor_config)
        assert network.is_recurrent
        assert len(network.activate([1.0, 0.0])) == 1


class TestChampionPersistence:
    """Save the champion of a run and use it to seed another."""

    def test_save_and_reseed(self, xor_config, xor_inputs, xor_outputs, tmp_path):
        path = tmp_path / "champion.json"
        xor_config.max_number_generations = 5
        first = TrialXORTest(xor_config, xor_inputs, xor_outputs, prune_champion=False, save_path=path)
        first.run()

        seed = Genome.load(path)
        second = TrialXORTest(xor_config, xor_inputs, xor_outputs)
        final = second.run(seed_genome=seed)

        assert final.fitness >= seed.fitness
        tracker = second.population.innovation_tracker
        assert tracker.next_node_id > max(seed.node_genes)
