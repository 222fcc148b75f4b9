"""
Unit tests for the NeuralNetwork, Neuron and Synapse classes.

Tests cover network compilation, topological sorting, cycle detection,
feed-forward and recurrent activation, introspection and visualization.
"""

import graphviz
import pytest

from evoneat.activations import sigmoid_activation
from evoneat.errors import InputSizeError, NeatError, StructuralError
from evoneat.genotype import ConnectionGene, Genome, NodeGene, NodeType
from evoneat.phenotype import NeuralNetwork, Neuron, Synapse
from evoneat.run.config import Config


# ============================================================================
# Test Fixtures
# ============================================================================

@pytest.fixture
def config():
    return Config()


@pytest.fixture
def recurrent_config():
    config = Config()
    config.allow_recurrent = True
    return config


def make_genome(nodes, connections):
    genome = Genome()
    for node_id, node_type in nodes:
        genome.add_node_gene(NodeGene(node_id, node_type))
    for conn in connections:
        genome.add_connection_gene(ConnectionGene(*conn))
    return genome


I, H, O = NodeType.INPUT, NodeType.HIDDEN, NodeType.OUTPUT


@pytest.fixture
def hidden_layer_genome():
    """input 0 -> hidden 3 (weight 0.5) -> output 2 (weight 0.8); input 1 unconnected."""
    return make_genome([(0, I), (1, I), (2, O), (3, H)],
                       [(0, 3, 0.5, 0), (3, 2, 0.8, 1)])


@pytest.fixture
def cyclic_genome():
    """Hidden nodes 3 and 4 feed each other."""
    return make_genome([(0, I), (1, I), (2, O), (3, H), (4, H)],
                       [(0, 3, 1.0, 0), (3, 4, 1.0, 1), (4, 3, 1.0, 2), (4, 2, 1.0, 3)])


# ============================================================================
# Test Neuron and Synapse
# ============================================================================

class TestNeuron:
    """Test the Neuron building block."""

    def test_calculate_applies_activation_to_weighted_sum(self):
        source1 = Neuron(0, I, None)
        source2 = Neuron(1, I, None)
        source1.output, source2.output = 1.0, 2.0
        target = Neuron(2, O, lambda z: 10 * z)
        target.inputs = [Synapse(source1, 0.5), Synapse(source2, -0.25)]
        target.calculate()
        assert target.output == pytest.approx(0.0)

    def test_no_inputs_sees_zero(self):
        neuron = Neuron(2, O, sigmoid_activation)
        neuron.calculate()
        assert neuron.output == pytest.approx(0.5)

    def test_initial_output_is_zero(self):
        assert Neuron(0, I, None).output == 0.0


# ============================================================================
# Test Construction
# ============================================================================

class TestCreate:
    """Test compiling genomes into networks."""

    def test_feed_forward_sorts_all_nodes(self, config, hidden_layer_genome):
        network = NeuralNetwork.create(hidden_layer_genome, config)
        order = [n.id for n in network.neurons]
        assert sorted(order) == [0, 1, 2, 3]
        assert order.index(0) < order.index(3) < order.index(2)
        assert network.is_recurrent is False

    def test_input_and_output_neurons_follow_declaration_order(self, config):
        genome = make_genome([(1, I), (0, I), (4, O), (3, O)], [])
        network = NeuralNetwork.create(genome, config)
        assert [n.id for n in network.input_neurons]  == [1, 0]
        assert [n.id for n in network.output_neurons] == [4, 3]

    def test_disabled_connections_are_not_expressed(self, config):
        genome = make_genome([(0, I), (1, O)], [(0, 1, 0.5, 0, False)])
        network = NeuralNetwork.create(genome, config)
        assert network.number_connections_enabled == 0
        assert network.number_nodes == 2

    def test_activation_functions_per_role(self, config, hidden_layer_genome):
        config.hidden_activation = "relu"
        config.output_activation = "identity"
        network = NeuralNetwork.create(hidden_layer_genome, config)
        by_id = {n.id: n for n in network.neurons}
        assert by_id[0].activation is None
        assert by_id[3].activation is config.hidden_activation_function
        assert by_id[2].activation is config.output_activation_function

    def test_connection_to_unknown_node_is_skipped(self, config):
        genome = make_genome([(0, I), (1, O)], [(0, 1, 0.5, 0), (7, 1, 0.5, 1)])
        network = NeuralNetwork.create(genome, config)
        assert network.number_connections_enabled == 1

    def test_cycle_raises_structural_error(self, config, cyclic_genome):
        with pytest.raises(StructuralError, match="cycle"):
            NeuralNetwork.create(cyclic_genome, config)

    def test_structural_error_is_neat_error(self, config, cyclic_genome):
        with pytest.raises(NeatError):
            NeuralNetwork.create(cyclic_genome, config)

    @pytest.mark.parametrize("num_hidden", [1, 2, 5, 10])
    def test_cycle_detected_regardless_of_size(self, config, num_hidden):
        """A ring of hidden nodes is always rejected."""
        nodes = [(0, I), (1, O)] + [(2 + i, H) for i in range(num_hidden)]
        conns = [(0, 2, 1.0, 0)]
        for i in range(num_hidden):
            conns.append((2 + i, 2 + (i + 1) % num_hidden, 1.0, 1 + i))
        conns.append((2, 1, 1.0, 100))
        with pytest.raises(StructuralError):
            NeuralNetwork.create(make_genome(nodes, conns), config)

    def test_disabled_cycle_is_fine(self, config, cyclic_genome):
        cyclic_genome.conn_genes[2].enabled = False
        network = NeuralNetwork.create(cyclic_genome, config)
        assert network.number_nodes == 5

    def test_cycle_allowed_when_recurrent(self, recurrent_config, cyclic_genome):
        network = NeuralNetwork.create(cyclic_genome, recurrent_config)
        assert network.is_recurrent is True

    def test_try_create_returns_error(self, config, cyclic_genome):
        result = NeuralNetwork.try_create(cyclic_genome, config)
        assert isinstance(result, StructuralError)

    def test_try_create_returns_network(self, config, hidden_layer_genome):
        result = NeuralNetwork.try_create(hidden_layer_genome, config)
        assert isinstance(result, NeuralNetwork)


# ============================================================================
# Test Feed-Forward Activation
# ============================================================================

class TestFeedForwardActivation:
    """Test single-pass activation of feed-forward networks."""

    def test_single_connection(self, config):
        genome = make_genome([(0, I), (1, I), (2, O)], [(0, 2, 0.5, 0)])
        network = NeuralNetwork.create(genome, config)
        assert network.activate([1.0, 0.0]) == [pytest.approx(sigmoid_activation(0.5))]

    def test_hidden_layer(self, config, hidden_layer_genome):
        network = NeuralNetwork.create(hidden_layer_genome, config)
        expected = sigmoid_activation(sigmoid_activation(0.5) * 0.8)
        assert network.activate([1.0, 0.0]) == [pytest.approx(expected)]

    def test_deterministic(self, config, hidden_layer_genome):
        network = NeuralNetwork.create(hidden_layer_genome, config)
        first  = network.activate([0.3, -0.7])
        second = network.activate([0.3, -0.7])
        assert first == second

    def test_steps_ignored(self, config, hidden_layer_genome):
        network = NeuralNetwork.create(hidden_layer_genome, config)
        assert network.activate([1.0, 0.0], steps=5) == network.activate([1.0, 0.0])

    def test_multiple_outputs_in_declaration_order(self, config):
        config.output_activation = "identity"
        genome = make_genome([(0, I), (2, O), (1, O)], [(0, 1, 2.0, 0), (0, 2, 3.0, 1)])
        network = NeuralNetwork.create(genome, config)
        assert network.activate([1.0]) == [pytest.approx(3.0), pytest.approx(2.0)]

    def test_wrong_input_size(self, config, hidden_layer_genome):
        network = NeuralNetwork.create(hidden_layer_genome, config)
        with pytest.raises(InputSizeError, match="Expected 2 inputs, got 3"):
            network.activate([1.0, 0.0, 1.0])

    def test_input_size_error_is_value_error(self, config, hidden_layer_genome):
        network = NeuralNetwork.create(hidden_layer_genome, config)
        with pytest.raises(ValueError):
            network.activate([1.0])


# ============================================================================
# Test Recurrent Activation
# ============================================================================

class TestRecurrentActivation:
    """Test step-wise activation of recurrent networks."""

    @pytest.fixture
    def loop_genome(self):
        """
        input 0 -> hidden 2 -> output 1 -> hidden 2 (a loop through the output).
        The hidden node is declared before the output node, so an in-place
        update would feed the output this step's hidden value.
        """
        return make_genome([(0, I), (2, H), (1, O)],
                           [(0, 2, 1.0, 0), (2, 1, 1.0, 1), (1, 2, 0.5, 2)])

    def test_two_steps_use_previous_step_values(self, recurrent_config, loop_genome):
        network = NeuralNetwork.create(loop_genome, recurrent_config)
        # step 1: all values start at 0, hidden = sigmoid(0) = 0.5
        # step 2: output reads the step-1 hidden value
        assert network.activate([1.0], steps=2) == [pytest.approx(sigmoid_activation(0.5))]

    def test_default_is_two_steps(self, recurrent_config, loop_genome):
        network = NeuralNetwork.create(loop_genome, recurrent_config)
        assert network.activate([1.0]) == network.activate([1.0], steps=2)

    def test_one_step(self, recurrent_config, loop_genome):
        network = NeuralNetwork.create(loop_genome, recurrent_config)
        assert network.activate([1.0], steps=1) == [pytest.approx(0.5)]

    def test_three_steps(self, recurrent_config, loop_genome):
        network = NeuralNetwork.create(loop_genome, recurrent_config)
        hidden2 = sigmoid_activation(1.0 + 0.5 * 0.5)
        assert network.activate([1.0], steps=3) == [pytest.approx(sigmoid_activation(hidden2))]

    def test_state_is_reset_between_calls(self, recurrent_config, loop_genome):
        network = NeuralNetwork.create(loop_genome, recurrent_config)
        first = network.activate([1.0], steps=3)
        assert network.activate([1.0], steps=3) == first

    def test_recurrent_uses_sigmoid(self, recurrent_config):
        recurrent_config.output_activation = "identity"
        genome = make_genome([(0, I), (1, O)], [(0, 1, 0.5, 0)])
        network = NeuralNetwork.create(genome, recurrent_config)
        assert network.activate([1.0]) == [pytest.approx(sigmoid_activation(0.5))]

    def test_wrong_input_size(self, recurrent_config, loop_genome):
        network = NeuralNetwork.create(loop_genome, recurrent_config)
        with pytest.raises(InputSizeError):
            network.activate([])


# ============================================================================
# Test Visualization
# ============================================================================

class TestVisualize:
    """Test rendering the network with Graphviz (DOT source only)."""

    def test_returns_digraph(self, config, hidden_layer_genome):
        network = NeuralNetwork.create(hidden_layer_genome, config)
        dot = network.visualize()
        assert isinstance(dot, graphviz.Digraph)

    def test_contains_nodes_and_edges(self, config, hidden_layer_genome):
        network = NeuralNetwork.create(hidden_layer_genome, config)
        source = network.visualize().source
        assert "cluster_hidden" in source
        assert "3 -> 2" in source
        assert "0.80" in source

    def test_str(self, config, hidden_layer_genome):
        network = NeuralNetwork.create(hidden_layer_genome, config)
        text = str(network)
        assert "feed-forward" in text
        assert "4 nodes, 2 connections" in text
