"""
NEAT Network Module

This module implements the phenotype representation for the NEAT algorithm.
It provides classes for expressing a genome as an executable neural network,
using an Object Oriented approach to representing Neurons, Synapses and the Network.

A network is either feed-forward (activated once, in topological order) or
recurrent (activated over several discrete time steps, each step reading only
the values computed by the previous one).

Classes:
    Synapse:       A weighted link from a source neuron
    Neuron:        A computational node applying an activation function
    NeuralNetwork: A neural network compiled from a genome
"""

from collections import deque
from typing      import Callable, Optional, Sequence, TYPE_CHECKING
import graphviz  # type: ignore

from evoneat.activations        import sigmoid_activation
from evoneat.errors             import InputSizeError, StructuralError
from evoneat.genotype.node_gene import NodeType

if TYPE_CHECKING:
    from evoneat.genotype import Genome
    from evoneat.run.config import Config

class Synapse:
    """
    A weighted link feeding the output of a source neuron into another neuron.

    The synapse only references its source; the network owns all neurons.
    """

    __slots__ = ('source', 'weight')

    def __init__(self, source: 'Neuron', weight: float):
        self.source: Neuron = source
        self.weight: float  = weight

    def __repr__(self):
        return f"Synapse(source={self.source.id}, weight={self.weight})"

class Neuron:
    """
    A computational node (neuron) in a neural network.

    Input neurons simply hold the value they are given.
    Hidden and output neurons compute their output as:
        activation(sum(synapse.weight * synapse.source.output))

    Public Attributes:
        id:         ID of the node gene this neuron expresses
        type:       Neuron type (INPUT, HIDDEN, or OUTPUT)
        activation: Activation function (None for input neurons)
        inputs:     Incoming synapses
        output:     The current output value
    """

    def __init__(self, node_id: int, node_type: NodeType, activation: Optional[Callable[[float], float]]):
        self.id        : int                                  = node_id
        self.type      : NodeType                             = node_type
        self.activation: Optional[Callable[[float], float]]  = activation
        self.inputs    : list[Synapse]                        = []
        self.output    : float                                = 0.0

    def weighted_input(self) -> float:
        return sum(synapse.weight * synapse.source.output for synapse in self.inputs)

    def calculate(self) -> None:
        """
        Compute the neuron output from the current outputs of its source neurons.
        """
        self.output = self.activation(self.weighted_input())

    def __repr__(self):
        return f"Neuron(id={self.id}, type={self.type.name}, inputs={len(self.inputs)}, output={self.output})"

class NeuralNetwork:
    """
    The executable neural network expressed by a Genome.

    Only enabled connections are expressed, as synapses attached to their
    destination neuron. When recurrent connections are not allowed (see
    Config.allow_recurrent), the neurons are sorted topologically at construction
    time; a genome whose enabled connections form a cycle cannot be compiled
    and raises StructuralError.

    Public Properties:
        is_recurrent:               Whether the network is activated step-wise
        neurons:                    All neurons (in topological order for feed-forward networks)
        input_neurons:              Input neurons, in the order they were declared in the genome
        output_neurons:             Output neurons, in the order they were declared in the genome
        number_nodes:               Total number of neurons
        number_connections_enabled: Number of synapses (enabled connections)

    Public Methods:
        activate(inputs, steps):    Process inputs through the network and return outputs
        visualize(view):            Render the network with Graphviz

    Class Methods:
        create(genome, config):     Compile a genome, raising StructuralError on a cycle
        try_create(genome, config): Compile a genome, returning the StructuralError instead of raising it
    """

    def __init__(self,
                 neurons       : list[Neuron],
                 sorted_neurons: Optional[list[Neuron]],
                 input_neurons : list[Neuron],
                 output_neurons: list[Neuron],
                 is_recurrent  : bool):
        self._neurons        = neurons
        self._sorted_neurons = sorted_neurons
        self._input_neurons  = input_neurons
        self._output_neurons = output_neurons
        self._is_recurrent   = is_recurrent

    @classmethod
    def create(cls, genome: 'Genome', config: 'Config') -> 'NeuralNetwork':
        """
        Compile a genome into a network.

        Parameters:
            genome: the Genome encoding the network
            config: supplies the activation functions and whether recurrence is allowed

        Returns:
            the network

        Raises:
            StructuralError: the network should be feed-forward but its enabled connections form a cycle
        """
        neuron_map: dict[int, Neuron] = {}
        neurons   : list[Neuron]      = []
        inputs    : list[Neuron]      = []
        outputs   : list[Neuron]      = []

        # Create all neuron objects, the activation function depends on the node type
        for gene in genome.node_genes.values():
            match gene.type:
                case NodeType.INPUT:
                    activation = None
                case NodeType.HIDDEN:
                    activation = config.hidden_activation_function
                case NodeType.OUTPUT:
                    activation = config.output_activation_function

            neuron = Neuron(gene.id, gene.type, activation)
            neuron_map[gene.id] = neuron
            neurons.append(neuron)
            if gene.type == NodeType.INPUT:
                inputs.append(neuron)
            elif gene.type == NodeType.OUTPUT:
                outputs.append(neuron)

        # Create synapses from enabled connection genes (skip any that reference unknown nodes)
        edges: list[tuple[Neuron, Neuron]] = []
        for conn in genome.conn_genes.values():
            if not conn.enabled:
                continue
            source = neuron_map.get(conn.node_in)
            target = neuron_map.get(conn.node_out)
            if source is None or target is None:
                continue
            target.inputs.append(Synapse(source, conn.weight))
            edges.append((source, target))

        sorted_neurons = None
        if not config.allow_recurrent:
            sorted_neurons = cls._topological_sort(neurons, edges)

        return cls(neurons, sorted_neurons, inputs, outputs, config.allow_recurrent)

    @classmethod
    def try_create(cls, genome: 'Genome', config: 'Config') -> 'NeuralNetwork | StructuralError':
        """
        Compile a genome into a network, returning (rather than raising) the
        StructuralError produced by an invalid genome.
        """
        try:
            return cls.create(genome, config)
        except StructuralError as e:
            return e

    @staticmethod
    def _topological_sort(neurons: list[Neuron], edges: list[tuple[Neuron, Neuron]]) -> list[Neuron]:
        """
        Perform topological sort using Kahn's algorithm.

        Parameters:
            neurons: all neurons of the network
            edges:   (source, target) pairs, one per synapse

        Returns:
            List of neurons in topological order

        Raises:
            StructuralError: some neurons could not be sorted, so there is a cycle
        """
        adjacency = {n.id: [] for n in neurons}
        in_degree = {n.id: 0  for n in neurons}
        for source, target in edges:
            adjacency[source.id].append(target)
            in_degree[target.id] += 1

        # Start with neurons that have no incoming edges
        queue  = deque([n for n in neurons if in_degree[n.id] == 0])
        result = []

        while queue:
            neuron = queue.popleft()
            result.append(neuron)

            # Process all outgoing edges
            for neighbor in adjacency[neuron.id]:
                in_degree[neighbor.id] -= 1
                if in_degree[neighbor.id] == 0:
                    queue.append(neighbor)

        if len(result) != len(neurons):
            cyclic = sorted(n.id for n in neurons if in_degree[n.id] > 0)
            raise StructuralError(f"A cycle was detected in a feed-forward network, involving nodes {cyclic}")

        return result

    @property
    def is_recurrent(self) -> bool:
        return self._is_recurrent

    @property
    def neurons(self) -> list[Neuron]:
        return list(self._sorted_neurons if self._sorted_neurons is not None else self._neurons)

    @property
    def input_neurons(self) -> list[Neuron]:
        return list(self._input_neurons)

    @property
    def output_neurons(self) -> list[Neuron]:
        return list(self._output_neurons)

    @property
    def number_nodes(self) -> int:
        """Total number of neurons in the network."""
        return len(self._neurons)

    @property
    def number_connections_enabled(self) -> int:
        """Number of synapses, one per enabled connection gene."""
        return sum(len(neuron.inputs) for neuron in self._neurons)

    def activate(self, inputs: Sequence[float], steps: Optional[int] = None) -> list[float]:
        """
        Process inputs through the network.

        Parameters:
            inputs: the network inputs (as many as input neurons)
            steps:  number of time steps for a recurrent network (default 2);
                    ignored by feed-forward networks, which always take 1 step

        Returns:
            the output neuron values, in the order output nodes were declared in the genome

        Raises:
            InputSizeError: the number of inputs does not match the number of input neurons
        """
        if len(inputs) != len(self._input_neurons):
            raise InputSizeError(f"Expected {len(self._input_neurons)} inputs, got {len(inputs)}")

        if self._is_recurrent:
            return self._activate_recurrent(inputs, 2 if steps is None else steps)
        return self._activate_feed_forward(inputs)

    def _activate_feed_forward(self, inputs: Sequence[float]) -> list[float]:
        for neuron, value in zip(self._input_neurons, inputs):
            neuron.output = value

        # Propagate values through the network, in topological order
        for neuron in self._sorted_neurons:
            if neuron.type != NodeType.INPUT:
                neuron.calculate()

        return [neuron.output for neuron in self._output_neurons]

    def _activate_recurrent(self, inputs: Sequence[float], steps: int) -> list[float]:
        for neuron in self._neurons:
            neuron.output = 0.0

        for _ in range(steps):
            # Every neuron reads the values of the previous step
            snapshot = {neuron.id: neuron.output for neuron in self._neurons}

            for neuron, value in zip(self._input_neurons, inputs):
                neuron.output = value

            for neuron in self._neurons:
                if neuron.type != NodeType.INPUT:
                    total = sum(s.weight * snapshot[s.source.id] for s in neuron.inputs)
                    neuron.output = sigmoid_activation(total)

        return [neuron.output for neuron in self._output_neurons]

    def visualize(self, view: bool = False) -> graphviz.Digraph:
        """
        Visualize the network using Graphviz.

        Parameters:
            view: If True, automatically open the visualization after rendering

        Returns:
            graphviz.Digraph object representing the network
        """
        dot = graphviz.Digraph()
        dot.attr(rankdir='LR')  # Left to right layout

        node_attrs = {
            NodeType.INPUT:  {'fillcolor': 'lightgrey', 'style': 'filled', 'shape': 'circle'},
            NodeType.HIDDEN: {'fillcolor': 'lightblue', 'style': 'filled', 'shape': 'circle'},
            NodeType.OUTPUT: {'fillcolor': 'white',     'style': 'filled', 'shape': 'doublecircle'}
        }
        ranks = {NodeType.INPUT: 'source', NodeType.HIDDEN: 'same', NodeType.OUTPUT: 'sink'}

        for node_type in NodeType:
            members = [n for n in self._neurons if n.type == node_type]
            if not members:
                continue
            with dot.subgraph(name=f'cluster_{node_type.name.lower()}') as cluster:
                cluster.attr(rank=ranks[node_type], label=node_type.name.capitalize(), style='invisible')
                for neuron in sorted(members, key=lambda n: n.id):
                    cluster.node(str(neuron.id), label=str(neuron.id), **node_attrs[node_type])

        for neuron in self._neurons:
            for synapse in neuron.inputs:
                color = 'darkgreen' if synapse.weight >= 0 else 'firebrick'
                dot.edge(str(synapse.source.id), str(neuron.id), label=f"{synapse.weight:.2f}", color=color)

        if view:
            dot.view(cleanup=True)

        return dot

    def __str__(self):
        lines = [f"NeuralNetwork({'recurrent' if self._is_recurrent else 'feed-forward'}, "
                 f"{self.number_nodes} nodes, {self.number_connections_enabled} connections)"]
        for neuron in self.neurons:
            sources = ", ".join(f"{s.source.id}*{s.weight:+.3f}" for s in neuron.inputs)
            lines.append(f"  {neuron.type.name:6s} {neuron.id}: [{sources}]")
        return "\n".join(lines)
