import configparser
import os
from typing import Callable

from evoneat.activations import activations

class Config:
    """
    Configuration parameters for a NEAT run.

    A Config created without a file holds the default value of every parameter,
    and its attributes can then be overwritten by hand. A Config created from
    an INI file starts from the same defaults and overrides any value present
    in the file. Every key is optional except 'num_inputs' and 'num_outputs'
    (section POPULATION_INIT), which have no default.
    """

    @staticmethod
    def _check_activation(name: str) -> str:
        """
        Make sure 'name' identifies a known activation function.

        Parameters:
            name: the name of an activation function (e.g. 'sigmoid')

        Returns:
            the name, unchanged
        """
        if name not in activations:
            raise ValueError(f"Invalid activation function '{name}', expected one of {list(activations)}")
        return name

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a default Config.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, creates a Config holding the default values.
        """

        # [POPULATION_INIT]

        # The number of genomes in each generation.
        self.population_size = 150

        # The number of input nodes, through which the network receives inputs.
        # No default: it depends on the problem and must be set before creating a population.
        self.num_inputs = None

        # The number of output nodes, to which the network delivers outputs.
        # No default: it depends on the problem and must be set before creating a population.
        self.num_outputs = None

        # If True, initial genomes connect every input node to every output node.
        # Otherwise each initial genome has a single random input->output connection.
        self.start_fully_connected = False

        # Seed for the random number generator owned by the population (None: not seeded).
        self.seed = None

        # [SPECIATION]

        # Genomes whose compatibility distance to a species representative
        # is below this threshold join that species.
        self.compatibility_threshold = 3.0

        # The coefficients of the excess gene count, disjoint gene count and
        # average weight difference terms of the compatibility distance.
        self.excess_coefficient      = 1.0
        self.disjoint_coefficient    = 1.0
        self.weight_diff_coefficient = 0.4

        # [REPRODUCTION]

        # The fraction of each species' members (rounded up) carried
        # over unchanged to the next generation.
        self.species_elitism_fraction = 0.05

        # The probability that an offspring is produced by crossover rather than cloning.
        self.crossover_rate = 0.75

        # [STAGNATION]

        # Species that have not improved for more than this number of generations are removed.
        self.species_stagnation_limit = 15

        # [CONNECTION]

        # The probability that a genome mutation perturbs or replaces one connection weight.
        self.weight_mutation_rate = 0.8

        # When a weight is mutated, the probability that it is shifted rather than replaced.
        self.weight_shift_rate = 0.9

        # A shifted weight changes by uniform(-1, 1) * weight_shift_strength.
        self.weight_shift_strength = 0.1

        # New and replaced weights are drawn uniformly from [-range, range].
        self.new_connection_weight_range = 2.0

        # [STRUCTURAL_MUTATIONS]

        # The probability of adding a connection between two existing nodes.
        self.add_connection_rate = 0.05

        # The probability of splitting an enabled connection with a new hidden node.
        self.add_node_rate = 0.03

        # The probability of flipping the enabled flag of one connection.
        self.toggle_enable_rate = 0.01

        # How many random node pairs the add-connection mutation tries before giving up.
        self.add_connection_attempts = 20

        # The weight of the connection leading into a newly added node.
        self.add_node_new_link_weight = 1.0

        # Whether connections closing a cycle may be added. Recurrent genomes
        # are compiled into networks activated over several time steps.
        self.allow_recurrent = False

        # [NODE]

        # Activation functions used by hidden and output neurons.
        self.hidden_activation = "sigmoid"
        self.output_activation = "sigmoid"

        # [TERMINATION]

        # The number of generations after which a trial stops.
        self.max_number_generations = 100

        # A trial stops once the best fitness meets or exceeds this value (None: disabled).
        self.fitness_threshold = None

        # How often (in generations) a trial checks the goal when no new best was found.
        self.goal_check_interval = 10

        if config_file is None:
            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Helper function to safely parse values, keeping the default when an optional key is absent
        def get_value(section, key, value_type, required=False):
            default = getattr(self, key)
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value.strip()
            except (configparser.NoSectionError, configparser.NoOptionError):
                if required:
                    raise
                return default

        self.population_size       = get_value('POPULATION_INIT', 'population_size',       int)
        self.num_inputs            = get_value('POPULATION_INIT', 'num_inputs',            int, required=True)
        self.num_outputs           = get_value('POPULATION_INIT', 'num_outputs',           int, required=True)
        self.start_fully_connected = get_value('POPULATION_INIT', 'start_fully_connected', bool)
        self.seed                  = get_value('POPULATION_INIT', 'seed',                  int)

        self.compatibility_threshold = get_value('SPECIATION', 'compatibility_threshold', float)
        self.excess_coefficient      = get_value('SPECIATION', 'excess_coefficient',      float)
        self.disjoint_coefficient    = get_value('SPECIATION', 'disjoint_coefficient',    float)
        self.weight_diff_coefficient = get_value('SPECIATION', 'weight_diff_coefficient', float)

        self.species_elitism_fraction = get_value('REPRODUCTION', 'species_elitism_fraction', float)
        self.crossover_rate           = get_value('REPRODUCTION', 'crossover_rate',           float)

        self.species_stagnation_limit = get_value('STAGNATION', 'species_stagnation_limit', int)

        self.weight_mutation_rate        = get_value('CONNECTION', 'weight_mutation_rate',        float)
        self.weight_shift_rate           = get_value('CONNECTION', 'weight_shift_rate',           float)
        self.weight_shift_strength       = get_value('CONNECTION', 'weight_shift_strength',       float)
        self.new_connection_weight_range = get_value('CONNECTION', 'new_connection_weight_range', float)

        self.add_connection_rate      = get_value('STRUCTURAL_MUTATIONS', 'add_connection_rate',      float)
        self.add_node_rate            = get_value('STRUCTURAL_MUTATIONS', 'add_node_rate',            float)
        self.toggle_enable_rate       = get_value('STRUCTURAL_MUTATIONS', 'toggle_enable_rate',       float)
        self.add_connection_attempts  = get_value('STRUCTURAL_MUTATIONS', 'add_connection_attempts',  int)
        self.add_node_new_link_weight = get_value('STRUCTURAL_MUTATIONS', 'add_node_new_link_weight', float)
        self.allow_recurrent          = get_value('STRUCTURAL_MUTATIONS', 'allow_recurrent',          bool)

        self.hidden_activation = get_value('NODE', 'hidden_activation', str)
        self.output_activation = get_value('NODE', 'output_activation', str)

        self.max_number_generations = get_value('TERMINATION', 'max_number_generations', int)
        self.fitness_threshold      = get_value('TERMINATION', 'fitness_threshold',      float)
        self.goal_check_interval    = get_value('TERMINATION', 'goal_check_interval',    int)

    def __setattr__(self, name, value):
        """
        Override 'setattr' to validate activation function names when set.
        """
        if name in ('hidden_activation', 'output_activation'):
            value = self._check_activation(value)
        super().__setattr__(name, value)

    @property
    def hidden_activation_function(self) -> Callable[[float], float]:
        """The activation function applied by hidden neurons."""
        return activations[self.hidden_activation]

    @property
    def output_activation_function(self) -> Callable[[float], float]:
        """The activation function applied by output neurons."""
        return activations[self.output_activation]
