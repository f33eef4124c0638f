import configparser
import os

from evopop.activations          import activations
from evopop.cost                 import costs
from evopop.errors               import ConfigurationError
from evopop.genotype.mutation    import Mutation, NEAT_STANDARD, mutation_groups

# Parent selection schemes understood by 'Species.get_child()'
SELECTION_SCHEMES = ("power", "fitness_proportionate", "tournament")

class Config:

    @staticmethod
    def _parse_activation_options(raw_options):
        """
        Parse activation_options from string to list.

        Parameters:
            raw_options: Either "all", a comma-separated list, or already a list

        Returns:
            List of activation function names
        """
        # If already a list, return as-is
        if isinstance(raw_options, list):
            return raw_options

        # Parse string values
        if raw_options == 'all':
            return list(activations.keys())

        # Parse comma-separated list
        parsed = [opt.strip() for opt in raw_options.split(',')]
        for opt in parsed:
            if opt not in activations:
                raise ConfigurationError(f"Invalid activation function '{opt}' in activation_options")
        return parsed

    @staticmethod
    def _parse_mutation(raw_mutation):
        """
        Parse the allowed mutation operators.

        Parameters:
            raw_mutation: A group name ("all", "ffw", "neat_standard"), a comma-separated
                          list of operator names, or already a sequence of Mutation members

        Returns:
            Tuple of Mutation members
        """
        if not isinstance(raw_mutation, str):
            return tuple(Mutation(op) for op in raw_mutation)

        if raw_mutation in mutation_groups:
            return mutation_groups[raw_mutation]

        parsed = []
        for name in raw_mutation.split(','):
            try:
                parsed.append(Mutation(name.strip()))
            except ValueError:
                raise ConfigurationError(f"Invalid mutation operator '{name.strip()}'") from None
        return tuple(parsed)

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a Config holding default values.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, creates a default Config for manual attribute setting.
        """
        if config_file is None:
            self._set_defaults()
            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Sentinel for missing default values
        _NO_DEFAULT = object()

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if raw_value.lower() == 'inf' and value_type in (int, float):
                    return float('inf')
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value
            except (configparser.NoSectionError, configparser.NoOptionError):
                if default is not _NO_DEFAULT:
                    return default
                raise

        # [POPULATION_INIT]

        # The number of genomes in each generation.
        self.population_size = get_value('POPULATION_INIT', 'population_size', int)

        # The number of input nodes, through which the network receives inputs.
        self.num_inputs = get_value('POPULATION_INIT', 'num_inputs', int)

        # The number of output nodes, to which the network delivers outputs.
        self.num_outputs = get_value('POPULATION_INIT', 'num_outputs', int)

        # Specifies the initial connectivity of newly-created networks.
        # Allowed values:
        #   "none" - no connections are initially present
        #   "full" - connect all input nodes to all output nodes
        self.initial_cxn_policy = get_value('POPULATION_INIT', 'initial_cxn_policy', str, default='full')

        # [NODE]

        # Activation function of new hidden and output nodes.
        self.activation_initial = get_value('NODE', 'activation_initial', str, default='logistic')

        # The mean and standard deviation of the normal distribution
        # used to initialize the 'bias' of new nodes.
        self.bias_init_mean  = get_value('NODE', 'bias_init_mean' , float, default=0.0)
        self.bias_init_stdev = get_value('NODE', 'bias_init_stdev', float, default=0.5)

        # The minimum and maximum allowed 'bias' values.
        self.min_bias = get_value('NODE', 'min_bias', float, default=-1.0)
        self.max_bias = get_value('NODE', 'max_bias', float, default=1.0)

        # The largest change applied to a bias by the MOD_BIAS operator.
        self.bias_perturb_strength = get_value('NODE', 'bias_perturb_strength', float, default=0.5)

        # Which activation functions the MOD_ACTIVATION operator may choose from.
        raw_options = get_value('NODE', 'activation_options', str, default='all')
        self.activation_options = raw_options

        # [CONNECTION]

        # The mean and standard deviation of the normal distribution
        # used to initialize the 'weight' of new connections.
        self.weight_init_mean  = get_value('CONNECTION', 'weight_init_mean' , float, default=0.0)
        self.weight_init_stdev = get_value('CONNECTION', 'weight_init_stdev', float, default=0.5)

        # The minimum and maximum allowed 'weight' values.
        # Weights outside this range will be clamped to this range.
        self.min_weight = get_value('CONNECTION', 'min_weight', float, default=-1.0)
        self.max_weight = get_value('CONNECTION', 'max_weight', float, default=1.0)

        # [SPECIATION]

        # Genomes whose genomic distance is less than this
        # threshold are considered to be in the same species.
        self.compatibility_threshold = get_value('SPECIATION', 'compatibility_threshold', float, default=3.0)

        # The coefficients of the excess and disjoint gene counts'
        # contribution to the genomic distance.
        self.distance_excess_coeff   = get_value('SPECIATION', 'distance_excess_coeff'  , float, default=1.0)
        self.distance_disjoint_coeff = get_value('SPECIATION', 'distance_disjoint_coeff', float, default=1.0)

        # The coefficient for the parameter (connection weight, node bias)
        # difference's contribution to the genomic distance.
        self.distance_params_coeff = get_value('SPECIATION', 'distance_params_coeff', float, default=0.4)

        # Whether to include in the genomic distance the contribution
        # coming from the difference in parameters of homologous nodes.
        self.distance_includes_nodes = get_value('SPECIATION', 'distance_includes_nodes', bool, default=True)

        # [REPRODUCTION]

        # The fraction of each species allowed to survive culling and reproduce.
        self.survival_threshold = get_value('REPRODUCTION', 'survival_threshold', float, default=0.5)

        # How parents are selected from a species' breeding pool.
        # Allowed values: "power", "fitness_proportionate", "tournament"
        self.selection = get_value('REPRODUCTION', 'selection', str, default='power')

        # Exponent of the "power" selection: higher values favour the fittest more.
        self.selection_power = get_value('REPRODUCTION', 'selection_power', float, default=4.0)

        # Number of contenders, and probability of picking the winner, for "tournament" selection.
        self.tournament_size        = get_value('REPRODUCTION', 'tournament_size'       , int  , default=5)
        self.tournament_probability = get_value('REPRODUCTION', 'tournament_probability', float, default=0.5)

        # [STAGNATION]

        # After this many generations without improving its best fitness,
        # only the top two species of the population may reproduce.
        self.stagnant_limit = get_value('STAGNATION', 'stagnant_limit', int, default=20)

        # Species that have not improved in more than this
        # number of generations are considered stagnant and removed.
        self.species_stagnant_limit = get_value('STAGNATION', 'species_stagnant_limit', int, default=15)

        # [MUTATION]

        # The mutation operators the population may apply.
        # Either a group ("neat_standard", "ffw", "all") or a comma-separated list.
        self.mutation = get_value('MUTATION', 'mutation', str, default='neat_standard')

        # Thresholds compared against a single random draw per offspring.
        self.add_node_rate        = get_value('MUTATION', 'add_node_rate'       , float, default=0.01)
        self.add_connection_rate  = get_value('MUTATION', 'add_connection_rate' , float, default=0.05)
        self.weight_mutation_rate = get_value('MUTATION', 'weight_mutation_rate', float, default=0.8)

        # When weights are mutated: the per-connection probability of a bounded
        # perturbation (otherwise the weight is replaced), and the perturbation bound.
        self.weight_perturb_prob     = get_value('MUTATION', 'weight_perturb_prob'    , float, default=0.9)
        self.weight_perturb_strength = get_value('MUTATION', 'weight_perturb_strength', float, default=0.5)

        # [LIMITS]

        # Structural caps for mutated networks ("inf" for no cap).
        self.max_nodes       = get_value('LIMITS', 'max_nodes'      , int, default=float('inf'))
        self.max_connections = get_value('LIMITS', 'max_connections', int, default=float('inf'))
        self.max_gates       = get_value('LIMITS', 'max_gates'      , int, default=float('inf'))

        # [FITNESS]

        # The cost function used with a dataset to compute each network's error.
        self.cost = get_value('FITNESS', 'cost', str, default='mse')

        # Whether the fitness function scores the whole population in one call.
        self.fitness_population = get_value('FITNESS', 'fitness_population', bool, default=False)

        # [TERMINATION]

        # Whether to use the fitness of the most recent
        # generation as a criterion for stopping the run.
        self.fitness_termination_check = get_value('TERMINATION', 'fitness_termination_check', bool, default=False)

        # The function used to compute the termination criterion.
        # Allowed values:
        #   "mean" calculate the mean fitness across the entire population
        #   "max"  get the fitness of the fittest genome in the population
        self.fitness_criterion = get_value('TERMINATION', 'fitness_criterion', str, default='max')

        # The fitness value which when met or exceeded causes the run to end.
        self.fitness_threshold = get_value('TERMINATION', 'fitness_threshold', float, default=None)

        # The number of generations after which to stop the run.
        self.max_number_generations = get_value('TERMINATION', 'max_number_generations', int, default=100)

        self._validate()

    def _set_defaults(self):
        """
        Populate every parameter with its default value.
        """
        self.population_size    = 150
        self.num_inputs         = 1
        self.num_outputs        = 1
        self.initial_cxn_policy = 'full'

        self.activation_initial    = 'logistic'
        self.bias_init_mean        = 0.0
        self.bias_init_stdev       = 0.5
        self.min_bias              = -1.0
        self.max_bias              = 1.0
        self.bias_perturb_strength = 0.5
        self.activation_options    = list(activations.keys())

        self.weight_init_mean  = 0.0
        self.weight_init_stdev = 0.5
        self.min_weight        = -1.0
        self.max_weight        = 1.0

        self.compatibility_threshold = 3.0
        self.distance_excess_coeff   = 1.0
        self.distance_disjoint_coeff = 1.0
        self.distance_params_coeff   = 0.4
        self.distance_includes_nodes = True

        self.survival_threshold     = 0.5
        self.selection              = 'power'
        self.selection_power        = 4.0
        self.tournament_size        = 5
        self.tournament_probability = 0.5

        self.stagnant_limit         = 20
        self.species_stagnant_limit = 15

        self.mutation                = NEAT_STANDARD
        self.add_node_rate           = 0.01
        self.add_connection_rate     = 0.05
        self.weight_mutation_rate    = 0.8
        self.weight_perturb_prob     = 0.9
        self.weight_perturb_strength = 0.5

        self.max_nodes       = float('inf')
        self.max_connections = float('inf')
        self.max_gates       = float('inf')

        self.cost               = 'mse'
        self.fitness_population = False

        self.fitness_termination_check = False
        self.fitness_criterion         = 'max'
        self.fitness_threshold         = None
        self.max_number_generations    = 100

    def _validate(self):
        """
        Reject parameter values the population manager cannot work with.
        """
        if self.population_size is None or self.population_size < 2:
            raise ConfigurationError("population_size must be at least 2")
        if not 0.0 < self.survival_threshold <= 1.0:
            raise ConfigurationError("survival_threshold must be in (0, 1]")
        if self.selection not in SELECTION_SCHEMES:
            raise ConfigurationError(f"Invalid selection scheme '{self.selection}'")
        if self.cost not in costs:
            raise ConfigurationError(f"Invalid cost function '{self.cost}'")
        if self.initial_cxn_policy not in ("none", "full"):
            raise ConfigurationError(f"Invalid initial connection policy '{self.initial_cxn_policy}'")
        if self.activation_initial not in activations:
            raise ConfigurationError(f"Invalid activation function '{self.activation_initial}'")

    def __setattr__(self, name, value):
        """
        Override 'setattr' to automatically parse 'activation_options' and 'mutation' when set.
        This allows users to write config.mutation = "ffw" and have it
        automatically converted to the tuple of Mutation members.
        """
        if name == 'activation_options':
            value = self._parse_activation_options(value)
        elif name == 'mutation':
            value = self._parse_mutation(value)
        super().__setattr__(name, value)
