"""
Unit tests for Config class.
"""

import configparser
import pytest
import os
from evopop.activations import activations
from evopop.errors import ConfigurationError
from evopop.genotype import Mutation, NEAT_STANDARD, FFW
from evopop.run.config import Config


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def test_config_dir():
    """Return the directory containing test configuration files."""
    return os.path.join(os.path.dirname(__file__), 'test_configs')


@pytest.fixture
def write_config(tmp_path):
    """Write a configuration file made of the minimal sections plus 'extra'."""
    def writer(extra=""):
        path = tmp_path / "config.ini"
        path.write_text("[POPULATION_INIT]\npopulation_size = 10\nnum_inputs = 2\nnum_outputs = 1\n" + extra)
        return str(path)
    return writer


# ============================================================================
# Test Config Initialization
# ============================================================================

class TestConfigInit:
    """Test Config initialization."""

    def test_init_without_file_holds_defaults(self):
        """Test that Config() without file holds every default value."""
        config = Config()

        assert config.population_size == 150
        assert config.compatibility_threshold == 3.0
        assert config.survival_threshold == 0.5
        assert config.stagnant_limit == 20
        assert config.species_stagnant_limit == 15
        assert config.add_node_rate == 0.01
        assert config.add_connection_rate == 0.05
        assert config.weight_mutation_rate == 0.8
        assert config.mutation == NEAT_STANDARD
        assert config.max_nodes == float('inf')

    def test_init_with_nonexistent_file_raises_error(self):
        """Test that Config with nonexistent file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Configuration file .* not found"):
            Config('nonexistent_file.ini')

    def test_init_with_minimal_config(self, test_config_dir):
        """Test initialization with minimal configuration file."""
        config = Config(os.path.join(test_config_dir, 'minimal.ini'))

        assert config.population_size == 100
        assert config.num_inputs == 2
        assert config.num_outputs == 1
        assert config.initial_cxn_policy == 'full'
        assert config.selection == 'power'
        assert config.cost == 'mse'
        assert config.activation_options == list(activations.keys())

    def test_minimal_config_matches_defaults(self, test_config_dir):
        """Test that missing options take the same values as Config()."""
        from_file = Config(os.path.join(test_config_dir, 'minimal.ini'))
        defaults  = Config()
        for name in vars(defaults):
            if name in ('population_size', 'num_inputs', 'num_outputs'):
                continue
            assert getattr(from_file, name) == getattr(defaults, name), name

    def test_missing_required_option(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[POPULATION_INIT]\npopulation_size = 10\nnum_inputs = 2\n")
        with pytest.raises(configparser.NoOptionError):
            Config(str(path))


# ============================================================================
# Test Config Sections
# ============================================================================

class TestConfigFullFile:
    """Test every section of a complete configuration file."""

    @pytest.fixture
    def config(self, test_config_dir):
        return Config(os.path.join(test_config_dir, 'full.ini'))

    def test_population_init(self, config):
        assert config.population_size == 50
        assert config.num_inputs == 3
        assert config.num_outputs == 2
        assert config.initial_cxn_policy == 'none'

    def test_node(self, config):
        assert config.activation_initial == 'tanh'
        assert config.bias_init_mean == 0.1
        assert config.min_bias == -2.0
        assert config.bias_perturb_strength == 0.3
        assert config.activation_options == ['tanh', 'relu', 'identity']

    def test_connection(self, config):
        assert config.weight_init_stdev == 1.0
        assert config.min_weight == -3.0
        assert config.max_weight == 3.0

    def test_speciation(self, config):
        assert config.compatibility_threshold == 2.5
        assert config.distance_excess_coeff == 1.5
        assert config.distance_disjoint_coeff == 1.25
        assert config.distance_params_coeff == 0.5
        assert config.distance_includes_nodes is False

    def test_reproduction(self, config):
        assert config.survival_threshold == 0.25
        assert config.selection == 'tournament'
        assert config.tournament_size == 4
        assert config.tournament_probability == 0.75

    def test_stagnation(self, config):
        assert config.stagnant_limit == 10
        assert config.species_stagnant_limit == 8

    def test_mutation(self, config):
        assert config.mutation == (Mutation.ADD_NODE, Mutation.ADD_CONNECTION,
                                   Mutation.MOD_WEIGHT, Mutation.ADD_GATE)
        assert config.add_node_rate == 0.03
        assert config.weight_perturb_prob == 0.8

    def test_limits(self, config):
        assert config.max_nodes == 20
        assert config.max_connections == float('inf')
        assert config.max_gates == 5

    def test_fitness_and_termination(self, config):
        assert config.cost == 'cross_entropy'
        assert config.fitness_population is True
        assert config.fitness_termination_check is True
        assert config.fitness_criterion == 'mean'
        assert config.fitness_threshold == 0.95
        assert config.max_number_generations == 250


# ============================================================================
# Test Config Validation
# ============================================================================

class TestConfigValidation:

    @pytest.mark.parametrize("section", [
        "[REPRODUCTION]\nsurvival_threshold = 0.0\n",
        "[REPRODUCTION]\nselection = roulette\n",
        "[FITNESS]\ncost = rmse\n",
        "[NODE]\nactivation_initial = swish\n",
        "[NODE]\nactivation_options = tanh, swish\n",
        "[MUTATION]\nmutation = add_nodes\n",
        "initial_cxn_policy = partial\n",
    ])
    def test_invalid_values(self, write_config, section):
        with pytest.raises(ConfigurationError):
            Config(write_config(section))

    def test_population_too_small(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[POPULATION_INIT]\npopulation_size = 1\nnum_inputs = 2\nnum_outputs = 1\n")
        with pytest.raises(ConfigurationError):
            Config(str(path))


# ============================================================================
# Test Attribute Parsing
# ============================================================================

class TestConfigSetattr:

    def test_mutation_group_names(self):
        config = Config()
        config.mutation = 'ffw'
        assert config.mutation == FFW
        config.mutation = 'neat_standard'
        assert config.mutation == NEAT_STANDARD

    def test_mutation_sequence(self):
        config = Config()
        config.mutation = [Mutation.MOD_WEIGHT, 'add_node']
        assert config.mutation == (Mutation.MOD_WEIGHT, Mutation.ADD_NODE)

    def test_activation_options_all(self):
        config = Config()
        config.activation_options = 'relu, tanh'
        assert config.activation_options == ['relu', 'tanh']
        config.activation_options = 'all'
        assert config.activation_options == list(activations.keys())
