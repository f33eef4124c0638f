"""
Evolution Errors Module

This module defines the exceptions raised by the population manager and
its collaborators.

Classes:
    EvolutionError:            Base class for all errors raised by this package
    ConfigurationError:        The configuration cannot support the requested operation
    InvariantError:            A generation would leave the population in an invalid state
    IncompatibleOperatorError: A mutation operator would violate a structural cap
    EvaluationError:           A fitness evaluation produced an unusable value
"""

class EvolutionError(Exception):
    """Base class for all errors raised while evolving a population."""

class ConfigurationError(EvolutionError):
    """
    The configuration cannot support the requested operation.

    Raised, for example, when fitness must be computed but the population
    has neither a dataset nor externally assigned fitness values, or when a
    configuration file holds an invalid value.
    """

class InvariantError(EvolutionError):
    """
    A generational step would break a population invariant.

    Raised when the replacement step does not produce exactly 'size' members,
    or when top-two reproduction is required but fewer than two species exist.
    """

class IncompatibleOperatorError(EvolutionError):
    """
    A mutation operator would push a genome past a structural cap
    (maximum number of nodes, connections or gates).

    The genome is left unchanged when this is raised.
    """

class EvaluationError(EvolutionError):
    """A fitness function returned NaN or a value that is not a number."""
