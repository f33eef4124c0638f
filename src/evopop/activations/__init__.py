"""
Activations Package

This package provides the node activation functions of evolved networks.

Exported:
    activations:      Dictionary mapping activation function names to functions
    activation_codes: Dictionary mapping activation function names to 3-letter codes
    Individual activation functions: identity_activation, clamped_activation,
                                     relu_activation, logistic_activation,
                                     sigmoid_activation, tanh_activation, sin_activation,
                                     gaussian_activation, step_activation,
                                     softsign_activation, bent_identity_activation,
                                     selu_activation, abs_activation, inverse_activation
"""

from evopop.activations.basic_activations import (
    activations,
    activation_codes,
    identity_activation,
    clamped_activation,
    relu_activation,
    logistic_activation,
    sigmoid_activation,
    tanh_activation,
    sin_activation,
    gaussian_activation,
    step_activation,
    softsign_activation,
    bent_identity_activation,
    selu_activation,
    abs_activation,
    inverse_activation
)

__all__ = [
    'activations',
    'activation_codes',
    'identity_activation',
    'clamped_activation',
    'relu_activation',
    'logistic_activation',
    'sigmoid_activation',
    'tanh_activation',
    'sin_activation',
    'gaussian_activation',
    'step_activation',
    'softsign_activation',
    'bent_identity_activation',
    'selu_activation',
    'abs_activation',
    'inverse_activation'
]
