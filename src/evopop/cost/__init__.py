"""
Cost Package

This package provides the cost functions used to measure the error of a network
over a dataset. Every cost function takes the expected outputs and the actual
outputs of one sample and returns a non-negative error (lower is better).

Exported:
    costs: Dictionary mapping cost function names to functions
    Individual cost functions: mse_cost, mae_cost, mape_cost, msle_cost,
                               cross_entropy_cost, binary_cost, hinge_cost
"""

from evopop.cost.cost_functions import (
    costs,
    mse_cost,
    mae_cost,
    mape_cost,
    msle_cost,
    cross_entropy_cost,
    binary_cost,
    hinge_cost
)

__all__ = [
    'costs',
    'mse_cost',
    'mae_cost',
    'mape_cost',
    'msle_cost',
    'cross_entropy_cost',
    'binary_cost',
    'hinge_cost'
]
