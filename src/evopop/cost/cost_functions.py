import autograd.numpy as np  # type: ignore

# Outputs are clipped away from 0 and 1 before taking logarithms
EPSILON = 1e-15

def mse_cost(targets, outputs):
    return np.mean((np.asarray(targets) - np.asarray(outputs)) ** 2)

def mae_cost(targets, outputs):
    return np.mean(np.abs(np.asarray(targets) - np.asarray(outputs)))

def mape_cost(targets, outputs):
    targets = np.asarray(targets)
    outputs = np.asarray(outputs)
    denominator = np.maximum(np.abs(targets), EPSILON)
    return np.mean(np.abs((outputs - targets) / denominator))

def msle_cost(targets, outputs):
    targets = np.maximum(np.asarray(targets), EPSILON)
    outputs = np.maximum(np.asarray(outputs), EPSILON)
    return np.mean((np.log(targets) - np.log(outputs)) ** 2)

def cross_entropy_cost(targets, outputs):
    targets = np.asarray(targets)
    outputs = np.clip(np.asarray(outputs), EPSILON, 1.0 - EPSILON)
    return -np.mean(targets * np.log(outputs) + (1.0 - targets) * np.log(1.0 - outputs))

def binary_cost(targets, outputs):
    # fraction of outputs landing on the wrong side of 0.5
    targets = np.asarray(targets)
    outputs = np.asarray(outputs)
    return np.mean((targets > 0.5) != (outputs > 0.5))

def hinge_cost(targets, outputs):
    return np.mean(np.maximum(0.0, 1.0 - np.asarray(targets) * np.asarray(outputs)))

costs = {
    "mse"          : mse_cost,
    "mae"          : mae_cost,
    "mape"         : mape_cost,
    "msle"         : msle_cost,
    "cross_entropy": cross_entropy_cost,
    "binary"       : binary_cost,
    "hinge"        : hinge_cost
    }
