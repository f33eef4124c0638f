import autograd.numpy as np  # type: ignore

def identity_activation(z):
    return z

def clamped_activation(z):
    return np.clip(z, -1.0, 1.0)

def relu_activation(z):
    return np.maximum(0.0, z)

def logistic_activation(z):
    Z = np.clip(z, -100, 100)   # to prevent under/overflow when calculating exp
    return 1.0 / (1.0 + np.exp(-Z))

def sigmoid_activation(z):
    K = 10
    Z = K * z
    Z = np.clip(Z, -100, 100)   # to prevent under/overflow when calculating exp
    return 1.0 / (1.0 + np.exp(-Z))

def tanh_activation(z):
    return np.tanh(z)

def sin_activation(z):
    return np.sin(z)

def gaussian_activation(z):
    z_clipped = np.clip(z, -1e154, 1e154)
    return np.exp(-z_clipped ** 2)

def step_activation(z):
    return np.where(z > 0, 1.0, 0.0)

def softsign_activation(z):
    return z / (1.0 + np.abs(z))

def bent_identity_activation(z):
    z_clipped = np.clip(z, -1e154, 1e154)
    return (np.sqrt(z_clipped ** 2 + 1.0) - 1.0) / 2.0 + z_clipped

def selu_activation(z):
    alpha = 1.6732632423543772848170429916717
    scale = 1.0507009873554804934193349852946
    z_clipped = np.clip(z, -100, 100)
    return scale * np.where(z_clipped > 0, z_clipped, alpha * (np.exp(z_clipped) - 1.0))

def abs_activation(z):
    return np.abs(z)

def inverse_activation(z):
    return 1.0 - z

activations = {
    "identity"     : identity_activation,
    "clamped"      : clamped_activation,
    "relu"         : relu_activation,
    "logistic"     : logistic_activation,
    "sigmoid"      : sigmoid_activation,
    "tanh"         : tanh_activation,
    "sin"          : sin_activation,
    "gaussian"     : gaussian_activation,
    "step"         : step_activation,
    "softsign"     : softsign_activation,
    "bent_identity": bent_identity_activation,
    "selu"         : selu_activation,
    "abs"          : abs_activation,
    "inverse"      : inverse_activation
    }

# 3-letter identifiers for each activation function
activation_codes = {
    "identity"     : "IDN",
    "clamped"      : "CLP",
    "relu"         : "RLU",
    "logistic"     : "LGS",
    "sigmoid"      : "SIG",
    "tanh"         : "TNH",
    "sin"          : "SIN",
    "gaussian"     : "GAU",
    "step"         : "STP",
    "softsign"     : "SSG",
    "bent_identity": "BID",
    "selu"         : "SLU",
    "abs"          : "ABS",
    "inverse"      : "INV"
    }
