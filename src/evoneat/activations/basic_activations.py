import numpy as np

def identity_activation(z):
    return z

def sigmoid_activation(z):
    # Steepened logistic curve, as in the original NEAT paper
    Z = 4.9 * z
    Z = np.clip(Z, -60, 60)   # to prevent under/overflow when calculating exp
    return float(1.0 / (1.0 + np.exp(-Z)))

def tanh_activation(z):
    return float(np.tanh(z))

def relu_activation(z):
    return max(0.0, z)

def leaky_relu_activation(z):
    return z if z > 0 else 0.01 * z

def clamped_activation(z):
    return float(np.clip(z, -1.0, 1.0))

activations = {
    "identity"  : identity_activation,
    "sigmoid"   : sigmoid_activation,
    "tanh"      : tanh_activation,
    "relu"      : relu_activation,
    "leaky_relu": leaky_relu_activation,
    "clamped"   : clamped_activation
    }

