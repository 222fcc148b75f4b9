"""
Activations Package

This package provides activation functions for NEAT neural networks.
Activation functions are plain unary callables (float -> float), selected
per node role (hidden or output) by name from the configuration.

Exported:
    activations:      Dictionary mapping activation function names to functions
    Individual activation functions: identity_activation, sigmoid_activation,
                                     tanh_activation, relu_activation,
                                     leaky_relu_activation, clamped_activation
"""

from evoneat.activations.basic_activations import (
    activations,
    identity_activation,
    sigmoid_activation,
    tanh_activation,
    relu_activation,
    leaky_relu_activation,
    clamped_activation
)

__all__ = [
    'activations',
    'identity_activation',
    'sigmoid_activation',
    'tanh_activation',
    'relu_activation',
    'leaky_relu_activation',
    'clamped_activation'
]
