"""Core numerical primitives for BackpropNets."""

from . import activations, errors, gradients, layers, network, types

__all__ = ["activations", "errors", "gradients", "layers", "network", "types"]
