"""BackpropNets public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.activations import Linear, Relu, Sigmoid, Softmax, Tanh
from .core.errors import (
    BackpropNetsError,
    ConfigurationAccessError,
    DimensionMismatchError,
    OperationNotPermittedError,
)
from .core.layers import DenseLayer, SparseLayer
from .core.network import FeedForwardNetwork
from .data import ClassificationDataSet, DataPoint, RegressionDataSet, UnsupervisedDataSet
from .training.pipelines import load_config, load_preset, presets, run_pipeline
from .training.trainer import BackpropagationTrainer

__all__ = [
    "BackpropNetsError",
    "BackpropagationTrainer",
    "ClassificationDataSet",
    "ConfigurationAccessError",
    "DataPoint",
    "DenseLayer",
    "DimensionMismatchError",
    "FeedForwardNetwork",
    "Linear",
    "OperationNotPermittedError",
    "RegressionDataSet",
    "Relu",
    "Sigmoid",
    "Softmax",
    "SparseLayer",
    "Tanh",
    "UnsupervisedDataSet",
    "activations",
    "load_config",
    "load_preset",
    "presets",
    "run_pipeline",
    "types",
]
