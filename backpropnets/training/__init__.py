"""Training loop, its pluggable policies and config pipelines."""

from .batching import (
    random_training_subset,
    sequential_batches,
    single_random_example,
    whole_training_set,
)
from .initialisers import Custom, Normal, Uniform
from .learning_rates import LearningRates
from .losses import REGISTRY, CrossEntropy, NegativeLogProb, SquaredError
from .regularisers import L1, L2
from .termination import EpochLimit, ExternalSignal, LossThreshold
from .trainer import BackpropagationTrainer

__all__ = [
    "BackpropagationTrainer",
    "CrossEntropy",
    "Custom",
    "EpochLimit",
    "ExternalSignal",
    "L1",
    "L2",
    "LearningRates",
    "LossThreshold",
    "NegativeLogProb",
    "Normal",
    "REGISTRY",
    "SquaredError",
    "Uniform",
    "random_training_subset",
    "sequential_batches",
    "single_random_example",
    "whole_training_set",
]
