"""Feedforward layer variants.

A layer keeps its most recent input and lazily derives its output from it.
Validity of the cached output is tracked with a version stamp: every change
to the input, the weights or the activation bumps ``version`` and the cache
is recomputed on the next read whose stamp no longer matches.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Tuple

import numpy as np

from .activations import ActivationFunction
from .errors import DimensionMismatchError, check_length, check_shape
from .gradients import DenseGradient, Gradient, SparseGradient
from .types import Array, as_vector

Sampler = Callable[[Tuple[int, ...]], Array]

_SPARSE_NYI = "Sparse layers are not implemented yet"


def _frozen(array: Array) -> Array:
    array.setflags(write=False)
    return array


class Layer(ABC):
    """Base class for feedforward layers with a folded-in bias input."""

    # Number of indices needed to address one learning rate of this layer.
    rate_index_rank = 2

    def __init__(self, inputs: int, outputs: int, activation: ActivationFunction) -> None:
        if inputs < 1 or outputs < 1:
            raise DimensionMismatchError(
                f"A layer needs at least one input and one output, got {inputs}x{outputs}"
            )
        self.inputs = int(inputs)
        self.outputs = int(outputs)
        self._activation = activation
        self._version = 0
        self._output_version = -1
        self._output: Array | None = None
        self._raw_input = _frozen(np.zeros(self.inputs))
        self._processed_input = self._process_input(self._raw_input)

    # ------------------------------------------------------------------
    # Cached state

    @property
    def version(self) -> int:
        return self._version

    @property
    def activation(self) -> ActivationFunction:
        return self._activation

    @activation.setter
    def activation(self, value: ActivationFunction) -> None:
        self._activation = value
        self._invalidate()

    @property
    def input(self) -> Array:
        return self._raw_input

    @input.setter
    def input(self, value: Array) -> None:
        vector = as_vector(value)
        check_length("Layer input", vector.size, self.inputs)
        self._processed_input = self._process_input(vector)
        self._raw_input = _frozen(vector)
        self._invalidate()

    @property
    def processed_input(self) -> Array:
        """The input with the constant bias term prepended at index 0."""

        return self._processed_input

    @property
    def output(self) -> Array:
        if not self.is_output_current:
            self._update_output()
            self._output_version = self._version
        return self._output  # type: ignore[return-value]

    @property
    def is_output_current(self) -> bool:
        return self._output_version == self._version

    def forward(self, inputs: Array) -> Array:
        """Assign ``inputs`` and return the resulting output."""

        self.input = inputs
        return self.output

    def activation_derivatives(self) -> Array:
        """Diagonal derivatives of the outputs wrt. their own pre-activations."""

        self._activation.peek(self.pre_activation)
        return self._activation.diagonal_derivatives()

    def _invalidate(self) -> None:
        self._version += 1

    def _process_input(self, vector: Array) -> Array:
        biased = np.empty(self.inputs + 1)
        biased[0] = 1.0
        biased[1:] = vector
        return _frozen(biased)

    # ------------------------------------------------------------------
    # Variant capabilities

    @property
    @abstractmethod
    def pre_activation(self) -> Array:
        ...

    @property
    @abstractmethod
    def learning_rate_shape(self) -> Tuple[int, ...]:
        """Shape of a per-weight learning-rate table for this layer."""

    @abstractmethod
    def parameters(self) -> Array:
        """Return every trainable weight of the layer."""

    @abstractmethod
    def initialise(self, sample: Sampler, *, zero_bias: bool = False) -> None:
        """Draw fresh weights using ``sample(shape)``."""

    @abstractmethod
    def make_gradient(self) -> Gradient:
        """Return an empty gradient accumulator matching this layer."""

    @abstractmethod
    def _update_output(self) -> None:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.inputs}, {self.outputs}, {self._activation!r})"


class DenseLayer(Layer):
    """Fully connected layer: ``output = activation(W @ [1, *input])``.

    Rows of ``W`` are output neurons; column 0 holds the bias weights.
    """

    def __init__(self, inputs: int, outputs: int, activation: ActivationFunction) -> None:
        super().__init__(inputs, outputs, activation)
        self._weights = _frozen(np.zeros(self.weight_shape))
        self._pre_activation: Array | None = None

    @property
    def weight_shape(self) -> Tuple[int, int]:
        return (self.outputs, self.inputs + 1)

    @property
    def weights(self) -> Array:
        return self._weights

    @weights.setter
    def weights(self, value: Array) -> None:
        weights = np.array(value, dtype=np.float64)
        check_shape("Weight matrix", weights.shape, self.weight_shape)
        self._weights = _frozen(weights)
        self._invalidate()

    @property
    def pre_activation(self) -> Array:
        self.output
        return self._pre_activation  # type: ignore[return-value]

    @property
    def learning_rate_shape(self) -> Tuple[int, int]:
        return self.weight_shape

    def parameters(self) -> Array:
        return self._weights

    def initialise(self, sample: Sampler, *, zero_bias: bool = False) -> None:
        weights = np.array(sample(self.weight_shape), dtype=np.float64)
        if zero_bias:
            weights[:, 0] = 0.0
        self.weights = weights

    def make_gradient(self) -> DenseGradient:
        return DenseGradient(self.inputs, self.outputs)

    def _update_output(self) -> None:
        pre_activation = self._weights @ self._processed_input
        self._pre_activation = _frozen(pre_activation)
        self._output = _frozen(self._activation.output(pre_activation))


class SparseLayer(Layer):
    """Layer whose connections are stored per neuron rather than as a matrix.

    Only the shape bookkeeping exists; every computation raises
    :class:`NotImplementedError`.
    """

    rate_index_rank = 1

    @property
    def input(self) -> Array:
        raise NotImplementedError(_SPARSE_NYI)

    @input.setter
    def input(self, value: Array) -> None:
        raise NotImplementedError(_SPARSE_NYI)

    @property
    def processed_input(self) -> Array:
        raise NotImplementedError(_SPARSE_NYI)

    @property
    def pre_activation(self) -> Array:
        raise NotImplementedError(_SPARSE_NYI)

    @property
    def learning_rate_shape(self) -> Tuple[int]:
        raise NotImplementedError(_SPARSE_NYI)

    def parameters(self) -> Array:
        raise NotImplementedError(_SPARSE_NYI)

    def initialise(self, sample: Sampler, *, zero_bias: bool = False) -> None:
        raise NotImplementedError(_SPARSE_NYI)

    def make_gradient(self) -> SparseGradient:
        raise NotImplementedError(_SPARSE_NYI)

    def _update_output(self) -> None:
        raise NotImplementedError(_SPARSE_NYI)


__all__ = ["Layer", "DenseLayer", "SparseLayer"]
