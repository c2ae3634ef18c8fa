"""Feedforward network composed of an ordered list of layers."""

from __future__ import annotations

import copy
from typing import List, Sequence, Tuple

import numpy as np

from .activations import ActivationFunction
from .errors import DimensionMismatchError, OperationNotPermittedError, check_length
from .layers import DenseLayer, Layer
from .types import Array, as_vector


class FeedForwardNetwork:
    """Chain of layers where each layer feeds the next.

    Build it with :meth:`add_hidden_layer` / :meth:`add_multiple_layers` and
    close it with :meth:`add_output_layer`::

        network = (
            FeedForwardNetwork(2, 1)
            .add_hidden_layer(5, Sigmoid())
            .add_output_layer(Sigmoid())
        )

    Assigning :attr:`input` eagerly runs the forward pass through every
    layer, so pre-activations are materialised for backpropagation.
    """

    def __init__(self, inputs: int, outputs: int) -> None:
        if inputs < 1 or outputs < 1:
            raise DimensionMismatchError(
                f"A network needs at least one input and one output, got {inputs}x{outputs}"
            )
        self.inputs = int(inputs)
        self.outputs = int(outputs)
        self._layers: List[Layer] = []
        self._closed = False
        self._input: Array | None = None
        self._stamp: Tuple[int, ...] | None = None

    # ------------------------------------------------------------------
    # Construction

    @property
    def layers(self) -> Tuple[Layer, ...]:
        return tuple(self._layers)

    @property
    def is_complete(self) -> bool:
        """True once an output layer has been added."""

        return self._closed

    def add_layer(self, layer: Layer, *, output: bool = False) -> "FeedForwardNetwork":
        if self._closed:
            raise OperationNotPermittedError("The network already has an output layer")
        expected = self._next_inputs()
        if layer.inputs != expected:
            raise DimensionMismatchError(
                f"Layer expects {layer.inputs} inputs but the previous stage "
                f"produces {expected}"
            )
        if output and layer.outputs != self.outputs:
            raise DimensionMismatchError(
                f"Output layer produces {layer.outputs} values but the network "
                f"declares {self.outputs} outputs"
            )
        self._layers.append(layer)
        self._closed = output
        self._input = None
        self._stamp = None
        return self

    def add_hidden_layer(self, nodes: int, activation: ActivationFunction) -> "FeedForwardNetwork":
        return self.add_layer(DenseLayer(self._next_inputs(), nodes, activation))

    def add_output_layer(self, activation: ActivationFunction) -> "FeedForwardNetwork":
        return self.add_layer(
            DenseLayer(self._next_inputs(), self.outputs, activation), output=True
        )

    def add_multiple_layers(
        self, count: int, nodes_per_layer: int, activation: ActivationFunction
    ) -> "FeedForwardNetwork":
        # Each layer gets its own activation so peeked vectors never collide.
        for _ in range(count):
            self.add_hidden_layer(nodes_per_layer, copy.deepcopy(activation))
        return self

    def _next_inputs(self) -> int:
        return self._layers[-1].outputs if self._layers else self.inputs

    # ------------------------------------------------------------------
    # Forward pass

    @property
    def input(self) -> Array | None:
        return self._input

    @input.setter
    def input(self, value: Array) -> None:
        vector = as_vector(value)
        check_length("Network input", vector.size, self.inputs)
        if not self._layers:
            raise OperationNotPermittedError("The network has no layers")
        vector.setflags(write=False)
        self._input = vector
        self._propagate()

    @property
    def output(self) -> Array:
        if self._input is None:
            raise OperationNotPermittedError("The network has not been given an input")
        if self._stamp != self._current_stamp():
            self._propagate()
        return self._layers[-1].output

    def get_output(self, inputs: Array) -> Array:
        """Assign ``inputs`` and return the network output."""

        self.input = inputs
        return self.output

    forward = get_output

    def predict(self, inputs: Sequence[Array]) -> Array:
        """Stack the outputs for several input vectors into a matrix."""

        return np.vstack([self.get_output(x).copy() for x in inputs])

    def parameter_count(self) -> int:
        return int(sum(layer.parameters().size for layer in self._layers))

    def _propagate(self) -> None:
        signal = self._input
        for layer in self._layers:
            layer.input = signal
            signal = layer.output
        self._stamp = self._current_stamp()

    def _current_stamp(self) -> Tuple[int, ...]:
        return tuple(layer.version for layer in self._layers)

    def __repr__(self) -> str:
        dims = [self.inputs] + [layer.outputs for layer in self._layers]
        return f"FeedForwardNetwork(dims={dims}, complete={self._closed})"


__all__ = ["FeedForwardNetwork"]
