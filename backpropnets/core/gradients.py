"""Per-layer gradient accumulators and the backpropagation engine.

Each gradient is paired with one layer by position inside a
:class:`GradientArena`.  Gradients never hold a reference to their layer;
the layer is passed in for every step, and the arena walks layers and
gradients in lockstep.

For a dense layer with weights ``W`` (column 0 is the bias), biased input
``x'`` and diagonal activation derivatives ``f'``::

    delta            = output_error * f'
    input_error      = W[:, 1:].T @ delta
    weight_deltas   += outer(delta, x') + sum(r.loss_derivative(W) for r in regs)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterator, List, Sequence

import numpy as np

from .errors import DimensionMismatchError, check_length, check_shape
from .types import Array, Rate, as_vector

if TYPE_CHECKING:  # pragma: no cover
    from ..training.losses import LossFunction
    from ..training.regularisers import Regulariser
    from .layers import Layer
    from .network import FeedForwardNetwork

_SPARSE_NYI = "Sparse layer gradients are not implemented yet"


class Gradient(ABC):
    """Error-derivative state for a single layer."""

    def __init__(self, inputs: int, outputs: int) -> None:
        self.inputs = int(inputs)
        self.outputs = int(outputs)
        self.input_error_derivatives = np.zeros(self.inputs)
        self.output_error_derivatives = np.zeros(self.outputs)

    @abstractmethod
    def backpropagate_output(
        self,
        layer: "Layer",
        target: Array,
        loss_function: "LossFunction",
        regularisers: Sequence["Regulariser"] = (),
    ) -> None:
        """Seed from the loss, assuming ``layer`` is the network's last layer."""

    @abstractmethod
    def backpropagate_hidden(
        self,
        layer: "Layer",
        next_gradient: "Gradient",
        regularisers: Sequence["Regulariser"] = (),
    ) -> None:
        """Seed from the input error derivatives of the following layer."""

    @abstractmethod
    def apply_deltas(self, layer: "Layer", rate: Rate) -> None:
        """Subtract ``rate * deltas`` from the layer weights, then reset."""

    def reset(self) -> None:
        self.input_error_derivatives.fill(0.0)
        self.output_error_derivatives.fill(0.0)

    def _check_layer(self, layer: "Layer") -> None:
        if (layer.inputs, layer.outputs) != (self.inputs, self.outputs):
            raise DimensionMismatchError(
                f"Gradient for a {self.inputs}->{self.outputs} layer cannot be used "
                f"with a {layer.inputs}->{layer.outputs} layer"
            )


class DenseGradient(Gradient):
    """Gradient accumulator for :class:`~backpropnets.core.layers.DenseLayer`."""

    def __init__(self, inputs: int, outputs: int) -> None:
        super().__init__(inputs, outputs)
        self.weight_deltas = np.zeros((self.outputs, self.inputs + 1))

    def backpropagate_output(self, layer, target, loss_function, regularisers=()) -> None:
        self._check_layer(layer)
        target = as_vector(target)
        check_length("Target", target.size, self.outputs)
        self.output_error_derivatives[:] = loss_function.error_derivatives(
            layer.output, target
        )
        self._accumulate(layer, regularisers)

    def backpropagate_hidden(self, layer, next_gradient, regularisers=()) -> None:
        self._check_layer(layer)
        check_length(
            "Next layer input error derivatives",
            next_gradient.input_error_derivatives.size,
            self.outputs,
        )
        self.output_error_derivatives[:] = next_gradient.input_error_derivatives
        self._accumulate(layer, regularisers)

    def apply_deltas(self, layer, rate: Rate) -> None:
        self._check_layer(layer)
        rate = np.asarray(rate, dtype=np.float64)
        if rate.ndim:
            check_shape("Learning-rate matrix", rate.shape, self.weight_deltas.shape)
        layer.weights = layer.weights - rate * self.weight_deltas
        self.reset()

    def reset(self) -> None:
        super().reset()
        self.weight_deltas.fill(0.0)

    def _accumulate(self, layer, regularisers) -> None:
        weights = layer.weights
        delta = self.output_error_derivatives * layer.activation_derivatives()
        # Column 0 multiplies the constant bias input and has no upstream neuron.
        self.input_error_derivatives[:] = weights[:, 1:].T @ delta
        penalty = np.zeros_like(weights)
        for regulariser in regularisers:
            penalty += regulariser.loss_derivative(weights)
        self.weight_deltas += np.outer(delta, layer.processed_input) + penalty


class SparseGradient(Gradient):
    """Placeholder accumulator for sparse layers."""

    def backpropagate_output(self, layer, target, loss_function, regularisers=()) -> None:
        raise NotImplementedError(_SPARSE_NYI)

    def backpropagate_hidden(self, layer, next_gradient, regularisers=()) -> None:
        raise NotImplementedError(_SPARSE_NYI)

    def apply_deltas(self, layer, rate: Rate) -> None:
        raise NotImplementedError(_SPARSE_NYI)


class GradientArena:
    """One gradient per layer, indexed in lockstep with the network's layers."""

    def __init__(self, gradients: Sequence[Gradient]) -> None:
        self._gradients: List[Gradient] = list(gradients)

    @classmethod
    def for_network(cls, network: "FeedForwardNetwork") -> "GradientArena":
        return cls([layer.make_gradient() for layer in network.layers])

    def __len__(self) -> int:
        return len(self._gradients)

    def __getitem__(self, index: int) -> Gradient:
        return self._gradients[index]

    def __iter__(self) -> Iterator[Gradient]:
        return iter(self._gradients)

    def backpropagate(
        self,
        network: "FeedForwardNetwork",
        target: Array,
        loss_function: "LossFunction",
        regularisers: Sequence["Regulariser"] = (),
    ) -> None:
        """Accumulate deltas for the network's current forward pass."""

        layers = self._paired_layers(network)
        last = len(layers) - 1
        self._gradients[last].backpropagate_output(
            layers[last], target, loss_function, regularisers
        )
        for idx in reversed(range(last)):
            self._gradients[idx].backpropagate_hidden(
                layers[idx], self._gradients[idx + 1], regularisers
            )

    def apply_deltas(self, network: "FeedForwardNetwork", rates: Sequence[Rate]) -> None:
        layers = self._paired_layers(network)
        check_length("Learning rates", len(rates), len(layers))
        for layer, gradient, rate in zip(layers, self._gradients, rates):
            gradient.apply_deltas(layer, rate)

    def reset(self) -> None:
        for gradient in self._gradients:
            gradient.reset()

    def _paired_layers(self, network: "FeedForwardNetwork") -> Sequence["Layer"]:
        layers = network.layers
        check_length("Network layers", len(layers), len(self._gradients))
        return layers


__all__ = ["Gradient", "DenseGradient", "SparseGradient", "GradientArena"]
