"""Loss functions and the registry used by config-driven runs."""

from __future__ import annotations

from typing import Dict, Iterable, Protocol

import numpy as np

from ..core.errors import check_length
from ..core.types import Array, as_vector


class LossFunction(Protocol):
    """Scalar loss of one output vector against one target vector."""

    name: str

    def error(self, output: Array, target: Array) -> float:
        ...

    def error_derivative(self, output: Array, target: Array, i: int) -> float:
        """Return d error / d output[i]."""

    def error_derivatives(self, output: Array, target: Array) -> Array:
        ...


class _ElementwiseLoss:
    """Shared plumbing: shape checks and the per-index derivative."""

    name = ""

    def error(self, output: Array, target: Array) -> float:
        output, target = self._pair(output, target)
        return float(self._error(output, target))

    def error_derivative(self, output: Array, target: Array, i: int) -> float:
        return float(self.error_derivatives(output, target)[i])

    def error_derivatives(self, output: Array, target: Array) -> Array:
        output, target = self._pair(output, target)
        return self._derivatives(output, target)

    @staticmethod
    def _pair(output: Array, target: Array) -> tuple[Array, Array]:
        output = as_vector(output)
        target = as_vector(target)
        check_length("Target", target.size, output.size)
        return output, target

    def _error(self, output: Array, target: Array) -> float:
        raise NotImplementedError

    def _derivatives(self, output: Array, target: Array) -> Array:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class SquaredError(_ElementwiseLoss):
    """Half the squared magnitude of ``target - output``."""

    name = "squared_error"

    def _error(self, output: Array, target: Array) -> float:
        diff = target - output
        return 0.5 * float(np.dot(diff, diff))

    def _derivatives(self, output: Array, target: Array) -> Array:
        return output - target


class NegativeLogProb(_ElementwiseLoss):
    """Negative log-probability of a one-hot target; outputs are probabilities."""

    name = "negative_log_prob"

    def _error(self, output: Array, target: Array) -> float:
        return float(-np.sum(target * np.log(output)))

    def _derivatives(self, output: Array, target: Array) -> Array:
        return -target / output


class CrossEntropy(_ElementwiseLoss):
    """Binary cross entropy for a single output in [0, 1] and a 0/1 target."""

    name = "cross_entropy"

    def error_derivative(self, output: Array, target: Array, i: int) -> float:
        if i != 0:
            raise ValueError("Cross entropy loss can only be used with one output")
        return super().error_derivative(output, target, i)

    @staticmethod
    def _pair(output: Array, target: Array) -> tuple[Array, Array]:
        output, target = _ElementwiseLoss._pair(output, target)
        if output.size != 1:
            raise ValueError("Cross entropy loss can only be used with one output")
        return output, target

    def _error(self, output: Array, target: Array) -> float:
        o, t = output[0], target[0]
        return float(-(t * np.log(o) + (1.0 - t) * np.log(1.0 - o)))

    def _derivatives(self, output: Array, target: Array) -> Array:
        return (target - 1.0) / (output - 1.0) - target / output


class LossRegistry:
    """Central registry for loss functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, LossFunction] = {}

    def register(self, name: str, loss: LossFunction) -> None:
        self._registry[name] = loss

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def resolve(self, name: str) -> LossFunction:
        if name not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown loss {name!r}. Available losses: {available}")
        return self._registry[name]


REGISTRY = LossRegistry()
REGISTRY.register("squared_error", SquaredError())
REGISTRY.register("negative_log_prob", NegativeLogProb())
REGISTRY.register("cross_entropy", CrossEntropy())
# Short aliases used in presets
REGISTRY.register("squared", REGISTRY.resolve("squared_error"))
REGISTRY.register("nll", REGISTRY.resolve("negative_log_prob"))

__all__ = [
    "LossFunction",
    "SquaredError",
    "NegativeLogProb",
    "CrossEntropy",
    "LossRegistry",
    "REGISTRY",
]
