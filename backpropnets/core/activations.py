"""Activation strategies for BackpropNets.

An activation is shown a whole pre-activation vector with :meth:`peek` and
then answers per-index queries about it.  Functions whose outputs depend on
the entire vector (softmax) do their vector-wide work in :meth:`peek`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable

import numpy as np

from .errors import OperationNotPermittedError
from .types import Array, as_vector


class ActivationFunction(ABC):
    """Base class for activation strategies."""

    name = ""
    interdependent = False

    def __init__(self) -> None:
        self._pre_activation: Array | None = None
        self._values: Array | None = None

    def peek(self, pre_activation: Array) -> None:
        """Record ``pre_activation`` and precompute its activated values."""

        pre = as_vector(pre_activation)
        self._pre_activation = pre
        self._values = self._activate(pre)

    def value(self, i: int) -> float:
        return float(self._peeked_values()[i])

    def derivative(self, i: int, j: int | None = None) -> float:
        """Return d output[j] / d pre_activation[i]; ``j`` defaults to ``i``."""

        j = i if j is None else j
        if i != j and not self.interdependent:
            return 0.0
        if i == j:
            return float(self.diagonal_derivatives()[i])
        return float(self.jacobian()[i, j])

    def is_interdependent(self) -> bool:
        return self.interdependent

    def output(self, pre_activation: Array) -> Array:
        """Peek once at ``pre_activation`` and return every activated value."""

        self.peek(pre_activation)
        return self._peeked_values().copy()

    def diagonal_derivatives(self) -> Array:
        values = self._peeked_values()
        return self._diagonal(self._pre_activation, values)

    def jacobian(self) -> Array:
        """Full matrix ``J[i, j] = d output[j] / d pre_activation[i]``."""

        return np.diag(self.diagonal_derivatives())

    def _peeked_values(self) -> Array:
        if self._values is None:
            raise OperationNotPermittedError(
                f"{type(self).__name__}.peek() must be called before querying values"
            )
        return self._values

    @abstractmethod
    def _activate(self, pre: Array) -> Array:
        ...

    @abstractmethod
    def _diagonal(self, pre: Array, values: Array) -> Array:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Sigmoid(ActivationFunction):
    """Maps inputs to (0, 1); approximately linear at the origin."""

    name = "sigmoid"

    def _activate(self, pre: Array) -> Array:
        return 1.0 / (1.0 + np.exp(-pre))

    def _diagonal(self, pre: Array, values: Array) -> Array:
        return values * (1.0 - values)


class Relu(ActivationFunction):
    """Returns ``x`` for positive ``x`` and 0 otherwise."""

    name = "relu"

    def _activate(self, pre: Array) -> Array:
        return np.maximum(pre, 0.0)

    def _diagonal(self, pre: Array, values: Array) -> Array:
        # Sub-gradient at exactly 0 is taken as 0.
        return (pre > 0).astype(np.float64)


class Tanh(ActivationFunction):
    name = "tanh"

    def _activate(self, pre: Array) -> Array:
        return np.tanh(pre)

    def _diagonal(self, pre: Array, values: Array) -> Array:
        return 1.0 - values**2


class Linear(ActivationFunction):
    """Identity activation, for unbounded regression outputs."""

    name = "linear"

    def _activate(self, pre: Array) -> Array:
        return pre.copy()

    def _diagonal(self, pre: Array, values: Array) -> Array:
        return np.ones_like(pre)


class Softmax(ActivationFunction):
    """Normalised exponentials; every output depends on the whole vector.

    No max-subtraction is performed, so very large pre-activations overflow.
    """

    name = "softmax"
    interdependent = True

    def _activate(self, pre: Array) -> Array:
        exp = np.exp(pre)
        return exp / np.sum(exp)

    def _diagonal(self, pre: Array, values: Array) -> Array:
        return values * (1.0 - values)

    def jacobian(self) -> Array:
        values = self._peeked_values()
        return np.diag(values) - np.outer(values, values)


_REGISTRY: Dict[str, Callable[[], ActivationFunction]] = {
    cls.name: cls for cls in (Sigmoid, Relu, Tanh, Linear, Softmax)
}


def get(name: str) -> ActivationFunction:
    """Return a fresh activation instance registered under ``name``."""

    key = name.lower()
    if key not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown activation {name!r}. Available activations: {available}")
    return _REGISTRY[key]()


def names() -> Iterable[str]:
    return sorted(_REGISTRY)


__all__ = [
    "ActivationFunction",
    "Sigmoid",
    "Relu",
    "Tanh",
    "Linear",
    "Softmax",
    "get",
    "names",
]
