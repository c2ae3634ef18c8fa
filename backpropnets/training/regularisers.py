"""Weight-magnitude penalties added to both the loss and the weight deltas."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import numpy as np

from ..core.types import Array

if TYPE_CHECKING:  # pragma: no cover
    from ..core.network import FeedForwardNetwork


class Regulariser(Protocol):
    def loss(self, network: "FeedForwardNetwork") -> float:
        """Penalty contributed by every weight of ``network``."""

    def loss_derivative(self, weight: Array) -> Array:
        """Elementwise d penalty / d weight."""


@dataclass(frozen=True)
class L2:
    """``0.5 * strength * sum(w ** 2)``."""

    strength: float

    def loss(self, network: "FeedForwardNetwork") -> float:
        total = sum(float(np.sum(layer.parameters() ** 2)) for layer in network.layers)
        return 0.5 * self.strength * total

    def loss_derivative(self, weight: Array) -> Array:
        return self.strength * np.asarray(weight, dtype=np.float64)


@dataclass(frozen=True)
class L1:
    """``strength * sum(|w|)``."""

    strength: float

    def loss(self, network: "FeedForwardNetwork") -> float:
        total = sum(float(np.sum(np.abs(layer.parameters()))) for layer in network.layers)
        return self.strength * total

    def loss_derivative(self, weight: Array) -> Array:
        return self.strength * np.sign(weight)


def build(name: str, strength: float) -> Regulariser:
    """Construct a regulariser from its config name."""

    key = name.lower()
    if key == "l2":
        return L2(float(strength))
    if key == "l1":
        return L1(float(strength))
    raise KeyError(f"Unknown regulariser {name!r}. Available regularisers: l1, l2")


__all__ = ["Regulariser", "L1", "L2", "build"]
