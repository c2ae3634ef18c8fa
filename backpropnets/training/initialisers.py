"""Weight initialisers.

Initialisers only describe how to sample; each layer decides how the samples
become its weights through :meth:`Layer.initialise`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Sequence, Tuple

import numpy as np

from ..core.errors import check_length
from ..core.types import Array

if TYPE_CHECKING:  # pragma: no cover
    from ..core.network import FeedForwardNetwork


class Initialiser(Protocol):
    def initialise(self, network: "FeedForwardNetwork", rng: np.random.Generator) -> None:
        """Set the initial weights of every layer of ``network``."""


@dataclass(frozen=True)
class Uniform:
    """Samples every weight from ``U(low, high)``."""

    low: float
    high: float
    zero_bias: bool = False

    def initialise(self, network: "FeedForwardNetwork", rng: np.random.Generator) -> None:
        for layer in network.layers:
            layer.initialise(
                lambda shape: rng.uniform(self.low, self.high, size=shape),
                zero_bias=self.zero_bias,
            )


@dataclass(frozen=True)
class Normal:
    """Samples every weight from ``N(mean, std**2)``."""

    mean: float = 0.0
    std: float = 0.05
    zero_bias: bool = False

    def initialise(self, network: "FeedForwardNetwork", rng: np.random.Generator) -> None:
        for layer in network.layers:
            layer.initialise(
                lambda shape: rng.normal(self.mean, self.std, size=shape),
                zero_bias=self.zero_bias,
            )


class Custom:
    """Assigns explicit weight matrices, one per layer; useful in tests."""

    def __init__(self, matrices: Sequence[Array]) -> None:
        self.matrices = [np.array(m, dtype=np.float64) for m in matrices]

    def initialise(self, network: "FeedForwardNetwork", rng: np.random.Generator) -> None:
        check_length("Custom weight matrices", len(self.matrices), len(network.layers))
        for layer, matrix in zip(network.layers, self.matrices):
            layer.initialise(_fixed(matrix))


def _fixed(matrix: Array):
    def sample(shape: Tuple[int, ...]) -> Array:
        return matrix.copy()

    return sample


def build(name: str, **options) -> Initialiser:
    """Construct an initialiser from its config name."""

    key = name.lower()
    if key == "uniform":
        return Uniform(
            low=float(options.get("low", -0.01)),
            high=float(options.get("high", 0.01)),
            zero_bias=bool(options.get("zero_bias", False)),
        )
    if key == "normal":
        return Normal(
            mean=float(options.get("mean", 0.0)),
            std=float(options.get("std", 0.05)),
            zero_bias=bool(options.get("zero_bias", False)),
        )
    raise KeyError(f"Unknown initialiser {name!r}. Available initialisers: normal, uniform")


__all__ = ["Initialiser", "Uniform", "Normal", "Custom", "build"]
