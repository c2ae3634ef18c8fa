"""Learning-rate state: one shared scalar or one table per layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import numpy as np

from ..core.errors import ConfigurationAccessError
from ..core.types import Rate

if TYPE_CHECKING:  # pragma: no cover
    from ..core.network import FeedForwardNetwork


class LearningRates:
    """Holds either a single rate or per-weight rate tables.

    In individual mode every layer receives a table shaped like its
    ``learning_rate_shape`` once a network is bound; the tables start filled
    with the scalar rate.  Dense layers address a cell with
    ``(output_index, input_index)`` where input column 0 is the bias.
    """

    def __init__(self, rate: float = 0.0, individual: bool = False) -> None:
        self._scalar = float(rate)
        self._individual = bool(individual)
        self._network: Optional["FeedForwardNetwork"] = None
        self._tables: Optional[List[np.ndarray]] = None

    @property
    def individual(self) -> bool:
        return self._individual

    @individual.setter
    def individual(self, value: bool) -> None:
        value = bool(value)
        if value == self._individual:
            return
        self._individual = value
        self._tables = None
        if value and self._network is not None:
            self._build_tables()

    @property
    def scalar(self) -> float:
        if self._individual:
            raise ConfigurationAccessError(
                "Individual learning rates are active; query a layer instead"
            )
        return self._scalar

    @scalar.setter
    def scalar(self, value: float) -> None:
        if self._individual:
            raise ConfigurationAccessError(
                "Individual learning rates are active; set a layer instead"
            )
        self._scalar = float(value)

    def bind(self, network: "FeedForwardNetwork") -> None:
        if network is self._network and (self._tables is not None or not self._individual):
            return
        self._network = network
        self._tables = None
        if self._individual:
            self._build_tables()

    def get(self, layer: Optional[int] = None, *cell: int) -> float:
        if layer is None:
            return self.scalar
        table = self._table(layer, cell)
        return float(table[cell])

    def set(self, rate: float, layer: Optional[int] = None, *cell: int) -> None:
        if layer is None:
            self.scalar = rate
            return
        table = self._table(layer, cell)
        table[cell] = float(rate)

    def for_layer(self, index: int) -> Rate:
        if not self._individual:
            return self._scalar
        if self._tables is None:
            raise ConfigurationAccessError("No learning-rate tables have been built")
        return self._tables[index]

    def rates(self) -> List[Rate]:
        """One rate per bound layer, in layer order."""

        count = len(self._network.layers) if self._network is not None else 0
        return [self.for_layer(idx) for idx in range(count)]

    def issues(self) -> List[str]:
        if self._individual:
            if self._tables is None or self._network is None or len(self._tables) != len(
                self._network.layers
            ):
                return ["individual learning rates is true, but no learning rate lists"]
            return []
        if self._scalar <= 0:
            return ["learning rate is 0 or negative"]
        return []

    @property
    def is_resolved(self) -> bool:
        return not self.issues()

    def _build_tables(self) -> None:
        assert self._network is not None
        self._tables = [
            np.full(layer.learning_rate_shape, self._scalar, dtype=np.float64)
            for layer in self._network.layers
        ]

    def _table(self, layer: int, cell: tuple) -> np.ndarray:
        if not self._individual:
            raise ConfigurationAccessError(
                "Individual learning rates are not active; use the shared rate"
            )
        if self._tables is None or self._network is None:
            raise ConfigurationAccessError("No learning-rate tables have been built")
        if not 0 <= layer < len(self._tables):
            raise IndexError(f"Layer index {layer} out of range")
        rank = self._network.layers[layer].rate_index_rank
        if len(cell) != rank:
            raise ConfigurationAccessError(
                f"Layer {layer} learning rates take {rank} indices, got {len(cell)}"
            )
        return self._tables[layer]


__all__ = ["LearningRates"]
