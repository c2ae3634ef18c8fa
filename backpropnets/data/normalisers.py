"""Data normalisers applied in place to :class:`DataPoint` objects."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, Tuple

import numpy as np

from ..core.errors import OperationNotPermittedError
from ..core.types import Array
from .dataset import DataPoint


class Normaliser(Protocol):
    @property
    def is_fit(self) -> bool:
        ...

    def fit(self, points: Sequence[DataPoint]) -> None:
        ...

    def normalise(self, point: DataPoint) -> None:
        ...

    def denormalise(self, point: DataPoint) -> None:
        ...


def standardize(
    array: np.ndarray,
    *,
    mean: np.ndarray | None = None,
    std: np.ndarray | None = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Apply standard scaling returning the scaled array and parameters."""

    if mean is None or std is None:
        mean = array.mean(axis=0)
        std = array.std(axis=0)
        std = np.where(std == 0, 1.0, std)
    scaled = (array - mean) / std
    return scaled, mean, std


class StandardNormaliser:
    """Zero-mean, unit-variance scaling of inputs and, optionally, targets.

    Columns with zero variance are left unscaled.  Points without a target
    are skipped when fitting and transforming the targets.
    """

    def __init__(self, *, targets: bool = True) -> None:
        self.targets = targets
        self._input_params: Optional[Tuple[Array, Array]] = None
        self._target_params: Optional[Tuple[Array, Array]] = None

    @property
    def is_fit(self) -> bool:
        return self._input_params is not None

    def fit(self, points: Sequence[DataPoint]) -> None:
        if not points:
            raise ValueError("Cannot fit a normaliser to an empty set of points")
        _, mean, std = standardize(np.vstack([p.input for p in points]))
        self._input_params = (mean, std)
        labelled = [p.target for p in points if p.target is not None]
        if self.targets and labelled:
            _, mean, std = standardize(np.vstack(labelled))
            self._target_params = (mean, std)

    def normalise(self, point: DataPoint) -> None:
        mean, std = self._params()
        point.input = (point.input - mean) / std
        if self._target_params is not None and point.target is not None:
            t_mean, t_std = self._target_params
            point.target = (point.target - t_mean) / t_std

    def denormalise(self, point: DataPoint) -> None:
        mean, std = self._params()
        point.input = point.input * std + mean
        if self._target_params is not None and point.target is not None:
            t_mean, t_std = self._target_params
            point.target = point.target * t_std + t_mean

    def denormalise_target(self, values: Array) -> Array:
        """Map network outputs back to the original target scale."""

        if self._target_params is None:
            return np.asarray(values, dtype=np.float64)
        t_mean, t_std = self._target_params
        return np.asarray(values, dtype=np.float64) * t_std + t_mean

    def _params(self) -> Tuple[Array, Array]:
        if self._input_params is None:
            raise OperationNotPermittedError("The normaliser has not been fit")
        return self._input_params


__all__ = ["Normaliser", "StandardNormaliser", "standardize"]
