"""Pure in-memory synthetic datasets."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .dataset import ClassificationDataSet, RegressionDataSet
from .registry import register_dataset

_XOR_TABLE = (
    ((0.0, 0.0), 0.0),
    ((1.0, 0.0), 1.0),
    ((0.0, 1.0), 1.0),
    ((1.0, 1.0), 0.0),
)


def sine_target(x: np.ndarray) -> np.ndarray:
    """``sqrt(x) + 0.3 sin(6 sqrt(x))`` on ``[0, 1]``."""

    root = np.sqrt(x)
    return root + 0.3 * np.sin(6.0 * root)


def quadrant(x: float, y: float) -> int:
    """Category of a point of the unit square, numbered column by column."""

    if x < 0.5:
        return 0 if y < 0.5 else 1
    return 2 if y < 0.5 else 3


@register_dataset("xor")
def make_xor(*, rng: np.random.Generator, **_: object) -> RegressionDataSet:
    """The four XOR truth-table rows, all in the training set."""

    dataset = RegressionDataSet(2, 1)
    for inputs, target in _XOR_TABLE:
        dataset.add_data_point(inputs, [target])
    dataset.assign_data_points(1.0, 0.0, 0.0, rng=rng)
    return dataset


@register_dataset("sine")
def make_sine_regression(
    *,
    rng: np.random.Generator,
    n_points: int = 10_000,
    split: Sequence[float] = (0.7, 0.2, 0.1),
    **_: object,
) -> RegressionDataSet:
    dataset = RegressionDataSet(1, 1)
    xs = rng.random(int(n_points))
    for x, y in zip(xs, sine_target(xs)):
        dataset.add_data_point([x], [y])
    dataset.assign_data_points(*split, rng=rng)
    return dataset


@register_dataset("quadrants")
def make_quadrants(
    *,
    rng: np.random.Generator,
    n_points: int = 10_000,
    split: Sequence[float] = (0.7, 0.2, 0.1),
    **_: object,
) -> ClassificationDataSet:
    """Uniform points of the unit square labelled by quadrant, one-hot encoded."""

    dataset = ClassificationDataSet(2, 4)
    for x, y in rng.random((int(n_points), 2)):
        dataset.add_data_point([x, y], quadrant(x, y))
    dataset.assign_data_points(*split, rng=rng)
    dataset.one_hot_all()
    return dataset


__all__ = ["make_xor", "make_sine_regression", "make_quadrants", "sine_target", "quadrant"]
