"""Batch selectors: callables mapping a dataset to the next list of points."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List

import numpy as np

if TYPE_CHECKING:  # pragma: no cover
    from ..data.dataset import DataPoint, DataSet

BatchSelector = Callable[["DataSet"], List["DataPoint"]]


def whole_training_set(dataset: "DataSet") -> List["DataPoint"]:
    """Full-batch training."""

    return list(dataset.training_set)


def random_training_subset(size: int, rng: np.random.Generator) -> BatchSelector:
    """Draw ``size`` training points with replacement on every call."""

    if size < 1:
        raise ValueError("Batch size must be positive")

    def select(dataset: "DataSet") -> List["DataPoint"]:
        return dataset.random_training_subset(size, rng=rng)

    return select


def single_random_example(rng: np.random.Generator) -> BatchSelector:
    return random_training_subset(1, rng)


def sequential_batches(size: int) -> BatchSelector:
    """Walk the training set in order, ``size`` points at a time, wrapping around."""

    if size < 1:
        raise ValueError("Batch size must be positive")
    cursor = {"position": 0}

    def select(dataset: "DataSet") -> List["DataPoint"]:
        points = dataset.training_set
        if not points:
            return []
        start = cursor["position"] % len(points)
        batch = [points[(start + offset) % len(points)] for offset in range(size)]
        cursor["position"] = (start + size) % len(points)
        return batch

    return select


def build(name: str, rng: np.random.Generator, **options) -> BatchSelector:
    """Construct a batch selector from its config name."""

    key = name.lower()
    if key == "whole":
        return whole_training_set
    if key == "random_subset":
        return random_training_subset(int(options.get("size", 32)), rng)
    if key == "single":
        return single_random_example(rng)
    if key == "sequential":
        return sequential_batches(int(options.get("size", 32)))
    raise KeyError(
        f"Unknown batch selector {name!r}. "
        "Available selectors: random_subset, sequential, single, whole"
    )


__all__ = [
    "BatchSelector",
    "whole_training_set",
    "random_training_subset",
    "single_random_example",
    "sequential_batches",
    "build",
]
