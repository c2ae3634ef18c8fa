"""Dataset registry used by config-driven runs."""

from __future__ import annotations

from typing import Any, Callable, Iterable, MutableMapping

import numpy as np

from .dataset import DataSet

DatasetFactory = Callable[..., DataSet]

_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("xor")
        def make_xor(*, rng, **options):
            ...

    or directly::

        register_dataset("xor", make_xor)

    Factories receive a keyword-only ``rng`` plus the options from the
    ``data`` section of a config and return a :class:`DataSet` whose points
    have already been assigned to splits.
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(name: str, *, rng: np.random.Generator, **options: Any) -> DataSet:
    """Build the dataset registered as ``name``."""

    if name not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset {name!r}. Available datasets: {available}")
    dataset = _REGISTRY[name](rng=rng, **options)
    if not isinstance(dataset, DataSet):
        raise TypeError(f"Dataset factory {name!r} returned {type(dataset).__name__}")
    return dataset


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


__all__ = ["DatasetFactory", "register_dataset", "get_dataset", "available_datasets"]
