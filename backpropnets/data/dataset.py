"""In-memory datasets with probabilistic train/validation/test assignment."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Sequence

import numpy as np

from ..core.errors import OperationNotPermittedError, check_length
from ..core.types import Array, as_vector

if TYPE_CHECKING:  # pragma: no cover
    from .normalisers import Normaliser


@dataclass(eq=False)
class DataPoint:
    """One example.  ``category == -1`` means the point carries no class."""

    input: Array
    target: Optional[Array] = None
    category: int = -1

    def __post_init__(self) -> None:
        self.input = as_vector(self.input)
        if self.target is not None:
            self.target = as_vector(self.target)
        self.category = int(self.category)

    def one_hot(self, categories: int) -> None:
        """Replace the target with the one-hot encoding of ``category``."""

        if not 0 <= self.category < categories:
            raise ValueError(
                f"Category {self.category} is outside the range [0, {categories})"
            )
        target = np.zeros(categories)
        target[self.category] = 1.0
        self.target = target


class DataSetKind(Enum):
    REGRESSION = "regression"
    CLASSIFICATION = "classification"
    UNSUPERVISED = "unsupervised"


class DataSet:
    """Base class for the three dataset kinds.

    Points are queued as *unassigned* until :meth:`assign_data_points`
    distributes them.  Each call only touches the queued points; previous
    assignments are kept.
    """

    kind: DataSetKind

    def __init__(self, inputs: int, outputs: int) -> None:
        self.inputs = int(inputs)
        self.outputs = int(outputs)
        self._unassigned: List[DataPoint] = []
        self._training: List[DataPoint] = []
        self._validation: List[DataPoint] = []
        self._test: List[DataPoint] = []

    @property
    def training_set(self) -> Sequence[DataPoint]:
        return tuple(self._training)

    @property
    def validation_set(self) -> Sequence[DataPoint]:
        return tuple(self._validation)

    @property
    def test_set(self) -> Sequence[DataPoint]:
        return tuple(self._test)

    @property
    def unassigned(self) -> Sequence[DataPoint]:
        return tuple(self._unassigned)

    def __len__(self) -> int:
        return len(self._unassigned) + len(self._training) + len(self._validation) + len(self._test)

    def add(self, point: DataPoint) -> None:
        check_length("Data point input", point.input.size, self.inputs)
        self._unassigned.append(point)

    def assign_data_points(
        self,
        training: float,
        validation: float,
        test: float,
        *,
        rng: np.random.Generator,
    ) -> None:
        """Send each unassigned point to a split with probability proportional to its ratio."""

        ratios = np.array([training, validation, test], dtype=np.float64)
        if np.any(ratios < 0) or ratios.sum() <= 0:
            raise ValueError("Split ratios must be non-negative and not all zero")
        cutoff_training, cutoff_validation = np.cumsum(ratios)[:2] / ratios.sum()
        draws = rng.random(len(self._unassigned))
        for point, draw in zip(self._unassigned, draws):
            if draw < cutoff_training:
                self._training.append(point)
            elif draw < cutoff_validation:
                self._validation.append(point)
            else:
                self._test.append(point)
        self._unassigned.clear()

    def whole_set(self) -> List[DataPoint]:
        """Training, validation, test, then unassigned points."""

        return [*self._training, *self._validation, *self._test, *self._unassigned]

    def random_training_subset(self, count: int, *, rng: np.random.Generator) -> List[DataPoint]:
        return _sample(self._training, count, rng, "training")

    def random_validation_subset(self, count: int, *, rng: np.random.Generator) -> List[DataPoint]:
        return _sample(self._validation, count, rng, "validation")

    def random_test_subset(self, count: int, *, rng: np.random.Generator) -> List[DataPoint]:
        return _sample(self._test, count, rng, "test")

    def normalise_by(self, normaliser: "Normaliser") -> None:
        """Normalise every point in place, fitting ``normaliser`` first if needed."""

        points = self.whole_set()
        if not normaliser.is_fit:
            normaliser.fit(points)
        for point in points:
            normaliser.normalise(point)

    def denormalise_by(self, normaliser: "Normaliser") -> None:
        if not normaliser.is_fit:
            raise OperationNotPermittedError(
                "Cannot denormalise data according to a normaliser that has not been fit"
            )
        for point in self.whole_set():
            normaliser.denormalise(point)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(inputs={self.inputs}, outputs={self.outputs}, "
            f"train={len(self._training)}, val={len(self._validation)}, "
            f"test={len(self._test)}, unassigned={len(self._unassigned)})"
        )


class RegressionDataSet(DataSet):
    kind = DataSetKind.REGRESSION

    def add_data_point(self, inputs, target) -> DataPoint:
        point = DataPoint(inputs, target)
        check_length("Data point target", point.target.size, self.outputs)  # type: ignore[union-attr]
        self.add(point)
        return point


class ClassificationDataSet(DataSet):
    """Points carry a category index; :meth:`one_hot_all` derives the targets."""

    kind = DataSetKind.CLASSIFICATION

    def __init__(self, inputs: int, categories: int) -> None:
        if categories < 2:
            raise ValueError("A classification dataset needs at least two categories")
        super().__init__(inputs, categories)
        self.categories = int(categories)

    def add_data_point(self, inputs, category: int) -> DataPoint:
        if not 0 <= int(category) < self.categories:
            raise ValueError(
                f"Category {category} is outside the range [0, {self.categories})"
            )
        point = DataPoint(inputs, category=category)
        self.add(point)
        return point

    def one_hot_all(self) -> None:
        for point in self.whole_set():
            point.one_hot(self.categories)


class UnsupervisedDataSet(DataSet):
    kind = DataSetKind.UNSUPERVISED

    def __init__(self, inputs: int) -> None:
        super().__init__(inputs, 0)

    def add_data_point(self, inputs) -> DataPoint:
        point = DataPoint(inputs)
        self.add(point)
        return point


def _sample(
    points: Sequence[DataPoint], count: int, rng: np.random.Generator, name: str
) -> List[DataPoint]:
    if count < 0:
        raise ValueError("Subset size must be non-negative")
    if count and not points:
        raise ValueError(f"Cannot sample from an empty {name} set")
    indices = rng.integers(0, len(points), size=count) if count else []
    return [points[int(idx)] for idx in indices]


__all__ = [
    "DataPoint",
    "DataSetKind",
    "DataSet",
    "RegressionDataSet",
    "ClassificationDataSet",
    "UnsupervisedDataSet",
]
