"""Datasets, normalisers and the dataset registry."""

# Ensure built-in datasets register themselves when the package is imported.
from . import synthetic as _synthetic  # noqa: F401
from .dataset import (
    ClassificationDataSet,
    DataPoint,
    DataSet,
    DataSetKind,
    RegressionDataSet,
    UnsupervisedDataSet,
)
from .normalisers import StandardNormaliser
from .registry import available_datasets, get_dataset, register_dataset

__all__ = [
    "ClassificationDataSet",
    "DataPoint",
    "DataSet",
    "DataSetKind",
    "RegressionDataSet",
    "StandardNormaliser",
    "UnsupervisedDataSet",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
