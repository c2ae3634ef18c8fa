"""Core typing contracts for BackpropNets."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional, Union

import numpy as np

Array = np.ndarray

# A learning rate is either shared by every weight of a layer or given per cell.
Rate = Union[float, Array]


class EvaluationRecord(NamedTuple):
    """Loss snapshot taken before an epoch.

    ``validation_loss`` is ``None`` when the validation set is empty.
    """

    epoch: int
    training_loss: Optional[float]
    validation_loss: Optional[float]


class TrainerState(Enum):
    UNCONFIGURED = "unconfigured"
    READY = "ready"
    TRAINING = "training"
    FINISHED = "finished"


@dataclass(frozen=True)
class TrainingSummary:
    """Summary returned by :meth:`BackpropagationTrainer.train`."""

    epochs: int
    iterations: int
    examples: int
    evaluations: List[EvaluationRecord] = field(default_factory=list)


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`backpropnets.training.pipelines.run_pipeline`."""

    epochs: int
    metrics_path: str
    summary_path: str = ""
    test_loss: Optional[float] = None


def as_vector(values, *, dtype=np.float64) -> Array:
    """Return a flat float copy of ``values``."""

    return np.array(values, dtype=dtype).reshape(-1)
