"""Termination conditions polled by the trainer before every epoch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Protocol

if TYPE_CHECKING:  # pragma: no cover
    from .trainer import BackpropagationTrainer


class TerminationCondition(Protocol):
    def has_finished(self, trainer: "BackpropagationTrainer") -> bool:
        ...


@dataclass(frozen=True)
class EpochLimit:
    """Stops once ``limit`` epochs have completed."""

    limit: int

    def __post_init__(self) -> None:
        if self.limit < 0:
            raise ValueError("Epoch limit must be non-negative")

    def has_finished(self, trainer: "BackpropagationTrainer") -> bool:
        return trainer.epoch >= self.limit


@dataclass(frozen=True)
class LossThreshold:
    """Stops when the most recent evaluation falls below ``threshold``.

    ``split`` selects which loss of the evaluation record is compared and is
    either ``"training"`` or ``"validation"``.  Without an evaluation, or
    when the selected loss is unavailable, training continues.
    """

    threshold: float
    split: str = "training"

    def __post_init__(self) -> None:
        if self.split not in {"training", "validation"}:
            raise ValueError("split must be one of {'training','validation'}")

    def has_finished(self, trainer: "BackpropagationTrainer") -> bool:
        if not trainer.evaluations:
            return False
        latest = trainer.evaluations[-1]
        loss = latest.training_loss if self.split == "training" else latest.validation_loss
        return loss is not None and loss < self.threshold


class ExternalSignal:
    """Stops as soon as ``check()`` returns True, e.g. on a user interrupt flag."""

    def __init__(self, check: Callable[[], bool]) -> None:
        self.check = check

    def has_finished(self, trainer: "BackpropagationTrainer") -> bool:
        return bool(self.check())


def build(name: str, **options) -> TerminationCondition:
    """Construct a termination condition from its config name."""

    key = name.lower()
    if key == "epoch_limit":
        return EpochLimit(int(options["limit"]))
    if key == "loss_threshold":
        return LossThreshold(
            float(options["threshold"]), split=str(options.get("split", "training"))
        )
    raise KeyError(
        f"Unknown termination condition {name!r}. "
        "Available conditions: epoch_limit, loss_threshold"
    )


__all__ = ["TerminationCondition", "EpochLimit", "LossThreshold", "ExternalSignal", "build"]
