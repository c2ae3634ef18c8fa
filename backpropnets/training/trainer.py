"""Backpropagation trainer: epoch, iteration and per-point control loop."""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Sequence

import numpy as np

from ..core.errors import DimensionMismatchError, OperationNotPermittedError
from ..core.gradients import GradientArena
from ..core.network import FeedForwardNetwork
from ..core.types import EvaluationRecord, TrainerState, TrainingSummary
from ..data.dataset import DataPoint, DataSet, DataSetKind
from .batching import BatchSelector
from .initialisers import Initialiser
from .learning_rates import LearningRates
from .losses import LossFunction
from .regularisers import Regulariser
from .termination import TerminationCondition

NO_ISSUES = "no visible issues"
_NO_TARGET = "Data point has no target; classification data must be one-hot encoded"


class BackpropagationTrainer:
    """Train one :class:`FeedForwardNetwork` on one :class:`DataSet`.

    The loop polls every termination condition before each epoch, records an
    evaluation whenever ``epoch % evaluation_frequency == 0`` and then runs
    the epoch.  An epoch is a sequence of iterations that ends once at least
    as many examples as the training set holds have been consumed.  Each
    iteration draws a batch from ``batch_selector`` and backpropagates every
    point; ``stochastic`` controls whether weights move after each point or
    once per batch.

    Evaluations are forwarded to ``callbacks`` as
    ``{"training_loss": ..., "validation_loss": ...}`` through either an
    ``on_epoch(epoch, metrics)`` method or a plain call.
    """

    def __init__(
        self,
        *,
        learning_rate: float = 0.0,
        individual_learning_rates: bool = False,
        initialiser: Initialiser | None = None,
        loss_function: LossFunction | None = None,
        regularisers: Iterable[Regulariser] = (),
        batch_selector: BatchSelector | None = None,
        termination_conditions: Iterable[TerminationCondition] = (),
        stochastic: bool = False,
        evaluation_frequency: int = 1,
        seed: int = 0,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self._rates = LearningRates(learning_rate, individual_learning_rates)
        self.initialiser = initialiser
        self.loss_function = loss_function
        self.regularisers: List[Regulariser] = list(regularisers)
        self.batch_selector = batch_selector
        self.termination_conditions: List[TerminationCondition] = list(termination_conditions)
        self.stochastic = stochastic
        self.evaluation_frequency = int(evaluation_frequency)
        self.seed = seed
        self.callbacks = list(callbacks or [])

        self.network: Optional[FeedForwardNetwork] = None
        self.dataset: Optional[DataSet] = None
        self._epoch = 0
        self._iterations = 0
        self._examples = 0
        self._evaluations: List[EvaluationRecord] = []
        self._training = False
        self._finished = False

    # ------------------------------------------------------------------
    # Configuration

    @property
    def state(self) -> TrainerState:
        if self._training:
            return TrainerState.TRAINING
        if self._finished:
            return TrainerState.FINISHED
        return TrainerState.READY if self.is_ready() else TrainerState.UNCONFIGURED

    @property
    def learning_rate(self) -> float:
        return self._rates.scalar

    @learning_rate.setter
    def learning_rate(self, value: float) -> None:
        self._rates.scalar = value

    @property
    def individual_learning_rates(self) -> bool:
        return self._rates.individual

    @individual_learning_rates.setter
    def individual_learning_rates(self, value: bool) -> None:
        self._rates.individual = value

    def get_learning_rate(self, layer: Optional[int] = None, *cell: int) -> float:
        return self._rates.get(layer, *cell)

    def set_learning_rate(self, rate: float, layer: Optional[int] = None, *cell: int) -> None:
        self._rates.set(rate, layer, *cell)

    def bind(self, network: FeedForwardNetwork, dataset: DataSet) -> None:
        """Attach ``network`` and ``dataset`` without training."""

        if dataset.inputs != network.inputs:
            raise DimensionMismatchError(
                f"Dataset has {dataset.inputs} inputs but the network takes {network.inputs}"
            )
        if dataset.kind is not DataSetKind.UNSUPERVISED and dataset.outputs != network.outputs:
            raise DimensionMismatchError(
                f"Dataset has {dataset.outputs} outputs but the network produces "
                f"{network.outputs}"
            )
        self.network = network
        self.dataset = dataset
        self._rates.bind(network)

    def troubleshoot(self) -> List[str]:
        """Describe every unmet requirement, or ``["no visible issues"]``."""

        return self._issues() or [NO_ISSUES]

    def is_ready(self) -> bool:
        return not self._issues()

    def _issues(self) -> List[str]:
        issues: List[str] = []
        if self.network is None:
            issues.append("no network")
        elif not self.network.is_complete:
            issues.append("network has no output layer")
        if self.dataset is None:
            issues.append("no data set")
        elif self.dataset.kind is DataSetKind.UNSUPERVISED or any(
            point.target is None for point in self.dataset.training_set
        ):
            issues.append("data set has no targets")
        if self.initialiser is None:
            issues.append("no initialiser")
        if self.loss_function is None:
            issues.append("no loss function")
        issues.extend(self._rates.issues())
        if not self.termination_conditions:
            issues.append("no termination conditions")
        if self.batch_selector is None:
            issues.append("no batch selector")
        if self.evaluation_frequency < 1:
            issues.append("evaluation frequency is 0 or negative")
        return issues

    # ------------------------------------------------------------------
    # Training loop

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def iterations(self) -> int:
        return self._iterations

    @property
    def examples(self) -> int:
        return self._examples

    @property
    def evaluations(self) -> List[EvaluationRecord]:
        return list(self._evaluations)

    def train(self, network: FeedForwardNetwork, dataset: DataSet) -> TrainingSummary:
        self.bind(network, dataset)
        issues = self._issues()
        if issues:
            raise OperationNotPermittedError("Trainer is not ready: " + "; ".join(issues))

        rng = np.random.default_rng(self.seed)
        self.initialiser.initialise(network, rng)  # type: ignore[union-attr]
        arena = GradientArena.for_network(network)
        self._epoch = 0
        self._iterations = 0
        self._examples = 0
        self._evaluations = []
        self._finished = False
        self._training = True
        try:
            while not self._should_stop():
                if self._epoch % self.evaluation_frequency == 0:
                    self._record_evaluation()
                self._run_epoch(arena)
                self._epoch += 1
        finally:
            self._training = False
        self._finished = True
        return TrainingSummary(
            epochs=self._epoch,
            iterations=self._iterations,
            examples=self._examples,
            evaluations=list(self._evaluations),
        )

    def _should_stop(self) -> bool:
        return any(condition.has_finished(self) for condition in self.termination_conditions)

    def _run_epoch(self, arena: GradientArena) -> None:
        assert self.network is not None and self.dataset is not None
        size = len(self.dataset.training_set)
        consumed = 0
        while consumed < size:
            batch = self.batch_selector(self.dataset)  # type: ignore[misc]
            if not batch:
                raise ValueError("Batch selector returned an empty batch")
            self._run_iteration(arena, batch)
            consumed += len(batch)

    def _run_iteration(self, arena: GradientArena, batch: Sequence[DataPoint]) -> None:
        network = self.network
        assert network is not None
        for point in batch:
            if point.target is None:
                raise ValueError(_NO_TARGET)
            network.input = point.input
            arena.backpropagate(network, point.target, self.loss_function, self.regularisers)
            if self.stochastic:
                arena.apply_deltas(network, self._rates.rates())
        if not self.stochastic:
            arena.apply_deltas(network, self._rates.rates())
        self._iterations += 1
        self._examples += len(batch)

    # ------------------------------------------------------------------
    # Evaluation

    def loss(self, point: DataPoint) -> float:
        """Loss of ``point`` plus every regulariser penalty."""

        if self.network is None or self.loss_function is None:
            raise OperationNotPermittedError("A network and a loss function are required")
        if point.target is None:
            raise ValueError(_NO_TARGET)
        output = self.network.get_output(point.input)
        penalty = sum(regulariser.loss(self.network) for regulariser in self.regularisers)
        return float(self.loss_function.error(output, point.target)) + float(penalty)

    def _mean_loss(self, points: Sequence[DataPoint]) -> Optional[float]:
        if not points:
            return None
        return float(np.mean([self.loss(point) for point in points]))

    def training_loss(self) -> Optional[float]:
        return self._mean_loss(self._bound_dataset().training_set)

    def validation_loss(self) -> Optional[float]:
        return self._mean_loss(self._bound_dataset().validation_set)

    def test_loss(self) -> Optional[float]:
        return self._mean_loss(self._bound_dataset().test_set)

    def evaluate_network(self) -> EvaluationRecord:
        return EvaluationRecord(self._epoch, self.training_loss(), self.validation_loss())

    def _record_evaluation(self) -> None:
        record = self.evaluate_network()
        self._evaluations.append(record)
        metrics = {
            "training_loss": record.training_loss,
            "validation_loss": record.validation_loss,
        }
        self._emit_epoch(record.epoch, metrics)

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, Optional[float]]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)

    def _bound_dataset(self) -> DataSet:
        if self.dataset is None:
            raise OperationNotPermittedError("No dataset has been bound")
        return self.dataset


__all__ = ["BackpropagationTrainer", "NO_ISSUES"]
