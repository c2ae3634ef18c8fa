"""Deterministic run summarisation helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping, Optional

import numpy as np

LOSS_KEYS = ("training_loss", "validation_loss")


def _series(records: Iterable[Mapping[str, object]]) -> Mapping[str, list[tuple[int, float]]]:
    series: dict[str, list[tuple[int, float]]] = {}
    for record in records:
        epoch = int(record.get("epoch", 0))  # type: ignore[arg-type]
        for key in LOSS_KEYS:
            value = record.get(key)
            if isinstance(value, (int, float)):
                series.setdefault(key, []).append((epoch, float(value)))
    return series


def build_summary(
    records: list[Mapping[str, object]], *, test_loss: Optional[float] = None
) -> Mapping[str, object]:
    """Summarise evaluation records into min/max/mean/last and the best epoch."""

    metrics: dict[str, Mapping[str, float]] = {}
    for name, points in _series(records).items():
        epochs = np.asarray([p[0] for p in points])
        values = np.asarray([p[1] for p in points], dtype=np.float64)
        best = int(np.argmin(values))
        metrics[name] = {
            "min": float(values[best]),
            "max": float(np.max(values)),
            "mean": float(np.mean(values)),
            "last": float(values[-1]),
            "best_epoch": int(epochs[best]),
        }
    return {
        "version": 1,
        "records": len(records),
        "metrics": metrics,
        "test_loss": test_loss,
    }


def write_summary(
    metrics_jsonl: str | Path,
    out_summary_json: str | Path,
    *,
    test_loss: Optional[float] = None,
) -> str:
    """Write a deterministic summary for ``metrics_jsonl``."""

    metrics_path = Path(metrics_jsonl)
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    records: list[Mapping[str, object]] = []
    if metrics_path.exists():
        for line in metrics_path.read_text().splitlines():
            line = line.strip()
            if not line:
                continue
            records.append(json.loads(line))

    summary = build_summary(records, test_loss=test_loss)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["build_summary", "write_summary"]
