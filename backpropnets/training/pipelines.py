"""Config-driven pipeline assembly for BackpropNets runs."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np

from ..core import activations
from ..core.network import FeedForwardNetwork
from ..core.types import RunResult
from ..data import registry
from ..reporting.metrics import ConsoleSink, CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from . import batching, initialisers, regularisers, termination
from .losses import REGISTRY as LOSS_REGISTRY
from .trainer import BackpropagationTrainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor": {
        "data": {"name": "xor", "options": {}},
        "model": {
            "inputs": 2,
            "outputs": 1,
            "hidden": [5],
            "activation": "sigmoid",
            "output_activation": "sigmoid",
        },
        "train": {
            "learning_rate": 0.07,
            "initialiser": {"name": "uniform", "low": -0.2, "high": 0.2},
            "loss": "squared_error",
            "batch": {"name": "whole"},
            "stochastic": False,
            "epochs": 50000,
            "evaluation_frequency": 5000,
            "seed": 0,
            "run_dir": "runs/xor",
            "enable_plots": False,
            "console": False,
        },
    },
    "sine-regression": {
        "data": {
            "name": "sine",
            "options": {"n_points": 10000, "split": [0.7, 0.2, 0.1]},
        },
        "model": {
            "inputs": 1,
            "outputs": 1,
            "hidden": [32],
            "activation": "sigmoid",
            "output_activation": "sigmoid",
        },
        "train": {
            "learning_rate": 0.1,
            "initialiser": {"name": "uniform", "low": -0.01, "high": 0.01},
            "loss": "squared_error",
            "batch": {"name": "random_subset", "size": 32},
            "stochastic": False,
            "epochs": 1200,
            "evaluation_frequency": 50,
            "seed": 421,
            "run_dir": "runs/sine-regression",
            "enable_plots": False,
            "console": False,
        },
    },
    "quadrant-classification": {
        "data": {
            "name": "quadrants",
            "options": {"n_points": 10000, "split": [0.7, 0.2, 0.1]},
        },
        "model": {
            "inputs": 2,
            "outputs": 4,
            "hidden": [5],
            "activation": "sigmoid",
            "output_activation": "softmax",
        },
        "train": {
            "learning_rate": 0.1,
            "initialiser": {"name": "uniform", "low": -0.01, "high": 0.01},
            "loss": "negative_log_prob",
            "batch": {"name": "random_subset", "size": 32},
            "stochastic": False,
            "epochs": 10,
            "evaluation_frequency": 5,
            "seed": 386,
            "run_dir": "runs/quadrant-classification",
            "enable_plots": False,
            "console": False,
        },
    },
}

_REQUIRED_SECTIONS = {"data", "model", "train"}


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Mapping[str, object]:
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        available = ", ".join(sorted(_PRESETS))
        raise KeyError(f"Unknown preset {name!r}. Available presets: {available}") from exc


def load_config(path: str | Path) -> Mapping[str, object]:
    """Read a JSON or YAML config file into a mapping."""

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(path.read_text()) or {}
    elif suffix == ".json":
        data = json.loads(path.read_text() or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def merge_config(base: Mapping[str, object], override: Mapping[str, object]) -> dict:
    """Recursively overlay ``override`` onto a copy of ``base``."""

    merged = deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)  # type: ignore[arg-type]
        else:
            merged[key] = deepcopy(value)
    return merged


def build_network(model_cfg: Mapping[str, object]) -> FeedForwardNetwork:
    network = FeedForwardNetwork(int(model_cfg["inputs"]), int(model_cfg["outputs"]))
    hidden_activation = str(model_cfg.get("activation", "sigmoid"))
    for nodes in model_cfg.get("hidden", []):  # type: ignore[union-attr]
        network.add_hidden_layer(int(nodes), activations.get(hidden_activation))
    network.add_output_layer(activations.get(str(model_cfg.get("output_activation", "sigmoid"))))
    return network


def build_trainer(
    train_cfg: Mapping[str, object], *, callbacks: Sequence[object] = ()
) -> BackpropagationTrainer:
    seed = int(train_cfg.get("seed", 0))
    batch_rng = np.random.default_rng(seed + 1)

    init_cfg = dict(train_cfg.get("initialiser", {"name": "uniform"}))  # type: ignore[arg-type]
    initialiser = initialisers.build(str(init_cfg.pop("name")), **init_cfg)

    batch_cfg = dict(train_cfg.get("batch", {"name": "whole"}))  # type: ignore[arg-type]
    batch_selector = batching.build(str(batch_cfg.pop("name")), batch_rng, **batch_cfg)

    penalties = [
        regularisers.build(str(item["name"]), float(item["strength"]))
        for item in train_cfg.get("regularisers", [])  # type: ignore[union-attr]
    ]

    conditions = []
    if "epochs" in train_cfg:
        conditions.append(termination.EpochLimit(int(train_cfg["epochs"])))
    for item in train_cfg.get("termination", []):  # type: ignore[union-attr]
        options = dict(item)
        conditions.append(termination.build(str(options.pop("name")), **options))

    return BackpropagationTrainer(
        learning_rate=float(train_cfg.get("learning_rate", 0.01)),
        initialiser=initialiser,
        loss_function=LOSS_REGISTRY.resolve(str(train_cfg.get("loss", "squared_error"))),
        regularisers=penalties,
        batch_selector=batch_selector,
        termination_conditions=conditions,
        stochastic=bool(train_cfg.get("stochastic", False)),
        evaluation_frequency=int(train_cfg.get("evaluation_frequency", 1)),
        seed=seed,
        callbacks=callbacks,
    )


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    seed = int(train_cfg.get("seed", 0))
    dataset = registry.get_dataset(
        str(data_cfg["name"]),
        rng=np.random.default_rng(seed),
        **dict(data_cfg.get("options", {})),  # type: ignore[arg-type]
    )
    network = build_network(model_cfg)

    run_dir = _resolve_run_dir(train_cfg, str(data_cfg["name"]))
    run_dir.mkdir(parents=True, exist_ok=True)

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    callbacks: List[object] = [jsonl, csv_sink, plots]
    if bool(train_cfg.get("console", False)):
        callbacks.append(ConsoleSink())
    trainer = build_trainer(train_cfg, callbacks=callbacks)
    trainer.bind(network, dataset)

    _print_startup_summary(
        dataset_name=str(data_cfg["name"]),
        splits=[len(dataset.training_set), len(dataset.validation_set), len(dataset.test_set)],
        dims=[network.inputs] + [layer.outputs for layer in network.layers],
        loss=str(train_cfg.get("loss", "squared_error")),
        learning_rate=trainer.learning_rate,
        param_count=network.parameter_count(),
        readiness=trainer.troubleshoot(),
    )

    summary = trainer.train(network, dataset)
    plots.close()
    test_loss = trainer.test_loss()

    summary_path = write_summary(jsonl.path, run_dir / "summary.json", test_loss=test_loss)
    (run_dir / "config.json").write_text(json.dumps(json.loads(json.dumps(config)), indent=2))

    return RunResult(
        epochs=summary.epochs,
        metrics_path=str(jsonl.path),
        summary_path=str(summary_path),
        test_loss=test_loss,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    *,
    dataset_name: str,
    splits: List[int],
    dims: Sequence[int],
    loss: str,
    learning_rate: float,
    param_count: int,
    readiness: Sequence[str],
) -> None:
    print("=== BackpropNets run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Splits        : train={splits[0]} val={splits[1]} test={splits[2]}")
    print(f"Dimensions    : {list(dims)}")
    print(f"Loss          : {loss}")
    print(f"Learning rate : {learning_rate}")
    print(f"Parameters    : {param_count}")
    print(f"Readiness     : {'; '.join(readiness)}")
    print("========================")


__all__ = [
    "build_network",
    "build_trainer",
    "load_config",
    "load_preset",
    "merge_config",
    "presets",
    "run_pipeline",
]
