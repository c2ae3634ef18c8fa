import json
from pathlib import Path

from backpropnets.reporting import build_summary
from backpropnets.training import pipelines


def _config(run_dir):
    return {
        "data": {"name": "sine", "options": {"n_points": 60, "split": [0.7, 0.2, 0.1]}},
        "model": {
            "inputs": 1,
            "outputs": 1,
            "hidden": [4],
            "activation": "sigmoid",
            "output_activation": "sigmoid",
        },
        "train": {
            "learning_rate": 0.1,
            "initialiser": {"name": "uniform", "low": -0.1, "high": 0.1},
            "loss": "squared_error",
            "batch": {"name": "random_subset", "size": 8},
            "epochs": 6,
            "evaluation_frequency": 2,
            "seed": 55,
            "run_dir": str(run_dir),
        },
    }


def test_summary_outputs_are_deterministic(tmp_path):
    first = pipelines.run_pipeline(_config(tmp_path / "run_a"))
    second = pipelines.run_pipeline(_config(tmp_path / "run_b"))

    assert Path(first.metrics_path).read_bytes() == Path(second.metrics_path).read_bytes()
    assert Path(first.summary_path).read_bytes() == Path(second.summary_path).read_bytes()
    assert first.test_loss == second.test_loss


def test_build_summary_tracks_best_epoch():
    records = [
        {"epoch": 0, "training_loss": 0.5, "validation_loss": 0.6},
        {"epoch": 5, "training_loss": 0.2, "validation_loss": 0.4},
        {"epoch": 10, "training_loss": 0.3},
    ]
    summary = build_summary(records, test_loss=0.25)
    training = summary["metrics"]["training_loss"]
    assert training["best_epoch"] == 5
    assert training["min"] == 0.2
    assert training["last"] == 0.3
    assert summary["metrics"]["validation_loss"]["last"] == 0.4
    assert summary["records"] == 3
    assert json.loads(json.dumps(summary))["test_loss"] == 0.25
