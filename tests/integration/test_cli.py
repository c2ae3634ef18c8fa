import json
from pathlib import Path

import pytest

from cli.main import main


def test_cli_runs_preset_with_overrides(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "xor", "--epochs", "10", "--seed", "4", "--run-dir", "out"])
    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["epochs"] == 10
    assert Path(payload["metrics"]).exists()
    assert Path("out/summary.json").exists()


def test_cli_console_prints_evaluations(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "xor", "--epochs", "4", "--run-dir", "out", "--console"])
    out = capsys.readouterr().out
    assert out.count("training loss=") == 1


def test_cli_lists_presets(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--list-presets"])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out.split() == ["quadrant-classification", "sine-regression", "xor"]


def test_cli_config_override_and_dump(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    override = tmp_path / "override.json"
    override.write_text(json.dumps({"train": {"epochs": 2, "learning_rate": 0.3}}))
    main(["--config", str(override), "--dump-config", "dumped.json", "--run-dir", "cfg"])
    dumped = json.loads(Path("dumped.json").read_text())
    assert dumped["train"]["learning_rate"] == 0.3
    assert dumped["train"]["run_dir"] == "cfg"
    assert dumped["model"]["hidden"] == [5]
