# Tests for AegisSim.cli

import pandas as pd
import yaml

from AegisSim.cli import main


def test_cli_runs_and_writes_csv(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    csv_path = tmp_path / "trajectory.csv"
    exit_code = main([
        "--patient", "adult_avg", "--duration", "2", "--meals", "standard",
        "--challenge", "none", "--seed", "3", "--step-delay", "0",
        "--csv", str(csv_path),
    ])
    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Time in range (70-180)" in out
    assert "Meal decisions" in out

    df = pd.read_csv(csv_path)
    assert list(df.columns) == ["time_hours", "glucose"]
    assert len(df) == 24
    assert df["glucose"].between(50, 350).all()


def test_cli_reads_config_and_lets_flags_override(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    config_path = tmp_path / "run.yaml"
    with open(config_path, "w") as f:
        yaml.dump({"simulation": {
            "patient": "child", "duration_hours": 1, "meal_plan": "irregular",
            "challenge": "dawn", "seed": 1, "step_delay_seconds": 0,
        }}, f)

    assert main(["--config", str(config_path)]) == 0
    assert "Samples" in capsys.readouterr().out

    csv_path = tmp_path / "out.csv"
    assert main(["--config", str(config_path), "--duration", "3", "--csv", str(csv_path)]) == 0
    assert len(pd.read_csv(csv_path)) == 36


def test_cli_reports_configuration_errors(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    exit_code = main([
        "--patient", "unknown", "--duration", "2", "--meals", "standard",
        "--challenge", "none", "--step-delay", "0",
    ])
    assert exit_code == 2
    assert "Unknown patient archetype" in capsys.readouterr().err


def test_cli_requires_all_selections(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["--patient", "adult_avg"]) == 2
    assert "simulation.duration_hours" in capsys.readouterr().err


def test_cli_rejects_negative_seed(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    exit_code = main([
        "--patient", "adult_avg", "--duration", "1", "--meals", "standard",
        "--challenge", "none", "--seed", "-1", "--step-delay", "0",
    ])
    assert exit_code == 2
    assert "seed" in capsys.readouterr().err


def test_cli_reports_unreadable_config(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "dir.yaml").mkdir()
    assert main(["--config", str(tmp_path / "dir.yaml")]) == 2
    assert "error:" in capsys.readouterr().err
