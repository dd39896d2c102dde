"""End-to-end tests for the ReliaSim CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from reliasim import __version__
from reliasim.cli.app import app
from reliasim.scenarios.loader import load_scenario_file
from reliasim.storage.sql_store import DATABASE_FILENAME, SqlRunRepository

runner = CliRunner()


def _json_document(output: str) -> dict[str, Any]:
    """Return the JSON run document written by ``run --json``."""
    for line in reversed(output.splitlines()):
        if line.startswith('{"scenario"'):
            return json.loads(line)
    msg = f"no JSON document in output:\n{output}"
    raise AssertionError(msg)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def healthy_file(tmp_path: Path) -> Path:
    """Scenario file that never fails."""
    document = {
        "name": "CLI Healthy",
        "config": {
            "rps": 40,
            "duration": 4,
            "tickInterval": 1000,
            "capacity": 1000,
            "baseFailureProbability": 0,
            "retry": {"maxRetries": 0},
            "circuitBreaker": {"enabled": False},
        },
    }
    path = tmp_path / "healthy.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture
def failing_file(tmp_path: Path) -> Path:
    """Scenario file with a high failure rate."""
    document = {
        "rps": 40,
        "duration": 3,
        "capacity": 1000,
        "baseFailureProbability": 0.6,
        "retry": {"maxRetries": 0},
    }
    path = tmp_path / "failing.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("RELIASIM_DATA_DIR", "RELIASIM_LOG_JSON", "RELIASIM_LIVE_SPEED"):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Tests: version and help
# ---------------------------------------------------------------------------


def test_version_flag():
    """--version prints version and exits 0."""
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_version_short_flag():
    """-V also prints version."""
    result = runner.invoke(app, ["-V"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_commands():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("run", "presets", "init", "compare"):
        assert command in result.output


# ---------------------------------------------------------------------------
# Tests: run
# ---------------------------------------------------------------------------


def test_run_healthy_file(healthy_file: Path):
    """A healthy scenario completes and reports normal operation."""
    result = runner.invoke(app, ["run", str(healthy_file), "--seed", "42", "--json"])
    assert result.exit_code == 0, result.output
    assert "Run Complete" in result.output

    document = _json_document(result.output)
    assert document["seed"] == 42
    assert document["scenario"]["name"] == "CLI Healthy"
    assert len(document["metrics"]) == 4
    assert document["summary"]["errorRate"] == 0
    assert document["summary"]["mainCause"] == "System operated normally"


def test_run_is_reproducible(healthy_file: Path):
    first = runner.invoke(app, ["run", str(healthy_file), "--seed", "9", "--json"])
    second = runner.invoke(app, ["run", str(healthy_file), "--seed", "9", "--json"])
    assert _json_document(first.output) == _json_document(second.output)


def test_run_preset():
    result = runner.invoke(app, ["run", "--preset", "healthy system", "--seed", "1", "--json"])
    assert result.exit_code == 0, result.output
    document = _json_document(result.output)
    assert document["scenario"]["name"] == "Healthy System"
    assert len(document["metrics"]) == 120


def test_run_unknown_preset():
    result = runner.invoke(app, ["run", "--preset", "nope"])
    assert result.exit_code == 1
    assert "preset must be one of" in result.output


def test_run_file_and_preset_conflict(healthy_file: Path):
    result = runner.invoke(app, ["run", str(healthy_file), "--preset", "Retry Storm"])
    assert result.exit_code == 2


def test_run_invalid_file(tmp_path: Path):
    path = tmp_path / "bad.json"
    path.write_text('{"capacity": 0}', encoding="utf-8")
    result = runner.invoke(app, ["run", str(path)])
    assert result.exit_code == 1
    assert "capacity" in result.output


def test_fail_on_error_rate(failing_file: Path):
    """--fail-on-error-rate exits 1 when the threshold is exceeded."""
    result = runner.invoke(
        app, ["run", str(failing_file), "--seed", "3", "--fail-on-error-rate", "1"]
    )
    assert result.exit_code == 1
    assert "FAIL" in result.output


def test_fail_on_error_rate_passes(healthy_file: Path):
    result = runner.invoke(
        app, ["run", str(healthy_file), "--seed", "3", "--fail-on-error-rate", "0"]
    )
    assert result.exit_code == 0, result.output


def test_run_live(healthy_file: Path):
    result = runner.invoke(
        app, ["run", str(healthy_file), "--seed", "5", "--live", "--speed", "200", "--json"]
    )
    assert result.exit_code == 0, result.output
    document = _json_document(result.output)
    assert len(document["metrics"]) == 4


# ---------------------------------------------------------------------------
# Tests: save and compare
# ---------------------------------------------------------------------------


def _saved_run_id(args: list[str], data_dir: Path) -> str:
    result = runner.invoke(app, [*args, "--save", "--data-dir", str(data_dir), "--json"])
    assert result.exit_code == 0, result.output
    return _json_document(result.output)["runId"]


def test_save_writes_database(healthy_file: Path, tmp_path: Path):
    data_dir = tmp_path / "data"
    run_id = _saved_run_id(["run", str(healthy_file), "--seed", "1"], data_dir)
    assert (data_dir / DATABASE_FILENAME).exists()

    repository = SqlRunRepository(data_dir)
    stored = repository.load_run(run_id)
    assert stored.is_completed
    assert stored.seed == 1
    assert len(repository.list_scenarios()) == 1


def test_compare_saved_runs(tmp_path: Path):
    data_dir = tmp_path / "data"
    run_a = _saved_run_id(["run", "--preset", "Circuit Breaker Saves You", "-s", "1"], data_dir)
    run_b = _saved_run_id(["run", "--preset", "Retry Storm", "-s", "1"], data_dir)

    result = runner.invoke(app, ["compare", run_a, run_b, "--data-dir", str(data_dir)])
    assert result.exit_code == 0, result.output
    assert "Run Comparison" in result.output
    assert "Analysis" in result.output
    assert "Circuit breaker disabled" in result.output


def test_compare_uses_data_dir_env(
    healthy_file: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    data_dir = tmp_path / "env-data"
    run_id = _saved_run_id(["run", str(healthy_file), "-s", "1"], data_dir)
    monkeypatch.setenv("RELIASIM_DATA_DIR", str(data_dir))

    result = runner.invoke(app, ["compare", run_id, run_id])
    assert result.exit_code == 0, result.output
    assert "Results are similar with no major differences." in result.output


def test_compare_unknown_run(tmp_path: Path):
    result = runner.invoke(app, ["compare", "nope", "nada", "--data-dir", str(tmp_path)])
    assert result.exit_code == 1
    assert "Run not found" in result.output


def test_compare_incomplete_run(healthy_file: Path, tmp_path: Path):
    data_dir = tmp_path / "data"
    finished = _saved_run_id(["run", str(healthy_file), "-s", "1"], data_dir)
    repository = SqlRunRepository(data_dir)
    scenario_id = repository.load_run(finished).scenario_id
    pending = repository.create_run(scenario_id, 2)

    result = runner.invoke(app, ["compare", finished, pending, "--data-dir", str(data_dir)])
    assert result.exit_code == 1
    assert "has not completed" in result.output


# ---------------------------------------------------------------------------
# Tests: presets and init
# ---------------------------------------------------------------------------


def test_presets_lists_table():
    result = runner.invoke(app, ["presets"])
    assert result.exit_code == 0
    assert "Preset Scenarios" in result.output


def test_init_creates_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """init scaffolds a loadable scenario file."""
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["init", "my_test"])
    assert result.exit_code == 0, result.output

    scenario = load_scenario_file(tmp_path / "my_test.json")
    assert scenario.name == "My Test"
    assert scenario.config.rps == 40


def test_init_from_preset(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["init", "storm", "--from-preset", "Retry Storm"])
    assert result.exit_code == 0, result.output
    scenario = load_scenario_file(tmp_path / "storm.json")
    assert scenario.config.circuit_breaker.enabled is False


def test_init_refuses_to_overwrite(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    runner.invoke(app, ["init", "dup"])
    result = runner.invoke(app, ["init", "dup"])
    assert result.exit_code == 1
    assert "already exists" in result.output
