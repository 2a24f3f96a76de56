from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from devloop.cli import main as cli_main
from devloop.domain.errors import AdapterExecutionError
from devloop.domain.platform import ClusterContext
from devloop.settings import RuntimeSettings
from tests._fakes import NODEJS_DEVFILE, NODEJS_DEVFILE_WITH_DEBUG, FakeAdapter, RecordingFactory, make_settings, write_devfile


@pytest.fixture()
def runtime_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> RuntimeSettings:
    settings = make_settings(tmp_path)
    monkeypatch.setattr(cli_main, "SETTINGS", settings, raising=False)
    return settings


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    path = tmp_path / "nodejs"
    write_devfile(path, NODEJS_DEVFILE)
    return path


def _install(monkeypatch: pytest.MonkeyPatch, adapter: FakeAdapter) -> RecordingFactory:
    factory = RecordingFactory(adapter)
    monkeypatch.setattr(cli_main, "new_component_adapter", factory)
    return factory


def test_push_succeeds_and_remembers_run_mode(
    runtime_settings: RuntimeSettings, project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    adapter = FakeAdapter()
    factory = _install(monkeypatch, adapter)

    exit_code = cli_main.main(["push", "--context", str(project), "--run-command", "RUN"])

    assert exit_code == 0
    assert adapter.verbs() == ["push"]
    assert adapter.calls[0][1].devfile_run_cmd == "run"
    assert factory.calls[0][2] == ClusterContext(namespace="default")
    assert "Changes successfully pushed to component nodejs" in capsys.readouterr().out
    env = yaml.safe_load((project / ".devloop" / "env" / "env.yaml").read_text("utf-8"))
    assert env["componentSettings"]["runMode"] == "run"


def test_push_failure_prints_error(
    runtime_settings: RuntimeSettings, project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _install(monkeypatch, FakeAdapter(push_error=AdapterExecutionError("image pull failed")))

    exit_code = cli_main.main(["push", "--context", str(project)])

    assert exit_code == 1
    assert "Failed to start component with name nodejs. Error: image pull failed" in capsys.readouterr().err
    assert not (project / ".devloop" / "env" / "env.yaml").exists()


def test_push_failure_in_json_mode_emits_single_event(
    runtime_settings: RuntimeSettings, project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _install(monkeypatch, FakeAdapter(push_error=AdapterExecutionError("image pull failed")))

    with pytest.raises(SystemExit) as exc:
        cli_main.main(["push", "--context", str(project), "-o", "json"])

    assert exc.value.code == 1
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 1
    event = json.loads(lines[0])
    assert "image pull failed" in event["reportError"]["error"]


def test_log_debug_without_debug_command(
    runtime_settings: RuntimeSettings, project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    factory = _install(monkeypatch, FakeAdapter())

    exit_code = cli_main.main(["log", "--context", str(project), "--debug"])

    assert exit_code == 1
    assert factory.calls == []
    assert "no debug command found in devfile" in capsys.readouterr().err


def test_exec_forwards_command_after_separator(
    runtime_settings: RuntimeSettings, project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    adapter = FakeAdapter()
    _install(monkeypatch, adapter)

    exit_code = cli_main.main(["exec", "--context", str(project), "--", "npm", "test"])

    assert exit_code == 0
    assert adapter.calls == [("exec", ["npm", "test"])]


def test_exec_requires_command(runtime_settings: RuntimeSettings, project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["exec", "--context", str(project)]) == 1
    assert "exec requires a command" in capsys.readouterr().err


def test_delete_reports_success(
    runtime_settings: RuntimeSettings, project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    adapter = FakeAdapter()
    _install(monkeypatch, adapter)

    exit_code = cli_main.main(["delete", "--context", str(project), "--namespace", "team-a"])

    assert exit_code == 0
    assert adapter.calls == [("delete", {"component": "nodejs"}, False)]
    assert "Component nodejs deleted" in capsys.readouterr().out


def test_test_runs_named_command(
    runtime_settings: RuntimeSettings, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    project = tmp_path / "nodejs"
    write_devfile(project, NODEJS_DEVFILE_WITH_DEBUG)
    adapter = FakeAdapter()
    _install(monkeypatch, adapter)

    exit_code = cli_main.main(["test", "--context", str(project), "--name", "lint", "--show-log"])

    assert exit_code == 0
    assert adapter.calls == [("test", "lint", True)]


def test_missing_devfile_is_reported(runtime_settings: RuntimeSettings, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["push", "--context", str(tmp_path)]) == 1
    assert "devfile.yaml not found" in capsys.readouterr().err


def _corrupt_env(project: Path) -> None:
    env_dir = project / ".devloop" / "env"
    env_dir.mkdir(parents=True)
    (env_dir / "env.yaml").write_text("- not\n- a mapping\n", encoding="utf-8")


def test_corrupt_env_file_in_json_mode_emits_single_event(
    runtime_settings: RuntimeSettings, project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    factory = _install(monkeypatch, FakeAdapter())
    _corrupt_env(project)

    exit_code = cli_main.main(["push", "--context", str(project), "-o", "json"])

    assert exit_code == 1
    assert factory.calls == []
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 1
    assert "Invalid environment file structure" in json.loads(lines[0])["reportError"]["error"]


@pytest.mark.parametrize(
    "argv",
    [
        ["push"],
        ["log"],
        ["delete"],
        ["exec", "--", "npm", "test"],
        ["test"],
    ],
)
def test_corrupt_env_file_fails_every_verb_cleanly(
    runtime_settings: RuntimeSettings,
    project: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    argv: list[str],
) -> None:
    _install(monkeypatch, FakeAdapter())
    _corrupt_env(project)
    verb, rest = argv[0], argv[1:]

    exit_code = cli_main.main([verb, "--context", str(project), *rest])

    assert exit_code == 1
    assert "Invalid environment file structure" in capsys.readouterr().err


def _telemetry(settings: RuntimeSettings) -> list[dict]:
    log_path = settings.log_dir / "telemetry.jsonl"
    return [json.loads(line) for line in log_path.read_text("utf-8").splitlines()]


def test_json_push_failure_is_recorded_before_exit(
    runtime_settings: RuntimeSettings, project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("DEVLOOP_TELEMETRY", "1")
    _install(monkeypatch, FakeAdapter(push_error=AdapterExecutionError("image pull failed")))

    with pytest.raises(SystemExit):
        cli_main.main(["push", "--context", str(project), "-o", "json"])

    records = _telemetry(runtime_settings)
    assert len(records) == 1
    assert records[0]["event"] == "lifecycle.push"
    assert records[0]["status"] == "fail"
    assert records[0]["component"] == "nodejs"
    assert records[0]["payload"]["stage"] == "executing"


def test_log_failure_is_recorded_before_exit(
    runtime_settings: RuntimeSettings, project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("DEVLOOP_TELEMETRY", "1")
    _install(monkeypatch, FakeAdapter(log_error=AdapterExecutionError("no running pod found for component nodejs")))

    with pytest.raises(SystemExit) as exc:
        cli_main.main(["log", "--context", str(project)])

    assert exc.value.code == 1
    records = _telemetry(runtime_settings)
    assert [(record["event"], record["status"]) for record in records] == [("lifecycle.log", "fail")]
