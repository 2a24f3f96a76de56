from __future__ import annotations

import io
from pathlib import Path

import pytest

from devloop.adapters.common import ProcessError
from devloop.adapters.local_engine import EngineClient, LocalEngineAdapter
from devloop.adapters.local_engine.adapter import CONFIG_HASH_LABEL, engine_memory
from devloop.domain.devfile import parse_and_validate
from devloop.domain.envinfo import EnvSpecificInfo, LocalURL, URLKind
from devloop.domain.errors import AdapterConstructionError
from devloop.domain.platform import ComponentIdentity
from devloop.ports.component_adapter import PushParameters
from devloop.utils.log import Console
from tests._fakes import NODEJS_DEVFILE, NODEJS_DEVFILE_WITH_DEBUG, FakeRunner, RecordingEvents, write_devfile


def _adapter(tmp_path: Path, runner: FakeRunner, content: str = NODEJS_DEVFILE):
    project = tmp_path / "nodejs"
    write_devfile(project, content)
    console = Console(out=io.StringIO(), err=io.StringIO())
    adapter = LocalEngineAdapter(
        ComponentIdentity(name="nodejs", application="app", context=project),
        parse_and_validate(project / "devfile.yaml"),
        client=EngineClient(runner),
        runner=runner,
        console=console,
        events=RecordingEvents(),
    )
    return adapter, project, console


def _params(project: Path, **overrides) -> PushParameters:
    values = {"path": project, "env_info": EnvSpecificInfo(name="nodejs"), "ignored_files": (".devloop",)}
    values.update(overrides)
    return PushParameters(**values)


@pytest.mark.parametrize("limit,expected", [("512Mi", "512m"), ("1Gi", "1g"), ("256m", "256m")])
def test_engine_memory(limit: str, expected: str) -> None:
    assert engine_memory(limit) == expected


def test_connect_prefers_first_available_engine() -> None:
    client = EngineClient.connect(FakeRunner(available=("podman",)))
    assert client.binary == "podman"


def test_connect_without_engine() -> None:
    with pytest.raises(AdapterConstructionError):
        EngineClient.connect(FakeRunner(available=()))


def test_connect_with_unreachable_daemon() -> None:
    runner = FakeRunner().on(["info"], ProcessError(["docker", "info"], 1, "Cannot connect to the Docker daemon"))
    with pytest.raises(AdapterConstructionError):
        EngineClient.connect(runner)


def test_run_arguments_bind_sources_and_publish_urls(tmp_path: Path) -> None:
    adapter, project, _ = _adapter(tmp_path, FakeRunner())
    urls = (
        LocalURL(name="web", port=3000, kind=URLKind.LOCAL_ENGINE, exposed_port=30000),
        LocalURL(name="cluster-web", port=3000),
    )
    params = _params(project, env_info=EnvSpecificInfo(name="nodejs", urls=urls))

    args = adapter.run_arguments("runtime", adapter.devfile.get_component("runtime").container, params)

    assert args[:2] == ["--name", "nodejs-runtime"]
    assert "component=nodejs" in args
    assert f"{project}:/projects" in args
    assert args.count("-p") == 1 and "30000:3000" in args
    assert args[args.index("--memory") + 1] == "512m"
    assert args[-5:] == ["--entrypoint", "tail", "node:18", "-f", "/dev/null"]


def test_push_starts_container_and_runs_commands(tmp_path: Path) -> None:
    runner = FakeRunner().on(["ps"], "")
    adapter, project, console = _adapter(tmp_path, runner)

    adapter.push(_params(project))

    started = runner.calls_with("run", "-d")
    assert len(started) == 1 and any(arg.startswith(f"{CONFIG_HASH_LABEL}=") for arg in started[0])
    assert runner.calls_with("exec", "nodejs-runtime", "sh", "-c", "cd /projects && npm install")
    assert runner.calls_with("exec", "nodejs-runtime", "sh", "-c", "cd /projects && npm start")
    assert "Started container nodejs-runtime" in console.out.getvalue()


def test_debug_push_exports_debug_port(tmp_path: Path) -> None:
    runner = FakeRunner().on(["ps"], "")
    adapter, project, _ = _adapter(tmp_path, runner, NODEJS_DEVFILE_WITH_DEBUG)

    adapter.push(_params(project, debug=True, debug_port=9229))

    expected = "export NODE_ENV=development && export DEBUG_PORT=9229 && cd /projects && npm run debug"
    assert runner.calls_with("sh", "-c", expected)
    assert not runner.calls_with("sh", "-c", "cd /projects && npm start")


def test_test_runs_named_command_in_working_dir(tmp_path: Path) -> None:
    runner = FakeRunner().on(["ps"], "nodejs-runtime\n")
    adapter, _, _ = _adapter(tmp_path, runner, NODEJS_DEVFILE_WITH_DEBUG)

    adapter.test("", True)
    adapter.test("LINT", False)

    assert runner.calls_with("sh", "-c", "cd /projects/app && npm test")
    assert runner.calls_with("sh", "-c", "cd /projects && npm run lint")


def test_delete_removes_labelled_containers(tmp_path: Path) -> None:
    runner = FakeRunner().on(["ps"], "nodejs-runtime\n")
    adapter, _, _ = _adapter(tmp_path, runner)

    adapter.delete({"component": "nodejs"}, False)

    assert runner.calls[-1] == ["docker", "rm", "-f", "nodejs-runtime"]
