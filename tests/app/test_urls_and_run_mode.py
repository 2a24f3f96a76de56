from __future__ import annotations

import io

import pytest

from devloop.app.lifecycle import LifecycleTrace, RunModeTracker, Stage, mode_for, warn_if_urls_invalid
from devloop.domain.envinfo import LocalURL, RunMode, URLKind
from devloop.domain.errors import PersistenceError
from devloop.utils.log import Console
from tests._fakes import FakeStore

CLUSTER_URL = LocalURL(name="web", port=3000)
ENGINE_URL = LocalURL(name="web-local", port=3000, kind=URLKind.LOCAL_ENGINE, exposed_port=30000)


def _console() -> Console:
    return Console(out=io.StringIO(), err=io.StringIO())


def test_no_urls_no_warning() -> None:
    console = _console()
    assert warn_if_urls_invalid([], True, console) is None
    assert console.err.getvalue() == ""


def test_cluster_urls_on_local_engine_warns_singular() -> None:
    console = _console()
    message = warn_if_urls_invalid([CLUSTER_URL], True, console)
    assert message == "Found a URL defined for cluster, but no valid URLs for local engine."
    assert message in console.err.getvalue()


def test_local_engine_urls_on_cluster_warns_plural() -> None:
    second = LocalURL(name="api", port=8080, kind=URLKind.LOCAL_ENGINE)
    message = warn_if_urls_invalid([ENGINE_URL, second], False, _console())
    assert message == "Found URLs defined for local engine, but no valid URLs for cluster."


def test_matching_urls_do_not_warn() -> None:
    assert warn_if_urls_invalid([CLUSTER_URL, ENGINE_URL], False, _console()) is None
    assert warn_if_urls_invalid([CLUSTER_URL, ENGINE_URL], True, _console()) is None


def test_json_mode_suppresses_warning_text() -> None:
    console = Console(json_mode=True, out=io.StringIO(), err=io.StringIO())
    assert warn_if_urls_invalid([CLUSTER_URL], True, console) is not None
    assert console.err.getvalue() == ""


def test_mode_for() -> None:
    assert mode_for(True) == RunMode.DEBUG
    assert mode_for(False) == RunMode.RUN


def test_tracker_wraps_os_errors() -> None:
    with pytest.raises(PersistenceError):
        RunModeTracker(FakeStore(fail_on_save=True)).set_run_mode(RunMode.RUN)


def test_tracker_writes_through() -> None:
    store = FakeStore()
    RunModeTracker(store).set_run_mode(RunMode.DEBUG)
    assert store.get_run_mode() == RunMode.DEBUG


def test_trace_keeps_first_failed_stage() -> None:
    trace = LifecycleTrace("push")
    trace.advance(Stage.EXECUTING)
    trace.fail()
    trace.fail()
    trace.succeed()
    assert trace.stage == Stage.FAILED
    assert trace.failed_stage == Stage.EXECUTING
