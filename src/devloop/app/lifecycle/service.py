"""Application service dispatching lifecycle verbs to the component adapter."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Sequence, TextIO, Tuple

from devloop.adapters.common.runner import ProcessRunner
from devloop.adapters.factory import new_component_adapter
from devloop.domain.devfile import CommandKind, Devfile, parse_and_validate, resolve_command, validate_devfile_data
from devloop.domain.errors import AdapterExecutionError, DevloopError
from devloop.domain.platform import (
    ClusterContext,
    ComponentIdentity,
    LocalEngineContext,
    PlatformContext,
    select_platform,
)
from devloop.ports.component_adapter import ComponentAdapter, PushParameters
from devloop.ports.envinfo_store import EnvInfoStore
from devloop.settings import RuntimeSettings
from devloop.utils.ignores import apply_ignore
from devloop.utils.log import Console, display_log
from devloop.utils.machineoutput import ConsoleEventLoggingClient, EventLoggingClient, NoOpEventLoggingClient

from .reporter import FailureReporter, RaisingFailureReporter, StructuredFailureReporter
from .run_mode import RunModeTracker, mode_for
from .urls import warn_if_urls_invalid

AdapterFactory = Callable[..., ComponentAdapter]


class Stage(str, Enum):
    PARSING_MANIFEST = "parsing-manifest"
    RESOLVING_CONTEXT = "resolving-context"
    DISPATCHING = "dispatching"
    EXECUTING = "executing"
    FINALIZING = "finalizing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class LifecycleTrace:
    verb: str
    stage: Stage = Stage.PARSING_MANIFEST
    failed_stage: Stage | None = None

    def advance(self, stage: Stage) -> None:
        self.stage = stage

    def fail(self) -> None:
        if self.stage == Stage.FAILED:
            return
        self.failed_stage = self.stage
        self.stage = Stage.FAILED

    def succeed(self) -> None:
        if self.stage != Stage.FAILED:
            self.stage = Stage.SUCCEEDED


@dataclass(frozen=True)
class PushRequest:
    devfile_path: Path
    context: Path
    namespace: str
    ignores: Tuple[str, ...] = field(default_factory=tuple)
    force_build: bool = False
    show: bool = False
    build_command: str = ""
    run_command: str = ""
    debug_command: str = ""
    debug: bool = False


class LifecycleService:
    """Runs one lifecycle verb per call against a freshly built adapter."""

    def __init__(
        self,
        settings: RuntimeSettings,
        store: EnvInfoStore,
        *,
        console: Console | None = None,
        events: EventLoggingClient | None = None,
        runner: ProcessRunner | None = None,
        adapter_factory: AdapterFactory = new_component_adapter,
        failure_reporter: FailureReporter | None = None,
        exit: Callable[[int], None] = sys.exit,
    ) -> None:
        self._settings = settings
        self._store = store
        self._console = console or Console()
        if events is None:
            events = ConsoleEventLoggingClient() if self._console.json_mode else NoOpEventLoggingClient()
        self._events = events
        self._runner = runner or ProcessRunner()
        self._adapter_factory = adapter_factory
        if failure_reporter is None:
            if self._console.json_mode:
                failure_reporter = StructuredFailureReporter(events, exit=exit)
            else:
                failure_reporter = RaisingFailureReporter()
        self._failure_reporter = failure_reporter
        self._exit = exit
        self._run_mode = RunModeTracker(store)
        self.last_trace: LifecycleTrace | None = None

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    def push(self, request: PushRequest) -> None:
        with self._traced("push") as trace:
            try:
                self._push_inner(request, trace)
            except DevloopError as exc:
                trace.fail()
                self._failure_reporter.handle(exc)
                return

            trace.advance(Stage.FINALIZING)
            self._run_mode.set_run_mode(mode_for(request.debug))
            self._console.success(f"Changes successfully pushed to component {self._store.get_name()}")

    def log(
        self,
        devfile_path: Path,
        context: Path,
        namespace: str,
        *,
        follow: bool = False,
        debug: bool = False,
        out: TextIO | None = None,
    ) -> None:
        with self._traced("log") as trace:
            devfile = self._load_devfile(devfile_path)
            name = self._store.get_name()
            command = resolve_command(devfile.commands, CommandKind.DEBUG if debug else CommandKind.RUN)

            trace.advance(Stage.RESOLVING_CONTEXT)
            platform = select_platform(self._settings.is_push_target_local_engine, namespace)
            adapter = self._adapter(context, devfile, platform)

            trace.advance(Stage.EXECUTING)
            try:
                stream = adapter.log(follow, command)
                trace.advance(Stage.FINALIZING)
                display_log(follow, stream, out or self._console.out, name)
            except DevloopError as exc:
                trace.fail()
                self._console.error(f"Failed to log component with name {name}.\nError: {exc}")
                self._exit(1)
                return

    def delete(self, devfile_path: Path, context: Path, namespace: str, *, show: bool = False) -> None:
        with self._traced("delete") as trace:
            devfile = self._load_devfile(devfile_path)
            name = self._store.get_name()

            trace.advance(Stage.RESOLVING_CONTEXT)
            adapter = self._adapter(context, devfile, ClusterContext(namespace=namespace))

            trace.advance(Stage.EXECUTING)
            adapter.delete({"component": name}, show)

    def exec(self, devfile_path: Path, context: Path, namespace: str, command: Sequence[str]) -> None:
        with self._traced("exec") as trace:
            devfile = self._load_devfile(devfile_path)

            trace.advance(Stage.RESOLVING_CONTEXT)
            adapter = self._adapter(context, devfile, ClusterContext(namespace=namespace))

            trace.advance(Stage.EXECUTING)
            adapter.exec(command)

    def test(self, devfile: Devfile, context: Path, namespace: str, *, command_name: str = "", show: bool = False) -> None:
        with self._traced("test") as trace:
            trace.advance(Stage.RESOLVING_CONTEXT)
            platform = select_platform(self._settings.is_push_target_local_engine, namespace)
            adapter = self._adapter(context, devfile, platform)

            trace.advance(Stage.EXECUTING)
            adapter.test(command_name, show)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _push_inner(self, request: PushRequest, trace: LifecycleTrace) -> None:
        devfile = self._load_devfile(request.devfile_path)
        name = self._store.get_name()

        try:
            source_path = Path(request.context).expanduser().resolve(strict=True)
        except OSError as exc:
            raise DevloopError(f"unable to get source path: {exc}") from exc
        try:
            ignores = apply_ignore(request.ignores, source_path)
        except OSError as exc:
            raise DevloopError(f"unable to apply ignore information: {exc}") from exc

        trace.advance(Stage.RESOLVING_CONTEXT)
        platform = select_platform(self._settings.is_push_target_local_engine, request.namespace)
        adapter = self._adapter(source_path, devfile, platform)

        trace.advance(Stage.DISPATCHING)
        params = PushParameters(
            path=source_path,
            env_info=self._store.load(),
            ignored_files=tuple(ignores),
            force_build=request.force_build,
            show=request.show,
            devfile_build_cmd=request.build_command.lower(),
            devfile_run_cmd=request.run_command.lower(),
            devfile_debug_cmd=request.debug_command.lower(),
            debug=request.debug,
            debug_port=self._store.get_debug_port(),
        )
        warn_if_urls_invalid(self._store.list_urls(), isinstance(platform, LocalEngineContext), self._console)

        trace.advance(Stage.EXECUTING)
        self._console.info(f"Pushing devfile component {name}")
        try:
            adapter.push(params)
        except DevloopError as exc:
            raise AdapterExecutionError(f"Failed to start component with name {name}. Error: {exc}") from exc

    def _load_devfile(self, path: Path) -> Devfile:
        devfile = parse_and_validate(Path(path))
        validate_devfile_data(devfile)
        return devfile

    def _adapter(self, context: Path, devfile: Devfile, platform: PlatformContext) -> ComponentAdapter:
        identity = ComponentIdentity(
            name=self._store.get_name(),
            application=self._store.get_application(),
            context=Path(context),
        )
        return self._adapter_factory(
            identity,
            devfile,
            platform,
            runner=self._runner,
            console=self._console,
            events=self._events,
        )

    @contextmanager
    def _traced(self, verb: str) -> Iterator[LifecycleTrace]:
        trace = LifecycleTrace(verb)
        self.last_trace = trace
        try:
            yield trace
        except BaseException:
            trace.fail()
            raise
        trace.succeed()


__all__ = ["LifecycleService", "LifecycleTrace", "PushRequest", "Stage"]
