"""Platform-independent half of the component adapters."""

from __future__ import annotations

import shlex
from abc import abstractmethod
from typing import IO, Dict, Sequence, Tuple

from devloop.domain.devfile import Command, CommandKind, Devfile, resolve_command, resolve_optional_command
from devloop.domain.errors import AdapterExecutionError, DevloopError
from devloop.domain.platform import ComponentIdentity
from devloop.ports.component_adapter import ComponentAdapter, PushParameters
from devloop.utils.log import Console
from devloop.utils.machineoutput import EventLoggingClient, timestamp_now

from .runner import ProcessRunner
from .sync import FileIndex, SyncPlan


class GenericAdapter(ComponentAdapter):
    """Runs the devfile side of every verb; subclasses talk to the platform."""

    platform_name = "platform"

    def __init__(
        self,
        identity: ComponentIdentity,
        devfile: Devfile,
        *,
        runner: ProcessRunner,
        console: Console,
        events: EventLoggingClient,
    ) -> None:
        self.identity = identity
        self.devfile = devfile
        self.runner = runner
        self.console = console
        self.events = events

    @property
    def component_name(self) -> str:
        return self.identity.name

    # ------------------------------------------------------------------
    # Platform hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def component_exists(self) -> bool:
        ...

    @abstractmethod
    def _create_or_update(self, params: PushParameters) -> bool:
        """Bring the platform resources in line with the devfile; True when containers were (re)created."""

    @abstractmethod
    def _sync(self, plan: SyncPlan, params: PushParameters) -> None:
        ...

    @abstractmethod
    def _exec_argv(self, container: str, argv: Sequence[str], *, show: bool) -> None:
        ...

    @abstractmethod
    def _log_stream(self, container: str, follow: bool) -> IO[bytes]:
        ...

    @abstractmethod
    def _delete(self, labels: Dict[str, str], show: bool) -> bool:
        """Remove matching resources; False when nothing existed."""

    # ------------------------------------------------------------------
    # Lifecycle verbs
    # ------------------------------------------------------------------

    def push(self, params: PushParameters) -> None:
        commands = self.devfile.commands
        build = resolve_optional_command(commands, CommandKind.BUILD, params.devfile_build_cmd)
        run = resolve_command(commands, CommandKind.RUN, params.devfile_run_cmd)
        debug = resolve_command(commands, CommandKind.DEBUG, params.devfile_debug_cmd) if params.debug else None

        existed = self.component_exists()
        recreated = self._create_or_update(params)
        index = FileIndex(params.path)
        plan, snapshot = index.plan(params.ignored_files, full=not existed or recreated)
        if existed and not recreated and plan.empty and not params.force_build:
            self.console.info("No file changes detected, skipping build. Use the '--force-build' flag to force the build.")
            return

        if not plan.empty:
            self.console.info(f"Syncing {len(plan.changed)} changed and {len(plan.deleted)} deleted files")
            self._sync(plan, params)

        show = params.show and not self.console.json_mode
        if build is not None:
            self._run_command(build, show=show)
        if debug is not None:
            self._run_command(debug, show=show, extra_env=(("DEBUG_PORT", str(params.debug_port)),))
        else:
            self._run_command(run, show=show)
        index.save(snapshot)

    def log(self, follow: bool, command: Command) -> IO[bytes]:
        self._require_component()
        return self._log_stream(self._container_for(command), follow)

    def delete(self, labels: Dict[str, str], show: bool) -> None:
        if not self._delete(labels, show):
            self.console.warning(f"Component {self.component_name} does not exist on the {self.platform_name}")
        FileIndex(self.identity.context).clear()

    def exec(self, command: Sequence[str]) -> None:
        run = resolve_command(self.devfile.commands, CommandKind.RUN)
        self._require_component()
        self._exec_argv(self._container_for(run), list(command), show=True)

    def test(self, command_name: str, show: bool) -> None:
        command = resolve_command(self.devfile.commands, CommandKind.TEST, command_name)
        self._require_component()
        self._run_command(command, show=show and not self.console.json_mode)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_component(self) -> None:
        if not self.component_exists():
            raise AdapterExecutionError(
                f"the component {self.component_name} doesn't exist on the {self.platform_name}, "
                "please run `devloop push` first"
            )

    def _container_for(self, command: Command) -> str:
        steps = self.devfile.flatten(command)
        if not steps or steps[0].exec is None:
            raise AdapterExecutionError(f"command {command.id} does not run in any container")
        return steps[0].exec.component

    def _run_command(self, command: Command, *, show: bool, extra_env: Tuple[Tuple[str, str], ...] = ()) -> None:
        group_kind = command.kind.value if command.kind else ""
        for step in self.devfile.flatten(command):
            spec = step.exec
            if spec is None:
                continue
            component = self.devfile.get_component(spec.component)
            workdir = spec.working_dir
            if not workdir and component is not None and component.container is not None:
                workdir = component.container.source_mapping
            argv = ["sh", "-c", build_shell_command(spec.command_line, workdir, spec.env + extra_env)]
            self.console.info(f"Executing {step.id} command \"{spec.command_line}\"")
            self.events.devfile_command_execution_begin(
                step.id, self.component_name, spec.command_line, group_kind, timestamp_now()
            )
            try:
                self._exec_argv(spec.component, argv, show=show)
            except DevloopError as exc:
                self.events.devfile_command_execution_complete(
                    step.id, self.component_name, spec.command_line, group_kind, timestamp_now(), error=exc
                )
                raise
            self.events.devfile_command_execution_complete(
                step.id, self.component_name, spec.command_line, group_kind, timestamp_now()
            )
            self.console.success(f"Executed {step.id} command \"{spec.command_line}\"")


def build_shell_command(command_line: str, workdir: str | None, env: Tuple[Tuple[str, str], ...]) -> str:
    parts = [f"export {name}={shlex.quote(value)}" for name, value in env]
    if workdir:
        parts.append(f"cd {shlex.quote(workdir)}")
    parts.append(command_line)
    return " && ".join(parts)


__all__ = ["GenericAdapter", "build_shell_command"]
