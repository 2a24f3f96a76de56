#!/usr/bin/env python3
"""Entry point for the devloop CLI."""

from __future__ import annotations

import argparse
import json
import os
import sys
import time
from pathlib import Path
from textwrap import dedent

from devloop import __version__
from devloop.adapters.factory import new_component_adapter
from devloop.adapters.fs_envinfo import SETTABLE_KEYS, FileEnvInfoStore
from devloop.app.lifecycle import LifecycleService, PushRequest
from devloop.domain.devfile import DEVFILE_NAME, parse_and_validate, validate_devfile_data
from devloop.domain.envinfo import LocalURL, URLKind
from devloop.domain.errors import DevloopError
from devloop.settings import PREFERENCE_KEYS, SETTINGS, read_preferences, write_preference
from devloop.utils.log import Console
from devloop.utils.machineoutput import ConsoleEventLoggingClient, timestamp_now
from devloop.utils.telemetry import record_structured_event

HELP_OVERVIEW = dedent(
    """
    Inner loop:
      - devloop push             - sync sources, build and run the component
      - devloop push --debug     - same, but start the debug command
      - devloop log --follow     - stream the output of the run command
      - devloop test             - run the default test command
      - devloop exec -- CMD...   - run an arbitrary command in the component

    Push target:
      - devloop preference set pushtarget cluster|local-engine
      - DEVLOOP_PUSHTARGET overrides the preference for one invocation
    """
)


def _context_path(args: argparse.Namespace) -> Path:
    raw = getattr(args, "context", None)
    if raw:
        return Path(raw).expanduser().resolve()
    return Path(os.getcwd())


def _devfile_path(args: argparse.Namespace, context: Path) -> Path:
    raw = getattr(args, "devfile", None)
    if raw:
        return Path(raw).expanduser().resolve()
    return context / DEVFILE_NAME


def _namespace(args: argparse.Namespace, store: FileEnvInfoStore) -> str:
    return getattr(args, "namespace", None) or store.get_namespace() or SETTINGS.default_namespace


class _VerbRun:
    """Telemetry bookkeeping for one lifecycle verb, including runs that end the process."""

    def __init__(self, verb: str) -> None:
        self.verb = verb
        self.started = time.monotonic()
        self.component: str | None = None
        self.service: LifecycleService | None = None
        self._recorded = False

    def record(self, status: str) -> None:
        if self._recorded:
            return
        self._recorded = True
        trace = self.service.last_trace if self.service is not None else None
        payload: dict[str, object] = {"pushTarget": SETTINGS.push_target}
        if trace is not None and trace.failed_stage is not None:
            payload["stage"] = trace.failed_stage.value
        record_structured_event(
            SETTINGS,
            f"lifecycle.{self.verb}",
            payload=payload,
            level="info" if status == "ok" else "error",
            status=status,
            component=self.component,
            duration_ms=(time.monotonic() - self.started) * 1000,
        )

    def exit(self, code: int) -> None:
        self.record("ok" if code == 0 else "fail")
        sys.exit(code)


def _build_service(store: FileEnvInfoStore, console: Console, run: _VerbRun) -> LifecycleService:
    events = ConsoleEventLoggingClient() if console.json_mode else None
    service = LifecycleService(
        SETTINGS,
        store,
        console=console,
        events=events,
        adapter_factory=new_component_adapter,
        exit=run.exit,
    )
    run.service = service
    return service


def _report_failure(console: Console, exc: DevloopError) -> int:
    if console.json_mode:
        ConsoleEventLoggingClient().report_error(exc, timestamp_now())
    else:
        console.error(str(exc))
    return 1


def _push_cmd(args: argparse.Namespace) -> int:
    console = Console(json_mode=args.output == "json")
    context = _context_path(args)
    store = FileEnvInfoStore(context)
    run = _VerbRun("push")
    service = _build_service(store, console, run)
    try:
        run.component = store.get_name()
        request = PushRequest(
            devfile_path=_devfile_path(args, context),
            context=context,
            namespace=_namespace(args, store),
            ignores=tuple(args.ignores or ()),
            force_build=args.force_build,
            show=args.show_log,
            build_command=args.build_command or "",
            run_command=args.run_command or "",
            debug_command=args.debug_command or "",
            debug=args.debug,
        )
        service.push(request)
    except DevloopError as exc:
        run.record("fail")
        return _report_failure(console, exc)
    run.record("ok")
    return 0


def _log_cmd(args: argparse.Namespace) -> int:
    console = Console()
    context = _context_path(args)
    store = FileEnvInfoStore(context)
    run = _VerbRun("log")
    service = _build_service(store, console, run)
    try:
        run.component = store.get_name()
        service.log(
            _devfile_path(args, context),
            context,
            _namespace(args, store),
            follow=args.follow,
            debug=args.debug,
        )
    except DevloopError as exc:
        run.record("fail")
        return _report_failure(console, exc)
    run.record("ok")
    return 0


def _delete_cmd(args: argparse.Namespace) -> int:
    console = Console()
    context = _context_path(args)
    store = FileEnvInfoStore(context)
    run = _VerbRun("delete")
    service = _build_service(store, console, run)
    try:
        run.component = store.get_name()
        service.delete(_devfile_path(args, context), context, _namespace(args, store), show=args.show_log)
    except DevloopError as exc:
        run.record("fail")
        return _report_failure(console, exc)
    run.record("ok")
    console.success(f"Component {run.component} deleted")
    return 0


def _exec_cmd(args: argparse.Namespace) -> int:
    console = Console()
    command = list(args.command or [])
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        print("exec requires a command, e.g. `devloop exec -- ls -la`", file=sys.stderr)
        return 1
    context = _context_path(args)
    store = FileEnvInfoStore(context)
    run = _VerbRun("exec")
    service = _build_service(store, console, run)
    try:
        run.component = store.get_name()
        service.exec(_devfile_path(args, context), context, _namespace(args, store), command)
    except DevloopError as exc:
        run.record("fail")
        return _report_failure(console, exc)
    run.record("ok")
    return 0


def _test_cmd(args: argparse.Namespace) -> int:
    console = Console()
    context = _context_path(args)
    store = FileEnvInfoStore(context)
    run = _VerbRun("test")
    service = _build_service(store, console, run)
    try:
        run.component = store.get_name()
        devfile = parse_and_validate(_devfile_path(args, context))
        validate_devfile_data(devfile)
        service.test(
            devfile,
            context,
            _namespace(args, store),
            command_name=args.command_name or "",
            show=args.show_log,
        )
    except DevloopError as exc:
        run.record("fail")
        return _report_failure(console, exc)
    run.record("ok")
    return 0


def _env_cmd(args: argparse.Namespace) -> int:
    store = FileEnvInfoStore(_context_path(args))
    try:
        if args.env_command == "set":
            store.set(args.key, args.value)
            print(f"Environment setting {args.key} updated")
            return 0
        info = store.load()
    except DevloopError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    payload = info.to_dict()
    if args.json:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0
    print(f"Name:         {info.name}")
    print(f"Application:  {info.application}")
    print(f"Namespace:    {info.namespace or '-'}")
    print(f"Debug port:   {info.debug_port}")
    print(f"Run mode:     {info.run_mode.value if info.run_mode else '-'}")
    print(f"URLs:         {len(info.urls)}")
    return 0


def _url_cmd(args: argparse.Namespace) -> int:
    store = FileEnvInfoStore(_context_path(args))
    try:
        if args.url_command == "create":
            url = LocalURL(
                name=args.name,
                port=args.port,
                kind=URLKind(args.kind),
                exposed_port=args.exposed_port,
                host=args.host,
                secure=args.secure,
            )
            store.add_url(url)
            print(f"URL {url.name} created for port {url.port} ({url.kind.value})")
            return 0
        urls = store.list_urls()
    except DevloopError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    if args.json:
        print(json.dumps({"urls": [url.to_dict() for url in urls]}, ensure_ascii=False, indent=2))
        return 0
    if not urls:
        print("No URLs defined for this component")
        return 0
    for url in urls:
        exposed = f" -> {url.exposed_port}" if url.exposed_port else ""
        print(f"  - {url.name}: {url.port}{exposed} [{url.kind.value}]")
    return 0


def _preference_cmd(args: argparse.Namespace) -> int:
    path = SETTINGS.preference_file
    try:
        if args.preference_command == "set":
            write_preference(path, args.key, args.value)
            print(f"Preference {args.key} set to {args.value}")
            return 0
        preferences = read_preferences(path)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    for key in PREFERENCE_KEYS:
        print(f"{key}: {preferences.get(key, '-')}")
    print(f"effective pushtarget: {SETTINGS.push_target}")
    return 0


def _add_component_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--context", help="Component directory (default: current directory)")
    parser.add_argument("--devfile", help="Path to the devfile (default: <context>/devfile.yaml)")
    parser.add_argument("--namespace", help="Cluster namespace (default: env setting or preference)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devloop",
        description="Iterative build/run/debug/test cycles for devfile components.",
        epilog=HELP_OVERVIEW,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"devloop {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    push_cmd = sub.add_parser("push", help="Sync, build and run the component")
    _add_component_arguments(push_cmd)
    push_cmd.add_argument("-f", "--force-build", action="store_true", help="Build even when no files changed")
    push_cmd.add_argument("--debug", action="store_true", help="Run the debug command instead of the run command")
    push_cmd.add_argument("--show-log", action="store_true", help="Show the output of devfile commands")
    push_cmd.add_argument("--build-command", help="Devfile command to use instead of the default build command")
    push_cmd.add_argument("--run-command", help="Devfile command to use instead of the default run command")
    push_cmd.add_argument("--debug-command", help="Devfile command to use instead of the default debug command")
    push_cmd.add_argument("-i", "--ignore", dest="ignores", action="append", help="Pattern of files to skip (repeatable)")
    push_cmd.add_argument("-o", "--output", choices=["json"], help="Emit machine-readable events")
    push_cmd.set_defaults(func=_push_cmd)

    log_cmd = sub.add_parser("log", help="Show the component's log")
    _add_component_arguments(log_cmd)
    log_cmd.add_argument("-f", "--follow", action="store_true", help="Keep streaming new log lines")
    log_cmd.add_argument("--debug", action="store_true", help="Show the log of the debug command")
    log_cmd.set_defaults(func=_log_cmd)

    delete_cmd = sub.add_parser("delete", help="Delete the component from the cluster")
    _add_component_arguments(delete_cmd)
    delete_cmd.add_argument("--show-log", action="store_true", help="Show what was deleted")
    delete_cmd.set_defaults(func=_delete_cmd)

    exec_cmd = sub.add_parser("exec", help="Run a command inside the component")
    _add_component_arguments(exec_cmd)
    exec_cmd.add_argument("command", nargs=argparse.REMAINDER, help="Command to run, after `--`")
    exec_cmd.set_defaults(func=_exec_cmd)

    test_cmd = sub.add_parser("test", help="Run a devfile test command")
    _add_component_arguments(test_cmd)
    test_cmd.add_argument("--name", "--test-command", dest="command_name", help="Test command to run (default: the default test command)")
    test_cmd.add_argument("--show-log", action="store_true", help="Show the output of the test command")
    test_cmd.set_defaults(func=_test_cmd)

    env_cmd = sub.add_parser("env", help="View or change environment-specific settings")
    env_sub = env_cmd.add_subparsers(dest="env_command", required=True)
    env_view = env_sub.add_parser("view", help="Show the settings")
    env_view.add_argument("--context", help="Component directory (default: current directory)")
    env_view.add_argument("--json", action="store_true", help="Emit machine-readable output")
    env_set = env_sub.add_parser("set", help="Change a setting")
    env_set.add_argument("key", choices=SETTABLE_KEYS)
    env_set.add_argument("value")
    env_set.add_argument("--context", help="Component directory (default: current directory)")
    env_cmd.set_defaults(func=_env_cmd)

    url_cmd = sub.add_parser("url", help="Manage component URLs")
    url_sub = url_cmd.add_subparsers(dest="url_command", required=True)
    url_create = url_sub.add_parser("create", help="Define a URL for a container port")
    url_create.add_argument("name")
    url_create.add_argument("--port", type=int, required=True, help="Container port")
    url_create.add_argument("--kind", choices=[kind.value for kind in URLKind], default=URLKind.CLUSTER.value)
    url_create.add_argument("--exposed-port", type=int, help="Host port (local engine only)")
    url_create.add_argument("--host", help="Host name (cluster only)")
    url_create.add_argument("--secure", action="store_true", help="Serve over TLS")
    url_create.add_argument("--context", help="Component directory (default: current directory)")
    url_list = url_sub.add_parser("list", help="List defined URLs")
    url_list.add_argument("--context", help="Component directory (default: current directory)")
    url_list.add_argument("--json", action="store_true", help="Emit machine-readable output")
    url_cmd.set_defaults(func=_url_cmd)

    preference_cmd = sub.add_parser("preference", help="View or change global preferences")
    preference_sub = preference_cmd.add_subparsers(dest="preference_command", required=True)
    preference_sub.add_parser("view", help="Show global preferences")
    preference_set = preference_sub.add_parser("set", help="Change a global preference")
    preference_set.add_argument("key", choices=PREFERENCE_KEYS)
    preference_set.add_argument("value")
    preference_cmd.set_defaults(func=_preference_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
