"""Builds the component adapter for the active platform context."""

from __future__ import annotations

from typing import Callable, Dict, Type

from devloop.adapters.cluster import ClusterAdapter, KubectlClient
from devloop.adapters.common.runner import ProcessRunner
from devloop.adapters.local_engine import EngineClient, LocalEngineAdapter
from devloop.domain.devfile import Devfile
from devloop.domain.errors import AdapterConstructionError
from devloop.domain.platform import ClusterContext, ComponentIdentity, LocalEngineContext, PlatformContext
from devloop.ports.component_adapter import ComponentAdapter
from devloop.utils.log import Console
from devloop.utils.machineoutput import EventLoggingClient, NoOpEventLoggingClient

AdapterBuilder = Callable[
    [ComponentIdentity, Devfile, PlatformContext, ProcessRunner, Console, EventLoggingClient],
    ComponentAdapter,
]


def _cluster_adapter(identity, devfile, platform, runner, console, events) -> ComponentAdapter:
    client = KubectlClient.connect(platform.namespace, runner)
    return ClusterAdapter(identity, devfile, client=client, runner=runner, console=console, events=events)


def _local_engine_adapter(identity, devfile, platform, runner, console, events) -> ComponentAdapter:
    client = EngineClient.connect(runner)
    return LocalEngineAdapter(identity, devfile, client=client, runner=runner, console=console, events=events)


ADAPTER_BUILDERS: Dict[Type, AdapterBuilder] = {
    ClusterContext: _cluster_adapter,
    LocalEngineContext: _local_engine_adapter,
}


def new_component_adapter(
    identity: ComponentIdentity,
    devfile: Devfile,
    platform: PlatformContext,
    *,
    runner: ProcessRunner | None = None,
    console: Console | None = None,
    events: EventLoggingClient | None = None,
) -> ComponentAdapter:
    builder = ADAPTER_BUILDERS.get(type(platform))
    if builder is None:
        raise AdapterConstructionError(f"no adapter registered for platform context {type(platform).__name__}")
    return builder(
        identity,
        devfile,
        platform,
        runner or ProcessRunner(),
        console or Console(),
        events or NoOpEventLoggingClient(),
    )


__all__ = ["ADAPTER_BUILDERS", "new_component_adapter"]
