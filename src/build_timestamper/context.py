"""Execution contexts that produce build log lines.

A line comes either from a flat build, which knows its own start time, or from
a node inside a pipeline execution graph, which only knows the execution that
owns it. resolve_build() turns either into the build whose start time the
timestamps are measured against.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import psutil

logger = logging.getLogger(__name__)


class ContextResolutionError(Exception):
    """Raised when an execution context cannot be constructed at all."""


@runtime_checkable
class Build(Protocol):
    """Anything exposing a start time in milliseconds since the epoch."""

    start_time_millis: int


class ExecutionOwner(Protocol):
    """Owner of a pipeline execution that can look up its executable."""

    def get_executable(self) -> object:
        """Return the executable running the pipeline.

        Raises:
            OSError: If the executable cannot be loaded.
        """
        ...


@dataclass
class FlatBuild:
    """A build started directly, exposing its own start time."""

    name: str
    start_time_millis: int
    supports_owner_tracking: bool = True


@dataclass
class StaticOwner:
    """Owner that already holds its executable, or the error loading it failed with."""

    executable: object = None
    error: OSError | None = None

    def get_executable(self) -> object:
        if self.error is not None:
            raise self.error
        return self.executable


@dataclass
class FlowExecution:
    owner: ExecutionOwner | None = None


@dataclass
class GraphNode:
    """A step inside a staged or parallel pipeline execution."""

    node_id: str
    execution: FlowExecution


def build_for_process(pid: int) -> FlatBuild:
    """Create a flat build whose start time is the creation time of a process.

    Raises:
        ContextResolutionError: If the process does not exist or cannot be inspected.
    """
    try:
        process = psutil.Process(pid)
        name = process.name()
        created = process.create_time()
    except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
        error_msg = f"Could not read start time of process {pid}: {e}"
        raise ContextResolutionError(error_msg) from e
    return FlatBuild(name=f"{name} ({pid})", start_time_millis=int(created * 1000))


def _resolve_graph_node(node: GraphNode) -> Build | None:
    owner = node.execution.owner
    if owner is None:
        return None
    try:
        executable = owner.get_executable()
    except OSError as e:
        logger.debug("Could not load executable for node %s: %s", node.node_id, e, exc_info=True)
        return None
    if isinstance(executable, Build):
        return executable
    return None


def resolve_build(context: object) -> Build | None:
    """Resolve an execution context to the build its lines belong to.

    Returns:
        The build, or None if timestamps do not apply to this context. An
        unresolvable context is an expected outcome, never an error.
    """
    if isinstance(context, GraphNode):
        return _resolve_graph_node(context)
    if isinstance(context, Build) and getattr(context, "supports_owner_tracking", False):
        return context
    return None


def get_start_time_millis(build: Build) -> int:
    return build.start_time_millis
