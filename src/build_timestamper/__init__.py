"""Readable elapsed or wall-clock timestamps for marked-up build logs."""

from __future__ import annotations

__version__ = "1.0.0"

from build_timestamper.annotator import Continuation, LineAnnotator, Stop, TimestampAnnotator
from build_timestamper.context import (
    ContextResolutionError,
    FlatBuild,
    FlowExecution,
    GraphNode,
    StaticOwner,
    build_for_process,
    resolve_build,
)
from build_timestamper.factory import (
    AnnotatorFactoryRegistry,
    AnnotatorFactoryRegistrySingleton,
    TimestampAnnotatorFactory,
)
from build_timestamper.markup_text import MarkupText
from build_timestamper.session import AnnotationSession
from build_timestamper.timestamp import Timestamp
from build_timestamper.timestamp_format import (
    ElapsedTimestampFormat,
    NullTimestampFormat,
    SystemTimestampFormat,
    TimestampFormat,
    TimestampFormatProviderSingleton,
)

__all__ = [
    "AnnotationSession",
    "AnnotatorFactoryRegistry",
    "AnnotatorFactoryRegistrySingleton",
    "ContextResolutionError",
    "Continuation",
    "ElapsedTimestampFormat",
    "FlatBuild",
    "FlowExecution",
    "GraphNode",
    "LineAnnotator",
    "MarkupText",
    "NullTimestampFormat",
    "StaticOwner",
    "Stop",
    "SystemTimestampFormat",
    "Timestamp",
    "TimestampAnnotator",
    "TimestampAnnotatorFactory",
    "TimestampFormat",
    "TimestampFormatProviderSingleton",
    "build_for_process",
    "resolve_build",
]
