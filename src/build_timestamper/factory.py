"""Annotator factories and the registry a host enumerates them from."""

from __future__ import annotations

import contextlib
import logging
import threading
from typing import Protocol

from build_timestamper.annotator import LineAnnotator, TimestampAnnotator
from build_timestamper.context import resolve_build

logger = logging.getLogger(__name__)


class AnnotatorFactory(Protocol):
    """Protocol for factories producing an annotator for a context, or None."""

    def new_instance(self, context: object) -> LineAnnotator | None: ...


class TimestampAnnotatorFactory:
    """Binds a TimestampAnnotator to contexts that resolve to a build."""

    def new_instance(self, context: object) -> TimestampAnnotator | None:
        if resolve_build(context) is None:
            logger.debug("Timestamps do not apply to %r", context)
            return None
        return TimestampAnnotator()


class AnnotatorFactoryRegistry:
    """Thread-safe registry of annotator factories offered to every new session."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._factories: list[AnnotatorFactory] = []

    def register(self, factory: AnnotatorFactory) -> None:
        """Register a factory."""
        with self._lock:
            if factory not in self._factories:
                self._factories.append(factory)

    def unregister(self, factory: AnnotatorFactory) -> None:
        """Unregister a factory."""
        with self._lock, contextlib.suppress(ValueError):
            self._factories.remove(factory)

    def factories(self) -> list[AnnotatorFactory]:
        with self._lock:
            return list(self._factories)

    def new_annotators(self, context: object) -> list[LineAnnotator]:
        """Create an annotator from every registered factory that applies to the context."""
        annotators: list[LineAnnotator] = []
        for factory in self.factories():
            annotator = factory.new_instance(context)
            if annotator is not None:
                annotators.append(annotator)
        return annotators


def create_default_registry() -> AnnotatorFactoryRegistry:
    registry = AnnotatorFactoryRegistry()
    registry.register(TimestampAnnotatorFactory())
    return registry


# Global singleton instance for convenient access
AnnotatorFactoryRegistrySingleton = create_default_registry()
