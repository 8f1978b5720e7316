"""Annotation session module.

This module contains the AnnotationSession class, which drives the annotators
bound to one log consumer, and the iterator that renders a stream of raw
lines through it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any

from build_timestamper.annotator import Stop
from build_timestamper.factory import AnnotatorFactoryRegistrySingleton
from build_timestamper.markup_text import MarkupText

if TYPE_CHECKING:
    from build_timestamper.annotator import LineAnnotator
    from build_timestamper.factory import AnnotatorFactoryRegistry

logger = logging.getLogger(__name__)

# Default for annotate_line(), distinct from a None context
_SESSION_CONTEXT = object()


class AnnotationSession:
    """Annotators serving one consumer of one log, e.g. one connected viewer.

    Lines must be delivered in order, but the session can be resumed on a later
    part of the log after a gap.
    """

    def __init__(self, context: object, annotators: list[LineAnnotator]) -> None:
        self.context = context
        self._annotators = list(annotators)

    @classmethod
    def for_context(cls, context: object, registry: AnnotatorFactoryRegistry | None = None) -> AnnotationSession:
        """Create a session with an annotator from every registered factory that applies."""
        registry = registry if registry is not None else AnnotatorFactoryRegistrySingleton
        return cls(context, registry.new_annotators(context))

    @property
    def active(self) -> bool:
        return bool(self._annotators)

    def annotate_line(self, line: str | MarkupText, context: object = _SESSION_CONTEXT) -> MarkupText:
        """Run every live annotator over one line.

        Args:
            line: Raw line, or a line other annotators have already marked up.
            context: Context that produced this line. Defaults to the session's context.

        Returns:
            The marked-up line.
        """
        text = line if isinstance(line, MarkupText) else MarkupText(line)
        context = self.context if context is _SESSION_CONTEXT else context
        survivors: list[LineAnnotator] = []
        for annotator in self._annotators:
            continuation = annotator.annotate(context, text)
            if isinstance(continuation, Stop):
                logger.debug("Annotator %r stopped for %r", annotator, context)
                continue
            survivors.append(continuation)
        self._annotators = survivors
        return text

    def iter_annotated(self, lines: Iterable[str], preserve_entity: bool = True) -> _AnnotatedLineIterator:
        return _AnnotatedLineIterator(self, lines, preserve_entity)


class _AnnotatedLineIterator(AbstractContextManager[Iterator[str]], Iterator[str]):
    """Context-managed iterator over rendered lines of a session.

    Trailing newlines are stripped from the raw lines before annotation.
    """

    def __init__(self, session: AnnotationSession, lines: Iterable[str], preserve_entity: bool) -> None:
        self._session = session
        self._lines = iter(lines)
        self._preserve_entity = preserve_entity

    # Context manager protocol
    def __enter__(self) -> _AnnotatedLineIterator:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: Any | None,
    ) -> bool:
        # Do not suppress exceptions
        return False

    # Iterator protocol
    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        line = next(self._lines).rstrip("\r\n")
        return self._session.annotate_line(line).to_string(self._preserve_entity)
