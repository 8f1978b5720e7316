"""Timestamp annotator module.

This module contains the TimestampAnnotator class, which finds the raw
"[2018-01-02T03:04:05.006Z]" marker at the start of a build log line, hands a
Timestamp for it to the configured format and hides the raw marker.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Union

from build_timestamper.context import get_start_time_millis, resolve_build
from build_timestamper.timestamp import MARKER_WIDTH, Timestamp, parse_marker_time
from build_timestamper.timestamp_format import TimestampFormatProviderSingleton

if TYPE_CHECKING:
    from build_timestamper.markup_text import MarkupText

# Opening tags other annotators may already have wrapped the line in, tested in this order
WRAPPER_PREFIXES = (
    # pipeline log storage, start of a new step
    '<span class="pipeline-new-node" ',
    # ANSI foreground color rendered as markup
    '<span style="color',
    # any annotator can wrap its output in this to stay out of the way of marker detection
    "<span data-timestamper",
)

HIDDEN_START_TAG = '<span style="display: none">'
HIDDEN_END_TAG = "</span>"


class Stop:
    """Sentinel returned by an annotator that has nothing more to do in its session."""


class LineAnnotator(Protocol):
    """Protocol for annotators a session drives line by line."""

    def annotate(self, context: object, text: MarkupText) -> Continuation: ...


# The annotator for the next line, or Stop() to leave the rest of the session alone
Continuation = Union[LineAnnotator, Stop]


def find_marker_start(html: str) -> int:
    """Return the offset in the rendered line where a marker would begin.

    Skips past each recognized wrapper prefix in turn. Offsets refer to the
    rendered form, tags included.
    """
    start = 0
    for prefix in WRAPPER_PREFIXES:
        if html.startswith(prefix, start):
            close = html.find(">", start)
            start = close + 1 if close != -1 else len(html)
    return start


def find_marker_time(html: str) -> int | None:
    """Return the marker time in milliseconds since the epoch, or None if the line has no marker."""
    start = find_marker_start(html)
    if not html.startswith("[", start):
        return None
    end = html.find("]", start)
    if end == -1:
        return None
    return parse_marker_time(html[start + 1 : end])


class TimestampAnnotator:
    """Per-session annotator that replaces raw markers with formatted timestamps.

    Holds no per-line state, so one instance can serve any number of lines,
    in order or after a gap.
    """

    def annotate(self, context: object, text: MarkupText) -> Continuation:
        """Annotate one line.

        Args:
            context: Execution context that produced the line.
            text: The line, possibly already carrying markup from other annotators.
                  Modified in place when a marker is found.

        Returns:
            This annotator to continue with the next line, or Stop() if the
            context no longer resolves to a build.
        """
        build = resolve_build(context)
        if build is None:
            return Stop()

        millis_since_epoch = find_marker_time(text.to_string(preserve_entity=True))
        if millis_since_epoch is None:
            return self

        timestamp = Timestamp.between(millis_since_epoch, get_start_time_millis(build))
        TimestampFormatProviderSingleton.get().markup(text, timestamp)
        # Wrapper tags are zero-width, so the marker always starts at plain-text offset 0
        text.add_markup(0, min(MARKER_WIDTH, len(text)), HIDDEN_START_TAG, HIDDEN_END_TAG)
        return self
