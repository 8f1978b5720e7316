"""Timestamp values and the raw marker encoding written into build logs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

# Width of "[YYYY-MM-DDTHH:MM:SS.mmmZ]", brackets included
MARKER_WIDTH = 26

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_MARKER_TIME_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})\.(\d{3})Z", re.ASCII)


@dataclass(frozen=True)
class Timestamp:
    """A point in a build log, both relative to the build start and absolute."""

    elapsed_millis: int
    millis_since_epoch: int

    @classmethod
    def between(cls, millis_since_epoch: int, build_start_millis: int) -> Timestamp:
        # Negative when the marker predates the recorded start; still valid
        return cls(millis_since_epoch - build_start_millis, millis_since_epoch)


def parse_marker_time(text: str) -> int | None:
    """Parse the body of a marker into milliseconds since the epoch.

    Args:
        text: Text found between the marker brackets, e.g. "2018-01-02T03:04:05.006Z"

    Returns:
        Milliseconds since the epoch, or None if the text is not a UTC
        millisecond timestamp (other annotators write bracketed text too).
    """
    match = _MARKER_TIME_RE.fullmatch(text)
    if match is None:
        return None
    year, month, day, hour, minute, second, millis = (int(group) for group in match.groups())
    try:
        moment = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
    except ValueError:
        return None
    seconds = (moment - _EPOCH) // timedelta(seconds=1)
    return seconds * 1000 + millis


def format_marker(millis_since_epoch: int) -> str:
    """Render a raw marker the way the log writer emits it."""
    seconds, millis = divmod(millis_since_epoch, 1000)
    moment = _EPOCH + timedelta(seconds=seconds)
    return f"[{moment:%Y-%m-%dT%H:%M:%S}.{millis:03d}Z]"
