from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone, tzinfo
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from build_timestamper.markup_text import MarkupText
    from build_timestamper.timestamp import Timestamp

logger = logging.getLogger(__name__)


class TimestampFormat(Protocol):
    """Protocol for formats that render a timestamp into an annotated line."""

    def markup(self, text: MarkupText, timestamp: Timestamp) -> None: ...


class NullTimestampFormat:
    """No-op format that leaves the line unchanged."""

    def markup(self, text: MarkupText, timestamp: Timestamp) -> None:
        return None


def _timestamp_span(value: str) -> str:
    return f'<span class="timestamp">{value} </span>'


class ElapsedTimestampFormat:
    """Format that shows time elapsed since the build started.

    Example output: "<span class="timestamp">00:01:02.345 </span>Hello world"
    """

    def markup(self, text: MarkupText, timestamp: Timestamp) -> None:
        text.add_markup_at(0, _timestamp_span(self.format_elapsed(timestamp.elapsed_millis)))

    @staticmethod
    def format_elapsed(elapsed_millis: int) -> str:
        """Format milliseconds as HH:MM:SS.mmm, with a leading '-' when negative."""
        sign = "-" if elapsed_millis < 0 else ""
        seconds, millis = divmod(abs(elapsed_millis), 1000)
        minutes, seconds = divmod(seconds, 60)
        hours, minutes = divmod(minutes, 60)
        return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


class SystemTimestampFormat:
    """Format that shows the wall-clock time each line was written."""

    def __init__(self, pattern: str = "%H:%M:%S", tz: tzinfo | None = None) -> None:
        """Initialize the format.

        Args:
            pattern: strftime pattern for the wall-clock time.
            tz: Zone to render the time in. Defaults to UTC.
        """
        self._pattern = pattern
        self._tz = tz if tz is not None else timezone.utc

    def markup(self, text: MarkupText, timestamp: Timestamp) -> None:
        try:
            moment = datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(milliseconds=timestamp.millis_since_epoch)
        except OverflowError:
            logger.debug("Timestamp %s outside the supported date range", timestamp.millis_since_epoch)
            return
        try:
            local = moment.astimezone(self._tz)
        except (OverflowError, ValueError) as e:
            # Near year 1 or 9999 the shift into the zone can leave the date range
            logger.debug("Could not convert %s to %s, showing UTC: %s", moment, self._tz, e)
            local = moment
        text.add_markup_at(0, _timestamp_span(local.strftime(self._pattern)))


class TimestampFormatProvider:
    """Thread-safe holder of the format applied to every annotated line.

    The format is looked up on each line, so set() takes effect for sessions
    that are already running.
    """

    def __init__(self, default: TimestampFormat | None = None) -> None:
        self._lock = threading.RLock()
        self._default = default
        self._format: TimestampFormat | None = default

    def get(self) -> TimestampFormat:
        with self._lock:
            if self._format is None:
                # Import here to avoid circular imports during module load
                from build_timestamper.config import load_timestamp_format  # noqa: PLC0415

                self._format = load_timestamp_format()
            return self._format

    def set(self, timestamp_format: TimestampFormat) -> None:
        with self._lock:
            self._format = timestamp_format

    def reset(self) -> None:
        """Drop any format set at runtime; the next get() starts from the default again."""
        with self._lock:
            self._format = self._default


# Global singleton instance for convenient access
TimestampFormatProviderSingleton = TimestampFormatProvider()
