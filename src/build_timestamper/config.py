"""Environment-driven configuration for the process-wide timestamp format."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from build_timestamper.timestamp_format import (
    ElapsedTimestampFormat,
    NullTimestampFormat,
    SystemTimestampFormat,
    TimestampFormat,
)

logger = logging.getLogger(__name__)

FORMAT_ENV = "BUILD_TIMESTAMPER_FORMAT"
SYSTEM_PATTERN_ENV = "BUILD_TIMESTAMPER_SYSTEM_PATTERN"
TIMEZONE_ENV = "BUILD_TIMESTAMPER_TIMEZONE"

DEFAULT_FORMAT = "elapsed"
DEFAULT_SYSTEM_PATTERN = "%H:%M:%S"

FORMAT_NAMES = ("elapsed", "system", "none")


def _load_timezone(name: str | None) -> tzinfo:
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.warning("Unknown timezone %r in %s, using UTC: %s", name, TIMEZONE_ENV, e)
        return timezone.utc


def create_timestamp_format(name: str, pattern: str | None = None, tz_name: str | None = None) -> TimestampFormat:
    """Create a timestamp format by name.

    Args:
        name: One of "elapsed", "system" or "none". Unknown names fall back to "elapsed".
        pattern: strftime pattern for the "system" format.
        tz_name: IANA zone name for the "system" format.

    Returns:
        The timestamp format.
    """
    name = name.strip().lower()
    if name == "none":
        return NullTimestampFormat()
    if name == "system":
        return SystemTimestampFormat(pattern or DEFAULT_SYSTEM_PATTERN, _load_timezone(tz_name))
    if name != "elapsed":
        logger.warning("Unknown timestamp format %r, using %r", name, DEFAULT_FORMAT)
    return ElapsedTimestampFormat()


def load_timestamp_format(environ: Mapping[str, str] | None = None) -> TimestampFormat:
    """Create the timestamp format selected by the environment."""
    if environ is None:
        environ = os.environ
    return create_timestamp_format(
        environ.get(FORMAT_ENV, DEFAULT_FORMAT),
        pattern=environ.get(SYSTEM_PATTERN_ENV),
        tz_name=environ.get(TIMEZONE_ENV),
    )
