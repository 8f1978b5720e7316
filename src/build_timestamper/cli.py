"""Command line interface: render a timestamped build log with readable timestamps.

Usage:
    python -m build_timestamper.cli build.log --start-time 1514862245000
    python -m build_timestamper.cli - --pid 4242 --format system < build.log
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import os
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from typing import ContextManager, TextIO

from build_timestamper.annotator import find_marker_time
from build_timestamper.config import FORMAT_NAMES, SYSTEM_PATTERN_ENV, TIMEZONE_ENV, create_timestamp_format
from build_timestamper.context import ContextResolutionError, FlatBuild, build_for_process
from build_timestamper.session import AnnotationSession
from build_timestamper.timestamp_format import TimestampFormatProviderSingleton

logger = logging.getLogger(__name__)


@dataclass
class Args:
    log: str
    start_time: int | None
    pid: int | None
    format: str | None
    escape: bool
    verbose: bool

    @staticmethod
    def parse_args(argv: list[str] | None = None) -> Args:
        parser = argparse.ArgumentParser(
            prog="build_timestamper",
            description="Replace raw timestamp markers in a build log with readable timestamps.",
        )
        parser.add_argument("log", help="Log file to annotate, or '-' for stdin")
        start = parser.add_mutually_exclusive_group()
        start.add_argument(
            "--start-time",
            type=int,
            help="Build start time in milliseconds since the epoch (default: time of the first marker)",
        )
        start.add_argument("--pid", type=int, help="Use the start time of this running process")
        parser.add_argument("--format", choices=FORMAT_NAMES, help="Timestamp format (default: from environment)")
        parser.add_argument("--escape", action="store_true", help="HTML-escape the log text")
        parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        parsed = parser.parse_args(argv)
        return Args(
            log=parsed.log,
            start_time=parsed.start_time,
            pid=parsed.pid,
            format=parsed.format,
            escape=parsed.escape,
            verbose=parsed.verbose,
        )


def _open_log(path: str) -> ContextManager[TextIO]:
    # Iterating a text file splits on newlines only, never on form feeds or other separators
    if path == "-":
        return contextlib.nullcontext(sys.stdin)
    return open(path, encoding="utf-8", errors="replace")  # noqa: SIM115


def _first_marker_time(lines: list[str]) -> int:
    for line in lines:
        millis = find_marker_time(line)
        if millis is not None:
            return millis
    return 0


def main(argv: list[str] | None = None) -> int:
    args = Args.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.format is not None:
        TimestampFormatProviderSingleton.set(
            create_timestamp_format(
                args.format,
                pattern=os.environ.get(SYSTEM_PATTERN_ENV),
                tz_name=os.environ.get(TIMEZONE_ENV),
            )
        )

    try:
        log = _open_log(args.log)
    except OSError as e:
        logger.error("Could not read %s: %s", args.log, e)
        return 1

    with log as stream:
        lines: Iterable[str] = stream
        if args.pid is not None:
            try:
                build = build_for_process(args.pid)
            except ContextResolutionError as e:
                logger.error("%s", e)
                return 1
        elif args.start_time is not None:
            build = FlatBuild(name=args.log, start_time_millis=args.start_time)
        else:
            # The start time comes from the first marker, so the whole log is read before printing
            lines = list(stream)
            build = FlatBuild(name=args.log, start_time_millis=_first_marker_time(lines))

        session = AnnotationSession.for_context(build)
        with session.iter_annotated(lines, preserve_entity=not args.escape) as annotated:
            for line in annotated:
                print(line, flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
