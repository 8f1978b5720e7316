"""Unit tests for timestamp formats, the format provider and environment configuration."""

import unittest
from datetime import timedelta, timezone
from unittest import mock
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from build_timestamper.annotator import HIDDEN_START_TAG, TimestampAnnotator
from build_timestamper.config import (
    FORMAT_ENV,
    SYSTEM_PATTERN_ENV,
    TIMEZONE_ENV,
    create_timestamp_format,
    load_timestamp_format,
)
from build_timestamper.context import FlatBuild
from build_timestamper.markup_text import MarkupText
from build_timestamper.timestamp import Timestamp, parse_marker_time
from build_timestamper.timestamp_format import (
    ElapsedTimestampFormat,
    NullTimestampFormat,
    SystemTimestampFormat,
    TimestampFormatProvider,
    TimestampFormatProviderSingleton,
)

# 2018-01-02T03:04:05.006Z, 6ms into the build
TIMESTAMP = Timestamp(elapsed_millis=6, millis_since_epoch=1514862245006)


def render(timestamp_format, timestamp=TIMESTAMP) -> str:
    text = MarkupText("Hello")
    timestamp_format.markup(text, timestamp)
    return text.to_string()


class TestFormats(unittest.TestCase):
    """Test the markup each format adds."""

    def test_null_format(self):
        self.assertEqual(render(NullTimestampFormat()), "Hello")

    def test_elapsed_format(self):
        self.assertEqual(render(ElapsedTimestampFormat()), '<span class="timestamp">00:00:00.006 </span>Hello')

    def test_format_elapsed(self):
        cases = {
            0: "00:00:00.000",
            999: "00:00:00.999",
            61001: "00:01:01.001",
            3600000 * 25 + 1: "25:00:00.001",
            -1500: "-00:00:01.500",
        }
        for millis, expected in cases.items():
            with self.subTest(millis=millis):
                self.assertEqual(ElapsedTimestampFormat.format_elapsed(millis), expected)

    def test_system_format(self):
        self.assertEqual(render(SystemTimestampFormat()), '<span class="timestamp">03:04:05 </span>Hello')

    def test_system_format_pattern_and_zone(self):
        timestamp_format = SystemTimestampFormat("%Y-%m-%d %H:%M", tz=timezone(timedelta(hours=-5)))
        self.assertEqual(render(timestamp_format), '<span class="timestamp">2018-01-01 22:04 </span>Hello')


class TestTimestampFormatProvider(unittest.TestCase):
    """Test the holder of the process-wide format."""

    def test_default(self):
        default = NullTimestampFormat()
        provider = TimestampFormatProvider(default)
        self.assertIs(provider.get(), default)

    def test_set_and_reset(self):
        default = NullTimestampFormat()
        provider = TimestampFormatProvider(default)
        replacement = ElapsedTimestampFormat()
        provider.set(replacement)
        self.assertIs(provider.get(), replacement)
        provider.reset()
        self.assertIs(provider.get(), default)

    def test_loads_from_environment(self):
        provider = TimestampFormatProvider()
        with mock.patch.dict("os.environ", {FORMAT_ENV: "none"}):
            self.assertIsInstance(provider.get(), NullTimestampFormat)
        # Loaded once, then kept until reset
        with mock.patch.dict("os.environ", {FORMAT_ENV: "system"}):
            self.assertIsInstance(provider.get(), NullTimestampFormat)
            provider.reset()
            self.assertIsInstance(provider.get(), SystemTimestampFormat)


class TestConfig(unittest.TestCase):
    """Test selecting the format from the environment."""

    def test_default_is_elapsed(self):
        self.assertIsInstance(load_timestamp_format({}), ElapsedTimestampFormat)

    def test_named_formats(self):
        self.assertIsInstance(load_timestamp_format({FORMAT_ENV: "elapsed"}), ElapsedTimestampFormat)
        self.assertIsInstance(load_timestamp_format({FORMAT_ENV: " System "}), SystemTimestampFormat)
        self.assertIsInstance(load_timestamp_format({FORMAT_ENV: "NONE"}), NullTimestampFormat)

    def test_unknown_format(self):
        with self.assertLogs("build_timestamper.config", level="WARNING") as logs:
            timestamp_format = load_timestamp_format({FORMAT_ENV: "fancy"})
        self.assertIsInstance(timestamp_format, ElapsedTimestampFormat)
        self.assertIn("fancy", logs.output[0])

    def test_system_pattern(self):
        timestamp_format = load_timestamp_format({FORMAT_ENV: "system", SYSTEM_PATTERN_ENV: "%d/%m %H:%M:%S"})
        self.assertEqual(render(timestamp_format), '<span class="timestamp">02/01 03:04:05 </span>Hello')

    def test_unknown_timezone(self):
        with self.assertLogs("build_timestamper.config", level="WARNING") as logs:
            timestamp_format = create_timestamp_format("system", tz_name="Nowhere/Atlantis")
        self.assertEqual(render(timestamp_format), '<span class="timestamp">03:04:05 </span>Hello')
        self.assertIn(TIMEZONE_ENV, logs.output[0])

    def test_utc_timezone(self):
        timestamp_format = create_timestamp_format("system", tz_name="utc")
        self.assertEqual(render(timestamp_format), '<span class="timestamp">03:04:05 </span>Hello')


class TestSystemFormatDateRange(unittest.TestCase):
    """Test wall-clock times at the edges of the supported date range."""

    def tearDown(self):
        TimestampFormatProviderSingleton.reset()

    def assert_rendered_in_utc(self, marker: str, tz, expected: str) -> None:
        TimestampFormatProviderSingleton.set(SystemTimestampFormat(tz=tz))
        text = MarkupText(marker + "Hello")
        result = TimestampAnnotator().annotate(FlatBuild(name="job #1", start_time_millis=0), text)
        self.assertIsInstance(result, TimestampAnnotator)
        self.assertEqual(
            text.to_string(),
            f'<span class="timestamp">{expected} </span>{HIDDEN_START_TAG}{marker}</span>Hello',
        )

    def test_first_day_behind_utc(self):
        self.assert_rendered_in_utc("[0001-01-01T00:00:00.000Z]", timezone(timedelta(hours=-5)), "00:00:00")

    def test_last_day_ahead_of_utc(self):
        self.assert_rendered_in_utc("[9999-12-31T23:59:59.999Z]", timezone(timedelta(hours=9)), "23:59:59")

    def test_named_zones(self):
        for marker, zone_name, expected in [
            ("[0001-01-01T00:00:00.000Z]", "America/New_York", "00:00:00"),
            ("[9999-12-31T23:59:59.999Z]", "Asia/Tokyo", "23:59:59"),
        ]:
            with self.subTest(zone=zone_name):
                try:
                    tz = ZoneInfo(zone_name)
                except ZoneInfoNotFoundError:
                    self.skipTest("time zone database not installed")
                self.assert_rendered_in_utc(marker, tz, expected)

    def test_inside_range_uses_zone(self):
        millis = parse_marker_time("9999-12-31T10:00:00.000Z")
        text = MarkupText("Hello")
        SystemTimestampFormat(tz=timezone(timedelta(hours=9))).markup(text, Timestamp(millis, millis))
        self.assertEqual(text.to_string(), '<span class="timestamp">19:00:00 </span>Hello')


if __name__ == "__main__":
    unittest.main()
