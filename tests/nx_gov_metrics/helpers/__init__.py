"""Test helpers for nx_gov_metrics unit tests."""

from __future__ import annotations

from .mocks import (
    FailingSink,
    FakeHostRuntime,
    FixedClock,
    ShortWriteSink,
    StaticCounterReader,
)
from .parsing import ExposedSample, parse_exposition, strip_timestamps

__all__ = [
    "ExposedSample",
    "FailingSink",
    "FakeHostRuntime",
    "FixedClock",
    "ShortWriteSink",
    "StaticCounterReader",
    "parse_exposition",
    "strip_timestamps",
]
