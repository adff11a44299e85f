"""Tests for the metrics HTTP response builder."""

from __future__ import annotations

import re
from unittest.mock import patch

from nx_gov_metrics.metrics import (
    CONTENT_TYPE,
    SimulatedCounterReader,
    build_metrics_response,
    wall_clock_ms,
)
from nx_gov_metrics.metrics import encoder as encoder_module
from tests.nx_gov_metrics.helpers import (
    FailingSink,
    FixedClock,
    ShortWriteSink,
    StaticCounterReader,
    parse_exposition,
    strip_timestamps,
)

NOW_MS = 1_700_000_000_456


class TestSuccessfulResponse:
    """Tests for the 200 response."""

    def test_status_and_headers(self) -> None:
        """Content-Type first, then Content-Length."""
        response = build_metrics_response(StaticCounterReader(), clock=FixedClock(NOW_MS))

        assert response.status_code == 200
        assert [name for name, _ in response.headers] == ["Content-Type", "Content-Length"]
        assert response.headers[0] == ("Content-Type", "text/plain; version=0.0.4")
        assert CONTENT_TYPE == "text/plain; version=0.0.4"

    def test_content_length_matches_body(self) -> None:
        """Content-Length is the decimal byte length of the body."""
        reader = StaticCounterReader(stable_bytes=123, working_bytes=2**40, balance=10**20)
        response = build_metrics_response(reader, clock=FixedClock(NOW_MS))

        assert dict(response.headers)["Content-Length"] == str(len(response.body))

    def test_clock_is_read_once(self) -> None:
        """One timestamp per scrape."""
        clock = FixedClock(NOW_MS)
        build_metrics_response(StaticCounterReader(), clock=clock)

        assert clock.calls == 1

    def test_zero_counters(self) -> None:
        """Zero counters give zero gauges stamped with the scrape time."""
        response = build_metrics_response(SimulatedCounterReader(), clock=FixedClock(NOW_MS))
        text = response.body.decode("utf-8")

        assert response.status_code == 200
        for name in (
            "nx_gov_stable_memory_size_gib",
            "nx_gov_wasm_memory_size_gib",
            "nx_gov_canister_cycles_balance",
        ):
            pattern = rf"^{name} 0 {NOW_MS}$"
            assert re.search(pattern, text, re.MULTILINE), f"no zero sample for {name}"

    def test_gauge_values(self) -> None:
        """2**30 and 2**31 bytes with a balance of 500 give 1, 2 and 500."""
        reader = StaticCounterReader(stable_bytes=2**30, working_bytes=2**31, balance=500)
        response = build_metrics_response(reader, clock=FixedClock(NOW_MS))

        assert [s.value for s in parse_exposition(response.body)] == [1.0, 2.0, 500.0]

    def test_gauge_lines_are_exact(self) -> None:
        """Whole gauge values are written without a fractional part."""
        reader = StaticCounterReader(stable_bytes=2**30, working_bytes=2**31, balance=500)
        text = build_metrics_response(reader, clock=FixedClock(NOW_MS)).body.decode("utf-8")

        for line in (
            f"nx_gov_stable_memory_size_gib 1 {NOW_MS}",
            f"nx_gov_wasm_memory_size_gib 2 {NOW_MS}",
            f"nx_gov_canister_cycles_balance 500 {NOW_MS}",
        ):
            assert line in text.splitlines()

    def test_consecutive_scrapes_differ_only_in_timestamp(self) -> None:
        """Unchanged counters give the same payload apart from the timestamp."""
        reader = StaticCounterReader(stable_bytes=2**20, working_bytes=2**25, balance=99)

        first = build_metrics_response(reader, clock=FixedClock(NOW_MS))
        second = build_metrics_response(reader, clock=FixedClock(NOW_MS + 15_000))

        assert first.body != second.body
        assert strip_timestamps(first.body) == strip_timestamps(second.body)

    def test_default_clock_is_wall_time(self) -> None:
        """Without an injected clock the timestamp is close to now."""
        before = wall_clock_ms()
        response = build_metrics_response(StaticCounterReader())
        after = wall_clock_ms()

        for sample in parse_exposition(response.body):
            assert before <= sample.timestamp_ms <= after


class TestFailedResponse:
    """Tests for the 500 response."""

    def test_sink_failure_gives_500(self) -> None:
        """A failed write becomes a 500 with no headers and an error body."""
        response = build_metrics_response(
            StaticCounterReader(),
            clock=FixedClock(NOW_MS),
            sink_factory=lambda: FailingSink("disk full"),
        )

        assert response.status_code == 500
        assert response.headers == ()
        assert response.body == b"Failed to encode metrics: disk full"

    def test_error_body_has_no_metrics(self) -> None:
        """No partial metric set is ever returned."""
        response = build_metrics_response(
            StaticCounterReader(),
            clock=FixedClock(NOW_MS),
            sink_factory=FailingSink,
        )

        assert response.body.startswith(b"Failed to encode metrics: ")
        assert b"nx_gov_" not in response.body

    def test_render_failure_gives_500(self) -> None:
        """Errors raised while serializing the families become a 500."""
        with patch.object(encoder_module, "format_value", side_effect=ValueError("bad value")):
            response = build_metrics_response(StaticCounterReader(), clock=FixedClock(NOW_MS))

        assert response.status_code == 500
        assert response.headers == ()
        assert response.body == b"Failed to encode metrics: bad value"

    def test_short_write_gives_500(self) -> None:
        """A sink that drops bytes never yields a truncated 200."""
        response = build_metrics_response(
            StaticCounterReader(),
            clock=FixedClock(NOW_MS),
            sink_factory=ShortWriteSink,
        )

        assert response.status_code == 500
        assert response.body.startswith(b"Failed to encode metrics: short write")
