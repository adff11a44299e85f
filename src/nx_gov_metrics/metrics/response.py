"""Builds the HTTP response for a metrics scrape."""

from __future__ import annotations

import io
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

from .counters import CounterReader
from .encoder import encode_metrics
from .exceptions import EncodeError

CONTENT_TYPE: Final = "text/plain; version=0.0.4"
"""Content type of the Prometheus text exposition format."""

ERROR_PREFIX: Final = "Failed to encode metrics: "
"""Prefix of the body returned when encoding fails."""


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Transport-neutral HTTP response."""

    status_code: int
    """HTTP status code."""

    headers: tuple[tuple[str, str], ...]
    """Header name/value pairs, in the order they are sent."""

    body: bytes
    """Response body."""


def wall_clock_ms() -> int:
    """Current wall-clock time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


def build_metrics_response(
    reader: CounterReader,
    clock: Callable[[], int] = wall_clock_ms,
    sink_factory: Callable[[], io.BytesIO] = io.BytesIO,
) -> HttpResponse:
    """
    Return the canister metrics as an HTTP response.

    Never raises on an encoding failure. The failure becomes a 500 response
    and the scraper retries on its own schedule.

    Args:
        reader: Source of the raw counters.
        clock: Source of the scrape timestamp, in epoch milliseconds.
        sink_factory: Creates the byte buffer the payload is written to.

    Returns:
        200 with the payload, or 500 with the failure description.
    """
    now = clock()
    try:
        body = encode_metrics(reader, now, sink_factory())
    except EncodeError as e:
        return HttpResponse(
            status_code=500,
            headers=(),
            body=f"{ERROR_PREFIX}{e.message}".encode("utf-8"),
        )

    return HttpResponse(
        status_code=200,
        headers=(
            ("Content-Type", CONTENT_TYPE),
            ("Content-Length", str(len(body))),
        ),
        body=body,
    )
