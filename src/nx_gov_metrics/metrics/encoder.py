"""
Prometheus encoding of canister health metrics.

Three gauges are exported, always in this order:

1. Stable memory size, in GiB
2. Wasm memory size, in GiB
3. Cycles balance

Every sample of one payload carries the same timestamp. The counter reads are
not atomic with each other, but a shared timestamp gives the scrape a single
snapshot instant.
"""

from __future__ import annotations

import io
import math
from collections.abc import Iterable
from decimal import Decimal
from typing import Final

from prometheus_client import CollectorRegistry
from prometheus_client.core import GaugeMetricFamily, Metric
from prometheus_client.registry import Collector
from prometheus_client.samples import Timestamp
from prometheus_client.utils import floatToGoString
from pydantic import BaseModel, ConfigDict, Field

from .counters import CounterReader
from .exceptions import EncodeError

GIBIBYTE: Final = 1 << 30
"""Bytes in one binary gigabyte."""

# -----------------------------------------------------------------------------
# Metric names and help text
#
# Part of the scrape contract. Dashboards and alerts match on these verbatim.
# -----------------------------------------------------------------------------

STABLE_MEMORY_SIZE_GIB: Final = "nx_gov_stable_memory_size_gib"
STABLE_MEMORY_SIZE_HELP: Final = "Amount of stable memory used by this canister, in GiB"

WASM_MEMORY_SIZE_GIB: Final = "nx_gov_wasm_memory_size_gib"
WASM_MEMORY_SIZE_HELP: Final = "Amount of wasm memory used by this canister, in GiB"

CYCLES_BALANCE: Final = "nx_gov_canister_cycles_balance"
# Identical to the wasm memory help text; scrapers match it verbatim.
CYCLES_BALANCE_HELP: Final = "Amount of wasm memory used by this canister, in GiB"


class MetricSample(BaseModel):
    """A single named gauge reading, immutable once built."""

    model_config = ConfigDict(frozen=True, strict=True, extra="forbid")

    name: str = Field(pattern=r"^[a-z_][a-z0-9_]*$")
    """Metric name, restricted to exposition-format characters."""

    value: float
    """Gauge value."""

    help_text: str
    """Human-readable description emitted on the HELP line."""


def gibibytes(num_bytes: int) -> float:
    """Convert bytes to binary gigabytes."""
    return float(num_bytes) / float(GIBIBYTE)


def canister_samples(reader: CounterReader) -> list[MetricSample]:
    """
    Read the counters and build the gauge samples in export order.

    The cycles balance is cast to float. Balances above 2**53 lose precision,
    which is far beyond any balance a canister holds in practice.
    """
    return [
        MetricSample(
            name=STABLE_MEMORY_SIZE_GIB,
            value=gibibytes(reader.stable_storage_bytes()),
            help_text=STABLE_MEMORY_SIZE_HELP,
        ),
        MetricSample(
            name=WASM_MEMORY_SIZE_GIB,
            value=gibibytes(reader.working_memory_bytes()),
            help_text=WASM_MEMORY_SIZE_HELP,
        ),
        MetricSample(
            name=CYCLES_BALANCE,
            value=float(reader.resource_balance()),
            help_text=CYCLES_BALANCE_HELP,
        ),
    ]


def _sample_timestamp(timestamp_ms: int) -> Timestamp:
    """Split epoch milliseconds into an exact seconds/nanoseconds timestamp."""
    seconds, millis = divmod(timestamp_ms, 1000)
    return Timestamp(seconds, millis * 1_000_000)


def _timestamp_ms(timestamp: Timestamp) -> int:
    """Epoch milliseconds of an exact timestamp."""
    return timestamp.sec * 1000 + timestamp.nsec // 1_000_000


def format_value(value: float) -> str:
    """
    Render a gauge value for a data line.

    Integral values are written without a fractional part and never in
    exponent form, so 500.0 becomes "500" and 2**100 is written in full.
    Other finite values use the shortest decimal that round-trips, in
    positional notation ("0.5", "0.00006103515625").

    NaN and infinities keep the Prometheus spelling.
    """
    if not math.isfinite(value):
        return floatToGoString(value)
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def _escape_help(help_text: str) -> str:
    """Escape backslashes and newlines in a HELP line."""
    return help_text.replace("\\", r"\\").replace("\n", r"\n")


class CanisterMetricsCollector(Collector):
    """Yields one gauge family per sample, all stamped with the same instant."""

    def __init__(self, samples: list[MetricSample], timestamp_ms: int) -> None:
        self._samples = samples
        self._timestamp_ms = timestamp_ms

    def collect(self) -> Iterable[Metric]:
        timestamp = _sample_timestamp(self._timestamp_ms)
        for sample in self._samples:
            family = GaugeMetricFamily(sample.name, sample.help_text)
            family.add_metric([], sample.value, timestamp=timestamp)
            yield family


def render_family(family: Metric) -> bytes:
    """
    Render one collected gauge family in the text exposition format.

    Produces the HELP and TYPE lines followed by one data line per sample:
    ``<name> <value> <timestamp_ms>``.
    """
    lines = [
        f"# HELP {family.name} {_escape_help(family.documentation)}\n",
        f"# TYPE {family.name} {family.type}\n",
    ]
    for sample in family.samples:
        line = f"{sample.name} {format_value(sample.value)}"
        if sample.timestamp is not None:
            line = f"{line} {_timestamp_ms(sample.timestamp)}"
        lines.append(f"{line}\n")
    return "".join(lines).encode("utf-8")


def _write(sink: io.BytesIO, data: bytes) -> None:
    """Write all of data to the sink, treating a short write as a failure."""
    written = sink.write(data)
    if written != len(data):
        raise OSError(f"short write: {written} of {len(data)} bytes")


def encode_metrics(
    reader: CounterReader,
    timestamp_ms: int,
    sink: io.BytesIO | None = None,
) -> bytes:
    """
    Encode the canister metrics in the Prometheus text format.

    A fresh registry is built on every call, so nothing is shared between
    scrapes and every call re-reads the counters.

    Args:
        reader: Source of the raw counters.
        timestamp_ms: Wall-clock instant of the scrape, in epoch milliseconds.
        sink: Byte buffer receiving the payload. Defaults to a new BytesIO.

    Returns:
        The contents of the sink.

    Raises:
        EncodeError: If the families cannot be rendered or written to the sink.
    """
    if sink is None:
        sink = io.BytesIO()

    # BytesIO raises ValueError once closed; real streams raise OSError.
    try:
        registry = CollectorRegistry()
        registry.register(CanisterMetricsCollector(canister_samples(reader), timestamp_ms))
        for family in registry.collect():
            _write(sink, render_family(family))
        sink.flush()
        return sink.getvalue()
    except (OSError, ValueError, TypeError) as e:
        raise EncodeError(str(e) or e.__class__.__name__) from e
