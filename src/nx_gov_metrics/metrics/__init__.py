"""
Canister health metrics.

Reads the canister's memory and cycles counters and exposes them as gauges in
the Prometheus text format.
"""

from .counters import (
    WASM_PAGE_SIZE,
    CounterReader,
    HostCounterReader,
    HostRuntime,
    SimulatedCounterReader,
    select_counter_reader,
)
from .encoder import (
    CYCLES_BALANCE,
    GIBIBYTE,
    STABLE_MEMORY_SIZE_GIB,
    WASM_MEMORY_SIZE_GIB,
    MetricSample,
    canister_samples,
    encode_metrics,
    format_value,
    gibibytes,
)
from .exceptions import EncodeError
from .response import CONTENT_TYPE, HttpResponse, build_metrics_response, wall_clock_ms

__all__ = [
    "CONTENT_TYPE",
    "CYCLES_BALANCE",
    "CounterReader",
    "EncodeError",
    "GIBIBYTE",
    "HostCounterReader",
    "HostRuntime",
    "HttpResponse",
    "MetricSample",
    "STABLE_MEMORY_SIZE_GIB",
    "SimulatedCounterReader",
    "WASM_MEMORY_SIZE_GIB",
    "WASM_PAGE_SIZE",
    "build_metrics_response",
    "canister_samples",
    "encode_metrics",
    "format_value",
    "gibibytes",
    "select_counter_reader",
    "wall_clock_ms",
]
