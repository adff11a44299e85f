"""
Fakes for the host runtime, the clock and the payload sink.

Each fake provides a minimal implementation for isolated testing.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field


@dataclass
class StaticCounterReader:
    """Counter reader returning fixed values and counting reads."""

    stable_bytes: int = 0
    working_bytes: int = 0
    balance: int = 0
    reads: list[str] = field(default_factory=list)

    def stable_storage_bytes(self) -> int:
        self.reads.append("stable")
        return self.stable_bytes

    def working_memory_bytes(self) -> int:
        self.reads.append("working")
        return self.working_bytes

    def resource_balance(self) -> int:
        self.reads.append("balance")
        return self.balance


@dataclass
class FakeHostRuntime:
    """Host runtime reporting fixed page counts."""

    stable_pages: int = 0
    wasm_pages: int = 0
    balance: int = 0

    def stable_memory_pages(self) -> int:
        return self.stable_pages

    def wasm_memory_pages(self) -> int:
        return self.wasm_pages

    def cycles_balance(self) -> int:
        return self.balance


class FixedClock:
    """Clock returning a fixed millisecond timestamp and counting calls."""

    def __init__(self, now_ms: int) -> None:
        self.now_ms = now_ms
        self.calls = 0

    def __call__(self) -> int:
        self.calls += 1
        return self.now_ms


class FailingSink(io.BytesIO):
    """Byte sink whose writes always fail with an I/O error."""

    def __init__(self, message: str = "sink is full") -> None:
        super().__init__()
        self.message = message

    def write(self, data: object) -> int:
        raise OSError(self.message)


class ShortWriteSink(io.BytesIO):
    """Byte sink that accepts all but the last byte of every write."""

    def write(self, data: bytes) -> int:  # type: ignore[override]
        return super().write(data[:-1])
