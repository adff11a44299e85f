"""
Counter readers for canister runtime state.

A counter reader answers three point-in-time questions about the canister:

- How many bytes of stable memory are committed?
- How many bytes of wasm (heap) memory are committed?
- What is the current cycles balance?

The reads are best-effort and infallible. The host API they delegate to does
not fail in normal operation; if it did, the canister would trap anyway.

Two strategies exist, picked once at construction time:

- HostCounterReader queries a live host runtime.
- SimulatedCounterReader stands in for builds that run off the host, where no
  stable or wasm memory region exists. Both memory reads return 0.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Final, Protocol

WASM_PAGE_SIZE: Final = 65536
"""Size of a wasm memory page in bytes (64 KiB)."""


class CounterReader(Protocol):
    """Source of the raw counters exposed as metrics."""

    def stable_storage_bytes(self) -> int:
        """Bytes currently committed in the stable memory region."""
        ...

    def working_memory_bytes(self) -> int:
        """Bytes currently committed in the wasm memory region."""
        ...

    def resource_balance(self) -> int:
        """Current cycles balance of the canister."""
        ...


class HostRuntime(Protocol):
    """
    Introspection surface of the host the canister runs on.

    Memory sizes are reported in wasm pages, not bytes.
    """

    def stable_memory_pages(self) -> int:
        """Number of pages in the stable memory region."""
        ...

    def wasm_memory_pages(self) -> int:
        """Number of pages in wasm memory 0."""
        ...

    def cycles_balance(self) -> int:
        """Cycles balance, as an unsigned 128-bit quantity."""
        ...


@dataclass(frozen=True, slots=True)
class HostCounterReader:
    """Reads counters from a live host runtime."""

    runtime: HostRuntime
    """Host introspection capability."""

    def stable_storage_bytes(self) -> int:
        """Stable memory size in bytes."""
        return self.runtime.stable_memory_pages() * WASM_PAGE_SIZE

    def working_memory_bytes(self) -> int:
        """Wasm memory size in bytes."""
        return self.runtime.wasm_memory_pages() * WASM_PAGE_SIZE

    def resource_balance(self) -> int:
        """Cycles balance reported by the host."""
        return self.runtime.cycles_balance()


def _zero_balance() -> int:
    """Default balance provider for simulated builds."""
    return 0


@dataclass(frozen=True, slots=True)
class SimulatedCounterReader:
    """
    Counter reader for builds that do not run on the host.

    There is no stable or wasm memory region off the host, so both memory
    reads return 0 on every call. This is a defined value, not an error: it
    keeps the encoder usable in tests and local runs.
    """

    balance_provider: Callable[[], int] = _zero_balance
    """Source of the cycles balance (injectable for testing)."""

    def stable_storage_bytes(self) -> int:
        """Always 0 off the host."""
        return 0

    def working_memory_bytes(self) -> int:
        """Always 0 off the host."""
        return 0

    def resource_balance(self) -> int:
        """Balance from the injected provider."""
        return self.balance_provider()


def select_counter_reader(
    env: str,
    runtime: HostRuntime | None = None,
    balance_provider: Callable[[], int] | None = None,
) -> CounterReader:
    """
    Pick the counter reader strategy for an environment.

    Args:
        env: Environment flag, 'prod' or 'test'.
        runtime: Host runtime. Required for 'prod'.
        balance_provider: Balance source for the simulated reader.

    Returns:
        A HostCounterReader for 'prod', a SimulatedCounterReader for 'test'.

    Raises:
        ValueError: If the environment is unknown, or 'prod' has no runtime.
    """
    if env == "prod":
        if runtime is None:
            raise ValueError("A host runtime is required to read counters in 'prod'")
        return HostCounterReader(runtime=runtime)

    if env == "test":
        if balance_provider is None:
            return SimulatedCounterReader()
        return SimulatedCounterReader(balance_provider=balance_provider)

    raise ValueError(f"Unknown environment for counter reader: '{env}'")
