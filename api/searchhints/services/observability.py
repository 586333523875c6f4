"""Circuit breaking, timeouts and metrics for external collaborator calls."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, DefaultDict, TypeVar

from searchhints.core.config import settings

logger = logging.getLogger("searchhints.collaborators")

T = TypeVar("T")


class CircuitOpenError(Exception):
    """Raised when a provider circuit is open and calls are temporarily blocked."""


@dataclass
class CircuitBreakerState:
    """Track per-provider failure streaks and cooldown windows."""
    threshold: int = 5
    base_backoff_seconds: float = 5.0
    max_backoff_seconds: float = 120.0
    failure_streak: int = 0
    open_until: float = 0.0
    current_backoff: float = field(init=False)
    opened_count: int = 0

    def __post_init__(self) -> None:
        self.current_backoff = self.base_backoff_seconds

    def can_call(self) -> bool:
        """Return True if the circuit is closed and calls are allowed."""
        return time.monotonic() >= self.open_until

    def remaining_cooldown(self) -> float:
        if self.can_call():
            return 0.0
        return self.open_until - time.monotonic()

    def record_success(self) -> None:
        self.failure_streak = 0
        self.open_until = 0.0
        self.current_backoff = self.base_backoff_seconds

    def record_failure(self) -> None:
        """Advance circuit state and open on threshold breaches."""
        self.failure_streak += 1
        if self.failure_streak < self.threshold:
            return
        self.open_until = time.monotonic() + self.current_backoff
        self.failure_streak = 0
        self.opened_count += 1
        self.current_backoff = min(self.current_backoff * 2, self.max_backoff_seconds)

    def snapshot(self) -> dict[str, Any]:
        return {
            "failure_streak": self.failure_streak,
            "open_until": self.open_until,
            "remaining_cooldown": self.remaining_cooldown(),
            "current_backoff": self.current_backoff,
            "opened_count": self.opened_count,
        }


@dataclass
class OperationMetrics:
    """Aggregated counters for a provider operation."""
    started: int = 0
    succeeded: int = 0
    failed: int = 0
    timed_out: int = 0
    skipped: int = 0
    last_latency_ms: float | None = None
    last_error: str | None = None


class CollaboratorMonitor:
    """Track collaborator performance and enforce circuit breaking.

    ``track`` propagates failures to the caller and is gated by the provider
    circuit. ``guard`` only records metrics: it never consults or advances a
    circuit, so a failure on one item blanks that field and nothing else.
    """

    def __init__(
        self,
        *,
        circuit_threshold: int = 5,
        base_backoff_seconds: float = 5.0,
        max_backoff_seconds: float = 120.0,
    ) -> None:
        self._metrics: DefaultDict[str, DefaultDict[str, OperationMetrics]] = defaultdict(
            lambda: defaultdict(OperationMetrics)
        )
        self._circuits: DefaultDict[str, CircuitBreakerState] = defaultdict(
            lambda: CircuitBreakerState(
                threshold=circuit_threshold,
                base_backoff_seconds=base_backoff_seconds,
                max_backoff_seconds=max_backoff_seconds,
            )
        )
        self._lock = asyncio.Lock()

    def allow_call(self, provider: str) -> bool:
        return self._circuits[provider].can_call()

    async def track(
        self,
        provider: str,
        operation: str,
        func: Callable[[], Awaitable[T]],
        *,
        timeout: float | None = None,
        context: dict[str, Any] | None = None,
    ) -> T:
        """Execute a collaborator call while tracking metrics and circuit state."""
        return await self._run(provider, operation, func, timeout=timeout, context=context or {}, breaker=True)

    async def _run(
        self,
        provider: str,
        operation: str,
        func: Callable[[], Awaitable[T]],
        *,
        timeout: float | None,
        context: dict[str, Any],
        breaker: bool,
    ) -> T:
        async with self._lock:
            metrics = self._metrics[provider][operation]
            circuit = self._circuits[provider] if breaker else None
            if circuit is not None and not circuit.can_call():
                remaining = circuit.remaining_cooldown()
                metrics.skipped += 1
                payload = {
                    "event": "collaborator_circuit_open",
                    "provider": provider,
                    "operation": operation,
                    "context": context,
                    "remaining_cooldown": remaining,
                }
                logger.warning(json.dumps(payload, default=str))
                raise CircuitOpenError(f"{provider} circuit open for {remaining:.2f}s")
            metrics.started += 1

        start = time.monotonic()
        try:
            if timeout is None:
                result = await func()
            else:
                result = await asyncio.wait_for(func(), timeout)
        except Exception as exc:  # noqa: BLE001
            latency_ms = (time.monotonic() - start) * 1000
            timed_out = isinstance(exc, asyncio.TimeoutError)
            error = f"timed out after {timeout}s" if timed_out else str(exc) or type(exc).__name__
            async with self._lock:
                metrics = self._metrics[provider][operation]
                metrics.failed += 1
                if timed_out:
                    metrics.timed_out += 1
                metrics.last_latency_ms = latency_ms
                metrics.last_error = error
                payload = {
                    "event": "collaborator_timeout" if timed_out else "collaborator_failure",
                    "provider": provider,
                    "operation": operation,
                    "error": error,
                    "latency_ms": round(latency_ms, 2),
                    "context": context,
                }
                if breaker:
                    self._circuits[provider].record_failure()
                    payload["circuit"] = self._circuits[provider].snapshot()
            logger.warning(json.dumps(payload, default=str))
            raise

        latency_ms = (time.monotonic() - start) * 1000
        async with self._lock:
            metrics = self._metrics[provider][operation]
            metrics.succeeded += 1
            metrics.last_latency_ms = latency_ms
            metrics.last_error = None
            if breaker:
                self._circuits[provider].record_success()
        logger.debug(
            "Collaborator call %s.%s succeeded in %.2fms", provider, operation, latency_ms
        )
        return result

    async def guard(
        self,
        provider: str,
        operation: str,
        func: Callable[[], Awaitable[T]],
        *,
        default: T | None = None,
        timeout: float | None = None,
        context: dict[str, Any] | None = None,
    ) -> T | None:
        """Run an enrichment call outside the circuit, returning ``default`` on failure or timeout."""
        try:
            return await self._run(provider, operation, func, timeout=timeout, context=context or {}, breaker=False)
        except Exception:  # noqa: BLE001 - failures are logged by _run
            return default

    async def snapshot(self) -> dict[str, Any]:
        """Return a snapshot of all tracked provider metrics."""
        async with self._lock:
            snap: dict[str, Any] = {}
            for provider, operations in self._metrics.items():
                snap[provider] = {
                    "circuit": self._circuits[provider].snapshot() if provider in self._circuits else None,
                    "operations": {
                        name: {
                            "started": metrics.started,
                            "succeeded": metrics.succeeded,
                            "failed": metrics.failed,
                            "timed_out": metrics.timed_out,
                            "skipped": metrics.skipped,
                            "last_latency_ms": metrics.last_latency_ms,
                            "last_error": metrics.last_error,
                        }
                        for name, metrics in operations.items()
                    },
                }
            return snap


def build_monitor_from_settings() -> CollaboratorMonitor:
    return CollaboratorMonitor(
        circuit_threshold=settings.collaborator_circuit_threshold,
        base_backoff_seconds=settings.collaborator_base_backoff_seconds,
        max_backoff_seconds=settings.collaborator_max_backoff_seconds,
    )


collaborator_monitor = build_monitor_from_settings()
