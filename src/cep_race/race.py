"""Race several address providers and keep the first successful answer."""
from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
import time
from typing import Any

from .cancellation import CancelToken
from .errors import EmptyProviderListError, ProviderError, ProviderErrorKind
from .events import log_provider_attempt, log_race_result
from .models import Address, AllFailed, Outcome, RaceOutcome, RaceSuccess
from .observability import EventLogger
from .provider_spi import ProviderClient
from .utils import content_hash, elapsed_ms

CancelledCallback = Callable[[Sequence[int]], None]

# Losers keep running until they observe cancellation; hold a reference so the
# event loop does not garbage-collect them mid-flight.
_ABANDONED_TASKS: set[asyncio.Task[Any]] = set()


def _release_abandoned(task: asyncio.Task[Any]) -> None:
    _ABANDONED_TASKS.discard(task)
    if not task.cancelled():
        task.exception()


@dataclass
class _AttemptSlot:
    index: int
    provider: ProviderClient
    name: str
    token: CancelToken
    task: asyncio.Task[tuple[Outcome, int]]


async def _run_attempt(
    provider: ProviderClient,
    name: str,
    postal_code: str,
    token: CancelToken,
) -> tuple[Outcome, int]:
    started = time.perf_counter()
    try:
        outcome = await provider.attempt(postal_code, token)
    except asyncio.CancelledError:
        raise
    except ProviderError as exc:
        outcome = exc
    except Exception as exc:  # noqa: BLE001
        outcome = ProviderError(
            ProviderErrorKind.PROVIDER_UNAVAILABLE,
            name,
            f"{type(exc).__name__}: {exc}",
        )
    if not isinstance(outcome, (Address, ProviderError)):
        outcome = ProviderError(
            ProviderErrorKind.MALFORMED_RESPONSE,
            name,
            f"unexpected outcome type: {type(outcome).__name__}",
        )
    return outcome, elapsed_ms(started)


class RaceCoordinator:
    """Run every registered provider concurrently; the first success wins.

    The provider tuple is fixed at construction. Each :meth:`resolve` call owns
    its own bookkeeping, so a coordinator can be shared between concurrent
    callers.
    """

    def __init__(
        self,
        providers: Iterable[ProviderClient],
        *,
        event_logger: EventLogger | None = None,
        on_cancelled: CancelledCallback | None = None,
    ) -> None:
        self._providers: tuple[ProviderClient, ...] = tuple(providers)
        if not self._providers:
            raise EmptyProviderListError()
        self._names = tuple(provider.name() for provider in self._providers)
        self._event_logger = event_logger
        self._on_cancelled = on_cancelled

    @property
    def providers(self) -> tuple[ProviderClient, ...]:
        return self._providers

    @property
    def provider_names(self) -> tuple[str, ...]:
        return self._names

    @property
    def event_logger(self) -> EventLogger | None:
        return self._event_logger

    def resolve_sync(self, postal_code: str, *, timeout_s: float | None = None) -> RaceOutcome:
        """Blocking adapter; ``timeout_s`` bounds the whole race (``TimeoutError``)."""
        if timeout_s is None:
            return asyncio.run(self.resolve(postal_code))
        return asyncio.run(asyncio.wait_for(self.resolve(postal_code), timeout=timeout_s))

    async def resolve(self, postal_code: str) -> RaceOutcome:
        started = time.perf_counter()
        fingerprint = content_hash(postal_code, self._names)
        total = len(self._providers)
        slots: list[_AttemptSlot] = []
        for index, (provider, name) in enumerate(zip(self._providers, self._names)):
            token = CancelToken()
            task = asyncio.create_task(
                _run_attempt(provider, name, postal_code, token),
                name=f"cep-race:{name}",
            )
            slots.append(_AttemptSlot(index, provider, name, token, task))

        by_task = {slot.task: slot for slot in slots}
        errors: list[ProviderError | None] = [None] * total
        pending: set[asyncio.Task[tuple[Outcome, int]]] = set(by_task)
        try:
            while pending:
                done, pending = await asyncio.wait(
                    pending, return_when=asyncio.FIRST_COMPLETED
                )
                # Simultaneous completions are settled by registration order.
                for slot in sorted((by_task[task] for task in done), key=lambda s: s.index):
                    outcome, latency_ms = self._collect(slot)
                    if isinstance(outcome, Address):
                        log_provider_attempt(
                            self._event_logger,
                            request_fingerprint=fingerprint,
                            provider=slot.name,
                            index=slot.index,
                            total_providers=total,
                            status="ok",
                            latency_ms=latency_ms,
                        )
                        self._discard_late_winners(slot, done, by_task, fingerprint)
                        log_race_result(
                            self._event_logger,
                            request_fingerprint=fingerprint,
                            total_providers=total,
                            winner=slot.name,
                            failures=[error for error in errors if error is not None],
                            latency_ms=elapsed_ms(started),
                        )
                        return RaceSuccess(outcome, slot.name)
                    errors[slot.index] = outcome
                    log_provider_attempt(
                        self._event_logger,
                        request_fingerprint=fingerprint,
                        provider=slot.name,
                        index=slot.index,
                        total_providers=total,
                        status="error",
                        latency_ms=latency_ms,
                        error=outcome,
                    )
        finally:
            if pending:
                self._abandon([by_task[task] for task in pending], fingerprint, started)

        failures = tuple(error for error in errors if error is not None)
        log_race_result(
            self._event_logger,
            request_fingerprint=fingerprint,
            total_providers=total,
            winner=None,
            failures=failures,
            latency_ms=elapsed_ms(started),
        )
        return AllFailed(failures)

    def _collect(self, slot: _AttemptSlot) -> tuple[Outcome, int | None]:
        if slot.task.cancelled():
            return (
                ProviderError(
                    ProviderErrorKind.PROVIDER_UNAVAILABLE,
                    slot.name,
                    "attempt was cancelled before completing",
                ),
                None,
            )
        return slot.task.result()

    def _discard_late_winners(
        self,
        winner: _AttemptSlot,
        done: set[asyncio.Task[tuple[Outcome, int]]],
        by_task: dict[asyncio.Task[Any], _AttemptSlot],
        fingerprint: str,
    ) -> None:
        total = len(self._providers)
        for task in done:
            slot = by_task[task]
            # Lower indices in this batch were already collected as failures.
            if slot.index <= winner.index:
                continue
            slot.token.cancel()
            outcome, latency_ms = self._collect(slot)
            failed = isinstance(outcome, ProviderError)
            log_provider_attempt(
                self._event_logger,
                request_fingerprint=fingerprint,
                provider=slot.name,
                index=slot.index,
                total_providers=total,
                status="error" if failed else "discarded",
                latency_ms=latency_ms,
                error=outcome if failed else None,
            )

    def _abandon(
        self,
        slots: Sequence[_AttemptSlot],
        fingerprint: str,
        started: float,
    ) -> None:
        total = len(self._providers)
        latency_ms = elapsed_ms(started)
        for slot in slots:
            slot.token.cancel()
            slot.task.cancel()
            _ABANDONED_TASKS.add(slot.task)
            slot.task.add_done_callback(_release_abandoned)
            log_provider_attempt(
                self._event_logger,
                request_fingerprint=fingerprint,
                provider=slot.name,
                index=slot.index,
                total_providers=total,
                status="cancelled",
                latency_ms=latency_ms,
            )
        if self._on_cancelled is not None and slots:
            self._on_cancelled(tuple(sorted(slot.index for slot in slots)))


async def resolve(
    postal_code: str,
    providers: Iterable[ProviderClient],
    *,
    event_logger: EventLogger | None = None,
    on_cancelled: CancelledCallback | None = None,
) -> RaceOutcome:
    """Race ``providers`` for ``postal_code`` and return the outcome."""
    coordinator = RaceCoordinator(
        providers, event_logger=event_logger, on_cancelled=on_cancelled
    )
    return await coordinator.resolve(postal_code)


async def resolve_with_timeout(
    postal_code: str,
    providers: Iterable[ProviderClient],
    timeout_s: float,
    *,
    event_logger: EventLogger | None = None,
) -> RaceOutcome:
    """Bound the whole race by ``timeout_s``; raises :class:`TimeoutError`."""
    coordinator = RaceCoordinator(providers, event_logger=event_logger)
    return await asyncio.wait_for(coordinator.resolve(postal_code), timeout=timeout_s)


def resolve_sync(
    postal_code: str,
    providers: Iterable[ProviderClient],
    *,
    timeout_s: float | None = None,
    event_logger: EventLogger | None = None,
) -> RaceOutcome:
    """Blocking adapter for scripts and the CLI."""
    coordinator = RaceCoordinator(providers, event_logger=event_logger)
    return coordinator.resolve_sync(postal_code, timeout_s=timeout_s)


__all__ = [
    "RaceCoordinator",
    "resolve",
    "resolve_with_timeout",
    "resolve_sync",
]
