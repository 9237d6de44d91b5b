"""Event emission helpers for provider attempts and race results."""
from __future__ import annotations

from collections.abc import Sequence

from .errors import ProviderError
from .observability import EventLogger

ATTEMPT_EVENT = "provider_attempt"
RESULT_EVENT = "race_result"


def log_provider_attempt(
    event_logger: EventLogger | None,
    *,
    request_fingerprint: str,
    provider: str,
    index: int,
    total_providers: int,
    status: str,
    latency_ms: int | None,
    error: ProviderError | None = None,
) -> None:
    if event_logger is None:
        return
    event_logger.emit(
        ATTEMPT_EVENT,
        {
            "request_fingerprint": request_fingerprint,
            "provider": provider,
            "index": index,
            "total_providers": total_providers,
            "status": status,
            "latency_ms": latency_ms,
            "error_kind": error.kind.value if error is not None else None,
            "error_message": error.message if error is not None else None,
        },
    )


def log_race_result(
    event_logger: EventLogger | None,
    *,
    request_fingerprint: str,
    total_providers: int,
    winner: str | None,
    failures: Sequence[ProviderError],
    latency_ms: int,
) -> None:
    if event_logger is None:
        return
    event_logger.emit(
        RESULT_EVENT,
        {
            "request_fingerprint": request_fingerprint,
            "status": "ok" if winner is not None else "error",
            "winner": winner,
            "total_providers": total_providers,
            "failures": [failure.to_dict() for failure in failures],
            "latency_ms": latency_ms,
        },
    )


__all__ = ["ATTEMPT_EVENT", "RESULT_EVENT", "log_provider_attempt", "log_race_result"]
