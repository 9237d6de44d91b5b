"""Optional Prometheus exporter fed by the race event stream."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Mapping, Protocol

from .events import ATTEMPT_EVENT, RESULT_EVENT


class MetricsExporter(Protocol):
    """Protocol for metrics exporters that consume structured events."""

    def handle_event(self, event_type: str, record: Mapping[str, Any]) -> None:
        """Process a structured metrics ``record`` for ``event_type``."""


class MetricsEventLogger:
    """Fan out structured events to zero or more exporters.

    Satisfies the ``EventLogger`` protocol, so it can be handed to the race
    coordinator directly or combined with file loggers via ``CompositeLogger``.
    """

    def __init__(self, exporters: Iterable[MetricsExporter]) -> None:
        self._exporters = tuple(exporters)

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        for exporter in self._exporters:
            try:
                exporter.handle_event(event_type, record)
            except Exception:  # pragma: no cover - exporter isolation
                continue


class PrometheusMetricsExporter:
    """Translate race events into Prometheus counters and histograms."""

    def __init__(self, namespace: str = "cep_race", registry: Any | None = None) -> None:
        try:
            from prometheus_client import REGISTRY, Counter, Histogram
        except ModuleNotFoundError as exc:  # pragma: no cover - optional dep
            raise RuntimeError(
                "prometheus_client is required to use PrometheusMetricsExporter"
            ) from exc

        target = REGISTRY if registry is None else registry

        self._attempt_total = Counter(
            f"{namespace}_provider_attempt_total",
            "Provider attempts by final status.",
            ("provider", "status", "error_kind"),
            registry=target,
        )
        self._attempt_latency_ms = Histogram(
            f"{namespace}_provider_attempt_latency_ms",
            "Latency of provider attempts (ms).",
            ("provider", "status"),
            registry=target,
        )
        self._race_total = Counter(
            f"{namespace}_race_total",
            "Race outcomes by winner.",
            ("winner", "status"),
            registry=target,
        )
        self._race_latency_ms = Histogram(
            f"{namespace}_race_latency_ms",
            "End-to-end race latency (ms).",
            ("status",),
            registry=target,
        )

    def handle_event(self, event_type: str, record: Mapping[str, Any]) -> None:
        if event_type == ATTEMPT_EVENT:
            provider = str(record.get("provider") or "unknown")
            status = str(record.get("status") or "unknown")
            error_kind = str(record.get("error_kind") or "none")
            self._attempt_total.labels(
                provider=provider, status=status, error_kind=error_kind
            ).inc()

            latency_ms = record.get("latency_ms")
            if isinstance(latency_ms, (int, float)) and latency_ms >= 0:
                self._attempt_latency_ms.labels(
                    provider=provider, status=status
                ).observe(float(latency_ms))

        elif event_type == RESULT_EVENT:
            winner = str(record.get("winner") or "none")
            status = str(record.get("status") or "unknown")
            self._race_total.labels(winner=winner, status=status).inc()

            latency_ms = record.get("latency_ms")
            if isinstance(latency_ms, (int, float)) and latency_ms >= 0:
                self._race_latency_ms.labels(status=status).observe(float(latency_ms))


__all__ = ["MetricsExporter", "MetricsEventLogger", "PrometheusMetricsExporter"]
