"""Structured event sinks for race attempts and results."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
import json
from pathlib import Path
import sys
from threading import Lock
import time
from typing import Any, Protocol, TextIO

PathLike = str | Path


class EventLogger(Protocol):
    """Protocol for structured event loggers."""

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        """Persist ``record`` for ``event_type``."""


def render_event(event_type: str, record: Mapping[str, Any]) -> str:
    """One JSON line per event, stamped with ``event`` and a millisecond ``ts``."""

    payload = dict(record)
    payload.setdefault("event", event_type)
    payload.setdefault("ts", int(time.time() * 1000))
    return json.dumps(payload, ensure_ascii=False) + "\n"


class _LineLogger:
    def __init__(self) -> None:
        self._lock = Lock()

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        line = render_event(event_type, record)
        with self._lock:
            self._write(line)

    def _write(self, line: str) -> None:
        raise NotImplementedError


class JsonlLogger(_LineLogger):
    """Append events to a JSONL file; parent directories are created up front."""

    def __init__(self, path: PathLike) -> None:
        super().__init__()
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def _write(self, line: str) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(line)


class StdLogger(_LineLogger):
    """Echo events to a text stream (``stderr`` by default)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self._stream = stream or sys.stderr

    def _write(self, line: str) -> None:
        self._stream.write(line)
        self._stream.flush()


class CompositeLogger:
    """Fan out to a fixed set of loggers; one failing sink does not stop the rest."""

    def __init__(self, loggers: Iterable[EventLogger]) -> None:
        self._loggers = tuple(loggers)

    @property
    def loggers(self) -> tuple[EventLogger, ...]:
        return self._loggers

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        for logger in self._loggers:
            try:
                logger.emit(event_type, record)
            except Exception:  # noqa: BLE001 - sink isolation
                continue


__all__ = [
    "EventLogger",
    "JsonlLogger",
    "StdLogger",
    "CompositeLogger",
    "PathLike",
    "render_event",
]
