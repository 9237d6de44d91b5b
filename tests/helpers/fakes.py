from __future__ import annotations

from collections.abc import Callable
import json as jsonlib
import threading
import time
from typing import Any

from cep_race.cancellation import CancelToken
from cep_race.models import Address, Outcome


class FakeResponse:
    def __init__(
        self,
        *,
        status_code: int = 200,
        payload: Any | None = None,
        text: str | None = None,
    ) -> None:
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = "" if payload is None else jsonlib.dumps(payload)
        self.text = text
        self.closed = False

    def json(self) -> Any:
        if self._payload is not None:
            return self._payload
        return jsonlib.loads(self.text)

    def close(self) -> None:
        self.closed = True


Responder = Callable[[str, dict[str, str] | None, float | None], FakeResponse]


class FakeSession:
    def __init__(self, responder: Responder | FakeResponse) -> None:
        if isinstance(responder, FakeResponse):
            response = responder

            def _fixed(url: str, headers: dict[str, str] | None, timeout: float | None) -> FakeResponse:
                return response

            responder = _fixed
        self._responder = responder
        self.calls: list[tuple[str, dict[str, str] | None, float | None]] = []
        self.responses: list[FakeResponse] = []
        self.closed = False

    def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> FakeResponse:
        self.calls.append((url, headers, timeout))
        response = self._responder(url, headers, timeout)
        self.responses.append(response)
        return response

    def close(self) -> None:
        self.closed = True


class RaisingSession:
    def __init__(self, error: Exception) -> None:
        self._error = error
        self.calls = 0

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls += 1
        raise self._error


class ImmediateProvider:
    """Completes on its first scheduling step, without suspending."""

    def __init__(self, name: str, outcome: Outcome | None = None) -> None:
        self._name = name
        self._outcome = outcome
        self.invocations = 0

    def name(self) -> str:
        return self._name

    async def attempt(self, postal_code: str, cancel: CancelToken) -> Outcome:
        self.invocations += 1
        if self._outcome is not None:
            return self._outcome
        return Address(postal_code=postal_code, city=self._name, state="SP")


class BlockingSession:
    """Holds ``get`` open until ``close()`` is called or ``hold_s`` elapses."""

    def __init__(self, payload: Any | None = None, *, hold_s: float = 5.0) -> None:
        self._payload = payload
        self._hold_s = hold_s
        self.released = threading.Event()
        self.started = threading.Event()
        self.closed = False
        self.calls = 0

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls += 1
        self.started.set()
        self.released.wait(self._hold_s)
        return FakeResponse(payload=self._payload)

    def close(self) -> None:
        self.closed = True
        self.released.set()


def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()
