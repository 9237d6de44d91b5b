"""Transport-level failure handling shared by every HTTP provider."""
from __future__ import annotations

import asyncio
import time

import pytest
import requests
from requests import exceptions as requests_exceptions

from cep_race import RaceSuccess, resolve, resolve_sync
from cep_race.cancellation import CancelToken
from cep_race.errors import ProviderError, ProviderErrorKind
from cep_race.providers.mock import MockProvider
from cep_race.providers.viacep import ViaCepProvider

from ..helpers.fakes import (
    BlockingSession,
    FakeResponse,
    FakeSession,
    RaisingSession,
    wait_until,
)


@pytest.mark.parametrize(
    ("error", "kind"),
    [
        (requests_exceptions.ReadTimeout("read timed out"), ProviderErrorKind.TIMEOUT),
        (requests_exceptions.ConnectTimeout("connect timed out"), ProviderErrorKind.TIMEOUT),
        (
            requests_exceptions.ConnectionError("connection refused"),
            ProviderErrorKind.NETWORK_FAILURE,
        ),
        (
            requests_exceptions.TooManyRedirects("redirect loop"),
            ProviderErrorKind.NETWORK_FAILURE,
        ),
    ],
)
def test_transport_errors_are_classified(
    error: requests_exceptions.RequestException, kind: ProviderErrorKind
) -> None:
    session = RaisingSession(error)
    provider = ViaCepProvider(session=session)

    outcome = asyncio.run(provider.attempt("01001000", CancelToken()))

    assert isinstance(outcome, ProviderError)
    assert outcome.kind is kind
    assert outcome.provider == "viacep"
    assert session.calls == 1


def test_pre_cancelled_token_skips_request() -> None:
    session = RaisingSession(AssertionError("must not be called"))
    token = CancelToken()
    token.cancel()

    outcome = asyncio.run(ViaCepProvider(session=session).attempt("01001000", token))

    assert outcome == ProviderError(
        ProviderErrorKind.PROVIDER_UNAVAILABLE, "viacep", "cancelled before start"
    )
    assert session.calls == 0


def test_response_arriving_after_cancel_is_closed_and_dropped() -> None:
    token = CancelToken()

    def _respond(url: str, headers: dict[str, str] | None, timeout: float | None) -> FakeResponse:
        token.cancel()
        return FakeResponse(payload={"cep": "01001-000", "localidade": "São Paulo", "uf": "SP"})

    session = FakeSession(_respond)

    outcome = asyncio.run(ViaCepProvider(session=session).attempt("01001000", token))

    assert outcome == ProviderError(
        ProviderErrorKind.PROVIDER_UNAVAILABLE, "viacep", "cancelled while in flight"
    )
    assert wait_until(lambda: bool(session.responses) and session.responses[0].closed)


def test_postal_code_without_digits_is_not_found() -> None:
    session = RaisingSession(AssertionError("must not be called"))

    outcome = asyncio.run(ViaCepProvider(session=session).attempt("abc-def", CancelToken()))

    assert isinstance(outcome, ProviderError)
    assert outcome.kind is ProviderErrorKind.NOT_FOUND
    assert session.calls == 0


_SE = {"cep": "01001-000", "localidade": "São Paulo", "uf": "SP"}


def test_losing_request_is_released_when_race_ends() -> None:
    blocking = BlockingSession(_SE, hold_s=3.0)
    provider = ViaCepProvider(session_factory=lambda: blocking)

    started = time.perf_counter()
    outcome = resolve_sync("01001000", [provider, MockProvider("fast", delay_s=0.05)])
    elapsed = time.perf_counter() - started

    assert isinstance(outcome, RaceSuccess)
    assert outcome.provider == "fast"
    assert elapsed < 1.0
    assert blocking.started.is_set()
    assert blocking.closed
    assert blocking.released.is_set()


def test_cancel_returns_promptly_even_with_shared_session() -> None:
    blocking = BlockingSession(_SE, hold_s=3.0)
    token = CancelToken()

    async def _run() -> object:
        asyncio.get_running_loop().call_later(0.05, token.cancel)
        return await ViaCepProvider(session=blocking).attempt("01001000", token)

    started = time.perf_counter()
    try:
        outcome = asyncio.run(_run())
    finally:
        blocking.released.set()

    assert time.perf_counter() - started < 1.0
    assert outcome == ProviderError(
        ProviderErrorKind.PROVIDER_UNAVAILABLE, "viacep", "cancelled while in flight"
    )
    assert not blocking.closed


def test_each_attempt_opens_and_closes_its_own_session() -> None:
    opened: list[FakeSession] = []

    def _factory() -> FakeSession:
        session = FakeSession(FakeResponse(payload=_SE))
        opened.append(session)
        return session

    provider = ViaCepProvider(session_factory=_factory)

    async def _run() -> list[object]:
        return list(
            await asyncio.gather(
                resolve("01001000", [provider]),
                resolve("01001000", [provider]),
            )
        )

    outcomes = asyncio.run(_run())

    assert all(isinstance(outcome, RaceSuccess) for outcome in outcomes)
    assert len(opened) == 2
    assert opened[0] is not opened[1]
    assert all(session.closed for session in opened)
    assert all(len(session.calls) == 1 for session in opened)


def test_session_and_factory_are_mutually_exclusive() -> None:
    with pytest.raises(ValueError):
        ViaCepProvider(session=FakeSession(FakeResponse()), session_factory=requests.Session)
