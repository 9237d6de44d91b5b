from __future__ import annotations

import asyncio

import pytest

from cep_race.cancellation import CancelToken
from cep_race.errors import ProviderError, ProviderErrorKind
from cep_race.models import Address
from cep_race.providers.mock import MockProvider


def test_mock_default_address_uses_digits() -> None:
    provider = MockProvider("demo")

    outcome = asyncio.run(provider.attempt("70150-903", CancelToken()))

    assert outcome == Address(
        postal_code="70150903",
        street="Rua demo",
        neighborhood="Centro",
        city="Brasília",
        state="DF",
    )
    assert provider.invocations == 1
    assert provider.completed
    assert not provider.cancelled


def test_mock_returns_configured_failure() -> None:
    provider = MockProvider("nf", fail="not_found", message="unknown cep")

    outcome = asyncio.run(provider.attempt("00000000", CancelToken()))

    assert outcome == ProviderError(ProviderErrorKind.NOT_FOUND, "nf", "unknown cep")


def test_mock_fixture_lookup() -> None:
    known = Address(postal_code="01001000", city="São Paulo", state="SP")
    provider = MockProvider("fixture", addresses={"01001000": known})

    found = asyncio.run(provider.attempt("01001-000", CancelToken()))
    missing = asyncio.run(provider.attempt("99999999", CancelToken()))

    assert found is known
    assert isinstance(missing, ProviderError)
    assert missing.kind is ProviderErrorKind.NOT_FOUND
    assert provider.invocations == 2


def test_mock_observes_cancel_token_during_delay() -> None:
    provider = MockProvider("slow", delay_s=5.0)

    async def _run() -> Address | ProviderError:
        token = CancelToken()
        asyncio.get_running_loop().call_later(0.01, token.cancel)
        return await provider.attempt("01001000", token)

    outcome = asyncio.run(_run())

    assert outcome == ProviderError(ProviderErrorKind.PROVIDER_UNAVAILABLE, "slow", "cancelled")
    assert provider.cancelled
    assert not provider.completed


def test_mock_rejects_negative_delay() -> None:
    with pytest.raises(ValueError):
        MockProvider("bad", delay_s=-1)


def test_mock_rejects_unknown_failure_kind() -> None:
    with pytest.raises(ValueError):
        MockProvider("bad", fail="meltdown")


def test_blank_provider_name_is_rejected() -> None:
    with pytest.raises(ValueError):
        MockProvider("  ")
