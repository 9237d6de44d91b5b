"""One-call address lookup over the default provider set."""
from __future__ import annotations

import asyncio
from collections.abc import Iterable

from .models import Address
from .observability import EventLogger
from .provider_spi import ProviderClient
from .providers.factory import create_providers
from .providers.http import DEFAULT_HTTP_TIMEOUT_S
from .race import RaceCoordinator


async def get_address(
    postal_code: str,
    *,
    providers: Iterable[ProviderClient] | None = None,
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S,
    event_logger: EventLogger | None = None,
) -> Address:
    """Return the first address any provider finds for ``postal_code``.

    Raises :class:`~cep_race.errors.AllProvidersFailedError` (carrying every
    provider's error) when no provider succeeds.
    """
    chosen = (
        list(providers)
        if providers is not None
        else create_providers(http_timeout_s=http_timeout_s)
    )
    coordinator = RaceCoordinator(chosen, event_logger=event_logger)
    outcome = await coordinator.resolve(postal_code)
    return outcome.unwrap()


def get_address_sync(
    postal_code: str,
    *,
    providers: Iterable[ProviderClient] | None = None,
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S,
    event_logger: EventLogger | None = None,
) -> Address:
    return asyncio.run(
        get_address(
            postal_code,
            providers=providers,
            http_timeout_s=http_timeout_s,
            event_logger=event_logger,
        )
    )


__all__ = ["get_address", "get_address_sync"]
