"""Mock provider that can deterministically trigger failure modes."""
from __future__ import annotations

import asyncio
from collections.abc import Mapping

from ..cancellation import CancelToken
from ..errors import ProviderErrorKind
from ..models import Address
from ..utils import digits_only
from .base import BaseProvider

__all__ = ["MockProvider"]


class MockProvider(BaseProvider):
    """Answer after ``delay_s`` with a fixed address or a fixed failure.

    No network is involved, which makes it the building block for race tests
    and offline demos. ``invocations``, ``cancelled`` and ``completed`` record
    what happened to the last attempts.
    """

    def __init__(
        self,
        name: str = "mock",
        *,
        delay_s: float = 0.0,
        address: Address | None = None,
        fail: ProviderErrorKind | str | None = None,
        message: str | None = None,
        addresses: Mapping[str, Address] | None = None,
    ) -> None:
        super().__init__(name=name)
        if delay_s < 0:
            raise ValueError("delay_s must be non-negative")
        self.delay_s = float(delay_s)
        self._address = address
        self._fail = ProviderErrorKind(fail) if fail is not None else None
        self._message = message
        self._addresses = dict(addresses or {})
        self.invocations = 0
        self.cancelled = False
        self.completed = False

    def _address_for(self, postal_code: str) -> Address:
        if self._address is not None:
            return self._address
        digits = digits_only(postal_code)
        known = self._addresses.get(digits)
        if known is not None:
            return known
        if self._addresses:
            raise self.error(ProviderErrorKind.NOT_FOUND, f"{digits or postal_code!r} not in fixture")
        return Address(
            postal_code=digits or postal_code,
            street=f"Rua {self.name()}",
            neighborhood="Centro",
            city="Brasília",
            state="DF",
        )

    async def lookup(self, postal_code: str, cancel: CancelToken) -> Address:
        self.invocations += 1
        try:
            finished = await cancel.sleep(self.delay_s)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if not finished:
            self.cancelled = True
            raise self.error(ProviderErrorKind.PROVIDER_UNAVAILABLE, "cancelled")
        self.completed = True
        if self._fail is not None:
            raise self.error(self._fail, self._message)
        return self._address_for(postal_code)
