from __future__ import annotations

from typing import Protocol, runtime_checkable

from .cancellation import CancelToken
from .models import Outcome


@runtime_checkable
class ProviderClient(Protocol):
    """Capability every address source exposes to the race coordinator."""

    def name(self) -> str: ...

    async def attempt(self, postal_code: str, cancel: CancelToken) -> Outcome: ...


__all__ = ["ProviderClient"]
