"""共通プロバイダ基底クラス。"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..cancellation import CancelToken
from ..errors import ProviderError, ProviderErrorKind
from ..models import Address, Outcome
from ..provider_spi import ProviderClient

__all__ = ["BaseProvider"]


class BaseProvider(ProviderClient, ABC):
    """ProviderClient 実装向けの共通ユーティリティ。

    Subclasses implement :meth:`lookup`, which returns an :class:`Address` or
    raises :class:`ProviderError`. :meth:`attempt` converts raised errors into
    returned values so that nothing escapes into the race coordinator.
    """

    _name: str

    def __init__(self, *, name: str) -> None:
        name_text = name.strip()
        if not name_text:
            raise ValueError("provider name must be a non-empty string")
        self._name = name_text

    def name(self) -> str:
        return self._name

    def error(self, kind: ProviderErrorKind, message: str | None = None) -> ProviderError:
        return ProviderError(kind, self._name, message)

    @abstractmethod
    async def lookup(self, postal_code: str, cancel: CancelToken) -> Address: ...

    async def attempt(self, postal_code: str, cancel: CancelToken) -> Outcome:
        if cancel.cancelled:
            return self.error(ProviderErrorKind.PROVIDER_UNAVAILABLE, "cancelled before start")
        try:
            return await self.lookup(postal_code, cancel)
        except ProviderError as exc:
            return exc

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"
