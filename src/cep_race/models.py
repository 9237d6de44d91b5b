"""Shared data model exchanged between providers and the race coordinator."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Union

from .errors import AllProvidersFailedError, ProviderError


@dataclass(frozen=True)
class Address:
    postal_code: str
    street: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    complement: str | None = None
    ibge: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


Outcome = Union[Address, ProviderError]


@dataclass(frozen=True)
class RaceSuccess:
    """Winning address together with the id of the provider that produced it."""

    address: Address
    provider: str

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> Address:
        return self.address

    def to_dict(self) -> dict[str, Any]:
        return {"status": "ok", "provider": self.provider, "address": self.address.to_dict()}


@dataclass(frozen=True)
class AllFailed:
    """One error per registered provider, in registration order."""

    errors: tuple[ProviderError, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", tuple(self.errors))

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Address:
        raise AllProvidersFailedError("all providers failed", failures=self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {"status": "error", "errors": [error.to_dict() for error in self.errors]}


RaceOutcome = Union[RaceSuccess, AllFailed]


__all__ = ["Address", "Outcome", "RaceSuccess", "AllFailed", "RaceOutcome"]
