"""Normalized exception hierarchy for the CEP race."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any


class CepRaceError(Exception):
    """Base class for library-originated errors."""


class FatalError(CepRaceError):
    """Base class for unrecoverable errors."""


class ProviderErrorKind(str, Enum):
    """Failure taxonomy shared by every provider."""

    NETWORK_FAILURE = "network_failure"
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    MALFORMED_RESPONSE = "malformed_response"
    PROVIDER_UNAVAILABLE = "provider_unavailable"


class ProviderError(CepRaceError):
    """A single provider's failure.

    Providers return instances of this class instead of raising them; the
    exception base only exists so that HTTP helpers can ``raise`` from deep
    inside parsing code and have :class:`~cep_race.providers.base.BaseProvider`
    turn it back into a value.
    """

    def __init__(
        self,
        kind: ProviderErrorKind | str,
        provider: str,
        message: str | None = None,
    ) -> None:
        self.kind = ProviderErrorKind(kind)
        self.provider = provider
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        label = f"{self.kind.value}@{self.provider}"
        if self.message:
            return f"{label}: {self.message}"
        return label

    def __repr__(self) -> str:
        return (
            f"ProviderError(kind={self.kind.value!r}, provider={self.provider!r}, "
            f"message={self.message!r})"
        )

    def _key(self) -> tuple[ProviderErrorKind, str, str | None]:
        return self.kind, self.provider, self.message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProviderError):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "kind": self.kind.value,
            "message": self.message,
        }


class EmptyProviderListError(FatalError, ValueError):
    """Raised when a race is requested without any provider."""

    def __init__(self, message: str = "at least one provider is required") -> None:
        super().__init__(message)


class AllProvidersFailedError(FatalError):
    """Raised by ``unwrap()`` helpers when every provider failed."""

    def __init__(
        self,
        message: str,
        *,
        failures: Iterable[ProviderError] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.failures = list(failures) if failures is not None else []

    def __str__(self) -> str:
        if not self.failures:
            return self.message
        details = "; ".join(str(failure) for failure in self.failures)
        return f"{self.message}: {details}"


class ConfigError(FatalError, ValueError):
    """Raised when the race configuration is invalid."""


__all__ = [
    "CepRaceError",
    "FatalError",
    "ProviderErrorKind",
    "ProviderError",
    "EmptyProviderListError",
    "AllProvidersFailedError",
    "ConfigError",
]
