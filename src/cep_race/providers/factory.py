"""Helpers for instantiating providers from configuration strings."""
from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from ..provider_spi import ProviderClient
from .brasilapi import BrasilApiProvider
from .cepla import CeplaProvider
from .http import DEFAULT_HTTP_TIMEOUT_S
from .mock import MockProvider
from .viacep import ViaCepProvider

__all__ = [
    "DEFAULT_PROVIDERS",
    "ProviderFactory",
    "ProviderSpec",
    "parse_provider_spec",
    "create_provider_from_spec",
    "create_providers",
]

DEFAULT_PROVIDERS: tuple[str, ...] = ("viacep", "cepla", "brasilapi")


@dataclass(frozen=True)
class ProviderSpec:
    prefix: str
    options: Mapping[str, str] = field(default_factory=dict)


ProviderFactory = Callable[[ProviderSpec, float], ProviderClient]


def parse_provider_spec(spec: str) -> ProviderSpec:
    """Split ``spec`` into a prefix and ``key=value`` options.

    ``"viacep"`` has no options; ``"mock:name=slow;delay=0.5;fail=timeout"``
    carries three.
    """

    if not isinstance(spec, str):
        raise ValueError("provider spec must be a string")

    prefix, sep, remainder = spec.partition(":")
    prefix = prefix.strip().lower()
    if not prefix:
        raise ValueError(f"invalid provider spec: {spec!r}")

    options: dict[str, str] = {}
    if sep:
        for item in remainder.split(";"):
            item = item.strip()
            if not item:
                continue
            key, eq, value = item.partition("=")
            if not eq or not key.strip():
                raise ValueError(f"invalid provider option {item!r} in {spec!r}")
            options[key.strip().lower()] = value.strip()
    return ProviderSpec(prefix=prefix, options=options)


def _http_timeout(spec: ProviderSpec, default: float) -> float:
    raw = spec.options.get("timeout")
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"timeout must be numeric, got {raw!r}") from exc


def _build_mock(spec: ProviderSpec, _timeout_s: float) -> ProviderClient:
    options = spec.options
    try:
        delay_s = float(options.get("delay", "0"))
    except ValueError as exc:
        raise ValueError(f"delay must be numeric, got {options.get('delay')!r}") from exc
    return MockProvider(
        options.get("name", "mock"),
        delay_s=delay_s,
        fail=options.get("fail") or None,
        message=options.get("message") or None,
    )


_DEFAULT_FACTORIES: dict[str, ProviderFactory] = {
    "viacep": lambda spec, timeout_s: ViaCepProvider(
        base_url=spec.options.get("url"), timeout_s=_http_timeout(spec, timeout_s)
    ),
    "cepla": lambda spec, timeout_s: CeplaProvider(
        base_url=spec.options.get("url"), timeout_s=_http_timeout(spec, timeout_s)
    ),
    "brasilapi": lambda spec, timeout_s: BrasilApiProvider(
        base_url=spec.options.get("url"), timeout_s=_http_timeout(spec, timeout_s)
    ),
    "mock": _build_mock,
}


def create_provider_from_spec(
    spec: str,
    *,
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S,
    factories: Mapping[str, ProviderFactory] | None = None,
) -> ProviderClient:
    parsed = parse_provider_spec(spec)

    available: dict[str, ProviderFactory] = dict(_DEFAULT_FACTORIES)
    if factories:
        available.update(factories)

    try:
        factory = available[parsed.prefix]
    except KeyError as exc:
        supported = ", ".join(sorted(available))
        raise ValueError(
            f"unsupported provider prefix: {parsed.prefix}. supported: {supported}"
        ) from exc

    return factory(parsed, http_timeout_s)


def create_providers(
    specs: Iterable[str] | None = None,
    *,
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S,
    factories: Mapping[str, ProviderFactory] | None = None,
) -> list[ProviderClient]:
    """Build providers in the given order (the default trio when ``specs`` is None)."""

    chosen = DEFAULT_PROVIDERS if specs is None else tuple(specs)
    providers = [
        create_provider_from_spec(spec, http_timeout_s=http_timeout_s, factories=factories)
        for spec in chosen
    ]
    names = [provider.name() for provider in providers]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"duplicate provider names: {', '.join(duplicates)}")
    return providers
