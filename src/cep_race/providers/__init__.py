from __future__ import annotations

from .base import BaseProvider
from .brasilapi import BrasilApiProvider
from .cepla import CeplaProvider
from .factory import (
    DEFAULT_PROVIDERS,
    create_provider_from_spec,
    create_providers,
    parse_provider_spec,
)
from .http import HttpProvider
from .mock import MockProvider
from .viacep import ViaCepProvider

__all__ = [
    "BaseProvider",
    "BrasilApiProvider",
    "CeplaProvider",
    "DEFAULT_PROVIDERS",
    "HttpProvider",
    "MockProvider",
    "ViaCepProvider",
    "create_provider_from_spec",
    "create_providers",
    "parse_provider_spec",
]
