from .cancellation import CancelToken as CancelToken
from .errors import (
    AllProvidersFailedError as AllProvidersFailedError,
    CepRaceError as CepRaceError,
    ConfigError as ConfigError,
    EmptyProviderListError as EmptyProviderListError,
    ProviderError as ProviderError,
    ProviderErrorKind as ProviderErrorKind,
)
from .lookup import get_address as get_address, get_address_sync as get_address_sync
from .models import (
    Address as Address,
    AllFailed as AllFailed,
    RaceOutcome as RaceOutcome,
    RaceSuccess as RaceSuccess,
)
from .provider_spi import ProviderClient as ProviderClient
from .race import (
    RaceCoordinator as RaceCoordinator,
    resolve as resolve,
    resolve_sync as resolve_sync,
    resolve_with_timeout as resolve_with_timeout,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Address",
    "AllFailed",
    "AllProvidersFailedError",
    "CancelToken",
    "CepRaceError",
    "ConfigError",
    "EmptyProviderListError",
    "ProviderClient",
    "ProviderError",
    "ProviderErrorKind",
    "RaceCoordinator",
    "RaceOutcome",
    "RaceSuccess",
    "get_address",
    "get_address_sync",
    "resolve",
    "resolve_sync",
    "resolve_with_timeout",
]
