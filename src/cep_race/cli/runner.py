from __future__ import annotations

import argparse
from collections.abc import Mapping, Sequence
import sys

from ..errors import ConfigError
from ..models import RaceOutcome
from ..observability import CompositeLogger, EventLogger, JsonlLogger, StdLogger
from ..providers.factory import ProviderFactory, create_providers
from ..race import RaceCoordinator
from .args import parse_args
from .config import build_race_config
from .io import format_outcome

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _build_event_logger(args: argparse.Namespace, metrics_path: str | None) -> EventLogger | None:
    loggers: list[EventLogger] = []
    if metrics_path:
        loggers.append(JsonlLogger(metrics_path))
    if args.verbose:
        loggers.append(StdLogger(sys.stderr))
    if not loggers:
        return None
    if len(loggers) == 1:
        return loggers[0]
    return CompositeLogger(loggers)


def prepare_execution(
    args: argparse.Namespace,
    *,
    factories: Mapping[str, ProviderFactory] | None = None,
) -> tuple[RaceCoordinator, float | None]:
    config = build_race_config(args)
    providers = create_providers(
        config.providers, http_timeout_s=config.http_timeout_s, factories=factories
    )
    metrics_path = str(config.metrics_path) if config.metrics_path is not None else None
    coordinator = RaceCoordinator(
        providers, event_logger=_build_event_logger(args, metrics_path)
    )
    return coordinator, config.race_timeout_s


def main(
    argv: Sequence[str] | None = None,
    *,
    factories: Mapping[str, ProviderFactory] | None = None,
) -> int:
    args = parse_args(argv)
    try:
        coordinator, race_timeout_s = prepare_execution(args, factories=factories)
    except (ConfigError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_USAGE

    try:
        outcome: RaceOutcome = coordinator.resolve_sync(args.cep, timeout_s=race_timeout_s)
    except TimeoutError:
        print(f"Lookup timed out after {race_timeout_s}s", file=sys.stderr)
        return EXIT_FAILED

    stream = sys.stdout if outcome.ok else sys.stderr
    print(format_outcome(outcome, args.out_format), file=stream)
    return EXIT_OK if outcome.ok else EXIT_FAILED


__all__ = ["prepare_execution", "main"]
