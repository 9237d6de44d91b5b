from __future__ import annotations

import argparse
from pathlib import Path

from ..config import RaceConfig, load_race_config, race_config_from_environment


def build_race_config(args: argparse.Namespace) -> RaceConfig:
    """Layer defaults, environment, config file and flags (later wins)."""
    config = race_config_from_environment()
    if args.config:
        config = load_race_config(args.config, base=config)
    return config.merged(
        providers=args.providers,
        http_timeout_s=args.http_timeout_s,
        race_timeout_s=args.race_timeout_s,
        metrics_path=Path(args.metrics) if args.metrics else None,
    )


__all__ = ["build_race_config"]
