from __future__ import annotations

import argparse
from collections.abc import Sequence


def _parse_csv(value: str) -> tuple[str, ...]:
    parts = tuple(entry.strip() for entry in value.split(",") if entry.strip())
    if not parts:
        raise argparse.ArgumentTypeError("expected at least one item")
    return parts


def _parse_positive_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:  # pragma: no cover - argparse reports error
        raise argparse.ArgumentTypeError("value must be numeric") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be positive")
    return parsed


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cep-race",
        description="Resolve a Brazilian CEP by racing several address providers.",
    )
    parser.add_argument("cep", help="postal code, with or without the dash")
    parser.add_argument(
        "--providers",
        type=_parse_csv,
        help="comma separated provider specs (viacep, cepla, brasilapi, mock:...)",
    )
    parser.add_argument("--config", help="YAML race configuration file")
    parser.add_argument(
        "--timeout",
        dest="race_timeout_s",
        type=_parse_positive_float,
        help="give up on the whole race after this many seconds",
    )
    parser.add_argument(
        "--http-timeout",
        dest="http_timeout_s",
        type=_parse_positive_float,
        help="per-request timeout for HTTP providers (seconds)",
    )
    parser.add_argument("--out-format", dest="out_format", default="text", choices=("text", "json"))
    parser.add_argument("--metrics", help="append race events to this JSONL file")
    parser.add_argument("--verbose", action="store_true", help="echo race events to stderr")
    return parser.parse_args(argv)


__all__ = ["parse_args"]
