from __future__ import annotations

from .args import parse_args
from .config import build_race_config
from .io import format_outcome
from .runner import main, prepare_execution

__all__ = ["parse_args", "build_race_config", "format_outcome", "prepare_execution", "main"]
