"""pytest グローバル設定: src レイアウトのパッケージを解決する。"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
import sys
from typing import Any

import pytest

_REPO_ROOT = Path(__file__).resolve().parent.parent
_SRC_ROOT = str(_REPO_ROOT / "src")
if _SRC_ROOT not in sys.path:
    sys.path.insert(0, _SRC_ROOT)


class CapturingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_type: str, record: Mapping[str, Any]) -> None:
        self.events.append((event_type, dict(record)))

    def of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [payload for kind, payload in self.events if kind == event_type]


@pytest.fixture
def capturing_logger() -> CapturingLogger:
    return CapturingLogger()


@pytest.fixture(autouse=True)
def _isolate_cep_race_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "CEP_RACE_PROVIDERS",
        "CEP_RACE_HTTP_TIMEOUT",
        "CEP_RACE_TIMEOUT",
        "CEP_RACE_METRICS_PATH",
        "CEP_RACE_VIACEP_URL",
        "CEP_RACE_CEPLA_URL",
        "CEP_RACE_BRASILAPI_URL",
    ):
        monkeypatch.delenv(name, raising=False)
