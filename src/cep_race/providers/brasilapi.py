from __future__ import annotations

from typing import Any

from ..models import Address
from ..utils import clean_text
from .http import HttpProvider, SessionFactory, SessionProtocol

__all__ = ["BrasilApiProvider"]


class BrasilApiProvider(HttpProvider):
    """https://brasilapi.com.br CEP v1 endpoint (answers 404 for unknown codes)."""

    default_base_url = "https://brasilapi.com.br"
    base_url_env = "CEP_RACE_BRASILAPI_URL"

    def __init__(
        self,
        *,
        session: SessionProtocol | None = None,
        session_factory: SessionFactory | None = None,
        base_url: str | None = None,
        timeout_s: float | None = None,
    ) -> None:
        super().__init__(
            name="brasilapi",
            session=session,
            session_factory=session_factory,
            base_url=base_url,
            timeout_s=timeout_s,
        )

    def build_url(self, digits: str) -> str:
        return f"{self.base_url}/api/cep/v1/{digits}"

    def parse_payload(self, payload: Any) -> Address:
        data = self.ensure_mapping(payload)
        return Address(
            postal_code=self.require(data, "cep"),
            street=clean_text(data.get("street")),
            neighborhood=clean_text(data.get("neighborhood")),
            city=self.require(data, "city"),
            state=self.require(data, "state"),
        )
