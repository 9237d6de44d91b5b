"""CepLá (http://cep.la).

The service only returns JSON when the ``Accept`` header is sent verbatim, and
answers unknown codes with an empty body or an empty array instead of a 404.
"""
from __future__ import annotations

from typing import Any

from ..errors import ProviderErrorKind
from ..models import Address
from ..utils import clean_text
from .http import HttpProvider, ResponseProtocol, SessionFactory, SessionProtocol

__all__ = ["CeplaProvider"]


class CeplaProvider(HttpProvider):
    default_base_url = "http://cep.la"
    base_url_env = "CEP_RACE_CEPLA_URL"

    def __init__(
        self,
        *,
        session: SessionProtocol | None = None,
        session_factory: SessionFactory | None = None,
        base_url: str | None = None,
        timeout_s: float | None = None,
    ) -> None:
        super().__init__(
            name="cepla",
            session=session,
            session_factory=session_factory,
            base_url=base_url,
            timeout_s=timeout_s,
        )

    def build_url(self, digits: str) -> str:
        return f"{self.base_url}/{digits}"

    def decode(self, response: ResponseProtocol) -> Any:
        if not (response.text or "").strip():
            raise self.not_found("empty response body")
        return super().decode(response)

    def parse_payload(self, payload: Any) -> Address:
        if payload in ([], {}):
            raise self.not_found()
        if isinstance(payload, list):
            if len(payload) != 1:
                raise self.error(
                    ProviderErrorKind.MALFORMED_RESPONSE,
                    f"expected one address, got {len(payload)}",
                )
            payload = payload[0]
        data = self.ensure_mapping(payload)
        return Address(
            postal_code=self.require(data, "cep"),
            street=clean_text(data.get("logradouro")),
            neighborhood=clean_text(data.get("bairro")),
            city=self.require(data, "cidade"),
            state=self.require(data, "uf"),
            complement=clean_text(data.get("aux")) or None,
        )
