from __future__ import annotations

from typing import Any

from ..models import Address
from ..utils import clean_text
from .http import HttpProvider, SessionFactory, SessionProtocol

__all__ = ["ViaCepProvider"]


def _is_error_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


class ViaCepProvider(HttpProvider):
    """https://viacep.com.br -- answers unknown codes with ``{"erro": true}``."""

    default_base_url = "https://viacep.com.br"
    base_url_env = "CEP_RACE_VIACEP_URL"

    def __init__(
        self,
        *,
        session: SessionProtocol | None = None,
        session_factory: SessionFactory | None = None,
        base_url: str | None = None,
        timeout_s: float | None = None,
    ) -> None:
        super().__init__(
            name="viacep",
            session=session,
            session_factory=session_factory,
            base_url=base_url,
            timeout_s=timeout_s,
        )

    def build_url(self, digits: str) -> str:
        return f"{self.base_url}/ws/{digits}/json/"

    def parse_payload(self, payload: Any) -> Address:
        data = self.ensure_mapping(payload)
        if _is_error_flag(data.get("erro")):
            raise self.not_found()
        return Address(
            postal_code=self.require(data, "cep"),
            street=clean_text(data.get("logradouro")),
            neighborhood=clean_text(data.get("bairro")),
            city=self.require(data, "localidade"),
            state=self.require(data, "uf"),
            complement=clean_text(data.get("complemento")) or None,
            ibge=clean_text(data.get("ibge")) or None,
        )
