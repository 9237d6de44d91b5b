from __future__ import annotations

import json

from ..models import AllFailed, RaceOutcome, RaceSuccess

_TEXT_FIELDS = (
    ("CEP", "postal_code"),
    ("Logradouro", "street"),
    ("Complemento", "complement"),
    ("Bairro", "neighborhood"),
    ("Cidade", "city"),
    ("UF", "state"),
    ("IBGE", "ibge"),
)


def _format_success(outcome: RaceSuccess) -> str:
    record = outcome.address.to_dict()
    lines = [f"{label}: {record[key]}" for label, key in _TEXT_FIELDS if record.get(key)]
    lines.append(f"(via {outcome.provider})")
    return "\n".join(lines)


def _format_failure(outcome: AllFailed) -> str:
    lines = ["All providers failed:"]
    lines.extend(f"  - {error}" for error in outcome.errors)
    return "\n".join(lines)


def format_outcome(outcome: RaceOutcome, out_format: str) -> str:
    if out_format == "json":
        return json.dumps(outcome.to_dict(), ensure_ascii=False)
    if isinstance(outcome, RaceSuccess):
        return _format_success(outcome)
    return _format_failure(outcome)


__all__ = ["format_outcome"]
