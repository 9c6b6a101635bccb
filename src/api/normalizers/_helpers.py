"""Helpers compartilhados pelos normalizers de provider.

Funções puras e tolerantes a tipos: payloads de webhook não são confiáveis.
"""

from __future__ import annotations

import hashlib
import json
import math
import re
import time
from typing import Any

from utils.errors import InvalidPayloadError

_NON_DIGITS = re.compile(r"\D")


def as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def first_dict(value: Any) -> dict[str, Any]:
    """Primeiro item de uma lista, se for dict."""
    items = as_list(value)
    return as_dict(items[0]) if items else {}


def as_str(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def as_int(value: Any) -> int | None:
    """Converte int/str numérica; aceita o formato {low, high} de fileLength."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    if isinstance(value, dict) and isinstance(value.get("low"), int):
        high = value.get("high") if isinstance(value.get("high"), int) else 0
        return (high << 32) + (value["low"] & 0xFFFFFFFF)
    return None


def as_float(value: Any) -> float | None:
    """Float finito; nan/inf e valores não numéricos viram None."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def digits_only(value: Any) -> str:
    """Remove todo caractere não numérico de um telefone exibido."""
    return _NON_DIGITS.sub("", as_str(value) or "")


def seconds_to_ms(value: Any, field_name: str = "timestamp") -> int:
    """Timestamp do provider (segundos) para epoch em ms.

    Raises:
        InvalidPayloadError: ausente ou não numérico.
    """
    seconds = as_float(value)
    if seconds is None:
        raise InvalidPayloadError(f"Campo {field_name} ausente ou inválido")
    return int(seconds) * 1000


def derive_message_id(instance_id: Any, chat_id: str, moment: Any, content: Any) -> str:
    """Id estável para mensagens sem messageId (mesmo payload, mesmo id)."""
    material = "|".join(
        [
            as_str(instance_id) or "",
            chat_id,
            as_str(moment) or "",
            json.dumps(content, sort_keys=True, ensure_ascii=False, default=str),
        ]
    )
    return hashlib.sha256(material.encode("utf-8")).hexdigest()[:32].upper()


def now_ms() -> int:
    return int(time.time() * 1000)


def build_vcard(name: str, phones: list[str]) -> str:
    """vCard 3.0 mínimo (nome + telefones celulares)."""
    lines = ["BEGIN:VCARD", "VERSION:3.0", f"N:{name}"]
    lines.extend(f"TEL;TYPE=CELL:{phone}" for phone in phones)
    lines.append("END:VCARD")
    return "\n".join(lines) + "\n"


def as_bool_flag(value: Any) -> bool:
    """True apenas para flags explicitamente verdadeiras."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1")
    return value is True or value == 1
