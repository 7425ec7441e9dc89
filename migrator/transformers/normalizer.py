"""
Field normalization for legacy values written to the new schema
"""

import re
from typing import Any, List, Optional

_NON_DIGITS = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s+")
_LIST_SEPARATORS = re.compile(r"[,;]")

DEFAULT_PHONE = "0000000000"

PAYMENT_FREQUENCIES = {
    "mensalmente": "monthly",
    "mensal": "monthly",
    "semanalmente": "weekly",
    "semanal": "weekly",
    "hora": "hourly",
    "hourly": "hourly",
    "daily": "daily",
    "weekly": "weekly",
    "biweekly": "biweekly",
    "monthly": "monthly",
}

LANGUAGE_LEVELS = {
    "nenhum": "beginner",
    "básico": "beginner",
    "basico": "beginner",
    "intermediário": "intermediate",
    "intermediario": "intermediate",
    "avançado": "advanced",
    "avancado": "advanced",
    "native": "native",
}

USER_ROLES = {"student", "company", "institution", "admin"}

GENDER_ALIASES = {
    "masculino": "Masculino",
    "feminino": "Feminino",
    "outro": "Outro",
    "ambos": "Outro",
    "m": "Masculino",
    "f": "Feminino",
    "o": "Outro",
}


def strip_null_bytes(value: Any) -> Optional[str]:
    """PostgreSQL text cannot hold 0x00"""
    if value is None:
        return None
    return str(value).replace("\x00", "")


def optional_str(value: Any) -> Optional[str]:
    """Trimmed string, or None when empty"""
    cleaned = strip_null_bytes(value)
    if cleaned is None:
        return None
    cleaned = cleaned.strip()
    return cleaned or None


def required_str(value: Any) -> str:
    """Trimmed string, empty string when missing"""
    cleaned = strip_null_bytes(value)
    return cleaned.strip() if cleaned is not None else ""


def normalize_zip(value: Any) -> Optional[str]:
    """Brazilian CEP as NNNNN-NNN when it has 8 digits"""
    if not value:
        return None
    digits = _NON_DIGITS.sub("", str(value))
    if len(digits) == 8:
        return f"{digits[:5]}-{digits[5:]}"
    return digits[:9]


def normalize_cpf(value: Any) -> Optional[str]:
    if not value:
        return None
    return _NON_DIGITS.sub("", str(value))


def normalize_phone(value: Any) -> Optional[str]:
    if not value:
        return None
    return _WHITESPACE.sub("", str(value)).strip() or None


def phone_or_default(value: Any, fallback: str = DEFAULT_PHONE) -> str:
    return normalize_phone(value) or fallback


def map_payment_frequency(value: Any) -> Optional[str]:
    key = (str(value) if value is not None else "").strip().lower()
    if not key:
        return None
    return PAYMENT_FREQUENCIES.get(key)


def map_language_level(value: Any) -> Optional[str]:
    key = (str(value) if value is not None else "").strip().lower()
    if not key:
        return None
    return LANGUAGE_LEVELS.get(key, "beginner")


def map_user_role(value: Any) -> str:
    role = (str(value) if value is not None else "").strip().lower()
    return role if role in USER_ROLES else "student"


def gender_name(value: Any) -> str:
    """Canonical gender name for a legacy free-text value"""
    raw = required_str(value)
    return GENDER_ALIASES.get(raw.lower(), raw)


def to_string_list(value: Any) -> Optional[List[str]]:
    """
    Turn a list or a comma/semicolon separated string into a list of
    non-empty strings; None when nothing is left.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        cleaned = [item for item in (optional_str(v) for v in value) if item]
        return cleaned or None

    raw = optional_str(value)
    if not raw:
        return None
    parts = [part.strip() for part in _LIST_SEPARATORS.split(raw) if part.strip()]
    return parts or [raw]


def public_number(value: Any) -> str:
    """Six-digit, zero-padded public number of a commitment term"""
    text = "" if value is None else str(value)
    return text.rjust(6, "0")[-6:]
