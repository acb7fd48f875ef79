"""Form alanı doğrulamaları - hata mesajı ya da None döndürür."""

from __future__ import annotations

import re
from typing import Any, Optional

from kumas_stok.utils import parse_date, parse_number

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^[\d\s\-+()]+$")


def required(value: Any, field_name: str) -> Optional[str]:
    if value is None or str(value).strip() == "":
        return f"{field_name} zorunludur"
    return None


def number(
    value: Any,
    field_name: str,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        try:
            float(value.strip().replace(",", "."))
        except ValueError:
            return f"{field_name} geçerli bir sayı olmalıdır"
    num = parse_number(value)
    if min_value is not None and num < min_value:
        return f"{field_name} en az {min_value} olmalıdır"
    if max_value is not None and num > max_value:
        return f"{field_name} en fazla {max_value} olmalıdır"
    return None


def date(value: Any, field_name: str) -> Optional[str]:
    """Boş değilse YYYY-AA-GG biçiminde geçerli bir tarih olmalı."""
    if value is None or str(value).strip() == "":
        return None
    try:
        parse_date(value)
    except ValueError:
        return f"{field_name} geçerli bir tarih olmalıdır"
    return None


def email(value: Optional[str], field_name: str) -> Optional[str]:
    if not value:
        return None
    if not _EMAIL_RE.match(value):
        return f"{field_name} geçerli bir e-posta adresi olmalıdır"
    return None


def phone(value: Optional[str], field_name: str) -> Optional[str]:
    if not value:
        return None
    if not _PHONE_RE.match(value):
        return f"{field_name} geçerli bir telefon numarası olmalıdır"
    return None


def collect(*messages: Optional[str]) -> list[str]:
    """None olmayan mesajları liste olarak döndürür."""
    return [m for m in messages if m]
