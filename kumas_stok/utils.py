"""Tarih, sayı, metin ve liste yardımcıları."""

from __future__ import annotations

import csv
import uuid
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from io import StringIO
from typing import Any, Callable, Iterable, Optional, Union

DateLike = Union[str, date, datetime]

_TR_ASCII = str.maketrans({
    "ğ": "g", "ü": "u", "ş": "s", "ı": "i", "ö": "o", "ç": "c",
    "Ğ": "g", "Ü": "u", "Ş": "s", "İ": "i", "Ö": "o", "Ç": "c",
})


# --- Kimlik ve zaman ---

def generate_id() -> str:
    return str(uuid.uuid4())


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def today_iso() -> str:
    return date.today().isoformat()


def parse_date(value: DateLike) -> date:
    """ISO tarih/zaman metnini, date veya datetime değerini date'e çevirir."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def days_ago(days: int, today: Optional[date] = None) -> date:
    return (today or date.today()) - timedelta(days=days)


def is_in_range(value: DateLike, start: DateLike, end: DateLike) -> bool:
    """Tarih [start, end] aralığında mı (uçlar dahil)."""
    try:
        d = parse_date(value)
    except ValueError:
        return False
    return parse_date(start) <= d <= parse_date(end)


# --- Sayılar ---

def parse_number(value: Any) -> float:
    """Sayıyı çözer; virgül ondalık ayırıcı kabul edilir, geçersizse 0."""
    if value is None or value == "" or value is False:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip().replace(",", "."))
    except ValueError:
        return 0.0


def round_to(value: float, decimals: int = 2) -> float:
    # -0.0 yerine 0.0
    return round(float(value), decimals) + 0.0


def format_kg(value: Optional[float]) -> str:
    return f"{(value or 0):.2f}"


def format_usd(value: Optional[float]) -> str:
    return f"${(value or 0):.2f}"


def format_unit_price(value: Optional[float]) -> str:
    return f"${(value or 0):.4f}"


# --- Metin ---

def normalize_text(text: Optional[str]) -> str:
    """Arama için küçük harfe çevirir, Türkçe karakterleri ASCII'ye indirger."""
    if not text:
        return ""
    return str(text).translate(_TR_ASCII).lower().strip()


def short_ref(record_id: Optional[str], length: int = 6) -> str:
    return (record_id or "")[-length:].upper()


# --- Listeler ---

def group_by(items: Iterable[Any], key: Union[str, Callable[[Any], Any]]) -> dict[Any, list]:
    getter = key if callable(key) else (lambda item: _get(item, key))
    groups: dict[Any, list] = defaultdict(list)
    for item in items:
        groups[getter(item)].append(item)
    return dict(groups)


def _get(item: Any, key: str) -> Any:
    if isinstance(item, dict):
        return item.get(key)
    return getattr(item, key, None)


# --- CSV ---

def rows_to_csv(rows: list[dict], headers: Optional[list[str]] = None) -> str:
    if not rows:
        return ""
    headers = headers or list(rows[0].keys())
    buffer = StringIO()
    writer = csv.DictWriter(buffer, fieldnames=headers, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({h: "" if row.get(h) is None else row.get(h) for h in headers})
    return buffer.getvalue()


