"""Ham stok cari hesabı - açılış, borç (ham kumaş girişi) ve USD ödemeler."""

from __future__ import annotations

import logging
from typing import Optional

from kumas_stok import validation
from kumas_stok.models.textile import RawBalanceEntry, RawBalanceType
from kumas_stok.services.base_service import BaseService
from kumas_stok.utils import parse_date, parse_number, round_to, today_iso

logger = logging.getLogger(__name__)


class RawBalanceService(BaseService[RawBalanceEntry]):
    store_name = "raw_balances"
    record_type = RawBalanceEntry
    label = "Ham stok hareketi"

    def add_opening_balance(self, amount_usd: float, date: Optional[str] = None) -> RawBalanceEntry:
        return self._add(
            RawBalanceEntry(
                type=RawBalanceType.OPENING,
                description="Açılış Bakiyesi",
                amount_usd=round_to(parse_number(amount_usd)),
                date=date or today_iso(),
            )
        )

    def add_debt(
        self,
        lot_id: Optional[str],
        party: str,
        kg: float,
        price_per_kg: float,
        date: Optional[str] = None,
    ) -> RawBalanceEntry:
        kg = parse_number(kg)
        price_per_kg = parse_number(price_per_kg)
        return self._add(
            RawBalanceEntry(
                type=RawBalanceType.DEBT,
                description=f"Ham stok girişi - {party or ''}".strip(" -"),
                lot_id=lot_id,
                kg=kg,
                price_per_kg=price_per_kg,
                amount_usd=round_to(kg * price_per_kg),
                date=date or today_iso(),
            )
        )

    def add_payment(
        self,
        amount_usd: float,
        method: str = "",
        note: str = "",
        date: Optional[str] = None,
    ) -> RawBalanceEntry:
        return self._add(
            RawBalanceEntry(
                type=RawBalanceType.PAYMENT,
                description="USD Ödeme" + (f" - {method}" if method else ""),
                amount_usd=round_to(parse_number(amount_usd)),
                method=method or "",
                note=note or "",
                date=date or today_iso(),
            )
        )

    def get_statement(self) -> dict:
        """Tarihe göre sıralı hareketler ve yürüyen bakiye."""
        entries = sorted(self.get_all(), key=lambda e: parse_date(e.date))
        balance = 0.0
        rows = []
        for entry in entries:
            if entry.type == RawBalanceType.PAYMENT:
                balance -= entry.amount_usd or 0
            else:
                balance += entry.amount_usd or 0
            row = entry.to_item()
            row["running_balance"] = round_to(balance)
            rows.append(row)
        return {"rows": rows, "balance": round_to(balance)}

    def validate(self, entry: RawBalanceEntry) -> list[str]:
        errors = validation.collect(
            validation.required(entry.date, "Tarih"),
            validation.date(entry.date, "Tarih"),
        )
        if parse_number(entry.amount_usd) < 0:
            errors.append("Tutar negatif olamaz")
        return errors

    def _add(self, entry: RawBalanceEntry) -> RawBalanceEntry:
        self._raise_if_invalid(entry)
        created = self._insert(entry)
        logger.info("Ham stok hareketi: %s %s", created.type.value, created.amount_usd)
        return created
