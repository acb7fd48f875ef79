"""Müşteri servisi - cari kayıtlar, bakiye ve ekstre."""

from __future__ import annotations

import logging
from typing import Optional

from kumas_stok import validation
from kumas_stok.models.textile import Customer, LedgerEntry, Payment, Shipment
from kumas_stok.services.base_service import BaseService
from kumas_stok.services.exceptions import ReferenceInUseError
from kumas_stok.utils import DateLike, days_ago, format_usd, is_in_range, parse_date, round_to, short_ref

logger = logging.getLogger(__name__)


class CustomerService(BaseService[Customer]):
    store_name = "customers"
    record_type = Customer
    label = "Müşteri"

    def create(self, customer: Customer) -> Customer:
        self._raise_if_invalid(customer)
        created = self._insert(customer)
        self._invalidate_cache()
        return created

    def update(self, customer: Customer) -> Customer:
        """Müşteri bilgilerini günceller; bakiye sevk/tahsilat akışlarına aittir."""
        self._raise_if_invalid(customer)
        existing = self.require(customer.id)
        customer.balance = existing.balance
        customer.created_at = existing.created_at
        updated = self._save(customer)
        self._invalidate_cache()
        return updated

    def delete(self, customer_id: str) -> bool:
        self.require(customer_id)
        if self.store.query_by_index("shipments", "customer_id", customer_id):
            raise ReferenceInUseError("Bu müşterinin sevk kayıtları bulunduğu için silinemez.")
        if self.store.query_by_index("payments", "customer_id", customer_id):
            raise ReferenceInUseError("Bu müşterinin ödeme kayıtları bulunduğu için silinemez.")
        deleted = self.store.delete(self.store_name, customer_id)
        self._invalidate_cache()
        return deleted

    def validate(self, customer: Customer) -> list[str]:
        return validation.collect(
            validation.required(customer.name, "Müşteri adı"),
            validation.email(customer.email, "E-posta"),
            validation.phone(customer.phone, "Telefon"),
        )

    # --- Bakiye ---

    def get_balance(self, customer_id: str) -> float:
        return round_to(self.require(customer_id).balance or 0)

    def adjust_balance(self, customer_id: str, delta: float, reason: str) -> Customer:
        """Müşteri bakiyesine delta ekler (sevk +, tahsilat -)."""
        customer = self.require(customer_id)
        old_balance = customer.balance or 0
        customer.balance = round_to(old_balance + delta)
        saved = self._save(customer)
        logger.info(
            "Müşteri %s: Bakiye %s -> %s (%s)",
            customer.name, format_usd(old_balance), format_usd(customer.balance), reason,
        )
        self._invalidate_cache()
        return saved

    def recalculate_balance(self, customer_id: str) -> Customer:
        """Bakiyeyi ekstreden yeniden hesaplar ve farklıysa kaydeder."""
        customer = self.require(customer_id)
        ledger = self.get_ledger(customer_id)
        expected = ledger[-1].balance if ledger else 0.0
        if round_to(customer.balance or 0) != expected:
            logger.warning(
                "Müşteri %s bakiye düzeltmesi: %s -> %s",
                customer.name, format_usd(customer.balance), format_usd(expected),
            )
            customer.balance = expected
            customer = self._save(customer)
            self._invalidate_cache()
        return customer

    # --- Özet ve ekstre ---

    def get_summary(self, customer_id: str, days: int = 30) -> dict:
        """Son N gündeki sevk toplamları ve ağırlıklı ortalama fiyat."""
        start, end = days_ago(days), days_ago(0)
        shipments = [
            Shipment.from_item(item)
            for item in self.store.query_by_index("shipments", "customer_id", customer_id)
        ]
        recent = [s for s in shipments if is_in_range(s.date, start, end)]

        total_kg = 0.0
        total_usd = 0.0
        weighted_sum = 0.0
        for shipment in recent:
            for line in shipment.lines:
                total_kg += line.kg or 0
                total_usd += line.line_total_usd or 0
                weighted_sum += (line.kg or 0) * (line.unit_usd or 0)

        return {
            "total_kg": round_to(total_kg),
            "total_usd": round_to(total_usd),
            "avg_price": round_to(weighted_sum / total_kg, 4) if total_kg > 0 else 0.0,
            "total_balance": self.get_balance(customer_id),
            "shipments_count": len(recent),
        }

    def get_ledger(
        self,
        customer_id: str,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
    ) -> list[LedgerEntry]:
        """Sevkler borç, tahsilatlar alacak; tarihe göre sıralı, yürüyen bakiyeli."""
        shipments = [
            Shipment.from_item(item)
            for item in self.store.query_by_index("shipments", "customer_id", customer_id)
        ]
        payments = [
            Payment.from_item(item)
            for item in self.store.query_by_index("payments", "customer_id", customer_id)
        ]
        if start and end:
            shipments = [s for s in shipments if is_in_range(s.date, start, end)]
            payments = [p for p in payments if is_in_range(p.date, start, end)]

        entries = [
            LedgerEntry(
                date=s.date,
                type="shipment",
                description=f"Sevk #{short_ref(s.id)}",
                debit=s.totals.total_usd or 0,
                credit=0.0,
                reference_id=s.id,
            )
            for s in shipments
        ]
        entries += [
            LedgerEntry(
                date=p.date,
                type="payment",
                description=f"Tahsilat - {p.method}".rstrip(" -"),
                debit=0.0,
                credit=p.amount_usd or 0,
                reference_id=p.id,
            )
            for p in payments
        ]
        entries.sort(key=lambda e: parse_date(e.date))

        balance = 0.0
        for entry in entries:
            balance += entry.debit - entry.credit
            entry.balance = round_to(balance)
        return entries
