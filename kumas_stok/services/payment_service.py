"""Tahsilat servisi - müşteri ödemeleri bakiyeden düşülür."""

from __future__ import annotations

import logging
from typing import Optional

from kumas_stok import validation
from kumas_stok.models.textile import Payment
from kumas_stok.services.base_service import BaseService, DashboardCache
from kumas_stok.services.customer_service import CustomerService
from kumas_stok.storage.base import BaseStore
from kumas_stok.utils import DateLike, format_usd, parse_date, parse_number

logger = logging.getLogger(__name__)


class PaymentService(BaseService[Payment]):
    store_name = "payments"
    record_type = Payment
    label = "Tahsilat"

    def __init__(
        self,
        store: BaseStore,
        customers: CustomerService,
        cache: Optional[DashboardCache] = None,
    ):
        super().__init__(store, cache)
        self.customers = customers

    def get_all_enriched(self) -> list[dict]:
        names = {c["id"]: c.get("name") for c in self.store.read_all("customers")}
        rows = []
        for payment in self.get_all():
            row = payment.to_item()
            row["customer_name"] = names.get(payment.customer_id) or "Bilinmeyen Müşteri"
            rows.append(row)
        return rows

    def get_by_customer(self, customer_id: str) -> list[Payment]:
        return self._query("customer_id", customer_id)

    def get_customer_payments(
        self, customer_id: str, from_date: Optional[DateLike] = None
    ) -> list[Payment]:
        payments = self.get_by_customer(customer_id)
        if from_date is None:
            return payments
        start = parse_date(from_date)
        return [p for p in payments if parse_date(p.date) >= start]

    def create(self, payment: Payment) -> Payment:
        self._raise_if_invalid(payment)
        self.customers.require(payment.customer_id)
        payment.amount_usd = parse_number(payment.amount_usd)

        created = self._insert(payment)
        self.customers.adjust_balance(
            created.customer_id,
            -created.amount_usd,
            f"-{format_usd(created.amount_usd)} tahsilat",
        )
        self._invalidate_cache()
        return created

    def update(self, payment: Payment) -> Payment:
        """Eski tahsilatı eski müşteriye geri ekler, yenisini yeni müşteriden düşer."""
        self._raise_if_invalid(payment)
        existing = self.require(payment.id)
        self.customers.require(payment.customer_id)
        payment.amount_usd = parse_number(payment.amount_usd)
        payment.created_at = existing.created_at

        updated = self._save(payment)

        if self.customers.get_by_id(existing.customer_id):
            self.customers.adjust_balance(
                existing.customer_id,
                existing.amount_usd or 0,
                f"+{format_usd(existing.amount_usd)} eski tahsilat geri alındı",
            )
        self.customers.adjust_balance(
            updated.customer_id,
            -updated.amount_usd,
            f"-{format_usd(updated.amount_usd)} yeni tahsilat",
        )
        self._invalidate_cache()
        return updated

    def delete(self, payment_id: str) -> bool:
        existing = self.require(payment_id)
        deleted = self.store.delete(self.store_name, payment_id)

        if self.customers.get_by_id(existing.customer_id):
            self.customers.adjust_balance(
                existing.customer_id,
                existing.amount_usd or 0,
                f"+{format_usd(existing.amount_usd)} tahsilat silindi",
            )
        else:
            logger.warning("Tahsilat müşterisi bulunamadı: %s", existing.customer_id)
        self._invalidate_cache()
        return deleted

    def validate(self, payment: Payment) -> list[str]:
        return validation.collect(
            validation.required(payment.customer_id, "Müşteri"),
            validation.required(payment.date, "Tarih"),
            validation.date(payment.date, "Tarih"),
            validation.number(payment.amount_usd, "Tutar", 0.01),
        )
