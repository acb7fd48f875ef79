"""Tedarikçi servisi - iplik, örme ve boyahane tedarikçileri.

- Tedarikçi kayıtları ve açılış bakiyeleri
- Tedarikçi ödemeleri ve tür bazında borç
- Ürün bazlı kg fiyat listeleri
- Yeni parti için otomatik boyahane maliyeti
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from kumas_stok import validation
from kumas_stok.models.textile import (
    ProductionCost,
    Supplier,
    SupplierPayment,
    SupplierPriceEntry,
    SupplierType,
)
from kumas_stok.services.base_service import BaseService
from kumas_stok.services.exceptions import ReferenceInUseError, ValidationError
from kumas_stok.services.exchange_rate import ExchangeRateService
from kumas_stok.utils import parse_date, parse_number, round_to

logger = logging.getLogger(__name__)

# Açılış bakiyesi USD tutulan tedarikçi türleri
USD_SUPPLIER_TYPES = (SupplierType.YARN, SupplierType.KNITTING)


@dataclass
class DyehouseCost:
    supplier_id: str
    price_per_kg: float
    exchange_rate: float
    total_cost_try: float
    total_cost_usd: float


class SupplierService(BaseService[Supplier]):
    store_name = "suppliers"
    record_type = Supplier
    label = "Tedarikçi"

    def __init__(self, store, cache=None, exchange_rates: Optional[ExchangeRateService] = None):
        super().__init__(store, cache)
        self.exchange_rates = exchange_rates or ExchangeRateService()

    def create(self, supplier: Supplier) -> Supplier:
        self._raise_if_invalid(supplier)
        return self._insert(supplier)

    def update(self, supplier: Supplier) -> Supplier:
        self._raise_if_invalid(supplier)
        self.require(supplier.id)
        return self._save(supplier)

    def delete(self, supplier_id: str) -> bool:
        self.require(supplier_id)
        if self.store.query_by_index("supplier_payments", "supplier_id", supplier_id):
            raise ReferenceInUseError("Bu tedarikçiye ait ödeme kayıtları bulunduğu için silinemez.")
        return self.store.delete(self.store_name, supplier_id)

    def validate(self, supplier: Supplier) -> list[str]:
        return validation.collect(
            validation.required(supplier.name, "Tedarikçi adı"),
            validation.required(supplier.type, "Tedarikçi türü"),
        )

    def set_opening_settings(
        self, supplier_id: str, opening_balance: float, accrual_start_date: str
    ) -> Supplier:
        """Açılış bakiyesini ayarlar: iplik/örme için USD, diğerleri için TRY."""
        supplier = self.require(supplier_id)
        amount = parse_number(opening_balance)
        if supplier.type in USD_SUPPLIER_TYPES:
            supplier.opening_balance_usd = amount
            supplier.opening_balance_try = 0.0
        else:
            supplier.opening_balance_try = amount
            supplier.opening_balance_usd = 0.0
        supplier.accrual_start_date = accrual_start_date
        return self._save(supplier)

    # --- Tedarikçi ödemeleri ---

    def create_payment(self, payment: SupplierPayment) -> SupplierPayment:
        errors = self.validate_payment(payment)
        if errors:
            raise ValidationError(errors)
        payment.amount = parse_number(payment.amount)
        item = self.store.create("supplier_payments", payment.to_item())
        self._invalidate_cache()
        return SupplierPayment.from_item(item)

    def validate_payment(self, payment: SupplierPayment) -> list[str]:
        return validation.collect(
            validation.required(payment.supplier_type, "Tedarikçi"),
            validation.number(payment.amount, "Tutar", 0.01),
            validation.required(payment.date, "Tarih"),
            validation.date(payment.date, "Tarih"),
        )

    def get_all_payments(self) -> list[SupplierPayment]:
        return [SupplierPayment.from_item(item) for item in self.store.read_all("supplier_payments")]

    def get_payments_by_type(self, supplier_type: SupplierType) -> list[SupplierPayment]:
        return [
            SupplierPayment.from_item(item)
            for item in self.store.query_by_index(
                "supplier_payments", "supplier_type", SupplierType(supplier_type).value
            )
        ]

    def get_supplier_debt(self, supplier_type: SupplierType) -> float:
        """Tür bazında üretim maliyetleri toplamı eksi ödemeler."""
        costs = [ProductionCost.from_item(item) for item in self.store.read_all("production_costs")]
        total_cost = sum(cost.cost_for(supplier_type) for cost in costs)
        total_paid = sum(p.amount or 0 for p in self.get_payments_by_type(supplier_type))
        return round_to(total_cost - total_paid)

    def get_last_payment_date(self, supplier_type: SupplierType) -> Optional[str]:
        payments = self.get_payments_by_type(supplier_type)
        if not payments:
            return None
        return max(payments, key=lambda p: parse_date(p.date)).date

    # --- Fiyat listeleri ---

    def get_price_list(self, supplier_type: SupplierType) -> list[SupplierPriceEntry]:
        return [
            SupplierPriceEntry.from_item(item)
            for item in self.store.query_by_index(
                "supplier_price_lists", "supplier_type", SupplierType(supplier_type).value
            )
        ]

    def get_price_list_by_supplier(self, supplier_id: str) -> list[SupplierPriceEntry]:
        return [
            SupplierPriceEntry.from_item(item)
            for item in self.store.query_by_index("supplier_price_lists", "supplier_id", supplier_id)
        ]

    def get_product_price(self, supplier_type: SupplierType, product_id: str) -> float:
        for entry in self.get_price_list(supplier_type):
            if entry.product_id == product_id:
                return entry.price_per_kg
        return 0.0

    def set_product_price(
        self, supplier_type: SupplierType, product_id: str, price_per_kg: float, currency: str = "TRY"
    ) -> SupplierPriceEntry:
        """Tür geneli fiyat (tedarikçiye bağlı olmayan) ekler ya da günceller."""
        existing = next(
            (
                e for e in self.get_price_list(supplier_type)
                if e.product_id == product_id and not e.supplier_id
            ),
            None,
        )
        return self._upsert_price(
            existing,
            SupplierPriceEntry(
                supplier_type=supplier_type,
                product_id=product_id,
                price_per_kg=parse_number(price_per_kg),
                currency=currency,
            ),
        )

    def set_supplier_product_price(
        self, supplier_id: str, product_id: str, price_per_kg: float, currency: str = "TRY"
    ) -> SupplierPriceEntry:
        supplier = self.require(supplier_id)
        existing = next(
            (e for e in self.get_price_list_by_supplier(supplier_id) if e.product_id == product_id),
            None,
        )
        return self._upsert_price(
            existing,
            SupplierPriceEntry(
                supplier_type=supplier.type,
                product_id=product_id,
                price_per_kg=parse_number(price_per_kg),
                currency=currency,
                supplier_id=supplier_id,
            ),
        )

    def _upsert_price(
        self, existing: Optional[SupplierPriceEntry], entry: SupplierPriceEntry
    ) -> SupplierPriceEntry:
        if existing:
            existing.price_per_kg = entry.price_per_kg
            existing.currency = entry.currency
            item = self.store.update("supplier_price_lists", existing.to_item())
        else:
            item = self.store.create("supplier_price_lists", entry.to_item())
        return SupplierPriceEntry.from_item(item)

    # --- Otomatik boyahane maliyeti ---

    def get_active_dyehouse(self) -> Optional[Supplier]:
        for supplier in self._query("type", SupplierType.DYEHOUSE.value):
            if supplier.is_active:
                return supplier
        return None

    def calculate_dyehouse_cost(self, product_id: str, total_kg: float) -> Optional[DyehouseCost]:
        """Boyahane kg fiyatı (TRY) x kg, güncel kur ile USD'ye çevrilir."""
        dyehouse = self.get_active_dyehouse()
        if dyehouse is None:
            logger.warning("Aktif boyahane bulunamadı")
            return None

        price_per_kg = self.get_product_price(SupplierType.DYEHOUSE, product_id)
        if price_per_kg <= 0:
            logger.warning("Ürün %s için boyahane fiyatı bulunamadı", product_id)
            return None

        rate = self.exchange_rates.get_usd_to_try()
        total_try = round_to(price_per_kg * total_kg)
        total_usd = round_to(total_try / rate)
        logger.info(
            "Boyahane maliyeti: %skg x %sTL/kg = %sTL = %sUSD (Kur: %s)",
            total_kg, price_per_kg, total_try, total_usd, rate,
        )
        return DyehouseCost(
            supplier_id=dyehouse.id,
            price_per_kg=price_per_kg,
            exchange_rate=rate,
            total_cost_try=total_try,
            total_cost_usd=total_usd,
        )
