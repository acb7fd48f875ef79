"""Sevk servisi - FIFO stok tahsisi, tutarlar ve müşteri bakiyesi.

Sevk oluşturma sırası:
1. Doğrulama ve tutar hesaplama
2. Parti bazında stok yeterliliği
3. Stok tahsisi (yazma başarısız olursa geri alınır)
4. Müşteri bakiyesine sevk tutarı eklenir

Silme ve güncelleme aynı etkileri ters sırayla geri alır.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Optional

from kumas_stok import validation
from kumas_stok.models.textile import InventoryLot, Shipment, ShipmentLine, ShipmentTotals
from kumas_stok.services.allocation import Allocation, plan_fifo_allocation
from kumas_stok.services.base_service import BaseService, DashboardCache
from kumas_stok.services.customer_service import CustomerService
from kumas_stok.services.exceptions import InsufficientStockError, NotFoundError, ServiceError
from kumas_stok.services.inventory_service import InventoryService
from kumas_stok.storage.base import BaseStore, StoreError
from kumas_stok.utils import days_ago, format_usd, generate_id, is_in_range, parse_number, round_to, short_ref

logger = logging.getLogger(__name__)


def line_allocations(lines: list[ShipmentLine]) -> list[Allocation]:
    return [
        Allocation(lot_id=line.lot_id, kg=line.kg, tops=line.tops or None)
        for line in lines
    ]


class ShipmentService(BaseService[Shipment]):
    store_name = "shipments"
    record_type = Shipment
    label = "Sevk"

    def __init__(
        self,
        store: BaseStore,
        customers: CustomerService,
        inventory: InventoryService,
        cache: Optional[DashboardCache] = None,
    ):
        super().__init__(store, cache)
        self.customers = customers
        self.inventory = inventory

    def get_all_enriched(self) -> list[dict]:
        names = {c["id"]: c.get("name") for c in self.store.read_all("customers")}
        rows = []
        for shipment in self.get_all():
            row = shipment.to_item()
            row["customer_name"] = names.get(shipment.customer_id) or "Bilinmeyen Müşteri"
            rows.append(row)
        return rows

    def get_by_customer(self, customer_id: str) -> list[Shipment]:
        return self._query("customer_id", customer_id)

    # --- Oluştur / sil / güncelle ---

    def create(self, shipment: Shipment) -> Shipment:
        self._raise_if_invalid(shipment)
        self.customers.require(shipment.customer_id)
        self.calculate_totals(shipment)
        self.validate_stock_availability(shipment.lines)

        shipment.id = shipment.id or generate_id()
        allocations = line_allocations(shipment.lines)
        self.inventory.allocate_stock(allocations, "shipment_create", shipment.id)
        try:
            created = self._insert(shipment)
        except StoreError:
            logger.error("Sevk kaydedilemedi, stok tahsisi geri alınıyor: #%s", short_ref(shipment.id))
            self.inventory.release_stock(allocations, "shipment_create_rollback", shipment.id)
            raise

        total = created.totals.total_usd
        self.customers.adjust_balance(
            created.customer_id, total, f"+{format_usd(total)} sevk eklendi"
        )
        self._invalidate_cache()
        return created

    def delete(self, shipment_id: str) -> bool:
        """Sevki siler; parti stokları ve müşteri bakiyesi geri alınır."""
        shipment = self.require(shipment_id)
        logger.info("Sevk siliniyor: #%s", short_ref(shipment_id, 8))

        self.inventory.release_stock(
            line_allocations(shipment.lines), "shipment_delete", shipment_id
        )

        total = shipment.totals.total_usd or 0
        if self.customers.get_by_id(shipment.customer_id):
            self.customers.adjust_balance(
                shipment.customer_id, -total, f"-{format_usd(total)} sevk iptal edildi"
            )
        else:
            logger.warning("Sevk müşterisi bulunamadı: %s", shipment.customer_id)

        deleted = self.store.delete(self.store_name, shipment_id)
        self._invalidate_cache()
        return deleted

    def update(self, shipment: Shipment) -> Shipment:
        """Eski tahsisi iade eder, yeni satırları tahsis eder, bakiye farkını uygular."""
        self._raise_if_invalid(shipment)
        existing = self.require(shipment.id)
        self.customers.require(shipment.customer_id)
        self.calculate_totals(shipment)
        shipment.created_at = existing.created_at

        old_allocations = line_allocations(existing.lines)
        self.inventory.release_stock(old_allocations, "shipment_update", shipment.id)
        try:
            self.validate_stock_availability(shipment.lines)
            self.inventory.allocate_stock(
                line_allocations(shipment.lines), "shipment_update", shipment.id
            )
        except (ServiceError, StoreError):
            self.inventory.allocate_stock(old_allocations, "shipment_update_rollback", shipment.id)
            raise

        updated = self._save(shipment)

        old_total = existing.totals.total_usd or 0
        new_total = updated.totals.total_usd or 0
        if existing.customer_id == updated.customer_id:
            if round_to(new_total - old_total) != 0:
                self.customers.adjust_balance(
                    updated.customer_id, new_total - old_total, "sevk güncellendi"
                )
        else:
            if self.customers.get_by_id(existing.customer_id):
                self.customers.adjust_balance(
                    existing.customer_id, -old_total, "sevk başka müşteriye taşındı"
                )
            self.customers.adjust_balance(updated.customer_id, new_total, "sevk güncellendi")

        self._invalidate_cache()
        return updated

    # --- Doğrulama ---

    def validate(self, shipment: Shipment) -> list[str]:
        messages = validation.collect(
            validation.required(shipment.customer_id, "Müşteri"),
            validation.required(shipment.date, "Tarih"),
            validation.date(shipment.date, "Tarih"),
        )
        if not shipment.lines:
            messages.append("En az bir sevk satırı gereklidir")
        for number, line in enumerate(shipment.lines, start=1):
            messages += self.validate_line(line, number)
        return messages

    @staticmethod
    def validate_line(line: ShipmentLine, line_number: int) -> list[str]:
        prefix = f"Satır {line_number}:"
        return validation.collect(
            validation.required(line.lot_id, f"{prefix} Parti"),
            validation.number(line.kg, f"{prefix} Kg", 0.01),
            validation.number(line.unit_usd, f"{prefix} Birim fiyat", 0),
        )

    def validate_stock_availability(self, lines: list[ShipmentLine]) -> dict[str, InventoryLot]:
        """Aynı partiye ait satırlar toplanarak partinin kalanı ile karşılaştırılır.

        Satırlara parti numarası ve ürün bilgisi de işlenir.
        """
        requested: dict[str, float] = defaultdict(float)
        for line in lines:
            requested[line.lot_id] += parse_number(line.kg)

        lots: dict[str, InventoryLot] = {}
        for lot_id, kg in requested.items():
            lot = self.inventory.get_by_id(lot_id)
            if lot is None:
                raise NotFoundError("Parti", lot_id)
            if round_to(kg) > (lot.remaining_kg or 0):
                raise InsufficientStockError(lot.party, lot.remaining_kg or 0, round_to(kg))
            lots[lot_id] = lot

        for line in lines:
            lot = lots[line.lot_id]
            line.party = lot.party
            line.product_id = lot.product_id
        return lots

    @staticmethod
    def calculate_totals(shipment: Shipment) -> ShipmentTotals:
        total_kg = total_usd = total_vat = total_with_vat = 0.0
        total_tops = 0
        for line in shipment.lines:
            line.kg = round_to(parse_number(line.kg))
            line.tops = int(parse_number(line.tops))
            line.unit_usd = parse_number(line.unit_usd)
            line.line_total_usd = round_to(line.kg * line.unit_usd)
            line.vat = parse_number(line.vat)
            line.total_with_vat = parse_number(line.total_with_vat) or line.line_total_usd

            total_kg += line.kg
            total_tops += line.tops
            total_usd += line.line_total_usd
            total_vat += line.vat
            total_with_vat += line.total_with_vat

        shipment.totals = ShipmentTotals(
            total_kg=round_to(total_kg),
            total_tops=total_tops,
            total_usd=round_to(total_usd),
            total_vat=round_to(total_vat),
            total_with_vat=round_to(total_with_vat),
        )
        return shipment.totals

    # --- FIFO satır önerisi ---

    def build_fifo_lines(self, product_id: str, kg: float, unit_usd: float) -> list[ShipmentLine]:
        """İstenen kg'yi en eski partilerden karşılayan sevk satırlarını üretir."""
        lots = self.inventory.get_by_product(product_id)
        plan = plan_fifo_allocation(lots, parse_number(kg))
        if not plan.is_complete:
            raise InsufficientStockError("tüm partiler", plan.allocated_kg, plan.requested_kg)

        by_id = {lot.id: lot for lot in lots}
        return [
            ShipmentLine(
                lot_id=allocation.lot_id,
                kg=allocation.kg,
                unit_usd=parse_number(unit_usd),
                product_id=product_id,
                party=by_id[allocation.lot_id].party,
            )
            for allocation in plan.allocations
        ]

    # --- Özet ---

    def get_summary(self, days: int = 30) -> dict:
        start, end = days_ago(days), days_ago(0)
        recent = [s for s in self.get_all() if is_in_range(s.date, start, end)]
        total_kg = sum(s.totals.total_kg or 0 for s in recent)
        total_usd = sum(s.totals.total_usd or 0 for s in recent)
        logger.debug("Sevk özeti: %d sevk, %skg, %s", len(recent), total_kg, format_usd(total_usd))
        return {
            "total_kg": round_to(total_kg),
            "total_usd": round_to(total_usd),
            "count": len(recent),
        }
