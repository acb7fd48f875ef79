"""Stok (parti) servisi.

- Parti kayıtları ve top takibi
- FIFO sıralı uygun partiler ve önerilen miktarlar
- Sevkler için stok tahsisi ve iadesi (audit log ile)
- Yeni parti girişinde otomatik boyahane maliyeti
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional

from kumas_stok import validation
from kumas_stok.models.textile import InventoryLot, LotStatus, Product, ProductionCost, Shipment
from kumas_stok.services.allocation import Allocation, LotSuggestion, apply_status, suggest_fifo
from kumas_stok.services.base_service import BaseService, DashboardCache
from kumas_stok.services.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ReferenceInUseError,
    ServiceError,
)
from kumas_stok.services.production_cost_service import ProductionCostService
from kumas_stok.services.stock_validator import StockValidator
from kumas_stok.services.supplier_service import SupplierService
from kumas_stok.storage.base import BaseStore, StoreError
from kumas_stok.utils import format_usd, parse_number, round_to

logger = logging.getLogger(__name__)


def remaining_tops(lot: InventoryLot) -> int:
    """Kalan top sayısı: kalan kg / ortalama kg, yoksa kayıtlı değer."""
    if (lot.avg_kg_per_roll or 0) > 0:
        return max(0, math.floor((lot.remaining_kg or 0) / lot.avg_kg_per_roll))
    if lot.remaining_tops is not None:
        return lot.remaining_tops
    return lot.total_tops


class InventoryService(BaseService[InventoryLot]):
    store_name = "inventory_lots"
    record_type = InventoryLot
    label = "Parti"

    def __init__(
        self,
        store: BaseStore,
        cache: Optional[DashboardCache] = None,
        validator: Optional[StockValidator] = None,
        suppliers: Optional[SupplierService] = None,
        production_costs: Optional[ProductionCostService] = None,
    ):
        super().__init__(store, cache)
        self.validator = validator or StockValidator()
        self.suppliers = suppliers
        self.production_costs = production_costs

    def get_all_enriched(self) -> list[dict]:
        """Partileri ürün adı ve hesaplanan kalan top ile döndürür."""
        products = {p["id"]: Product.from_item(p) for p in self.store.read_all("products")}
        rows = []
        for lot in self.get_all():
            product = products.get(lot.product_id)
            row = lot.to_item()
            row["product_name"] = product.name if product else "Bilinmeyen Ürün"
            row["remaining_tops"] = remaining_tops(lot)
            rows.append(row)
        return rows

    def get_by_product(self, product_id: str) -> list[InventoryLot]:
        return self._query("product_id", product_id)

    def get_by_party(self, party: str) -> list[InventoryLot]:
        """Parti numarasına göre arar (büyük/küçük harf ve boşluk duyarsız)."""
        key = (party or "").strip().lower()
        return [lot for lot in self.get_all() if (lot.party or "").strip().lower() == key]

    # --- CRUD ---

    def create(self, lot: InventoryLot) -> InventoryLot:
        self._raise_if_invalid(lot)
        lot.rolls = int(parse_number(lot.rolls))
        lot.avg_kg_per_roll = parse_number(lot.avg_kg_per_roll)
        lot.total_kg = round_to(parse_number(lot.total_kg) or lot.rolls * lot.avg_kg_per_roll)
        lot.remaining_kg = lot.total_kg
        lot.total_tops = lot.rolls
        lot.remaining_tops = lot.total_tops
        apply_status(lot)

        created = self._insert(lot)
        logger.info("Yeni parti: %s (%skg, %d top)", created.party, created.total_kg, created.total_tops)
        self._record_dyehouse_cost(created)
        self._invalidate_cache()
        return created

    def update(self, lot: InventoryLot) -> InventoryLot:
        """Parti bilgilerini günceller; toplam değişse de kullanılan miktar korunur.

        Toplam, rulo x ortalama kg verilmişse ondan, yoksa toplam kg alanından alınır.
        """
        self._raise_if_invalid(lot)
        existing = self.require(lot.id)

        lot.created_at = existing.created_at
        lot.total_tops = existing.total_tops
        lot.remaining_tops = existing.remaining_tops

        rolls = int(parse_number(lot.rolls))
        avg = parse_number(lot.avg_kg_per_roll)
        lot.rolls, lot.avg_kg_per_roll = rolls, avg
        new_total = round_to(rolls * avg) if rolls and avg else round_to(parse_number(lot.total_kg))
        used_kg = max(0.0, (existing.total_kg or 0) - (existing.remaining_kg or 0))
        lot.total_kg = new_total
        lot.remaining_kg = round_to(max(0.0, new_total - used_kg))
        if rolls and avg:
            existing_remaining_tops = (
                existing.remaining_tops if existing.remaining_tops is not None else existing.rolls
            )
            used_tops = max(0, (existing.total_tops or existing.rolls or 0) - existing_remaining_tops)
            lot.total_tops = rolls
            lot.remaining_tops = max(0, rolls - used_tops)

        apply_status(lot)
        updated = self._save(lot)
        self._invalidate_cache()
        return updated

    def delete(self, lot_id: str) -> bool:
        self.require(lot_id)
        for item in self.store.read_all("shipments"):
            if any(line.lot_id == lot_id for line in Shipment.from_item(item).lines):
                raise ReferenceInUseError("Bu parti sevk kayıtlarında kullanıldığı için silinemez.")
        deleted = self.store.delete(self.store_name, lot_id)
        self._invalidate_cache()
        return deleted

    def validate(self, lot: InventoryLot) -> list[str]:
        return validation.collect(
            validation.required(lot.product_id, "Ürün"),
            validation.required(lot.party, "Parti"),
            validation.required(lot.date, "Tarih"),
            validation.date(lot.date, "Tarih"),
            validation.number(lot.rolls, "Rulo sayısı", 0),
            validation.number(lot.total_kg, "Toplam kg", 0),
            validation.number(lot.avg_kg_per_roll, "Ortalama kg/rulo", 0),
        )

    # --- FIFO ---

    def get_available_lots(self, product_id: str, required_kg: float = 0) -> list[LotSuggestion]:
        """Ürünün stoğu olan partileri FIFO sırasıyla, önerilen kg ile döndürür."""
        return suggest_fifo(self.get_by_product(product_id), parse_number(required_kg))

    def allocate_stock(
        self,
        allocations: Iterable[Allocation],
        triggered_by: str = "shipment",
        shipment_id: Optional[str] = None,
    ) -> list[InventoryLot]:
        """Partilerden stok düşer; tüm partiler tek seferde yazılır.

        Herhangi bir tahsis partinin kalanını aşarsa hiçbir parti yazılmaz.
        """
        allocations = list(allocations)
        lots, before = self._load_for_change(allocations)
        for allocation in allocations:
            lot = lots[allocation.lot_id]
            remaining = lot.remaining_kg or 0
            kg = round_to(allocation.kg)
            if kg > remaining:
                raise InsufficientStockError(lot.party, remaining, kg)
            lot.remaining_kg = round_to(remaining - kg)
            if allocation.tops is not None:
                current_tops = lot.remaining_tops if lot.remaining_tops is not None else lot.rolls
                lot.remaining_tops = max(0, current_tops - allocation.tops)
            apply_status(lot)

        return self._write_changes(lots, before, "allocate", triggered_by, shipment_id)

    def release_stock(
        self,
        allocations: Iterable[Allocation],
        triggered_by: str = "shipment",
        shipment_id: Optional[str] = None,
    ) -> list[InventoryLot]:
        """Tahsis edilen stoğu partilere geri ekler (parti toplamını aşmadan)."""
        allocations = list(allocations)
        lots, before = self._load_for_change(allocations, skip_missing=True)
        for allocation in allocations:
            lot = lots.get(allocation.lot_id)
            if lot is None:
                continue
            restored = (lot.remaining_kg or 0) + round_to(allocation.kg)
            lot.remaining_kg = round_to(min(lot.total_kg, restored))
            if allocation.tops and lot.remaining_tops is not None:
                lot.remaining_tops = min(lot.total_tops, lot.remaining_tops + allocation.tops)
            apply_status(lot)

        return self._write_changes(lots, before, "release", triggered_by, shipment_id)

    def _load_for_change(
        self, allocations: Iterable[Allocation], skip_missing: bool = False
    ) -> tuple[dict[str, InventoryLot], dict[str, float]]:
        lots: dict[str, InventoryLot] = {}
        for allocation in allocations:
            if allocation.lot_id in lots:
                continue
            lot = self.get_by_id(allocation.lot_id)
            if lot is None:
                if skip_missing:
                    logger.warning("Parti bulunamadı, stok iadesi atlandı: %s", allocation.lot_id)
                    continue
                raise NotFoundError(self.label, allocation.lot_id)
            lots[lot.id] = lot
        before = {lot_id: lot.remaining_kg or 0 for lot_id, lot in lots.items()}
        return lots, before

    def _write_changes(
        self,
        lots: dict[str, InventoryLot],
        before: dict[str, float],
        operation_type: str,
        triggered_by: str,
        shipment_id: Optional[str],
    ) -> list[InventoryLot]:
        changed = list(lots.values())
        if not changed:
            return []
        self.store.batch_update(self.store_name, [lot.to_item() for lot in changed])
        for lot in changed:
            self.validator.log_stock_change(
                operation_type, lot, before[lot.id], triggered_by, shipment_id=shipment_id
            )
        self._invalidate_cache()
        return changed

    # --- Özet ---

    def get_stock_summary(self) -> dict:
        lots = self.get_all()
        counts = {status.value: 0 for status in LotStatus}
        for lot in lots:
            counts[lot.status.value] += 1
        total_stock = round_to(sum(lot.remaining_kg or 0 for lot in lots))
        active = sum(1 for lot in lots if (lot.remaining_kg or 0) > 0)
        logger.debug("Stok özeti: %skg (%d/%d aktif)", total_stock, active, len(lots))
        return {
            "total_stock": total_stock,
            "total_lots": len(lots),
            "active_lots": active,
            "status_counts": counts,
        }

    # --- Otomatik boyahane maliyeti ---

    def _record_dyehouse_cost(self, lot: InventoryLot) -> Optional[ProductionCost]:
        if self.suppliers is None or self.production_costs is None:
            return None
        try:
            quote = self.suppliers.calculate_dyehouse_cost(lot.product_id, lot.total_kg)
            if quote is None or quote.total_cost_usd <= 0:
                return None
            cost = self.production_costs.create(
                ProductionCost(
                    lot_id=lot.id,
                    product_id=lot.product_id,
                    dyehouse_cost=quote.total_cost_usd,
                    price_per_kg=quote.price_per_kg,
                    exchange_rate=quote.exchange_rate,
                    supplier_id=quote.supplier_id,
                )
            )
        except (ServiceError, StoreError) as e:
            logger.warning("Otomatik boyahane maliyeti kaydedilemedi (parti %s): %s", lot.party, e)
            return None
        logger.info("Otomatik boyahane maliyeti kaydedildi: %s", format_usd(cost.total_cost))
        return cost
