"""Üretim maliyeti servisi - iplik, örme ve boyahane maliyetleri."""

from __future__ import annotations

import logging

from kumas_stok import validation
from kumas_stok.models.textile import CostStatus, InventoryLot, Product, ProductionCost, SupplierType
from kumas_stok.services.base_service import BaseService
from kumas_stok.utils import group_by, parse_number, round_to

logger = logging.getLogger(__name__)


def cost_status(paid_amount: float, total_cost: float) -> CostStatus:
    if paid_amount <= 0:
        return CostStatus.PENDING
    if paid_amount >= total_cost:
        return CostStatus.PAID
    return CostStatus.PARTIAL


class ProductionCostService(BaseService[ProductionCost]):
    store_name = "production_costs"
    record_type = ProductionCost
    label = "Üretim maliyeti"

    def get_all_enriched(self) -> list[dict]:
        """Maliyetleri ürün adı ve parti numarasıyla birlikte döndürür."""
        products = {
            p["id"]: Product.from_item(p) for p in self.store.read_all("products")
        }
        lots = {
            lot["id"]: InventoryLot.from_item(lot) for lot in self.store.read_all("inventory_lots")
        }
        rows = []
        for cost in self.get_all():
            product = products.get(cost.product_id)
            lot = lots.get(cost.lot_id)
            row = cost.to_item()
            row["product_name"] = product.name if product else "Bilinmeyen Ürün"
            row["party"] = lot.party if lot else "Bilinmeyen Parti"
            rows.append(row)
        return rows

    def get_by_lot(self, lot_id: str) -> list[ProductionCost]:
        return self._query("lot_id", lot_id)

    def create(self, cost: ProductionCost) -> ProductionCost:
        self._raise_if_invalid(cost)
        self._normalize(cost)
        cost.paid_amount = 0.0
        cost.status = CostStatus.PENDING
        created = self._insert(cost)
        self._invalidate_cache()
        return created

    def update(self, cost: ProductionCost) -> ProductionCost:
        self._raise_if_invalid(cost)
        self.require(cost.id)
        self._normalize(cost)
        self.update_status(cost)
        updated = self._save(cost)
        self._invalidate_cache()
        return updated

    def validate(self, cost: ProductionCost) -> list[str]:
        messages = []
        # İplik girişlerinde parti ve ürün zorunlu değil
        if not cost.yarn_shipment_id:
            messages += [
                validation.required(cost.lot_id, "Parti"),
                validation.required(cost.product_id, "Ürün"),
            ]
        messages += [
            validation.number(cost.yarn_cost, "İplik maliyeti", 0),
            validation.number(cost.knitting_cost, "Örme maliyeti", 0),
            validation.number(cost.dyehouse_cost, "Boyahane maliyeti", 0),
        ]
        return validation.collect(*messages)

    @staticmethod
    def update_status(cost: ProductionCost) -> ProductionCost:
        cost.status = cost_status(cost.paid_amount or 0, cost.total_cost or 0)
        return cost

    def update_paid_amounts(self) -> list[ProductionCost]:
        """Tedarikçi ödemelerini tür bazında maliyetlere dağıtır.

        Her maliyet kalemi için ödenen, o türün toplam ödemesi ile kalem
        tutarının küçüğüdür.
        """
        payments = self.store.read_all("supplier_payments")
        paid_by_type = {
            supplier_type: sum(parse_number(p.get("amount")) for p in items)
            for supplier_type, items in group_by(payments, "supplier_type").items()
        }

        updated = []
        for cost in self.get_all():
            paid = 0.0
            for supplier_type in SupplierType:
                type_cost = cost.cost_for(supplier_type)
                if type_cost > 0:
                    paid += min(paid_by_type.get(supplier_type.value, 0.0), type_cost)
            cost.paid_amount = round_to(paid)
            self.update_status(cost)
            updated.append(cost)

        self.store.batch_update(self.store_name, [c.to_item() for c in updated])
        self._invalidate_cache()
        logger.info("%d üretim maliyeti ödeme durumu güncellendi", len(updated))
        return updated

    @staticmethod
    def _normalize(cost: ProductionCost) -> None:
        cost.yarn_cost = parse_number(cost.yarn_cost)
        cost.knitting_cost = parse_number(cost.knitting_cost)
        cost.dyehouse_cost = parse_number(cost.dyehouse_cost)
        cost.total_cost = round_to(cost.yarn_cost + cost.knitting_cost + cost.dyehouse_cost)
