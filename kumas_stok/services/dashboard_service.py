"""Gösterge paneli - stok, sevk ve alacak özetleri, düşük stok uyarıları."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from kumas_stok.models.textile import Payment, Shipment, StockAlert
from kumas_stok.services.customer_service import CustomerService
from kumas_stok.services.inventory_service import InventoryService
from kumas_stok.services.product_service import ProductService
from kumas_stok.services.shipment_service import ShipmentService
from kumas_stok.utils import format_kg, format_usd, normalize_text, parse_date, round_to

logger = logging.getLogger(__name__)

SUMMARY_CACHE_KEY = "dashboard_summary"

CRITICAL_STOCK_KG = 100.0

# İzlenen kumaş türleri (ürün adında geçen anahtar kelimeler)
WATCHED_KEYWORDS = [
    "kappa",
    "jarse",
    "lyc mens", "lyc mensh", "lyc mensj", "lyc menş", "lyc mensi",
    "lyc suprem", "lycra suprem", "suprem",
    "polymens", "poly mens", "polymensh", "polymen", "polymenş",
    "yağmur", "yağmur desen", "damla",
    "petek",
]


class DashboardService:
    """Ana sayfa özetleri; sonuçlar ortak önbellekte tutulur."""

    def __init__(
        self,
        customers: CustomerService,
        products: ProductService,
        inventory: InventoryService,
        shipments: ShipmentService,
        low_stock_threshold: float = 500.0,
        watched_keywords: Optional[Iterable[str]] = None,
    ):
        self.customers = customers
        self.products = products
        self.inventory = inventory
        self.shipments = shipments
        self.store = inventory.store
        self.cache = inventory.cache
        self.low_stock_threshold = low_stock_threshold
        self.watched_keywords = [
            normalize_text(k) for k in (watched_keywords or WATCHED_KEYWORDS)
        ]

    def get_summary(self) -> dict:
        cached = self.cache.get(SUMMARY_CACHE_KEY)
        if cached is not None:
            logger.debug("Gösterge paneli önbellekten okundu")
            return cached

        summary = {
            "total_stock": self.inventory.get_stock_summary()["total_stock"],
            "last_30_days_shipment": self.shipments.get_summary(30),
            "open_receivables": self.get_open_receivables(),
        }
        self.cache.set(SUMMARY_CACHE_KEY, summary)
        return summary

    def get_open_receivables(self) -> float:
        """Pozitif müşteri bakiyelerinin toplamı."""
        total = sum(max(0.0, c.balance or 0) for c in self.customers.get_all())
        logger.debug("Açık alacaklar: %s", format_usd(total))
        return round_to(total)

    def get_recent_activities(self, limit: int = 10) -> list[dict]:
        activities = []
        for item in self.store.read_all("shipments"):
            shipment = Shipment.from_item(item)
            activities.append({
                "type": "shipment",
                "date": shipment.date,
                "description": (
                    f"Sevk: {shipment.totals.total_kg or 0}kg - "
                    f"{format_usd(shipment.totals.total_usd)}"
                ),
                "id": shipment.id,
            })
        for item in self.store.read_all("payments"):
            payment = Payment.from_item(item)
            activities.append({
                "type": "payment",
                "date": payment.date,
                "description": f"Tahsilat: {format_usd(payment.amount_usd)}",
                "id": payment.id,
            })
        activities.sort(key=lambda a: parse_date(a["date"]), reverse=True)
        return activities[:limit]

    def get_low_stock_alerts(self) -> list[StockAlert]:
        """İzlenen ürünlerden toplam kalanı eşiğin altında kalanlar."""
        lots = self.inventory.get_all()
        alerts = []
        for product in self.products.get_all():
            name = normalize_text(product.name)
            if not any(keyword in name for keyword in self.watched_keywords):
                continue

            total = round_to(sum(lot.remaining_kg or 0 for lot in lots if lot.product_id == product.id))
            if total >= self.low_stock_threshold:
                continue
            alerts.append(
                StockAlert(
                    product_id=product.id,
                    product_name=product.name,
                    current_stock=total,
                    threshold=self.low_stock_threshold,
                    severity="critical" if total < CRITICAL_STOCK_KG else "warning",
                    message=(
                        f"{product.name} stok seviyesi kritik: {format_kg(total)} kg "
                        f"(Min: {format_kg(self.low_stock_threshold)} kg)"
                    ),
                )
            )
        if alerts:
            logger.warning("%d ürün için düşük stok uyarısı", len(alerts))
        return alerts
