"""Raporlar - müşteri/ürün bazlı sevk, tahsilat ve stok raporları, sevk makbuzu."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from kumas_stok.models.textile import Customer, InventoryLot, Payment, Product, Shipment
from kumas_stok.services.exceptions import NotFoundError
from kumas_stok.storage.base import BaseStore
from kumas_stok.utils import (
    days_ago,
    format_kg,
    format_unit_price,
    format_usd,
    group_by,
    is_in_range,
    normalize_text,
    now_iso,
    round_to,
    rows_to_csv,
    short_ref,
)

logger = logging.getLogger(__name__)

DEFAULT_COMPANY_NAME = "Kumaş Stok Yönetimi"


@dataclass
class Report:
    title: str
    rows: list[dict] = field(default_factory=list)

    @property
    def filename(self) -> str:
        return "-".join(normalize_text(self.title).split()) + ".csv"


@dataclass
class ReceiptLine:
    product_name: str
    party: str
    kg: float
    unit_usd: float
    line_total_usd: float


@dataclass
class ShipmentReceipt:
    shipment_ref: str
    date: str
    customer_name: str
    company_name: str
    company_address: str
    company_phone: str
    company_logo_text: str
    lines: list[ReceiptLine]
    total_kg: float
    total_usd: float
    notes: str = ""
    printed_at: str = field(default_factory=now_iso)


class ReportService:
    """Depodaki kayıtlardan son N günlük raporlar üretir."""

    def __init__(self, store: BaseStore):
        self.store = store

    def _recent(self, store_name: str, days: int) -> list[dict]:
        return self.store.query_by_date_range(store_name, days_ago(days), days_ago(0))

    def customer_shipment_report(self, days: int = 30) -> Report:
        """Müşteri başına sevk sayısı, kg ve USD; USD'ye göre azalan."""
        customers = {c["id"]: Customer.from_item(c) for c in self.store.read_all("customers")}
        shipments = [Shipment.from_item(s) for s in self._recent("shipments", days)]

        rows = []
        for customer_id, items in group_by(shipments, "customer_id").items():
            customer = customers.get(customer_id)
            if customer is None:
                continue
            total_kg = sum(s.totals.total_kg or 0 for s in items)
            total_usd = sum(s.totals.total_usd or 0 for s in items)
            rows.append({
                "Müşteri": customer.name,
                "Sevk Sayısı": len(items),
                "Toplam Kg": round_to(total_kg),
                "Toplam USD": round_to(total_usd),
                "Ortalama Sevk": round_to(total_usd / len(items)),
            })
        rows.sort(key=lambda r: r["Toplam USD"], reverse=True)
        return Report(f"Müşteri Bazlı Sevk Raporu (Son {days} Gün)", rows)

    def product_shipment_report(self, days: int = 30) -> Report:
        """Ürün başına sevk satırı sayısı, kg, USD ve ortalama fiyat; kg'ye göre azalan."""
        products = {p["id"]: Product.from_item(p) for p in self.store.read_all("products")}
        lines = [
            line
            for item in self._recent("shipments", days)
            for line in Shipment.from_item(item).lines
        ]

        rows = []
        for product_id, items in group_by(lines, "product_id").items():
            product = products.get(product_id)
            if product is None:
                continue
            total_kg = sum(line.kg or 0 for line in items)
            total_usd = sum(line.line_total_usd or 0 for line in items)
            rows.append({
                "Ürün": product.name,
                "Sevk Sayısı": len(items),
                "Toplam Kg": round_to(total_kg),
                "Toplam USD": round_to(total_usd),
                "Ortalama Fiyat": round_to(total_usd / total_kg, 4) if total_kg > 0 else 0.0,
            })
        rows.sort(key=lambda r: r["Toplam Kg"], reverse=True)
        return Report(f"Ürün Bazlı Sevk Raporu (Son {days} Gün)", rows)

    def payment_report(self, days: int = 30) -> Report:
        """Ödeme yöntemine göre tahsilatlar; tutara göre azalan."""
        payments = [Payment.from_item(p) for p in self._recent("payments", days)]

        rows = []
        for method, items in group_by(payments, "method").items():
            total = sum(p.amount_usd or 0 for p in items)
            rows.append({
                "Ödeme Yöntemi": method or "Belirtilmemiş",
                "Tahsilat Sayısı": len(items),
                "Toplam Tutar": round_to(total),
                "Ortalama Tutar": round_to(total / len(items)),
            })
        rows.sort(key=lambda r: r["Toplam Tutar"], reverse=True)
        return Report(f"Tahsilat Raporu (Son {days} Gün)", rows)

    def inventory_report(self) -> Report:
        """Ürün başına parti sayısı, toplam ve kalan kg; kalana göre azalan."""
        products = {p["id"]: Product.from_item(p) for p in self.store.read_all("products")}
        lots = [InventoryLot.from_item(lot) for lot in self.store.read_all("inventory_lots")]

        rows = []
        for product_id, items in group_by(lots, "product_id").items():
            product = products.get(product_id)
            rows.append({
                "Ürün": product.name if product else "Bilinmeyen Ürün",
                "Parti Sayısı": len(items),
                "Aktif Parti": sum(1 for lot in items if (lot.remaining_kg or 0) > 0),
                "Toplam Kg": round_to(sum(lot.total_kg or 0 for lot in items)),
                "Kalan Kg": round_to(sum(lot.remaining_kg or 0 for lot in items)),
            })
        rows.sort(key=lambda r: r["Kalan Kg"], reverse=True)
        return Report("Stok Raporu", rows)

    @staticmethod
    def to_csv(report: Report) -> str:
        return rows_to_csv(report.rows)

    # --- Sevk makbuzu ---

    def build_shipment_receipt(self, shipment_id: str) -> ShipmentReceipt:
        item = self.store.read("shipments", shipment_id)
        if item is None:
            raise NotFoundError("Sevk", shipment_id)
        shipment = Shipment.from_item(item)
        customer = self.store.read("customers", shipment.customer_id)
        products = {p["id"]: p.get("name", "") for p in self.store.read_all("products")}

        company_name = self.store.get_setting("company_name", DEFAULT_COMPANY_NAME)
        return ShipmentReceipt(
            shipment_ref=short_ref(shipment.id, 8),
            date=shipment.date,
            customer_name=customer["name"] if customer else "Bilinmeyen Müşteri",
            company_name=company_name,
            company_address=self.store.get_setting("company_address", ""),
            company_phone=self.store.get_setting("company_phone", ""),
            company_logo_text=self.store.get_setting("company_logo_text", company_name),
            lines=[
                ReceiptLine(
                    product_name=products.get(line.product_id, ""),
                    party=line.party,
                    kg=line.kg,
                    unit_usd=line.unit_usd,
                    line_total_usd=line.line_total_usd,
                )
                for line in shipment.lines
            ],
            total_kg=shipment.totals.total_kg or 0,
            total_usd=shipment.totals.total_usd or 0,
            notes=shipment.notes,
        )

    @staticmethod
    def render_receipt_text(receipt: ShipmentReceipt, width: int = 64) -> str:
        out = [receipt.company_logo_text.center(width)]
        if receipt.company_address:
            out.append(receipt.company_address.center(width))
        if receipt.company_phone:
            out.append(f"Tel: {receipt.company_phone}".center(width))
        out += ["SEVK MAKBUZU".center(width), "=" * width]
        out += [
            f"Müşteri: {receipt.customer_name}",
            f"Tarih:   {receipt.date}",
            f"Sevk No: #{receipt.shipment_ref}",
            "-" * width,
            f"{'Ürün':<18}{'Parti':<10}{'Kg':>10}{'Birim Fiyat':>13}{'Toplam':>13}",
        ]
        if not receipt.lines:
            out.append("Sevk detayı bulunamadı")
        for line in receipt.lines:
            out.append(
                f"{line.product_name[:17]:<18}{line.party[:9]:<10}"
                f"{format_kg(line.kg):>10}{format_unit_price(line.unit_usd):>13}"
                f"{format_usd(line.line_total_usd):>13}"
            )
        out += [
            "-" * width,
            f"{'Toplam Kg:':<20}{format_kg(receipt.total_kg):>{width - 20}}",
            f"{'Toplam Tutar:':<20}{format_usd(receipt.total_usd):>{width - 20}}",
        ]
        if receipt.notes:
            out += ["", "Notlar:", receipt.notes]
        out += ["", f"{'Teslim Eden':<32}{'Teslim Alan':>32}", "", f"Yazdırma Tarihi: {receipt.printed_at}"]
        return "\n".join(out)
