"""Gösterge paneli ve raporlar unit testleri."""

from unittest.mock import MagicMock

import pytest

from kumas_stok.app import KumasStokApp
from kumas_stok.config import Settings
from kumas_stok.models.textile import Customer, InventoryLot, Payment, Product, Shipment, ShipmentLine
from kumas_stok.services import ExchangeRateService, NotFoundError
from kumas_stok.services.base_service import DashboardCache
from kumas_stok.services.reports import ReportService
from kumas_stok.storage import SqliteStore
from kumas_stok.utils import days_ago, today_iso


def _create_app(threshold: float = 500.0) -> KumasStokApp:
    return KumasStokApp(
        settings=Settings(low_stock_threshold=threshold),
        store=SqliteStore(":memory:"),
        exchange_rates=ExchangeRateService(http=MagicMock(), apis=[]),
    )


def _lot(app: KumasStokApp, product_id: str, kg: float, party: str = "P") -> InventoryLot:
    return app.inventory.create(
        InventoryLot(product_id=product_id, party=party, date="2024-01-01",
                     rolls=10, avg_kg_per_roll=kg / 10, total_kg=kg)
    )


def _ship(app: KumasStokApp, customer_id: str, lot_id: str, kg: float, unit_usd: float, date: str = None):
    return app.shipments.create(
        Shipment(customer_id=customer_id, date=date or today_iso(),
                 lines=[ShipmentLine(lot_id=lot_id, kg=kg, unit_usd=unit_usd)])
    )


class TestDashboardCache:

    def test_expires_after_ttl(self):
        now = [0.0]
        cache = DashboardCache(ttl_seconds=300, clock=lambda: now[0])
        cache.set("k", 1)
        now[0] = 299
        assert cache.get("k") == 1
        now[0] = 300
        assert cache.get("k") is None

    def test_clear(self):
        cache = DashboardCache()
        cache.set("k", 1)
        cache.clear()
        assert cache.get("k") is None


class TestDashboardSummary:

    def test_summary(self):
        app = _create_app()
        customer = app.customers.create(Customer(name="Akın"))
        product = app.products.create(Product(name="Süprem"))
        lot = _lot(app, product.id, 1000)
        _ship(app, customer.id, lot.id, 200, 2)
        _ship(app, customer.id, lot.id, 100, 2, date="2020-05-01")

        summary = app.dashboard.get_summary()

        assert summary["total_stock"] == 700
        assert summary["last_30_days_shipment"] == {"total_kg": 200, "total_usd": 400, "count": 1}
        assert summary["open_receivables"] == 600

    def test_summary_cached_until_write(self):
        app = _create_app()
        customer = app.customers.create(Customer(name="Akın"))
        product = app.products.create(Product(name="Süprem"))
        lot = _lot(app, product.id, 1000)

        first = app.dashboard.get_summary()
        app.store.update("inventory_lots", {**lot.to_item(), "remaining_kg": 1})
        assert app.dashboard.get_summary() == first

        _ship(app, customer.id, lot.id, 1, 1)
        assert app.dashboard.get_summary()["total_stock"] == 0

    def test_open_receivables_ignores_credit_balances(self):
        app = _create_app()
        debtor = app.customers.create(Customer(name="Borçlu"))
        creditor = app.customers.create(Customer(name="Alacaklı"))
        product = app.products.create(Product(name="Süprem"))
        lot = _lot(app, product.id, 1000)
        _ship(app, debtor.id, lot.id, 50, 2)
        app.payments.create(Payment(customer_id=creditor.id, date=today_iso(), amount_usd=75))
        assert app.dashboard.get_open_receivables() == 100

    def test_recent_activities_sorted_and_limited(self):
        app = _create_app()
        customer = app.customers.create(Customer(name="Akın"))
        product = app.products.create(Product(name="Süprem"))
        lot = _lot(app, product.id, 1000)
        _ship(app, customer.id, lot.id, 10, 2, date=days_ago(5).isoformat())
        app.payments.create(Payment(customer_id=customer.id, date=days_ago(1).isoformat(), amount_usd=5))
        _ship(app, customer.id, lot.id, 10, 2, date=days_ago(3).isoformat())

        activities = app.dashboard.get_recent_activities(limit=2)

        assert [a["type"] for a in activities] == ["payment", "shipment"]
        assert activities[0]["description"] == "Tahsilat: $5.00"
        assert activities[1]["description"] == "Sevk: 10.0kg - $20.00"


class TestLowStockAlerts:

    def test_watched_product_below_threshold(self):
        app = _create_app()
        watched = app.products.create(Product(name="Polymenş Siyah"))
        _lot(app, watched.id, 300)
        alerts = app.dashboard.get_low_stock_alerts()
        assert len(alerts) == 1
        assert alerts[0].severity == "warning"
        assert alerts[0].current_stock == 300
        assert alerts[0].message == "Polymenş Siyah stok seviyesi kritik: 300.00 kg (Min: 500.00 kg)"

    def test_critical_below_100(self):
        app = _create_app()
        watched = app.products.create(Product(name="KAPPA"))
        _lot(app, watched.id, 50)
        assert app.dashboard.get_low_stock_alerts()[0].severity == "critical"

    def test_unwatched_product_ignored(self):
        app = _create_app()
        other = app.products.create(Product(name="Kaşe"))
        _lot(app, other.id, 10)
        assert app.dashboard.get_low_stock_alerts() == []

    def test_above_threshold_no_alert(self):
        app = _create_app(threshold=200)
        watched = app.products.create(Product(name="Yağmur Desen"))
        _lot(app, watched.id, 300)
        assert app.dashboard.get_low_stock_alerts() == []

    def test_watched_product_without_lots(self):
        app = _create_app()
        app.products.create(Product(name="Petek"))
        alerts = app.dashboard.get_low_stock_alerts()
        assert alerts[0].current_stock == 0
        assert alerts[0].severity == "critical"


class TestReports:

    def _populate(self, app: KumasStokApp):
        big = app.customers.create(Customer(name="Büyük Müşteri"))
        small = app.customers.create(Customer(name="Küçük Müşteri"))
        jarse = app.products.create(Product(name="Jarse"))
        kappa = app.products.create(Product(name="Kappa"))
        jarse_lot = _lot(app, jarse.id, 1000, party="J1")
        kappa_lot = _lot(app, kappa.id, 1000, party="K1")
        _ship(app, big.id, jarse_lot.id, 100, 3)
        _ship(app, big.id, kappa_lot.id, 300, 1)
        _ship(app, small.id, jarse_lot.id, 50, 2)
        _ship(app, small.id, jarse_lot.id, 500, 9, date="2020-01-01")
        app.payments.create(Payment(customer_id=big.id, date=today_iso(), amount_usd=100, method="Nakit"))
        app.payments.create(Payment(customer_id=big.id, date=today_iso(), amount_usd=300, method="Havale"))
        app.payments.create(Payment(customer_id=small.id, date=today_iso(), amount_usd=50))
        return big, small

    def test_customer_report_sorted_by_usd(self):
        app = _create_app()
        self._populate(app)
        report = app.reports.customer_shipment_report(30)
        assert report.title == "Müşteri Bazlı Sevk Raporu (Son 30 Gün)"
        assert [r["Müşteri"] for r in report.rows] == ["Büyük Müşteri", "Küçük Müşteri"]
        assert report.rows[0]["Sevk Sayısı"] == 2
        assert report.rows[0]["Toplam USD"] == 600
        assert report.rows[0]["Ortalama Sevk"] == 300

    def test_product_report_sorted_by_kg(self):
        app = _create_app()
        self._populate(app)
        rows = app.reports.product_shipment_report(30).rows
        assert [r["Ürün"] for r in rows] == ["Kappa", "Jarse"]
        assert rows[1]["Toplam Kg"] == 150
        assert rows[1]["Toplam USD"] == 400
        assert rows[1]["Ortalama Fiyat"] == 2.6667

    def test_payment_report_by_method(self):
        app = _create_app()
        self._populate(app)
        rows = app.reports.payment_report(30).rows
        assert [r["Ödeme Yöntemi"] for r in rows] == ["Havale", "Nakit", "Belirtilmemiş"]

    def test_inventory_report(self):
        app = _create_app()
        self._populate(app)
        rows = app.reports.inventory_report().rows
        assert rows[0] == {"Ürün": "Kappa", "Parti Sayısı": 1, "Aktif Parti": 1,
                           "Toplam Kg": 1000, "Kalan Kg": 700}

    def test_csv_export(self):
        app = _create_app()
        self._populate(app)
        report = app.reports.payment_report(30)
        lines = ReportService.to_csv(report).splitlines()
        assert lines[0] == "Ödeme Yöntemi,Tahsilat Sayısı,Toplam Tutar,Ortalama Tutar"
        assert lines[1] == "Havale,1,300.0,300.0"
        assert report.filename == "tahsilat-raporu-(son-30-gun).csv"

    def test_shipment_receipt(self):
        app = _create_app()
        big, _ = self._populate(app)
        app.store.set_setting("company_name", "Örnek Tekstil")
        app.store.set_setting("company_phone", "0212 000 00 00")
        shipment = app.shipments.get_by_customer(big.id)[0]

        receipt = app.reports.build_shipment_receipt(shipment.id)
        text = ReportService.render_receipt_text(receipt)

        assert receipt.customer_name == "Büyük Müşteri"
        assert receipt.company_logo_text == "Örnek Tekstil"
        assert receipt.lines[0].product_name in ("Jarse", "Kappa")
        assert "SEVK MAKBUZU" in text
        assert "Tel: 0212 000 00 00" in text
        assert f"#{receipt.shipment_ref}" in text

    def test_receipt_unknown_shipment(self):
        app = _create_app()
        with pytest.raises(NotFoundError):
            app.reports.build_shipment_receipt("yok")
