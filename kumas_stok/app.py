"""Uygulama bileşenlerini tek bir depo ve ortak önbellek üzerinde birleştirir."""

from __future__ import annotations

import logging
from typing import Optional

from kumas_stok.config import Settings, load_settings
from kumas_stok.services import (
    CustomerService,
    DashboardCache,
    DashboardService,
    ExchangeRateService,
    InventoryService,
    PaymentService,
    ProductionCostService,
    ProductService,
    RawBalanceService,
    ReportService,
    ShipmentService,
    StockValidator,
    SupplierService,
)
from kumas_stok.storage import BaseStore, open_store

logger = logging.getLogger(__name__)


class KumasStokApp:
    """Tüm servislere erişim noktası.

    Yazma yapan servisler aynı DashboardCache örneğini paylaşır; böylece
    herhangi bir kayıt değişikliği gösterge paneli özetini geçersiz kılar.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[BaseStore] = None,
        exchange_rates: Optional[ExchangeRateService] = None,
    ):
        self.settings = settings or load_settings()
        self.store = store or open_store(self.settings)
        self.cache = DashboardCache()
        self.stock_validator = StockValidator()
        self.exchange_rates = exchange_rates or ExchangeRateService(
            fallback_rate=self.settings.usd_try_fallback
        )

        self.customers = CustomerService(self.store, self.cache)
        self.products = ProductService(self.store, self.cache)
        self.suppliers = SupplierService(self.store, self.cache, self.exchange_rates)
        self.production_costs = ProductionCostService(self.store, self.cache)
        self.inventory = InventoryService(
            self.store,
            self.cache,
            validator=self.stock_validator,
            suppliers=self.suppliers,
            production_costs=self.production_costs,
        )
        self.shipments = ShipmentService(self.store, self.customers, self.inventory, self.cache)
        self.payments = PaymentService(self.store, self.customers, self.cache)
        self.raw_balances = RawBalanceService(self.store, self.cache)
        self.dashboard = DashboardService(
            self.customers,
            self.products,
            self.inventory,
            self.shipments,
            low_stock_threshold=self.settings.low_stock_threshold,
        )
        self.reports = ReportService(self.store)
        logger.info("Uygulama hazır (%s deposu)", self.store.backend_name)

    def check_stock_integrity(self):
        """Tüm partilerde kalan kg ve durum tutarlılığını doğrular."""
        result = self.stock_validator.check_lot_invariants(self.inventory.get_all())
        for error in result.errors:
            logger.error("Stok tutarsızlığı: %s", error)
        return result
