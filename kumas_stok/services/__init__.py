from kumas_stok.services.base_service import BaseService, DashboardCache
from kumas_stok.services.customer_service import CustomerService
from kumas_stok.services.dashboard_service import DashboardService
from kumas_stok.services.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ReferenceInUseError,
    ServiceError,
    ValidationError,
)
from kumas_stok.services.exchange_rate import ExchangeRateService
from kumas_stok.services.inventory_service import InventoryService
from kumas_stok.services.payment_service import PaymentService
from kumas_stok.services.product_service import ProductService
from kumas_stok.services.production_cost_service import ProductionCostService
from kumas_stok.services.raw_balance_service import RawBalanceService
from kumas_stok.services.reports import ReportService
from kumas_stok.services.shipment_service import ShipmentService
from kumas_stok.services.stock_validator import StockValidator
from kumas_stok.services.supplier_service import SupplierService

__all__ = [
    "BaseService",
    "CustomerService",
    "DashboardCache",
    "DashboardService",
    "ExchangeRateService",
    "InsufficientStockError",
    "InventoryService",
    "NotFoundError",
    "PaymentService",
    "ProductService",
    "ProductionCostService",
    "RawBalanceService",
    "ReferenceInUseError",
    "ReportService",
    "ServiceError",
    "ShipmentService",
    "StockValidator",
    "SupplierService",
    "ValidationError",
]
