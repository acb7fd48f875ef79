"""Kumaş stok, sevk ve tahsilat veri modelleri."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Optional


class LotStatus(str, Enum):
    IN_STOCK = "Stokta"
    PARTIAL = "Kısmi"
    DEPLETED = "Bitti"


class SupplierType(str, Enum):
    YARN = "iplik"
    KNITTING = "orme"
    DYEHOUSE = "boyahane"


class CostStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class RawBalanceType(str, Enum):
    OPENING = "opening"
    DEBT = "debt"
    PAYMENT = "payment"


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


class Record:
    """Depoya yazılan kayıtlar için dict dönüşümleri."""

    def to_item(self) -> dict:
        return _plain(asdict(self))

    @classmethod
    def from_item(cls, item: dict):
        # Bilinmeyen alanlar (eski sürüm verileri) yok sayılır
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in item.items() if k in names})


@dataclass
class Customer(Record):
    name: str
    id: Optional[str] = None
    phone: str = ""
    email: str = ""
    address: str = ""
    tax_number: str = ""
    balance: float = 0.0
    notes: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Product(Record):
    name: str
    id: Optional[str] = None
    code: str = ""
    unit: str = "kg"
    description: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class InventoryLot(Record):
    product_id: str
    party: str
    date: str
    rolls: int
    avg_kg_per_roll: float
    total_kg: float
    id: Optional[str] = None
    remaining_kg: Optional[float] = None
    total_tops: int = 0
    remaining_tops: Optional[int] = None
    status: LotStatus = LotStatus.IN_STOCK
    is_raw: bool = False
    notes: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self) -> None:
        self.status = LotStatus(self.status)


@dataclass
class ShipmentLine(Record):
    lot_id: str
    kg: float
    unit_usd: float
    product_id: str = ""
    party: str = ""
    tops: int = 0
    line_total_usd: float = 0.0
    vat: float = 0.0
    total_with_vat: float = 0.0


@dataclass
class ShipmentTotals(Record):
    total_kg: float = 0.0
    total_tops: int = 0
    total_usd: float = 0.0
    total_vat: float = 0.0
    total_with_vat: float = 0.0


@dataclass
class Shipment(Record):
    customer_id: str
    date: str
    lines: list[ShipmentLine] = field(default_factory=list)
    id: Optional[str] = None
    totals: ShipmentTotals = field(default_factory=ShipmentTotals)
    notes: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self) -> None:
        self.lines = [
            line if isinstance(line, ShipmentLine) else ShipmentLine.from_item(line)
            for line in self.lines
        ]
        if isinstance(self.totals, dict):
            self.totals = ShipmentTotals.from_item(self.totals)


@dataclass
class Payment(Record):
    customer_id: str
    date: str
    amount_usd: float
    id: Optional[str] = None
    method: str = ""
    notes: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Supplier(Record):
    name: str
    type: SupplierType
    id: Optional[str] = None
    phone: str = ""
    is_active: bool = True
    opening_balance_usd: float = 0.0
    opening_balance_try: float = 0.0
    accrual_start_date: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self) -> None:
        self.type = SupplierType(self.type)


@dataclass
class SupplierPayment(Record):
    supplier_type: SupplierType
    amount: float
    date: str
    id: Optional[str] = None
    supplier_id: Optional[str] = None
    currency: str = "TRY"
    method: str = ""
    notes: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self) -> None:
        self.supplier_type = SupplierType(self.supplier_type)


@dataclass
class SupplierPriceEntry(Record):
    supplier_type: SupplierType
    product_id: str
    price_per_kg: float
    id: Optional[str] = None
    currency: str = "TRY"
    supplier_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self) -> None:
        self.supplier_type = SupplierType(self.supplier_type)


@dataclass
class ProductionCost(Record):
    lot_id: Optional[str] = None
    product_id: Optional[str] = None
    yarn_cost: float = 0.0
    knitting_cost: float = 0.0
    dyehouse_cost: float = 0.0
    id: Optional[str] = None
    total_cost: float = 0.0
    paid_amount: float = 0.0
    status: CostStatus = CostStatus.PENDING
    price_per_kg: Optional[float] = None
    exchange_rate: Optional[float] = None
    supplier_id: Optional[str] = None
    yarn_shipment_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self) -> None:
        self.status = CostStatus(self.status)

    def cost_for(self, supplier_type: SupplierType) -> float:
        return {
            SupplierType.YARN: self.yarn_cost,
            SupplierType.KNITTING: self.knitting_cost,
            SupplierType.DYEHOUSE: self.dyehouse_cost,
        }[SupplierType(supplier_type)] or 0.0


@dataclass
class RawBalanceEntry(Record):
    type: RawBalanceType
    amount_usd: float
    date: str
    id: Optional[str] = None
    description: str = ""
    lot_id: Optional[str] = None
    kg: Optional[float] = None
    price_per_kg: Optional[float] = None
    method: str = ""
    note: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self) -> None:
        self.type = RawBalanceType(self.type)


@dataclass
class LedgerEntry:
    date: str
    type: str
    description: str
    debit: float
    credit: float
    reference_id: str
    balance: float = 0.0


@dataclass
class StockAlert:
    product_id: str
    product_name: str
    current_stock: float
    threshold: float
    severity: str
    message: str
