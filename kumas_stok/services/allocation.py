"""FIFO stok tahsisi - en eski partiden başlayarak tüketim.

Partiler kalan kg > 0 olanlarla sınırlanır ve tarihe göre artan sırada
tüketilir. Her partiden en fazla kalan miktarı kadar tahsis yapılır.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from kumas_stok.models.textile import InventoryLot, LotStatus
from kumas_stok.utils import parse_date, round_to


@dataclass
class Allocation:
    lot_id: str
    kg: float
    tops: Optional[int] = None


@dataclass
class AllocationPlan:
    requested_kg: float
    allocations: list[Allocation] = field(default_factory=list)
    allocated_kg: float = 0.0

    @property
    def shortfall_kg(self) -> float:
        return max(0.0, round_to(self.requested_kg - self.allocated_kg))

    @property
    def is_complete(self) -> bool:
        return self.shortfall_kg == 0


@dataclass
class LotSuggestion:
    lot: InventoryLot
    suggested_kg: float = 0.0


def lot_status(remaining_kg: float, total_kg: float) -> LotStatus:
    """Kalan miktara göre parti durumunu hesaplar."""
    if remaining_kg <= 0:
        return LotStatus.DEPLETED
    if remaining_kg >= total_kg:
        return LotStatus.IN_STOCK
    return LotStatus.PARTIAL


def apply_status(lot: InventoryLot) -> InventoryLot:
    lot.status = lot_status(lot.remaining_kg or 0, lot.total_kg)
    return lot


def fifo_order(lots: Iterable[InventoryLot]) -> list[InventoryLot]:
    """Stoğu olan partileri en eskiden en yeniye sıralar."""
    available = [lot for lot in lots if (lot.remaining_kg or 0) > 0]
    return sorted(
        available,
        key=lambda lot: (parse_date(lot.date), lot.created_at or "", lot.id or ""),
    )


def suggest_fifo(lots: Iterable[InventoryLot], required_kg: float = 0) -> list[LotSuggestion]:
    """FIFO sırasındaki partileri, istenen miktar için önerilen kg ile döndürür."""
    remaining = required_kg
    suggestions = []
    for lot in fifo_order(lots):
        suggested = 0.0
        if remaining > 0:
            suggested = round_to(min(remaining, lot.remaining_kg))
            remaining = round_to(remaining - suggested)
        suggestions.append(LotSuggestion(lot=lot, suggested_kg=suggested))
    return suggestions


def plan_fifo_allocation(lots: Iterable[InventoryLot], required_kg: float) -> AllocationPlan:
    """İstenen miktarı karşılayana kadar partileri FIFO sırasıyla tüketir.

    Stok yetmezse plan eksik kalır; eksik miktar shortfall_kg ile okunur.
    """
    plan = AllocationPlan(requested_kg=round_to(required_kg))
    for suggestion in suggest_fifo(lots, required_kg):
        if suggestion.suggested_kg <= 0:
            break
        plan.allocations.append(Allocation(lot_id=suggestion.lot.id, kg=suggestion.suggested_kg))
        plan.allocated_kg = round_to(plan.allocated_kg + suggestion.suggested_kg)
    return plan
