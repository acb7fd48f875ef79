"""FIFO tahsis ve parti durumu unit testleri."""

from kumas_stok.models.textile import InventoryLot, LotStatus
from kumas_stok.services.allocation import (
    apply_status,
    fifo_order,
    lot_status,
    plan_fifo_allocation,
    suggest_fifo,
)


def _lot(lot_id: str, date: str, total: float, remaining: float = None, created_at: str = "") -> InventoryLot:
    return InventoryLot(
        id=lot_id,
        product_id="P1",
        party=f"PRT-{lot_id}",
        date=date,
        rolls=10,
        avg_kg_per_roll=total / 10,
        total_kg=total,
        remaining_kg=total if remaining is None else remaining,
        created_at=created_at,
    )


class TestLotStatus:
    """Kalan miktara göre parti durumu."""

    def test_full_lot_in_stock(self):
        assert lot_status(100, 100) == LotStatus.IN_STOCK

    def test_partial_lot(self):
        assert lot_status(40, 100) == LotStatus.PARTIAL

    def test_depleted_lot(self):
        assert lot_status(0, 100) == LotStatus.DEPLETED

    def test_negative_remaining_is_depleted(self):
        assert lot_status(-1, 100) == LotStatus.DEPLETED

    def test_apply_status_updates_lot(self):
        lot = _lot("a", "2024-01-01", 100, remaining=30)
        apply_status(lot)
        assert lot.status == LotStatus.PARTIAL


class TestFifoOrder:
    """En eski parti önce."""

    def test_sorted_by_date(self):
        lots = [
            _lot("new", "2024-03-01", 100),
            _lot("old", "2024-01-01", 100),
            _lot("mid", "2024-02-01", 100),
        ]
        assert [lot.id for lot in fifo_order(lots)] == ["old", "mid", "new"]

    def test_depleted_lots_excluded(self):
        lots = [_lot("a", "2024-01-01", 100, remaining=0), _lot("b", "2024-02-01", 100)]
        assert [lot.id for lot in fifo_order(lots)] == ["b"]

    def test_same_date_tie_broken_by_created_at(self):
        lots = [
            _lot("b", "2024-01-01", 100, created_at="2024-01-01T10:00:00"),
            _lot("a", "2024-01-01", 100, created_at="2024-01-01T09:00:00"),
        ]
        assert [lot.id for lot in fifo_order(lots)] == ["a", "b"]


class TestSuggestFifo:

    def test_suggested_kg_spans_lots(self):
        lots = [_lot("a", "2024-01-01", 100), _lot("b", "2024-02-01", 100)]
        suggestions = suggest_fifo(lots, 150)
        assert [s.suggested_kg for s in suggestions] == [100, 50]

    def test_no_requirement_suggests_zero(self):
        lots = [_lot("a", "2024-01-01", 100)]
        assert suggest_fifo(lots)[0].suggested_kg == 0


class TestPlanFifoAllocation:
    """Tahsis hiçbir partide kalan miktarı aşmamalı."""

    def test_single_lot_enough(self):
        plan = plan_fifo_allocation([_lot("a", "2024-01-01", 100)], 40)
        assert plan.is_complete
        assert [(a.lot_id, a.kg) for a in plan.allocations] == [("a", 40)]

    def test_oldest_lot_consumed_first(self):
        lots = [_lot("b", "2024-02-01", 100), _lot("a", "2024-01-01", 60, remaining=25)]
        plan = plan_fifo_allocation(lots, 80)
        assert [(a.lot_id, a.kg) for a in plan.allocations] == [("a", 25), ("b", 55)]
        assert plan.allocated_kg == 80

    def test_never_exceeds_remaining(self):
        lots = [
            _lot("a", "2024-01-01", 100, remaining=12.5),
            _lot("b", "2024-01-02", 100, remaining=7.25),
            _lot("c", "2024-01-03", 100, remaining=40),
        ]
        remaining = {lot.id: lot.remaining_kg for lot in lots}
        plan = plan_fifo_allocation(lots, 35)
        for allocation in plan.allocations:
            assert allocation.kg <= remaining[allocation.lot_id]
        assert plan.allocated_kg == 35

    def test_shortfall_when_stock_insufficient(self):
        plan = plan_fifo_allocation([_lot("a", "2024-01-01", 30)], 50)
        assert not plan.is_complete
        assert plan.allocated_kg == 30
        assert plan.shortfall_kg == 20

    def test_empty_lots(self):
        plan = plan_fifo_allocation([], 10)
        assert plan.allocations == []
        assert plan.shortfall_kg == 10
