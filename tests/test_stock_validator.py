"""Stock Validator unit testleri."""

from kumas_stok.models.textile import InventoryLot, LotStatus
from kumas_stok.services.stock_validator import StockValidator


def _lot(lot_id: str = "L1", total: float = 100, remaining: float = 100,
         status: LotStatus = LotStatus.IN_STOCK, tops: int = 4, remaining_tops: int = 4) -> InventoryLot:
    return InventoryLot(
        id=lot_id,
        product_id="P1",
        party=f"PRT-{lot_id}",
        date="2024-01-01",
        rolls=tops,
        avg_kg_per_roll=total / tops,
        total_kg=total,
        remaining_kg=remaining,
        total_tops=tops,
        remaining_tops=remaining_tops,
        status=status,
    )


class TestLotInvariants:
    """0 <= kalan <= toplam ve durum uyumu."""

    def test_valid_lots(self):
        validator = StockValidator()
        lots = [
            _lot("A"),
            _lot("B", remaining=40, status=LotStatus.PARTIAL),
            _lot("C", remaining=0, status=LotStatus.DEPLETED),
        ]
        assert validator.check_lot_invariants(lots).is_valid is True

    def test_negative_remaining_detected(self):
        validator = StockValidator()
        result = validator.check_lot_invariants([_lot(remaining=-5, status=LotStatus.DEPLETED)])
        assert result.is_valid is False
        assert "Negatif stok" in result.errors[0]

    def test_remaining_above_total_detected(self):
        validator = StockValidator()
        result = validator.check_lot_invariants([_lot(remaining=120)])
        assert result.is_valid is False

    def test_status_mismatch_detected(self):
        validator = StockValidator()
        result = validator.check_lot_invariants([_lot(remaining=50, status=LotStatus.IN_STOCK)])
        assert result.is_valid is False
        assert "Durum uyuşmazlığı" in result.errors[0]

    def test_tops_out_of_range_is_warning(self):
        validator = StockValidator()
        result = validator.check_lot_invariants([_lot(remaining_tops=9)])
        assert result.is_valid is True
        assert len(result.warnings) == 1


class TestSnapshot:

    def test_unchanged_lots_match(self):
        validator = StockValidator()
        validator.take_snapshot([_lot("A", remaining=60), _lot("B")])
        result = validator.verify_against_snapshot([_lot("B"), _lot("A", remaining=60)])
        assert result.is_valid is True

    def test_changed_lot_reported(self):
        validator = StockValidator()
        validator.take_snapshot([_lot("A")])
        result = validator.verify_against_snapshot([_lot("A", remaining=90)])
        assert result.is_valid is False

    def test_missing_lot_reported(self):
        validator = StockValidator()
        validator.take_snapshot([_lot("A")])
        result = validator.verify_against_snapshot([])
        assert "Parti kayboldu: A" in result.errors

    def test_snapshot_is_copy(self):
        validator = StockValidator()
        validator.take_snapshot([_lot("A")])
        validator.get_snapshot()["A"] = 0
        assert validator.get_snapshot()["A"] == 100


class TestAuditLog:

    def test_log_stock_change(self):
        validator = StockValidator()
        lot = _lot(remaining=70)
        entry = validator.log_stock_change("allocate", lot, 100, "shipment_create", shipment_id="S1")
        assert entry.change_kg == -30
        assert entry.party == "PRT-L1"
        assert entry.entry_id

    def test_filter_by_lot_and_shipment(self):
        validator = StockValidator()
        validator.log_stock_change("allocate", _lot("A", remaining=90), 100, "t", shipment_id="S1")
        validator.log_stock_change("allocate", _lot("B", remaining=80), 100, "t", shipment_id="S2")
        validator.log_stock_change("release", _lot("A", remaining=100), 90, "t", shipment_id="S2")

        assert len(validator.get_audit_log()) == 3
        assert len(validator.get_audit_log(lot_id="A")) == 2
        assert len(validator.get_audit_log(shipment_id="S2")) == 2
        assert len(validator.get_audit_log(lot_id="A", shipment_id="S2")) == 1

    def test_audit_log_keeps_latest_entries(self):
        validator = StockValidator(audit_log_limit=2)
        for lot_id in ("A", "B", "C"):
            validator.log_stock_change("allocate", _lot(lot_id, remaining=90), 100, "t")
        assert [e.lot_id for e in validator.get_audit_log()] == ["B", "C"]
