"""Stok Tutarlılığı ve Validasyon - parti bütünlüğü kontrolleri.

- Kalan kg'nin [0, toplam kg] aralığında kalması
- Parti durumunun kalan miktarla uyumu
- Snapshot ile karşılaştırma (sevk oluştur/sil sonrası stok geri geldi mi)
- Audit log mekanizması
"""

from __future__ import annotations

import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Optional

from kumas_stok.models.textile import InventoryLot
from kumas_stok.services.allocation import lot_status
from kumas_stok.utils import now_iso, round_to

logger = logging.getLogger(__name__)

# Bellekte tutulan en fazla audit kaydı; eskiler düşer
AUDIT_LOG_LIMIT = 10_000


@dataclass
class AuditLogEntry:
    entry_id: str
    operation_type: str
    lot_id: str
    party: str
    kg_before: float
    kg_after: float
    change_kg: float
    triggered_by: str
    timestamp: str = field(default_factory=now_iso)
    shipment_id: Optional[str] = None
    details: Optional[dict] = None


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class StockValidator:
    """Parti stok tutarlılığı ve audit log yöneticisi."""

    def __init__(self, audit_log_limit: int = AUDIT_LOG_LIMIT) -> None:
        self._audit_log: deque[AuditLogEntry] = deque(maxlen=audit_log_limit)
        # Kalan kg snapshot'ı: {lot_id: remaining_kg}
        self._snapshot: dict[str, float] = {}

    # --- Parti invariantları ---

    def check_lot_invariants(self, lots: Iterable[InventoryLot]) -> ValidationResult:
        """Her partide 0 <= kalan <= toplam ve durum uyumunu doğrular."""
        errors = []
        warnings = []
        for lot in lots:
            remaining = lot.remaining_kg or 0
            if remaining < 0:
                errors.append(f"Negatif stok: parti {lot.party} kalan={remaining}")
            if remaining > lot.total_kg:
                errors.append(
                    f"Kalan toplamı aşıyor: parti {lot.party} kalan={remaining}, toplam={lot.total_kg}"
                )
            expected = lot_status(remaining, lot.total_kg)
            if lot.status != expected:
                errors.append(
                    f"Durum uyuşmazlığı: parti {lot.party} {lot.status.value} != {expected.value}"
                )
            if lot.remaining_tops is not None and not 0 <= lot.remaining_tops <= lot.total_tops:
                warnings.append(
                    f"Top sayısı aralık dışında: parti {lot.party} "
                    f"kalan={lot.remaining_tops}, toplam={lot.total_tops}"
                )
        return ValidationResult(is_valid=len(errors) == 0, errors=errors, warnings=warnings)

    # --- Snapshot karşılaştırma ---

    def take_snapshot(self, lots: Iterable[InventoryLot]) -> None:
        """Partilerin kalan kg değerlerinin snapshot'ını alır."""
        self._snapshot = {lot.id: lot.remaining_kg or 0 for lot in lots}

    def get_snapshot(self) -> dict[str, float]:
        return dict(self._snapshot)

    def verify_against_snapshot(self, lots: Iterable[InventoryLot]) -> ValidationResult:
        """Snapshot'taki her partinin kalan kg'si aynı mı."""
        current = {lot.id: lot.remaining_kg or 0 for lot in lots}
        errors = []
        for lot_id, before in self._snapshot.items():
            after = current.get(lot_id)
            if after is None:
                errors.append(f"Parti kayboldu: {lot_id}")
            elif round_to(after) != round_to(before):
                errors.append(f"Stok farkı: {lot_id} önceki={before}, sonraki={after}")
        return ValidationResult(is_valid=len(errors) == 0, errors=errors)

    # --- Audit log ---

    def log_stock_change(
        self,
        operation_type: str,
        lot: InventoryLot,
        kg_before: float,
        triggered_by: str,
        shipment_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> AuditLogEntry:
        """Parti stok değişikliğini audit log'a kaydeder."""
        kg_after = lot.remaining_kg or 0
        entry = AuditLogEntry(
            entry_id=str(uuid.uuid4()),
            operation_type=operation_type,
            lot_id=lot.id,
            party=lot.party,
            kg_before=kg_before,
            kg_after=kg_after,
            change_kg=round_to(kg_after - kg_before),
            triggered_by=triggered_by,
            shipment_id=shipment_id,
            details=details,
        )
        self._audit_log.append(entry)
        logger.info(
            "Parti %s: %skg -> %skg (%s)", lot.party, kg_before, kg_after, operation_type
        )
        return entry

    def get_audit_log(
        self,
        lot_id: Optional[str] = None,
        shipment_id: Optional[str] = None,
    ) -> list[AuditLogEntry]:
        """Audit log'u filtreli olarak döndürür."""
        entries = list(self._audit_log)
        if lot_id:
            entries = [e for e in entries if e.lot_id == lot_id]
        if shipment_id:
            entries = [e for e in entries if e.shipment_id == shipment_id]
        return entries
