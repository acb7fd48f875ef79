"""Servis katmanı hataları."""

from __future__ import annotations

from typing import Optional


class ServiceError(Exception):
    """Tüm servis hatalarının temel sınıfı."""
    pass


class ValidationError(ServiceError):
    """Doğrulama hatası - kullanıcıya gösterilecek mesajları taşır."""

    def __init__(self, errors: list[str] | str):
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__(", ".join(self.errors))


class InsufficientStockError(ValidationError):
    """Yetersiz stok hatası."""

    def __init__(self, party: str, available_kg: float, requested_kg: float):
        self.party = party
        self.available_kg = available_kg
        self.requested_kg = requested_kg
        super().__init__(
            f"Yetersiz stok. Parti: {party}, Mevcut: {available_kg}kg, İstenen: {requested_kg}kg"
        )


class NotFoundError(ServiceError):
    """Kayıt bulunamadı."""

    def __init__(self, what: str, record_id: Optional[str] = None):
        self.record_id = record_id
        super().__init__(f"{what} bulunamadı" + (f": {record_id}" if record_id else ""))


class ReferenceInUseError(ServiceError):
    """Başka kayıtlar tarafından kullanılan kayıt silinemez."""
    pass
