"""Tüm servisler için temel sınıf - depo erişimi ve önbellek temizliği."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Optional, TypeVar

from kumas_stok.models.textile import Record
from kumas_stok.services.exceptions import NotFoundError, ValidationError
from kumas_stok.storage.base import BaseStore

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


class DashboardCache:
    """Gösterge paneli özetleri için süreli önbellek.

    Yazma işlemi yapan her servis kayıt değiştirdiğinde clear() çağırır.
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (self._clock(), value)

    def clear(self) -> None:
        self._entries.clear()


class BaseService(ABC, Generic[R]):
    """Tek bir mantıksal depo üzerinde çalışan servis."""

    store_name: str = ""
    record_type: type[R]
    label: str = "Kayıt"

    def __init__(self, store: BaseStore, cache: Optional[DashboardCache] = None):
        self.store = store
        self.cache = cache or DashboardCache()

    def get_all(self) -> list[R]:
        return [self.record_type.from_item(item) for item in self.store.read_all(self.store_name)]

    def get_by_id(self, record_id: str) -> Optional[R]:
        item = self.store.read(self.store_name, record_id)
        return self.record_type.from_item(item) if item else None

    def require(self, record_id: str) -> R:
        record = self.get_by_id(record_id) if record_id else None
        if record is None:
            raise NotFoundError(self.label, record_id)
        return record

    def _query(self, index_name: str, value: Any) -> list[R]:
        return [
            self.record_type.from_item(item)
            for item in self.store.query_by_index(self.store_name, index_name, value)
        ]

    def _insert(self, record: R) -> R:
        return self.record_type.from_item(self.store.create(self.store_name, record.to_item()))

    def _save(self, record: R) -> R:
        return self.record_type.from_item(self.store.update(self.store_name, record.to_item()))

    def _raise_if_invalid(self, record: R) -> None:
        errors = self.validate(record)
        if errors:
            raise ValidationError(errors)

    def _invalidate_cache(self) -> None:
        self.cache.clear()

    @abstractmethod
    def validate(self, record: R) -> list[str]:
        """Her servis kendi doğrulama kurallarını implement eder."""
        ...
