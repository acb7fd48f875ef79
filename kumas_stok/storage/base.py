"""Tüm depolama arka uçları için temel sınıf.

Mantıksal depo adlarını (customers, inventory_lots, ...) arka uçtaki
koleksiyonlara eşler. Alt sınıflar yalnızca ham okuma/yazma işlemlerini
implement eder; kimlik üretimi, zaman damgası ve yedekleme burada yapılır.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from kumas_stok.utils import DateLike, generate_id, is_in_range, now_iso

logger = logging.getLogger(__name__)

SETTINGS_STORE = "settings"

# Depo adı -> ikincil indeksler (sorgulanabilir alanlar)
STORE_INDEXES: dict[str, tuple[str, ...]] = {
    "customers": ("name",),
    "products": ("name", "code"),
    "inventory_lots": ("product_id", "party", "status", "date"),
    "shipments": ("customer_id", "date"),
    "payments": ("customer_id", "date"),
    "suppliers": ("name", "type"),
    "supplier_payments": ("supplier_id", "supplier_type", "date"),
    "supplier_price_lists": ("supplier_type", "supplier_id", "product_id"),
    "production_costs": ("lot_id", "product_id", "status"),
    "raw_balances": ("type", "date"),
    SETTINGS_STORE: (),
}

DATA_STORES = tuple(name for name in STORE_INDEXES if name != SETTINGS_STORE)


class StoreError(Exception):
    """Depolama katmanı hatası."""
    pass


class RecordNotFoundError(StoreError):
    """Kayıt bulunamadı."""
    pass


class DuplicateRecordError(StoreError):
    """Aynı anahtarla kayıt zaten mevcut."""
    pass


def key_field(store_name: str) -> str:
    return "key" if store_name == SETTINGS_STORE else "id"


class BaseStore(ABC):
    """Genel anahtar/değer CRUD katmanı."""

    backend_name = "base"

    # --- Alt sınıfların implement ettiği ham işlemler ---

    @abstractmethod
    def init(self) -> None:
        """Deponun kullanıma hazır olmasını sağlar (şema/tablo kontrolü)."""
        ...

    def close(self) -> None:
        """Açık bağlantıyı kapatır; bağlantı tutmayan arka uçlarda bir şey yapmaz."""
        pass

    @abstractmethod
    def _get(self, store_name: str, key: str) -> Optional[dict]:
        ...

    @abstractmethod
    def _put(self, store_name: str, item: dict) -> None:
        ...

    @abstractmethod
    def _put_many(self, store_name: str, items: list[dict]) -> None:
        ...

    @abstractmethod
    def _remove(self, store_name: str, key: str) -> bool:
        ...

    @abstractmethod
    def _scan(self, store_name: str) -> list[dict]:
        ...

    @abstractmethod
    def _query_index(self, store_name: str, index_name: str, value: Any) -> list[dict]:
        ...

    @abstractmethod
    def _clear(self, store_name: str) -> None:
        ...

    # --- Genel CRUD ---

    def create(self, store_name: str, data: dict) -> dict:
        """Yeni kayıt ekler; id ve zaman damgaları yoksa atanır."""
        self._check_store(store_name)
        item = self._stamp_new(store_name, dict(data))
        key = item[key_field(store_name)]
        if self._get(store_name, key) is not None:
            raise DuplicateRecordError(f"{store_name}/{key} zaten mevcut")
        self._put(store_name, item)
        return item

    def read(self, store_name: str, key: str) -> Optional[dict]:
        self._check_store(store_name)
        return self._get(store_name, key)

    def read_all(self, store_name: str) -> list[dict]:
        self._check_store(store_name)
        return self._scan(store_name)

    def update(self, store_name: str, data: dict) -> dict:
        """Mevcut kaydı tamamen değiştirir ve updated_at'i yeniler."""
        self._check_store(store_name)
        item = dict(data)
        key = item.get(key_field(store_name))
        if not key or self._get(store_name, key) is None:
            raise RecordNotFoundError(f"{store_name}/{key} bulunamadı")
        item["updated_at"] = now_iso()
        self._put(store_name, item)
        return item

    def delete(self, store_name: str, key: str) -> bool:
        self._check_store(store_name)
        return self._remove(store_name, key)

    def query_by_index(self, store_name: str, index_name: str, value: Any) -> list[dict]:
        self._check_store(store_name)
        if index_name not in STORE_INDEXES[store_name]:
            raise StoreError(f"{store_name} deposunda '{index_name}' indeksi yok")
        return self._query_index(store_name, index_name, value)

    def query_by_date_range(self, store_name: str, start: DateLike, end: DateLike) -> list[dict]:
        self._check_store(store_name)
        if "date" not in STORE_INDEXES[store_name]:
            raise StoreError(f"{store_name} deposunda tarih indeksi yok")
        return [
            item for item in self._scan(store_name)
            if item.get("date") and is_in_range(item["date"], start, end)
        ]

    # --- Toplu işlemler ---

    def batch_create(self, store_name: str, items: Iterable[dict]) -> list[dict]:
        self._check_store(store_name)
        stamped = [self._stamp_new(store_name, dict(item)) for item in items]
        if stamped:
            self._put_many(store_name, stamped)
        return stamped

    def batch_update(self, store_name: str, items: Iterable[dict]) -> list[dict]:
        self._check_store(store_name)
        stamp = now_iso()
        updated = []
        for item in items:
            item = dict(item)
            item["updated_at"] = stamp
            updated.append(item)
        if updated:
            self._put_many(store_name, updated)
        return updated

    def clear_all(self) -> None:
        for store_name in DATA_STORES:
            self._clear(store_name)
        logger.info("Tüm veri depoları temizlendi (%s)", self.backend_name)

    # --- Yedekleme ---

    def export_data(self) -> dict:
        data: dict[str, Any] = {name: self._scan(name) for name in STORE_INDEXES}
        data["export_date"] = now_iso()
        data["backend"] = self.backend_name
        return data

    def import_data(self, data: dict) -> dict[str, int]:
        """Mevcut verileri silip yedekteki kayıtları yükler."""
        self.clear_all()
        counts: dict[str, int] = {}
        for store_name in DATA_STORES:
            items = data.get(store_name)
            if isinstance(items, list):
                self.batch_create(store_name, items)
                counts[store_name] = len(items)
        for setting in data.get(SETTINGS_STORE) or []:
            self.set_setting(setting["key"], setting.get("value"))
        logger.info("Yedek yüklendi: %s", counts)
        return counts

    # --- Ayarlar ---

    def get_setting(self, key: str, default: Any = None) -> Any:
        setting = self._get(SETTINGS_STORE, key)
        return setting.get("value", default) if setting else default

    def set_setting(self, key: str, value: Any) -> dict:
        setting = {"key": key, "value": value, "updated_at": now_iso()}
        self._put(SETTINGS_STORE, setting)
        return setting

    def health_check(self) -> dict:
        try:
            counts = {name: len(self._scan(name)) for name in DATA_STORES}
        except StoreError as e:
            return {"healthy": False, "backend": self.backend_name, "error": str(e)}
        return {"healthy": True, "backend": self.backend_name, "counts": counts}

    # --- Yardımcılar ---

    def _check_store(self, store_name: str) -> None:
        if store_name not in STORE_INDEXES:
            raise StoreError(f"Bilinmeyen depo: {store_name!r}")

    @staticmethod
    def _stamp_new(store_name: str, item: dict) -> dict:
        field_name = key_field(store_name)
        if not item.get(field_name):
            item[field_name] = generate_id()
        stamp = now_iso()
        for stamp_field in ("created_at", "updated_at"):
            if not item.get(stamp_field):
                item[stamp_field] = stamp
        return item
