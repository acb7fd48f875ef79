from __future__ import annotations

from typing import Optional

from kumas_stok.config import BACKEND_DYNAMODB, Settings, load_settings
from kumas_stok.storage.base import (
    DATA_STORES,
    STORE_INDEXES,
    BaseStore,
    DuplicateRecordError,
    RecordNotFoundError,
    StoreError,
)
from kumas_stok.storage.dynamodb_store import DynamoDBStore
from kumas_stok.storage.sqlite_store import SqliteStore


def open_store(settings: Optional[Settings] = None) -> BaseStore:
    """Yapılandırmadaki arka uca göre depoyu açar."""
    settings = settings or load_settings()
    if settings.store_backend == BACKEND_DYNAMODB:
        store = DynamoDBStore(table_prefix=settings.table_prefix, region_name=settings.region_name)
        store.init()
        return store
    return SqliteStore(settings.sqlite_path)


__all__ = [
    "BaseStore",
    "DATA_STORES",
    "DuplicateRecordError",
    "DynamoDBStore",
    "RecordNotFoundError",
    "STORE_INDEXES",
    "SqliteStore",
    "StoreError",
    "open_store",
]
