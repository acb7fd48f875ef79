"""Merkezi yapılandırma: .env + ortam değişkenleri."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

BACKEND_SQLITE = "sqlite"
BACKEND_DYNAMODB = "dynamodb"

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


@dataclass
class Settings:
    store_backend: str = BACKEND_SQLITE
    sqlite_path: str = "kumas_stok.db"
    table_prefix: str = "KumasStok-"
    region_name: str = "eu-central-1"
    usd_try_fallback: float = 30.50
    low_stock_threshold: float = 500.0
    log_level: str = "INFO"


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Proje kökündeki .env dosyasını yükler ve ayarları ortamdan okur.

    Ortamda zaten tanımlı değişkenler .env tarafından ezilmez.
    """
    load_dotenv(env_file or Path.cwd() / ".env", override=False)

    backend = os.environ.get("KUMAS_STORE_BACKEND", BACKEND_SQLITE).strip().lower()
    if backend not in (BACKEND_SQLITE, BACKEND_DYNAMODB):
        raise ValueError(f"Geçersiz depolama türü: {backend}")

    return Settings(
        store_backend=backend,
        sqlite_path=os.environ.get("KUMAS_SQLITE_PATH", Settings.sqlite_path),
        table_prefix=os.environ.get("KUMAS_TABLE_PREFIX", Settings.table_prefix),
        region_name=os.environ.get("AWS_DEFAULT_REGION", Settings.region_name),
        usd_try_fallback=float(os.environ.get("KUMAS_USD_TRY_FALLBACK", Settings.usd_try_fallback)),
        low_stock_threshold=float(
            os.environ.get("KUMAS_LOW_STOCK_THRESHOLD", Settings.low_stock_threshold)
        ),
        log_level=os.environ.get("KUMAS_LOG_LEVEL", Settings.log_level).upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
