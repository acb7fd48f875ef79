"""Depo yönetimi: DynamoDB tabloları, sağlık kontrolü, yedek alma ve yükleme.

Kullanım:
    kumas-stok --create-tables                  # DynamoDB tablolarını oluştur
    kumas-stok --delete-tables                  # DynamoDB tablolarını sil
    kumas-stok --health                         # Depo durumunu göster
    kumas-stok --export yedek.json              # Tüm veriyi JSON'a yaz
    kumas-stok --import yedek.json              # JSON yedeği yükle (mevcut veri silinir)
    kumas-stok --create-tables --region eu-west-1
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from kumas_stok.config import configure_logging, load_settings
from kumas_stok.storage import BaseStore, StoreError, open_store
from kumas_stok.storage.dynamodb_setup import create_tables, delete_tables


def _run_store_action(action: str, path: Optional[Path], store: BaseStore) -> int:
    if action == "--health":
        health = store.health_check()
        if not health["healthy"]:
            print(f"❌ Depo erişilemiyor ({health['backend']}): {health['error']}")
            return 1
        print(f"✅ Depo sağlıklı ({health['backend']})")
        for store_name, count in health["counts"].items():
            print(f"   {store_name}: {count}")
    elif action == "--export":
        data = store.export_data()
        path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        print(f"📤 Yedek yazıldı: {path}")
    elif action == "--import":
        data = json.loads(path.read_text(encoding="utf-8"))
        counts = store.import_data(data)
        print(f"📥 Yedek yüklendi: {path}")
        for store_name, count in counts.items():
            print(f"   {store_name}: {count}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    settings = load_settings()
    configure_logging(settings.log_level)

    action = None
    path = None

    # Argümanları parse et
    args = sys.argv[1:] if argv is None else argv
    for i, arg in enumerate(args):
        if arg in ("--create-tables", "--delete-tables", "--health"):
            action = arg
        elif arg in ("--export", "--import") and i + 1 < len(args):
            action = arg
            path = Path(args[i + 1])
        elif arg == "--region" and i + 1 < len(args):
            settings.region_name = args[i + 1]

    if action is None:
        print(__doc__)
        return 1

    try:
        if action == "--create-tables":
            print(f"📊 DynamoDB tabloları oluşturuluyor ({settings.region_name})...")
            created = create_tables(settings.table_prefix, settings.region_name)
            print(f"✅ {len(created)} tablo oluşturuldu")
        elif action == "--delete-tables":
            print(f"🗑️  DynamoDB tabloları siliniyor ({settings.region_name})...")
            deleted = delete_tables(settings.table_prefix, settings.region_name)
            print(f"✅ {len(deleted)} tablo silindi")
        else:
            store = open_store(settings)
            try:
                return _run_store_action(action, path, store)
            finally:
                store.close()
    except (StoreError, ClientError, BotoCoreError, OSError, ValueError) as e:
        print(f"❌ Hata: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
