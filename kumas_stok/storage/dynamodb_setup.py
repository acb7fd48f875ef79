"""DynamoDB tablo tanımları, oluşturma ve silme.

Her mantıksal depo için bir tablo: `<prefix><depo>`; hash anahtarı `id`
(ayarlar için `key`), tanımlı her indeks için bir GSI (`<alan>-index`).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from kumas_stok.storage.base import STORE_INDEXES, key_field

logger = logging.getLogger(__name__)

BOTO_CONFIG = Config(retries={"max_attempts": 3})


def table_name(prefix: str, store_name: str) -> str:
    return f"{prefix}{store_name}"


def index_name(field_name: str) -> str:
    return f"{field_name}-index"


def table_definitions(prefix: str) -> list[dict]:
    """Tüm depolar için create_table parametrelerini üretir."""
    definitions = []
    for store_name, indexes in STORE_INDEXES.items():
        hash_key = key_field(store_name)
        definition: dict[str, Any] = {
            "TableName": table_name(prefix, store_name),
            "KeySchema": [{"AttributeName": hash_key, "KeyType": "HASH"}],
            "AttributeDefinitions": [{"AttributeName": hash_key, "AttributeType": "S"}],
            "BillingMode": "PAY_PER_REQUEST",
        }
        if indexes:
            definition["AttributeDefinitions"] += [
                {"AttributeName": field_name, "AttributeType": "S"} for field_name in indexes
            ]
            definition["GlobalSecondaryIndexes"] = [
                {
                    "IndexName": index_name(field_name),
                    "KeySchema": [{"AttributeName": field_name, "KeyType": "HASH"}],
                    "Projection": {"ProjectionType": "ALL"},
                }
                for field_name in indexes
            ]
        definitions.append(definition)
    return definitions


def _client(region: str, client: Optional[Any]) -> Any:
    return client or boto3.client("dynamodb", region_name=region, config=BOTO_CONFIG)


def create_tables(prefix: str, region: str, client: Optional[Any] = None) -> list[str]:
    """Eksik tabloları oluşturur ve aktif olmalarını bekler."""
    dynamodb = _client(region, client)
    created = []

    for table_def in table_definitions(prefix):
        name = table_def["TableName"]
        try:
            dynamodb.describe_table(TableName=name)
            logger.info("%s zaten mevcut, atlanıyor", name)
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceNotFoundException":
                raise
            logger.info("%s oluşturuluyor...", name)
            dynamodb.create_table(**table_def)
            dynamodb.get_waiter("table_exists").wait(TableName=name)
            created.append(name)
    return created


def delete_tables(prefix: str, region: str, client: Optional[Any] = None) -> list[str]:
    """Tüm tabloları siler (dikkatli kullan)."""
    dynamodb = _client(region, client)
    deleted = []
    for table_def in table_definitions(prefix):
        name = table_def["TableName"]
        try:
            dynamodb.delete_table(TableName=name)
            deleted.append(name)
        except ClientError:
            logger.warning("%s bulunamadı, atlanıyor", name)
    return deleted
