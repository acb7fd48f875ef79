"""Bulut doküman veritabanı arka ucu - DynamoDB (boto3)."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Iterator, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from kumas_stok.storage.base import STORE_INDEXES, BaseStore, StoreError, key_field
from kumas_stok.storage.dynamodb_setup import BOTO_CONFIG, index_name, table_name

logger = logging.getLogger(__name__)


def to_dynamo(obj: Any) -> Any:
    """float değerleri Decimal'e çevirir, None alanları atar."""
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: to_dynamo(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, list):
        return [to_dynamo(i) for i in obj]
    return obj


def from_dynamo(obj: Any) -> Any:
    """Decimal ve diğer tipleri Python sayılarına çevirir."""
    if isinstance(obj, Decimal):
        return int(obj) if obj == int(obj) else float(obj)
    if isinstance(obj, dict):
        return {k: from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [from_dynamo(i) for i in obj]
    return obj


class DynamoDBStore(BaseStore):
    """Her mantıksal depo için ayrı DynamoDB tablosu kullanan depo."""

    backend_name = "dynamodb"

    def __init__(
        self,
        table_prefix: str = "KumasStok-",
        region_name: str = "eu-central-1",
        dynamodb_resource: Optional[Any] = None,
    ):
        self.table_prefix = table_prefix
        self.region_name = region_name
        # dependency injection destekli
        self.dynamodb = dynamodb_resource or boto3.resource(
            "dynamodb", region_name=region_name, config=BOTO_CONFIG
        )
        self._tables: dict[str, Any] = {}

    def init(self) -> None:
        """Tüm tabloların aktif olmasını bekler."""
        with self._errors("init"):
            for store_name in STORE_INDEXES:
                self._table(store_name).wait_until_exists()
        logger.info("DynamoDB tabloları hazır (prefix=%s)", self.table_prefix)

    def _table(self, store_name: str) -> Any:
        if store_name not in self._tables:
            self._tables[store_name] = self.dynamodb.Table(table_name(self.table_prefix, store_name))
        return self._tables[store_name]

    @contextmanager
    def _errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except ClientError as e:
            logger.error("DynamoDB hatası [%s]: %s", operation, e)
            raise StoreError(f"DynamoDB {operation} başarısız: {e}") from e

    def _clean_item(self, store_name: str, item: dict) -> dict:
        # GSI anahtar alanları boş metin olamaz ve metin olmalıdır
        cleaned = to_dynamo(item)
        for field_name in STORE_INDEXES[store_name]:
            value = cleaned.get(field_name)
            if value is None or value == "":
                cleaned.pop(field_name, None)
            elif not isinstance(value, str):
                cleaned[field_name] = str(value)
        return cleaned

    def _get(self, store_name: str, key: str) -> Optional[dict]:
        with self._errors("get_item"):
            resp = self._table(store_name).get_item(Key={key_field(store_name): key})
        item = resp.get("Item")
        return from_dynamo(item) if item else None

    def _put(self, store_name: str, item: dict) -> None:
        with self._errors("put_item"):
            self._table(store_name).put_item(Item=self._clean_item(store_name, item))

    def _put_many(self, store_name: str, items: list[dict]) -> None:
        with self._errors("batch_write"):
            with self._table(store_name).batch_writer() as batch:
                for item in items:
                    batch.put_item(Item=self._clean_item(store_name, item))

    def _remove(self, store_name: str, key: str) -> bool:
        with self._errors("delete_item"):
            resp = self._table(store_name).delete_item(
                Key={key_field(store_name): key}, ReturnValues="ALL_OLD"
            )
        return "Attributes" in resp

    def _scan(self, store_name: str) -> list[dict]:
        table = self._table(store_name)
        items: list[dict] = []
        kwargs: dict[str, Any] = {}
        with self._errors("scan"):
            while True:
                resp = table.scan(**kwargs)
                items.extend(resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    break
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        return [from_dynamo(item) for item in items]

    def _query_index(self, store_name: str, index_field: str, value: Any) -> list[dict]:
        if value is None or value == "":
            return []
        table = self._table(store_name)
        items: list[dict] = []
        kwargs: dict[str, Any] = {
            "IndexName": index_name(index_field),
            "KeyConditionExpression": Key(index_field).eq(str(value)),
        }
        with self._errors("query"):
            while True:
                resp = table.query(**kwargs)
                items.extend(resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    break
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        return [from_dynamo(item) for item in items]

    def _clear(self, store_name: str) -> None:
        field_name = key_field(store_name)
        keys = [item[field_name] for item in self._scan(store_name)]
        with self._errors("batch_delete"):
            with self._table(store_name).batch_writer() as batch:
                for key in keys:
                    batch.delete_item(Key={field_name: key})
