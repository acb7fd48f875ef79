"""Ürün (kumaş türü) servisi."""

from __future__ import annotations

from kumas_stok import validation
from kumas_stok.models.textile import Product
from kumas_stok.services.base_service import BaseService
from kumas_stok.services.exceptions import ReferenceInUseError


class ProductService(BaseService[Product]):
    store_name = "products"
    record_type = Product
    label = "Ürün"

    def create(self, product: Product) -> Product:
        self._raise_if_invalid(product)
        product.unit = "kg"
        return self._insert(product)

    def update(self, product: Product) -> Product:
        self._raise_if_invalid(product)
        self.require(product.id)
        product.unit = "kg"
        return self._save(product)

    def delete(self, product_id: str) -> bool:
        self.require(product_id)
        if self.store.query_by_index("inventory_lots", "product_id", product_id):
            raise ReferenceInUseError("Bu ürüne ait stok kayıtları bulunduğu için silinemez.")
        return self.store.delete(self.store_name, product_id)

    def validate(self, product: Product) -> list[str]:
        return validation.collect(validation.required(product.name, "Ürün adı"))
