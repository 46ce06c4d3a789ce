"""Application service: Add Product use case."""

from __future__ import annotations

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.product import Product
from stockledger.domain.repository.product_registry import ProductRegistry


class AddProductHandler:

    def __init__(self, registry: ProductRegistry) -> None:
        self._registry = registry

    def handle(
        self,
        product_id: str,
        initial_stock: int,
        threshold: int,
        name: str | None = None,
    ) -> Product:
        """Register a product, replacing any existing one with the same id."""
        if not product_id or not product_id.strip():
            raise ValidationError("Product id is required")
        return self._registry.create(product_id.strip(), initial_stock, threshold, name)
