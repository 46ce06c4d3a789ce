"""Application service: Deliver Stock use case."""

from __future__ import annotations

from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.repository.product_registry import ProductRegistry


class DeliverStockHandler:

    def __init__(self, registry: ProductRegistry) -> None:
        self._registry = registry

    def handle(self, product_id: str, quantity: int) -> int:
        """Deliver *quantity* units; returns the stock left afterwards.

        Raises ValidationError when there is not enough stock (nothing
        is deducted in that case).
        """
        product = self._registry.find(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product '{product_id}' not found")

        if not product.add_delivery(quantity):
            raise ValidationError(
                f"Insufficient stock for {product_id} "
                f"(need {quantity}, have {product.stock})"
            )
        return product.stock
