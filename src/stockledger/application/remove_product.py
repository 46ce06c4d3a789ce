"""Application service: Remove Product use case."""

from __future__ import annotations

from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.repository.product_registry import ProductRegistry


class RemoveProductHandler:

    def __init__(self, registry: ProductRegistry) -> None:
        self._registry = registry

    def handle(self, product_id: str) -> None:
        if not self._registry.remove(product_id):
            raise EntityNotFoundError(f"Product '{product_id}' not found")
