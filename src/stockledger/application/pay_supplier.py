"""Application service: Pay Supplier use case."""

from __future__ import annotations

from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.model.value_objects import Money
from stockledger.domain.repository.product_registry import ProductRegistry


class PaySupplierHandler:

    def __init__(self, registry: ProductRegistry) -> None:
        self._registry = registry

    def handle(self, product_id: str, amount: str) -> Money:
        """Pay *amount* toward a product's outstanding balance.

        Returns the remaining amount due.  Overpaying leaves the
        balance at exactly zero.
        """
        remaining = self._registry.pay(product_id, Money.of(amount))
        if remaining is None:
            raise EntityNotFoundError(f"Product '{product_id}' not found")
        return remaining
