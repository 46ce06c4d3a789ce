"""Application service: inventory queries (list, low stock, find, report)."""

from __future__ import annotations

from stockledger.application.dto import ProductDTO
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.repository.product_registry import ProductRegistry

ALL_STOCKED_MESSAGE = "All products at or above threshold."


class ShowInventoryHandler:

    def __init__(self, registry: ProductRegistry) -> None:
        self._registry = registry

    def handle(self) -> list[ProductDTO]:
        """Every product, sorted by id for stable display."""
        return _sorted(ProductDTO.from_product(p) for p in self._registry.list_all())

    def low_stock(self) -> list[ProductDTO]:
        return _sorted(ProductDTO.from_product(p) for p in self._registry.low_stock())

    def find(self, product_id: str) -> ProductDTO:
        product = self._registry.find(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product '{product_id}' not found")
        return ProductDTO.from_product(product)

    def size(self) -> int:
        return self._registry.size()

    def low_stock_report(self) -> str:
        low = self.low_stock()
        if not low:
            return ALL_STOCKED_MESSAGE
        lines = ["Low stock products:"]
        lines.extend(
            f"- {p.id}: stock={p.stock}, threshold={p.threshold}" for p in low
        )
        return "\n".join(lines)


def _sorted(products) -> list[ProductDTO]:
    return sorted(products, key=lambda p: p.id)
