"""In-memory, thread-safe registry of Product aggregates.

The registry lock guards only the id -> Product map.  Once a Product has
been looked up, the per-product work (shipments, deliveries, payments)
runs under that product's own lock, so a slow operation on one product
never blocks structural changes to the registry.
"""

from __future__ import annotations

import logging
import threading
from datetime import date

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.product import Product
from stockledger.domain.model.value_objects import Money

logger = logging.getLogger(__name__)


class ProductRegistry:

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._products: dict[str, Product] = {}

    # --- Structural operations -------------------------------------------------

    def create(
        self,
        product_id: str,
        initial_stock: int = 0,
        threshold: int = 0,
        name: str | None = None,
    ) -> Product:
        """Register a new product, replacing any existing one with the same id."""
        return self.register(Product(product_id, initial_stock, threshold, name))

    def register(self, product: Product) -> Product:
        """Store an already-built product (e.g. from ``Product.restore``)."""
        with self._lock:
            replaced = product.id in self._products
            self._products[product.id] = product
        logger.debug(
            "%s product %s", "Replaced" if replaced else "Created", product.id
        )
        return product

    def find(self, product_id: str) -> Product | None:
        """Return the product registered under *product_id*, or None."""
        with self._lock:
            return self._products.get(product_id)

    def remove(self, product_id: str) -> bool:
        with self._lock:
            removed = self._products.pop(product_id, None) is not None
        if removed:
            logger.debug("Removed product %s", product_id)
        return removed

    def list_all(self) -> list[Product]:
        """Snapshot of every registered product, in no particular order."""
        with self._lock:
            return list(self._products.values())

    def low_stock(self) -> list[Product]:
        """Products whose stock is strictly below their threshold."""
        return [p for p in self.list_all() if p.is_below_threshold()]

    def size(self) -> int:
        with self._lock:
            return len(self._products)

    def __len__(self) -> int:
        return self.size()

    # --- Per-product operations by id -----------------------------------------
    #
    # Each returns a "not found" result (False / None) for unknown ids and
    # lets ValidationError from the product propagate unchanged.

    def receive_shipment(
        self,
        product_id: str,
        quantity: int,
        shipment_date: date | None = None,
        shipper: str | None = None,
        cost: Money | None = None,
    ) -> bool:
        product = self.find(self._require_id(product_id))
        if product is None:
            return False
        product.add_shipment(quantity, shipment_date, shipper, cost)
        return True

    def deliver(self, product_id: str, quantity: int) -> bool:
        """False when the product is unknown *or* stock is insufficient."""
        product = self.find(self._require_id(product_id))
        if product is None:
            return False
        delivered = product.add_delivery(quantity)
        logger.debug(
            "Delivery of %d from %s %s",
            quantity, product_id, "succeeded" if delivered else "refused",
        )
        return delivered

    def pay(self, product_id: str, amount: Money | None) -> Money | None:
        """Pay toward a product's balance; returns the remaining due, or None."""
        product = self.find(self._require_id(product_id))
        if product is None:
            return None
        remaining = product.pay(amount)
        logger.debug("Payment on %s, remaining due %s", product_id, remaining)
        return remaining

    @staticmethod
    def _require_id(product_id: str | None) -> str:
        if product_id is None:
            raise ValidationError("Product id is required")
        return product_id
