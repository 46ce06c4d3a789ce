"""Application service: Receive Shipment use case.

Records an incoming supplier shipment: stock goes up, the shipment date
and shipper are appended to the product's history, and the cost (if any)
is added to the amount owed.
"""

from __future__ import annotations

from datetime import date

from stockledger.application.dto import ProductDTO
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.model.value_objects import Money
from stockledger.domain.repository.product_registry import ProductRegistry


class ReceiveShipmentHandler:

    def __init__(self, registry: ProductRegistry) -> None:
        self._registry = registry

    def handle(
        self,
        product_id: str,
        quantity: int,
        shipment_date: date | None = None,
        shipper: str | None = None,
        cost: str | None = None,
    ) -> ProductDTO:
        # parse the cost before touching the registry so a bad amount
        # never leaves a half-recorded shipment
        amount = Money.of(cost) if cost is not None else None

        if not self._registry.receive_shipment(
            product_id, quantity, shipment_date, shipper, amount
        ):
            raise EntityNotFoundError(f"Product '{product_id}' not found")

        product = self._registry.find(product_id)
        if product is None:
            # removed concurrently right after the shipment was recorded
            raise EntityNotFoundError(f"Product '{product_id}' not found")
        return ProductDTO.from_product(product)
