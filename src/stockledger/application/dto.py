"""Data Transfer Objects handed from the application layer to the CLI.

They are frozen copies, so display code never touches the lock-guarded
Product aggregate.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.domain.model.product import Product


@dataclass(frozen=True)
class ProductDTO:
    """Output: one product as displayed to the user."""

    id: str
    name: str
    stock: int
    threshold: int
    payment_due: str  # formatted, e.g. "12.50"
    shipment_dates: list[str]
    shippers: list[str]
    below_threshold: bool

    @staticmethod
    def from_product(product: Product) -> ProductDTO:
        snap = product.snapshot()
        return ProductDTO(
            id=snap.id,
            name=snap.name,
            stock=snap.stock,
            threshold=snap.threshold,
            payment_due=snap.payment_due.to_plain_string(),
            shipment_dates=[d.isoformat() for d in snap.shipment_dates],
            shippers=list(snap.shippers),
            below_threshold=snap.is_below_threshold,
        )
