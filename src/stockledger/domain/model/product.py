"""Product aggregate.

A Product is one stocked item: its on-hand quantity, the reorder
threshold, the amount still owed to suppliers and the history of
shipments received.  Every read and write goes through the product's own
lock, so concurrent callers never observe a half-applied shipment.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import Money, Quantity

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Unnamed Product"
UNKNOWN_SHIPPER = "Unknown"


@dataclass(frozen=True)
class ProductSnapshot:
    """Consistent, immutable view of a product taken under its lock."""

    id: str
    name: str
    stock: int
    threshold: int
    payment_due: Money
    shipment_dates: tuple[date, ...]
    shippers: tuple[str, ...]

    @property
    def is_below_threshold(self) -> bool:
        return self.stock < self.threshold


class Product:
    """Aggregate root for one inventory item.

    Invariants:
    - ``stock`` and ``threshold`` are never negative
    - ``payment_due`` is never negative and always has two decimal places
    - ``shipment_dates`` and ``shippers`` are append-only through
      ``add_shipment``; only ``restore`` replaces them wholesale

    Use ``Product.restore()`` to rebuild a product from a backup.  It takes
    the historical payment total and shipment lists as-is instead of
    replaying shipments.
    """

    def __init__(
        self,
        product_id: str,
        initial_stock: int = 0,
        threshold: int = 0,
        name: str | None = None,
    ) -> None:
        if product_id is None:
            raise ValidationError("Product id is required")
        self._id = product_id
        self._lock = threading.Lock()
        self._stock = max(0, initial_stock)
        self._threshold = max(0, threshold)
        self._name = _normalize_name(name)
        self._payment_due = Money.zero()
        self._shipment_dates: list[date] = []
        self._shippers: list[str] = []

    # --- Factory (used by import only) ----------------------------------------

    @classmethod
    def restore(
        cls,
        product_id: str,
        stock: int,
        threshold: int,
        name: str | None,
        payment_due: Money,
        shipment_dates: Iterable[date],
        shippers: Iterable[str],
    ) -> Product:
        """Rebuild a product with its full recorded history.

        The two history sequences are taken independently; their lengths
        need not match.
        """
        product = cls(product_id, stock, threshold, name)
        product._payment_due = payment_due
        product._shipment_dates = list(shipment_dates)
        product._shippers = list(shippers)
        return product

    # --- Mutations -------------------------------------------------------------

    def add_shipment(
        self,
        quantity: int,
        shipment_date: date | None = None,
        shipper: str | None = None,
        cost: Money | None = None,
    ) -> None:
        """Receive *quantity* units from a supplier.

        A missing date leaves the date history untouched, while the shipper
        history always grows by one (``Unknown`` when not given).
        """
        qty = Quantity(quantity)
        with self._lock:
            # may raise; nothing is touched until the new total is known
            new_due = self._payment_due if cost is None else self._payment_due + cost
            self._stock += qty.value
            if shipment_date is not None:
                self._shipment_dates.append(shipment_date)
            self._shippers.append(_normalize_shipper(shipper))
            self._payment_due = new_due
            logger.debug(
                "Product %s received %d units (stock=%d, due=%s)",
                self._id, qty.value, self._stock, self._payment_due,
            )

    def add_delivery(self, quantity: int) -> bool:
        """Ship *quantity* units out.

        Returns False and changes nothing when stock is insufficient.
        """
        qty = Quantity(quantity)
        with self._lock:
            if qty.value > self._stock:
                return False
            self._stock -= qty.value
            return True

    def pay(self, amount: Money | None) -> Money:
        """Pay *amount* against the outstanding balance; returns what is still due."""
        if amount is None:
            raise ValidationError("Payment amount is required")
        with self._lock:
            self._payment_due = self._payment_due.pay_down(amount)
            return self._payment_due

    def rename(self, name: str | None) -> None:
        with self._lock:
            self._name = _normalize_name(name)

    def set_threshold(self, threshold: int) -> None:
        with self._lock:
            self._threshold = max(0, threshold)

    # --- Queries ---------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        with self._lock:
            return self._name

    @property
    def stock(self) -> int:
        with self._lock:
            return self._stock

    @property
    def threshold(self) -> int:
        with self._lock:
            return self._threshold

    @property
    def payment_due(self) -> Money:
        with self._lock:
            return self._payment_due

    @property
    def shipment_dates(self) -> list[date]:
        with self._lock:
            return list(self._shipment_dates)

    @property
    def shippers(self) -> list[str]:
        with self._lock:
            return list(self._shippers)

    @property
    def shipment_count(self) -> int:
        with self._lock:
            return len(self._shipment_dates)

    def is_below_threshold(self) -> bool:
        with self._lock:
            return self._stock < self._threshold

    def snapshot(self) -> ProductSnapshot:
        with self._lock:
            return ProductSnapshot(
                id=self._id,
                name=self._name,
                stock=self._stock,
                threshold=self._threshold,
                payment_due=self._payment_due,
                shipment_dates=tuple(self._shipment_dates),
                shippers=tuple(self._shippers),
            )

    def __str__(self) -> str:
        snap = self.snapshot()
        return (
            f"Product{{id='{snap.id}', name='{snap.name}', stock={snap.stock}, "
            f"threshold={snap.threshold}, paymentDue={snap.payment_due}, "
            f"shipments={len(snap.shipment_dates)}, shippers={list(snap.shippers)}}}"
        )

    def __repr__(self) -> str:
        return f"Product(id={self._id!r})"


def _normalize_name(name: str | None) -> str:
    if not name:
        return DEFAULT_NAME
    return name


def _normalize_shipper(shipper: str | None) -> str:
    if shipper is None or not shipper.strip():
        return UNKNOWN_SHIPPER
    return shipper

