"""Shared pieces of the backup codecs.

A codec turns a list of ``ProductRecord`` into text and back.  Records are
plain, immutable copies of a product's state, so encoding never holds a
product lock for longer than one ``snapshot()`` call.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.product import Product
from stockledger.domain.model.value_objects import Money

FIELD_NAMES = (
    "id",
    "name",
    "stock",
    "threshold",
    "paymentDue",
    "shipmentDates",
    "shippers",
)

# lone UTF-16 surrogates cannot be written back out as UTF-8
_SURROGATE = re.compile("[\ud800-\udfff]")


class MalformedRecordError(ValueError):
    """A single record could not be decoded; the codec skips it."""


@dataclass(frozen=True)
class ProductRecord:
    """Everything a backup stores about one product."""

    id: str
    name: str
    stock: int
    threshold: int
    payment_due: Money
    shipment_dates: tuple[date, ...] = ()
    shippers: tuple[str, ...] = ()

    @staticmethod
    def from_product(product: Product) -> ProductRecord:
        snap = product.snapshot()
        return ProductRecord(
            id=snap.id,
            name=snap.name,
            stock=snap.stock,
            threshold=snap.threshold,
            payment_due=snap.payment_due,
            shipment_dates=snap.shipment_dates,
            shippers=snap.shippers,
        )

    def to_product(self) -> Product:
        return Product.restore(
            self.id,
            self.stock,
            self.threshold,
            self.name,
            self.payment_due,
            self.shipment_dates,
            self.shippers,
        )


def build_record(
    product_id: str | None,
    name: str | None,
    stock: int | str | None,
    threshold: int | str | None,
    payment_due: str | Decimal | None,
    shipment_dates: Iterable[str],
    shippers: Iterable[str],
) -> ProductRecord:
    """Validate raw decoded values and assemble a record.

    Raises MalformedRecordError describing the first bad field.
    """
    if not isinstance(product_id, str):
        raise MalformedRecordError("missing product id")
    if name is not None and not isinstance(name, str):
        raise MalformedRecordError(f"name must be text, got {name!r}")
    _check_encodable("id", product_id)
    _check_encodable("name", name or "")

    try:
        due = Money.of("0" if payment_due is None else payment_due)
    except ValidationError as exc:
        raise MalformedRecordError(f"bad paymentDue: {exc}") from exc

    dates: list[date] = []
    for raw in shipment_dates:
        try:
            dates.append(date.fromisoformat(raw))
        except (TypeError, ValueError) as exc:
            raise MalformedRecordError(f"bad shipment date {raw!r}") from exc

    shipper_names = tuple(shippers)
    if not all(isinstance(s, str) for s in shipper_names):
        raise MalformedRecordError("shipper names must be text")
    for shipper in shipper_names:
        _check_encodable("shipper", shipper)

    return ProductRecord(
        id=product_id,
        name=name or "",
        stock=_to_int("stock", stock),
        threshold=_to_int("threshold", threshold),
        payment_due=due,
        shipment_dates=tuple(dates),
        shippers=shipper_names,
    )


def _check_encodable(field: str, value: str) -> None:
    if _SURROGATE.search(value):
        raise MalformedRecordError(f"{field} contains an unpaired surrogate")


def _to_int(field: str, value: int | str | None) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise MalformedRecordError(f"{field} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise MalformedRecordError(f"{field} must be an integer, got {value!r}") from exc


class BackupCodec(ABC):
    """Encode/decode a whole registry snapshot to one text format."""

    #: Short format name, also used as the file extension.
    format_name: str

    @abstractmethod
    def encode(self, records: Sequence[ProductRecord]) -> str:
        """Render every record, in the given order."""

    @abstractmethod
    def decode(self, text: str) -> list[ProductRecord]:
        """Parse records back; malformed records are skipped, not raised."""

    def encode_products(self, products: Iterable[Product]) -> str:
        return self.encode([ProductRecord.from_product(p) for p in products])

    @property
    def extension(self) -> str:
        return f".{self.format_name}"
