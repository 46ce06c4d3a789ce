"""Structured-text (JSON) backup codec.

The writer emits one compact array::

    [{"id":"P1","name":"Red Widget","stock":15,"threshold":3,
      "paymentDue":"12.50","shipmentDates":["2024-01-10"],"shippers":["Acme"]}]

Strings escape only backslash, double quote, ``\\n`` and ``\\r``; everything
else (including non-ASCII text) is written verbatim.  The reader uses the
standard ``json`` decoder one array element at a time, so hand-edited files
load too.

A record with missing or mistyped fields is skipped.  A syntax error
stops decoding; records read before it are kept.
"""

from __future__ import annotations

import json
import logging
import re
from decimal import Decimal
from typing import Any, Sequence

from stockledger.infrastructure.codecs.base import (
    BackupCodec,
    MalformedRecordError,
    ProductRecord,
    build_record,
)

logger = logging.getLogger(__name__)

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r"}
_WHITESPACE = re.compile(r"[ \t\r\n]*")

# fractional numbers come back as Decimal so money amounts survive unchanged
_DECODER = json.JSONDecoder(parse_float=Decimal)


class StructuredTextCodec(BackupCodec):

    format_name = "json"

    # --- Encoding --------------------------------------------------------------

    def encode(self, records: Sequence[ProductRecord]) -> str:
        return "[" + ",".join(_encode_record(r) for r in records) + "]"

    # --- Decoding --------------------------------------------------------------

    def decode(self, text: str) -> list[ProductRecord]:
        records: list[ProductRecord] = []
        pos = _skip_whitespace(text, 0)
        if pos == len(text):
            return records
        try:
            pos = _skip_whitespace(text, _expect(text, pos, "["))
            if text.startswith("]", pos):
                return records
            index = 0
            while True:
                value, pos = _DECODER.raw_decode(text, pos)
                _append_record(records, value, index)
                index += 1
                pos = _skip_whitespace(text, pos)
                if text.startswith(",", pos):
                    pos = _skip_whitespace(text, pos + 1)
                    continue
                _expect(text, pos, "]")
                break
        except ValueError as exc:
            # JSONDecodeError, or an integer literal too long to convert
            logger.warning(
                "Stopped reading JSON backup after %d records: %s", len(records), exc
            )
        return records


def _append_record(records: list[ProductRecord], value: Any, index: int) -> None:
    if not isinstance(value, dict):
        logger.warning("Skipping JSON record %d: not an object", index)
        return
    dates = value.get("shipmentDates", [])
    shippers = value.get("shippers", [])
    try:
        if not isinstance(dates, list) or not isinstance(shippers, list):
            raise MalformedRecordError("shipmentDates and shippers must be arrays")
        stock = value.get("stock")
        threshold = value.get("threshold")
        records.append(
            build_record(
                product_id=value.get("id"),
                name=value.get("name"),
                stock=_integral(stock),
                threshold=_integral(threshold),
                payment_due=_amount(value.get("paymentDue")),
                shipment_dates=dates,
                shippers=shippers,
            )
        )
    except MalformedRecordError as exc:
        logger.warning("Skipping JSON record %d: %s", index, exc)


def _integral(value: Any) -> Any:
    if isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise MalformedRecordError(f"expected an integer, got {value}")
        return int(value)
    return value


def _amount(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, Decimal)) and not isinstance(value, bool):
        return value
    raise MalformedRecordError(f"paymentDue must be a number or string, got {value!r}")


# ---------------------------------------------------------------------------
# Writer helpers
# ---------------------------------------------------------------------------


def _string(value: str) -> str:
    return '"' + "".join(_ESCAPES.get(ch, ch) for ch in value) + '"'


def _string_array(values) -> str:
    return "[" + ",".join(_string(v) for v in values) + "]"


def _encode_record(record: ProductRecord) -> str:
    members = [
        ("id", _string(record.id)),
        ("name", _string(record.name)),
        ("stock", str(record.stock)),
        ("threshold", str(record.threshold)),
        ("paymentDue", _string(record.payment_due.to_plain_string())),
        ("shipmentDates", _string_array(d.isoformat() for d in record.shipment_dates)),
        ("shippers", _string_array(record.shippers)),
    ]
    return "{" + ",".join(f'"{key}":{value}' for key, value in members) + "}"


# ---------------------------------------------------------------------------
# Reader helpers
# ---------------------------------------------------------------------------


def _skip_whitespace(text: str, pos: int) -> int:
    return _WHITESPACE.match(text, pos).end()


def _expect(text: str, pos: int, token: str) -> int:
    if not text.startswith(token, pos):
        raise json.JSONDecodeError(f"Expecting {token!r}", text, pos)
    return pos + len(token)
