"""Delimited-text (CSV) backup codec.

Layout::

    id,name,stock,threshold,paymentDue,shipmentDates,shippers
    "P1","Red Widget",15,3,12.50,"2024-01-10|2024-02-01","Acme|Globex"

Escaping rules:
- text fields are always wrapped in ``"``; an embedded ``"`` is doubled
- quoted fields may contain commas and line breaks
- dates and shippers are joined with ``|``; inside a shipper name a literal
  ``|`` or ``\\`` is written as ``\\|`` or ``\\\\``
- numbers are bare, ``paymentDue`` always has two fraction digits

Rows with fewer than seven fields, or fields that do not parse, are
skipped with a warning.
"""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

from stockledger.infrastructure.codecs.base import (
    FIELD_NAMES,
    BackupCodec,
    MalformedRecordError,
    ProductRecord,
    build_record,
)

logger = logging.getLogger(__name__)

HEADER = ",".join(FIELD_NAMES)
FIELD_COUNT = len(FIELD_NAMES)

_QUOTE = '"'
_SEPARATOR = ","
_LIST_SEPARATOR = "|"
_LIST_ESCAPE = "\\"


class DelimitedCodec(BackupCodec):

    format_name = "csv"

    # --- Encoding --------------------------------------------------------------

    def encode(self, records: Sequence[ProductRecord]) -> str:
        lines = [HEADER]
        for record in records:
            fields = [
                _quote(record.id),
                _quote(record.name),
                str(record.stock),
                str(record.threshold),
                record.payment_due.to_plain_string(),
                _quote(_join_list(d.isoformat() for d in record.shipment_dates)),
                _quote(_join_list(record.shippers)),
            ]
            lines.append(_SEPARATOR.join(fields))
        return "\n".join(lines) + "\n"

    # --- Decoding --------------------------------------------------------------

    def decode(self, text: str) -> list[ProductRecord]:
        records: list[ProductRecord] = []
        rows = _split_rows(text)
        next(rows, None)  # header

        for line_no, fields in rows:
            if fields == [""]:
                continue
            if len(fields) < FIELD_COUNT:
                logger.warning(
                    "Skipping CSV record at line %d: expected %d fields, got %d",
                    line_no, FIELD_COUNT, len(fields),
                )
                continue
            try:
                records.append(
                    build_record(
                        product_id=fields[0],
                        name=fields[1],
                        stock=fields[2],
                        threshold=fields[3],
                        payment_due=fields[4],
                        shipment_dates=_split_list(fields[5]),
                        shippers=_split_list(fields[6]),
                    )
                )
            except MalformedRecordError as exc:
                logger.warning("Skipping CSV record at line %d: %s", line_no, exc)
        return records


# ---------------------------------------------------------------------------
# Field-level helpers
# ---------------------------------------------------------------------------


def _quote(value: str) -> str:
    return _QUOTE + value.replace(_QUOTE, _QUOTE * 2) + _QUOTE


def _join_list(tokens) -> str:
    return _LIST_SEPARATOR.join(
        t.replace(_LIST_ESCAPE, _LIST_ESCAPE * 2).replace(
            _LIST_SEPARATOR, _LIST_ESCAPE + _LIST_SEPARATOR
        )
        for t in tokens
    )


def _split_list(field: str) -> list[str]:
    """Split a ``|``-joined field, honouring backslash escapes.

    An empty field is an empty list.
    """
    if field == "":
        return []
    tokens: list[str] = []
    current: list[str] = []
    chars = iter(field)
    for ch in chars:
        if ch == _LIST_ESCAPE:
            # trailing lone backslash is kept literally
            current.append(next(chars, _LIST_ESCAPE))
        elif ch == _LIST_SEPARATOR:
            tokens.append("".join(current))
            current = []
        else:
            current.append(ch)
    tokens.append("".join(current))
    return tokens


def _split_rows(text: str) -> Iterator[tuple[int, list[str]]]:
    """Tokenize *text* into rows of fields.

    Yields ``(line_number, fields)`` where line_number is where the row
    starts.  Inside quotes, ``""`` is a literal quote and separators and
    line breaks are ordinary characters.  Outside quotes ``\\n``, ``\\r\\n``
    and a lone ``\\r`` all end the row.
    """
    fields: list[str] = []
    field: list[str] = []
    in_quotes = False
    line_no = 1
    row_start = 1
    row_has_content = False
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if in_quotes:
            if ch == _QUOTE:
                if i + 1 < n and text[i + 1] == _QUOTE:
                    field.append(_QUOTE)
                    i += 2
                    continue
                in_quotes = False
            else:
                if ch == "\n":
                    line_no += 1
                field.append(ch)
            i += 1
            continue

        if ch == _QUOTE:
            in_quotes = True
            row_has_content = True
        elif ch == _SEPARATOR:
            fields.append("".join(field))
            field = []
            row_has_content = True
        elif ch in "\r\n":
            if ch == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
            fields.append("".join(field))
            yield row_start, fields
            fields, field = [], []
            row_has_content = False
            line_no += 1
            row_start = line_no
        else:
            field.append(ch)
            row_has_content = True
        i += 1

    if row_has_content or field:
        # last row without a trailing newline, or a truncated quoted field
        fields.append("".join(field))
        yield row_start, fields
