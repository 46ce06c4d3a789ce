"""Markup (XML) backup codec.

Layout (written on a single line)::

    <products>
      <product>
        <id>P1</id><name>Red Widget</name><stock>15</stock>
        <threshold>3</threshold><paymentDue>12.50</paymentDue>
        <shipmentDates><d>2024-01-10</d></shipmentDates>
        <shippers><s>Acme</s></shippers>
      </product>
    </products>

Text content escapes ``&``, ``<`` and ``>``.  The reader is a small tag
scanner rather than a full XML parser: it ignores attributes, comments and
processing instructions, understands CDATA sections, and keeps text
byte-for-byte (no line-ending normalisation), which a conforming XML parser
would not.
"""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

from stockledger.infrastructure.codecs.base import (
    BackupCodec,
    MalformedRecordError,
    ProductRecord,
    build_record,
)

logger = logging.getLogger(__name__)

ROOT_TAG = "products"
RECORD_TAG = "product"
DATES_TAG = "shipmentDates"
DATE_TAG = "d"
SHIPPERS_TAG = "shippers"
SHIPPER_TAG = "s"
SCALAR_TAGS = ("id", "name", "stock", "threshold", "paymentDue")

_ENTITIES = {"amp": "&", "lt": "<", "gt": ">", "quot": '"', "apos": "'"}

# token kinds produced by _scan
_START = "start"
_END = "end"
_TEXT = "text"


class MarkupCodec(BackupCodec):

    format_name = "xml"

    # --- Encoding --------------------------------------------------------------

    def encode(self, records: Sequence[ProductRecord]) -> str:
        parts = [f"<{ROOT_TAG}>"]
        for record in records:
            parts.append(f"<{RECORD_TAG}>")
            parts.append(_element("id", escape(record.id)))
            parts.append(_element("name", escape(record.name)))
            parts.append(_element("stock", str(record.stock)))
            parts.append(_element("threshold", str(record.threshold)))
            parts.append(_element("paymentDue", record.payment_due.to_plain_string()))
            parts.append(
                _element(
                    DATES_TAG,
                    "".join(_element(DATE_TAG, d.isoformat()) for d in record.shipment_dates),
                )
            )
            parts.append(
                _element(
                    SHIPPERS_TAG,
                    "".join(_element(SHIPPER_TAG, escape(s)) for s in record.shippers),
                )
            )
            parts.append(f"</{RECORD_TAG}>")
        parts.append(f"</{ROOT_TAG}>")
        return "".join(parts)

    # --- Decoding --------------------------------------------------------------

    def decode(self, text: str) -> list[ProductRecord]:
        records: list[ProductRecord] = []
        builder: _RecordBuilder | None = None
        index = 0

        for kind, value in _scan(text):
            if kind == _START and value == RECORD_TAG:
                if builder is not None:
                    logger.warning("Skipping XML record %d: not closed", index)
                    index += 1
                builder = _RecordBuilder()
            elif builder is None:
                continue
            elif kind == _END and value == RECORD_TAG:
                try:
                    records.append(builder.build())
                except MalformedRecordError as exc:
                    logger.warning("Skipping XML record %d: %s", index, exc)
                builder = None
                index += 1
            else:
                builder.feed(kind, value)

        if builder is not None:
            logger.warning("Skipping XML record %d: truncated", index)
        return records


class _RecordBuilder:
    """Collects the child elements of one ``<product>``."""

    def __init__(self) -> None:
        self._stack: list[str] = []
        self._text: list[str] = []
        self._scalars: dict[str, str] = {}
        self._dates: list[str] = []
        self._shippers: list[str] = []
        self._broken: str | None = None

    def feed(self, kind: str, value: str) -> None:
        if kind == _START:
            self._stack.append(value)
            self._text = []
        elif kind == _TEXT:
            if self._stack:
                self._text.append(value)
        else:
            self._close(value)

    def _close(self, tag: str) -> None:
        if tag not in self._stack:
            self._broken = f"unexpected </{tag}>"
            return
        if self._stack[-1] != tag:
            self._broken = f"<{self._stack[-1]}> not closed"
            while self._stack[-1] != tag:
                self._stack.pop()
        self._stack.pop()
        content = "".join(self._text)
        self._text = []
        parent = self._stack[-1] if self._stack else None

        if parent == DATES_TAG and tag == DATE_TAG:
            self._dates.append(content)
        elif parent == SHIPPERS_TAG and tag == SHIPPER_TAG:
            self._shippers.append(content)
        elif parent is None and tag in SCALAR_TAGS:
            self._scalars[tag] = content

    def build(self) -> ProductRecord:
        if self._broken:
            raise MalformedRecordError(self._broken)
        if self._stack:
            raise MalformedRecordError(f"<{self._stack[-1]}> not closed")
        return build_record(
            product_id=self._scalars.get("id"),
            name=self._scalars.get("name"),
            stock=self._scalars.get("stock"),
            threshold=self._scalars.get("threshold"),
            payment_due=self._scalars.get("paymentDue"),
            shipment_dates=self._dates,
            shippers=self._shippers,
        )


# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------


def escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def unescape(text: str) -> str:
    """Invert ``escape``; also resolves ``&quot;``, ``&apos;`` and ``&#...;``.

    Unknown or unterminated references are kept as written.
    """
    if "&" not in text:
        return text
    out: list[str] = []
    pos = 0
    while True:
        amp = text.find("&", pos)
        if amp < 0:
            out.append(text[pos:])
            return "".join(out)
        out.append(text[pos:amp])
        semi = text.find(";", amp + 1, amp + 12)
        resolved = _resolve_entity(text[amp + 1:semi]) if semi > 0 else None
        if resolved is None:
            out.append("&")
            pos = amp + 1
        else:
            out.append(resolved)
            pos = semi + 1


def _resolve_entity(name: str) -> str | None:
    if name in _ENTITIES:
        return _ENTITIES[name]
    try:
        if name.startswith("#x") or name.startswith("#X"):
            return chr(int(name[2:], 16))
        if name.startswith("#"):
            return chr(int(name[1:]))
    except (ValueError, OverflowError):
        return None
    return None


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------


def _element(tag: str, content: str) -> str:
    return f"<{tag}>{content}</{tag}>"


def _scan(text: str) -> Iterator[tuple[str, str]]:
    """Yield ``(kind, value)`` tokens: start/end tag names and unescaped text.

    Stops quietly at a ``<`` with no matching ``>`` (truncated input).
    """
    pos = 0
    n = len(text)
    while pos < n:
        lt = text.find("<", pos)
        if lt < 0:
            yield _TEXT, unescape(text[pos:])
            return
        if lt > pos:
            yield _TEXT, unescape(text[pos:lt])

        if text.startswith("<!--", lt):
            end = text.find("-->", lt + 4)
            if end < 0:
                return
            pos = end + 3
            continue
        if text.startswith("<![CDATA[", lt):
            end = text.find("]]>", lt + 9)
            if end < 0:
                return
            yield _TEXT, text[lt + 9:end]
            pos = end + 3
            continue

        gt = text.find(">", lt + 1)
        if gt < 0:
            return
        pos = gt + 1
        body = text[lt + 1:gt]
        if body.startswith("?") or body.startswith("!"):
            continue
        if body.startswith("/"):
            yield _END, body[1:].strip()
            continue
        self_closing = body.endswith("/")
        if self_closing:
            body = body[:-1]
        parts = body.split(None, 1)
        if not parts:
            continue
        yield _START, parts[0]
        if self_closing:
            yield _END, parts[0]
