"""Tests for the structured-text (JSON) codec."""

import logging
from datetime import date
from decimal import Decimal

from stockledger.domain.model.value_objects import Money
from stockledger.infrastructure.codecs.base import ProductRecord
from stockledger.infrastructure.codecs.structured import StructuredTextCodec

P1 = ProductRecord(
    id="P1",
    name="Widget",
    stock=0,
    threshold=3,
    payment_due=Money.of("7.50"),
    shipment_dates=(date(2024, 1, 10),),
    shippers=("Acme",),
)

P1_JSON = (
    '{"id":"P1","name":"Widget","stock":0,"threshold":3,"paymentDue":"7.50",'
    '"shipmentDates":["2024-01-10"],"shippers":["Acme"]}'
)


class TestStructuredEncode:

    def test_exact_output(self):
        assert StructuredTextCodec().encode([P1]) == f"[{P1_JSON}]"

    def test_empty_snapshot(self):
        assert StructuredTextCodec().encode([]) == "[]"

    def test_records_are_comma_separated(self):
        assert StructuredTextCodec().encode([P1, P1]) == f"[{P1_JSON},{P1_JSON}]"

    def test_escapes_backslash_quote_newline_and_carriage_return(self):
        record = ProductRecord("E", 'a\\b"c\nd\re\tf', 1, 1, Money.zero())
        text = StructuredTextCodec().encode([record])
        assert r'"name":"a\\b\"c\nd\re' + "\tf" + '"' in text

    def test_unicode_written_verbatim(self):
        record = ProductRecord("U", "Café ☕", 1, 1, Money.zero(), (), ("東京",))
        text = StructuredTextCodec().encode([record])
        assert '"name":"Café ☕"' in text
        assert '"shippers":["東京"]' in text

    def test_empty_sequences(self):
        record = ProductRecord("E", "Empty", 0, 0, Money.zero())
        text = StructuredTextCodec().encode([record])
        assert '"shipmentDates":[],"shippers":[]' in text


class TestStructuredDecode:

    def test_decodes_exact_output(self):
        assert StructuredTextCodec().decode(f"[{P1_JSON}]") == [P1]

    def test_pretty_printed_input(self):
        text = """
        [
          {
            "id": "P1", "name": "Widget",
            "stock": 0, "threshold": 3,
            "paymentDue": "7.50",
            "shipmentDates": [ "2024-01-10" ],
            "shippers": [ "Acme" ]
          }
        ]
        """
        assert StructuredTextCodec().decode(text) == [P1]

    def test_member_order_does_not_matter(self):
        text = (
            '[{"shippers":["Acme"],"shipmentDates":["2024-01-10"],"paymentDue":"7.50",'
            '"threshold":3,"stock":0,"name":"Widget","id":"P1"}]'
        )
        assert StructuredTextCodec().decode(text) == [P1]

    def test_standard_escapes(self):
        text = r'[{"id":"X","name":"tab\there é 🚚 \/","stock":1,"threshold":1}]'
        [record] = StructuredTextCodec().decode(text)
        assert record.name == "tab\there é 🚚 /"

    def test_numeric_payment_due_and_string_counts(self):
        text = '[{"id":"N","name":"n","stock":"4","threshold":2.0,"paymentDue":12.5}]'
        [record] = StructuredTextCodec().decode(text)
        assert record.stock == 4
        assert record.threshold == 2
        assert record.payment_due.amount == Decimal("12.50")

    def test_missing_optional_fields_default(self):
        [record] = StructuredTextCodec().decode('[{"id":"M"}]')
        assert record == ProductRecord("M", "", 0, 0, Money.zero())

    def test_bad_records_are_skipped(self, caplog):
        text = (
            "["
            '{"name":"no id","stock":1,"threshold":1},'
            '"not an object",'
            '{"id":"B","stock":true},'
            '{"id":"C","stock":1.5},'
            '{"id":"D","shipmentDates":"2024-01-10"},'
            '{"id":"E","shipmentDates":["yesterday"]},'
            '{"id":"F","paymentDue":"-1"},'
            f"{P1_JSON}"
            "]"
        )
        with caplog.at_level(logging.WARNING):
            records = StructuredTextCodec().decode(text)

        assert records == [P1]
        assert "record 0" in caplog.text
        assert "record 1: not an object" in caplog.text

    def test_truncated_file_keeps_complete_records(self, caplog):
        full = StructuredTextCodec().encode([P1, P1])
        with caplog.at_level(logging.WARNING):
            records = StructuredTextCodec().decode(full[:-20])
        assert records == [P1]
        assert "Stopped reading JSON backup after 1 records" in caplog.text

    def test_not_an_array(self):
        assert StructuredTextCodec().decode('{"id":"P1"}') == []

    def test_empty_input(self):
        assert StructuredTextCodec().decode("") == []
        assert StructuredTextCodec().decode("  [ ]  ") == []

    def test_lone_surrogate_escape_skips_record(self, caplog):
        text = (
            '[{"id":"S","name":"bad \\ud800","stock":1,"threshold":1},'
            f"{P1_JSON}]"
        )
        with caplog.at_level(logging.WARNING):
            records = StructuredTextCodec().decode(text)
        assert records == [P1]
        assert "record 0: name contains an unpaired surrogate" in caplog.text

    def test_surrogate_pair_escape_decodes(self):
        text = '[{"id":"S","name":"truck \\ud83d\\ude9a","stock":1,"threshold":1}]'
        [record] = StructuredTextCodec().decode(text)
        assert record.name == "truck 🚚"

    def test_garbage_after_record_stops_reading(self, caplog):
        with caplog.at_level(logging.WARNING):
            records = StructuredTextCodec().decode(f"[{P1_JSON} oops]")
        assert records == [P1]
        assert "Stopped reading JSON backup after 1 records" in caplog.text
