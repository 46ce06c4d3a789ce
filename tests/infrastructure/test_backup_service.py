"""Integration tests for BackupService (export/import through real files)."""

from datetime import date
from pathlib import Path

import pytest

from stockledger.domain.exceptions import BackupIOError, ValidationError
from stockledger.domain.model.value_objects import Money
from stockledger.domain.repository.product_registry import ProductRegistry
from stockledger.infrastructure.codecs.delimited import HEADER
from stockledger.infrastructure.codecs.structured import StructuredTextCodec
from stockledger.infrastructure.persistence.backup_service import BackupService


def _setup():
    """The receive / deliver / pay scenario, ready to export."""
    registry = ProductRegistry()
    registry.create("P1", 10, 3, "Widget")
    registry.receive_shipment("P1", 5, date(2024, 1, 10), "Acme", Money.of("12.50"))
    assert registry.deliver("P1", 20) is False
    assert registry.deliver("P1", 15) is True
    registry.pay("P1", Money.of("5.00"))
    registry.create("P2", 7, 2, "Café Gadget")
    return registry, BackupService(registry)


class TestExportAll:

    def test_writes_three_files(self, tmp_path: Path):
        _, backup = _setup()
        written = backup.export_all(tmp_path / "nested" / "dir", "nightly")

        assert [p.name for p in written] == ["nightly.csv", "nightly.json", "nightly.xml"]
        for path in written:
            assert path.is_file()
        assert (tmp_path / "nested" / "dir" / "nightly.csv").read_text(
            encoding="utf-8"
        ).startswith(HEADER)

    @pytest.mark.parametrize("ext", [".csv", ".json", ".xml"])
    def test_each_file_restores_the_scenario(self, tmp_path: Path, ext):
        _, backup = _setup()
        backup.export_all(tmp_path, "snap")

        fresh = ProductRegistry()
        count = BackupService(fresh).import_file(tmp_path / f"snap{ext}")

        assert count == 2
        p1 = fresh.find("P1")
        assert p1.stock == 0
        assert p1.is_below_threshold() is True
        assert p1.payment_due.to_plain_string() == "7.50"
        assert p1.shipment_dates == [date(2024, 1, 10)]
        assert p1.shippers == ["Acme"]
        assert fresh.find("P2").name == "Café Gadget"

    def test_unwritable_directory_raises_backup_error(self, tmp_path: Path):
        _, backup = _setup()
        blocker = tmp_path / "file.txt"
        blocker.write_text("not a directory", encoding="utf-8")

        with pytest.raises(BackupIOError) as info:
            backup.export_all(blocker, "snap")
        assert info.value.path == blocker
        assert isinstance(info.value.__cause__, OSError)

    def test_failed_write_stops_remaining_files(self, tmp_path: Path):
        _, backup = _setup()
        # a directory squatting on the json file name makes that write fail
        (tmp_path / "snap.json").mkdir()

        with pytest.raises(BackupIOError) as info:
            backup.export_all(tmp_path, "snap")

        assert info.value.path == tmp_path / "snap.json"
        assert (tmp_path / "snap.csv").is_file()
        assert not (tmp_path / "snap.xml").exists()

    def test_unencodable_name_raises_backup_error_without_partial_file(self, tmp_path: Path):
        registry, backup = _setup()
        registry.create("P3", 1, 1, "bad \ud800")

        with pytest.raises(BackupIOError) as info:
            backup.export_all(tmp_path, "snap")

        assert info.value.path == tmp_path / "snap.csv"
        assert isinstance(info.value.__cause__, UnicodeError)
        assert not (tmp_path / "snap.csv").exists()


class TestSingleFile:

    def test_export_file_by_extension(self, tmp_path: Path):
        _, backup = _setup()
        path = tmp_path / "out.json"
        assert backup.export_file(path) == 2
        assert path.read_text(encoding="utf-8").startswith('[{"id":')

    def test_explicit_codec_overrides_extension(self, tmp_path: Path):
        _, backup = _setup()
        path = tmp_path / "out.txt"
        backup.export_file(path, StructuredTextCodec())

        fresh = ProductRegistry()
        assert BackupService(fresh).import_file(path, StructuredTextCodec()) == 2

    def test_unknown_extension_rejected(self, tmp_path: Path):
        _, backup = _setup()
        with pytest.raises(ValidationError, match="Unsupported backup format"):
            backup.export_file(tmp_path / "out.yaml")

    def test_missing_extension_rejected(self, tmp_path: Path):
        _, backup = _setup()
        with pytest.raises(ValidationError, match="without a file extension"):
            backup.import_file(tmp_path / "backup")

    def test_missing_file_raises_backup_error(self, tmp_path: Path):
        _, backup = _setup()
        missing = tmp_path / "nope.csv"
        with pytest.raises(BackupIOError, match="nope.csv"):
            backup.import_file(missing)

    def test_import_replaces_existing_products(self, tmp_path: Path):
        registry, backup = _setup()
        path = tmp_path / "snap.xml"
        backup.export_file(path)

        registry.receive_shipment("P1", 100, date(2024, 6, 1), "Late", Money.of("1"))
        registry.create("P3", 1, 1, "Only in memory")
        backup.import_file(path)

        p1 = registry.find("P1")
        assert p1.stock == 0
        assert p1.shippers == ["Acme"]
        assert registry.find("P3") is not None
        assert registry.size() == 3

    def test_malformed_csv_record_is_skipped(self, tmp_path: Path):
        path = tmp_path / "partial.csv"
        path.write_text(
            f"{HEADER}\n"
            '"A","Alpha",1,1,0.00,"",""\n'
            '"B","Broken",1,2\n'
            '"C","Gamma",3,1,1.25,"2024-05-05","Acme"\n',
            encoding="utf-8",
        )
        registry = ProductRegistry()
        assert BackupService(registry).import_file(path) == 2
        assert sorted(p.id for p in registry.list_all()) == ["A", "C"]

    def test_carriage_return_in_csv_name_survives_file_round_trip(self, tmp_path: Path):
        registry = ProductRegistry()
        registry.create("R", 1, 1, "line\r\nbreak")
        path = tmp_path / "cr.csv"
        BackupService(registry).export_file(path)

        fresh = ProductRegistry()
        BackupService(fresh).import_file(path)
        assert fresh.find("R").name == "line\r\nbreak"
