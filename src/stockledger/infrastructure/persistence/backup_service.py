"""File-backed backup and restore of a ProductRegistry.

This is the only module that touches the filesystem.  Codecs are pure
text transformations; this service reads/writes the files and applies
decoded records to the registry.
"""

from __future__ import annotations

import logging
from pathlib import Path

from stockledger.domain.exceptions import BackupIOError
from stockledger.domain.repository.product_registry import ProductRegistry
from stockledger.infrastructure.codecs.base import BackupCodec, ProductRecord
from stockledger.infrastructure.codecs.formats import CODECS, codec_for_path

logger = logging.getLogger(__name__)


class BackupService:

    def __init__(self, registry: ProductRegistry) -> None:
        self._registry = registry

    # --- Export ----------------------------------------------------------------

    def export_all(self, directory: Path, prefix: str) -> list[Path]:
        """Write ``<prefix>.csv``, ``<prefix>.json`` and ``<prefix>.xml``.

        Stops at the first file that cannot be written.
        """
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.exception("Failed to create backup directory %s", directory)
            raise BackupIOError(directory, exc.strerror or str(exc)) from exc

        # one registry snapshot shared by every format
        products = self._registry.list_all()
        written: list[Path] = []
        for codec in CODECS.values():
            path = directory / f"{prefix}{codec.extension}"
            self._write(path, codec.encode_products(products))
            written.append(path)
        logger.info("Exported %d products to %s", len(products), directory)
        return written

    def export_file(self, path: Path, codec: BackupCodec | None = None) -> int:
        """Export every product to *path*; returns the product count."""
        codec = codec or codec_for_path(path)
        products = self._registry.list_all()
        self._write(path, codec.encode_products(products))
        logger.info("Exported %d products to %s", len(products), path)
        return len(products)

    # --- Import ----------------------------------------------------------------

    def import_file(self, path: Path, codec: BackupCodec | None = None) -> int:
        """Load *path* into the registry, replacing products with the same id.

        Returns the number of products restored.
        """
        codec = codec or codec_for_path(path)
        records = codec.decode(self._read(path))
        self.restore(records)
        logger.info("Imported %d products from %s", len(records), path)
        return len(records)

    def restore(self, records: list[ProductRecord]) -> None:
        for record in records:
            self._registry.register(record.to_product())

    # --- File helpers ---------------------------------------------------------

    @staticmethod
    def _read(path: Path) -> str:
        try:
            # newline="" keeps \r inside quoted fields intact
            with path.open("r", encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeError) as exc:
            logger.exception("Failed to read backup %s", path)
            raise BackupIOError(path, _describe(exc)) from exc

    @staticmethod
    def _write(path: Path, text: str) -> None:
        try:
            # encode up front so an unencodable product never leaves a partial file
            data = text.encode("utf-8")
            with path.open("wb") as f:
                f.write(data)
        except (OSError, UnicodeError) as exc:
            logger.exception("Failed to write backup %s", path)
            raise BackupIOError(path, _describe(exc)) from exc


def _describe(exc: Exception) -> str:
    if isinstance(exc, OSError) and exc.strerror:
        return exc.strerror
    return str(exc)
