"""Composition root: builds the registry and backup service for a session.

This is the only place in the codebase that knows about *all* layers.
Every ledger session gets its own registry; nothing here is a
module-level singleton.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from stockledger.domain.repository.product_registry import ProductRegistry
from stockledger.infrastructure.persistence.backup_service import BackupService

LOG_LEVEL_ENV = "STOCKLEDGER_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class LedgerContext:
    """Everything a CLI command needs, passed as the click context object."""

    registry: ProductRegistry
    backup: BackupService


def build_context() -> LedgerContext:
    registry = ProductRegistry()
    return LedgerContext(registry=registry, backup=BackupService(registry))


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging from ``STOCKLEDGER_LOG_LEVEL`` (or DEBUG if verbose)."""
    level_name = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
