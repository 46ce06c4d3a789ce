"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations

from pathlib import Path


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """An argument broke a precondition (bad quantity, amount or id)."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class BackupIOError(DomainException):
    """Reading or writing a backup file failed.

    ``path`` names the file involved; the original ``OSError`` is kept
    as ``__cause__``.
    """

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
