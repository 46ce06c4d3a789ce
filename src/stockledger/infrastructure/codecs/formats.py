"""Lookup of backup codecs by format name or file extension."""

from __future__ import annotations

from pathlib import Path

from stockledger.domain.exceptions import ValidationError
from stockledger.infrastructure.codecs.base import BackupCodec
from stockledger.infrastructure.codecs.delimited import DelimitedCodec
from stockledger.infrastructure.codecs.markup import MarkupCodec
from stockledger.infrastructure.codecs.structured import StructuredTextCodec

# Order matters: export-all writes the formats in this order.
CODECS: dict[str, BackupCodec] = {
    codec.format_name: codec
    for codec in (DelimitedCodec(), StructuredTextCodec(), MarkupCodec())
}


def codec_for_format(format_name: str) -> BackupCodec:
    codec = CODECS.get(format_name.lower().lstrip("."))
    if codec is None:
        raise ValidationError(
            f"Unsupported backup format '{format_name}' "
            f"(expected one of: {', '.join(CODECS)})"
        )
    return codec


def codec_for_path(path: Path) -> BackupCodec:
    """Pick the codec matching *path*'s extension."""
    if not path.suffix:
        raise ValidationError(
            f"Cannot tell the backup format of '{path}' without a file extension"
        )
    return codec_for_format(path.suffix)
