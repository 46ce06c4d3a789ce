"""Shell commands for backup export and import."""

from __future__ import annotations

from pathlib import Path

import click

from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import LedgerContext
from stockledger.infrastructure.codecs.formats import CODECS, codec_for_format

_FORMAT_OPTION = click.option(
    "--format",
    "format_name",
    type=click.Choice(list(CODECS), case_sensitive=False),
    default=None,
    help="Backup format (default: taken from the file extension).",
)


@click.command("exportall")
@click.argument("directory", type=click.Path(file_okay=False, path_type=Path))
@click.argument("prefix")
@click.pass_obj
def backup_export_all(ctx: LedgerContext, directory: Path, prefix: str) -> None:
    """Write PREFIX.csv, PREFIX.json and PREFIX.xml into DIRECTORY."""
    try:
        ctx.backup.export_all(directory, prefix)
    except DomainException as exc:
        raise click.ClickException(f"Export failed: {exc}")

    click.echo(f"Exported to {directory.resolve()}")


@click.command("export")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@_FORMAT_OPTION
@click.pass_obj
def backup_export(ctx: LedgerContext, path: Path, format_name: str | None) -> None:
    """Export every product to one backup file."""
    try:
        codec = codec_for_format(format_name) if format_name else None
        count = ctx.backup.export_file(path, codec)
    except DomainException as exc:
        raise click.ClickException(f"Export failed: {exc}")

    click.echo(f"Exported {count} products to {path}")


@click.command("import")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@_FORMAT_OPTION
@click.pass_obj
def backup_import(ctx: LedgerContext, path: Path, format_name: str | None) -> None:
    """Load products from a backup file, replacing products with the same id."""
    try:
        codec = codec_for_format(format_name) if format_name else None
        count = ctx.backup.import_file(path, codec)
    except DomainException as exc:
        raise click.ClickException(f"Import failed: {exc}")

    click.echo(f"Imported {count} products from {path}")
