from pathlib import Path

import click

from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import build_context, configure_logging
from stockledger.infrastructure.cli.shell import run_shell


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log at DEBUG level.")
def cli(verbose: bool) -> None:
    """Stock ledger: in-memory inventory with CSV/JSON/XML backups"""
    configure_logging(verbose)


@cli.command()
@click.option(
    "--load",
    "load_paths",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Backup file to import before the prompt (repeatable).",
)
def shell(load_paths: tuple[Path, ...]) -> None:
    """Start the interactive ledger shell."""
    context = build_context()
    for path in load_paths:
        try:
            count = context.backup.import_file(path)
        except DomainException as exc:
            raise click.ClickException(f"Import failed: {exc}")
        click.echo(f"Imported {count} products from {path}")
    run_shell(context)


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("target", type=click.Path(dir_okay=False, path_type=Path))
def convert(source: Path, target: Path) -> None:
    """Convert a backup file to another format (chosen by TARGET's extension)."""
    context = build_context()
    try:
        context.backup.import_file(source)
        count = context.backup.export_file(target)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Converted {count} products: {source} -> {target}")
