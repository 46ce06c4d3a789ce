"""Interactive ledger shell.

The registry only lives in memory, so the useful way to drive it is a
read-eval loop: each line is split like a shell command line (quoted
substrings stay whole) and dispatched to the ``commands`` group below.
Errors are printed and the session carries on.
"""

from __future__ import annotations

import shlex

import click

from stockledger.infrastructure.bootstrap import LedgerContext
from stockledger.infrastructure.cli.backup_commands import (
    backup_export,
    backup_export_all,
    backup_import,
)
from stockledger.infrastructure.cli.product_commands import (
    product_add,
    product_deliver,
    product_find,
    product_list,
    product_low,
    product_pay,
    product_receive,
    product_remove,
    product_report,
    product_size,
)

PROMPT = "> "
EXIT_COMMANDS = ("exit", "quit")


@click.group()
def commands() -> None:
    """Commands available inside the shell (plus 'help' and 'exit')."""


# Register subcommands
commands.add_command(product_add)
commands.add_command(product_remove)
commands.add_command(product_receive)
commands.add_command(product_deliver)
commands.add_command(product_pay)
commands.add_command(product_list)
commands.add_command(product_low)
commands.add_command(product_report)
commands.add_command(product_find)
commands.add_command(product_size)
commands.add_command(backup_export_all)
commands.add_command(backup_export)
commands.add_command(backup_import)


def split_args(line: str) -> list[str]:
    """Tokenize a command line; raises ValueError on an unclosed quote."""
    return shlex.split(line)


def dispatch(context: LedgerContext, args: list[str]) -> None:
    """Run one tokenized command against *context*."""
    name, rest = args[0].lower(), args[1:]
    if name == "help":
        # "help" or "help <command>"
        args = [rest[0].lower(), "--help"] if rest else ["--help"]
    else:
        args = [name, *rest]
    try:
        commands.main(args=args, prog_name="", standalone_mode=False, obj=context)
    except click.ClickException as exc:
        exc.show()
    except click.Abort:
        click.echo("Aborted.")


def run_shell(context: LedgerContext) -> None:
    click.echo("Stock ledger shell. Type 'help' for commands.")
    while True:
        try:
            line = click.prompt(
                "", default="", show_default=False, prompt_suffix=PROMPT
            )
        except click.Abort:
            # end of input
            click.echo()
            break

        try:
            args = split_args(line)
        except ValueError as exc:
            click.echo(f"Error: {exc}")
            continue
        if not args:
            continue
        if args[0].lower() in EXIT_COMMANDS:
            break
        dispatch(context, args)

    click.echo("Bye.")
