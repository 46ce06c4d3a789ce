"""Shell commands for products: add, remove, receive, deliver, pay and queries."""

from __future__ import annotations

from datetime import date

import click

from stockledger.application.add_product import AddProductHandler
from stockledger.application.deliver_stock import DeliverStockHandler
from stockledger.application.dto import ProductDTO
from stockledger.application.pay_supplier import PaySupplierHandler
from stockledger.application.receive_shipment import ReceiveShipmentHandler
from stockledger.application.remove_product import RemoveProductHandler
from stockledger.application.show_inventory import ALL_STOCKED_MESSAGE, ShowInventoryHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import LedgerContext


def _parse_date(raw: str) -> date:
    """Parse ``today`` or an ISO ``YYYY-MM-DD`` date."""
    if raw.lower() == "today":
        return date.today()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise click.BadParameter(
            f"Invalid date '{raw}'. Expected YYYY-MM-DD or 'today'."
        )


def _echo_table(products: list[ProductDTO]) -> None:
    click.echo(
        f"{'ID':<10} {'Name':<20} {'Stock':>7} {'Threshold':>10} {'Due':>10} {'Shipments':>10}"
    )
    click.echo("-" * 72)
    for p in products:
        flag = " !" if p.below_threshold else ""
        click.echo(
            f"{p.id:<10} {p.name:<20} {p.stock:>7} {p.threshold:>10} "
            f"{p.payment_due:>10} {len(p.shipment_dates):>10}{flag}"
        )


@click.command("add")
@click.argument("product_id")
@click.argument("initial_stock", type=int)
@click.argument("threshold", type=int)
@click.argument("name", required=False)
@click.pass_obj
def product_add(
    ctx: LedgerContext, product_id: str, initial_stock: int, threshold: int, name: str | None
) -> None:
    """Add (or replace) a product."""
    handler = AddProductHandler(ctx.registry)

    try:
        product = handler.handle(product_id, initial_stock, threshold, name)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Added: {product}")


@click.command("remove")
@click.argument("product_id")
@click.pass_obj
def product_remove(ctx: LedgerContext, product_id: str) -> None:
    """Remove a product."""
    try:
        RemoveProductHandler(ctx.registry).handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Removed.")


@click.command("receive")
@click.argument("product_id")
@click.argument("quantity", type=int)
@click.argument("shipment_date")
@click.argument("shipper")
@click.argument("cost")
@click.pass_obj
def product_receive(
    ctx: LedgerContext,
    product_id: str,
    quantity: int,
    shipment_date: str,
    shipper: str,
    cost: str,
) -> None:
    """Record a shipment: receive ID QTY DATE|today SHIPPER COST."""
    handler = ReceiveShipmentHandler(ctx.registry)

    try:
        dto = handler.handle(
            product_id, quantity, _parse_date(shipment_date), shipper, cost
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Shipment recorded. Stock {dto.stock}, payment due {dto.payment_due}")


@click.command("deliver")
@click.argument("product_id")
@click.argument("quantity", type=int)
@click.pass_obj
def product_deliver(ctx: LedgerContext, product_id: str, quantity: int) -> None:
    """Deliver stock to a customer."""
    handler = DeliverStockHandler(ctx.registry)

    try:
        remaining = handler.handle(product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Delivered. Stock left: {remaining}")


@click.command("pay")
@click.argument("product_id")
@click.argument("amount")
@click.pass_obj
def product_pay(ctx: LedgerContext, product_id: str, amount: str) -> None:
    """Pay a supplier toward a product's balance."""
    handler = PaySupplierHandler(ctx.registry)

    try:
        remaining = handler.handle(product_id, amount)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Remaining due: {remaining}")


@click.command("list")
@click.pass_obj
def product_list(ctx: LedgerContext) -> None:
    """List all products."""
    products = ShowInventoryHandler(ctx.registry).handle()

    if not products:
        click.echo("(no products)")
        return

    _echo_table(products)


@click.command("low")
@click.pass_obj
def product_low(ctx: LedgerContext) -> None:
    """List products below their reorder threshold."""
    products = ShowInventoryHandler(ctx.registry).low_stock()

    if not products:
        click.echo(ALL_STOCKED_MESSAGE)
        return

    _echo_table(products)


@click.command("report")
@click.pass_obj
def product_report(ctx: LedgerContext) -> None:
    """Print the low-stock report."""
    click.echo(ShowInventoryHandler(ctx.registry).low_stock_report())


@click.command("find")
@click.argument("product_id")
@click.pass_obj
def product_find(ctx: LedgerContext, product_id: str) -> None:
    """Show one product with its shipment history."""
    try:
        dto = ShowInventoryHandler(ctx.registry).find(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {dto.id}  ({dto.name})")
    click.echo(f"Stock:     {dto.stock} (threshold {dto.threshold})")
    click.echo(f"Due:       {dto.payment_due}")
    click.echo(f"Dates:     {', '.join(dto.shipment_dates) or '-'}")
    click.echo(f"Shippers:  {', '.join(dto.shippers) or '-'}")


@click.command("size")
@click.pass_obj
def product_size(ctx: LedgerContext) -> None:
    """Print the number of products."""
    click.echo(f"Inventory size: {ShowInventoryHandler(ctx.registry).size()}")
