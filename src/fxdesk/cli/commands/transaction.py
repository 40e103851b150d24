"""Transaction management commands."""

from datetime import datetime, time, UTC

import click
from fxdesk.cli.error_handling import handle_domain_error
from fxdesk.domain.aggregator import display_total, settled_amount
from fxdesk.domain.entities import TransactionType
from fxdesk.domain.errors import DomainError
from fxdesk.domain.transaction import TransactionService
from fxdesk.utils.amount_parser import parse_optional_amount
from fxdesk.utils.date_parser import parse_date

TYPE_CHOICES = [txn_type.value for txn_type in TransactionType]


def _fmt(value) -> str:
    return "" if value is None else f"{value:,.2f}"


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--type", "txn_type", type=click.Choice(TYPE_CHOICES), required=True)
@click.option("--customer", required=True, help="Customer name")
@click.option("--date", "txn_date", help="Transaction date (YYYY-MM-DD, 'today', 'yesterday')")
@click.option("--category", help="Category (Deposit, Withdrawal, FX, Transfer); derived from type if omitted")
@click.option("--amount", help="Amount for entry/exit")
@click.option("--fee", help="Fee added to the amount")
@click.option("--fee-currency", help="Currency of the fee")
@click.option("--currency", help="Currency of the amount or price")
@click.option("--price", help="Base-currency value for buy/sell")
@click.option("--rate", help="Exchange rate for buy/sell")
@click.option("--currency-final", help="Settlement currency label")
@click.option("--country-city", default="", help="Country / city")
@click.option("--deliver-to", help="Recipient or delivery account")
@click.option("--from-account", help="Source treasury account")
@click.option("--to-account", help="Destination treasury account")
@click.option("--notes", help="Notes")
@click.pass_context
def add_transaction(
    ctx,
    txn_type: str,
    customer: str,
    txn_date: str | None,
    category: str | None,
    amount: str | None,
    fee: str | None,
    fee_currency: str | None,
    currency: str | None,
    price: str | None,
    rate: str | None,
    currency_final: str | None,
    country_city: str,
    deliver_to: str | None,
    from_account: str | None,
    to_account: str | None,
    notes: str | None,
):
    """Record a transaction.

    Examples:
        fxdesk transaction add --type entry --customer "Ali Salem" --currency USD --amount 100 --fee 5
        fxdesk transaction add --type buy --customer "Ali Salem" --currency EUR --price 200 --rate 1.1
    """
    service = TransactionService(ctx.obj["db"])

    created_at = None
    if txn_date:
        try:
            created_at = datetime.combine(parse_date(txn_date), time(12, 0), tzinfo=UTC)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    try:
        parsed = {
            "amount": parse_optional_amount(amount),
            "fee": parse_optional_amount(fee),
            "price": parse_optional_amount(price),
            "rate": parse_optional_amount(rate),
        }
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        transaction_id = service.record_transaction(
            transaction_type=TransactionType(txn_type),
            customer_name=customer,
            created_at=created_at,
            category=category,
            fee_currency=fee_currency,
            currency=currency,
            currency_final=currency_final,
            country_city=country_city,
            deliver_to=deliver_to,
            from_account_name=from_account,
            to_account_name=to_account,
            notes=notes,
            **parsed,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {transaction_id}")


@transaction_group.command("list")
@click.option("--customer", help="Only this customer's transactions")
@click.pass_context
def list_transactions(ctx, customer: str | None):
    """List transactions, newest first."""
    service = TransactionService(ctx.obj["db"])
    transactions = service.list_transactions(customer_name=customer)
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 120)
    click.echo(
        f"{'Date':<12} {'Type':<8} {'Category':<11} {'Customer':<20} {'Currency':<10} "
        f"{'Total':>14} {'Rate':>10} {'Settled':>14}"
    )
    click.echo("-" * 120)
    for txn in transactions:
        if txn.type in (TransactionType.BUY.value, TransactionType.SELL_TO.value):
            total = txn.price
            settled = f"{_fmt(settled_amount(txn))} {txn.currency_final}"
        else:
            total = display_total(txn)
            settled = ""
        click.echo(
            f"{txn.created_at:%Y-%m-%d}   {txn.type:<8} {txn.category or '':<11} "
            f"{txn.customer_name[:20]:<20} {txn.currency or '':<10} {_fmt(total):>14} "
            f"{_fmt(txn.rate):>10} {settled:>14}"
        )
        click.echo(f"  id: {txn.id}")


@transaction_group.command("delete")
@click.argument("transaction_id", metavar="TRANSACTION_ID")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool):
    """Delete a transaction."""
    service = TransactionService(ctx.obj["db"])
    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
