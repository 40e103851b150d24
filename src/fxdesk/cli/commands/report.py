"""Report commands."""

import click
from fxdesk.cli.date_filters import resolve_cli_date_range
from fxdesk.cli.error_handling import handle_domain_error
from fxdesk.domain.aggregator import weighted_average_rate
from fxdesk.domain.entities import AggregationFilter, TransactionType, TRANSFER_FILTER
from fxdesk.domain.errors import DomainError
from fxdesk.domain.transaction import TransactionService
from fxdesk.utils.date_parser import PERIODS

TYPE_LABELS = {
    TransactionType.ENTRY.value: "Deposits / entry",
    TransactionType.EXIT.value: "Withdrawals / exit",
    TransactionType.BUY.value: "Buys",
    TransactionType.SELL_TO.value: "Sells",
}
TYPE_FILTER_CHOICES = [txn_type.value for txn_type in TransactionType] + [TRANSFER_FILTER]


def _money(value) -> str:
    return f"{value:,.2f}"


@click.command("report")
@click.option("--customer", help="Customer name")
@click.option("--start-date", help="Start date (YYYY-MM-DD or 'yesterday', '7 days ago')")
@click.option("--end-date", help="End date (YYYY-MM-DD or 'today')")
@click.option("--period", type=click.Choice(PERIODS), help="Named period instead of explicit dates")
@click.option("--currency", help="Only transactions touching this currency")
@click.option("--account", help="Only transactions touching this account")
@click.option("--type", "txn_type", type=click.Choice(TYPE_FILTER_CHOICES), help="Transaction type")
@click.option(
    "--lenient-category",
    is_flag=True,
    help="Treat transactions without a category as matching their type's category",
)
@click.option(
    "--currency-order",
    help="Comma-separated currencies to list, in order (defaults to the currency catalogue)",
)
@click.pass_context
def report(
    ctx,
    customer: str | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    currency: str | None,
    account: str | None,
    txn_type: str | None,
    lenient_category: bool,
    currency_order: str | None,
):
    """Show transaction counts and per-currency totals.

    Examples:
        fxdesk report --customer "Ali Salem" --period this-month
        fxdesk report --start-date 2024-01-01 --end-date 2024-01-31 --currency USD
    """
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)
    flt = AggregationFilter(
        customer_name=customer,
        date_from=start,
        date_to=end,
        currency=currency,
        account=account,
        transaction_type=txn_type,
        strict_category=not lenient_category,
    )
    currencies = None
    if currency_order:
        currencies = [code.strip() for code in currency_order.split(",") if code.strip()]

    service = TransactionService(ctx.obj["db"])
    try:
        result = service.build_report(flt, currencies)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not result.filtered_transactions:
        click.echo("No transactions found.")
        return

    title = f"Report for {customer}" if customer else "Company report"
    click.echo(f"\n{title}")
    if start or end:
        click.echo(f"Period: {start or '...'} to {end or '...'}")
    click.echo("=" * 80)

    click.echo("\nTransactions by type:")
    for type_value, count in sorted(result.transaction_counts.items()):
        click.echo(f"  {TYPE_LABELS.get(type_value, type_value):<25} {count:>6}")

    if result.currency_rows:
        click.echo("\nBy currency:")
        click.echo(
            f"  {'Currency':<12} {'Deposits':>14} {'Withdrawals':>14} {'Net':>14} "
            f"{'Bought':>14} {'Avg buy':>10} {'Sold':>14} {'Avg sell':>10}"
        )
        for row in result.currency_rows:
            bought = _money(row.bought.total) if row.bought else ""
            buy_rate = f"{row.bought.average_rate:.4f}" if row.bought else ""
            sold = _money(row.sold.total) if row.sold else ""
            sell_rate = f"{row.sold.average_rate:.4f}" if row.sold else ""
            click.echo(
                f"  {row.currency:<12} {_money(row.deposits):>14} {_money(row.withdrawals):>14} "
                f"{_money(row.net):>14} {bought:>14} {buy_rate:>10} {sold:>14} {sell_rate:>10}"
            )

    for direction in ("buy", "sell"):
        rate = weighted_average_rate(result.filtered_transactions, direction)
        if rate is not None:
            click.echo(f"\nVolume-weighted {direction} rate: {rate:.4f}")


def register_commands(cli):
    """Register report command with main CLI."""
    cli.add_command(report)
