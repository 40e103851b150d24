"""Treasury account and currency catalogue commands."""

import click
from fxdesk.cli.error_handling import handle_domain_error
from fxdesk.domain.entities import TreasuryAccount
from fxdesk.domain.errors import DomainError
from fxdesk.domain.treasury import TreasuryService


@click.group()
def currency_group():
    """Manage the currency catalogue."""
    pass


@currency_group.command("add")
@click.argument("name", metavar="NAME")
@click.argument("code", metavar="CODE")
@click.option("--symbol", help="Currency symbol")
@click.pass_context
def add_currency(ctx, name: str, code: str, symbol: str | None):
    """Add a currency. NAME is what transactions use, CODE a short code.

    Currencies are listed in reports in the order they were added.

    Examples:
        fxdesk currency add USD USD --symbol $
        fxdesk currency add "رممبي" CNY
    """
    service = TreasuryService(ctx.obj["db"])
    try:
        service.add_currency(name=name, code=code, symbol=symbol)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added currency '{name}' ({code.strip().upper()})")


@currency_group.command("list")
@click.pass_context
def list_currencies(ctx):
    """List the currency catalogue."""
    currencies = TreasuryService(ctx.obj["db"]).list_currencies()
    if not currencies:
        click.echo("No currencies found.")
        return

    click.echo("\nCurrencies:")
    click.echo("-" * 40)
    for currency in currencies:
        click.echo(f"{currency.code:6s} | {currency.name:15s} | {currency.symbol or ''}")


@click.group()
def account_group():
    """Manage treasury accounts."""
    pass


def _echo_account(account: TreasuryAccount) -> None:
    state = "active" if account.active else "inactive"
    currencies = ", ".join(account.supported_currencies) or "-"
    click.echo(f"{account.name:20s} | {account.category:15s} | {state:8s} | {currencies}")


@account_group.command("add")
@click.argument("name", metavar="NAME")
@click.option("--category", required=True, help="Account category or location")
@click.option("--currency", "currencies", multiple=True, help="Supported currency (repeatable)")
@click.pass_context
def add_account(ctx, name: str, category: str, currencies: tuple[str, ...]):
    """Add a treasury account.

    Examples:
        fxdesk account add "Main safe" --category Tripoli --currency USD --currency EUR
    """
    service = TreasuryService(ctx.obj["db"])
    try:
        service.add_account(name=name, category=category, supported_currencies=currencies)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added account '{name}'")


@account_group.command("list")
@click.option("--active-only", is_flag=True, help="Hide inactive accounts")
@click.pass_context
def list_accounts(ctx, active_only: bool):
    """List treasury accounts, newest first."""
    accounts = TreasuryService(ctx.obj["db"]).list_accounts(active_only=active_only)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for account in accounts:
        _echo_account(account)


@account_group.command("edit")
@click.argument("name", metavar="NAME")
@click.option("--category", help="New category")
@click.option("--currency", "currencies", multiple=True, help="Replace supported currencies (repeatable)")
@click.pass_context
def edit_account(ctx, name: str, category: str | None, currencies: tuple[str, ...]):
    """Change an account's category or supported currencies."""
    service = TreasuryService(ctx.obj["db"])
    try:
        account = service.update_account(
            name, category=category, supported_currencies=currencies or None
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated account '{name}'")
    _echo_account(account)


@account_group.command("activate")
@click.argument("name", metavar="NAME")
@click.pass_context
def activate_account(ctx, name: str):
    """Mark an account active."""
    try:
        TreasuryService(ctx.obj["db"]).set_active(name, True)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Account '{name}' is active")


@account_group.command("deactivate")
@click.argument("name", metavar="NAME")
@click.pass_context
def deactivate_account(ctx, name: str):
    """Mark an account inactive."""
    try:
        TreasuryService(ctx.obj["db"]).set_active(name, False)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Account '{name}' is inactive")


@account_group.command("delete")
@click.argument("name", metavar="NAME")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, name: str, yes: bool):
    """Delete a treasury account."""
    if not yes and not click.confirm(f"Are you sure you want to delete account '{name}'?"):
        click.echo("Deletion cancelled.")
        return
    try:
        TreasuryService(ctx.obj["db"]).delete_account(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted account '{name}'")


def register_commands(cli):
    """Register currency and account commands with main CLI."""
    cli.add_command(currency_group, name="currency")
    cli.add_command(account_group, name="account")
