"""Customer management commands."""

import getpass

import click
from fxdesk.cli.date_filters import resolve_cli_date_range
from fxdesk.cli.error_handling import handle_domain_error
from fxdesk.domain.customer import SORT_CHOICES, SORT_RECENT_TRANSACTIONS, CustomerService
from fxdesk.domain.customer_editor import CustomerEditor
from fxdesk.domain.customer_form import CustomerForm, format_phone
from fxdesk.domain.entities import CustomerRecord, CustomerStatus
from fxdesk.domain.errors import DomainError, customer_not_found
from fxdesk.utils.date_parser import PERIODS

STATUS_CHOICES = [status.value for status in CustomerStatus]

actor_option = click.option(
    "--actor",
    envvar="FXDESK_ACTOR",
    default=getpass.getuser,
    show_default="current user",
    help="Who is making the change (recorded in the backup log)",
)


def echo_customer(record: CustomerRecord) -> None:
    """Print a customer record."""
    click.echo(f"\nCustomer {record.id}")
    click.echo("-" * 60)
    click.echo(f"  Name:    {record.name}")
    for phone in record.phones:
        click.echo(f"  Phone:   {format_phone(phone)}")
    if record.email:
        click.echo(f"  Email:   {record.email}")
    click.echo(f"  Status:  {record.status.value}")
    if record.notes:
        click.echo(f"  Notes:   {record.notes}")
    click.echo(f"  Created: {record.created_at:%Y-%m-%d %H:%M}")
    if record.updated_at:
        click.echo(f"  Updated: {record.updated_at:%Y-%m-%d %H:%M}")


@click.group()
def customer_group():
    """Manage customers."""
    pass


@customer_group.command("add")
@click.argument("name", metavar="NAME")
@click.option("--phone", "phones", multiple=True, required=True, help="Phone number (repeatable)")
@click.option("--email", help="Email address")
@click.option("--notes", help="Free-text notes")
@click.option("--status", type=click.Choice(STATUS_CHOICES), default="active", show_default=True)
@click.pass_context
def add_customer(ctx, name: str, phones: tuple[str, ...], email: str | None, notes: str | None, status: str):
    """Add a customer.

    Examples:
        fxdesk customer add "Ali Salem" --phone 0922921143
        fxdesk customer add "Ali Salem" --phone +218912345678 --email ali@example.com
    """
    service = CustomerService(ctx.obj["db"])
    try:
        customer_id = service.create_customer(
            name=name,
            phones=list(phones),
            email=email,
            notes=notes,
            status=CustomerStatus(status),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created customer '{name}' (ID: {customer_id})")


@customer_group.command("list")
@click.option("--search", help="Case-insensitive part of the customer name")
@click.option("--status", type=click.Choice(STATUS_CHOICES), help="Only customers with this status")
@click.option("--start-date", help="Only customers with transactions on or after this date")
@click.option("--end-date", help="Only customers with transactions on or before this date")
@click.option("--period", type=click.Choice(PERIODS), help="Named activity window")
@click.option(
    "--sort",
    "sort_by",
    type=click.Choice(SORT_CHOICES),
    default=SORT_RECENT_TRANSACTIONS,
    show_default=True,
)
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--per-page", type=click.IntRange(min=1), default=10, show_default=True)
@click.pass_context
def list_customers(
    ctx,
    search: str | None,
    status: str | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    sort_by: str,
    page: int,
    per_page: int,
):
    """List customers with their transaction counts.

    A date window keeps only customers active in it.

    Examples:
        fxdesk customer list --search ali
        fxdesk customer list --period this-month --sort name
        fxdesk customer list --page 2 --per-page 20
    """
    date_from, date_to = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period
    )
    service = CustomerService(ctx.obj["db"])
    try:
        result = service.browse_customers(
            search=search,
            status=CustomerStatus(status) if status else None,
            date_from=date_from,
            date_to=date_to,
            sort_by=sort_by,
            limit=per_page,
            offset=(page - 1) * per_page,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not result.items:
        click.echo("No customers found.")
        return

    windowed = date_from is not None or date_to is not None
    pages = -(-result.total // per_page)
    click.echo(f"\nCustomers (page {page} of {pages}, {result.total} total):")
    click.echo("-" * 100)
    for activity in result.items:
        record = activity.customer
        phone = format_phone(record.phones[0]) if record.phones else ""
        count = activity.window_transactions if windowed else activity.total_transactions
        click.echo(
            f"{record.id} | {record.name:25s} | {phone:15s} | {record.status.value:8s} | {count} txn"
        )


@customer_group.command("show")
@click.argument("customer_id", metavar="CUSTOMER_ID")
@click.pass_context
def show_customer(ctx, customer_id: str):
    """Show one customer."""
    record = CustomerService(ctx.obj["db"]).get_customer(customer_id)
    if record is None:
        click.echo(f"Error: {customer_not_found(customer_id)}", err=True)
        ctx.exit(1)
    echo_customer(record)


@customer_group.command("edit")
@click.argument("customer_id", metavar="CUSTOMER_ID")
@click.option("--name", help="New name")
@click.option("--phone", "phones", multiple=True, help="Replace phone numbers (repeatable)")
@click.option("--email", help="New email address (empty string to clear)")
@click.option("--notes", help="New notes (empty string to clear)")
@click.option("--status", type=click.Choice(STATUS_CHOICES), help="New status")
@actor_option
@click.pass_context
def edit_customer(
    ctx,
    customer_id: str,
    name: str | None,
    phones: tuple[str, ...],
    email: str | None,
    notes: str | None,
    status: str | None,
    actor: str,
):
    """Edit a customer. The previous state is backed up first.

    Only the options given are changed.

    Examples:
        fxdesk customer edit 3f2a... --phone 0922921143 --phone 0913334455
        fxdesk customer edit 3f2a... --email "" --status inactive
    """
    editor = CustomerEditor(ctx.obj["db"])
    current = editor.get_customer(customer_id)
    if current is None:
        click.echo(f"Error: {customer_not_found(customer_id)}", err=True)
        ctx.exit(1)

    form = CustomerForm.from_record(current)
    if name is not None:
        form.name = name
    if phones:
        form.phones = list(phones)
    if email is not None:
        form.email = email
    if notes is not None:
        form.notes = notes
    if status is not None:
        form.status = status

    try:
        updated = editor.save_edit(customer_id, current, form, actor)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated customer '{updated.name}'")
    echo_customer(updated)


def register_commands(cli):
    """Register customer commands with main CLI."""
    cli.add_command(customer_group, name="customer")
