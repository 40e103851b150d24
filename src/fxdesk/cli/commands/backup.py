"""Customer backup history commands."""

import click
from fxdesk.cli.commands.customer import actor_option, echo_customer
from fxdesk.cli.error_handling import handle_domain_error
from fxdesk.domain.customer_editor import DEFAULT_BACKUP_WINDOW_DAYS, CustomerEditor
from fxdesk.domain.errors import DomainError, backup_not_found, customer_not_found


@click.group()
def backup_group():
    """Browse and restore customer backups."""
    pass


@backup_group.command("list")
@click.argument("customer_id", metavar="CUSTOMER_ID")
@click.option(
    "--days",
    type=int,
    default=DEFAULT_BACKUP_WINDOW_DAYS,
    show_default=True,
    help="How many days of history to show",
)
@click.pass_context
def list_backups(ctx, customer_id: str, days: int):
    """List recent backups of a customer, newest first."""
    editor = CustomerEditor(ctx.obj["db"])
    backups = editor.list_recent_backups(customer_id, since_days=days)
    if not backups:
        click.echo(f"No backups in the last {days} days.")
        return

    click.echo(f"\nBackups of customer {customer_id}:")
    click.echo("-" * 100)
    for entry in backups:
        old_name = entry.old_data.get("name", "")
        new_name = entry.new_data.get("name", "")
        change = old_name if old_name == new_name else f"{old_name} -> {new_name}"
        click.echo(
            f"{entry.id} | {entry.created_at:%Y-%m-%d %H:%M} | {entry.reason:8s} | "
            f"{entry.changed_by:15s} | {change}"
        )


@backup_group.command("restore")
@click.argument("customer_id", metavar="CUSTOMER_ID")
@click.argument("backup_id", metavar="BACKUP_ID")
@actor_option
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def restore_backup(ctx, customer_id: str, backup_id: str, actor: str, yes: bool):
    """Restore a customer to the state saved before a backed-up change.

    The restore is itself recorded as a new backup entry.
    """
    editor = CustomerEditor(ctx.obj["db"])
    current = editor.get_customer(customer_id)
    if current is None:
        click.echo(f"Error: {customer_not_found(customer_id)}", err=True)
        ctx.exit(1)

    entry = editor.get_backup(backup_id)
    if entry is None:
        click.echo(f"Error: {backup_not_found(backup_id)}", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Restore customer '{current.name}' to the version from {entry.created_at:%Y-%m-%d %H:%M}? "
        "Current changes will be replaced."
    ):
        click.echo("Restore cancelled.")
        return

    try:
        restored = editor.restore_from_backup(customer_id, current, entry, actor)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Restored customer '{restored.name}'")
    echo_customer(restored)


def register_commands(cli):
    """Register backup commands with main CLI."""
    cli.add_command(backup_group, name="backup")
