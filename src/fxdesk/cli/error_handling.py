"""CLI error handling helpers."""

import click

from fxdesk.domain.errors import DomainError, ValidationError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, ValidationError):
        for field_name, message in error.field_errors.items():
            if isinstance(message, list):
                for index, item in enumerate(message):
                    if item:
                        click.echo(f"  {field_name}[{index}]: {item}", err=True)
            else:
                click.echo(f"  {field_name}: {message}", err=True)
    ctx.exit(1)
