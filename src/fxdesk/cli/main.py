"""Main CLI entry point."""

import logging

import click
from fxdesk.database.factories import DB_PATH_ENV, DB_URL_ENV, create_database

# Import and register all commands at module level
from fxdesk.cli.commands import backup, customer, report, transaction, treasury

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False),
    envvar=DB_PATH_ENV,
    help=f"SQLite database file (or set {DB_PATH_ENV})",
)
@click.option(
    "--db-url",
    envvar=DB_URL_ENV,
    help=f"SQLAlchemy database URL, used when no --db-path is given (or set {DB_URL_ENV})",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="FXDESK_LOG_LEVEL",
    help="Logging level",
)
@click.pass_context
def cli(ctx, db_path: str | None, db_url: str | None, log_level: str):
    """fxdesk - Currency exchange back office.

    Keep customer records with a full edit history, record treasury
    transactions and print per-currency reports.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(level=getattr(logging, log_level.upper()), format=LOG_FORMAT)

    # Nothing to open when the group runs without a subcommand
    if ctx.invoked_subcommand is None:
        return

    db = create_database(database_url=db_url, database_path=db_path)
    db.connect()
    db.initialize_schema()
    ctx.obj["db"] = db
    ctx.call_on_close(db.disconnect)


for module in (customer, backup, transaction, report, treasury):
    module.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
