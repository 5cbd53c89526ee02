"""Main CLI entry point."""

import click

from cantina.database.factories import create_sqlite_database
from cantina.domain.errors import ValidationError
from cantina.domain.settings import PosSettings
from cantina.logging_config import setup_logging

# Import and register all commands at module level
from cantina.cli.commands import (
    account,
    billing,
    cash,
    exchange,
    product,
    report,
    sell,
    transaction,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CANTINA_DB_PATH environment variable)",
    envvar="CANTINA_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar="CANTINA_LOG_LEVEL",
    show_default=True,
    help="Logging level",
)
@click.option("--log-json", is_flag=True, help="Emit log records as JSON")
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, log_json: bool):
    """Cantina - School canteen point of sale.

    Sell at the counter, charge student and staff accounts, take payments,
    exchange items and follow up on accounts in debt. Feature flags are read
    from CANTINA_* environment variables.
    """
    ctx.ensure_object(dict)
    setup_logging(log_level, json_format=log_json)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            ctx.obj["settings"] = PosSettings.from_env()
        except ValidationError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
account.register_commands(cli)
product.register_commands(cli)
sell.register_commands(cli)
exchange.register_commands(cli)
transaction.register_commands(cli)
report.register_commands(cli)
billing.register_commands(cli)
cash.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
