"""CLI helpers for date range resolution."""

from datetime import date

import click

from cantina.utils.date_parser import get_date_range, parse_date

PERIOD_FLAGS = {
    "today": "Filter to today",
    "this-week": "Filter to current week",
    "this-month": "Filter to current month",
    "last-7-days": "Filter to the last 7 days, today included",
    "last-month": "Filter to previous month",
}


def date_range_options(command):
    """Attach --start-date/--end-date and the period flags to a command."""
    for period, help_text in reversed(PERIOD_FLAGS.items()):
        command = click.option(
            f"--{period}", f"period_{period.replace('-', '_')}", is_flag=True, help=help_text
        )(command)
    command = click.option("--end-date", help="End date (YYYY-MM-DD or 'today')")(command)
    command = click.option("--start-date", help="Start date (YYYY-MM-DD or 'this month')")(command)
    return command


def pop_period_flags(kwargs: dict) -> dict[str, bool]:
    """Remove the period flags from command kwargs, keyed by period name."""
    return {
        period: kwargs.pop(f"period_{period.replace('-', '_')}", False)
        for period in PERIOD_FLAGS
    }


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from period flags or explicit dates."""
    chosen = [period for period, is_set in period_flags.items() if is_set]

    if len(chosen) > 1:
        click.echo("Error: Only one period option can be specified at a time.", err=True)
        ctx.exit(1)

    if chosen and (start_date or end_date):
        click.echo(
            "Error: Period options cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if chosen:
        return get_date_range(chosen[0])

    start = None
    end = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    if start is None and end is None and default_range is not None:
        start, end = default_range

    if start is not None and end is not None and start > end:
        click.echo("Error: Start date must not be after end date.", err=True)
        ctx.exit(1)

    return start, end
