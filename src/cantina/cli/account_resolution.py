"""CLI helpers for account resolution."""

from __future__ import annotations

import click

from cantina.cli.error_handling import handle_domain_error
from cantina.domain.ledger import LedgerService
from cantina.utils.account_resolver import resolve_account


def resolve_account_or_exit(ctx: click.Context, ledger: LedgerService, account: str | int) -> int:
    """Resolve an account ID, code or name, or exit with a CLI error."""
    try:
        return resolve_account(ledger, account)
    except ValueError as exc:
        handle_domain_error(ctx, exc)
