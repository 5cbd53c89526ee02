"""Account management commands."""

import click

from cantina.cli.account_resolution import resolve_account_or_exit
from cantina.cli.error_handling import handle_domain_error
from cantina.domain.entities import AccountType
from cantina.domain.ledger import LedgerService
from cantina.domain.overdue import OverduePolicy
from cantina.utils.amount_parser import parse_amount


def _parse_amount_or_exit(ctx, amount: str):
    try:
        return parse_amount(amount)
    except ValueError as e:
        handle_domain_error(ctx, e)


@click.group()
def account_group():
    """Manage student and staff accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="NAME")
@click.option("--grade", default="", help="Class or role (e.g., '5th grade A', 'Coordinator')")
@click.option("--code", help="Short unique code used at the counter")
@click.option("--staff", is_flag=True, help="Account belongs to a staff member")
@click.option("--opening-balance", default="0", help="Balance the account starts with")
@click.option("--guardian", help="Guardian name")
@click.option("--email", help="Guardian email")
@click.option("--phone", help="Guardian phone")
@click.option("--notes", help="Notes such as allergies")
@click.pass_context
def create_account(ctx, name, grade, code, staff, opening_balance, guardian, email, phone, notes):
    """Create a new account.

    Examples:
        cantina account create "Ana Souza" --grade "5th grade A" --code A123
        cantina account create "Carlos Lima" --staff --grade Coordinator
    """
    service = LedgerService(ctx.obj["db"])
    opening = _parse_amount_or_exit(ctx, opening_balance)

    try:
        account_id = service.create_account(
            name=name,
            grade=grade,
            code=code,
            is_staff=staff,
            opening_balance=opening,
            guardian_name=guardian,
            guardian_email=email,
            guardian_phone=phone,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{name}' (ID: {account_id})")


@account_group.command("list")
@click.option("--search", help="Filter by name, code or grade")
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in AccountType], case_sensitive=False),
    default=AccountType.ALL.value,
    help="Restrict to students or staff",
)
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive accounts")
@click.pass_context
def list_accounts(ctx, search, account_type, include_inactive):
    """List accounts with their balances."""
    service = LedgerService(ctx.obj["db"])
    accounts = service.list_accounts(
        search=search,
        include_inactive=include_inactive,
        account_type=AccountType(account_type.upper()),
    )
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 72)
    for acc in accounts:
        kind = "staff" if acc.is_staff else "student"
        status = "" if acc.is_active else " (inactive)"
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:24s} | {acc.code or '-':8s} | {kind:7s} | "
            f"{acc.balance:>10.2f}{status}"
        )


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account):
    """Show account details and overdue status.

    ACCOUNT can be an account ID, code or name.
    """
    db = ctx.obj["db"]
    service = LedgerService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    acc = service.require_account(account_id)
    status = OverduePolicy(db, ctx.obj["settings"]).status_for(acc)

    click.echo(f"\n{acc.name} (ID: {acc.id})")
    click.echo("-" * 40)
    click.echo(f"Code:     {acc.code or '-'}")
    click.echo(f"Grade:    {acc.grade or '-'}")
    click.echo(f"Type:     {'Staff' if acc.is_staff else 'Student'}")
    click.echo(f"Status:   {'Active' if acc.is_active else 'Inactive'}")
    click.echo(f"Balance:  {acc.balance:.2f}")
    click.echo(f"Points:   {acc.points}")
    if acc.guardian_name or acc.guardian_email or acc.guardian_phone:
        contact = ", ".join(v for v in (acc.guardian_email, acc.guardian_phone) if v)
        click.echo(f"Guardian: {acc.guardian_name or '-'} {contact}".rstrip())
    if acc.notes:
        click.echo(f"Notes:    {acc.notes}")
    if status.is_overdue:
        click.echo(f"OVERDUE:  {status.days_overdue} days")


@account_group.command("history")
@click.argument("account", metavar="ACCOUNT")
@click.option("--limit", type=int, help="Show only the most recent entries")
@click.pass_context
def account_history(ctx, account, limit):
    """Show the movement history of an account."""
    service = LedgerService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    entries = service.get_history(account_id)
    if limit:
        entries = entries[-limit:]
    if not entries:
        click.echo("No movements found.")
        return

    click.echo(f"{'Date':16s} | {'Type':10s} | {'Value':>10s} | {'Balance':>10s} | Description")
    click.echo("-" * 80)
    for entry in entries:
        click.echo(
            f"{entry.timestamp:%Y-%m-%d %H:%M} | {entry.type.value:10s} | "
            f"{entry.signed_value:>10.2f} | {entry.balance_after:>10.2f} | {entry.description}"
        )


@account_group.command("pay")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount", metavar="AMOUNT")
@click.option("--description", default="Payment received", help="Entry description")
@click.pass_context
def pay(ctx, account, amount, description):
    """Receive a payment into an account.

    Examples:
        cantina account pay A123 50
        cantina account pay "Ana Souza" "R$ 15,00"
    """
    service = LedgerService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    value = _parse_amount_or_exit(ctx, amount)
    try:
        entry = service.receive_payment(account_id, value, description)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Payment of {entry.value:.2f} received. New balance: {entry.balance_after:.2f}")


@account_group.command("refund")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount", metavar="AMOUNT")
@click.option("--reason", required=True, help="Why the money is given back")
@click.pass_context
def refund(ctx, account, amount, reason):
    """Credit a refund to an account."""
    service = LedgerService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    value = _parse_amount_or_exit(ctx, amount)
    try:
        entry = service.refund(account_id, value, reason)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Refund of {entry.value:.2f} credited. New balance: {entry.balance_after:.2f}")


@account_group.command("batch-pay")
@click.argument("accounts", metavar="ACCOUNT...", nargs=-1, required=True)
@click.option("--amount", help="Fixed amount per account (default: pay off each debt)")
@click.option("--payroll", is_flag=True, help="Label entries as payroll deductions")
@click.pass_context
def batch_pay(ctx, accounts, amount, payroll):
    """Receive payments for several accounts at once."""
    service = LedgerService(ctx.obj["db"])
    account_ids = [resolve_account_or_exit(ctx, service, acc) for acc in accounts]
    value = _parse_amount_or_exit(ctx, amount) if amount is not None else None
    try:
        entries = service.batch_payment(account_ids, amount=value, payroll_deduction=payroll)
    except ValueError as e:
        handle_domain_error(ctx, e)

    total = sum(e.value for e in entries)
    click.echo(f"Credited {len(entries)} account{'s' if len(entries) != 1 else ''}, total {total:.2f}")


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate(ctx, account):
    """Deactivate an account (history is kept)."""
    service = LedgerService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    service.set_active(account_id, False)
    click.echo(f"Deactivated account {account_id}")


@account_group.command("activate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def activate(ctx, account):
    """Reactivate an account."""
    service = LedgerService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    service.set_active(account_id, True)
    click.echo(f"Activated account {account_id}")


@account_group.command("verify")
@click.argument("account", metavar="ACCOUNT", required=False)
@click.pass_context
def verify(ctx, account):
    """Check that balances match their history.

    Without ACCOUNT every account is checked.
    """
    service = LedgerService(ctx.obj["db"])
    if account is not None:
        account_ids = [resolve_account_or_exit(ctx, service, account)]
    else:
        account_ids = [a.id for a in service.list_accounts(include_inactive=True)]

    failures = 0
    for account_id in account_ids:
        report = service.check_integrity(account_id)
        if report.is_consistent:
            continue
        failures += 1
        click.echo(
            f"Account {account_id}: stored {report.stored_balance:.2f}, "
            f"history {report.computed_balance:.2f}",
            err=True,
        )

    if failures:
        click.echo(f"Error: {failures} account(s) inconsistent", err=True)
        ctx.exit(1)
    click.echo(f"Checked {len(account_ids)} account(s): all consistent")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
