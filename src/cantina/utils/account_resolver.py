"""Utility for resolving account references to IDs."""

from cantina.domain.errors import NotFoundError, ValidationError
from cantina.domain.ledger import LedgerService


def resolve_account(ledger: LedgerService, account: str | int) -> int:
    """Resolve an account ID, code or name to an account ID.

    Numbers are tried as IDs first, then as codes. Names match
    case-insensitively and must be unambiguous.

    Args:
        ledger: LedgerService instance
        account: Account ID, code or name

    Returns:
        Account ID

    Raises:
        NotFoundError: If no account matches
        ValidationError: If a name matches more than one account
    """
    if isinstance(account, int):
        ledger.require_account(account)
        return account

    ref = account.strip()
    if ref.isdigit() and ledger.get_account(int(ref)) is not None:
        return int(ref)

    by_code = ledger.db.get_account_by_code(ref)
    if by_code is not None:
        return by_code.id

    matches = [
        acc
        for acc in ledger.list_accounts(include_inactive=True)
        if acc.name.lower() == ref.lower()
    ]
    if len(matches) > 1:
        raise ValidationError(f"Account name '{ref}' is ambiguous; use its ID or code")
    if not matches:
        raise NotFoundError(f"Account '{ref}' not found")
    return matches[0].id
