"""Utility functions for cantina."""

from cantina.utils.date_parser import parse_date
from cantina.utils.amount_parser import parse_amount
from cantina.utils.account_resolver import resolve_account

__all__ = ["parse_date", "parse_amount", "resolve_account"]
