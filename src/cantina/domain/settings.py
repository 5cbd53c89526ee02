"""Point-of-sale feature flags.

Settings are owned by the caller and handed to each service; nothing in
cantina persists them.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from cantina.domain.entities import PaymentMethod
from cantina.domain.errors import ValidationError

ENV_PREFIX = "CANTINA_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_bool(value: str, name: str) -> bool:
    """Parse an environment flag value."""
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValidationError(f"Invalid boolean for {name}: '{value}'")


@dataclass(frozen=True)
class PaymentMethods:
    """Which payment methods the counter accepts."""

    money: bool = True
    credit_card: bool = True
    debit_card: bool = True
    pix: bool = True
    student_account: bool = True

    def is_enabled(self, method: PaymentMethod) -> bool:
        flags = {
            PaymentMethod.MONEY: self.money,
            PaymentMethod.CREDIT: self.credit_card,
            PaymentMethod.DEBIT: self.debit_card,
            PaymentMethod.PIX: self.pix,
            PaymentMethod.ACCOUNT: self.student_account,
            PaymentMethod.MIXED: True,
        }
        return flags[method]


@dataclass(frozen=True)
class PosSettings:
    """Feature configuration consumed by the ledger core.

    Attributes:
        allow_negative_balance: Accounts may be charged below zero (credit sales)
        enforce_stock_limit: Carts may not exceed known product stock
        block_overdue_students: Overdue accounts cannot be charged
        max_overdue_days: Days a balance may stay negative before blocking
        enable_loyalty_system: Account-linked sales earn points
        school_name: Name used in collection messages
        payment_methods: Enabled payment methods
    """

    allow_negative_balance: bool = True
    enforce_stock_limit: bool = False
    block_overdue_students: bool = False
    max_overdue_days: int = 30
    enable_loyalty_system: bool = False
    school_name: str = "School Canteen"
    payment_methods: PaymentMethods = field(default_factory=PaymentMethods)

    def __post_init__(self):
        if self.max_overdue_days < 0:
            raise ValidationError("max_overdue_days must not be negative")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PosSettings":
        """Build settings from CANTINA_* environment variables.

        Unset variables keep their defaults.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            PosSettings instance

        Raises:
            ValidationError: If a variable holds an unparseable value
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def flag(name: str, default: bool) -> bool:
            key = ENV_PREFIX + name
            if key not in env:
                return default
            return parse_bool(env[key], key)

        max_days = defaults.max_overdue_days
        key = ENV_PREFIX + "MAX_OVERDUE_DAYS"
        if key in env:
            try:
                max_days = int(env[key])
            except ValueError:
                raise ValidationError(f"Invalid integer for {key}: '{env[key]}'")

        methods = PaymentMethods(
            money=flag("PAY_MONEY", True),
            credit_card=flag("PAY_CREDIT_CARD", True),
            debit_card=flag("PAY_DEBIT_CARD", True),
            pix=flag("PAY_PIX", True),
            student_account=flag("PAY_ACCOUNT", True),
        )

        return cls(
            allow_negative_balance=flag("ALLOW_NEGATIVE_BALANCE", defaults.allow_negative_balance),
            enforce_stock_limit=flag("ENFORCE_STOCK_LIMIT", defaults.enforce_stock_limit),
            block_overdue_students=flag("BLOCK_OVERDUE_STUDENTS", defaults.block_overdue_students),
            max_overdue_days=max_days,
            enable_loyalty_system=flag("ENABLE_LOYALTY_SYSTEM", defaults.enable_loyalty_system),
            school_name=env.get(ENV_PREFIX + "SCHOOL_NAME", defaults.school_name),
            payment_methods=methods,
        )
