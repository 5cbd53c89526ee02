"""Domain layer for cantina application."""

from importlib import import_module

_SERVICES = {
    "LedgerService": "cantina.domain.ledger",
    "CatalogService": "cantina.domain.catalog",
    "SettlementService": "cantina.domain.settlement",
    "Checkout": "cantina.domain.settlement",
    "ExchangeService": "cantina.domain.exchange",
    "JournalService": "cantina.domain.journal",
    "ReportService": "cantina.domain.reports",
    "BillingService": "cantina.domain.billing",
    "CashDrawerService": "cantina.domain.cash_drawer",
    "OverduePolicy": "cantina.domain.overdue",
}

__all__ = list(_SERVICES)


# Services import the database layer, which imports entities from this
# package, so they are resolved lazily
def __getattr__(name):
    if name in _SERVICES:
        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
