"""Core package for the gainbook lot-accounting engine."""

from .ledger import LedgerOrderError, build_ledger, build_ledgers
from .models import (
    GainReport,
    Lot,
    PortfolioReport,
    PortfolioTotals,
    SymbolError,
    SymbolLedger,
    Transaction,
)
from .normalizer import format_transactions, parse_transactions
from .report import aggregate_reports, build_gain_report, build_portfolio_report

__all__ = [
    "GainReport",
    "LedgerOrderError",
    "Lot",
    "PortfolioReport",
    "PortfolioTotals",
    "SymbolError",
    "SymbolLedger",
    "Transaction",
    "aggregate_reports",
    "build_gain_report",
    "build_ledger",
    "build_ledgers",
    "build_portfolio_report",
    "format_transactions",
    "parse_transactions",
]
