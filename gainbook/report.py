"""Gain report builder.

Combines a symbol's ledger with a current market price and folds per-symbol
reports into portfolio totals. Totals are plain sums of money fields; the
percentage fields only exist per symbol.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from .models import GainReport, PortfolioReport, PortfolioTotals, SymbolError, SymbolLedger


def _pct(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    return numerator / denominator * 100


def build_gain_report(ledger: SymbolLedger, current_price: float) -> GainReport:
    """Value the open lots of *ledger* at *current_price*."""

    if not math.isfinite(current_price) or current_price < 0:
        raise ValueError(f"Invalid current price for {ledger.symbol}: {current_price!r}")

    remaining_shares = 0.0
    paper_cost = 0.0
    paper_gain = 0.0
    for lot in ledger.lots:
        remaining_shares += lot.shares_remaining
        paper_cost += lot.unit_price * lot.shares_remaining
        paper_gain += (current_price - lot.unit_price) * lot.shares_remaining

    market_value = current_price * remaining_shares
    cost_basis = ledger.true_cost / remaining_shares if remaining_shares > 0 else None

    return GainReport(
        symbol=ledger.symbol,
        current_price=current_price,
        remaining_shares=remaining_shares,
        market_value=market_value,
        realized_gain=ledger.realized_gain,
        realized_cost=ledger.realized_cost,
        realized_pct=_pct(ledger.realized_gain, ledger.realized_cost),
        paper_gain=paper_gain,
        paper_cost=paper_cost,
        paper_pct=_pct(paper_gain, paper_cost),
        total_gain=market_value - ledger.true_cost,
        true_cost=ledger.true_cost,
        cost_basis=cost_basis,
        sold_shares=ledger.sold_shares,
        sold_value=ledger.sold_value,
    )


def aggregate_reports(reports: Iterable[GainReport]) -> PortfolioTotals:
    """Sum the money-valued fields of *reports*."""

    realized_gain = 0.0
    paper_gain = 0.0
    total_gain = 0.0
    market_value = 0.0
    true_cost = 0.0
    realized_cost = 0.0
    paper_cost = 0.0
    count = 0
    for report in reports:
        realized_gain += report.realized_gain
        paper_gain += report.paper_gain
        total_gain += report.total_gain
        market_value += report.market_value
        true_cost += report.true_cost
        realized_cost += report.realized_cost
        paper_cost += report.paper_cost
        count += 1
    return PortfolioTotals(
        realized_gain=realized_gain,
        paper_gain=paper_gain,
        total_gain=total_gain,
        market_value=market_value,
        true_cost=true_cost,
        realized_cost=realized_cost,
        paper_cost=paper_cost,
        symbol_count=count,
    )


def build_portfolio_report(
    reports: Sequence[GainReport],
    errors: Sequence[SymbolError] = (),
) -> PortfolioReport:
    """Assemble the final report; error rows never contribute to the totals."""

    return PortfolioReport(
        reports=list(reports),
        errors=list(errors),
        totals=aggregate_reports(reports),
    )


__all__ = ["aggregate_reports", "build_gain_report", "build_portfolio_report"]
