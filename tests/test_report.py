from __future__ import annotations

import math

import pytest

from gainbook.ledger import build_ledger
from gainbook.models import GainReport, SymbolError, Transaction
from gainbook.report import aggregate_reports, build_gain_report, build_portfolio_report


def _ledger(symbol: str, *rows: tuple[float, float]):
    transactions = [
        Transaction(symbol=symbol, shares=shares, purchase_price=price, sequence=index)
        for index, (shares, price) in enumerate(rows)
    ]
    return build_ledger(symbol, transactions)


def test_report_after_partial_sale():
    report = build_gain_report(_ledger("AAPL", (10, 5), (10, 7), (-15, 10)), 12)

    assert report.remaining_shares == pytest.approx(5)
    assert report.market_value == pytest.approx(60)
    assert report.realized_gain == pytest.approx(65)
    assert report.realized_pct == pytest.approx(65 / 85 * 100)
    assert report.paper_gain == pytest.approx(25)
    assert report.paper_cost == pytest.approx(35)
    assert report.paper_pct == pytest.approx(25 / 35 * 100)
    assert report.true_cost == pytest.approx(-30)
    assert report.total_gain == pytest.approx(90)
    assert report.cost_basis == pytest.approx(-6)
    assert report.sold_value == pytest.approx(150)


def test_total_gain_equals_realized_plus_paper():
    report = build_gain_report(_ledger("MSFT", (3, 310), (2, 330), (-4, 400), (6, 380)), 415.5)

    assert report.total_gain == pytest.approx(report.realized_gain + report.paper_gain)


def test_zero_cost_lots_produce_zero_percentages():
    report = build_gain_report(_ledger("GIFT", (10, 0)), 4)

    assert report.paper_cost == 0
    assert report.paper_pct == 0
    assert report.realized_pct == 0
    assert report.paper_gain == pytest.approx(40)
    assert not any(math.isnan(value) for value in (report.paper_pct, report.realized_pct))


def test_closed_position_has_no_cost_basis():
    report = build_gain_report(_ledger("AMD", (2, 50), (-2, 80)), 90)

    assert report.remaining_shares == 0
    assert report.market_value == 0
    assert report.paper_gain == 0
    assert report.cost_basis is None
    assert report.total_gain == pytest.approx(60)


@pytest.mark.parametrize("price", [-1.0, float("nan"), float("inf")])
def test_invalid_price_is_rejected(price):
    with pytest.raises(ValueError):
        build_gain_report(_ledger("AAPL", (1, 1)), price)


def test_aggregate_sums_money_fields_only():
    first = build_gain_report(_ledger("AAPL", (10, 5), (10, 7), (-15, 10)), 12)
    second = build_gain_report(_ledger("MSFT", (2, 100)), 150)

    totals = aggregate_reports([first, second])

    assert totals.symbol_count == 2
    assert totals.realized_gain == pytest.approx(65)
    assert totals.paper_gain == pytest.approx(25 + 100)
    assert totals.market_value == pytest.approx(60 + 300)
    assert totals.true_cost == pytest.approx(-30 + 200)
    assert totals.total_gain == pytest.approx(90 + 100)
    assert totals.paper_cost == pytest.approx(35 + 200)


def test_portfolio_report_excludes_error_rows_from_totals():
    report: GainReport = build_gain_report(_ledger("AAPL", (1, 10)), 11)
    error = SymbolError(symbol="ZZZZ", message="No data returned for ZZZZ")

    portfolio = build_portfolio_report([report], [error])

    assert portfolio.errors == [error]
    assert portfolio.totals.symbol_count == 1
    assert portfolio.totals.total_gain == pytest.approx(1)


def test_empty_portfolio_totals_are_zero():
    portfolio = build_portfolio_report([])

    assert portfolio.reports == []
    assert portfolio.errors == []
    assert portfolio.totals.total_gain == 0
    assert portfolio.totals.symbol_count == 0
