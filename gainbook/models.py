"""Domain models used by the gainbook lot-accounting engine."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import date
from typing import Deque, List, Optional


@dataclass(frozen=True)
class Transaction:
    """A normalized buy or sell event.

    ``shares`` is signed: positive for a buy, negative for a sell. ``sequence``
    carries the chronological position assigned at ingestion time.
    """

    symbol: str
    shares: float
    purchase_price: float
    sequence: int = 0
    trade_date: Optional[date] = None

    @property
    def is_buy(self) -> bool:
        return self.shares > 0

    @property
    def is_sell(self) -> bool:
        return self.shares < 0

    def describe(self) -> str:
        """Return the one-line summary shown in transaction lists."""

        operation = "buy" if self.shares >= 0 else "sell"
        return (
            f"{self.symbol} - {operation} {format_number(abs(self.shares))} shares "
            f"@ ${self.purchase_price:.2f}"
        )


@dataclass
class Lot:
    """Open purchase lot owned by a single symbol's ledger."""

    shares_remaining: float
    unit_price: float
    sequence: int = 0

    @property
    def cost_total(self) -> float:
        return self.shares_remaining * self.unit_price


@dataclass
class SymbolLedger:
    """Result of running FIFO matching over one symbol's transactions."""

    symbol: str
    lots: Deque[Lot] = field(default_factory=deque)
    realized_gain: float = 0.0
    realized_cost: float = 0.0
    sold_shares: float = 0.0
    sold_value: float = 0.0
    true_cost: float = 0.0
    skipped_sequences: List[int] = field(default_factory=list)

    @property
    def remaining_shares(self) -> float:
        return sum(lot.shares_remaining for lot in self.lots)

    @property
    def open_cost(self) -> float:
        return sum(lot.cost_total for lot in self.lots)


@dataclass(frozen=True)
class GainReport:
    """Per-symbol gain snapshot against a current market price."""

    symbol: str
    current_price: float
    remaining_shares: float
    market_value: float
    realized_gain: float
    realized_cost: float
    realized_pct: float
    paper_gain: float
    paper_cost: float
    paper_pct: float
    total_gain: float
    true_cost: float
    cost_basis: Optional[float]
    sold_shares: float
    sold_value: float


@dataclass(frozen=True)
class SymbolError:
    """Error row for a symbol whose report could not be produced."""

    symbol: str
    message: str


@dataclass(frozen=True)
class PortfolioTotals:
    """Money-valued sums across every successfully reported symbol."""

    realized_gain: float = 0.0
    paper_gain: float = 0.0
    total_gain: float = 0.0
    market_value: float = 0.0
    true_cost: float = 0.0
    realized_cost: float = 0.0
    paper_cost: float = 0.0
    symbol_count: int = 0


@dataclass(frozen=True)
class PortfolioReport:
    reports: List[GainReport]
    errors: List[SymbolError]
    totals: PortfolioTotals


def format_number(value: float) -> str:
    """Render integral values without a fractional part."""

    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
