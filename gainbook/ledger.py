"""FIFO lot ledger: turns an ordered transaction sequence into realized gains."""
from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, Iterable, List, Sequence

from .models import Lot, SymbolLedger, Transaction

logger = logging.getLogger(__name__)

# Share quantities closer than this are treated as equal.
_EPSILON = 1e-9


class LedgerOrderError(ValueError):
    """Raised when transactions reach the ledger out of chronological order."""


def group_by_symbol(transactions: Iterable[Transaction]) -> Dict[str, List[Transaction]]:
    """Group transactions by symbol, keeping first-appearance and list order."""

    grouped: Dict[str, List[Transaction]] = {}
    for tx in transactions:
        grouped.setdefault(tx.symbol, []).append(tx)
    return grouped


def _check_order(symbol: str, transactions: Sequence[Transaction]) -> None:
    previous: int | None = None
    for tx in transactions:
        if tx.symbol != symbol:
            raise ValueError(f"Ledger for {symbol} received a {tx.symbol} transaction")
        if previous is not None and tx.sequence < previous:
            raise LedgerOrderError(
                f"Transaction sequence {tx.sequence} for {symbol} precedes {previous}"
            )
        previous = tx.sequence


def _consume(lots: Deque[Lot], quantity: float, sale_price: float) -> tuple[float, float]:
    """Take *quantity* shares from the head of *lots*; return (gain, cost)."""

    gain = 0.0
    cost = 0.0
    remaining = quantity
    while remaining > _EPSILON and lots:
        lot = lots[0]
        if lot.shares_remaining <= remaining + _EPSILON:
            taken = lot.shares_remaining
            lots.popleft()
        else:
            taken = remaining
            lot.shares_remaining -= taken
        gain += (sale_price - lot.unit_price) * taken
        cost += lot.unit_price * taken
        remaining -= taken
    return gain, cost


def build_ledger(symbol: str, transactions: Sequence[Transaction]) -> SymbolLedger:
    """Run FIFO matching over one symbol's chronologically ordered transactions.

    Sells that exceed the shares held in open lots are oversells: they are
    rejected as a whole and leave every figure untouched.
    """

    _check_order(symbol, transactions)
    ledger = SymbolLedger(symbol=symbol)

    for tx in transactions:
        price = tx.purchase_price
        if tx.shares > 0:
            ledger.lots.append(Lot(shares_remaining=tx.shares, unit_price=price, sequence=tx.sequence))
            ledger.true_cost += tx.shares * price
        elif tx.shares < 0:
            quantity = abs(tx.shares)
            available = ledger.remaining_shares
            if available + _EPSILON < quantity:
                logger.warning(
                    "Skipping oversell of %s %s shares at sequence %s (%s held)",
                    quantity,
                    symbol,
                    tx.sequence,
                    available,
                )
                ledger.skipped_sequences.append(tx.sequence)
                continue
            gain, cost = _consume(ledger.lots, quantity, price)
            ledger.realized_gain += gain
            ledger.realized_cost += cost
            ledger.sold_shares += quantity
            ledger.sold_value += quantity * price
            ledger.true_cost -= quantity * price

    return ledger


def build_ledgers(transactions: Iterable[Transaction]) -> Dict[str, SymbolLedger]:
    """Build one independent ledger per symbol from a mixed transaction list."""

    return {
        symbol: build_ledger(symbol, symbol_transactions)
        for symbol, symbol_transactions in group_by_symbol(transactions).items()
    }


__all__ = [
    "LedgerOrderError",
    "build_ledger",
    "build_ledgers",
    "group_by_symbol",
]
