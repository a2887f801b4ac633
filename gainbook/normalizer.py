"""Transaction normalizer for delimited-text imports.

Two row layouts are recognised and resolved once per row:

* ``NATIVE`` - exactly three fields ``symbol,shares,purchasePrice`` in
  chronological order (the export format of this package).
* ``BROKER`` - brokerage account-history rows with at least seven fields:
  run date, action, symbol, ..., quantity, price. Statements list the newest
  activity first, so each contiguous block of broker rows is reversed.

Rows that do not match a layout or fail validation are skipped; a malformed
row never aborts the batch.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import replace
from datetime import date, datetime
from enum import Enum
from itertools import groupby
from typing import Iterable, List, Optional, Sequence

from .models import Transaction, format_number

logger = logging.getLogger(__name__)

DEFAULT_SELL_KEYWORDS: tuple[str, ...] = ("SOLD",)

_LINE_SPLIT = re.compile(r"\r\n|\n")
_RUN_DATE = re.compile(r"^(\d{2}/\d{2}/\d{4})")

_NATIVE_FIELD_COUNT = 3
_BROKER_MIN_FIELDS = 7
_BROKER_ACTION = 1
_BROKER_SYMBOL = 2
_BROKER_QUANTITY = 5
_BROKER_PRICE = 6


class RowLayout(str, Enum):
    NATIVE = "NATIVE"
    BROKER = "BROKER"


def split_csv_line(line: str, separator: str = ",") -> list[str]:
    """Split one line into trimmed fields, honouring double-quoted sections.

    A quote toggles the in-quotes state and is not kept; the separator only
    ends a field outside quotes. A trailing empty field is not emitted.
    """

    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == separator and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    if current:
        fields.append("".join(current).strip())
    return fields


def detect_layout(fields: Sequence[str]) -> Optional[RowLayout]:
    """Return the layout of a tokenised row, or ``None`` when unrecognised."""

    if len(fields) == _NATIVE_FIELD_COUNT:
        return RowLayout.NATIVE
    if len(fields) >= _BROKER_MIN_FIELDS and _RUN_DATE.match(fields[0]):
        return RowLayout.BROKER
    return None


def _parse_number(raw: str) -> Optional[float]:
    cleaned = raw.strip().replace(",", "")
    if cleaned.startswith("$"):
        cleaned = cleaned[1:]
    elif cleaned.startswith("-$"):
        cleaned = "-" + cleaned[2:]
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def _parse_run_date(raw: str) -> Optional[date]:
    match = _RUN_DATE.match(raw)
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), "%m/%d/%Y").date()
    except ValueError:
        return None


def _build(
    symbol_raw: str,
    quantity_raw: str,
    price_raw: str,
) -> Optional[tuple[str, float, float]]:
    symbol = symbol_raw.strip().upper()
    quantity = _parse_number(quantity_raw)
    price = _parse_number(price_raw)
    if not symbol or quantity is None or price is None:
        return None
    if price < 0 or quantity == 0:
        return None
    return symbol, quantity, price


def _parse_row(
    fields: Sequence[str],
    layout: RowLayout,
    sell_keywords: Sequence[str],
) -> Optional[Transaction]:
    if layout is RowLayout.NATIVE:
        parsed = _build(fields[0], fields[1], fields[2])
        if parsed is None:
            return None
        symbol, shares, price = parsed
        return Transaction(symbol=symbol, shares=shares, purchase_price=price)

    parsed = _build(fields[_BROKER_SYMBOL], fields[_BROKER_QUANTITY], fields[_BROKER_PRICE])
    if parsed is None:
        return None
    symbol, quantity, price = parsed
    action = fields[_BROKER_ACTION].upper()
    if any(keyword in action for keyword in sell_keywords):
        shares = -abs(quantity)
    else:
        shares = abs(quantity)
    return Transaction(
        symbol=symbol,
        shares=shares,
        purchase_price=price,
        trade_date=_parse_run_date(fields[0]),
    )


def _iter_rows(
    text: str,
    sell_keywords: Sequence[str],
) -> Iterable[tuple[RowLayout, Transaction]]:
    for line_no, raw_line in enumerate(_LINE_SPLIT.split(text), start=1):
        line = raw_line.strip()
        if not line:
            continue
        fields = split_csv_line(line)
        layout = detect_layout(fields)
        if layout is None:
            logger.debug("Skipping line %d: unrecognised layout (%d fields)", line_no, len(fields))
            continue
        transaction = _parse_row(fields, layout, sell_keywords)
        if transaction is None:
            logger.debug("Skipping line %d: invalid %s row", line_no, layout.value)
            continue
        yield layout, transaction


def parse_transactions(
    text: str,
    *,
    sell_keywords: Sequence[str] = DEFAULT_SELL_KEYWORDS,
    start_sequence: int = 0,
) -> List[Transaction]:
    """Normalize raw import text into chronologically ordered transactions.

    Sequence numbers are assigned after broker blocks are reversed, starting
    at *start_sequence*. Returns an empty list if nothing is recognised.
    """

    keywords = tuple(keyword.upper() for keyword in sell_keywords)
    ordered: list[Transaction] = []
    for layout, block in groupby(_iter_rows(text, keywords), key=lambda item: item[0]):
        rows = [transaction for _, transaction in block]
        if layout is RowLayout.BROKER:
            rows.reverse()
        ordered.extend(rows)

    return [replace(tx, sequence=start_sequence + offset) for offset, tx in enumerate(ordered)]


def format_transactions(transactions: Iterable[Transaction]) -> str:
    """Render transactions in the native ``symbol,shares,purchasePrice`` layout."""

    return "\n".join(
        f"{tx.symbol},{format_number(tx.shares)},{format_number(tx.purchase_price)}"
        for tx in transactions
    )


__all__ = [
    "DEFAULT_SELL_KEYWORDS",
    "RowLayout",
    "detect_layout",
    "format_transactions",
    "parse_transactions",
    "split_csv_line",
]
