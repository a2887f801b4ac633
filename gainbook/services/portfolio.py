"""Portfolio operations over a transaction collection.

These functions are the entry points used by a UI layer: manual entry,
removal, delimited-text import/export and the gain calculation itself.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Sequence, Union

from opentelemetry import trace

from gainbook.config import GainbookSettings, get_settings
from gainbook.ledger import build_ledgers
from gainbook.models import GainReport, PortfolioReport, SymbolError, SymbolLedger, Transaction
from gainbook.normalizer import format_transactions, parse_transactions
from gainbook.providers.price_service import PriceServiceClient, PriceServiceError, PriceSource
from gainbook.report import build_gain_report, build_portfolio_report
from gainbook.schemas import TransactionCreateRequest

from .store import TransactionStore

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

TransactionSource = Union[TransactionStore, Sequence[Transaction]]


def _load(source: TransactionSource) -> list[Transaction]:
    if hasattr(source, "load"):
        return source.load()  # type: ignore[union-attr]
    return list(source)  # type: ignore[arg-type]


def add_transaction(
    store: TransactionStore,
    request: TransactionCreateRequest | Mapping[str, Any],
) -> Transaction:
    """Validate a manually entered transaction and append it to *store*."""

    if not isinstance(request, TransactionCreateRequest):
        request = TransactionCreateRequest.model_validate(request)
    transactions = store.load()
    transaction = request.to_transaction(sequence=len(transactions))
    transactions.append(transaction)
    store.save(transactions)
    return transaction


def remove_transaction(store: TransactionStore, index: int) -> Transaction:
    transactions = store.load()
    if index < 0 or index >= len(transactions):
        raise ValueError(f"No transaction at index {index}")
    removed = transactions.pop(index)
    store.save(transactions)
    return removed


def list_transactions(store: TransactionStore) -> list[str]:
    return [tx.describe() for tx in store.load()]


def import_transactions(
    store: TransactionStore,
    text: str,
    *,
    settings: GainbookSettings | None = None,
) -> int:
    """Normalize *text* and append the result to *store*; return the row count."""

    settings = settings or get_settings()
    existing = store.load()
    imported = parse_transactions(
        text,
        sell_keywords=settings.sell_action_keywords,
        start_sequence=len(existing),
    )
    if not imported:
        logger.info("No valid transactions found in import payload")
        return 0
    store.save(existing + imported)
    logger.info("Imported %d transactions", len(imported))
    return len(imported)


def export_transactions(store: TransactionStore) -> str:
    return format_transactions(store.load())


async def _evaluate_symbol(
    symbol: str,
    ledger: SymbolLedger,
    price_source: PriceSource,
    semaphore: asyncio.Semaphore | None,
) -> GainReport | SymbolError:
    try:
        if semaphore is not None:
            async with semaphore:
                price = await price_source.get_latest_price(symbol)
        else:
            price = await price_source.get_latest_price(symbol)
        return build_gain_report(ledger, price)
    except (PriceServiceError, ValueError) as exc:
        logger.warning("Error fetching data for %s: %s", symbol, exc)
        return SymbolError(symbol=symbol, message=str(exc))
    except Exception as exc:  # noqa: BLE001 - one symbol never aborts the batch
        logger.warning("Unexpected error fetching data for %s", symbol, exc_info=True)
        return SymbolError(symbol=symbol, message=str(exc) or type(exc).__name__)


async def calculate_gains(
    source: TransactionSource,
    price_source: PriceSource | None = None,
    *,
    settings: GainbookSettings | None = None,
) -> PortfolioReport:
    """Build per-symbol gain reports and portfolio totals.

    Ledgers are computed up front; price lookups for all symbols then run
    concurrently and the totals are folded only once every lookup settled.
    A failed lookup turns that symbol into an error row.
    """

    settings = settings or get_settings()
    transactions = _load(source)
    if price_source is None:
        price_source = PriceServiceClient(
            settings.price_service_url,
            price_field=settings.price_field,
            token=settings.price_service_token,
            timeout_seconds=settings.price_service_timeout_seconds,
        )

    with tracer.start_as_current_span("gainbook.calculate_gains") as span:
        ledgers = build_ledgers(transactions)
        span.set_attribute("gainbook.transaction_count", len(transactions))
        span.set_attribute("gainbook.symbol_count", len(ledgers))
        if not ledgers:
            return build_portfolio_report([])

        semaphore = (
            asyncio.Semaphore(settings.price_max_concurrency)
            if settings.price_max_concurrency > 0
            else None
        )
        results = await asyncio.gather(
            *(
                _evaluate_symbol(symbol, ledger, price_source, semaphore)
                for symbol, ledger in ledgers.items()
            )
        )

        reports = [result for result in results if isinstance(result, GainReport)]
        errors = [result for result in results if isinstance(result, SymbolError)]
        span.set_attribute("gainbook.error_count", len(errors))
        logger.info(
            "Calculated gains for %d symbols (%d errors)", len(reports), len(errors)
        )
        return build_portfolio_report(reports, errors)


__all__ = [
    "add_transaction",
    "calculate_gains",
    "export_transactions",
    "import_transactions",
    "list_transactions",
    "remove_transaction",
]
