"""Transaction collection adapters.

The engine only needs to list the stored transactions and to replace the whole
collection. Sequence numbers are not stored; they are rebuilt from list
position every time the collection is loaded.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, List, Protocol, Sequence

from pydantic import ValidationError

from gainbook.config import DEFAULT_COLLECTION, GainbookSettings, get_settings
from gainbook.models import Transaction
from gainbook.schemas import StoredTransactionSchema

logger = logging.getLogger(__name__)


class TransactionStore(Protocol):
    def load(self) -> List[Transaction]:
        ...

    def save(self, transactions: Sequence[Transaction]) -> None:
        ...


def _renumber(transactions: Sequence[Transaction]) -> List[Transaction]:
    return [replace(tx, sequence=position) for position, tx in enumerate(transactions)]


class InMemoryTransactionStore:
    """Minimal in-memory transaction collection."""

    def __init__(self, transactions: Sequence[Transaction] = ()):
        self._transactions: list[Transaction] = list(transactions)

    def load(self) -> List[Transaction]:
        return _renumber(self._transactions)

    def save(self, transactions: Sequence[Transaction]) -> None:
        self._transactions = list(transactions)


class JsonFileTransactionStore:
    """Keeps the collection under one key of a JSON document on disk.

    Other keys in the document are preserved when the collection is replaced.
    """

    def __init__(self, path: str | Path, collection: str = DEFAULT_COLLECTION):
        self.path = Path(path)
        self.collection = collection

    def _read_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        payload = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(payload, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return payload

    def load(self) -> List[Transaction]:
        records = self._read_document().get(self.collection, [])
        transactions: list[Transaction] = []
        for record in records:
            try:
                stored = StoredTransactionSchema.model_validate(record)
            except ValidationError as exc:
                logger.warning("Ignoring invalid stored transaction %r: %s", record, exc)
                continue
            transactions.append(stored.to_transaction(sequence=len(transactions)))
        return transactions

    def save(self, transactions: Sequence[Transaction]) -> None:
        document = self._read_document()
        document[self.collection] = [
            StoredTransactionSchema.from_transaction(tx).model_dump(by_alias=True)
            for tx in transactions
        ]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Readers only ever see the old or the new document
        staging = self.path.with_name(f".{self.path.name}.tmp")
        staging.write_text(json.dumps(document, indent=2), encoding="utf-8")
        staging.replace(self.path)


def get_transaction_store(settings: GainbookSettings | None = None) -> JsonFileTransactionStore:
    """Return the JSON file store named by the configured path and collection."""

    settings = settings or get_settings()
    return JsonFileTransactionStore(settings.store_path, settings.transactions_collection)


__all__ = [
    "InMemoryTransactionStore",
    "JsonFileTransactionStore",
    "TransactionStore",
    "get_transaction_store",
]
