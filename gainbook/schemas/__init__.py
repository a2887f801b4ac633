"""Pydantic schema exports."""

from .transactions import StoredTransactionSchema, TransactionCreateRequest

__all__ = ["StoredTransactionSchema", "TransactionCreateRequest"]
