"""Portfolio services backed by a transaction collection."""

from .portfolio import (
    add_transaction,
    calculate_gains,
    export_transactions,
    import_transactions,
    list_transactions,
    remove_transaction,
)
from .store import (
    InMemoryTransactionStore,
    JsonFileTransactionStore,
    TransactionStore,
    get_transaction_store,
)

__all__ = [
    "InMemoryTransactionStore",
    "JsonFileTransactionStore",
    "TransactionStore",
    "add_transaction",
    "calculate_gains",
    "export_transactions",
    "get_transaction_store",
    "import_transactions",
    "list_transactions",
    "remove_transaction",
]
