"""Pydantic schemas for manual transaction entry and stored records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gainbook.models import Transaction


def _normalize_symbol(value: str) -> str:
    normalized = value.strip().upper()
    if not normalized:
        raise ValueError("symbol must not be empty")
    return normalized


def _nonzero_shares(value: float) -> float:
    if value == 0:
        raise ValueError("shares must not be zero")
    return value


class TransactionCreateRequest(BaseModel):
    """A transaction typed in by hand; rejected before it reaches the engine."""

    model_config = ConfigDict(populate_by_name=True)

    symbol: str = Field(..., examples=["AAPL"])
    shares: float = Field(
        ...,
        allow_inf_nan=False,
        description="Positive for a buy, negative for a sell",
        examples=[10, -5],
    )
    purchase_price: float = Field(
        ...,
        alias="purchasePrice",
        ge=0,
        allow_inf_nan=False,
        examples=[187.5],
    )

    @field_validator("symbol")
    @classmethod
    def _symbol(cls, value: str) -> str:
        return _normalize_symbol(value)

    @field_validator("shares")
    @classmethod
    def _shares(cls, value: float) -> float:
        return _nonzero_shares(value)

    def to_transaction(self, sequence: int = 0) -> Transaction:
        return Transaction(
            symbol=self.symbol,
            shares=self.shares,
            purchase_price=self.purchase_price,
            sequence=sequence,
        )


class StoredTransactionSchema(BaseModel):
    """On-disk record shape: ``{symbol, shares, purchasePrice}``."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": {"symbol": "AAPL", "shares": 10, "purchasePrice": 187.5}},
    )

    symbol: str
    shares: float = Field(..., allow_inf_nan=False)
    purchase_price: float = Field(..., alias="purchasePrice", ge=0, allow_inf_nan=False)

    @field_validator("symbol")
    @classmethod
    def _symbol(cls, value: str) -> str:
        return _normalize_symbol(value)

    @field_validator("shares")
    @classmethod
    def _shares(cls, value: float) -> float:
        return _nonzero_shares(value)

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "StoredTransactionSchema":
        return cls(
            symbol=transaction.symbol,
            shares=transaction.shares,
            purchase_price=transaction.purchase_price,
        )

    def to_transaction(self, sequence: int) -> Transaction:
        return Transaction(
            symbol=self.symbol,
            shares=self.shares,
            purchase_price=self.purchase_price,
            sequence=sequence,
        )


__all__ = ["StoredTransactionSchema", "TransactionCreateRequest"]
