"""
Domain models for order entry and order book depth using Pydantic.
These models provide validation for orders, balances and book levels.
Anything that reaches the core as one of these types already satisfies
its field constraints; malformed prices or sizes are rejected at
construction rather than deep inside aggregation.

The one exception is :class:`OrderDraft`, which holds raw form input
and is deliberately permissive.  It only becomes trustworthy once the
validator turns it into a :class:`ValidatedOrder`.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Fractional digits every base asset amount is rounded to.
ASSET_PRECISION = 8
ASSET_QUANTUM = Decimal(1).scaleb(-ASSET_PRECISION)


class OrderType(str, Enum):
    MARKET = "market"
    LIMIT = "limit"


class Side(str, Enum):
    BUY = "buy"
    SELL = "sell"


class BookSide(str, Enum):
    BID = "bid"
    ASK = "ask"


RawNumber = Union[str, int, float, Decimal, None]


@dataclass
class OrderDraft:
    """An order under construction, exactly as the user typed it.

    ``amount`` and ``limit_price`` are kept raw (strings, numbers or
    ``None``) so the form can hold half-typed values between edits.
    """

    order_type: OrderType = OrderType.LIMIT
    side: Side = Side.BUY
    amount: RawNumber = None
    limit_price: RawNumber = None


def _finite(value: Decimal) -> Decimal:
    if not value.is_finite():
        raise ValueError("value must be finite")
    return value


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ValidatedOrder(_Frozen):
    """An order that passed every validation rule."""

    order_type: OrderType
    side: Side
    amount: Decimal = Field(..., gt=0, description="Order quantity in base asset")
    limit_price: Optional[Decimal] = Field(None, gt=0, description="Limit price in quote asset")

    @field_validator("amount", "limit_price")
    @classmethod
    def _check_finite(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return value if value is None else _finite(value)

    @model_validator(mode="after")
    def _limit_price_matches_type(self) -> "ValidatedOrder":
        if self.order_type is OrderType.LIMIT and self.limit_price is None:
            raise ValueError("limit orders require a limit price")
        if self.order_type is OrderType.MARKET and self.limit_price is not None:
            raise ValueError("market orders carry no limit price")
        return self


class OrderAck(_Frozen):
    """Acknowledgement returned by the execution collaborator."""

    order_id: str


class BalanceSnapshot(_Frozen):
    base_available: Decimal = Field(Decimal(0), ge=0)
    quote_available: Decimal = Field(Decimal(0), ge=0)

    @field_validator("base_available", "quote_available")
    @classmethod
    def _check_finite(cls, value: Decimal) -> Decimal:
        return _finite(value)


class BookLevel(_Frozen):
    """A single raw price/size pair on one side of the book."""

    price: Decimal = Field(..., gt=0)
    size: Decimal = Field(..., gt=0)

    @field_validator("price", "size")
    @classmethod
    def _check_finite(cls, value: Decimal) -> Decimal:
        return _finite(value)


class AggregatedLevel(BookLevel):
    """A book level enriched with its running depth.

    Only :func:`orderdesk.book.aggregate` builds these.
    """

    cumulative_size: Decimal = Field(..., ge=0)
    depth_ratio: Decimal = Field(..., ge=0, le=1)


class OrderBookSnapshot(_Frozen):
    """Both sides of the book as delivered by market data (unsorted)."""

    bids: List[BookLevel] = Field(default_factory=list)
    asks: List[BookLevel] = Field(default_factory=list)


def levels_from_pairs(pairs: Any) -> List[BookLevel]:
    """Build levels from ``[(price, size), ...]`` or ``[{"price", "size"}, ...]``."""
    levels: List[BookLevel] = []
    for pair in pairs:
        if isinstance(pair, BookLevel):
            levels.append(pair)
        elif isinstance(pair, dict):
            levels.append(BookLevel(price=str(pair["price"]), size=str(pair["size"])))
        else:
            price, size = pair
            levels.append(BookLevel(price=str(price), size=str(size)))
    return levels
