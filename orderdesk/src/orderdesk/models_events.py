"""Event schema definitions and normalisation helpers.

This module defines the raw shapes of the messages pushed by the
market-data and account collaborators and the payload the order
session publishes on every state change.  The normalisation helpers
coerce loosely typed input (numbers as strings, levels as pairs or
dicts) into the domain models and raise :class:`ValueError` if required
keys are missing.  Invalid numbers surface as pydantic validation
errors, which are also ``ValueError`` subclasses.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, TypedDict

from .models import BalanceSnapshot, OrderBookSnapshot, levels_from_pairs


class TickerEvent(TypedDict):
    """Schema for a last-trade price update.

    Required keys:

    * ``price`` (str or float): The last traded price.
    """

    price: Any


class BookEvent(TypedDict):
    """Schema for a full order book replacement.

    Required keys:

    * ``bids`` (list): ``[price, size]`` pairs or ``{"price", "size"}`` dicts.
    * ``asks`` (list): Same shape as ``bids``.
    """

    bids: List[Any]
    asks: List[Any]


class BalanceEvent(TypedDict, total=False):
    """Schema for an account balance update.

    Optional keys (missing ones default to zero):

    * ``base_available`` (str or float)
    * ``quote_available`` (str or float)
    """

    base_available: Any
    quote_available: Any


class SubmissionEvent(TypedDict):
    """Payload published on the ``submission_state`` topic."""

    status: str
    order_id: Optional[str]
    reason: Optional[str]
    errors: List[dict]


def normalize_ticker_event(msg: Any) -> Optional[Any]:
    """Extract the price from a ticker message.

    Returns the raw price value; ``None`` if the feed explicitly reports
    no price.

    Raises
    ------
    ValueError
        If ``price`` is missing from the message.
    """
    if not isinstance(msg, Mapping) or "price" not in msg:
        raise ValueError("Ticker message missing required key 'price'")
    return msg["price"]


def normalize_book_event(msg: Any) -> OrderBookSnapshot:
    """Normalise an order book message into an :class:`OrderBookSnapshot`.

    Raises
    ------
    ValueError
        If ``bids`` or ``asks`` is missing, or a level is malformed.
    """
    if not isinstance(msg, Mapping) or "bids" not in msg or "asks" not in msg:
        raise ValueError("Book message missing required keys 'bids' and 'asks'")
    try:
        bids = levels_from_pairs(msg["bids"])
        asks = levels_from_pairs(msg["asks"])
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Malformed book level: {exc}") from exc
    return OrderBookSnapshot(bids=bids, asks=asks)


def normalize_balance_event(msg: Any) -> BalanceSnapshot:
    """Normalise a balance message into a :class:`BalanceSnapshot`."""
    if not isinstance(msg, Mapping):
        raise ValueError("Balance message must be a mapping")
    fields = {}
    for key in ("base_available", "quote_available"):
        if msg.get(key) is not None:
            fields[key] = str(msg[key])
    return BalanceSnapshot(**fields)
