"""
Latest market and account state for an order desk.

``MarketState`` holds the most recent order book, last trade price and
balances.  Each is replaced wholesale when an update arrives and never
modified in place, so readers holding an older snapshot keep a
consistent view.  Order sessions read the current values through the
properties at the moment they need them instead of caching them.

Updates can be applied directly (``apply_*``) or consumed from an event
bus with :meth:`MarketState.run`.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Any, Optional

from ..book import AggregatedBook, DepthNormalization, aggregate_snapshot
from ..models import BalanceSnapshot, OrderBookSnapshot
from ..models_events import normalize_balance_event, normalize_book_event, normalize_ticker_event
from ..telemetry import BOOK_SPREAD
from ..validator import parse_decimal

logger = logging.getLogger(__name__)


class MarketState:
    """Most recent book, price and balances for one trading pair."""

    def __init__(
        self,
        book: Optional[OrderBookSnapshot] = None,
        last_price: Any = None,
        balances: Optional[BalanceSnapshot] = None,
    ) -> None:
        self._book = book or OrderBookSnapshot()
        self._last_price: Optional[Decimal] = parse_decimal(last_price)
        self._balances = balances or BalanceSnapshot()

    @property
    def book(self) -> OrderBookSnapshot:
        return self._book

    @property
    def last_price(self) -> Optional[Decimal]:
        return self._last_price

    @property
    def balances(self) -> BalanceSnapshot:
        return self._balances

    def apply_ticker(self, msg: Any) -> Optional[Decimal]:
        price = parse_decimal(normalize_ticker_event(msg))
        if price is not None and price <= 0:
            price = None
        self._last_price = price
        return price

    def apply_book(self, msg: Any) -> OrderBookSnapshot:
        if isinstance(msg, OrderBookSnapshot):
            snapshot = msg
        else:
            snapshot = normalize_book_event(msg)
        self._book = snapshot
        return snapshot

    def apply_balances(self, msg: Any) -> BalanceSnapshot:
        if isinstance(msg, BalanceSnapshot):
            snapshot = msg
        else:
            snapshot = normalize_balance_event(msg)
        self._balances = snapshot
        return snapshot

    def aggregated_book(
        self,
        max_rows: Optional[int] = None,
        normalization: DepthNormalization = DepthNormalization.MAX,
    ) -> AggregatedBook:
        """Aggregate the current book and record its spread."""
        book = aggregate_snapshot(self._book, max_rows, normalization)
        if book.spread is not None:
            BOOK_SPREAD.set(float(book.spread))
        return book

    async def _consume(self, event_bus: Any, event_type: str, apply) -> None:
        async for message in event_bus.subscribe(event_type):
            try:
                apply(message)
            except ValueError as exc:
                logger.warning("Dropping malformed %s message: %s", event_type, exc)

    async def run(self, event_bus: Any) -> None:
        """Consume ``ticker``, ``book`` and ``balances`` events forever."""
        if event_bus is None:
            logger.error("MarketState.run requires an event bus")
            return
        await asyncio.gather(
            self._consume(event_bus, "ticker", self.apply_ticker),
            self._consume(event_bus, "book", self.apply_book),
            self._consume(event_bus, "balances", self.apply_balances),
        )
