"""Tests for the MarketState service.

MarketState replaces its book, price and balances wholesale on every
update.  These tests check the direct ``apply_*`` API and the event bus
consumer, which must skip malformed messages rather than stop.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from orderdesk.models import BalanceSnapshot, OrderBookSnapshot
from orderdesk.services.event_bus import EventBus
from orderdesk.services.market_state import MarketState
from orderdesk.telemetry import BOOK_SPREAD


def test_defaults_are_empty() -> None:
    state = MarketState()
    assert state.last_price is None
    assert state.balances == BalanceSnapshot()
    assert state.book == OrderBookSnapshot()


def test_apply_book_replaces_snapshot() -> None:
    state = MarketState()
    old = state.book
    new = state.apply_book({"bids": [["100", "1"]], "asks": [{"price": "101", "size": "2"}]})
    assert state.book is new
    assert old.bids == []
    assert new.asks[0].size == Decimal("2")


def test_apply_ticker_parses_price() -> None:
    state = MarketState()
    assert state.apply_ticker({"price": "62000.5"}) == Decimal("62000.5")
    assert state.last_price == Decimal("62000.5")
    state.apply_ticker({"price": "0"})
    assert state.last_price is None


def test_apply_balances_defaults_missing_side_to_zero() -> None:
    state = MarketState()
    balances = state.apply_balances({"base_available": "0.5"})
    assert balances.base_available == Decimal("0.5")
    assert balances.quote_available == Decimal("0")


@pytest.mark.parametrize(
    "apply, msg",
    [
        ("apply_ticker", {"product_id": "BTC-USD"}),
        ("apply_book", {"bids": []}),
        ("apply_book", {"bids": [["-1", "1"]], "asks": []}),
        ("apply_book", {"bids": [{"price": "1"}], "asks": []}),
        ("apply_balances", {"quote_available": "-5"}),
        ("apply_balances", None),
        ("apply_ticker", 42),
        ("apply_book", "bids"),
        ("apply_balances", ["base_available"]),
    ],
)
def test_malformed_messages_raise_value_error(apply, msg) -> None:
    state = MarketState()
    with pytest.raises(ValueError):
        getattr(state, apply)(msg)


def test_aggregated_book_records_spread() -> None:
    state = MarketState()
    state.apply_book({"bids": [["99", "1"], ["100", "1"]], "asks": [["103", "1"]]})
    book = state.aggregated_book(max_rows=1)
    assert [row.price for row in book.bids] == [Decimal("100")]
    assert BOOK_SPREAD._value.get() == 3.0


@pytest.mark.asyncio
async def test_run_consumes_bus_and_skips_bad_messages() -> None:
    bus = EventBus()
    state = MarketState()
    task = asyncio.create_task(state.run(bus))
    await bus.publish("ticker", {"nope": 1})
    await bus.publish("ticker", 42)
    await bus.publish("ticker", {"price": "101.5"})
    await bus.publish("book", {"bids": [["100", "1"]], "asks": [["102", "1"]]})
    await bus.publish("balances", {"base_available": "2", "quote_available": "300"})
    await asyncio.sleep(0.1)
    task.cancel()
    assert state.last_price == Decimal("101.5")
    assert state.book.bids[0].price == Decimal("100")
    assert state.balances.quote_available == Decimal("300")
