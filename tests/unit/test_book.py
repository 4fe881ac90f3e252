"""Tests for order book depth aggregation.

The aggregator sorts each side best price first, accumulates size down
the book and scales depth bars.  Malformed levels must be rejected when
a ``BookLevel`` is built, never inside aggregation.
"""

from __future__ import annotations

import random
from decimal import Decimal

import pytest
from pydantic import ValidationError

from orderdesk.book import DepthNormalization, aggregate, aggregate_snapshot, sort_levels
from orderdesk.models import BookLevel, BookSide, OrderBookSnapshot, levels_from_pairs


def _levels(*pairs):
    return levels_from_pairs(pairs)


def test_bids_sort_descending_with_stable_ties() -> None:
    rows = aggregate(_levels(("100", "1"), ("99", "2"), ("100", "0.5")), BookSide.BID)
    assert [(r.price, r.size) for r in rows] == [
        (Decimal("100"), Decimal("1")),
        (Decimal("100"), Decimal("0.5")),
        (Decimal("99"), Decimal("2")),
    ]
    assert [r.cumulative_size for r in rows] == [Decimal("1"), Decimal("1.5"), Decimal("3.5")]


def test_asks_sort_ascending() -> None:
    rows = aggregate(_levels(("102", "1"), ("101", "2"), ("103", "3")), BookSide.ASK)
    assert [r.price for r in rows] == [Decimal("101"), Decimal("102"), Decimal("103")]
    assert [r.cumulative_size for r in rows] == [Decimal("2"), Decimal("3"), Decimal("6")]


def test_depth_ratio_normalizes_by_largest_total() -> None:
    rows = aggregate(_levels(("100", "1"), ("99", "1"), ("98", "2")), BookSide.BID)
    assert [r.depth_ratio for r in rows] == [Decimal("0.25"), Decimal("0.5"), Decimal("1")]


def test_first_row_normalization_is_clamped() -> None:
    rows = aggregate(
        _levels(("100", "1"), ("99", "1"), ("98", "2")),
        BookSide.BID,
        normalization=DepthNormalization.FIRST,
    )
    assert [r.depth_ratio for r in rows] == [Decimal("1"), Decimal("1"), Decimal("1")]


def test_truncation_keeps_best_rows_and_rescales() -> None:
    levels = _levels(("98", "2"), ("100", "1"), ("99", "1"), ("97", "10"))
    rows = aggregate(levels, BookSide.BID, max_rows=2)
    assert [r.price for r in rows] == [Decimal("100"), Decimal("99")]
    assert [r.cumulative_size for r in rows] == [Decimal("1"), Decimal("2")]
    assert rows[-1].depth_ratio == Decimal("1")


@pytest.mark.parametrize("max_rows", [0, -3])
def test_non_positive_max_rows_yields_nothing(max_rows) -> None:
    assert aggregate(_levels(("1", "1")), BookSide.ASK, max_rows=max_rows) == []


def test_empty_side() -> None:
    assert aggregate([], BookSide.BID) == []


def test_input_is_not_modified() -> None:
    levels = _levels(("1", "1"), ("3", "1"), ("2", "1"))
    before = list(levels)
    aggregate(levels, BookSide.BID)
    assert levels == before


def test_reaggregating_extracted_levels_is_idempotent() -> None:
    rng = random.Random(7)
    levels = [
        BookLevel(price=str(rng.randint(90, 110)), size=str(round(rng.uniform(0.01, 5), 4)))
        for _ in range(40)
    ]
    first = aggregate(levels, BookSide.ASK)
    extracted = [BookLevel(price=r.price, size=r.size) for r in first]
    second = aggregate(extracted, BookSide.ASK)
    assert [r.cumulative_size for r in second] == [r.cumulative_size for r in first]


@pytest.mark.parametrize("side", list(BookSide))
@pytest.mark.parametrize("mode", list(DepthNormalization))
def test_cumulative_is_monotonic_and_ratio_bounded(side, mode) -> None:
    rng = random.Random(11)
    levels = [
        BookLevel(price=str(round(rng.uniform(1, 100), 2)), size=str(round(rng.uniform(0.001, 3), 3)))
        for _ in range(25)
    ]
    rows = aggregate(levels, side, normalization=mode)
    totals = [r.cumulative_size for r in rows]
    assert all(a <= b for a, b in zip(totals, totals[1:]))
    assert all(Decimal(0) <= r.depth_ratio <= Decimal(1) for r in rows)


def test_sort_levels_ask_and_bid() -> None:
    levels = _levels(("2", "1"), ("1", "1"), ("3", "1"))
    assert [l.price for l in sort_levels(levels, BookSide.ASK)] == [Decimal(1), Decimal(2), Decimal(3)]
    assert [l.price for l in sort_levels(levels, BookSide.BID)] == [Decimal(3), Decimal(2), Decimal(1)]


@pytest.mark.parametrize(
    "price, size",
    [("-1", "1"), ("0", "1"), ("1", "0"), ("1", "-2"), ("NaN", "1"), ("1", "Infinity")],
)
def test_malformed_levels_rejected_at_construction(price, size) -> None:
    with pytest.raises(ValidationError):
        BookLevel(price=price, size=size)


def test_aggregate_snapshot_spread_and_mid() -> None:
    snapshot = OrderBookSnapshot(
        bids=_levels(("61990", "1"), ("61990.5", "0.2")),
        asks=_levels(("62010.5", "1"), ("62010", "0.3")),
    )
    book = aggregate_snapshot(snapshot)
    assert book.best_bid == Decimal("61990.5")
    assert book.best_ask == Decimal("62010")
    assert book.spread == Decimal("19.5")
    assert book.mid_price == Decimal("62000.25")


def test_aggregate_snapshot_defaults_to_fifteen_rows() -> None:
    snapshot = OrderBookSnapshot(
        bids=[BookLevel(price=str(100 - i), size="1") for i in range(20)],
        asks=[],
    )
    book = aggregate_snapshot(snapshot)
    assert len(book.bids) == 15
    assert book.asks == []
    assert book.spread is None
    assert book.mid_price is None
