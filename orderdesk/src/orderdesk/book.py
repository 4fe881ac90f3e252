"""
Order book depth aggregation.

Raw levels arrive unsorted.  For display each side is sorted best price
first (bids descending, asks ascending), annotated with a running total
of size, and given a depth ratio in [0, 1] that scales the depth bar
behind each row.

Levels at the same price are kept as separate rows in their input
order; they are not merged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Sequence

from .models import AggregatedLevel, BookLevel, BookSide, OrderBookSnapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROWS = 15

_ONE = Decimal(1)


class DepthNormalization(str, Enum):
    """What a row's cumulative size is divided by to get its depth ratio."""

    # Largest cumulative value among the returned rows.
    MAX = "max"
    # Cumulative value of the first row, clamped to 1.  Kept for
    # compatibility with the original display, where this made every
    # bar past the best level full width.
    FIRST = "first"


def sort_levels(levels: Sequence[BookLevel], side: BookSide) -> List[BookLevel]:
    """Best price first; ties keep their input order."""
    # sorted() stays stable with reverse=True
    return sorted(levels, key=lambda level: level.price, reverse=BookSide(side) is BookSide.BID)


def aggregate(
    levels: Sequence[BookLevel],
    side: BookSide,
    max_rows: Optional[int] = None,
    normalization: DepthNormalization = DepthNormalization.MAX,
) -> List[AggregatedLevel]:
    """Sort one side of the book and attach cumulative size and depth ratio.

    :param levels: Raw levels for a single side.  Not modified.
    :param side: Which side the levels belong to; decides the sort order.
    :param max_rows: Keep at most this many rows from the top of the book.
        Depth ratios are computed over the rows that are kept.
    :param normalization: Denominator used for the depth ratio.
    """
    ordered = sort_levels(levels, side)
    if max_rows is not None:
        ordered = ordered[: max(max_rows, 0)]
    if not ordered:
        return []

    cumulative: List[Decimal] = []
    running = Decimal(0)
    for level in ordered:
        running += level.size
        cumulative.append(running)

    if DepthNormalization(normalization) is DepthNormalization.FIRST:
        denominator = cumulative[0]
    else:
        denominator = cumulative[-1]

    rows: List[AggregatedLevel] = []
    for level, total in zip(ordered, cumulative):
        ratio = total / denominator if denominator > 0 else Decimal(0)
        rows.append(
            AggregatedLevel(
                price=level.price,
                size=level.size,
                cumulative_size=total,
                depth_ratio=min(ratio, _ONE),
            )
        )
    return rows


@dataclass(frozen=True)
class AggregatedBook:
    bids: List[AggregatedLevel]
    asks: List[AggregatedLevel]

    @property
    def best_bid(self) -> Optional[Decimal]:
        return self.bids[0].price if self.bids else None

    @property
    def best_ask(self) -> Optional[Decimal]:
        return self.asks[0].price if self.asks else None

    @property
    def spread(self) -> Optional[Decimal]:
        if self.best_bid is None or self.best_ask is None:
            return None
        return self.best_ask - self.best_bid

    @property
    def mid_price(self) -> Optional[Decimal]:
        if self.best_bid is None or self.best_ask is None:
            return None
        return (self.best_ask + self.best_bid) / 2


def aggregate_snapshot(
    snapshot: OrderBookSnapshot,
    max_rows: Optional[int] = DEFAULT_MAX_ROWS,
    normalization: DepthNormalization = DepthNormalization.MAX,
) -> AggregatedBook:
    """Aggregate both sides of a snapshot for rendering."""
    book = AggregatedBook(
        bids=aggregate(snapshot.bids, BookSide.BID, max_rows, normalization),
        asks=aggregate(snapshot.asks, BookSide.ASK, max_rows, normalization),
    )
    logger.debug(
        "Aggregated book: %d bids, %d asks, spread=%s", len(book.bids), len(book.asks), book.spread
    )
    return book
