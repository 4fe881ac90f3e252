"""
Display helpers for the order book and order form.

Nothing here decides anything; it only formats values the core has
already computed, using the precisions the trading screen shows
(quote prices to 2 places, base sizes to 4).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence, Tuple

from .models import AggregatedLevel, BalanceSnapshot, Side
from .submission import Failed, SubmissionState, Succeeded

_QUOTE_PLACES = Decimal("0.01")
_BASE_PLACES = Decimal("0.0001")


def _fmt(value: Decimal, places: Decimal) -> str:
    return str(value.quantize(places, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class BookRowView:
    price: str
    size: str
    total: str
    bar_width_pct: float


def render_side(rows: Sequence[AggregatedLevel]) -> List[BookRowView]:
    views = []
    for row in rows:
        width = min(max(float(row.depth_ratio) * 100.0, 0.0), 100.0)
        views.append(
            BookRowView(
                price=_fmt(row.price, _QUOTE_PLACES),
                size=_fmt(row.size, _BASE_PLACES),
                total=_fmt(row.cumulative_size, _BASE_PLACES),
                bar_width_pct=width,
            )
        )
    return views


def format_available(side: Side, balances: BalanceSnapshot, base_asset: str, quote_asset: str) -> str:
    if Side(side) is Side.BUY:
        return f"{_fmt(balances.quote_available, _QUOTE_PLACES)} {quote_asset}"
    return f"{_fmt(balances.base_available, _BASE_PLACES)} {base_asset}"


def format_estimated_total(total: Optional[Decimal], quote_asset: str) -> str:
    if total is None or total <= 0:
        return "N/A"
    return f"~{_fmt(total, _QUOTE_PLACES)} {quote_asset}"


def notice_for(state: SubmissionState, base_asset: str) -> Optional[Tuple[str, str]]:
    """Title and body of the toast shown after a submission, if any."""
    if isinstance(state, Succeeded):
        order = state.order
        if order is None:
            return "Order Placed", f"Your order {state.order_id} has been placed."
        return (
            "Order Placed",
            f"Your {order.order_type.value} {order.side.value} order for "
            f"{format(order.amount.normalize(), 'f')} {base_asset} has been placed.",
        )
    if isinstance(state, Failed):
        return "Order Failed", state.reason or "Could not place order."
    return None
