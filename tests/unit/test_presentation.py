"""Tests for the display helpers used by the book and order form views."""

from __future__ import annotations

from decimal import Decimal

from orderdesk.book import aggregate
from orderdesk.errors import ValidationErrorCode, ValidationIssue
from orderdesk.models import BalanceSnapshot, BookSide, OrderType, Side, ValidatedOrder, levels_from_pairs
from orderdesk.presentation import format_available, format_estimated_total, notice_for, render_side
from orderdesk.submission import Failed, Idle, Succeeded


def test_render_side_formats_rows() -> None:
    rows = aggregate(levels_from_pairs([("61990.456", "0.12345"), ("61989", "1")]), BookSide.BID)
    views = render_side(rows)
    assert views[0].price == "61990.46"
    assert views[0].size == "0.1235"
    assert views[1].total == "1.1235"
    assert views[1].bar_width_pct == 100.0
    assert 0.0 < views[0].bar_width_pct < 100.0


def test_format_available() -> None:
    balances = BalanceSnapshot(base_available=Decimal("0.5"), quote_available=Decimal("10000"))
    assert format_available(Side.BUY, balances, "BTC", "USD") == "10000.00 USD"
    assert format_available(Side.SELL, balances, "BTC", "USD") == "0.5000 BTC"


def test_format_estimated_total() -> None:
    assert format_estimated_total(Decimal("6200"), "USD") == "~6200.00 USD"
    assert format_estimated_total(None, "USD") == "N/A"
    assert format_estimated_total(Decimal("0"), "USD") == "N/A"


def test_notices() -> None:
    order = ValidatedOrder(order_type=OrderType.MARKET, side=Side.BUY, amount=Decimal("0.10000000"))
    title, body = notice_for(Succeeded(order_id="x", order=order), "BTC")
    assert title == "Order Placed"
    assert body == "Your market buy order for 0.1 BTC has been placed."

    issue = ValidationIssue(ValidationErrorCode.INVALID_AMOUNT, "amount", "Amount must be positive")
    assert notice_for(Failed(reason="venue closed"), "BTC") == ("Order Failed", "venue closed")
    assert notice_for(Failed(reason="", errors=(issue,)), "BTC") == ("Order Failed", "Could not place order.")
    assert notice_for(Idle(), "BTC") is None
