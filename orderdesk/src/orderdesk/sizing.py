"""
Sizing calculator and derived form fields.

``size_from_percentage`` backs the 25/50/75/100% buttons next to the
amount input.  ``derive_fields`` is the single pure recomputation the
form runs after every committed edit to refresh the cost estimate and
the available-balance hint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, DecimalException
from typing import Optional

from .models import BalanceSnapshot, OrderDraft, OrderType, Side
from .validator import parse_decimal, quantize_amount

logger = logging.getLogger(__name__)

ALLOWED_PERCENTAGES = (25, 50, 75, 100)


def size_from_percentage(
    pct: int,
    side: Side,
    balances: BalanceSnapshot,
    reference_price: object,
) -> Decimal:
    """Return the amount that spends ``pct`` percent of the relevant balance.

    Buys spend the quote balance at ``reference_price``; sells spend the
    base balance directly.  A zero result means the amount cannot be
    computed yet (no usable price) and must not be used as an order
    amount.  The result is rounded half up to asset precision.
    """
    if pct not in ALLOWED_PERCENTAGES:
        raise ValueError(f"percentage must be one of {ALLOWED_PERCENTAGES}, got {pct!r}")
    fraction = Decimal(pct) / Decimal(100)
    if Side(side) is Side.SELL:
        return quantize_amount(balances.base_available * fraction)
    price = parse_decimal(reference_price)
    if price is None or price <= 0:
        return Decimal(0)
    try:
        return quantize_amount(balances.quote_available * fraction / price)
    except DecimalException as exc:
        logger.warning("Cannot size %d%% of %s at price %s: %r", pct, balances.quote_available, price, exc)
        return Decimal(0)


def resolve_reference_price(order_type: OrderType, limit_price: object, market_price: object) -> Optional[Decimal]:
    """Price used to cost an order: the limit price for limit orders, else the market price."""
    if OrderType(order_type) is OrderType.LIMIT:
        return parse_decimal(limit_price)
    return parse_decimal(market_price)


def estimate_total(
    order_type: OrderType,
    amount: object,
    limit_price: object,
    market_price: object,
) -> Optional[Decimal]:
    """Estimated quote cost of the order, or ``None`` when it cannot be shown."""
    qty = parse_decimal(amount)
    price = resolve_reference_price(order_type, limit_price, market_price)
    if qty is None or price is None:
        return None
    try:
        total = qty * price
    except DecimalException:
        return None
    if total <= 0:
        return None
    return total


@dataclass(frozen=True)
class DerivedFields:
    reference_price: Optional[Decimal]
    estimated_total: Optional[Decimal]
    available: Decimal
    # "quote" for buys, "base" for sells
    available_asset: str


def derive_fields(draft: OrderDraft, balances: BalanceSnapshot, market_price: object) -> DerivedFields:
    side = Side(draft.side)
    if side is Side.BUY:
        available, asset = balances.quote_available, "quote"
    else:
        available, asset = balances.base_available, "base"
    return DerivedFields(
        reference_price=resolve_reference_price(draft.order_type, draft.limit_price, market_price),
        estimated_total=estimate_total(draft.order_type, draft.amount, draft.limit_price, market_price),
        available=available,
        available_asset=asset,
    )
