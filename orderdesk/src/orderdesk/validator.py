"""
Order draft validator.

This module turns a raw :class:`~orderdesk.models.OrderDraft` into a
:class:`~orderdesk.models.ValidatedOrder` or a list of everything that
is wrong with it.  The rules are evaluated independently so the form
can flag every offending field in one pass:

* the amount must parse to a positive, finite decimal that survives
  rounding to asset precision;
* limit orders need a positive, finite limit price;
* the order must be affordable: buys against the quote balance at the
  limit (or reference) price, sells against the base balance.

The affordability rule is a submit-time gate.  While the user is still
typing, callers pass ``check_balance=False`` so an amount that is
momentarily too large does not flicker an error.  It is also only
evaluated once the fields it depends on are valid, so a bad amount is
reported as a bad amount and nothing else.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, DecimalException, InvalidOperation, localcontext
from typing import List, Optional, Tuple

from .errors import ValidationErrorCode, ValidationIssue
from .models import ASSET_PRECISION, ASSET_QUANTUM, BalanceSnapshot, OrderDraft, OrderType, Side, ValidatedOrder

logger = logging.getLogger(__name__)

AMOUNT_MESSAGE = "Amount must be positive"
LIMIT_PRICE_MESSAGE = "Price is required for limit orders and must be positive"


@dataclass(frozen=True)
class ValidationResult:
    """Either a validated order or a non-empty tuple of issues."""

    order: Optional[ValidatedOrder] = None
    errors: Tuple[ValidationIssue, ...] = ()

    def __post_init__(self) -> None:
        if (self.order is None) == (not self.errors):
            raise ValueError("ValidationResult needs exactly one of order or errors")

    @property
    def ok(self) -> bool:
        return self.order is not None

    def codes(self) -> List[ValidationErrorCode]:
        return [issue.code for issue in self.errors]


def parse_decimal(value: object) -> Optional[Decimal]:
    """Parse user input into a finite decimal, or ``None`` if it is not one.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    if not parsed.is_finite():
        return None
    return parsed


def quantize_amount(amount: Decimal) -> Decimal:
    """Round an amount to asset precision, half up.

    The working precision is widened to fit every integer digit of
    ``amount`` plus the fractional places, so large amounts round
    instead of raising ``InvalidOperation``.  Magnitudes beyond the
    context exponent limits still raise a ``DecimalException``.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + ASSET_PRECISION + 2)
        return amount.quantize(ASSET_QUANTUM, rounding=ROUND_HALF_UP)


def _check_amount(draft: OrderDraft) -> Tuple[Optional[Decimal], Optional[ValidationIssue]]:
    parsed = parse_decimal(draft.amount)
    if parsed is None or parsed <= 0:
        return None, ValidationIssue(ValidationErrorCode.INVALID_AMOUNT, "amount", AMOUNT_MESSAGE)
    try:
        amount = quantize_amount(parsed)
    except DecimalException as exc:
        logger.debug("Amount %s cannot be represented at asset precision: %r", draft.amount, exc)
        return None, ValidationIssue(ValidationErrorCode.INVALID_AMOUNT, "amount", AMOUNT_MESSAGE)
    if amount <= 0:
        return None, ValidationIssue(ValidationErrorCode.INVALID_AMOUNT, "amount", AMOUNT_MESSAGE)
    return amount, None


def _check_limit_price(draft: OrderDraft) -> Tuple[Optional[Decimal], Optional[ValidationIssue]]:
    parsed = parse_decimal(draft.limit_price)
    if parsed is None or parsed <= 0:
        return None, ValidationIssue(
            ValidationErrorCode.MISSING_LIMIT_PRICE, "limit_price", LIMIT_PRICE_MESSAGE
        )
    return parsed, None


def _check_balance(
    side: Side,
    amount: Decimal,
    price: Optional[Decimal],
    balances: BalanceSnapshot,
    base_asset: str,
    quote_asset: str,
) -> Optional[ValidationIssue]:
    if side is Side.SELL:
        if amount > balances.base_available:
            logger.debug("Sell amount %s exceeds base balance %s", amount, balances.base_available)
            return ValidationIssue(
                ValidationErrorCode.INSUFFICIENT_BALANCE, "amount", f"Insufficient {base_asset} balance"
            )
        return None
    if price is None or price <= 0:
        logger.warning("No reference price available; skipping affordability check for buy of %s", amount)
        return None
    try:
        required = amount * price
    except DecimalException:
        # overflowed the context exponent range, far past any balance
        required = None
    if required is None or required > balances.quote_available:
        logger.debug("Buy requires %s quote but only %s available", required, balances.quote_available)
        return ValidationIssue(
            ValidationErrorCode.INSUFFICIENT_BALANCE, "amount", f"Insufficient {quote_asset} balance"
        )
    return None


def validate(
    draft: OrderDraft,
    balances: BalanceSnapshot,
    reference_price: object = None,
    *,
    check_balance: bool = True,
    base_asset: str = "BTC",
    quote_asset: str = "USD",
) -> ValidationResult:
    """Validate a draft against the current balances.

    :param draft: The order as entered in the form.
    :param balances: Latest balances from the account collaborator.
    :param reference_price: Last market price; used to cost market buys.
    :param check_balance: Apply the submit-time affordability gate.
    :param base_asset: Symbol named in insufficient balance messages for sells.
    :param quote_asset: Symbol named in insufficient balance messages for buys.
    """
    order_type = OrderType(draft.order_type)
    side = Side(draft.side)
    errors: List[ValidationIssue] = []

    amount, issue = _check_amount(draft)
    if issue:
        errors.append(issue)

    limit_price: Optional[Decimal] = None
    price_ok = True
    if order_type is OrderType.LIMIT:
        limit_price, issue = _check_limit_price(draft)
        if issue:
            errors.append(issue)
            price_ok = False

    if check_balance and amount is not None and price_ok:
        price = limit_price if order_type is OrderType.LIMIT else parse_decimal(reference_price)
        issue = _check_balance(side, amount, price, balances, base_asset, quote_asset)
        if issue:
            errors.append(issue)

    if errors:
        return ValidationResult(errors=tuple(errors))
    order = ValidatedOrder(order_type=order_type, side=side, amount=amount, limit_price=limit_price)
    return ValidationResult(order=order)
