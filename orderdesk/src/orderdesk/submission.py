"""
Order submission lifecycle.

An :class:`OrderSession` owns one order form: the draft being edited and
the state of its submission.  Submitting moves the session through

    Idle -> Validating -> Submitting -> Succeeded | Failed

Validation runs synchronously, before the first ``await``.  Failing it
goes straight to ``Failed`` with the list of issues and never reaches
the execution collaborator.  Passing it hands the validated order to
the collaborator exactly once.  An unexpected error on the way ends in
``Failed`` as well, and event bus failures are only logged.  Only one
submission can be in flight per session: the state is switched to
``Validating`` before the first ``await``, and any submit, edit or
reset arriving while an order is in flight raises
:class:`~orderdesk.errors.SubmissionInProgressError`.

On success the draft is consumed and replaced by a fresh one.  On
failure the draft is kept so the user can retry.  ``Succeeded`` and
``Failed`` return to ``Idle`` on the next edit or on :meth:`dismiss`.

There is no timeout: if the collaborator never answers the session
stays in ``Submitting``.  Cancellation belongs to the caller, who may
simply abandon the pending task.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional, Protocol, Tuple, Union

from .errors import SubmissionInProgressError, ValidationIssue
from .models import OrderAck, OrderDraft, OrderType, Side, ValidatedOrder
from .models_events import SubmissionEvent
from .services.market_state import MarketState
from .sizing import DerivedFields, derive_fields, size_from_percentage
from .telemetry import IN_FLIGHT, SUBMISSIONS
from .validator import ValidationResult, validate

logger = logging.getLogger(__name__)


class OrderExecutor(Protocol):
    async def submit_order(self, order: ValidatedOrder) -> OrderAck: ...


class SubmissionStatus(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class Idle:
    status = SubmissionStatus.IDLE


@dataclass(frozen=True)
class Validating:
    status = SubmissionStatus.VALIDATING


@dataclass(frozen=True)
class Submitting:
    order: ValidatedOrder
    status = SubmissionStatus.SUBMITTING


@dataclass(frozen=True)
class Succeeded:
    order_id: str
    order: Optional[ValidatedOrder] = None
    status = SubmissionStatus.SUCCEEDED


@dataclass(frozen=True)
class Failed:
    """Submission failed, either on validation (``errors``) or at the collaborator."""

    reason: str
    errors: Tuple[ValidationIssue, ...] = field(default_factory=tuple)
    status = SubmissionStatus.FAILED


SubmissionState = Union[Idle, Validating, Submitting, Succeeded, Failed]

_DRAFT_FIELDS = ("order_type", "side", "amount", "limit_price")


def state_event(state: SubmissionState) -> SubmissionEvent:
    return {
        "status": state.status.value,
        "order_id": getattr(state, "order_id", None),
        "reason": getattr(state, "reason", None),
        "errors": [issue.as_dict() for issue in getattr(state, "errors", ())],
    }


class OrderSession:
    """One order form: a draft plus its submission state."""

    def __init__(
        self,
        executor: OrderExecutor,
        market: MarketState,
        event_bus: Any = None,
        base_asset: str = "BTC",
        quote_asset: str = "USD",
    ) -> None:
        self.executor = executor
        self.market = market
        self.event_bus = event_bus
        self.base_asset = base_asset
        self.quote_asset = quote_asset
        self.draft = self._fresh_draft()
        self._state: SubmissionState = Idle()
        self.transitions: List[SubmissionState] = [self._state]

    @property
    def state(self) -> SubmissionState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return isinstance(self._state, (Validating, Submitting))

    def _fresh_draft(self) -> OrderDraft:
        return OrderDraft(limit_price=self.market.last_price)

    def _set_state(self, state: SubmissionState) -> None:
        logger.info("Order session %s -> %s", self._state.status.value, state.status.value)
        self._state = state
        self.transitions.append(state)

    async def _publish(self, state: SubmissionState) -> None:
        if self.event_bus is None:
            return
        try:
            await self.event_bus.publish("submission_state", state_event(state))
        except Exception as exc:
            logger.error("Error publishing submission state %s: %s", state.status.value, exc)

    def _ensure_idle_for(self, action: str) -> None:
        if self.in_flight:
            logger.warning("Rejecting %s: submission already in flight", action)
            raise SubmissionInProgressError(f"cannot {action} while an order is being submitted")

    def edit(self, **changes: Any) -> OrderDraft:
        """Apply field changes to the draft.

        Accepts ``order_type``, ``side``, ``amount`` and ``limit_price``.
        A finished submission (succeeded or failed) returns to idle.
        """
        self._ensure_idle_for("edit")
        unknown = set(changes) - set(_DRAFT_FIELDS)
        if unknown:
            raise TypeError(f"unknown draft fields: {sorted(unknown)}")
        if "order_type" in changes:
            changes["order_type"] = OrderType(changes["order_type"])
        if "side" in changes:
            changes["side"] = Side(changes["side"])
        self.draft = replace(self.draft, **changes)
        if isinstance(self._state, (Succeeded, Failed)):
            self._set_state(Idle())
        return self.draft

    def apply_percentage(self, pct: int) -> Decimal:
        """Size the draft from a share of the available balance.

        Returns the computed amount.  The draft is only updated when the
        amount could be computed (is greater than zero).
        """
        draft = self.draft
        side = Side(draft.side)
        if OrderType(draft.order_type) is OrderType.LIMIT:
            reference = draft.limit_price
        else:
            reference = self.market.last_price
        amount = size_from_percentage(pct, side, self.market.balances, reference)
        if amount > 0:
            self.edit(amount=amount)
        else:
            logger.debug("Cannot size %d%% %s yet: no usable price", pct, side.value)
        return amount

    def derived(self) -> DerivedFields:
        return derive_fields(self.draft, self.market.balances, self.market.last_price)

    def check(self) -> ValidationResult:
        """Keystroke-time validation, without the balance gate."""
        return validate(
            self.draft,
            self.market.balances,
            self.market.last_price,
            check_balance=False,
            base_asset=self.base_asset,
            quote_asset=self.quote_asset,
        )

    async def submit(self) -> SubmissionState:
        """Validate the draft and, if valid, send it to the executor.

        Returns the terminal state of this attempt.  Unexpected errors on
        the way also end in ``Failed`` so the session never stays in flight.
        """
        if self.in_flight:
            SUBMISSIONS.labels(outcome="busy").inc()
        self._ensure_idle_for("submit")
        self._set_state(Validating())
        try:
            return await self._run_submission()
        except Exception as exc:
            logger.exception("Unexpected error while submitting order")
            SUBMISSIONS.labels(outcome="failed").inc()
            return await self._finish(Failed(reason=str(exc) or type(exc).__name__))

    async def _run_submission(self) -> SubmissionState:
        result = validate(
            self.draft,
            self.market.balances,
            self.market.last_price,
            base_asset=self.base_asset,
            quote_asset=self.quote_asset,
        )
        await self._publish(self._state)
        if not result.ok:
            SUBMISSIONS.labels(outcome="invalid").inc()
            reason = "; ".join(issue.message for issue in result.errors)
            logger.warning("Order failed validation: %s", [code.value for code in result.codes()])
            return await self._finish(Failed(reason=reason, errors=result.errors))

        order = result.order
        self._set_state(Submitting(order=order))
        await self._publish(self._state)
        IN_FLIGHT.inc()
        try:
            ack = await self.executor.submit_order(order)
        except Exception as exc:
            logger.error("Error submitting %s %s order: %s", order.order_type.value, order.side.value, exc)
            SUBMISSIONS.labels(outcome="failed").inc()
            return await self._finish(Failed(reason=str(exc)))
        finally:
            IN_FLIGHT.dec()

        SUBMISSIONS.labels(outcome="succeeded").inc()
        self.draft = self._fresh_draft()
        return await self._finish(Succeeded(order_id=ack.order_id, order=order))

    async def _finish(self, state: SubmissionState) -> SubmissionState:
        self._set_state(state)
        await self._publish(state)
        return state

    def dismiss(self) -> None:
        """Acknowledge a finished submission and return to idle."""
        if isinstance(self._state, (Succeeded, Failed)):
            self._set_state(Idle())

    def reset(self) -> None:
        """Discard the draft and start over."""
        self._ensure_idle_for("reset")
        self.draft = self._fresh_draft()
        if not isinstance(self._state, Idle):
            self._set_state(Idle())
