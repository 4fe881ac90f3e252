"""
Error taxonomy for the order desk.

Validation problems are reported as :class:`ValidationIssue` values so
that every failing rule can be shown next to its field at once.  Only
conditions that interrupt control flow are exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ValidationErrorCode(str, Enum):
    INVALID_AMOUNT = "invalid_amount"
    MISSING_LIMIT_PRICE = "missing_limit_price"
    INSUFFICIENT_BALANCE = "insufficient_balance"


@dataclass(frozen=True)
class ValidationIssue:
    """One failed validation rule, attached to the field it concerns."""

    code: ValidationErrorCode
    field: str
    message: str

    def as_dict(self) -> dict:
        return {"code": self.code.value, "field": self.field, "message": self.message}


class OrderDeskError(Exception):
    """Base class for order desk exceptions."""


class ExecutionError(OrderDeskError):
    """Raised by an execution collaborator when it rejects an order.

    The message is treated as opaque and shown to the user verbatim.
    """


class SubmissionInProgressError(OrderDeskError):
    """Raised when a session is asked to act while an order is in flight."""
