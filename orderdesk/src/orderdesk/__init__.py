"""
Order entry and order book depth for a trading screen.

The package validates and sizes orders drafted in an order form, drives
their submission to an execution backend, and aggregates raw order book
levels into cumulative, depth-scaled rows for display.  Matching,
persistence and transport belong to the collaborators it is wired to.
"""

from .book import AggregatedBook, DepthNormalization, aggregate, aggregate_snapshot  # noqa: F401
from .errors import ExecutionError, SubmissionInProgressError, ValidationErrorCode, ValidationIssue  # noqa: F401
from .models import (  # noqa: F401
    AggregatedLevel,
    BalanceSnapshot,
    BookLevel,
    BookSide,
    OrderBookSnapshot,
    OrderDraft,
    OrderType,
    Side,
    ValidatedOrder,
)
from .sizing import derive_fields, size_from_percentage  # noqa: F401
from .submission import OrderSession  # noqa: F401
from .validator import ValidationResult, validate  # noqa: F401
