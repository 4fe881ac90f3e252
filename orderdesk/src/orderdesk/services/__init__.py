"""Service layer for the order desk.

This package exposes the in-process services an order session is wired
to: the event bus and the latest market and account state.
"""

from .event_bus import EventBus  # noqa: F401
from .market_state import MarketState  # noqa: F401
