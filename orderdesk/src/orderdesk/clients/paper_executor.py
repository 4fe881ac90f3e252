"""
Paper execution client for simulation.

This client stands in for a trading backend in demos and tests.  It
waits a short, configurable latency, records the order in an in-memory
ledger and acknowledges it with a fresh UUID4 order id.  No matching or
fills are simulated.  Set ``reject_reason`` to make every submission
fail with an :class:`~orderdesk.errors.ExecutionError` carrying that
message.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Dict, List, Optional

from ..errors import ExecutionError
from ..models import OrderAck, ValidatedOrder

logger = logging.getLogger(__name__)


class PaperExecutor:
    """Simulate order submission and return a fake acknowledgement."""

    def __init__(self, latency_sec: float = 1.0, reject_reason: Optional[str] = None) -> None:
        self.latency_sec = latency_sec
        self.reject_reason = reject_reason
        # order id -> accepted order
        self.orders: Dict[str, ValidatedOrder] = {}
        # every order received, accepted or not
        self.calls: List[ValidatedOrder] = []

    async def submit_order(self, order: ValidatedOrder) -> OrderAck:
        self.calls.append(order)
        if self.latency_sec > 0:
            await asyncio.sleep(self.latency_sec)
        if self.reject_reason is not None:
            logger.info("Paper executor rejecting %s %s: %s", order.side.value, order.amount, self.reject_reason)
            raise ExecutionError(self.reject_reason)
        order_id = str(uuid.uuid4())
        self.orders[order_id] = order
        logger.info(
            "Paper order %s accepted: %s %s %s @ %s",
            order_id,
            order.order_type.value,
            order.side.value,
            order.amount,
            order.limit_price if order.limit_price is not None else "market",
        )
        return OrderAck(order_id=order_id)
