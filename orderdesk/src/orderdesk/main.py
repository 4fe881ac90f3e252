"""
Entry point for the order desk demo.

This module wires the market state, the paper executor and an order
session together and walks one order through its lifecycle: it prints
the aggregated book and the derived form fields, sizes the order from a
percentage of the available balance and submits it.

Configuration is read from the environment (see :mod:`orderdesk.config`);
command line options override the trading pair and paper latency.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
from decimal import Decimal
from typing import List, Optional

from .clients.paper_executor import PaperExecutor
from .config import Settings
from .models import BalanceSnapshot, BookLevel, OrderBookSnapshot
from .presentation import format_available, format_estimated_total, notice_for, render_side
from .services.event_bus import EventBus
from .services.market_state import MarketState
from .submission import OrderSession, Succeeded
from .telemetry import start_metrics_server


def sample_book(mid: float, levels: int = 15, tick: float = 0.5) -> OrderBookSnapshot:
    """Random book around ``mid`` in the shape the trading screen expects."""
    bids = [
        BookLevel(price=str(round(mid - 10 - i * tick, 2)), size=str(round(random.uniform(0.01, 2), 4)))
        for i in range(levels)
    ]
    asks = [
        BookLevel(price=str(round(mid + 10 + i * tick, 2)), size=str(round(random.uniform(0.01, 2), 4)))
        for i in range(levels)
    ]
    random.shuffle(bids)
    random.shuffle(asks)
    return OrderBookSnapshot(bids=bids, asks=asks)


def _parse_args(argv: Optional[List[str]], settings: Settings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Order desk demo session")
    parser.add_argument("--pair", default=f"{settings.base_asset}/{settings.quote_asset}", help="Trading pair, e.g. BTC/USD")
    parser.add_argument("--price", type=float, default=62000.0, help="Last market price")
    parser.add_argument("--side", choices=["buy", "sell"], default="buy")
    parser.add_argument("--order-type", choices=["market", "limit"], default="limit")
    parser.add_argument("--pct", type=int, choices=[25, 50, 75, 100], default=25)
    parser.add_argument("--latency", type=float, default=settings.paper_latency_sec, help="Paper executor latency in seconds")
    parser.add_argument("--reject", default=None, help="Make the paper executor reject with this reason")
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> int:
    settings = Settings()
    logging.basicConfig(level=settings.log_level)
    logger = logging.getLogger(__name__)
    args = _parse_args(argv, settings)
    base_asset, _, quote_asset = args.pair.upper().partition("/")
    quote_asset = quote_asset or settings.quote_asset

    if settings.metrics_enabled:
        start_metrics_server(settings.prometheus_port)

    market = MarketState(
        book=sample_book(args.price),
        last_price=args.price,
        balances=BalanceSnapshot(base_available=Decimal("0.5"), quote_available=Decimal("10000")),
    )
    bus = EventBus()
    session = OrderSession(
        PaperExecutor(latency_sec=args.latency, reject_reason=args.reject),
        market,
        event_bus=bus,
        base_asset=base_asset,
        quote_asset=quote_asset,
    )

    book = market.aggregated_book(settings.orderbook_max_rows, settings.depth_normalization)
    print(f"Order Book ({base_asset})")
    for title, rows in (("Bids", book.bids), ("Asks", book.asks)):
        print(f"  {title}: price / size / total / depth%")
        for row in render_side(rows):
            print(f"    {row.price:>12} {row.size:>10} {row.total:>10} {row.bar_width_pct:6.1f}")
    print(f"  Spread: {book.spread}")

    session.edit(side=args.side, order_type=args.order_type)
    amount = session.apply_percentage(args.pct)
    derived = session.derived()
    print(f"Available: {format_available(session.draft.side, market.balances, base_asset, quote_asset)}")
    print(f"Amount ({args.pct}%): {amount}")
    print(f"Estimated Total: {format_estimated_total(derived.estimated_total, quote_asset)}")

    state = await session.submit()
    logger.info("Published %d submission events", bus.pending("submission_state"))
    notice = notice_for(state, base_asset)
    if notice:
        title, body = notice
        print(f"{title}: {body}")
    return 0 if isinstance(state, Succeeded) else 1


def cli() -> None:
    try:
        raise SystemExit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    cli()
