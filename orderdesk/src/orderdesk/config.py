"""
Runtime configuration.

Settings are read from environment variables when a :class:`Settings`
object is constructed, so tests can ``monkeypatch.setenv`` before
building one.
"""

from __future__ import annotations

import logging
import os

from .book import DEFAULT_MAX_ROWS, DepthNormalization

logger = logging.getLogger(__name__)


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() not in ("false", "0", "no", "")


class Settings:
    """Order desk configuration from the environment."""

    def __init__(self) -> None:
        self.orderbook_max_rows: int = int(os.environ.get("ORDERBOOK_MAX_ROWS", str(DEFAULT_MAX_ROWS)))
        mode = os.environ.get("DEPTH_NORMALIZATION", DepthNormalization.MAX.value).strip().lower()
        try:
            self.depth_normalization = DepthNormalization(mode)
        except ValueError:
            logger.warning("Unknown DEPTH_NORMALIZATION %r, using %s", mode, DepthNormalization.MAX.value)
            self.depth_normalization = DepthNormalization.MAX
        self.paper_latency_sec: float = float(os.environ.get("PAPER_LATENCY_SEC", "1.0"))
        self.base_asset: str = os.environ.get("BASE_ASSET", "BTC").strip().upper()
        self.quote_asset: str = os.environ.get("QUOTE_ASSET", "USD").strip().upper()
        self.prometheus_port: int = int(os.environ.get("PROMETHEUS_PORT", "9108"))
        self.metrics_enabled: bool = _flag("METRICS_ENABLED", "false")
        self.log_level: str = os.environ.get("LOG_LEVEL", "INFO").upper()
