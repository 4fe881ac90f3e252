"""Tests for environment driven settings."""

from __future__ import annotations

from orderdesk.book import DepthNormalization
from orderdesk.config import Settings


def test_defaults(monkeypatch) -> None:
    for name in ("ORDERBOOK_MAX_ROWS", "DEPTH_NORMALIZATION", "PAPER_LATENCY_SEC", "BASE_ASSET", "QUOTE_ASSET", "METRICS_ENABLED"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    assert settings.orderbook_max_rows == 15
    assert settings.depth_normalization is DepthNormalization.MAX
    assert settings.paper_latency_sec == 1.0
    assert (settings.base_asset, settings.quote_asset) == ("BTC", "USD")
    assert settings.metrics_enabled is False


def test_overrides(monkeypatch) -> None:
    monkeypatch.setenv("ORDERBOOK_MAX_ROWS", "5")
    monkeypatch.setenv("DEPTH_NORMALIZATION", "First")
    monkeypatch.setenv("PAPER_LATENCY_SEC", "0.25")
    monkeypatch.setenv("BASE_ASSET", "eth")
    monkeypatch.setenv("METRICS_ENABLED", "true")
    settings = Settings()
    assert settings.orderbook_max_rows == 5
    assert settings.depth_normalization is DepthNormalization.FIRST
    assert settings.paper_latency_sec == 0.25
    assert settings.base_asset == "ETH"
    assert settings.metrics_enabled is True


def test_unknown_normalization_falls_back_to_max(monkeypatch) -> None:
    monkeypatch.setenv("DEPTH_NORMALIZATION", "median")
    assert Settings().depth_normalization is DepthNormalization.MAX
