"""
Prometheus metrics for the order desk.

Metrics are defined once at import time and shared by every order
session in the process.  ``start_metrics_server`` exposes them over
HTTP on the port defined by ``PROMETHEUS_PORT`` (default 9108).

Metrics
-------

* ``orderdesk_submissions_total{outcome=...}`` – submit attempts by
  outcome: ``succeeded``, ``failed``, ``invalid`` or ``busy``.
* ``orderdesk_submissions_in_flight`` – orders awaiting the execution
  collaborator.
* ``orderdesk_book_spread`` – spread of the most recently applied book.
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)

SUBMISSIONS = Counter(
    "orderdesk_submissions",
    "Order submit attempts by outcome",
    labelnames=["outcome"],
)
IN_FLIGHT = Gauge(
    "orderdesk_submissions_in_flight",
    "Orders awaiting the execution collaborator",
)
BOOK_SPREAD = Gauge(
    "orderdesk_book_spread",
    "Best ask minus best bid of the latest book",
)


def start_metrics_server(port: int) -> bool:
    """Start the Prometheus HTTP endpoint; return False if it could not bind."""
    try:
        start_http_server(port)
    except OSError as exc:
        logger.warning("Failed to start Prometheus server on port %d: %s", port, exc)
        return False
    logger.info("Metrics exposed on port %d", port)
    return True
