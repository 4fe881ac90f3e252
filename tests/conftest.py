"""Pytest configuration for path setup.

The test suite imports the ``orderdesk`` package from ``orderdesk/src``
and shared helpers from ``tests.helpers``.  When the project has not
been installed, neither location is on ``sys.path``; this file adds the
project root and ``orderdesk/src`` so imports resolve however pytest
is invoked.
"""

from __future__ import annotations

import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]

for path in (ROOT / "orderdesk" / "src", ROOT):
    path_str = str(path)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)
