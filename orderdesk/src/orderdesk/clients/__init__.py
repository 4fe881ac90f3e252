"""Execution clients that accept validated orders."""

from .paper_executor import PaperExecutor  # noqa: F401
