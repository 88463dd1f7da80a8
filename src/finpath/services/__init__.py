"""Service module exports."""

from . import debts, flowchart, formatting, performance, reports, tax

__all__ = [
    "debts",
    "flowchart",
    "formatting",
    "performance",
    "reports",
    "tax",
]
