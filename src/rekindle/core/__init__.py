"""
Refresh core: extraction, diffing, reconciliation and the refresh orchestrator.
"""

from rekindle.core.diff import REMOVED, changes
from rekindle.core.extract import extract
from rekindle.core.reconcile import ReconcileReport, reconcile
from rekindle.core.refresher import ContextRefresher

__all__ = [
    "REMOVED",
    "ContextRefresher",
    "ReconcileReport",
    "changes",
    "extract",
    "reconcile",
]
