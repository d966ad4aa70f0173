"""
Temporal Layer
==============

Change over time for a live diagram session.

Modules:
- history: bounded undo/redo over graph snapshots
- reconcile: merge of authoritative state into the local graph
- refresh: tickets that drop superseded background refreshes
"""

from .history import HistoryManager, HistoryEntry
from .reconcile import reconcile, ReconcileMode, ReconcileResult
from .refresh import RefreshCoordinator, RefreshTicket, RefreshOutcome

__all__ = [
    'HistoryManager',
    'HistoryEntry',
    'reconcile',
    'ReconcileMode',
    'ReconcileResult',
    'RefreshCoordinator',
    'RefreshTicket',
    'RefreshOutcome',
]
