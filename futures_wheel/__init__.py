"""
Futures Wheel Engine

Diagram state engine for consequence wheels: a central idea with up to
three tiers of derived consequences, labeled relationships and
crowd-sourced probability votes.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Immutable Node, Edge, Graph values and the error taxonomy

2. CORE (core/)
   - Parent/child topology (first edge per target is the parent link)
   - Vote aggregation

3. LAYOUT (layout/)
   - Pure tidy-tree and radial layouts

4. TEMPORAL (temporal/)
   - Undo/redo history, reconciliation, refresh tickets

5. SESSION (session.py)
   - The diagram store composing the layers above

6. COLLABORATORS (storage/, api/, remote/, analysis/)
   - In-memory repository, FastAPI server, httpx client and poller, report

CONSTRAINTS ENFORCED:
=====================
- Immutability-first: every mutation produces a new Graph
- Deterministic layout: identical input order gives identical positions
- No global state: sessions are explicit objects owned by the caller
"""

from .config import SessionConfig, LayoutConfig, HistoryConfig, RefreshConfig
from .contracts import (
    Node, Edge, Graph, Position, LoadedDiagram, Visibility,
    DiagramError, ValidationError, NotFoundError, AccessDeniedError,
    StructuralLimitError, ErrorCode,
)
from .layout import LayoutStrategy
from .session import DiagramSession

__version__ = "0.1.0"

__all__ = [
    'SessionConfig',
    'LayoutConfig',
    'HistoryConfig',
    'RefreshConfig',
    'Node',
    'Edge',
    'Graph',
    'Position',
    'LoadedDiagram',
    'Visibility',
    'DiagramError',
    'ValidationError',
    'NotFoundError',
    'AccessDeniedError',
    'StructuralLimitError',
    'ErrorCode',
    'LayoutStrategy',
    'DiagramSession',
]
