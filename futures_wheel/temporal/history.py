"""
History Manager
===============

Bounded undo/redo over full graph snapshots.

ORDERING:
=========
- past: oldest -> newest (push = append, undo pops the newest)
- future: nearest -> farthest (undo pushes the current graph to the front)
- Any fresh snapshot clears future

Graphs are immutable values, so a snapshot is the graph itself;
no copying is needed and later mutations cannot reach into history.

GESTURES:
=========
Continuous interactions (dragging a node) are coalesced: begin_gesture()
holds the pre-gesture graph as pending, the first real change pushes it
(clearing future), and snapshots requested while the gesture is open are
ignored. A gesture that changed nothing leaves history untouched.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Tuple
import logging

from ..contracts.graph import Graph

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 100


@dataclass(frozen=True)
class HistoryEntry:
    """One snapshot with the operation that followed it."""
    sequence: int
    graph: Graph
    label: str = ""


class HistoryManager:
    """
    Session-scoped past/future stacks.

    GUARANTEES:
    - undo() on empty past and redo() on empty future return None
    - past never exceeds max_depth; the oldest entry is dropped first
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self._max_depth = max_depth
        self._past: Deque[HistoryEntry] = deque(maxlen=max_depth)
        self._future: Deque[HistoryEntry] = deque()
        self._sequence = 0
        self._gesture_open = False
        self._pending: Optional[Graph] = None
        self._pending_label = ""

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def snapshot(self, graph: Graph, label: str = "") -> bool:
        """
        Record graph as the state before a mutation.

        Returns False when coalesced into an open gesture.
        """
        if self._gesture_open:
            return False
        self._push_past(graph, label)
        self._future.clear()
        return True

    def begin_gesture(self, graph: Graph, label: str = "move") -> None:
        """Hold graph as the pre-gesture state; nothing is recorded yet."""
        if self._gesture_open:
            return
        self._gesture_open = True
        self._pending = graph
        self._pending_label = label

    def touch_gesture(self) -> bool:
        """
        Mark the open gesture as having changed the graph.

        The first call pushes the pending pre-gesture graph and clears
        future. Returns True only for that call.
        """
        if not self._gesture_open or self._pending is None:
            return False
        self._push_past(self._pending, self._pending_label)
        self._future.clear()
        self._pending = None
        return True

    def end_gesture(self) -> bool:
        """Close the gesture. Returns True if it recorded a snapshot."""
        recorded = self._gesture_open and self._pending is None
        self._close_gesture()
        return recorded

    @property
    def gesture_open(self) -> bool:
        return self._gesture_open

    def _close_gesture(self) -> None:
        self._gesture_open = False
        self._pending = None
        self._pending_label = ""

    # =========================================================================
    # UNDO / REDO
    # =========================================================================

    def undo(self, current: Graph) -> Optional[Graph]:
        """Pop the newest past graph; current goes to the front of future."""
        if not self._past:
            return None
        self._close_gesture()
        entry = self._past.pop()
        self._future.appendleft(self._entry(current, entry.label))
        logger.debug("Undo %s (seq %d)", entry.label or "mutation", entry.sequence)
        return entry.graph

    def redo(self, current: Graph) -> Optional[Graph]:
        """Pop the nearest future graph; current goes to the end of past."""
        if not self._future:
            return None
        self._close_gesture()
        entry = self._future.popleft()
        self._push_past(current, entry.label)
        logger.debug("Redo %s (seq %d)", entry.label or "mutation", entry.sequence)
        return entry.graph

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
        self._close_gesture()

    # =========================================================================
    # INSPECTION
    # =========================================================================

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def past(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._past)

    @property
    def future(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._future)

    def _entry(self, graph: Graph, label: str) -> HistoryEntry:
        self._sequence += 1
        return HistoryEntry(sequence=self._sequence, graph=graph, label=label)

    def _push_past(self, graph: Graph, label: str) -> None:
        if len(self._past) == self._max_depth:
            logger.debug("History depth %d reached, dropping oldest snapshot", self._max_depth)
        self._past.append(self._entry(graph, label))
