"""
History Manager Tests
=====================

INVARIANTS TESTED:
1. past is oldest -> newest, future nearest -> farthest
2. A fresh snapshot clears future
3. Undo/redo on empty stacks are no-ops
4. Depth cap drops the oldest snapshot
5. Gestures are snapshotted once
"""

import pytest

from futures_wheel.contracts.graph import Node, Graph
from futures_wheel.temporal.history import HistoryManager


def graph_with(label: str) -> Graph:
    return Graph(nodes=(Node(id="0", tier=0, label=label),))


class TestUndoRedo:

    def test_empty_stacks_are_noops(self):
        history = HistoryManager()

        assert history.undo(graph_with("now")) is None
        assert history.redo(graph_with("now")) is None
        assert not history.can_undo
        assert not history.can_redo

    def test_undo_returns_most_recent(self):
        history = HistoryManager()
        history.snapshot(graph_with("v1"))
        history.snapshot(graph_with("v2"))

        restored = history.undo(graph_with("v3"))

        assert restored == graph_with("v2")
        assert [e.graph for e in history.future] == [graph_with("v3")]

    def test_future_is_nearest_first(self):
        history = HistoryManager()
        history.snapshot(graph_with("v1"))
        history.snapshot(graph_with("v2"))

        current = history.undo(graph_with("v3"))
        current = history.undo(current)

        assert current == graph_with("v1")
        assert [e.graph for e in history.future] == [graph_with("v2"), graph_with("v3")]

    def test_redo_pushes_to_end_of_past(self):
        history = HistoryManager()
        history.snapshot(graph_with("v1"))
        current = history.undo(graph_with("v2"))

        current = history.redo(current)

        assert current == graph_with("v2")
        assert history.past[-1].graph == graph_with("v1")
        assert not history.can_redo

    def test_snapshot_clears_future(self):
        history = HistoryManager()
        history.snapshot(graph_with("v1"))
        history.undo(graph_with("v2"))
        assert history.can_redo

        history.snapshot(graph_with("v1"))

        assert not history.can_redo

    def test_clear(self):
        history = HistoryManager()
        history.snapshot(graph_with("v1"))
        history.undo(graph_with("v2"))

        history.clear()

        assert history.past == ()
        assert history.future == ()


class TestDepthCap:

    def test_oldest_dropped(self):
        history = HistoryManager(max_depth=2)
        for label in ("v1", "v2", "v3"):
            history.snapshot(graph_with(label))

        assert [e.graph for e in history.past] == [graph_with("v2"), graph_with("v3")]

    def test_invalid_depth(self):
        with pytest.raises(ValueError):
            HistoryManager(max_depth=0)


class TestGestures:

    def test_single_snapshot_per_gesture(self):
        history = HistoryManager()

        history.begin_gesture(graph_with("before drag"))
        assert history.touch_gesture() is True
        assert history.snapshot(graph_with("mid drag")) is False
        assert history.touch_gesture() is False
        history.begin_gesture(graph_with("still dragging"))

        assert history.end_gesture() is True
        assert [e.graph for e in history.past] == [graph_with("before drag")]

    def test_untouched_gesture_records_nothing(self):
        history = HistoryManager()
        history.snapshot(graph_with("v1"))
        history.undo(graph_with("v2"))

        history.begin_gesture(graph_with("v1"))

        assert history.end_gesture() is False
        assert history.past == ()
        assert [e.graph for e in history.future] == [graph_with("v2")]

    def test_touch_clears_future(self):
        history = HistoryManager()
        history.snapshot(graph_with("v1"))
        history.undo(graph_with("v2"))

        history.begin_gesture(graph_with("v1"))
        history.touch_gesture()

        assert not history.can_redo

    def test_snapshot_after_gesture(self):
        history = HistoryManager()
        history.begin_gesture(graph_with("v1"))
        history.touch_gesture()
        history.end_gesture()

        assert history.snapshot(graph_with("v2")) is True
        assert len(history.past) == 2

    def test_undo_discards_pending_gesture(self):
        history = HistoryManager()
        history.snapshot(graph_with("v1"))
        history.begin_gesture(graph_with("v2"))

        history.undo(graph_with("v2"))

        assert not history.gesture_open
        assert history.touch_gesture() is False
