"""
Reconciliation Tests
====================

INVARIANTS TESTED:
1. Initial load replaces local state entirely
2. Background merge keeps local positions, adopts remote data
3. Remote-only nodes appended, local-only nodes removed
4. Edges replaced wholesale
"""

from futures_wheel.contracts.graph import Node, Edge, Graph, Position, freeze_votes
from futures_wheel.temporal.reconcile import reconcile, ReconcileMode


def node(node_id: str, label: str, x: float = 0.0, y: float = 0.0, tier: int = 1, **extra) -> Node:
    return Node(id=node_id, tier=tier, label=label, position=Position(x=x, y=y), **extra)


class TestBackgroundMerge:

    def test_remote_label_local_position(self):
        local = Graph(nodes=(node("A", "X", x=10, y=10),))
        remote = Graph(nodes=(node("A", "Y", x=0, y=0),))

        result = reconcile(local, remote, ReconcileMode.BACKGROUND)

        merged = result.graph.node("A")
        assert merged.label == "Y"
        assert merged.position == Position(10, 10)
        assert result.updated == ("A",)

    def test_all_data_fields_adopted(self):
        local = Graph(nodes=(node("A", "X", x=3, y=4),))
        remote_node = node(
            "A", "X", x=0, y=0,
            description="why it matters",
            color="#ff0000",
            collapsed=True,
            votes=freeze_votes({"u1": 4}),
            probability=4.0,
        )

        merged = reconcile(local, Graph(nodes=(remote_node,)), ReconcileMode.BACKGROUND).graph.node("A")

        assert merged.description == "why it matters"
        assert merged.color == "#ff0000"
        assert merged.collapsed is True
        assert merged.vote_map == {"u1": 4}
        assert merged.probability == 4.0
        assert merged.position == Position(3, 4)

    def test_new_remote_node_appended_with_remote_position(self):
        local = Graph(nodes=(node("A", "a"), node("B", "b")))
        remote = Graph(nodes=(node("C", "c", x=50, y=60), node("A", "a"), node("B", "b")))

        result = reconcile(local, remote, ReconcileMode.BACKGROUND)

        assert [n.id for n in result.graph.nodes] == ["A", "B", "C"]
        assert result.graph.node("C").position == Position(50, 60)
        assert result.added == ("C",)

    def test_local_only_node_removed(self):
        local = Graph(nodes=(node("A", "a"), node("gone", "g")))
        remote = Graph(nodes=(node("A", "a"),))

        result = reconcile(local, remote, ReconcileMode.BACKGROUND)

        assert [n.id for n in result.graph.nodes] == ["A"]
        assert result.removed == ("gone",)

    def test_edges_replaced(self):
        local = Graph(
            nodes=(node("A", "a"), node("B", "b")),
            edges=(Edge(id="local", source="A", target="B", label="old"),),
        )
        remote_edges = (Edge(id="remote", source="B", target="A"),)
        remote = Graph(nodes=local.nodes, edges=remote_edges)

        result = reconcile(local, remote, ReconcileMode.BACKGROUND)

        assert result.graph.edges == remote_edges

    def test_unchanged_reports_nothing(self):
        local = Graph(nodes=(node("A", "a", x=1, y=1),))
        remote = Graph(nodes=(node("A", "a", x=9, y=9),))

        result = reconcile(local, remote, ReconcileMode.BACKGROUND)

        assert not result.changed


class TestInitialLoad:

    def test_remote_replaces_local(self):
        local = Graph(nodes=(node("A", "X", x=10, y=10),))
        remote = Graph(nodes=(node("A", "Y", x=0, y=0), node("B", "b")))

        result = reconcile(local, remote, ReconcileMode.INITIAL)

        assert result.graph == remote
        assert result.added == ("A", "B")
