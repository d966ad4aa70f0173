"""
Topology Tests
==============

Tests for the parent/child view of a diagram.

PARENT RULE VERIFICATION:
=========================
1. The first edge targeting a node is its parent link
2. Later edges into the same node do not change the tree
3. Structural queries never validate tiers
"""

import pytest

from futures_wheel.contracts.graph import Node, Edge, Graph
from futures_wheel.core.topology import GraphTopology


def make_node(node_id: str, tier: int) -> Node:
    return Node(id=node_id, tier=tier, label=node_id.upper())


def make_edge(source: str, target: str) -> Edge:
    return Edge(id=f"e-{source}-{target}", source=source, target=target)


def wheel() -> Graph:
    return Graph(
        nodes=(
            make_node("root", 0),
            make_node("a", 1),
            make_node("b", 1),
            make_node("a1", 2),
            make_node("a2", 2),
        ),
        edges=(
            make_edge("root", "a"),
            make_edge("root", "b"),
            make_edge("a", "a1"),
            make_edge("a", "a2"),
        ),
    )


class TestGraphTopology:

    def test_children_in_edge_order(self):
        """Children are reported in the order their edges were added."""
        topology = GraphTopology.of(wheel())

        assert topology.children_of("root") == ["a", "b"]
        assert topology.children_of("a") == ["a1", "a2"]
        assert topology.children_of("b") == []

    def test_parent_of(self):
        topology = GraphTopology.of(wheel())

        assert topology.parent_of("a1") == "a"
        assert topology.parent_of("root") is None
        assert topology.parent_of("missing") is None

    def test_first_edge_wins_as_parent(self):
        """A second incoming edge is a relationship, not a re-parenting."""
        graph = wheel()
        graph = Graph(nodes=graph.nodes, edges=graph.edges + (make_edge("b", "a1"),))
        topology = GraphTopology.of(graph)

        assert topology.parent_of("a1") == "a"
        assert "a1" not in topology.children_of("b")
        assert topology.parent_map()["a1"] == "a"

    def test_connected_edges_include_non_parent_links(self):
        graph = wheel()
        extra = make_edge("b", "a1")
        graph = Graph(nodes=graph.nodes, edges=graph.edges + (extra,))
        topology = GraphTopology.of(graph)

        ids = {e.id for e in topology.connected_edges("a1")}
        assert ids == {"e-a-a1", "e-b-a1"}

    def test_descendants(self):
        topology = GraphTopology.of(wheel())

        assert topology.descendants_of("a") == ["a1", "a2"]
        assert topology.descendants_of("root") == ["a", "b", "a1", "a2"]
        assert topology.descendants_of("a1") == []

    def test_path_to_root(self):
        topology = GraphTopology.of(wheel())

        assert topology.path_to_root("a2") == ["root", "a", "a2"]
        assert topology.path_to_root("root") == ["root"]

    def test_path_to_root_terminates_on_cycle(self):
        """Cyclic parent links must not loop forever."""
        graph = Graph(
            nodes=(make_node("x", 1), make_node("y", 1)),
            edges=(make_edge("x", "y"), make_edge("y", "x")),
        )
        topology = GraphTopology.of(graph)

        assert topology.path_to_root("x") == ["y", "x"]

    def test_depths(self):
        topology = GraphTopology.of(wheel())

        depths = topology.depths_from("root")
        assert depths == {"root": 0, "a": 1, "b": 1, "a1": 2, "a2": 2}
        assert topology.depths_from("missing") == {}
