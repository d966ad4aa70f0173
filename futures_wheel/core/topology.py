"""
Graph Topology
==============

Structural queries over a consequence diagram.

PARENT RULE:
============
Free-form connection can give a node several incoming edges, so an edge
does not define a unique parent. The parent link of a node is the source
of the FIRST edge, in edge-list order, that targets it. Later edges into
the same node are ordinary relationships and do not move the node in
the tree.

This module answers structural questions only. It does not validate
tiers or enforce root rules; the session does that.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Tuple
import networkx as nx

from ..contracts.graph import Graph, Edge, Node


class GraphTopology:
    """
    Parent/child view of a Graph.

    Wraps a networkx DiGraph holding one edge per parent link, so
    children are reported in edge-list order.
    """

    def __init__(self, nodes: Tuple[Node, ...], edges: Tuple[Edge, ...]):
        self._nodes = nodes
        self._edges = edges
        self._parents: Dict[str, str] = {}
        self._tree = nx.DiGraph()

        for node in nodes:
            self._tree.add_node(node.id)

        for edge in edges:
            if edge.target in self._parents:
                continue
            self._parents[edge.target] = edge.source
            self._tree.add_edge(edge.source, edge.target, edge_id=edge.id)

    @classmethod
    def of(cls, graph: Graph) -> GraphTopology:
        return cls(graph.nodes, graph.edges)

    def parent_map(self) -> Dict[str, str]:
        """target -> source, first edge wins."""
        return dict(self._parents)

    def parent_of(self, node_id: str) -> Optional[str]:
        return self._parents.get(node_id)

    def children_of(self, node_id: str) -> List[str]:
        if node_id not in self._tree:
            return []
        return list(self._tree.successors(node_id))

    def connected_edges(self, node_id: str) -> List[Edge]:
        """Every edge touching the node, parent link or not."""
        return [e for e in self._edges if e.source == node_id or e.target == node_id]

    def descendants_of(self, node_id: str) -> List[str]:
        """Ids reachable through parent links, in node order."""
        if node_id not in self._tree:
            return []
        reachable = nx.descendants(self._tree, node_id)
        reachable.discard(node_id)
        return [n.id for n in self._nodes if n.id in reachable]

    def depths_from(self, root_id: str) -> Dict[str, int]:
        """Depth of every node reachable from root_id."""
        if root_id not in self._tree:
            return {}
        return dict(nx.single_source_shortest_path_length(self._tree, root_id))

    def path_to_root(self, node_id: str) -> List[str]:
        """
        Ids from the top-most ancestor down to node_id.

        Stops at the first repeated id, so cyclic parent links terminate.
        """
        path: List[str] = []
        seen = set()
        current: Optional[str] = node_id
        while current is not None and current not in seen:
            seen.add(current)
            path.append(current)
            current = self._parents.get(current)
        path.reverse()
        return path
