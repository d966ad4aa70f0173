"""
Tidy-Tree Layout
================

Reingold-Tilford tree drawing in the linear-time formulation of
Buchheim, Juenger and Leipert (the algorithm behind d3-hierarchy's tree()).

RULES:
======
1. Parent links come from GraphTopology (first edge per target wins)
2. Every node occupies a fixed box; x spacing is one box between
   siblings and 1.25 boxes between nodes with different parents
3. y is depth * (node_height + vertical_gap)
4. Root sits at (0, 0); nodes unreachable from the root keep their position

Positions depend only on structure and input order, never on the
current positions, so the layout is idempotent.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import logging

from ..contracts.graph import Graph, Node, Edge
from ..core.topology import GraphTopology

logger = logging.getLogger(__name__)

SIBLING_SEPARATION = 1.0
COUSIN_SEPARATION = 1.25


@dataclass(frozen=True)
class TreeLayoutConfig:
    """Box geometry for the tidy tree."""
    node_width: float = 160.0
    node_height: float = 60.0
    horizontal_gap: float = 40.0
    vertical_gap: float = 90.0

    @property
    def dx(self) -> float:
        return self.node_width + self.horizontal_gap

    @property
    def dy(self) -> float:
        return self.node_height + self.vertical_gap


class _TidyNode:
    """Working record for one node during the two tree walks."""

    __slots__ = (
        "node_id", "parent", "children", "index",
        "ancestor", "default_ancestor", "prelim", "mod", "change", "shift",
        "thread", "x",
    )

    def __init__(self, node_id: Optional[str], index: int):
        self.node_id = node_id
        self.parent: Optional[_TidyNode] = None
        self.children: List[_TidyNode] = []
        self.index = index
        self.ancestor: _TidyNode = self
        self.default_ancestor: Optional[_TidyNode] = None
        self.prelim = 0.0
        self.mod = 0.0
        self.change = 0.0
        self.shift = 0.0
        self.thread: Optional[_TidyNode] = None
        self.x = 0.0


def _separation(a: _TidyNode, b: _TidyNode) -> float:
    return SIBLING_SEPARATION if a.parent is b.parent else COUSIN_SEPARATION


def _next_left(v: _TidyNode) -> Optional[_TidyNode]:
    return v.children[0] if v.children else v.thread


def _next_right(v: _TidyNode) -> Optional[_TidyNode]:
    return v.children[-1] if v.children else v.thread


def _move_subtree(wm: _TidyNode, wp: _TidyNode, shift: float) -> None:
    change = shift / (wp.index - wm.index)
    wp.change -= change
    wp.shift += shift
    wm.change += change
    wp.prelim += shift
    wp.mod += shift


def _execute_shifts(v: _TidyNode) -> None:
    shift = 0.0
    change = 0.0
    for w in reversed(v.children):
        w.prelim += shift
        w.mod += shift
        change += w.change
        shift += w.shift + change


def _next_ancestor(vim: _TidyNode, v: _TidyNode, ancestor: _TidyNode) -> _TidyNode:
    return vim.ancestor if vim.ancestor.parent is v.parent else ancestor


def _apportion(v: _TidyNode, w: Optional[_TidyNode], ancestor: _TidyNode) -> _TidyNode:
    if w is None:
        return ancestor

    vip = vop = v
    vim = w
    vom = v.parent.children[0]
    sip = vip.mod
    sop = vop.mod
    sim = vim.mod
    som = vom.mod

    while True:
        vim = _next_right(vim)
        vip = _next_left(vip)
        if vim is None or vip is None:
            break
        vom = _next_left(vom)
        vop = _next_right(vop)
        vop.ancestor = v
        shift = vim.prelim + sim - vip.prelim - sip + _separation(vim, vip)
        if shift > 0:
            _move_subtree(_next_ancestor(vim, v, ancestor), v, shift)
            sip += shift
            sop += shift
        sim += vim.mod
        sip += vip.mod
        som += vom.mod
        sop += vop.mod

    if vim is not None and _next_right(vop) is None:
        vop.thread = vim
        vop.mod += sim - sop
    if vip is not None and _next_left(vom) is None:
        vom.thread = vip
        vom.mod += sip - som
        ancestor = v
    return ancestor


def _first_walk(v: _TidyNode) -> None:
    siblings = v.parent.children
    w = siblings[v.index - 1] if v.index else None
    if v.children:
        _execute_shifts(v)
        midpoint = (v.children[0].prelim + v.children[-1].prelim) / 2
        if w is not None:
            v.prelim = w.prelim + _separation(v, w)
            v.mod = v.prelim - midpoint
        else:
            v.prelim = midpoint
    elif w is not None:
        v.prelim = w.prelim + _separation(v, w)
    v.parent.default_ancestor = _apportion(
        v, w, v.parent.default_ancestor or siblings[0]
    )


def _second_walk(v: _TidyNode) -> None:
    v.x = v.prelim + v.parent.mod
    v.mod += v.parent.mod


def _build_tree(root_id: str, topology: GraphTopology) -> Tuple[_TidyNode, List[_TidyNode]]:
    """Return the tidy root and its nodes in pre-order."""
    root = _TidyNode(root_id, 0)
    sentinel = _TidyNode(None, 0)
    sentinel.children = [root]
    root.parent = sentinel

    visited = {root_id}
    preorder: List[_TidyNode] = []
    stack = [root]
    while stack:
        current = stack.pop()
        preorder.append(current)
        for child_id in topology.children_of(current.node_id):
            if child_id in visited:
                continue
            visited.add(child_id)
            child = _TidyNode(child_id, len(current.children))
            child.parent = current
            current.children.append(child)
        stack.extend(reversed(current.children))
    return root, preorder


def _postorder(root: _TidyNode) -> List[_TidyNode]:
    out: List[_TidyNode] = []
    stack = [root]
    while stack:
        v = stack.pop()
        out.append(v)
        stack.extend(v.children)
    out.reverse()
    return out


def compute_tree_positions(
    root_id: str,
    topology: GraphTopology,
    config: TreeLayoutConfig,
) -> Dict[str, Tuple[float, float]]:
    """Positions for every node reachable from root_id."""
    root, preorder = _build_tree(root_id, topology)

    for v in _postorder(root):
        _first_walk(v)
    root.parent.mod = -root.prelim
    for v in preorder:
        _second_walk(v)

    positions: Dict[str, Tuple[float, float]] = {}
    depth: Dict[str, int] = {root_id: 0}
    for v in preorder:
        if v.parent.node_id is not None:
            depth[v.node_id] = depth[v.parent.node_id] + 1
        positions[v.node_id] = (v.x * config.dx, depth[v.node_id] * config.dy)
    return positions


def tree_layout(
    nodes: Tuple[Node, ...],
    edges: Tuple[Edge, ...],
    config: Optional[TreeLayoutConfig] = None,
) -> Graph:
    """
    Lay out nodes as a tidy tree under the tier-0 root.

    Returns the input unchanged for graphs of one node or fewer, and
    when no tier-0 root exists.
    """
    nodes = tuple(nodes)
    edges = tuple(edges)
    if len(nodes) <= 1:
        return Graph(nodes=nodes, edges=edges)

    graph = Graph(nodes=nodes, edges=edges)
    root = graph.root()
    if root is None:
        logger.warning("Tree layout skipped: no tier-0 root among %d nodes", len(nodes))
        return graph

    positions = compute_tree_positions(
        root.id, GraphTopology(nodes, edges), config or TreeLayoutConfig()
    )
    laid_out = tuple(
        n.moved_to(*positions[n.id]) if n.id in positions else n
        for n in nodes
    )
    return Graph(nodes=laid_out, edges=edges)
