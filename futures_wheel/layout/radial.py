"""
Radial Layout
=============

Concentric-ring layout: the central idea at the origin, each tier on
its own ring.

ANGLES:
=======
- Root angle is -pi/2 (top of the wheel)
- Children of the root are spaced 2*pi / n apart, starting at the top
- Children of a deeper node are spread around the parent's own angle
  with step pi / (3 * (parent_tier + 1)), keeping their order

Angles are assigned breadth-first over parent links (first edge per
target wins), so each node receives exactly one angle.
"""

from __future__ import annotations
from collections import deque
from typing import Dict, List, Optional, Sequence, Tuple
import logging
import math

import numpy as np

from ..contracts.graph import Graph, Node, Edge
from ..core.topology import GraphTopology

logger = logging.getLogger(__name__)

# Ring radius for tier 0, 1, 2, 3
TIER_RADII: Tuple[float, ...] = (0.0, 250.0, 500.0, 750.0)

ROOT_ANGLE = -math.pi / 2


def compute_angles(root: Node, nodes: Tuple[Node, ...], topology: GraphTopology) -> Dict[str, float]:
    """Angle in radians for every node reachable from the root."""
    tiers = {n.id: n.tier for n in nodes}
    angles: Dict[str, float] = {root.id: ROOT_ANGLE}

    queue = deque([root.id])
    visited = {root.id}
    while queue:
        parent_id = queue.popleft()
        children = [c for c in topology.children_of(parent_id) if c not in visited]
        if not children:
            continue

        parent_angle = angles[parent_id]
        parent_tier = tiers.get(parent_id, 0)
        if parent_tier == 0:
            step = (2 * math.pi) / len(children)
            for i, child_id in enumerate(children):
                angles[child_id] = i * step + ROOT_ANGLE
        else:
            spread = math.pi / (3 * (parent_tier + 1))
            start = parent_angle - (spread * (len(children) - 1)) / 2
            for i, child_id in enumerate(children):
                angles[child_id] = start + i * spread

        for child_id in children:
            visited.add(child_id)
            queue.append(child_id)

    return angles


def radial_layout(
    nodes: Tuple[Node, ...],
    edges: Tuple[Edge, ...],
    radii: Sequence[float] = TIER_RADII,
) -> Graph:
    """
    Place nodes on tier rings around the root at the origin.

    Nodes with no computed angle, or a tier outside the radius table,
    keep their positions. No root means no-op.
    """
    nodes = tuple(nodes)
    edges = tuple(edges)
    graph = Graph(nodes=nodes, edges=edges)
    root = graph.root()
    if root is None:
        logger.warning("Radial layout skipped: no tier-0 root among %d nodes", len(nodes))
        return graph

    angles = compute_angles(root, nodes, GraphTopology(nodes, edges))

    placeable = [
        n for n in nodes
        if n.id in angles and 0 <= n.tier < len(radii)
    ]
    if not placeable:
        return graph

    theta = np.array([angles[n.id] for n in placeable])
    radius = np.array([radii[n.tier] for n in placeable], dtype=float)
    xs = radius * np.cos(theta)
    ys = radius * np.sin(theta)

    moved = {
        n.id: (float(x), float(y))
        for n, x, y in zip(placeable, xs, ys)
    }
    # the root is pinned exactly, not via cos/sin of its angle
    moved[root.id] = (0.0, 0.0)

    laid_out = tuple(
        n.moved_to(*moved[n.id]) if n.id in moved else n
        for n in nodes
    )
    return Graph(nodes=laid_out, edges=edges)


def tier_rings(
    nodes: Tuple[Node, ...],
    edges: Tuple[Edge, ...],
    radii: Sequence[float] = TIER_RADII,
) -> List[Tuple[str, ...]]:
    """
    Render order per ring: for tiers 1..len(radii)-1, node ids sorted
    by computed angle.
    """
    nodes = tuple(nodes)
    root: Optional[Node] = Graph(nodes=nodes).root()
    if root is None:
        return []

    angles = compute_angles(root, nodes, GraphTopology(nodes, tuple(edges)))
    rings: List[Tuple[str, ...]] = []
    for tier in range(1, len(radii)):
        ring = [n for n in nodes if n.tier == tier and n.id in angles]
        ring.sort(key=lambda n: angles[n.id])
        rings.append(tuple(n.id for n in ring))
    return rings
