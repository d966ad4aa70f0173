"""
Layout Engine
=============

Pure functions (nodes, edges) -> Graph with updated positions.
Edges pass through unchanged.

Strategies:
- TREE: tidy tree under the central idea
- RADIAL: concentric rings by tier
"""

from __future__ import annotations
from enum import Enum
from typing import Optional, Tuple

from ..contracts.graph import Graph, Node, Edge
from .tree import tree_layout, TreeLayoutConfig
from .radial import radial_layout, tier_rings, TIER_RADII


class LayoutStrategy(Enum):
    TREE = "tree"
    RADIAL = "radial"


def apply_layout(
    strategy: LayoutStrategy,
    nodes: Tuple[Node, ...],
    edges: Tuple[Edge, ...],
    tree_config: Optional[TreeLayoutConfig] = None,
) -> Graph:
    """Run the selected layout strategy."""
    if strategy is LayoutStrategy.RADIAL:
        return radial_layout(nodes, edges)
    return tree_layout(nodes, edges, tree_config)


__all__ = [
    'LayoutStrategy',
    'apply_layout',
    'tree_layout',
    'TreeLayoutConfig',
    'radial_layout',
    'tier_rings',
    'TIER_RADII',
]
