"""
Reconciliation
==============

Merge an authoritative graph into the live local graph.

MODES:
======
INITIAL:    remote replaces local entirely (caller relayouts)
BACKGROUND: node-level merge
  - node in both: remote data fields, LOCAL position
  - remote only:  appended with its remote position
  - local only:   removed
  - edges:        replaced wholesale by the remote set

The server is authoritative for everything except spatial arrangement,
so a refresh never moves what the active user is looking at.

This function is the single seam where a stronger conflict-resolution
strategy (per-field last-writer-wins, OT) would be inserted.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple

from ..contracts.graph import Graph, Node


class ReconcileMode(Enum):
    INITIAL = "initial"
    BACKGROUND = "background"


@dataclass(frozen=True)
class ReconcileResult:
    """Merged graph plus what changed relative to local."""
    graph: Graph
    added: Tuple[str, ...] = ()
    removed: Tuple[str, ...] = ()
    updated: Tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed or self.updated)


def _adopt_remote_data(local: Node, remote: Node) -> Node:
    return replace(remote, position=local.position)


def _data_differs(local: Node, remote: Node) -> bool:
    return replace(local, position=remote.position) != remote


def reconcile(local: Graph, remote: Graph, mode: ReconcileMode) -> ReconcileResult:
    """Merge remote into local according to mode."""
    if mode is ReconcileMode.INITIAL:
        return ReconcileResult(
            graph=remote,
            added=tuple(n.id for n in remote.nodes),
        )

    local_ids = {n.id for n in local.nodes}
    remote_by_id = {n.id: n for n in remote.nodes}

    # surviving local nodes keep their local order
    merged = []
    updated = []
    removed = []
    for local_node in local.nodes:
        remote_node = remote_by_id.get(local_node.id)
        if remote_node is None:
            removed.append(local_node.id)
            continue
        if _data_differs(local_node, remote_node):
            updated.append(local_node.id)
        merged.append(_adopt_remote_data(local_node, remote_node))

    added = [n for n in remote.nodes if n.id not in local_ids]
    merged.extend(added)

    return ReconcileResult(
        graph=Graph(nodes=tuple(merged), edges=remote.edges),
        added=tuple(n.id for n in added),
        removed=tuple(removed),
        updated=tuple(updated),
    )
