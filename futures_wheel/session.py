"""
Diagram Session
===============

The diagram store: one explicit object per open diagram, owned by the
caller. Nothing here is global.

FLOW:
=====
1. Caller intent -> session operation
2. Operation computes a new immutable Graph (validation errors raise here,
   before anything is recorded)
3. History snapshots the pre-mutation graph for structural edits
4. Layout reruns when topology changes (add child, reset, strategy switch)
5. Background refreshes are merged through reconcile() against the
   graph held at the moment the response is applied

STRUCTURAL LIMITS:
==================
Adding beyond tier 3, deleting the root, connecting into the root and
self-loops are rejected as no-ops (the operation returns False/None).
With SessionConfig.strict_structure they raise StructuralLimitError.
"""

from __future__ import annotations
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Optional, Set
import logging
import uuid

from .config import SessionConfig
from .contracts.base import (
    MAX_TIER, DEFAULT_CHILD_LABEL, Visibility, ErrorCode,
    StructuralLimitError, ValidationError, edge_id_for,
)
from .contracts.graph import Graph, Node, Edge, Position, LoadedDiagram, save_payload
from .core.topology import GraphTopology
from .core.votes import cast_vote
from .layout import LayoutStrategy, apply_layout
from .analysis.report import analyze_diagram, ReportData
from .observability import AuditCollector
from .temporal.history import HistoryManager
from .temporal.reconcile import reconcile, ReconcileMode
from .temporal.refresh import RefreshCoordinator, RefreshTicket, RefreshOutcome

logger = logging.getLogger(__name__)


class DiagramSession:
    """
    Live editing session for one futures wheel.

    All mutations run synchronously on the session's graph. The only
    asynchronous boundary is the refresh ticket: a response is accepted
    only while its ticket is current.
    """

    def __init__(self, config: Optional[SessionConfig] = None, user_id: Optional[str] = None):
        self._config = config or SessionConfig()
        self._user_id = user_id
        self._strategy = self._config.layout.strategy
        self._history = HistoryManager(self._config.history.max_depth)
        self._refresh = RefreshCoordinator()
        self._audit = AuditCollector()

        self._graph = Graph()
        self._diagram_id: Optional[str] = None
        self._title = ""
        self._owner_id = ""
        self._visibility = Visibility.PRIVATE
        self._last_modified: Optional[int] = None

    # =========================================================================
    # STATE ACCESS
    # =========================================================================

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def diagram_id(self) -> Optional[str]:
        return self._diagram_id

    @property
    def title(self) -> str:
        return self._title

    @property
    def owner_id(self) -> str:
        return self._owner_id

    @property
    def visibility(self) -> Visibility:
        return self._visibility

    @property
    def last_modified(self) -> Optional[int]:
        return self._last_modified

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def layout_strategy(self) -> LayoutStrategy:
        return self._strategy

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def audit(self) -> AuditCollector:
        return self._audit

    @property
    def config(self) -> SessionConfig:
        return self._config

    def topology(self) -> GraphTopology:
        return GraphTopology.of(self._graph)

    # =========================================================================
    # LOAD / REFRESH
    # =========================================================================

    def load(self, diagram: LoadedDiagram) -> None:
        """Replace the session with a freshly loaded diagram."""
        result = reconcile(self._graph, diagram.graph, ReconcileMode.INITIAL)
        self._graph = self._layout(result.graph)
        self._adopt_metadata(diagram)
        self._history.clear()
        self._refresh.bind(diagram.id)
        self._audit.record("load", diagram.id, detail=f"{len(result.graph.nodes)} nodes")
        logger.info("Loaded diagram %s with %d nodes", diagram.id, len(self._graph.nodes))

    def begin_refresh(self) -> Optional[RefreshTicket]:
        """Ticket for a background refresh, or None if nothing is loaded."""
        return self._refresh.issue()

    def cancel_refreshes(self) -> None:
        """Drop every refresh issued so far."""
        self._refresh.cancel()

    def apply_refresh(self, ticket: RefreshTicket, diagram: LoadedDiagram) -> RefreshOutcome:
        """
        Merge a refresh response into the current graph.

        Stale tickets, tickets older than the last applied refresh and
        payloads for another diagram are dropped.
        """
        reason = self._refresh.rejection_reason(ticket)
        if reason is None and diagram.id != ticket.diagram_id:
            reason = "payload for another diagram"
        if reason is not None:
            logger.info("Dropping refresh %d for %s: %s", ticket.sequence, ticket.diagram_id, reason)
            self._audit.record("refresh", ticket.diagram_id, applied=False, detail=reason)
            return RefreshOutcome(ticket=ticket, applied=False, reason=reason)

        result = reconcile(self._graph, diagram.graph, ReconcileMode.BACKGROUND)
        self._graph = result.graph
        self._refresh.mark_applied(ticket)
        self._adopt_metadata(diagram)
        if result.changed:
            logger.debug(
                "Refresh merged: %d added, %d removed, %d updated",
                len(result.added), len(result.removed), len(result.updated),
            )
        self._audit.record("refresh", diagram.id)
        return RefreshOutcome(
            ticket=ticket,
            applied=True,
            added=result.added,
            removed=result.removed,
            updated=result.updated,
        )

    # =========================================================================
    # NODE MUTATIONS
    # =========================================================================

    def add_child(self, parent_id: str, label: str = DEFAULT_CHILD_LABEL) -> Optional[str]:
        """
        Add a consequence under parent_id.

        Returns the new node id, or None when the tier limit rejects it.
        """
        parent = self._graph.node(parent_id)
        tier = parent.tier + 1
        if tier > MAX_TIER:
            self._reject(
                "add_child", parent_id,
                StructuralLimitError(
                    f"Cannot add tier {tier} node; limit is {MAX_TIER}",
                    ErrorCode.TIER_LIMIT_EXCEEDED,
                ),
            )
            return None

        layout = self._config.layout
        child = Node(
            id=uuid.uuid4().hex,
            tier=tier,
            label=label,
            position=Position(
                x=parent.position.x,
                y=parent.position.y + layout.node_height + layout.vertical_gap,
            ),
            width=layout.node_width,
            height=layout.node_height,
        )
        edge = Edge(id=edge_id_for(parent.id, child.id), source=parent.id, target=child.id)
        updated = Graph(
            nodes=self._graph.nodes + (child,),
            edges=self._graph.edges + (edge,),
        )
        self._commit("add_child", updated, child.id, relayout=True)
        return child.id

    def delete_node(self, node_id: str) -> bool:
        """Remove a node and every edge touching it. The root is kept."""
        node = self._graph.node(node_id)
        if node.is_root:
            return self._reject(
                "delete_node", node_id,
                StructuralLimitError("The central idea cannot be deleted", ErrorCode.ROOT_IMMUTABLE),
            )
        updated = Graph(
            nodes=tuple(n for n in self._graph.nodes if n.id != node_id),
            edges=tuple(
                e for e in self._graph.edges
                if e.source != node_id and e.target != node_id
            ),
        )
        return self._commit("delete_node", updated, node_id)

    def update_label(self, node_id: str, label: str) -> bool:
        return self._update_node("update_label", node_id, label=label)

    def update_description(self, node_id: str, description: Optional[str]) -> bool:
        return self._update_node(
            "update_description", node_id, description=description or None
        )

    def update_color(self, node_id: str, color: Optional[str]) -> bool:
        return self._update_node("update_color", node_id, color=color or None)

    def toggle_collapsed(self, node_id: str) -> bool:
        node = self._graph.node(node_id)
        return self._update_node("toggle_collapsed", node_id, collapsed=not node.collapsed)

    def cast_vote(self, node_id: str, value: object, user_id: Optional[str] = None) -> float:
        """Record a vote and return the node's new probability."""
        voter = user_id or self._user_id
        node = self._graph.node(node_id)
        voted = cast_vote(node, voter, value)
        self._commit("cast_vote", self._graph.replace_node(voted), node_id)
        return voted.probability

    # =========================================================================
    # EDGE MUTATIONS
    # =========================================================================

    def connect(
        self,
        source_id: str,
        target_id: str,
        label: Optional[str] = None,
        edge_id: Optional[str] = None,
    ) -> Optional[str]:
        """
        Free-form connection between two existing nodes.

        A connection that already exists is ignored (returns None).
        """
        self._graph.node(source_id)
        target = self._graph.node(target_id)

        if source_id == target_id:
            self._reject(
                "connect", target_id,
                StructuralLimitError("A node cannot connect to itself", ErrorCode.INVALID_CONNECTION),
            )
            return None
        if target.is_root:
            self._reject(
                "connect", target_id,
                StructuralLimitError("The central idea cannot have incoming edges", ErrorCode.INVALID_CONNECTION),
            )
            return None
        if any(e.source == source_id and e.target == target_id for e in self._graph.edges):
            return None

        new_id = edge_id or edge_id_for(source_id, target_id)
        if self._graph.find_edge(new_id) is not None:
            raise ValidationError(f"Edge id {new_id} already exists", ErrorCode.INVALID_CONNECTION)

        edge = Edge(id=new_id, source=source_id, target=target_id, label=label or None)
        updated = Graph(nodes=self._graph.nodes, edges=self._graph.edges + (edge,))
        self._commit("connect", updated, new_id)
        return new_id

    def update_edge_label(self, edge_id: str, label: Optional[str]) -> bool:
        edge = self._graph.edge(edge_id)
        changed = replace(edge, label=label or None)
        if changed == edge:
            return False
        return self._commit("update_edge_label", self._graph.replace_edge(changed), edge_id)

    def delete_edge(self, edge_id: str) -> bool:
        self._graph.edge(edge_id)
        updated = Graph(
            nodes=self._graph.nodes,
            edges=tuple(e for e in self._graph.edges if e.id != edge_id),
        )
        return self._commit("delete_edge", updated, edge_id)

    # =========================================================================
    # POSITIONS AND LAYOUT
    # =========================================================================

    def begin_drag(self) -> None:
        """
        Open a gesture: one snapshot covers every move until end_drag().

        The snapshot is taken on the first move that changes a position,
        so a drag that moves nothing leaves history untouched.
        """
        self._history.begin_gesture(self._graph, "move_node")

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        node = self._graph.node(node_id)
        if node.position == Position(x=x, y=y):
            return False
        updated = self._graph.replace_node(node.moved_to(x, y))
        if self._history.gesture_open:
            self._history.touch_gesture()
            self._graph = updated
            return True
        return self._commit("move_node", updated, node_id)

    def end_drag(self) -> None:
        if self._history.end_gesture():
            self._audit.record("move_node", detail="drag gesture")

    def reset_layout(self) -> bool:
        """Recompute every position; False if nothing moved."""
        laid_out = self._layout(self._graph)
        if laid_out == self._graph:
            return False
        return self._commit("reset_layout", laid_out, None)

    def set_layout_strategy(self, strategy: LayoutStrategy) -> bool:
        self._strategy = strategy
        laid_out = self._layout(self._graph)
        if laid_out == self._graph:
            return False
        return self._commit("set_layout_strategy", laid_out, None)

    def rename(self, title: str) -> None:
        if not title or not title.strip():
            raise ValidationError("Title must not be empty", ErrorCode.INVALID_TITLE)
        self._title = title.strip()
        self._audit.record("rename", self._diagram_id)

    # =========================================================================
    # HISTORY
    # =========================================================================

    def undo(self) -> bool:
        previous = self._history.undo(self._graph)
        if previous is None:
            return False
        self._graph = previous
        self._audit.record("undo")
        return True

    def redo(self) -> bool:
        following = self._history.redo(self._graph)
        if following is None:
            return False
        self._graph = following
        self._audit.record("redo")
        return True

    # =========================================================================
    # VIEWS AND OUTPUTS
    # =========================================================================

    def visible_graph(self) -> Graph:
        """Graph with descendants of collapsed nodes hidden."""
        topology = self.topology()
        hidden: Set[str] = set()
        for node in self._graph.nodes:
            if node.collapsed and node.id not in hidden:
                hidden.update(topology.descendants_of(node.id))
        if not hidden:
            return self._graph
        return Graph(
            nodes=tuple(n for n in self._graph.nodes if n.id not in hidden),
            edges=tuple(
                e for e in self._graph.edges
                if e.source not in hidden and e.target not in hidden
            ),
        )

    def save_payload(self) -> Dict[str, Any]:
        """{title, nodes, edges} for the persistence collaborator."""
        return save_payload(self._title, self._graph)

    def report(self, generated_at: Optional[datetime] = None) -> ReportData:
        return analyze_diagram(
            self._graph.nodes, self._graph.edges, self._title, generated_at=generated_at
        )

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _layout(self, graph: Graph) -> Graph:
        return apply_layout(
            self._strategy, graph.nodes, graph.edges, self._config.layout.tree_config()
        )

    def _adopt_metadata(self, diagram: LoadedDiagram) -> None:
        self._diagram_id = diagram.id
        self._title = diagram.title
        self._owner_id = diagram.owner_id
        self._visibility = diagram.visibility
        self._last_modified = diagram.last_modified

    def _update_node(self, operation: str, node_id: str, **changes: Any) -> bool:
        node = self._graph.node(node_id)
        changed = replace(node, **changes)
        if changed == node:
            return False
        return self._commit(operation, self._graph.replace_node(changed), node_id)

    def _commit(
        self,
        operation: str,
        updated: Graph,
        target_id: Optional[str],
        relayout: bool = False,
    ) -> bool:
        self._history.end_gesture()
        self._history.snapshot(self._graph, operation)
        self._graph = self._layout(updated) if relayout else updated
        self._audit.record(operation, target_id)
        return True

    def _reject(self, operation: str, target_id: Optional[str], error: StructuralLimitError) -> bool:
        if self._config.strict_structure:
            raise error
        logger.debug("Rejected %s on %s: %s", operation, target_id, error.message)
        self._audit.record(operation, target_id, applied=False, detail=error.message)
        return False
