"""
Graph Contracts
===============

Immutable node, edge and graph values for a consequence diagram.

A Graph is the unit of snapshotting, persistence and layout.
Every mutation produces a new Graph; nothing here is modified in place,
so history snapshots can hold graph values directly without aliasing.

WIRE FORMAT:
============
Nodes and edges serialize to the stored shape shared with the API:

    node: {id, position: {x, y}, data: {label, tier, ...}, type, width, height}
    edge: {id, source, target, label?, type?}
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .base import (
    ROOT_TIER, MIN_VOTE, MAX_VOTE, DEFAULT_NODE_TYPE, Visibility,
    ValidationError, NotFoundError, ErrorCode,
)


@dataclass(frozen=True)
class Position:
    """2-D position in layout units."""
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Node:
    """
    A single idea in the wheel.

    `votes` is a key-sorted tuple of (user_id, value) pairs so that two
    nodes with the same votes compare equal regardless of insertion order.
    `probability` is derived from votes and only set by the vote aggregator.
    """
    id: str
    tier: int
    label: str
    position: Position = field(default_factory=Position)
    description: Optional[str] = None
    color: Optional[str] = None
    collapsed: bool = False
    votes: Tuple[Tuple[str, int], ...] = ()
    probability: float = 0.0
    type: str = DEFAULT_NODE_TYPE
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def is_root(self) -> bool:
        return self.tier == ROOT_TIER

    @property
    def vote_map(self) -> Dict[str, int]:
        return dict(self.votes)

    def moved_to(self, x: float, y: float) -> Node:
        return replace(self, position=Position(x=x, y=y))

    def to_stored(self) -> Dict[str, Any]:
        """Serialize to the stored node shape."""
        data: Dict[str, Any] = {"label": self.label, "tier": self.tier}
        if self.color is not None:
            data["color"] = self.color
        if self.description is not None:
            data["description"] = self.description
        if self.collapsed:
            data["collapsed"] = True
        if self.votes:
            data["votes"] = dict(self.votes)
            data["probability"] = self.probability
        return {
            "id": self.id,
            "position": self.position.to_dict(),
            "data": data,
            "type": self.type,
            "width": self.width,
            "height": self.height,
        }

    @staticmethod
    def from_stored(raw: Mapping[str, Any]) -> Node:
        """Parse a stored node, raising ValidationError on bad shape."""
        if not isinstance(raw, Mapping):
            raise ValidationError("Node payload must be an object", ErrorCode.MALFORMED_PAYLOAD)
        node_id = raw.get("id")
        if not isinstance(node_id, str) or not node_id:
            raise ValidationError("Node id must be a non-empty string", ErrorCode.MALFORMED_PAYLOAD)

        data = raw.get("data") or {}
        if not isinstance(data, Mapping):
            raise ValidationError(f"Node {node_id} data must be an object", ErrorCode.MALFORMED_PAYLOAD)
        tier = data.get("tier")
        if not isinstance(tier, int) or isinstance(tier, bool) or tier < 0:
            raise ValidationError(
                f"Node {node_id} has invalid tier {tier!r}", ErrorCode.MALFORMED_PAYLOAD
            )

        pos = raw.get("position") or {}
        if not isinstance(pos, Mapping):
            raise ValidationError(f"Node {node_id} position must be an object", ErrorCode.MALFORMED_PAYLOAD)
        position = Position(
            x=_stored_number(node_id, "position.x", pos.get("x", 0.0)),
            y=_stored_number(node_id, "position.y", pos.get("y", 0.0)),
        )

        width = raw.get("width")
        height = raw.get("height")

        return Node(
            id=node_id,
            tier=tier,
            label=str(data.get("label", "")),
            position=position,
            description=data.get("description"),
            color=data.get("color"),
            collapsed=bool(data.get("collapsed", False)),
            votes=_stored_votes(node_id, data.get("votes") or {}),
            probability=_stored_number(node_id, "probability", data.get("probability") or 0.0),
            type=raw.get("type") or DEFAULT_NODE_TYPE,
            width=None if width is None else _stored_number(node_id, "width", width),
            height=None if height is None else _stored_number(node_id, "height", height),
        )


@dataclass(frozen=True)
class Edge:
    """Directed, optionally labeled relationship between two nodes."""
    id: str
    source: str
    target: str
    label: Optional[str] = None
    type: Optional[str] = None

    def to_stored(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "source": self.source, "target": self.target}
        if self.label is not None:
            out["label"] = self.label
        if self.type is not None:
            out["type"] = self.type
        return out

    @staticmethod
    def from_stored(raw: Mapping[str, Any]) -> Edge:
        if not isinstance(raw, Mapping):
            raise ValidationError("Edge payload must be an object", ErrorCode.MALFORMED_PAYLOAD)
        for key in ("id", "source", "target"):
            if not isinstance(raw.get(key), str) or not raw.get(key):
                raise ValidationError(f"Edge {key} must be a non-empty string", ErrorCode.MALFORMED_PAYLOAD)
        return Edge(
            id=raw["id"],
            source=raw["source"],
            target=raw["target"],
            label=raw.get("label"),
            type=raw.get("type"),
        )


@dataclass(frozen=True)
class Graph:
    """
    Immutable {nodes, edges} value.

    Node and edge order is significant: layout is deterministic given
    input order, and the first edge targeting a node is its parent link.
    """
    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()

    def find_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node(self, node_id: str) -> Node:
        found = self.find_node(node_id)
        if found is None:
            raise NotFoundError(f"Node {node_id} not found", ErrorCode.NODE_NOT_FOUND)
        return found

    def has_node(self, node_id: str) -> bool:
        return self.find_node(node_id) is not None

    def find_edge(self, edge_id: str) -> Optional[Edge]:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def edge(self, edge_id: str) -> Edge:
        found = self.find_edge(edge_id)
        if found is None:
            raise NotFoundError(f"Edge {edge_id} not found", ErrorCode.EDGE_NOT_FOUND)
        return found

    def root(self) -> Optional[Node]:
        """First tier-0 node, or None."""
        for node in self.nodes:
            if node.is_root:
                return node
        return None

    def replace_node(self, updated: Node) -> Graph:
        return Graph(
            nodes=tuple(updated if n.id == updated.id else n for n in self.nodes),
            edges=self.edges,
        )

    def replace_edge(self, updated: Edge) -> Graph:
        return Graph(
            nodes=self.nodes,
            edges=tuple(updated if e.id == updated.id else e for e in self.edges),
        )

    def positions(self) -> Dict[str, Tuple[float, float]]:
        return {n.id: (n.position.x, n.position.y) for n in self.nodes}

    @staticmethod
    def from_stored(nodes: Iterable[Mapping[str, Any]], edges: Iterable[Mapping[str, Any]]) -> Graph:
        return Graph(
            nodes=tuple(Node.from_stored(n) for n in nodes),
            edges=tuple(Edge.from_stored(e) for e in edges),
        )


@dataclass(frozen=True)
class LoadedDiagram:
    """Result handed over by the data-access collaborator on load."""
    id: str
    title: str
    graph: Graph
    owner_id: str = ""
    visibility: Visibility = Visibility.PRIVATE
    last_modified: Optional[int] = None

    def to_stored(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "nodes": [n.to_stored() for n in self.graph.nodes],
            "edges": [e.to_stored() for e in self.graph.edges],
            "ownerId": self.owner_id,
            "visibility": self.visibility.value,
            "lastModified": self.last_modified,
        }

    @staticmethod
    def from_stored(raw: Mapping[str, Any]) -> LoadedDiagram:
        if not isinstance(raw, Mapping) or not isinstance(raw.get("id"), str):
            raise ValidationError("Diagram payload must carry an id", ErrorCode.MALFORMED_PAYLOAD)
        try:
            visibility = Visibility(raw.get("visibility") or Visibility.PRIVATE.value)
        except ValueError as e:
            raise ValidationError(str(e), ErrorCode.MALFORMED_PAYLOAD) from e
        for key in ("nodes", "edges"):
            if not isinstance(raw.get(key) or [], list):
                raise ValidationError(f"Diagram {key} must be a list", ErrorCode.MALFORMED_PAYLOAD)
        return LoadedDiagram(
            id=raw["id"],
            title=str(raw.get("title", "")),
            graph=Graph.from_stored(raw.get("nodes") or [], raw.get("edges") or []),
            owner_id=str(raw.get("ownerId") or ""),
            visibility=visibility,
            last_modified=raw.get("lastModified"),
        )


def _stored_number(node_id: str, name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"Node {node_id} {name} must be a number, got {value!r}", ErrorCode.MALFORMED_PAYLOAD
        )
    return float(value)


def _stored_votes(node_id: str, votes: Any) -> Tuple[Tuple[str, int], ...]:
    """Stored votes must already satisfy the 1..5 integer contract."""
    if not isinstance(votes, Mapping):
        raise ValidationError(f"Node {node_id} votes must be an object", ErrorCode.MALFORMED_PAYLOAD)
    for user_id, value in votes.items():
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValidationError(f"Node {node_id} has a vote without a user", ErrorCode.INVALID_USER)
        if isinstance(value, bool) or not isinstance(value, int) or not MIN_VOTE <= value <= MAX_VOTE:
            raise ValidationError(
                f"Node {node_id} has invalid vote {value!r} from {user_id}", ErrorCode.INVALID_VOTE
            )
    return freeze_votes(votes)


def freeze_votes(votes: Mapping[str, int]) -> Tuple[Tuple[str, int], ...]:
    """Canonical immutable form of a vote map."""
    return tuple(sorted((str(k), int(v)) for k, v in votes.items()))


def save_payload(title: str, graph: Graph) -> Dict[str, Any]:
    """
    Package a graph for the persistence collaborator.

    Nodes carry only id/position/data/type/width/height.
    """
    nodes: List[Dict[str, Any]] = [n.to_stored() for n in graph.nodes]
    return {
        "title": title,
        "nodes": nodes,
        "edges": [e.to_stored() for e in graph.edges],
    }
