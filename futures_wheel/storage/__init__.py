"""
Diagram Repository
==================

Server-side home of diagrams behind the HTTP API.

RESPONSIBILITY: create, read, replace and delete diagrams; apply votes
with the same aggregation contract the session uses.

ACCESS RULES:
=============
- Public diagrams are readable by anyone; private ones only by the owner
- Only the owner may replace, change visibility or delete
- Votes are open to any caller who names a user id
"""

from __future__ import annotations
from dataclasses import replace
from typing import Dict, List, Optional
import logging
import threading
import uuid

from ..contracts.base import (
    ROOT_NODE_ID, ROOT_COLOR, Visibility, ErrorCode, now_millis,
    AccessDeniedError, NotFoundError, ValidationError,
)
from ..contracts.graph import Graph, Node, LoadedDiagram
from ..core.votes import cast_vote

logger = logging.getLogger(__name__)


# =============================================================================
# REPOSITORY INTERFACE
# =============================================================================

class DiagramRepository:
    """Abstract repository interface."""

    def create(self, title: str, owner_id: str) -> LoadedDiagram:
        raise NotImplementedError

    def get(self, diagram_id: str, user_id: Optional[str] = None) -> LoadedDiagram:
        raise NotImplementedError

    def list_for_owner(self, owner_id: str) -> List[LoadedDiagram]:
        raise NotImplementedError

    def replace(
        self,
        diagram_id: str,
        user_id: Optional[str],
        graph: Graph,
        title: Optional[str] = None,
    ) -> LoadedDiagram:
        raise NotImplementedError

    def set_visibility(self, diagram_id: str, user_id: Optional[str], visibility: Visibility) -> LoadedDiagram:
        raise NotImplementedError

    def delete(self, diagram_id: str, user_id: Optional[str]) -> bool:
        raise NotImplementedError

    def cast_vote(self, diagram_id: str, node_id: str, user_id: str, value: object) -> Node:
        raise NotImplementedError


# =============================================================================
# IN-MEMORY IMPLEMENTATION
# =============================================================================

def central_node(title: str) -> Node:
    """The single tier-0 node every new diagram starts with."""
    return Node(id=ROOT_NODE_ID, tier=0, label=title, color=ROOT_COLOR)


class InMemoryDiagramRepository(DiagramRepository):
    """
    Dict-backed repository.

    A lock guards the dict because the API server may serve requests
    from a thread pool.
    """

    def __init__(self):
        self._diagrams: Dict[str, LoadedDiagram] = {}
        self._lock = threading.Lock()

    def create(self, title: str, owner_id: str) -> LoadedDiagram:
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("title is required", ErrorCode.INVALID_TITLE)
        if not isinstance(owner_id, str) or not owner_id.strip():
            raise ValidationError("ownerId is required", ErrorCode.INVALID_USER)

        diagram = LoadedDiagram(
            id=str(uuid.uuid4()),
            title=title,
            graph=Graph(nodes=(central_node(title),)),
            owner_id=owner_id,
            visibility=Visibility.PRIVATE,
            last_modified=now_millis(),
        )
        with self._lock:
            self._diagrams[diagram.id] = diagram
        logger.info("Created diagram %s for %s", diagram.id, owner_id)
        return diagram

    def get(self, diagram_id: str, user_id: Optional[str] = None) -> LoadedDiagram:
        diagram = self._require(diagram_id)
        if diagram.visibility is Visibility.PUBLIC or (user_id and diagram.owner_id == user_id):
            return diagram
        raise AccessDeniedError("Wheel not found or access denied")

    def list_for_owner(self, owner_id: str) -> List[LoadedDiagram]:
        if not owner_id:
            raise ValidationError("A user ID is required to fetch wheels.", ErrorCode.INVALID_USER)
        with self._lock:
            return [d for d in self._diagrams.values() if d.owner_id == owner_id]

    def replace(
        self,
        diagram_id: str,
        user_id: Optional[str],
        graph: Graph,
        title: Optional[str] = None,
    ) -> LoadedDiagram:
        with self._lock:
            current = self._require_owned(diagram_id, user_id)
            updated = replace(
                current,
                graph=graph,
                title=title if title is not None else current.title,
                last_modified=now_millis(),
            )
            self._diagrams[diagram_id] = updated
        return updated

    def set_visibility(self, diagram_id: str, user_id: Optional[str], visibility: Visibility) -> LoadedDiagram:
        with self._lock:
            current = self._require_owned(diagram_id, user_id)
            updated = replace(current, visibility=visibility, last_modified=now_millis())
            self._diagrams[diagram_id] = updated
        return updated

    def delete(self, diagram_id: str, user_id: Optional[str]) -> bool:
        with self._lock:
            self._require_owned(diagram_id, user_id)
            del self._diagrams[diagram_id]
        logger.info("Deleted diagram %s", diagram_id)
        return True

    def cast_vote(self, diagram_id: str, node_id: str, user_id: str, value: object) -> Node:
        with self._lock:
            current = self._require(diagram_id)
            node = current.graph.node(node_id)
            voted = cast_vote(node, user_id, value)
            self._diagrams[diagram_id] = replace(
                current,
                graph=current.graph.replace_node(voted),
                last_modified=now_millis(),
            )
        return voted

    def _require(self, diagram_id: str) -> LoadedDiagram:
        diagram = self._diagrams.get(diagram_id)
        if diagram is None:
            raise NotFoundError("Wheel not found", ErrorCode.DIAGRAM_NOT_FOUND)
        return diagram

    def _require_owned(self, diagram_id: str, user_id: Optional[str]) -> LoadedDiagram:
        diagram = self._require(diagram_id)
        if not user_id or diagram.owner_id != user_id:
            raise AccessDeniedError("Forbidden")
        return diagram


__all__ = [
    'DiagramRepository',
    'InMemoryDiagramRepository',
    'central_node',
]
