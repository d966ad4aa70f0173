"""
Futures Wheel API Server
========================

HTTP surface over the diagram repository.

Endpoints:
- GET    /health
- GET    /api/wheels?userId=                  -> wheels owned by user
- POST   /api/wheels                          -> create with central node
- GET    /api/wheels/{id}?userId=             -> read (public or owned)
- PUT    /api/wheels/{id}                     -> replace title/nodes/edges (owner)
- PATCH  /api/wheels/{id}                     -> change visibility (owner)
- DELETE /api/wheels/{id}?userId=             -> delete (owner)
- POST   /api/wheels/{id}/nodes/{nodeId}/vote -> cast a 1..5 vote

Usage:
    uvicorn futures_wheel.api.server:app --reload
"""
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ..contracts.base import (
    DiagramError, ValidationError, NotFoundError, AccessDeniedError,
    Visibility, ErrorCode,
)
from ..contracts.graph import Graph
from ..observability import configure_logging
from ..config import SessionConfig
from ..storage import DiagramRepository, InMemoryDiagramRepository
from .mapper import ok, fail, map_diagram, map_diagrams, map_node

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class CreateWheelRequest(BaseModel):
    title: Optional[str] = None
    ownerId: Optional[str] = None


class ReplaceWheelRequest(BaseModel):
    userId: Optional[str] = None
    title: Optional[str] = None
    nodes: Optional[List[Dict[str, Any]]] = None
    edges: Optional[List[Dict[str, Any]]] = None


class VisibilityRequest(BaseModel):
    userId: Optional[str] = None
    visibility: Optional[str] = None


class VoteRequest(BaseModel):
    userId: Optional[str] = None
    # left untyped so 3.0 or "3" are rejected instead of coerced
    vote: Any = None


# =============================================================================
# APPLICATION
# =============================================================================

def _status_for(error: DiagramError) -> int:
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, AccessDeniedError):
        return 403
    return 400


def create_app(repository: Optional[DiagramRepository] = None) -> FastAPI:
    """Build the API around a repository (in-memory by default)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(SessionConfig.from_env().log_level)
        logger.info("Futures wheel API starting")
        yield
        logger.info("Futures wheel API shutting down")

    app = FastAPI(
        title="Futures Wheel API",
        version="0.1.0",
        description="Diagram storage and voting for consequence wheels",
        lifespan=lifespan,
    )
    app.state.repository = repository or InMemoryDiagramRepository()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DiagramError)
    async def diagram_error_handler(request: Request, exc: DiagramError):
        status = _status_for(exc)
        if status >= 500:
            logger.error("Request %s failed: %s", request.url.path, exc.message)
        return fail(exc.message, status)

    def repo() -> DiagramRepository:
        return app.state.repository

    @app.get("/health")
    async def health_check():
        return {"status": "online"}

    @app.get("/api/wheels")
    async def list_wheels(userId: Optional[str] = None):
        return ok(map_diagrams(repo().list_for_owner(userId or "")))

    @app.post("/api/wheels")
    async def create_wheel(body: CreateWheelRequest):
        created = repo().create(body.title or "", body.ownerId or "")
        return ok(map_diagram(created))

    @app.get("/api/wheels/{wheel_id}")
    async def get_wheel(wheel_id: str, userId: Optional[str] = None):
        try:
            return ok(map_diagram(repo().get(wheel_id, userId)))
        except AccessDeniedError as e:
            # private wheels are indistinguishable from missing ones
            raise NotFoundError(e.message, ErrorCode.DIAGRAM_NOT_FOUND) from e

    @app.put("/api/wheels/{wheel_id}")
    async def replace_wheel(wheel_id: str, body: ReplaceWheelRequest):
        current = repo().get(wheel_id, body.userId)
        graph = Graph.from_stored(
            body.nodes if body.nodes is not None else [n.to_stored() for n in current.graph.nodes],
            body.edges if body.edges is not None else [e.to_stored() for e in current.graph.edges],
        )
        updated = repo().replace(wheel_id, body.userId, graph, title=body.title)
        return ok(map_diagram(updated))

    @app.patch("/api/wheels/{wheel_id}")
    async def update_visibility(wheel_id: str, body: VisibilityRequest):
        if not body.userId:
            raise ValidationError("userId is required", ErrorCode.INVALID_USER)
        try:
            visibility = Visibility(body.visibility)
        except ValueError as e:
            raise ValidationError("Invalid visibility value", ErrorCode.MALFORMED_PAYLOAD) from e
        return ok(map_diagram(repo().set_visibility(wheel_id, body.userId, visibility)))

    @app.delete("/api/wheels/{wheel_id}")
    async def delete_wheel(wheel_id: str, userId: Optional[str] = None):
        if not userId:
            raise ValidationError("userId is required for deletion", ErrorCode.INVALID_USER)
        deleted = repo().delete(wheel_id, userId)
        return ok({"id": wheel_id, "deleted": deleted})

    @app.post("/api/wheels/{wheel_id}/nodes/{node_id}/vote")
    async def vote_on_node(wheel_id: str, node_id: str, body: VoteRequest):
        node = repo().cast_vote(wheel_id, node_id, body.userId or "", body.vote)
        return ok(map_node(node))

    return app


app = create_app()
