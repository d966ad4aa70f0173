"""
API Mapper
==========

Transforms repository values into response envelopes.

Every response has the shape {success, data?, error?}.
"""

from typing import Any, Dict, List

from fastapi.responses import JSONResponse

from ..contracts.graph import LoadedDiagram, Node


def ok(data: Any) -> Dict[str, Any]:
    return {"success": True, "data": data}


def fail(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def map_diagram(diagram: LoadedDiagram) -> Dict[str, Any]:
    return diagram.to_stored()


def map_diagrams(diagrams: List[LoadedDiagram]) -> List[Dict[str, Any]]:
    return [map_diagram(d) for d in diagrams]


def map_node(node: Node) -> Dict[str, Any]:
    return node.to_stored()
