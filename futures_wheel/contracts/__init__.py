"""
Contracts Package

Immutable value types and the error taxonomy shared by every layer.
"""

from .base import (
    ErrorCode, Error, DiagramError, ValidationError, NotFoundError,
    AccessDeniedError, StructuralLimitError, Visibility,
    ROOT_TIER, MAX_TIER, MIN_VOTE, MAX_VOTE, edge_id_for,
)
from .graph import Position, Node, Edge, Graph, LoadedDiagram, save_payload

__all__ = [
    'ErrorCode',
    'Error',
    'DiagramError',
    'ValidationError',
    'NotFoundError',
    'AccessDeniedError',
    'StructuralLimitError',
    'Visibility',
    'ROOT_TIER',
    'MAX_TIER',
    'MIN_VOTE',
    'MAX_VOTE',
    'edge_id_for',
    'Position',
    'Node',
    'Edge',
    'Graph',
    'LoadedDiagram',
    'save_payload',
]
