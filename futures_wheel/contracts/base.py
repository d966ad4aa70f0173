"""
Base Contracts and Shared Types

Foundational types used across all layers of the diagram engine.
Value types here are IMMUTABLE and represent pure data.

ERROR TAXONOMY:
===============
- ValidationError: malformed input (vote value, stored payload, missing root)
- NotFoundError: node, edge or diagram id absent
- AccessDeniedError: caller may not read or modify a diagram
- StructuralLimitError: tier limit, root deletion, edges into the root

Every error carries an explicit ErrorCode so callers can branch on
the code rather than on message text.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Optional, Tuple


# =============================================================================
# ERROR STATES
# =============================================================================

class ErrorCode(Enum):
    """Explicit error codes for deterministic error handling."""
    # Validation errors
    INVALID_VOTE = auto()
    INVALID_USER = auto()
    INVALID_TITLE = auto()
    MALFORMED_PAYLOAD = auto()
    ROOT_MISSING = auto()

    # Lookup errors
    NODE_NOT_FOUND = auto()
    EDGE_NOT_FOUND = auto()
    DIAGRAM_NOT_FOUND = auto()

    # Access errors
    ACCESS_DENIED = auto()

    # Structural errors
    TIER_LIMIT_EXCEEDED = auto()
    ROOT_IMMUTABLE = auto()
    INVALID_CONNECTION = auto()

    # Remote errors
    REMOTE_UNAVAILABLE = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with context.

    Errors are data: they can be stored on an outcome record
    as well as raised through DiagramError.
    """
    code: ErrorCode
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def with_context(self, key: str, value: str) -> Error:
        """Return new Error with additional context (immutable)."""
        return Error(
            code=self.code,
            message=self.message,
            timestamp=self.timestamp,
            context=self.context + ((key, value),)
        )


class DiagramError(Exception):
    """Base class for every error the engine raises."""

    default_code = ErrorCode.MALFORMED_PAYLOAD

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message

    def to_error(self) -> Error:
        return Error(code=self.code, message=self.message)


class ValidationError(DiagramError):
    """Input rejected before any mutation was applied."""
    default_code = ErrorCode.MALFORMED_PAYLOAD


class NotFoundError(DiagramError):
    """Referenced node, edge or diagram does not exist."""
    default_code = ErrorCode.DIAGRAM_NOT_FOUND


class AccessDeniedError(DiagramError):
    """Caller is not allowed to see or change the diagram."""
    default_code = ErrorCode.ACCESS_DENIED


class StructuralLimitError(DiagramError):
    """Mutation would break the wheel's tier or root invariants."""
    default_code = ErrorCode.TIER_LIMIT_EXCEEDED


# =============================================================================
# DIAGRAM CONSTANTS
# =============================================================================

ROOT_TIER = 0
MAX_TIER = 3
MIN_VOTE = 1
MAX_VOTE = 5

DEFAULT_NODE_TYPE = "custom"
DEFAULT_CHILD_LABEL = "New Consequence"
ROOT_NODE_ID = "0"
ROOT_COLOR = "#4f46e5"


class Visibility(Enum):
    """Who may read a diagram."""
    PRIVATE = "private"
    PUBLIC = "public"


def edge_id_for(source_id: str, target_id: str) -> str:
    """Derived edge id for a source/target pair."""
    return f"e-{source_id}-{target_id}"


def now_millis() -> int:
    """Epoch milliseconds, the unit stored in last_modified."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)
