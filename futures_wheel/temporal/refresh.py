"""
Refresh Coordination
====================

Tickets for background refreshes.

A refresh is issued with a ticket naming the diagram and the current
generation. When the response arrives it is merged against whatever the
session holds at THAT moment, not the state at issue time. Loading a
different diagram or cancelling bumps the generation, and a response
carrying an older ticket is dropped. Overlapping refreshes are ordered by
sequence: once a response is applied, responses to earlier tickets are
dropped as out of order.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class RefreshTicket:
    """Identifies one in-flight refresh."""
    diagram_id: str
    generation: int
    sequence: int


@dataclass(frozen=True)
class RefreshOutcome:
    """What happened to a refresh response."""
    ticket: RefreshTicket
    applied: bool
    reason: str = ""
    added: Tuple[str, ...] = ()
    removed: Tuple[str, ...] = ()
    updated: Tuple[str, ...] = ()


class RefreshCoordinator:
    """
    Issues and validates refresh tickets for one session.

    GUARANTEES:
    - A ticket is accepted only for the diagram and generation it was
      issued under
    - Tickets issued before load()/cancel() are never accepted
    - A ticket older than the last applied one is never accepted, so
      overlapping refreshes cannot apply out of order
    """

    def __init__(self):
        self._diagram_id: Optional[str] = None
        self._generation = 0
        self._sequence = 0
        self._applied_sequence = 0

    def bind(self, diagram_id: Optional[str]) -> None:
        """Switch to a diagram; invalidates outstanding tickets."""
        self._diagram_id = diagram_id
        self._generation += 1

    def cancel(self) -> None:
        self._generation += 1

    def issue(self) -> Optional[RefreshTicket]:
        if self._diagram_id is None:
            return None
        self._sequence += 1
        return RefreshTicket(
            diagram_id=self._diagram_id,
            generation=self._generation,
            sequence=self._sequence,
        )

    def rejection_reason(self, ticket: RefreshTicket) -> Optional[str]:
        """None if the ticket is still current, else why it is stale."""
        if ticket.diagram_id != self._diagram_id:
            return "diagram changed"
        if ticket.generation != self._generation:
            return "superseded"
        if ticket.sequence < self._applied_sequence:
            return "out of order"
        return None

    def mark_applied(self, ticket: RefreshTicket) -> None:
        """Record that ticket's response was merged; older tickets become stale."""
        self._applied_sequence = max(self._applied_sequence, ticket.sequence)

    @property
    def diagram_id(self) -> Optional[str]:
        return self._diagram_id

    @property
    def generation(self) -> int:
        return self._generation
