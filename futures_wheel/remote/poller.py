"""
Refresh Poller
==============

Periodic background refresh for a live session.

Each tick takes a refresh ticket, awaits the fetch, then hands the
response to the session, which merges it against its CURRENT graph or
drops it if the ticket went stale meanwhile (diagram switched, poller
stopped). Editing never waits on a tick.
"""

from __future__ import annotations
from typing import Optional
import asyncio
import logging

import httpx

from ..contracts.base import DiagramError, Error, ValidationError, ErrorCode
from ..session import DiagramSession
from ..temporal.refresh import RefreshOutcome
from .client import DiagramClient, SaveResult

logger = logging.getLogger(__name__)


class DiagramPoller:
    """Polls the API on a fixed interval and feeds the session."""

    def __init__(
        self,
        session: DiagramSession,
        client: DiagramClient,
        interval_seconds: Optional[float] = None,
    ):
        self._session = session
        self._client = client
        self._interval = (
            interval_seconds
            if interval_seconds is not None
            else session.config.refresh.poll_interval_seconds
        )
        self._running = False
        self._ticks = 0
        self._last_error: Optional[Error] = None

    async def refresh_once(self) -> Optional[RefreshOutcome]:
        """One refresh; None when no diagram is loaded."""
        ticket = self._session.begin_refresh()
        if ticket is None:
            return None
        diagram = await self._client.fetch(ticket.diagram_id)
        return self._session.apply_refresh(ticket, diagram)

    async def run(self, max_ticks: Optional[int] = None) -> int:
        """
        Poll until stop() is called or max_ticks ticks have run.

        A failed tick is logged and polling continues on the next interval.
        Returns the number of ticks run.
        """
        self._running = True
        while self._running:
            self._ticks += 1
            try:
                await self.refresh_once()
                self._last_error = None
            except DiagramError as e:
                self._tick_failed(e.to_error())
            except httpx.HTTPError as e:
                self._tick_failed(Error(code=ErrorCode.REMOTE_UNAVAILABLE, message=str(e)))
            if max_ticks is not None and self._ticks >= max_ticks:
                break
            await asyncio.sleep(self._interval)
        self._running = False
        return self._ticks

    def _tick_failed(self, error: Error) -> None:
        self._last_error = error.with_context("tick", str(self._ticks))
        logger.warning("Refresh tick %d failed: %s", self._ticks, error.message)

    def stop(self) -> None:
        """End the loop and drop any refresh still in flight."""
        self._running = False
        self._session.cancel_refreshes()

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._running

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def last_error(self) -> Optional[Error]:
        """Error from the most recent tick, cleared by a successful one."""
        return self._last_error


async def save_session(session: DiagramSession, client: DiagramClient) -> SaveResult:
    """Persist the session's current graph."""
    if session.diagram_id is None:
        raise ValidationError("No diagram loaded", ErrorCode.DIAGRAM_NOT_FOUND)
    result = await client.save(session.diagram_id, session.save_payload())
    if not result.success:
        logger.error("Failed to save diagram %s: %s", session.diagram_id, result.error_message)
    return result
