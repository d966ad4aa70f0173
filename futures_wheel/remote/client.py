"""
Diagram Client
==============

httpx client for the futures wheel API.

PRINCIPLES:
===========
1. fetch() raises NotFoundError / AccessDeniedError for 404 / 403;
   transport errors (httpx exceptions) propagate to the caller
2. save() reports success or failure as a SaveResult and never retries
3. The transport is injectable so tests run without a network
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from ..contracts.base import (
    AccessDeniedError, NotFoundError, ValidationError, ErrorCode,
)
from ..contracts.graph import LoadedDiagram


@dataclass(frozen=True)
class SaveResult:
    """Outcome of a save; the body is not interpreted further."""
    success: bool
    status_code: Optional[int] = None
    error_message: Optional[str] = None


class DiagramClient:
    """
    Async client for load, save and vote calls.

    GUARANTEES:
    ===========
    1. Every request carries the session's user id
    2. Error envelopes are surfaced with their server message
    """

    def __init__(
        self,
        base_url: str,
        user_id: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._user_id = user_id
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def fetch(self, diagram_id: str) -> LoadedDiagram:
        """GET a diagram and parse it."""
        params = {"userId": self._user_id} if self._user_id else None
        async with self._client() as client:
            response = await client.get(f"/api/wheels/{diagram_id}", params=params)
        payload = self._unwrap(response)
        return LoadedDiagram.from_stored(payload)

    async def save(self, diagram_id: str, payload: Dict[str, Any]) -> SaveResult:
        """PUT {title, nodes, edges}."""
        body = dict(payload)
        body["userId"] = self._user_id
        try:
            async with self._client() as client:
                response = await client.put(f"/api/wheels/{diagram_id}", json=body)
        except httpx.HTTPError as e:
            return SaveResult(success=False, error_message=str(e))

        if response.is_success:
            return SaveResult(success=True, status_code=response.status_code)
        return SaveResult(
            success=False,
            status_code=response.status_code,
            error_message=self._error_message(response),
        )

    async def vote(self, diagram_id: str, node_id: str, value: int) -> Dict[str, Any]:
        """POST a vote; returns the stored node."""
        async with self._client() as client:
            response = await client.post(
                f"/api/wheels/{diagram_id}/nodes/{node_id}/vote",
                json={"userId": self._user_id, "vote": value},
            )
        return self._unwrap(response)

    # =========================================================================
    # RESPONSE HANDLING
    # =========================================================================

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"HTTP {response.status_code}"

    def _unwrap(self, response: httpx.Response) -> Any:
        if response.status_code == 404:
            raise NotFoundError(self._error_message(response), ErrorCode.DIAGRAM_NOT_FOUND)
        if response.status_code == 403:
            raise AccessDeniedError(self._error_message(response))
        if response.status_code == 400:
            raise ValidationError(self._error_message(response), ErrorCode.MALFORMED_PAYLOAD)
        response.raise_for_status()

        body = response.json()
        if not isinstance(body, dict) or not body.get("success"):
            raise ValidationError("Malformed response envelope", ErrorCode.MALFORMED_PAYLOAD)
        return body.get("data")
