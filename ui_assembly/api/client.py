"""Async HTTP client for the UI Assembly Engine API.

WHY: The intent classifier (or any other decision process) runs apart
from the assembly service. It needs to open a session, push intents or
raw instructions, and read snapshots without knowing HTTP details.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. AssemblyClient is an
async context manager: enter it to get a connected client, exit to
close the connection pool. Intents and instructions are encoded with
the protocol codec; snapshots come back decoded into AssemblyState.

RULES:
- Always use the async context manager (async with AssemblyClient() as client:)
- base_url defaults to BASE_URL from config
- Non-2xx responses raise AssemblyAPIError with status and body
- A custom httpx transport can be injected (used by tests)
"""

from __future__ import annotations

from typing import Any

import httpx

from ui_assembly.config import BASE_URL
from ui_assembly.core.ir import AssemblyInstruction, AssemblyState, Intent
from ui_assembly.protocol.codec import (
    decode_instruction,
    decode_state,
    encode_instruction,
    encode_intent,
)


class AssemblyAPIError(Exception):
    """Raised when the assembly service returns an error response.

    RULES:
    - Always include status_code and message
    - message is the response's ``detail`` field when present, else the body
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Assembly API error {status_code}: {message}")


class AssemblyClient:
    """Async client for the assembly service.

    Use as: ``async with AssemblyClient() as client: ...``
    """

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = (base_url or BASE_URL).rstrip("/")
        self._transport = transport
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> AssemblyClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            transport=self._transport,
            timeout=httpx.Timeout(self._timeout),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "AssemblyClient must be used as an async context manager: "
                "async with AssemblyClient() as client: ..."
            )
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        resp = await self._ensure_client().request(method, path, **kwargs)
        if resp.status_code >= 400:
            try:
                message = resp.json().get("detail", resp.text)
            except ValueError:
                message = resp.text
            raise AssemblyAPIError(resp.status_code, str(message))
        return resp

    # ------------------------------------------------------------------

    async def health(self) -> dict:
        resp = await self._request("GET", "/health")
        return resp.json()

    async def map_intent(self, intent: Intent) -> AssemblyInstruction:
        """Map an intent without touching any session."""
        resp = await self._request("POST", "/map", json=encode_intent(intent))
        return decode_instruction(resp.json()["instruction"])

    async def create_session(self) -> str:
        """Create a session and return its id."""
        resp = await self._request("POST", "/sessions")
        return resp.json()["id"]

    async def send_intent(
        self,
        session_id: str,
        intent: Intent,
    ) -> tuple[AssemblyInstruction, AssemblyState]:
        """Map and apply an intent in a session.

        Returns:
            The instruction that was applied and the resulting snapshot.
        """
        resp = await self._request(
            "POST", f"/sessions/{session_id}/intents", json=encode_intent(intent),
        )
        data = resp.json()
        return decode_instruction(data["instruction"]), decode_state(data["state"])

    async def send_instruction(
        self,
        session_id: str,
        instruction: AssemblyInstruction,
    ) -> AssemblyState:
        resp = await self._request(
            "POST",
            f"/sessions/{session_id}/instructions",
            json=encode_instruction(instruction),
        )
        return decode_state(resp.json())

    async def get_state(self, session_id: str) -> AssemblyState:
        resp = await self._request("GET", f"/sessions/{session_id}/state")
        return decode_state(resp.json())

    async def delete_session(self, session_id: str) -> None:
        await self._request("DELETE", f"/sessions/{session_id}")
