"""Client for the voice platform's per-call control endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from calls.errors import ControlCommandError

LOGGER = logging.getLogger(__name__)


def build_http_client(timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout,
        headers={"Content-Type": "application/json"},
    )


class CallControlClient:
    """Sends live commands (speak, hang up) to an in-progress call.

    Every command is a single POST with no retry. The underlying
    ``httpx.AsyncClient`` is owned by the caller.
    """

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self._http = http_client

    async def _post(self, control_url: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            response = await self._http.post(control_url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ControlCommandError(f"{payload['type']} request failed: {exc}") from exc

        if response.is_error:
            raise ControlCommandError(
                f"{payload['type']} rejected with HTTP {response.status_code}",
                status=response.status_code,
                body=response.text,
            )
        return response

    async def say(self, control_url: str, content: str) -> httpx.Response:
        return await self._post(
            control_url,
            {"type": "say", "content": content, "endCallAfterSpoken": False},
        )

    async def end_call(self, control_url: str) -> httpx.Response:
        return await self._post(control_url, {"type": "end-call"})

    async def terminate(
        self,
        control_url: str,
        *,
        closing_message: str | None = None,
        delay: float = 0.0,
    ) -> bool:
        """Optionally speak a closing message, wait, then end the call.

        Remote failures are logged and never raised. Returns True when the
        end-call command was accepted.
        """

        if closing_message:
            try:
                await self.say(control_url, closing_message)
            except ControlCommandError as exc:
                LOGGER.warning("Closing message not delivered to %s: %s", control_url, exc.detail)
            else:
                await asyncio.sleep(delay)

        try:
            await self.end_call(control_url)
        except ControlCommandError as exc:
            LOGGER.error(
                "End-call command to %s failed: %s (status=%s body=%s)",
                control_url,
                exc.detail,
                exc.status,
                exc.body,
            )
            return False
        return True
