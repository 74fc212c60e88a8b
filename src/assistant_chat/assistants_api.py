from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from assistant_chat.errors import ApiError


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return resp.text or resp.reason_phrase


class AssistantsApi:
    """Thin wrapper over the `/beta` assistants, threads and runs endpoints."""

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def create_assistant(
        self,
        *,
        name: str,
        instructions: str,
        tools: list[dict],
        model: str,
    ) -> dict:
        return await self._post(
            "/beta/assistants",
            {"name": name, "instructions": instructions, "tools": tools, "model": model},
        )

    async def create_thread(self) -> dict:
        return await self._post("/beta/threads", {})

    async def add_message(self, thread_id: str, content: str) -> dict:
        return await self._post(
            f"/beta/threads/{thread_id}/messages",
            {"role": "user", "content": content},
        )

    async def create_run(self, thread_id: str, assistant_id: str) -> dict:
        return await self._post(f"/beta/threads/{thread_id}/runs", {"assistant_id": assistant_id})

    async def get_run(self, thread_id: str, run_id: str) -> dict:
        return await self._get(f"/beta/threads/{thread_id}/runs/{run_id}")

    async def cancel_run(self, thread_id: str, run_id: str) -> dict:
        return await self._post(f"/beta/threads/{thread_id}/runs/{run_id}/cancel", {})

    async def list_messages(self, thread_id: str) -> dict:
        return await self._get(f"/beta/threads/{thread_id}/messages")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, body: dict[str, Any]) -> dict:
        resp = await self._client.post(path, json=body)
        return self._decode(resp)

    async def _get(self, path: str) -> dict:
        resp = await self._client.get(path)
        return self._decode(resp)

    def _decode(self, resp: httpx.Response) -> dict:
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as ex:
            message = _error_message(resp)
            logger.warning(f"{resp.request.method} {resp.request.url.path} failed: HTTP {resp.status_code} -- {message}")
            raise ApiError(resp.status_code, message) from ex
        return resp.json()
