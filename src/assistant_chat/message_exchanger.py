from __future__ import annotations

from collections.abc import Callable

import httpx
from loguru import logger

from assistant_chat.assistants_api import AssistantsApi
from assistant_chat.errors import ApiError, RunStartError, SendMessageError
from assistant_chat.models import STATUS_CANCELLED_LOCALLY, RunOutcome
from assistant_chat.run_poller import CancelToken, RunPoller


class MessageExchanger:
    def __init__(self, api: AssistantsApi, poller: RunPoller):
        self._api = api
        self._poller = poller

    async def post_message(self, thread_id: str, text: str) -> None:
        try:
            await self._api.add_message(thread_id, text)
        except (ApiError, httpx.HTTPError) as ex:
            raise SendMessageError(str(ex) or type(ex).__name__) from ex
        logger.debug(f"Appended user message to thread {thread_id} ({len(text)} chars)")

    async def run(
        self,
        thread_id: str,
        assistant_id: str,
        *,
        cancel_token: CancelToken | None = None,
    ) -> RunOutcome:
        if cancel_token is not None and cancel_token.cancelled:
            logger.info(f"Run on thread {thread_id} cancelled before it was started")
            return RunOutcome(run_id="", status=STATUS_CANCELLED_LOCALLY)
        try:
            body = await self._api.create_run(thread_id, assistant_id)
        except (ApiError, httpx.HTTPError) as ex:
            raise RunStartError(str(ex) or type(ex).__name__) from ex
        run_id = body["id"]
        logger.info(f"Started run {run_id} on thread {thread_id}")
        return await self._poller.poll(thread_id, run_id, cancel_token=cancel_token)

    async def send(
        self,
        thread_id: str,
        assistant_id: str,
        text: str,
        *,
        cancel_token: CancelToken | None = None,
        on_posted: Callable[[], None] | None = None,
    ) -> RunOutcome:
        """Append the user message, then start a run and poll it to a terminal state."""
        await self.post_message(thread_id, text)
        if on_posted is not None:
            on_posted()
        return await self.run(thread_id, assistant_id, cancel_token=cancel_token)
