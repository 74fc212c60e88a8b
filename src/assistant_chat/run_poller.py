from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_result,
    stop_after_attempt,
    stop_any,
    stop_never,
    wait_fixed,
)

from assistant_chat.assistants_api import AssistantsApi
from assistant_chat.errors import AssistantChatError, RunPollError
from assistant_chat.message_parsing import parse_thread_messages
from assistant_chat.models import (
    STATUS_CANCELLED_LOCALLY,
    STATUS_COMPLETED,
    STATUS_TIMED_OUT,
    TERMINAL_STATUSES,
    RunOutcome,
)


class CancelToken:
    """Cancellation handle scoped to a single run."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def _still_running(status: str) -> bool:
    return status not in TERMINAL_STATUSES and status != STATUS_CANCELLED_LOCALLY


def _log_still_running(retry_state) -> None:
    status = retry_state.outcome.result() if retry_state.outcome else "?"
    logger.debug(f"Run still {status} after {retry_state.attempt_number} status check(s)")


class RunPoller:
    def __init__(
        self,
        api: AssistantsApi,
        *,
        interval_seconds: float = 1.0,
        max_attempts: int | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._api = api
        self._interval_seconds = max(0.0, interval_seconds)
        self._max_attempts = max_attempts if max_attempts and max_attempts > 0 else None
        self._sleep = sleep

    async def poll(
        self,
        thread_id: str,
        run_id: str,
        *,
        cancel_token: CancelToken | None = None,
    ) -> RunOutcome:
        """Check the run status on a fixed cadence until it reaches a terminal state.

        A ``completed`` run yields the thread's full message history in
        chronological order. Failure statuses yield no messages. Exceeding
        ``max_attempts`` yields ``timed_out`` and a cancelled token yields
        ``cancelled_locally``.
        """
        token = cancel_token or CancelToken()
        stop = stop_any(
            lambda retry_state: token.cancelled,
            stop_after_attempt(self._max_attempts) if self._max_attempts else stop_never,
        )
        retrying = AsyncRetrying(
            retry=retry_if_result(_still_running),
            wait=wait_fixed(self._interval_seconds),
            stop=stop,
            sleep=self._sleep,
            before_sleep=_log_still_running,
            reraise=True,
        )

        try:
            status = await retrying(self._check_status, thread_id, run_id, token)
        except RetryError:
            if token.cancelled:
                status = STATUS_CANCELLED_LOCALLY
            else:
                logger.warning(f"Run {run_id} did not finish after {self._max_attempts} status checks")
                return RunOutcome(run_id=run_id, status=STATUS_TIMED_OUT)

        if status == STATUS_CANCELLED_LOCALLY:
            await self._cancel_remote(thread_id, run_id)
            return RunOutcome(run_id=run_id, status=status)

        if status != STATUS_COMPLETED:
            logger.warning(f"Run {run_id} ended with status {status}")
            return RunOutcome(run_id=run_id, status=status)

        try:
            payload = await self._api.list_messages(thread_id)
        except (AssistantChatError, httpx.HTTPError) as ex:
            raise RunPollError(f"could not fetch messages: {ex}") from ex

        messages = parse_thread_messages(payload)
        logger.info(f"Run {run_id} completed; thread has {len(messages)} message(s)")
        return RunOutcome(run_id=run_id, status=status, messages=messages)

    async def _check_status(self, thread_id: str, run_id: str, token: CancelToken) -> str:
        if token.cancelled:
            return STATUS_CANCELLED_LOCALLY
        try:
            run = await self._api.get_run(thread_id, run_id)
        except (AssistantChatError, httpx.HTTPError) as ex:
            raise RunPollError(f"could not check run status: {ex}") from ex
        return str(run.get("status", ""))

    async def _cancel_remote(self, thread_id: str, run_id: str) -> None:
        try:
            await self._api.cancel_run(thread_id, run_id)
        except (AssistantChatError, httpx.HTTPError) as ex:
            # The run may already be terminal on the server.
            logger.warning(f"Could not cancel run {run_id} on the server: {ex}")
        else:
            logger.info(f"Run {run_id} cancelled")
