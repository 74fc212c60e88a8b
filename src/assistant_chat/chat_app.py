from __future__ import annotations

import asyncio
from collections.abc import Callable

from loguru import logger

from assistant_chat.commands.router import CommandRouter
from assistant_chat.controller import ChatController
from assistant_chat.models import ROLE_USER, STEP_SETUP
from assistant_chat.session_state import SessionState
from assistant_chat.spinner import DEFAULT_LABEL, Spinner

_SETUP_LABEL = " Creating assistant..."


class ChatApp:
    """Line-oriented front end over a ChatController."""

    _LINE_PREFIX = "assistant> "
    _ERROR_PREFIX = "error> "

    def __init__(
        self,
        controller: ChatController,
        *,
        write: Callable[[str], None] = print,
        show_spinner: bool = True,
    ):
        self._controller = controller
        self._write = write
        self._show_spinner = show_spinner
        self._shown_message_ids: set[str] = set()
        self._last_error: str | None = None
        self._tasks: set[asyncio.Task] = set()
        self._indicator_active = False
        self._spinner: Spinner | None = None
        self._controller.subscribe(self._on_state_change)
        self._command_router = CommandRouter(
            on_help=self._on_help,
            on_cancel=self._on_cancel,
            on_history=self._on_history,
            on_dismiss_error=self._on_dismiss_error,
            on_unknown=self._on_unknown_command,
        )

    @property
    def is_busy(self) -> bool:
        return any(not t.done() for t in self._tasks)

    @property
    def is_waiting(self) -> bool:
        """True while the pending indicator is shown."""
        return self._indicator_active

    async def setup(self, api_key: str) -> bool:
        self._controller.set_api_key(api_key)
        await self._controller.create_assistant()
        return self._controller.state.is_ready

    async def handle_input(self, user_input: str) -> None:
        if await self._command_router.try_handle(user_input):
            return
        if not user_input.strip():
            return
        self._shown_message_ids.update(m.id for m in self._controller.state.messages)
        self._controller.set_input(user_input)
        task = asyncio.create_task(self._controller.send_message())
        self._tasks.add(task)
        task.add_done_callback(self._on_send_done)

    def cancel_runs(self) -> int:
        return self._controller.cancel_active_runs()

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        self._controller.cancel_active_runs()
        await self.wait_idle()
        self._stop_indicator()
        await self._controller.aclose()

    def _on_send_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        ex = task.exception()
        if ex is not None:
            self._stop_indicator()
            logger.error(f"Unhandled error while sending: {ex}")
            self._write(f"{self._ERROR_PREFIX}{ex}")

    def _on_state_change(self, state: SessionState) -> None:
        # The spinner owns the current line; it must be gone before anything is written.
        if not state.loading:
            self._stop_indicator()

        if state.error and state.error != self._last_error:
            self._stop_indicator()
            self._write(f"{self._ERROR_PREFIX}{state.error}")
        self._last_error = state.error

        if state.loading:
            self._start_indicator(state)
            return
        for message in state.messages:
            if message.id in self._shown_message_ids:
                continue
            self._shown_message_ids.add(message.id)
            if message.role != ROLE_USER:
                self._write(f"{self._LINE_PREFIX}{message.content}")

    def _start_indicator(self, state: SessionState) -> None:
        if self._indicator_active:
            return
        self._indicator_active = True
        label = _SETUP_LABEL if state.step == STEP_SETUP else DEFAULT_LABEL
        if self._show_spinner:
            self._spinner = Spinner(prefix=self._LINE_PREFIX, label=label)
            self._spinner.start()
        else:
            self._write(f"{self._LINE_PREFIX}{label.strip()}")

    def _stop_indicator(self) -> None:
        if not self._indicator_active:
            return
        self._indicator_active = False
        if self._spinner is not None:
            self._spinner.stop()
            self._spinner = None

    async def _on_help(self) -> None:
        self._write(f"{self._LINE_PREFIX}Commands:")
        self._write(f"{self._LINE_PREFIX}- /help: show this help")
        self._write(f"{self._LINE_PREFIX}- /cancel or Ctrl+C while waiting: stop waiting for the reply")
        self._write(f"{self._LINE_PREFIX}- /history: show the whole conversation")
        self._write(f"{self._LINE_PREFIX}- /error: dismiss the last error")
        self._write(f"{self._LINE_PREFIX}- exit | quit: leave")

    async def _on_cancel(self) -> None:
        count = self._controller.cancel_active_runs()
        if count:
            self._write(f"{self._LINE_PREFIX}Cancelling {count} run(s)...")
        else:
            self._write(f"{self._LINE_PREFIX}Nothing to cancel.")

    async def _on_history(self) -> None:
        messages = self._controller.state.messages
        if not messages:
            self._write(f"{self._LINE_PREFIX}Ask a math question to get started.")
            return
        for message in messages:
            self._write(f"{message.role}> {message.content}")

    async def _on_dismiss_error(self) -> None:
        self._controller.dismiss_error()
        self._last_error = None

    def _on_unknown_command(self, command: str) -> None:
        self._write(f"{self._LINE_PREFIX}Unknown command: {command}. Type /help.")
