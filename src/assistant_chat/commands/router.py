from __future__ import annotations

from collections.abc import Awaitable, Callable


class CommandRouter:
    def __init__(
        self,
        *,
        on_help: Callable[[], Awaitable[None]],
        on_cancel: Callable[[], Awaitable[None]],
        on_history: Callable[[], Awaitable[None]],
        on_dismiss_error: Callable[[], Awaitable[None]],
        on_unknown: Callable[[str], None],
    ) -> None:
        self._on_help = on_help
        self._on_cancel = on_cancel
        self._on_history = on_history
        self._on_dismiss_error = on_dismiss_error
        self._on_unknown = on_unknown

    async def try_handle(self, user_message: str) -> bool:
        trimmed = user_message.strip()
        if not trimmed.startswith("/"):
            return False

        if trimmed == "/help":
            await self._on_help()
            return True
        if trimmed == "/cancel":
            await self._on_cancel()
            return True
        if trimmed == "/history":
            await self._on_history()
            return True
        if trimmed == "/error":
            await self._on_dismiss_error()
            return True

        self._on_unknown(trimmed)
        return True
