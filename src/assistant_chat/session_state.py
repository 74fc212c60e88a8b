"""Session state and its transitions.

Every transition is a pure function of ``(state, event) -> state`` so the
controller's behaviour, including overlapping sends, can be replayed in tests
without any network or timers.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from assistant_chat.errors import SessionNotReadyError
from assistant_chat.models import STEP_CHAT, STEP_SETUP, ChatMessage


@dataclass(frozen=True)
class SessionState:
    step: str = STEP_SETUP
    assistant_id: str = ""
    thread_id: str = ""
    messages: tuple[ChatMessage, ...] = ()
    user_input: str = ""
    loading: bool = False
    error: str | None = None

    @property
    def is_ready(self) -> bool:
        return self.step == STEP_CHAT and bool(self.assistant_id) and bool(self.thread_id)


@dataclass(frozen=True)
class InputChanged:
    text: str


@dataclass(frozen=True)
class ProvisioningStarted:
    pass


@dataclass(frozen=True)
class AssistantCreated:
    assistant_id: str


@dataclass(frozen=True)
class ThreadCreated:
    thread_id: str


@dataclass(frozen=True)
class ProvisioningFailed:
    error: str


@dataclass(frozen=True)
class MessageSubmitted:
    message: ChatMessage


@dataclass(frozen=True)
class MessageSent:
    pass


@dataclass(frozen=True)
class SendFailed:
    error: str


@dataclass(frozen=True)
class RunCompleted:
    messages: tuple[ChatMessage, ...]


@dataclass(frozen=True)
class RunEnded:
    error: str


@dataclass(frozen=True)
class ErrorDismissed:
    pass


def apply(state: SessionState, event: object) -> SessionState:
    if isinstance(event, InputChanged):
        return replace(state, user_input=event.text)

    if isinstance(event, ProvisioningStarted):
        return replace(state, loading=True, error=None)
    if isinstance(event, AssistantCreated):
        return replace(state, assistant_id=event.assistant_id)
    if isinstance(event, ThreadCreated):
        if not state.assistant_id:
            raise SessionNotReadyError("thread created without an assistant")
        return replace(state, thread_id=event.thread_id, step=STEP_CHAT, loading=False)
    if isinstance(event, ProvisioningFailed):
        return replace(state, step=STEP_SETUP, loading=False, error=event.error)

    if isinstance(event, MessageSubmitted):
        if not state.is_ready:
            raise SessionNotReadyError()
        return replace(
            state,
            messages=state.messages + (event.message,),
            loading=True,
            error=None,
        )
    if isinstance(event, MessageSent):
        return replace(state, user_input="")
    if isinstance(event, (SendFailed, RunEnded)):
        return replace(state, loading=False, error=event.error)
    if isinstance(event, RunCompleted):
        return replace(state, messages=tuple(event.messages), loading=False)

    if isinstance(event, ErrorDismissed):
        return replace(state, error=None)

    raise TypeError(f"Unknown session event: {type(event).__name__}")
