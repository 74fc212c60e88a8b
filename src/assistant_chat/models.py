from __future__ import annotations

from dataclasses import dataclass

STEP_SETUP = "setup"
STEP_CHAT = "chat"

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

STATUS_COMPLETED = "completed"
FAILURE_STATUSES = frozenset({"failed", "cancelled", "expired"})
TERMINAL_STATUSES = FAILURE_STATUSES | {STATUS_COMPLETED}

# Outcomes decided locally, never reported by the server.
STATUS_TIMED_OUT = "timed_out"
STATUS_CANCELLED_LOCALLY = "cancelled_locally"


@dataclass(frozen=True)
class ChatMessage:
    id: str
    role: str
    content: str


@dataclass(frozen=True)
class AssistantSpec:
    name: str = "Math Tutor"
    instructions: str = "You are a personal math tutor. Write and run code to answer math questions."
    tools: tuple[dict, ...] = ({"type": "code_interpreter"},)
    model: str = "gpt-4o"


@dataclass(frozen=True)
class RunOutcome:
    run_id: str
    status: str
    messages: tuple[ChatMessage, ...] = ()

    @property
    def completed(self) -> bool:
        return self.status == STATUS_COMPLETED
