from __future__ import annotations


class AssistantChatError(Exception):
    """Base class for every error surfaced to the chat session."""


class MissingCredentialError(AssistantChatError):
    def __init__(self) -> None:
        super().__init__("An API key is required")


class SessionNotReadyError(AssistantChatError):
    def __init__(self, detail: str = "assistant and thread must be created first") -> None:
        super().__init__(f"Session is not ready: {detail}")


class ApiError(AssistantChatError):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")


class SetupError(AssistantChatError):
    pass


class AssistantCreationError(SetupError):
    pass


class ThreadCreationError(SetupError):
    pass


class SendMessageError(AssistantChatError):
    pass


class RunStartError(AssistantChatError):
    pass


class RunPollError(AssistantChatError):
    pass
