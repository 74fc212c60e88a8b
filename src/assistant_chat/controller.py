from __future__ import annotations

from collections.abc import Callable
from uuid import uuid4

import httpx
from loguru import logger

from assistant_chat.app_config import AppConfig, parse_app_config
from assistant_chat.assistants_api import AssistantsApi
from assistant_chat.errors import (
    AssistantCreationError,
    MissingCredentialError,
    RunPollError,
    RunStartError,
    SendMessageError,
    SessionNotReadyError,
    ThreadCreationError,
)
from assistant_chat.message_exchanger import MessageExchanger
from assistant_chat.models import (
    ROLE_USER,
    STATUS_CANCELLED_LOCALLY,
    STATUS_TIMED_OUT,
    ChatMessage,
    RunOutcome,
)
from assistant_chat.provisioner import ResourceProvisioner
from assistant_chat.run_poller import CancelToken, RunPoller
from assistant_chat.session_state import (
    AssistantCreated,
    ErrorDismissed,
    InputChanged,
    MessageSent,
    MessageSubmitted,
    ProvisioningFailed,
    ProvisioningStarted,
    RunCompleted,
    RunEnded,
    SendFailed,
    SessionState,
    ThreadCreated,
    apply,
)
from assistant_chat.transport import create_client

StateListener = Callable[[SessionState], None]


def _local_message_id() -> str:
    return f"local-{uuid4().hex}"


class ChatController:
    """Owns the session state and drives provisioning, sending and polling.

    Overlapping ``send_message`` calls are allowed; each run has its own
    cancel token and whichever completes last decides the displayed list.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        client_factory: Callable[..., httpx.AsyncClient] = create_client,
        id_factory: Callable[[], str] = _local_message_id,
    ):
        self._config = config or parse_app_config({})
        self._client_factory = client_factory
        self._id_factory = id_factory
        self._state = SessionState()
        self._api_key = ""
        self._api: AssistantsApi | None = None
        self._exchanger: MessageExchanger | None = None
        self._active_tokens: set[CancelToken] = set()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def active_run_count(self) -> int:
        return len(self._active_tokens)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_api_key(self, api_key: str) -> None:
        self._api_key = api_key

    def set_input(self, text: str) -> None:
        self._dispatch(InputChanged(text))

    def dismiss_error(self) -> None:
        self._dispatch(ErrorDismissed())

    async def create_assistant(self) -> None:
        if self._state.is_ready:
            logger.info("Assistant and thread already exist; ignoring create request")
            return

        self._dispatch(ProvisioningStarted())
        try:
            await self._connect()
            provisioner = ResourceProvisioner(self._api, self._config.assistant)
            assistant_id = await provisioner.create_assistant()
        except (MissingCredentialError, AssistantCreationError) as ex:
            self._fail_setup(f"Error creating assistant: {ex}")
            return
        self._dispatch(AssistantCreated(assistant_id))

        try:
            thread_id = await provisioner.create_thread()
        except ThreadCreationError as ex:
            self._fail_setup(f"Error creating thread: {ex}")
            return
        self._dispatch(ThreadCreated(thread_id))

    async def send_message(self, text: str | None = None) -> RunOutcome | None:
        """Send ``text`` (or the input buffer) and wait for the assistant's reply.

        Blank input is ignored without touching state or the network.
        """
        raw = self._state.user_input if text is None else text
        if not raw.strip():
            return None
        if not self._state.is_ready or self._exchanger is None:
            raise SessionNotReadyError()

        self._dispatch(MessageSubmitted(ChatMessage(id=self._id_factory(), role=ROLE_USER, content=raw)))

        token = CancelToken()
        self._active_tokens.add(token)
        try:
            outcome = await self._exchanger.send(
                self._state.thread_id,
                self._state.assistant_id,
                raw,
                cancel_token=token,
                on_posted=lambda: self._dispatch(MessageSent()),
            )
        except SendMessageError as ex:
            self._fail(SendFailed(f"Error sending message: {ex}"))
            return None
        except (RunStartError, RunPollError) as ex:
            self._fail(RunEnded(f"Error running thread: {ex}"))
            return None
        finally:
            self._active_tokens.discard(token)

        if outcome.completed:
            self._dispatch(RunCompleted(outcome.messages))
        elif outcome.status == STATUS_TIMED_OUT:
            self._fail(RunEnded(f"Run timed out after {self._config.max_poll_attempts} status checks"))
        elif outcome.status == STATUS_CANCELLED_LOCALLY:
            self._fail(RunEnded("Run cancelled"))
        else:
            self._fail(RunEnded(f"Run ended with status: {outcome.status}"))
        return outcome

    def cancel_active_runs(self) -> int:
        count = len(self._active_tokens)
        for token in list(self._active_tokens):
            token.cancel()
        if count:
            logger.info(f"Cancelling {count} active run(s)")
        return count

    async def aclose(self) -> None:
        self.cancel_active_runs()
        if self._api is not None:
            await self._api.aclose()
            self._api = None
            self._exchanger = None

    async def _connect(self) -> None:
        if self._api is not None:
            await self._api.aclose()
            self._api = None
            self._exchanger = None
        client = self._client_factory(
            self._api_key,
            base_url=self._config.base_url,
            timeout=self._config.request_timeout_seconds,
        )
        self._api = AssistantsApi(client)
        poller = RunPoller(
            self._api,
            interval_seconds=self._config.poll_interval_seconds,
            max_attempts=self._config.max_poll_attempts,
        )
        self._exchanger = MessageExchanger(self._api, poller)

    def _fail_setup(self, error: str) -> None:
        self._fail(ProvisioningFailed(error))

    def _fail(self, event: ProvisioningFailed | SendFailed | RunEnded) -> None:
        logger.error(event.error)
        self._dispatch(event)

    def _dispatch(self, event: object) -> None:
        self._state = apply(self._state, event)
        logger.debug(f"Session event {type(event).__name__}: step={self._state.step}, loading={self._state.loading}")
        for listener in list(self._listeners):
            listener(self._state)
