from __future__ import annotations

import httpx
from loguru import logger

from assistant_chat.assistants_api import AssistantsApi
from assistant_chat.errors import ApiError, AssistantCreationError, ThreadCreationError
from assistant_chat.models import AssistantSpec


class ResourceProvisioner:
    def __init__(self, api: AssistantsApi, assistant_spec: AssistantSpec | None = None):
        self._api = api
        self._spec = assistant_spec or AssistantSpec()

    async def create_assistant(self) -> str:
        try:
            body = await self._api.create_assistant(
                name=self._spec.name,
                instructions=self._spec.instructions,
                tools=[dict(tool) for tool in self._spec.tools],
                model=self._spec.model,
            )
        except (ApiError, httpx.HTTPError) as ex:
            raise AssistantCreationError(str(ex) or type(ex).__name__) from ex
        assistant_id = body["id"]
        logger.info(f"Created assistant {assistant_id} ({self._spec.name}, {self._spec.model})")
        return assistant_id

    async def create_thread(self) -> str:
        try:
            body = await self._api.create_thread()
        except (ApiError, httpx.HTTPError) as ex:
            raise ThreadCreationError(str(ex) or type(ex).__name__) from ex
        thread_id = body["id"]
        logger.info(f"Created thread {thread_id}")
        return thread_id
