import httpx
from loguru import logger

from assistant_chat.errors import MissingCredentialError

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_BETA_HEADER = "assistants=v2"


async def _log_request(request: httpx.Request) -> None:
    logger.debug(f"API request: {request.method} {request.url.path}")


async def _log_response(response: httpx.Response) -> None:
    logger.debug(
        f"API response: {response.request.method} {response.request.url.path} -> HTTP {response.status_code}"
    )


def create_client(
    api_key: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = 30.0,
    beta_header: str | None = DEFAULT_BETA_HEADER,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build an HTTP client bound to the Assistants API with bearer auth.

    Transport failures are not retried; they propagate to the caller.
    """
    if not api_key or not api_key.strip():
        raise MissingCredentialError()

    headers = {
        "Authorization": f"Bearer {api_key.strip()}",
        "Content-Type": "application/json",
    }
    if beta_header:
        headers["OpenAI-Beta"] = beta_header

    return httpx.AsyncClient(
        base_url=base_url,
        headers=headers,
        timeout=timeout,
        transport=transport,
        event_hooks={"request": [_log_request], "response": [_log_response]},
    )
