from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from assistant_chat.models import AssistantSpec
from assistant_chat.transport import DEFAULT_BASE_URL


@dataclass
class AppConfig:
    base_url: str
    assistant: AssistantSpec
    poll_interval_seconds: float
    max_poll_attempts: int
    request_timeout_seconds: float
    log_level: str
    log_consumers: list | None


def load_json_config() -> dict:
    config_path = Path.cwd() / "config.json"
    if config_path.exists():
        with open(config_path) as f:
            return json.load(f)
    return {}


def _parse_tools(value: object) -> tuple[dict, ...]:
    if value is None:
        return AssistantSpec.tools
    if not isinstance(value, list):
        raise ValueError(f"Tools must be a list, got {type(value).__name__}")
    tools: list[dict] = []
    for item in value:
        if isinstance(item, str):
            tools.append({"type": item})
        elif isinstance(item, dict) and item.get("type"):
            tools.append(dict(item))
        else:
            raise ValueError(f"Invalid tool entry: {item!r}")
    return tuple(tools)


def parse_app_config(config: dict) -> AppConfig:
    defaults = AssistantSpec()
    return AppConfig(
        base_url=str(config.get("BaseUrl", DEFAULT_BASE_URL)).rstrip("/"),
        assistant=AssistantSpec(
            name=str(config.get("AssistantName", defaults.name)),
            instructions=str(config.get("Instructions", defaults.instructions)),
            tools=_parse_tools(config.get("Tools")),
            model=str(config.get("Model", defaults.model)),
        ),
        poll_interval_seconds=float(config.get("PollIntervalSeconds", 1.0)),
        max_poll_attempts=int(config.get("MaxPollAttempts", 600)),
        request_timeout_seconds=float(config.get("RequestTimeoutSeconds", 30.0)),
        log_level=config.get("LogLevel", "INFO"),
        log_consumers=config.get("LogConsumers"),
    )


def default_api_key() -> str:
    """Key offered as the default answer at the interactive prompt, if any."""
    return os.environ.get("OPENAI_API_KEY", "")
