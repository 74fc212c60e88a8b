import re
import sys
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from loguru import logger

_SECRET_PATTERN = re.compile(r"(Bearer\s+|\bsk-)[A-Za-z0-9_\-]{4,}")


def redact_secrets(text: str) -> str:
    return _SECRET_PATTERN.sub(lambda m: m.group(1) + "***", text)


def _redacting_patcher(record: dict) -> None:
    record["message"] = redact_secrets(record["message"])


@runtime_checkable
class LogConsumer(Protocol):
    def register(self, level: str) -> None: ...
    def describe(self, level: str) -> str: ...


class ConsoleLogConsumer:
    def register(self, level: str) -> None:
        logger.add(
            sys.stderr,
            level=level,
            format="<level>{level:<8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        )

    def describe(self, level: str) -> str:
        return f"console (stderr, {level})"


class FileLogConsumer:
    def __init__(
        self,
        path: str = "assistant_chat.log",
        rotation: str = "5 MB",
        retention: int = 3,
    ):
        self._path = path
        self._rotation = rotation
        self._retention = retention

    def register(self, level: str) -> None:
        Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            self._path,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} - {message}",
            rotation=self._rotation,
            retention=self._retention,
        )

    def describe(self, level: str) -> str:
        return f"file ({self._path}, {level})"


_CONSUMER_TYPES: dict[str, type] = {
    "console": ConsoleLogConsumer,
    "file": FileLogConsumer,
}

# Console stays quiet by default so log lines don't interleave with the chat transcript.
_DEFAULT_CONSUMERS = [
    {"type": "console", "level": "WARNING"},
    {"type": "file", "path": "assistant_chat.log"},
]


def setup_logging(
    level: str = "INFO",
    consumers: list[dict[str, Any]] | None = None,
) -> list[str]:
    """Configure logging sinks. Returns a description of each registered consumer.

    API keys and bearer tokens are masked in every record before any sink sees it.
    """
    logger.remove()
    logger.configure(patcher=_redacting_patcher)

    if consumers is None:
        consumers = _DEFAULT_CONSUMERS

    descriptions: list[str] = []

    for config in consumers:
        sink_type = config.get("type", "")
        cls = _CONSUMER_TYPES.get(sink_type)
        if cls is None:
            logger.warning(f"Unknown log consumer type: {sink_type!r}")
            continue

        kwargs = {k: v for k, v in config.items() if k not in ("type", "level")}
        sink_level = config.get("level", level)

        consumer = cls(**kwargs)
        consumer.register(sink_level)
        descriptions.append(consumer.describe(sink_level))

    return descriptions
