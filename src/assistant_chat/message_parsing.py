from __future__ import annotations

from assistant_chat.models import ChatMessage

_BLOCK_SEPARATOR = "\n\n"


def render_content_block(block: dict) -> str:
    block_type = block.get("type", "")
    if block_type == "text":
        text = block.get("text") or {}
        if isinstance(text, dict):
            return str(text.get("value", ""))
        return str(text)
    if block_type == "image_file":
        file_id = (block.get("image_file") or {}).get("file_id", "?")
        return f"[image: {file_id}]"
    if block_type == "image_url":
        url = (block.get("image_url") or {}).get("url", "?")
        return f"[image: {url}]"
    return f"[{block_type or 'unknown'}]"


def render_content(content: list[dict] | str | None) -> str:
    """Join every content block of a message into one display string."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return _BLOCK_SEPARATOR.join(render_content_block(block) for block in content)


def parse_thread_messages(payload: dict) -> tuple[ChatMessage, ...]:
    """Convert a thread message listing (newest first) into chronological ChatMessages."""
    data = payload.get("data") or []
    return tuple(
        ChatMessage(
            id=str(msg.get("id", "")),
            role=str(msg.get("role", "")),
            content=render_content(msg.get("content")),
        )
        for msg in reversed(data)
    )
