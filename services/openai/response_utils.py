"""Helpers for reading raw OpenAI HTTP payloads."""

import json
from typing import Any, Optional, Tuple


def decode_json_body(raw: str) -> Tuple[bool, Any]:
    """Return ``(True, value)`` when ``raw`` is JSON, else ``(False, None)``."""
    try:
        return True, json.loads(raw)
    except (TypeError, ValueError):
        return False, None


def body_or_raw(raw: str) -> Any:
    """Decode a JSON body, wrapping non-JSON text as ``{"raw": text}``."""
    ok, value = decode_json_body(raw)
    return value if ok else {"raw": raw}


def extract_message_content(data: Any) -> Optional[Any]:
    """Return ``choices[0].message.content`` from a chat completion body if present."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    return message.get("content")
