"""Lenient JSON body reading shared by the relay routes."""

import json
from typing import Any

from fastapi import Request


async def read_json_body(request: Request) -> Any:
    """Return the decoded JSON body, or an empty dict when absent or malformed."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, ValueError):
        return {}
