"""Realtime session credential minting for the voice client."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request
from openai import AsyncOpenAI

from services.openai.realtime_sessions import RealtimeSessionBroker
from utils.config import get_settings
from utils.errors import ConfigurationError

MISSING_KEY_MESSAGE = "Missing OPENAI_API_KEY in env."


def require_openai_client(request: Request) -> AsyncOpenAI:
	"""Return the shared OpenAI client or raise ConfigurationError when no key is provisioned."""
	client = getattr(request.app.state, "openai_client", None)
	if client is None:
		raise ConfigurationError(MISSING_KEY_MESSAGE)
	return client


async def create_realtime_session(request: Request, preferred_lang: Optional[str]) -> Dict[str, Any]:
	"""Mint a realtime session and return the provider's session object."""
	client = require_openai_client(request)
	settings = get_settings()
	broker = RealtimeSessionBroker(client, model=settings.realtime_model, voice=settings.realtime_voice)
	return await broker.create(preferred_lang)
