"""Mint ephemeral realtime session credentials via the OpenAI REST API."""

import logging
from typing import Any, Dict, Optional

import httpx
import openai
from openai import AsyncOpenAI

from services.openai.response_utils import body_or_raw
from services.realtime.prompts import session_instructions
from utils.errors import UpstreamError

LOGGER = logging.getLogger(__name__)
SESSIONS_PATH = "/realtime/sessions"
REALTIME_BETA_HEADER = {"OpenAI-Beta": "realtime=v1"}
TRANSCRIPTION_MODEL = "whisper-1"


class RealtimeSessionBroker:
    """Exchange the server-held API key for a short-lived realtime session token.

    Each call is a single round trip: the provider's session object (including
    ``client_secret.value``) is returned as-is and nothing is kept between calls.
    """

    def __init__(self, client: AsyncOpenAI, *, model: str = "gpt-4o-realtime-preview", voice: str = "verse") -> None:
        if client is None:
            raise ValueError("AsyncOpenAI client is required.")
        self.client = client
        self.model = model
        self.voice = voice

    def build_session_config(self, preferred_lang: Optional[str] = None) -> Dict[str, Any]:
        """Return the session body sent to the provider."""
        return {
            "model": self.model,
            "voice": self.voice,
            "modalities": ["audio", "text"],
            "instructions": session_instructions(preferred_lang),
            "input_audio_transcription": {"model": TRANSCRIPTION_MODEL},
            "turn_detection": {
                "type": "server_vad",
                "threshold": 0.5,
                "prefix_padding_ms": 300,
                "silence_duration_ms": 300,
                "create_response": True,
                "interrupt_response": True,
            },
        }

    async def create(self, preferred_lang: Optional[str] = None) -> Dict[str, Any]:
        """Create a realtime session and return the provider's session object.

        Raises:
            UpstreamError: The provider rejected the request or was unreachable.
        """
        try:
            response = await self.client.post(
                SESSIONS_PATH,
                body=self.build_session_config(preferred_lang),
                cast_to=httpx.Response,
                options={"headers": REALTIME_BETA_HEADER},
            )
        except openai.APIStatusError as exc:
            details = body_or_raw(exc.response.text)
            LOGGER.error("Realtime /sessions error %s: %s", exc.status_code, details)
            raise UpstreamError(
                "Upstream OpenAI error",
                status_code=exc.status_code,
                details=details,
                extra={"status": exc.status_code},
            ) from exc
        except openai.APIConnectionError as exc:
            LOGGER.error("Realtime /sessions request failed: %s", exc)
            raise UpstreamError("Upstream OpenAI error", status_code=502, details=str(exc), extra={"status": 502}) from exc

        return body_or_raw(response.text)
