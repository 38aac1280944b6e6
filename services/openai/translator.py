"""Strict-JSON translation through Chat Completions JSON mode."""

import logging
from typing import Any, Dict, List

import openai
from openai import AsyncOpenAI

from models.translation_models import TranslationRequest, TranslationResult
from services.openai.response_utils import decode_json_body, extract_message_content
from services.openai.translation_prompts import build_system_prompt, build_user_prompt
from utils.errors import ProtocolError, UpstreamError

LOGGER = logging.getLogger(__name__)
DEBUG_PREVIEW_CHARS = 200


class TranslationGateway:
    """Forward a translation request to the model and validate its JSON reply.

    The model output is never repaired: anything that does not decode to
    ``{"source_lang": str, "translations": {...}}`` is surfaced as a
    ProtocolError that carries the raw content.
    """

    def __init__(self, client: AsyncOpenAI, *, model: str = "gpt-4o-mini", debug: bool = False) -> None:
        if client is None:
            raise ValueError("AsyncOpenAI client is required.")
        self.client = client
        self.model = model
        self.debug = debug

    def build_messages(self, request: TranslationRequest) -> List[Dict[str, str]]:
        """Return the chat messages for a request."""
        return [
            {"role": "system", "content": build_system_prompt(request.formality)},
            {"role": "user", "content": build_user_prompt(request.prompt_payload())},
        ]

    async def translate(self, request: TranslationRequest) -> Dict[str, Any]:
        """Translate ``request.text`` into every target and return the model's JSON object."""
        status, raw = await self._complete(request)
        if self.debug:
            LOGGER.debug("[/translate] upstream status: %s", status)
            LOGGER.debug("[/translate] upstream raw (first %d): %s", DEBUG_PREVIEW_CHARS, raw[:DEBUG_PREVIEW_CHARS])

        ok, data = decode_json_body(raw)
        if not ok:
            raise ProtocolError("Upstream non-JSON", extra={"raw": raw})
        if not 200 <= status < 300:
            logging.error("OpenAI translation request failed with status %s", status)
            raise UpstreamError("OpenAI error", status_code=status, details=data)

        content = extract_message_content(data)
        if not isinstance(content, str):
            raise ProtocolError("Missing JSON content from model", extra={"details": data})

        ok, parsed = decode_json_body(content)
        if not ok or TranslationResult.from_model_content(parsed) is None:
            raise ProtocolError("Model returned non-JSON content", extra={"content": content})
        return parsed

    async def _complete(self, request: TranslationRequest):
        """Return the upstream ``(status, body text)`` for one completion call."""
        try:
            response = await self.client.chat.completions.with_raw_response.create(
                model=self.model,
                temperature=0,
                response_format={"type": "json_object"},
                messages=self.build_messages(request),
            )
        except openai.APIStatusError as exc:
            return exc.status_code, exc.response.text
        except openai.APIConnectionError as exc:
            logging.error("OpenAI translation request failed: %s", exc)
            raise UpstreamError("OpenAI request failed", status_code=502, details=str(exc)) from exc
        return response.http_response.status_code, response.http_response.text
