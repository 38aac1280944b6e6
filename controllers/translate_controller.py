"""Translation request handling between the API layer and the gateway."""

from typing import Any, Dict

from fastapi import Request

from controllers.session_controller import require_openai_client
from models.translation_models import TranslationRequest
from services.openai.translator import TranslationGateway
from utils.config import get_settings


async def translate_text(request: Request, payload: Any) -> Dict[str, Any]:
    """Validate the body and return the model's ``{source_lang, translations}`` object.

    Args:
        request: FastAPI Request (used to access the shared OpenAI client).
        payload: Decoded JSON body, or None when the body was missing or invalid.

    Returns:
        The parsed translation object exactly as the model produced it.

    Raises:
        ValidationError: If ``text`` or ``targets`` are missing or malformed.
        ConfigurationError: If no OpenAI API key is configured.
        UpstreamError / ProtocolError: If the provider call fails.
    """
    translation_request = TranslationRequest.from_payload(payload)
    client = require_openai_client(request)
    settings = get_settings()
    gateway = TranslationGateway(client, model=settings.translate_model, debug=settings.debug)
    return await gateway.translate(translation_request)
