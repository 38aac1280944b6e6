"""FastAPI routes for realtime voice sessions."""

import logging
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from controllers.session_controller import create_realtime_session
from routes.request_body import read_json_body
from utils.errors import InternalError, RelayError

router = APIRouter()
LOGGER = logging.getLogger(__name__)


class SessionPayload(BaseModel):
	preferredLang: Optional[str] = None


def _parse_payload(body) -> SessionPayload:
	"""Keep only ``preferredLang``; anything malformed falls back to defaults."""
	if not isinstance(body, dict):
		return SessionPayload()
	try:
		return SessionPayload.model_validate(body)
	except PydanticValidationError:
		return SessionPayload()


@router.post("/session")
async def create_session_route(request: Request):
	"""Return a provider-issued realtime session including ``client_secret.value``."""
	payload = _parse_payload(await read_json_body(request))
	try:
		return await create_realtime_session(request, payload.preferredLang or None)
	except RelayError:
		raise
	except Exception as exc:
		LOGGER.exception("Error creating session")
		raise InternalError("Failed to create realtime session.") from exc
