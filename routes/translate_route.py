"""FastAPI routes for multi-language translation."""

import logging

from fastapi import APIRouter, Request

from controllers.translate_controller import translate_text
from routes.request_body import read_json_body
from utils.errors import InternalError, RelayError

router = APIRouter(prefix="/translate")
LOGGER = logging.getLogger(__name__)


@router.get("")
async def translate_probe():
    """Sanity probe so a plain GET on the route answers."""
    return {"ok": True, "route": "translate"}


@router.post("")
async def translate_route(request: Request):
    """Translate ``text`` into every code in ``targets`` and return strict JSON."""
    body = await read_json_body(request)
    try:
        return await translate_text(request, body)
    except RelayError:
        raise
    except Exception as exc:
        LOGGER.exception("Error in /translate")
        raise InternalError("Translation failed.") from exc
