"""Error taxonomy for the relay endpoints and their JSON rendering."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

LOGGER = logging.getLogger(__name__)


class RelayError(Exception):
    """Base error carrying an HTTP status and a JSON body for the caller."""

    status_code = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None, extra: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra or {}

    def payload(self) -> Dict[str, Any]:
        """Return the JSON body sent to the caller."""
        return {"error": self.message, **self.extra}


class ConfigurationError(RelayError):
    """A required local setting (e.g. the upstream API key) is missing."""

    status_code = 500


class ValidationError(RelayError):
    """The caller sent a malformed request."""

    status_code = 400


class UpstreamError(RelayError):
    """The provider answered with a non-success status or could not be reached."""

    status_code = 502

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Any = None, extra: Optional[Dict[str, Any]] = None) -> None:
        body = dict(extra or {})
        if details is not None:
            body["details"] = details
        super().__init__(message, status_code=status_code, extra=body)
        self.details = details


class ProtocolError(RelayError):
    """The provider response could not be parsed in the expected shape."""

    status_code = 502


class InternalError(RelayError):
    """Unexpected local failure, reported without internals."""

    status_code = 500


def add_exception_handlers(app: FastAPI) -> None:
    """Render RelayError subclasses as ``{"error": ...}`` JSON bodies."""

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        if exc.status_code >= 500:
            LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.payload())
