import inspect
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from openai import AsyncOpenAI

from routes.session_route import router as session_router
from routes.translate_route import router as translate_router
from utils.config import get_settings
from utils.errors import add_exception_handlers
from utils.logging_setup import configure_logging

LOGGER = logging.getLogger(__name__)
SERVICE_NAME = "voicechat-backend"


def build_openai_client():
    """Return an AsyncOpenAI client, or None when OPENAI_API_KEY is not provisioned.

    Retries are disabled: every upstream failure is reported to the caller
    after a single round trip.
    """
    settings = get_settings()
    if not settings.openai_api_key:
        LOGGER.warning("OPENAI_API_KEY is not set; /session and /translate will answer 500")
        return None
    try:
        return AsyncOpenAI(api_key=settings.openai_api_key, max_retries=0)
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to configure logging, initialize the OpenAI async
    client and attach it to `app.state`. A missing key is not fatal at startup; requests that need
    the client fail with a configuration error instead.
    """
    configure_logging(get_settings().debug)
    app.state.openai_client = build_openai_client()

    try:
        yield
    finally:
        # Gracefully close the OpenAI client if it exposes a close/aclose method.
        client = getattr(app.state, "openai_client", None)
        if client is not None:
            aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
            if aclose is not None:
                try:
                    if inspect.iscoroutinefunction(aclose):
                        await aclose()
                    else:
                        result = aclose()
                        if inspect.isawaitable(result):
                            await result
                except Exception:
                    LOGGER.warning("Error closing OpenAI client during shutdown", exc_info=True)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(lifespan=lifespan)

    # TODO: restrict allow_origins to the deployed frontend once it has a fixed host.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    add_exception_handlers(app)

    @app.get("/")
    async def root():
        """Liveness probe."""
        return {"ok": True, "service": SERVICE_NAME}

    @app.get("/hello")
    async def hello():
        return {"ok": True, "message": "hello 👋"}

    # Register application routers
    app.include_router(session_router)
    app.include_router(translate_router)

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    LOGGER.info("backend running on http://localhost:%s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
