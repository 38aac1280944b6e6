"""Logging configuration shared by the server and the client scripts."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(debug: bool = False) -> None:
    """Configure root logging; DEBUG enables verbose upstream diagnostics."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # basicConfig is a no-op once the server has installed root handlers.
    logging.getLogger().setLevel(level)
    # The OpenAI and httpx clients are chatty at debug level.
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("openai").setLevel(logging.WARNING)
