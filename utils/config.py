"""Environment-backed settings for the relay and its clients."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

DEFAULT_PORT = 3001
DEFAULT_BACKEND_URL = "http://localhost:3001"
DEFAULT_REALTIME_URL = "https://api.openai.com/v1/realtime"


def _env_flag(name: str) -> bool:
    """Return True when the variable is set to anything but an explicit off value."""
    value = (os.getenv(name) or "").strip().lower()
    return value not in ("", "0", "false", "no", "off")


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Snapshot of the environment configuration."""

    openai_api_key: Optional[str]
    debug: bool
    port: int
    backend_url: str
    realtime_model: str
    realtime_voice: str
    realtime_url: str
    translate_model: str
    mic_device: Optional[str] = None
    mic_format: Optional[str] = None
    speaker_device: Optional[str] = None
    speaker_format: Optional[str] = None


def get_settings() -> Settings:
    """Read settings from the current environment.

    The environment is re-read on every call so a key added to the process
    after startup (or removed in tests) is honored.
    """
    api_key = (os.getenv("OPENAI_API_KEY") or "").strip() or None
    return Settings(
        openai_api_key=api_key,
        debug=_env_flag("DEBUG"),
        port=_env_int("PORT", DEFAULT_PORT),
        backend_url=(os.getenv("BACKEND_URL") or DEFAULT_BACKEND_URL).rstrip("/"),
        realtime_model=os.getenv("OPENAI_REALTIME_MODEL", "gpt-4o-realtime-preview"),
        realtime_voice=os.getenv("OPENAI_REALTIME_VOICE", "verse"),
        realtime_url=(os.getenv("OPENAI_REALTIME_URL") or DEFAULT_REALTIME_URL).rstrip("/"),
        translate_model=os.getenv("OPENAI_TRANSLATE_MODEL", "gpt-4o-mini"),
        mic_device=os.getenv("MIC_DEVICE") or None,
        mic_format=os.getenv("MIC_FORMAT") or None,
        speaker_device=os.getenv("SPEAKER_DEVICE") or None,
        speaker_format=os.getenv("SPEAKER_FORMAT") or None,
    )
