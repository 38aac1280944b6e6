"""Client for the relay's /translate endpoint with the same input checks as the web form."""

import json
import re
from typing import Any, Dict, List, Optional, Union

import httpx

CUSTOM_CODE_PATTERN = re.compile(r"^[a-z]{2,3}(-[A-Za-z0-9]+)?$")
SUPPORTED_LANGUAGES = {
    "fr": "French",
    "es": "Spanish",
    "de": "German",
    "ar": "Arabic",
    "zh": "Chinese (Simplified)",
    "it": "Italian",
    "pt": "Portuguese",
    "ja": "Japanese",
    "ko": "Korean",
    "hi": "Hindi",
}


class TranslateClientError(RuntimeError):
    """Raised for invalid input or a failed translation call."""


def normalize_target(code: str) -> str:
    """Return a lowercased ISO code like ``nl`` or ``zh-cn``, or raise if malformed."""
    normalized = (code or "").strip().lower()
    if not CUSTOM_CODE_PATTERN.match(normalized):
        raise TranslateClientError("Custom code must be an ISO code like 'nl' or 'zh-CN'.")
    return normalized


def parse_glossary(glossary: Union[str, Dict[str, str], None]) -> Dict[str, str]:
    """Accept a glossary as a mapping or as JSON text."""
    if glossary is None or glossary == "":
        return {}
    if isinstance(glossary, dict):
        return glossary
    try:
        parsed = json.loads(glossary)
    except ValueError as exc:
        raise TranslateClientError("Glossary is not valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise TranslateClientError("Glossary is not valid JSON.")
    return parsed


class TranslateClient:
    """Send translation requests to the relay backend."""

    def __init__(self, base_url: str, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = http_client

    def build_payload(
        self,
        text: str,
        targets: List[str],
        *,
        formality: str = "neutral",
        glossary: Union[str, Dict[str, str], None] = None,
        source_lang: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Validate inputs and return the request body."""
        if not (text or "").strip():
            raise TranslateClientError("Please enter some text.")
        codes: List[str] = []
        for code in targets:
            normalized = normalize_target(code)
            if normalized not in codes:
                codes.append(normalized)
        if not codes:
            raise TranslateClientError("Select at least one target language.")
        payload: Dict[str, Any] = {
            "text": text,
            "targets": codes,
            "formality": formality,
            "glossary": parse_glossary(glossary),
        }
        if source_lang:
            payload["source_lang"] = source_lang
        return payload

    async def translate(self, text: str, targets: List[str], **options: Any) -> Dict[str, Any]:
        """Return ``{source_lang, translations}`` for ``text``."""
        payload = self.build_payload(text, targets, **options)
        try:
            if self._http is not None:
                response = await self._http.post(f"{self.base_url}/translate", json=payload)
            else:
                async with httpx.AsyncClient(timeout=60.0) as client:
                    response = await client.post(f"{self.base_url}/translate", json=payload)
        except httpx.HTTPError as exc:
            raise TranslateClientError(str(exc) or "Network error.") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            raise TranslateClientError(message or "Translation failed.")
        return data
