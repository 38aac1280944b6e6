"""Prompt builders for the JSON-mode translator."""

import json
from typing import Any, Dict

RESPONSE_SHAPE = '{ "source_lang": "<iso or \'auto-detected\'>", "translations": { "<tgt>": "...", ... } }'


def build_system_prompt(formality: str) -> str:
    """Return the fixed translation rules with the requested formality."""
    return "\n".join(
        [
            "You are a professional multilingual translator.",
            "Output MUST be valid JSON (no markdown, no code fences, no prose).",
            "Rules:",
            "- Be faithful and idiomatic in the TARGET language.",
            "- Preserve meaning, tone, numbers, punctuation, emoji, and line breaks.",
            "- Do NOT translate code blocks, variable names, file paths, or URLs.",
            "- If a term appears in GLOSSARY, use its mapped target form exactly.",
            "- If text is already in a target language, return it unchanged for that target.",
            f"- Formality: {formality}.",
        ]
    )


def build_user_prompt(payload: Dict[str, Any]) -> str:
    """Return the user message embedding the request as JSON."""
    return (
        "Return ONLY a JSON object of the form:\n"
        f"{RESPONSE_SHAPE}\n"
        "No explanations. Here is the input JSON:\n"
        + json.dumps(payload, ensure_ascii=False)
    )
