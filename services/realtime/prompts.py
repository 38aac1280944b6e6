"""Prompt helpers for realtime voice sessions."""

from __future__ import annotations

from typing import Optional


def session_instructions(preferred_lang: Optional[str] = None) -> str:
	"""Return the assistant instructions attached to a new realtime session."""
	if preferred_lang:
		language_rule = f"Reply in {preferred_lang} unless the user asks for a different language."
	else:
		language_rule = "Detect the user's language from the transcript and reply in the same language."
	return " ".join(
		[
			language_rule,
			"Keep replies concise and ALWAYS include a text transcript with the audio.",
			"Preserve numbers, units, product names, URLs, and code blocks verbatim.",
		]
	)


def greeting_instructions() -> str:
	"""Return the instructions for the assistant's opening turn."""
	return "Only speak English. Introduce yourself briefly, then wait for the user."
