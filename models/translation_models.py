"""Translation request/response models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from utils.errors import ValidationError

FORMALITY_LEVELS = ("formal", "neutral", "casual")
MISSING_INPUT_MESSAGE = "Provide 'text' and non-empty array 'targets'."


@dataclass
class TranslationRequest:
	"""Validated input for a single translation call."""

	text: str
	targets: List[str]
	source_lang: Optional[str] = None
	formality: str = "neutral"
	glossary: Dict[str, str] = field(default_factory=dict)

	@classmethod
	def from_payload(cls, payload: Any) -> "TranslationRequest":
		"""Build a request from a decoded JSON body, raising ValidationError when malformed."""
		body = payload if isinstance(payload, dict) else {}
		text = body.get("text")
		targets = body.get("targets")
		if not isinstance(text, str) or not text or not isinstance(targets, list) or not targets:
			raise ValidationError(MISSING_INPUT_MESSAGE)
		if not all(isinstance(code, str) and code.strip() for code in targets):
			raise ValidationError("Every entry in 'targets' must be a non-empty language code.")

		formality = body.get("formality") or "neutral"
		if formality not in FORMALITY_LEVELS:
			raise ValidationError(f"'formality' must be one of: {', '.join(FORMALITY_LEVELS)}.")

		glossary = body.get("glossary")
		if glossary is None:
			glossary = {}
		if not isinstance(glossary, dict):
			raise ValidationError("'glossary' must be an object mapping terms to terms.")

		source_lang = body.get("source_lang")
		if source_lang is not None and not isinstance(source_lang, str):
			raise ValidationError("'source_lang' must be a string.")

		return cls(
			text=text,
			targets=list(targets),
			source_lang=source_lang or None,
			formality=formality,
			glossary=dict(glossary),
		)

	def prompt_payload(self) -> Dict[str, Any]:
		"""Return the input JSON embedded in the user prompt."""
		return {
			"instruction": "Translate the provided TEXT into each TARGET in 'targets'.",
			"source_lang": self.source_lang or "auto",
			"targets": self.targets,
			"glossary": self.glossary,
			"text": self.text,
		}


class TranslationResult(BaseModel):
	"""Model output in the shape returned to the caller."""

	source_lang: str
	translations: Dict[str, str]

	@classmethod
	def from_model_content(cls, content: Any) -> Optional["TranslationResult"]:
		"""Return a result when ``content`` has the expected shape, else None."""
		if not isinstance(content, dict):
			return None
		try:
			return cls.model_validate(content)
		except PydanticValidationError:
			return None
