"""Rebuild a readable transcript from realtime data channel events.

Events arrive one at a time from the provider data channel, either as JSON
objects or as opaque strings. The reconstructor folds each event into a
:class:`Transcript`: identified transcript deltas are grouped per provider
``item_id``, un-identified text from other event dialects goes to a single
generic track, and plain strings become standalone assistant lines.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from models.transcript_models import Message, StreamingItem, Transcript

TRANSCRIPT_DELTA_TYPES = {
	"response.audio_transcript.delta",
	"response.output_audio_transcript.delta",
}
TRANSCRIPT_DONE_TYPES = {
	"response.audio_transcript.done",
	"response.output_audio_transcript.done",
}
USER_TRANSCRIPT_TYPES = {"conversation.item.input_audio_transcription.completed"}
GENERIC_DONE_TYPES = {"response.done", "response.text.done", "response.output_text.done"}
GENERIC_ITEM_ID = "__generic__"

RawEvent = Union[str, bytes, Dict[str, Any]]
_NOT_JSON = object()


@dataclass
class TranscriptChange:
	"""What a single event did to the transcript."""

	message: Message
	fragment: str
	created: bool


def _first_text(event: Dict[str, Any]) -> Optional[str]:
	"""Return the first non-blank text among the known provider event shapes."""
	candidates = (
		_path(event, "delta", "content", 0, "text"),
		_path(event, "content", 0, "text"),
		_path(event, "output_text", "delta"),
		event.get("text"),
	)
	for candidate in candidates:
		if isinstance(candidate, str) and candidate.strip():
			return candidate
	return None


def _path(value: Any, *keys: Any) -> Any:
	for key in keys:
		if isinstance(key, int):
			if not isinstance(value, list) or len(value) <= key:
				return None
		elif not isinstance(value, dict):
			return None
		value = value[key] if isinstance(key, int) else value.get(key)
	return value


class TranscriptReconstructor:
	"""Fold streamed provider events into an ordered, deduplicated transcript."""

	def __init__(self, transcript: Optional[Transcript] = None) -> None:
		self.transcript = transcript if transcript is not None else Transcript()

	@property
	def messages(self):
		return self.transcript.messages

	def add_message(self, role: str, text: str) -> Optional[TranscriptChange]:
		"""Append a complete line; blank text is dropped."""
		if not isinstance(text, str) or not text.strip():
			return None
		message = Message(role=role, text=text)
		self.transcript.messages.append(message)
		return TranscriptChange(message=message, fragment=text, created=True)

	def apply(self, raw: RawEvent) -> Optional[TranscriptChange]:
		"""Apply one event and return the resulting change, or None when ignored."""
		event = self._decode(raw)
		if event is _NOT_JSON:
			text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else str(raw or "")
			return self.add_message("assistant", text.strip())
		if not isinstance(event, dict):
			return None

		event_type = event.get("type")
		if event_type in TRANSCRIPT_DELTA_TYPES:
			item_id = event.get("item_id")
			delta = event.get("delta")
			if not isinstance(delta, str):
				return None
			if not item_id:
				return self._append_generic(delta)
			return self._append_delta(str(item_id), delta)

		if event_type in TRANSCRIPT_DONE_TYPES:
			return self._complete_item(event)

		if event_type in USER_TRANSCRIPT_TYPES:
			return self.add_message("user", (event.get("transcript") or "").strip())

		if event_type in GENERIC_DONE_TYPES:
			self.transcript.open_items.pop(GENERIC_ITEM_ID, None)
			return None

		text = _first_text(event)
		if text is None:
			return None
		return self._append_generic(text)

	def reset(self) -> None:
		"""Drop all messages and streaming items."""
		self.transcript.clear()

	@staticmethod
	def _decode(raw: RawEvent) -> Any:
		if isinstance(raw, dict):
			return raw
		try:
			return json.loads(raw)
		except (TypeError, ValueError):
			return _NOT_JSON

	def _append_delta(self, item_id: str, delta: str) -> Optional[TranscriptChange]:
		if not delta or item_id in self.transcript.closed_items:
			return None
		item = self.transcript.open_items.get(item_id)
		if item is None:
			message = Message(role="assistant", text=delta)
			self.transcript.messages.append(message)
			self.transcript.open_items[item_id] = StreamingItem(item_id=item_id, message=message)
			return TranscriptChange(message=message, fragment=delta, created=True)
		item.message.text += delta
		return TranscriptChange(message=item.message, fragment=delta, created=False)

	def _append_generic(self, text: str) -> Optional[TranscriptChange]:
		if not text:
			return None
		# The generic track is never added to closed_items; it reopens freely.
		item = self.transcript.open_items.get(GENERIC_ITEM_ID)
		if item is None:
			if not text.strip():
				return None
			message = Message(role="assistant", text=text)
			self.transcript.messages.append(message)
			self.transcript.open_items[GENERIC_ITEM_ID] = StreamingItem(item_id=GENERIC_ITEM_ID, message=message)
			return TranscriptChange(message=message, fragment=text, created=True)
		item.message.text += text
		return TranscriptChange(message=item.message, fragment=text, created=False)

	def _complete_item(self, event: Dict[str, Any]) -> Optional[TranscriptChange]:
		item_id = event.get("item_id")
		if not item_id:
			return None
		item_id = str(item_id)
		item = self.transcript.open_items.pop(item_id, None)
		already_closed = item_id in self.transcript.closed_items
		self.transcript.closed_items.add(item_id)
		if item is not None or already_closed:
			return None
		final_text = event.get("transcript")
		if isinstance(final_text, str) and final_text.strip():
			return self.add_message("assistant", final_text)
		return None
