"""Client-side session and transcript models for realtime voice chat."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Set


class ConnectionState(str, Enum):
	IDLE = "idle"
	CONNECTING = "connecting"
	CONNECTED = "connected"


@dataclass
class Message:
	"""One line of the rendered transcript."""

	role: str
	text: str


@dataclass
class StreamingItem:
	"""Correlates a provider item identifier with the Message it is filling."""

	item_id: str
	message: Message


@dataclass
class Transcript:
	"""Ordered messages plus the open streaming items that still receive deltas."""

	messages: List[Message] = field(default_factory=list)
	open_items: Dict[str, StreamingItem] = field(default_factory=dict)
	# Finished item ids; grows per response and is emptied by clear() on disconnect.
	closed_items: Set[str] = field(default_factory=set)

	def visible(self) -> List[Message]:
		"""Messages with non-blank text, in insertion order."""
		return [msg for msg in self.messages if msg.text.strip()]

	def clear(self) -> None:
		self.messages.clear()
		self.open_items.clear()
		self.closed_items.clear()


@dataclass
class VoiceSession:
	"""State of the single active realtime conversation."""

	state: ConnectionState = ConnectionState.IDLE
	muted: bool = False
	level: int = 0
	transcript: Transcript = field(default_factory=Transcript)

	@property
	def messages(self) -> List[Message]:
		return self.transcript.messages
