"""Connect / mute / disconnect lifecycle for one realtime voice session."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from models.transcript_models import ConnectionState, VoiceSession
from services.realtime.prompts import greeting_instructions
from services.realtime.transcript_reconstructor import TranscriptChange, TranscriptReconstructor

LOGGER = logging.getLogger(__name__)
CONNECTED_MESSAGE = "Connected — speak to the assistant!"
NO_TOKEN_MESSAGE = "No realtime session token from backend."
METER_INTERVAL = 0.05


class SessionConnectError(RuntimeError):
	"""The session could not be established; all partial resources were released."""


def level_from_rms(rms: float) -> int:
	"""Map an RMS amplitude in [0, 1] to the 0-100 meter scale."""
	return max(0, min(100, round(rms * 150)))


def client_secret(session: Any) -> Optional[str]:
	"""Return ``client_secret.value`` from a provider session object."""
	if not isinstance(session, dict):
		return None
	secret = session.get("client_secret")
	value = secret.get("value") if isinstance(secret, dict) else None
	return value if isinstance(value, str) and value else None


def greeting_event() -> Dict[str, Any]:
	"""Return the ``response.create`` event sent once the data channel opens."""
	return {
		"type": "response.create",
		"response": {"instructions": greeting_instructions(), "modalities": ["audio", "text"]},
	}


SessionFetcher = Callable[[], Awaitable[Dict[str, Any]]]
MicrophoneOpener = Callable[[], Awaitable[Any]]
PeerOpener = Callable[..., Awaitable[Any]]


class VoiceSessionController:
	"""Own the session state and every resource tied to one conversation.

	Collaborators are injected so the state machine does not depend on a
	particular transport:

	- ``fetch_session()`` returns the relay's session object.
	- ``open_microphone()`` returns a capture handle exposing ``enabled``,
	  ``rms()`` and ``stop()``.
	- ``open_peer(token, microphone, on_event, greeting)`` negotiates the
	  provider connection and returns a handle with an async ``close()``.
	"""

	def __init__(
		self,
		fetch_session: SessionFetcher,
		open_microphone: MicrophoneOpener,
		open_peer: PeerOpener,
		*,
		on_transcript: Optional[Callable[[TranscriptChange], None]] = None,
		meter_interval: float = METER_INTERVAL,
	) -> None:
		self.session = VoiceSession()
		self.reconstructor = TranscriptReconstructor(self.session.transcript)
		self._fetch_session = fetch_session
		self._open_microphone = open_microphone
		self._open_peer = open_peer
		self._on_transcript = on_transcript
		self._meter_interval = meter_interval
		self._microphone = None
		self._peer = None
		self._meter_task: Optional[asyncio.Task] = None
		self._generation = 0

	@property
	def state(self) -> ConnectionState:
		return self.session.state

	@property
	def messages(self):
		return self.session.messages

	async def connect(self) -> bool:
		"""Establish the session; returns False when a session is already active or was cancelled.

		Raises:
			SessionConnectError: The credential or negotiation failed. The
				session is back to idle with nothing left allocated.
		"""
		if self.session.state is not ConnectionState.IDLE:
			return False
		self.session.state = ConnectionState.CONNECTING
		generation = self._generation
		try:
			token = client_secret(await self._fetch_session())
			if not token:
				raise SessionConnectError(NO_TOKEN_MESSAGE)
			if generation != self._generation:
				return False

			microphone = await self._open_microphone()
			if generation != self._generation:
				await self._release_resources(microphone=microphone)
				return False
			self._microphone = microphone
			self._start_meter()

			peer = await self._open_peer(token, microphone, self.handle_event, greeting_event())
			if generation != self._generation:
				# disconnect() ran while negotiating and already released the microphone.
				await self._release_resources(peer=peer)
				return False
			self._peer = peer
		except Exception as exc:
			LOGGER.error("Realtime session failed to connect: %s", exc)
			if generation == self._generation:
				await self._release()
				self._reset_state()
			if isinstance(exc, SessionConnectError):
				raise
			raise SessionConnectError(f"Failed to connect realtime session: {exc}") from exc

		self.session.state = ConnectionState.CONNECTED
		self._notify(self.reconstructor.add_message("system", CONNECTED_MESSAGE))
		return True

	def handle_event(self, raw: Any) -> Optional[TranscriptChange]:
		"""Fold one data channel event into the transcript, in arrival order."""
		change = self.reconstructor.apply(raw)
		self._notify(change)
		return change

	def set_muted(self, muted: bool) -> bool:
		"""Enable or disable transmission of captured audio without touching the connection."""
		if self._microphone is None:
			return self.session.muted
		self._microphone.enabled = not muted
		self.session.muted = muted
		return muted

	def toggle_mute(self) -> bool:
		return self.set_muted(not self.session.muted)

	async def disconnect(self) -> None:
		"""Release every resource and return to idle. Safe to call repeatedly and mid-connect."""
		self._generation += 1
		await self._release()
		self._reset_state()

	def _reset_state(self) -> None:
		self.reconstructor.reset()
		self.session.state = ConnectionState.IDLE
		self.session.muted = False
		self.session.level = 0

	def _notify(self, change: Optional[TranscriptChange]) -> None:
		if change is not None and self._on_transcript is not None:
			self._on_transcript(change)

	def _start_meter(self) -> None:
		microphone = self._microphone
		self._meter_task = asyncio.get_running_loop().create_task(self._meter_loop(microphone))

	async def _meter_loop(self, microphone) -> None:
		while True:
			self.session.level = level_from_rms(microphone.rms())
			await asyncio.sleep(self._meter_interval)

	async def _release(self) -> None:
		"""Best-effort teardown of the meter, microphone and peer connection."""
		meter_task, self._meter_task = self._meter_task, None
		microphone, self._microphone = self._microphone, None
		peer, self._peer = self._peer, None
		await self._release_resources(meter_task=meter_task, microphone=microphone, peer=peer)
		self.session.level = 0

	@staticmethod
	async def _release_resources(meter_task=None, microphone=None, peer=None) -> None:
		if meter_task is not None:
			meter_task.cancel()
			try:
				await meter_task
			except asyncio.CancelledError:
				pass
			except Exception:
				LOGGER.warning("Level meter ended with an error", exc_info=True)

		if microphone is not None:
			try:
				microphone.stop()
			except Exception:
				LOGGER.warning("Failed to stop microphone capture", exc_info=True)

		if peer is not None:
			try:
				await peer.close()
			except Exception:
				LOGGER.warning("Failed to close realtime peer connection", exc_info=True)
