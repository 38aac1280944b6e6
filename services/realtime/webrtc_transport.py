"""WebRTC transport to the provider's realtime endpoint, built on aiortc.

The relay backend never sees the audio: the client negotiates a peer
connection directly with the provider using the ephemeral token minted by
``POST /session``, sends microphone audio on it and receives provider events
on the ``oai-events`` data channel.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Callable, Dict, Optional, Tuple

import httpx
import numpy as np
from aiortc import MediaStreamTrack, RTCPeerConnection, RTCSessionDescription
from aiortc.contrib.media import MediaBlackhole, MediaPlayer, MediaRecorder
from av import AudioFrame

from services.realtime.voice_session import SessionConnectError

LOGGER = logging.getLogger(__name__)
EVENTS_CHANNEL = "oai-events"


def default_microphone() -> Tuple[str, str]:
	"""Return the ffmpeg ``(device, format)`` pair for the platform's default input."""
	if sys.platform == "darwin":
		return ":0", "avfoundation"
	if sys.platform.startswith("win"):
		return "audio=Microphone", "dshow"
	return "default", "pulse"


def frame_rms(frame: AudioFrame) -> float:
	"""Return the RMS amplitude of an audio frame normalized to [0, 1]."""
	samples = frame.to_ndarray()
	if samples.size == 0:
		return 0.0
	if np.issubdtype(samples.dtype, np.integer):
		values = samples.astype(np.float64) / float(np.iinfo(samples.dtype).max)
	else:
		values = samples.astype(np.float64)
	return float(np.sqrt(np.mean(np.square(values))))


def _silence_like(frame: AudioFrame) -> AudioFrame:
	silent = AudioFrame(format=frame.format.name, layout=frame.layout.name, samples=frame.samples)
	for plane in silent.planes:
		plane.update(bytes(plane.buffer_size))
	silent.sample_rate = frame.sample_rate
	silent.pts = frame.pts
	silent.time_base = frame.time_base
	return silent


class MicrophoneTrack(MediaStreamTrack):
	"""Audio track relaying a capture source, with a mute flag and live RMS."""

	kind = "audio"

	def __init__(self, source: MediaStreamTrack) -> None:
		super().__init__()
		self._source = source
		self._rms = 0.0
		self.enabled = True

	async def recv(self) -> AudioFrame:
		frame = await self._source.recv()
		if not self.enabled:
			self._rms = 0.0
			return _silence_like(frame)
		self._rms = frame_rms(frame)
		return frame

	def rms(self) -> float:
		return self._rms

	def stop(self) -> None:
		super().stop()
		self._source.stop()


async def open_microphone(device: Optional[str] = None, fmt: Optional[str] = None) -> MicrophoneTrack:
	"""Open the capture device through ffmpeg and wrap it in a MicrophoneTrack."""
	default_device, default_format = default_microphone()
	player = MediaPlayer(device or default_device, format=fmt or default_format)
	if player.audio is None:
		raise SessionConnectError("No audio input found on the capture device.")
	return MicrophoneTrack(player.audio)


async def exchange_sdp(
	offer_sdp: str,
	token: str,
	*,
	model: str,
	realtime_url: str,
	http_client: Optional[httpx.AsyncClient] = None,
) -> str:
	"""POST the SDP offer to the provider and return the SDP answer.

	No timeout is applied; a provider that never answers leaves the caller waiting.
	"""
	headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/sdp"}
	url = f"{realtime_url}?model={model}"
	if http_client is not None:
		response = await http_client.post(url, content=offer_sdp, headers=headers, timeout=None)
	else:
		async with httpx.AsyncClient(timeout=None) as client:
			response = await client.post(url, content=offer_sdp, headers=headers)
	if response.is_error:
		raise SessionConnectError(f"Realtime negotiation failed ({response.status_code}): {response.text}")
	return response.text


class RealtimePeer:
	"""One negotiated peer connection with its event channel and audio sink."""

	def __init__(self, pc: RTCPeerConnection, channel, sink) -> None:
		self.pc = pc
		self.channel = channel
		self.sink = sink

	@classmethod
	async def connect(
		cls,
		token: str,
		microphone: MicrophoneTrack,
		on_event: Callable[[Any], Any],
		greeting: Optional[Dict[str, Any]] = None,
		*,
		model: str,
		realtime_url: str,
		speaker: Optional[Tuple[str, str]] = None,
		http_client: Optional[httpx.AsyncClient] = None,
	) -> "RealtimePeer":
		"""Negotiate offer/answer with the provider and return the live peer.

		Remote audio goes to ``speaker`` (an ffmpeg ``(device, format)`` pair)
		when given, otherwise it is consumed and dropped.
		"""
		pc = RTCPeerConnection()
		sink = MediaRecorder(speaker[0], format=speaker[1]) if speaker else MediaBlackhole()
		try:
			pc.addTrack(microphone)
			channel = pc.createDataChannel(EVENTS_CHANNEL)

			@channel.on("open")
			def on_open():
				LOGGER.info("client datachannel open")
				if greeting is not None:
					channel.send(json.dumps(greeting))

			channel.on("message", on_event)

			@pc.on("datachannel")
			def on_datachannel(remote):
				LOGGER.info("ondatachannel from server: %s", remote.label)
				remote.on("message", on_event)

			@pc.on("track")
			async def on_track(track):
				if track.kind == "audio":
					sink.addTrack(track)
					await sink.start()

			@pc.on("connectionstatechange")
			def on_state():
				LOGGER.info("connectionState: %s", pc.connectionState)

			offer = await pc.createOffer()
			await pc.setLocalDescription(offer)
			answer_sdp = await exchange_sdp(
				pc.localDescription.sdp,
				token,
				model=model,
				realtime_url=realtime_url,
				http_client=http_client,
			)
			await pc.setRemoteDescription(RTCSessionDescription(sdp=answer_sdp, type="answer"))
		except Exception:
			await pc.close()
			await sink.stop()
			raise
		return cls(pc, channel, sink)

	async def close(self) -> None:
		"""Close the connection, its channels and the audio sink."""
		for sender in self.pc.getSenders():
			if sender.track is not None:
				sender.track.stop()
		await self.pc.close()
		await self.sink.stop()
