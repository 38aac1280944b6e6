"""Talk to the realtime assistant from a terminal.

The script asks the relay for an ephemeral session token, opens a WebRTC
connection straight to the provider with the default microphone, and prints
the live transcript.

Run: start the backend (`python main.py`), then run `python voice_client.py`.
Type `m` + Enter to toggle mute, `q` + Enter (or Ctrl+C) to disconnect.
Set `BACKEND_URL`, `MIC_DEVICE`/`MIC_FORMAT` and `SPEAKER_DEVICE`/`SPEAKER_FORMAT`
to override the defaults.
"""
import argparse
import asyncio
import functools
import sys
from typing import Dict

from models.transcript_models import Message
from services.realtime.backend_client import BackendClient
from services.realtime.transcript_reconstructor import TranscriptChange
from services.realtime.voice_session import SessionConnectError, VoiceSessionController
from services.realtime.webrtc_transport import RealtimePeer, open_microphone
from utils.config import get_settings
from utils.logging_setup import configure_logging


class TranscriptPrinter:
    """Stream transcript changes to a terminal.

    A message gets its role header only once its text stops being blank, so
    whitespace-only fragments never show up as an empty line.
    """

    def __init__(self, stream=None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        # Keyed by id(); values keep the messages alive so ids are not reused.
        self._started: Dict[int, Message] = {}

    def __call__(self, change: TranscriptChange) -> None:
        message = change.message
        if id(message) in self._started:
            self.stream.write(change.fragment)
        elif message.text.strip():
            self._started[id(message)] = message
            self.stream.write(f"\n{message.role}: {message.text}")
        else:
            return
        self.stream.flush()


def build_controller(preferred_lang=None) -> VoiceSessionController:
    """Wire the lifecycle controller to the relay backend and aiortc."""
    settings = get_settings()
    backend = BackendClient(settings.backend_url)
    speaker = (settings.speaker_device, settings.speaker_format or "pulse") if settings.speaker_device else None
    return VoiceSessionController(
        fetch_session=functools.partial(backend.create_session, preferred_lang),
        open_microphone=functools.partial(open_microphone, settings.mic_device, settings.mic_format),
        open_peer=functools.partial(
            RealtimePeer.connect,
            model=settings.realtime_model,
            realtime_url=settings.realtime_url,
            speaker=speaker,
        ),
        on_transcript=TranscriptPrinter(),
    )


async def main(preferred_lang=None) -> int:
    """Connect, relay keyboard commands until quit, then disconnect."""
    controller = build_controller(preferred_lang)
    try:
        await controller.connect()
    except SessionConnectError as exc:
        print(f"Could not connect: {exc}", file=sys.stderr)
        return 1

    try:
        while True:
            line = await asyncio.to_thread(sys.stdin.readline)
            command = line.strip().lower()
            if not line or command == "q":
                break
            if command == "m":
                muted = controller.toggle_mute()
                print(f"\n[{'muted' if muted else 'live'}] level={controller.session.level}")
    finally:
        await controller.disconnect()
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Terminal client for the realtime voice assistant.")
    parser.add_argument("--lang", default=None, help="Preferred reply language, e.g. French")
    args = parser.parse_args()
    configure_logging(get_settings().debug)
    try:
        sys.exit(asyncio.run(main(args.lang)))
    except KeyboardInterrupt:
        sys.exit(130)
