"""Terminal rendering of transcript changes."""

import io
import json

import pytest

from services.realtime.transcript_reconstructor import TranscriptReconstructor
from voice_client import TranscriptPrinter


def delta(item_id, text):
    return json.dumps({"type": "response.audio_transcript.delta", "item_id": item_id, "delta": text})


@pytest.fixture
def render():
    stream = io.StringIO()
    printer = TranscriptPrinter(stream)
    reconstructor = TranscriptReconstructor()

    def _apply(*events):
        for event in events:
            change = reconstructor.apply(event)
            if change is not None:
                printer(change)
        return stream.getvalue()

    return _apply


class TestTranscriptPrinter:
    def test_whitespace_delta_prints_nothing(self, render):
        assert render(delta("a", "   ")) == ""

    def test_header_waits_for_visible_text(self, render):
        assert render(delta("a", " "), delta("a", "Hi")) == "\nassistant:  Hi"

    def test_later_deltas_stream_inline(self, render):
        assert render(delta("a", "Hel"), delta("a", "lo")) == "\nassistant: Hello"

    def test_each_message_gets_its_own_header(self, render):
        out = render(delta("a", "One"), delta("b", "Two"), json.dumps({"text": "Three"}))
        assert out == "\nassistant: One\nassistant: Two\nassistant: Three"

    def test_user_transcription_uses_user_role(self, render):
        event = json.dumps({"type": "conversation.item.input_audio_transcription.completed", "transcript": "hola"})
        assert render(event) == "\nuser: hola"
