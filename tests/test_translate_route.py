"""Tests for POST /translate (strict-JSON translation gateway)."""

import json

import pytest

from conftest import RecordingHandler

VALID_BODY = {"text": "Hello", "targets": ["fr", "es"]}
MISSING_INPUT = {"error": "Provide 'text' and non-empty array 'targets'."}


def completion(content):
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 0,
        "model": "gpt-4o-mini",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
    }


class TestValidation:
    @pytest.mark.parametrize(
        "body",
        [
            {"text": "Hello", "targets": []},
            {"text": "", "targets": ["fr"]},
            {"text": "Hello", "targets": "fr"},
            {"text": "Hello"},
            {"targets": ["fr"]},
            {},
        ],
    )
    def test_missing_text_or_targets(self, client, body):
        resp = client.post("/translate", json=body)
        assert resp.status_code == 400
        assert resp.json() == MISSING_INPUT

    def test_no_body(self, client):
        resp = client.post("/translate")
        assert resp.status_code == 400
        assert resp.json() == MISSING_INPUT

    def test_unknown_formality(self, client):
        resp = client.post("/translate", json={**VALID_BODY, "formality": "pirate"})
        assert resp.status_code == 400
        assert "formality" in resp.json()["error"]

    def test_glossary_must_be_object(self, client):
        resp = client.post("/translate", json={**VALID_BODY, "glossary": ["a", "b"]})
        assert resp.status_code == 400

    def test_missing_api_key(self, client):
        resp = client.post("/translate", json=VALID_BODY)
        assert resp.status_code == 500
        assert resp.json() == {"error": "Missing OPENAI_API_KEY in env."}


class TestTranslate:
    def test_success_returns_model_json_verbatim(self, client, use_openai):
        model_json = {"source_lang": "en", "translations": {"fr": "Bonjour", "es": "Hola"}}
        use_openai(RecordingHandler(json_body=completion(json.dumps(model_json))))

        resp = client.post("/translate", json=VALID_BODY)

        assert resp.status_code == 200
        assert resp.json() == model_json

    def test_request_is_deterministic_json_mode(self, client, use_openai):
        model_json = {"source_lang": "en", "translations": {"fr": "Bonjour"}}
        handler = use_openai(RecordingHandler(json_body=completion(json.dumps(model_json))))

        client.post(
            "/translate",
            json={
                "text": "Hello OpenAI",
                "targets": ["fr"],
                "formality": "formal",
                "glossary": {"OpenAI": "OpenAI"},
                "source_lang": "en",
            },
        )

        request = handler.requests[0]
        assert request.url.path == "/v1/chat/completions"
        body = handler.last_json
        assert body["model"] == "gpt-4o-mini"
        assert body["temperature"] == 0
        assert body["response_format"] == {"type": "json_object"}
        system, user = body["messages"]
        assert system["role"] == "system"
        assert "- Formality: formal." in system["content"]
        assert "Do NOT translate code blocks" in system["content"]
        assert user["role"] == "user"
        payload = json.loads(user["content"].split("Here is the input JSON:\n", 1)[1])
        assert payload == {
            "instruction": "Translate the provided TEXT into each TARGET in 'targets'.",
            "source_lang": "en",
            "targets": ["fr"],
            "glossary": {"OpenAI": "OpenAI"},
            "text": "Hello OpenAI",
        }

    def test_defaults_to_auto_source_and_neutral(self, client, use_openai):
        model_json = {"source_lang": "auto-detected", "translations": {"fr": "Bonjour"}}
        handler = use_openai(RecordingHandler(json_body=completion(json.dumps(model_json))))

        client.post("/translate", json=VALID_BODY)

        system, user = handler.last_json["messages"]
        assert "- Formality: neutral." in system["content"]
        assert '"source_lang": "auto"' in user["content"]
        assert '"glossary": {}' in user["content"]

    def test_upstream_non_json_body(self, client, use_openai):
        use_openai(RecordingHandler(200, text="<html>gateway</html>"))

        resp = client.post("/translate", json=VALID_BODY)

        assert resp.status_code == 502
        assert resp.json() == {"error": "Upstream non-JSON", "raw": "<html>gateway</html>"}

    def test_upstream_non_json_error_body(self, client, use_openai):
        use_openai(RecordingHandler(500, text="Internal Server Error"))

        resp = client.post("/translate", json=VALID_BODY)

        assert resp.status_code == 502
        assert resp.json() == {"error": "Upstream non-JSON", "raw": "Internal Server Error"}

    def test_upstream_error_status_propagates(self, client, use_openai):
        upstream = {"error": {"message": "Rate limit reached", "type": "rate_limit_error"}}
        handler = use_openai(RecordingHandler(429, json_body=upstream))

        resp = client.post("/translate", json=VALID_BODY)

        assert resp.status_code == 429
        assert resp.json() == {"error": "OpenAI error", "details": upstream}
        assert len(handler.requests) == 1

    def test_missing_content(self, client, use_openai):
        body = {"id": "chatcmpl-1", "choices": []}
        use_openai(RecordingHandler(json_body=body))

        resp = client.post("/translate", json=VALID_BODY)

        assert resp.status_code == 502
        assert resp.json() == {"error": "Missing JSON content from model", "details": body}

    def test_model_content_not_json(self, client, use_openai):
        use_openai(RecordingHandler(json_body=completion("Bonjour!")))

        resp = client.post("/translate", json=VALID_BODY)

        assert resp.status_code == 502
        assert resp.json() == {"error": "Model returned non-JSON content", "content": "Bonjour!"}

    def test_model_content_wrong_shape_is_not_repaired(self, client, use_openai):
        content = json.dumps({"fr": "Bonjour"})
        use_openai(RecordingHandler(json_body=completion(content)))

        resp = client.post("/translate", json=VALID_BODY)

        assert resp.status_code == 502
        assert resp.json() == {"error": "Model returned non-JSON content", "content": content}
