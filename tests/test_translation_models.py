"""Tests for translation request validation and result shape checks."""

import pytest

from models.translation_models import MISSING_INPUT_MESSAGE, TranslationRequest, TranslationResult
from utils.errors import ValidationError


class TestTranslationRequest:
    def test_defaults(self):
        req = TranslationRequest.from_payload({"text": "Hi", "targets": ["fr"]})
        assert req.formality == "neutral"
        assert req.glossary == {}
        assert req.source_lang is None
        assert req.prompt_payload()["source_lang"] == "auto"

    def test_full_payload(self):
        req = TranslationRequest.from_payload(
            {
                "text": "Turbo lag",
                "targets": ["de", "zh-CN"],
                "source_lang": "en",
                "formality": "casual",
                "glossary": {"turbo lag": "turbo lag"},
            }
        )
        assert req.targets == ["de", "zh-CN"]
        assert req.prompt_payload() == {
            "instruction": "Translate the provided TEXT into each TARGET in 'targets'.",
            "source_lang": "en",
            "targets": ["de", "zh-CN"],
            "glossary": {"turbo lag": "turbo lag"},
            "text": "Turbo lag",
        }

    @pytest.mark.parametrize("payload", [None, [], "text", {"text": 5, "targets": ["fr"]}])
    def test_rejects_non_object_or_bad_types(self, payload):
        with pytest.raises(ValidationError) as excinfo:
            TranslationRequest.from_payload(payload)
        assert excinfo.value.message == MISSING_INPUT_MESSAGE
        assert excinfo.value.status_code == 400

    def test_rejects_blank_target_codes(self):
        with pytest.raises(ValidationError):
            TranslationRequest.from_payload({"text": "Hi", "targets": ["fr", ""]})

    def test_rejects_non_string_source_lang(self):
        with pytest.raises(ValidationError):
            TranslationRequest.from_payload({"text": "Hi", "targets": ["fr"], "source_lang": 3})


class TestTranslationResult:
    def test_accepts_expected_shape(self):
        content = {"source_lang": "en", "translations": {"fr": "Salut"}}
        result = TranslationResult.from_model_content(content)
        assert result.source_lang == "en"
        assert result.translations == {"fr": "Salut"}

    @pytest.mark.parametrize(
        "content",
        [
            None,
            ["en"],
            {"translations": {"fr": "Salut"}},
            {"source_lang": "en"},
            {"source_lang": "en", "translations": ["Salut"]},
            {"source_lang": "en", "translations": {"fr": None}},
        ],
    )
    def test_rejects_other_shapes(self, content):
        assert TranslationResult.from_model_content(content) is None
