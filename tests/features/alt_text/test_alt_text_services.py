"""
Tests for the OpenAI wrapper and the alt text generator.
"""

import base64
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from openai import APIConnectionError

from app.features.alt_text.services.alt_text_generator import DECORATIVE_MARKER, AltTextGeneratorService
from app.features.alt_text.services.openai_service import OpenAIService
from app.features.pages.models.page import MediaFile
from app.platform.config import Settings


def make_service(output_text="A red bicycle leaning on a wall", **settings_overrides):
    config = dict(OPENAI_API_KEY="sk-test", OPENAI_CHAT_IMAGE_DETAIL="low")
    config.update(settings_overrides)
    client = MagicMock()
    client.responses.create.return_value = SimpleNamespace(output_text=output_text)
    return OpenAIService(settings=Settings(**config), client=client), client


class TestOpenAIService:
    def test_respond_returns_stripped_text(self):
        service, client = make_service(output_text="  Hello  \n")
        assert service.respond("be brief", [{"role": "user", "content": "hi"}]) == "Hello"

        kwargs = client.responses.create.call_args.kwargs
        assert kwargs["model"] == service.settings.OPENAI_CHAT_MODEL
        assert kwargs["instructions"] == "be brief"
        assert kwargs["input"] == [{"role": "user", "content": "hi"}]

    def test_empty_output_is_none(self):
        service, _ = make_service(output_text="")
        assert service.respond("x", []) is None

    def test_sdk_error_is_none(self):
        service, client = make_service()
        client.responses.create.side_effect = APIConnectionError(
            request=httpx.Request("POST", "https://api.openai.com/v1/responses")
        )
        assert service.respond("x", []) is None

    @pytest.mark.parametrize("extension", ["jpg", "JPEG", ".png", "webp", "gif"])
    def test_supported_extensions(self, extension):
        assert OpenAIService.is_file_ext_supported(extension) is True

    @pytest.mark.parametrize("extension", ["svg", "pdf", "", "tiff"])
    def test_unsupported_extensions(self, extension):
        assert OpenAIService.is_file_ext_supported(extension) is False

    def test_enabled_needs_key_and_flag(self):
        assert make_service()[0].is_enabled_and_configured() is True
        assert make_service(OPENAI_API_KEY=None)[0].is_enabled_and_configured() is False
        assert make_service(DISABLE_ALT_TEXT_GENERATION=True)[0].is_enabled_and_configured() is False


class TestAltTextGeneratorService:
    def test_sends_image_as_data_url(self, tmp_path):
        image = tmp_path / "bike.png"
        image.write_bytes(b"\x89PNG fake")
        service, client = make_service()
        file = MediaFile(name="bike.png", extension="png", mime_type="image/png", storage_path=str(image))

        result = AltTextGeneratorService(service).generate(file, language_code="de")

        assert result == "A red bicycle leaning on a wall"
        kwargs = client.responses.create.call_args.kwargs
        content = kwargs["input"][0]["content"][0]
        assert content["type"] == "input_image"
        assert content["detail"] == "low"
        assert content["image_url"] == "data:image/png;base64," + base64.b64encode(b"\x89PNG fake").decode()
        assert "ISO language code: de" in kwargs["instructions"]

    def test_unreadable_file_is_none(self, tmp_path):
        service, client = make_service()
        file = MediaFile(name="gone.png", extension="png", mime_type="image/png", storage_path=str(tmp_path / "gone.png"))

        assert AltTextGeneratorService(service).generate(file) is None
        client.responses.create.assert_not_called()

    def test_instructions_cover_wcag_rules(self):
        instructions = AltTextGeneratorService.build_instructions("en")
        assert "WCAG" in instructions
        assert DECORATIVE_MARKER in instructions
        assert "125 characters" in instructions
