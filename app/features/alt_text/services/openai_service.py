import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from app.platform.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif"}


class OpenAIService:
    """Thin wrapper around the OpenAI Responses API."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[OpenAI] = None):
        self.settings = settings or default_settings
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(api_key=self.settings.OPENAI_API_KEY)
        return self._client

    def respond(self, instructions: str, messages: List[Dict[str, Any]]) -> Optional[str]:
        """
        Send ``messages`` with ``instructions`` and return the first text output,
        or None if the call fails or produces no text.
        """
        try:
            response = self.client.responses.create(
                model=self.settings.OPENAI_CHAT_MODEL,
                instructions=instructions,
                input=messages,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI request failed: {e}")
            return None

        text = (getattr(response, "output_text", "") or "").strip()
        if not text:
            logger.warning("OpenAI response contained no output text")
            return None
        return text

    @staticmethod
    def is_file_ext_supported(extension: str) -> bool:
        return extension.lower().lstrip(".") in SUPPORTED_IMAGE_EXTENSIONS

    def is_enabled_and_configured(self) -> bool:
        return not self.settings.DISABLE_ALT_TEXT_GENERATION and bool(self.settings.OPENAI_API_KEY)


def get_openai_service() -> OpenAIService:
    return OpenAIService()
