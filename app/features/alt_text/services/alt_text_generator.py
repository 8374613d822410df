import base64
import logging
from pathlib import Path
from typing import Optional

from app.features.alt_text.services.openai_service import OpenAIService
from app.features.pages.models.page import MediaFile

logger = logging.getLogger(__name__)

DECORATIVE_MARKER = "DECORATIVE"


class AltTextGeneratorService:
    def __init__(self, openai_service: Optional[OpenAIService] = None):
        self.openai_service = openai_service or OpenAIService()

    def generate(self, file: MediaFile, language_code: str = "en") -> Optional[str]:
        """
        Generate alternative text for an image file.

        Returns None when the file cannot be read or the model call fails.
        Decorative images come back as ``DECORATIVE``.
        """
        try:
            image_url = self._base64_image_url(file)
        except OSError as e:
            logger.error(f"Could not read image {file.storage_path}: {e}")
            return None

        return self.openai_service.respond(
            self.build_instructions(language_code),
            [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "input_image",
                            "image_url": image_url,
                            "detail": self.openai_service.settings.OPENAI_CHAT_IMAGE_DETAIL,
                        }
                    ],
                }
            ],
        )

    @staticmethod
    def build_instructions(language_code: str) -> str:
        return (
            "You are an accessibility specialist generating WCAG 2.1 compliant alt text for web images. "
            f"Respond in the language identified by this ISO language code: {language_code}. "
            "Follow these rules strictly: "
            "(1) Describe the essential meaning and purpose of the image, not a literal catalogue of visual details. "
            "(2) Be concise, ideally under 125 characters. "
            "(3) Never begin with \"image of\", \"photo of\", \"picture of\", or equivalent phrases; "
            "screen readers already announce the element as an image. "
            "(4) If the image contains readable text, transcribe it verbatim. "
            "(5) If the image is purely decorative and conveys no meaningful information, "
            f"respond with exactly: {DECORATIVE_MARKER}. "
            "(6) Respond with only the alt text string. No surrounding quotes, no trailing punctuation, no explanations."
        )

    @staticmethod
    def _base64_image_url(file: MediaFile) -> str:
        contents = base64.b64encode(Path(file.storage_path).read_bytes()).decode("ascii")
        return f"data:{file.mime_type};base64,{contents}"
