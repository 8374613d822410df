from pathlib import Path
from typing import Dict, Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "A11y Assist"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True

    # ── Logging ─────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILE: str = "a11y_assist.log"

    # ── Database ────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./a11y_assist.db"

    # ── Signing ─────────────────────────────────
    # Process secret for demand signatures. Rotating it invalidates every issued demand.
    SECRET_KEY: str = "change-this-secret-in-production"

    # ── JWT / Auth ──────────────────────────────
    JWT_SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440
    ALGORITHM: str = "HS256"

    # ── Accessibility scanner ───────────────────
    SCANNER_API_URL: str = ""
    SCANNER_API_TOKEN: str = ""
    SCANNER_REQUEST_TIMEOUT: float = 10.0
    SCANNER_TYPE: str = "axe"
    SCANNER_LANGUAGE: str = "en"

    SCAN_POLL_INTERVAL: float = 5.0
    SCAN_POLL_TIMEOUT: float = 300.0
    SCAN_CLEANUP_SECONDS: int = 2592000  # 30 days

    # ── Preview content ─────────────────────────
    PREVIEW_REQUEST_TIMEOUT: float = 10.0

    # ── OpenAI ──────────────────────────────────
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_CHAT_MODEL: str = "gpt-5-mini"
    OPENAI_CHAT_IMAGE_DETAIL: Literal["auto", "low", "high"] = "auto"
    DISABLE_ALT_TEXT_GENERATION: bool = False

    # ── Site languages ──────────────────────────
    # language id -> ISO code used in AI prompts
    SITE_LANGUAGES: Dict[int, str] = {0: "en"}

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
