from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    # --- AI provider configuration ---
    # AI_PROVIDER can be: auto | gemini | openai | mock
    ai_provider: str = os.getenv("AI_PROVIDER", "auto").strip().lower()

    gemini_api_key: str | None = os.getenv("GEMINI_API_KEY") or None
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    gemini_image_model: str = os.getenv(
        "GEMINI_IMAGE_MODEL", "imagen-4.0-generate-001")

    openai_api_key: str | None = os.getenv("OPENAI_API_KEY") or None
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    openai_image_model: str = os.getenv("OPENAI_IMAGE_MODEL", "gpt-image-1")

    default_slide_count: int = int(os.getenv("DEFAULT_SLIDE_COUNT", "7"))
    default_theme: str = os.getenv("DEFAULT_THEME", "Default")

    # --- Image search providers (tried in this order, placeholder last) ---
    serpapi_api_key: str | None = os.getenv("SERPAPI_API_KEY") or None
    unsplash_access_key: str | None = os.getenv("UNSPLASH_ACCESS_KEY") or None
    placeholder_image_url: str = os.getenv(
        "PLACEHOLDER_IMAGE_URL", "https://picsum.photos").rstrip("/")

    # --- Persistence / runtime ---
    store_dir: str = os.getenv("STORE_DIR", "storage")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()


settings = Settings()
