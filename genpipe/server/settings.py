from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv

# Load default .env and optional ENV_FILE override for local runs
load_dotenv()
_env_file_override = os.getenv("ENV_FILE")
if _env_file_override:
    load_dotenv(_env_file_override, override=False)


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    def __init__(self) -> None:
        # Backend selection: echo | ollama | googleai | openai
        self.GENPIPE_BACKEND: str = os.getenv("GENPIPE_BACKEND", "echo").strip().lower()
        self.GENPIPE_MODEL: str = os.getenv("GENPIPE_MODEL", "llava")

        # Declared capabilities of GENPIPE_MODEL; unset means the backend's defaults
        self.GENPIPE_MODEL_MEDIA: bool | None = _optional_bool("GENPIPE_MODEL_MEDIA")
        self.GENPIPE_MODEL_MULTITURN: bool | None = _optional_bool("GENPIPE_MODEL_MULTITURN")

        # Ollama
        self.OLLAMA_SERVER_ADDRESS: str = os.getenv("OLLAMA_SERVER_ADDRESS", "http://127.0.0.1:11434")
        self.OLLAMA_MODEL_TYPE: str = os.getenv("OLLAMA_MODEL_TYPE", "generate")

        # Hosted providers
        self.GOOGLE_GENAI_API_KEY: str | None = os.getenv("GOOGLE_GENAI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        self.OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")
        self.OPENAI_BASE_URL: str | None = os.getenv("OPENAI_BASE_URL") or None

        self.HTTP_TIMEOUT_SECS: float = float(os.getenv("HTTP_TIMEOUT_SECS", "120"))

        # CLI
        self.DEFAULT_ASSET_PATH: str = os.getenv("DEFAULT_ASSET_PATH", "wally.jpeg")

        # Server
        self.PORT: int = int(os.getenv("PORT", "3400"))
        self.CORS_ORIGINS: List[str] = _split_csv(os.getenv("CORS_ORIGINS", "*"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


def _optional_bool(name: str) -> bool | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() in {"1", "true", "yes", "on"}


settings = Settings()
