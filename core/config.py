# core/config.py
# -*- coding: utf-8 -*-

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# load .env first
load_dotenv()

# --------------------------------
# paths / log directory
# --------------------------------

# project root
BASE_DIR = Path(__file__).resolve().parent.parent

# JSONL event logs (one file per complaint)
LOG_DIR = Path(os.getenv("LOG_DIR", str(BASE_DIR / "data" / "logs")))
LOG_DIR.mkdir(parents=True, exist_ok=True)

# --------------------------------
# external API keys / models
# --------------------------------

# keys copied from .env.example are treated as "not configured"
PLACEHOLDER_KEYS = ("", "your-deepseek-key-here", "your-openai-key-here")

# chat model for translation / classification
DEFAULT_CHAT_MODEL = "gpt-4o-mini"

# Whisper transcription model
DEFAULT_WHISPER_MODEL = "gpt-4o-mini-transcribe"

# uploads larger than this are rejected before transcription (5MB)
DEFAULT_MAX_AUDIO_BYTES = 5 * 1024 * 1024


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    """
    Values resolved once at process start and handed to the builders
    (classifier, normalizer, transcriber, auth). Nothing below the app
    factory reads the environment on its own.
    """

    llm_api_key: Optional[str] = None
    llm_base_url: Optional[str] = None
    chat_model: str = DEFAULT_CHAT_MODEL
    temp_translation: float = 0.3
    temp_classifier: float = 0.0
    temp_assistant: float = 0.7
    llm_timeout_seconds: float = 15.0

    stt_backend: str = "stub"
    whisper_model: str = DEFAULT_WHISPER_MODEL
    stt_timeout_seconds: float = 30.0
    max_audio_bytes: int = DEFAULT_MAX_AUDIO_BYTES

    jwt_secret: str = "dev-secret"
    jwt_algorithm: str = "HS256"

    @property
    def llm_enabled(self) -> bool:
        return bool(self.llm_api_key) and self.llm_api_key not in PLACEHOLDER_KEYS


def load_settings() -> Settings:
    """Read the environment (after .env) into a Settings value."""
    api_key = os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY")

    return Settings(
        llm_api_key=api_key,
        llm_base_url=os.getenv("LLM_BASE_URL") or None,
        chat_model=os.getenv("CHAT_MODEL", DEFAULT_CHAT_MODEL),
        temp_translation=_env_float("TEMP_TRANSLATION", 0.3),
        temp_classifier=_env_float("TEMP_CLASSIFIER", 0.0),
        temp_assistant=_env_float("TEMP_ASSISTANT", 0.7),
        llm_timeout_seconds=_env_float("LLM_TIMEOUT_SECONDS", 15.0),
        stt_backend=os.getenv("STT_BACKEND", "stub").strip().lower(),
        whisper_model=os.getenv("WHISPER_MODEL", DEFAULT_WHISPER_MODEL),
        stt_timeout_seconds=_env_float("STT_TIMEOUT_SECONDS", 30.0),
        max_audio_bytes=_env_int("MAX_AUDIO_BYTES", DEFAULT_MAX_AUDIO_BYTES),
        jwt_secret=os.getenv("JWT_SECRET", "dev-secret"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
    )
