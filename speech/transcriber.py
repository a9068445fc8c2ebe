# -*- coding: utf-8 -*-
"""
speech/transcriber.py

Speech-to-text backends for voice complaints.

- StubTranscriber    : default. No recognition, returns a fixed notice so the
                       complaint is still stored and routed
- WhisperTranscriber : OpenAI audio transcription with a language hint

Both raise TranscriptionFailure when nothing usable comes back; the
ingestion pipeline catches it and stores a placeholder instead.
"""

import io
from typing import Optional, Protocol

from openai import OpenAI

from core.config import Settings
from core.errors import TranscriptionFailure
from core.logging import logger
from grievance.constants import SPEECH_LOCALES
from grievance.llm_client import build_client


class Transcriber(Protocol):
    def transcribe(self, audio_bytes: bytes, language: str, file_name: str = "recording.webm") -> str:
        ...


class StubTranscriber:
    """Stand-in until a real recognizer is wired up."""

    NOTICE = "[Audio transcription - speech recognition is not configured]"

    def transcribe(self, audio_bytes: bytes, language: str, file_name: str = "recording.webm") -> str:
        if not audio_bytes:
            raise TranscriptionFailure("empty audio")

        logger.info(f"[STT] stub transcription for {SPEECH_LOCALES.get(language, language)}")
        return self.NOTICE


class WhisperTranscriber:
    def __init__(self, client: OpenAI, model: str):
        self.client = client
        self.model = model

    def transcribe(self, audio_bytes: bytes, language: str, file_name: str = "recording.webm") -> str:
        if not audio_bytes:
            raise TranscriptionFailure("empty audio")

        bio = io.BytesIO(audio_bytes)
        # the API infers the container format from the file name
        bio.name = file_name or "recording.webm"

        try:
            resp = self.client.audio.transcriptions.create(
                model=self.model,
                file=bio,
                language=language,   # ISO 639-1, Whisper does not take en-IN
                response_format="text",
            )
        except Exception as e:
            raise TranscriptionFailure(f"whisper call failed: {e}") from e

        if isinstance(resp, str):
            text = resp
        else:
            text = getattr(resp, "text", "") or ""

        text = text.strip()
        if not text:
            raise TranscriptionFailure("whisper returned no text")
        return text


def build_transcriber(settings: Settings, client: Optional[OpenAI] = None) -> Transcriber:
    """Pick the backend from STT_BACKEND; whisper without a key degrades to the stub."""
    if settings.stt_backend == "whisper":
        client = client or build_client(settings, timeout=settings.stt_timeout_seconds)
        if client is not None:
            return WhisperTranscriber(client, settings.whisper_model)
        logger.warning("STT_BACKEND=whisper but no API key configured, using stub transcriber")

    return StubTranscriber()
