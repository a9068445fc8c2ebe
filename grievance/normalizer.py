# -*- coding: utf-8 -*-
"""
grievance.normalizer

Turns a raw submission (typed text or voice recording, in en/hi/mr) into
the pair (original_text, normalized_text) the rest of the pipeline uses.

Steps
-----
1) audio -> text through the injected transcriber
   (TranscriptionFailure propagates; the pipeline decides the placeholder)
2) English  -> normalized_text is original_text, no translation call
3) hi / mr  -> translator; any failure or empty output keeps original_text
4) trim, and never hand back an empty normalized_text while original_text
   has content
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Tuple, Union

from openai import OpenAI

from core.errors import TranscriptionFailure
from core.logging import logger

from .constants import LANGUAGE_NAMES
from .llm_client import call_chat
from .utils_text import clean_llm_text, snippet

if TYPE_CHECKING:
    from speech.transcriber import Transcriber


class Translator(Protocol):
    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        ...


# ------------------------------------------------------------
# 1. translation strategies
# ------------------------------------------------------------

TRANSLATION_PROMPT = (
    "You are a professional translator. Translate the following text from "
    "{source} to {target}.\n"
    "Provide only the translated text, no explanations, no additional text, no quotes."
)


class LLMTranslator:
    """Chat-completion translator (OpenAI / DeepSeek compatible)."""

    def __init__(
        self,
        client: OpenAI,
        model: str,
        temperature: float = 0.3,
        max_tokens: int = 500,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        if not text or source_lang == target_lang:
            return text

        source = LANGUAGE_NAMES.get(source_lang, source_lang)
        target = LANGUAGE_NAMES.get(target_lang, target_lang)

        out = call_chat(
            self.client,
            [
                {"role": "system", "content": TRANSLATION_PROMPT.format(source=source, target=target)},
                {"role": "user", "content": text},
            ],
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return clean_llm_text(out)


class PassthroughTranslator:
    """Used when no AI backend is configured: hands the text back as-is."""

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        return text


# ------------------------------------------------------------
# 2. normalizer
# ------------------------------------------------------------

class LanguageNormalizer:
    def __init__(
        self,
        translator: Translator,
        transcriber: Optional["Transcriber"] = None,
        target_lang: str = "en",
    ):
        self.translator = translator
        self.transcriber = transcriber
        self.target_lang = target_lang

    def transcribe(self, audio_bytes: bytes, language: str, file_name: str = "recording.webm") -> str:
        if self.transcriber is None:
            raise TranscriptionFailure("no transcriber configured")

        try:
            text = self.transcriber.transcribe(audio_bytes, language, file_name=file_name)
        except TranscriptionFailure:
            raise
        except Exception as e:
            raise TranscriptionFailure(f"transcriber error: {e}") from e

        text = (text or "").strip()
        if not text:
            raise TranscriptionFailure("transcriber returned no text")
        return text

    def to_english(self, original_text: str, source_lang: str) -> str:
        """Translate with fallback to the original; never raises."""
        original_text = (original_text or "").strip()

        if source_lang == self.target_lang or not original_text:
            return original_text

        logger.info(f"[translate] {source_lang} -> {self.target_lang}: {snippet(original_text)}")

        try:
            translated = self.translator.translate(original_text, source_lang, self.target_lang)
        except Exception as e:
            logger.warning(f"translation failed, keeping original text: {e}")
            return original_text

        translated = (translated or "").strip() if isinstance(translated, str) else ""
        if not translated:
            logger.warning("translation returned nothing, keeping original text")
            return original_text

        logger.info(f"[translate] done: {snippet(translated)}")
        return translated

    def normalize(
        self,
        raw_input: Union[str, bytes],
        source_lang: str,
        is_audio: bool,
        file_name: str = "recording.webm",
    ) -> Tuple[str, str]:
        """
        Returns (original_text, normalized_text).

        TranscriptionFailure is the only exception that leaves this method.
        Both values may come back empty for empty input; rejecting that is
        the caller's job.
        """
        if is_audio:
            audio_bytes = raw_input if isinstance(raw_input, (bytes, bytearray)) else b""
            original_text = self.transcribe(bytes(audio_bytes), source_lang, file_name=file_name)
        else:
            original_text = (raw_input or "").strip() if isinstance(raw_input, str) else ""

        normalized_text = self.to_english(original_text, source_lang)
        if not normalized_text:
            normalized_text = original_text

        return original_text, normalized_text
