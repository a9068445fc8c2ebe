from types import SimpleNamespace

import pytest

from conftest import StubTranscriber, StubTranslator
from core.config import Settings
from core.errors import TranscriptionFailure
from grievance.normalizer import LanguageNormalizer, LLMTranslator, PassthroughTranslator
from speech.transcriber import StubTranscriber as DefaultTranscriber
from speech.transcriber import WhisperTranscriber, build_transcriber


def test_english_is_not_translated():
    translator = StubTranslator(translations={"Broken streetlight": "should not be used"})
    normalizer = LanguageNormalizer(translator)

    original, normalized = normalizer.normalize("  Broken streetlight  ", "en", is_audio=False)

    assert original == "Broken streetlight"
    assert normalized == original
    assert translator.calls == []


def test_hindi_is_translated_to_english():
    translator = StubTranslator(translations={"सड़क पर गड्ढा है": "There is a pothole on the road"})
    normalizer = LanguageNormalizer(translator)

    original, normalized = normalizer.normalize("सड़क पर गड्ढा है", "hi", is_audio=False)

    assert original == "सड़क पर गड्ढा है"
    assert normalized == "There is a pothole on the road"
    assert translator.calls == [("सड़क पर गड्ढा है", "hi", "en")]


@pytest.mark.parametrize(
    "translator",
    [
        StubTranslator(error=TimeoutError("translation timed out")),
        StubTranslator(translations={}),  # empty result
        StubTranslator(translations={"कचरा उचलला नाही": "   "}),
    ],
)
def test_translation_failure_keeps_original(translator):
    normalizer = LanguageNormalizer(translator)

    original, normalized = normalizer.normalize("कचरा उचलला नाही", "mr", is_audio=False)

    assert normalized == original == "कचरा उचलला नाही"


def test_audio_is_transcribed_then_translated():
    transcriber = StubTranscriber(text="  पानी नहीं आ रहा  ")
    translator = StubTranslator(translations={"पानी नहीं आ रहा": "Water is not coming"})
    normalizer = LanguageNormalizer(translator, transcriber)

    original, normalized = normalizer.normalize(b"\x00\x01", "hi", is_audio=True, file_name="a.wav")

    assert original == "पानी नहीं आ रहा"
    assert normalized == "Water is not coming"
    assert transcriber.calls == [(b"\x00\x01", "hi", "a.wav")]


def test_transcriber_errors_become_transcription_failure():
    normalizer = LanguageNormalizer(
        PassthroughTranslator(),
        StubTranscriber(error=OSError("decoder crashed")),
    )

    with pytest.raises(TranscriptionFailure):
        normalizer.normalize(b"\x00", "mr", is_audio=True)


def test_blank_transcription_is_a_failure():
    normalizer = LanguageNormalizer(PassthroughTranslator(), StubTranscriber(text="   "))

    with pytest.raises(TranscriptionFailure):
        normalizer.normalize(b"\x00", "en", is_audio=True)


def test_no_transcriber_configured():
    with pytest.raises(TranscriptionFailure):
        LanguageNormalizer(PassthroughTranslator()).normalize(b"\x00", "en", is_audio=True)


def test_llm_translator_strips_quotes_and_fences():
    completions = SimpleNamespace(
        create=lambda **kwargs: SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content='"The drain is blocked"'))]
        )
    )
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))

    out = LLMTranslator(client, model="m").translate("नाली बंद है", "hi", "en")

    assert out == "The drain is blocked"


def test_default_stub_transcriber_returns_notice():
    assert DefaultTranscriber().transcribe(b"\x00", "hi") == DefaultTranscriber.NOTICE

    with pytest.raises(TranscriptionFailure):
        DefaultTranscriber().transcribe(b"", "hi")


def test_build_transcriber_whisper_needs_a_key():
    assert isinstance(build_transcriber(Settings(stt_backend="whisper")), DefaultTranscriber)

    client = SimpleNamespace()
    transcriber = build_transcriber(Settings(stt_backend="whisper", llm_api_key="sk-test"), client=client)
    assert isinstance(transcriber, WhisperTranscriber)


def test_whisper_transcriber_passes_language():
    seen = {}

    def create(**kwargs):
        seen.update(kwargs)
        return "  रस्ता खराब आहे "

    client = SimpleNamespace(audio=SimpleNamespace(transcriptions=SimpleNamespace(create=create)))

    text = WhisperTranscriber(client, model="whisper-1").transcribe(b"\x00", "mr", file_name="c.m4a")

    assert text == "रस्ता खराब आहे"
    assert seen["language"] == "mr"
    assert seen["file"].name == "c.m4a"
