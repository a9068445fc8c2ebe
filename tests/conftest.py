import os
import tempfile

# before core.config is imported anywhere
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="grievance-logs-")

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app_fastapi import create_app
from core.config import Settings
from core.errors import TranscriptionFailure
from db.session import build_engine, init_db, make_session_factory
from grievance.repository import ComplaintRepository
from services.grievance_service import build_services

JWT_SECRET = "test-secret"


class StubTranslator:
    """Returns canned translations and remembers every call."""

    def __init__(self, translations=None, error=None):
        self.translations = translations or {}
        self.error = error
        self.calls = []

    def translate(self, text, source_lang, target_lang):
        self.calls.append((text, source_lang, target_lang))
        if self.error is not None:
            raise self.error
        return self.translations.get(text, "")


class StubTranscriber:
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def transcribe(self, audio_bytes, language, file_name="recording.webm"):
        self.calls.append((audio_bytes, language, file_name))
        if self.error is not None:
            raise self.error
        if not audio_bytes:
            raise TranscriptionFailure("empty audio")
        return self.text


class StubStrategy:
    """Classification strategy with a fixed answer (or error)."""

    def __init__(self, result=None, error=None, name="stub"):
        self.result = result
        self.error = error
        self.name = name
        self.calls = []

    def classify(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.result


def make_token(sub, role, secret=JWT_SECRET):
    return jwt.encode({"sub": sub, "role": role}, secret, algorithm="HS256")


def auth_header(sub, role):
    return {"Authorization": f"Bearer {make_token(sub, role)}"}


@pytest.fixture
def settings():
    return Settings(jwt_secret=JWT_SECRET)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def repository(session_factory):
    return ComplaintRepository(session_factory)


@pytest.fixture
def translator():
    return StubTranslator()


@pytest.fixture
def transcriber():
    return StubTranscriber(text="पानी नहीं आ रहा है")


@pytest.fixture
def services(settings, session_factory, translator, transcriber):
    return build_services(
        settings,
        session_factory,
        translator=translator,
        transcriber=transcriber,
    )


@pytest.fixture
def client(services):
    return TestClient(create_app(services=services))
