# services/grievance_service.py
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import sessionmaker

from core.config import Settings
from core.logging import logger
from grievance.assistant import ComplaintAssistant, build_assistant
from grievance.classifier import FallbackChainClassifier, build_classifier
from grievance.llm_client import build_client
from grievance.normalizer import LanguageNormalizer, LLMTranslator, PassthroughTranslator, Translator
from grievance.pipeline import IngestionPipeline
from grievance.repository import ComplaintRepository
from grievance.workflow import StatusWorkflow
from speech.transcriber import Transcriber, build_transcriber


@dataclass
class GrievanceServices:
    """Everything the routers need, built once per app."""

    settings: Settings
    repository: ComplaintRepository
    pipeline: IngestionPipeline
    workflow: StatusWorkflow
    assistant: ComplaintAssistant


def build_services(
    settings: Settings,
    session_factory: sessionmaker,
    translator: Optional[Translator] = None,
    transcriber: Optional[Transcriber] = None,
    classifier: Optional[FallbackChainClassifier] = None,
) -> GrievanceServices:
    """
    - settings: resolved once at startup (core.config.load_settings)
    - session_factory: db.session.make_session_factory(engine)
    - translator / transcriber / classifier: overrides for tests or other
      backends; None means "build from settings"
    """
    client = build_client(settings)

    if translator is None:
        if client is not None:
            translator = LLMTranslator(
                client,
                model=settings.chat_model,
                temperature=settings.temp_translation,
            )
        else:
            logger.info("AI backend not configured, complaints are stored untranslated")
            translator = PassthroughTranslator()

    if transcriber is None:
        transcriber = build_transcriber(settings)

    if classifier is None:
        classifier = build_classifier(settings, client=client)

    repository = ComplaintRepository(session_factory)
    normalizer = LanguageNormalizer(translator, transcriber)

    return GrievanceServices(
        settings=settings,
        repository=repository,
        pipeline=IngestionPipeline(normalizer, classifier, repository),
        workflow=StatusWorkflow(repository),
        assistant=build_assistant(settings, client=client),
    )
