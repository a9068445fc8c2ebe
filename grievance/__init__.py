# -*- coding: utf-8 -*-
"""
grievance package

Core of the grievance desk: turns a citizen submission (text or voice, in
English / Hindi / Marathi) into a stored, routed complaint, and moves stored
complaints through their resolution status.

Callers (app_fastapi.py, routers) normally use only:

- IngestionPipeline.submit(raw_input, is_audio, language, metadata)
- StatusWorkflow.transition(complaint_id, new_status, actor_id, remarks)
- ComplaintRepository queries (by submitter, filtered search, stats)

Module layout:

- constants   : categories, statuses, languages (closed value sets)
- utils_text  : normalization / keyword counting / LLM output cleanup
- llm_client  : OpenAI-compatible Chat API wrapper
- normalizer  : transcription + translation to English, with fallbacks
- classifier  : AI strategy + keyword strategy in a fallback chain
- records     : new_complaint factory, wire format
- repository  : SQLAlchemy storage engine
- pipeline    : ingestion steps
- workflow    : status state machine
- assistant   : drafting help (chat, rewrite, category preview)
"""

from .assistant import ComplaintAssistant
from .classifier import FallbackChainClassifier, build_classifier
from .normalizer import LanguageNormalizer
from .pipeline import IngestionPipeline, SubmissionMetadata
from .repository import ComplaintRepository
from .workflow import StatusWorkflow

__all__ = [
    "ComplaintAssistant",
    "ComplaintRepository",
    "FallbackChainClassifier",
    "IngestionPipeline",
    "LanguageNormalizer",
    "StatusWorkflow",
    "SubmissionMetadata",
    "build_classifier",
]
