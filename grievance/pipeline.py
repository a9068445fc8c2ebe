# -*- coding: utf-8 -*-
"""
grievance.pipeline

Complaint ingestion: raw submission -> stored Complaint.

1) metadata check (name, mobile, area code, language)   -> ValidationError
2) input check (text or voice)                          -> ValidationError
3) LanguageNormalizer (transcription failure -> placeholder text)
4) classifier (always an enum category)
5) enum re-check, forcing "Other" if needed
6) new_complaint + repository.create (one commit)       -> PersistenceError
7) stored record returned

Steps 1-2 run before any external call.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

from core.errors import TranscriptionFailure, ValidationError
from core.logging import logger, log_event
from db.models.complaint import Complaint

from .classifier import FallbackChainClassifier
from .constants import (
    CATEGORIES,
    DEFAULT_DEPARTMENT,
    LANGUAGES,
    OTHER_CATEGORY,
    TRANSCRIPTION_PLACEHOLDER,
)
from .normalizer import LanguageNormalizer
from .records import new_complaint, utcnow
from .repository import ComplaintRepository
from .utils_text import snippet

MOBILE_RE = re.compile(r"^[6-9]\d{9}$")
AREA_CODE_RE = re.compile(r"^\d{6}$")


@dataclass(frozen=True)
class SubmissionMetadata:
    submitter_id: str
    contact_name: str
    contact_mobile: str
    area_code: str
    attachment_ref: Optional[str] = None


def validate_metadata(metadata: SubmissionMetadata, language: str) -> SubmissionMetadata:
    """Trimmed copy of metadata, or ValidationError with a message fit for the citizen."""
    name = (metadata.contact_name or "").strip()
    mobile = (metadata.contact_mobile or "").strip()
    area_code = (metadata.area_code or "").strip()

    if not name or not mobile or not area_code:
        raise ValidationError("Please provide full name, mobile number, and area code")
    if not MOBILE_RE.match(mobile):
        raise ValidationError(
            "Mobile number must be a valid 10-digit Indian number starting with 6-9"
        )
    if not AREA_CODE_RE.match(area_code):
        raise ValidationError("Area code must be a 6-digit number")
    if language not in LANGUAGES:
        raise ValidationError("Language must be one of: " + ", ".join(LANGUAGES))
    if not metadata.submitter_id:
        raise ValidationError("submitter is required")

    return SubmissionMetadata(
        submitter_id=metadata.submitter_id,
        contact_name=name,
        contact_mobile=mobile,
        area_code=area_code,
        attachment_ref=(metadata.attachment_ref or "").strip() or None,
    )


class IngestionPipeline:
    def __init__(
        self,
        normalizer: LanguageNormalizer,
        classifier: FallbackChainClassifier,
        repository: ComplaintRepository,
        clock: Callable = utcnow,
    ):
        self.normalizer = normalizer
        self.classifier = classifier
        self.repository = repository
        self.clock = clock

    def submit(
        self,
        raw_input: Union[str, bytes, None],
        is_audio: bool,
        declared_language: str,
        metadata: SubmissionMetadata,
        file_name: str = "recording.webm",
    ) -> Complaint:
        # 1) metadata
        meta = validate_metadata(metadata, declared_language)

        # 2) something to work with
        has_text = isinstance(raw_input, str) and bool(raw_input.strip())
        if not has_text and not is_audio:
            raise ValidationError("provide complaint text or voice input")

        logger.info(
            f"[submit] submitter={meta.submitter_id} lang={declared_language} audio={is_audio}"
        )

        # 3) normalize
        transcription_failed = False
        try:
            original_text, normalized_text = self.normalizer.normalize(
                raw_input if raw_input is not None else b"",
                declared_language,
                is_audio,
                file_name=file_name,
            )
        except TranscriptionFailure as e:
            logger.warning(f"[submit] transcription failed, storing placeholder: {e}")
            transcription_failed = True
            original_text = normalized_text = TRANSCRIPTION_PLACEHOLDER

        original_text = (original_text or "").strip()
        normalized_text = (normalized_text or "").strip() or original_text
        if not original_text:
            raise ValidationError("provide complaint text or voice input")

        # 4) classify
        category, department = self.classifier.classify(normalized_text)

        # 5) the enum is enforced here too, whatever the classifier did
        if category not in CATEGORIES:
            logger.warning(f'[submit] invalid category "{category}", using "{OTHER_CATEGORY}"')
            category = OTHER_CATEGORY
        department = (department or "").strip() or DEFAULT_DEPARTMENT

        # 6) persist record + first history entry together
        complaint = new_complaint(
            submitter_id=meta.submitter_id,
            contact_name=meta.contact_name,
            contact_mobile=meta.contact_mobile,
            area_code=meta.area_code,
            source_language=declared_language,
            original_text=original_text,
            normalized_text=normalized_text,
            category=category,
            department=department,
            attachment_ref=meta.attachment_ref,
            now=self.clock(),
        )
        complaint = self.repository.create(complaint)

        logger.info(f"[submit] stored {complaint.id}: {category} / {department}")
        log_event(
            complaint.id,
            "complaint_submitted",
            {
                "source_language": declared_language,
                "is_audio": is_audio,
                "transcription_failed": transcription_failed,
                "original_text": snippet(original_text, 200),
                "normalized_text": snippet(normalized_text, 200),
                "category": category,
                "department": department,
            },
        )

        # 7)
        return complaint
