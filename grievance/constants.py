# -*- coding: utf-8 -*-
"""
grievance.constants

Closed value sets shared by the pipeline, the ORM models and the routers.
The string values are the wire format; never translate or rename them.
"""

from __future__ import annotations

from typing import Dict, Literal, Tuple

# ------------------------------------------------------------
# category (closed enum, "Other" is the catch-all)
# ------------------------------------------------------------

Category = Literal[
    "Water Supply",
    "Roads and Infrastructure",
    "Electricity",
    "Health Services",
    "Sanitation",
    "Education",
    "Public Transport",
    "Law and Order",
    "Housing",
    "Other",
]

CATEGORIES: Tuple[str, ...] = (
    "Water Supply",
    "Roads and Infrastructure",
    "Electricity",
    "Health Services",
    "Sanitation",
    "Education",
    "Public Transport",
    "Law and Order",
    "Housing",
    "Other",
)

OTHER_CATEGORY = "Other"
DEFAULT_DEPARTMENT = "General Administration"

# ------------------------------------------------------------
# status
# ------------------------------------------------------------

Status = Literal["Submitted", "Under Review", "In Progress", "Resolved"]

STATUSES: Tuple[str, ...] = ("Submitted", "Under Review", "In Progress", "Resolved")

INITIAL_STATUS = "Submitted"

# ------------------------------------------------------------
# language
# ------------------------------------------------------------

Language = Literal["en", "hi", "mr"]

LANGUAGES: Tuple[str, ...] = ("en", "hi", "mr")

LANGUAGE_NAMES: Dict[str, str] = {
    "en": "English",
    "hi": "Hindi",
    "mr": "Marathi",
}

# BCP-47 hints for speech backends
SPEECH_LOCALES: Dict[str, str] = {
    "en": "en-IN",
    "hi": "hi-IN",
    "mr": "mr-IN",
}

# stored when the audio could not be transcribed
TRANSCRIPTION_PLACEHOLDER = "[Audio transcription unavailable]"
