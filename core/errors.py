# core/errors.py
# -*- coding: utf-8 -*-
"""
Exception taxonomy shared by the pipeline, the workflow and the routers.

- ValidationError   : fatal, reported to the caller (bad metadata, no input)
- InvalidStatus     : a ValidationError for status values outside the enum
- PersistenceError  : fatal, retryable by the caller (storage unavailable)
- ComplaintNotFound : lookup/transition on an unknown record id
- TranscriptionFailure : degraded result, absorbed by the pipeline
"""


class GrievanceError(Exception):
    """Base class for everything the core raises on purpose."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(GrievanceError):
    pass


class InvalidStatus(ValidationError):
    pass


class PersistenceError(GrievanceError):
    pass


class ComplaintNotFound(GrievanceError):
    pass


class TranscriptionFailure(GrievanceError):
    pass
