# -*- coding: utf-8 -*-
"""
grievance.utils_text

Shared text helpers for complaint processing.

Role
----
- normalize_for_match(text): lower-case / whitespace cleanup for keyword matching
- count_matches(text, keywords): number of distinct keywords occurring in text
- clean_llm_text(text): strip quotes / markdown fences an LLM wraps around output
- snippet(text): short single-line preview for log lines

Only modules inside the grievance package use this.
"""

from __future__ import annotations

import re
from typing import Iterable


# ------------------------------------------------------------
# 1. normalization
# ------------------------------------------------------------

def normalize_for_match(text: str) -> str:
    """
    Make complaint text easy to search:
    - trim both ends
    - lower-case (Devanagari has no case, so it passes through unchanged)
    - newlines to spaces
    - collapse repeated whitespace

    Punctuation is kept: Devanagari vowel signs are combining marks and a
    character-class filter would split words apart.
    """
    if not text:
        return ""

    t = text.strip().lower()
    t = t.replace("\n", " ")
    t = re.sub(r"\s+", " ", t)
    return t


def count_matches(text: str, keywords: Iterable[str]) -> int:
    """Each keyword counts once, however often it occurs."""
    if not text:
        return 0

    return sum(1 for kw in keywords if kw.lower() in text)


# ------------------------------------------------------------
# 2. LLM output cleanup
# ------------------------------------------------------------

_FENCE_RE = re.compile(r"^```[\w-]*\s*|\s*```$")
_QUOTE_RE = re.compile(r"^[\"'“”‘’]+|[\"'“”‘’]+$")


def clean_llm_text(text: str, strip_quotes: bool = True) -> str:
    """
    Models sometimes answer with ```json ... ``` blocks or wrap a
    translation in quotes even when told not to.
    """
    if not text:
        return ""

    t = text.strip()
    t = _FENCE_RE.sub("", t).strip()
    if strip_quotes:
        t = _QUOTE_RE.sub("", t).strip()
    return t


def snippet(text: str, limit: int = 100) -> str:
    if not text:
        return ""
    one_line = text.replace("\n", " ")
    if len(one_line) <= limit:
        return one_line
    return one_line[:limit] + "..."
