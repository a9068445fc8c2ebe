# -*- coding: utf-8 -*-
"""
Complaint category / department classification.

Role
----
- KeywordClassificationStrategy:
    rule-based scoring over KEYWORD_TABLE. Works without any API key and
    always answers; "Other" / "General Administration" when nothing matches.
- LLMClassificationStrategy:
    asks the chat backend for {"category", "department"}. On OpenAI a strict
    JSON schema pins category to CATEGORIES; LLM_BASE_URL endpoints get plain
    json_object mode and the enum is enforced by parse_classification.
    Returns None for anything it cannot trust (API error, bad JSON,
    out-of-enum category, blank department).
- FallbackChainClassifier:
    tries each strategy in order and takes the first accepted result.
    The last strategy is always the keyword table, so classify() never
    raises and never returns a category outside CATEGORIES.

Note
----
The keyword table carries Hindi / Marathi tokens too, so a complaint whose
translation silently failed still lands in the right department.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from openai import OpenAI

from core.config import Settings
from core.logging import logger

from .constants import CATEGORIES, DEFAULT_DEPARTMENT, OTHER_CATEGORY
from .llm_client import build_client, call_chat, json_format_for
from .utils_text import clean_llm_text, count_matches, normalize_for_match

# (category, department)
Classification = Tuple[str, str]


class ClassificationStrategy(Protocol):
    name: str

    def classify(self, text: str) -> Optional[Classification]:
        ...


# ------------------------------------------------------------
# 1. keyword table (order = tie-break order)
# ------------------------------------------------------------

KEYWORD_TABLE: List[Tuple[str, str, List[str]]] = [
    (
        "Water Supply",
        "Water Supply Department",
        ["water", "pipeline", "tap", "supply", "leak", "पानी", "नल", "पाणी"],
    ),
    (
        "Roads and Infrastructure",
        "Public Works Department",
        ["road", "pothole", "bridge", "footpath", "infrastructure", "रोड", "सड़क", "रस्ता"],
    ),
    (
        "Electricity",
        "Electricity Board",
        ["electricity", "power", "light", "transformer", "billing", "बिजली", "विद्युत"],
    ),
    (
        "Health Services",
        "Health Department",
        ["hospital", "doctor", "medical", "health", "ambulance", "अस्पताल", "डॉक्टर", "रुग्णालय"],
    ),
    (
        "Sanitation",
        "Sanitation Department",
        ["garbage", "waste", "drain", "sanitation", "cleanliness", "कचरा", "गंदगी", "स्वच्छता"],
    ),
    (
        "Education",
        "Education Department",
        ["school", "teacher", "education", "classroom", "स्कूल", "शिक्षक", "शाळा"],
    ),
    (
        "Public Transport",
        "Transport Department",
        ["bus", "train", "transport", "auto", "बस", "ट्रेन", "वाहतूक"],
    ),
    (
        "Law and Order",
        "Police Department",
        ["police", "crime", "theft", "safety", "पुलिस", "चोरी"],
    ),
    (
        "Housing",
        "Housing Department",
        ["house", "housing", "construction", "building", "घर", "मकान"],
    ),
]


class KeywordClassificationStrategy:
    name = "keyword"

    def __init__(self, table: Sequence[Tuple[str, str, Sequence[str]]] = KEYWORD_TABLE):
        self.table = table

    def classify(self, text: str) -> Classification:
        norm = normalize_for_match(text)

        best: Optional[Classification] = None
        best_count = 0
        for category, department, keywords in self.table:
            n = count_matches(norm, keywords)
            # strict ">" keeps the earlier entry on ties
            if n > best_count:
                best, best_count = (category, department), n

        if best is None:
            logger.info("[classify] no keyword match, using Other")
            return OTHER_CATEGORY, DEFAULT_DEPARTMENT

        logger.info(f"[classify] keyword match: {best[0]} ({best_count} keywords)")
        return best


# ------------------------------------------------------------
# 2. AI-backed strategy
# ------------------------------------------------------------

CLASSIFIER_SYSTEM_PROMPT = (
    "You are an AI assistant for an Indian government grievance system. "
    "Analyze the citizen complaint and categorize it.\n"
    "Respond ONLY with a JSON object of the form "
    '{"category": "<one of: ' + ", ".join(CATEGORIES) + '>", '
    '"department": "<specific government department name>"}'
)

CLASSIFICATION_SCHEMA = {
    "type": "json_schema",
    "json_schema": {
        "name": "complaint_classification",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "category": {"type": "string", "enum": list(CATEGORIES)},
                "department": {"type": "string"},
            },
            "required": ["category", "department"],
            "additionalProperties": False,
        },
    },
}


def parse_classification(raw: str) -> Optional[Classification]:
    """Structured response -> (category, department), or None when it cannot be trusted."""
    if not raw:
        return None

    try:
        data = json.loads(clean_llm_text(raw, strip_quotes=False))
    except (ValueError, TypeError):
        logger.warning(f"[classify] unparseable AI response: {raw[:120]}")
        return None

    if not isinstance(data, dict):
        return None

    category = data.get("category")
    department = data.get("department")

    if not isinstance(category, str) or category not in CATEGORIES:
        logger.warning(f"[classify] AI category outside enum: {category!r}")
        return None
    if not isinstance(department, str) or not department.strip():
        logger.warning("[classify] AI response without department")
        return None

    return category, department.strip()


class LLMClassificationStrategy:
    name = "llm"

    def __init__(
        self,
        client: OpenAI,
        model: str,
        temperature: float = 0.0,
        max_tokens: int = 150,
        response_format: Dict[str, Any] = CLASSIFICATION_SCHEMA,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.response_format = response_format

    def classify(self, text: str) -> Optional[Classification]:
        raw = call_chat(
            self.client,
            [
                {"role": "system", "content": CLASSIFIER_SYSTEM_PROMPT},
                {"role": "user", "content": f'Complaint: "{text}"'},
            ],
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            response_format=self.response_format,
        )
        return parse_classification(raw)


# ------------------------------------------------------------
# 3. fallback chain
# ------------------------------------------------------------

class FallbackChainClassifier:
    def __init__(self, strategies: Sequence[ClassificationStrategy]):
        # the keyword table always closes the chain
        chain = list(strategies)
        if not chain or not isinstance(chain[-1], KeywordClassificationStrategy):
            chain.append(KeywordClassificationStrategy())
        self.strategies = chain

    def classify(self, text: str) -> Classification:
        text = (text or "").strip()

        if text:
            for strategy in self.strategies:
                name = getattr(strategy, "name", type(strategy).__name__)
                try:
                    result = strategy.classify(text)
                except Exception as e:
                    logger.warning(f"[classify] strategy {name} failed: {e}")
                    continue

                if result is not None and result[0] in CATEGORIES and (result[1] or "").strip():
                    logger.info(f"[classify] {name}: {result[0]} / {result[1]}")
                    return result[0], result[1].strip()

                logger.info(f"[classify] strategy {name} gave no usable result, falling through")

        return OTHER_CATEGORY, DEFAULT_DEPARTMENT


def build_classifier(settings: Settings, client: Optional[OpenAI] = None) -> FallbackChainClassifier:
    """AI first when a key is configured, keyword table always."""
    strategies: List[ClassificationStrategy] = []

    client = client or build_client(settings)
    if client is not None:
        response_format = json_format_for(settings, CLASSIFICATION_SCHEMA)
        logger.info(
            f"AI categorization on {settings.chat_model} "
            f"(response format: {response_format['type']})"
        )
        strategies.append(
            LLMClassificationStrategy(
                client,
                model=settings.chat_model,
                temperature=settings.temp_classifier,
                response_format=response_format,
            )
        )
    else:
        logger.info("AI backend not configured, using keyword categorization only")

    strategies.append(KeywordClassificationStrategy())
    return FallbackChainClassifier(strategies)
