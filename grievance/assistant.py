# -*- coding: utf-8 -*-
"""
grievance.assistant

Help for citizens while they write a complaint.

Operations
----------
- chat(query, context)        : short answer, aware of the draft complaint
- improve(text, language)     : clearer rewrite in the same language
- suggest_category(text)      : category / department / explanation preview

Strategies
----------
- LLMAssistant:
    chat backend. Returns None for anything unusable (API error, empty
    output, out-of-enum category), which hands over to the next strategy.
- RuleBasedAssistant:
    keyword rules, no API key needed. Always answers: canned guidance for
    chat, the original text for improve, the keyword table for suggestions.

ComplaintAssistant runs the strategies in order like FallbackChainClassifier;
RuleBasedAssistant always closes the chain.

A suggestion is only a preview; the ingestion pipeline classifies again on
submission.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence

from openai import OpenAI

from core.config import Settings
from core.errors import ValidationError
from core.logging import logger

from .classifier import KeywordClassificationStrategy, parse_classification
from .constants import CATEGORIES, LANGUAGE_NAMES, LANGUAGES, OTHER_CATEGORY, STATUSES
from .llm_client import build_client, call_chat, json_format_for
from .utils_text import clean_llm_text, snippet


@dataclass(frozen=True)
class AssistantContext:
    complaint_text: str = ""
    language: str = "en"
    status: Optional[str] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class CategorySuggestion:
    category: str
    department: str
    explanation: str
    source: str  # which strategy answered

    def to_dict(self) -> Dict[str, str]:
        return {
            "category": self.category,
            "department": self.department,
            "explanation": self.explanation,
            "source": self.source,
        }


# ------------------------------------------------------------
# 1. AI-backed strategy
# ------------------------------------------------------------

ASSISTANT_SYSTEM_PROMPT = (
    "You are a helpful assistant for a citizen grievance redressal platform.\n"
    "- If the user already wrote a complaint, base your answer on it and never ask "
    "for details it already contains.\n"
    "- When the category comes up, suggest one of: " + ", ".join(CATEGORIES) + ".\n"
    "- Keep answers short: 2-3 sentences or at most 4 bullet points (•).\n"
    "- Answer in the user's preferred language."
)

IMPROVE_PROMPT = (
    "You are helping a citizen improve their complaint for a government grievance system.\n"
    "The complaint is in {language}. Rewrite it to be clear, specific and actionable for "
    "the authorities, keeping every fact it states and adding none.\n"
    "Reply with the improved complaint only, in {language}."
)

SUGGESTION_PROMPT = (
    "Analyze the citizen complaint and suggest the most appropriate category and department.\n"
    "Respond ONLY with a JSON object of the form "
    '{"category": "<one of: ' + ", ".join(CATEGORIES) + '>", '
    '"department": "<specific government department name>", '
    '"explanation": "<one sentence on why this category fits>"}'
)

SUGGESTION_SCHEMA = {
    "type": "json_schema",
    "json_schema": {
        "name": "category_suggestion",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "category": {"type": "string", "enum": list(CATEGORIES)},
                "department": {"type": "string"},
                "explanation": {"type": "string"},
            },
            "required": ["category", "department", "explanation"],
            "additionalProperties": False,
        },
    },
}


def _language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code, LANGUAGE_NAMES["en"])


def build_chat_prompt(query: str, context: AssistantContext) -> str:
    parts = []
    if context.complaint_text.strip():
        parts.append(f'User\'s complaint: "{context.complaint_text.strip()}"')
    parts.append(f"User's question: {query}")
    parts.append(f"User's preferred language: {_language_name(context.language)}")
    if context.status:
        parts.append(f"Current complaint status: {context.status}")
    if context.category:
        parts.append(f"Complaint category: {context.category}")
    return "\n\n".join(parts)


def parse_suggestion(raw: str) -> Optional[CategorySuggestion]:
    classification = parse_classification(raw)
    if classification is None:
        return None

    data = json.loads(clean_llm_text(raw, strip_quotes=False))
    explanation = data.get("explanation")
    if not isinstance(explanation, str) or not explanation.strip():
        explanation = f"The complaint reads as a {classification[0]} issue."

    return CategorySuggestion(
        category=classification[0],
        department=classification[1],
        explanation=explanation.strip(),
        source="llm",
    )


class LLMAssistant:
    name = "llm"

    def __init__(
        self,
        client: OpenAI,
        model: str,
        temperature: float = 0.7,
        response_format: Dict[str, Any] = SUGGESTION_SCHEMA,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.response_format = response_format

    def reply(self, query: str, context: AssistantContext) -> Optional[str]:
        out = call_chat(
            self.client,
            [
                {"role": "system", "content": ASSISTANT_SYSTEM_PROMPT},
                {"role": "user", "content": build_chat_prompt(query, context)},
            ],
            model=self.model,
            temperature=self.temperature,
            max_tokens=150,
        )
        return out or None

    def improve(self, text: str, language: str) -> Optional[str]:
        out = call_chat(
            self.client,
            [
                {"role": "system", "content": IMPROVE_PROMPT.format(language=_language_name(language))},
                {"role": "user", "content": text},
            ],
            model=self.model,
            temperature=self.temperature,
            max_tokens=500,
        )
        return clean_llm_text(out) or None

    def suggest(self, text: str) -> Optional[CategorySuggestion]:
        raw = call_chat(
            self.client,
            [
                {"role": "system", "content": SUGGESTION_PROMPT},
                {"role": "user", "content": f'Complaint: "{text}"'},
            ],
            model=self.model,
            temperature=0.3,
            max_tokens=200,
            response_format=self.response_format,
        )
        return parse_suggestion(raw)


# ------------------------------------------------------------
# 2. rule-based strategy
# ------------------------------------------------------------

PINCODE_RE = re.compile(r"\d{6}")
DIGIT_RE = re.compile(r"\d")

WRITING_TIPS = (
    "To write an effective complaint, be clear and specific:\n"
    "• Describe the problem clearly (what, where, when)\n"
    "• Include location (pincode, area name)\n"
    "• Mention how it affects you\n"
    "• Attach photos if available"
)

STATUS_HELP = "Track your complaint in the dashboard. Statuses:\n" + "\n".join(
    f"• {status} - {meaning}"
    for status, meaning in zip(
        STATUSES,
        ("Complaint received", "Being reviewed", "Action taken", "Issue fixed"),
    )
)

CATEGORY_HELP = (
    "Categories: " + ", ".join(CATEGORIES) + ".\n\n"
    "Your complaint is categorized automatically when you submit it."
)

GENERAL_HELP = (
    "I can help with:\n"
    "• Writing better complaints\n"
    "• Understanding the process\n"
    "• Tracking status\n"
    "• Category suggestions\n\n"
    "What would you like to know?"
)


def draft_feedback(text: str) -> str:
    """Checklist for a draft: pincode, length, when it started."""
    tips = []
    if not PINCODE_RE.search(text):
        tips.append("• Add your 6-digit pincode")
    if len(text) < 20:
        tips.append("• Add more details about the problem")
    if not DIGIT_RE.search(text):
        tips.append("• Mention when the issue started (dates/duration)")
    tips.append("• Be specific about location and impact")
    return "Based on your complaint, here's how to improve it:\n\n" + "\n".join(tips)


class RuleBasedAssistant:
    name = "rules"

    def __init__(self, keywords: Optional[KeywordClassificationStrategy] = None):
        self.keywords = keywords or KeywordClassificationStrategy()

    def reply(self, query: str, context: AssistantContext) -> str:
        q = query.lower()
        draft = context.complaint_text.strip()

        if "write" in q or "how to" in q or "effective" in q:
            return draft_feedback(draft) if draft else WRITING_TIPS

        if "status" in q or "track" in q:
            return STATUS_HELP

        if "category" in q or "type" in q:
            if draft:
                suggestion = self.suggest(draft)
                if suggestion.category != OTHER_CATEGORY:
                    return (
                        f"Your complaint looks like {suggestion.category} "
                        f"({suggestion.department}).\n\n" + CATEGORY_HELP
                    )
            return CATEGORY_HELP

        return GENERAL_HELP

    def improve(self, text: str, language: str) -> str:
        return text

    def suggest(self, text: str) -> CategorySuggestion:
        category, department = self.keywords.classify(text)
        if category == OTHER_CATEGORY:
            explanation = (
                "No category keywords found. Your complaint will be categorized "
                "automatically on submission."
            )
        else:
            explanation = f"The complaint mentions typical {category} keywords."
        return CategorySuggestion(category, department, explanation, source=self.name)


# ------------------------------------------------------------
# 3. fallback chain
# ------------------------------------------------------------

class ComplaintAssistant:
    def __init__(self, strategies: Sequence[Any] = ()):
        # the rules always close the chain
        chain = list(strategies)
        if not chain or not isinstance(chain[-1], RuleBasedAssistant):
            chain.append(RuleBasedAssistant())
        self.strategies = chain

    def _first(self, operation: str, *args):
        result = None
        for strategy in self.strategies:
            name = getattr(strategy, "name", type(strategy).__name__)
            try:
                result = getattr(strategy, operation)(*args)
            except Exception as e:
                logger.warning(f"[assistant] {name}.{operation} failed: {e}")
                continue
            if result:
                logger.info(f"[assistant] {operation} answered by {name}")
                return result
            logger.info(f"[assistant] {name}.{operation} gave nothing, falling through")
        return result

    def chat(self, query: str, context: Optional[AssistantContext] = None) -> str:
        query = (query or "").strip()
        if not query:
            raise ValidationError("Please provide a query")

        context = context or AssistantContext()
        if context.language not in LANGUAGES:
            context = replace(context, language="en")

        logger.info(f"[assistant] chat: {snippet(query)}")
        return self._first("reply", query, context)

    def improve(self, text: str, language: str = "en") -> str:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Please provide complaint text")

        return self._first("improve", text, language if language in LANGUAGES else "en")

    def suggest_category(self, text: str) -> CategorySuggestion:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Please provide complaint text")

        suggestion = self._first("suggest", text)
        if suggestion is None or suggestion.category not in CATEGORIES:
            return self.strategies[-1].suggest(text)
        return suggestion


def build_assistant(settings: Settings, client: Optional[OpenAI] = None) -> ComplaintAssistant:
    """AI first when a key is configured, rules always."""
    strategies: List[Any] = []

    client = client or build_client(settings)
    if client is not None:
        strategies.append(
            LLMAssistant(
                client,
                model=settings.chat_model,
                temperature=settings.temp_assistant,
                response_format=json_format_for(settings, SUGGESTION_SCHEMA),
            )
        )
    else:
        logger.info("AI backend not configured, assistant answers from rules only")

    return ComplaintAssistant(strategies)
