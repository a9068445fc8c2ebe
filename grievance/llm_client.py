# -*- coding: utf-8 -*-
"""
grievance.llm_client

Common wrapper around the OpenAI-compatible Chat API.

- build_client(settings): OpenAI client with a bounded timeout and no
  automatic retries (one attempt per call per pipeline run). Returns None
  when no key is configured, and callers then skip the AI path entirely.
- call_chat(client, messages, ...): Chat Completions wrapper that logs and
  returns "" on any API error.

The translator and the AI classifier only talk to the backend through here.
LLM_BASE_URL lets the same code target DeepSeek or any compatible endpoint.
"""

from typing import Any, Dict, List, Optional

from openai import OpenAI

from core.config import Settings
from core.logging import logger


def build_client(settings: Settings, timeout: Optional[float] = None) -> Optional[OpenAI]:
    if not settings.llm_enabled:
        return None

    kwargs: Dict[str, Any] = {
        "api_key": settings.llm_api_key,
        "timeout": timeout if timeout is not None else settings.llm_timeout_seconds,
        "max_retries": 0,
    }
    if settings.llm_base_url:
        kwargs["base_url"] = settings.llm_base_url

    return OpenAI(**kwargs)


# -------------------- Chat call wrapper --------------------
def call_chat(
    client: OpenAI,
    messages: List[Dict[str, str]],
    model: str,
    temperature: float = 0.0,
    max_tokens: int = 512,
    response_format: Optional[Dict[str, Any]] = None,
) -> str:
    """OpenAI Chat call wrapper."""
    kwargs: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if response_format is not None:
        kwargs["response_format"] = response_format

    try:
        resp = client.chat.completions.create(**kwargs)
        content = resp.choices[0].message.content
        return (content or "").strip()
    except Exception as e:
        logger.warning(f"OpenAI API error: {e}")
        return ""


# -------------------- structured output --------------------
JSON_OBJECT_FORMAT: Dict[str, Any] = {"type": "json_object"}


def json_format_for(settings: Settings, schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Strict json_schema on the OpenAI endpoint; plain json_object on any
    LLM_BASE_URL (DeepSeek and friends reject json_schema). Callers still
    validate the parsed fields themselves.
    """
    if settings.llm_base_url:
        return JSON_OBJECT_FORMAT
    return schema
