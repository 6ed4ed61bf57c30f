from __future__ import annotations

import logging
from typing import Callable, Dict, List

import requests

from .prompts import SYSTEM_PROMPT
from ..config import AgentConfig, LLMSettings

LOGGER = logging.getLogger(__name__)

Messages = List[Dict[str, str]]
# (messages, config) -> raw assistant text. Blocking; run in a worker thread.
LLMClient = Callable[[Messages, AgentConfig], str]


class LLMRequestError(RuntimeError):
    pass


def build_messages(prompt: str) -> Messages:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


def call_chat_completion(messages: Messages, config: AgentConfig, settings: LLMSettings) -> str:
    if not settings.endpoint:
        raise LLMRequestError("LLM endpoint not configured")
    if not settings.api_key:
        raise LLMRequestError("LLM API key not configured")

    headers = {"Content-Type": "application/json", "Authorization": f"Bearer {settings.api_key}"}
    payload = {
        "model": config.model,
        "messages": messages,
        "temperature": config.temperature,
        "max_tokens": config.max_tokens,
        "response_format": {"type": "json_object"},
    }
    try:
        resp = requests.post(settings.endpoint, json=payload, headers=headers, timeout=settings.timeout)
        resp.raise_for_status()
        data = resp.json()
    except requests.RequestException as exc:
        raise LLMRequestError(f"LLM request failed: {exc}") from exc
    except ValueError as exc:
        raise LLMRequestError(f"LLM returned non-JSON body: {exc}") from exc

    content = (
        (data.get("choices") or [{}])[0]
        .get("message", {})
        .get("content")
    )
    if not isinstance(content, str) or not content.strip():
        raise LLMRequestError("LLM response missing message content")
    LOGGER.debug("LLM response (%d chars) from model %s", len(content), config.model)
    return content


def build_llm_client(settings: LLMSettings) -> LLMClient:
    def client(messages: Messages, config: AgentConfig) -> str:
        return call_chat_completion(messages, config, settings)

    return client
