from __future__ import annotations

import logging
from typing import Dict, Optional

from .config import AgentConfig, LLMSettings, resolve_llm_settings
from .pipeline.extract import extract_document
from .pipeline.llm import LLMClient, build_llm_client
from .schemas import ExtractionContext, ExtractionResult

LOGGER = logging.getLogger(__name__)


class AgentNotInitialized(RuntimeError):
    pass


class AgentNotConfigured(RuntimeError):
    pass


class DocumentExtractionAgent:
    """Holds the current config and model client; each call runs on a config snapshot."""

    def __init__(
        self,
        config: Optional[AgentConfig] = None,
        llm_client: Optional[LLMClient] = None,
        settings: Optional[LLMSettings] = None,
    ) -> None:
        self._config = config or AgentConfig()
        if llm_client is None:
            settings = settings or resolve_llm_settings()
            llm_client = build_llm_client(settings)
        self._llm_client = llm_client

    async def extract_document(self, context: ExtractionContext) -> ExtractionResult:
        return await extract_document(context, self._config, self._llm_client)

    def get_config(self) -> AgentConfig:
        return self._config

    def update_config(self, updates: Optional[Dict[str, object]] = None, **kwargs: object) -> AgentConfig:
        merged = dict(updates or {})
        merged.update(kwargs)
        self._config = self._config.with_updates(merged)
        return self._config


_AGENT: Optional[DocumentExtractionAgent] = None


def initialize_agent(
    config: Optional[AgentConfig] = None,
    llm_client: Optional[LLMClient] = None,
    settings: Optional[LLMSettings] = None,
) -> DocumentExtractionAgent:
    global _AGENT
    if llm_client is None:
        settings = settings or resolve_llm_settings()
        if not settings.api_key:
            raise AgentNotConfigured("LLM_API_KEY or OPENAI_API_KEY environment variable is required")
    _AGENT = DocumentExtractionAgent(config=config, llm_client=llm_client, settings=settings)
    LOGGER.info("Document extraction agent initialized with config: %s", _AGENT.get_config().to_dict())
    return _AGENT


def get_extraction_agent() -> DocumentExtractionAgent:
    if _AGENT is None:
        raise AgentNotInitialized("Document extraction agent not initialized. Call initialize_agent() first.")
    return _AGENT


async def extract_document_with_agent(context: ExtractionContext) -> ExtractionResult:
    return await get_extraction_agent().extract_document(context)


def update_agent_config(updates: Dict[str, object]) -> AgentConfig:
    config = get_extraction_agent().update_config(updates)
    LOGGER.info("Agent configuration updated: %s", config.to_dict())
    return config


def get_agent_config() -> AgentConfig:
    return get_extraction_agent().get_config()


def reset_agent() -> None:
    global _AGENT
    _AGENT = None
