from __future__ import annotations

import logging
from functools import partial
from typing import List, Optional, Sequence, Tuple

import anyio

from .json_repair import parse_model_json
from .llm import LLMClient, build_messages
from .prompts import build_correction_prompt
from ..config import AgentConfig
from ..schemas import CorrectionResponse, ExtractedField

LOGGER = logging.getLogger(__name__)


async def request_correction(
    field: ExtractedField,
    document_text: str,
    config: AgentConfig,
    llm_client: LLMClient,
) -> Tuple[Optional[CorrectionResponse], Optional[str]]:
    messages = build_messages(build_correction_prompt(field, document_text))
    try:
        raw = await anyio.to_thread.run_sync(partial(llm_client, messages, config))
        return parse_model_json(raw, CorrectionResponse), None
    except Exception as exc:  # noqa: BLE001
        return None, f"Correction request failed: {exc}"


def apply_correction(field: ExtractedField, correction: CorrectionResponse) -> bool:
    if not correction.corrected_value:
        return False
    if correction.confidence_score <= field.confidence_score:
        return False
    field.field_value = correction.corrected_value
    field.confidence_score = correction.confidence_score
    field.validation_status = "validated"
    return True


async def _correct_one(
    field: ExtractedField,
    document_text: str,
    config: AgentConfig,
    llm_client: LLMClient,
    notes: List[str],
) -> None:
    correction, error = await request_correction(field, document_text, config, llm_client)
    if error or correction is None:
        LOGGER.warning("Failed to correct field %s: %s", field.field_name, error)
        return
    if apply_correction(field, correction):
        explanation = correction.explanation or "no explanation given"
        LOGGER.info("Corrected field %s: %s", field.field_name, explanation)
        notes.append(f"Corrected field {field.field_name}: {explanation}")
    else:
        LOGGER.info("Kept original value for field %s", field.field_name)


async def correct_flagged_fields(
    fields: Sequence[ExtractedField],
    document_text: str,
    config: AgentConfig,
    llm_client: LLMClient,
) -> List[str]:
    """Best-effort second pass over flagged fields, one concurrent model call each.

    Fields are updated in place; failures are logged and leave the field as is.
    Returns notes describing the corrections that were applied.
    """
    flagged = [field for field in fields if field.validation_status == "flagged"]
    notes: List[str] = []
    if not flagged:
        return notes
    LOGGER.info("Attempting corrections for %d flagged fields", len(flagged))
    async with anyio.create_task_group() as tg:
        for field in flagged:
            tg.start_soon(_correct_one, field, document_text, config, llm_client, notes)
    return notes
