from __future__ import annotations

import logging
import time
from functools import partial
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import anyio

from .confidence import summarize_confidence
from .json_repair import ResponseParseError, parse_model_json
from .llm import LLMClient, LLMRequestError, build_messages
from .llm_correct import correct_flagged_fields
from .prompts import build_extraction_prompt
from .validate import is_poor, validate_extraction
from ..config import AgentConfig
from ..field_registry import DocumentTemplate, FieldDefinition, get_template_for_category
from ..schemas import ExtractedField, ExtractionContext, ExtractionResult, FieldsEnvelope

LOGGER = logging.getLogger(__name__)

MAX_DOCUMENT_CHARS = 5000
HEAD_RATIO = 0.8
TRUNCATION_MARKER = "\n\n...[TRUNCATED FOR LENGTH]...\n\n"
BATCH_SIZE = 12
RETRY_BASE_DELAY_S = 1.0
CATEGORY_PRIORITY = (
    "personal",
    "contact",
    "address",
    "identification",
    "passport",
    "travel",
    "education",
    "employment",
    "financial",
    "other",
)


class ExtractionFailed(RuntimeError):
    pass


def truncate_document_text(text: str, budget: int = MAX_DOCUMENT_CHARS) -> str:
    """Keep the head and tail of long documents so identifiers and signatures both survive."""
    if len(text) <= budget:
        return text
    head = int(budget * HEAD_RATIO)
    tail = budget - head
    return text[:head] + TRUNCATION_MARKER + text[-tail:]


def _category_rank(category: str) -> int:
    try:
        return CATEGORY_PRIORITY.index(category)
    except ValueError:
        return len(CATEGORY_PRIORITY)


def batch_fields(
    fields: Sequence[FieldDefinition],
    batch_size: int = BATCH_SIZE,
) -> List[Tuple[str, List[FieldDefinition]]]:
    groups: Dict[str, List[FieldDefinition]] = {}
    for definition in fields:
        groups.setdefault(definition.category, []).append(definition)

    batches: List[Tuple[str, List[FieldDefinition]]] = []
    for category in sorted(groups, key=_category_rank):
        members = groups[category]
        for start in range(0, len(members), batch_size):
            batches.append((category, members[start : start + batch_size]))
    return batches


def merge_fields(batches: Iterable[Iterable[ExtractedField]]) -> List[ExtractedField]:
    merged: Dict[str, ExtractedField] = {}
    for batch in batches:
        for field in batch:
            current = merged.get(field.field_name)
            if current is None or field.confidence_score > current.confidence_score:
                merged[field.field_name] = field
    return list(merged.values())


async def _request_batch(
    llm_client: LLMClient,
    config: AgentConfig,
    prompt: str,
    label: str,
) -> FieldsEnvelope:
    messages = build_messages(prompt)
    last_error: Optional[Exception] = None
    for attempt in range(1, config.retry_attempts + 1):
        LOGGER.info("Extraction attempt %d/%d for batch %s", attempt, config.retry_attempts, label)
        try:
            raw = await anyio.to_thread.run_sync(partial(llm_client, messages, config))
            return parse_model_json(raw, FieldsEnvelope)
        except (LLMRequestError, ResponseParseError) as exc:
            last_error = exc
            LOGGER.warning("Extraction attempt %d for batch %s failed: %s", attempt, label, exc)
        except Exception as exc:  # noqa: BLE001
            last_error = exc
            LOGGER.warning(
                "Extraction attempt %d for batch %s raised %s: %s", attempt, label, type(exc).__name__, exc
            )
        if attempt < config.retry_attempts:
            await anyio.sleep(RETRY_BASE_DELAY_S * attempt)
    LOGGER.error("All %d extraction attempts failed for batch %s", config.retry_attempts, label)
    raise ExtractionFailed(
        f"Document extraction failed: all {config.retry_attempts} attempts failed for batch {label}. "
        f"Last error: {last_error}"
    )


def _accept_fields(
    envelope: FieldsEnvelope,
    allowed: Dict[str, FieldDefinition],
    notes: List[str],
) -> List[ExtractedField]:
    accepted: List[ExtractedField] = []
    rejected: List[str] = []
    for field in envelope.extracted_fields:
        definition = allowed.get(field.field_name)
        if definition is None:
            rejected.append(field.field_name)
            continue
        if field.field_category == "other" and definition.category != "other":
            field.field_category = definition.category
        accepted.append(field)
    if rejected:
        notes.append(f"Ignored fields not in template: {', '.join(sorted(set(rejected)))}")
    notes.extend(envelope.extraction_notes)
    return accepted


async def extract_document(
    context: ExtractionContext,
    config: AgentConfig,
    llm_client: LLMClient,
) -> ExtractionResult:
    """Run batched extraction, merge by confidence, validate and correct.

    Raises ``ExtractionFailed`` when any batch exhausts its retries; every
    other problem is reported through field statuses and notes.
    """
    start = time.monotonic()
    LOGGER.info("Starting document extraction for: %s", context.filename or context.document_id)

    template: DocumentTemplate = get_template_for_category(context.document_category)
    document_text = truncate_document_text(context.document_text)
    notes: List[str] = []
    if len(document_text) != len(context.document_text):
        notes.append(
            f"Document text truncated from {len(context.document_text)} to {MAX_DOCUMENT_CHARS} characters"
        )

    allowed: Dict[str, FieldDefinition] = {}
    for definition in template.fields:
        allowed.setdefault(definition.name, definition)

    batches = batch_fields(template.fields)
    batch_results: List[List[ExtractedField]] = []
    parsed_type: Optional[str] = None
    for index, (category, members) in enumerate(batches, start=1):
        label = f"{category} ({index}/{len(batches)})"
        prompt = build_extraction_prompt(template, document_text, fields=members, fields_only=True)
        envelope = await _request_batch(llm_client, config, prompt, label)
        if envelope.document_type and not parsed_type:
            parsed_type = envelope.document_type
        batch_results.append(_accept_fields(envelope, allowed, notes))

    fields = merge_fields(batch_results)

    if config.enable_validation:
        summary = validate_extraction(fields)
        for field, outcome in zip(fields, summary.validation_results):
            field.validation_status = outcome.validation_status
        LOGGER.info("Validation completed: %s", summary.overall_assessment)
        if config.enable_correction and is_poor(summary):
            notes.extend(await correct_flagged_fields(fields, document_text, config, llm_client))

    confidence_summary = summarize_confidence(fields)
    result = ExtractionResult(
        document_type=parsed_type or template.name,
        extracted_fields=fields,
        confidence_summary=confidence_summary,
        extraction_notes=list(dict.fromkeys(notes)),
        processing_time_ms=int((time.monotonic() - start) * 1000),
    )
    LOGGER.info(
        "Extraction completed in %dms: %d fields, overall confidence %.2f",
        result.processing_time_ms,
        len(fields),
        confidence_summary.overall_confidence,
    )
    return result
