from __future__ import annotations

import json
from typing import List, Optional, Sequence

from ..field_registry import DocumentTemplate, FieldDefinition
from ..schemas import ExtractedField

MAX_PROMPT_FIELDS = 80
MAX_TEMPLATE_EXAMPLES = 3

SYSTEM_PROMPT = "Return JSON only. Do not wrap in markdown."


EXTRACTION_PROMPT = """
You are an expert immigration document analyzer. Your task is to extract structured information
from immigration documents with high accuracy.

DOCUMENT TYPE: <<DOCUMENT_TYPE>>
DESCRIPTION: <<DESCRIPTION>>

DOCUMENT TEXT:
<<DOCUMENT_TEXT>>

AVAILABLE FIELDS TO EXTRACT:
<<FIELDS>>

EXTRACTION GUIDELINES:
1. Only extract information that is explicitly present in the document text
2. If a field is not found, do not include it in the response
3. Maintain the exact text as it appears in the document
4. For dates, preserve the original format
5. For names, include the complete name as written
6. Be precise and avoid making assumptions
7. If you're unsure about a field, set confidence_score to 0.5 or lower
8. Use only the field names listed above
""".strip()


EXAMPLES_SECTION = """
EXAMPLES OF WHAT TO LOOK FOR:
<<EXAMPLES>>
""".strip()


FIELD_SHAPE = (
    '{"field_name": "string", "field_value": "string", "confidence_score": 0.0-1.0, '
    '"field_category": "string", "source_text": "verbatim snippet from the document", '
    '"validation_status": "pending"}'
)

FIELDS_ONLY_FORMAT = f"""
Return a JSON object with exactly this shape:
{{
  "extracted_fields": [
    {FIELD_SHAPE}
  ]
}}
Only include fields that you can confidently extract from the document text.
""".strip()

FULL_RESULT_FORMAT = f"""
Return a JSON object with exactly this shape:
{{
  "document_type": "string",
  "extracted_fields": [
    {FIELD_SHAPE}
  ],
  "confidence_summary": {{
    "high_confidence": 0,
    "medium_confidence": 0,
    "low_confidence": 0,
    "overall_confidence": 0.0
  }},
  "extraction_notes": ["string"],
  "processing_time_ms": 0
}}
Only include fields that you can confidently extract from the document text.
""".strip()


CORRECTION_PROMPT = """
You are an expert immigration document field corrector. Please correct the following extracted field.

DOCUMENT TEXT:
<<DOCUMENT_TEXT>>

FIELD TO CORRECT:
<<FIELD_JSON>>

Please provide the corrected value based on the document text. If the current value is correct,
confirm it. If it cannot be found in the document, set corrected_value to null.

Return your response in this JSON format:
{
  "corrected_value": "the corrected field value",
  "confidence_score": 0.95,
  "explanation": "explanation of the correction made",
  "source_text": "the text from the document that supports this value"
}
""".strip()


def _describe_field(definition: FieldDefinition) -> str:
    requirement = "REQUIRED" if definition.required else "OPTIONAL"
    line = f"- {definition.name}: {definition.description} ({requirement}) [category: {definition.category}]"
    if definition.examples:
        line += f"\n   Examples: {', '.join(definition.examples)}"
    return line


def format_field_list(fields: Sequence[FieldDefinition], limit: int = MAX_PROMPT_FIELDS) -> str:
    lines = [_describe_field(definition) for definition in fields[:limit]]
    remaining = len(fields) - limit
    if remaining > 0:
        lines.append(f"+{remaining} additional fields, extract if present")
    return "\n".join(lines)


def build_format_instructions(fields_only: bool) -> str:
    return FIELDS_ONLY_FORMAT if fields_only else FULL_RESULT_FORMAT


def build_extraction_prompt(
    template: DocumentTemplate,
    document_text: str,
    fields: Optional[Sequence[FieldDefinition]] = None,
    fields_only: bool = False,
) -> str:
    selected = list(fields) if fields is not None else list(template.fields)
    sections: List[str] = [
        EXTRACTION_PROMPT.replace("<<DOCUMENT_TYPE>>", template.name)
        .replace("<<DESCRIPTION>>", template.description)
        .replace("<<FIELDS>>", format_field_list(selected))
        .replace("<<DOCUMENT_TEXT>>", document_text)
    ]
    if not fields_only and template.examples:
        examples = "\n".join(template.examples[:MAX_TEMPLATE_EXAMPLES])
        sections.append(EXAMPLES_SECTION.replace("<<EXAMPLES>>", examples))
    sections.append(build_format_instructions(fields_only))
    return "\n\n".join(sections)


def build_correction_prompt(field: ExtractedField, document_text: str) -> str:
    field_json = json.dumps(field.model_dump(), indent=2, ensure_ascii=False)
    return CORRECTION_PROMPT.replace("<<FIELD_JSON>>", field_json).replace("<<DOCUMENT_TEXT>>", document_text)
