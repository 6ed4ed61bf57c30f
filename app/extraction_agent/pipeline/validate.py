from __future__ import annotations

import logging
from typing import Iterable, List

from .rules import rule_for
from ..schemas import ExtractedField, ValidationResult, ValidationSummary

LOGGER = logging.getLogger(__name__)

RULE_FAILURE_CAP = 0.3
SHORT_VALUE_CAP = 0.2
FLAG_THRESHOLD = 0.3
VALIDATED_THRESHOLD = 0.7
LOW_CONFIDENCE_THRESHOLD = 0.5

ASSESSMENT_POOR = "Poor - Many validation issues found"
ASSESSMENT_FAIR = "Fair - Some validation issues found"
ASSESSMENT_GOOD = "Good - Minor validation issues found"
ASSESSMENT_EXCELLENT = "Excellent"


def validate_field(field: ExtractedField) -> ValidationResult:
    """Check one extracted value against its format rule.

    Confidence is only ever lowered here. A field without a rule passes the
    format check; the empty/short-value checks apply to every field.
    """
    value = field.field_value or ""
    issues: List[str] = []
    suggestions: List[str] = []
    is_valid = True
    confidence = field.confidence_score

    rule = rule_for(field.field_name)
    if rule is not None and not rule.check(value):
        issues.append(rule.issue)
        if rule.suggestion:
            suggestions.append(rule.suggestion)
        is_valid = False
        confidence = min(confidence, RULE_FAILURE_CAP)

    trimmed = value.strip()
    if not trimmed:
        issues.append("Field value is empty")
        is_valid = False
        confidence = 0.0
    elif len(trimmed) < 2:
        issues.append("Field value is too short")
        is_valid = False
        confidence = min(confidence, SHORT_VALUE_CAP)

    if not is_valid:
        status = "flagged" if confidence < FLAG_THRESHOLD else "pending"
    elif confidence < VALIDATED_THRESHOLD:
        status = "pending"
    else:
        status = "validated"

    return ValidationResult(
        field_name=field.field_name,
        is_valid=is_valid,
        confidence_score=confidence,
        validation_status=status,
        issues=issues,
        suggestions=suggestions,
    )


def _assessment_for(valid_count: int, total: int) -> str:
    if total == 0:
        return ASSESSMENT_EXCELLENT
    score = valid_count / total
    if score < 0.5:
        return ASSESSMENT_POOR
    if score < 0.8:
        return ASSESSMENT_FAIR
    if score < 0.95:
        return ASSESSMENT_GOOD
    return ASSESSMENT_EXCELLENT


def validate_extraction(fields: Iterable[ExtractedField]) -> ValidationSummary:
    results = [validate_field(field) for field in fields]
    total = len(results)
    valid_count = sum(1 for r in results if r.is_valid)
    assessment = _assessment_for(valid_count, total)

    missing_fields = [r.field_name for r in results if r.validation_status == "flagged"]

    recommendations: List[str] = []
    if total and valid_count / total < 0.8:
        recommendations.append("Review and correct invalid fields")
    if any(r.confidence_score < LOW_CONFIDENCE_THRESHOLD for r in results):
        recommendations.append("Review low-confidence extractions")
    if missing_fields:
        recommendations.append(f"Re-extract missing fields: {', '.join(missing_fields)}")

    LOGGER.debug("Validated %d fields: %d valid, assessment=%s", total, valid_count, assessment)
    return ValidationSummary(
        validation_results=results,
        overall_assessment=assessment,
        missing_fields=missing_fields,
        recommendations=recommendations,
    )


def is_poor(summary: ValidationSummary) -> bool:
    return summary.overall_assessment.startswith("Poor")
