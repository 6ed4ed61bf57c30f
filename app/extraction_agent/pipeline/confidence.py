from __future__ import annotations

from typing import Sequence

from ..schemas import ConfidenceSummary, ExtractedField

HIGH_CONFIDENCE = 0.8
MEDIUM_CONFIDENCE = 0.6


def confidence_band(score: float) -> str:
    if score >= HIGH_CONFIDENCE:
        return "high"
    if score >= MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


def summarize_confidence(fields: Sequence[ExtractedField]) -> ConfidenceSummary:
    counts = {"high": 0, "medium": 0, "low": 0}
    for field in fields:
        counts[confidence_band(field.confidence_score)] += 1
    overall = sum(f.confidence_score for f in fields) / len(fields) if fields else 0.0
    return ConfidenceSummary(
        high_confidence=counts["high"],
        medium_confidence=counts["medium"],
        low_confidence=counts["low"],
        overall_confidence=overall,
    )
