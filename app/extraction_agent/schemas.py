from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ValidationStatus = Literal["pending", "validated", "flagged", "corrected"]


def clamp_confidence(value: object) -> float:
    try:
        score = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if score != score:  # NaN
        return 0.0
    return max(0.0, min(1.0, score))


class ExtractionContext(BaseModel):
    document_category: str = "other"
    document_text: str = ""
    file_type: str = ""
    filename: str = ""
    user_id: str = ""
    document_id: str = ""


class ExtractedField(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    field_name: str
    field_value: str = ""
    confidence_score: float = 0.5
    field_category: str = "other"
    source_text: Optional[str] = None
    validation_status: ValidationStatus = "pending"

    @field_validator("field_value", mode="before")
    @classmethod
    def _coerce_value(cls, value: object) -> str:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value  # type: ignore[return-value]

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: object) -> float:
        return clamp_confidence(value)

    @field_validator("field_category", mode="before")
    @classmethod
    def _default_category(cls, value: object) -> str:
        if not value:
            return "other"
        return str(value).strip().lower()


class ConfidenceSummary(BaseModel):
    high_confidence: int = 0
    medium_confidence: int = 0
    low_confidence: int = 0
    overall_confidence: float = 0.0


class ExtractionResult(BaseModel):
    document_type: str
    extracted_fields: List[ExtractedField] = Field(default_factory=list)
    confidence_summary: ConfidenceSummary = Field(default_factory=ConfidenceSummary)
    extraction_notes: List[str] = Field(default_factory=list)
    processing_time_ms: int = 0


class FieldsEnvelope(BaseModel):
    """Compact model response: only the fields of one batch."""

    document_type: Optional[str] = None
    extracted_fields: List[ExtractedField]
    extraction_notes: List[str] = Field(default_factory=list)

    @field_validator("extraction_notes", mode="before")
    @classmethod
    def _default_notes(cls, value: object) -> object:
        if value is None:
            return []
        return value


class CorrectionResponse(BaseModel):
    corrected_value: Optional[str] = None
    confidence_score: float = 0.0
    explanation: Optional[str] = None
    source_text: Optional[str] = None

    @field_validator("corrected_value", mode="before")
    @classmethod
    def _coerce_value(cls, value: object) -> Optional[str]:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value  # type: ignore[return-value]

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: object) -> float:
        return clamp_confidence(value)


class ValidationResult(BaseModel):
    field_name: str
    is_valid: bool
    confidence_score: float
    validation_status: ValidationStatus
    issues: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    corrected_value: Optional[str] = None


class ValidationSummary(BaseModel):
    validation_results: List[ValidationResult] = Field(default_factory=list)
    overall_assessment: str
    missing_fields: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
