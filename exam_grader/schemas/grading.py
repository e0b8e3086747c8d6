"""
Pydantic schemas for grading results and the grading API.
"""
from typing import List, Optional, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_serializer

from .base import CamelModel


# =============================================================================
# Model Response Schema (what the grading model must return per question)
# =============================================================================

class ModelGradingResponse(BaseModel):
    """
    Strict shape of one grading model reply.

    Validate with ``context={"max_points": <question points>}`` to bound the
    score by the question's point value.
    """
    model_config = ConfigDict(extra="ignore")

    score: float = Field(..., strict=True, allow_inf_nan=False)
    feedback: str
    misconceptions: List[str] = Field(default_factory=list)
    correction: Optional[str] = None

    @field_validator("score", mode="before")
    @classmethod
    def reject_boolean_score(cls, value):
        if isinstance(value, bool):
            raise ValueError("score must be a number")
        return value

    @field_validator("score")
    @classmethod
    def score_within_points(cls, value: float, info: ValidationInfo) -> float:
        max_points = (info.context or {}).get("max_points")
        if value < 0:
            raise ValueError(f"score {value} is negative")
        if max_points is not None and value > max_points:
            raise ValueError(f"score {value} exceeds question points {max_points}")
        return value

    @field_validator("misconceptions", mode="before")
    @classmethod
    def null_misconceptions(cls, value):
        return [] if value is None else value


# =============================================================================
# Analysis Schemas
# =============================================================================

class QuestionAnalysisSchema(CamelModel):
    """Per-question slice of an analysis. ``error`` is only present on degraded entries."""
    score: float = Field(..., description="Points awarded, 0..question points")
    feedback: str
    misconceptions: Optional[List[str]] = None
    correction: Optional[str] = None
    error: Optional[str] = Field(None, description="Why the model result was discarded")

    @model_serializer(mode="wrap")
    def drop_error_unless_degraded(self, handler):
        data = handler(self)
        if self.error is None:
            data.pop("error", None)
        return data


class AnalysisDimensionsSchema(CamelModel):
    structural: float
    misconceptions: List[str] = Field(default_factory=list)
    knowledge_gaps: List[str] = Field(default_factory=list)
    critical_thinking: float


class AnalysisSchema(CamelModel):
    """The grading result attached to a submission."""
    overall_score: float = Field(..., ge=0, le=100)
    feedback: str
    question_analysis: Dict[str, QuestionAnalysisSchema] = Field(default_factory=dict)
    dimensions: AnalysisDimensionsSchema


# =============================================================================
# API Schemas
# =============================================================================

class GradeRequest(CamelModel):
    """Request body of the grade endpoint."""
    submission_id: Optional[str] = Field(None, description="ID of the submission to grade")


class GradeResponse(CamelModel):
    success: bool = True
    analysis: AnalysisSchema


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None
