"""
Pydantic schemas for exams, questions, submissions and answers.
"""
from enum import Enum
from typing import List, Optional

from pydantic import Field, model_validator

from .base import CamelModel
from .grading import AnalysisSchema


class QuestionType(str, Enum):
    """Media the teacher attaches to a question."""
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"


class AnswerType(str, Enum):
    """How a student may answer."""
    TEXT = "text"
    HANDWRITING = "handwriting"  # Photo of a handwritten answer, content is a URL
    AUDIO = "audio"


# =============================================================================
# Exam Schemas
# =============================================================================

class QuestionSchema(CamelModel):
    """A single exam question. ``id`` is assigned on exam creation when missing."""
    id: Optional[str] = Field(None, description="Question ID, unique within the exam")
    text: str = Field(..., description="Question prompt")
    type: QuestionType = QuestionType.TEXT
    media_url: Optional[str] = Field(None, description="Image/audio/video provided by the teacher")
    points: int = Field(..., gt=0, description="Points awarded for a perfect answer")
    correct_answer: Optional[str] = Field(None, description="Reference answer for the grading model")
    allowed_answer_types: List[AnswerType] = Field(
        default_factory=lambda: [AnswerType.TEXT],
        min_length=1,
    )


class ExamSettingsSchema(CamelModel):
    duration: Optional[int] = Field(None, gt=0, description="Duration in minutes")
    start_time: Optional[int] = Field(None, description="Epoch milliseconds")
    end_time: Optional[int] = Field(None, description="Epoch milliseconds")

    @model_validator(mode='after')
    def validate_window(self):
        if self.start_time is not None and self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ExamCreate(CamelModel):
    """Schema for creating an exam."""
    teacher_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    questions: List[QuestionSchema] = Field(default_factory=list)
    is_active: bool = True
    settings: ExamSettingsSchema = Field(default_factory=ExamSettingsSchema)


class ExamSchema(ExamCreate):
    """A stored exam."""
    id: str
    created_at: int

    def find_question(self, question_id: str) -> Optional[QuestionSchema]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


# =============================================================================
# Submission Schemas
# =============================================================================

class AnswerSchema(CamelModel):
    question_id: str
    type: AnswerType = AnswerType.TEXT
    content: str = Field("", description="Answer text, or a URL to uploaded media")


class SubmissionCreate(CamelModel):
    """Schema for a student handing in an exam."""
    exam_id: str = Field(..., min_length=1)
    student_id: str = Field(..., min_length=1)
    answers: List[AnswerSchema] = Field(default_factory=list)
    started_at: int
    submitted_at: Optional[int] = Field(None, description="Defaults to the time of the request")


class SubmissionSchema(CamelModel):
    """A stored submission; ``analysis`` is absent until graded."""
    id: str
    exam_id: str
    student_id: str
    answers: List[AnswerSchema] = Field(default_factory=list)
    started_at: int
    submitted_at: int
    analysis: Optional[AnalysisSchema] = None
