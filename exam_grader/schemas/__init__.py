# Schemas package
from .exam import (
    QuestionType,
    AnswerType,
    QuestionSchema,
    ExamSettingsSchema,
    ExamCreate,
    ExamSchema,
    AnswerSchema,
    SubmissionCreate,
    SubmissionSchema,
)
from .grading import (
    ModelGradingResponse,
    QuestionAnalysisSchema,
    AnalysisDimensionsSchema,
    AnalysisSchema,
    GradeRequest,
    GradeResponse,
    ErrorResponse,
)

__all__ = [
    # Exam schemas
    "QuestionType",
    "AnswerType",
    "QuestionSchema",
    "ExamSettingsSchema",
    "ExamCreate",
    "ExamSchema",
    "AnswerSchema",
    "SubmissionCreate",
    "SubmissionSchema",
    # Grading schemas
    "ModelGradingResponse",
    "QuestionAnalysisSchema",
    "AnalysisDimensionsSchema",
    "AnalysisSchema",
    "GradeRequest",
    "GradeResponse",
    "ErrorResponse",
]
