"""
Submission service layer.

Stores students' answers and retrieves submissions with their analyses.
"""
import logging
from typing import List

from ..exceptions import InvalidDocumentError, NotFoundError
from ..schemas.exam import SubmissionCreate, SubmissionSchema
from ..utils.timestamps import now_ms
from .document_store import DocumentStore, SUBMISSIONS
from .exam_service import get_exam

logger = logging.getLogger(__name__)


async def create_submission(store: DocumentStore, submission_in: SubmissionCreate) -> SubmissionSchema:
    """
    Save a student's submission.

    Answers referencing unknown question ids are stored as-is; the grader
    skips them.

    Raises:
        NotFoundError: the exam does not exist
        InvalidDocumentError: the exam is inactive, or an answer type is not
            allowed for its question
    """
    exam = await get_exam(store, submission_in.exam_id)
    if not exam.is_active:
        raise InvalidDocumentError("Exam is not active", detail=exam.id)

    for answer in submission_in.answers:
        question = exam.find_question(answer.question_id)
        if question is None:
            logger.warning(f"Answer references unknown question {answer.question_id} in exam {exam.id}")
            continue
        if answer.type not in question.allowed_answer_types:
            raise InvalidDocumentError(
                "Answer type not allowed",
                detail=f"question {question.id} does not accept {answer.type.value} answers",
            )

    data = submission_in.model_dump(mode="json")
    if data["submitted_at"] is None:
        data["submitted_at"] = now_ms()
    data["analysis"] = None

    submission_id = await store.add(SUBMISSIONS, data)
    logger.info(f"Created submission {submission_id} for exam {exam.id} by student {submission_in.student_id}")
    return SubmissionSchema.model_validate({**data, "id": submission_id})


async def get_submission(store: DocumentStore, submission_id: str) -> SubmissionSchema:
    """
    Retrieve a submission by ID.

    Raises:
        NotFoundError: no such submission
    """
    doc = await store.get_by_id(SUBMISSIONS, submission_id)
    if doc is None:
        raise NotFoundError(SUBMISSIONS, submission_id)
    return SubmissionSchema.model_validate(doc)


async def list_submissions_for_exam(store: DocumentStore, exam_id: str) -> List[SubmissionSchema]:
    docs = await store.find_by_field(SUBMISSIONS, "exam_id", exam_id)
    return [SubmissionSchema.model_validate(doc) for doc in docs]


async def list_submissions_for_student(store: DocumentStore, student_id: str) -> List[SubmissionSchema]:
    docs = await store.find_by_field(SUBMISSIONS, "student_id", student_id)
    return [SubmissionSchema.model_validate(doc) for doc in docs]
