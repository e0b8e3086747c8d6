"""
Exam service layer.

Creates and retrieves exam documents.
"""
import logging
from typing import List

from ..exceptions import InvalidDocumentError, NotFoundError
from ..schemas.exam import ExamCreate, ExamSchema
from ..utils.timestamps import now_ms
from .document_store import DocumentStore, EXAMS

logger = logging.getLogger(__name__)


async def create_exam(store: DocumentStore, exam_in: ExamCreate) -> ExamSchema:
    """
    Save a new exam.

    Questions without an id get ``q<position>`` (1-based).

    Raises:
        InvalidDocumentError: two questions share an id
    """
    questions = []
    seen_ids = set()
    for position, question in enumerate(exam_in.questions, start=1):
        question_id = question.id or f"q{position}"
        if question_id in seen_ids:
            raise InvalidDocumentError("Duplicate question id", detail=question_id)
        seen_ids.add(question_id)
        questions.append(question.model_copy(update={"id": question_id}))

    data = exam_in.model_copy(update={"questions": questions}).model_dump(mode="json")
    data["created_at"] = now_ms()

    exam_id = await store.add(EXAMS, data)
    logger.info(f"Created exam {exam_id} '{exam_in.title}' with {len(questions)} questions")
    return ExamSchema.model_validate({**data, "id": exam_id})


async def get_exam(store: DocumentStore, exam_id: str) -> ExamSchema:
    """
    Retrieve an exam by ID.

    Raises:
        NotFoundError: no such exam
    """
    doc = await store.get_by_id(EXAMS, exam_id)
    if doc is None:
        raise NotFoundError(EXAMS, exam_id)
    return ExamSchema.model_validate(doc)


async def list_exams_for_teacher(store: DocumentStore, teacher_id: str) -> List[ExamSchema]:
    """All exams owned by a teacher, newest first."""
    docs = await store.find_by_field(EXAMS, "teacher_id", teacher_id)
    return [ExamSchema.model_validate(doc) for doc in docs]
