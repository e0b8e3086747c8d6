"""
Submission API endpoints - v0.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...exceptions import ExamGraderError
from ...schemas.exam import SubmissionCreate, SubmissionSchema
from ...services.document_store import DocumentStore, get_document_store
from ...services.submission_service import (
    create_submission,
    get_submission,
    list_submissions_for_exam,
    list_submissions_for_student,
)
from ..responses import ERROR_RESPONSES, error_response, service_error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v0/submissions", tags=["submissions"])


@router.post(
    "",
    response_model=SubmissionSchema,
    status_code=201,
    responses=ERROR_RESPONSES,
    summary="Submit answers to an exam",
)
async def create_submission_endpoint(
    submission_in: SubmissionCreate,
    store: DocumentStore = Depends(get_document_store),
):
    try:
        return await create_submission(store, submission_in)
    except ExamGraderError as e:
        logger.warning(f"Rejected submission for exam {submission_in.exam_id}: {e.message} ({e.detail})")
        return service_error_response(e)


@router.get(
    "",
    response_model=List[SubmissionSchema],
    responses=ERROR_RESPONSES,
    summary="List submissions of an exam or of a student",
)
async def list_submissions(
    exam_id: Optional[str] = Query(None, description="Filter by exam"),
    student_id: Optional[str] = Query(None, description="Filter by student"),
    store: DocumentStore = Depends(get_document_store),
):
    """Exactly one of exam_id / student_id must be given. Newest first."""
    if bool(exam_id) == bool(student_id):
        return error_response(400, "Provide exactly one of exam_id or student_id")

    if exam_id:
        return await list_submissions_for_exam(store, exam_id)
    return await list_submissions_for_student(store, student_id)


@router.get(
    "/{submission_id}",
    response_model=SubmissionSchema,
    responses=ERROR_RESPONSES,
    summary="Get a submission with its analysis",
)
async def get_submission_endpoint(
    submission_id: str,
    store: DocumentStore = Depends(get_document_store),
):
    try:
        return await get_submission(store, submission_id)
    except ExamGraderError as e:
        return service_error_response(e)
