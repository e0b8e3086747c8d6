"""
Exam API endpoints - v0.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from ...exceptions import ExamGraderError
from ...schemas.exam import ExamCreate, ExamSchema
from ...services.document_store import DocumentStore, get_document_store
from ...services.exam_service import create_exam, get_exam, list_exams_for_teacher
from ..responses import ERROR_RESPONSES, service_error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v0/exams", tags=["exams"])


@router.post(
    "",
    response_model=ExamSchema,
    status_code=201,
    responses=ERROR_RESPONSES,
    summary="Create an exam",
)
async def create_exam_endpoint(
    exam_in: ExamCreate,
    store: DocumentStore = Depends(get_document_store),
):
    """Questions sent without an id are numbered q1, q2, ... by position."""
    try:
        return await create_exam(store, exam_in)
    except ExamGraderError as e:
        logger.warning(f"Rejected exam '{exam_in.title}': {e.message} ({e.detail})")
        return service_error_response(e)


@router.get("", response_model=List[ExamSchema], summary="List a teacher's exams")
async def list_exams(
    teacher_id: str = Query(..., min_length=1, description="Owning teacher"),
    store: DocumentStore = Depends(get_document_store),
):
    """Newest first."""
    return await list_exams_for_teacher(store, teacher_id)


@router.get("/{exam_id}", response_model=ExamSchema, responses=ERROR_RESPONSES, summary="Get an exam")
async def get_exam_endpoint(
    exam_id: str,
    store: DocumentStore = Depends(get_document_store),
):
    try:
        return await get_exam(store, exam_id)
    except ExamGraderError as e:
        return service_error_response(e)
