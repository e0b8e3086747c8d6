"""
Grading API endpoints - v0.
"""
import logging

from fastapi import APIRouter, Depends

from ...exceptions import ExamGraderError
from ...schemas.grading import GradeRequest, GradeResponse
from ...services.document_store import DocumentStore, get_document_store
from ...services.grading_model import GradingModel, get_grading_model
from ...services.grading_service import SubmissionGrader
from ..responses import ERROR_RESPONSES, error_response, service_error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v0/grading", tags=["grading"])


@router.post(
    "/grade",
    response_model=GradeResponse,
    responses=ERROR_RESPONSES,
    summary="Grade a submission",
    description="""
    Grade every answer of a submission with the AI grading model and store the
    resulting analysis on the submission, replacing any previous analysis.

    A question whose model call fails is recorded with score 0 and an `error`
    field; the request still succeeds.
    """,
)
async def grade_submission(
    request: GradeRequest,
    store: DocumentStore = Depends(get_document_store),
    model: GradingModel = Depends(get_grading_model),
):
    if not request.submission_id:
        return error_response(400, "Submission ID required")

    logger.info(f"Grading submission {request.submission_id}")

    try:
        grader = SubmissionGrader(store, model)
        analysis = await grader.grade(request.submission_id)
    except ExamGraderError as e:
        logger.error(f"Grading submission {request.submission_id} failed: {e.message} ({e.detail})")
        return service_error_response(e)
    except Exception as e:
        logger.error(f"Error grading submission {request.submission_id}: {e}", exc_info=True)
        return error_response(500, "Error grading submission", detail=str(e))

    return GradeResponse(success=True, analysis=analysis)
