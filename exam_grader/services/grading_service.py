"""
Grading service layer.

Loads a submission and its exam from the document store, runs the grading
agent, and writes the resulting analysis back onto the submission.
"""
import logging

from ..exceptions import NotFoundError
from ..schemas.exam import ExamSchema, SubmissionSchema
from ..schemas.grading import AnalysisSchema
from .document_store import DocumentStore, EXAMS, SUBMISSIONS
from .grading_agent import GradingAgent
from .grading_model import GradingModel

logger = logging.getLogger(__name__)


class SubmissionGrader:
    """Grades one submission per call against its exam."""

    def __init__(self, store: DocumentStore, model: GradingModel):
        self.store = store
        self.agent = GradingAgent(model)

    async def grade(self, submission_id: str) -> AnalysisSchema:
        """
        Grade a submission and persist the analysis onto it.

        The previous analysis, if any, is replaced entirely. Per-question model
        failures are recorded inside the analysis and never raised.

        Raises:
            NotFoundError: the submission or its exam does not exist
            PersistenceError: the analysis could not be written
        """
        submission_doc = await self.store.get_by_id(SUBMISSIONS, submission_id)
        if submission_doc is None:
            logger.error(f"Submission not found: {submission_id}")
            raise NotFoundError(SUBMISSIONS, submission_id)
        submission = SubmissionSchema.model_validate(submission_doc)

        exam_doc = await self.store.get_by_id(EXAMS, submission.exam_id)
        if exam_doc is None:
            logger.error(f"Exam not found: {submission.exam_id} (submission {submission_id})")
            raise NotFoundError(EXAMS, submission.exam_id)
        exam = ExamSchema.model_validate(exam_doc)

        analysis = await self.agent.grade_submission(exam, submission)

        await self.store.update_fields(
            SUBMISSIONS,
            submission_id,
            {"analysis": analysis.model_dump(mode="json")},
        )
        logger.info(f"Saved analysis for submission {submission_id}")
        return analysis
