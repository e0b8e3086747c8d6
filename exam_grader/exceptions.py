"""
Service-level exceptions.

API routes map these onto HTTP status codes through ``status_code``.
"""
from typing import Optional


_COLLECTION_LABELS = {
    "exams": "Exam",
    "submissions": "Submission",
}


class ExamGraderError(Exception):
    """Base class for errors raised by the grading services."""
    status_code = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class NotFoundError(ExamGraderError):
    """A document id did not resolve in its collection."""
    status_code = 404

    def __init__(self, collection: str, document_id: str):
        self.collection = collection
        self.document_id = document_id
        label = _COLLECTION_LABELS.get(collection, collection)
        super().__init__(f"{label} not found", detail=f"{collection}/{document_id}")


class GradingCallError(ExamGraderError):
    """The grading model call failed or returned an unusable response."""
    status_code = 502


class PersistenceError(ExamGraderError):
    """Writing a document back to the store failed."""
    status_code = 500


class InvalidDocumentError(ExamGraderError):
    """An exam or submission breaks the rules of its collection."""
    status_code = 400
