"""
SQLAlchemy ORM models for exams and submissions.

Each table is a document collection: identifying scalar columns plus JSON
columns for the nested structures.
"""
import uuid

from sqlalchemy import Column, String, Text, Boolean, BigInteger, JSON

from ..database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Exam(Base):
    """
    A teacher-authored exam.

    The questions column holds the ordered question list:
    [
        {
            "id": "q1",
            "text": "...",
            "type": "text",
            "media_url": null,
            "points": 5,
            "correct_answer": "...",
            "allowed_answer_types": ["text", "handwriting"]
        },
        ...
    ]
    """
    __tablename__ = "exams"

    id = Column(String(36), primary_key=True, default=_new_id)
    teacher_id = Column(String(255), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    questions = Column(JSON, nullable=False, default=list)
    settings = Column(JSON, nullable=False, default=dict)  # duration, start_time, end_time
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(BigInteger, nullable=False)  # Epoch milliseconds

    def __repr__(self):
        return f"<Exam(id={self.id}, title={self.title}, questions={len(self.questions or [])})>"


class Submission(Base):
    """
    One student's answers to an exam.

    The analysis column stays NULL until the submission is graded and is
    replaced wholesale on every grading run:
    {
        "overall_score": 20.0,
        "feedback": "...",
        "question_analysis": {"q1": {"score": 3, "feedback": "...", ...}},
        "dimensions": {
            "structural": 80,
            "misconceptions": [...],
            "knowledge_gaps": [...],
            "critical_thinking": 75
        }
    }
    """
    __tablename__ = "submissions"

    id = Column(String(36), primary_key=True, default=_new_id)
    # No foreign key: answers may outlive or predate their exam document
    exam_id = Column(String(36), nullable=False, index=True)
    student_id = Column(String(255), nullable=False, index=True)
    answers = Column(JSON, nullable=False, default=list)  # [{"question_id", "type", "content"}]
    started_at = Column(BigInteger, nullable=False)
    submitted_at = Column(BigInteger, nullable=False)
    analysis = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<Submission(id={self.id}, exam_id={self.exam_id}, student={self.student_id})>"
