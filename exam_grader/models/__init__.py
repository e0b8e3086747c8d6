# Models package
from .exam import Exam, Submission

__all__ = [
    "Exam",
    "Submission",
]
