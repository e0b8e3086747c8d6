"""Shared fixtures. Environment is set before any exam_grader module is imported."""
import os

os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LANGCHAIN_TRACING_V2", "false")

import pytest  # noqa: E402

from tests.fakes import FakeDocumentStore, make_exam, make_submission  # noqa: E402


@pytest.fixture
def store():
    """Fake store holding the two-question exam and a submission answering both."""
    fake = FakeDocumentStore()
    fake.put("exams", make_exam())
    fake.put("submissions", make_submission())
    return fake
