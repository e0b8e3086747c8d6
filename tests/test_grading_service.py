"""Tests for the submission grading pipeline."""

import pytest

from exam_grader.exceptions import NotFoundError, PersistenceError
from exam_grader.services.grading_agent import (
    ANALYSIS_FAILED_FEEDBACK,
    PLACEHOLDER_CRITICAL_THINKING_SCORE,
    PLACEHOLDER_STRUCTURAL_SCORE,
    SUMMARY_FEEDBACK,
)
from exam_grader.services.grading_service import SubmissionGrader
from tests.fakes import FakeDocumentStore, ScriptedGradingModel, make_exam, make_submission, model_reply


async def test_example_submission_scores_twenty_percent(store):
    """Q1 (5 pts) gets 3, Q2 (10 pts) gets 0: (3 + 0) / 15 * 100."""
    model = ScriptedGradingModel({
        "What is 2+2?": model_reply(3),
        "Explain fractions.": model_reply(0, feedback="empty answer"),
    })

    analysis = await SubmissionGrader(store, model).grade("sub-1")

    assert analysis.overall_score == pytest.approx(20.0)
    assert analysis.question_analysis["q1"].score == 3
    assert analysis.question_analysis["q2"].score == 0
    assert analysis.question_analysis["q2"].feedback == "empty answer"
    assert len(model.prompts) == 2


async def test_overall_score_matches_per_question_scores(store):
    model = ScriptedGradingModel({
        "What is 2+2?": model_reply(4.5),
        "Explain fractions.": model_reply(7),
    })

    analysis = await SubmissionGrader(store, model).grade("sub-1")

    awarded = sum(qa.score for qa in analysis.question_analysis.values())
    assert analysis.overall_score == pytest.approx(awarded / 15 * 100)


async def test_analysis_shape_and_placeholders(store):
    model = ScriptedGradingModel({
        "What is 2+2?": model_reply(5, misconceptions=["counts on fingers"]),
        "Explain fractions.": model_reply(2, misconceptions=["numerator vs denominator"]),
    })

    analysis = await SubmissionGrader(store, model).grade("sub-1")

    assert analysis.feedback == SUMMARY_FEEDBACK
    assert analysis.dimensions.structural == PLACEHOLDER_STRUCTURAL_SCORE
    assert analysis.dimensions.critical_thinking == PLACEHOLDER_CRITICAL_THINKING_SCORE
    assert analysis.dimensions.misconceptions == ["counts on fingers", "numerator vs denominator"]
    assert analysis.dimensions.knowledge_gaps == []


async def test_analysis_is_persisted_on_submission(store):
    model = ScriptedGradingModel({
        "What is 2+2?": model_reply(3),
        "Explain fractions.": model_reply(0),
    })

    analysis = await SubmissionGrader(store, model).grade("sub-1")

    assert store.updates == [("submissions", "sub-1", {"analysis": analysis.model_dump(mode="json")})]
    stored = store.collections["submissions"]["sub-1"]["analysis"]
    assert stored["overall_score"] == pytest.approx(20.0)
    assert stored["question_analysis"]["q1"]["score"] == 3


async def test_error_key_only_stored_on_degraded_entries(store):
    model = ScriptedGradingModel({
        "What is 2+2?": model_reply(3, misconceptions=["adds digits"]),
        "Explain fractions.": "no json here",
    })

    await SubmissionGrader(store, model).grade("sub-1")

    stored = store.collections["submissions"]["sub-1"]["analysis"]["question_analysis"]
    assert set(stored["q1"]) == {"score", "feedback", "misconceptions", "correction"}
    assert stored["q2"]["score"] == 0
    assert stored["q2"]["feedback"] == "Analysis failed."
    assert "not valid JSON" in stored["q2"]["error"]


class TestEmptyOrUnresolvableAnswers:
    """Nothing to grade means a zero score and no model calls."""

    async def test_no_answers(self):
        store = FakeDocumentStore()
        store.put("exams", make_exam())
        store.put("submissions", make_submission(answers=[]))
        model = ScriptedGradingModel({})

        analysis = await SubmissionGrader(store, model).grade("sub-1")

        assert analysis.overall_score == 0
        assert analysis.question_analysis == {}
        assert model.prompts == []
        assert len(store.updates) == 1

    async def test_only_unknown_questions(self):
        store = FakeDocumentStore()
        store.put("exams", make_exam())
        store.put("submissions", make_submission(answers=[
            {"question_id": "q9", "type": "text", "content": "?"},
        ]))
        model = ScriptedGradingModel({})

        analysis = await SubmissionGrader(store, model).grade("sub-1")

        assert analysis.overall_score == 0
        assert analysis.question_analysis == {}
        assert model.prompts == []

    async def test_unknown_question_skipped_among_valid_ones(self):
        store = FakeDocumentStore()
        store.put("exams", make_exam())
        store.put("submissions", make_submission(answers=[
            {"question_id": "q9", "type": "text", "content": "stale"},
            {"question_id": "q1", "type": "text", "content": "4"},
        ]))
        model = ScriptedGradingModel({"What is 2+2?": model_reply(5)})

        analysis = await SubmissionGrader(store, model).grade("sub-1")

        # Only q1's points count towards the total
        assert analysis.overall_score == pytest.approx(100.0)
        assert set(analysis.question_analysis) == {"q1"}


class TestPerQuestionFailures:
    """One bad model reply must not stop the rest of the submission."""

    async def test_malformed_reply_is_degraded(self, store):
        model = ScriptedGradingModel({
            "What is 2+2?": "I would give this 3 points.",
            "Explain fractions.": model_reply(6, misconceptions=["halves only"]),
        })

        analysis = await SubmissionGrader(store, model).grade("sub-1")

        failed = analysis.question_analysis["q1"]
        assert failed.score == 0
        assert failed.feedback == ANALYSIS_FAILED_FEEDBACK
        assert "not valid JSON" in failed.error

        assert analysis.question_analysis["q2"].score == 6
        # Failed question still counts towards the possible total
        assert analysis.overall_score == pytest.approx(6 / 15 * 100)
        assert analysis.dimensions.misconceptions == ["halves only"]

    async def test_model_exception_is_degraded(self, store):
        model = ScriptedGradingModel({
            "What is 2+2?": model_reply(5),
            "Explain fractions.": TimeoutError("upstream timed out"),
        })

        analysis = await SubmissionGrader(store, model).grade("sub-1")

        assert analysis.question_analysis["q1"].score == 5
        assert analysis.question_analysis["q2"].score == 0
        assert analysis.question_analysis["q2"].error == "upstream timed out"
        assert analysis.overall_score == pytest.approx(5 / 15 * 100)
        assert len(store.updates) == 1

    async def test_out_of_range_score_is_degraded(self, store):
        model = ScriptedGradingModel({
            "What is 2+2?": model_reply(50),
            "Explain fractions.": model_reply(10),
        })

        analysis = await SubmissionGrader(store, model).grade("sub-1")

        assert analysis.question_analysis["q1"].score == 0
        assert "exceeds question points" in analysis.question_analysis["q1"].error
        assert analysis.overall_score == pytest.approx(10 / 15 * 100)


class TestFatalErrors:
    """Lookup and persistence failures abort grading."""

    async def test_missing_submission(self, store):
        model = ScriptedGradingModel({})

        with pytest.raises(NotFoundError) as exc_info:
            await SubmissionGrader(store, model).grade("nope")

        assert exc_info.value.collection == "submissions"
        assert exc_info.value.message == "Submission not found"
        assert store.updates == []

    async def test_missing_exam_writes_nothing(self):
        store = FakeDocumentStore()
        store.put("submissions", make_submission(exam_id="deleted-exam"))
        model = ScriptedGradingModel({})

        with pytest.raises(NotFoundError) as exc_info:
            await SubmissionGrader(store, model).grade("sub-1")

        assert exc_info.value.collection == "exams"
        assert exc_info.value.document_id == "deleted-exam"
        assert store.updates == []
        assert store.collections["submissions"]["sub-1"]["analysis"] is None
        assert model.prompts == []

    async def test_persistence_failure_propagates(self, store):
        class FailingStore(FakeDocumentStore):
            async def update_fields(self, collection, document_id, fields):
                raise PersistenceError("disk full")

        failing = FailingStore()
        failing.collections = store.collections
        model = ScriptedGradingModel({
            "What is 2+2?": model_reply(3),
            "Explain fractions.": model_reply(0),
        })

        with pytest.raises(PersistenceError):
            await SubmissionGrader(failing, model).grade("sub-1")


class TestRegrading:
    """Grading overwrites the previous analysis wholesale."""

    async def test_deterministic_regrade_is_identical(self, store):
        model = ScriptedGradingModel({
            "What is 2+2?": model_reply(3, misconceptions=["x"]),
            "Explain fractions.": model_reply(0),
        })
        grader = SubmissionGrader(store, model)

        first = await grader.grade("sub-1")
        second = await grader.grade("sub-1")

        assert first == second
        assert len(store.updates) == 2
        # Misconceptions are not accumulated across runs
        assert second.dimensions.misconceptions == ["x"]

    async def test_regrade_replaces_degraded_entry(self, store):
        failing_model = ScriptedGradingModel({
            "What is 2+2?": model_reply(3),
            "Explain fractions.": "not json",
        })
        await SubmissionGrader(store, failing_model).grade("sub-1")
        assert store.collections["submissions"]["sub-1"]["analysis"]["question_analysis"]["q2"]["error"]

        healthy_model = ScriptedGradingModel({
            "What is 2+2?": model_reply(3),
            "Explain fractions.": model_reply(8),
        })
        analysis = await SubmissionGrader(store, healthy_model).grade("sub-1")

        stored = store.collections["submissions"]["sub-1"]["analysis"]
        assert "error" not in stored["question_analysis"]["q2"]
        assert stored["question_analysis"]["q2"]["score"] == 8
        assert stored == analysis.model_dump(mode="json")


async def test_answers_graded_in_submission_order():
    store = FakeDocumentStore()
    store.put("exams", make_exam())
    store.put("submissions", make_submission(answers=[
        {"question_id": "q2", "type": "text", "content": "a part of a whole"},
        {"question_id": "q1", "type": "text", "content": "4"},
    ]))
    model = ScriptedGradingModel({
        "What is 2+2?": model_reply(5),
        "Explain fractions.": model_reply(9),
    })

    await SubmissionGrader(store, model).grade("sub-1")

    assert "Explain fractions." in model.prompts[0]
    assert "What is 2+2?" in model.prompts[1]


async def test_long_exam_grades_every_answer():
    questions = [
        {"id": f"q{i}", "text": f"Question number {i}", "points": 2, "allowed_answer_types": ["text"]}
        for i in range(40)
    ]
    answers = [{"question_id": f"q{i}", "type": "text", "content": "answer"} for i in range(40)]
    store = FakeDocumentStore()
    store.put("exams", make_exam(questions=questions))
    store.put("submissions", make_submission(answers=answers))
    model = ScriptedGradingModel({f"Question number {i}": model_reply(1) for i in range(40)})

    analysis = await SubmissionGrader(store, model).grade("sub-1")

    assert len(analysis.question_analysis) == 40
    assert analysis.overall_score == pytest.approx(50.0)
