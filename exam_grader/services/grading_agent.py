"""
LangGraph-based grading agent.

Grades every answer of one submission with one model call per answer. A failed
call or an unusable reply degrades that single question to a zero-score entry;
the rest of the submission is still graded.
"""
import json
import logging
import re
from typing import Dict, List, Literal, Optional, TypedDict

from langgraph.graph import StateGraph, END
from pydantic import ValidationError

from ..exceptions import GradingCallError
from ..schemas.exam import AnswerSchema, AnswerType, ExamSchema, QuestionSchema, SubmissionSchema
from ..schemas.grading import (
    AnalysisDimensionsSchema,
    AnalysisSchema,
    ModelGradingResponse,
    QuestionAnalysisSchema,
)
from .grading_model import GradingModel

logger = logging.getLogger(__name__)

# Placeholders: these dimensions are not derived from any grading signal yet
PLACEHOLDER_STRUCTURAL_SCORE = 80
PLACEHOLDER_CRITICAL_THINKING_SCORE = 75

SUMMARY_FEEDBACK = "Overall evaluation completed."
ANALYSIS_FAILED_FEEDBACK = "Analysis failed."
NON_TEXT_ANSWER_PLACEHOLDER = "[Image/Audio file]"

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


# =============================================================================
# Prompt & Response Handling
# =============================================================================

def build_grading_prompt(question: QuestionSchema, answer: AnswerSchema) -> str:
    """Construct the grading prompt for a single answer."""
    is_text = answer.type == AnswerType.TEXT
    answer_text = answer.content if is_text else NON_TEXT_ANSWER_PLACEHOLDER

    prompt = "You are a teacher. Analyze the student's answer below.\n\n"
    prompt += f'Question: "{question.text}"\n'
    prompt += f"Question points: {question.points}\n"
    if question.correct_answer:
        prompt += f'Reference answer: "{question.correct_answer}"\n'
    prompt += f'\nStudent answer: "{answer_text}"\n\n'
    prompt += f"""Respond ONLY with JSON in exactly this format, with no other text:
{{
  "score": (a number from 0 to {question.points}),
  "feedback": "Short feedback for the student",
  "misconceptions": ["Misconceptions, if any"],
  "correction": "Explanation of the correct answer"
}}"""

    if not is_text:
        prompt += (
            "\nNote: This answer is a file (image or audio). If no text is available, "
            "say that the file cannot be analyzed yet and needs manual review, and give a score of 0."
        )

    return prompt


def clean_json_response(response_text: str) -> str:
    """Strip markdown code fences the model may wrap around its JSON."""
    return _CODE_FENCE.sub("", response_text).strip()


def parse_grading_response(response_text: str, max_points: int) -> QuestionAnalysisSchema:
    """
    Parse and validate one grading model reply.

    Raises:
        GradingCallError: the reply is not JSON or does not match ModelGradingResponse
    """
    cleaned = clean_json_response(response_text)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"JSON Parsing failed: {e}")
        logger.error(f"Raw response: {response_text[:500]}...")
        raise GradingCallError(f"Model response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise GradingCallError(f"Model response is a JSON {type(data).__name__}, expected an object")

    try:
        parsed = ModelGradingResponse.model_validate(data, context={"max_points": max_points})
    except ValidationError as e:
        logger.error(f"Response validation failed: {e}")
        raise GradingCallError(f"Model response failed validation: {e}") from e

    return QuestionAnalysisSchema(
        score=parsed.score,
        feedback=parsed.feedback,
        misconceptions=parsed.misconceptions,
        correction=parsed.correction,
    )


# =============================================================================
# Grading Workflow
# =============================================================================

class GradingState(TypedDict):
    """State for the grading workflow."""
    exam: ExamSchema
    submission: SubmissionSchema
    questions: Dict[str, QuestionSchema]
    current_answer_index: int
    question_analysis: Dict[str, QuestionAnalysisSchema]
    total_score: float
    total_possible: float
    misconceptions: List[str]
    knowledge_gaps: List[str]
    analysis: Optional[AnalysisSchema]


class GradingAgent:
    """Agent that grades a submission's answers one question at a time."""

    def __init__(self, model: GradingModel):
        self.model = model
        self.workflow = self._build_workflow()

    async def grade_submission(self, exam: ExamSchema, submission: SubmissionSchema) -> AnalysisSchema:
        """
        Public entry point to run the grading workflow.
        """
        logger.info("=" * 80)
        logger.info("STARTING GRADING WORKFLOW")
        logger.info(f"Submission: {submission.id}, exam: {exam.id}, answers: {len(submission.answers)}")
        logger.info("=" * 80)

        initial_state: GradingState = {
            "exam": exam,
            "submission": submission,
            "questions": {},
            "current_answer_index": 0,
            "question_analysis": {},
            "total_score": 0,
            "total_possible": 0,
            "misconceptions": [],
            "knowledge_gaps": [],
            "analysis": None,
        }

        # One step per answer plus initialize and compile_results
        final_state = await self.workflow.ainvoke(
            initial_state,
            config={"recursion_limit": len(submission.answers) + 10},
        )

        analysis = final_state["analysis"]
        logger.info("=" * 80)
        logger.info(f"GRADING WORKFLOW COMPLETE: overall score {analysis.overall_score:.1f}")
        logger.info("=" * 80)
        return analysis

    def _build_workflow(self):
        """Build the LangGraph workflow."""
        workflow = StateGraph(GradingState)

        workflow.add_node("initialize", self._initialize_grading)
        workflow.add_node("grade_answer", self._grade_answer)
        workflow.add_node("compile_results", self._compile_results)

        workflow.set_entry_point("initialize")

        routes = {"continue": "grade_answer", "finish": "compile_results"}
        workflow.add_conditional_edges("initialize", self._should_continue_grading, routes)
        workflow.add_conditional_edges("grade_answer", self._should_continue_grading, routes)

        workflow.add_edge("compile_results", END)
        return workflow.compile()

    def _initialize_grading(self, state: GradingState) -> Dict:
        """Index the exam's questions by id."""
        questions = {q.id: q for q in state["exam"].questions if q.id}
        logger.info(f"Exam has {len(questions)} questions")
        return {"questions": questions}

    async def _grade_answer(self, state: GradingState) -> Dict:
        """Grade the answer at current_answer_index."""
        idx = state["current_answer_index"]
        answer = state["submission"].answers[idx]
        question = state["questions"].get(answer.question_id)

        if question is None:
            logger.warning(f"Question not found for answer: {answer.question_id}, skipping")
            return {"current_answer_index": idx + 1}

        logger.info(f"Grading answer {idx + 1}/{len(state['submission'].answers)} (question {question.id}, {answer.type.value})")

        result = await self._grade_single_question(question, answer)

        # Return NEW containers (immutable update pattern)
        update = {
            "current_answer_index": idx + 1,
            "total_possible": state["total_possible"] + question.points,
            "question_analysis": {**state["question_analysis"], question.id: result},
        }
        if result.error is None:
            update["total_score"] = state["total_score"] + result.score
            update["misconceptions"] = state["misconceptions"] + list(result.misconceptions or [])
        return update

    async def _grade_single_question(self, question: QuestionSchema, answer: AnswerSchema) -> QuestionAnalysisSchema:
        prompt = build_grading_prompt(question, answer)
        try:
            response_text = await self.model.generate_text(prompt)
            result = parse_grading_response(response_text, question.points)
        except Exception as e:
            logger.error(f"Error analyzing question {question.id}: {e}", exc_info=True)
            return QuestionAnalysisSchema(score=0, feedback=ANALYSIS_FAILED_FEEDBACK, error=str(e))

        logger.info(f"Question {question.id}: {result.score}/{question.points}")
        return result

    def _should_continue_grading(self, state: GradingState) -> Literal["continue", "finish"]:
        """Determine if there are answers left to grade."""
        if state["current_answer_index"] < len(state["submission"].answers):
            return "continue"
        return "finish"

    def _compile_results(self, state: GradingState) -> Dict:
        """Aggregate per-question results into the submission analysis."""
        total_score = state["total_score"]
        total_possible = state["total_possible"]
        overall_score = (total_score / total_possible) * 100 if total_possible > 0 else 0

        logger.info(f"Total score: {total_score}/{total_possible} ({overall_score:.1f}%)")
        logger.info(f"Questions analyzed: {len(state['question_analysis'])}")

        analysis = AnalysisSchema(
            overall_score=overall_score,
            question_analysis=state["question_analysis"],
            dimensions=AnalysisDimensionsSchema(
                structural=PLACEHOLDER_STRUCTURAL_SCORE,
                misconceptions=state["misconceptions"],
                knowledge_gaps=state["knowledge_gaps"],
                critical_thinking=PLACEHOLDER_CRITICAL_THINKING_SCORE,
            ),
            feedback=SUMMARY_FEEDBACK,
        )
        return {"analysis": analysis}
