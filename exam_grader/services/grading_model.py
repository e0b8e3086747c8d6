"""
Grading model client.

The grader only needs ``generate_text(prompt) -> str``; the OpenAI
implementation runs in JSON mode so replies are a single JSON object.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from langsmith import traceable

from ..config import settings
from ..exceptions import GradingCallError

logger = logging.getLogger(__name__)

GRADING_SYSTEM_PROMPT = (
    "You are an experienced teacher grading open-ended exam answers. "
    "Always reply with a single JSON object and nothing else."
)


class GradingModel(ABC):
    """Abstract base class for generative models used to grade answers."""

    @abstractmethod
    async def generate_text(self, prompt: str) -> str:
        """Send a prompt and return the model's raw text reply."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Model name for logging."""
        pass


class OpenAIGradingModel(GradingModel):
    """OpenAI chat model in JSON response mode."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
    ):
        model_name = model or settings.openai_model

        logger.info(f"Initializing OpenAIGradingModel with model: {model_name}")

        self.llm = ChatOpenAI(
            model=model_name,
            temperature=settings.grading_temperature if temperature is None else temperature,
            timeout=timeout or settings.grading_request_timeout,
            api_key=api_key or settings.openai_api_key,
            model_kwargs={"response_format": {"type": "json_object"}}
        )

    @property
    def name(self) -> str:
        return f"OpenAI/{self.llm.model_name}"

    @traceable(run_type="llm", name="OpenAI Grading")
    async def generate_text(self, prompt: str) -> str:
        messages = [
            SystemMessage(content=GRADING_SYSTEM_PROMPT),
            HumanMessage(content=prompt),
        ]
        try:
            response = await self.llm.ainvoke(messages)
        except Exception as e:
            raise GradingCallError(f"{self.name} call failed: {e}") from e

        logger.info(f"{self.name} response length: {len(response.content)} chars")
        return response.content if isinstance(response.content, str) else str(response.content)


# Singleton grading model instance
_grading_model: Optional[GradingModel] = None


def get_grading_model() -> GradingModel:
    """Get or create the grading model singleton. Also the FastAPI dependency."""
    global _grading_model
    if _grading_model is None:
        _grading_model = OpenAIGradingModel()
    return _grading_model
