"""
FastAPI application for the Exam Grader API.

Wires the exam, submission and grading routers onto one app. Run with
``exam-grader`` or ``uvicorn exam_grader.main:app``.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import init_db, close_db
from .api.v0 import exams as exams_v0
from .api.v0 import grading as grading_v0
from .api.v0 import submissions as submissions_v0

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


def setup_tracing():
    """Export LangSmith settings so the @traceable grading calls are recorded."""
    if settings.langchain_tracing_v2.lower() != "true":
        logger.info("LangSmith tracing is disabled")
        return

    tracing_env = {
        "LANGCHAIN_TRACING_V2": "true",
        "LANGCHAIN_ENDPOINT": settings.langchain_endpoint,
        "LANGCHAIN_API_KEY": settings.langchain_api_key,
        "LANGCHAIN_PROJECT": settings.langchain_project,
    }
    for name, value in tracing_env.items():
        if value:
            os.environ[name] = value
    logger.info(f"LangSmith tracing enabled, project: {settings.langchain_project}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Exam Grader API ({settings.app_env}), grading model: {settings.openai_model}")
    setup_tracing()
    await init_db()

    yield

    logger.info("Shutting down Exam Grader API...")
    await close_db()


app = FastAPI(
    title="Exam Grader API",
    description="""
    Open-ended exam grading with a generative AI model.

    * **Exams**: teachers author exams with text, image, audio or video questions
    * **Submissions**: students answer with text, handwriting photos or audio
    * **Grading**: the AI model scores every answer with feedback and
      misconception tags, and the analysis is stored on the submission

    All endpoints are under `/api/v0/`.
    """,
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (exams_v0.router, submissions_v0.router, grading_v0.router):
    app.include_router(router)


@app.get("/", tags=["health"])
async def root():
    return {
        "name": "Exam Grader API",
        "version": API_VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Liveness probe."""
    return {"status": "healthy"}


def run():
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "exam_grader.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.app_env == "development",
    )


if __name__ == "__main__":
    run()
