"""Error responses shared by the API routers."""
from typing import Optional

from fastapi.responses import JSONResponse

from ..exceptions import ExamGraderError
from ..schemas.grading import ErrorResponse


def error_response(status_code: int, error: str, detail: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
    )


def service_error_response(exc: ExamGraderError) -> JSONResponse:
    return error_response(exc.status_code, exc.message, exc.detail)


ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}
