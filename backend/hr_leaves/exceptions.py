from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    default_status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status_code
        super().__init__(self.message)


class NotFoundError(AppError):
    """A referenced entity does not exist."""

    default_status_code = status.HTTP_404_NOT_FOUND


class BadRequestError(AppError):
    """Malformed input, such as a date range that ends before it starts."""

    default_status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AppError):
    """The caller identity is missing."""

    default_status_code = status.HTTP_401_UNAUTHORIZED


class InvalidStateError(AppError):
    """The entity is not in a state that allows the requested transition."""

    default_status_code = status.HTTP_400_BAD_REQUEST


class InsufficientBalanceError(AppError):
    """A ledger write would make the remaining balance negative."""

    default_status_code = status.HTTP_400_BAD_REQUEST


class InsufficientPendingError(AppError):
    """More pending days would be consumed than are reserved."""

    default_status_code = status.HTTP_400_BAD_REQUEST


class InconsistentStateError(AppError):
    """Stored pending or taken days are lower than a release requires.

    Signals a data-integrity bug rather than a user error.
    """

    default_status_code = status.HTTP_409_CONFLICT


class ConflictError(AppError):
    """A uniqueness rule was violated."""

    default_status_code = status.HTTP_409_CONFLICT


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
