import logging
from enum import Enum
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import StatementError

logger = logging.getLogger(__name__)


def describe_cause(exc: BaseException) -> str:
    """Driver-level reason for a failure, without the statement text or bound values."""
    if isinstance(exc, StatementError) and exc.orig is not None:
        return f"{type(exc).__name__}: {exc.orig}"
    if isinstance(exc, TodoError):
        return str(exc)
    return f"{type(exc).__name__}: {exc}"


class ErrorKind(str, Enum):
    CONNECTION = "connection"
    QUERY = "query"
    SCHEMA = "schema"
    REPOSITORY = "repository"


class TodoError(Exception):
    """
    Every storage-side failure, tagged with its kind.

    - CONNECTION: the pool could not hand out a connection
    - QUERY: the engine rejected a statement
    - SCHEMA: table creation failed
    - REPOSITORY: a repository operation failed; ``cause`` holds the storage error
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        operation: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.operation = operation
        self.cause = cause

    @property
    def origin(self) -> ErrorKind:
        """Kind of the innermost TodoError in the cause chain."""
        err = self
        while isinstance(err.cause, TodoError):
            err = err.cause
        return err.kind

    def __str__(self) -> str:
        text = self.message
        if self.operation:
            text = f"{self.operation}: {text}"
        if self.cause is not None:
            text = f"{text} ({describe_cause(self.cause)})"
        return text

    def to_dict(self) -> dict:
        return {
            "error": self.kind.value,
            "origin": self.origin.value,
            "operation": self.operation,
            "message": self.message,
        }


_STATUS_BY_ORIGIN = {
    ErrorKind.CONNECTION: 503,
}


async def todo_error_handler(request: Request, exc: TodoError) -> JSONResponse:
    status_code = _STATUS_BY_ORIGIN.get(exc.origin, 500)
    logger.error("%s %s failed with %s error: %s", request.method, request.url.path, exc.origin.value, exc)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TodoError, todo_error_handler)
