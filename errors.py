"""
API error kinds and the handlers that turn them into JSON responses.

Every handled failure is answered with a body of the form
``{"error": "<message>"}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    """A required field is missing or malformed."""
    status_code = 400


class UniquenessViolation(ApiError):
    """A declared-unique field already exists on another document."""
    status_code = 400

    def __init__(self, field: str):
        super().__init__(f"expected `{field}` to be unique: {field} must be unique")
        self.field = field


class MalformedId(ApiError):
    status_code = 400

    def __init__(self, value: str = ""):
        super().__init__("malformatted id")
        self.value = value


class NotFound(ApiError):
    status_code = 404


def _describe_validation_error(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        field = ".".join(loc)
        if err.get("type") == "missing":
            messages.append(f"`{field}` is required" if field else "request body is required")
        elif field:
            messages.append(f"`{field}`: {err.get('msg')}")
        else:
            messages.append(str(err.get("msg")))
    return "; ".join(messages) or "invalid request"


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await api_error_handler(request, ValidationError(_describe_validation_error(exc)))


def setup_error_handling(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
