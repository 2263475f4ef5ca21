import structlog
from fastapi import Request
from fastapi.responses import JSONResponse, Response

from gogrind.errors import (
    AccessDeniedError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    UserError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

# First match wins, so subclasses must come before their bases
ERROR_STATUS: list[tuple[type[UserError], int, str]] = [
    (AuthenticationError, 401, "authentication_error"),
    (AccessDeniedError, 403, "access_denied"),
    (NotFoundError, 404, "not_found"),
    (ConflictError, 409, "conflict"),
    (ValidationError, 400, "validation_error"),
]


def create_json_error_response(status_code: int, message: str, error_type: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, "type": error_type})


def resolve_error_status(exc: UserError) -> tuple[int, str]:
    """Status code and machine-readable type for a user-facing error."""
    for error_class, status_code, error_type in ERROR_STATUS:
        if isinstance(exc, error_class):
            return status_code, error_type
    return 400, "bad_request"


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Render UserError subclasses as {"message", "type"} with their status code."""
    if not isinstance(exc, UserError):
        raise exc
    status_code, error_type = resolve_error_status(exc)
    if status_code == 409:
        logger.warning("write_conflict", message=str(exc))
    return create_json_error_response(status_code, str(exc), error_type)


async def general_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.error("unexpected_error", method=request.method, path=request.url.path, exc_info=exc)
    return create_json_error_response(500, "Internal Server Error", "internal_server_error")
