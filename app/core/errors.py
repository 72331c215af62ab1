"""
Error taxonomy and central error classification.

Every failure that leaves the core is an AppError subclass or a raw
storage/auth exception. classify_error() maps both onto a stable
(message, status_code, category) triple so the HTTP layer and the Celery
worker report failures the same way.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from jose import ExpiredSignatureError, JWTError
from sqlalchemy import exc as sa_exc

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors raised by the core."""

    status_code: int = 500
    category: str = "internal"

    def __init__(self, message: str = "Internal server error.", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """Bad input shape. Carries every violated rule, not just the first."""

    status_code = 400
    category = "validation"

    def __init__(self, messages: Union[str, Sequence[str]]):
        if isinstance(messages, str):
            messages = [messages]
        self.messages: List[str] = list(messages)
        super().__init__(", ".join(self.messages))


class NoFieldsToUpdateError(ValidationError):
    def __init__(self):
        super().__init__("No fields to update")


class InvalidIdentifierError(ValidationError):
    def __init__(self, value=None):
        super().__init__("Invalid ID format provided")
        self.value = value


class NotFoundError(AppError):
    status_code = 404
    category = "not_found"


class ConflictError(AppError):
    status_code = 409
    category = "conflict"


class AuthError(AppError):
    """Missing, invalid or expired credential."""

    status_code = 401
    category = "auth"


class AuthorizationError(AppError):
    """Authenticated, but the role or ownership does not allow the action."""

    status_code = 403
    category = "authorization"


class TransportError(AppError):
    status_code = 503
    category = "transport"

    def __init__(self, message: str = "Database connection failed. Please try again later."):
        super().__init__(message)


@dataclass(frozen=True)
class ErrorClassification:
    message: str
    status_code: int
    category: str


MALFORMED_ID = ErrorClassification("Invalid ID format provided", 400, "validation")
DUPLICATE_ENTRY = ErrorClassification("Duplicate entry already exists", 409, "conflict")
MISSING_FIELD = ErrorClassification("Required field is missing", 400, "validation")
BROKEN_REFERENCE = ErrorClassification("Referenced record does not exist", 400, "validation")
STORAGE_UNREACHABLE = ErrorClassification(
    "Database connection failed. Please try again later.", 503, "transport"
)
TOKEN_EXPIRED = ErrorClassification("Json Web Token is expired, Try again.", 401, "auth")
TOKEN_INVALID = ErrorClassification("Json Web Token is invalid, Try again.", 401, "auth")

_CONNECTION_HINTS = (
    "econnrefused",
    "econnreset",
    "etimedout",
    "enotfound",
    "connection refused",
    "connection reset",
    "connection terminated",
    "could not connect",
    "server closed the connection",
    "timeout expired",
)


def _sqlstate(exc: BaseException) -> str:
    """SQLSTATE of a DBAPI error wrapped by SQLAlchemy (psycopg2 or psycopg 3)."""
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None) or ""


def _message(exc: BaseException) -> str:
    return str(exc).lower()


def _is_malformed_id(exc: BaseException) -> bool:
    if isinstance(exc, sa_exc.DataError):
        return _sqlstate(exc) == "22P02" or "invalid input syntax" in _message(exc)
    # SQLAlchemy wraps bind-time conversion failures (e.g. a bad UUID string)
    return (
        isinstance(exc, sa_exc.StatementError)
        and not isinstance(exc, sa_exc.DBAPIError)
        and isinstance(exc.orig, (ValueError, TypeError))
    )


def _integrity(code: str, *hints: str) -> Callable[[BaseException], bool]:
    def matches(exc: BaseException) -> bool:
        if not isinstance(exc, sa_exc.IntegrityError):
            return False
        if _sqlstate(exc) == code:
            return True
        message = _message(exc)
        return any(hint in message for hint in hints)
    return matches


def _is_unreachable(exc: BaseException) -> bool:
    if isinstance(exc, (sa_exc.TimeoutError, sa_exc.DisconnectionError, sa_exc.InterfaceError)):
        return True
    if isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated:
        return True
    if isinstance(exc, sa_exc.OperationalError) and _sqlstate(exc).startswith("08"):
        return True
    if isinstance(exc, (sa_exc.OperationalError, ConnectionError)):
        message = _message(exc)
        return any(hint in message for hint in _CONNECTION_HINTS)
    return False


# Order matters: the first matching signature wins.
ERROR_SIGNATURES: List[Tuple[Callable[[BaseException], bool], ErrorClassification]] = [
    (_is_malformed_id, MALFORMED_ID),
    (_integrity("23505", "unique constraint failed", "duplicate key"), DUPLICATE_ENTRY),
    (_integrity("23503", "foreign key constraint failed", "violates foreign key"), BROKEN_REFERENCE),
    (_integrity("23502", "not null constraint failed", "violates not-null"), MISSING_FIELD),
    (_is_unreachable, STORAGE_UNREACHABLE),
    (lambda exc: isinstance(exc, ExpiredSignatureError), TOKEN_EXPIRED),
    (lambda exc: isinstance(exc, JWTError), TOKEN_INVALID),
]


def classify_error(exc: BaseException) -> ErrorClassification:
    """
    Map an exception onto a user-facing message, HTTP status and category.

    AppError subclasses keep their own message and status. Known storage and
    token failures get a fixed message. Anything else is a 500 carrying the
    raw message.
    """
    if isinstance(exc, AppError):
        return ErrorClassification(exc.message, exc.status_code, exc.category)

    for matches, classification in ERROR_SIGNATURES:
        if matches(exc):
            return classification

    return ErrorClassification(str(exc) or "Internal server error.", 500, "internal")


async def handle_exception(request: Request, exc: Exception) -> JSONResponse:
    classification = classify_error(exc)

    if classification.status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed ({classification.status_code}): {exc}",
            exc_info=exc,
        )
    else:
        logger.warning(
            f"{request.method} {request.url.path} rejected ({classification.status_code}): "
            f"{classification.message}"
        )

    return JSONResponse(
        status_code=classification.status_code,
        content={
            "success": False,
            "message": classification.message,
            "category": classification.category,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Route every core, storage and token failure through classify_error()."""
    for exc_class in (AppError, sa_exc.SQLAlchemyError, JWTError, ConnectionError, Exception):
        app.add_exception_handler(exc_class, handle_exception)
