"""Error taxonomy and the JSON error envelope."""

from enum import Enum
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException


class ErrorKind(Enum):
    """Kinds of failure the service distinguishes."""

    BAD_REQUEST = HTTPStatus.BAD_REQUEST
    UNAUTHORIZED = HTTPStatus.UNAUTHORIZED
    FORBIDDEN = HTTPStatus.FORBIDDEN
    NOT_FOUND = HTTPStatus.NOT_FOUND
    INTERNAL = HTTPStatus.INTERNAL_SERVER_ERROR
    FATAL = HTTPStatus.SERVICE_UNAVAILABLE

    @property
    def status(self) -> HTTPStatus:
        return self.value


class BankError(Exception):
    """Base class for errors surfaced to clients as ``{"error": message}``."""

    kind: ErrorKind = ErrorKind.INTERNAL
    message: str = "internal error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class PasswordTooLongError(BankError):
    kind = ErrorKind.BAD_REQUEST
    message = "password cannot be longer than 72 bytes"


class LoginFailedError(BankError):
    kind = ErrorKind.UNAUTHORIZED
    message = "failed to login"


class PermissionDeniedError(BankError):
    """Raised by the authorization gate. Always carries the same message."""

    kind = ErrorKind.FORBIDDEN
    message = "Permission denied"

    def __init__(self) -> None:
        super().__init__()


class AccountNotFoundError(BankError):
    kind = ErrorKind.NOT_FOUND

    def __init__(
        self, *, account_id: int | None = None, number: int | None = None
    ) -> None:
        if number is not None:
            message = f"account with number {number} not found"
        else:
            message = f"account {account_id} not found"
        super().__init__(message)


class DuplicateAccountNumberError(BankError):
    """The store already holds an account with this number."""

    kind = ErrorKind.INTERNAL

    def __init__(self, number: int) -> None:
        self.number = number
        super().__init__(f"account number {number} already in use")


class InternalError(BankError):
    kind = ErrorKind.INTERNAL


class StoreError(BankError):
    """The account store could not complete an operation."""

    kind = ErrorKind.INTERNAL
    message = "storage unavailable"


class ConfigurationError(BankError):
    kind = ErrorKind.FATAL
    message = "invalid configuration"


class StartupError(BankError):
    kind = ErrorKind.FATAL
    message = "startup failed"


def _envelope(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message})


async def handle_bank_error(_request: Request, exc: Exception) -> JSONResponse:
    """Convert a ``BankError`` into the JSON error envelope."""
    assert isinstance(exc, BankError)
    return _envelope(exc.kind.status, exc.message)


async def handle_validation_error(_request: Request, exc: Exception) -> JSONResponse:
    """Report malformed or invalid request bodies as 400."""
    assert isinstance(exc, RequestValidationError)
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(
            str(part) for part in first.get("loc", ()) if part != "body"
        )
        message = f"{location}: {first['msg']}" if location else str(first["msg"])
    else:
        message = "invalid request"
    return _envelope(HTTPStatus.BAD_REQUEST, message)


async def handle_http_error(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, StarletteHTTPException)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        "Unhandled {} on {} {}", type(exc).__name__, request.method, request.url.path
    )
    return _envelope(HTTPStatus.INTERNAL_SERVER_ERROR, InternalError.message)


def register_error_handlers(app: FastAPI) -> None:
    """Install the exception handlers that produce the error envelope."""
    app.add_exception_handler(BankError, handle_bank_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
