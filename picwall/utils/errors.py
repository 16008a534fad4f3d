"""
Error taxonomy shared by every router.

Handlers raise :class:`AppError`; the exception handler registered in
``main.py`` logs it through :func:`log_error` and answers with
:func:`create_error_response`. The ``handle_*_error`` helpers translate
library exceptions (botocore, SQLAlchemy, token failures) into AppErrors.
"""
import enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from botocore.exceptions import (
    BotoCoreError, ClientError, ConnectTimeoutError, EndpointConnectionError,
    NoCredentialsError, PartialCredentialsError,
)
from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger as logging
from sqlalchemy.exc import DataError, IntegrityError, OperationalError, SQLAlchemyError

from picwall.config import ENVIRONMENT


class ErrorSeverity(str, enum.Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ErrorSource(str, enum.Enum):
    AUTH = "AUTH"
    DATABASE = "DATABASE"
    S3_STORAGE = "S3_STORAGE"
    API = "API"
    CLIENT = "CLIENT"
    VALIDATION = "VALIDATION"


# loguru level used for each severity
SEVERITY_LEVELS = {
    ErrorSeverity.INFO: "INFO",
    ErrorSeverity.WARNING: "WARNING",
    ErrorSeverity.ERROR: "ERROR",
    ErrorSeverity.CRITICAL: "CRITICAL",
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class AppError(Exception):
    """An error that knows where it came from, how bad it is and what status to answer with."""

    def __init__(
        self,
        message: str,
        source: ErrorSource = ErrorSource.API,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        path: Optional[str] = None,
        user_id: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.source = ErrorSource(source)
        self.severity = ErrorSeverity(severity)
        self.code = code
        self.details = details
        self.status_code = status_code
        self.path = path
        self.user_id = user_id
        self.timestamp = _now_iso()

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "message": self.message,
            "source": self.source.value,
            "severity": self.severity.value,
            "code": self.code,
            "details": self.details,
            "timestamp": self.timestamp,
        }
        if self.path:
            data["path"] = self.path
        if self.user_id is not None:
            data["userId"] = self.user_id
        return data

    def __repr__(self):
        return f"<AppError(source={self.source.value}, code={self.code}, status={self.status_code})>"


def log_error(error: AppError) -> None:
    """Log an AppError at the level matching its severity."""
    level = SEVERITY_LEVELS.get(error.severity, "INFO")
    logging.bind(
        source=error.source.value,
        code=error.code,
        details=error.details,
    ).log(level, "[{}][{}] {}", error.severity.value, error.source.value, error.message)


def create_error_response(
    error: Union[AppError, Exception, str],
    status_code: Optional[int] = None,
    source: ErrorSource = ErrorSource.API,
) -> JSONResponse:
    """Log an error and build the JSON body returned to clients."""
    if isinstance(error, AppError):
        app_error = error
    elif isinstance(error, str):
        app_error = AppError(error, source=source, status_code=status_code or 500)
    else:
        code = getattr(error, "code", None)
        app_error = AppError(
            str(error) or "An unexpected error occurred",
            source=source,
            code=code if isinstance(code, str) else None,
            details={"errorName": type(error).__name__} if ENVIRONMENT != "production" else None,
            status_code=status_code or 500,
        )

    if status_code is not None:
        app_error.status_code = status_code

    log_error(app_error)

    body = {
        "success": False,
        "status": app_error.status_code,
        "message": app_error.message,
        "error": {
            "message": app_error.message,
            "code": app_error.code,
            "source": app_error.source.value,
        },
    }
    if ENVIRONMENT != "production" and app_error.details:
        body["error"]["details"] = app_error.details

    return JSONResponse(status_code=app_error.status_code, content=body)


# ============================================
# Translators
# ============================================
def handle_s3_error(error: Exception, operation: str) -> AppError:
    """Map a botocore exception onto the S3_STORAGE source."""
    severity = ErrorSeverity.ERROR
    message = f"S3 operation failed: {operation}"
    code = "UNKNOWN_S3_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = None

    if isinstance(error, ClientError):
        error_code = error.response.get("Error", {}).get("Code")
        if error_code in ("NoSuchKey", "404", "NotFound"):
            severity = ErrorSeverity.WARNING
            message = f"File not found in S3: {operation}"
            code = "S3_FILE_NOT_FOUND"
            status_code = status.HTTP_404_NOT_FOUND
        elif error_code in ("AccessDenied", "403"):
            message = f"Access denied to S3 resource: {operation}"
            code = "S3_ACCESS_DENIED"
    elif isinstance(error, (NoCredentialsError, PartialCredentialsError)):
        severity = ErrorSeverity.CRITICAL
        message = f"S3 credentials error: {operation}"
        code = "S3_CREDENTIALS_ERROR"
    elif isinstance(error, (EndpointConnectionError, ConnectTimeoutError)):
        severity = ErrorSeverity.CRITICAL
        message = f"Network error during S3 operation: {operation}"
        code = "S3_NETWORK_ERROR"
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(error, BotoCoreError):
        code = "S3_CLIENT_ERROR"

    return AppError(
        message,
        source=ErrorSource.S3_STORAGE,
        severity=severity,
        code=code,
        details={
            "errorName": type(error).__name__,
            "errorMessage": str(error),
            "errorCode": error_code,
        },
        status_code=status_code,
    )


def handle_db_error(error: Exception, operation: str) -> AppError:
    """Map a SQLAlchemy (or model validation) exception onto the DATABASE source."""
    severity = ErrorSeverity.ERROR
    message = f"Database operation failed: {operation}"
    code = "UNKNOWN_DB_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if isinstance(error, IntegrityError):
        severity = ErrorSeverity.WARNING
        message = f"Duplicate key error: {operation}"
        code = "DB_DUPLICATE_KEY"
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(error, (ValueError, DataError)):
        severity = ErrorSeverity.WARNING
        message = f"Database validation error: {operation}"
        code = "DB_VALIDATION_ERROR"
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, OperationalError):
        severity = ErrorSeverity.CRITICAL
        message = f"Database connection error: {operation}"
        code = "DB_CONNECTION_ERROR"
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif not isinstance(error, SQLAlchemyError):
        message = f"Unexpected error during database operation: {operation}"

    return AppError(
        message,
        source=ErrorSource.DATABASE,
        severity=severity,
        code=code,
        details={"errorName": type(error).__name__, "errorMessage": str(error)},
        status_code=status_code,
    )


def handle_auth_error(error: Exception, operation: str) -> AppError:
    """Map an authentication failure onto the AUTH source, keyed on its message."""
    text = str(error)
    severity = ErrorSeverity.ERROR
    message = f"Authentication error: {operation}"
    code = "AUTH_ERROR"
    status_code = status.HTTP_401_UNAUTHORIZED

    if "Invalid credentials" in text:
        severity = ErrorSeverity.WARNING
        message = f"Invalid login credentials: {operation}"
        code = "AUTH_INVALID_CREDENTIALS"
    elif "token" in text.lower():
        severity = ErrorSeverity.WARNING
        message = f"Invalid or expired token: {operation}"
        code = "AUTH_INVALID_TOKEN"
    elif "OAuthAccountNotLinked" in text:
        severity = ErrorSeverity.WARNING
        message = f"OAuth account not linked: {operation}"
        code = "AUTH_OAUTH_NOT_LINKED"
    elif "User not found" in text:
        severity = ErrorSeverity.WARNING
        message = f"User not found: {operation}"
        code = "AUTH_USER_NOT_FOUND"

    return AppError(
        message,
        source=ErrorSource.AUTH,
        severity=severity,
        code=code,
        details={"errorName": type(error).__name__, "errorMessage": text},
        status_code=status_code,
    )


# ============================================
# FastAPI wiring
# ============================================
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.path is None:
        exc.path = request.url.path
    return create_error_response(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    log_error(AppError(
        f"Request validation failed: {request.method} {request.url.path}",
        source=ErrorSource.VALIDATION,
        severity=ErrorSeverity.WARNING,
        code="VALIDATION_REQUEST_INVALID",
        details={"errors": len(exc.errors())},
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    ))
    return await request_validation_exception_handler(request, exc)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logging.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return create_error_response(AppError(
        "An unexpected error occurred. Please try again later.",
        source=ErrorSource.API,
        severity=ErrorSeverity.ERROR,
        code="API_UNEXPECTED_ERROR",
        path=request.url.path,
    ))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
