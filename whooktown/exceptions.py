from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    UNAUTHORIZED = 'unauthorized'
    FORBIDDEN = 'forbidden'
    NOT_FOUND = 'not_found'
    BAD_REQUEST = 'bad_request'
    QUOTA_EXCEEDED = 'quota_exceeded'
    INTERNAL_SERVER = 'internal_server'
    NETWORK_ERROR = 'network_error'
    VALIDATION_ERROR = 'validation_error'
    TIMEOUT = 'timeout'


class WhooktownError(Exception):
    """Base class for every error raised by the client.

    Carries the error kind (``code``), a message, the HTTP status when one was
    received, the parsed ``details`` mapping of the error body and the lower
    level exception that caused it, if any.
    """
    default_code: ErrorCode = ErrorCode.INTERNAL_SERVER

    def __init__(self, message: str = '', *, code: Optional[ErrorCode] = None, status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.code.value}: {self.message} (caused by: {self.cause})"
        return f"{self.code.value}: {self.message}"


class UnauthorizedError(WhooktownError):
    """401: missing, expired or invalid token."""
    default_code = ErrorCode.UNAUTHORIZED


class ForbiddenError(WhooktownError):
    """403: authenticated but not allowed."""
    default_code = ErrorCode.FORBIDDEN


class NotFoundError(WhooktownError):
    default_code = ErrorCode.NOT_FOUND


class BadRequestError(WhooktownError):
    default_code = ErrorCode.BAD_REQUEST


class QuotaExceededError(WhooktownError):
    """402: plan quota reached (no structured details available)."""
    default_code = ErrorCode.QUOTA_EXCEEDED


class QuotaLimitError(QuotaExceededError):
    """Quota exceeded with plan and usage details (``QUOTA_EXCEEDED`` family codes)."""

    def __init__(self, message: str = '', *, status_code: Optional[int] = None, plan: str = '', current: int = 0,
                 limit: int = 0, quota_type: str = ''):
        super().__init__(message, status_code=status_code)
        self.plan = plan
        self.current = current
        self.limit = limit
        self.quota_type = quota_type  # "assets" or "layouts"

    def __str__(self) -> str:
        return (f"{self.code.value}: {self.message} "
                f"(plan: {self.plan}, current: {self.current}, limit: {self.limit})")


class InternalServerError(WhooktownError):
    """5xx, unknown statuses and undecodable success bodies."""
    default_code = ErrorCode.INTERNAL_SERVER


class NetworkError(WhooktownError):
    """Transport failure: connection, send or body read."""
    default_code = ErrorCode.NETWORK_ERROR


class ValidationError(WhooktownError):
    """Client-side failure before anything is sent (bad path, unserializable body, bad config)."""
    default_code = ErrorCode.VALIDATION_ERROR


class RequestTimeoutError(WhooktownError):
    """The call context was cancelled or its deadline passed."""
    default_code = ErrorCode.TIMEOUT


ERROR_CLASSES: Dict[ErrorCode, type] = {
    ErrorCode.UNAUTHORIZED: UnauthorizedError,
    ErrorCode.FORBIDDEN: ForbiddenError,
    ErrorCode.NOT_FOUND: NotFoundError,
    ErrorCode.BAD_REQUEST: BadRequestError,
    ErrorCode.QUOTA_EXCEEDED: QuotaExceededError,
    ErrorCode.INTERNAL_SERVER: InternalServerError,
    ErrorCode.NETWORK_ERROR: NetworkError,
    ErrorCode.VALIDATION_ERROR: ValidationError,
    ErrorCode.TIMEOUT: RequestTimeoutError,
}


def error_for_code(code: ErrorCode, message: str, **kwargs: Any) -> WhooktownError:
    return ERROR_CLASSES[code](message, **kwargs)


def get_error_code(exc: BaseException) -> Optional[ErrorCode]:
    if isinstance(exc, WhooktownError):
        return exc.code
    return None


def get_status_code(exc: BaseException) -> Optional[int]:
    if isinstance(exc, WhooktownError):
        return exc.status_code
    return None


def is_quota_exceeded(exc: BaseException) -> bool:
    return isinstance(exc, QuotaExceededError)
