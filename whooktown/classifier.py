"""Translate HTTP error responses into classified client errors.

Two steps, kept apart so each can be tested on its own:

* ``parse_error_body`` reads the raw body into an ``ErrorBody`` record. Every
  field is either present with the expected type or ``None``; nothing is
  defaulted here.
* ``classify_error`` applies the policy: message precedence, quota detection
  and the status code mapping with its default messages.

Neither step raises on malformed input.
"""
from __future__ import annotations
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .exceptions import (
    ErrorCode,
    QuotaLimitError,
    WhooktownError,
    error_for_code,
)

QUOTA_CODES = frozenset({'QUOTA_EXCEEDED', 'ASSET_QUOTA_EXCEEDED', 'LAYOUT_QUOTA_EXCEEDED'})

STATUS_CODES: Dict[int, ErrorCode] = {
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    400: ErrorCode.BAD_REQUEST,
    402: ErrorCode.QUOTA_EXCEEDED,
}

DEFAULT_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.UNAUTHORIZED: 'unauthorized',
    ErrorCode.FORBIDDEN: 'forbidden',
    ErrorCode.NOT_FOUND: 'not found',
    ErrorCode.BAD_REQUEST: 'bad request',
    ErrorCode.QUOTA_EXCEEDED: 'quota exceeded',
}


@dataclass
class QuotaDetails:
    plan: Optional[str] = None
    current: Optional[int] = None
    limit: Optional[int] = None
    quota_type: Optional[str] = None


@dataclass
class ErrorBody:
    parsed: bool = False
    raw_text: str = ''
    message: Optional[str] = None
    error: Optional[str] = None
    code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


def _str_field(obj: Dict[str, Any], key: str) -> Optional[str]:
    value = obj.get(key)
    return value if isinstance(value, str) else None


def _int_field(obj: Dict[str, Any], key: str) -> Optional[int]:
    value = obj.get(key)
    # bool is an int subclass but never a JSON number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return int(value)
    except (OverflowError, ValueError):
        return None


def parse_error_body(body: bytes) -> ErrorBody:
    raw_text = body.decode('utf-8', errors='replace') if body else ''
    if not raw_text:
        return ErrorBody(parsed=False)
    try:
        doc = json.loads(raw_text)
    except ValueError:
        return ErrorBody(parsed=False, raw_text=raw_text)
    if doc is None:
        return ErrorBody(parsed=True, raw_text=raw_text)
    if not isinstance(doc, dict):
        return ErrorBody(parsed=False, raw_text=raw_text)
    details = doc.get('details')
    return ErrorBody(
        parsed=True,
        raw_text=raw_text,
        message=_str_field(doc, 'message'),
        error=_str_field(doc, 'error'),
        code=_str_field(doc, 'code'),
        details=details if isinstance(details, dict) else None,
    )


def parse_quota_details(details: Optional[Dict[str, Any]]) -> QuotaDetails:
    if not details:
        return QuotaDetails()
    return QuotaDetails(
        plan=_str_field(details, 'plan'),
        current=_int_field(details, 'current'),
        limit=_int_field(details, 'limit'),
        quota_type=_str_field(details, 'type'),
    )


def _pick_message(body: ErrorBody) -> str:
    if body.message:
        return body.message
    if body.error:
        return body.error
    if not body.parsed and body.raw_text:
        return body.raw_text
    return ''


def classify_error(status_code: int, body: bytes) -> WhooktownError:
    """Return exactly one classified error for a status >= 400 and its raw body."""
    parsed = parse_error_body(body)
    message = _pick_message(parsed)

    if parsed.code in QUOTA_CODES:
        quota = parse_quota_details(parsed.details)
        return QuotaLimitError(
            message,
            status_code=status_code,
            plan=quota.plan or '',
            current=quota.current or 0,
            limit=quota.limit or 0,
            quota_type=quota.quota_type or '',
        )

    code = STATUS_CODES.get(status_code, ErrorCode.INTERNAL_SERVER)
    if not message:
        message = DEFAULT_MESSAGES.get(code, f"server error: {status_code}")
    return error_for_code(code, message, status_code=status_code, details=parsed.details)
