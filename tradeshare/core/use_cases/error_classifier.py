"""
Translates failures raised by the trading connection into a small, stable
set of categories.

The MetaApi SDK reports broker diagnostics under `details` (either a code
string or a list of validation entries), generic HTTP-style failures with
`message`/`status`, and occasionally opaque values. Mappings and exception
objects are both accepted.
"""
import logging
from collections.abc import Mapping
from typing import Any, Optional

from tradeshare.core.entities.error import ClassifiedError, ErrorCategory

logger = logging.getLogger(__name__)

E_SRV_NOT_FOUND = "E_SRV_NOT_FOUND"
E_AUTH = "E_AUTH"
E_SERVER_TIMEZONE = "E_SERVER_TIMEZONE"

_BROKER_CODES = {
    E_SRV_NOT_FOUND: (ErrorCategory.BROKER_SERVER_NOT_FOUND, 404, "Broker server not found"),
    E_AUTH: (
        ErrorCategory.BROKER_AUTHENTICATION_FAILED,
        401,
        "Failed to connect to your broker. Please check your login and password and try again"
    ),
    E_SERVER_TIMEZONE: (
        ErrorCategory.BROKER_SETTINGS_DETECTION_FAILED,
        400,
        "Failed to detect broker settings. Please try again later"
    ),
}

UNKNOWN = ClassifiedError(category=ErrorCategory.UNKNOWN_ERROR, httpStatus=500, message="Internal Server Error")


def _field(raw: Any, name: str) -> Any:
    if isinstance(raw, Mapping):
        return raw.get(name)
    return getattr(raw, name, None)


def _status(raw: Any) -> Optional[int]:
    for name in ("status", "status_code"):
        value = _field(raw, name)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _message(raw: Any) -> Optional[str]:
    message = _field(raw, "message")
    if message:
        return str(message)
    # Python exceptions carry their message in args
    if isinstance(raw, BaseException) and str(raw):
        return str(raw)
    return None


def _validation_message(details: Any) -> Optional[str]:
    if isinstance(details, (str, bytes, Mapping)) or not details:
        return None
    try:
        entries = list(details)
    except TypeError:
        return None
    for entry in entries:
        message = _field(entry, "message")
        if message:
            return str(message)
    return None


def _classify(raw: Any) -> ClassifiedError:
    details = _field(raw, "details")

    if isinstance(details, str) and details in _BROKER_CODES:
        category, status, message = _BROKER_CODES[details]
        return ClassifiedError(category=category, httpStatus=status, message=message)

    validation_message = _validation_message(details)
    if validation_message is not None:
        return ClassifiedError(
            category=ErrorCategory.UPSTREAM_VALIDATION_ERROR,
            httpStatus=_status(raw) or 500,
            message=validation_message
        )

    message = _message(raw)
    if message is not None:
        return ClassifiedError(
            category=ErrorCategory.GENERIC_UPSTREAM_ERROR,
            httpStatus=_status(raw) or 500,
            message=message
        )

    return UNKNOWN


def classify(raw_error: Any) -> ClassifiedError:
    """
    Never raises: anything that cannot be inspected is an UnknownError.
    """
    try:
        return _classify(raw_error)
    except Exception as e:
        logger.warning(f"Failed to classify upstream error: {e}")
        return UNKNOWN
