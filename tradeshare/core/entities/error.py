from enum import Enum

from pydantic import BaseModel


class ErrorCategory(str, Enum):
    INVALID_RANGE = "InvalidRangeError"
    MISSING_PARAMETER = "MissingParameterError"
    BROKER_SERVER_NOT_FOUND = "BrokerServerNotFound"
    BROKER_AUTHENTICATION_FAILED = "BrokerAuthenticationFailed"
    BROKER_SETTINGS_DETECTION_FAILED = "BrokerSettingsDetectionFailed"
    UPSTREAM_VALIDATION_ERROR = "UpstreamValidationError"
    GENERIC_UPSTREAM_ERROR = "GenericUpstreamError"
    UNKNOWN_ERROR = "UnknownError"


class ClassifiedError(BaseModel):
    """
    Stable view of an upstream failure, independent of the SDK's error shape.
    """
    category: ErrorCategory
    httpStatus: int
    message: str
