from tradeshare.core.entities.error import ClassifiedError, ErrorCategory


class TradeShareError(Exception):
    """Base error rendered to API callers as {"error", "category"}."""

    def __init__(self, message: str, status_code: int = 500, category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.category = category


class InvalidRangeError(TradeShareError):
    """Unrecognized history range selector."""

    def __init__(self, message: str = "Invalid history range"):
        super().__init__(message, status_code=400, category=ErrorCategory.INVALID_RANGE)


class MissingParameterError(TradeShareError):
    def __init__(self, message: str):
        super().__init__(message, status_code=400, category=ErrorCategory.MISSING_PARAMETER)


class UpstreamError(TradeShareError):
    """A failure from the trading connection, already classified."""

    def __init__(self, classified: ClassifiedError):
        super().__init__(classified.message, status_code=classified.httpStatus, category=classified.category)
        self.classified = classified
