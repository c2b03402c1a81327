# recipebox/core/errors.py
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Failure classes raised anywhere in the extraction pipeline."""

    NETWORK_ERROR = "NETWORK_ERROR"
    NO_RECIPE_FOUND = "NO_RECIPE_FOUND"
    PARSING_ERROR = "PARSING_ERROR"
    API_LIMIT = "API_LIMIT"
    TIMEOUT = "TIMEOUT"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# Retrying the same call can never fix these
PERMANENT_CODES = frozenset({ErrorCode.NO_RECIPE_FOUND, ErrorCode.VALIDATION_ERROR})

_HTTP_STATUS = {
    ErrorCode.NETWORK_ERROR: 502,
    ErrorCode.NO_RECIPE_FOUND: 422,
    ErrorCode.PARSING_ERROR: 502,
    ErrorCode.API_LIMIT: 429,
    ErrorCode.TIMEOUT: 504,
    ErrorCode.VALIDATION_ERROR: 422,
}


class ExtractionError(Exception):
    """
    Tagged failure from a pipeline stage.

    ``cause`` is kept for logs only; control flow looks at ``code`` alone.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        source_url: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = ErrorCode(code)
        self.source_url = source_url
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def retryable(self) -> bool:
        return self.code not in PERMANENT_CODES

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self.code]

    def __repr__(self) -> str:
        return f"ExtractionError(code={self.code.value!r}, message={self.message!r}, source_url={self.source_url!r})"
