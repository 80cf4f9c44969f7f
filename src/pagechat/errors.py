from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    FETCH_FAILED = "FETCH_FAILED"
    PARSE_FAILED = "PARSE_FAILED"
    STORE_FAILED = "STORE_FAILED"
    NOT_FOUND = "NOT_FOUND"
    TIMEOUT = "TIMEOUT"
    GENERATION_FAILED = "GENERATION_FAILED"
    INVALID_INPUT = "INVALID_INPUT"


# HTTP status returned by the API layer for each error kind.
HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.PARSE_FAILED: 422,
    ErrorCode.FETCH_FAILED: 502,
    ErrorCode.GENERATION_FAILED: 502,
    ErrorCode.STORE_FAILED: 503,
    ErrorCode.TIMEOUT: 504,
}


class PageChatError(Exception):
    """Raised by pipeline components for all expected failure conditions.

    The extractor and responder convert it into an ``Err`` result at their
    public boundary; the API layer serialises it into the JSON error body.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.code]

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }
