"""Errors raised by the AI clients."""

from typing import Any, Optional

OPENAI_ERROR = "OPENAI_ERROR"
AI_JSON_PARSE_ERROR = "AI_JSON_PARSE_ERROR"
AI_EMPTY_OUTFITS = "AI_EMPTY_OUTFITS"

# Characters of raw model output kept in error details
RAW_SNIPPET_CHARS = 400


class AIServiceError(Exception):
    """A completion backend call failed or returned unusable output.

    Attributes:
        error_code: One of OPENAI_ERROR, AI_JSON_PARSE_ERROR, AI_EMPTY_OUTFITS
        message: Human-readable description
        status_code: HTTP status to surface, 502 unless the backend says otherwise
        details: Diagnostic context such as a truncated raw-output snippet
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        status_code: int = 502,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details or {}


def snippet(text: Optional[str]) -> str:
    return (text or "")[:RAW_SNIPPET_CHARS]
