"""Recover a JSON object from free-form model output.

Models wrap JSON in code fences or surround it with prose often enough that
the raw text cannot be passed to ``json.loads`` directly. Extraction strips
fence markers, then parses the span from the first ``{`` to the last ``}``.
"""

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"```[A-Za-z0-9_-]*")


class JSONExtractionError(ValueError):
    """No parseable JSON object in the text."""

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw


def strip_code_fences(text: str) -> str:
    """Remove ``` markers (with optional language tag) and trim."""
    return _FENCE_RE.sub("", text or "").strip()


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the outermost JSON object embedded in ``text``.

    Raises:
        JSONExtractionError: If there is no brace pair, the span does not
            parse, or the parsed value is not an object
    """
    cleaned = strip_code_fences(text)
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end <= start:
        raise JSONExtractionError("No JSON object found in model output", raw=text or "")

    try:
        value = json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as e:
        raise JSONExtractionError(f"Invalid JSON in model output: {e.msg}", raw=text) from e

    if not isinstance(value, dict):
        raise JSONExtractionError("Model output JSON is not an object", raw=text)
    return value
