"""Logical-to-store field name resolution.

A ``FieldResolver`` wraps one table's field map. Reads try each candidate
name in order and take the first one present on the record; writes and
filters always use the primary name.
"""

from typing import Any, Mapping, Optional


class FieldResolver:
    """Resolve logical field names against a record's raw fields."""

    def __init__(self, field_map: Mapping[str, tuple[str, ...]]):
        for logical, candidates in field_map.items():
            if not candidates:
                raise ValueError(f"No store field names configured for {logical!r}")
        self._field_map = field_map

    def primary(self, logical: str) -> str:
        """Store field name used for writes and filters."""
        return self._field_map[logical][0]

    def candidates(self, logical: str) -> tuple[str, ...]:
        return self._field_map[logical]

    def read(self, fields: Mapping[str, Any], logical: str, default: Any = None) -> Any:
        """Return the value of the first candidate present in ``fields``."""
        for name in self._field_map[logical]:
            if name in fields and fields[name] is not None:
                return fields[name]
        return default

    def read_str(self, fields: Mapping[str, Any], logical: str) -> str:
        value = self.read(fields, logical)
        if value is None:
            return ""
        if isinstance(value, list):
            # Lookup and linked fields come back as lists
            return str(value[0]) if value else ""
        return str(value)

    def read_url(self, fields: Mapping[str, Any], logical: str) -> Optional[str]:
        """Read a URL stored either as plain text or as an attachment list."""
        return attachment_url(self.read(fields, logical))

    def read_list(self, fields: Mapping[str, Any], logical: str) -> list[str]:
        """Read a list stored either as an array or as a comma-joined string."""
        value = self.read(fields, logical)
        if value is None:
            return []
        if isinstance(value, list):
            return [str(v).strip() for v in value if str(v).strip()]
        return [part.strip() for part in str(value).split(",") if part.strip()]

    def to_store(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Translate logical keys to primary store field names."""
        return {self.primary(logical): value for logical, value in values.items()}


def attachment_url(value: Any) -> Optional[str]:
    """Extract a URL from a plain string, an attachment dict, or a list of them."""
    if value is None:
        return None
    if isinstance(value, list):
        return attachment_url(value[0]) if value else None
    if isinstance(value, dict):
        url = value.get("url")
        return str(url) if url else None
    text = str(value).strip()
    return text or None
