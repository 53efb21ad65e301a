"""Record store access: filter expressions, field resolution, client."""

from wardrobe.store.client import (
    AirtableStore,
    Record,
    RecordNotFoundError,
    RecordStore,
    StoreError,
)
from wardrobe.store.fields import FieldResolver, attachment_url
from wardrobe.store.formula import (
    And,
    Contains,
    Eq,
    Expr,
    IsBlank,
    Or,
    RecordIdIn,
    all_of,
    escape_string,
    visible_to,
)
from wardrobe.store.records import RecordMapper

__all__ = [
    "AirtableStore",
    "Record",
    "RecordNotFoundError",
    "RecordStore",
    "StoreError",
    "FieldResolver",
    "attachment_url",
    "And",
    "Contains",
    "Eq",
    "Expr",
    "IsBlank",
    "Or",
    "RecordIdIn",
    "all_of",
    "escape_string",
    "visible_to",
    "RecordMapper",
]
