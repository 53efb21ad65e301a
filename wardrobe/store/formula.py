"""Filter expressions for record store queries.

Queries are built as a small tree of typed nodes and serialized to the
store's formula language only at the client boundary. All string values
pass through ``escape_string`` during serialization; nothing else in the
code base interpolates user input into a formula.

Usage:
    expr = And(
        Contains("Name", "shirt"),
        Or(Eq("Owner User Id", user_id), IsBlank("Owner User Id")),
    )
    params = {"filterByFormula": expr.to_formula()}
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence

# Practical limit on ids per OR-clause before formulas get too long
MAX_IDS_PER_CLAUSE = 10


def escape_string(value: str) -> str:
    """Escape a value for use inside a single-quoted formula string."""
    return str(value).replace("\\", "\\\\").replace("'", "\\'")


def quote(value: str) -> str:
    return f"'{escape_string(value)}'"


def field_ref(name: str) -> str:
    """Reference a field by name. Braces in names cannot be escaped."""
    if "{" in name or "}" in name:
        raise ValueError(f"Field name may not contain braces: {name!r}")
    return "{" + name + "}"


class Expr:
    """Base class for filter expression nodes."""

    def to_formula(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Eq(Expr):
    """Exact string equality on a field."""

    field: str
    value: str

    def to_formula(self) -> str:
        return f"{field_ref(self.field)}={quote(self.value)}"


@dataclass(frozen=True)
class Contains(Expr):
    """Case-insensitive substring match on a field."""

    field: str
    value: str

    def to_formula(self) -> str:
        return (
            f"FIND(LOWER({quote(self.value)}), LOWER({field_ref(self.field)}&''))>0"
        )


@dataclass(frozen=True)
class IsBlank(Expr):
    """Field is empty."""

    field: str

    def to_formula(self) -> str:
        return f"{field_ref(self.field)}=BLANK()"


@dataclass(frozen=True)
class RecordIdIn(Expr):
    """Record id is one of the given ids."""

    ids: tuple[str, ...]

    def to_formula(self) -> str:
        clauses = [f"RECORD_ID()={quote(record_id)}" for record_id in self.ids]
        if len(clauses) == 1:
            return clauses[0]
        return "OR(" + ", ".join(clauses) + ")"


class _Compound(Expr):
    operator = ""

    def __init__(self, *operands: Expr):
        if not operands:
            raise ValueError(f"{self.operator} requires at least one operand")
        self.operands: tuple[Expr, ...] = operands

    def to_formula(self) -> str:
        if len(self.operands) == 1:
            return self.operands[0].to_formula()
        inner = ", ".join(op.to_formula() for op in self.operands)
        return f"{self.operator}({inner})"

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.operands == other.operands

    def __hash__(self) -> int:
        return hash((self.operator, self.operands))

    def __repr__(self) -> str:
        return f"{type(self).__name__}{self.operands!r}"


class And(_Compound):
    operator = "AND"


class Or(_Compound):
    operator = "OR"


def all_of(*operands: Optional[Expr]) -> Optional[Expr]:
    """AND together the non-empty operands; None when there are none."""
    present = [op for op in operands if op is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return And(*present)


def visible_to(owner_field: str, user_id: str) -> Expr:
    """Records owned by the user or shared (blank owner)."""
    if not user_id:
        return IsBlank(owner_field)
    return Or(Eq(owner_field, user_id), IsBlank(owner_field))


def chunk_ids(
    ids: Iterable[str], size: int = MAX_IDS_PER_CLAUSE
) -> Iterator[tuple[str, ...]]:
    """Split ids into de-duplicated chunks of at most ``size``."""
    seen: dict[str, None] = {}
    for record_id in ids:
        if record_id:
            seen.setdefault(record_id, None)
    unique: Sequence[str] = list(seen)
    for start in range(0, len(unique), size):
        yield tuple(unique[start:start + size])


def render(expr: Optional[Expr]) -> str:
    """Serialize a filter for the wire, empty string for no filter."""
    if expr is None:
        return ""
    return expr.to_formula()
