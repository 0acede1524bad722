"""
Query plans - what the synthesizer produces and the executor consumes.

Relational statements carry bound parameters (``:name`` placeholders);
``render()`` inlines them only for display.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union
import enum
import re

from apiforge.query.document_commands import DocumentCommand

_PLACEHOLDER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


class Operation(str, enum.Enum):
    """Fixed CRUD shapes a derived endpoint can request."""
    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def sql_literal(value: Any) -> str:
    """Readable SQL literal for a bound value."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return str(value)
    return "'" + str(value).replace("'", "''") + "'"


@dataclass(frozen=True)
class SqlStatement:
    """SQL template plus bound values."""
    text: str
    params: Dict[str, Any] = field(default_factory=dict)

    def render(self) -> str:
        def substitute(match):
            name = match.group(1)
            if name not in self.params:
                return match.group(0)
            return sql_literal(self.params[name])

        return _PLACEHOLDER.sub(substitute, self.text)

    def __str__(self) -> str:
        return self.render()


Statement = Union[SqlStatement, DocumentCommand]


@dataclass(frozen=True)
class QueryPlan:
    """
    A primary statement and, for relational creates on dialects that
    cannot return the inserted row, a follow-up read whose result
    replaces the primary's.
    """
    operation: Operation
    primary: Statement
    follow_up: Optional[SqlStatement] = None

    @property
    def is_document(self) -> bool:
        return isinstance(self.primary, DocumentCommand)

    def render(self) -> Tuple[str, Optional[str]]:
        follow_up = self.follow_up.render() if self.follow_up is not None else None
        return self.primary.render(), follow_up
