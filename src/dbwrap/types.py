"""
Result shapes shared by adapters and the query engine.

Statements either yield rows (a list of dicts, column name -> value, in the
order the driver returned them) or a `MutationResult` reporting what an
INSERT/UPDATE/DELETE did.
"""
from dataclasses import dataclass
from typing import Any

__all__ = ['Row', 'MutationResult']

Row = dict[str, Any]


@dataclass(frozen=True, slots=True)
class MutationResult:
    """Report of a data-modifying statement.

    `changed_rows` and `warning_count` are only filled in by drivers that
    report them (MySQL).
    """
    insert_id: Any
    affected_rows: int
    changed_rows: int | None = None
    warning_count: int | None = None

    @classmethod
    def from_cursor(cls, cursor: Any, **kw: Any) -> 'MutationResult':
        """Build the report from a DBAPI cursor after execute()."""
        return cls(
            insert_id=getattr(cursor, 'lastrowid', None),
            affected_rows=cursor.rowcount,
            **kw,
        )
