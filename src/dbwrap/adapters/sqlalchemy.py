"""
SQLAlchemy adapter for `sqlalchemy.engine.Connection` objects.

Statements are run through `text()` with every placeholder rewritten to a
generated bind name (`:p0`, `:p1`, ...). Driver exceptions reach the
classifier wrapped in `DBAPIError`, which it unwraps through `.orig`.

The adapter offers a specialized fetch_all and the begin/commit/rollback
trio; fetch_one and mutate use the engine's generic fallback.
"""
import logging
from contextlib import contextmanager
from typing import Any

import sqlalchemy as sa

from dbwrap.adapters.base import AdapterKind, DatabaseAdapter, register_adapter
from dbwrap.types import MutationResult, Row

logger = logging.getLogger(__name__)


@register_adapter(AdapterKind.SQLALCHEMY)
class SQLAlchemyAdapter(DatabaseAdapter):
    """SQLAlchemy Core operations.
    """

    paramstyle = 'named'

    @property
    def kind(self) -> AdapterKind:
        return AdapterKind.SQLALCHEMY

    @contextmanager
    def _cursor(self, connection: sa.Connection, sql: str, params: list[Any]):
        """Yield the CursorResult of a `text()` statement."""
        sql, args = self.prepare(sql, params)
        result = connection.execute(sa.text(sql), args or {})
        try:
            yield result
        finally:
            result.close()

    def in_transaction(self, connection: sa.Connection) -> bool:
        return connection.in_transaction()

    def row(self, cursor: sa.CursorResult, values: Any) -> Row | None:
        if values is None:
            return None
        return dict(values._mapping)

    def first(self, cursor: sa.CursorResult) -> Row | None:
        if not cursor.returns_rows:
            return None
        return self.row(cursor, cursor.fetchone())

    def rows(self, cursor: sa.CursorResult) -> list[Row]:
        if not cursor.returns_rows:
            return []
        return [self.row(cursor, values) for values in cursor.fetchall()]

    def report(self, cursor: sa.CursorResult) -> MutationResult:
        try:
            insert_id = cursor.lastrowid
        except (AttributeError, sa.exc.InvalidRequestError):
            # DBAPI cursor has no lastrowid (psycopg)
            insert_id = None
        return MutationResult(insert_id=insert_id, affected_rows=cursor.rowcount)

    def result(self, cursor: sa.CursorResult) -> list[Row] | MutationResult:
        if cursor.returns_rows:
            return self.rows(cursor)
        return self.report(cursor)

    def fetch_all(self, connection: sa.Connection, sql: str, params: list[Any]) -> list[Row]:
        return self._run(connection, sql, params, self.rows)

    def begin(self, connection: sa.Connection) -> None:
        connection.begin()

    def commit(self, connection: sa.Connection) -> None:
        connection.commit()

    def rollback(self, connection: sa.Connection) -> None:
        connection.rollback()
