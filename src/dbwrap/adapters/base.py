"""
Base adapter interface for database drivers.

An adapter is the driver-specific half of every operation. The only method
an adapter must implement is `execute_raw`; the specialized methods
(`fetch_one`, `fetch_all`, `mutate`, `begin`, `commit`, `rollback`,
`run_in_transaction`) are optional and deliberately absent from this base
class, so that their presence on a concrete adapter is the capability.

Adapters receive SQL in any of the `?`, `$n`, `:name` conventions and
rewrite it into their driver's paramstyle before executing.
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from contextlib import contextmanager
from enum import StrEnum
from typing import Any, TypeVar

from dbwrap.sql import convert_placeholders
from dbwrap.types import MutationResult, Row

__all__ = [
    'AdapterKind',
    'DatabaseAdapter',
    'StatementMethods',
    'register_adapter',
]

logger = logging.getLogger(__name__)

T = TypeVar('T')


class AdapterKind(StrEnum):
    """Closed set of adapter kinds a connection can be wrapped with."""
    MYSQL = 'mysql'
    SQLITE = 'sqlite'
    POSTGRES = 'postgres'
    SQLALCHEMY = 'sqlalchemy'


# Registry of adapter kind -> adapter class
# Defined here to avoid circular imports (concrete adapters import from base)
_ADAPTER_REGISTRY: dict[AdapterKind, type['DatabaseAdapter']] = {}


def register_adapter(kind: AdapterKind):
    """Decorator to register an adapter class for a kind.

    Usage:
        @register_adapter(AdapterKind.SQLITE)
        class SQLiteAdapter(DatabaseAdapter):
            ...
    """
    kind = AdapterKind(kind)

    def decorator(cls: type['DatabaseAdapter']) -> type['DatabaseAdapter']:
        _ADAPTER_REGISTRY[kind] = cls
        return cls
    return decorator


class DatabaseAdapter(ABC):
    """Base class for driver adapters.
    """

    paramstyle = 'qmark'

    @property
    @abstractmethod
    def kind(self) -> AdapterKind:
        """Registry key of the adapter."""

    def __repr__(self) -> str:
        return f'{type(self).__name__}()'

    def prepare(self, sql: str, params: list[Any]) -> tuple[str, Any]:
        """Rewrite placeholders for this adapter's driver."""
        return convert_placeholders(sql, params, self.paramstyle)

    def cursor(self, connection: Any) -> Any:
        """Create a DBAPI cursor that yields rows as dictionaries."""
        return connection.cursor()

    @contextmanager
    def _cursor(self, connection: Any, sql: str, params: list[Any]):
        """Context manager for cursor lifecycle with placeholder rewriting.

        Handles cursor creation, SQL execution, and cleanup.
        """
        sql, args = self.prepare(sql, params)
        cursor = self.cursor(connection)
        try:
            if args is None:
                cursor.execute(sql)
            else:
                cursor.execute(sql, args)
            yield cursor
        finally:
            cursor.close()

    def in_transaction(self, connection: Any) -> bool:
        """Whether the connection has an open transaction.

        Adapters whose driver opens transactions implicitly override this so
        that statements issued outside an explicit transaction get committed.
        """
        return True

    def _run(self, connection: Any, sql: str, params: list[Any],
             collect: Callable[[Any], T]) -> T:
        """Execute a statement and collect its result from the cursor.

        A transaction the driver opened implicitly for this statement is
        committed on success and rolled back on failure.
        """
        idle = not self.in_transaction(connection)
        try:
            with self._cursor(connection, sql, params) as cursor:
                result = collect(cursor)
        except Exception:
            if idle and self.in_transaction(connection):
                try:
                    connection.rollback()
                except Exception as e:
                    logger.debug(f'Could not roll back implicit transaction: {e}')
            raise
        if idle and self.in_transaction(connection):
            connection.commit()
        return result

    def row(self, cursor: Any, values: Any) -> Row | None:
        """Convert one fetched row to a dict."""
        if values is None:
            return None
        if isinstance(values, dict):
            return values
        columns = [desc[0] for desc in cursor.description]
        return dict(zip(columns, values))

    def first(self, cursor: Any) -> Row | None:
        """First row of an executed cursor, None if there is none."""
        if cursor.description is None:
            return None
        return self.row(cursor, cursor.fetchone())

    def rows(self, cursor: Any) -> list[Row]:
        """All rows of an executed cursor as dicts."""
        if cursor.description is None:
            return []
        return [self.row(cursor, values) for values in cursor.fetchall()]

    def report(self, cursor: Any) -> MutationResult:
        """Mutation report of an executed cursor."""
        return MutationResult.from_cursor(cursor)

    def result(self, cursor: Any) -> list[Row] | MutationResult:
        """Rows if the statement produced a result set, else a mutation report."""
        if cursor.description is None:
            return self.report(cursor)
        return self.rows(cursor)

    def execute_raw(self, connection: Any, sql: str, params: list[Any]) -> list[Row] | MutationResult:
        """Execute a statement and return its raw result.

        Args:
            connection: Driver connection object
            sql: SQL with `?`, `$n` or `:name` placeholders
            params: Validated, normalized parameter list

        Returns
            List of row dicts, or a MutationResult for statements without
            a result set
        """
        return self._run(connection, sql, params, self.result)


class StatementMethods:
    """Specialized fetch_one/fetch_all/mutate built on `DatabaseAdapter._run`.

    Mixed into adapters whose driver can answer these directly from a
    cursor, which skips materializing a full result for fetch_one.
    """

    def fetch_one(self, connection: Any, sql: str, params: list[Any]) -> Row | None:
        return self._run(connection, sql, params, self.first)

    def fetch_all(self, connection: Any, sql: str, params: list[Any]) -> list[Row]:
        return self._run(connection, sql, params, self.rows)

    def mutate(self, connection: Any, sql: str, params: list[Any]) -> MutationResult:
        return self._run(connection, sql, params, self.report)
