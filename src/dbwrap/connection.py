"""
Wrapping a driver connection with an adapter.

This module provides:
1. The `wrap()` function, the composition root binding a connection to the
   adapter registered for a kind
2. The `WrappedDatabase` class, the object applications call

The WrappedDatabase always offers:
- query(sql, params) - Execute SQL and return the raw result
- get_one(sql, params) - First row or None
- get(sql, params) - List of rows, empty when there are none
- exec(sql, params) - Execute INSERT/UPDATE/DELETE and return the report

and, only when the adapter supports them:
- begin_transaction(), commit(), rollback()
- transaction(unit) - Run unit() inside a begin/commit/rollback bracket
"""
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from dbwrap.adapters import AdapterKind, get_adapter
from dbwrap.capabilities import Capabilities
from dbwrap.engine import QueryEngine
from dbwrap.exceptions import ConfigurationError
from dbwrap.options import WrapOptions

__all__ = [
    'WrappedDatabase',
    'wrap',
]

logger = logging.getLogger(__name__)

T = TypeVar('T')


class WrappedDatabase:
    """Application-facing database object for one connection.

    Transaction methods are attached per instance, and only for capabilities
    the adapter has, so `hasattr(db, 'commit')` tells whether the adapter can
    commit.
    """

    def __init__(self, connection: Any, adapter: Any,
                 options: WrapOptions | None = None) -> None:
        options = options or WrapOptions()
        self._connection = connection
        self._adapter = adapter
        self._engine = QueryEngine(
            connection,
            adapter,
            classifier=options.create_classifier(),
            capabilities=Capabilities.probe(adapter),
        )

        capabilities = self._engine.capabilities
        if capabilities.begin is not None:
            self.begin_transaction = self._engine.begin
        if capabilities.commit is not None:
            self.commit = self._engine.commit
        if capabilities.rollback is not None:
            self.rollback = self._engine.rollback
        if capabilities.supports_transactions:
            self.transaction = self._transaction

        logger.debug(f'Wrapped connection {id(connection)} with {adapter!r} '
                     f'(capabilities: {capabilities.names()})')

    def __repr__(self) -> str:
        return f'WrappedDatabase(adapter={self._adapter!r})'

    @property
    def connection(self) -> Any:
        """The raw driver connection."""
        return self._connection

    @property
    def adapter(self) -> Any:
        """The resolved adapter."""
        return self._adapter

    @property
    def engine(self) -> QueryEngine:
        """The query engine behind this wrapper."""
        return self._engine

    @property
    def capabilities(self) -> Capabilities:
        return self._engine.capabilities

    def query(self, sql: str, params: Any = None) -> Any:
        """Execute a statement and return the adapter's raw result.
        """
        return self._engine.run(sql, params)

    def get_one(self, sql: str, params: Any = None) -> dict[str, Any] | None:
        """Execute a query and return the first row, or None if no rows found.
        """
        return self._engine.fetch_one(sql, params)

    def get(self, sql: str, params: Any = None) -> list[dict[str, Any]]:
        """Execute a query and return all rows as a list.
        """
        return self._engine.fetch_all(sql, params)

    def exec(self, sql: str, params: Any = None) -> Any:
        """Execute an INSERT/UPDATE/DELETE and return the mutation report.
        """
        return self._engine.mutate(sql, params)

    def _transaction(self, unit: Callable[[], T]) -> T:
        """Run `unit()` in a transaction and return its result.

        Examples
            def transfer():
                db.exec('UPDATE accounts SET balance = balance - ? WHERE id = ?', [10, 1])
                db.exec('UPDATE accounts SET balance = balance + ? WHERE id = ?', [10, 2])
                return db.get_one('SELECT balance FROM accounts WHERE id = ?', [1])

            balance = db.transaction(transfer)
        """
        return self._engine.run_in_transaction(unit)


def wrap(connection: Any, kind: AdapterKind | str,
         options: WrapOptions | dict[str, Any] | None = None,
         **kw: Any) -> WrappedDatabase:
    """Wrap a driver connection with the adapter registered for `kind`.

    Args:
        connection: Driver connection (sqlite3, PyMySQL, psycopg, or a
            SQLAlchemy Connection)
        kind: Adapter kind, one of `mysql`, `sqlite`, `postgres`, `sqlalchemy`
        options: WrapOptions, or a dict of option values
        **kw: Option values overriding `options`

    Returns
        WrappedDatabase bound to the connection

    Raises
        ConfigurationError if the connection or kind is missing, or no adapter
        is registered for kind
    """
    if connection is None:
        raise ConfigurationError('Connection object is required')
    if not kind:
        available = ', '.join(str(k) for k in AdapterKind)
        raise ConfigurationError(f'Adapter kind is required (one of: {available})')

    adapter = get_adapter(kind)
    try:
        options = WrapOptions.load(options, **kw)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    return WrappedDatabase(connection, adapter, options)
