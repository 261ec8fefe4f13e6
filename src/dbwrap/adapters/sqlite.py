"""
SQLite adapter for the standard library sqlite3 module.

sqlite3 uses qmark placeholders natively, so `?` statements pass through
untouched while `$n` and `:name` statements are rewritten to `?`.

Transactions are opened with an explicit BEGIN and closed with COMMIT or
ROLLBACK statements rather than `Connection.commit()`, which is a no-op on
connections opened with `autocommit=True`. The adapter has no
`run_in_transaction`; the generic transaction coordinator brackets units of
work.
"""
import logging
import sqlite3

from dbwrap.adapters.base import AdapterKind, DatabaseAdapter, StatementMethods
from dbwrap.adapters.base import register_adapter

logger = logging.getLogger(__name__)


@register_adapter(AdapterKind.SQLITE)
class SQLiteAdapter(StatementMethods, DatabaseAdapter):
    """SQLite-specific operations.
    """

    paramstyle = 'qmark'

    @property
    def kind(self) -> AdapterKind:
        return AdapterKind.SQLITE

    def in_transaction(self, connection: sqlite3.Connection) -> bool:
        return connection.in_transaction

    def begin(self, connection: sqlite3.Connection) -> None:
        if connection.in_transaction:
            logger.debug('Joining transaction already open on sqlite connection')
            return
        connection.execute('BEGIN')

    def commit(self, connection: sqlite3.Connection) -> None:
        if connection.in_transaction:
            connection.execute('COMMIT')

    def rollback(self, connection: sqlite3.Connection) -> None:
        if connection.in_transaction:
            connection.execute('ROLLBACK')
