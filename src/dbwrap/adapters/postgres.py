"""
PostgreSQL adapter for psycopg 3 connections.

psycopg uses the `format` paramstyle. Numbered `$n` placeholders are
rewritten to `%s` with the parameter list expanded so that repeated
references bind the same value.

Transactions are delegated to psycopg's own `Connection.transaction()`
block, so the adapter exposes `run_in_transaction` but no separate
begin/commit/rollback.
"""
import logging
from collections.abc import Callable
from typing import Any, TypeVar

import psycopg
from psycopg.pq import TransactionStatus
from psycopg.rows import dict_row

from dbwrap.adapters.base import AdapterKind, DatabaseAdapter, StatementMethods
from dbwrap.adapters.base import register_adapter

logger = logging.getLogger(__name__)

T = TypeVar('T')


@register_adapter(AdapterKind.POSTGRES)
class PostgresAdapter(StatementMethods, DatabaseAdapter):
    """PostgreSQL-specific operations.
    """

    paramstyle = 'format'

    @property
    def kind(self) -> AdapterKind:
        return AdapterKind.POSTGRES

    def cursor(self, connection: psycopg.Connection) -> psycopg.Cursor:
        return connection.cursor(row_factory=dict_row)

    def in_transaction(self, connection: psycopg.Connection) -> bool:
        return connection.info.transaction_status != TransactionStatus.IDLE

    def run_in_transaction(self, connection: psycopg.Connection, unit: Callable[[], T]) -> T:
        """Run `unit()` inside `connection.transaction()`.

        psycopg commits when the block exits normally and rolls back when it
        exits with an exception.
        """
        with connection.transaction():
            logger.debug(f'Started transaction for connection {id(connection)}')
            return unit()
