"""
MySQL / MariaDB adapter for PyMySQL connections.

PyMySQL uses the `format` paramstyle, so `?`, `$n` and `:name` placeholders
are rewritten to `%s` and literal `%` signs are doubled whenever parameters
are bound.

The adapter implements every optional capability, including its own
`run_in_transaction`, which brackets a unit of work with BEGIN and COMMIT and
rolls back before re-raising on failure.
"""
import logging
import re
from typing import Any

import pymysql
from pymysql.constants.SERVER_STATUS import SERVER_STATUS_IN_TRANS

from dbwrap.adapters.base import AdapterKind, DatabaseAdapter, StatementMethods
from dbwrap.adapters.base import register_adapter
from dbwrap.types import MutationResult

logger = logging.getLogger(__name__)

_CHANGED_ROWS = re.compile(r'Changed:\s*(\d+)')


def _changed_rows(result: Any) -> int | None:
    """Parse the changed-row count from the server's UPDATE info message.

    The server reports e.g. `Rows matched: 3  Changed: 2  Warnings: 0`.
    """
    message = getattr(result, 'message', None)
    if isinstance(message, bytes):
        message = message.decode('utf-8', 'replace')
    if not message:
        return None
    match = _CHANGED_ROWS.search(message)
    return int(match.group(1)) if match else None


@register_adapter(AdapterKind.MYSQL)
class MySQLAdapter(StatementMethods, DatabaseAdapter):
    """MySQL-specific operations.
    """

    paramstyle = 'format'

    @property
    def kind(self) -> AdapterKind:
        return AdapterKind.MYSQL

    def cursor(self, connection: Any) -> Any:
        return connection.cursor(pymysql.cursors.DictCursor)

    def in_transaction(self, connection: Any) -> bool:
        return bool(connection.server_status & SERVER_STATUS_IN_TRANS)

    def report(self, cursor: Any) -> MutationResult:
        result = getattr(cursor, '_result', None)
        return MutationResult.from_cursor(
            cursor,
            changed_rows=_changed_rows(result),
            warning_count=getattr(result, 'warning_count', None),
        )

    def begin(self, connection: Any) -> None:
        connection.begin()

    def commit(self, connection: Any) -> None:
        connection.commit()

    def rollback(self, connection: Any) -> None:
        connection.rollback()

    def run_in_transaction(self, connection: Any, unit: Any) -> Any:
        """Run `unit()` between BEGIN and COMMIT.

        Any failure, including one from COMMIT, rolls back and is re-raised.
        A failing ROLLBACK replaces the original failure.
        """
        connection.begin()
        try:
            result = unit()
            connection.commit()
        except BaseException:
            logger.warning('Rolling back the current transaction')
            connection.rollback()
            raise
        return result
