"""
Classification of raw driver errors into the dbwrap error taxonomy.

A fixed, ordered rule table maps engine-reported signals (error codes and
message fragments) to a category and a display-safe message. The first rule
that matches wins; anything unmatched is DB_UNKNOWN.

Codes are compared as strings, so MySQL errnos (1062), SQLSTATEs (23505),
sqlite3 error names (SQLITE_CONSTRAINT_UNIQUE) and socket errno names
(ECONNREFUSED) all live in one table.
"""
import errno
import logging
import socket
import traceback
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from dbwrap.exceptions import DatabaseError, ErrorCategory
from dbwrap.utils import serialize_params

__all__ = [
    'ClassificationRule',
    'DEFAULT_RULES',
    'UNKNOWN_MESSAGE',
    'ErrorClassifier',
    'extract_error_code',
    'unwrap_driver_error',
]

logger = logging.getLogger(__name__)

UNKNOWN_MESSAGE = 'Something went wrong. Please try again.'
NOT_AVAILABLE = 'N/A'


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    """One row of the classification table."""
    category: ErrorCategory
    user_message: str
    codes: frozenset[str] = frozenset()
    fragments: tuple[str, ...] = ()

    def matches(self, code: str | None, message: str) -> bool:
        if code is not None and code in self.codes:
            return True
        return any(fragment in message for fragment in self.fragments)


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        ErrorCategory.DB_DUPLICATE, 'This record already exists',
        codes=frozenset({
            'ER_DUP_ENTRY', '1062',                     # MySQL
            'SQLITE_CONSTRAINT',                        # sqlite
            'SQLITE_CONSTRAINT_UNIQUE',
            'SQLITE_CONSTRAINT_PRIMARYKEY',
            '23505',                                    # unique_violation
        }),
        fragments=('UNIQUE constraint',),
    ),
    ClassificationRule(
        ErrorCategory.DB_TABLE_NOT_FOUND, 'Unable to process request',
        codes=frozenset({'ER_NO_SUCH_TABLE', '1146', '42P01'}),
        fragments=('no such table',),
    ),
    ClassificationRule(
        ErrorCategory.DB_FIELD_ERROR, 'Invalid request parameters',
        codes=frozenset({'ER_BAD_FIELD_ERROR', '1054', '42703'}),
        fragments=('no such column',),
    ),
    ClassificationRule(
        ErrorCategory.DB_FOREIGN_KEY, 'Cannot perform this operation',
        codes=frozenset({
            '23503',                                    # foreign_key_violation
            'ER_NO_REFERENCED_ROW_2', 'ER_ROW_IS_REFERENCED_2', '1451', '1452',
            'SQLITE_CONSTRAINT_FOREIGNKEY',
        }),
        fragments=('FOREIGN KEY constraint',),
    ),
    ClassificationRule(
        ErrorCategory.DB_CONNECTION, 'Unable to connect to database',
        codes=frozenset({
            'ECONNREFUSED', 'ENOTFOUND', 'ETIMEDOUT',
            '2003', '2006', '2013',                     # MySQL client errors
            '08001', '08003', '08006',                  # connection_exception class
        }),
        fragments=('connect', 'connection'),
    ),
    ClassificationRule(
        ErrorCategory.DB_QUERY, 'Unable to process request',
        codes=frozenset({'1064', '42601'}),
        fragments=('syntax', 'SQL'),
    ),
)


def unwrap_driver_error(exc: BaseException) -> BaseException:
    """Return the driver exception behind a wrapper such as SQLAlchemy's DBAPIError.
    """
    orig = getattr(exc, 'orig', None)
    if isinstance(orig, BaseException):
        return orig
    return exc


def extract_error_code(exc: BaseException) -> str | None:
    """Extract the engine-reported error code from a driver exception.

    Checks, in order: an explicit `code` attribute, psycopg `sqlstate` (or
    psycopg2 `pgcode`), sqlite3 `sqlite_errorname`, OSError errno (as its
    symbolic name) and an integer first argument (pymysql/MySQLdb errno).
    """
    exc = unwrap_driver_error(exc)

    for attr in ('code', 'sqlstate', 'pgcode', 'sqlite_errorname'):
        value = getattr(exc, attr, None)
        if isinstance(value, (str, int)) and not isinstance(value, bool) and value != '':
            return str(value)

    if isinstance(exc, socket.gaierror):
        return 'ENOTFOUND'
    if isinstance(exc, OSError):
        if exc.errno is not None:
            return errno.errorcode.get(exc.errno, str(exc.errno))
        if isinstance(exc, TimeoutError):
            return 'ETIMEDOUT'

    if exc.args and isinstance(exc.args[0], int) and not isinstance(exc.args[0], bool):
        return str(exc.args[0])

    return None


def _error_message(exc: BaseException) -> str:
    """Message text of the driver error, without the errno prefix pymysql puts in args."""
    exc = unwrap_driver_error(exc)
    if len(exc.args) == 2 and isinstance(exc.args[0], int) and isinstance(exc.args[1], str):
        return exc.args[1]
    return str(exc)


def _format_stack(exc: BaseException) -> str:
    if exc.__traceback__ is None:
        return NOT_AVAILABLE
    return ''.join(traceback.format_exception(exc)).rstrip()


class ErrorClassifier:
    """Turns raw driver errors into DatabaseError and reports diagnostics.

    The classifier is also the diagnostic side channel: `report()` hands the
    error's DiagnosticRecord to the injected logger. The engine calls it for
    every error it raises, classified or validation, exactly once.
    """

    def __init__(self, rules: Iterable[ClassificationRule] | None = None,
                 logger: logging.Logger | None = None) -> None:
        self.rules = tuple(DEFAULT_RULES if rules is None else rules)
        self.logger = logger or logging.getLogger(__name__)

    def match(self, code: str | None, message: str) -> tuple[ErrorCategory, str]:
        """Return (category, user message) for a code and message.
        """
        for rule in self.rules:
            if rule.matches(code, message):
                return rule.category, rule.user_message
        return ErrorCategory.DB_UNKNOWN, UNKNOWN_MESSAGE

    def classify(self, exc: BaseException, sql: str | None = None,
                 params: Any = None) -> DatabaseError:
        """Classify a raw error. Already classified errors are returned unchanged.

        The new error is reported before it is returned.
        """
        if isinstance(exc, DatabaseError):
            return exc

        code = extract_error_code(exc)
        message = _error_message(exc)
        category, user_message = self.match(code, message)

        details = '\n'.join([
            f'Original error: {message}',
            f'Stack: {_format_stack(exc)}',
            f'SQL: {sql if sql is not None else NOT_AVAILABLE}',
            f'Params: {serialize_params(params)}',
            f'Error code: {code or NOT_AVAILABLE}',
        ])
        return self.report(DatabaseError(user_message, details, category))

    def report(self, error: DatabaseError) -> DatabaseError:
        """Emit the diagnostic record of an error and return the error.
        """
        record = error.record
        self.logger.error(record.format(), extra={'diagnostic': record})
        return error
