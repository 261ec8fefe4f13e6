"""
Error taxonomy for classified database failures.

Every failure the query engine surfaces is a `DatabaseError` carrying three
fields: a display-safe `user_message`, a verbose `details` string meant only
for diagnostics, and a `category` tag callers branch on.
"""
import datetime
from dataclasses import dataclass
from enum import StrEnum

__all__ = [
    'ErrorCategory',
    'DiagnosticRecord',
    'DatabaseError',
    'ValidationError',
    'ConfigurationError',
    'INVALID_PARAMETERS_MESSAGE',
]

INVALID_PARAMETERS_MESSAGE = 'Invalid request parameters'


class ErrorCategory(StrEnum):
    """Closed set of error categories.
    """
    VALIDATION_MISMATCH = 'VALIDATION_MISMATCH'
    VALIDATION_EMPTY = 'VALIDATION_EMPTY'
    DB_DUPLICATE = 'DB_DUPLICATE'
    DB_FOREIGN_KEY = 'DB_FOREIGN_KEY'
    DB_TABLE_NOT_FOUND = 'DB_TABLE_NOT_FOUND'
    DB_FIELD_ERROR = 'DB_FIELD_ERROR'
    DB_CONNECTION = 'DB_CONNECTION'
    DB_QUERY = 'DB_QUERY'
    DB_UNKNOWN = 'DB_UNKNOWN'

    @property
    def is_validation(self) -> bool:
        return self in {ErrorCategory.VALIDATION_MISMATCH, ErrorCategory.VALIDATION_EMPTY}


@dataclass(frozen=True, slots=True)
class DiagnosticRecord:
    """Structured diagnostic emitted when an error is classified."""
    timestamp: datetime.datetime
    category: ErrorCategory
    user_message: str
    details: str

    def format(self) -> str:
        return '\n'.join([
            '=== Database Error Details ===',
            f'Timestamp: {self.timestamp.isoformat()}',
            f'Type: {self.category}',
            f'User Message: {self.user_message}',
            f'Details: {self.details}',
            '==============================',
        ])


class DatabaseError(Exception):
    """Base class for all classified database errors.

    `str(err)` is the user message, so the error can be shown as-is. The
    diagnostic record is captured once, when the error is created.
    """

    def __init__(self, user_message: str, details: str, category: ErrorCategory) -> None:
        super().__init__(user_message)
        self._user_message = user_message
        self._details = details
        self._category = ErrorCategory(category)
        self._record = DiagnosticRecord(
            timestamp=datetime.datetime.now(datetime.UTC),
            category=self._category,
            user_message=user_message,
            details=details,
        )

    @property
    def user_message(self) -> str:
        return self._user_message

    @property
    def details(self) -> str:
        return self._details

    @property
    def category(self) -> ErrorCategory:
        return self._category

    @property
    def record(self) -> DiagnosticRecord:
        return self._record

    @property
    def is_validation(self) -> bool:
        return self._category.is_validation

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._category}: {self._user_message!r})'


class ValidationError(DatabaseError):
    """Parameter-shape failure detected before any database call.
    """


class ConfigurationError(ValueError):
    """Error in how the wrapper was configured or composed.
    """
