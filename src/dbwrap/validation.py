"""
Parameter validation performed before any statement reaches an adapter.
"""
from typing import Any

from dbwrap.exceptions import INVALID_PARAMETERS_MESSAGE, ErrorCategory
from dbwrap.exceptions import ValidationError
from dbwrap.sql import count_placeholders
from dbwrap.utils import serialize_params

__all__ = [
    'normalize_params',
    'check_params',
    'validate_params',
]


def normalize_params(params: Any) -> list[Any]:
    """Normalize parameters into a list.

    A list or tuple is used as-is, None is an empty list and any other
    value (strings included) is a single parameter.
    """
    if params is None:
        return []
    if isinstance(params, (list, tuple)):
        return list(params)
    return [params]


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == '')


def check_params(sql: str, params: Any) -> ValidationError | None:
    """Check parameters against the statement without raising.

    Returns the validation failure, or None if the parameters are usable.
    """
    args = normalize_params(params)
    expected = count_placeholders(sql)

    if expected != len(args):
        details = (f'Placeholder count mismatch. Expected {expected} parameters '
                   f'but got {len(args)}. SQL: {sql}, Params: {serialize_params(args)}')
        return ValidationError(INVALID_PARAMETERS_MESSAGE, details, ErrorCategory.VALIDATION_MISMATCH)

    for index, value in enumerate(args):
        if _is_empty(value):
            details = (f'Parameter at index {index} is empty/null. '
                       f'SQL: {sql}, Params: {serialize_params(args)}')
            return ValidationError(INVALID_PARAMETERS_MESSAGE, details, ErrorCategory.VALIDATION_EMPTY)

    return None


def validate_params(sql: str, params: Any) -> list[Any]:
    """Validate parameters and return them normalized.

    Raises ValidationError on a placeholder count mismatch or on the first
    None or empty-string parameter. The error is raised without being
    reported; `QueryEngine.validate` is the path that emits its diagnostic
    record.
    """
    failure = check_params(sql, params)
    if failure is not None:
        raise failure
    return normalize_params(params)
