"""Low-level result and parameter helpers with no internal dependencies.

These helpers work on plain Python values and import nothing from other
dbwrap modules, making them safe to use from anywhere in the package.
"""
import json
from collections.abc import Mapping
from typing import Any

__all__ = [
    'serialize_params',
    'as_rows',
    'first_row',
]


def serialize_params(params: Any) -> str:
    """Serialize parameters for diagnostic output.

    Values JSON cannot represent (dates, decimals, bytes) fall back to str().
    """
    if isinstance(params, tuple):
        params = list(params)
    try:
        return json.dumps(params, default=str)
    except (TypeError, ValueError):
        # circular containers, non-string mapping keys
        return repr(params)


def as_rows(result: Any) -> list[Any]:
    """Coerce a raw result into a list of rows.

    Anything that is not a list or tuple of rows becomes an empty list.
    """
    if isinstance(result, (list, tuple)):
        return list(result)
    return []


def first_row(result: Any) -> Mapping[str, Any] | None:
    """Return the first row of a raw result or None when there is none.
    """
    rows = as_rows(result)
    if rows:
        return rows[0]
    return None
