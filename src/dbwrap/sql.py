"""
Placeholder detection, counting and rewriting.

Three placeholder conventions are recognized, checked in this order, and the
first one present in the SQL decides the style for the whole statement:

    ?        qmark     every occurrence is one parameter
    $1, $2   numbered  distinct numbers are parameters, repeats reuse them
    :name    named     every occurrence is one parameter

There is no lexical awareness: placeholders inside string literals or
comments are still placeholders.

Main entry points:
- `count_placeholders(sql)` - Number of parameters the SQL expects
- `convert_placeholders(sql, params, paramstyle)` - Rewrite for a DBAPI driver
"""
import re
from enum import Enum
from typing import Any

__all__ = [
    'PlaceholderStyle',
    'detect_placeholder_style',
    'count_placeholders',
    'convert_placeholders',
    'PARAMSTYLES',
]

# =============================================================================
# Patterns
# =============================================================================

_QMARK = re.compile(r'\?')
_NUMBERED = re.compile(r'\$(\d+)')
_NAMED = re.compile(r':([A-Za-z0-9_]+)')

PARAMSTYLES = ('qmark', 'format', 'named')


class PlaceholderStyle(Enum):
    """Placeholder convention detected in a statement."""
    QMARK = '?'
    NUMBERED = '$n'
    NAMED = ':name'


# =============================================================================
# Counting
# =============================================================================

def detect_placeholder_style(sql: str) -> PlaceholderStyle | None:
    """Return the first placeholder style present in the SQL, or None.
    """
    if _QMARK.search(sql):
        return PlaceholderStyle.QMARK
    if _NUMBERED.search(sql):
        return PlaceholderStyle.NUMBERED
    if _NAMED.search(sql):
        return PlaceholderStyle.NAMED
    return None


def count_placeholders(sql: str) -> int:
    """Count the parameters a SQL statement expects.

    Styles are never mixed: `?` wins over `$n`, which wins over `:name`.

    Examples
        >>> count_placeholders('SELECT * FROM users WHERE id = ? AND role = ?')
        2
        >>> count_placeholders('SELECT * FROM users WHERE id = $1 OR parent_id = $1')
        1
        >>> count_placeholders('SELECT * FROM users WHERE a = :a OR b = :a')
        2
        >>> count_placeholders('SELECT * FROM users')
        0
    """
    style = detect_placeholder_style(sql)
    if style is PlaceholderStyle.QMARK:
        return len(_QMARK.findall(sql))
    if style is PlaceholderStyle.NUMBERED:
        return len({int(number) for number in _NUMBERED.findall(sql)})
    if style is PlaceholderStyle.NAMED:
        return len(_NAMED.findall(sql))
    return 0


# =============================================================================
# Rewriting
# =============================================================================

def _placeholder_pattern(style: PlaceholderStyle) -> re.Pattern:
    return {
        PlaceholderStyle.QMARK: _QMARK,
        PlaceholderStyle.NUMBERED: _NUMBERED,
        PlaceholderStyle.NAMED: _NAMED,
    }[style]


def _bound_value(style: PlaceholderStyle, match: re.Match, position: int,
                 args: list[Any]) -> Any:
    """Pick the parameter a placeholder occurrence binds to.

    Numbered placeholders bind `args[n - 1]`; the other styles bind in
    occurrence order.
    """
    if style is PlaceholderStyle.NUMBERED:
        number = int(match.group(1))
        if not 1 <= number <= len(args):
            raise ValueError(f'Placeholder ${number} has no matching parameter ({len(args)} given)')
        return args[number - 1]
    return args[position]


def convert_placeholders(sql: str, params: Any,
                         paramstyle: str = 'qmark') -> tuple[str, list[Any] | dict[str, Any] | None]:
    """Rewrite placeholders into a DBAPI paramstyle and bind the parameters.

    Parameters
        sql: SQL using `?`, `$n` or `:name` placeholders
        params: ordered parameter sequence (already validated)
        paramstyle: `qmark` (sqlite3), `format` (pymysql, psycopg) or
            `named` (SQLAlchemy text())

    Returns
        Tuple of rewritten SQL and the parameters to hand the driver. When
        nothing is bound the SQL is returned untouched with params None.
    """
    if paramstyle not in PARAMSTYLES:
        raise ValueError(f'Unsupported paramstyle: {paramstyle}. Available: {list(PARAMSTYLES)}')

    args = list(params or ())
    style = detect_placeholder_style(sql)
    if not args or style is None:
        return sql, args or None

    if paramstyle == 'qmark' and style is PlaceholderStyle.QMARK:
        return sql, args

    bound: list[Any] = []

    def replace(match: re.Match) -> str:
        position = len(bound)
        bound.append(_bound_value(style, match, position, args))
        if paramstyle == 'qmark':
            return '?'
        if paramstyle == 'format':
            return '%s'
        return f':p{position}'

    text = sql.replace('%', '%%') if paramstyle == 'format' else sql
    text = _placeholder_pattern(style).sub(replace, text)

    if paramstyle == 'named':
        return text, {f'p{i}': value for i, value in enumerate(bound)}
    return text, bound
