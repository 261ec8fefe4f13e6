"""
Adapter registry for driver-specific query execution.

Importing this package registers every bundled adapter; lookups are by exact
`AdapterKind` and never load modules dynamically.
"""
from functools import lru_cache

from dbwrap.adapters.base import _ADAPTER_REGISTRY
from dbwrap.adapters.base import AdapterKind as AdapterKind
from dbwrap.adapters.base import DatabaseAdapter as DatabaseAdapter
from dbwrap.adapters.base import register_adapter as register_adapter
from dbwrap.adapters.mysql import MySQLAdapter as MySQLAdapter
from dbwrap.adapters.postgres import PostgresAdapter as PostgresAdapter
from dbwrap.adapters.sqlalchemy import SQLAlchemyAdapter as SQLAlchemyAdapter
from dbwrap.adapters.sqlite import SQLiteAdapter as SQLiteAdapter
from dbwrap.exceptions import ConfigurationError


def get_available_adapters() -> list[str]:
    """Return list of registered adapter kinds."""
    return [str(kind) for kind in AdapterKind if kind in _ADAPTER_REGISTRY]


def _resolve_kind(kind: AdapterKind | str) -> AdapterKind:
    """Raise ConfigurationError if no adapter is registered for kind."""
    try:
        resolved = AdapterKind(kind)
    except ValueError:
        resolved = None
    if resolved is None or resolved not in _ADAPTER_REGISTRY:
        raise ConfigurationError(
            f'Adapter "{kind}" not found or not implemented. '
            f'Available adapters: {", ".join(get_available_adapters())}')
    return resolved


def is_supported_adapter(kind: AdapterKind | str) -> bool:
    """Check if an adapter is registered for kind."""
    try:
        _resolve_kind(kind)
    except ConfigurationError:
        return False
    return True


def get_adapter_class(kind: AdapterKind | str) -> type[DatabaseAdapter]:
    """Get the adapter class for a kind without instantiating."""
    return _ADAPTER_REGISTRY[_resolve_kind(kind)]


@lru_cache(maxsize=8)
def _get_adapter(cls: type[DatabaseAdapter]) -> DatabaseAdapter:
    """Get cached adapter instance for an adapter class."""
    return cls()


def get_adapter(kind: AdapterKind | str) -> DatabaseAdapter:
    """Get the adapter instance registered for a kind.

    Adapters hold no per-connection state, so one instance per class is
    shared. Re-registering a kind takes effect on the next lookup.
    """
    return _get_adapter(get_adapter_class(kind))


__all__ = [
    'AdapterKind',
    'DatabaseAdapter',
    'register_adapter',
    'get_adapter',
    'get_adapter_class',
    'get_available_adapters',
    'is_supported_adapter',
    'MySQLAdapter',
    'PostgresAdapter',
    'SQLAlchemyAdapter',
    'SQLiteAdapter',
]
