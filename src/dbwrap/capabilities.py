"""
Capability descriptor for adapters.

Optional adapter methods are looked up once, when a database is wrapped,
and stored in a frozen record. Dispatch consults the record, never the
adapter, so capabilities stay fixed for the lifetime of the wrapper.
"""
from collections.abc import Callable
from dataclasses import dataclass, fields
from typing import Any

__all__ = ['Capabilities', 'OPTIONAL_CAPABILITIES']

OPTIONAL_CAPABILITIES = (
    'fetch_one',
    'fetch_all',
    'mutate',
    'begin',
    'commit',
    'rollback',
    'run_in_transaction',
)


@dataclass(frozen=True)
class Capabilities:
    """Resolved adapter methods, None where the adapter lacks one.
    """
    execute_raw: Callable[..., Any]
    fetch_one: Callable[..., Any] | None = None
    fetch_all: Callable[..., Any] | None = None
    mutate: Callable[..., Any] | None = None
    begin: Callable[..., Any] | None = None
    commit: Callable[..., Any] | None = None
    rollback: Callable[..., Any] | None = None
    run_in_transaction: Callable[..., Any] | None = None

    @classmethod
    def probe(cls, adapter: Any) -> 'Capabilities':
        """Build the descriptor for an adapter object or module.

        Raises TypeError if the required `execute_raw` is missing.
        """
        execute_raw = getattr(adapter, 'execute_raw', None)
        if not callable(execute_raw):
            raise TypeError(f'{adapter!r} does not implement execute_raw(connection, sql, params)')

        found = {}
        for name in OPTIONAL_CAPABILITIES:
            method = getattr(adapter, name, None)
            found[name] = method if callable(method) else None
        return cls(execute_raw=execute_raw, **found)

    def has(self, name: str) -> bool:
        return getattr(self, name, None) is not None

    @property
    def supports_transactions(self) -> bool:
        """True if a transaction bracket can be run, natively or generically."""
        return self.has('run_in_transaction') or all(
            self.has(name) for name in ('begin', 'commit', 'rollback'))

    def names(self) -> list[str]:
        """Names of the optional capabilities that are present."""
        return [f.name for f in fields(self) if f.name in OPTIONAL_CAPABILITIES and self.has(f.name)]
