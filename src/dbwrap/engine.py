"""
Query engine: validate, delegate to the adapter, classify failures.

The engine is the only place that calls an adapter. Every operation has the
same shape:

    validate parameters -> call adapter method -> classify any failure

Convenience operations (fetch_one, fetch_all, mutate) call the adapter's
specialized method when it has one and otherwise fall back to `run` and
post-process the raw result, so both paths return the same shapes.
"""
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from dbwrap.capabilities import Capabilities
from dbwrap.classifier import ErrorClassifier
from dbwrap.exceptions import DatabaseError
from dbwrap.transaction import TransactionCoordinator
from dbwrap.utils import as_rows, first_row
from dbwrap.validation import check_params, normalize_params

__all__ = ['QueryEngine']

logger = logging.getLogger(__name__)

T = TypeVar('T')


class QueryEngine:
    """Runs statements for one connection through one adapter.
    """

    def __init__(self, connection: Any, adapter: Any,
                 classifier: ErrorClassifier | None = None,
                 capabilities: Capabilities | None = None) -> None:
        self.connection = connection
        self.adapter = adapter
        self.classifier = classifier or ErrorClassifier()
        self.capabilities = capabilities or Capabilities.probe(adapter)
        self.coordinator = TransactionCoordinator(self)

    def __repr__(self) -> str:
        return f'QueryEngine(adapter={type(self.adapter).__name__}, capabilities={self.capabilities.names()})'

    def validate(self, sql: str, params: Any) -> list[Any]:
        """Validate parameters, reporting and raising any failure.
        """
        failure = check_params(sql, params)
        if failure is not None:
            raise self.classifier.report(failure)
        return normalize_params(params)

    def _call(self, method: Callable[..., T], sql: str, params: Any) -> T:
        """Validate, call an adapter statement method and classify its failures.
        """
        args = self.validate(sql, params)
        try:
            result = method(self.connection, sql, args)
        except DatabaseError:
            raise
        except Exception as exc:
            raise self.classifier.classify(exc, sql, args) from exc
        logger.debug(f"Executed {getattr(method, '__name__', 'adapter call')} with {len(args)} parameters")
        return result

    def _call_bare(self, method: Callable[..., T], label: str) -> T:
        """Call a connection-level adapter method (begin/commit/rollback)."""
        try:
            return method(self.connection)
        except DatabaseError:
            raise
        except Exception as exc:
            raise self.classifier.classify(exc, label) from exc

    def run(self, sql: str, params: Any = None) -> Any:
        """Execute a statement and return the adapter's raw result unchanged.
        """
        return self._call(self.capabilities.execute_raw, sql, params)

    def fetch_one(self, sql: str, params: Any = None) -> dict[str, Any] | None:
        """Return the first row, or None when the statement yields no rows.
        """
        if self.capabilities.fetch_one is not None:
            return self._call(self.capabilities.fetch_one, sql, params)
        return first_row(self.run(sql, params))

    def fetch_all(self, sql: str, params: Any = None) -> list[dict[str, Any]]:
        """Return all rows as a list, empty when there are none.
        """
        if self.capabilities.fetch_all is not None:
            return as_rows(self._call(self.capabilities.fetch_all, sql, params))
        return as_rows(self.run(sql, params))

    def mutate(self, sql: str, params: Any = None) -> Any:
        """Execute an INSERT/UPDATE/DELETE and return the adapter's report.
        """
        if self.capabilities.mutate is not None:
            return self._call(self.capabilities.mutate, sql, params)
        return self.run(sql, params)

    def begin(self) -> None:
        if self.capabilities.begin is None:
            raise AttributeError(f'{type(self.adapter).__name__} does not support begin')
        self._call_bare(self.capabilities.begin, 'BEGIN')

    def commit(self) -> None:
        if self.capabilities.commit is None:
            raise AttributeError(f'{type(self.adapter).__name__} does not support commit')
        self._call_bare(self.capabilities.commit, 'COMMIT')

    def rollback(self) -> None:
        if self.capabilities.rollback is None:
            raise AttributeError(f'{type(self.adapter).__name__} does not support rollback')
        self._call_bare(self.capabilities.rollback, 'ROLLBACK')

    def run_in_transaction(self, unit: Callable[[], T]) -> T:
        """Run a unit of work inside one begin/commit/rollback bracket.

        An adapter with its own `run_in_transaction` owns the bracket. Adapter
        failures are classified; the unit's own exception passes through
        as raised. Transactions are flat on both paths: starting one inside
        a unit of work raises RuntimeError.
        """
        native = self.capabilities.run_in_transaction
        if native is None:
            return self.coordinator.run(unit)
        if self.coordinator.active:
            raise RuntimeError('Nested transactions are not supported')

        raised: list[BaseException] = []

        def tracked() -> T:
            try:
                return unit()
            except BaseException as exc:
                raised.append(exc)
                raise

        self.coordinator.active = True
        try:
            return native(self.connection, tracked)
        except DatabaseError:
            raise
        except Exception as exc:
            if raised and exc is raised[-1]:
                raise
            raise self.classifier.classify(exc, 'TRANSACTION') from exc
        finally:
            self.coordinator.active = False
