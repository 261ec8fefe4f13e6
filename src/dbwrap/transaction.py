"""
Generic transaction bracket for adapters without their own.
"""
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Self, TypeVar

if TYPE_CHECKING:
    from dbwrap.engine import QueryEngine

__all__ = ['TransactionCoordinator']

logger = logging.getLogger(__name__)

T = TypeVar('T')


class TransactionCoordinator:
    """Runs one unit of work between begin and commit, rolling back on failure.

    Transactions are flat: entering the bracket again while it is active
    raises RuntimeError. If the rollback itself fails, the rollback failure
    is raised and the original failure is only reachable through its
    exception chain.

    Examples
        TransactionCoordinator(engine).run(lambda: engine.mutate(sql, args))

        with TransactionCoordinator(engine):
            engine.mutate('delete from ...', args)
            engine.mutate('update ...', args)
    """

    def __init__(self, engine: 'QueryEngine') -> None:
        self.engine = engine
        self.active = False

    def __enter__(self) -> Self:
        if self.active:
            raise RuntimeError('Nested transactions are not supported')
        self.engine.begin()
        self.active = True
        logger.debug(f'Started transaction for connection {id(self.engine.connection)}')
        return self

    def __exit__(self, exc_type: type | None, value: BaseException | None,
                 traceback: Any | None) -> None:
        try:
            if exc_type is None:
                try:
                    self.engine.commit()
                except Exception:
                    self._rollback()
                    raise
                logger.debug(f'Committed transaction for connection {id(self.engine.connection)}')
            else:
                self._rollback()
        finally:
            self.active = False

    def _rollback(self) -> None:
        logger.warning('Rolling back the current transaction')
        self.engine.rollback()

    def run(self, unit: Callable[[], T]) -> T:
        """Run `unit()` exactly once inside the bracket and return its result.
        """
        with self:
            return unit()
