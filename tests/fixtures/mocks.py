"""
Fake adapters and driver objects for engine and adapter tests.

Usage:
    def test_fallback(fake_adapter, connection):
        adapter = fake_adapter(result=[{'id': 1}])
        db = WrappedDatabase(connection, adapter)

    def test_native(fake_adapter, connection):
        adapter = fake_adapter(result=[], capabilities=('fetch_one',),
                               results={'fetch_one': {'id': 1}})
"""
import pytest

TRANSACTION_METHODS = ('begin', 'commit', 'rollback')


class DriverError(Exception):
    """Stand-in for a driver exception carrying an engine error code."""

    def __init__(self, message, code=None):
        super().__init__(message)
        if code is not None:
            self.code = code


class FakeAdapter:
    """Adapter with a required execute_raw and only the optional methods asked for.

    Every call is appended to `calls` by name; `received` keeps the SQL and
    params statement methods were called with. `failures` maps a method name
    to the exception it raises.
    """

    def __init__(self, result=None, error=None, capabilities=(), results=None,
                 failures=None):
        self.result = result
        self.results = results or {}
        self.failures = dict(failures or {})
        if error is not None:
            self.failures['execute_raw'] = error
        self.calls = []
        self.received = []
        for name in capabilities:
            setattr(self, name, self._capability(name))

    def _fail(self, name):
        if name in self.failures:
            raise self.failures[name]

    def _statement(self, name, sql, params):
        self.calls.append(name)
        self.received.append((name, sql, params))
        self._fail(name)
        return self.results.get(name, self.result)

    def _capability(self, name):
        if name == 'run_in_transaction':
            def method(connection, unit):
                self.calls.append(name)
                self._fail(name)
                return unit()
        elif name in TRANSACTION_METHODS:
            def method(connection):
                self.calls.append(name)
                self._fail(name)
        else:
            def method(connection, sql, params):
                return self._statement(name, sql, params)
        method.__name__ = name
        return method

    def execute_raw(self, connection, sql, params):
        return self._statement('execute_raw', sql, params)

    def count(self, name):
        return self.calls.count(name)


class FakeCursor:
    """DBAPI cursor returning canned rows or a canned mutation report.

    `on_execute` is called on every execute, before any canned error is raised.
    """

    def __init__(self, rows=None, columns=None, rowcount=-1, lastrowid=None,
                 result=None, error=None):
        self.rows = list(rows or [])
        self.description = [(c, None, None, None, None, None, None) for c in columns] if columns else None
        self.rowcount = rowcount
        self.lastrowid = lastrowid
        self._result = result
        self.error = error
        self.executed = []
        self.closed = False
        self.on_execute = None

    def execute(self, sql, args=None):
        self.executed.append((sql, args))
        if self.on_execute is not None:
            self.on_execute()
        if self.error is not None:
            raise self.error

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return list(self.rows)

    def close(self):
        self.closed = True


class FakeConnection:
    """DBAPI connection handing out one prepared cursor and recording calls."""

    def __init__(self, cursor=None):
        self.next_cursor = cursor or FakeCursor()
        self.calls = []
        self.cursor_args = []

    def cursor(self, *args, **kwargs):
        self.cursor_args.append((args, kwargs))
        return self.next_cursor

    def begin(self):
        self.calls.append('begin')

    def commit(self):
        self.calls.append('commit')

    def rollback(self):
        self.calls.append('rollback')


@pytest.fixture
def fake_adapter():
    """Factory for FakeAdapter instances."""
    return FakeAdapter


@pytest.fixture
def connection():
    """Opaque connection object; fake adapters never look inside it."""
    return object()
