"""
Integration tests for the sqlite adapter against real sqlite3 connections.
"""
import pathlib
import sqlite3

import dbwrap
import pytest
from dbwrap import DatabaseError, ErrorCategory, MutationResult, ValidationError

from tests.fixtures.sqlite import CREATE_USERS


@pytest.fixture
def file_db(tmp_path):
    """File-based SQLite database, for checking what other connections see"""
    path = tmp_path / 'app.db'
    conn = sqlite3.connect(path)
    conn.execute(CREATE_USERS)
    conn.execute("INSERT INTO users (name, role) VALUES ('Alice', 'admin')")
    conn.commit()

    yield dbwrap.wrap(conn, 'sqlite'), path
    conn.close()


def count_users(path: pathlib.Path) -> int:
    other = sqlite3.connect(path)
    try:
        return other.execute('SELECT COUNT(*) FROM users').fetchall()[0][0]
    finally:
        other.close()


class TestQueries:
    """Test class for the four base operations."""

    def test_get_one(self, sqlite_db):
        user = sqlite_db.get_one('SELECT id, name, role FROM users WHERE name = ?', ['Alice'])
        assert user == {'id': 1, 'name': 'Alice', 'role': 'admin'}

    def test_get_one_no_rows(self, sqlite_db):
        assert sqlite_db.get_one('SELECT * FROM users WHERE id = ?', [99]) is None

    def test_get(self, sqlite_db):
        users = sqlite_db.get('SELECT name FROM users WHERE role = ? ORDER BY id', ['user'])
        assert users == [{'name': 'Bob'}, {'name': 'Charlie'}]

    def test_get_no_rows(self, sqlite_db):
        assert sqlite_db.get('SELECT * FROM users WHERE role = ?', ['guest']) == []

    def test_scalar_param(self, sqlite_db):
        """Test a single value is bound as a one-element list."""
        assert sqlite_db.get_one('SELECT name FROM users WHERE id = ?', 2) == {'name': 'Bob'}

    def test_numbered_placeholders(self, sqlite_db):
        rows = sqlite_db.get('SELECT name FROM users WHERE role = $1 OR name = $1', ['admin'])
        assert rows == [{'name': 'Alice'}]

    def test_named_placeholders(self, sqlite_db):
        rows = sqlite_db.get('SELECT name FROM users WHERE role = :role AND id > :id', ['user', 2])
        assert rows == [{'name': 'Charlie'}]

    def test_falsy_params_allowed(self, sqlite_db):
        """Test 0 and False are valid parameter values."""
        assert sqlite_db.get('SELECT * FROM users WHERE id = ? AND ?', [0, False]) == []

    def test_exec_insert(self, sqlite_db):
        report = sqlite_db.exec('INSERT INTO users (name, role) VALUES (?, ?)', ['Dana', 'user'])
        assert report == MutationResult(insert_id=4, affected_rows=1)

    def test_exec_update(self, sqlite_db):
        report = sqlite_db.exec('UPDATE users SET role = ? WHERE role = ?', ['member', 'user'])
        assert report.affected_rows == 2

    def test_query_raw(self, sqlite_db):
        assert sqlite_db.query('SELECT COUNT(*) AS n FROM users') == [{'n': 3}]
        report = sqlite_db.query('DELETE FROM users WHERE name = ?', ['Charlie'])
        assert isinstance(report, MutationResult)
        assert report.affected_rows == 1

    def test_like_percent(self, sqlite_db):
        rows = sqlite_db.get("SELECT name FROM users WHERE name LIKE 'A%' AND role = ?", ['admin'])
        assert rows == [{'name': 'Alice'}]

    def test_exec_committed(self, file_db):
        """Test a statement outside a transaction is visible to other connections."""
        db, path = file_db
        db.exec('INSERT INTO users (name, role) VALUES (?, ?)', ['Bob', 'user'])
        assert count_users(path) == 2


class TestErrors:
    """Test class for classification of real sqlite3 errors."""

    def test_validation_mismatch(self, sqlite_db, diagnostics):
        with pytest.raises(ValidationError) as exc_info:
            sqlite_db.get('SELECT * FROM users WHERE id = ? AND role = ?', [1])

        err = exc_info.value
        assert err.category == ErrorCategory.VALIDATION_MISMATCH
        assert str(err) == 'Invalid request parameters'
        assert 'Expected 2 parameters but got 1' in err.details
        assert len(diagnostics()) == 1

    def test_validation_empty(self, sqlite_db):
        with pytest.raises(ValidationError) as exc_info:
            sqlite_db.exec('UPDATE users SET role = ? WHERE id = ?', [None, 1])
        assert exc_info.value.category == ErrorCategory.VALIDATION_EMPTY
        assert sqlite_db.get_one('SELECT role FROM users WHERE id = 1') == {'role': 'admin'}

    def test_duplicate(self, sqlite_db, diagnostics):
        with pytest.raises(DatabaseError) as exc_info:
            sqlite_db.exec('INSERT INTO users (name, role) VALUES (?, ?)', ['Alice', 'user'])

        err = exc_info.value
        assert err.category == ErrorCategory.DB_DUPLICATE
        assert err.user_message == 'This record already exists'
        assert 'Error code: SQLITE_CONSTRAINT_UNIQUE' in err.details
        assert isinstance(err.__cause__, sqlite3.IntegrityError)
        assert diagnostics()[0].diagnostic is err.record

    def test_foreign_key(self, sqlite_db):
        with pytest.raises(DatabaseError) as exc_info:
            sqlite_db.exec('INSERT INTO posts (user_id, title) VALUES (?, ?)', [99, 'Hello'])
        assert exc_info.value.category == ErrorCategory.DB_FOREIGN_KEY

    def test_no_such_table(self, sqlite_db):
        with pytest.raises(DatabaseError) as exc_info:
            sqlite_db.get('SELECT * FROM accounts')
        assert exc_info.value.category == ErrorCategory.DB_TABLE_NOT_FOUND
        assert exc_info.value.user_message == 'Unable to process request'

    def test_no_such_column(self, sqlite_db):
        with pytest.raises(DatabaseError) as exc_info:
            sqlite_db.get_one('SELECT email FROM users WHERE id = ?', [1])
        assert exc_info.value.category == ErrorCategory.DB_FIELD_ERROR

    def test_failed_statement_not_left_open(self, sqlite_db, sqlite_conn):
        with pytest.raises(DatabaseError):
            sqlite_db.exec('INSERT INTO users (name, role) VALUES (?, ?)', ['Bob', 'user'])
        assert not sqlite_conn.in_transaction


class TestTransactions:
    """Test class for the generic transaction bracket on sqlite."""

    def test_commit(self, file_db):
        db, path = file_db

        def unit():
            db.exec('INSERT INTO users (name, role) VALUES (?, ?)', ['Bob', 'user'])
            db.exec('INSERT INTO users (name, role) VALUES (?, ?)', ['Carol', 'user'])
            return db.get('SELECT name FROM users ORDER BY id')

        assert db.transaction(unit) == [{'name': 'Alice'}, {'name': 'Bob'}, {'name': 'Carol'}]
        assert count_users(path) == 3

    def test_uncommitted_until_end(self, file_db):
        db, path = file_db
        seen = []

        def unit():
            db.exec('INSERT INTO users (name, role) VALUES (?, ?)', ['Bob', 'user'])
            seen.append(count_users(path))

        db.transaction(unit)
        assert seen == [1]
        assert count_users(path) == 2

    def test_rollback_on_error(self, sqlite_db):
        def unit():
            sqlite_db.exec('UPDATE users SET role = ? WHERE name = ?', ['admin', 'Bob'])
            sqlite_db.exec('INSERT INTO users (name, role) VALUES (?, ?)', ['Alice', 'user'])

        with pytest.raises(DatabaseError) as exc_info:
            sqlite_db.transaction(unit)

        assert exc_info.value.category == ErrorCategory.DB_DUPLICATE
        assert sqlite_db.get_one('SELECT role FROM users WHERE name = ?', ['Bob']) == {'role': 'user'}
        assert not sqlite_db.connection.in_transaction

    def test_rollback_on_application_error(self, sqlite_db):
        def unit():
            sqlite_db.exec('DELETE FROM users')
            raise LookupError('abort')

        with pytest.raises(LookupError):
            sqlite_db.transaction(unit)
        assert len(sqlite_db.get('SELECT * FROM users')) == 3

    def test_manual_bracket(self, sqlite_db):
        sqlite_db.begin_transaction()
        sqlite_db.exec('DELETE FROM users WHERE name = ?', ['Charlie'])
        sqlite_db.rollback()
        assert len(sqlite_db.get('SELECT * FROM users')) == 3

        sqlite_db.begin_transaction()
        sqlite_db.exec('DELETE FROM users WHERE name = ?', ['Charlie'])
        sqlite_db.commit()
        assert len(sqlite_db.get('SELECT * FROM users')) == 2

    def test_autocommit_connection(self):
        """Test explicit BEGIN/ROLLBACK on a connection without implicit transactions."""
        conn = sqlite3.connect(':memory:', isolation_level=None)
        conn.execute(CREATE_USERS)
        db = dbwrap.wrap(conn, 'sqlite')

        def unit():
            db.exec('INSERT INTO users (name, role) VALUES (?, ?)', ['Alice', 'admin'])
            raise LookupError('abort')

        with pytest.raises(LookupError):
            db.transaction(unit)
        assert db.get('SELECT * FROM users') == []
        conn.close()
