"""
Database-engine-agnostic query middleware.

Wrap a driver connection once and every call through it is:
- validated: placeholder count and empty parameters are checked before the
  statement reaches the database
- normalized: get() always returns a list of row dicts, get_one() a row dict
  or None
- classified: driver failures surface as DatabaseError with a display-safe
  message, diagnostic details and a category tag

    db = dbwrap.wrap(sqlite3.connect('app.db'), 'sqlite')
    user = db.get_one('SELECT * FROM users WHERE id = ?', [1])
"""
__version__ = '0.1.0'

from dbwrap.adapters import AdapterKind, DatabaseAdapter, get_adapter
from dbwrap.adapters import get_available_adapters, register_adapter
from dbwrap.capabilities import Capabilities
from dbwrap.classifier import DEFAULT_RULES, ClassificationRule, ErrorClassifier
from dbwrap.connection import WrappedDatabase, wrap
from dbwrap.engine import QueryEngine
from dbwrap.exceptions import ConfigurationError, DatabaseError, DiagnosticRecord
from dbwrap.exceptions import ErrorCategory, ValidationError
from dbwrap.options import WrapOptions
from dbwrap.sql import count_placeholders
from dbwrap.transaction import TransactionCoordinator
from dbwrap.types import MutationResult

__all__ = [
    'wrap',
    'WrappedDatabase',
    'WrapOptions',
    'QueryEngine',
    'TransactionCoordinator',
    'Capabilities',
    'AdapterKind',
    'DatabaseAdapter',
    'register_adapter',
    'get_adapter',
    'get_available_adapters',
    'ErrorClassifier',
    'ClassificationRule',
    'DEFAULT_RULES',
    'count_placeholders',
    'MutationResult',
    'ErrorCategory',
    'DiagnosticRecord',
    'DatabaseError',
    'ValidationError',
    'ConfigurationError',
]
