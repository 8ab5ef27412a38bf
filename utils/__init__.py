"""
==========================
Utility Functions Package.
==========================

Database connectivity helpers shared by the loader and the CLI.

Modules:
    database_utils: PostgreSQL connectivity and availability checks
"""

__version__ = "0.1.0"
__all__ = [
    'DatabaseConnectionError',
    'check_database_available',
    'create_sqlalchemy_engine',
    'verify_connection',
    'wait_for_database',
]

from .database_utils import (
    DatabaseConnectionError,
    check_database_available,
    create_sqlalchemy_engine,
    verify_connection,
    wait_for_database,
)
