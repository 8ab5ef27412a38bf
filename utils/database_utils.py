"""
==================================================
Database connectivity utilities for PostgreSQL.
==================================================

Connection helpers and availability checks for the database holding the
staging rows and the destination tables.

Key Features:
    - Connection reporting for the CLI (--check-connection)
    - SQLAlchemy engine creation with pooling
    - Database availability probing via psycopg2
    - Wait-with-retries for servers that are still starting

Example:
    >>> from utils.database_utils import create_sqlalchemy_engine, wait_for_database
    >>>
    >>> wait_for_database(max_retries=5)
    >>> engine = create_sqlalchemy_engine()
"""

import logging
import time
from typing import Optional, Tuple

import psycopg2
from psycopg2 import OperationalError
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine

from core.config import config

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """Exception raised when database connection fails."""
    pass


def create_sqlalchemy_engine(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    url: str = None,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10
) -> Engine:
    """
    Create SQLAlchemy engine with connection pooling.

    Args:
        host: Database hostname
        port: Database port
        user: Database user
        password: Database password
        database: Database name
        url: Full connection URL; overrides the individual settings
        echo: Enable SQL statement logging
        pool_size: Connection pool size
        max_overflow: Maximum overflow connections

    Returns:
        Configured SQLAlchemy Engine

    Example:
        >>> engine = create_sqlalchemy_engine()
        >>> with engine.connect() as conn:
        ...     result = conn.execute(text("SELECT 1"))
    """
    if url is None:
        url = URL.create(
            drivername='postgresql+psycopg2',
            username=user or config.db_user,
            password=password or config.db_password,
            host=host or config.db_host,
            port=port or config.db_port,
            database=database or config.db_name
        )

    return create_engine(
        url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True  # Verify connections before using
    )


def check_database_available(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    timeout: int = 5
) -> bool:
    """
    Check if PostgreSQL database is available.

    Args:
        host: Database hostname (defaults to config)
        port: Database port (defaults to config)
        user: Database user (defaults to config)
        password: Database password (defaults to config)
        database: Database name (defaults to config)
        timeout: Connection timeout in seconds

    Returns:
        True if database is available, False otherwise
    """
    try:
        conn = psycopg2.connect(
            host=host or config.db_host,
            port=port or config.db_port,
            user=user or config.db_user,
            password=password or config.db_password,
            database=database or config.db_name,
            connect_timeout=timeout
        )
        conn.close()
        return True
    except OperationalError as e:
        logger.debug(f"Database not available: {e}")
        return False


def wait_for_database(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    max_retries: int = 10,
    retry_delay: int = 2,
    timeout: int = 5
) -> bool:
    """
    Wait for PostgreSQL database to become available with retries.

    Args:
        host: Database hostname (defaults to config)
        port: Database port (defaults to config)
        user: Database user (defaults to config)
        password: Database password (defaults to config)
        database: Database name (defaults to config)
        max_retries: Maximum number of retry attempts
        retry_delay: Delay between retries in seconds
        timeout: Connection timeout per attempt in seconds

    Returns:
        True once the database answers

    Raises:
        DatabaseConnectionError: If database never becomes available
    """
    host = host or config.db_host
    port = port or config.db_port
    database = database or config.db_name

    logger.info(f"Waiting for PostgreSQL at {host}:{port}/{database}...")

    for attempt in range(1, max_retries + 1):
        if check_database_available(host, port, user, password, database, timeout):
            logger.info(f"✅ PostgreSQL is available (attempt {attempt}/{max_retries})")
            return True

        if attempt < max_retries:
            logger.warning(
                f"⏳ PostgreSQL not available yet (attempt {attempt}/{max_retries}), "
                f"retrying in {retry_delay}s..."
            )
            time.sleep(retry_delay)

    error_msg = (
        f"PostgreSQL at {host}:{port}/{database} did not become available "
        f"after {max_retries} attempts"
    )
    logger.error(f"❌ {error_msg}")
    raise DatabaseConnectionError(error_msg)


def verify_connection() -> Tuple[bool, Optional[str]]:
    """
    Verify the configured database answers and describe the result.

    Returns:
        Tuple of (success, message)
    """
    if not check_database_available():
        return False, (
            f"PostgreSQL at {config.db_host}:{config.db_port}/{config.db_name} "
            f"not available"
        )

    return True, (
        f"Connected to PostgreSQL at {config.db_host}:{config.db_port}/{config.db_name}"
    )
