"""
================================================
Configuration management for the TSV loader.
================================================

Loads all configuration from environment variables (.env file) and provides
a centralized Config singleton for application-wide access.

The configuration covers:
- PostgreSQL connection settings
- Location and layout of the staging data (schema, table, column, delimiter)
- Default log level

Example:
    >>> from core.config import config
    >>>
    >>> # Staging data location
    >>> print(f"Reading {config.staging.schema}.{config.staging.table}")
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


# Escapes accepted in STAGING_DELIMITER; any other backslash stays literal
_DELIMITER_ESCAPES = {'t': '\t', 'n': '\n', 'r': '\r', '\\': '\\'}
_ESCAPE_PATTERN = re.compile(r'\\(.)')


def decode_delimiter(value: str) -> str:
    """Decode backslash escapes in a delimiter taken from the environment.

    ``.env`` files make it awkward to hold a literal tab, so ``\\t`` (two
    characters) is accepted and turned into a real tab. Only ``\\t``,
    ``\\n``, ``\\r`` and ``\\\\`` are decoded; other text, including a
    trailing backslash and non-ASCII characters, is returned unchanged.

    Args:
        value: Raw delimiter setting

    Returns:
        Decoded delimiter

    Raises:
        ValueError: If the decoded delimiter is empty
    """
    value = _ESCAPE_PATTERN.sub(
        lambda match: _DELIMITER_ESCAPES.get(match.group(1), match.group(0)),
        value
    )

    if not value:
        raise ValueError("STAGING_DELIMITER must not be empty")

    return value


@dataclass
class DatabaseConfig:
    """Database configuration settings.

    Attributes:
        host: PostgreSQL server hostname or IP address
        port: PostgreSQL server port number
        user: Database username
        password: Database password
        database: Database holding the staging and destination tables
    """

    host: str
    port: int
    user: str
    password: str
    database: str


@dataclass
class StagingConfig:
    """Where the raw delimiter-joined rows live.

    Attributes:
        schema: Schema of the staging table
        table: Staging table name
        column: Text column holding one raw row each
        delimiter: Field delimiter (tab by default)
    """

    schema: str
    table: str
    column: str
    delimiter: str


class Config:
    """Centralized configuration manager.

    Attributes:
        db: DatabaseConfig instance with database connection settings
        staging: StagingConfig instance describing the staging data
        log_level: Default logging level name

    Example:
        >>> config = Config()
        >>> print(f"Connecting to {config.db_host}:{config.db_port}")
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.db = DatabaseConfig(
            host=os.getenv('POSTGRES_HOST', 'localhost'),
            port=int(os.getenv('POSTGRES_PORT', '5432')),
            user=os.getenv('POSTGRES_USER', 'postgres'),
            password=os.getenv('POSTGRES_PASSWORD', ''),
            database=os.getenv('POSTGRES_DB', 'postgres')
        )

        self.staging = StagingConfig(
            schema=os.getenv('STAGING_SCHEMA', 'public'),
            table=os.getenv('STAGING_TABLE', 'tsv_rows'),
            column=os.getenv('STAGING_COLUMN', 'data_row'),
            delimiter=decode_delimiter(os.getenv('STAGING_DELIMITER') or '\\t')
        )

        self.log_level = os.getenv('LOG_LEVEL', 'INFO')

    @property
    def db_host(self) -> str:
        """Get database server hostname."""
        return self.db.host

    @property
    def db_port(self) -> int:
        """Get database server port number."""
        return self.db.port

    @property
    def db_user(self) -> str:
        """Get database username."""
        return self.db.user

    @property
    def db_password(self) -> str:
        """Get database password."""
        return self.db.password

    @property
    def db_name(self) -> str:
        """Get database name."""
        return self.db.database


# Global configuration instance
config = Config()
