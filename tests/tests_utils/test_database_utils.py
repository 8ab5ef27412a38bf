"""
========================================================
Comprehensive pytest suite for utils/database_utils.py
========================================================

Sections:
---------
1. Unit tests - Individual function testing
2. Edge case tests - Boundary conditions

Available markers:
------------------
unit, edge_case

Test Coverage:
--------------
- create_sqlalchemy_engine: Engine creation from config or an explicit URL
- check_database_available: Database availability verification
- wait_for_database: Retry logic and timeout handling
- verify_connection: Status tuple reporting

How to Execute:
---------------
All tests:          pytest tests/tests_utils/test_database_utils.py -v
By category:        pytest tests/tests_utils/test_database_utils.py -m unit
"""

from unittest.mock import MagicMock, patch

import pytest
from psycopg2 import OperationalError

from utils.database_utils import (
    DatabaseConnectionError,
    check_database_available,
    create_sqlalchemy_engine,
    verify_connection,
    wait_for_database,
)

# ====================
# Mock Helper Classes
# ====================

class FakeConfig:
    """Mock config object for testing."""
    def __init__(self):
        self.db_host = 'localhost'
        self.db_port = 5432
        self.db_user = 'postgres'
        self.db_password = 'secret123'
        self.db_name = 'genes'


class FakeConnection:
    """Mock psycopg2 connection."""
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


# ====================
# Fixtures
# ====================

@pytest.fixture
def mock_config():
    """Provide mock configuration."""
    with patch('utils.database_utils.config', FakeConfig()):
        yield FakeConfig()


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_create_sqlalchemy_engine_from_config(mock_config):
    """URL.create receives the configured settings and pooling is enabled."""
    with patch('utils.database_utils.URL.create') as mock_url_create, \
         patch('utils.database_utils.create_engine') as mock_create_engine:

        mock_url_create.return_value = 'postgresql+psycopg2://...'
        mock_create_engine.return_value = MagicMock()

        create_sqlalchemy_engine()

        mock_url_create.assert_called_once_with(
            drivername='postgresql+psycopg2',
            username='postgres',
            password='secret123',
            host='localhost',
            port=5432,
            database='genes'
        )
        call_kwargs = mock_create_engine.call_args[1]
        assert call_kwargs['pool_pre_ping'] is True
        assert call_kwargs['pool_size'] == 5
        assert call_kwargs['max_overflow'] == 10


@pytest.mark.unit
def test_create_sqlalchemy_engine_explicit_url(mock_config):
    """An explicit URL bypasses config entirely."""
    with patch('utils.database_utils.URL.create') as mock_url_create, \
         patch('utils.database_utils.create_engine') as mock_create_engine:

        create_sqlalchemy_engine(url='postgresql://u:p@h/d', echo=True)

        mock_url_create.assert_not_called()
        assert mock_create_engine.call_args[0][0] == 'postgresql://u:p@h/d'
        assert mock_create_engine.call_args[1]['echo'] is True


@pytest.mark.unit
def test_check_database_available_success(mock_config):
    with patch('utils.database_utils.psycopg2.connect') as mock_connect:
        mock_conn = FakeConnection()
        mock_connect.return_value = mock_conn

        assert check_database_available() is True
        assert mock_conn.closed is True
        assert mock_connect.call_args[1]['database'] == 'genes'


@pytest.mark.unit
def test_check_database_available_failure(mock_config):
    with patch('utils.database_utils.psycopg2.connect', side_effect=OperationalError("refused")):
        assert check_database_available() is False


@pytest.mark.unit
def test_wait_for_database_immediate_success(mock_config):
    with patch('utils.database_utils.check_database_available', return_value=True):
        assert wait_for_database() is True


@pytest.mark.unit
def test_wait_for_database_success_after_retries(mock_config):
    """Fails twice, then succeeds; sleeps between attempts."""
    with patch('utils.database_utils.check_database_available', side_effect=[False, False, True]), \
         patch('utils.database_utils.time.sleep') as mock_sleep:

        assert wait_for_database(max_retries=5, retry_delay=1) is True
        assert mock_sleep.call_count == 2


@pytest.mark.unit
def test_wait_for_database_max_retries_exhausted(mock_config):
    with patch('utils.database_utils.check_database_available', return_value=False), \
         patch('utils.database_utils.time.sleep'):

        with pytest.raises(DatabaseConnectionError) as exc_info:
            wait_for_database(max_retries=3, retry_delay=1)

        assert 'did not become available' in str(exc_info.value)


@pytest.mark.unit
def test_verify_connection_success(mock_config):
    with patch('utils.database_utils.check_database_available', return_value=True):
        ok, message = verify_connection()

    assert ok is True
    assert 'localhost:5432/genes' in message


@pytest.mark.unit
def test_verify_connection_failure(mock_config):
    with patch('utils.database_utils.check_database_available', return_value=False):
        ok, message = verify_connection()

    assert ok is False
    assert 'not available' in message


# ===================
# 2. EDGE CASE TESTS
# ===================

@pytest.mark.edge_case
def test_wait_for_database_zero_retries(mock_config):
    """With no attempts allowed the wait fails immediately."""
    with patch('utils.database_utils.check_database_available') as mock_check:
        with pytest.raises(DatabaseConnectionError):
            wait_for_database(max_retries=0)

        mock_check.assert_not_called()
