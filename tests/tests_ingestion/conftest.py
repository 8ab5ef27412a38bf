"""
Shared fixtures and mocking helpers for ingestion tests.

Key fixtures:
- fake_engine_factory: builds a FakeEngine holding staging rows and destination tables
- loader_factory: returns a TsvTableLoader wired to a FakeEngine

The FakeEngine understands just enough of the generated SQL to behave like
PostgreSQL for these statements: CREATE TABLE fails if the table exists,
INSERT ... SELECT splits staging rows and picks the subscripted fragments,
DELETE matches literal values, and transactions opened with begin() roll
back their changes on error.
"""

import copy
import re

import pytest
from sqlalchemy.exc import ProgrammingError

CREATE_PATTERN = re.compile(r'^CREATE TABLE (\S+)\(\n(.*)\)$', re.S)
INSERT_PATTERN = re.compile(r'^INSERT INTO (\S+)\(')
SUBSCRIPT_PATTERN = re.compile(r'\)\)\[(\d+)\]')
EXISTS_PATTERN = re.compile(r'^SELECT EXISTS \(SELECT 1 FROM (\S+)\)$')
COUNT_PATTERN = re.compile(r'^SELECT COUNT\(\*\) FROM (\S+)$')
DELETE_PATTERN = re.compile(r'^DELETE FROM (\S+)\n')
LITERAL_PATTERN = re.compile(r"= '((?:[^']|'')*)'")


class FakeResult:
    """Mock SQLAlchemy result object."""

    def __init__(self, rows=None, rowcount=-1):
        self.rows = rows or []
        self.rowcount = rowcount

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def scalar(self):
        row = self.fetchone()
        return row[0] if row else None


class FakeConnection:
    """Mock SQLAlchemy connection recording every statement it runs."""

    def __init__(self, engine, transactional=False):
        self.engine = engine
        self.transactional = transactional
        self._snapshot = None

    def execute(self, statement, parameters=None):
        return self.engine.respond(str(statement))

    def exec_driver_sql(self, statement, parameters=None, execution_options=None):
        self.engine.execution_options.append(execution_options)
        return self.engine.respond(statement)

    def __enter__(self):
        if self.transactional:
            self._snapshot = copy.deepcopy(self.engine.tables)
            self.engine.transactions_opened += 1
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.transactional:
            if exc_type is None:
                self.engine.commits += 1
            else:
                self.engine.tables = self._snapshot
                self.engine.rollbacks += 1
        return False


class FakeEngine:
    """
    Stateful mock engine.

    Attributes:
        staging_rows: Raw rows in the staging table, header first
        delimiter: Delimiter used to evaluate the load projection
        tables: Destination tables, name -> {'columns': [...], 'rows': [...]}
        executed: Every SQL string executed, in order
        fail_on: Substring; any statement containing it raises ProgrammingError
    """

    def __init__(self, staging_rows=None, delimiter='\t', fail_on=None):
        self.staging_rows = list(staging_rows or [])
        self.delimiter = delimiter
        self.fail_on = fail_on
        self.tables = {}
        self.executed = []
        self.execution_options = []
        self.transactions_opened = 0
        self.commits = 0
        self.rollbacks = 0

    def connect(self):
        return FakeConnection(self)

    def begin(self):
        return FakeConnection(self, transactional=True)

    def dispose(self):
        pass

    def statements_starting_with(self, prefix):
        return [sql for sql in self.executed if sql.startswith(prefix)]

    def _error(self, statement, message):
        return ProgrammingError(statement, {}, Exception(message))

    def respond(self, sql):
        self.executed.append(sql)

        if self.fail_on and self.fail_on in sql:
            raise self._error(sql, f'simulated failure on "{self.fail_on}"')

        if sql.startswith('SELECT data_row'):
            rows = [(self.staging_rows[0],)] if self.staging_rows else []
            return FakeResult(rows)

        match = CREATE_PATTERN.match(sql)
        if match:
            name = match.group(1)
            if name in self.tables:
                raise self._error(sql, f'relation "{name}" already exists')
            columns = [line.strip().rsplit(' ', 1)[0] for line in match.group(2).split(',\n')]
            self.tables[name] = {'columns': columns, 'rows': []}
            return FakeResult()

        match = INSERT_PATTERN.match(sql)
        if match:
            name = match.group(1)
            if name not in self.tables:
                raise self._error(sql, f'relation "{name}" does not exist')
            positions = [int(p) for p in SUBSCRIPT_PATTERN.findall(sql)]
            for raw in self.staging_rows:
                fragments = raw.split(self.delimiter) if raw else []
                self.tables[name]['rows'].append(tuple(
                    fragments[p - 1] if p <= len(fragments) else None for p in positions
                ))
            return FakeResult(rowcount=len(self.staging_rows))

        match = EXISTS_PATTERN.match(sql)
        if match:
            table = self.tables.get(match.group(1))
            if table is None:
                raise self._error(sql, f'relation "{match.group(1)}" does not exist')
            return FakeResult([(bool(table['rows']),)])

        match = COUNT_PATTERN.match(sql)
        if match:
            return FakeResult([(len(self.tables[match.group(1)]['rows']),)])

        match = DELETE_PATTERN.match(sql)
        if match:
            table = self.tables[match.group(1)]
            values = tuple(v.replace("''", "'") for v in LITERAL_PATTERN.findall(sql))
            kept = [row for row in table['rows'] if row != values]
            deleted = len(table['rows']) - len(kept)
            table['rows'] = kept
            return FakeResult(rowcount=deleted)

        if 'information_schema.tables' in sql:
            return FakeResult([(bool(self.tables),)])

        return FakeResult()


@pytest.fixture
def fake_engine_factory():
    """
    Factory to create FakeEngine instances.

    Example:
        >>> engine = fake_engine_factory(['a\\tb', '1\\t2'])
    """
    def factory(staging_rows=None, delimiter='\t', fail_on=None):
        return FakeEngine(staging_rows=staging_rows, delimiter=delimiter, fail_on=fail_on)

    return factory


@pytest.fixture
def sample_rows():
    """Header plus two data rows, three columns, one header needing quotes."""
    return [
        'a\tb c\t_d9',
        'x1\ty1\tz1',
        'x2\ty2\tz2',
    ]


@pytest.fixture
def loader_factory(fake_engine_factory):
    """
    Factory that creates a TsvTableLoader bound to a FakeEngine.

    The engine is reachable as ``loader.engine`` for assertions.
    """
    from ingestion.loader import TsvTableLoader
    from ingestion.staging import StagingSource

    def factory(staging_rows=None, delimiter='\t', fail_on=None):
        engine = fake_engine_factory(staging_rows, delimiter=delimiter, fail_on=fail_on)
        source = StagingSource(
            schema='public',
            table='tsv_rows',
            column='data_row',
            delimiter=delimiter
        )
        return TsvTableLoader(engine=engine, source=source)

    return factory
