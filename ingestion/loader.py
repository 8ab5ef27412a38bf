"""
=================================================
TSV Table Loader
=================================================

Creates a destination table from the header of the staged rows and fills
it with a single generated INSERT ... SELECT.

The TsvTableLoader provides:
    - Column inference from the staging header row
    - CREATE TABLE generation (every column TEXT)
    - Bulk-load generation (one positional extraction per column)
    - Two-phase execution: create, then load
    - Optional post-load steps: header-row removal, primary key, unique indexes

Architecture:
    Staging rows → Column inference → CREATE TABLE → INSERT ... SELECT → Destination

Execution model:
    - Each phase runs in its own transaction unless atomic=True is passed to run()
    - A failed load leaves the created table in place; nothing is retried
    - Database errors are logged and re-raised unchanged
    - The header row is loaded like any other row; remove_header_row() drops it

Example:
    >>> from ingestion.loader import TsvTableLoader
    >>>
    >>> loader = TsvTableLoader()
    >>> result = loader.run(
    ...     namespace='public',
    ...     table='hgnc_genes',
    ...     remove_header=True,
    ...     primary_key='hgnc_id',
    ...     unique_columns=['symbol']
    ... )
    >>> print(f"Loaded {result['rows_loaded']} rows")
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from core.logger import get_logger
from ingestion.staging import StagingReader, StagingSource
from sql.ddl import create_table_ddl, primary_key_ddl, unique_index_ddl
from sql.dml import delete_matching_row, insert_select_statement
from sql.identifiers import qualify_name, sanitize_identifier
from sql.query_builder import check_table_exists_sql, count_rows_sql, has_rows_sql
from utils.database_utils import create_sqlalchemy_engine

logger = get_logger(__name__)


class TableLoaderError(Exception):
    """Exception raised for loader precondition failures."""
    pass


class SchemaInferenceError(TableLoaderError):
    """Raised when no columns can be inferred from the staging data."""
    pass


class DestinationNotEmptyError(TableLoaderError):
    """Raised when loading into a table that already holds rows."""
    pass


class TsvTableLoader:
    """
    Builds and runs the statements that turn staged rows into a typed table.

    Attributes:
        engine: SQLAlchemy engine for database operations
        source: StagingSource describing the staged rows
        reader: StagingReader used for column inference

    Example:
        >>> loader = TsvTableLoader(source=StagingSource(table='tsv_rows'))
        >>> print(loader.build_schema_statement('public', 'hgnc_genes'))
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        source: Optional[StagingSource] = None
    ):
        """
        Initialize the loader.

        Args:
            engine: Engine to use (defaults to one built from core.config)
            source: Staging location (defaults to core.config staging settings)
        """
        self.engine = engine if engine is not None else create_sqlalchemy_engine()
        self.source = source if source is not None else StagingSource.from_config()
        self.reader = StagingReader(self.engine, self.source)

    # ------------------------------------------------------------------
    # Statement generation
    # ------------------------------------------------------------------

    def infer_columns(self) -> List[str]:
        """
        Infer sanitized column identifiers from the staging header row.

        Returns:
            Ordered identifiers; empty when the staging data is empty
        """
        return self.reader.infer_columns()

    def _require_columns(self) -> List[str]:
        columns = self.infer_columns()

        if not columns:
            raise SchemaInferenceError(
                f"No columns could be inferred from {self.source.full_name}: "
                "the staging table is empty or its first row is blank"
            )

        return columns

    def build_schema_statement(self, namespace: str, table: str) -> str:
        """
        Generate the CREATE TABLE statement for the destination.

        Args:
            namespace: Destination schema
            table: Destination table name

        Returns:
            CREATE TABLE statement text

        Raises:
            SchemaInferenceError: If no columns can be inferred
        """
        return create_table_ddl(namespace, table, self._require_columns())

    def build_load_statement(self, namespace: str, table: str) -> str:
        """
        Generate the INSERT ... SELECT that copies every staging row.

        Args:
            namespace: Destination schema
            table: Destination table name

        Returns:
            Bulk-load statement text

        Raises:
            SchemaInferenceError: If no columns can be inferred
        """
        statement = insert_select_statement(
            namespace=namespace,
            table=table,
            columns=self._require_columns(),
            staging_schema=self.source.schema,
            staging_table=self.source.table,
            staging_column=self.source.column,
            delimiter=self.source.delimiter
        )

        logger.debug(f"Generated load statement of {len(statement):,} characters")
        return statement

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    @staticmethod
    def _execute(conn: Connection, statement: str):
        # Generated text may legitimately contain ':' or '%' inside quoted
        # identifiers and literals, so bypass bind-parameter parsing.
        return conn.exec_driver_sql(
            statement,
            execution_options={'no_parameters': True}
        )

    def _create_table(self, conn: Connection, namespace: str, table: str) -> None:
        statement = self.build_schema_statement(namespace, table)
        self._execute(conn, statement)

    def _load_data(self, conn: Connection, namespace: str, table: str) -> int:
        full_table_name = qualify_name(namespace, table)

        if self._execute(conn, has_rows_sql(namespace, table)).scalar():
            raise DestinationNotEmptyError(
                f"{full_table_name} already holds rows; the load only runs once per table"
            )

        statement = self.build_load_statement(namespace, table)
        result = self._execute(conn, statement)
        return result.rowcount

    def create_table(self, namespace: str, table: str) -> None:
        """
        Generate and execute the CREATE TABLE statement.

        Args:
            namespace: Destination schema
            table: Destination table name

        Raises:
            SchemaInferenceError: If no columns can be inferred
            SQLAlchemyError: Database error, including "table already exists"
        """
        full_table_name = qualify_name(namespace, table)
        logger.info(f"📊 Creating table {full_table_name}...")

        try:
            with self.engine.begin() as conn:
                self._create_table(conn, namespace, table)
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to create table {full_table_name}: {e}")
            raise

        logger.info(f"✅ Created table {full_table_name}")

    def load_data(self, namespace: str, table: str) -> int:
        """
        Generate and execute the bulk load into an existing, empty table.

        Args:
            namespace: Destination schema
            table: Destination table name

        Returns:
            Number of rows inserted (header row included)

        Raises:
            SchemaInferenceError: If no columns can be inferred
            DestinationNotEmptyError: If the table already holds rows
            SQLAlchemyError: Database error raised while loading
        """
        full_table_name = qualify_name(namespace, table)
        logger.info(f"📥 Loading {self.source.full_name} into {full_table_name}...")

        try:
            with self.engine.begin() as conn:
                rows_loaded = self._load_data(conn, namespace, table)
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to load {full_table_name}: {e}")
            raise

        logger.info(f"✅ Loaded {rows_loaded:,} rows into {full_table_name}")
        return rows_loaded

    def run(
        self,
        namespace: str,
        table: str,
        remove_header: bool = False,
        primary_key: Optional[str] = None,
        unique_columns: Optional[List[str]] = None,
        atomic: bool = False
    ) -> Dict[str, Any]:
        """
        Create the destination table, load it and apply optional finishing steps.

        Phase 1 creates the table, phase 2 loads it. By default each phase
        commits on its own: if the load fails the empty table stays behind.
        With ``atomic=True`` both phases share one transaction.

        Args:
            namespace: Destination schema
            table: Destination table name
            remove_header: Delete the loaded header row afterwards
            primary_key: Column (header name) to make the primary key
            unique_columns: Columns (header names) to give unique indexes
            atomic: Run create and load in a single transaction

        Returns:
            Dictionary with load results:
                - table_name: Qualified destination name
                - columns: Inferred column identifiers
                - column_count: Number of columns
                - rows_loaded: Rows inserted by the load
                - header_removed: Rows deleted as header
                - duration_seconds: Elapsed time

        Raises:
            SchemaInferenceError: If no columns can be inferred
            DestinationNotEmptyError: If the destination already holds rows
            SQLAlchemyError: Any database error, unchanged
        """
        start_time = datetime.now()
        full_table_name = qualify_name(namespace, table)

        logger.info(f"\n{'='*70}")
        logger.info("🔵 STAGED TSV INGESTION")
        logger.info(f"{'='*70}")
        logger.info(f"📁 Source: {self.source.full_name}.{self.source.column}")
        logger.info(f"📊 Target: {full_table_name}")

        columns = self._require_columns()
        logger.info(f"🧾 Inferred {len(columns)} columns from header row")

        if atomic:
            logger.info("🔒 Running create and load in one transaction")
            try:
                with self.engine.begin() as conn:
                    self._create_table(conn, namespace, table)
                    rows_loaded = self._load_data(conn, namespace, table)
            except SQLAlchemyError as e:
                logger.error(f"❌ Ingestion into {full_table_name} rolled back: {e}")
                raise
            logger.info(f"✅ Created {full_table_name} and loaded {rows_loaded:,} rows")
        else:
            self.create_table(namespace, table)
            rows_loaded = self.load_data(namespace, table)

        header_removed = self.remove_header_row(namespace, table) if remove_header else 0

        if primary_key:
            self.add_primary_key(namespace, table, primary_key)

        for column in unique_columns or []:
            self.add_unique_index(namespace, table, column)

        duration = (datetime.now() - start_time).total_seconds()
        logger.info(f"🎉 Ingestion finished in {duration:.2f}s")

        return {
            'table_name': full_table_name,
            'columns': columns,
            'column_count': len(columns),
            'rows_loaded': rows_loaded,
            'header_removed': header_removed,
            'duration_seconds': duration
        }

    # ------------------------------------------------------------------
    # Post-load steps
    # ------------------------------------------------------------------

    def remove_header_row(self, namespace: str, table: str) -> int:
        """
        Delete the loaded row whose values equal the header fragments.

        Args:
            namespace: Destination schema
            table: Destination table name

        Returns:
            Number of rows deleted
        """
        fragments = self.reader.read_header_fragments()
        if not fragments:
            raise SchemaInferenceError(
                f"No header row found in {self.source.full_name}"
            )

        columns = [sanitize_identifier(fragment) for fragment in fragments]
        statement = delete_matching_row(namespace, table, columns, fragments)

        try:
            with self.engine.begin() as conn:
                deleted = self._execute(conn, statement).rowcount
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to remove header row: {e}")
            raise

        logger.info(f"🧹 Removed {deleted} header row(s) from {qualify_name(namespace, table)}")
        return deleted

    def add_primary_key(self, namespace: str, table: str, column: str) -> None:
        """Add a primary key on ``column`` (as named in the header row)."""
        statement = primary_key_ddl(namespace, table, column)

        try:
            with self.engine.begin() as conn:
                self._execute(conn, statement)
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to add primary key on {column}: {e}")
            raise

        logger.info(f"🔑 Added primary key on {sanitize_identifier(column)}")

    def add_unique_index(self, namespace: str, table: str, column: str) -> None:
        """Create a unique index on ``column`` (as named in the header row)."""
        statement = unique_index_ddl(namespace, table, column)

        try:
            with self.engine.begin() as conn:
                self._execute(conn, statement)
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to create unique index on {column}: {e}")
            raise

        logger.info(f"🔑 Added unique index on {sanitize_identifier(column)}")

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def table_exists(self, namespace: str, table: str) -> bool:
        """Check whether the destination table exists."""
        with self.engine.connect() as conn:
            return bool(self._execute(conn, check_table_exists_sql(namespace, table)).scalar())

    def count_rows(self, namespace: str, table: str) -> int:
        """Count rows currently in the destination table."""
        with self.engine.connect() as conn:
            return self._execute(conn, count_rows_sql(namespace, table)).scalar()
