"""
=================================================
Staging data access and header-driven inference.
=================================================

The staging table holds one raw, delimiter-joined record per row in a
single text column, header first. StagingReader reads that header and
turns it into the ordered list of sanitized column identifiers that
drives both generated statements.

Example:
    >>> from ingestion.staging import StagingReader, StagingSource
    >>>
    >>> reader = StagingReader(engine, StagingSource.from_config())
    >>> reader.infer_columns()
    ['hgnc_id', 'symbol', 'name', '"gene family"']
"""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from core.config import config
from core.logger import get_logger
from sql.identifiers import sanitize_identifier
from sql.query_builder import first_row_sql

logger = get_logger(__name__)


@dataclass(frozen=True)
class StagingSource:
    """Location and layout of the staged rows.

    Attributes:
        schema: Schema holding the staging table
        table: Staging table name
        column: Text column with one raw record per row
        delimiter: Field delimiter used inside each record
    """

    schema: str = 'public'
    table: str = 'tsv_rows'
    column: str = 'data_row'
    delimiter: str = '\t'

    def __post_init__(self):
        if not self.delimiter:
            raise ValueError("Staging delimiter must not be empty")

    @classmethod
    def from_config(cls, **overrides) -> 'StagingSource':
        """Build a source from core.config, with optional per-field overrides."""
        settings = {
            'schema': config.staging.schema,
            'table': config.staging.table,
            'column': config.staging.column,
            'delimiter': config.staging.delimiter,
        }
        settings.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**settings)

    @property
    def full_name(self) -> str:
        return f"{self.schema}.{self.table}"


class StagingReader:
    """Reads the header row of the staging table and infers the columns.

    Attributes:
        engine: SQLAlchemy engine connected to the staging database
        source: StagingSource describing where the rows live
    """

    def __init__(self, engine: Engine, source: StagingSource):
        self.engine = engine
        self.source = source

    def read_header_row(self) -> Optional[str]:
        """
        Fetch the first staging row.

        Returns:
            The raw header text, or None if the staging table is empty
        """
        query = first_row_sql(self.source.schema, self.source.table, self.source.column)

        with self.engine.connect() as conn:
            row = conn.execute(text(query)).fetchone()

        if row is None:
            logger.warning(f"⚠️  Staging table {self.source.full_name} is empty")
            return None

        return row[0]

    def read_header_fragments(self) -> List[str]:
        """
        Split the header row on the delimiter.

        Returns:
            Raw, unsanitized fragments in order; empty if there is no header.
            An empty or NULL header yields no fragments, as STRING_TO_ARRAY does.
        """
        header = self.read_header_row()

        if not header:
            return []

        return header.split(self.source.delimiter)

    def infer_columns(self) -> List[str]:
        """
        Infer the destination column identifiers from the header row.

        Returns:
            Sanitized identifiers, one per header fragment, in order.
            An empty list means no schema could be inferred.
        """
        fragments = self.read_header_fragments()
        columns = [sanitize_identifier(fragment) for fragment in fragments]

        logger.debug(f"Inferred {len(columns)} columns from {self.source.full_name}")
        return columns
