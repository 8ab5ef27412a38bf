"""
=======================================================================
Data Definition Language (DDL) builders for the destination table.
=======================================================================

Generates the PostgreSQL statements that create the destination table
from an inferred column list and, after loading, add the keys and
indexes the caller asks for.

All column identifiers passed in are expected to be sanitized already
(see sql.identifiers). Namespace and table names are sanitized here.

Functions:
    create_table_ddl: CREATE TABLE with one TEXT column per identifier
    primary_key_ddl: ALTER TABLE ... ADD CONSTRAINT ... PRIMARY KEY
    unique_index_ddl: CREATE UNIQUE INDEX on a single column

Example:
    >>> from sql.ddl import create_table_ddl
    >>>
    >>> print(create_table_ddl('public', 'hgnc_genes', ['hgnc_id', 'symbol']))
    CREATE TABLE public.hgnc_genes(
      hgnc_id TEXT,
      symbol TEXT)
"""

from typing import List

from sql.identifiers import qualify_name, sanitize_identifier

COLUMN_INDENT = '  '


def create_table_ddl(
    namespace: str,
    table: str,
    columns: List[str],
    column_type: str = 'TEXT'
) -> str:
    """Generate a CREATE TABLE statement, one column definition per line.

    There is deliberately no IF NOT EXISTS clause: creating a table that
    already exists must fail.

    Args:
        namespace: Target schema
        table: Target table name
        columns: Ordered, sanitized column identifiers
        column_type: Type used for every column

    Returns:
        CREATE TABLE statement text

    Raises:
        ValueError: If ``columns`` is empty
    """
    if not columns:
        raise ValueError(
            f"Cannot generate CREATE TABLE for {namespace}.{table}: no columns"
        )

    column_defs = [f"{COLUMN_INDENT}{col} {column_type}" for col in columns]

    return (
        f"CREATE TABLE {qualify_name(namespace, table)}(\n"
        + ",\n".join(column_defs)
        + ")"
    )


def primary_key_ddl(
    namespace: str,
    table: str,
    column: str,
    constraint_name: str = None
) -> str:
    """Generate ALTER TABLE ADD CONSTRAINT ... PRIMARY KEY.

    Args:
        namespace: Schema name
        table: Table name
        column: Key column name as it appears in the header row
        constraint_name: Optional name (defaults to ``<table>_pk``)

    Returns:
        SQL ALTER TABLE statement
    """
    constraint_name = constraint_name or f"{table}_pk"

    return (
        f"ALTER TABLE {qualify_name(namespace, table)}\n"
        f"ADD CONSTRAINT {sanitize_identifier(constraint_name)} "
        f"PRIMARY KEY({sanitize_identifier(column)})"
    )


def unique_index_ddl(
    namespace: str,
    table: str,
    column: str,
    index_name: str = None
) -> str:
    """Generate CREATE UNIQUE INDEX on one column.

    Args:
        namespace: Schema name
        table: Table name
        column: Indexed column name as it appears in the header row
        index_name: Optional name (defaults to ``<table>_<column>_idx``)

    Returns:
        SQL CREATE UNIQUE INDEX statement
    """
    if not index_name:
        index_name = f"{table}_{column.strip()}_idx"

    return (
        f"CREATE UNIQUE INDEX {sanitize_identifier(index_name)} "
        f"ON {qualify_name(namespace, table)}({sanitize_identifier(column)})"
    )
