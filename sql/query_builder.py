"""
============================
SQL Query Builder Utilities.
============================

Read-only queries used by the loader: fetching the header row from the
staging table and inspecting the destination table.

Query Builders:
- first_row_sql: Fetch a single raw row from the staging table
- has_rows_sql: Check whether a table holds any row
- count_rows_sql: Count rows in a table

Metadata Query Functions:
- check_table_exists_sql: Check if a table exists in a schema

Usage:
    from sql.query_builder import first_row_sql

    header_query = first_row_sql('public', 'tsv_rows', 'data_row')
"""

from sql.identifiers import qualify_name, sanitize_identifier, string_literal


def first_row_sql(schema: str, table: str, column: str) -> str:
    """
    Build the query returning one raw row from the staging table.

    No ORDER BY: the staging table is loaded once and never updated, so
    its natural order puts the header first.

    Args:
        schema: Staging schema
        table: Staging table
        column: Raw text column

    Returns:
        SELECT ... LIMIT 1 query
    """
    return (
        f"SELECT {sanitize_identifier(column)}\n"
        f"FROM {qualify_name(schema, table)}\n"
        f"LIMIT 1"
    )


def has_rows_sql(schema: str, table: str) -> str:
    """
    Build a query returning a single boolean: does the table hold any row?

    Args:
        schema: Schema name
        table: Table name

    Returns:
        SELECT EXISTS (...) query
    """
    return f"SELECT EXISTS (SELECT 1 FROM {qualify_name(schema, table)})"


def count_rows_sql(schema: str, table: str) -> str:
    """
    Build a COUNT(*) query for a table.

    Args:
        schema: Schema name
        table: Table name

    Returns:
        SELECT COUNT(*) query
    """
    return f"SELECT COUNT(*) FROM {qualify_name(schema, table)}"


def check_table_exists_sql(schema_name: str, table_name: str) -> str:
    """
    Generate SQL to check if a table exists.

    Names are matched the way PostgreSQL resolves them: a bare name is
    folded to lower case, a quoted one is matched verbatim.

    Args:
        schema_name: Schema to look in
        table_name: Table to look for

    Returns:
        SQL query returning a single boolean
    """
    return f"""SELECT EXISTS (
    SELECT 1
    FROM information_schema.tables
    WHERE table_schema = {string_literal(_catalog_name(schema_name))}
      AND table_name = {string_literal(_catalog_name(table_name))}
)"""


def _catalog_name(name: str) -> str:
    """Return the name as stored in the catalog for an unqualified identifier."""
    identifier = sanitize_identifier(name)

    if identifier.startswith('"'):
        return identifier[1:-1].replace('""', '"')

    return identifier.lower()
