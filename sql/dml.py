"""
===========================================
Data Manipulation Language (DML) Builders.
===========================================

Builds the bulk-load statement that copies delimiter-joined staging rows
into the destination table, plus the DELETE used to drop the header row
once the load is done.

The load is a single ``INSERT INTO ... SELECT`` whose projection holds one
extraction expression per destination column. Expression N splits the raw
staging row on the delimiter and takes element N (PostgreSQL arrays are
1-based). A row with fewer fragments than columns yields NULL for the
missing trailing columns without shifting the others.

Functions:
- insert_clause: INSERT INTO target and its column list
- extraction_expression: One positional extraction over the staging column
- extraction_select: SELECT with one extraction per column FROM staging
- insert_select_statement: Complete bulk-load statement
- delete_matching_row: DELETE the row whose columns equal given values

Usage:
    from sql.dml import insert_select_statement

    load_sql = insert_select_statement(
        namespace='public',
        table='hgnc_genes',
        columns=['hgnc_id', 'symbol', '"gene family"'],
        staging_schema='public',
        staging_table='tsv_rows',
        staging_column='data_row',
        delimiter='\\t'
    )
"""

from typing import List

from sql.identifiers import qualify_name, sanitize_identifier, string_literal

EXPRESSION_INDENT = '  '


def insert_clause(namespace: str, table: str, columns: List[str]) -> str:
    """
    Generate the ``INSERT INTO <target>(<columns>)`` part of the load.

    Args:
        namespace: Destination schema
        table: Destination table
        columns: Ordered, sanitized column identifiers

    Returns:
        INSERT clause terminated by a newline
    """
    return f"INSERT INTO {qualify_name(namespace, table)}({', '.join(columns)})\n"


def extraction_expression(staging_column: str, delimiter: str, position: int) -> str:
    """
    Generate the expression extracting fragment ``position`` from a staging row.

    Args:
        staging_column: Name of the raw text column in the staging table
        delimiter: Field delimiter
        position: 1-based fragment index

    Returns:
        Expression such as ``(STRING_TO_ARRAY(data_row, E'\\t'))[3]``
    """
    if position < 1:
        raise ValueError(f"Fragment positions start at 1, got {position}")

    return (
        f"(STRING_TO_ARRAY({sanitize_identifier(staging_column)}, "
        f"{string_literal(delimiter)}))[{position}]"
    )


def extraction_select(
    column_count: int,
    staging_schema: str,
    staging_table: str,
    staging_column: str,
    delimiter: str
) -> str:
    """
    Generate the SELECT that splits every staging row into positional fields.

    Warning: the statement holds one expression per column and can get
    very large for wide files.

    Args:
        column_count: Number of destination columns
        staging_schema: Schema holding the staging table
        staging_table: Staging table name
        staging_column: Raw text column in the staging table
        delimiter: Field delimiter

    Returns:
        SELECT statement over the whole staging table
    """
    if column_count < 1:
        raise ValueError("Cannot generate a load projection with no columns")

    expressions = [
        EXPRESSION_INDENT + extraction_expression(staging_column, delimiter, position)
        for position in range(1, column_count + 1)
    ]

    return (
        "SELECT\n"
        + ",\n".join(expressions)
        + f"\nFROM {qualify_name(staging_schema, staging_table)}"
    )


def insert_select_statement(
    namespace: str,
    table: str,
    columns: List[str],
    staging_schema: str,
    staging_table: str,
    staging_column: str,
    delimiter: str
) -> str:
    """
    Generate the complete bulk-load statement.

    Args:
        namespace: Destination schema
        table: Destination table
        columns: Ordered, sanitized column identifiers
        staging_schema: Schema holding the staging table
        staging_table: Staging table name
        staging_column: Raw text column in the staging table
        delimiter: Field delimiter

    Returns:
        ``INSERT INTO ... SELECT ...`` statement text
    """
    if not columns:
        raise ValueError(f"Cannot generate a load for {namespace}.{table}: no columns")

    return insert_clause(namespace, table, columns) + "\n" + extraction_select(
        column_count=len(columns),
        staging_schema=staging_schema,
        staging_table=staging_table,
        staging_column=staging_column,
        delimiter=delimiter
    )


def delete_matching_row(
    namespace: str,
    table: str,
    columns: List[str],
    values: List[str]
) -> str:
    """
    Generate a DELETE removing rows whose columns all equal ``values``.

    Used to drop the header row, which is loaded like any other row.

    Args:
        namespace: Schema name
        table: Table name
        columns: Ordered, sanitized column identifiers
        values: Raw values to match, position by position

    Returns:
        SQL DELETE statement with every value rendered as an escaped literal
    """
    if len(columns) != len(values):
        raise ValueError(
            f"Column/value count mismatch: {len(columns)} columns, {len(values)} values"
        )
    if not columns:
        raise ValueError("Cannot generate a DELETE with no match conditions")

    conditions = [
        f"{col} = {string_literal(value)}" for col, value in zip(columns, values)
    ]

    return (
        f"DELETE FROM {qualify_name(namespace, table)}\nWHERE "
        + "\n  AND ".join(conditions)
    )
