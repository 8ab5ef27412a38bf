"""
====================================================
SQL generation package for staged TSV ingestion.
====================================================

This package builds every statement the loader executes. All builders are
pure functions returning SQL text; none of them touch the database.

The package follows a clear organization:
    - identifiers.py: Identifier sanitizing and literal quoting
    - ddl.py: CREATE TABLE, primary key and unique index statements
    - dml.py: The INSERT ... SELECT bulk load and header-row DELETE
    - query_builder.py: Read-only queries (header row, existence, counts)

Architecture:
    - Text read from staging data only enters SQL via sanitize_identifier
      or string_literal
    - Namespace and table names are passed through sanitize_identifier too
    - ddl.py, dml.py and query_builder.py import from identifiers.py (not vice versa)

Example:
    >>> from sql.ddl import create_table_ddl
    >>> from sql.dml import insert_select_statement
    >>>
    >>> ddl = create_table_ddl('public', 't', ['a', '"b c"', '_d9'])
    >>> dml = insert_select_statement(
    ...     'public', 't', ['a', '"b c"', '_d9'],
    ...     staging_schema='public', staging_table='tsv_rows',
    ...     staging_column='data_row', delimiter='\\t'
    ... )
"""

__version__ = "0.1.0"
__all__ = [
    # Identifiers
    'sanitize_identifier', 'qualify_name', 'string_literal',
    # DDL functions
    'create_table_ddl', 'primary_key_ddl', 'unique_index_ddl',
    # DML functions
    'insert_clause', 'extraction_expression', 'extraction_select',
    'insert_select_statement', 'delete_matching_row',
]

from .ddl import create_table_ddl, primary_key_ddl, unique_index_ddl
from .dml import (
    delete_matching_row,
    extraction_expression,
    extraction_select,
    insert_clause,
    insert_select_statement,
)
from .identifiers import qualify_name, sanitize_identifier, string_literal
