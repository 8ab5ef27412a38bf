"""
=========================================================
Identifier and literal quoting for generated PostgreSQL.
=========================================================

Every name or value that ends up inside generated DDL/DML passes through
one of these helpers. Nothing read from the staging data is ever placed
into statement text without going through them first.

Functions:
    sanitize_identifier: Bare identifier if valid, delimited identifier otherwise
    qualify_name: Build a schema-qualified relation name
    string_literal: Render a Python string as a PostgreSQL string literal

Example:
    >>> from sql.identifiers import sanitize_identifier, string_literal
    >>>
    >>> sanitize_identifier('  hgnc_id ')
    'hgnc_id'
    >>> sanitize_identifier('gene family')
    '"gene family"'
    >>> string_literal('\\t')
    "E'\\\\t'"
"""

import re

BARE_IDENTIFIER_PATTERN = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')

# Escapes understood inside PostgreSQL E'...' strings
_ESCAPE_SEQUENCES = {
    '\\': '\\\\',
    "'": "''",
    '\b': '\\b',
    '\f': '\\f',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
}


def sanitize_identifier(raw: str) -> str:
    """Return a column or relation name that is safe to use in generated SQL.

    Surrounding whitespace is stripped. A value matching
    ``^[a-zA-Z_][a-zA-Z0-9_]*$`` is returned as is; anything else is
    wrapped in double quotes. Embedded double quotes are doubled so the
    result is always a single, well-formed delimited identifier.

    Args:
        raw: Raw header fragment or caller-supplied name

    Returns:
        Bare or double-quoted identifier

    Example:
        >>> sanitize_identifier('b c')
        '"b c"'
        >>> sanitize_identifier('_d9')
        '_d9'
    """
    trimmed = raw.strip()

    if BARE_IDENTIFIER_PATTERN.match(trimmed):
        return trimmed

    return '"' + trimmed.replace('"', '""') + '"'


def qualify_name(namespace: str, table: str) -> str:
    """Build ``namespace.table`` with both parts sanitized.

    Args:
        namespace: Schema name
        table: Table name

    Returns:
        Schema-qualified relation name
    """
    return f"{sanitize_identifier(namespace)}.{sanitize_identifier(table)}"


def string_literal(value: str) -> str:
    """Render ``value`` as a PostgreSQL string literal.

    Plain text becomes a standard ``'...'`` literal. Text containing a
    backslash or a control character uses the escape-string form so that,
    for example, a tab delimiter is written as ``E'\\t'`` rather than as a
    raw tab inside the statement.

    Args:
        value: Text to quote

    Returns:
        Literal suitable for direct inclusion in SQL text

    Raises:
        ValueError: If the value contains a NUL character
    """
    if '\x00' in value:
        raise ValueError("PostgreSQL text values cannot contain NUL characters")

    needs_escape_form = any(
        char == '\\' or ord(char) < 32 or ord(char) == 127 for char in value
    )

    if not needs_escape_form:
        return "'" + value.replace("'", "''") + "'"

    escaped = []
    for char in value:
        if char in _ESCAPE_SEQUENCES:
            escaped.append(_ESCAPE_SEQUENCES[char])
        elif ord(char) < 32 or ord(char) == 127:
            escaped.append(f'\\x{ord(char):02x}')
        else:
            escaped.append(char)

    return "E'" + ''.join(escaped) + "'"
