"""
========================================================
Staged TSV Ingestion Package
========================================================

Turns delimiter-joined rows staged in a single text column into a table
with one TEXT column per header field.

Modules:
    staging: Staging location and header-driven column inference
    loader: Statement generation and the create-then-load pipeline

Example:
    >>> from ingestion import TsvTableLoader
    >>>
    >>> loader = TsvTableLoader()
    >>> loader.run('public', 'hgnc_genes', remove_header=True)
"""

__version__ = "0.1.0"
__all__ = [
    'DestinationNotEmptyError',
    'SchemaInferenceError',
    'StagingReader',
    'StagingSource',
    'TableLoaderError',
    'TsvTableLoader',
]

from ingestion.loader import (
    DestinationNotEmptyError,
    SchemaInferenceError,
    TableLoaderError,
    TsvTableLoader,
)
from ingestion.staging import StagingReader, StagingSource
