"""
Array analysis utilities, independent of the ingestion pipeline.
"""

__all__ = [
    'ArrayLengthMismatchError',
    'frequency_count',
    'frequency_table',
    'pairwise_map',
]

from .array_functions import (
    ArrayLengthMismatchError,
    frequency_count,
    frequency_table,
    pairwise_map,
)
