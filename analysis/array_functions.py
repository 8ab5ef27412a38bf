"""
==============================================
Generic array analysis helpers.
==============================================

Small utilities that work over a sequence of unknown length:

- frequency_count: (element, occurrences) pairs for every distinct element
- frequency_table: the same counts as a two-column DataFrame
- pairwise_map: map the items of one sequence onto another by position

Example:
    >>> from analysis.array_functions import frequency_count, pairwise_map
    >>>
    >>> sorted(frequency_count(['cat', 'dog', 'cat']))
    [('cat', 2), ('dog', 1)]
    >>> pairwise_map(['1', '2', '1'], ['one', 'two', 'eins'])
    {'1': 'eins', '2': 'two'}
"""

from collections import Counter
from typing import Any, Dict, List, Sequence, Tuple

import pandas as pd


class ArrayLengthMismatchError(ValueError):
    """Raised when two sequences that must pair up differ in length."""
    pass


def frequency_count(values: Sequence[Any]) -> List[Tuple[Any, int]]:
    """
    Count how often each distinct element occurs.

    Elements are grouped by equality; None is counted like any other value.
    Unhashable elements such as lists or dicts are compared one by one
    against the distinct unhashable elements seen so far.
    The order of the returned pairs is not guaranteed.

    Args:
        values: Elements to count

    Returns:
        List of (element, count) tuples; empty for empty input
    """
    counts = Counter()
    unhashable: List[List[Any]] = []

    for value in values:
        try:
            counts[value] += 1
        except TypeError:
            # Unhashable, e.g. a list or dict
            for pair in unhashable:
                if pair[0] == value:
                    pair[1] += 1
                    break
            else:
                unhashable.append([value, 1])

    return list(counts.items()) + [(element, count) for element, count in unhashable]


def frequency_table(values: Sequence[Any]) -> pd.DataFrame:
    """
    Count distinct elements and return them as a DataFrame.

    Args:
        values: Elements to count

    Returns:
        DataFrame with columns ``element`` and ``element_count``
    """
    return pd.DataFrame(
        frequency_count(values),
        columns=['element', 'element_count']
    )


def pairwise_map(keys: Sequence[str], values: Sequence[str]) -> Dict[str, str]:
    """
    Map each key to the value at the same position.

    When a key repeats, the value paired with its last occurrence wins.

    Args:
        keys: Map keys
        values: Map values, same length as ``keys``

    Returns:
        Dictionary from key to value

    Raises:
        ArrayLengthMismatchError: If the sequences differ in length
    """
    if len(keys) != len(values):
        raise ArrayLengthMismatchError(
            f"Array lengths differ: {len(keys)} keys, {len(values)} values"
        )

    return dict(zip(keys, values))
