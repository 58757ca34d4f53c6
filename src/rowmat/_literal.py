"""
Literal construction for small matrices.

    >>> m = matrix([[1, 0, 0],
    ...             [0, 2, 0],
    ...             [0, 0, 3]])
    >>> m.shape
    (3, 3)

``rows`` is the number of literal rows, ``cols`` the length of the first
row. With strict literals enabled (the default) every row must have that
length; otherwise the flattened length is still checked by
``Matrix.from_parts``.
"""

from typing import Any, Iterable, List, Sequence

from ._config import get_config
from ._matrix import Matrix
from .error import ShapeError

__all__ = ['matrix']


def matrix(rows: Iterable[Sequence[Any]]) -> Matrix:
    """
    Build a Matrix from nested row sequences, flattened row-major.

    Args:
        rows: Sequence of equal-length row sequences. An empty sequence
              gives a 0x0 matrix.

    Raises:
        ShapeError: If rows have unequal lengths.
    """
    rows = [list(row) for row in rows]
    n_rows = len(rows)
    n_cols = len(rows[0]) if rows else 0

    if get_config().strict_literals:
        for i, row in enumerate(rows):
            if len(row) != n_cols:
                raise ShapeError(
                    f"row {i} has {len(row)} elements, expected {n_cols} "
                    f"(taken from row 0)"
                )

    flat: List[Any] = [value for row in rows for value in row]
    return Matrix.from_parts(n_rows, n_cols, flat)
