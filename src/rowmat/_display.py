"""
Text rendering for dense matrices.

    [[1, 0, 0],
     [0, 2, 0],
     [0, 0, 3]]

Works on anything with an ``iter_rows()`` method yielding row sequences,
so matrices and both view types render the same way.
"""

__all__ = ['format_matrix', 'format_row']


def format_row(row) -> str:
    """Render one row as ``[a, b, c]`` using ``str()`` of each element."""
    return "[" + ", ".join(str(value) for value in row) + "]"


def format_matrix(matrix) -> str:
    """
    Render a matrix as nested bracketed rows, one row per line.

    Continuation lines are indented by one space so the columns line up
    under the opening bracket. The result always ends with a newline; a
    matrix without rows renders as ``[]``.
    """
    rows = [format_row(row) for row in matrix.iter_rows()]
    return "[" + ",\n ".join(rows) + "]\n"
