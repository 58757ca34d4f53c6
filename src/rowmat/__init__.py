"""
rowmat - Dense Row-Major Matrices

Dense 2-D matrix container over a single flat buffer with:
- Checked, optional and unchecked element access
- Lazy row, column and element iteration
- Zero-copy shared and exclusive views
- Runtime borrow tracking (shared XOR exclusive access)

Architecture:
    ┌──────────────────────────────────────────────┐
    │            Matrix (owns the buffer)          │
    ├──────────────────────────────────────────────┤
    │  as_slice()     -> MatrixSlice    (shared)   │
    │  as_slice_mut() -> MatrixSliceMut (exclusive)│
    │  layout: (row, col) -> row * cols + col      │
    └──────────────────────────────────────────────┘

Example:
    >>> import rowmat
    >>> m = rowmat.matrix([[1, 0, 0], [0, 2, 0], [0, 0, 3]])
    >>> sum(m.iter())
    6
    >>> print(m, end="")
    [[1, 0, 0],
     [0, 2, 0],
     [0, 0, 3]]
    >>> with m.as_slice_mut() as view:
    ...     for cell in view.iter_col_mut(0):
    ...         cell.value += 1
    >>> list(m.iter_col(0))
    [2, 1, 1]
"""

__version__ = '0.1.0'

from ._base import MatrixBase, MutableMatrixBase, flat_index
from ._buffer import BufferView, BufferViewMut, Cell
from ._config import (
    get_config,
    set_borrow_checking,
    set_default_dtype,
    set_strict_literals,
)
from ._display import format_matrix
from ._literal import matrix
from ._matrix import Matrix
from ._ownership import BorrowKind, BorrowToken, BorrowTracker
from ._slice import MatrixSlice
from ._slicemut import MatrixSliceMut
from .error import BorrowError, MatrixError, MatrixIndexError, ShapeError

__all__ = [
    # Version
    '__version__',

    # Core classes
    'Matrix',
    'MatrixSlice',
    'MatrixSliceMut',
    'MatrixBase',
    'MutableMatrixBase',

    # References and windows
    'Cell',
    'BufferView',
    'BufferViewMut',

    # Borrow tracking
    'BorrowKind',
    'BorrowToken',
    'BorrowTracker',

    # Construction / display helpers
    'matrix',
    'format_matrix',
    'flat_index',

    # Configuration
    'get_config',
    'set_default_dtype',
    'set_borrow_checking',
    'set_strict_literals',

    # Errors
    'MatrixError',
    'ShapeError',
    'MatrixIndexError',
    'BorrowError',
]
