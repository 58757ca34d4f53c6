"""
Dense Row-Major Matrix

Matrix owns a flat Python list of ``rows * cols`` elements laid out row
by row. It is the only type that creates storage; views borrow it.

Construction:
    - Matrix.new(rows, cols, dtype=int)        # every cell is dtype()
    - Matrix.from_default(rows, cols, value)   # every cell a deep copy of value
    - Matrix.from_parts(rows, cols, data)      # copy a flat row-major buffer
    - Matrix.from_numpy(array)                 # 2-D numpy array, C order

Borrowing:
    - as_slice()      -> MatrixSlice      (shared, read-only)
    - as_slice_mut()  -> MatrixSliceMut   (exclusive, read-write)

Example:
    >>> m = Matrix.new(3, 3)
    >>> m[0, 0] = 1; m[1, 1] = 2; m[2, 2] = 3
    >>> sum(m.iter())
    6
    >>> list(m.iter_row(0))
    [1, 0, 0]
    >>> with m.as_slice_mut() as view:
    ...     for cell in view.iter_mut():
    ...         cell.value *= 10
    >>> m.get(2, 2)
    30
"""

import copy
import operator
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, Optional

import numpy as np

from ._base import MutableMatrixBase
from ._config import get_config
from ._ownership import BorrowTracker, OwnerAccess
from ._slice import MatrixSlice
from ._slicemut import MatrixSliceMut
from .error import ShapeError

__all__ = ['Matrix']


def _dimension(value, name: str) -> int:
    value = operator.index(value)
    if value < 0:
        raise ShapeError(f"{name} must be non-negative, got {value}")
    return value


class Matrix(MutableMatrixBase):
    """
    Dense row-major matrix owning its buffer.

    Attributes:
        rows (int): Number of rows.
        cols (int): Number of columns.
        shape (tuple): (rows, cols).

    Invariant:
        ``len(buffer) == rows * cols`` after every construction path.

    Direct access follows the same rules as views: while an exclusive
    view or mutable iterator is live, the matrix cannot be read; while
    any borrow is live, it cannot be written. Violations raise
    BorrowError.
    """

    __slots__ = ('_rows', '_cols', '_buf', '_borrows', '__weakref__')

    def __init__(self, rows: int, cols: int, data: Iterable[Any]):
        """
        Copy ``data`` into a new row-major buffer.

        The matrix always owns its list, so later changes to the
        caller's list (or its length) never reach the matrix.

        Args:
            rows: Number of rows (>= 0).
            cols: Number of columns (>= 0).
            data: Exactly ``rows * cols`` elements in row-major order.

        Raises:
            ShapeError: If a dimension is negative or the length is wrong.
        """
        rows = _dimension(rows, "rows")
        cols = _dimension(cols, "cols")
        data = list(data)
        if len(data) != rows * cols:
            raise ShapeError(
                f"buffer length {len(data)} does not match "
                f"{rows}x{cols} = {rows * cols}"
            )
        self._rows = rows
        self._cols = cols
        self._buf = data
        self._borrows = BorrowTracker(f"Matrix({rows}x{cols})")

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def new(cls, rows: int, cols: int, dtype: Optional[Callable[[], Any]] = None) -> 'Matrix':
        """
        Create a matrix with every cell set to the element type's default.

        ``dtype`` is called once per cell (``int()`` -> 0, ``list()`` -> []),
        so cells never alias. Defaults to the configured default dtype.
        """
        rows = _dimension(rows, "rows")
        cols = _dimension(cols, "cols")
        factory = dtype if dtype is not None else get_config().default_dtype
        return cls(rows, cols, [factory() for _ in range(rows * cols)])

    @classmethod
    def from_default(cls, rows: int, cols: int, value: Any) -> 'Matrix':
        """
        Create a matrix with every cell set to ``value``.

        Each cell receives its own ``copy.deepcopy`` of ``value``.
        Immutable values come back unchanged from deepcopy; mutable ones
        are duplicated, so mutating one cell never affects another.
        """
        rows = _dimension(rows, "rows")
        cols = _dimension(cols, "cols")
        return cls(rows, cols, [copy.deepcopy(value) for _ in range(rows * cols)])

    @classmethod
    def from_parts(cls, rows: int, cols: int, data: Iterable[Any]) -> 'Matrix':
        """
        Build a matrix from a flat row-major buffer.

        The elements are copied into a list owned by the matrix.
        Precondition: ``len(data) == rows * cols``. A mismatch is a
        caller bug and raises ShapeError.
        """
        return cls(rows, cols, data)

    @classmethod
    def from_numpy(cls, array) -> 'Matrix':
        """
        Create a matrix from a 2-D numpy array (or anything np.asarray accepts).

        Elements are converted to Python scalars with ``tolist()``.

        Raises:
            ShapeError: If the array is not 2-D.
        """
        arr = np.asarray(array)
        if arr.ndim != 2:
            raise ShapeError(f"expected a 2-D array, got {arr.ndim}-D with shape {arr.shape}")
        rows, cols = arr.shape
        return cls(rows, cols, np.ravel(arr, order='C').tolist())

    def to_numpy(self, dtype=None) -> np.ndarray:
        """
        Copy into a new ``(rows, cols)`` numpy array.

        Intended for numeric element types; ``dtype`` is passed to numpy.
        """
        self._check_read()
        return np.array(self._buf, dtype=dtype).reshape(self._rows, self._cols)

    # =========================================================================
    # Access Guards
    # =========================================================================

    @property
    def borrows(self) -> BorrowTracker:
        """Borrow tracker guarding this matrix's buffer."""
        return self._borrows

    @property
    def is_borrowed(self) -> bool:
        """Whether any view or running iterator currently borrows the buffer."""
        return self._borrows.is_borrowed

    def _check_read(self) -> None:
        self._borrows.check_read()

    def _check_write(self) -> None:
        self._borrows.check_write()

    def _read_access(self) -> OwnerAccess:
        return OwnerAccess(self._borrows)

    def _write_access(self) -> OwnerAccess:
        return OwnerAccess(self._borrows)

    @contextmanager
    def _reading(self) -> Iterator[OwnerAccess]:
        # Children that take a hold keep the borrow past the block.
        token = self._borrows.acquire_shared()
        hold = token.retain()
        try:
            yield OwnerAccess(self._borrows, token)
        finally:
            hold.drop()

    @contextmanager
    def _writing(self) -> Iterator[OwnerAccess]:
        token = self._borrows.acquire_exclusive()
        hold = token.retain()
        try:
            yield OwnerAccess(self._borrows, token)
        finally:
            hold.drop()

    # =========================================================================
    # Views
    # =========================================================================

    def as_slice(self) -> MatrixSlice:
        """
        Borrow the whole matrix as a read-only view.

        Raises:
            BorrowError: If the matrix is exclusively borrowed.
        """
        return MatrixSlice._borrow(self)

    def as_slice_mut(self) -> MatrixSliceMut:
        """
        Borrow the whole matrix as an exclusive read-write view.

        Until the view is released the matrix itself cannot be read or
        written.

        Raises:
            BorrowError: If the matrix is borrowed in any way.
        """
        return MatrixSliceMut._borrow(self)

    # =========================================================================
    # Copy / Compare
    # =========================================================================

    def copy(self) -> 'Matrix':
        """Create a deep copy of this matrix with its own buffer."""
        self._check_read()
        return Matrix(self._rows, self._cols, copy.deepcopy(self._buf))

    def __copy__(self) -> 'Matrix':
        self._check_read()
        return Matrix(self._rows, self._cols, list(self._buf))

    def __deepcopy__(self, memo) -> 'Matrix':
        self._check_read()
        return Matrix(self._rows, self._cols, copy.deepcopy(self._buf, memo))

    def __reduce__(self):
        return (Matrix, (self._rows, self._cols, list(self._buf)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_read()
        other._check_read()
        return (self._rows == other._rows
                and self._cols == other._cols
                and self._buf == other._buf)

    def __hash__(self) -> int:
        self._check_read()
        return hash((self._rows, self._cols, tuple(self._buf)))

    def __repr__(self) -> str:
        values = list(self._buf)
        if len(values) > 6:
            values = values[:3] + ['...'] + values[-3:]
        return f"Matrix(rows={self._rows}, cols={self._cols}, data={values})"
