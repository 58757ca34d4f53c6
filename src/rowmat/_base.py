"""
Dense Matrix Base Classes

This module defines the row-major layout convention and the abstract
base classes shared by Matrix and its borrowed views. The whole access
and traversal surface lives here; subclasses only decide how access is
guarded (owner borrow tracking vs. a view's borrow token).

Type Hierarchy:

    MatrixBase (ABC)                    # read surface
    ├── MatrixSlice                     # shared view
    └── MutableMatrixBase (ABC)         # read + write surface
        ├── Matrix                      # owns the buffer
        └── MatrixSliceMut              # exclusive view

Layout:

    (row, col) -> row * cols + col

    flat_index() is the only place the formula is written down. Rows are
    contiguous runs of ``cols`` elements; column ``c`` starts at offset
    ``c`` and strides by ``cols``.
"""

import copy
import operator
import weakref
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Iterator, List, Optional, Tuple

from ._buffer import BufferView, BufferViewMut, Cell
from ._display import format_matrix
from .error import MatrixIndexError

__all__ = [
    'flat_index',
    'MatrixBase',
    'MutableMatrixBase',
]


def flat_index(row: int, col: int, cols: int) -> int:
    """Map a logical (row, col) coordinate onto the flat buffer."""
    return row * cols + col


def _held(child, hold):
    # The hold is dropped when the child is exhausted, closed or collected.
    if hold is not None:
        weakref.finalize(child, hold.drop)
    return child


def _coords(key) -> Tuple[int, int]:
    if not isinstance(key, tuple) or len(key) != 2:
        raise TypeError(f"matrix indices must be (row, col) tuples, got {key!r}")
    return operator.index(key[0]), operator.index(key[1])


class MatrixBase(ABC):
    """
    Abstract base class for everything that reads a dense matrix.

    Subclasses provide the buffer and dimensions through ``_buf``,
    ``_rows`` and ``_cols``, and the access guards below. All iteration
    is lazy and restartable: each call returns a fresh generator.

    Required Methods (subclasses must implement):
        _check_read(): validate a one-off read
        _read_access(): guard handed to windows that outlive the call
        _reading(): context manager held while an iterator runs
    """

    __slots__ = ()

    _buf: List[Any]
    _rows: int
    _cols: int

    # =========================================================================
    # Access Guards
    # =========================================================================

    @abstractmethod
    def _check_read(self) -> None:
        ...

    @abstractmethod
    def _read_access(self):
        ...

    @abstractmethod
    def _reading(self) -> AbstractContextManager:
        ...

    # =========================================================================
    # Dimensions
    # =========================================================================

    @property
    def rows(self) -> int:
        """Number of rows."""
        return self._rows

    @property
    def cols(self) -> int:
        """Number of columns."""
        return self._cols

    @property
    def shape(self) -> Tuple[int, int]:
        """Matrix dimensions (rows, cols)."""
        return (self._rows, self._cols)

    @property
    def size(self) -> int:
        """Total number of elements (rows * cols)."""
        return self._rows * self._cols

    def _in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self._rows and 0 <= col < self._cols

    def _require(self, row: int, col: int) -> int:
        if not self._in_bounds(row, col):
            raise MatrixIndexError(
                f"index ({row}, {col}) out of bounds for "
                f"{self._rows}x{self._cols} matrix"
            )
        return flat_index(row, col, self._cols)

    def _require_row(self, row: int) -> None:
        if not 0 <= row < self._rows:
            raise MatrixIndexError(f"row {row} out of bounds [0, {self._rows})")

    def _require_col(self, col: int) -> None:
        if not 0 <= col < self._cols:
            raise MatrixIndexError(f"column {col} out of bounds [0, {self._cols})")

    # =========================================================================
    # Element Access
    # =========================================================================

    def get(self, row: int, col: int) -> Optional[Any]:
        """Return the element at (row, col), or None if out of range."""
        self._check_read()
        if not self._in_bounds(row, col):
            return None
        return self._buf[flat_index(row, col, self._cols)]

    def get_unchecked(self, row: int, col: int) -> Any:
        """
        UNSAFE: read (row, col) without bounds validation.

        The caller must guarantee ``0 <= row < rows`` and
        ``0 <= col < cols``. Otherwise the result is unspecified: a
        different element may be returned, or the buffer's own IndexError
        may escape. Use ``get()`` or ``m[row, col]`` instead unless the
        coordinates are already known to be valid.
        """
        self._check_read()
        return self._buf[flat_index(row, col, self._cols)]

    def __getitem__(self, key) -> Any:
        """Checked indexing: ``m[row, col]``.

        Raises:
            MatrixIndexError: If the coordinate is outside the matrix.
        """
        row, col = _coords(key)
        self._check_read()
        return self._buf[self._require(row, col)]

    # =========================================================================
    # Iteration
    # =========================================================================

    def _window(self, start: int, step: int, count: int, access=None, hold=None) -> Iterator[Any]:
        if access is None:
            with self._reading() as access:
                yield from self._window(start, step, count, access)
            return
        buf = self._buf
        try:
            for i in range(count):
                access.check_read()
                yield buf[start + i * step]
        finally:
            if hold is not None:
                hold.drop()

    def iter(self) -> Iterator[Any]:
        """All elements in row-major order."""
        return self._window(0, 1, self.size)

    def __iter__(self) -> Iterator[Any]:
        return self.iter()

    def iter_row(self, row: int) -> Iterator[Any]:
        """The ``cols`` elements of ``row``, left to right.

        Raises:
            MatrixIndexError: If ``row >= rows``.
        """
        self._require_row(row)
        return self._window(flat_index(row, 0, self._cols), 1, self._cols)

    def iter_col(self, col: int) -> Iterator[Any]:
        """The ``rows`` elements of ``col``, top to bottom.

        Raises:
            MatrixIndexError: If ``col >= cols``.
        """
        self._require_col(col)
        return self._window(col, self._cols, self._rows)

    def iter_rows(self) -> Iterator[BufferView]:
        """Read-only windows over each row, partitioning the buffer.

        Each window keeps the shared borrow alive until it is collected,
        so the matrix cannot be written while any row is still reachable.
        """
        with self._reading() as access:
            for row in range(self._rows):
                yield BufferView(self._buf, flat_index(row, 0, self._cols), 1, self._cols,
                                 access, hold=access.hold())

    def iter_cols(self) -> Iterator[Iterator[Any]]:
        """One lazy iterator per column, left to right.

        Each column iterator keeps the shared borrow alive until it is
        exhausted or collected.
        """
        with self._reading() as access:
            for col in range(self._cols):
                hold = access.hold()
                yield _held(self._window(col, self._cols, self._rows, access, hold), hold)

    # =========================================================================
    # Bulk Access
    # =========================================================================

    def clone_buffer(self) -> List[Any]:
        """Independent copy of the buffer in row-major order.

        Elements are cloned with ``copy.deepcopy``.
        """
        self._check_read()
        return copy.deepcopy(self._buf)

    def data(self) -> BufferView:
        """Zero-copy read-only window over the whole buffer."""
        self._check_read()
        return BufferView(self._buf, 0, 1, len(self._buf), self._read_access())

    def to_list(self) -> List[List[Any]]:
        """Nested list of rows (shallow element copies)."""
        return [row.tolist() for row in self.iter_rows()]

    # =========================================================================
    # Magic Methods
    # =========================================================================

    def __len__(self) -> int:
        """Return number of rows."""
        return self._rows

    def __bool__(self) -> bool:
        """Return True if matrix has any elements."""
        return self.size > 0

    def __contains__(self, value: Any) -> bool:
        return any(x == value for x in self.iter())

    def __str__(self) -> str:
        return format_matrix(self)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rows={self._rows}, cols={self._cols})"


class MutableMatrixBase(MatrixBase):
    """
    Abstract base class for everything that may write a dense matrix.

    Mutable references are handed out as Cell objects; mutable rows as
    BufferViewMut windows.

    Required Methods (subclasses must implement):
        _check_write(): validate a one-off write
        _write_access(): guard handed to cells/windows that outlive the call
        _writing(): context manager held while a mutable iterator runs
    """

    __slots__ = ()

    @abstractmethod
    def _check_write(self) -> None:
        ...

    @abstractmethod
    def _write_access(self):
        ...

    @abstractmethod
    def _writing(self) -> AbstractContextManager:
        ...

    # =========================================================================
    # Element Access
    # =========================================================================

    def get_mut(self, row: int, col: int) -> Optional[Cell]:
        """Return a mutable reference to (row, col), or None if out of range."""
        self._check_write()
        if not self._in_bounds(row, col):
            return None
        return Cell(self._buf, flat_index(row, col, self._cols), self._write_access())

    def get_unchecked_mut(self, row: int, col: int) -> Cell:
        """
        UNSAFE: mutable reference to (row, col) without bounds validation.

        Same caller obligation as ``get_unchecked()``. A bad coordinate may
        produce a Cell aliasing a different element.
        """
        self._check_write()
        return Cell(self._buf, flat_index(row, col, self._cols), self._write_access())

    def __setitem__(self, key, value: Any) -> None:
        """Checked assignment: ``m[row, col] = value``.

        Raises:
            MatrixIndexError: If the coordinate is outside the matrix.
        """
        row, col = _coords(key)
        self._check_write()
        self._buf[self._require(row, col)] = value

    # =========================================================================
    # Mutable Iteration
    # =========================================================================

    def _cells(self, start: int, step: int, count: int, access=None, hold=None) -> Iterator[Cell]:
        if access is None:
            with self._writing() as access:
                yield from self._cells(start, step, count, access)
            return
        try:
            for i in range(count):
                access.check_write()
                yield Cell(self._buf, start + i * step, access)
        finally:
            if hold is not None:
                hold.drop()

    def iter_mut(self) -> Iterator[Cell]:
        """Mutable references to all elements in row-major order."""
        return self._cells(0, 1, self.size)

    def iter_row_mut(self, row: int) -> Iterator[Cell]:
        """Mutable references to the elements of ``row``."""
        self._require_row(row)
        return self._cells(flat_index(row, 0, self._cols), 1, self._cols)

    def iter_col_mut(self, col: int) -> Iterator[Cell]:
        """Mutable references to the elements of ``col``."""
        self._require_col(col)
        return self._cells(col, self._cols, self._rows)

    def iter_rows_mut(self) -> Iterator[BufferViewMut]:
        """Mutable windows over each row, partitioning the buffer.

        The exclusive borrow lasts until the generator and every window
        it produced are gone.
        """
        with self._writing() as access:
            for row in range(self._rows):
                yield BufferViewMut(self._buf, flat_index(row, 0, self._cols), 1, self._cols,
                                    access, hold=access.hold())

    def iter_cols_mut(self) -> Iterator[Iterator[Cell]]:
        """One iterator of mutable references per column.

        Columns share no elements, so the iterators may be consumed in any
        order or interleaved. The exclusive borrow lasts until every
        column iterator is exhausted or collected.
        """
        with self._writing() as access:
            for col in range(self._cols):
                hold = access.hold()
                yield _held(self._cells(col, self._cols, self._rows, access, hold), hold)

    def data_mut(self) -> BufferViewMut:
        """Zero-copy mutable window over the whole buffer."""
        self._check_write()
        return BufferViewMut(self._buf, 0, 1, len(self._buf), self._write_access())
