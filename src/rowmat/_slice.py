"""
Immutable Matrix Views (Shared Borrows)

MatrixSlice is a zero-copy, read-only window over a whole Matrix. It
cannot be constructed externally - only produced by ``Matrix.as_slice()``.

Lifetime:
    A view holds a shared borrow of its source until ``release()`` is
    called, its ``with`` block exits, or it is garbage collected. While
    any shared view is live the source cannot be written or exclusively
    borrowed. Every operation on a released view raises BorrowError,
    as do row windows obtained from it.

Example:
    >>> with m.as_slice() as view:
    ...     totals = [sum(row) for row in view.iter_rows()]
    >>> view.get(0, 0)   # BorrowError: used after release
"""

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator

from ._base import MatrixBase
from ._ownership import BorrowToken

if TYPE_CHECKING:
    from ._matrix import Matrix

logger = logging.getLogger("rowmat.borrow")

__all__ = ['MatrixSlice']


class _ViewInternal:
    """Internal marker to prevent external construction."""
    pass


_INTERNAL_KEY = _ViewInternal()


class _ViewLifecycle:
    """Borrow lifecycle shared by MatrixSlice and MatrixSliceMut."""

    __slots__ = ()

    _token: BorrowToken
    _source: 'Matrix'

    def _attach(self, matrix: 'Matrix', token: BorrowToken, internal_key: Any) -> None:
        if internal_key is not _INTERNAL_KEY:
            raise TypeError(
                f"{self.__class__.__name__} cannot be constructed directly. "
                f"Use Matrix.as_slice() or Matrix.as_slice_mut() instead"
            )
        self._source = matrix
        self._token = token
        self._rows = matrix.rows
        self._cols = matrix.cols
        self._buf = matrix._buf

    @property
    def source(self) -> 'Matrix':
        """The matrix this view borrows."""
        self._token.ensure_active()
        return self._source

    @property
    def is_active(self) -> bool:
        """Whether the borrow is still live."""
        return self._token.is_active

    def release(self) -> None:
        """End the borrow. The view is unusable afterwards."""
        self._token.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def __del__(self):
        token = getattr(self, '_token', None)
        if token is not None and token.is_active:
            logger.debug("%s collected while active, releasing borrow", self.__class__.__name__)
            token.release()

    def _check_read(self) -> None:
        self._token.check_read()

    def _read_access(self) -> BorrowToken:
        return self._token

    @contextmanager
    def _reading(self) -> Iterator[BorrowToken]:
        self._token.check_read()
        yield self._token

    def __repr__(self) -> str:
        state = "active" if self._token.is_active else "released"
        return f"{self.__class__.__name__}(rows={self._rows}, cols={self._cols}, {state})"


class MatrixSlice(_ViewLifecycle, MatrixBase):
    """
    Read-only view over a whole Matrix.

    Mirrors the Matrix read surface: get, get_unchecked, indexing, rows,
    cols, iter, iter_row, iter_col, iter_rows, iter_cols, clone_buffer,
    data. Dimensions are captured when the view is created; elements are
    read through to the source buffer.
    """

    __slots__ = ('_rows', '_cols', '_buf', '_token', '_source')

    def __init__(self, matrix: 'Matrix', token: BorrowToken, _internal_key: Any = None):
        """Initialize MatrixSlice (INTERNAL ONLY)."""
        self._attach(matrix, token, _internal_key)

    @classmethod
    def _borrow(cls, matrix: 'Matrix') -> 'MatrixSlice':
        token = matrix.borrows.acquire_shared()
        return cls(matrix, token, _internal_key=_INTERNAL_KEY)
