"""
Mutable Matrix Views (Exclusive Borrows)

MatrixSliceMut is a zero-copy, read-write window over a whole Matrix.
It cannot be constructed externally - only produced by
``Matrix.as_slice_mut()``.

Holding one is exclusive: creating it fails if the source has any live
borrow, and while it is live the source cannot be read, written or
borrowed again. Cells and row windows obtained from the view stop
working once the view is released.

Example:
    >>> with m.as_slice_mut() as view:
    ...     for row in view.iter_rows_mut():
    ...         row[0] = 1
    ...     view[2, 2] = 9
    >>> m[2, 2]
    9
"""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator

from ._base import MutableMatrixBase
from ._ownership import BorrowToken
from ._slice import _INTERNAL_KEY, _ViewLifecycle

if TYPE_CHECKING:
    from ._matrix import Matrix

__all__ = ['MatrixSliceMut']


class MatrixSliceMut(_ViewLifecycle, MutableMatrixBase):
    """
    Exclusive read-write view over a whole Matrix.

    Mirrors the full Matrix access surface (checked, optional and
    unchecked element access, every read and mutable iterator, data and
    data_mut) except construction, which belongs to Matrix alone.
    """

    __slots__ = ('_rows', '_cols', '_buf', '_token', '_source')

    def __init__(self, matrix: 'Matrix', token: BorrowToken, _internal_key: Any = None):
        """Initialize MatrixSliceMut (INTERNAL ONLY)."""
        self._attach(matrix, token, _internal_key)

    @classmethod
    def _borrow(cls, matrix: 'Matrix') -> 'MatrixSliceMut':
        token = matrix.borrows.acquire_exclusive()
        return cls(matrix, token, _internal_key=_INTERNAL_KEY)

    def _check_write(self) -> None:
        self._token.check_write()

    def _write_access(self) -> BorrowToken:
        return self._token

    @contextmanager
    def _writing(self) -> Iterator[BorrowToken]:
        self._token.check_write()
        yield self._token
