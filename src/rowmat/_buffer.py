"""
Zero-Copy Buffer Windows

Strided windows over a matrix's flat buffer. A row is a window with
step 1, a column is a window starting at ``col`` with step ``cols``, and
``data()`` is the whole buffer. No element is copied: every read and
write goes straight to the backing list.

Each window carries an access guard (a BorrowToken or OwnerAccess) and
consults it on every element access, so a window obtained from a view
stops working once the view is released.

Example:
    >>> row = next(m.iter_rows_mut())
    >>> row[1] = 7          # writes m[0, 1]
    >>> del row             # ends the exclusive borrow
    >>> cell = m.get_mut(1, 1)
    >>> cell.value += 1     # writes m[1, 1]
"""

import weakref
from collections.abc import Sequence
from typing import Any, Iterable, Iterator, List, Union

__all__ = ['BufferView', 'BufferViewMut', 'Cell']


class Cell:
    """
    Mutable reference to one element of a matrix buffer.

    Python has no ``&mut T``; a Cell stands in for it. Reading ``value``
    returns the element, assigning it writes through to the matrix.

    Attributes:
        index (int): Flat row-major position in the buffer.
    """

    __slots__ = ('_buf', '_index', '_access')

    def __init__(self, buf: List[Any], index: int, access):
        self._buf = buf
        self._index = index
        self._access = access

    @property
    def index(self) -> int:
        return self._index

    @property
    def value(self) -> Any:
        self._access.check_read()
        return self._buf[self._index]

    @value.setter
    def value(self, new_value: Any) -> None:
        self._access.check_write()
        self._buf[self._index] = new_value

    def get(self) -> Any:
        return self.value

    def set(self, new_value: Any) -> None:
        self.value = new_value

    def __repr__(self) -> str:
        return f"Cell({self._buf[self._index]!r})"


class BufferView(Sequence):
    """
    Read-only strided window over a flat buffer.

    Attributes:
        start (int): Buffer offset of element 0.
        step (int): Buffer distance between consecutive elements.
    """

    __slots__ = ('_buf', '_start', '_step', '_len', '_access', '__weakref__')

    def __init__(self, buf: List[Any], start: int, step: int, length: int, access, hold=None):
        self._buf = buf
        self._start = start
        self._step = step
        self._len = length
        self._access = access
        if hold is not None:
            weakref.finalize(self, hold.drop)

    @property
    def start(self) -> int:
        return self._start

    @property
    def step(self) -> int:
        return self._step

    def _offset(self, idx: int) -> int:
        if idx < 0:
            idx += self._len
        if idx < 0 or idx >= self._len:
            raise IndexError(f"Index {idx} out of bounds [0, {self._len})")
        return self._start + idx * self._step

    # -------------------------------------------------------------------------
    # Element Access
    # -------------------------------------------------------------------------

    def __getitem__(self, idx: Union[int, slice]):
        """Get element(s) by index. Slices return a new list."""
        self._access.check_read()
        if isinstance(idx, slice):
            start, stop, step = idx.indices(self._len)
            return [self._buf[self._start + i * self._step] for i in range(start, stop, step)]
        return self._buf[self._offset(idx)]

    def __len__(self) -> int:
        return self._len

    def __iter__(self) -> Iterator[Any]:
        for i in range(self._len):
            self._access.check_read()
            yield self._buf[self._start + i * self._step]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (BufferView, list, tuple)):
            return self.tolist() == list(other)
        return NotImplemented

    __hash__ = None

    def tolist(self) -> List[Any]:
        """Copy the window into a new list."""
        return list(self)

    def to_list(self) -> List[Any]:
        """Alias for tolist()."""
        return self.tolist()

    def __repr__(self) -> str:
        values = self.tolist()
        if len(values) > 6:
            values = values[:3] + ['...'] + values[-3:]
        return f"{self.__class__.__name__}({values})"


class BufferViewMut(BufferView):
    """Read-write strided window over a flat buffer."""

    __slots__ = ()

    def __setitem__(self, idx: Union[int, slice], value) -> None:
        """Set element(s) by index.

        Slice assignment takes an iterable and splits it element-wise,
        as a list does (a string becomes its characters). Unlike a list,
        the window never resizes, so the lengths must match. Use
        ``fill()`` to broadcast one value.

        Raises:
            TypeError: If a slice is assigned a non-iterable.
            ValueError: If the number of values differs from the slice length.
        """
        self._access.check_write()
        if isinstance(idx, slice):
            start, stop, step = idx.indices(self._len)
            positions = range(start, stop, step)
            if not isinstance(value, Iterable):
                raise TypeError(
                    f"can only assign an iterable to a window slice, got "
                    f"{type(value).__name__}; use fill() to broadcast"
                )
            values = list(value)
            if len(values) != len(positions):
                raise ValueError(
                    f"cannot assign {len(values)} values to a window slice of {len(positions)}"
                )
            for i, v in zip(positions, values):
                self._buf[self._start + i * self._step] = v
        else:
            self._buf[self._offset(idx)] = value

    def cells(self) -> Iterator[Cell]:
        """Yield a mutable reference for each element of the window."""
        for i in range(self._len):
            self._access.check_write()
            yield Cell(self._buf, self._start + i * self._step, self._access)

    def fill(self, value: Any) -> None:
        """Set every element of the window to ``value``."""
        self._access.check_write()
        for i in range(self._len):
            self._buf[self._start + i * self._step] = value
