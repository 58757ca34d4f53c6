"""Borrow Tracking and Aliasing Guards.

This module provides the runtime stand-in for a borrow checker. A
matrix's buffer may be read by any number of shared borrowers, or read
and written by exactly one exclusive borrower, never both at once.

Key Concepts:
    - BorrowTracker: One per Matrix. Records live shared borrows and the
      exclusive borrow, and validates direct access by the owner.
    - BorrowToken: Handle for one borrow. Views and iterators hold one;
      releasing it ends the borrow.
    - OwnerAccess: Guard for references handed out by the matrix itself,
      which stay valid for as long as the access rules allow.

Safety Model:
    1. SHARED: Reads allowed, writes by anyone else fail.
    2. EXCLUSIVE: Only the holder may read or write.
    3. RELEASED: Any use of the token fails fast with BorrowError.

Example:
    >>> tracker = BorrowTracker("Matrix(2x2)")
    >>> with tracker.shared() as token:
    ...     tracker.check_write()   # raises BorrowError
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

from ._config import get_config
from .error import (
    BorrowError,
    ROWMAT_ERROR_BORROW_CONFLICT,
    ROWMAT_ERROR_RELEASED_BORROW,
)

logger = logging.getLogger("rowmat.borrow")

__all__ = [
    'BorrowKind',
    'BorrowHold',
    'BorrowToken',
    'BorrowTracker',
    'OwnerAccess',
]


class BorrowKind(Enum):
    """Kind of access a borrow grants.

    Attributes:
        SHARED: Read-only, may coexist with other shared borrows.
        EXCLUSIVE: Read-write, excludes every other borrow and the owner.
    """
    SHARED = 'shared'
    EXCLUSIVE = 'exclusive'


# =============================================================================
# Borrow Token
# =============================================================================

class BorrowToken:
    """Handle for a single live borrow.

    Tokens are created only by BorrowTracker. A token acquired while
    borrow checking was disabled is untracked: it still records whether
    it was released, but the tracker never saw it.
    """

    __slots__ = ('_tracker', '_kind', '_active', '_tracked', '_holds')

    def __init__(self, tracker: 'BorrowTracker', kind: BorrowKind, tracked: bool):
        self._tracker = tracker
        self._kind = kind
        self._active = True
        self._tracked = tracked
        self._holds = 0

    @property
    def kind(self) -> BorrowKind:
        return self._kind

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_exclusive(self) -> bool:
        return self._kind is BorrowKind.EXCLUSIVE

    def release(self) -> None:
        """End the borrow. Releasing twice is a no-op."""
        if not self._active:
            return
        self._active = False
        if self._tracked:
            self._tracker._release(self)

    def retain(self) -> 'BorrowHold':
        """Add a holder. The borrow ends when the last holder drops.

        Raises:
            BorrowError: If the token was released.
        """
        self.ensure_active()
        self._holds += 1
        return BorrowHold(self)

    def _drop_hold(self) -> None:
        self._holds -= 1
        if self._holds <= 0:
            self.release()

    def hold(self) -> None:
        """Views end their borrow explicitly, so children take no hold."""
        return None

    def ensure_active(self) -> None:
        """Raise if the borrow has ended.

        Raises:
            BorrowError: If the token was released.
        """
        if not self._active:
            raise BorrowError.from_code(
                ROWMAT_ERROR_RELEASED_BORROW,
                f"{self._kind.value} borrow of {self._tracker.owner_name} used after release"
            )

    def check_read(self) -> None:
        self.ensure_active()

    def check_write(self) -> None:
        self.ensure_active()
        if self._kind is not BorrowKind.EXCLUSIVE:
            raise BorrowError.from_code(
                ROWMAT_ERROR_BORROW_CONFLICT,
                f"cannot write through a shared borrow of {self._tracker.owner_name}"
            )

    def __enter__(self) -> 'BorrowToken':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "active" if self._active else "released"
        return f"BorrowToken({self._kind.value}, {state})"


class BorrowHold:
    """One holder of a token. Dropping the last hold releases the borrow.

    Iterators and windows produced while a matrix is borrowed take a hold,
    so the borrow lasts as long as the longest-lived of them.
    """

    __slots__ = ('_token', '_dropped')

    def __init__(self, token: BorrowToken):
        self._token = token
        self._dropped = False

    def drop(self) -> None:
        if self._dropped:
            return
        self._dropped = True
        self._token._drop_hold()


# =============================================================================
# Borrow Tracker
# =============================================================================

class BorrowTracker:
    """Tracks shared and exclusive borrows of one matrix buffer.

    Attributes:
        _shared: Number of live shared borrows.
        _exclusive: The live exclusive token, if any.

    Warning:
        Checks are skipped entirely while borrow checking is disabled
        in the global configuration.
    """

    __slots__ = ('_shared', '_exclusive', '_owner_name')

    def __init__(self, owner_name: str = "matrix"):
        self._shared = 0
        self._exclusive: Optional[BorrowToken] = None
        self._owner_name = owner_name

    @property
    def owner_name(self) -> str:
        return self._owner_name

    @property
    def shared_count(self) -> int:
        """Number of live shared borrows."""
        return self._shared

    @property
    def is_exclusively_borrowed(self) -> bool:
        return self._exclusive is not None

    @property
    def is_borrowed(self) -> bool:
        return self._shared > 0 or self._exclusive is not None

    # -------------------------------------------------------------------------
    # Acquire / Release
    # -------------------------------------------------------------------------

    def acquire_shared(self) -> BorrowToken:
        """Start a shared borrow.

        Raises:
            BorrowError: If an exclusive borrow is live.
        """
        if not get_config().borrow_checking:
            return BorrowToken(self, BorrowKind.SHARED, tracked=False)
        if self._exclusive is not None:
            raise BorrowError(
                f"cannot borrow {self._owner_name} as shared: "
                f"it is already exclusively borrowed"
            )
        self._shared += 1
        logger.debug("shared borrow of %s acquired (%d live)", self._owner_name, self._shared)
        return BorrowToken(self, BorrowKind.SHARED, tracked=True)

    def acquire_exclusive(self) -> BorrowToken:
        """Start an exclusive borrow.

        Raises:
            BorrowError: If any other borrow is live.
        """
        if not get_config().borrow_checking:
            return BorrowToken(self, BorrowKind.EXCLUSIVE, tracked=False)
        if self._exclusive is not None:
            raise BorrowError(
                f"cannot borrow {self._owner_name} as exclusive: "
                f"it is already exclusively borrowed"
            )
        if self._shared > 0:
            raise BorrowError(
                f"cannot borrow {self._owner_name} as exclusive: "
                f"{self._shared} shared borrow(s) still live"
            )
        token = BorrowToken(self, BorrowKind.EXCLUSIVE, tracked=True)
        self._exclusive = token
        logger.debug("exclusive borrow of %s acquired", self._owner_name)
        return token

    def _release(self, token: BorrowToken) -> None:
        if token.kind is BorrowKind.EXCLUSIVE:
            if self._exclusive is token:
                self._exclusive = None
        elif self._shared > 0:
            self._shared -= 1
        logger.debug("%s borrow of %s released", token.kind.value, self._owner_name)

    @contextmanager
    def shared(self) -> Iterator[BorrowToken]:
        """Hold a shared borrow for the duration of a block or generator."""
        token = self.acquire_shared()
        try:
            yield token
        finally:
            token.release()

    @contextmanager
    def exclusive(self) -> Iterator[BorrowToken]:
        """Hold an exclusive borrow for the duration of a block or generator."""
        token = self.acquire_exclusive()
        try:
            yield token
        finally:
            token.release()

    # -------------------------------------------------------------------------
    # Access Checks
    # -------------------------------------------------------------------------

    def check_read(self, token: Optional[BorrowToken] = None) -> None:
        """Validate a read by the owner, or by the holder of ``token``.

        Raises:
            BorrowError: If someone else holds the exclusive borrow.
        """
        if not get_config().borrow_checking:
            return
        if self._exclusive is not None and self._exclusive is not token:
            raise BorrowError(
                f"cannot read {self._owner_name}: it is exclusively borrowed"
            )

    def check_write(self, token: Optional[BorrowToken] = None) -> None:
        """Validate a write by the owner, or by the holder of ``token``.

        Raises:
            BorrowError: If any borrow other than ``token`` is live.
        """
        if not get_config().borrow_checking:
            return
        if self._exclusive is not None:
            if self._exclusive is token:
                return
            raise BorrowError(
                f"cannot write {self._owner_name}: it is exclusively borrowed"
            )
        if self._shared > 0:
            raise BorrowError(
                f"cannot write {self._owner_name}: "
                f"{self._shared} shared borrow(s) still live"
            )

    def __repr__(self) -> str:
        if self._exclusive is not None:
            return f"BorrowTracker({self._owner_name}, exclusive)"
        if self._shared:
            return f"BorrowTracker({self._owner_name}, shared={self._shared})"
        return f"BorrowTracker({self._owner_name}, free)"


class OwnerAccess:
    """Guard for references handed out directly by a matrix.

    Unlike a view, the matrix never goes away while its references are
    alive, so these only enforce the shared/exclusive rules. ``token`` is
    the borrow of the iterator that produced the reference, if any.
    """

    __slots__ = ('_tracker', '_token')

    def __init__(self, tracker: BorrowTracker, token: Optional[BorrowToken] = None):
        self._tracker = tracker
        self._token = token

    def check_read(self) -> None:
        self._tracker.check_read(self._token)

    def check_write(self) -> None:
        self._tracker.check_write(self._token)

    def hold(self) -> Optional[BorrowHold]:
        """Keep the producing borrow alive for a child iterator or window."""
        if self._token is None:
            return None
        return self._token.retain()
