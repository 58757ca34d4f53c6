"""
Error handling for rowmat.

Contract violations (shape mismatch, out-of-range indexing, borrow
conflicts) raise a MatrixError subclass. Expected absence, such as
``get()`` on an out-of-range coordinate, returns None instead.
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# Error Codes
# =============================================================================

# Success
ROWMAT_OK = 0

# General errors (1-9)
ROWMAT_ERROR_UNKNOWN = 1

# Argument errors (10-19)
ROWMAT_ERROR_DIMENSION_MISMATCH = 11
ROWMAT_ERROR_INDEX_OUT_OF_BOUNDS = 14

# Borrow errors (60-69)
ROWMAT_ERROR_BORROW_CONFLICT = 60
ROWMAT_ERROR_RELEASED_BORROW = 61


_ERROR_MESSAGES = {
    ROWMAT_OK: "Success",
    ROWMAT_ERROR_UNKNOWN: "Unknown error",
    ROWMAT_ERROR_DIMENSION_MISMATCH: "Dimension mismatch",
    ROWMAT_ERROR_INDEX_OUT_OF_BOUNDS: "Index out of bounds",
    ROWMAT_ERROR_BORROW_CONFLICT: "Borrow conflict",
    ROWMAT_ERROR_RELEASED_BORROW: "Borrow already released",
}


# =============================================================================
# Exception Classes
# =============================================================================

class MatrixError(Exception):
    """
    Base exception for all rowmat errors.

    Attributes:
        code: One of the ROWMAT_ERROR_* constants.
        message: Human readable description.
    """

    default_code = ROWMAT_ERROR_UNKNOWN

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None):
        if code is None:
            code = self.default_code
        self.code = code
        if message is None:
            message = _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")
        self.message = message
        super().__init__(message)

    @classmethod
    def from_code(cls, code: int, context: str = "") -> "MatrixError":
        """Create exception from error code with optional context."""
        base_msg = _ERROR_MESSAGES.get(code, "Unknown error")
        msg = f"{context}: {base_msg}" if context else base_msg
        return cls(msg, code)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code}, message={self.message!r})"


class ShapeError(MatrixError, ValueError):
    """Dimensions and buffer length disagree, or a dimension is negative."""

    default_code = ROWMAT_ERROR_DIMENSION_MISMATCH


class MatrixIndexError(MatrixError, IndexError):
    """A coordinate lies outside the matrix on a checked access path."""

    default_code = ROWMAT_ERROR_INDEX_OUT_OF_BOUNDS


class BorrowError(MatrixError, RuntimeError):
    """Shared/exclusive access rules were violated, or a view was used after release."""

    default_code = ROWMAT_ERROR_BORROW_CONFLICT


def error_message(code: int) -> str:
    """Return the generic message for an error code."""
    return _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")
