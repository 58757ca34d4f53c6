"""
Global configuration for rowmat.

Provides:
- Default element type used by ``Matrix.new``
- Borrow checking switch (runtime aliasing guards)
- Literal validation switch used by ``matrix()``

Borrow checking can also be disabled before import with the
environment variable ``ROWMAT_NO_BORROW_CHECK=1``.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable

logger = logging.getLogger("rowmat.config")

__all__ = [
    'get_config',
    'set_default_dtype',
    'set_borrow_checking',
    'set_strict_literals',
]


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in ('1', 'true', 'yes')


# =============================================================================
# Global Configuration State
# =============================================================================

class _Config:
    """
    Global configuration singleton.

    Read by Matrix construction, the borrow tracker and the literal builder
    on every call, so changes take effect immediately.
    """

    def __init__(self):
        self._default_dtype: Callable[[], Any] = int
        self._strict_literals = True
        self._borrow_checking = True

        if _env_flag('ROWMAT_NO_BORROW_CHECK'):
            self._borrow_checking = False
            logger.info("rowmat borrow checking disabled via ROWMAT_NO_BORROW_CHECK")

    @property
    def default_dtype(self) -> Callable[[], Any]:
        """Element factory called once per cell by ``Matrix.new``."""
        return self._default_dtype

    @default_dtype.setter
    def default_dtype(self, value: Callable[[], Any]):
        if not callable(value):
            raise TypeError(f"default_dtype must be callable, got {value!r}")
        self._default_dtype = value

    @property
    def borrow_checking(self) -> bool:
        """Whether shared/exclusive borrows are tracked and enforced."""
        return self._borrow_checking

    @borrow_checking.setter
    def borrow_checking(self, value: bool):
        self._borrow_checking = bool(value)

    @property
    def strict_literals(self) -> bool:
        """Whether ``matrix()`` rejects literals with rows of unequal length."""
        return self._strict_literals

    @strict_literals.setter
    def strict_literals(self, value: bool):
        self._strict_literals = bool(value)

    def __repr__(self) -> str:
        name = getattr(self._default_dtype, '__name__', repr(self._default_dtype))
        return (f"_Config(default_dtype={name}, "
                f"borrow_checking={self._borrow_checking}, "
                f"strict_literals={self._strict_literals})")


# Global config instance
_config = _Config()


# =============================================================================
# Public API
# =============================================================================

def get_config() -> _Config:
    """Get global configuration instance."""
    return _config


def set_default_dtype(dtype: Callable[[], Any]) -> None:
    """
    Set the element type used by ``Matrix.new`` when none is given.

    Example:
        >>> rowmat.set_default_dtype(float)
        >>> Matrix.new(2, 2).get(0, 0)
        0.0
    """
    _config.default_dtype = dtype


def set_borrow_checking(enabled: bool) -> None:
    """
    Enable or disable runtime borrow tracking.

    Borrows acquired while checking was enabled are still released
    normally after it is switched off.

    Warning:
        Borrows acquired while checking is disabled are never recorded.
        They stay untracked after checking is re-enabled, so they do not
        block other borrows or direct writes to the matrix. Release them
        before switching checking back on.
    """
    _config.borrow_checking = enabled


def set_strict_literals(enabled: bool) -> None:
    """Enable or disable ragged-row validation in ``matrix()``."""
    _config.strict_literals = enabled
