"""
Pytest configuration and shared fixtures for rowmat tests.
"""

import pytest
from pathlib import Path
import sys

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

import rowmat
from rowmat import Matrix


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def restore_config():
    """Undo configuration changes made by a test."""
    config = rowmat.get_config()
    saved = (config.default_dtype, config.borrow_checking, config.strict_literals)
    yield config
    config.default_dtype, config.borrow_checking, config.strict_literals = saved


@pytest.fixture
def diagonal_matrix():
    """3x3 int matrix with 1, 2, 3 on the diagonal.

    Matrix:
    [[1, 0, 0],
     [0, 2, 0],
     [0, 0, 3]]
    """
    m = Matrix.new(3, 3, int)
    m[0, 0] = 1
    m[1, 1] = 2
    m[2, 2] = 3
    return m


@pytest.fixture
def column_matrix():
    """3x3 int matrix for column iteration.

    Matrix:
    [[1, 0, 0],
     [0, 2, 0],
     [3, 0, 0]]
    """
    m = Matrix.new(3, 3, int)
    m[0, 0] = 1
    m[1, 1] = 2
    m[2, 0] = 3
    return m


@pytest.fixture
def rect_matrix():
    """2x4 matrix holding 0..7 row-major.

    Matrix:
    [[0, 1, 2, 3],
     [4, 5, 6, 7]]
    """
    return Matrix.from_parts(2, 4, list(range(8)))
