"""
Tests for the Matrix class.
"""

import copy
import pickle

import pytest
from rowmat import Matrix, Cell, BufferView, MatrixIndexError, ShapeError
import rowmat


class TestMatrixCreation:
    """Test Matrix construction paths."""

    @pytest.mark.parametrize("rows,cols", [(0, 0), (0, 3), (3, 0), (1, 1), (2, 5), (4, 3)])
    def test_new_dimensions(self, rows, cols):
        """new() keeps dimensions and fills with the default value."""
        m = Matrix.new(rows, cols, int)
        assert m.rows == rows
        assert m.cols == cols
        assert m.shape == (rows, cols)
        assert len(m.clone_buffer()) == rows * cols
        assert all(x == 0 for x in m.iter())

    def test_new_uses_configured_default(self):
        """new() without dtype uses the configured default element type."""
        rowmat.set_default_dtype(float)
        m = Matrix.new(2, 2)
        assert m.get(1, 1) == 0.0
        assert isinstance(m.get(1, 1), float)

    def test_new_cells_are_independent(self):
        """Mutable defaults are created once per cell."""
        m = Matrix.new(2, 2, list)
        m[0, 0].append(1)
        assert m[0, 1] == []
        assert m[1, 1] == []

    def test_from_default(self):
        """from_default() fills every cell with the value."""
        m = Matrix.from_default(2, 3, 7)
        assert m.clone_buffer() == [7] * 6

    def test_from_default_deep_copies(self):
        """Cells built by from_default() never alias each other."""
        m = Matrix.from_default(2, 2, [0])
        m[0, 0].append(5)
        assert m[0, 0] == [0, 5]
        assert m[1, 1] == [0]

    def test_from_parts(self):
        """from_parts() takes the buffer in row-major order."""
        data = [1, 2, 3, 4, 5, 6]
        m = Matrix.from_parts(2, 3, data)
        assert m.clone_buffer() == data
        assert m[1, 0] == 4

    def test_from_parts_copies_caller_list(self):
        """Changing the list passed in never reaches the matrix."""
        data = [1, 2, 3, 4]
        m = Matrix.from_parts(2, 2, data)
        data.clear()
        assert m.clone_buffer() == [1, 2, 3, 4]
        assert m.get(0, 0) == 1
        data.append(9)
        assert m.size == 4
        assert 9 not in m

    def test_from_parts_accepts_iterables(self):
        m = Matrix.from_parts(2, 2, range(4))
        assert m.clone_buffer() == [0, 1, 2, 3]

    @pytest.mark.parametrize("length", [0, 5, 7])
    def test_from_parts_length_mismatch(self, length):
        """A wrong buffer length is a contract violation."""
        with pytest.raises(ShapeError):
            Matrix.from_parts(2, 3, list(range(length)))

    def test_negative_dimension(self):
        with pytest.raises(ShapeError):
            Matrix.new(-1, 3)
        with pytest.raises(ShapeError):
            Matrix.from_default(3, -2, 0)

    def test_shape_error_is_value_error(self):
        with pytest.raises(ValueError):
            Matrix.from_parts(1, 1, [])


class TestMatrixAccess:
    """Test element access."""

    def test_get_matches_indexing(self, diagonal_matrix):
        for r in range(3):
            for c in range(3):
                assert diagonal_matrix.get(r, c) == diagonal_matrix[r, c]

    @pytest.mark.parametrize("row,col", [(3, 0), (0, 3), (3, 3), (10, 10), (-1, 0), (0, -1)])
    def test_get_out_of_range(self, diagonal_matrix, row, col):
        """Out-of-range optional access returns None, never raises."""
        assert diagonal_matrix.get(row, col) is None
        assert diagonal_matrix.get_mut(row, col) is None

    def test_get_mut_write_read_back(self, diagonal_matrix):
        cell = diagonal_matrix.get_mut(0, 2)
        assert isinstance(cell, Cell)
        cell.value = 42
        assert diagonal_matrix.get(0, 2) == 42
        cell.set(43)
        assert cell.get() == 43
        assert diagonal_matrix[0, 2] == 43

    @pytest.mark.parametrize("row,col", [(3, 0), (0, 3), (-1, 0), (0, -1)])
    def test_indexing_out_of_range(self, diagonal_matrix, row, col):
        """Indexing fails loudly instead of wrapping around."""
        with pytest.raises(MatrixIndexError):
            diagonal_matrix[row, col]
        with pytest.raises(IndexError):
            diagonal_matrix[row, col] = 1

    def test_indexing_requires_pair(self, diagonal_matrix):
        with pytest.raises(TypeError):
            diagonal_matrix[0]

    def test_unchecked_access(self, rect_matrix):
        assert rect_matrix.get_unchecked(1, 2) == 6
        rect_matrix.get_unchecked_mut(1, 2).value = 60
        assert rect_matrix[1, 2] == 60

    def test_setitem(self, rect_matrix):
        rect_matrix[0, 3] = "x"
        assert rect_matrix.clone_buffer()[3] == "x"


class TestMatrixIteration:
    """Test lazy iteration."""

    def test_global_iteration(self, diagonal_matrix):
        assert sum(diagonal_matrix.iter()) == 6
        assert list(diagonal_matrix.iter()) == [1, 0, 0, 0, 2, 0, 0, 0, 3]

    def test_iteration_is_restartable(self, diagonal_matrix):
        assert list(diagonal_matrix) == list(diagonal_matrix)

    def test_row_iteration(self, diagonal_matrix):
        assert sum(diagonal_matrix.iter_row(0)) == 1
        assert sum(diagonal_matrix.iter_row(1)) == 2
        assert sum(diagonal_matrix.iter_row(2)) == 3
        assert list(diagonal_matrix.iter_row(0)) == [1, 0, 0]

    def test_col_iteration(self, column_matrix):
        assert sum(column_matrix.iter_col(0)) == 4
        assert sum(column_matrix.iter_col(1)) == 2
        assert sum(column_matrix.iter_col(2)) == 0
        assert list(column_matrix.iter_col(0)) == [1, 0, 3]

    def test_rect_rows_and_cols(self, rect_matrix):
        assert list(rect_matrix.iter_row(1)) == [4, 5, 6, 7]
        assert list(rect_matrix.iter_col(3)) == [3, 7]
        assert len(list(rect_matrix.iter_col(0))) == rect_matrix.rows

    def test_row_col_out_of_range(self, rect_matrix):
        with pytest.raises(MatrixIndexError):
            rect_matrix.iter_row(2)
        with pytest.raises(MatrixIndexError):
            rect_matrix.iter_col(4)
        with pytest.raises(MatrixIndexError):
            rect_matrix.iter_row_mut(2)
        with pytest.raises(MatrixIndexError):
            rect_matrix.iter_col_mut(4)

    def test_iter_rows_partitions_buffer(self, rect_matrix):
        rows = list(rect_matrix.iter_rows())
        assert len(rows) == 2
        assert all(isinstance(row, BufferView) and len(row) == 4 for row in rows)
        assert [x for row in rows for x in row] == rect_matrix.clone_buffer()

    def test_iter_cols(self, column_matrix):
        cols = [list(col) for col in column_matrix.iter_cols()]
        assert cols == [[1, 0, 3], [0, 2, 0], [0, 0, 0]]

    def test_iter_mut(self, diagonal_matrix):
        for cell in diagonal_matrix.iter_mut():
            cell.value += 1
        assert list(diagonal_matrix.iter()) == [2, 1, 1, 1, 3, 1, 1, 1, 4]

    def test_iter_row_mut_and_col_mut(self, rect_matrix):
        for cell in rect_matrix.iter_row_mut(0):
            cell.value = -cell.value
        for cell in rect_matrix.iter_col_mut(3):
            cell.value = 100
        assert rect_matrix.to_list() == [[0, -1, -2, 100], [4, 5, 6, 100]]

    def test_iter_rows_mut(self, rect_matrix):
        for i, row in enumerate(rect_matrix.iter_rows_mut()):
            row[0] = i * 10
            row[1:3] = ["a", "b"]
        del row
        assert rect_matrix.to_list() == [[0, "a", "b", 3], [10, "a", "b", 7]]

    def test_iter_cols_mut(self, rect_matrix):
        for j, col in enumerate(rect_matrix.iter_cols_mut()):
            for cell in col:
                cell.value = j
        assert rect_matrix.to_list() == [[0, 1, 2, 3], [0, 1, 2, 3]]

    def test_iter_cols_mut_interleaved(self, rect_matrix):
        """Column iterators are disjoint and may be consumed in any order."""
        cols = list(rect_matrix.iter_cols_mut())
        for cell in reversed(list(cols[2])):
            cell.value = "c2"
        for cell in cols[0]:
            cell.value = "c0"
        del cols
        assert list(rect_matrix.iter_col(0)) == ["c0", "c0"]
        assert list(rect_matrix.iter_col(2)) == ["c2", "c2"]
        assert list(rect_matrix.iter_col(1)) == [1, 5]

    def test_empty_matrix_iteration(self):
        m = Matrix.new(0, 4)
        assert list(m.iter()) == []
        assert list(m.iter_rows()) == []
        assert len(list(m.iter_cols())) == 4
        assert all(list(col) == [] for col in m.iter_cols())


class TestMatrixBulk:
    """Test bulk buffer access."""

    def test_clone_buffer(self, diagonal_matrix):
        values = diagonal_matrix.clone_buffer()
        assert values == [1, 0, 0, 0, 2, 0, 0, 0, 3]
        values[0] = 99
        assert diagonal_matrix[0, 0] == 1

    def test_clone_buffer_round_trip(self):
        data = ["a", "b", "c", "d", "e", "f"]
        assert Matrix.from_parts(3, 2, list(data)).clone_buffer() == data

    def test_data_is_zero_copy(self, rect_matrix):
        data = rect_matrix.data()
        assert len(data) == 8
        rect_matrix[0, 0] = 50
        assert data[0] == 50

    def test_data_mut(self, rect_matrix):
        data = rect_matrix.data_mut()
        data[7] = 70
        data.fill(1)
        assert set(rect_matrix.iter()) == {1}

    def test_window_slice_assignment_splits_iterables(self, rect_matrix):
        """Slices take iterables element-wise, as a list does."""
        data = rect_matrix.data_mut()
        data[0:2] = "ab"
        data[2:4] = (x * 10 for x in (1, 2))
        data[4::2] = [None, None]
        assert rect_matrix.to_list() == [["a", "b", 10, 20], [None, 5, None, 7]]

    def test_window_slice_assignment_never_resizes(self, rect_matrix):
        data = rect_matrix.data_mut()
        with pytest.raises(TypeError, match="fill"):
            data[0:2] = 5
        with pytest.raises(ValueError):
            data[0:2] = [1, 2, 3]
        with pytest.raises(ValueError):
            data[0:3] = "ab"
        assert len(data) == 8
        assert rect_matrix.clone_buffer() == list(range(8))


class TestMatrixProtocols:
    """Test equality, hashing, copying and rendering."""

    def test_equality(self):
        a = Matrix.from_parts(2, 2, [1, 2, 3, 4])
        b = Matrix.from_parts(2, 2, [1, 2, 3, 4])
        assert a == b
        assert hash(a) == hash(b)

    def test_inequality(self):
        a = Matrix.from_parts(2, 2, [1, 2, 3, 4])
        assert a != Matrix.from_parts(2, 2, [1, 2, 3, 5])
        assert a != Matrix.from_parts(1, 4, [1, 2, 3, 4])
        assert a != Matrix.from_parts(4, 1, [1, 2, 3, 4])
        assert a != [1, 2, 3, 4]

    def test_copy_is_independent(self, diagonal_matrix):
        dup = diagonal_matrix.copy()
        assert dup == diagonal_matrix
        dup[0, 0] = 100
        assert diagonal_matrix[0, 0] == 1
        assert copy.copy(diagonal_matrix) == diagonal_matrix
        assert copy.deepcopy(diagonal_matrix) == diagonal_matrix

    def test_pickle(self, rect_matrix):
        restored = pickle.loads(pickle.dumps(rect_matrix))
        assert restored == rect_matrix
        assert not restored.is_borrowed

    def test_display(self, diagonal_matrix):
        assert str(diagonal_matrix) == "[[1, 0, 0],\n [0, 2, 0],\n [0, 0, 3]]\n"

    def test_len_bool_contains(self, rect_matrix):
        assert len(rect_matrix) == 2
        assert rect_matrix
        assert not Matrix.new(0, 3)
        assert 7 in rect_matrix
        assert 8 not in rect_matrix

    def test_repr(self, rect_matrix):
        assert repr(rect_matrix) == "Matrix(rows=2, cols=4, data=[0, 1, 2, '...', 5, 6, 7])"
