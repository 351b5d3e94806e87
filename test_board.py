import random
import unittest

import numpy as np

from merge2048.board import (
    add_random_tile,
    board_to_list,
    boards_equal,
    create_empty_board,
    create_initial_board,
    empty_cells,
    format_board,
    normalize_board,
    reverse_rows,
    transpose,
)


class TestBoardConstruction(unittest.TestCase):

    def test_empty_board(self):
        board = create_empty_board()
        self.assertEqual(board.shape, (4, 4))
        self.assertEqual(np.count_nonzero(board), 0)

    def test_empty_board_rows_are_independent(self):
        board = create_empty_board()
        board[0, 0] = 2
        self.assertEqual(board[1, 0], 0)
        self.assertEqual(np.count_nonzero(board), 1)

    def test_custom_size(self):
        self.assertEqual(create_empty_board(6).shape, (6, 6))

    def test_initial_board(self):
        # Ensure the board starts with exactly two tiles, both 2
        board = create_initial_board(rng=random.Random(0))
        self.assertEqual(np.count_nonzero(board), 2)
        self.assertTrue(np.all(board[board != 0] == 2))

    def test_initial_board_tile_count(self):
        board = create_initial_board(size=5, initial_tiles=7, rng=random.Random(3))
        self.assertEqual(board.shape, (5, 5))
        self.assertEqual(np.count_nonzero(board), 7)


class TestEmptyCells(unittest.TestCase):

    def test_row_major_order(self):
        board = np.array([
            [2, 0, 4, 0],
            [2, 4, 8, 16],
            [0, 2, 4, 8],
            [2, 4, 8, 16],
        ])
        self.assertEqual(empty_cells(board), [(0, 1), (0, 3), (2, 0)])

    def test_full_board(self):
        board = np.full((4, 4), 2)
        self.assertEqual(empty_cells(board), [])

    def test_none_cells_and_missing_rows(self):
        board = [
            [2, None, 4, 8],
            None,
            [2, 4, 8, 16],
        ]
        self.assertEqual(empty_cells(board), [(0, 1)])

    def test_missing_middle_row_is_skipped(self):
        board = [[2, 4, 8, 16], None, [2, 4, 0, 16], [2, 4, 8, 16]]
        self.assertEqual(empty_cells(board), [(2, 2)])


class TestAddRandomTile(unittest.TestCase):

    def test_add_random_tile(self):
        # Add a random tile and check if the count increases
        board = create_initial_board(rng=random.Random(1))
        new_board = add_random_tile(board, rng=random.Random(2))
        self.assertEqual(np.count_nonzero(new_board), np.count_nonzero(board) + 1)

    def test_does_not_mutate_input(self):
        board = create_empty_board()
        before = board.copy()
        new_board = add_random_tile(board, rng=random.Random(0))
        np.testing.assert_array_equal(board, before)
        self.assertIsNot(new_board, board)

    def test_only_fills_empty_cell(self):
        board = np.array([
            [2, 4, 8, 16],
            [32, 64, 128, 256],
            [512, 1024, 0, 4],
            [8, 16, 32, 64],
        ])
        new_board = add_random_tile(board, rng=random.Random(5))
        self.assertIn(new_board[2, 2], (2, 4))
        mask = np.ones_like(board, dtype=bool)
        mask[2, 2] = False
        np.testing.assert_array_equal(new_board[mask], board[mask])

    def test_probability_extremes(self):
        rng = random.Random(7)
        for _ in range(20):
            board = add_random_tile(create_empty_board(), probability_of_two=1.0, rng=rng)
            self.assertEqual(board.max(), 2)
            board = add_random_tile(create_empty_board(), probability_of_two=0.0, rng=rng)
            self.assertEqual(board.max(), 4)

    def test_full_board_unchanged(self):
        board = np.full((4, 4), 8)
        new_board = add_random_tile(board, rng=random.Random(0))
        np.testing.assert_array_equal(new_board, board)

    def test_missing_trailing_row_keeps_tiles(self):
        board = [[2, None, 4, 8], None, [2, 4, 8, 16]]
        new_board = add_random_tile(board, rng=random.Random(0))
        self.assertEqual(new_board.shape, (4, 4))
        np.testing.assert_array_equal(new_board[2], [2, 4, 8, 16])
        self.assertEqual(new_board[0, 0], 2)
        self.assertEqual(np.count_nonzero(new_board), 8)

    def test_missing_row_can_receive_spawn(self):
        # The only empty cells are in the missing row, which comes back empty
        board = [[2, 4, 8, 16], None, [2, 4, 8, 16], [2, 4, 8, 16]]
        rng = random.Random(4)
        for _ in range(10):
            new_board = add_random_tile(board, rng=rng)
            self.assertEqual(np.count_nonzero(new_board[1]), 1)
            self.assertEqual(np.count_nonzero(new_board), 13)

    def test_spawn_distribution(self):
        rng = random.Random(11)
        fours = 0
        for _ in range(2000):
            board = add_random_tile(create_empty_board(), rng=rng)
            fours += int(board.max() == 4)
        self.assertGreater(fours, 100)
        self.assertLess(fours, 320)


class TestBoardsEqual(unittest.TestCase):

    def test_equal_arrays(self):
        a = np.array([[2, 0], [0, 4]])
        self.assertTrue(boards_equal(a, a.copy()))

    def test_lists_with_none_match_arrays(self):
        self.assertTrue(boards_equal([[2, None], [None, 4]], np.array([[2, 0], [0, 4]])))

    def test_different_values(self):
        self.assertFalse(boards_equal(np.array([[2, 0], [0, 4]]), np.array([[2, 0], [0, 8]])))

    def test_different_dimensions(self):
        self.assertFalse(boards_equal(create_empty_board(4), create_empty_board(5)))

    def test_malformed_rows(self):
        good = [[2, 4], [8, 16]]
        self.assertFalse(boards_equal(good, [[2, 4], None]))
        self.assertFalse(boards_equal(good, [[2, 4], [8]]))
        self.assertFalse(boards_equal(good, None))

    def test_non_2d_arrays(self):
        board = np.zeros((4, 4), dtype=int)
        self.assertFalse(boards_equal(np.zeros((4, 4, 4), dtype=int), board))
        self.assertFalse(boards_equal(board, np.zeros(4, dtype=int)))
        self.assertFalse(boards_equal([[[0, 0]] * 4] * 4, board.tolist()))


class TestTransforms(unittest.TestCase):

    def setUp(self):
        self.board = np.array([
            [2, 4, 0, 0],
            [8, 0, 0, 16],
            [0, 0, 32, 0],
            [64, 0, 0, 128],
        ])

    def test_transpose(self):
        np.testing.assert_array_equal(transpose(self.board), self.board.T)

    def test_reverse_rows(self):
        expected = np.array([
            [0, 0, 4, 2],
            [16, 0, 0, 8],
            [0, 32, 0, 0],
            [128, 0, 0, 64],
        ])
        np.testing.assert_array_equal(reverse_rows(self.board), expected)

    def test_round_trips(self):
        rng = random.Random(42)
        for _ in range(50):
            board = np.array([[rng.choice([0, 0, 2, 4, 8, 16]) for _ in range(4)] for _ in range(4)])
            np.testing.assert_array_equal(transpose(transpose(board)), board)
            np.testing.assert_array_equal(reverse_rows(reverse_rows(board)), board)

    def test_results_do_not_alias_input(self):
        before = self.board.copy()
        t = transpose(self.board)
        r = reverse_rows(self.board)
        t[0, 0] = 1024
        r[0, 0] = 1024
        np.testing.assert_array_equal(self.board, before)

    def test_missing_row_treated_as_empty(self):
        board = [[2, 4, 8, 16], None, [2, 4, 8, 16], [2, 4, 8, 16]]
        np.testing.assert_array_equal(transpose(board)[:, 1], [0, 0, 0, 0])
        np.testing.assert_array_equal(reverse_rows(board)[1], [0, 0, 0, 0])

    def test_missing_trailing_row_keeps_dimension(self):
        board = [[2, 4, 8, 16], [32, 64, 128, 256], [512, 1024, 2, 4]]
        transposed = transpose(board)
        self.assertEqual(transposed.shape, (4, 4))
        np.testing.assert_array_equal(transposed[:, 0], [2, 4, 8, 16])
        np.testing.assert_array_equal(transposed[:, 3], [0, 0, 0, 0])
        reversed_board = reverse_rows(board)
        self.assertEqual(reversed_board.shape, (4, 4))
        np.testing.assert_array_equal(reversed_board[2], [4, 2, 1024, 512])


class TestNormalization(unittest.TestCase):

    def test_coerces_malformed_rows(self):
        board = [[2, None, 4, None], [2, 4], None, [2, 'x', 4, 8]]
        expected = np.array([
            [2, 0, 4, 0],
            [0, 0, 0, 0],
            [0, 0, 0, 0],
            [0, 0, 0, 0],
        ])
        np.testing.assert_array_equal(normalize_board(board), expected)

    def test_non_grid_input(self):
        np.testing.assert_array_equal(normalize_board(None), create_empty_board())
        np.testing.assert_array_equal(normalize_board(17), create_empty_board())

    def test_copy(self):
        board = np.array([[2, 0], [0, 4]])
        out = normalize_board(board)
        out[0, 0] = 8
        self.assertEqual(board[0, 0], 2)

    def test_board_to_list(self):
        self.assertEqual(board_to_list(np.array([[2, 0], [0, 4]])), [[2, None], [None, 4]])

    def test_format_board(self):
        text = format_board(np.array([[2, 0], [0, 2048]]))
        self.assertEqual(text, "|   2|    |\n+----+----+\n|    |2048|")


if __name__ == "__main__":
    unittest.main()
