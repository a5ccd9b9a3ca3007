import random

import pytest

import core
from core import Direction, GameProgressState


def test_merge_is_single_pass():
    assert core.process_line([2, 2, 2, 2]) == ([4, 4, 0, 0], 8)


def test_process_line_compacts_before_merging():
    assert core.process_line([2, 0, 0, 2]) == ([4, 0, 0, 0], 4)
    assert core.process_line([0, 4, 0, 8]) == ([4, 8, 0, 0], 0)


def test_merged_tile_does_not_merge_again():
    assert core.process_line([4, 4, 8, 0]) == ([8, 8, 0, 0], 8)
    assert core.process_line([2, 2, 4, 8]) == ([4, 4, 8, 0], 4)


def test_first_pair_wins_in_odd_runs():
    assert core.process_line([2, 2, 2, 0]) == ([4, 2, 0, 0], 4)


def test_empty_line():
    assert core.process_line([0, 0, 0, 0]) == ([0, 0, 0, 0], 0)


HORIZONTAL = [
    [2, 2, 0, 0],
    [0, 4, 4, 2],
    [0, 0, 0, 0],
    [0, 0, 0, 2],
]

VERTICAL = [
    [2, 2, 0, 0],
    [0, 2, 4, 2],
    [0, 0, 4, 0],
    [0, 0, 4, 0],
]


@pytest.mark.parametrize("board, direction, expected", [
    (HORIZONTAL, Direction.LEFT, [[4, 0, 0, 0], [8, 2, 0, 0], [0, 0, 0, 0], [2, 0, 0, 0]]),
    (HORIZONTAL, Direction.RIGHT, [[0, 0, 0, 4], [0, 0, 8, 2], [0, 0, 0, 0], [0, 0, 0, 2]]),
    (VERTICAL, Direction.UP, [[2, 4, 8, 2], [0, 0, 4, 0], [0, 0, 0, 0], [0, 0, 0, 0]]),
    (VERTICAL, Direction.DOWN, [[0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 4, 0], [2, 4, 8, 2]]),
])
def test_process_move_directions(board, direction, expected):
    new_board, _, changed = core.process_move(board, direction)
    assert changed
    assert new_board == expected


def test_process_move_reports_score_and_does_not_mutate_input():
    board = [
        [2, 2, 4, 4],
        [8, 8, 8, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
    ]
    snapshot = core.copy_board(board)
    new_board, gained, changed = core.process_move(board, Direction.LEFT)
    assert changed
    assert gained == 4 + 8 + 16
    assert new_board[0] == [4, 8, 0, 0]
    assert new_board[1] == [16, 8, 0, 0]
    assert board == snapshot


def test_process_move_noop():
    board = [[2, 4], [0, 0]]
    new_board, gained, changed = core.process_move(board, Direction.UP)
    assert (new_board, gained, changed) == (board, 0, False)


def test_process_move_rejects_unknown_direction():
    with pytest.raises(ValueError):
        core.process_move([[0, 0], [0, 0]], "left")


def test_get_line_rejects_out_of_range_index():
    with pytest.raises(ValueError):
        core.get_line([[0, 0], [0, 0]], 2, Direction.LEFT)


def test_can_move_examples():
    assert core.can_move([[2, 4], [4, 2]]) is False
    assert core.can_move([[2, 2], [4, 8]]) is True
    assert core.can_move([[2, 4], [2, 8]]) is True
    assert core.can_move([[2, 4], [8, 0]]) is True


def test_determine_game_status():
    assert core.determine_game_status([[2, 4], [4, 2]]) == GameProgressState.GAME_OVER
    assert core.determine_game_status([[2, 0], [4, 2]]) == GameProgressState.PLAYING


def test_place_random_tile_only_fills_empty_cells():
    rng = random.Random(7)
    board = [[2, 4, 8, 16], [32, 64, 128, 256], [512, 1024, 2048, 4096], [2, 4, 8, 0]]
    cell = core.place_random_tile(board, rng)
    assert cell == (3, 3)
    assert board[3][3] in (2, 4)
    assert board[0] == [2, 4, 8, 16]


def test_place_random_tile_on_full_board_is_noop():
    board = [[2, 4], [8, 16]]
    assert core.place_random_tile(board, random.Random(1)) is None
    assert board == [[2, 4], [8, 16]]


def test_spawned_values_are_mostly_twos():
    rng = random.Random(1234)
    values = []
    for _ in range(2000):
        board = core.empty_board(4)
        row, col = core.place_random_tile(board, rng)
        values.append(board[row][col])
    assert set(values) == {2, 4}
    fours = values.count(4) / len(values)
    assert 0.05 < fours < 0.15


def test_initialize_board():
    board, score, state = core.initialize_board(4, random.Random(5))
    assert score == 0
    assert state == GameProgressState.PLAYING
    assert sum(v != 0 for row in board for v in row) == 2


@pytest.mark.parametrize("size", [0, 1, -3, "4"])
def test_initialize_board_rejects_bad_size(size):
    with pytest.raises(ValueError):
        core.initialize_board(size)


@pytest.mark.parametrize("board", [
    [],
    [[2, 4], [8]],
    [[3, 0], [0, 0]],
    [[2, -2], [0, 0]],
    [[1, 0], [0, 0]],
])
def test_validate_board_rejects_malformed_boards(board):
    with pytest.raises(ValueError):
        core.validate_board(board)


def test_validate_board_accepts_large_tiles():
    assert core.validate_board([[0, 2], [4096, 131072]]) == 2
