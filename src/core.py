# core.py
# Stateless board logic for the 2048 game. The stateful engine and the
# HTTP API are both built on top of these functions.

from enum import Enum
from typing import List, Optional, Tuple
import random

DEFAULT_SIZE = 4
FOUR_PROBABILITY = 0.1


class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    PLAYING = "PLAYING"
    GAME_OVER = "GAME_OVER"


class Direction(Enum):
    """Represents the possible move directions."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


# --- Board Helper Functions ---

def get_board_size(board: List[List[int]]) -> int:
    """
    Gets the size (N) of an N x N board.
    Args:
        board (List[List[int]]): The game board.
    Returns:
        int: The dimension of the board.
    Raises:
        ValueError: If the board is not square or empty.
    """
    if not board or not all(len(row) == len(board) for row in board):
        raise ValueError("Board must be a non-empty square matrix.")
    return len(board)


def is_valid_tile(value: int) -> bool:
    """Zero or a power of two no smaller than 2."""
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return value == 0 or (value >= 2 and value & (value - 1) == 0)


def validate_board(board: List[List[int]]) -> int:
    """
    Checks shape and cell values of a board.
    Args:
        board (List[List[int]]): The board to validate.
    Returns:
        int: The dimension of the board.
    Raises:
        ValueError: If the board is not square or holds a value that is not a tile.
    """
    n = get_board_size(board)
    for r, row in enumerate(board):
        for c, value in enumerate(row):
            if not is_valid_tile(value):
                raise ValueError(f"Invalid tile value {value!r} at ({r}, {c}).")
    return n


def copy_board(board: List[List[int]]) -> List[List[int]]:
    return [list(row) for row in board]


def empty_board(size: int = DEFAULT_SIZE) -> List[List[int]]:
    if not isinstance(size, int) or size < 2:
        raise ValueError("Board size must be an integer of at least 2.")
    return [[0] * size for _ in range(size)]


def get_empty_cells(board: List[List[int]]) -> List[Tuple[int, int]]:
    """
    Get coordinates of empty (0-value) cells in the given board, in row-major order.
    Args:
        board (List[List[int]]): The board to check.
    Returns:
        List[Tuple[int, int]]: List of (row, col) tuples for empty cells.
    """
    n = get_board_size(board)
    empty_cells = []
    for row in range(n):
        for col in range(n):
            if board[row][col] == 0:
                empty_cells.append((row, col))
    return empty_cells


def place_random_tile(board: List[List[int]], rng: Optional[random.Random] = None) -> Optional[Tuple[int, int]]:
    """
    Places a new tile (90% chance of 2, 10% chance of 4) on a uniformly chosen
    empty cell, mutating the board in place.
    Args:
        board (List[List[int]]): The board to place the tile on.
        rng (Optional[random.Random]): Random source. Defaults to the module-level generator.
    Returns:
        Optional[Tuple[int, int]]: The (row, col) that received the tile, or None
                                   if the board was full and nothing changed.
    """
    rng = rng or random
    empty_cells = get_empty_cells(board)
    if not empty_cells:
        return None
    row, col = rng.choice(empty_cells)
    board[row][col] = 4 if rng.random() < FOUR_PROBABILITY else 2
    return row, col


def initialize_board(size: int = DEFAULT_SIZE, rng: Optional[random.Random] = None) -> Tuple[List[List[int]], int, GameProgressState]:
    """
    Initializes a new game board with two random tiles.
    Args:
        size (int): The dimension of the N x N game board. Default is 4.
        rng (Optional[random.Random]): Random source.
    Returns:
        Tuple[List[List[int]], int, GameProgressState]: The initial board, score (0),
                                                       and game state (PLAYING).
    Raises:
        ValueError: If board size is not an integer of at least 2.
    """
    current_board = empty_board(size)
    place_random_tile(current_board, rng)
    place_random_tile(current_board, rng)
    return current_board, 0, GameProgressState.PLAYING


# --- Line Manipulation (Core Move Logic Helpers) ---

def compact_line(line: List[int]) -> List[int]:
    """Drops the zero cells of a line, keeping the order of the others."""
    return [value for value in line if value != 0]


def merge_line(line: List[int]) -> Tuple[List[int], int]:
    """
    Merges adjacent identical numbers of a compacted line in a single pass
    towards index 0. A merged tile never merges again in the same pass, so
    [2, 2, 2, 2] becomes [4, 4].
    Args:
        line (List[int]): A compacted line (no zeros).
    Returns:
        Tuple[List[int], int]: Merged line (not padded) and the score gained.
    """
    merged = []
    score_gained = 0
    i = 0
    while i < len(line):
        if i + 1 < len(line) and line[i] == line[i + 1]:
            value = line[i] * 2
            merged.append(value)
            score_gained += value
            i += 2
        else:
            merged.append(line[i])
            i += 1
    return merged, score_gained


def process_line(line: List[int]) -> Tuple[List[int], int]:
    """
    Applies compact, merge and right-padding to a single line, moving left.
    Args:
        line (List[int]): The line to process.
    Returns:
        Tuple[List[int], int]: The processed line (same length) and the score gained.
    """
    merged, score_gained = merge_line(compact_line(line))
    return merged + [0] * (len(line) - len(merged)), score_gained


# --- Line Extraction ---

def get_line(board: List[List[int]], index: int, direction: Direction) -> List[int]:
    """
    Reads line `index` of the board oriented so that index 0 is the edge the
    tiles move towards.
    Raises:
        ValueError: If the direction is unknown or the index is out of range.
    """
    n = get_board_size(board)
    if not 0 <= index < n:
        raise ValueError(f"Line index {index} out of range for a {n}x{n} board.")
    if direction == Direction.LEFT:
        return [board[index][i] for i in range(n)]
    if direction == Direction.RIGHT:
        return [board[index][n - 1 - i] for i in range(n)]
    if direction == Direction.UP:
        return [board[i][index] for i in range(n)]
    if direction == Direction.DOWN:
        return [board[n - 1 - i][index] for i in range(n)]
    raise ValueError(f"Invalid direction {direction!r}.")


def set_line(board: List[List[int]], index: int, line: List[int], direction: Direction) -> None:
    """Writes a line back through the inverse of the `get_line` transform."""
    n = get_board_size(board)
    if not 0 <= index < n or len(line) != n:
        raise ValueError(f"Line {index} of length {len(line)} does not fit a {n}x{n} board.")
    for i, value in enumerate(line):
        if direction == Direction.LEFT:
            board[index][i] = value
        elif direction == Direction.RIGHT:
            board[index][n - 1 - i] = value
        elif direction == Direction.UP:
            board[i][index] = value
        elif direction == Direction.DOWN:
            board[n - 1 - i][index] = value
        else:
            raise ValueError(f"Invalid direction {direction!r}.")


# --- Core Game Move Processing ---

def process_move(board: List[List[int]], direction: Direction) -> Tuple[List[List[int]], int, bool]:
    """
    Processes a move in the specified direction on a copy of the board.
    Args:
        board (List[List[int]]): The current game board.
        direction (Direction): The direction to move.
    Returns:
        Tuple[List[List[int]], int, bool]:
            - The new board state after the move.
            - The score gained from this move (0 if the board did not change).
            - A boolean indicating if the board changed as a result of the move.
    Raises:
        ValueError: If an invalid direction is specified or the board is not square.
    """
    if not isinstance(direction, Direction):
        raise ValueError(f"Invalid direction {direction!r} specified for process_move.")
    n = get_board_size(board)
    new_board = copy_board(board)
    score_gained = 0

    for index in range(n):
        line, gained = process_line(get_line(new_board, index, direction))
        set_line(new_board, index, line, direction)
        score_gained += gained

    changed = new_board != board
    return new_board, (score_gained if changed else 0), changed


# --- Game State Checks ---

def can_move(board: List[List[int]]) -> bool:
    """
    Checks if any legal move remains: an empty cell, or a cell equal to its
    right or lower neighbour.
    Args:
        board (List[List[int]]): The game board.
    Returns:
        bool: True if at least one move can change the board.
    """
    n = get_board_size(board)
    for r in range(n):
        for c in range(n):
            value = board[r][c]
            if value == 0:
                return True
            if c < n - 1 and value == board[r][c + 1]:
                return True
            if r < n - 1 and value == board[r + 1][c]:
                return True
    return False


def determine_game_status(board: List[List[int]]) -> GameProgressState:
    """
    Determines the current progress state of the game based on the board.
    Args:
        board (List[List[int]]): The current game board.
    Returns:
        GameProgressState: PLAYING while a legal move remains, GAME_OVER otherwise.
    """
    return GameProgressState.PLAYING if can_move(board) else GameProgressState.GAME_OVER
