# engine.py
# Stateful Grid Engine: owns the board, score, progress state and the bounded
# undo history of a single game. No rendering, storage or timing in here.

from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Tuple
import logging
import random

import core
from core import Direction, GameProgressState

logger = logging.getLogger(__name__)

MAX_HISTORY = 10


@dataclass(frozen=True)
class Snapshot:
    """Board and score saved before a move. The progress state is not kept."""
    board: Tuple[Tuple[int, ...], ...]
    score: int


@dataclass(frozen=True)
class MoveResult:
    changed: bool
    score_gained: int
    state: GameProgressState


class GameEngine:
    """
    A single game of 2048 on an N x N board.

    A move is applied in two phases. `slide` compacts and merges every line
    and records the undo snapshot; `settle` spawns the follow-up tile and
    checks for the end of the game. `move` runs both back to back. Callers
    that animate the slide (see `session.GameSession`) call `settle` later.
    """

    def __init__(self, size: int = core.DEFAULT_SIZE, rng: Optional[random.Random] = None,
                 max_history: int = MAX_HISTORY):
        if max_history < 1:
            raise ValueError("max_history must be at least 1.")
        self.size = size
        self.rng = rng if rng is not None else random.Random()
        self._history: Deque[Snapshot] = deque(maxlen=max_history)
        self._board: List[List[int]] = core.empty_board(size)
        self._score = 0
        self._state = GameProgressState.PLAYING
        self._settle_pending = False
        self.new_game()

    # --- Read access ---

    @property
    def board(self) -> List[List[int]]:
        return core.copy_board(self._board)

    @property
    def score(self) -> int:
        return self._score

    @property
    def state(self) -> GameProgressState:
        return self._state

    @property
    def is_over(self) -> bool:
        return self._state == GameProgressState.GAME_OVER

    @property
    def history_depth(self) -> int:
        return len(self._history)

    @property
    def settle_pending(self) -> bool:
        return self._settle_pending

    # --- Commands ---

    def new_game(self) -> None:
        """Resets board, score and history, then places the two starting tiles."""
        self._board = core.empty_board(self.size)
        self._score = 0
        self._state = GameProgressState.PLAYING
        self._history.clear()
        self._settle_pending = False
        self.spawn_tile()
        self.spawn_tile()
        logger.debug("New %dx%d game: %s", self.size, self.size, self._board)

    def spawn_tile(self) -> Optional[Tuple[int, int]]:
        """
        Places a 2 (90%) or a 4 (10%) on a uniformly chosen empty cell.
        Returns:
            Optional[Tuple[int, int]]: The cell that received the tile, or None
                                       if the board was full.
        """
        cell = core.place_random_tile(self._board, self.rng)
        if cell is not None:
            logger.debug("Spawned %d at %s", self._board[cell[0]][cell[1]], cell)
        return cell

    def slide(self, direction: Direction) -> MoveResult:
        """
        First phase of a move: compact and merge every line towards `direction`.

        If nothing moved, the call is transparent: board, score and history
        are exactly as before. A board with no legal move is marked GAME_OVER.
        Raises:
            ValueError: If `direction` is not a Direction.
            RuntimeError: If the previous slide has not been settled yet.
        """
        if not isinstance(direction, Direction):
            raise ValueError(f"Invalid direction {direction!r}.")
        if self._settle_pending:
            raise RuntimeError("Previous move has not been settled.")
        if self.is_over:
            return MoveResult(False, 0, self._state)

        new_board, score_gained, changed = core.process_move(self._board, direction)

        if not changed:
            if not core.can_move(self._board):
                self._game_over()
            return MoveResult(False, 0, self._state)

        # Snapshot only effective moves so a no-op never evicts the oldest entry.
        self._push_snapshot()
        self._board = new_board
        self._score += score_gained
        self._settle_pending = True
        logger.debug("Slid %s, gained %d", direction.value, score_gained)
        return MoveResult(True, score_gained, self._state)

    def settle(self) -> GameProgressState:
        """
        Second phase of a move: spawn one tile and check whether any legal
        move remains.
        Raises:
            RuntimeError: If no slide is waiting to be settled.
        """
        if not self._settle_pending:
            raise RuntimeError("No move to settle.")
        self._settle_pending = False
        self.spawn_tile()
        if not self.can_move():
            self._game_over()
        return self._state

    def move(self, direction: Direction) -> MoveResult:
        """Slides towards `direction` and, if the board changed, settles at once."""
        result = self.slide(direction)
        if not result.changed:
            return result
        return MoveResult(True, result.score_gained, self.settle())

    def can_move(self) -> bool:
        return core.can_move(self._board)

    def undo(self) -> bool:
        """
        Restores the board and score saved before the last effective move.
        Does nothing once the game is over, with an empty history, or while a
        slide waits to be settled.
        Returns:
            bool: True if a snapshot was restored.
        """
        if self.is_over or self._settle_pending or not self._history:
            return False
        snapshot = self._history.pop()
        self._board = [list(row) for row in snapshot.board]
        self._score = snapshot.score
        self._state = GameProgressState.PLAYING
        return True

    def load(self, board: List[List[int]], score: int = 0) -> None:
        """
        Replaces the current position. History is cleared and the progress
        state recomputed from the board.
        Raises:
            ValueError: If the board does not match the engine size, holds a
                        value that is not a tile, or the score is negative.
        """
        if core.validate_board(board) != self.size:
            raise ValueError(f"Board must be {self.size}x{self.size}.")
        if isinstance(score, bool) or not isinstance(score, int) or score < 0:
            raise ValueError("Score must be a non-negative integer.")
        self._board = core.copy_board(board)
        self._score = score
        self._history.clear()
        self._settle_pending = False
        self._state = core.determine_game_status(self._board)

    # --- Internals ---

    def _push_snapshot(self) -> None:
        self._history.append(Snapshot(tuple(tuple(row) for row in self._board), self._score))

    def _game_over(self) -> None:
        self._state = GameProgressState.GAME_OVER
        logger.debug("Game over with score %d", self._score)
