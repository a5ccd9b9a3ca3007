# session.py
# Timing and notification layer around a GameEngine. The engine applies the
# rules; the session decides when each phase of a move becomes visible and
# refuses new commands while a move is still animating.

from typing import Callable, List, Optional, Protocol, Tuple
import asyncio
import heapq
import itertools
import logging

from blinker import Namespace

from best_score import BestScoreStore
from core import Direction
from engine import GameEngine, MoveResult

logger = logging.getLogger(__name__)

# Seconds. Renderers time their animations against these.
SPAWN_DELAY = 0.150
MERGE_SETTLE_DELAY = 0.100
GAME_OVER_PROMPT_DELAY = 0.500


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        ...


class ImmediateScheduler:
    """Runs every callback as soon as it is scheduled. For terminals and tests."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        callback()


class ManualScheduler:
    """
    Fake clock. Callbacks run only when `advance` moves time past their due
    time, in due-time order and, for equal due times, in submission order.
    """

    def __init__(self):
        self.now = 0.0
        self._queue: List[Tuple[float, int, Callable[[], None]]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        heapq.heappush(self._queue, (self.now + delay, next(self._counter), callback))

    @property
    def pending(self) -> int:
        return len(self._queue)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target + 1e-9:
            due, _, callback = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            callback()
        self.now = target

    def run_all(self) -> None:
        while self._queue:
            self.advance(self._queue[0][0] - self.now)


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        self.loop.call_later(delay, callback)


class GameSession:
    """
    Drives one GameEngine for an interactive front-end.

    Signals (sender is the session):
        board_changed: kwargs board, score, best_score, state
        merge_settled: kwargs score_gained
        game_over:     kwargs score

    While `busy` is set, moves, new games and undos are all refused.
    """

    def __init__(self, engine: GameEngine, scheduler: Optional[Scheduler] = None,
                 best_scores: Optional[BestScoreStore] = None):
        self.engine = engine
        self.scheduler = scheduler or ImmediateScheduler()
        self.best_scores = best_scores
        self.best_score = best_scores.load() if best_scores is not None else 0
        self.busy = False
        signals = Namespace()
        self.board_changed = signals.signal("board_changed")
        self.merge_settled = signals.signal("merge_settled")
        self.game_over = signals.signal("game_over")

    # --- Commands ---

    def new_game(self) -> bool:
        if self.busy:
            logger.debug("New game refused: move in progress")
            return False
        self.engine.new_game()
        self._publish()
        return True

    def undo(self) -> bool:
        if self.busy:
            logger.debug("Undo refused: move in progress")
            return False
        if not self.engine.undo():
            return False
        self._publish()
        return True

    def request_move(self, direction: Direction) -> Optional[MoveResult]:
        """
        Starts a move. The slide is applied at once; the spawn and the
        game-over check run SPAWN_DELAY later through the scheduler.
        Returns:
            Optional[MoveResult]: None if the move was refused because another
                                  one is in progress, else the slide result.
        """
        if self.busy:
            logger.debug("Move %s refused: move in progress", direction)
            return None
        self.busy = True
        was_over = self.engine.is_over
        try:
            result = self.engine.slide(direction)
        except Exception:
            self.busy = False
            raise
        if not result.changed:
            self.busy = False
            if self.engine.is_over and not was_over:
                self._announce_game_over()
            return result

        self._publish()
        self.scheduler.call_later(MERGE_SETTLE_DELAY, lambda: self._emit(self.merge_settled, score_gained=result.score_gained))
        self.scheduler.call_later(SPAWN_DELAY, self._finish_move)
        return result

    # --- Deferred work ---

    def _finish_move(self) -> None:
        try:
            self.engine.settle()
            self._publish()
        finally:
            self.busy = False
        if self.engine.is_over:
            self._announce_game_over()

    def _announce_game_over(self) -> None:
        score = self.engine.score
        self.scheduler.call_later(GAME_OVER_PROMPT_DELAY, lambda: self._emit(self.game_over, score=score))

    def _publish(self) -> None:
        score = self.engine.score
        if score > self.best_score:
            self.best_score = score
            if self.best_scores is not None:
                self.best_scores.save(score)
        self._emit(self.board_changed, board=self.engine.board, score=score,
                   best_score=self.best_score, state=self.engine.state)

    def _emit(self, signal, **payload) -> None:
        # A broken renderer must not leave the session busy or half-updated.
        for receiver in list(signal.receivers_for(self)):
            try:
                receiver(self, **payload)
            except Exception:
                logger.exception("Receiver %r failed on %s", receiver, signal.name)
