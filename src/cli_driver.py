# cli_driver.py
# Run this file to play 2048 in the terminal.

from typing import List, Optional
import argparse
import logging
import random

from best_score import BestScoreStore
from config import Settings
from core import Direction, GameProgressState
from engine import GameEngine
from leaderboard import LeaderboardError, LeaderboardRepository
from session import GameSession, ImmediateScheduler

logger = logging.getLogger(__name__)

DIRECTION_KEYS = {'W': Direction.UP, 'A': Direction.LEFT, 'S': Direction.DOWN, 'D': Direction.RIGHT}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="Play 2048 in the terminal.")
    parser.add_argument("--size", type=int, default=4, help="board dimension N (default: 4)")
    parser.add_argument("--seed", type=int, default=None, help="seed for a reproducible game")
    parser.add_argument("--best-score-file", default=settings.best_score_file,
                        help="where the best score is kept")
    parser.add_argument("--db", default=settings.db_path,
                        help="leaderboard database to record final scores in")
    parser.add_argument("--log-level", default=settings.log_level)
    return parser.parse_args(argv)


# --- Display Functions ---

def format_board(board: List[List[int]]) -> str:
    width = max(4, max(len(str(v)) for row in board for v in row))
    lines = []
    for row in board:
        lines.append(" ".join(str(v).rjust(width) if v else ".".rjust(width) for v in row))
    return "\n".join(lines)


def display_board_state(session: GameSession, board: List[List[int]], score: int,
                        best_score: int, state: GameProgressState) -> None:
    """Prints the board, score, and game status to the console."""
    print(f"\nScore: {score}    Best: {best_score}")
    if state == GameProgressState.GAME_OVER:
        print("GAME OVER!")
    print(format_board(board))
    print("-" * (len(board) * 6))


def record_score(db_path: str, score: int) -> None:
    name = input("Enter your name for the leaderboard (blank to skip): ")
    if not name.strip():
        return
    repo = LeaderboardRepository(db_path)
    try:
        repo.init_schema()
        repo.add_score(name, score)
        top = repo.top_scores()
    except LeaderboardError:
        logger.warning("Leaderboard submission failed for %s", db_path)
        print("Could not reach the leaderboard; score not recorded.")
        return
    print("\n--- Leaderboard ---")
    for rank, entry in enumerate(top, start=1):
        print(f"{rank:>2}. {entry.player_name:<20} {entry.score}")


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    engine = GameEngine(size=args.size, rng=random.Random(args.seed))
    session = GameSession(engine, ImmediateScheduler(), BestScoreStore(args.best_score_file))
    session.board_changed.connect(display_board_state, weak=False)
    session.game_over.connect(lambda s, score: print(f"No more moves possible. Final score: {score}"), weak=False)

    display_board_state(session, engine.board, engine.score, session.best_score, engine.state)

    while True:
        move_input = input("Move (W/A/S/D), U undo, N new game, Q quit: ").strip().upper()

        if move_input == 'Q':
            print("Quitting game.")
            break
        if move_input == 'N':
            session.new_game()
            continue
        if move_input == 'U':
            if not session.undo():
                print("Nothing to undo.")
            continue

        chosen_direction = DIRECTION_KEYS.get(move_input)
        if not chosen_direction:
            print("Invalid input. Use W, A, S, D, U, N or Q.")
            continue

        result = session.request_move(chosen_direction)
        if result is not None and not result.changed and not engine.is_over:
            print("Move did not change the board. Try a different direction.")

        if engine.is_over:
            record_score(args.db, engine.score)
            again = input("Play again? (y/N): ").strip().upper()
            if again != 'Y':
                break
            session.new_game()


if __name__ == "__main__":
    main()
