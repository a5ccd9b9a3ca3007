# leaderboard.py
# Shared high-score table backed by SQLite.

from contextlib import closing
from dataclasses import dataclass
from typing import List
import logging
import sqlite3

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 50
TOP_N = 10

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS leaderboard (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        player_name VARCHAR(50) NOT NULL,
        score INTEGER NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_score ON leaderboard(score DESC)",
)


class LeaderboardError(Exception):
    """Leaderboard storage failed."""


class LeaderboardUnavailableError(LeaderboardError):
    """The database is temporarily unavailable (locked, missing, starting up)."""


@dataclass(frozen=True)
class ScoreEntry:
    player_name: str
    score: int
    created_at: str


def normalize_player_name(name: str) -> str:
    """
    Trims surrounding whitespace and truncates to the column width.
    Raises:
        ValueError: If nothing is left after trimming.
    """
    trimmed = name.strip()
    if not trimmed:
        raise ValueError("Player name is required.")
    return trimmed[:MAX_NAME_LENGTH]


class LeaderboardRepository:
    """Append-only score table. One short-lived connection per operation."""

    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path, timeout=self.timeout)

    def _run(self, action, description: str):
        try:
            with closing(self._connect()) as conn:
                with conn:
                    return action(conn)
        except sqlite3.OperationalError as e:
            logger.error("Database unavailable while %s: %s", description, e)
            raise LeaderboardUnavailableError(str(e)) from e
        except sqlite3.Error as e:
            logger.error("Database error while %s", description, exc_info=True)
            raise LeaderboardError(str(e)) from e

    def init_schema(self) -> None:
        def create(conn: sqlite3.Connection) -> None:
            for statement in SCHEMA:
                conn.execute(statement)
        self._run(create, "initializing schema")
        logger.info("Leaderboard database initialized at %s", self.db_path)

    def top_scores(self, limit: int = TOP_N) -> List[ScoreEntry]:
        """Highest scores first; ties keep insertion order."""
        def select(conn: sqlite3.Connection) -> List[ScoreEntry]:
            rows = conn.execute(
                "SELECT player_name, score, created_at FROM leaderboard "
                "ORDER BY score DESC, id ASC LIMIT ?",
                (limit,),
            ).fetchall()
            return [ScoreEntry(player_name=r[0], score=r[1], created_at=str(r[2])) for r in rows]
        return self._run(select, "fetching leaderboard")

    def add_score(self, player_name: str, score: int) -> None:
        """
        Records a final score.
        Raises:
            ValueError: If the name is blank or the score is negative.
            LeaderboardError: If the insert fails.
        """
        name = normalize_player_name(player_name)
        if isinstance(score, bool) or not isinstance(score, int) or score < 0:
            raise ValueError("Score must be a non-negative integer.")

        def insert(conn: sqlite3.Connection) -> None:
            conn.execute("INSERT INTO leaderboard (player_name, score) VALUES (?, ?)", (name, score))
        self._run(insert, "submitting score")
        logger.info("Recorded score %d for %s", score, name)
