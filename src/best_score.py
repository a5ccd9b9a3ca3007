# best_score.py
# Best score persisted across games in a small JSON file.

from pathlib import Path
from typing import Union
import json
import logging

logger = logging.getLogger(__name__)

BEST_SCORE_KEY = "maxScore"


class BestScoreStore:
    """
    Key-value store holding the best score ever reached.

    Storage failures never reach the game: a failed read counts as 0 and a
    failed write is logged and dropped.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> int:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return 0
        except (OSError, ValueError):
            logger.warning("Could not read best score from %s", self.path, exc_info=True)
            return 0
        value = data.get(BEST_SCORE_KEY) if isinstance(data, dict) else None
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            logger.warning("Ignoring malformed best score in %s: %r", self.path, value)
            return 0
        return value

    def save(self, score: int) -> bool:
        """Returns False if the score could not be written."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps({BEST_SCORE_KEY: score}), encoding="utf-8")
        except OSError:
            logger.warning("Could not write best score to %s", self.path, exc_info=True)
            return False
        return True
