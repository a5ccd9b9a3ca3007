# config.py
# Runtime settings read from environment variables.

from dataclasses import dataclass
from typing import Mapping, Optional
import os

DEFAULT_DB_PATH = "leaderboard.db"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_RATE_LIMIT = "100/minute"
DEFAULT_BEST_SCORE_FILE = os.path.join("~", ".tilemerge_best_score.json")
DEFAULT_LOG_LEVEL = "INFO"


def _int_from_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}.") from None


@dataclass(frozen=True)
class Settings:
    """Settings for the leaderboard server and the terminal client."""
    db_path: str = DEFAULT_DB_PATH
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    rate_limit: str = DEFAULT_RATE_LIMIT
    best_score_file: str = DEFAULT_BEST_SCORE_FILE
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Builds settings from the process environment (or the given mapping).
        Raises:
            ValueError: If PORT is set but is not an integer.
        """
        env = os.environ if env is None else env
        return cls(
            db_path=env.get("TILEMERGE_DB_PATH", DEFAULT_DB_PATH),
            host=env.get("TILEMERGE_HOST", DEFAULT_HOST),
            port=_int_from_env(env, "PORT", DEFAULT_PORT),
            rate_limit=env.get("TILEMERGE_RATE_LIMIT", DEFAULT_RATE_LIMIT),
            best_score_file=os.path.expanduser(env.get("TILEMERGE_BEST_SCORE_FILE", DEFAULT_BEST_SCORE_FILE)),
            log_level=env.get("TILEMERGE_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )
