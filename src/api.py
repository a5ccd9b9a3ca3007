from contextlib import asynccontextmanager
from typing import List, Optional
import logging

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

import core
from config import Settings
from leaderboard import (
    LeaderboardError,
    LeaderboardRepository,
    LeaderboardUnavailableError,
    normalize_player_name,
)

logger = logging.getLogger(__name__)

app_settings = Settings.from_env()
repository = LeaderboardRepository(app_settings.db_path)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The server keeps running without a schema; leaderboard calls then answer 503.
    try:
        repository.init_schema()
    except LeaderboardError:
        logger.error("Leaderboard database could not be initialized; continuing without it")
    yield


# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="2048 Game API",
    description="Shared leaderboard for the 2048 game, plus stateless game endpoints. "\
                "Game state (board, score) is managed on the client side.",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> List[dict]:
    return [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]


def get_repository() -> LeaderboardRepository:
    return repository


# --- Pydantic Models for API requests and responses ---

class ScoreSubmission(BaseModel):
    """A final score sent by a client at game over."""
    model_config = ConfigDict(populate_by_name=True)

    player_name: str = Field(..., alias="playerName", description="Player name, trimmed and cut to 50 characters.")
    score: int = Field(..., ge=0, strict=True, description="Final score of the game.")

    @field_validator("player_name")
    @classmethod
    def clean_player_name(cls, value: str) -> str:
        return normalize_player_name(value)


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    player_name: str = Field(..., alias="playerName")
    score: int
    created_at: str = Field(..., alias="createdAt")


class SubmissionResult(BaseModel):
    success: bool


class NewGameSettings(BaseModel):
    """Settings for creating a new game."""
    size: Optional[int] = Field(
        default=core.DEFAULT_SIZE,
        ge=2,
        le=16,
        description="Size of the N x N game board (e.g., 4 for a 4x4 board)."
    )


class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    board: List[List[int]] = Field(..., description="The N x N game board, represented as a list of lists.")
    score: int = Field(..., ge=0, description="Current score of the game.")
    progress: core.GameProgressState = Field(
        ...,
        description="Current progress state of the game (PLAYING, GAME_OVER)."
    )
    board_size: int = Field(..., gt=0, description="The dimension N of the N x N board.")


class MoveRequestData(BaseModel):
    """Data required to make a move."""
    board: List[List[int]] = Field(..., description="Current N x N game board state before the move.")
    score: int = Field(..., ge=0, strict=True, description="Current score before the move.")
    direction: core.Direction = Field(
        ...,
        description="Direction of the move (up, down, left, right)."
    )


class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    move_was_effective: bool = Field(
        ...,
        description="True if the move resulted in a change to the board state, False otherwise."
    )
    score_gained: int = Field(..., ge=0, description="Sum of the tiles created by merges in this move.")
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was not effective or the game ended."
    )


# --- Leaderboard Endpoints ---

@app.get("/api/leaderboard", response_model=List[LeaderboardEntry], summary="Top 10 Scores")
@limiter.limit(app_settings.rate_limit)
def get_leaderboard(request: Request, repo: LeaderboardRepository = Depends(get_repository)):
    """Returns up to ten recorded scores, highest first."""
    try:
        entries = repo.top_scores()
    except LeaderboardUnavailableError:
        raise HTTPException(status_code=503, detail="Leaderboard is starting up, please retry shortly.")
    except LeaderboardError:
        raise HTTPException(status_code=500, detail="Failed to fetch leaderboard")
    return [
        LeaderboardEntry(player_name=e.player_name, score=e.score, created_at=e.created_at)
        for e in entries
    ]


@app.post("/api/score", response_model=SubmissionResult, summary="Submit a Final Score")
@limiter.limit(app_settings.rate_limit)
def submit_score(request: Request, submission: ScoreSubmission,
                 repo: LeaderboardRepository = Depends(get_repository)):
    """
    Records a score on the shared leaderboard.

    - **playerName**: non-empty after trimming; longer names are cut to 50 characters.
    - **score**: non-negative integer.
    """
    try:
        repo.add_score(submission.player_name, submission.score)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LeaderboardUnavailableError:
        raise HTTPException(status_code=503, detail="Leaderboard is starting up, please retry shortly.")
    except LeaderboardError:
        raise HTTPException(status_code=500, detail="Failed to submit score")
    return SubmissionResult(success=True)


# --- Game Endpoints ---

@app.post("/game/new", response_model=GameStateData, summary="Start a New 2048 Game")
@limiter.limit(app_settings.rate_limit)
async def start_new_game(request: Request, settings: NewGameSettings):
    """
    Initializes a new 2048 game of the requested size.

    - **size**: Dimension of the N x N board (e.g., 4 for 4x4). Default is 4.

    Returns the initial game state, including the board with two random tiles,
    score (0) and progress status (PLAYING).
    """
    size = settings.size if settings.size is not None else core.DEFAULT_SIZE
    try:
        initial_board, initial_score, current_progress = core.initialize_board(size)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return GameStateData(
        board=initial_board,
        score=initial_score,
        progress=current_progress,
        board_size=size
    )


@app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit(app_settings.rate_limit)
async def make_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    Requires the current `board` state, `score` and the `direction` of the move.

    The API will:
    1. Attempt to process the move (slide tiles, merge).
    2. If the move changed the board, add a new random tile (2 or 4).
    3. Determine the new game status (PLAYING, GAME_OVER).
    """
    try:
        board_size_from_request = core.validate_board(request_data.board)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid board in request: {str(e)}")

    final_board, score_increase, move_was_effective = core.process_move(
        request_data.board, request_data.direction
    )
    final_score = request_data.score + score_increase
    message_for_client: Optional[str] = None

    if move_was_effective:
        core.place_random_tile(final_board)
    else:
        message_for_client = "Move was not effective; board state unchanged by slide."

    current_progress = core.determine_game_status(final_board)
    if current_progress == core.GameProgressState.GAME_OVER:
        message_for_client = "Game Over. No more valid moves."

    return MoveResponseData(
        board=final_board,
        score=final_score,
        progress=current_progress,
        board_size=board_size_from_request,
        move_was_effective=move_was_effective,
        score_gained=score_increase,
        message=message_for_client
    )


def main():
    import uvicorn

    logging.basicConfig(level=app_settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=app_settings.host, port=app_settings.port)


if __name__ == "__main__":
    main()
