"""
FastAPI web application for the talv engine.

Exposes three JSON endpoints for board UIs:

    POST /api/position  — occupants, side to move, check state and the full
                          legal move list (used to validate user input)
    POST /api/apply     — apply one move, or reject it with HTTP 400
    POST /api/move      — run the engine and return its move

Architecture notes:
- Sync endpoints (not async): FastAPI runs sync handlers in a thread pool,
  which is the correct pattern for CPU-bound blocking calls like search.
- Stateless per request: the client sends the full FEN each time; no
  server-side game state is kept between requests, so repetition history
  is limited to what the FEN's clocks carry.
- Scores are floats in pawns. A forced mate has an infinite score, which
  JSON cannot carry; it is reported as score=null with mate=+1/-1.
"""

import logging
import math

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, field_validator

from talv.board import Move
from talv.constants import DEFAULT_MAX_NODES
from talv.errors import IllegalMove, MalformedInput
from talv.game import Game
from talv.search import search_position

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

logging.basicConfig(level=logging.INFO)
_log = logging.getLogger(__name__)

app = FastAPI(title="talv", version="1.0.0")

# Request limits. Search cost grows steeply with depth in pure Python.
MAX_REQUEST_DEPTH = 4
MAX_REQUEST_NODES = 500_000


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class PositionRequest(BaseModel):
    fen: str


class PositionResponse(BaseModel):
    """
    Read-only view of a position.

    Fields:
        fen: The position, normalized.
        side_to_move: "white" or "black".
        in_check: Whether the side to move is in check.
        board: Occupied squares mapped to FEN piece letters.
        legal_moves: Every legal move in long algebraic form.
        checkmate / stalemate / draw_claimable: Game-end flags.
    """

    fen: str
    side_to_move: str
    in_check: bool
    board: dict[str, str]
    legal_moves: list[str]
    checkmate: bool
    stalemate: bool
    draw_claimable: bool


class ApplyRequest(BaseModel):
    fen: str
    move: str


class ApplyResponse(BaseModel):
    fen: str
    outcome: str


class MoveRequest(BaseModel):
    """
    Client request to the engine.

    Fields:
        fen: Full FEN of the position to search.
        max_depth: Iterative-deepening limit (clamped to [1, MAX_REQUEST_DEPTH]).
        max_nodes: Node budget (clamped to [1, MAX_REQUEST_NODES]).
    """

    fen: str
    max_depth: int = 2
    max_nodes: int = DEFAULT_MAX_NODES

    @field_validator("max_depth")
    @classmethod
    def clamp_depth(cls, v: int) -> int:
        return max(1, min(v, MAX_REQUEST_DEPTH))

    @field_validator("max_nodes")
    @classmethod
    def clamp_nodes(cls, v: int) -> int:
        return max(1, min(v, MAX_REQUEST_NODES))


class MoveResponse(BaseModel):
    """
    Engine response.

    Fields:
        move: Chosen move in long algebraic form (e.g. "e2e4", "e7e8q").
        fen: FEN after the move is applied.
        score: Evaluation in pawns for the side that moved, or null for a mate.
        mate: +1 if the engine mates, -1 if it is being mated, else 0.
        depth: Deepest iteration completed.
        ranked: Every legal move, best first.
    """

    move: str
    fen: str
    score: float | None
    mate: int
    depth: int
    ranked: list[str]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load(fen: str) -> Game:
    try:
        return Game.from_fen(fen)
    except MalformedInput as exc:
        raise HTTPException(status_code=400, detail=f"Invalid FEN: {exc}") from exc


# ---------------------------------------------------------------------------
# API routes
# ---------------------------------------------------------------------------


@app.post("/api/position", response_model=PositionResponse)
def api_position(request: PositionRequest) -> PositionResponse:
    game = _load(request.fen)
    return PositionResponse(
        fen=game.fen(),
        side_to_move=game.side_to_move.name.lower(),
        in_check=game.in_check(),
        board={square.name: piece.symbol for square, piece in game.position.pieces()},
        legal_moves=[move.uci() for move in game.legal_moves()],
        checkmate=game.is_checkmate(),
        stalemate=game.is_stalemate(),
        draw_claimable=game.draw_claimable(),
    )


@app.post("/api/apply", response_model=ApplyResponse)
def api_apply(request: ApplyRequest) -> ApplyResponse:
    """
    Apply a move given in long algebraic form.

    Raises:
        HTTPException 400: Malformed FEN or move text, or an illegal move.
    """
    game = _load(request.fen)
    try:
        outcome = game.push(Move.from_uci(request.move))
    except (MalformedInput, IllegalMove) as exc:
        raise HTTPException(status_code=400, detail=f"Illegal move: {exc}") from exc
    return ApplyResponse(fen=game.fen(), outcome=outcome.value)


@app.post("/api/move", response_model=MoveResponse)
def api_move(request: MoveRequest) -> MoveResponse:
    """
    Compute the engine's move for the given position.

    Raises:
        HTTPException 400: Malformed FEN or the game is already over.
    """
    game = _load(request.fen)

    result = search_position(game.position, request.max_depth, request.max_nodes)
    if result.best_move is None:
        reason = "checkmate" if game.in_check() else "stalemate"
        raise HTTPException(status_code=400, detail=f"Game is already over: {reason}")

    _log.info(
        "Move=%s score=%s depth=%d nodes=%d fen=%s",
        result.best_move.uci(),
        result.score,
        result.depth,
        result.nodes,
        request.fen[:40],
    )

    game.push(result.best_move)
    finite = not math.isinf(result.score)
    return MoveResponse(
        move=result.best_move.uci(),
        fen=game.fen(),
        score=result.score if finite else None,
        mate=0 if finite else (1 if result.score > 0 else -1),
        depth=result.depth,
        ranked=[move.uci() for move in result.moves],
    )
