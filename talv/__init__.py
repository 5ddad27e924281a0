"""
Chess rules engine and search bot.

This package implements the complete rules of chess on an immutable
Position value, a legal move generator built on clone-then-verify, a static
evaluator, and an iterative-deepening negamax search with alpha-beta pruning
and a depth-tagged transposition cache.

Modules:
    constants  — Piece values, evaluation bonuses, search parameters
    errors     — Exception taxonomy (malformed input, illegal move, ...)
    board      — Color, PieceKind, Piece, Square, Move, CastlingRights
    position   — Position value type and the legality engine
    fen        — Position text codec
    movegen    — Legal move generation, move sinks, perft
    evaluate   — Static evaluation from the side to move's perspective
    search     — Negamax, iterative deepening, rank_moves()
    game       — Repetition/fifty-move bookkeeping, move disambiguation
    algebraic  — Standard algebraic notation reader
    players    — Human and bot players behind one polling interface
"""

from talv.board import Color, Move, Piece, PieceKind, Square
from talv.errors import (
    AmbiguousMove,
    CapacityExceeded,
    IllegalMove,
    InvariantViolation,
    MalformedInput,
    NoSuchMove,
)
from talv.evaluate import evaluate
from talv.game import Game
from talv.movegen import any_legal_moves, legal_moves, perft
from talv.position import Outcome, Position
from talv.search import rank_moves, search_position

__all__ = [
    "Color", "Move", "Piece", "PieceKind", "Square",
    "AmbiguousMove", "CapacityExceeded", "IllegalMove", "InvariantViolation",
    "MalformedInput", "NoSuchMove",
    "evaluate",
    "Game",
    "any_legal_moves", "legal_moves", "perft",
    "Outcome", "Position",
    "rank_moves", "search_position",
]
