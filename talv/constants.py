"""
Engine constants: piece values, evaluation bonuses, and search parameters.

All numeric constants used throughout the engine are defined here so that
the rules, evaluation and search modules never introduce magic numbers of
their own.

Piece values are expressed in pawns (1.0 = one pawn). The evaluator averages
material over the number of pieces on the board, so the absolute scale only
matters relative to CHECK_BONUS.
"""

from talv.board import PieceKind

# ---------------------------------------------------------------------------
# Piece values (pawns)
# ---------------------------------------------------------------------------
# The king is worth nothing here: it is never captured, and an infinite
# value would make the material average meaningless.

PAWN_VALUE: float = 1.0
KNIGHT_VALUE: float = 3.0
BISHOP_VALUE: float = 3.2
ROOK_VALUE: float = 5.0
QUEEN_VALUE: float = 9.0
KING_VALUE: float = 0.0

PIECE_VALUES: dict[PieceKind, float] = {
    PieceKind.PAWN:   PAWN_VALUE,
    PieceKind.KNIGHT: KNIGHT_VALUE,
    PieceKind.BISHOP: BISHOP_VALUE,
    PieceKind.ROOK:   ROOK_VALUE,
    PieceKind.QUEEN:  QUEEN_VALUE,
    PieceKind.KING:   KING_VALUE,
}

# ---------------------------------------------------------------------------
# Evaluation bonuses
# ---------------------------------------------------------------------------
# PAWN_ADVANCE_BONUS is added to a pawn's value once per rank of distance
# from its own back rank (a pawn on its home rank earns it once).
PAWN_ADVANCE_BONUS: float = 0.05

# Added when the opponent of the side to move is in check.
CHECK_BONUS: float = 10.0

# ---------------------------------------------------------------------------
# Search parameters
# ---------------------------------------------------------------------------
# DEFAULT_MAX_DEPTH caps iterative deepening when the caller gives no depth.
DEFAULT_MAX_DEPTH: int = 4

# DEFAULT_MAX_NODES: approximate node budget, measured as the number of
# positions held in the transposition cache.
DEFAULT_MAX_NODES: int = 200_000

# MAX_MOVES_PER_PLY: capacity of the move buffer used at each search node.
# No legal chess position has more than 218 moves.
MAX_MOVES_PER_PLY: int = 256

# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------
STARTING_FEN: str = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
