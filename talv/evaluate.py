"""
Static evaluation: averaged material with a small pawn-advancement bonus.

The score is always from the perspective of the side to move (negamax
convention): positive means the mover is ahead. The search negates child
scores, so the convention propagates automatically.

Terminal positions short-circuit the material count:
- no legal moves and in check     -> -inf (the mover is mated)
- no legal moves and not in check -> 0.0  (stalemate)

Material is averaged over the number of pieces on the board rather than
summed, which keeps the score in a narrow band whatever the material left.
A check against the opponent is worth CHECK_BONUS on top, and a check the
opponent cannot answer at all scores +inf.
"""

import math

from talv.board import PieceKind
from talv.constants import CHECK_BONUS, PAWN_ADVANCE_BONUS, PIECE_VALUES
from talv.movegen import any_legal_moves
from talv.position import Position


def evaluate(position: Position) -> float:
    """
    Score ``position`` for the side to move.

    Args:
        position: The position to score. Not modified.

    Returns:
        -inf if the side to move is checkmated, 0.0 on stalemate, +inf if the
        opponent is in check with no legal reply, otherwise the averaged
        material difference (plus CHECK_BONUS when the opponent is in check).
    """
    mover = position.side_to_move

    if not any_legal_moves(position):
        return -math.inf if position.in_check(mover) else 0.0

    bonus = 0.0
    opponent = mover.opponent()
    if position.in_check(opponent):
        bonus += CHECK_BONUS
        if not any_legal_moves(position.with_side_to_move(opponent)):
            return math.inf

    return material_balance(position) + bonus


def material_balance(position: Position) -> float:
    """Mover's material minus the opponent's, averaged over the piece count."""
    mover = position.side_to_move
    own = 0.0
    other = 0.0
    count = 0

    for square, piece in position.pieces():
        value = PIECE_VALUES[piece.kind]
        if piece.kind is PieceKind.PAWN:
            distance = abs(square.rank - piece.color.back_rank)
            value += PAWN_ADVANCE_BONUS * distance
        if piece.color is mover:
            own += value
        else:
            other += value
        count += 1

    return (own - other) / count
