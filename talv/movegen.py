"""
Legal move generation.

Candidates are produced per piece from fixed offset tables and filtered by
the clone-then-verify rule: a candidate is legal iff applying it to the
position succeeds and the mover's own king is not in check afterwards.

Generated moves are written into a sink. A sink with limited room raises
CapacityExceeded when full, which stops generation immediately. That gives
two cheap special cases on top of the plain "give me every move" form:

    any_legal_moves()  — a zero-capacity sink; the first accepted move
                         overflows it, so generation stops at one move.
    MoveBuffer(n)      — a bounded buffer for the search, which never holds
                         more than n moves per node.

Enumeration order is part of the contract: pieces are visited in raster
order (a1..h8) and each piece tries its offsets in the order listed below.
Rankings and tests rely on it.
"""

from typing import Iterator, Protocol

from talv.board import PROMOTION_KINDS, Move, PieceKind, Square
from talv.errors import CapacityExceeded, IllegalMove
from talv.position import Position

# ---------------------------------------------------------------------------
# Offset tables (file delta, rank delta)
# ---------------------------------------------------------------------------
# Pawn rank deltas are multiplied by the mover's forward direction.

PAWN_STEPS = ((0, 1), (0, 2), (1, 1), (-1, 1))
KNIGHT_LEAPS = ((2, 1), (2, -1), (1, 2), (1, -2), (-2, 1), (-2, -1), (-1, 2), (-1, -2))
STRAIGHTS = ((1, 0), (-1, 0), (0, 1), (0, -1))
DIAGONALS = ((1, 1), (1, -1), (-1, 1), (-1, -1))
CASTLES = ((2, 0), (-2, 0))
KING_STEPS = STRAIGHTS + DIAGONALS + CASTLES

RAYS: dict[PieceKind, tuple[tuple[int, int], ...]] = {
    PieceKind.ROOK: STRAIGHTS,
    PieceKind.BISHOP: DIAGONALS,
    PieceKind.QUEEN: STRAIGHTS + DIAGONALS,
}


class MoveSink(Protocol):
    def add(self, move: Move) -> None:
        """Accept a move or raise CapacityExceeded."""


class MoveBuffer:
    """Collects generated moves, optionally up to a fixed capacity."""

    def __init__(self, capacity: int | None = None) -> None:
        self.capacity = capacity
        self.moves: list[Move] = []

    def add(self, move: Move) -> None:
        if self.capacity is not None and len(self.moves) >= self.capacity:
            raise CapacityExceeded(f"move buffer full ({self.capacity} moves)")
        self.moves.append(move)

    def __len__(self) -> int:
        return len(self.moves)

    def __iter__(self) -> Iterator[Move]:
        return iter(self.moves)


def is_legal(position: Position, move: Move) -> bool:
    """Apply ``move`` to a copy and check the mover's king is safe afterwards."""
    try:
        child = position.push(move)
    except IllegalMove:
        return False
    return not child.in_check(position.side_to_move)


def gen_legal_moves(sink: MoveSink, position: Position) -> None:
    """
    Write every legal move of the side to move into ``sink``.

    Raises:
        CapacityExceeded: Propagated from the sink; generation stops at the
            first move the sink refuses.
    """
    mover = position.side_to_move
    forward = mover.forward
    last_rank = mover.opponent().back_rank

    def offer(from_square: Square, to_square: Square, promotion: PieceKind | None = None) -> None:
        move = Move(from_square, to_square, promotion)
        if is_legal(position, move):
            sink.add(move)

    for from_square, piece in position.pieces():
        if piece.color is not mover:
            continue
        kind = piece.kind

        if kind is PieceKind.PAWN:
            for df, dr in PAWN_STEPS:
                to_square = from_square.offset(df, dr * forward)
                if to_square is None:
                    continue
                if to_square.rank == last_rank:
                    for promotion in PROMOTION_KINDS:
                        offer(from_square, to_square, promotion)
                else:
                    offer(from_square, to_square)

        elif kind is PieceKind.KNIGHT or kind is PieceKind.KING:
            offsets = KNIGHT_LEAPS if kind is PieceKind.KNIGHT else KING_STEPS
            for df, dr in offsets:
                to_square = from_square.offset(df, dr)
                if to_square is not None:
                    offer(from_square, to_square)

        else:
            # Walk each ray to the edge or the first occupied square.
            for df, dr in RAYS[kind]:
                to_square = from_square.offset(df, dr)
                while to_square is not None:
                    offer(from_square, to_square)
                    if position.piece_at(to_square) is not None:
                        break
                    to_square = to_square.offset(df, dr)


def legal_moves(position: Position) -> list[Move]:
    """All legal moves, in generation order."""
    buffer = MoveBuffer()
    gen_legal_moves(buffer, position)
    return buffer.moves


def any_legal_moves(position: Position) -> bool:
    """True iff the side to move has at least one legal move."""
    try:
        gen_legal_moves(MoveBuffer(capacity=0), position)
    except CapacityExceeded:
        return True
    return False


def perft(position: Position, depth: int) -> int:
    """Performance test: count leaf nodes ``depth`` plies below ``position``."""
    if depth <= 0:
        return 1
    moves = legal_moves(position)
    if depth == 1:
        return len(moves)
    return sum(perft(position.push(move), depth - 1) for move in moves)


def perft_divide(position: Position, depth: int) -> dict[str, int]:
    """Perft split by root move, keyed by the move's long algebraic text."""
    return {
        move.uci(): perft(position.push(move), depth - 1)
        for move in legal_moves(position)
    }
