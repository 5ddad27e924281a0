"""
Position value type and the legality engine that operates on it.

A Position is immutable: applying a move returns a new Position and leaves
the original untouched. This lets the move generator and the search explore
hypothetical futures purely by value, and lets positions act directly as
keys of the search's transposition cache.

The legality engine is deliberately simple. ``pseudo_legal`` answers a
single question about one piece going from one square to another, and
``in_check`` scans all 64 squares asking whether any opposing piece attacks
the king. Full legality (the mover's own king is safe afterwards) is decided
one level up, by applying the move to a copy and testing ``in_check``; see
talv.movegen.

Squares are scanned in raster order (a1, b1, ..., h8) everywhere, which
keeps every derived ordering deterministic.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator

from talv.board import (
    SQUARES,
    CastlingRights,
    Color,
    Move,
    Piece,
    PieceKind,
    Square,
)
from talv.errors import IllegalMove, InvariantViolation

# Rook home corners and the castling right each one guards.
_ROOK_CORNERS: dict[Square, CastlingRights] = {
    Square(0, 0): CastlingRights.WHITE_LONG,
    Square(7, 0): CastlingRights.WHITE_SHORT,
    Square(0, 7): CastlingRights.BLACK_LONG,
    Square(7, 7): CastlingRights.BLACK_SHORT,
}

_KING_HOMES: dict[Color, Square] = {
    Color.WHITE: Square(4, 0),
    Color.BLACK: Square(4, 7),
}

_BACK_ROW = (
    PieceKind.ROOK, PieceKind.KNIGHT, PieceKind.BISHOP, PieceKind.QUEEN,
    PieceKind.KING, PieceKind.BISHOP, PieceKind.KNIGHT, PieceKind.ROOK,
)


class Outcome(Enum):
    """Classification of an applied move, for repetition/draw bookkeeping."""

    CAPTURE = "capture"
    PAWN_MOVE = "pawn_move"
    PAWN_MOVE_WITH_CHECK = "pawn_move_with_check"
    CHECK = "check"
    PLAIN = "plain"

    @property
    def irreversible(self) -> bool:
        """True when no earlier position can ever repeat after this move."""
        return self in (Outcome.CAPTURE, Outcome.PAWN_MOVE, Outcome.PAWN_MOVE_WITH_CHECK)


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


@dataclass(frozen=True)
class Position:
    """
    A chess position: 64 cells plus side to move, castling rights and the
    en-passant target.

    Attributes:
        board:             64 cells in raster order (index = rank * 8 + file).
                           Each cell is a Piece or None.
        side_to_move:      Color whose turn it is.
        castling_rights:   Rights not yet forfeited. Rights are only ever
                           removed, never restored.
        en_passant_target: Square a pawn passed over on the previous move,
                           or None. Always on the third or sixth rank.
    """

    board: tuple[Piece | None, ...]
    side_to_move: Color = Color.WHITE
    castling_rights: CastlingRights = CastlingRights.ALL
    en_passant_target: Square | None = None

    # -----------------------------------------------------------------------
    # Construction and text form
    # -----------------------------------------------------------------------

    @classmethod
    def start(cls) -> "Position":
        """The canonical starting position."""
        return _START

    @classmethod
    def from_fen(cls, text: str) -> "Position":
        from talv.fen import parse_position

        return parse_position(text)

    def fen(self) -> str:
        from talv.fen import format_position

        return format_position(self)

    def with_side_to_move(self, color: Color) -> "Position":
        return replace(self, side_to_move=color)

    # -----------------------------------------------------------------------
    # Read access
    # -----------------------------------------------------------------------

    def piece_at(self, square: Square) -> Piece | None:
        return self.board[square.idx]

    def pieces(self) -> Iterator[tuple[Square, Piece]]:
        """Occupied squares with their pieces, in raster order."""
        for square, cell in zip(SQUARES, self.board):
            if cell is not None:
                yield square, cell

    def king_square(self, color: Color) -> Square:
        king = Piece(color, PieceKind.KING)
        for square, cell in zip(SQUARES, self.board):
            if cell == king:
                return square
        raise InvariantViolation(f"no {color.name.lower()} king on the board")

    # -----------------------------------------------------------------------
    # Movement rules
    # -----------------------------------------------------------------------

    def pseudo_legal(self, mover: Color, from_square: Square, to_square: Square) -> bool:
        """
        True iff a piece of ``mover`` on ``from_square`` may move to
        ``to_square``, ignoring whether the mover's king is left in check.

        Castling counts as pseudo-legal when the right is held, king and rook
        stand on their home squares, and every square between them is empty.
        Whether the king passes through an attacked square is checked by
        apply_move, not here.
        """
        if from_square == to_square:
            return False

        piece = self.board[from_square.idx]
        if piece is None or piece.color is not mover:
            return False
        target = self.board[to_square.idx]
        if target is not None and target.color is mover:
            return False
        taking = target is not None

        df = to_square.file - from_square.file
        dr = to_square.rank - from_square.rank
        kind = piece.kind

        if kind is PieceKind.PAWN:
            forward = mover.forward
            steps = forward * dr
            # Moving onto the en-passant target is a capture.
            taking = taking or to_square == self.en_passant_target
            if (df != 0) != taking:
                return False
            if taking:
                return steps == 1 and abs(df) == 1
            if steps == 1:
                return True
            if steps == 2 and from_square.rank == mover.pawn_rank:
                return self.board[from_square.idx + 8 * forward] is None
            return False

        if kind is PieceKind.KING and dr == 0 and abs(df) == 2:
            return not taking and self._can_castle(mover, from_square, df)

        return self._reaches(kind, from_square, df, dr)

    def _reaches(self, kind: PieceKind, from_square: Square, df: int, dr: int) -> bool:
        """Movement geometry shared by moves and attacks (everything but pawns)."""
        af, ar = abs(df), abs(dr)
        if kind is PieceKind.KNIGHT:
            return (af == 2 and ar == 1) or (af == 1 and ar == 2)
        if kind is PieceKind.KING:
            return af <= 1 and ar <= 1
        if kind is PieceKind.BISHOP:
            line = af == ar
        elif kind is PieceKind.ROOK:
            line = af == 0 or ar == 0
        elif kind is PieceKind.QUEEN:
            line = af == ar or af == 0 or ar == 0
        else:
            return False
        if not line:
            return False

        # Step square by square; every intermediate square must be empty.
        step = _sign(dr) * 8 + _sign(df)
        idx = from_square.idx + step
        for _ in range(max(af, ar) - 1):
            if self.board[idx] is not None:
                return False
            idx += step
        return True

    def _can_castle(self, mover: Color, from_square: Square, df: int) -> bool:
        if from_square != _KING_HOMES[mover]:
            return False
        short = df > 0
        if mover is Color.WHITE:
            right = CastlingRights.WHITE_SHORT if short else CastlingRights.WHITE_LONG
        else:
            right = CastlingRights.BLACK_SHORT if short else CastlingRights.BLACK_LONG
        if not self.castling_rights & right:
            return False

        corner = Square(7 if short else 0, from_square.rank)
        if self.board[corner.idx] != Piece(mover, PieceKind.ROOK):
            return False
        lo, hi = sorted((from_square.file, corner.file))
        base = from_square.rank * 8
        return all(self.board[base + f] is None for f in range(lo + 1, hi))

    # -----------------------------------------------------------------------
    # Attacks and check
    # -----------------------------------------------------------------------

    def is_attacked(self, square: Square, by: Color) -> bool:
        """True iff any piece of ``by`` attacks ``square``.

        Pawns attack diagonally whether or not the square is occupied, so the
        answer is also meaningful for the empty squares a castling king
        crosses. For an occupied enemy square it agrees with pseudo_legal.
        """
        for from_square, cell in zip(SQUARES, self.board):
            if cell is None or cell.color is not by:
                continue
            df = square.file - from_square.file
            dr = square.rank - from_square.rank
            if df == 0 and dr == 0:
                continue
            if cell.kind is PieceKind.PAWN:
                if dr == by.forward and abs(df) == 1:
                    return True
            elif self._reaches(cell.kind, from_square, df, dr):
                return True
        return False

    def in_check(self, color: Color) -> bool:
        """True iff ``color``'s king is attacked. O(64) per call."""
        return self.is_attacked(self.king_square(color), color.opponent())

    # -----------------------------------------------------------------------
    # Applying moves
    # -----------------------------------------------------------------------

    def apply_move(
        self,
        from_square: Square,
        to_square: Square,
        promotion: PieceKind | None = None,
    ) -> tuple["Position", Outcome]:
        """
        Apply a pseudo-legal move and classify it.

        The mover's own king safety is not tested here (the move generator
        and talv.game.Game do that on the returned position), but castling
        out of or through check is rejected.

        Args:
            from_square: Square of the piece to move.
            to_square:   Destination square.
            promotion:   Piece kind a pawn reaching the last rank becomes.
                         Must be None for every other move.

        Returns:
            Tuple of (new position, Outcome).

        Raises:
            IllegalMove: The move is not pseudo-legal, the promotion piece is
                missing or invalid, or the king castles out of or through check.
                The original position is unchanged either way.
        """
        position, captured, piece = self._play(from_square, to_square, promotion)

        if captured is not None:
            return position, Outcome.CAPTURE
        check = position.in_check(position.side_to_move)
        if piece.kind is PieceKind.PAWN:
            return position, Outcome.PAWN_MOVE_WITH_CHECK if check else Outcome.PAWN_MOVE
        return position, Outcome.CHECK if check else Outcome.PLAIN

    def push(self, move: Move) -> "Position":
        """apply_move without the outcome classification."""
        return self._play(move.from_square, move.to_square, move.promotion)[0]

    def _play(
        self,
        from_square: Square,
        to_square: Square,
        promotion: PieceKind | None,
    ) -> tuple["Position", Piece | None, Piece]:
        mover = self.side_to_move
        if not self.pseudo_legal(mover, from_square, to_square):
            raise IllegalMove(f"{from_square}{to_square} is not a legal movement")

        piece = self.board[from_square.idx]
        if piece.kind is PieceKind.PAWN and to_square.rank == mover.opponent().back_rank:
            if promotion is None or promotion in (PieceKind.PAWN, PieceKind.KING):
                raise IllegalMove(f"{from_square}{to_square} must promote to N, B, R or Q")
        elif promotion is not None:
            raise IllegalMove(f"{from_square}{to_square} cannot promote")

        df = to_square.file - from_square.file
        castling = piece.kind is PieceKind.KING and abs(df) == 2
        if castling:
            crossed = from_square.offset(df // 2, 0)
            if self.in_check(mover) or self.is_attacked(crossed, mover.opponent()):
                raise IllegalMove("cannot castle out of or through check")

        board = list(self.board)
        board[from_square.idx] = None
        captured = board[to_square.idx]
        if piece.kind is PieceKind.PAWN and to_square == self.en_passant_target:
            # The captured pawn sits beside the mover, behind the target square.
            behind = Square(to_square.file, from_square.rank).idx
            captured = board[behind]
            board[behind] = None
        board[to_square.idx] = Piece(mover, promotion) if promotion is not None else piece

        if castling:
            corner = Square(7 if df > 0 else 0, from_square.rank)
            board[to_square.idx - _sign(df)] = board[corner.idx]
            board[corner.idx] = None

        rights = self.castling_rights
        if piece.kind is PieceKind.KING:
            rights &= ~CastlingRights.of(mover)
        for square in (from_square, to_square):
            right = _ROOK_CORNERS.get(square)
            if right is not None:
                rights &= ~right

        en_passant_target = None
        if piece.kind is PieceKind.PAWN and abs(to_square.rank - from_square.rank) == 2:
            en_passant_target = from_square.offset(0, mover.forward)

        position = Position(
            board=tuple(board),
            side_to_move=mover.opponent(),
            castling_rights=CastlingRights(rights),
            en_passant_target=en_passant_target,
        )
        return position, captured, piece

    def __str__(self) -> str:
        lines = []
        for rank in range(7, -1, -1):
            row = self.board[rank * 8:rank * 8 + 8]
            cells = "".join(cell.symbol if cell is not None else "." for cell in row)
            lines.append(f"{rank + 1} {cells}")
        lines.append("  abcdefgh")
        return "\n".join(lines)


def _start_board() -> tuple[Piece | None, ...]:
    cells: list[Piece | None] = [None] * 64
    for f, kind in enumerate(_BACK_ROW):
        cells[f] = Piece(Color.WHITE, kind)
        cells[8 + f] = Piece(Color.WHITE, PieceKind.PAWN)
        cells[48 + f] = Piece(Color.BLACK, PieceKind.PAWN)
        cells[56 + f] = Piece(Color.BLACK, kind)
    return tuple(cells)


_START = Position(board=_start_board())
