"""
Game wrapper: a Position plus the history-dependent bookkeeping the core
does not track (repetition counts, halfmove clock, fullmove number), the
six-field FEN, and the notation-level move lookup.

The repetition table only ever holds positions reachable since the last
capture or pawn move; anything earlier can never recur.
"""

import logging
from collections import Counter

from talv.algebraic import AlgebraicMove, parse_algebraic
from talv.board import Color, Move, Piece, PieceKind, Square
from talv.errors import AmbiguousMove, IllegalMove, MalformedInput, NoSuchMove
from talv.movegen import any_legal_moves, is_legal, legal_moves
from talv.position import Outcome, Position

_log = logging.getLogger(__name__)

# Halfmove clock value at which the fifty-move rule lets either side claim.
FIFTY_MOVE_PLIES = 100
REPETITIONS_FOR_DRAW = 3


class Game:
    """
    A game in progress.

    Attributes:
        position:        Current position.
        halfmove_clock:  Plies since the last capture or pawn move.
        fullmove_number: Starts at 1, incremented after each black move.
    """

    def __init__(
        self,
        position: Position | None = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
    ) -> None:
        self.position = position if position is not None else Position.start()
        self.halfmove_clock = halfmove_clock
        self.fullmove_number = fullmove_number
        self._seen: Counter[Position] = Counter({self.position: 1})

    # -----------------------------------------------------------------------
    # Text form
    # -----------------------------------------------------------------------

    @classmethod
    def from_fen(cls, text: str) -> "Game":
        """Read a FEN. The two clock fields are optional and default to 0 and 1.

        Raises:
            MalformedInput: Bad text, bad clocks, or a side without exactly
                one king.
        """
        fields = text.split()
        if len(fields) not in (4, 6):
            raise MalformedInput(f"expected 4 or 6 FEN fields, got {len(fields)}")
        position = Position.from_fen(" ".join(fields[:4]))
        kings = Counter(piece.color for _, piece in position.pieces() if piece.kind is PieceKind.KING)
        for color in Color:
            if kings[color] != 1:
                raise MalformedInput(f"{color.name.lower()} must have exactly one king, found {kings[color]}")
        halfmove, fullmove = 0, 1
        if len(fields) == 6:
            try:
                halfmove, fullmove = int(fields[4]), int(fields[5])
            except ValueError:
                raise MalformedInput(f"bad move clocks: {fields[4]!r} {fields[5]!r}") from None
            if halfmove < 0 or fullmove < 1:
                raise MalformedInput(f"bad move clocks: {halfmove} {fullmove}")
        return cls(position, halfmove, fullmove)

    def fen(self) -> str:
        return f"{self.position.fen()} {self.halfmove_clock} {self.fullmove_number}"

    # -----------------------------------------------------------------------
    # State queries
    # -----------------------------------------------------------------------

    @property
    def side_to_move(self) -> Color:
        return self.position.side_to_move

    def legal_moves(self) -> list[Move]:
        return legal_moves(self.position)

    def in_check(self) -> bool:
        return self.position.in_check(self.side_to_move)

    def is_checkmate(self) -> bool:
        return self.in_check() and not any_legal_moves(self.position)

    def is_stalemate(self) -> bool:
        return not self.in_check() and not any_legal_moves(self.position)

    def draw_claimable(self) -> bool:
        """Threefold repetition, the fifty-move rule, or bare kings."""
        if self._seen[self.position] >= REPETITIONS_FOR_DRAW:
            return True
        if self.halfmove_clock >= FIFTY_MOVE_PLIES:
            return True
        return all(piece.kind is PieceKind.KING for _, piece in self.position.pieces())

    # -----------------------------------------------------------------------
    # Playing moves
    # -----------------------------------------------------------------------

    def make_move(
        self,
        from_square: Square,
        to_square: Square,
        promotion: PieceKind | None = None,
    ) -> Outcome:
        """
        Play a fully legal move.

        Raises:
            IllegalMove: The move is rejected; the game is left unchanged.
        """
        mover = self.side_to_move
        position, outcome = self.position.apply_move(from_square, to_square, promotion)
        if position.in_check(mover):
            raise IllegalMove(f"{from_square}{to_square} leaves the king in check")

        self.position = position
        if outcome.irreversible:
            self._seen.clear()
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1
        self._seen[position] += 1
        if mover is Color.BLACK:
            self.fullmove_number += 1

        _log.debug("%s played %s%s (%s)", mover.name.lower(), from_square, to_square, outcome.value)
        return outcome

    def push(self, move: Move) -> Outcome:
        return self.make_move(move.from_square, move.to_square, move.promotion)

    # -----------------------------------------------------------------------
    # Notation-level lookup
    # -----------------------------------------------------------------------

    def resolve(
        self,
        kind: PieceKind,
        destination: Square,
        capture: bool,
        from_file: int | None = None,
        from_rank: int | None = None,
        promotion: PieceKind | None = None,
    ) -> Move:
        """
        Find the one friendly piece of ``kind`` that can legally reach
        ``destination`` from a square matching the origin hints.

        Raises:
            NoSuchMove:    No piece qualifies, the capture flag does not match
                           the board, or a pawn reaching the last rank was
                           given no promotion piece.
            AmbiguousMove: More than one piece qualifies.
        """
        position = self.position
        mover = position.side_to_move
        capturing = position.piece_at(destination) is not None or (
            kind is PieceKind.PAWN and destination == position.en_passant_target
        )
        if capture != capturing:
            word = "captures" if capture else "does not capture"
            raise NoSuchMove(f"move to {destination} {word} in this position")
        if (
            kind is PieceKind.PAWN
            and destination.rank == mover.opponent().back_rank
            and promotion is None
        ):
            raise NoSuchMove(f"pawn move to {destination} must name a promotion piece")

        wanted = Piece(mover, kind)
        found: list[Move] = []
        for square, piece in position.pieces():
            if piece != wanted:
                continue
            if from_file is not None and square.file != from_file:
                continue
            if from_rank is not None and square.rank != from_rank:
                continue
            move = Move(square, destination, promotion)
            if is_legal(position, move):
                found.append(move)

        if not found:
            raise NoSuchMove(f"no {kind.name.lower()} can move to {destination}")
        if len(found) > 1:
            origins = ", ".join(str(move.from_square) for move in found)
            raise AmbiguousMove(f"{kind.name.lower()} to {destination} is ambiguous ({origins})")
        return found[0]

    def castle(self, short: bool) -> Move:
        """The king's two-square move for the requested castle, if legal."""
        home = Square(4, self.side_to_move.back_rank)
        move = Move(home, home.offset(2 if short else -2, 0))
        if not is_legal(self.position, move):
            raise NoSuchMove(f"{'short' if short else 'long'} castling is not possible")
        return move

    def parse_algebraic(self, text: str) -> Move:
        """Parse algebraic text and resolve it against the current position."""
        parsed: AlgebraicMove = parse_algebraic(text)
        if parsed.castle is not None:
            return self.castle(parsed.castle == "short")
        return self.resolve(
            parsed.kind,
            parsed.destination,
            parsed.capture,
            from_file=parsed.from_file,
            from_rank=parsed.from_rank,
            promotion=parsed.promotion,
        )
