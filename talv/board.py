"""
Value types shared by every layer of the engine: colors, piece kinds,
squares, moves and castling rights.

Squares are (file, rank) pairs with both coordinates in 0..7, so a1 is
Square(0, 0) and h8 is Square(7, 7). Boards are stored rank-major, which
makes ``Square.idx`` (rank * 8 + file) the raster order used everywhere
a deterministic scan of the board is needed.
"""

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import NamedTuple

from talv.errors import MalformedInput

FILES = "abcdefgh"
RANKS = "12345678"


class Color(IntEnum):
    WHITE = 0
    BLACK = 1

    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def forward(self) -> int:
        """Rank direction this color's pawns move in."""
        return 1 if self is Color.WHITE else -1

    @property
    def back_rank(self) -> int:
        return 0 if self is Color.WHITE else 7

    @property
    def pawn_rank(self) -> int:
        return 1 if self is Color.WHITE else 6


class PieceKind(IntEnum):
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6

    @property
    def letter(self) -> str:
        return _KIND_LETTERS[self]

    @classmethod
    def from_letter(cls, letter: str) -> "PieceKind":
        try:
            return _LETTER_KINDS[letter.lower()]
        except KeyError:
            raise MalformedInput(f"unknown piece letter: {letter!r}") from None


_KIND_LETTERS = {
    PieceKind.PAWN: "p",
    PieceKind.KNIGHT: "n",
    PieceKind.BISHOP: "b",
    PieceKind.ROOK: "r",
    PieceKind.QUEEN: "q",
    PieceKind.KING: "k",
}
_LETTER_KINDS = {v: k for k, v in _KIND_LETTERS.items()}

# Pieces a pawn may become, in the order the move generator offers them.
PROMOTION_KINDS = (PieceKind.QUEEN, PieceKind.KNIGHT, PieceKind.ROOK, PieceKind.BISHOP)


@dataclass(frozen=True)
class Piece:
    """The occupant of a non-empty cell."""

    color: Color
    kind: PieceKind

    @property
    def symbol(self) -> str:
        """FEN letter: uppercase for white, lowercase for black."""
        letter = self.kind.letter
        return letter.upper() if self.color is Color.WHITE else letter

    @classmethod
    def from_symbol(cls, symbol: str) -> "Piece":
        color = Color.WHITE if symbol.isupper() else Color.BLACK
        return cls(color, PieceKind.from_letter(symbol))

    def __str__(self) -> str:
        return self.symbol


class Square(NamedTuple):
    file: int
    rank: int

    @property
    def idx(self) -> int:
        return self.rank * 8 + self.file

    @property
    def name(self) -> str:
        return FILES[self.file] + RANKS[self.rank]

    def offset(self, dfile: int, drank: int) -> "Square | None":
        """The square (dfile, drank) away, or None off the board."""
        f = self.file + dfile
        r = self.rank + drank
        if 0 <= f < 8 and 0 <= r < 8:
            return SQUARES[r * 8 + f]
        return None

    @classmethod
    def parse(cls, text: str) -> "Square":
        """Parse "e4"-style text. Raises MalformedInput on anything else."""
        if len(text) != 2 or text[0] not in FILES or text[1] not in RANKS:
            raise MalformedInput(f"invalid square: {text!r}")
        return SQUARES[RANKS.index(text[1]) * 8 + FILES.index(text[0])]

    def __str__(self) -> str:
        return self.name


# Every square in raster order: a1, b1, ..., h1, a2, ..., h8.
SQUARES: tuple[Square, ...] = tuple(Square(f, r) for r in range(8) for f in range(8))


class Move(NamedTuple):
    from_square: Square
    to_square: Square
    promotion: PieceKind | None = None

    def uci(self) -> str:
        """Long algebraic form, e.g. "e2e4" or "e7e8q"."""
        suffix = self.promotion.letter if self.promotion is not None else ""
        return f"{self.from_square}{self.to_square}{suffix}"

    @classmethod
    def from_uci(cls, text: str) -> "Move":
        if len(text) not in (4, 5):
            raise MalformedInput(f"invalid move: {text!r}")
        promotion = None
        if len(text) == 5:
            promotion = PieceKind.from_letter(text[4])
        return cls(Square.parse(text[0:2]), Square.parse(text[2:4]), promotion)

    def __str__(self) -> str:
        return self.uci()


class CastlingRights(IntFlag):
    NONE = 0
    WHITE_SHORT = 1
    WHITE_LONG = 2
    BLACK_SHORT = 4
    BLACK_LONG = 8
    ALL = 15

    @classmethod
    def of(cls, color: Color) -> "CastlingRights":
        """Both rights belonging to ``color``."""
        if color is Color.WHITE:
            return cls.WHITE_SHORT | cls.WHITE_LONG
        return cls.BLACK_SHORT | cls.BLACK_LONG
