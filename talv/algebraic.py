"""
Reader for standard algebraic notation ("Nbd7", "exd5", "e8=Q+", "O-O-O").

Parsing is purely syntactic: the result says which kind of piece moves
where, plus whatever origin hints the text carried. Turning that into a
concrete Move needs a position and is done by talv.game.Game.resolve().
"""

import re
from dataclasses import dataclass

from talv.board import FILES, RANKS, PieceKind, Square
from talv.errors import MalformedInput

_SAN = re.compile(
    r"""^(?:
        (?P<castle>[O0]-[O0](?P<long>-[O0])?)
      | (?P<piece>[NBRQK])?
        (?P<file>[a-h])?
        (?P<rank>[1-8])?
        (?P<capture>x)?
        (?P<dest>[a-h][1-8])
        (?:=?(?P<promotion>[NBRQ]))?
    )
    (?P<suffix>\+\+|\+|\#)?$""",
    re.VERBOSE,
)


@dataclass(frozen=True)
class AlgebraicMove:
    """
    A parsed move description.

    Attributes:
        kind:        Kind of the moving piece (PAWN when no letter is given).
        destination: Target square; None for castles.
        capture:     Whether the text marked a capture with "x".
        from_file:   Origin file hint (0-7), if given.
        from_rank:   Origin rank hint (0-7), if given.
        promotion:   Promotion piece, if given.
        castle:      "short" or "long" for castles, else None.
        check:       Text ended in "+".
        mate:        Text ended in "#" (or "++").
    """

    kind: PieceKind
    destination: Square | None
    capture: bool = False
    from_file: int | None = None
    from_rank: int | None = None
    promotion: PieceKind | None = None
    castle: str | None = None
    check: bool = False
    mate: bool = False

    def __str__(self) -> str:
        if self.castle == "short":
            text = "O-O"
        elif self.castle == "long":
            text = "O-O-O"
        else:
            text = "" if self.kind is PieceKind.PAWN else self.kind.letter.upper()
            if self.from_file is not None:
                text += FILES[self.from_file]
            if self.from_rank is not None:
                text += RANKS[self.from_rank]
            if self.capture:
                text += "x"
            text += self.destination.name
            if self.promotion is not None:
                text += "=" + self.promotion.letter.upper()
        if self.mate:
            return text + "#"
        if self.check:
            return text + "+"
        return text


def parse_algebraic(text: str) -> AlgebraicMove:
    """Parse algebraic move text. Raises MalformedInput if it is not one."""
    match = _SAN.match(text.strip())
    if match is None:
        raise MalformedInput(f"not an algebraic move: {text!r}")

    suffix = match.group("suffix") or ""
    check = suffix == "+"
    mate = suffix in ("#", "++")

    if match.group("castle"):
        return AlgebraicMove(
            kind=PieceKind.KING,
            destination=None,
            castle="long" if match.group("long") else "short",
            check=check,
            mate=mate,
        )

    letter = match.group("piece")
    file_hint = match.group("file")
    rank_hint = match.group("rank")
    promotion = match.group("promotion")
    return AlgebraicMove(
        kind=PieceKind.from_letter(letter) if letter else PieceKind.PAWN,
        destination=Square.parse(match.group("dest")),
        capture=match.group("capture") is not None,
        from_file=FILES.index(file_hint) if file_hint else None,
        from_rank=RANKS.index(rank_hint) if rank_hint else None,
        promotion=PieceKind.from_letter(promotion) if promotion else None,
        check=check,
        mate=mate,
    )
