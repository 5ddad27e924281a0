"""
Position text codec (the first four fields of FEN).

    rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq -

Fields: piece placement (rank 8 first, ranks separated by "/", digits for
runs of empty squares, uppercase white, lowercase black), side to move
("w"/"b"), castling rights (any of "KQkq" or "-"), en-passant target square
or "-". Any further fields (the move clocks) are ignored here; talv.game
reads and writes them.

Kings are not counted: a position without a king parses, and the first
check test on it raises InvariantViolation.
"""

from talv.board import FILES, CastlingRights, Color, Piece, Square
from talv.errors import MalformedInput

_CASTLING_LETTERS: tuple[tuple[str, CastlingRights], ...] = (
    ("K", CastlingRights.WHITE_SHORT),
    ("Q", CastlingRights.WHITE_LONG),
    ("k", CastlingRights.BLACK_SHORT),
    ("q", CastlingRights.BLACK_LONG),
)


def parse_position(text: str):
    """Parse the placement/side/castling/en-passant fields into a Position.

    Raises:
        MalformedInput: Missing fields, bad rank layout, unknown letters, or
            an en-passant square that the side to move could not capture on.
    """
    from talv.position import Position

    fields = text.split()
    if len(fields) < 4:
        raise MalformedInput(f"expected at least 4 FEN fields, got {len(fields)}")
    placement, side, castling, en_passant = fields[:4]

    board = _parse_placement(placement)

    if side == "w":
        side_to_move = Color.WHITE
    elif side == "b":
        side_to_move = Color.BLACK
    else:
        raise MalformedInput(f"bad side to move: {side!r}")

    rights = CastlingRights.NONE
    if castling != "-":
        for letter in castling:
            right = dict(_CASTLING_LETTERS).get(letter)
            if right is None or rights & right:
                raise MalformedInput(f"bad castling rights: {castling!r}")
            rights |= right

    target = None
    if en_passant != "-":
        target = Square.parse(en_passant)
        # White captures onto the sixth rank, black onto the third.
        expected_rank = 5 if side_to_move is Color.WHITE else 2
        if target.rank != expected_rank:
            raise MalformedInput(f"en-passant square {en_passant} impossible with {side!r} to move")

    return Position(
        board=board,
        side_to_move=side_to_move,
        castling_rights=rights,
        en_passant_target=target,
    )


def _parse_placement(placement: str) -> tuple[Piece | None, ...]:
    rows = placement.split("/")
    if len(rows) != 8:
        raise MalformedInput(f"expected 8 ranks, got {len(rows)}")

    cells: list[Piece | None] = [None] * 64
    for row_idx, row in enumerate(rows):
        rank = 7 - row_idx
        file = 0
        for ch in row:
            if ch in "12345678":
                file += int(ch)
            else:
                if file >= 8:
                    raise MalformedInput(f"rank {rank + 1} is wider than 8 squares")
                cells[rank * 8 + file] = Piece.from_symbol(ch)
                file += 1
            if file > 8:
                raise MalformedInput(f"rank {rank + 1} is wider than 8 squares")
        if file != 8:
            raise MalformedInput(f"rank {rank + 1} has {file} squares")
    return tuple(cells)


def format_position(position) -> str:
    """Inverse of parse_position."""
    rows = []
    for rank in range(7, -1, -1):
        row = ""
        empty = 0
        for file in range(len(FILES)):
            cell = position.board[rank * 8 + file]
            if cell is None:
                empty += 1
                continue
            if empty:
                row += str(empty)
                empty = 0
            row += cell.symbol
        if empty:
            row += str(empty)
        rows.append(row)

    side = "w" if position.side_to_move is Color.WHITE else "b"
    castling = "".join(
        letter for letter, right in _CASTLING_LETTERS if position.castling_rights & right
    ) or "-"
    target = position.en_passant_target
    en_passant = target.name if target is not None else "-"
    return f"{'/'.join(rows)} {side} {castling} {en_passant}"
