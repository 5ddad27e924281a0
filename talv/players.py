"""
Players: who decides the next move.

A front end drives every player through the same four calls, whatever is
behind them:

    begin_interaction(position, square)  pointer pressed on a square
    query_interaction()                  kind of the piece being dragged
    end_interaction(position, square)    pointer released on a square
    produce_move(position)               polled once per frame / loop turn;
                                         returns a Move when one is ready

produce_move never blocks. The bot starts a background search on the first
poll and answers None until the search finishes, so a UI loop keeps running
while it thinks. There is no way to cancel a search once started; if its
result is never collected the worker still finishes and the result is
dropped. The returned move was chosen for the position the search started
from, so callers must validate it against the position current at poll time.
"""

import logging
import threading
from typing import Protocol

from talv.board import Move, PieceKind, Square
from talv.constants import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES
from talv.position import Position
from talv.search import SearchResult, search_position

_log = logging.getLogger(__name__)


class Player(Protocol):
    def begin_interaction(self, position: Position, square: Square) -> None: ...

    def query_interaction(self) -> PieceKind | None: ...

    def end_interaction(self, position: Position, square: Square) -> None: ...

    def produce_move(self, position: Position) -> Move | None: ...


class HumanPlayer:
    """Turns a press on one square and a release on another into a move.

    A pawn released on the last rank always promotes to a queen.
    """

    def __init__(self) -> None:
        self._picked: tuple[PieceKind, Square] | None = None
        self._ready: tuple[Square, Square] | None = None

    def begin_interaction(self, position: Position, square: Square) -> None:
        piece = position.piece_at(square)
        if piece is not None:
            self._picked = (piece.kind, square)
            self._ready = None

    def query_interaction(self) -> PieceKind | None:
        return self._picked[0] if self._picked is not None else None

    def end_interaction(self, position: Position, square: Square) -> None:
        if self._picked is not None:
            self._ready = (self._picked[1], square)
            self._picked = None

    def produce_move(self, position: Position) -> Move | None:
        if self._ready is None:
            return None
        from_square, to_square = self._ready
        self._ready = None

        promotion = None
        piece = position.piece_at(from_square)
        if (
            piece is not None
            and piece.kind is PieceKind.PAWN
            and to_square.rank == piece.color.opponent().back_rank
        ):
            promotion = PieceKind.QUEEN
        return Move(from_square, to_square, promotion)


class BotPlayer:
    """
    Plays the top move of search_position(), computed on a worker thread.

    Attributes:
        max_depth:   Iterative-deepening limit passed to the search.
        max_nodes:   Node budget passed to the search.
        last_result: The most recent completed SearchResult, for display.
        finished:    True once a search of the position last polled found no
                     legal move. Polling that position again starts nothing.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH, max_nodes: int = DEFAULT_MAX_NODES) -> None:
        self.max_depth = max_depth
        self.max_nodes = max_nodes
        self.last_result: SearchResult | None = None
        self._worker: threading.Thread | None = None
        self._result: SearchResult | None = None
        self._error: BaseException | None = None
        self._searched: Position | None = None

    def begin_interaction(self, position: Position, square: Square) -> None:
        return

    def query_interaction(self) -> PieceKind | None:
        return None

    def end_interaction(self, position: Position, square: Square) -> None:
        return

    @property
    def thinking(self) -> bool:
        return self._worker is not None

    @property
    def finished(self) -> bool:
        return self._worker is None and self.last_result is not None and not self.last_result.moves

    def produce_move(self, position: Position) -> Move | None:
        """
        Poll for the bot's move.

        Returns None while the search is running (starting it on the first
        call), then the best move once; the next call starts a new search.
        In a position without legal moves it keeps returning None and sets
        ``finished`` instead of searching again.

        Raises:
            Exception: Whatever the search raised on the worker thread.
        """
        if self._worker is None:
            if self.finished and position == self._searched:
                return None
            self._start(position)
            return None
        if self._worker.is_alive():
            return None

        self._worker = None
        error, self._error = self._error, None
        if error is not None:
            raise error
        result, self._result = self._result, None
        self.last_result = result
        return result.best_move

    def _start(self, position: Position) -> None:
        self._searched = position
        # Position is immutable, so the worker can share it with the caller.
        def run() -> None:
            try:
                self._result = search_position(position, self.max_depth, self.max_nodes)
            except Exception as exc:
                _log.exception("search failed for %s", position.fen())
                self._error = exc

        self._worker = threading.Thread(target=run, name="talv-search", daemon=True)
        self._worker.start()
