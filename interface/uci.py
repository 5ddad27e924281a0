"""
UCI (Universal Chess Interface) protocol handler.

UCI is the standard text-based protocol that allows chess GUIs and testing
tools (like cutechess-cli) to communicate with chess engines. The engine
reads commands from stdin and writes responses to stdout. All output lines
must be flushed immediately; GUIs read line by line.

Protocol overview:
    GUI → Engine: uci, isready, ucinewgame, position, go, stop, quit
    Engine → GUI: id name, id author, uciok, readyok, info, bestmove

Search limits:
    The search is fixed-depth, not timed. "go depth N" and "go nodes N" set
    the iterative-deepening limit and the node budget; every other go
    parameter (movetime, wtime, infinite, ...) is accepted and ignored.

Threading model:
    The UCI loop runs on the main thread and must never block on the search.
    When the GUI sends "go", we spawn a daemon thread to run the search on
    its own copy of the position. A started search cannot be cancelled:
    "stop" waits for it to finish and report, "quit" exits without waiting.

Critical rule: NEVER print to stdout except for valid UCI responses.
Debug output must go to stderr.
"""

import math
import sys
import os
import threading
import time

# ---------------------------------------------------------------------------
# Path setup: make 'talv' importable when this script is run directly
# (python interface/uci.py) from a source checkout.
# ---------------------------------------------------------------------------
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from talv.board import Move
from talv.constants import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES
from talv.errors import IllegalMove, MalformedInput
from talv.game import Game
from talv.search import SearchResult, search_position


def _send(line: str) -> None:
    """Write a UCI response line to stdout and flush immediately."""
    print(line, flush=True)


def _log(message: str) -> None:
    """Write a diagnostic line to stderr; stdout is reserved for the protocol."""
    print(message, file=sys.stderr, flush=True)


def format_score(score: float) -> str:
    """UCI score token: "cp N" for finite scores, "mate ±1" for forced mates."""
    if math.isinf(score):
        return "mate 1" if score > 0 else "mate -1"
    return f"cp {round(score * 100)}"


class UciHandler:
    """
    Stateful handler for the UCI protocol.

    Attributes:
        game:          The current game, updated by "position" commands.
        search_thread: The active search thread, or None if none is running.
    """

    def __init__(self) -> None:
        self.game: Game = Game()
        self.search_thread: threading.Thread | None = None

    # -----------------------------------------------------------------------
    # Command handlers
    # -----------------------------------------------------------------------

    def handle_uci(self) -> None:
        _send("id name talv")
        _send("id author talv developers")
        _send("uciok")

    def handle_isready(self) -> None:
        _send("readyok")

    def handle_ucinewgame(self) -> None:
        self._wait_for_search()
        self.game = Game()

    def handle_position(self, tokens: list[str]) -> None:
        """
        Parse and apply a "position" command.

        Command formats:
            position startpos [moves e2e4 e7e5 ...]
            position fen <FEN> [moves e2e4 e7e5 ...]

        An unparseable FEN leaves the current game unchanged. An illegal
        move in the list stops the replay at that move.
        """
        if not tokens:
            return

        if "moves" in tokens:
            moves_idx = tokens.index("moves")
            move_tokens = tokens[moves_idx + 1:]
            head = tokens[:moves_idx]
        else:
            move_tokens = []
            head = tokens

        try:
            if head[0] == "startpos":
                game = Game()
            elif head[0] == "fen":
                game = Game.from_fen(" ".join(head[1:]))
            else:
                _log(f"uci: unknown position type: {head[0]}")
                return
        except MalformedInput as exc:
            _log(f"uci: bad fen: {exc}")
            return

        self.game = game
        for text in move_tokens:
            try:
                self.game.push(Move.from_uci(text))
            except (MalformedInput, IllegalMove) as exc:
                _log(f"uci: illegal move in position command: {text} ({exc})")
                break

    def handle_go(self, tokens: list[str]) -> None:
        """
        Start a search of the current position in a background thread.

        The thread owns its own reference to the (immutable) position, so
        later "position" commands cannot disturb it. It reports an info line
        and the bestmove when the search completes.
        """
        self._wait_for_search()

        max_depth, max_nodes = self._parse_go_limits(tokens)
        position = self.game.position

        def search_and_reply() -> None:
            try:
                start = time.monotonic()
                result: SearchResult = search_position(position, max_depth, max_nodes)
                elapsed_ms = max(1, int((time.monotonic() - start) * 1000))

                if result.best_move is not None:
                    _send(
                        f"info depth {result.depth} score {format_score(result.score)} "
                        f"nodes {result.nodes} time {elapsed_ms} pv {result.best_move.uci()}"
                    )
                    _send(f"bestmove {result.best_move.uci()}")
                else:
                    # Checkmate or stalemate: UCI still expects a bestmove line.
                    _send("bestmove (none)")
            except Exception as e:
                _log(f"search error: {e}")
                _send("bestmove (none)")

        self.search_thread = threading.Thread(target=search_and_reply, daemon=True)
        self.search_thread.start()

    def handle_stop(self) -> None:
        """Wait for the running search; it reports bestmove when done."""
        self._wait_for_search()

    def handle_quit(self) -> None:
        """Exit immediately. A running search is abandoned with the process."""
        sys.exit(0)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _wait_for_search(self) -> None:
        if self.search_thread is not None and self.search_thread.is_alive():
            self.search_thread.join()
        self.search_thread = None

    @staticmethod
    def _parse_go_limits(tokens: list[str]) -> tuple[int, int]:
        """Extract (max_depth, max_nodes) from "go" tokens, with defaults."""
        params: dict[str, int] = {}
        i = 0
        while i < len(tokens) - 1:
            try:
                params[tokens[i]] = int(tokens[i + 1])
                i += 2
            except ValueError:
                i += 1

        max_depth = max(1, params.get("depth", DEFAULT_MAX_DEPTH))
        max_nodes = max(1, params.get("nodes", DEFAULT_MAX_NODES))
        return max_depth, max_nodes


def run_uci_loop() -> None:
    """
    Main UCI protocol loop.

    Reads lines from stdin and dispatches each command to the UciHandler
    until "quit" is received or stdin is closed. A failure in one command
    is logged to stderr and the loop carries on.
    """
    handler = UciHandler()

    for raw_line in sys.stdin:
        line = raw_line.strip()
        if not line:
            continue

        tokens = line.split()
        command = tokens[0]
        args = tokens[1:]

        try:
            if command == "uci":
                handler.handle_uci()
            elif command == "isready":
                handler.handle_isready()
            elif command == "ucinewgame":
                handler.handle_ucinewgame()
            elif command == "position":
                handler.handle_position(args)
            elif command == "go":
                handler.handle_go(args)
            elif command == "stop":
                handler.handle_stop()
            elif command == "quit":
                handler.handle_quit()
            else:
                _log(f"uci: ignoring unknown command: {command!r}")

        except Exception as e:
            _log(f"uci: unhandled error for command {command!r}: {e}")

    handler.handle_stop()


if __name__ == "__main__":
    run_uci_loop()
