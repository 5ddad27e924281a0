"""
Terminal game: a human types moves in algebraic notation, the bot answers.

The bot searches on a background thread (talv.players.BotPlayer) and the
loop polls it, printing a dot per poll, so the terminal stays responsive
while it thinks. An empty line ends the game and prints a FEN that can be
passed back with --fen to resume later.

Usage:
    python interface/play.py [--fen FEN] [--depth N] [--nodes N] [--black]
"""

import argparse
import os
import re
import sys
import time

_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from talv.board import Color, Move
from talv.constants import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES
from talv.errors import IllegalMove, MalformedInput
from talv.game import Game
from talv.players import BotPlayer

# Seconds between polls of the bot's worker thread.
POLL_INTERVAL = 0.2

# Long algebraic text, the form the "Possible moves" line prints.
_LONG_ALGEBRAIC = re.compile(r"^[a-h][1-8][a-h][1-8][nbrq]?$")


def read_move(game: Game, text: str) -> Move:
    """Long algebraic ("g1f3", "e7e8q") or standard algebraic ("Nf3", "O-O").

    Raises:
        MalformedInput: The text is in neither form.
        IllegalMove: Algebraic text that matches no legal move.
    """
    if _LONG_ALGEBRAIC.match(text):
        return Move.from_uci(text)
    return game.parse_algebraic(text)


def describe(game: Game) -> str:
    side = game.side_to_move.name.lower()
    return f"Move {game.fullmove_number}, {side} to move\n{game.position}"


def play(game: Game, bot: BotPlayer, human: Color) -> None:
    while True:
        print(describe(game))

        if game.is_checkmate():
            print(f"Mate! {game.side_to_move.opponent().name.lower()} won.")
            return
        if game.is_stalemate():
            print("Stalemate.")
            return
        if game.draw_claimable():
            print("Draw.")
            return
        if game.in_check():
            print("Check!")

        if game.side_to_move is not human:
            move = bot.produce_move(game.position)
            while move is None:
                print(".", end="", flush=True)
                time.sleep(POLL_INTERVAL)
                move = bot.produce_move(game.position)
            print()
            result = bot.last_result
            print(f"Eval: {result.score}")
            print("Ranked moves: " + " ".join(m.uci() for m in result.moves))
            game.push(move)
            continue

        print("Possible moves: " + " ".join(m.uci() for m in game.legal_moves()))
        try:
            text = input("Move: ").strip()
        except EOFError:
            return
        if not text:
            return
        try:
            game.push(read_move(game, text))
        except (MalformedInput, IllegalMove) as exc:
            print(f"Illegal: {exc}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play chess against the talv bot.")
    parser.add_argument("--fen", help="start from this position instead of the initial one")
    parser.add_argument("--depth", type=int, default=DEFAULT_MAX_DEPTH, help="bot search depth")
    parser.add_argument("--nodes", type=int, default=DEFAULT_MAX_NODES, help="bot node budget")
    parser.add_argument("--black", action="store_true", help="play the black pieces")
    args = parser.parse_args(argv)

    try:
        game = Game.from_fen(args.fen) if args.fen else Game()
    except MalformedInput as exc:
        parser.error(f"invalid FEN: {exc}")

    bot = BotPlayer(max_depth=args.depth, max_nodes=args.nodes)
    play(game, bot, Color.BLACK if args.black else Color.WHITE)

    print(f"Use the following FEN to continue the game later:\n{game.fen()}")


if __name__ == "__main__":
    main()
