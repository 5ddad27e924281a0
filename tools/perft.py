#!/usr/bin/env python3
"""
Perft cross-check: count leaf nodes with talv and with python-chess and
report every root move where the two disagree.

A mismatch at depth N points at a generation bug N plies down; rerun from
the position after the offending root move at depth N-1 to narrow it.

Usage: python3 tools/perft.py [--fen FEN] [--depth N]
"""
import argparse
import os
import sys
import time

import chess

REPO = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO not in sys.path:
    sys.path.insert(0, REPO)

from talv.constants import STARTING_FEN
from talv.movegen import perft_divide
from talv.position import Position


def reference_divide(board: chess.Board, depth: int) -> dict[str, int]:
    """python-chess perft split by root move."""
    out: dict[str, int] = {}
    for move in board.legal_moves:
        board.push(move)
        out[move.uci()] = _reference_perft(board, depth - 1)
        board.pop()
    return out


def _reference_perft(board: chess.Board, depth: int) -> int:
    if depth <= 0:
        return 1
    if depth == 1:
        return board.legal_moves.count()
    total = 0
    for move in board.legal_moves:
        board.push(move)
        total += _reference_perft(board, depth - 1)
        board.pop()
    return total


def compare(fen: str, depth: int) -> bool:
    """Print a divide table for ``fen`` and return True if both sides agree."""
    start = time.monotonic()
    ours = perft_divide(Position.from_fen(fen), depth)
    elapsed = time.monotonic() - start
    theirs = reference_divide(chess.Board(fen), depth)

    ok = True
    for uci in sorted(set(ours) | set(theirs)):
        a = ours.get(uci)
        b = theirs.get(uci)
        mark = "" if a == b else "  <-- mismatch"
        ok = ok and a == b
        print(f"{uci:<6} {a if a is not None else '-':>10} {b if b is not None else '-':>10}{mark}")

    print("-" * 28)
    print(f"{'total':<6} {sum(ours.values()):>10} {sum(theirs.values()):>10}")
    print(f"talv: {elapsed:.2f}s")
    return ok


def main() -> None:
    parser = argparse.ArgumentParser(description="Compare talv perft against python-chess.")
    parser.add_argument("--fen", default=STARTING_FEN)
    parser.add_argument("--depth", type=int, default=3)
    args = parser.parse_args()

    if not compare(args.fen, args.depth):
        sys.exit(1)


if __name__ == "__main__":
    main()
