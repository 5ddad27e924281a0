#!/usr/bin/env python3
"""
Benchmark: nodes searched and time per move at a fixed search depth.

Drives the UCI front end as a subprocess, so the numbers include exactly
what a GUI would see. Run before and after a change to the move generator,
evaluator or search: a lower node count at the same depth means better
move ordering or cache reuse, a higher NPS means cheaper nodes.

Usage: python3 tools/bench.py [--depth N]
"""
import argparse
import os
import subprocess
import sys

REPO = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
PYTHON = sys.executable
ENGINE = os.path.join(REPO, "interface", "uci.py")

# Fixed set of positions spanning opening, middlegame and endgame.
POSITIONS = [
    ("Start",        "startpos"),
    ("After 1.e4",   "startpos moves e2e4"),
    ("Italian",      "startpos moves e2e4 e7e5 g1f3 b8c6 f1c4"),
    ("Kiwipete",     "fen r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"),
    ("Promotions",   "fen r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1"),
    ("Rook ending",  "fen 8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"),
    ("Mate in 1",    "fen 6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"),
]


def run_position(label: str, pos_spec: str, depth: int) -> dict:
    """Run a single position through the engine and return metrics.

    Args:
        label: Human-readable position name for display.
        pos_spec: UCI position string (e.g. "startpos" or "fen <FEN>").
        depth: Value passed as "go depth".

    Returns:
        Dict with keys: label, move, depth, score, nodes, nps, time_ms.
    """
    env = {**os.environ, "PYTHONPATH": REPO}
    proc = subprocess.Popen(
        [PYTHON, ENGINE],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        text=True,
        env=env,
    )
    proc.stdin.write(f"uci\nisready\nposition {pos_spec}\ngo depth {depth}\n")
    proc.stdin.flush()

    nodes = time_ms = reached = 0
    score = "-"
    move = "(none)"
    for line in proc.stdout:
        parts = line.split()
        if line.startswith("info depth"):
            reached = int(parts[parts.index("depth") + 1])
            nodes = int(parts[parts.index("nodes") + 1])
            time_ms = int(parts[parts.index("time") + 1])
            at = parts.index("score")
            score = " ".join(parts[at + 1:at + 3])
        elif line.startswith("bestmove"):
            move = parts[1]
            break

    proc.stdin.write("quit\n")
    proc.stdin.flush()
    proc.wait(timeout=5)

    return {
        "label": label,
        "move": move,
        "depth": reached,
        "score": score,
        "nodes": nodes,
        "nps": nodes * 1000 // time_ms if time_ms else 0,
        "time_ms": time_ms,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark the talv search.")
    parser.add_argument("--depth", type=int, default=3)
    args = parser.parse_args()

    print(f"talv benchmark, depth {args.depth}, {PYTHON}")
    print()
    print(
        f"{'Position':<12} {'Move':<7} {'Depth':>5} {'Score':>9} "
        f"{'Nodes':>9} {'NPS':>8} {'Time(ms)':>9}"
    )
    print("-" * 65)

    results = []
    for label, pos in POSITIONS:
        r = run_position(label, pos, args.depth)
        results.append(r)
        print(
            f"{r['label']:<12} {r['move']:<7} {r['depth']:>5} {r['score']:>9} "
            f"{r['nodes']:>9,} {r['nps']:>8,} {r['time_ms']:>9,}"
        )

    valid = [r for r in results if r["nodes"] > 0]
    if valid:
        avg_nodes = sum(r["nodes"] for r in valid) // len(valid)
        avg_time = sum(r["time_ms"] for r in valid) // len(valid)
        avg_nps = sum(r["nps"] for r in valid) // len(valid)
        print("-" * 65)
        print(
            f"{'AVERAGE':<12} {'':<7} {'':<5} {'':<9} "
            f"{avg_nodes:>9,} {avg_nps:>8,} {avg_time:>9,}"
        )


if __name__ == "__main__":
    main()
