"""
Search entry point: negamax with alpha-beta pruning, iterative deepening,
and a depth-tagged transposition cache.

rank_moves() is the stable interface the front ends depend on. It returns
the best evaluation together with every legal root move, best first.

Algorithm:

1. Iterative deepening. The root is searched at depth 1, 2, ... max_depth.
   Each iteration visits the root moves in the order the previous iteration
   ranked them, so the strongest candidates raise alpha early and prune more
   of their siblings.

2. Full root evaluation. Every root move is searched with the full window
   (-inf, +inf), so the root ranking orders all moves by their true value
   at that depth, not only the best one. Ties keep generation order.

3. Transposition cache. A single dict maps Position -> (depth, value) for
   the whole rank_moves() call. An entry is only reused when it was computed
   at least as deep as the current request. Static evaluations are stored
   with depth 0, so they never stand in for a deeper search.

4. Node budget. max_nodes bounds the cache size. Once it is exceeded, inner
   nodes fall back to the static evaluation and no further iteration starts.

Threading model:
    All search state lives in one SearchState object passed down the
    recursion; nothing is global. A caller that wants the search off its
    own thread hands a Position (immutable, so safe to share) to a worker;
    see talv.players.BotPlayer.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import NamedTuple

from talv.board import Move
from talv.constants import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES, MAX_MOVES_PER_PLY
from talv.errors import CapacityExceeded
from talv.evaluate import evaluate
from talv.movegen import MoveBuffer, gen_legal_moves, legal_moves
from talv.position import Position

_log = logging.getLogger(__name__)


class CacheEntry(NamedTuple):
    depth: int
    value: float


@dataclass
class SearchState:
    """
    Mutable state for one rank_moves() call.

    Attributes:
        max_nodes:  Approximate node budget, compared against the cache size.
        cache:      Position -> CacheEntry(depth computed at, value).
        node_count: Number of negamax calls made. Used for reporting only.
    """

    max_nodes: int
    cache: dict[Position, CacheEntry] = field(default_factory=dict)
    node_count: int = 0

    @property
    def exhausted(self) -> bool:
        return len(self.cache) > self.max_nodes


@dataclass
class SearchResult:
    """
    Outcome of a ranked search.

    Attributes:
        score: Evaluation of the best move from the mover's perspective.
        moves: Every legal root move, best first. Empty in terminal positions.
        depth: Deepest iteration that completed.
        nodes: Negamax calls made over all iterations.
    """

    score: float
    moves: list[Move]
    depth: int
    nodes: int

    @property
    def best_move(self) -> Move | None:
        return self.moves[0] if self.moves else None


def negamax(
    position: Position,
    alpha: float,
    beta: float,
    depth: int,
    state: SearchState,
) -> float:
    """
    Negamax search with alpha-beta pruning.

    Args:
        position: Position to search. Never modified; children are new values.
        alpha:    Lower bound of the search window.
        beta:     Upper bound of the search window.
        depth:    Remaining plies. 0 means return the static evaluation.
        state:    Cache and node budget for the current rank_moves() call.

    Returns:
        Score from the perspective of the side to move at this node.
    """
    state.node_count += 1

    entry = state.cache.get(position)
    if entry is not None and entry.depth >= depth:
        return entry.value

    if depth == 0 or state.exhausted:
        value = evaluate(position)
        if entry is None:
            state.cache[position] = CacheEntry(0, value)
        return value

    buffer = MoveBuffer(MAX_MOVES_PER_PLY)
    try:
        gen_legal_moves(buffer, position)
    except CapacityExceeded:
        _log.warning("move cap of %d reached in %s", MAX_MOVES_PER_PLY, position.fen())

    if not buffer.moves:
        # Mate or stalemate: the static evaluation is final at any depth.
        value = evaluate(position)
        state.cache[position] = CacheEntry(depth, value)
        return value

    best = -math.inf
    for move in buffer:
        # Swap and negate the window for the child (negamax convention).
        value = -negamax(position.push(move), -beta, -alpha, depth - 1, state)
        if value > best:
            best = value
            if best > alpha:
                alpha = best
        if beta <= alpha:
            break

    state.cache[position] = CacheEntry(depth, best)
    return best


def _insert_ranked(ranked: list[tuple[float, Move]], value: float, move: Move) -> None:
    """Insert keeping ``ranked`` descending; equal values keep arrival order."""
    for i, (existing, _) in enumerate(ranked):
        if value > existing:
            ranked.insert(i, (value, move))
            return
    ranked.append((value, move))


def search_position(
    position: Position,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_nodes: int = DEFAULT_MAX_NODES,
) -> SearchResult:
    """
    Rank every legal move of ``position`` by iterative-deepening negamax.

    Args:
        position:  The position to search. Not modified.
        max_depth: Deepest iteration to run (at least 1).
        max_nodes: Approximate node budget; deepening stops once the cache
                   holds more positions than this.

    Returns:
        SearchResult with the best score, the ranked moves, the deepest
        completed iteration, and the node count.

    Raises:
        ValueError: max_depth is below 1.
    """
    if max_depth < 1:
        raise ValueError(f"max_depth must be at least 1, got {max_depth}")

    moves = legal_moves(position)
    if not moves:
        return SearchResult(score=evaluate(position), moves=[], depth=0, nodes=0)

    state = SearchState(max_nodes=max_nodes)
    ranked: list[tuple[float, Move]] = [(0.0, move) for move in moves]
    completed_depth = 0

    for depth in range(1, max_depth + 1):
        scored: list[tuple[float, Move]] = []
        for _, move in ranked:
            value = -negamax(position.push(move), -math.inf, math.inf, depth - 1, state)
            _insert_ranked(scored, value, move)
        ranked = scored
        completed_depth = depth

        _log.debug(
            "depth=%d best=%s eval=%s cache=%d nodes=%d",
            depth,
            ranked[0][1],
            ranked[0][0],
            len(state.cache),
            state.node_count,
        )

        if state.exhausted:
            _log.debug("node budget of %d exceeded after depth %d", max_nodes, depth)
            break

    return SearchResult(
        score=ranked[0][0],
        moves=[move for _, move in ranked],
        depth=completed_depth,
        nodes=state.node_count,
    )


def rank_moves(
    position: Position,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_nodes: int = DEFAULT_MAX_NODES,
) -> tuple[float, list[Move]]:
    """Return (best evaluation, legal moves best to worst) for ``position``."""
    result = search_position(position, max_depth, max_nodes)
    return result.score, result.moves
