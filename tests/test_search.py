"""
Tests for the search: mate detection, ranking, cache behavior and limits.

Depths stay at 1-2 so the suite runs quickly in pure Python.
"""

import math

import pytest

from talv.board import Move
from talv.movegen import legal_moves
from talv.position import Position
from talv.search import (
    CacheEntry,
    SearchState,
    negamax,
    rank_moves,
    search_position,
)

MATE_IN_ONE = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"
MATED = "R5k1/5ppp/8/8/8/8/8/6K1 b - - 1 1"
STALEMATE = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
HANGING_QUEEN = "4k3/8/8/8/3q4/8/8/3RK3 w - - 0 1"


class TestRankMoves:
    @pytest.mark.parametrize("depth", [1, 2])
    def test_finds_mate_in_one(self, depth):
        score, moves = rank_moves(Position.from_fen(MATE_IN_ONE), max_depth=depth)
        assert score == math.inf
        assert moves[0] == Move.from_uci("a1a8")

    def test_mated_position(self):
        assert rank_moves(Position.from_fen(MATED), max_depth=2) == (-math.inf, [])

    def test_stalemate_position(self):
        assert rank_moves(Position.from_fen(STALEMATE), max_depth=2) == (0.0, [])

    def test_captures_hanging_queen(self):
        _, moves = rank_moves(Position.from_fen(HANGING_QUEEN), max_depth=1)
        assert moves[0] == Move.from_uci("d1d4")

    def test_ranking_is_a_permutation_of_legal_moves(self):
        position = Position.from_fen(HANGING_QUEEN)
        _, moves = rank_moves(position, max_depth=2)
        assert sorted(moves) == sorted(legal_moves(position))

    def test_deterministic(self):
        first = rank_moves(Position.start(), max_depth=2)
        second = rank_moves(Position.start(), max_depth=2)
        assert first == second

    def test_pawn_advance_decides_opening_at_depth_one(self):
        # A double push gains two ranks of advance bonus, averaged over 32 pieces.
        score, moves = rank_moves(Position.start(), max_depth=1)
        assert score == pytest.approx(0.1 / 32)
        best = moves[0]
        assert best.to_square.rank - best.from_square.rank == 2
        assert {move.uci() for move in moves[-4:]} == {"b1c3", "b1a3", "g1h3", "g1f3"}

    def test_depth_must_be_positive(self):
        with pytest.raises(ValueError):
            rank_moves(Position.start(), max_depth=0)


class TestSearchResult:
    def test_reports_depth_and_nodes(self):
        result = search_position(Position.from_fen(MATE_IN_ONE), max_depth=2)
        assert result.depth == 2
        assert result.nodes > 0
        assert result.best_move == Move.from_uci("a1a8")

    def test_terminal_result(self):
        result = search_position(Position.from_fen(MATED), max_depth=3)
        assert result.best_move is None
        assert result.depth == 0
        assert result.nodes == 0

    def test_node_budget_stops_deepening(self):
        result = search_position(Position.start(), max_depth=4, max_nodes=10)
        assert result.depth == 1
        assert len(result.moves) == 20


class TestNegamax:
    def test_static_evaluation_cached_at_depth_zero(self):
        state = SearchState(max_nodes=1000)
        position = Position.start()
        value = negamax(position, -math.inf, math.inf, 0, state)
        assert value == 0.0
        assert state.cache[position] == CacheEntry(0, 0.0)
        assert state.node_count == 1

    def test_deeper_entry_is_reused(self):
        state = SearchState(max_nodes=1000)
        position = Position.start()
        state.cache[position] = CacheEntry(5, 42.0)
        assert negamax(position, -math.inf, math.inf, 2, state) == 42.0

    def test_shallower_entry_is_not_reused(self):
        state = SearchState(max_nodes=1000)
        position = Position.start()
        state.cache[position] = CacheEntry(0, 42.0)
        negamax(position, -math.inf, math.inf, 1, state)
        assert state.cache[position].depth == 1
        assert state.cache[position].value != 42.0

    def test_terminal_node_cached_at_requested_depth(self):
        state = SearchState(max_nodes=1000)
        position = Position.from_fen(MATED)
        assert negamax(position, -math.inf, math.inf, 3, state) == -math.inf
        assert state.cache[position] == CacheEntry(3, -math.inf)

    def test_exhausted_budget_falls_back_to_static_eval(self):
        state = SearchState(max_nodes=0)
        state.cache[Position.from_fen(MATED)] = CacheEntry(0, 0.0)
        assert state.exhausted
        position = Position.start()
        assert negamax(position, -math.inf, math.inf, 3, state) == 0.0
        assert state.cache[position] == CacheEntry(0, 0.0)
