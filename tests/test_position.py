"""Tests for the legality engine: pseudo-legality, attacks, check and move application."""

import pytest

from talv.board import CastlingRights, Color, Move, Piece, PieceKind, Square
from talv.errors import IllegalMove, InvariantViolation
from talv.position import Outcome, Position


def sq(name: str) -> Square:
    return Square.parse(name)


CASTLE_BOTH = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"


class TestApplyMove:
    def test_double_push_sets_en_passant(self):
        start = Position.start()
        after, outcome = start.apply_move(sq("e2"), sq("e4"))
        assert outcome is Outcome.PAWN_MOVE
        assert after.fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3"
        assert after.side_to_move is Color.BLACK
        # The original is untouched.
        assert start == Position.start()

    def test_single_push_clears_en_passant(self):
        after = Position.start().push(Move.from_uci("e2e4")).push(Move.from_uci("g8f6"))
        assert after.en_passant_target is None

    def test_en_passant_capture_removes_passed_pawn(self):
        position = Position.from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
        after, outcome = position.apply_move(sq("e5"), sq("d6"))
        assert outcome is Outcome.CAPTURE
        assert after.fen() == "4k3/8/3P4/8/8/8/8/4K3 b - -"

    def test_promotion(self):
        position = Position.from_fen("8/P3k3/8/8/8/8/8/4K3 w - - 0 1")
        after, outcome = position.apply_move(sq("a7"), sq("a8"), PieceKind.QUEEN)
        assert after.piece_at(sq("a8")) == Piece(Color.WHITE, PieceKind.QUEEN)
        assert after.piece_at(sq("a7")) is None
        assert outcome is Outcome.PAWN_MOVE

    def test_underpromotion(self):
        position = Position.from_fen("8/P3k3/8/8/8/8/8/4K3 w - - 0 1")
        after, _ = position.apply_move(sq("a7"), sq("a8"), PieceKind.KNIGHT)
        assert after.piece_at(sq("a8")) == Piece(Color.WHITE, PieceKind.KNIGHT)

    @pytest.mark.parametrize("promotion", [None, PieceKind.KING, PieceKind.PAWN])
    def test_promotion_piece_required(self, promotion):
        position = Position.from_fen("8/P3k3/8/8/8/8/8/4K3 w - - 0 1")
        with pytest.raises(IllegalMove):
            position.apply_move(sq("a7"), sq("a8"), promotion)

    def test_promotion_only_for_pawns_on_last_rank(self):
        position = Position.from_fen("8/P3k3/8/8/8/8/8/4K3 w - - 0 1")
        with pytest.raises(IllegalMove):
            position.apply_move(sq("e1"), sq("e2"), PieceKind.QUEEN)

    def test_rejects_non_movement(self):
        with pytest.raises(IllegalMove):
            Position.start().apply_move(sq("e2"), sq("e5"))

    def test_rejects_opponent_piece(self):
        with pytest.raises(IllegalMove):
            Position.start().apply_move(sq("e7"), sq("e5"))

    def test_rejects_empty_square(self):
        with pytest.raises(IllegalMove):
            Position.start().apply_move(sq("e4"), sq("e5"))

    def test_outcome_check(self):
        position = Position.from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
        _, outcome = position.apply_move(sq("a1"), sq("a8"))
        assert outcome is Outcome.CHECK

    def test_outcome_pawn_move_with_check(self):
        position = Position.from_fen("8/8/4k3/8/3P4/8/8/4K3 w - - 0 1")
        _, outcome = position.apply_move(sq("d4"), sq("d5"))
        assert outcome is Outcome.PAWN_MOVE_WITH_CHECK

    def test_outcome_plain(self):
        _, outcome = Position.start().apply_move(sq("g1"), sq("f3"))
        assert outcome is Outcome.PLAIN
        assert not outcome.irreversible

    def test_irreversible_outcomes(self):
        assert Outcome.CAPTURE.irreversible
        assert Outcome.PAWN_MOVE.irreversible
        assert Outcome.PAWN_MOVE_WITH_CHECK.irreversible
        assert not Outcome.CHECK.irreversible


class TestCastling:
    def test_short(self):
        after, _ = Position.from_fen(CASTLE_BOTH).apply_move(sq("e1"), sq("g1"))
        assert after.piece_at(sq("g1")) == Piece(Color.WHITE, PieceKind.KING)
        assert after.piece_at(sq("f1")) == Piece(Color.WHITE, PieceKind.ROOK)
        assert after.piece_at(sq("h1")) is None
        assert after.castling_rights == CastlingRights.of(Color.BLACK)

    def test_long(self):
        after, _ = Position.from_fen(CASTLE_BOTH).apply_move(sq("e1"), sq("c1"))
        assert after.piece_at(sq("c1")) == Piece(Color.WHITE, PieceKind.KING)
        assert after.piece_at(sq("d1")) == Piece(Color.WHITE, PieceKind.ROOK)
        assert after.piece_at(sq("a1")) is None

    def test_black_long(self):
        position = Position.from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
        after, _ = position.apply_move(sq("e8"), sq("c8"))
        assert after.fen() == "2kr3r/8/8/8/8/8/8/R3K2R w KQ -"

    def test_through_attacked_square(self):
        position = Position.from_fen("4kr2/8/8/8/8/8/8/R3K2R w KQ - 0 1")
        with pytest.raises(IllegalMove):
            position.apply_move(sq("e1"), sq("g1"))
        after, _ = position.apply_move(sq("e1"), sq("c1"))
        assert after.piece_at(sq("d1")) == Piece(Color.WHITE, PieceKind.ROOK)

    def test_out_of_check(self):
        position = Position.from_fen("4r1k1/8/8/8/8/8/8/R3K2R w KQ - 0 1")
        for target in ("g1", "c1"):
            with pytest.raises(IllegalMove):
                position.apply_move(sq("e1"), sq(target))

    def test_blocked_by_piece_next_to_rook(self):
        position = Position.from_fen("4k3/8/8/8/8/8/8/RN2K3 w Q - 0 1")
        assert not position.pseudo_legal(Color.WHITE, sq("e1"), sq("c1"))
        with pytest.raises(IllegalMove):
            position.apply_move(sq("e1"), sq("c1"))

    def test_needs_right(self):
        position = Position.from_fen("4k3/8/8/8/8/8/8/R3K2R w K - 0 1")
        assert position.pseudo_legal(Color.WHITE, sq("e1"), sq("g1"))
        assert not position.pseudo_legal(Color.WHITE, sq("e1"), sq("c1"))

    def test_needs_rook_on_corner(self):
        position = Position.from_fen("4k3/8/8/8/8/8/7R/4K3 w K - 0 1")
        assert not position.pseudo_legal(Color.WHITE, sq("e1"), sq("g1"))

    def test_king_move_clears_both_rights(self):
        after = Position.from_fen(CASTLE_BOTH).push(Move.from_uci("e1e2"))
        assert after.castling_rights == CastlingRights.of(Color.BLACK)

    def test_rook_move_clears_one_right(self):
        after = Position.from_fen(CASTLE_BOTH).push(Move.from_uci("a1a2"))
        assert after.castling_rights == CastlingRights.ALL & ~CastlingRights.WHITE_LONG

    def test_capture_on_corner_clears_victim_right(self):
        after = Position.from_fen(CASTLE_BOTH).push(Move.from_uci("a1a8"))
        assert after.castling_rights == CastlingRights.WHITE_SHORT | CastlingRights.BLACK_SHORT

    def test_rights_never_return(self):
        position = Position.from_fen(CASTLE_BOTH)
        for uci in ("h1h2", "h8h7", "h2h1", "h7h8"):
            before = position.castling_rights
            position = position.push(Move.from_uci(uci))
            assert position.castling_rights & ~before == CastlingRights.NONE
        assert position.castling_rights == CastlingRights.WHITE_LONG | CastlingRights.BLACK_LONG


class TestAttacks:
    def test_rook_gives_check(self):
        position = Position.from_fen("4k3/8/8/8/8/8/8/4RK2 b - - 0 1")
        assert position.in_check(Color.BLACK)
        assert not position.in_check(Color.WHITE)

    def test_blocked_line_is_not_check(self):
        position = Position.from_fen("4k3/4p3/8/8/8/8/8/4RK2 b - - 0 1")
        assert not position.in_check(Color.BLACK)

    def test_pawns_attack_empty_diagonals(self):
        start = Position.start()
        assert start.is_attacked(sq("e3"), Color.WHITE)
        assert start.is_attacked(sq("f6"), Color.BLACK)
        assert not start.is_attacked(sq("e4"), Color.WHITE)

    def test_pawn_does_not_attack_forward(self):
        position = Position.from_fen("8/8/8/4k3/4P3/8/8/4K3 b - - 0 1")
        assert not position.in_check(Color.BLACK)

    def test_knight_attack(self):
        position = Position.from_fen("4k3/8/3N4/8/8/8/8/4K3 b - - 0 1")
        assert position.in_check(Color.BLACK)

    def test_missing_king(self):
        position = Position.from_fen("8/8/8/8/8/8/8/4K3 w - - 0 1")
        with pytest.raises(InvariantViolation):
            position.king_square(Color.BLACK)


class TestValueSemantics:
    def test_equal_positions_hash_equal(self):
        a = Position.start().push(Move.from_uci("g1f3")).push(Move.from_uci("g8f6"))
        b = Position.start().push(Move.from_uci("g1f3")).push(Move.from_uci("g8f6"))
        assert a == b
        assert hash(a) == hash(b)

    def test_transposition_reaches_same_position(self):
        a = Position.start()
        for uci in ("g1f3", "g8f6", "b1c3"):
            a = a.push(Move.from_uci(uci))
        b = Position.start()
        for uci in ("b1c3", "g8f6", "g1f3"):
            b = b.push(Move.from_uci(uci))
        assert a == b

    def test_str(self):
        rows = str(Position.start()).splitlines()
        assert rows[0] == "8 rnbqkbnr"
        assert rows[7] == "1 RNBQKBNR"
        assert rows[8] == "  abcdefgh"
