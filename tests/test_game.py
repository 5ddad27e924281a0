"""Tests for the Game wrapper: clocks, draw rules and notation-level move lookup."""

import pytest

from talv.board import Color, Move, PieceKind, Square
from talv.constants import STARTING_FEN
from talv.errors import AmbiguousMove, IllegalMove, MalformedInput, NoSuchMove
from talv.game import Game
from talv.position import Outcome


def sq(name: str) -> Square:
    return Square.parse(name)


TWO_KNIGHTS = "4k3/8/8/8/8/8/8/1N1K1N2 w - - 0 1"


class TestFen:
    def test_new_game(self):
        assert Game().fen() == STARTING_FEN

    def test_four_fields_default_clocks(self):
        game = Game.from_fen("4k3/8/8/8/8/8/8/4K3 b - -")
        assert game.halfmove_clock == 0
        assert game.fullmove_number == 1
        assert game.side_to_move is Color.BLACK

    def test_six_fields_round_trip(self):
        fen = "4k3/8/8/8/8/8/8/R3K3 w Q - 17 42"
        assert Game.from_fen(fen).fen() == fen

    @pytest.mark.parametrize(
        "fen",
        [
            "4k3/8/8/8/8/8/8/4K3 w - - 0",
            "4k3/8/8/8/8/8/8/4K3 w - - x 1",
            "4k3/8/8/8/8/8/8/4K3 w - - -1 1",
            "4k3/8/8/8/8/8/8/4K3 w - - 0 0",
        ],
    )
    def test_bad_clocks(self, fen):
        with pytest.raises(MalformedInput):
            Game.from_fen(fen)

    @pytest.mark.parametrize(
        "fen",
        [
            "8/8/8/8/8/8/8/4K3 b - - 0 1",  # no black king
            "4k3/8/8/8/8/8/8/8 w - - 0 1",  # no white king
            "4k3/8/8/8/8/8/8/4K2K w - - 0 1",  # two white kings
            "8/8/8/8/8/8/8/8 w - - 0 1",  # empty board
        ],
    )
    def test_king_count(self, fen):
        with pytest.raises(MalformedInput):
            Game.from_fen(fen)


class TestMakeMove:
    def test_clocks(self):
        game = Game()
        assert game.push(Move.from_uci("e2e4")) is Outcome.PAWN_MOVE
        assert (game.halfmove_clock, game.fullmove_number) == (0, 1)
        game.push(Move.from_uci("g8f6"))
        assert (game.halfmove_clock, game.fullmove_number) == (1, 2)
        game.push(Move.from_uci("b1c3"))
        assert (game.halfmove_clock, game.fullmove_number) == (2, 2)
        assert game.fen() == "rnbqkb1r/pppppppp/5n2/8/4P3/2N5/PPPP1PPP/R1BQKBNR b KQkq - 2 2"

    def test_capture_resets_clock(self):
        game = Game.from_fen("4k3/8/8/8/3q4/8/8/3RK3 w - - 9 30")
        assert game.make_move(sq("d1"), sq("d4")) is Outcome.CAPTURE
        assert game.halfmove_clock == 0

    def test_leaving_king_in_check_is_rejected(self):
        fen = "4k3/4r3/8/8/8/8/4B3/4K3 w - - 0 1"
        game = Game.from_fen(fen)
        with pytest.raises(IllegalMove):
            game.make_move(sq("e2"), sq("d3"))
        assert game.fen() == fen

    def test_movement_error_leaves_game_unchanged(self):
        game = Game()
        with pytest.raises(IllegalMove):
            game.make_move(sq("e2"), sq("e5"))
        assert game.fen() == STARTING_FEN


class TestGameEnd:
    def test_checkmate(self):
        game = Game.from_fen("R5k1/5ppp/8/8/8/8/8/6K1 b - - 1 1")
        assert game.is_checkmate()
        assert not game.is_stalemate()
        assert game.legal_moves() == []

    def test_stalemate(self):
        game = Game.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
        assert game.is_stalemate()
        assert not game.is_checkmate()

    def test_threefold_repetition(self):
        game = Game()
        shuffle = ["g1f3", "g8f6", "f3g1", "f6g8"]
        for uci in shuffle:
            game.push(Move.from_uci(uci))
        assert not game.draw_claimable()
        for uci in shuffle:
            game.push(Move.from_uci(uci))
        assert game.draw_claimable()

    def test_pawn_move_clears_repetition_history(self):
        game = Game()
        for uci in ["g1f3", "g8f6", "f3g1", "f6g8", "g1f3", "g8f6"]:
            game.push(Move.from_uci(uci))
        game.push(Move.from_uci("e2e4"))
        game.push(Move.from_uci("f6g8"))
        assert not game.draw_claimable()

    def test_fifty_move_rule(self):
        assert Game.from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 100 80").draw_claimable()
        assert not Game.from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 99 80").draw_claimable()

    def test_bare_kings(self):
        assert Game.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1").draw_claimable()
        assert not Game().draw_claimable()


class TestResolve:
    def test_ambiguous(self):
        game = Game.from_fen(TWO_KNIGHTS)
        with pytest.raises(AmbiguousMove):
            game.resolve(PieceKind.KNIGHT, sq("d2"), capture=False)

    def test_file_hint(self):
        game = Game.from_fen(TWO_KNIGHTS)
        move = game.resolve(PieceKind.KNIGHT, sq("d2"), capture=False, from_file=5)
        assert move == Move(sq("f1"), sq("d2"))

    def test_no_such_piece(self):
        game = Game.from_fen(TWO_KNIGHTS)
        with pytest.raises(NoSuchMove):
            game.resolve(PieceKind.KNIGHT, sq("c4"), capture=False)

    def test_capture_flag_must_match(self):
        game = Game.from_fen(TWO_KNIGHTS)
        with pytest.raises(NoSuchMove):
            game.resolve(PieceKind.KNIGHT, sq("c3"), capture=True)

    def test_pinned_piece_does_not_count(self):
        # Both rooks reach d2, but the e2 rook is pinned to its king.
        game = Game.from_fen("4r1k1/3R4/8/8/8/8/4R3/4K3 w - - 0 1")
        move = game.resolve(PieceKind.ROOK, sq("d2"), capture=False)
        assert move == Move(sq("d7"), sq("d2"))

    def test_promotion_required(self):
        game = Game.from_fen("8/P3k3/8/8/8/8/8/4K3 w - - 0 1")
        with pytest.raises(NoSuchMove):
            game.resolve(PieceKind.PAWN, sq("a8"), capture=False)

    def test_ambiguous_is_an_illegal_move(self):
        assert issubclass(AmbiguousMove, IllegalMove)
        assert issubclass(NoSuchMove, IllegalMove)


class TestParseAlgebraic:
    def test_pawn_push(self):
        assert Game().parse_algebraic("e4") == Move.from_uci("e2e4")

    def test_knight(self):
        assert Game().parse_algebraic("Nf3") == Move.from_uci("g1f3")

    def test_disambiguation(self):
        game = Game.from_fen(TWO_KNIGHTS)
        assert game.parse_algebraic("Nbd2") == Move.from_uci("b1d2")
        assert game.parse_algebraic("Nfd2") == Move.from_uci("f1d2")
        with pytest.raises(AmbiguousMove):
            game.parse_algebraic("Nd2")

    def test_en_passant(self):
        game = Game.from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
        assert game.parse_algebraic("exd6") == Move.from_uci("e5d6")

    def test_promotion(self):
        game = Game.from_fen("8/P3k3/8/8/8/8/8/4K3 w - - 0 1")
        assert game.parse_algebraic("a8=Q+") == Move.from_uci("a7a8q")
        assert game.parse_algebraic("a8N") == Move.from_uci("a7a8n")

    def test_castles(self):
        game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        assert game.parse_algebraic("O-O") == Move.from_uci("e1g1")
        assert game.parse_algebraic("O-O-O") == Move.from_uci("e1c1")

    def test_castling_not_available(self):
        with pytest.raises(NoSuchMove):
            Game().parse_algebraic("O-O")

    def test_malformed(self):
        with pytest.raises(MalformedInput):
            Game().parse_algebraic("hello")
