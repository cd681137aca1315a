import pytest

from fishcore.bitboards import (
    SQ_NONE,
    CastlingRights,
    Color,
    MoveType,
    Piece,
    PieceType,
    make_move,
    parse_square,
    rank_bb,
    square_bb,
)
from fishcore.board import START_FEN, Board
from fishcore.psqt import (
    BISHOP_VALUE_MG,
    KNIGHT_VALUE_MG,
    QUEEN_VALUE_MG,
    ROOK_VALUE_MG,
    Score,
)
from fishcore.zobrist import make_key, zobrist_keys

KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
EP_PIN = "8/8/8/KPp4r/8/8/8/4k3 w - c6 0 2"


def sq(name):
    return parse_square(name)


@pytest.mark.parametrize(
    "fen",
    [
        START_FEN,
        KIWIPETE,
        EP_PIN,
        "rnbqkbnr/pppppppp/8/8/8/5N2/PPPPPPPP/RNBQKB1R b KQkq - 1 1",
        "4k3/8/8/8/8/8/4r3/4K3 w - - 12 40",
    ],
)
def test_fen_round_trip(fen):
    assert Board(fen).fen() == fen


def test_enpassant_dropped_without_capturing_pawn():
    board = Board("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1")
    assert board.ep_square == SQ_NONE
    assert board.fen().split()[3] == "-"


def test_enpassant_kept_when_capture_possible():
    board = Board(EP_PIN)
    assert board.ep_square == sq("c6")


def test_enpassant_illegal_through_horizontal_pin():
    board = Board(EP_PIN)
    move = make_move(sq("b5"), sq("c6"), MoveType.EN_PASSANT)
    assert board.capture(move)
    assert not board.legal(move)


def test_missing_king_raises():
    with pytest.raises(ValueError):
        Board("8/8/8/8/8/8/8/4K3 w - - 0 1")


def test_start_position_symmetry():
    board = Board()
    assert board.checkers() == 0
    assert board.psq_score == Score(0, 0)
    white = board.non_pawn_material(Color.WHITE)
    assert white == board.non_pawn_material(Color.BLACK)
    assert white == 2 * KNIGHT_VALUE_MG + 2 * BISHOP_VALUE_MG + 2 * ROOK_VALUE_MG + QUEEN_VALUE_MG
    assert board.non_pawn_material() == 2 * white
    assert board.count(PieceType.PAWN) == 16


def test_side_to_move_changes_key_by_side_key():
    white = Board(START_FEN)
    black = Board(START_FEN.replace(" w ", " b "))
    assert white.key() ^ black.key() == zobrist_keys().side


def test_key_ignores_move_counter():
    assert Board(START_FEN).key() == Board(START_FEN.replace(" 0 1", " 0 7")).key()


def test_key_adjusted_by_rule50():
    base = Board("4k3/8/8/8/8/8/8/R3K3 w - - 0 40")
    at13 = Board("4k3/8/8/8/8/8/8/R3K3 w - - 13 40")
    at14 = Board("4k3/8/8/8/8/8/8/R3K3 w - - 14 40")
    assert at13.key() == base.key()
    assert at14.key() == base.key() ^ make_key(0)


def test_key_after_matches_resulting_position():
    board = Board()
    after = Board("rnbqkbnr/pppppppp/8/8/8/5N2/PPPPPPPP/RNBQKB1R b KQkq - 1 1")
    assert board.key_after(make_move(sq("g1"), sq("f3"))) == after.key()
    pushed = Board("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1")
    assert board.key_after(make_move(sq("e2"), sq("e4"))) == pushed.key()


def test_pawn_key_unchanged_by_piece_move():
    before = Board()
    after = Board("rnbqkbnr/pppppppp/8/8/8/5N2/PPPPPPPP/RNBQKB1R b KQkq - 1 1")
    assert before.pawn_key == after.pawn_key


def test_checkers_and_king_moves():
    board = Board("4k3/8/8/8/8/8/4r3/4K3 w - - 0 1")
    assert board.checkers() == square_bb(sq("e2"))
    assert board.legal(make_move(sq("e1"), sq("e2")))
    assert board.legal(make_move(sq("e1"), sq("f1")))
    assert not board.legal(make_move(sq("e1"), sq("d2")))
    assert not board.legal(make_move(sq("e1"), sq("f2")))
    assert "Checkers: e2 " in board.render()


def test_pinned_piece():
    board = Board("4k3/4r3/8/8/8/8/4B3/4K3 w - - 0 1")
    assert board.blockers_for_king(Color.WHITE) == square_bb(sq("e2"))
    assert board.pinners(Color.BLACK) == square_bb(sq("e7"))
    assert board.slider_blockers(board.pieces(color=Color.BLACK), sq("e1")) == (
        square_bb(sq("e2")),
        square_bb(sq("e7")),
    )
    assert not board.legal(make_move(sq("e2"), sq("d3")))


def test_castling_setup():
    board = Board("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    assert board.can_castle(CastlingRights.ANY)
    assert board.castling_rook_square(CastlingRights.WHITE_OO) == sq("h1")
    assert board.castling_rook_square(CastlingRights.BLACK_OOO) == sq("a8")
    assert not board.castling_impeded(CastlingRights.WHITE_OOO)
    impeded = Board("r3k2r/8/8/8/8/8/8/RN2K2R w KQkq - 0 1")
    assert impeded.castling_impeded(CastlingRights.WHITE_OOO)
    assert not impeded.castling_impeded(CastlingRights.WHITE_OO)


def test_castling_rook_square_needs_single_right():
    with pytest.raises(ValueError):
        Board().castling_rook_square(CastlingRights.ANY)


def test_castling_legality_through_attacked_squares():
    board = Board("4kr2/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert not board.legal(make_move(sq("e1"), sq("h1"), MoveType.CASTLING))
    assert board.legal(make_move(sq("e1"), sq("a1"), MoveType.CASTLING))
    b_file = Board("1r2k3/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert b_file.legal(make_move(sq("e1"), sq("a1"), MoveType.CASTLING))
    c_file = Board("2r1k3/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert not c_file.legal(make_move(sq("e1"), sq("a1"), MoveType.CASTLING))


def test_chess960_fen_uses_rook_files():
    board = Board("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1", chess960=True)
    assert board.fen().split()[2] == "HAha"


def test_gives_check():
    board = Board("4k3/8/8/8/8/8/8/R3K3 w - - 0 1")
    assert board.gives_check(make_move(sq("a1"), sq("a8")))
    assert not board.gives_check(make_move(sq("a1"), sq("b1")))
    discovered = Board("4k3/8/8/8/8/8/4B3/4RK2 w - - 0 1")
    assert discovered.gives_check(make_move(sq("e2"), sq("d3")))
    promo = Board("4k3/P7/8/8/8/8/8/4K3 w - - 0 1")
    assert promo.gives_check(make_move(sq("a7"), sq("a8"), MoveType.PROMOTION, PieceType.QUEEN))
    assert not promo.gives_check(make_move(sq("a7"), sq("a8"), MoveType.PROMOTION, PieceType.KNIGHT))
    castle = Board("5k2/8/8/8/8/8/8/4K2R w K - 0 1")
    assert castle.gives_check(make_move(sq("e1"), sq("h1"), MoveType.CASTLING))


def test_capture_and_capture_stage():
    board = Board(KIWIPETE)
    assert board.capture(make_move(sq("e5"), sq("f7")))
    assert not board.capture(make_move(sq("e5"), sq("d3")))
    assert board.moved_piece(make_move(sq("e5"), sq("f7"))) == Piece.W_KNIGHT
    promo = Board("4k3/P7/8/8/8/8/8/4K3 w - - 0 1")
    assert promo.capture_stage(make_move(sq("a7"), sq("a8"), MoveType.PROMOTION, PieceType.QUEEN))
    assert not promo.capture_stage(make_move(sq("a7"), sq("a8"), MoveType.PROMOTION, PieceType.ROOK))


def test_endgame_code():
    board = Board.from_endgame_code("KBPvKN", Color.WHITE)
    assert board.fen() == "8/kn6/8/8/8/8/KBP5/8 w - - 0 10"
    other = Board("8/8/3k4/8/1n6/8/2BP4/4K3 w - - 0 1")
    assert board.material_key == other.material_key


def test_endgame_code_invalid():
    with pytest.raises(ValueError):
        Board.from_endgame_code("BK", Color.WHITE)


def test_put_remove_round_trip():
    board = Board()
    score = board.psq_score
    pawns = board.count(PieceType.PAWN, Color.WHITE)
    board.remove_piece(sq("e2"))
    assert board.empty(sq("e2"))
    assert board.count(PieceType.PAWN, Color.WHITE) == pawns - 1
    board.put_piece(Piece.W_PAWN, sq("e2"))
    assert board.piece_on(sq("e2")) == Piece.W_PAWN
    assert board.psq_score == score
    assert board.count(PieceType.PAWN, Color.WHITE) == pawns
    with pytest.raises(ValueError):
        board.remove_piece(sq("e4"))


def test_attacks_by_pawns_cover_third_rank():
    board = Board()
    assert board.attacks_by(PieceType.PAWN, Color.WHITE) == rank_bb(sq("a3"))


def test_pawn_structure_queries():
    board = Board("4k3/8/8/3P4/8/8/8/4K3 w - - 0 1")
    assert board.pawn_passed(Color.WHITE, sq("d5"))
    assert board.is_on_semiopen_file(Color.WHITE, sq("e4"))
    assert not board.is_on_semiopen_file(Color.WHITE, sq("d1"))
    blocked = Board("4k3/4p3/8/3P4/8/8/8/4K3 w - - 0 1")
    assert not blocked.pawn_passed(Color.WHITE, sq("d5"))


def test_pawns_on_square_colours_partition():
    board = Board()
    dark = board.pawns_on_same_color_squares(Color.WHITE, sq("a1"))
    light = board.pawns_on_same_color_squares(Color.WHITE, sq("b1"))
    assert dark + light == board.count(PieceType.PAWN, Color.WHITE)


def test_opposite_bishops():
    assert not Board("4kb2/8/8/8/8/8/8/2B1K3 w - - 0 1").opposite_bishops()
    assert Board("4k1b1/8/8/8/8/8/8/2B1K3 w - - 0 1").opposite_bishops()


def test_render_shows_fen_and_key():
    board = Board(KIWIPETE)
    text = board.render()
    assert f"Fen: {board.fen()}" in text
    assert f"Key: {board.key():016X}" in text
    assert str(board) == text