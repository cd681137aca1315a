import pytest

from fishcore.bitboards import (
    ALL_PIECES,
    MOVE_NONE,
    Piece,
    from_sq,
    parse_square,
    to_sq,
    make_move,
)
from fishcore.zobrist import (
    Prng,
    ZobristKeys,
    cuckoo_tables,
    find_cuckoo_move,
    h1,
    h2,
    make_key,
    zobrist_keys,
)


def test_prng_is_deterministic():
    a, b = Prng(1070372), Prng(1070372)
    assert [a.rand() for _ in range(10)] == [b.rand() for _ in range(10)]


def test_prng_outputs_fit_64_bits_and_vary():
    rng = Prng(42)
    values = [rng.rand() for _ in range(200)]
    assert all(0 <= v < 1 << 64 for v in values)
    assert len(set(values)) == 200


def test_prng_different_seeds_differ():
    assert Prng(1).rand() != Prng(2).rand()


def test_prng_rejects_zero_seed():
    with pytest.raises(ValueError):
        Prng(0)


def test_make_key_is_64_bit():
    assert make_key(0) == 1442695040888963407
    assert 0 <= make_key(123456) < 1 << 64


def test_zobrist_keys_are_cached_and_shaped():
    keys = zobrist_keys()
    assert keys is zobrist_keys()
    assert isinstance(keys, ZobristKeys)
    assert len(keys.psq) == 16
    assert all(len(row) == 64 for row in keys.psq)
    assert len(keys.enpassant) == 8
    assert len(keys.castling) == 16


def test_zobrist_keys_are_distinct_for_pieces():
    keys = zobrist_keys()
    drawn = [k for p in ALL_PIECES for k in keys.psq[p]]
    drawn += list(keys.enpassant) + list(keys.castling) + [keys.side, keys.no_pawns]
    assert len(drawn) == 12 * 64 + 8 + 16 + 2
    assert len(set(drawn)) == len(drawn)
    assert all(keys.psq[Piece.NONE][s] == 0 for s in range(64))


def test_zobrist_keys_follow_generator_order():
    rng = Prng(1070372)
    keys = zobrist_keys()
    assert keys.psq[Piece.W_PAWN][0] == rng.rand()
    assert keys.psq[Piece.W_PAWN][1] == rng.rand()


def test_hash_functions_take_thirteen_bits():
    assert h1(0x12345678) == 0x1678
    assert h2(0x12345678) == 0x1234
    assert all(0 <= h1(k) < 8192 and 0 <= h2(k) < 8192 for k in (0, (1 << 64) - 1, 987654321))


def test_cuckoo_holds_3668_moves():
    keys, moves = cuckoo_tables()
    assert len(keys) == len(moves) == 8192
    assert sum(1 for m in moves if m != MOVE_NONE) == 3668


def test_cuckoo_entries_sit_in_one_of_their_slots():
    keys, moves = cuckoo_tables()
    for i, (key, move) in enumerate(zip(keys, moves)):
        if move != MOVE_NONE:
            assert i in (h1(key), h2(key))
            assert from_sq(move) < to_sq(move)


def test_find_knight_move_both_directions():
    keys = zobrist_keys()
    g1, f3 = parse_square("g1"), parse_square("f3")
    forward = keys.psq[Piece.W_KNIGHT][g1] ^ keys.psq[Piece.W_KNIGHT][f3] ^ keys.side
    backward = keys.psq[Piece.W_KNIGHT][f3] ^ keys.psq[Piece.W_KNIGHT][g1] ^ keys.side
    assert find_cuckoo_move(forward) == make_move(g1, f3)
    assert find_cuckoo_move(backward) == make_move(g1, f3)


def test_pawn_moves_are_not_stored():
    keys = zobrist_keys()
    e2, e4 = parse_square("e2"), parse_square("e4")
    key = keys.psq[Piece.W_PAWN][e2] ^ keys.psq[Piece.W_PAWN][e4] ^ keys.side
    assert find_cuckoo_move(key) == MOVE_NONE


def test_unreachable_knight_move_is_absent():
    keys = zobrist_keys()
    a1, h8 = parse_square("a1"), parse_square("h8")
    key = keys.psq[Piece.B_KNIGHT][a1] ^ keys.psq[Piece.B_KNIGHT][h8] ^ keys.side
    assert find_cuckoo_move(key) == MOVE_NONE


def test_empty_key_finds_nothing():
    assert find_cuckoo_move(0) == MOVE_NONE