"""Zobrist hashing keys and cuckoo tables for upcoming-repetition detection."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from .bitboards import (
    ALL_PIECES,
    MOVE_NONE,
    SQUARE_NB,
    PieceType,
    attacks_bb,
    make_move,
    type_of_piece,
)

_MASK64 = (1 << 64) - 1
_ZOBRIST_SEED = 1070372
CUCKOO_SIZE = 8192
CASTLING_RIGHT_NB = 16
FILE_NB = 8


class Prng:
    """Xorshift64* pseudo-random generator producing 64-bit values."""

    def __init__(self, seed: int) -> None:
        seed &= _MASK64
        if not seed:
            raise ValueError("seed must be non-zero")
        self._state = seed

    def rand(self) -> int:
        s = self._state
        s ^= s >> 12
        s ^= (s << 25) & _MASK64
        s ^= s >> 27
        self._state = s
        return (s * 2685821657736338717) & _MASK64


def make_key(seed: int) -> int:
    """Derive a 64-bit key from a small integer seed."""
    return (seed * 6364136223846793005 + 1442695040888963407) & _MASK64


@dataclass(frozen=True)
class ZobristKeys:
    """Random keys hashed into a position's signature."""

    psq: tuple[tuple[int, ...], ...]
    enpassant: tuple[int, ...]
    castling: tuple[int, ...]
    side: int
    no_pawns: int


@lru_cache(maxsize=None)
def zobrist_keys() -> ZobristKeys:
    """The fixed set of Zobrist keys, drawn from a seeded generator."""
    rng = Prng(_ZOBRIST_SEED)
    psq = [[0] * SQUARE_NB for _ in range(16)]
    for piece in ALL_PIECES:
        psq[piece] = [rng.rand() for _ in range(SQUARE_NB)]
    enpassant = tuple(rng.rand() for _ in range(FILE_NB))
    castling = tuple(rng.rand() for _ in range(CASTLING_RIGHT_NB))
    side = rng.rand()
    no_pawns = rng.rand()
    return ZobristKeys(
        psq=tuple(tuple(row) for row in psq),
        enpassant=enpassant,
        castling=castling,
        side=side,
        no_pawns=no_pawns,
    )


def h1(key: int) -> int:
    """First cuckoo hash index."""
    return key & 0x1FFF


def h2(key: int) -> int:
    """Second cuckoo hash index."""
    return (key >> 16) & 0x1FFF


@lru_cache(maxsize=None)
def cuckoo_tables() -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Keys of all reversible non-pawn moves and the moves themselves.

    Each move is stored once, from its lower square to its higher one.
    """
    keys = [0] * CUCKOO_SIZE
    moves = [MOVE_NONE] * CUCKOO_SIZE
    zob = zobrist_keys()
    for piece in ALL_PIECES:
        pt = type_of_piece(piece)
        if pt == PieceType.PAWN:
            continue
        for s1 in range(SQUARE_NB):
            reach = attacks_bb(pt, s1, 0)
            for s2 in range(s1 + 1, SQUARE_NB):
                if not reach >> s2 & 1:
                    continue
                move = make_move(s1, s2)
                key = zob.psq[piece][s1] ^ zob.psq[piece][s2] ^ zob.side
                i = h1(key)
                while True:
                    keys[i], key = key, keys[i]
                    moves[i], move = move, moves[i]
                    if move == MOVE_NONE:
                        break
                    i = h2(key) if i == h1(key) else h1(key)
    return tuple(keys), tuple(moves)


def find_cuckoo_move(key: int) -> int:
    """The reversible move whose key difference is ``key``, or MOVE_NONE."""
    keys, moves = cuckoo_tables()
    for index in (h1(key), h2(key)):
        if keys[index] == key and moves[index] != MOVE_NONE:
            return moves[index]
    return MOVE_NONE