"""Piece values and piece-square tables."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from functools import lru_cache

from .bitboards import (
    Color,
    PieceType,
    edge_distance,
    file_of,
    flip_rank,
    make_piece,
    rank_of,
    type_of_piece,
)


class Phase(IntEnum):
    MG = 0
    EG = 1


@dataclass(frozen=True, slots=True)
class Score:
    """A pair of middlegame and endgame values."""

    mg: int = 0
    eg: int = 0

    def __add__(self, other: Score) -> Score:
        return Score(self.mg + other.mg, self.eg + other.eg)

    def __sub__(self, other: Score) -> Score:
        return Score(self.mg - other.mg, self.eg - other.eg)

    def __neg__(self) -> Score:
        return Score(-self.mg, -self.eg)


PAWN_VALUE_MG, PAWN_VALUE_EG = 126, 208
KNIGHT_VALUE_MG, KNIGHT_VALUE_EG = 781, 854
BISHOP_VALUE_MG, BISHOP_VALUE_EG = 825, 915
ROOK_VALUE_MG, ROOK_VALUE_EG = 1276, 1380
QUEEN_VALUE_MG, QUEEN_VALUE_EG = 2538, 2682

_PIECE_VALUES = {
    PieceType.PAWN: (PAWN_VALUE_MG, PAWN_VALUE_EG),
    PieceType.KNIGHT: (KNIGHT_VALUE_MG, KNIGHT_VALUE_EG),
    PieceType.BISHOP: (BISHOP_VALUE_MG, BISHOP_VALUE_EG),
    PieceType.ROOK: (ROOK_VALUE_MG, ROOK_VALUE_EG),
    PieceType.QUEEN: (QUEEN_VALUE_MG, QUEEN_VALUE_EG),
}


def piece_value(phase: Phase, piece: int) -> int:
    """Material value of a piece of either colour; kings and empty squares are 0."""
    return _PIECE_VALUES.get(type_of_piece(piece), (0, 0))[phase]


# Files A to D; files E to H are mirrored.
_BONUS = {
    PieceType.KNIGHT: (
        ((-175, -96), (-92, -65), (-74, -49), (-73, -21)),
        ((-77, -67), (-41, -54), (-27, -18), (-15, 8)),
        ((-61, -40), (-17, -27), (6, -8), (12, 29)),
        ((-35, -35), (8, -2), (40, 13), (49, 28)),
        ((-34, -45), (13, -16), (44, 9), (51, 39)),
        ((-9, -51), (22, -44), (58, -16), (53, 17)),
        ((-67, -69), (-27, -50), (4, -51), (37, 12)),
        ((-201, -100), (-83, -88), (-56, -56), (-26, -17)),
    ),
    PieceType.BISHOP: (
        ((-37, -40), (-4, -21), (-6, -26), (-16, -8)),
        ((-11, -26), (6, -9), (13, -12), (3, 1)),
        ((-5, -11), (15, -1), (-4, -1), (12, 7)),
        ((-4, -14), (8, -4), (18, 0), (27, 12)),
        ((-8, -12), (20, -1), (15, -10), (22, 11)),
        ((-11, -21), (4, 4), (1, 3), (8, 4)),
        ((-12, -22), (-10, -14), (4, -1), (0, 1)),
        ((-34, -32), (1, -29), (-10, -26), (-16, -17)),
    ),
    PieceType.ROOK: (
        ((-31, -9), (-20, -13), (-14, -10), (-5, -9)),
        ((-21, -12), (-13, -9), (-8, -1), (6, -2)),
        ((-25, 6), (-11, -8), (-1, -2), (3, -6)),
        ((-13, -6), (-5, 1), (-4, -9), (-6, 7)),
        ((-27, -5), (-15, 8), (-4, 7), (3, -6)),
        ((-22, 6), (-2, 1), (6, -7), (12, 10)),
        ((-2, 4), (12, 5), (16, 20), (18, -5)),
        ((-17, 18), (-19, 0), (-1, 19), (9, 13)),
    ),
    PieceType.QUEEN: (
        ((3, -69), (-5, -57), (-5, -47), (4, -26)),
        ((-3, -54), (5, -31), (8, -22), (12, -4)),
        ((-3, -39), (6, -18), (13, -9), (7, 3)),
        ((4, -23), (5, -3), (9, 13), (8, 24)),
        ((0, -29), (14, -6), (12, 9), (5, 21)),
        ((-4, -38), (10, -18), (6, -11), (8, 1)),
        ((-5, -50), (6, -27), (10, -24), (8, -8)),
        ((-2, -74), (-2, -52), (1, -43), (-2, -34)),
    ),
    PieceType.KING: (
        ((271, 1), (327, 45), (271, 85), (198, 76)),
        ((278, 53), (303, 100), (234, 133), (179, 135)),
        ((195, 88), (258, 130), (169, 169), (120, 175)),
        ((164, 103), (190, 156), (138, 172), (98, 172)),
        ((154, 96), (179, 166), (105, 199), (70, 199)),
        ((123, 92), (145, 172), (81, 184), (31, 191)),
        ((88, 47), (120, 121), (65, 116), (33, 131)),
        ((59, 11), (89, 59), (45, 73), (-1, 78)),
    ),
}

# Pawns are not mirrored; ranks 1 and 8 hold no bonus.
_PAWN_BONUS = (
    ((0, 0),) * 8,
    ((2, -8), (4, -6), (11, 9), (18, 5), (16, 16), (21, 6), (9, -6), (-3, -18)),
    ((-9, -9), (-15, -7), (11, -10), (15, 5), (31, 2), (23, 3), (6, -8), (-20, -5)),
    ((-3, 7), (-20, 1), (8, -8), (19, -2), (39, -14), (17, -13), (2, -11), (-5, -6)),
    ((11, 12), (-4, 6), (-11, 2), (2, -6), (11, -5), (0, -4), (-12, 14), (5, 9)),
    ((3, 27), (-11, 18), (-6, 19), (22, 29), (-8, 30), (-5, 9), (-14, 8), (-11, 14)),
    ((-7, -1), (6, -14), (-2, 13), (-11, 22), (4, 24), (-14, 17), (10, 7), (-9, 7)),
    ((0, 0),) * 8,
)


@lru_cache(maxsize=None)
def build_table() -> tuple[tuple[Score, ...], ...]:
    """Piece-square scores indexed by piece then square, material included.

    Black entries are the rank-flipped, negated white entries.
    """
    table = [[Score()] * 64 for _ in range(16)]
    for pt in (PieceType.PAWN, PieceType.KNIGHT, PieceType.BISHOP,
               PieceType.ROOK, PieceType.QUEEN, PieceType.KING):
        white = make_piece(Color.WHITE, pt)
        black = make_piece(Color.BLACK, pt)
        base = Score(piece_value(Phase.MG, white), piece_value(Phase.EG, white))
        for square in range(64):
            rank, file = rank_of(square), file_of(square)
            if pt == PieceType.PAWN:
                bonus = _PAWN_BONUS[rank][file]
            else:
                bonus = _BONUS[pt][rank][edge_distance(file)]
            score = base + Score(*bonus)
            table[white][square] = score
            table[black][flip_rank(square)] = -score
    return tuple(tuple(row) for row in table)


def psq(piece: int, square: int) -> Score:
    return build_table()[piece][square]