"""Squares, bitboards, attack tables, pieces and move encoding."""

from __future__ import annotations

from collections.abc import Iterator
from enum import IntEnum, IntFlag


class Color(IntEnum):
    WHITE = 0
    BLACK = 1

    def __invert__(self) -> Color:
        return Color(self ^ 1)


class PieceType(IntEnum):
    NONE = 0
    ALL = 0
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6


class Piece(IntEnum):
    NONE = 0
    W_PAWN = 1
    W_KNIGHT = 2
    W_BISHOP = 3
    W_ROOK = 4
    W_QUEEN = 5
    W_KING = 6
    B_PAWN = 9
    B_KNIGHT = 10
    B_BISHOP = 11
    B_ROOK = 12
    B_QUEEN = 13
    B_KING = 14


class MoveType(IntEnum):
    NORMAL = 0
    PROMOTION = 1 << 14
    EN_PASSANT = 2 << 14
    CASTLING = 3 << 14


class CastlingRights(IntFlag):
    NONE = 0
    WHITE_OO = 1
    WHITE_OOO = 2
    BLACK_OO = 4
    BLACK_OOO = 8
    KING_SIDE = WHITE_OO | BLACK_OO
    QUEEN_SIDE = WHITE_OOO | BLACK_OOO
    WHITE = WHITE_OO | WHITE_OOO
    BLACK = BLACK_OO | BLACK_OOO
    ANY = WHITE | BLACK


PIECE_TO_CHAR = " PNBRQK  pnbrqk"
ALL_PIECES = tuple(p for p in Piece if p is not Piece.NONE)

SQUARE_NB = 64
SQ_NONE = 64
MOVE_NONE = 0
MOVE_NULL = 65

FULL_BB = (1 << 64) - 1
FILE_A_BB = 0x0101010101010101
FILE_H_BB = FILE_A_BB << 7
RANK_1_BB = 0xFF
RANK_8_BB = RANK_1_BB << 56
DARK_SQUARES = 0xAA55AA55AA55AA55

_FILE_LETTERS = "abcdefgh"


def color_castling(color: Color) -> CastlingRights:
    """The two castling rights that belong to ``color``."""
    return CastlingRights.WHITE if color == Color.WHITE else CastlingRights.BLACK


def make_square(file: int, rank: int) -> int:
    return (rank << 3) + file


def file_of(square: int) -> int:
    return square & 7


def rank_of(square: int) -> int:
    return square >> 3


def square_name(square: int) -> str:
    """Algebraic name of a square, such as ``e4``."""
    if not 0 <= square < SQUARE_NB:
        raise ValueError(f"not a square: {square}")
    return _FILE_LETTERS[file_of(square)] + str(rank_of(square) + 1)


def parse_square(name: str) -> int:
    """Square index of an algebraic name; raises ValueError if malformed."""
    if len(name) != 2 or name[0] not in _FILE_LETTERS or name[1] not in "12345678":
        raise ValueError(f"not a square name: {name!r}")
    return make_square(_FILE_LETTERS.index(name[0]), int(name[1]) - 1)


def square_bb(square: int) -> int:
    return 1 << square


def file_bb(square: int) -> int:
    return FILE_A_BB << file_of(square)


def rank_bb(square: int) -> int:
    return RANK_1_BB << (8 * rank_of(square))


def popcount(bb: int) -> int:
    return bb.bit_count()


def lsb(bb: int) -> int:
    """Index of the least significant set bit; raises ValueError on an empty board."""
    if not bb:
        raise ValueError("empty bitboard has no least significant square")
    return (bb & -bb).bit_length() - 1


def iter_squares(bb: int) -> Iterator[int]:
    """Yield the squares of a bitboard from the lowest to the highest."""
    while bb:
        yield lsb(bb)
        bb &= bb - 1


def more_than_one(bb: int) -> bool:
    return bool(bb & (bb - 1))


def make_piece(color: Color, piece_type: PieceType) -> Piece:
    return Piece((int(color) << 3) + int(piece_type))


def type_of_piece(piece: int) -> PieceType:
    return PieceType(piece & 7)


def color_of_piece(piece: int) -> Color:
    return Color(piece >> 3)


def pawn_push(color: Color) -> int:
    """Square offset of a one-rank pawn advance for ``color``: +8 for white, -8 for black."""
    side = Color(color)
    return 8 * (1 - 2 * int(side))


def relative_rank(color: Color, rank: int) -> int:
    return rank ^ (int(color) * 7)


def relative_square(color: Color, square: int) -> int:
    return square ^ (int(color) * 56)


def flip_rank(square: int) -> int:
    return square ^ 56


def edge_distance(file: int) -> int:
    return min(file, 7 - file)


def distance(a: int, b: int) -> int:
    return max(abs(file_of(a) - file_of(b)), abs(rank_of(a) - rank_of(b)))


def opposite_colors(a: int, b: int) -> bool:
    return bool((file_of(a) + rank_of(a) + file_of(b) + rank_of(b)) & 1)


def forward_ranks_bb(color: Color, square: int) -> int:
    """Ranks strictly in front of ``square`` from ``color``'s point of view."""
    rank = rank_of(square)
    if color == Color.WHITE:
        return FULL_BB & ~((1 << (8 * (rank + 1))) - 1)
    return (1 << (8 * rank)) - 1


def adjacent_files_bb(square: int) -> int:
    bb = file_bb(square)
    return ((bb << 1) & ~FILE_A_BB & FULL_BB) | ((bb >> 1) & ~FILE_H_BB)


def passed_pawn_span(color: Color, square: int) -> int:
    """Squares that enemy pawns must not occupy for a pawn on ``square`` to be passed."""
    return forward_ranks_bb(color, square) & (adjacent_files_bb(square) | file_bb(square))


def _offset(square: int, df: int, dr: int) -> int | None:
    f, r = file_of(square) + df, rank_of(square) + dr
    return make_square(f, r) if 0 <= f < 8 and 0 <= r < 8 else None


def _step_table(steps: tuple[tuple[int, int], ...]) -> tuple[int, ...]:
    def targets(square: int) -> int:
        bb = 0
        for df, dr in steps:
            target = _offset(square, df, dr)
            if target is not None:
                bb |= 1 << target
        return bb

    return tuple(targets(s) for s in range(SQUARE_NB))


_KNIGHT_STEPS = ((1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1), (-2, 1), (-1, 2))
_KING_STEPS = ((1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1))
_ROOK_DIRS = ((1, 0), (-1, 0), (0, 1), (0, -1))
_BISHOP_DIRS = ((1, 1), (1, -1), (-1, 1), (-1, -1))

_KNIGHT_ATTACKS = _step_table(_KNIGHT_STEPS)
_KING_ATTACKS = _step_table(_KING_STEPS)
_PAWN_ATTACKS = (
    _step_table(((-1, 1), (1, 1))),
    _step_table(((-1, -1), (1, -1))),
)


def _ray(square: int, df: int, dr: int) -> tuple[int, ...]:
    squares = []
    current = _offset(square, df, dr)
    while current is not None:
        squares.append(current)
        current = _offset(current, df, dr)
    return tuple(squares)


_RAYS = {
    direction: tuple(_ray(s, *direction) for s in range(SQUARE_NB))
    for direction in _ROOK_DIRS + _BISHOP_DIRS
}


def _slide(square: int, directions: tuple[tuple[int, int], ...], occupied: int) -> int:
    bb = 0
    for direction in directions:
        for target in _RAYS[direction][square]:
            bb |= 1 << target
            if occupied >> target & 1:
                break
    return bb


def pawn_attacks_bb(color: Color, square: int) -> int:
    return _PAWN_ATTACKS[color][square]


def attacks_bb(piece_type: PieceType, square: int, occupied: int = 0) -> int:
    """Squares attacked by a non-pawn piece on ``square`` given the occupancy."""
    pt = PieceType(piece_type)
    if pt == PieceType.KNIGHT:
        return _KNIGHT_ATTACKS[square]
    if pt == PieceType.KING:
        return _KING_ATTACKS[square]
    if pt == PieceType.BISHOP:
        return _slide(square, _BISHOP_DIRS, occupied)
    if pt == PieceType.ROOK:
        return _slide(square, _ROOK_DIRS, occupied)
    if pt == PieceType.QUEEN:
        return _slide(square, _ROOK_DIRS + _BISHOP_DIRS, occupied)
    raise ValueError(f"no attack table for piece type {pt.name}")


def _build_lines() -> tuple[list[list[int]], list[list[int]]]:
    lines = [[0] * SQUARE_NB for _ in range(SQUARE_NB)]
    betweens = [[1 << b for b in range(SQUARE_NB)] for _ in range(SQUARE_NB)]
    for a in range(SQUARE_NB):
        for pt in (PieceType.BISHOP, PieceType.ROOK):
            reach = attacks_bb(pt, a)
            for b in iter_squares(reach):
                lines[a][b] = (reach & attacks_bb(pt, b)) | (1 << a) | (1 << b)
                betweens[a][b] = (
                    attacks_bb(pt, a, 1 << b) & attacks_bb(pt, b, 1 << a)
                ) | (1 << b)
    return lines, betweens


_LINE_BB, _BETWEEN_BB = _build_lines()


def between_bb(a: int, b: int) -> int:
    """Squares strictly between ``a`` and ``b`` plus ``b`` itself; just ``b`` if not aligned."""
    return _BETWEEN_BB[a][b]


def line_bb(a: int, b: int) -> int:
    """The whole line through ``a`` and ``b``, or 0 if they are not aligned."""
    return _LINE_BB[a][b]


def aligned(a: int, b: int, c: int) -> bool:
    return bool(line_bb(a, b) & (1 << c))


def make_move(
    from_square: int,
    to_square: int,
    move_type: MoveType = MoveType.NORMAL,
    promotion: PieceType = PieceType.KNIGHT,
) -> int:
    """Pack a move into 16 bits: destination, origin, promotion piece and type."""
    if not PieceType.KNIGHT <= promotion <= PieceType.QUEEN:
        raise ValueError(f"cannot promote to {PieceType(promotion).name}")
    return int(move_type) | ((int(promotion) - PieceType.KNIGHT) << 12) | (from_square << 6) | to_square


def from_sq(move: int) -> int:
    return (move >> 6) & 0x3F


def to_sq(move: int) -> int:
    return move & 0x3F


def move_type(move: int) -> MoveType:
    return MoveType(move & (3 << 14))


def promotion_type(move: int) -> PieceType:
    return PieceType(((move >> 12) & 3) + PieceType.KNIGHT)


def move_is_ok(move: int) -> bool:
    return from_sq(move) != to_sq(move)


def move_to_uci(move: int, chess960: bool = False) -> str:
    """Long algebraic text of a move; castling is king-to-destination unless ``chess960``."""
    if move == MOVE_NONE:
        return "(none)"
    if move == MOVE_NULL:
        return "0000"
    origin, target = from_sq(move), to_sq(move)
    kind = move_type(move)
    if kind == MoveType.CASTLING and not chess960:
        target = make_square(6 if target > origin else 2, rank_of(origin))
    text = square_name(origin) + square_name(target)
    if kind == MoveType.PROMOTION:
        text += " pnbrqk"[promotion_type(move)]
    return text