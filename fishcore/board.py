"""Board representation: piece placement, FEN input/output, attacks and move properties."""

from __future__ import annotations

from dataclasses import dataclass, field

from .bitboards import (
    ALL_PIECES,
    DARK_SQUARES,
    FULL_BB,
    MOVE_NONE,
    PIECE_TO_CHAR,
    SQ_NONE,
    SQUARE_NB,
    CastlingRights,
    Color,
    MoveType,
    Piece,
    PieceType,
    aligned,
    attacks_bb,
    between_bb,
    color_castling,
    color_of_piece,
    file_bb,
    file_of,
    from_sq,
    iter_squares,
    lsb,
    make_piece,
    make_square,
    more_than_one,
    move_type,
    opposite_colors,
    passed_pawn_span,
    pawn_attacks_bb,
    pawn_push,
    popcount,
    promotion_type,
    rank_of,
    relative_rank,
    relative_square,
    square_bb,
    square_name,
    to_sq,
    type_of_piece,
)
from .psqt import Phase, Score, piece_value, psq
from .zobrist import make_key, zobrist_keys

START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_SQ_A1, _SQ_C1, _SQ_D1, _SQ_F1, _SQ_G1, _SQ_H1 = 0, 2, 3, 5, 6, 7
_SINGLE_RIGHTS = (
    CastlingRights.WHITE_OO,
    CastlingRights.WHITE_OOO,
    CastlingRights.BLACK_OO,
    CastlingRights.BLACK_OOO,
)
_RANK_SEPARATOR = " +---+---+---+---+---+---+---+---+"


@dataclass
class StateInfo:
    """Data needed to restore a board to its previous state when a move is retracted."""

    pawn_key: int = 0
    material_key: int = 0
    non_pawn_material: list[int] = field(default_factory=lambda: [0, 0])
    castling_rights: int = 0
    rule50: int = 0
    plies_from_null: int = 0
    ep_square: int = SQ_NONE
    key: int = 0
    checkers_bb: int = 0
    previous: StateInfo | None = None
    blockers_for_king: list[int] = field(default_factory=lambda: [0, 0])
    pinners: list[int] = field(default_factory=lambda: [0, 0])
    check_squares: list[int] = field(default_factory=lambda: [0] * 7)
    captured_piece: Piece = Piece.NONE
    repetition: int = 0

    def copy_for_move(self) -> StateInfo:
        """A new state carrying over the fields kept across a move, linked back to this one."""
        return StateInfo(
            pawn_key=self.pawn_key,
            material_key=self.material_key,
            non_pawn_material=list(self.non_pawn_material),
            castling_rights=self.castling_rights,
            rule50=self.rule50,
            plies_from_null=self.plies_from_null,
            ep_square=self.ep_square,
            previous=self,
        )


def _single_right(rights: int) -> CastlingRights:
    cr = CastlingRights(rights)
    if cr not in _SINGLE_RIGHTS:
        raise ValueError(f"expected a single castling right, got {cr!r}")
    return cr


class Board:
    """Piece placement, side to move, castling data and hash keys of a chess position."""

    def __init__(self, fen: str = START_FEN, chess960: bool = False) -> None:
        self._setup(fen, chess960)

    @classmethod
    def from_endgame_code(cls, code: str, color: Color) -> Board:
        """Build a board from an endgame code such as ``KBPvKN``; ``color`` is the strong side."""
        if not code or code[0] != "K":
            raise ValueError(f"endgame code must start with K: {code!r}")
        second_king = code.find("K", 1)
        if second_king < 0:
            raise ValueError(f"endgame code needs two kings: {code!r}")
        v = code.find("v")
        strong_end = min(v if v >= 0 else len(code), second_king)
        sides = [code[second_king:], code[:strong_end]]
        if not all(0 < len(side) < 8 for side in sides):
            raise ValueError(f"bad endgame code: {code!r}")
        sides[color] = sides[color].lower()
        fen = (
            f"8/{sides[0]}{8 - len(sides[0])}/8/8/8/8/"
            f"{sides[1]}{8 - len(sides[1])}/8 w - - 0 10"
        )
        return cls(fen, False)

    # ------------------------------------------------------------------ setup

    def _setup(self, fen: str, chess960: bool) -> None:
        self._board: list[Piece] = [Piece.NONE] * SQUARE_NB
        self._by_type = [0] * 7
        self._by_color = [0, 0]
        self._piece_count = [0] * 16
        self._castling_rights_mask = [0] * SQUARE_NB
        self._castling_rook_square = [SQ_NONE] * 16
        self._castling_path = [0] * 16
        self.psq_score = Score()
        self.state = StateInfo()
        self.chess960 = chess960

        fields = fen.split()
        placement = fields[0] if fields else ""
        sq = make_square(0, 7)
        for ch in placement:
            if ch in "0123456789":
                sq += int(ch)
            elif ch == "/":
                sq -= 16
            else:
                idx = PIECE_TO_CHAR.find(ch)
                if idx <= 0 or ch == " ":
                    continue
                if not 0 <= sq < SQUARE_NB:
                    raise ValueError(f"piece placement runs off the board: {placement!r}")
                self.put_piece(Piece(idx), sq)
                sq += 1

        for color in Color:
            if popcount(self.pieces(PieceType.KING, color=color)) != 1:
                raise ValueError(f"{color.name.lower()} must have exactly one king")

        self.side_to_move = Color.WHITE if len(fields) > 1 and fields[1] == "w" else Color.BLACK

        for ch in fields[2] if len(fields) > 2 else "":
            c = Color.BLACK if ch.islower() else Color.WHITE
            rook = make_piece(c, PieceType.ROOK)
            up = ch.upper()
            if up == "K":
                candidates = range(relative_square(c, _SQ_H1), relative_square(c, _SQ_A1) - 1, -1)
            elif up == "Q":
                candidates = range(relative_square(c, _SQ_A1), relative_square(c, _SQ_H1) + 1)
            elif "A" <= up <= "H":
                candidates = range(0)
                rsq = make_square(ord(up) - ord("A"), relative_rank(c, 0))
                self._set_castling_right(c, rsq)
                continue
            else:
                continue
            rsq = next((s for s in candidates if self._board[s] == rook), None)
            if rsq is None:
                raise ValueError(f"no rook for castling right {ch!r}")
            self._set_castling_right(c, rsq)

        st = self.state
        ep_field = fields[3] if len(fields) > 3 else "-"
        enpassant = False
        us = self.side_to_move
        if (
            len(ep_field) >= 2
            and "a" <= ep_field[0] <= "h"
            and ep_field[1] == ("6" if us == Color.WHITE else "3")
        ):
            ep = make_square(ord(ep_field[0]) - ord("a"), int(ep_field[1]) - 1)
            st.ep_square = ep
            enpassant = bool(
                pawn_attacks_bb(~us, ep) & self.pieces(PieceType.PAWN, color=us)
                and self.pieces(PieceType.PAWN, color=~us) & square_bb(ep + pawn_push(~us))
                and not self.pieces() & (square_bb(ep) | square_bb(ep + pawn_push(us)))
            )
        if not enpassant:
            st.ep_square = SQ_NONE

        fullmove = 0
        try:
            st.rule50 = int(fields[4])
            fullmove = int(fields[5])
        except (IndexError, ValueError):
            pass
        self.game_ply = max(2 * (fullmove - 1), 0) + (us == Color.BLACK)

        self._set_state()

    def _set_castling_right(self, c: Color, rfrom: int) -> None:
        kfrom = self.king_square(c)
        side = CastlingRights.KING_SIDE if kfrom < rfrom else CastlingRights.QUEEN_SIDE
        cr = color_castling(c) & side
        self.state.castling_rights |= int(cr)
        self._castling_rights_mask[kfrom] |= int(cr)
        self._castling_rights_mask[rfrom] |= int(cr)
        self._castling_rook_square[cr] = rfrom
        king_side = bool(cr & CastlingRights.KING_SIDE)
        kto = relative_square(c, _SQ_G1 if king_side else _SQ_C1)
        rto = relative_square(c, _SQ_F1 if king_side else _SQ_D1)
        self._castling_path[cr] = (between_bb(rfrom, rto) | between_bb(kfrom, kto)) & ~(
            square_bb(kfrom) | square_bb(rfrom)
        )

    def _set_check_info(self) -> None:
        st = self.state
        white, black = Color.WHITE, Color.BLACK
        st.blockers_for_king[white], st.pinners[black] = self.slider_blockers(
            self.pieces(color=black), self.king_square(white)
        )
        st.blockers_for_king[black], st.pinners[white] = self.slider_blockers(
            self.pieces(color=white), self.king_square(black)
        )
        ksq = self.king_square(~self.side_to_move)
        occupied = self.pieces()
        bishop = attacks_bb(PieceType.BISHOP, ksq, occupied)
        rook = attacks_bb(PieceType.ROOK, ksq, occupied)
        st.check_squares = [
            0,
            pawn_attacks_bb(~self.side_to_move, ksq),
            attacks_bb(PieceType.KNIGHT, ksq),
            bishop,
            rook,
            bishop | rook,
            0,
        ]

    def _set_state(self) -> None:
        zob = zobrist_keys()
        st = self.state
        st.key = st.material_key = 0
        st.pawn_key = zob.no_pawns
        st.non_pawn_material = [0, 0]
        st.checkers_bb = self.attackers_to(self.king_square(self.side_to_move)) & self.pieces(
            color=~self.side_to_move
        )
        self._set_check_info()

        for s in iter_squares(self.pieces()):
            pc = self._board[s]
            st.key ^= zob.psq[pc][s]
            pt = type_of_piece(pc)
            if pt == PieceType.PAWN:
                st.pawn_key ^= zob.psq[pc][s]
            elif pt != PieceType.KING:
                st.non_pawn_material[color_of_piece(pc)] += piece_value(Phase.MG, pc)

        if st.ep_square != SQ_NONE:
            st.key ^= zob.enpassant[file_of(st.ep_square)]
        if self.side_to_move == Color.BLACK:
            st.key ^= zob.side
        st.key ^= zob.castling[st.castling_rights]

        for pc in ALL_PIECES:
            for cnt in range(self._piece_count[pc]):
                st.material_key ^= zob.psq[pc][cnt]

    # --------------------------------------------------------------- output

    def fen(self) -> str:
        """FEN text of the position; Shredder-FEN castling letters in Chess960."""
        rows = []
        for rank in range(7, -1, -1):
            row, empty = "", 0
            for file in range(8):
                pc = self._board[make_square(file, rank)]
                if pc == Piece.NONE:
                    empty += 1
                    continue
                if empty:
                    row += str(empty)
                    empty = 0
                row += PIECE_TO_CHAR[pc]
            if empty:
                row += str(empty)
            rows.append(row)

        castling = ""
        for right, letter in (
            (CastlingRights.WHITE_OO, "K"),
            (CastlingRights.WHITE_OOO, "Q"),
            (CastlingRights.BLACK_OO, "k"),
            (CastlingRights.BLACK_OOO, "q"),
        ):
            if not self.can_castle(right):
                continue
            if self.chess960:
                base = "A" if right & CastlingRights.WHITE else "a"
                castling += chr(ord(base) + file_of(self.castling_rook_square(right)))
            else:
                castling += letter

        ep = self.ep_square
        black = self.side_to_move == Color.BLACK
        return " ".join(
            (
                "/".join(rows),
                "b" if black else "w",
                castling or "-",
                "-" if ep == SQ_NONE else square_name(ep),
                str(self.state.rule50),
                str(1 + (self.game_ply - black) // 2),
            )
        )

    def render(self) -> str:
        """ASCII diagram of the board followed by FEN, key and checking squares."""
        lines = ["", _RANK_SEPARATOR]
        for rank in range(7, -1, -1):
            cells = "".join(
                f" | {PIECE_TO_CHAR[self._board[make_square(file, rank)]]}" for file in range(8)
            )
            lines.append(f"{cells} | {rank + 1}")
            lines.append(_RANK_SEPARATOR)
        lines.append("   a   b   c   d   e   f   g   h")
        lines.append("")
        lines.append(f"Fen: {self.fen()}")
        lines.append(f"Key: {self.key():016X}")
        lines.append("Checkers: " + "".join(f"{square_name(s)} " for s in iter_squares(self.checkers())))
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()

    # ------------------------------------------------------- representation

    def piece_on(self, square: int) -> Piece:
        return self._board[square]

    def empty(self, square: int) -> bool:
        return self._board[square] == Piece.NONE

    def pieces(self, *args: PieceType, color: Color | None = None) -> int:
        """Bitboard of the given piece types (all pieces if none), optionally of one colour."""
        if args:
            bb = 0
            for pt in args:
                bb |= self._by_type[pt]
        else:
            bb = self._by_type[PieceType.ALL]
        if color is not None:
            bb &= self._by_color[color]
        return bb

    def count(self, piece_type: PieceType, color: Color | None = None) -> int:
        colors = Color if color is None else (color,)
        return sum(self._piece_count[(int(c) << 3) + int(piece_type)] for c in colors)

    def king_square(self, color: Color) -> int:
        kings = self.pieces(PieceType.KING, color=color)
        if popcount(kings) != 1:
            raise ValueError(f"{Color(color).name.lower()} does not have exactly one king")
        return lsb(kings)

    @property
    def ep_square(self) -> int:
        return self.state.ep_square

    @property
    def rule50_count(self) -> int:
        return self.state.rule50

    @property
    def captured_piece(self) -> Piece:
        return self.state.captured_piece

    @property
    def material_key(self) -> int:
        return self.state.material_key

    @property
    def pawn_key(self) -> int:
        return self.state.pawn_key

    @property
    def psq_eg_stm(self) -> int:
        sign = 1 if self.side_to_move == Color.WHITE else -1
        return sign * self.psq_score.eg

    def put_piece(self, piece: Piece, square: int) -> None:
        piece = Piece(piece)
        if piece == Piece.NONE:
            raise ValueError("cannot place an empty piece")
        bb = square_bb(square)
        color = color_of_piece(piece)
        self._board[square] = piece
        self._by_type[PieceType.ALL] |= bb
        self._by_type[type_of_piece(piece)] |= bb
        self._by_color[color] |= bb
        self._piece_count[piece] += 1
        self._piece_count[int(color) << 3] += 1
        self.psq_score = self.psq_score + psq(piece, square)

    def remove_piece(self, square: int) -> None:
        piece = self._board[square]
        if piece == Piece.NONE:
            raise ValueError(f"no piece on {square_name(square)}")
        bb = square_bb(square)
        color = color_of_piece(piece)
        self._by_type[PieceType.ALL] ^= bb
        self._by_type[type_of_piece(piece)] ^= bb
        self._by_color[color] ^= bb
        self._board[square] = Piece.NONE
        self._piece_count[piece] -= 1
        self._piece_count[int(color) << 3] -= 1
        self.psq_score = self.psq_score - psq(piece, square)

    def _move_piece(self, origin: int, target: int) -> None:
        piece = self._board[origin]
        from_to = square_bb(origin) | square_bb(target)
        self._by_type[PieceType.ALL] ^= from_to
        self._by_type[type_of_piece(piece)] ^= from_to
        self._by_color[color_of_piece(piece)] ^= from_to
        self._board[origin] = Piece.NONE
        self._board[target] = piece
        self.psq_score = self.psq_score + psq(piece, target) - psq(piece, origin)

    # ------------------------------------------------------------- castling

    def castling_rights(self, color: Color) -> CastlingRights:
        return color_castling(color) & CastlingRights(self.state.castling_rights)

    def can_castle(self, rights: int) -> bool:
        return bool(self.state.castling_rights & int(rights))

    def castling_impeded(self, rights: int) -> bool:
        return bool(self.pieces() & self._castling_path[_single_right(rights)])

    def castling_rook_square(self, rights: int) -> int:
        return self._castling_rook_square[_single_right(rights)]

    # ------------------------------------------------------------- checking

    def checkers(self) -> int:
        return self.state.checkers_bb

    def blockers_for_king(self, color: Color) -> int:
        return self.state.blockers_for_king[color]

    def pinners(self, color: Color) -> int:
        return self.state.pinners[color]

    def check_squares(self, piece_type: PieceType) -> int:
        return self.state.check_squares[piece_type]

    # -------------------------------------------------------------- attacks

    def attackers_to(self, square: int, occupied: int | None = None) -> int:
        """All pieces of both colours attacking ``square``; sliders see through ``occupied``."""
        if occupied is None:
            occupied = self.pieces()
        return (
            (pawn_attacks_bb(Color.BLACK, square) & self.pieces(PieceType.PAWN, color=Color.WHITE))
            | (pawn_attacks_bb(Color.WHITE, square) & self.pieces(PieceType.PAWN, color=Color.BLACK))
            | (attacks_bb(PieceType.KNIGHT, square) & self.pieces(PieceType.KNIGHT))
            | (attacks_bb(PieceType.ROOK, square, occupied) & self.pieces(PieceType.ROOK, PieceType.QUEEN))
            | (attacks_bb(PieceType.BISHOP, square, occupied) & self.pieces(PieceType.BISHOP, PieceType.QUEEN))
            | (attacks_bb(PieceType.KING, square) & self.pieces(PieceType.KING))
        )

    def slider_blockers(self, sliders: int, square: int) -> tuple[int, int]:
        """Pieces blocking attacks of ``sliders`` on ``square``, and the sliders pinning them.

        Returns ``(blockers, pinners)``; pinners are those whose lone blocker has
        the colour of the piece on ``square``.
        """
        blockers = pinners = 0
        snipers = (
            (attacks_bb(PieceType.ROOK, square) & self.pieces(PieceType.QUEEN, PieceType.ROOK))
            | (attacks_bb(PieceType.BISHOP, square) & self.pieces(PieceType.QUEEN, PieceType.BISHOP))
        ) & sliders
        occupancy = self.pieces() ^ snipers
        own = self.pieces(color=color_of_piece(self._board[square]))
        for sniper in iter_squares(snipers):
            b = between_bb(square, sniper) & occupancy
            if b and not more_than_one(b):
                blockers |= b
                if b & own:
                    pinners |= square_bb(sniper)
        return blockers, pinners

    def attacks_by(self, piece_type: PieceType, color: Color) -> int:
        """Every square attacked by ``color``'s pieces of the given type."""
        threats = 0
        occupied = self.pieces()
        for s in iter_squares(self.pieces(piece_type, color=color)):
            if piece_type == PieceType.PAWN:
                threats |= pawn_attacks_bb(color, s)
            else:
                threats |= attacks_bb(piece_type, s, occupied)
        return threats

    # ---------------------------------------------------- properties of moves

    def moved_piece(self, move: int) -> Piece:
        return self._board[from_sq(move)]

    def capture(self, move: int) -> bool:
        kind = move_type(move)
        return (not self.empty(to_sq(move)) and kind != MoveType.CASTLING) or kind == MoveType.EN_PASSANT

    def capture_stage(self, move: int) -> bool:
        """Captures plus queen promotions: the moves of the capture generation stage."""
        return self.capture(move) or promotion_type(move) == PieceType.QUEEN

    def legal(self, move: int) -> bool:
        """Whether a pseudo-legal move leaves the mover's king safe."""
        us = self.side_to_move
        them = ~us
        origin, target = from_sq(move), to_sq(move)
        kind = move_type(move)
        ksq = self.king_square(us)

        if kind == MoveType.EN_PASSANT:
            capsq = target - pawn_push(us)
            occupied = (self.pieces() ^ square_bb(origin) ^ square_bb(capsq)) | square_bb(target)
            return not (
                attacks_bb(PieceType.ROOK, ksq, occupied)
                & self.pieces(PieceType.QUEEN, PieceType.ROOK, color=them)
            ) and not (
                attacks_bb(PieceType.BISHOP, ksq, occupied)
                & self.pieces(PieceType.QUEEN, PieceType.BISHOP, color=them)
            )

        if kind == MoveType.CASTLING:
            king_to = relative_square(us, _SQ_G1 if target > origin else _SQ_C1)
            step = -1 if king_to > origin else 1
            enemies = self.pieces(color=them)
            s = king_to
            while s != origin:
                if self.attackers_to(s) & enemies:
                    return False
                s += step
            return not self.chess960 or not (self.blockers_for_king(us) & square_bb(target))

        if type_of_piece(self._board[origin]) == PieceType.KING:
            return not (
                self.attackers_to(target, self.pieces() ^ square_bb(origin)) & self.pieces(color=them)
            )

        return not (self.blockers_for_king(us) & square_bb(origin)) or aligned(origin, target, ksq)

    def gives_check(self, move: int) -> bool:
        """Whether a pseudo-legal move checks the opponent's king."""
        us = self.side_to_move
        origin, target = from_sq(move), to_sq(move)
        ksq = self.king_square(~us)

        if self.check_squares(type_of_piece(self._board[origin])) & square_bb(target):
            return True
        if self.blockers_for_king(~us) & square_bb(origin) and not aligned(origin, target, ksq):
            return True

        kind = move_type(move)
        if kind == MoveType.NORMAL:
            return False
        if kind == MoveType.PROMOTION:
            occupied = self.pieces() ^ square_bb(origin)
            return bool(attacks_bb(promotion_type(move), target, occupied) & square_bb(ksq))
        if kind == MoveType.EN_PASSANT:
            capsq = make_square(file_of(target), rank_of(origin))
            b = (self.pieces() ^ square_bb(origin) ^ square_bb(capsq)) | square_bb(target)
            return bool(
                (attacks_bb(PieceType.ROOK, ksq, b) & self.pieces(PieceType.QUEEN, PieceType.ROOK, color=us))
                | (attacks_bb(PieceType.BISHOP, ksq, b) & self.pieces(PieceType.QUEEN, PieceType.BISHOP, color=us))
            )
        rto = relative_square(us, _SQ_F1 if target > origin else _SQ_D1)
        kbb = square_bb(ksq)
        return bool(attacks_bb(PieceType.ROOK, rto) & kbb) and bool(
            attacks_bb(PieceType.ROOK, rto, self.pieces() ^ square_bb(origin) ^ square_bb(target)) & kbb
        )

    # ------------------------------------------------------------ hash keys

    def _adjust_key50(self, key: int, after_move: bool) -> int:
        limit = 14 - after_move
        rule50 = self.state.rule50
        return key if rule50 < limit else key ^ make_key((rule50 - limit) // 8)

    def key(self) -> int:
        """Position hash, perturbed once the fifty-move counter grows large."""
        return self._adjust_key50(self.state.key, False)

    def key_after(self, move: int) -> int:
        """Hash after a plain move; castling, en passant and promotions are not recognised."""
        zob = zobrist_keys()
        origin, target = from_sq(move), to_sq(move)
        pc = self._board[origin]
        captured = self._board[target]
        k = self.state.key ^ zob.side
        if captured != Piece.NONE:
            k ^= zob.psq[captured][target]
        k ^= zob.psq[pc][target] ^ zob.psq[pc][origin]
        if captured != Piece.NONE or type_of_piece(pc) == PieceType.PAWN:
            return k
        return self._adjust_key50(k, True)

    # -------------------------------------------------------- piece specific

    def pawn_passed(self, color: Color, square: int) -> bool:
        return not (self.pieces(PieceType.PAWN, color=~color) & passed_pawn_span(color, square))

    def is_on_semiopen_file(self, color: Color, square: int) -> bool:
        return not (self.pieces(PieceType.PAWN, color=color) & file_bb(square))

    def opposite_bishops(self) -> bool:
        return (
            self.count(PieceType.BISHOP, Color.WHITE) == 1
            and self.count(PieceType.BISHOP, Color.BLACK) == 1
            and opposite_colors(
                lsb(self.pieces(PieceType.BISHOP, color=Color.WHITE)),
                lsb(self.pieces(PieceType.BISHOP, color=Color.BLACK)),
            )
        )

    def pawns_on_same_color_squares(self, color: Color, square: int) -> int:
        squares = DARK_SQUARES if DARK_SQUARES & square_bb(square) else FULL_BB & ~DARK_SQUARES
        return popcount(self.pieces(PieceType.PAWN, color=color) & squares)

    def non_pawn_material(self, color: Color | None = None) -> int:
        if color is None:
            return sum(self.state.non_pawn_material)
        return self.state.non_pawn_material[color]


__all__ = ["Board", "StateInfo", "START_FEN", "MOVE_NONE"]