"""Playable position: making and unmaking moves, exchange evaluation and draw detection."""

from __future__ import annotations

import dataclasses

from .bitboards import (
    ALL_PIECES,
    RANK_1_BB,
    RANK_8_BB,
    SQ_NONE,
    CastlingRights,
    Color,
    MoveType,
    Piece,
    PieceType,
    attacks_bb,
    between_bb,
    color_of_piece,
    file_of,
    from_sq,
    iter_squares,
    make_move,
    make_piece,
    move_type,
    pawn_attacks_bb,
    pawn_push,
    popcount,
    promotion_type,
    rank_of,
    relative_rank,
    relative_square,
    square_bb,
    to_sq,
    type_of_piece,
)
from .board import START_FEN, Board, StateInfo
from .psqt import (
    BISHOP_VALUE_MG,
    KNIGHT_VALUE_MG,
    PAWN_VALUE_MG,
    QUEEN_VALUE_MG,
    ROOK_VALUE_MG,
    Phase,
    piece_value,
)
from .zobrist import find_cuckoo_move, zobrist_keys

_SQ_C1, _SQ_D1, _SQ_F1, _SQ_G1 = 2, 3, 5, 6
_SINGLE_RIGHTS = (
    CastlingRights.WHITE_OO,
    CastlingRights.WHITE_OOO,
    CastlingRights.BLACK_OO,
    CastlingRights.BLACK_OOO,
)


def _lowest_bb(bb: int) -> int:
    return bb & -bb


class Position(Board):
    """A board that can make and retract moves while keeping its history of states."""

    def __init__(self, fen: str = START_FEN, chess960: bool = False) -> None:
        super().__init__(fen, chess960)
        self.nodes = 0

    # ---------------------------------------------------------- making moves

    def do_move(self, move: int, gives_check: bool | None = None) -> None:
        """Make a legal move; ``gives_check`` is computed when not supplied."""
        origin, target = from_sq(move), to_sq(move)
        us = self.side_to_move
        them = ~us
        pc = self._board[origin]
        if pc == Piece.NONE or color_of_piece(pc) != us:
            raise ValueError("the origin square does not hold a piece of the side to move")
        if gives_check is None:
            gives_check = self.gives_check(move)

        zob = zobrist_keys()
        self.nodes += 1
        k = self.state.key ^ zob.side
        st = self.state.copy_for_move()
        self.state = st

        self.game_ply += 1
        st.rule50 += 1
        st.plies_from_null += 1

        kind = move_type(move)
        captured = make_piece(them, PieceType.PAWN) if kind == MoveType.EN_PASSANT else self._board[target]

        if kind == MoveType.CASTLING:
            target, rfrom, rto = self._do_castling(us, origin, target, True)
            k ^= zob.psq[captured][rfrom] ^ zob.psq[captured][rto]
            captured = Piece.NONE

        if captured != Piece.NONE:
            capsq = target
            if type_of_piece(captured) == PieceType.PAWN:
                if kind == MoveType.EN_PASSANT:
                    capsq -= pawn_push(us)
                st.pawn_key ^= zob.psq[captured][capsq]
            else:
                st.non_pawn_material[them] -= piece_value(Phase.MG, captured)
            self.remove_piece(capsq)
            k ^= zob.psq[captured][capsq]
            st.material_key ^= zob.psq[captured][self._piece_count[captured]]
            st.rule50 = 0

        k ^= zob.psq[pc][origin] ^ zob.psq[pc][target]

        if st.ep_square != SQ_NONE:
            k ^= zob.enpassant[file_of(st.ep_square)]
            st.ep_square = SQ_NONE

        mask = self._castling_rights_mask[origin] | self._castling_rights_mask[target]
        if st.castling_rights and mask:
            k ^= zob.castling[st.castling_rights]
            st.castling_rights &= ~mask
            k ^= zob.castling[st.castling_rights]

        if kind != MoveType.CASTLING:
            self._move_piece(origin, target)

        if type_of_piece(pc) == PieceType.PAWN:
            if (target ^ origin) == 16 and pawn_attacks_bb(us, target - pawn_push(us)) & self.pieces(
                PieceType.PAWN, color=them
            ):
                st.ep_square = target - pawn_push(us)
                k ^= zob.enpassant[file_of(st.ep_square)]
            elif kind == MoveType.PROMOTION:
                promotion = make_piece(us, promotion_type(move))
                self.remove_piece(target)
                self.put_piece(promotion, target)
                k ^= zob.psq[pc][target] ^ zob.psq[promotion][target]
                st.pawn_key ^= zob.psq[pc][target]
                st.material_key ^= (
                    zob.psq[promotion][self._piece_count[promotion] - 1]
                    ^ zob.psq[pc][self._piece_count[pc]]
                )
                st.non_pawn_material[us] += piece_value(Phase.MG, promotion)
            st.pawn_key ^= zob.psq[pc][origin] ^ zob.psq[pc][target]
            st.rule50 = 0

        st.captured_piece = captured
        st.key = k
        st.checkers_bb = (
            self.attackers_to(self.king_square(them)) & self.pieces(color=us) if gives_check else 0
        )
        self.side_to_move = them
        self._set_check_info()

        st.repetition = 0
        end = min(st.rule50, st.plies_from_null)
        if end >= 4:
            stp = st.previous.previous
            for i in range(4, end + 1, 2):
                stp = stp.previous.previous
                if stp.key == st.key:
                    st.repetition = -i if stp.repetition else i
                    break

    def undo_move(self, move: int) -> None:
        """Retract the last move made, which must be ``move``."""
        if self.state.previous is None:
            raise ValueError("there is no move to undo")
        self.side_to_move = ~self.side_to_move
        us = self.side_to_move
        origin, target = from_sq(move), to_sq(move)
        kind = move_type(move)

        if kind == MoveType.PROMOTION:
            self.remove_piece(target)
            self.put_piece(make_piece(us, PieceType.PAWN), target)

        if kind == MoveType.CASTLING:
            self._do_castling(us, origin, target, False)
        else:
            self._move_piece(target, origin)
            captured = self.state.captured_piece
            if captured != Piece.NONE:
                capsq = target
                if kind == MoveType.EN_PASSANT:
                    capsq -= pawn_push(us)
                self.put_piece(captured, capsq)

        self.state = self.state.previous
        self.game_ply -= 1

    def _do_castling(self, us: Color, origin: int, target: int, do: bool) -> tuple[int, int, int]:
        """Move king and rook for a castling move encoded as king-takes-rook.

        Returns the king's destination and the rook's origin and destination.
        """
        king_side = target > origin
        rfrom = target
        rto = relative_square(us, _SQ_F1 if king_side else _SQ_D1)
        kto = relative_square(us, _SQ_G1 if king_side else _SQ_C1)
        # Both pieces leave first, since the squares may overlap in Chess960.
        self.remove_piece(origin if do else kto)
        self.remove_piece(rfrom if do else rto)
        self.put_piece(make_piece(us, PieceType.KING), kto if do else origin)
        self.put_piece(make_piece(us, PieceType.ROOK), rto if do else rfrom)
        return kto, rfrom, rto

    def do_null_move(self) -> None:
        """Pass the turn without moving; not allowed while in check."""
        if self.checkers():
            raise ValueError("cannot make a null move while in check")
        zob = zobrist_keys()
        old = self.state
        st = dataclasses.replace(
            old,
            non_pawn_material=list(old.non_pawn_material),
            blockers_for_king=list(old.blockers_for_king),
            pinners=list(old.pinners),
            check_squares=list(old.check_squares),
            previous=old,
        )
        self.state = st
        if st.ep_square != SQ_NONE:
            st.key ^= zob.enpassant[file_of(st.ep_square)]
            st.ep_square = SQ_NONE
        st.key ^= zob.side
        st.rule50 += 1
        st.plies_from_null = 0
        self.side_to_move = ~self.side_to_move
        self._set_check_info()
        st.repetition = 0

    def undo_null_move(self) -> None:
        """Retract a null move."""
        if self.checkers():
            raise ValueError("the last move was not a null move")
        if self.state.previous is None:
            raise ValueError("there is no null move to undo")
        self.state = self.state.previous
        self.side_to_move = ~self.side_to_move

    # ------------------------------------------------- static exchange eval

    def see_ge(self, move: int, threshold: int = 0) -> bool:
        """Whether the static exchange value of ``move`` is at least ``threshold``."""
        if move_type(move) != MoveType.NORMAL:
            return 0 >= threshold

        origin, target = from_sq(move), to_sq(move)
        swap = piece_value(Phase.MG, self._board[target]) - threshold
        if swap < 0:
            return False
        swap = piece_value(Phase.MG, self._board[origin]) - swap
        if swap <= 0:
            return True

        occupied = self.pieces() ^ square_bb(origin) ^ square_bb(target)
        stm = self.side_to_move
        attackers = self.attackers_to(target, occupied)
        diagonal = self.pieces(PieceType.BISHOP, PieceType.QUEEN)
        straight = self.pieces(PieceType.ROOK, PieceType.QUEEN)
        res = 1

        while True:
            stm = ~stm
            attackers &= occupied
            stm_attackers = attackers & self.pieces(color=stm)
            if not stm_attackers:
                break
            if self.pinners(~stm) & occupied:
                stm_attackers &= ~self.blockers_for_king(stm)
                if not stm_attackers:
                    break
            res ^= 1

            if bb := stm_attackers & self.pieces(PieceType.PAWN):
                occupied ^= _lowest_bb(bb)
                swap = PAWN_VALUE_MG - swap
                if swap < res:
                    break
                attackers |= attacks_bb(PieceType.BISHOP, target, occupied) & diagonal
            elif bb := stm_attackers & self.pieces(PieceType.KNIGHT):
                occupied ^= _lowest_bb(bb)
                swap = KNIGHT_VALUE_MG - swap
                if swap < res:
                    break
            elif bb := stm_attackers & self.pieces(PieceType.BISHOP):
                occupied ^= _lowest_bb(bb)
                swap = BISHOP_VALUE_MG - swap
                if swap < res:
                    break
                attackers |= attacks_bb(PieceType.BISHOP, target, occupied) & diagonal
            elif bb := stm_attackers & self.pieces(PieceType.ROOK):
                occupied ^= _lowest_bb(bb)
                swap = ROOK_VALUE_MG - swap
                if swap < res:
                    break
                attackers |= attacks_bb(PieceType.ROOK, target, occupied) & straight
            elif bb := stm_attackers & self.pieces(PieceType.QUEEN):
                occupied ^= _lowest_bb(bb)
                swap = QUEEN_VALUE_MG - swap
                if swap < res:
                    break
                attackers |= (attacks_bb(PieceType.BISHOP, target, occupied) & diagonal) | (
                    attacks_bb(PieceType.ROOK, target, occupied) & straight
                )
            else:
                # A king "capture" is only safe if the opponent has no attackers left.
                return bool(res ^ 1 if attackers & ~self.pieces(color=stm) else res)

        return bool(res)

    # ----------------------------------------------------------------- draws

    def _pseudo_moves(self) -> list[int]:
        """Non-castling pseudo-legal moves, enough to decide whether any legal move exists."""
        us = self.side_to_move
        own = self.pieces(color=us)
        enemies = self.pieces(color=~us)
        occupied = self.pieces()
        moves = []
        for s in iter_squares(own):
            pt = type_of_piece(self._board[s])
            if pt != PieceType.PAWN:
                moves.extend(make_move(s, t) for t in iter_squares(attacks_bb(pt, s, occupied) & ~own))
                continue
            push = pawn_push(us)
            targets = []
            one = s + push
            if 0 <= one < 64 and self.empty(one):
                targets.append(one)
                two = one + push
                if relative_rank(us, rank_of(s)) == 1 and 0 <= two < 64 and self.empty(two):
                    targets.append(two)
            targets.extend(iter_squares(pawn_attacks_bb(us, s) & enemies))
            for t in targets:
                if rank_of(t) in (0, 7):
                    moves.append(make_move(s, t, MoveType.PROMOTION, PieceType.QUEEN))
                else:
                    moves.append(make_move(s, t))
            ep = self.ep_square
            if ep != SQ_NONE and pawn_attacks_bb(us, s) & square_bb(ep):
                moves.append(make_move(s, ep, MoveType.EN_PASSANT))
        return moves

    def _has_legal_move(self) -> bool:
        us = self.side_to_move
        for move in self._pseudo_moves():
            self.do_move(move, False)
            safe = not (self.attackers_to(self.king_square(us)) & self.pieces(color=~us))
            self.undo_move(move)
            if safe:
                return True
        return False

    def is_draw(self, ply: int) -> bool:
        """Draw by the fifty-move rule or by repetition; stalemate is not detected."""
        st = self.state
        if st.rule50 > 99 and (not self.checkers() or self._has_legal_move()):
            return True
        return bool(st.repetition and st.repetition < ply)

    def has_repeated(self) -> bool:
        """Whether any position repeated since the last capture, pawn move or null move."""
        stc = self.state
        end = min(stc.rule50, stc.plies_from_null)
        while end >= 4:
            end -= 1
            if stc.repetition:
                return True
            stc = stc.previous
        return False

    def has_game_cycle(self, ply: int) -> bool:
        """Whether a move draws by repetition, or an earlier position reaches this one directly."""
        st = self.state
        end = min(st.rule50, st.plies_from_null)
        if end < 3:
            return False
        original_key = st.key
        stp = st.previous
        occupied = self.pieces()
        for i in range(3, end + 1, 2):
            stp = stp.previous.previous
            move = find_cuckoo_move(original_key ^ stp.key)
            if move == 0:
                continue
            s1, s2 = from_sq(move), to_sq(move)
            if (between_bb(s1, s2) ^ square_bb(s2)) & occupied:
                continue
            if ply > i:
                return True
            # Both directions of a move share one table slot; pick the occupied square.
            mover = self._board[s2 if self.empty(s1) else s1]
            if color_of_piece(mover) != self.side_to_move:
                continue
            if stp.repetition:
                return True
        return False

    # ---------------------------------------------------------------- checks

    def flip(self) -> None:
        """Swap colours and mirror the board vertically; the move history is dropped."""
        placement, side, castling, ep, *rest = self.fen().split()
        mirrored = "/".join(reversed(placement.split("/"))).swapcase()
        if ep != "-":
            ep = ep[0] + ("6" if ep[1] == "3" else "3")
        fen = " ".join([mirrored, "b" if side == "w" else "w", castling.swapcase(), ep, *rest])
        self._setup(fen, self.chess960)

    def is_consistent(self) -> bool:
        """Full consistency check of the board, counts, bitboards and castling data."""
        try:
            kings = (self.king_square(Color.WHITE), self.king_square(Color.BLACK))
        except ValueError:
            return False
        if self._board[kings[0]] != Piece.W_KING or self._board[kings[1]] != Piece.B_KING:
            return False
        us = self.side_to_move
        ep = self.ep_square
        if ep != SQ_NONE and relative_rank(us, rank_of(ep)) != 5:
            return False
        if self.attackers_to(kings[~us]) & self.pieces(color=us):
            return False

        if self.pieces(PieceType.PAWN) & (RANK_1_BB | RANK_8_BB):
            return False
        if any(self._piece_count[make_piece(c, PieceType.PAWN)] > 8 for c in Color):
            return False

        white, black = self.pieces(color=Color.WHITE), self.pieces(color=Color.BLACK)
        if white & black or (white | black) != self.pieces():
            return False
        if popcount(white) > 16 or popcount(black) > 16:
            return False
        types = [self.pieces(pt) for pt in range(PieceType.PAWN, PieceType.KING + 1)]
        seen = 0
        for bb in types:
            if seen & bb:
                return False
            seen |= bb

        for pc in ALL_PIECES:
            count = self._piece_count[pc]
            color, pt = color_of_piece(pc), type_of_piece(pc)
            if count != popcount(self.pieces(pt, color=color)) or count != self._board.count(pc):
                return False

        for right in _SINGLE_RIGHTS:
            if not self.can_castle(right):
                continue
            color = Color.WHITE if right & CastlingRights.WHITE else Color.BLACK
            rsq = self._castling_rook_square[right]
            if (
                self._board[rsq] != make_piece(color, PieceType.ROOK)
                or self._castling_rights_mask[rsq] != right
                or (self._castling_rights_mask[kings[color]] & right) != right
            ):
                return False
        return True


__all__ = ["Position", "StateInfo"]