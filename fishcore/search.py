"""Search bookkeeping: root moves, search limits and per-ply stack frames."""

from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from typing import Any

from .bitboards import MOVE_NONE, Color

VALUE_ZERO = 0
VALUE_DRAW = 0
VALUE_INFINITE = 32001
VALUE_NONE = 32002


@dataclass(eq=False)
class RootMove:
    """A move at the root with its score and principal variation.

    Ordering puts better moves first, so a plain sort yields descending scores.
    """

    move: InitVar[int]
    score: int = -VALUE_INFINITE
    previous_score: int = -VALUE_INFINITE
    average_score: int = -VALUE_INFINITE
    uci_score: int = -VALUE_INFINITE
    score_lowerbound: bool = False
    score_upperbound: bool = False
    sel_depth: int = 0
    tb_rank: int = 0
    tb_score: int = VALUE_ZERO
    pv: list[int] = field(init=False)

    def __post_init__(self, move: int) -> None:
        self.pv = [move]

    def __lt__(self, other: RootMove) -> bool:
        if other.score != self.score:
            return other.score < self.score
        return other.previous_score < self.previous_score

    def matches(self, move: int) -> bool:
        return self.pv[0] == move


@dataclass
class Limits:
    """Search limits received from the controlling interface."""

    searchmoves: list[int] = field(default_factory=list)
    time: list[int] = field(default_factory=lambda: [0, 0])
    inc: list[int] = field(default_factory=lambda: [0, 0])
    npmsec: int = 0
    movetime: int = 0
    start_time: int = 0
    movestogo: int = 0
    depth: int = 0
    mate: int = 0
    perft: int = 0
    infinite: int = 0
    nodes: int = 0

    def use_time_management(self) -> bool:
        return bool(self.time[Color.WHITE] or self.time[Color.BLACK])


@dataclass
class StackFrame:
    """What the search remembers about one ply of the current line."""

    pv: list[int] = field(default_factory=list)
    continuation_history: Any = None
    ply: int = 0
    current_move: int = MOVE_NONE
    excluded_move: int = MOVE_NONE
    killers: list[int] = field(default_factory=lambda: [MOVE_NONE, MOVE_NONE])
    static_eval: int = VALUE_ZERO
    stat_score: int = 0
    move_count: int = 0
    in_check: bool = False
    tt_pv: bool = False
    tt_hit: bool = False
    double_extensions: int = 0
    cutoff_cnt: int = 0


def sort_root_moves(root_moves: list[RootMove]) -> None:
    """Stable in-place sort, best move first."""
    root_moves.sort()