from fishcore.bitboards import MOVE_NONE, Color, make_move
from fishcore.search import VALUE_INFINITE, Limits, RootMove, StackFrame, sort_root_moves

MOVE_A = make_move(12, 28)
MOVE_B = make_move(6, 21)
MOVE_C = make_move(1, 18)


def test_root_move_starts_with_its_move():
    rm = RootMove(MOVE_A)
    assert rm.pv == [MOVE_A]
    assert rm.score == -VALUE_INFINITE
    assert rm.matches(MOVE_A)
    assert not rm.matches(MOVE_B)


def test_better_score_sorts_first():
    low, high = RootMove(MOVE_A), RootMove(MOVE_B)
    low.score, high.score = 10, 50
    moves = [low, high]
    sort_root_moves(moves)
    assert [m.pv[0] for m in moves] == [MOVE_B, MOVE_A]
    assert high < low
    assert not low < high


def test_previous_score_breaks_ties():
    first, second = RootMove(MOVE_A), RootMove(MOVE_B)
    first.score = second.score = 7
    first.previous_score, second.previous_score = -5, 30
    moves = [first, second]
    sort_root_moves(moves)
    assert [m.pv[0] for m in moves] == [MOVE_B, MOVE_A]


def test_sort_is_stable_for_equal_moves():
    moves = [RootMove(MOVE_A), RootMove(MOVE_B), RootMove(MOVE_C)]
    best = RootMove(make_move(2, 19))
    best.score = 1
    moves.append(best)
    sort_root_moves(moves)
    assert [m.pv[0] for m in moves] == [best.pv[0], MOVE_A, MOVE_B, MOVE_C]


def test_limits_time_management():
    limits = Limits()
    assert not limits.use_time_management()
    limits.time[Color.BLACK] = 1000
    assert limits.use_time_management()


def test_limits_do_not_share_lists():
    a, b = Limits(), Limits()
    a.time[Color.WHITE] = 5
    a.searchmoves.append(MOVE_A)
    assert b.time == [0, 0]
    assert b.searchmoves == []


def test_stack_frames_are_independent():
    a, b = StackFrame(), StackFrame()
    a.killers[0] = MOVE_A
    assert b.killers == [MOVE_NONE, MOVE_NONE]
    assert a.killers == [MOVE_A, MOVE_NONE]