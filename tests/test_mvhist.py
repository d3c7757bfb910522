"""
Tests for the moves history: undo/redo stacks and the replay stack.
"""

import pytest

from core import DIRECTION
from errors import EmptyStackError, InvalidArgumentError
from mvhist import HistoryStack, MovesHistory

from conftest import make_state


def numbered_state(i):
    """A distinct 4x4 state for move i (the score doubles as the move number)."""
    rows = [[0] * 4 for _ in range(4)]
    rows[i % 4][(i // 4) % 4] = 2
    return make_state(rows, score=i, bestscore=i)


def history_of(n):
    mvhist = MovesHistory()
    for i in range(n):
        mvhist.push_undo(numbered_state(i))
    return mvhist


class TestHistoryStack:

    def test_push_copies_the_state(self):
        stack = HistoryStack()
        state = numbered_state(1)
        stack.push(state)

        state.score = 1000
        state.board.set(3, 3, 64)

        stored = stack.peek().state
        assert stored.score == 1
        assert stored.board.get(3, 3) == 0

    def test_counts_are_one_based_from_the_bottom(self):
        stack = HistoryStack()
        nodes = [stack.push(numbered_state(i)) for i in range(3)]
        assert [n.count for n in nodes] == [1, 2, 3]
        assert stack.count == 3
        assert [n.count for n in stack] == [3, 2, 1]
        assert stack.node_at(1) is nodes[0]

    def test_pop_returns_top_snapshot(self):
        stack = HistoryStack()
        stack.push(numbered_state(1))
        stack.push(numbered_state(2))
        assert stack.pop().score == 2
        assert stack.count == 1
        assert stack.peek().state.score == 1

    def test_pop_empty_raises(self):
        with pytest.raises(EmptyStackError):
            HistoryStack().pop()

    def test_push_requires_a_state(self):
        with pytest.raises(InvalidArgumentError):
            HistoryStack().push(None)


class TestUndoRedoStacks:

    def test_peek_on_empty_stacks(self):
        mvhist = MovesHistory()
        assert mvhist.peek_undo_state() is None
        assert mvhist.peek_undo_count() == 0
        assert mvhist.peek_redo_state() is None
        assert mvhist.is_empty_undo()
        assert mvhist.is_empty_redo()

    def test_pop_on_empty_stack_is_harmless(self):
        mvhist = MovesHistory()
        assert mvhist.pop_undo() is None
        assert mvhist.pop_redo() is None

    def test_push_pop_peek(self):
        mvhist = history_of(3)
        mvhist.push_redo(numbered_state(7))

        assert mvhist.peek_undo_count() == 3
        assert mvhist.peek_undo_state().score == 2
        assert mvhist.peek_redo_state().score == 7
        assert mvhist.peek_redo_count() == 1

        mvhist.pop_undo()
        assert mvhist.peek_undo_state().score == 1

    def test_undo_states_are_chronological_copies(self):
        mvhist = history_of(4)
        states = mvhist.undo_states()
        assert [s.score for s in states] == [0, 1, 2, 3]
        states[0].score = 500
        assert mvhist.undo.node_at(1).state.score == 0

    def test_from_states(self):
        states = [numbered_state(i) for i in range(5)]
        mvhist = MovesHistory.from_states(states, didundo=True)
        assert mvhist.didundo
        assert mvhist.peek_undo_count() == 5
        assert mvhist.undo_states() == states

    def test_reset_clears_everything(self):
        mvhist = history_of(3)
        mvhist.push_redo(numbered_state(9))
        mvhist.didundo = True
        mvhist.new_replay_stack()

        mvhist.reset()

        assert mvhist.is_empty_undo()
        assert mvhist.is_empty_redo()
        assert not mvhist.has_replay()
        assert not mvhist.didundo
        assert mvhist.replay_nmoves == 0


class TestReplayStack:

    def test_replay_is_the_reverse_of_undo(self):
        mvhist = history_of(5)
        assert mvhist.new_replay_stack(delay=250) == 5
        assert mvhist.replay_nmoves == 5
        assert mvhist.replay_delay == 250
        assert mvhist.iter_top().state.score == 0
        assert mvhist.iter_bottom().state.score == 4
        assert mvhist.peek_undo_count() == 5

    def test_iter_down_visits_moves_in_play_order(self):
        mvhist = history_of(6)
        mvhist.new_replay_stack()

        it = mvhist.iter_top()
        seen = [it.state.score]
        while True:
            nxt = mvhist.iter_down(it)
            if nxt is it:
                break
            it = nxt
            seen.append(it.state.score)

        assert seen == [0, 1, 2, 3, 4, 5]
        assert it is mvhist.iter_bottom()

    def test_iter_up_walks_back_and_stops_at_the_top(self):
        mvhist = history_of(3)
        mvhist.new_replay_stack()

        it = mvhist.iter_bottom()
        it = mvhist.iter_up(it)
        assert it.state.score == 1
        it = mvhist.iter_up(it)
        assert it is mvhist.iter_top()
        assert mvhist.iter_up(it) is it

    def test_replay_position(self):
        mvhist = history_of(4)
        mvhist.new_replay_stack()
        assert mvhist.replay_position(mvhist.iter_top()) == 1
        assert mvhist.replay_position(mvhist.iter_bottom()) == 4

    def test_replay_snapshots_are_independent_of_undo(self):
        mvhist = history_of(2)
        mvhist.new_replay_stack()
        mvhist.iter_top().state.score = 77
        assert mvhist.undo.node_at(1).state.score == 0

    def test_free_replay_stack_leaves_undo_and_redo(self):
        mvhist = history_of(3)
        mvhist.push_redo(numbered_state(8))
        mvhist.new_replay_stack()

        mvhist.free_replay_stack()

        assert not mvhist.has_replay()
        assert mvhist.iter_top() is None
        assert mvhist.iter_bottom() is None
        assert mvhist.peek_undo_count() == 3
        assert mvhist.peek_redo_count() == 1

    def test_rebuilding_replaces_the_old_stack(self):
        mvhist = history_of(2)
        mvhist.new_replay_stack()
        old_top = mvhist.iter_top()
        mvhist.push_undo(numbered_state(2))

        assert mvhist.new_replay_stack() == 3
        with pytest.raises(InvalidArgumentError):
            mvhist.iter_down(old_top)

    def test_foreign_cursor_is_rejected(self):
        mvhist = history_of(3)
        mvhist.new_replay_stack()
        with pytest.raises(InvalidArgumentError):
            mvhist.iter_up(mvhist.undo.peek())
        with pytest.raises(InvalidArgumentError):
            mvhist.iter_down(None)

    def test_single_move_replay_cannot_move(self):
        mvhist = history_of(1)
        mvhist.new_replay_stack()
        it = mvhist.iter_top()
        assert it is mvhist.iter_bottom()
        assert mvhist.iter_down(it) is it
        assert mvhist.iter_up(it) is it
        assert it.state.prevmove is DIRECTION.NONE
