"""
Shared fixtures for the game engine tests.
"""

import random

import pytest

from core import DIRECTION
from gamestate import GameState, GameStateData
from session import Session


class ScriptedPrompter:
    """Answers confirmations from a list (default yes) and records the questions asked."""

    def __init__(self, answers=None, default=True):
        self.answers = list(answers or [])
        self.default = default
        self.questions = []

    def confirm(self, question):
        self.questions.append(question)
        if self.answers:
            return self.answers.pop(0)
        return self.default


class RecordingView:
    """Render adapter that records every call made by the core."""

    def __init__(self):
        self.calls = []
        self.board = None
        self.mvhist = None

    def bind(self, gamestate, mvhist):
        self.calls.append("bind")
        self.board = gamestate.board
        self.mvhist = mvhist

    def update_board_reference(self, board):
        self.calls.append("update_board_reference")
        self.board = board

    def update_mvhist_reference(self, mvhist):
        self.calls.append("update_mvhist_reference")
        self.mvhist = mvhist

    def resize(self, dim):
        self.calls.append("resize")

    def refresh(self, replay=False, position=None):
        self.calls.append(("refresh", replay, position))

    def beep(self):
        self.calls.append("beep")

    def message(self, text):
        self.calls.append(("message", text))

    def cycle_skin(self):
        return None

    def count(self, name):
        return sum(1 for call in self.calls if call == name)


def make_state(rows, score=0, bestscore=0, prevmove=DIRECTION.NONE, rng=None):
    data = GameStateData(board=rows, score=score, bestscore=bestscore, prevmove=prevmove)
    return GameState.from_snapshot(data, rng)


def install_board(sess, rows, score=0, bestscore=0):
    """Replaces the session's game with the given board as its only recorded state."""
    sess.gamestate.copy_from(make_state(rows, score, bestscore))
    sess.view.update_board_reference(sess.gamestate.board)
    sess.mvhist.reset()
    sess.mvhist.push_undo(sess.gamestate)


def play_moves(sess, n):
    """Plays until n moves have been recorded, cycling through the directions."""
    cycle = [DIRECTION.LEFT, DIRECTION.UP, DIRECTION.RIGHT, DIRECTION.DOWN]
    recorded = 0
    for attempt in range(400):
        if recorded == n:
            break
        outcome = sess.play(cycle[attempt % len(cycle)])
        if outcome.moved:
            recorded += 1
        if outcome.gameover:
            break
    assert recorded == n, f"could only record {recorded} of {n} moves"


@pytest.fixture
def rng():
    return random.Random(2048)


@pytest.fixture
def prompter():
    return ScriptedPrompter()


@pytest.fixture
def recording_view():
    return RecordingView()


@pytest.fixture
def sess(rng, prompter, recording_view, tmp_path):
    return Session(
        dim=4,
        view=recording_view,
        prompter=prompter,
        rng=rng,
        replays_dir=tmp_path / "replays",
        delay_ms=0,
    )
