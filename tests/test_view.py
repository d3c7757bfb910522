import io

import view
from core import DIRECTION, Board
from mvhist import MovesHistory

from conftest import make_state


def bound_view(rows, skin=0, **state):
    stream = io.StringIO()
    text_view = view.TextView(stream, skin=skin)
    gs = make_state(rows, **state)
    mvhist = MovesHistory()
    mvhist.push_undo(gs)
    text_view.bind(gs, mvhist)
    return text_view, gs, mvhist, stream


def test_render_shows_scores_board_and_help():
    rows = [[2, 0, 0, 0], [0, 4, 0, 0], [0, 0, 0, 0], [0, 0, 0, 2048]]
    text_view, gs, mvhist, _ = bound_view(rows, score=12, bestscore=30, prevmove=DIRECTION.UP)

    text = text_view.render()

    assert "SCORE: 12" in text
    assert "BEST: 30" in text
    assert "BOARD: 4x4" in text
    assert "2048" in text
    assert "moves: 0" in text
    assert "last: UP" in text
    assert view.HELP_GAME in text
    assert len(text_view.render_board()) == 4


def test_bestscore_hidden_after_undo():
    text_view, gs, mvhist, _ = bound_view([[0] * 4 for _ in range(4)], bestscore=50)
    mvhist.didundo = True
    assert "BEST: --" in text_view.render()


def test_replay_render_shows_position():
    text_view, gs, mvhist, _ = bound_view([[0] * 4 for _ in range(4)])
    mvhist.new_replay_stack()
    text = text_view.render(replay=True, position=1)
    assert "REPLAY move 1/1" in text
    assert view.HELP_REPLAY in text


def test_skins_cycle_and_wrap():
    text_view, *_ = bound_view([[0] * 4 for _ in range(4)])
    names = [text_view.cycle_skin() for _ in range(len(view.SKINS))]
    assert names == [s.name for s in view.SKINS[1:]] + [view.SKINS[0].name]


def test_boxed_skin_draws_rules():
    text_view, *_ = bound_view([[2, 0, 0, 0]] + [[0] * 4 for _ in range(3)], skin=1)
    lines = text_view.render_board()
    assert len(lines) == 9
    assert lines[0].startswith("+") and lines[0].endswith("+")
    assert lines[1].startswith("|")


def test_board_reference_update_resizes():
    text_view, *_ = bound_view([[0] * 4 for _ in range(4)])
    width = text_view.cell_width
    board = Board(8)

    text_view.update_board_reference(board)

    assert text_view.board is board
    assert text_view.dim == 8
    assert text_view.cell_width >= width
    assert len(text_view.render_board()) == 8


def test_mvhist_reference_update():
    text_view, *_ = bound_view([[0] * 4 for _ in range(4)])
    other = MovesHistory()
    text_view.update_mvhist_reference(other)
    assert text_view.mvhist is other


def test_refresh_beep_and_message_write_to_stream():
    text_view, _, _, stream = bound_view([[0] * 4 for _ in range(4)])
    text_view.refresh()
    text_view.beep()
    text_view.message("hello")
    out = stream.getvalue()
    assert "SCORE: 0" in out
    assert "\a" in out
    assert out.endswith("hello\n")
