# view.py
# Text rendering of the game: board, scores bar, moves counter and help box.

from typing import List, NamedTuple, Optional, TextIO
import logging
import sys

import core

logger = logging.getLogger(__name__)

# Keys understood by the command line driver (upper case).
KEY_UP = "W"
KEY_LEFT = "A"
KEY_DOWN = "S"
KEY_RIGHT = "D"
KEY_RESET = "N"
KEY_BOARD_4 = "4"
KEY_BOARD_5 = "5"
KEY_BOARD_6 = "6"
KEY_BOARD_8 = "8"
KEY_UNDO = "U"
KEY_REDO = "R"
KEY_REPLAY = "P"
KEY_SKIN = "K"
KEY_HINT = "H"
KEY_QUIT = "Q"
KEY_ESCAPE = "\x1b"

KEY_REPLAY_NEXT = KEY_RIGHT
KEY_REPLAY_PREV = KEY_LEFT
KEY_REPLAY_BEG = "B"
KEY_REPLAY_END = "E"
KEY_REPLAY_PLAY = "P"
KEY_REPLAY_SAVE = "S"
KEY_REPLAY_LOAD = "L"
KEY_REPLAY_BACK = KEY_QUIT

HELP_GAME = (
    f"{KEY_UP}/{KEY_LEFT}/{KEY_DOWN}/{KEY_RIGHT}: move  {KEY_UNDO}: undo  {KEY_REDO}: redo  "
    f"{KEY_REPLAY}: replay  {KEY_RESET}: new game  4/5/6/8: board size  "
    f"{KEY_SKIN}: skin  {KEY_HINT}: hint  {KEY_QUIT}: quit"
)
HELP_REPLAY = (
    f"{KEY_REPLAY_PREV}/{KEY_REPLAY_NEXT}: previous/next  {KEY_REPLAY_BEG}/{KEY_REPLAY_END}: begin/end  "
    f"{KEY_REPLAY_PLAY}: play  {KEY_REPLAY_SAVE}: save  {KEY_REPLAY_LOAD}: load  {KEY_REPLAY_BACK}: back"
)

class Skin(NamedTuple):
    name: str
    empty: str      # drawn in empty cells
    vbar: str       # between cells
    corner: str     # "" for no horizontal rules
    hbar: str

SKINS = [
    Skin("plain", ".", " ", "", ""),
    Skin("boxed", "", "|", "+", "-"),
    Skin("compact", "_", "", "", ""),
]

class NullView:
    """Render adapter that draws nothing; used when the core runs headless."""

    def bind(self, gamestate, mvhist):
        pass

    def update_board_reference(self, board):
        pass

    def update_mvhist_reference(self, mvhist):
        pass

    def resize(self, dim):
        pass

    def refresh(self, replay=False, position=None):
        pass

    def beep(self):
        pass

    def message(self, text):
        pass

    def cycle_skin(self):
        return None


class TextView:
    """
    Draws a game-state to a text stream.

    The view only reads the game data it is bound to. Whenever the core
    replaces the board (variant switch, replay load) or the moves history
    (replay load), the new object must be handed over with
    update_board_reference() / update_mvhist_reference().
    """

    def __init__(self, stream: Optional[TextIO] = None, skin: int = 0):
        self.stream = stream if stream is not None else sys.stdout
        self.skin_index = skin % len(SKINS)
        self.gamestate = None
        self.mvhist = None
        self.board: Optional[core.Board] = None
        self.dim = 0
        self.cell_width = 0

    @property
    def skin(self) -> Skin:
        return SKINS[self.skin_index]

    def bind(self, gamestate, mvhist) -> None:
        self.gamestate = gamestate
        self.mvhist = mvhist
        self.update_board_reference(gamestate.board)

    def update_board_reference(self, board: core.Board) -> None:
        self.board = board
        if board.dim != self.dim:
            self.resize(board.dim)

    def update_mvhist_reference(self, mvhist) -> None:
        self.mvhist = mvhist

    def resize(self, dim: int) -> None:
        self.dim = dim
        self.cell_width = len(str(core.BOARD_VARIANTS[dim].sentinel * 4)) + 1
        logger.debug("view resized to %dx%d", dim, dim)

    def cycle_skin(self) -> str:
        self.skin_index = (self.skin_index + 1) % len(SKINS)
        return self.skin.name

    def _rule(self) -> str:
        skin = self.skin
        return skin.corner + skin.corner.join([skin.hbar * self.cell_width] * self.dim) + skin.corner

    def render_board(self) -> List[str]:
        skin = self.skin
        lines = []
        if skin.corner:
            lines.append(self._rule())
        for row in self.board.rows():
            cells = [(str(v) if v else skin.empty).center(self.cell_width) for v in row]
            if skin.corner:
                lines.append(skin.vbar + skin.vbar.join(cells) + skin.vbar)
                lines.append(self._rule())
            else:
                lines.append(skin.vbar.join(cells).rstrip())
        return lines

    def render(self, replay: bool = False, position: Optional[int] = None) -> str:
        gs = self.gamestate
        best = "--" if self.mvhist is not None and self.mvhist.didundo else str(gs.bestscore)
        lines = [f"SCORE: {gs.score}   BEST: {best}   BOARD: {self.dim}x{self.dim}"]
        lines.extend(self.render_board())
        if replay and self.mvhist is not None:
            lines.append(f"REPLAY move {position}/{self.mvhist.replay_nmoves}   last: {gs.prevmove.name}")
            lines.append(HELP_REPLAY)
        else:
            nmoves = self.mvhist.peek_undo_count() - 1 if self.mvhist is not None else 0
            lines.append(f"moves: {nmoves}   last: {gs.prevmove.name}")
            lines.append(HELP_GAME)
        return "\n".join(lines)

    def refresh(self, replay: bool = False, position: Optional[int] = None) -> None:
        self.stream.write("\n" + self.render(replay, position) + "\n")
        self.stream.flush()

    def beep(self) -> None:
        self.stream.write("\a")
        self.stream.flush()

    def message(self, text: str) -> None:
        self.stream.write(text + "\n")
        self.stream.flush()
