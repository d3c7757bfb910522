# session.py
# The game driver: plays moves, starts new games/variants, undoes, redoes and replays,
# keeping the game-state, the moves history and the view in step.

from pathlib import Path
from typing import Callable, NamedTuple, Optional
import logging
import random
import time

import core
import replay_codec
from errors import InvalidArgumentError, ReplayFileError
from gamestate import GameState
from mvhist import GSNode, MovesHistory
from view import NullView

logger = logging.getLogger(__name__)

# msecs to pause between moves while auto-replaying
AUTOPLAY_DELAY_MS = 750

PROMPT_NEW_GAME = "Start a new game?"
PROMPT_UNDO = "Undo disables best-score tracking for the rest of the session. Proceed?"
PROMPT_SAVE_REPLAY = "Save replay as '{path}'?"
PROMPT_LOAD_REPLAY = "Load a replay (the current game will be discarded)?"

class AlwaysConfirm:
    """Prompter that says yes to everything (headless sessions, tests)."""

    def confirm(self, question: str) -> bool:
        return True


class PlayOutcome(NamedTuple):
    moved: bool
    iswin: bool
    gameover: bool


class Session:
    """
    One player's game session: the live game-state, its moves history and
    the view showing them.

    The board and the moves history can be replaced wholesale (variant
    switch, replay load); the session rebinds the view every time, and any
    other holder must read them again from the session.
    """

    def __init__(
        self,
        dim: int = core.DEFAULT_DIM,
        view=None,
        prompter=None,
        rng: Optional[random.Random] = None,
        replays_dir=replay_codec.REPLAYS_FOLDER,
        delay_ms: int = AUTOPLAY_DELAY_MS,
    ):
        self.gamestate = GameState(dim, rng)
        self.mvhist = MovesHistory()
        self.view = view if view is not None else NullView()
        self.prompter = prompter if prompter is not None else AlwaysConfirm()
        self.replays_dir = Path(replays_dir)
        self.delay_ms = delay_ms

        self._start_game()
        self.view.bind(self.gamestate, self.mvhist)

    def _start_game(self) -> None:
        # the initial spawn is the automatic first move; it is never undoable
        self.gamestate.reset()
        self.mvhist.reset()
        self.mvhist.push_undo(self.gamestate)

    def _apply(self, state: GameState, keep_bestscore: bool = False) -> None:
        """
        Makes a recorded state the active one, rebinding the view if the board
        was replaced. With keep_bestscore the live best score survives the copy.
        """
        board = self.gamestate.board
        bestscore = self.gamestate.bestscore
        self.gamestate.copy_from(state)
        if keep_bestscore:
            self.gamestate.bestscore = bestscore
        if self.gamestate.board is not board:
            self.view.update_board_reference(self.gamestate.board)

    def _confirm(self, question: str) -> bool:
        return self.prompter.confirm(question)

    @property
    def board(self) -> core.Board:
        return self.gamestate.board

    def is_game_over(self) -> bool:
        return core.is_game_over(self.gamestate.board)

    def play(self, direction: core.DIRECTION) -> PlayOutcome:
        """
        Plays a move on the board and records the resulting game-state.

        New tiles are spawned only after a move that changed the board without
        winning. The best score follows the score unless an undo was ever done.
        """
        gs = self.gamestate
        result = core.move(direction, gs.board)

        gs.score += result.score_delta
        if not self.mvhist.didundo and gs.bestscore < gs.score:
            gs.bestscore = gs.score

        if result.moved or result.iswin:
            gs.prevmove = direction
            if not result.iswin:
                core.generate_ntiles(gs.board, gs.board.nrandom)
            self.mvhist.clear_redo()
            self.mvhist.push_undo(gs)

        gameover = core.is_game_over(gs.board, result.iswin)
        if gameover:
            logger.info("game over (win=%s, score=%d)", result.iswin, gs.score)
        return PlayOutcome(result.moved, result.iswin, gameover)

    def new_game(self, confirm: bool = True) -> bool:
        """Restarts the game on the current board size."""
        if confirm and not self._confirm(PROMPT_NEW_GAME):
            return False
        self._start_game()
        logger.info("new %dx%d game", self.board.dim, self.board.dim)
        return True

    def new_variant(self, dim: int) -> bool:
        """
        Switches to another board size. Asks for confirmation; returns False
        when the size is already in use or the player declines.
        """
        if dim not in core.BOARD_VARIANTS:
            logger.error("new_variant(): %r is not a valid variant", dim)
            raise InvalidArgumentError("new_variant", f"{dim!r} is not a valid board size")
        if dim == self.board.dim:
            return False
        if not self._confirm(PROMPT_NEW_GAME):
            return False

        board = self.gamestate.resize(dim)
        core.generate_ntiles(board, 2 * board.nrandom)
        self.mvhist.reset()
        self.mvhist.push_undo(self.gamestate)
        self.view.update_board_reference(board)
        logger.info("switched to the %dx%d variant", dim, dim)
        return True

    def undo(self) -> bool:
        """
        Undoes the last move. The first undo of a session asks for
        confirmation, because it freezes best-score tracking.
        """
        mvhist = self.mvhist
        if mvhist.peek_undo_count() < 2:
            logger.debug("undo refused: nothing to undo")
            self.view.beep()
            return False

        if not mvhist.didundo and not self._confirm(PROMPT_UNDO):
            return False
        mvhist.didundo = True

        mvhist.push_redo(self.gamestate)
        mvhist.pop_undo()
        self._apply(mvhist.peek_undo_state(), keep_bestscore=True)
        return True

    def redo(self) -> bool:
        mvhist = self.mvhist
        if not mvhist.didundo or mvhist.is_empty_redo():
            logger.debug("redo refused: nothing to redo")
            self.view.beep()
            return False

        self._apply(mvhist.peek_redo_state(), keep_bestscore=True)
        mvhist.pop_redo()
        mvhist.push_undo(self.gamestate)
        return True

    def hint(self):
        """Not implemented."""
        return None

    def replayer(self) -> "Replayer":
        return Replayer(self)


class Replayer:
    """
    Replay mode over a session: navigates a replay stack built from the
    undo stack, one recorded move at a time.

    Every navigation returns False (and beeps) when it would go past the
    first or the last move.
    """

    def __init__(self, session: Session):
        self.session = session
        self.cursor: Optional[GSNode] = None
        # best score to restore when leaving replay mode
        self.bestscore = session.gamestate.bestscore

    @property
    def mvhist(self) -> MovesHistory:
        return self.session.mvhist

    @property
    def position(self) -> int:
        return self.mvhist.replay_position(self.cursor)

    def _show(self, node: GSNode) -> None:
        self.cursor = node
        self.session._apply(node.state)
        self.session.view.refresh(replay=True, position=self.position)

    def _refuse(self) -> bool:
        self.session.view.beep()
        return False

    def start(self) -> bool:
        self.mvhist.new_replay_stack(self.session.delay_ms)
        top = self.mvhist.iter_top()
        if top is None:
            logger.error("start(): the replay stack is empty")
            self.mvhist.free_replay_stack()
            return False
        self._show(top)
        return True

    def stop(self) -> None:
        """Leaves replay mode, going back to the latest recorded state."""
        self.mvhist.free_replay_stack()
        self.cursor = None
        self.session._apply(self.mvhist.peek_undo_state())
        self.session.gamestate.bestscore = self.bestscore

    def at_last(self) -> bool:
        return self.cursor.count == 1

    def at_first(self) -> bool:
        return self.cursor.count == self.mvhist.replay_nmoves

    def next(self) -> bool:
        if self.at_last():
            return self._refuse()
        self._show(self.mvhist.iter_down(self.cursor))
        return True

    def prev(self) -> bool:
        if self.at_first():
            return self._refuse()
        self._show(self.mvhist.iter_up(self.cursor))
        return True

    def begin(self) -> bool:
        if self.at_first():
            return self._refuse()
        self._show(self.mvhist.iter_top())
        return True

    def end(self) -> bool:
        if self.at_last():
            return self._refuse()
        self._show(self.mvhist.iter_bottom())
        return True

    def autoplay(
        self,
        cancel: Optional[Callable[[], bool]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> int:
        """
        Steps forward through the replay until the last move, pausing between
        frames. Stops early when cancel() returns true or on KeyboardInterrupt.
        Returns the number of frames shown.
        """
        if self.at_last():
            self._refuse()
            return 0

        frames = 0
        cancelled = False
        while True:
            if cancel is not None and cancel():
                cancelled = True
                break
            nxt = self.mvhist.iter_down(self.cursor)
            if nxt is self.cursor:
                break
            try:
                self._show(nxt)
                frames += 1
                sleep(self.mvhist.replay_delay / 1000)
            except KeyboardInterrupt:
                cancelled = True
                break

        if cancelled:
            logger.debug("autoplay cancelled after %d frames", frames)
        else:
            self.cursor = self.mvhist.iter_bottom()
        return frames

    def save(self, path=None) -> bool:
        target = Path(path) if path is not None else replay_codec.default_replay_path(self.session.replays_dir)
        if not self.session._confirm(PROMPT_SAVE_REPLAY.format(path=target)):
            return False
        if not replay_codec.save_to_file(self.mvhist, target):
            self.session.view.message(f"Could not save the replay to {target}")
            return False
        self.session.view.message(f"Replay saved to {target}")
        return True

    def load(self, path) -> bool:
        """
        Replaces the session's moves history with the one recorded in a
        replay file and shows its first move. The current history is kept
        if loading fails.
        """
        if not self.session._confirm(PROMPT_LOAD_REPLAY):
            return False

        source = Path(path)
        if not source.is_file():
            self.session.view.message(f"No such replay file: {source}")
            return False
        try:
            loaded = replay_codec.load_from_file(source, self.session.board.rng)
        except ReplayFileError as e:
            self.session.view.message(str(e))
            return False

        self.mvhist.free_replay_stack()
        self.session.mvhist = loaded
        self.bestscore = loaded.peek_undo_state().bestscore
        self.session.view.update_mvhist_reference(loaded)
        return self.start()
