# cli_driver.py
# This file is intended to be run to play the game on the CLI

from typing import List, Optional
import argparse
import logging
import random
import sys

import core
import replay_codec
import session as game_session
import view
from core import DIRECTION
from errors import InvalidArgumentError
from session import Replayer, Session

logger = logging.getLogger(__name__)

KEY_TO_DIRECTION = {
    view.KEY_UP: DIRECTION.UP,
    view.KEY_DOWN: DIRECTION.DOWN,
    view.KEY_LEFT: DIRECTION.LEFT,
    view.KEY_RIGHT: DIRECTION.RIGHT,
}

VARIANT_KEYS = {
    view.KEY_BOARD_4: core.BOARD_DIM_4,
    view.KEY_BOARD_5: core.BOARD_DIM_5,
    view.KEY_BOARD_6: core.BOARD_DIM_6,
    view.KEY_BOARD_8: core.BOARD_DIM_8,
}

class ConsolePrompter:
    """Asks yes/no questions on the terminal."""

    def confirm(self, question: str) -> bool:
        try:
            answer = input(f"{question} (y/n) ")
        except EOFError:
            return False
        return answer.strip().lower().startswith("y")


def read_key(prompt: str = "> ") -> str:
    """Reads one command; end of input counts as the quit key."""
    try:
        line = input(prompt)
    except EOFError:
        return view.KEY_QUIT
    line = line.strip()
    return line[:1].upper() if line else ""

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="2048 console clone with undo, redo and replays",
        prog="cc2048",
    )
    parser.add_argument("replay", nargs="?", help="Replay file to open in replay mode")
    parser.add_argument("--size", type=int, choices=sorted(core.BOARD_VARIANTS), default=core.DEFAULT_DIM,
                        help="Board size (default: %(default)s)")
    parser.add_argument("--replays-dir", default=replay_codec.REPLAYS_FOLDER,
                        help="Folder for saved replays (default: %(default)s)")
    parser.add_argument("--delay", type=int, default=game_session.AUTOPLAY_DELAY_MS,
                        help="Msecs between moves while auto-replaying (default: %(default)s)")
    parser.add_argument("--seed", type=int, help="Seed for the tile generator")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: %(default)s)")
    return parser.parse_args(argv)

def run_replay(sess: Session, replayer: Replayer) -> None:
    """Replay mode loop; returns when the player goes back to the game."""
    while True:
        key = read_key("replay> ")
        if key in (view.KEY_ESCAPE, view.KEY_REPLAY_BACK):
            replayer.stop()
            return
        elif key == view.KEY_REPLAY_NEXT:
            replayer.next()
        elif key == view.KEY_REPLAY_PREV:
            replayer.prev()
        elif key == view.KEY_REPLAY_BEG:
            replayer.begin()
        elif key == view.KEY_REPLAY_END:
            replayer.end()
        elif key == view.KEY_REPLAY_PLAY:
            sess.view.message("Auto-replaying (Ctrl-C to stop)...")
            replayer.autoplay()
        elif key == view.KEY_REPLAY_SAVE:
            replayer.save()
        elif key == view.KEY_REPLAY_LOAD:
            saved = replay_codec.list_replays(sess.replays_dir)
            for path in saved:
                sess.view.message(f"  {path}")
            try:
                fname = input("Replay file: ").strip()
            except EOFError:
                fname = ""
            if fname:
                replayer.load(fname)

def replay(sess: Session) -> None:
    replayer = sess.replayer()
    if replayer.start():
        run_replay(sess, replayer)

def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    text_view = view.TextView()
    try:
        sess = Session(
            dim=args.size,
            view=text_view,
            prompter=ConsolePrompter(),
            rng=random.Random(args.seed),
            replays_dir=args.replays_dir,
            delay_ms=args.delay,
        )
    except (InvalidArgumentError, MemoryError) as e:
        logger.error("cannot start the game: %s", e)
        return 1

    if args.replay:
        replayer = sess.replayer()
        if replayer.load(args.replay):
            run_replay(sess, replayer)

    # Game Loop
    while True:
        text_view.refresh()
        key = read_key()

        outcome = None
        if key in (view.KEY_ESCAPE, view.KEY_QUIT):
            break
        elif key in KEY_TO_DIRECTION:
            outcome = sess.play(KEY_TO_DIRECTION[key])
        elif key == view.KEY_SKIN:
            text_view.message(f"Skin: {text_view.cycle_skin()}")
        elif key == view.KEY_RESET:
            sess.new_game()
        elif key in VARIANT_KEYS:
            sess.new_variant(VARIANT_KEYS[key])
        elif key == view.KEY_UNDO:
            sess.undo()
        elif key == view.KEY_REDO:
            sess.redo()
        elif key == view.KEY_REPLAY:
            replay(sess)
        elif key == view.KEY_HINT:
            sess.hint()
            text_view.message("Hints are not implemented yet.")

        if outcome is not None and outcome.gameover:
            text_view.refresh()
            text_view.beep()
            if outcome.iswin:
                text_view.message("YOU WON!")
            else:
                text_view.message("GAME OVER!")
            if sess.prompter.confirm("Watch a replay of this game?"):
                replay(sess)
            if not sess.new_game():
                break

    return 0


if __name__ == "__main__":
    sys.exit(main())
