# replay_codec.py
# Saving and loading recorded games (replay files).

from datetime import datetime
from pathlib import Path
from typing import List, Literal, Optional, Union
import logging

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

import core
from errors import InvalidArgumentError, ReplayFileError
from gamestate import GameState, GameStateData
from mvhist import MovesHistory

logger = logging.getLogger(__name__)

REPLAYS_FOLDER = "replays"
REPLAY_FNAME_EXT = ".sav"
REPLAY_FORMAT = "cc2048-replay"
REPLAY_VERSION = 1

PathLike = Union[str, Path]

class ReplayFile(BaseModel):
    """On-disk representation of a recorded game: the undo stack, earliest move first."""
    format: Literal[REPLAY_FORMAT] = Field(default=REPLAY_FORMAT, description="File format tag.")
    version: int = Field(default=REPLAY_VERSION, ge=1, le=REPLAY_VERSION, description="File format version.")
    dim: int = Field(..., description="Dimension N of the N x N board of this game.")
    didundo: bool = Field(default=False, description="Whether best-score tracking was frozen by an undo.")
    moves: List[GameStateData] = Field(..., min_length=1, description="Recorded game-states, oldest first.")

    @field_validator("dim")
    @classmethod
    def _check_dim(cls, dim: int) -> int:
        if dim not in core.BOARD_VARIANTS:
            raise ValueError(f"unsupported board dimension {dim}")
        return dim

    @model_validator(mode="after")
    def _check_moves_dim(self) -> "ReplayFile":
        for i, move in enumerate(self.moves):
            if len(move.board) != self.dim:
                raise ValueError(f"move {i} has a {len(move.board)}x{len(move.board)} board, expected {self.dim}x{self.dim}")
        return self


def default_replay_path(replays_dir: PathLike = REPLAYS_FOLDER, now: Optional[datetime] = None) -> Path:
    """
    Builds a replay file name from the clock, e.g. ``replays/Mon_Jul__7_153012_2014.sav``.
    """
    stamp = (now or datetime.now()).ctime().strip().replace(":", "").replace(" ", "_")
    return Path(replays_dir) / f"{stamp}{REPLAY_FNAME_EXT}"

def list_replays(replays_dir: PathLike = REPLAYS_FOLDER) -> List[Path]:
    folder = Path(replays_dir)
    if not folder.is_dir():
        return []
    return sorted(folder.glob(f"*{REPLAY_FNAME_EXT}"))

def save_to_file(mvhist: MovesHistory, path: PathLike) -> bool:
    """
    Writes the undo stack of the given moves history to a replay file.
    Args:
        mvhist (MovesHistory): The history to save.
        path: Destination file; missing parent folders are created.
    Returns:
        bool: True on success, False if there is nothing to save or the file
              could not be written.
    Raises:
        InvalidArgumentError: If mvhist is None.
    """
    if mvhist is None:
        logger.error("save_to_file(): NULL mvhist argument")
        raise InvalidArgumentError("save_to_file", "mvhist is required")

    states = mvhist.undo_states()
    if not states:
        logger.warning("save_to_file(): nothing recorded, %s not written", path)
        return False

    replay = ReplayFile(
        dim=states[0].board.dim,
        didundo=mvhist.didundo,
        moves=[state.snapshot() for state in states],
    )
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(replay.model_dump_json(indent=1), encoding="utf-8")
    except OSError as e:
        logger.warning("save_to_file(): cannot write %s: %s", target, e)
        return False

    logger.info("saved %d moves to %s", len(states), target)
    return True

def load_from_file(path: PathLike, rng=None) -> MovesHistory:
    """
    Reads a replay file into a brand new moves history.

    The caller's current history is never touched: on success the caller
    replaces it with the returned object and rebinds every holder of it.
    Args:
        path: The replay file to read.
        rng: Optional random generator for the boards of the loaded states.
    Returns:
        MovesHistory: A history whose undo stack holds the recorded moves.
    Raises:
        ReplayFileError: If the file is missing, unreadable or malformed.
    """
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("load_from_file(): cannot read %s: %s", source, e)
        raise ReplayFileError(source, str(e)) from e

    try:
        replay = ReplayFile.model_validate_json(text)
    except ValidationError as e:
        logger.warning("load_from_file(): %s is not a valid replay: %s", source, e)
        raise ReplayFileError(source, f"invalid replay data ({e.error_count()} errors)") from e

    states = [GameState.from_snapshot(move, rng) for move in replay.moves]
    mvhist = MovesHistory.from_states(states, didundo=replay.didundo)
    logger.info("loaded %d moves (%dx%d) from %s", len(states), replay.dim, replay.dim, source)
    return mvhist
