# gamestate.py
# The game-state: a board together with the score, the best score and the previous move.

from typing import List, Optional
import logging
import random

from pydantic import BaseModel, Field, field_serializer, field_validator

import core
from errors import InvalidArgumentError

logger = logging.getLogger(__name__)

class GameStateData(BaseModel):
    """Serializable snapshot of a game-state, as stored in replay files."""
    board: List[List[int]] = Field(..., description="The N x N game board, represented as a list of lists.")
    score: int = Field(..., ge=0, description="Score of the game at this point.")
    bestscore: int = Field(..., ge=0, description="Best score known at this point.")
    prevmove: core.DIRECTION = Field(
        default=core.DIRECTION.NONE,
        description="Direction of the move that produced this state (NONE, UP, DOWN, LEFT, RIGHT)."
    )

    @field_validator("board")
    @classmethod
    def _check_board(cls, rows: List[List[int]]) -> List[List[int]]:
        core.get_board_size(rows)
        for row in rows:
            for value in row:
                if not core.is_tile_value(value):
                    raise ValueError(f"{value!r} is not 0 or a power of two")
        return rows

    @field_validator("prevmove", mode="before")
    @classmethod
    def _direction_from_name(cls, value):
        if isinstance(value, str):
            try:
                return core.DIRECTION[value.upper()]
            except KeyError:
                raise ValueError(f"unknown direction {value!r}") from None
        return value

    @field_serializer("prevmove")
    def _direction_to_name(self, value: core.DIRECTION) -> str:
        return value.name


class GameState:
    """
    Owns exactly one board plus the score context of a game.

    The driver mutates a game-state in place; the moves history only ever
    stores deep copies of it.
    """

    def __init__(self, dim: int = core.DEFAULT_DIM, rng: Optional[random.Random] = None):
        self.board = core.Board(dim, rng)
        self.score = 0
        self.bestscore = 0
        self.prevmove = core.DIRECTION.NONE

    def reset(self) -> None:
        """Starts a new game on the current variant: fresh tiles, score 0. The best score is kept."""
        self.board.clear()
        core.generate_ntiles(self.board, 2 * self.board.nrandom)
        self.score = 0
        self.prevmove = core.DIRECTION.NONE
        logger.debug("game-state reset on a %dx%d board", self.board.dim, self.board.dim)

    def resize(self, new_dim: int) -> core.Board:
        """
        Switches to another variant: the board is replaced by an empty one of
        the new dimension and the score is cleared. Returns the new board,
        which every holder of the old board must rebind to.
        """
        self.board = core.resize_and_reset(self.board, new_dim)
        self.score = 0
        self.prevmove = core.DIRECTION.NONE
        return self.board

    def copy(self) -> "GameState":
        twin = GameState.__new__(GameState)
        twin.board = self.board.copy()
        twin.score = self.score
        twin.bestscore = self.bestscore
        twin.prevmove = self.prevmove
        return twin

    def copy_from(self, other: "GameState") -> None:
        """
        Overwrites this game-state with the values of another one.
        The board object is replaced when the dimensions differ.
        """
        if other is None:
            logger.error("GameState.copy_from(): NULL source argument")
            raise InvalidArgumentError("GameState.copy_from", "source game-state is required")
        if self.board.dim == other.board.dim:
            self.board.load_rows(other.board.rows())
        else:
            self.board = core.Board.from_rows(other.board.rows(), self.board.rng)
        self.score = other.score
        self.bestscore = other.bestscore
        self.prevmove = other.prevmove

    def snapshot(self) -> GameStateData:
        return GameStateData(
            board=self.board.rows(),
            score=self.score,
            bestscore=self.bestscore,
            prevmove=self.prevmove,
        )

    @classmethod
    def from_snapshot(cls, data: GameStateData, rng: Optional[random.Random] = None) -> "GameState":
        state = cls.__new__(cls)
        state.board = core.Board.from_rows(data.board, rng)
        state.score = data.score
        state.bestscore = data.bestscore
        state.prevmove = data.prevmove
        return state

    def __eq__(self, other):
        if not isinstance(other, GameState):
            return NotImplemented
        return (
            self.board == other.board
            and self.score == other.score
            and self.bestscore == other.bestscore
            and self.prevmove == other.prevmove
        )

    def __repr__(self):
        return (
            f"GameState(score={self.score}, bestscore={self.bestscore}, "
            f"prevmove={self.prevmove.name}, board={self.board!r})"
        )
