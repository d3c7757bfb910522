# core.py
# This file holds the board engine of the game: the tile grid, the slide-and-merge
# transform, random tile generation and the adjacency/room queries.

from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Tuple
import logging
import random

from errors import InvalidArgumentError

logger = logging.getLogger(__name__)

class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    IN_PROGRESS = 1
    GAME_OVER = 2  # Lost
    GAME_WON = 3

class DIRECTION(Enum):
    """Represents the possible move directions (NONE marks "no move played yet")."""
    NONE = 0
    UP = 1
    DOWN = 2
    LEFT = 3
    RIGHT = 4

class BoardVariant(NamedTuple):
    """Per-dimension rules of a board variant."""
    nrandom: int   # tiles spawned after every successful move
    sentinel: int  # tile value that wins the game when produced by a merge

BOARD_DIM_4 = 4
BOARD_DIM_5 = 5
BOARD_DIM_6 = 6
BOARD_DIM_8 = 8
DEFAULT_DIM = BOARD_DIM_4

BOARD_VARIANTS = {
    BOARD_DIM_4: BoardVariant(nrandom=1, sentinel=2048),
    BOARD_DIM_5: BoardVariant(nrandom=2, sentinel=2048),
    BOARD_DIM_6: BoardVariant(nrandom=2, sentinel=2048),
    BOARD_DIM_8: BoardVariant(nrandom=3, sentinel=2048),
}

# Chance for a spawned tile to be a 4 instead of a 2.
SPAWN_FOUR_PROBABILITY = 0.1

class MoveResult(NamedTuple):
    """Outcome of sliding the board in one direction."""
    moved: bool
    score_delta: int
    iswin: bool

def is_tile_value(value: int) -> bool:
    """True for 0 (empty cell) or any positive power of two."""
    return isinstance(value, int) and value >= 0 and (value == 0 or value & (value - 1) == 0)

def _check_dim(dim: int, where: str) -> int:
    if dim not in BOARD_VARIANTS:
        logger.error("%s(): unsupported board dimension %r", where, dim)
        raise InvalidArgumentError(
            where, f"board dimension must be one of {sorted(BOARD_VARIANTS)}, got {dim!r}"
        )
    return dim

# --- Board ---

class Board:
    """
    A dim x dim grid of tile values, 0 meaning an empty cell.

    The board carries the rules of its variant (nrandom and the sentinel value)
    and the random generator used to spawn new tiles.
    """

    def __init__(self, dim: int = DEFAULT_DIM, rng: Optional[random.Random] = None):
        self._dim = _check_dim(dim, "Board")
        self._grid: List[List[int]] = [[0] * dim for _ in range(dim)]
        self.rng = rng if rng is not None else random.Random()

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[int]], rng: Optional[random.Random] = None) -> "Board":
        """
        Builds a board from explicit rows of tile values.
        Args:
            rows: A square matrix of tile values.
            rng: Optional random generator for later tile spawns.
        Returns:
            Board: A new board holding a copy of the given values.
        Raises:
            InvalidArgumentError: If the matrix is not square, its size is not a
                                  supported variant, or a value is not a tile value.
        """
        grid = [list(row) for row in rows]
        dim = get_board_size(grid)
        board = cls(dim, rng)
        board.load_rows(grid)
        return board

    def load_rows(self, rows: Iterable[Iterable[int]]) -> None:
        """
        Overwrites every cell with the given rows, which must match the board dimension.
        Raises:
            InvalidArgumentError: If the rows are not dim x dim or hold a non-tile value.
        """
        grid = [list(row) for row in rows]
        if len(grid) != self._dim or any(len(row) != self._dim for row in grid):
            logger.error("Board.load_rows(): rows do not match a %dx%d board", self._dim, self._dim)
            raise InvalidArgumentError("Board.load_rows", f"expected {self._dim}x{self._dim} rows")
        for row in grid:
            for value in row:
                if not is_tile_value(value):
                    logger.error("Board.load_rows(): invalid tile value %r", value)
                    raise InvalidArgumentError("Board.load_rows", f"{value!r} is not 0 or a power of two")
        self._grid = grid

    @property
    def dim(self) -> int:
        return self._dim

    @property
    def nrandom(self) -> int:
        return BOARD_VARIANTS[self._dim].nrandom

    @property
    def sentinel(self) -> int:
        return BOARD_VARIANTS[self._dim].sentinel

    def get(self, row: int, col: int) -> int:
        return self._grid[row][col]

    def set(self, row: int, col: int, value: int) -> None:
        if not is_tile_value(value):
            logger.error("Board.set(): invalid tile value %r at (%d, %d)", value, row, col)
            raise InvalidArgumentError("Board.set", f"{value!r} is not 0 or a power of two")
        self._grid[row][col] = value

    def rows(self) -> List[List[int]]:
        """Returns a copy of the grid, row by row."""
        return [list(row) for row in self._grid]

    def clear(self) -> None:
        for row in self._grid:
            row[:] = [0] * self._dim

    def copy(self) -> "Board":
        """Deep copy of the tiles. The random generator is shared, it is not game data."""
        twin = Board(self._dim, self.rng)
        twin._grid = self.rows()
        return twin

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return self._dim == other._dim and self._grid == other._grid

    def __repr__(self):
        return f"Board(dim={self._dim}, rows={self._grid!r})"

# --- Board Helper Functions ---

def get_board_size(grid: List[List[int]]) -> int:
    """
    Gets the size (N) of an N x N grid of tile values.
    Args:
        grid (List[List[int]]): The rows of a board.
    Returns:
        int: The dimension of the grid.
    Raises:
        InvalidArgumentError: If the grid is not square, is empty, or its
                              size is not a supported board variant.
    """
    if not grid or not all(len(row) == len(grid) for row in grid):
        raise InvalidArgumentError("get_board_size", "board must be a non-empty square matrix")
    return _check_dim(len(grid), "get_board_size")

def empty_cells(board: Board) -> List[Tuple[int, int]]:
    """
    Get coordinates of empty (0-value) cells in the given board.
    Args:
        board (Board): The board to check.
    Returns:
        List[Tuple[int, int]]: List of (row, col) tuples for empty cells.
    """
    n = board.dim
    return [(row, col) for row in range(n) for col in range(n) if board.get(row, col) == 0]

def tile_sum(board: Board) -> int:
    return sum(sum(row) for row in board.rows())

def max_tile(board: Board) -> int:
    return max(max(row) for row in board.rows())

def has_room(board: Board) -> bool:
    """True if at least one cell of the board is empty."""
    return any(value == 0 for row in board.rows() for value in row)

def has_adjacent(board: Board) -> bool:
    """
    Checks for two horizontally or vertically adjacent cells holding the
    same non-zero value, i.e. a merge is still possible even on a full board.
    """
    n = board.dim
    for r in range(n):
        for c in range(n):
            value = board.get(r, c)
            if value == 0:
                continue
            if c + 1 < n and board.get(r, c + 1) == value:
                return True
            if r + 1 < n and board.get(r + 1, c) == value:
                return True
    return False

def generate_ntiles(board: Board, n: int) -> int:
    """
    Spawns up to n new tiles (90% chance of 2, 10% chance of 4) on random empty cells.
    Args:
        board (Board): The board to spawn tiles on; it is modified in place.
        n (int): How many tiles to spawn.
    Returns:
        int: The number of tiles actually spawned, less than n when the board
             runs out of empty cells.
    Raises:
        InvalidArgumentError: If n is negative.
    """
    if n < 0:
        raise InvalidArgumentError("generate_ntiles", f"cannot spawn a negative number of tiles ({n})")

    spawned = 0
    for _ in range(n):
        cells = empty_cells(board)
        if not cells:
            break
        row, col = board.rng.choice(cells)
        board.set(row, col, 4 if board.rng.random() < SPAWN_FOUR_PROBABILITY else 2)
        spawned += 1

    logger.debug("spawned %d of %d requested tiles", spawned, n)
    return spawned

def resize_and_reset(board: Board, new_dim: int) -> Board:
    """
    Reallocates a board for another variant.

    The returned board is a new object with every cell empty; it shares the
    random generator of the old one. Whoever held the old board must rebind
    to the returned one.
    """
    _check_dim(new_dim, "resize_and_reset")
    logger.debug("resizing board %dx%d -> %dx%d", board.dim, board.dim, new_dim, new_dim)
    return Board(new_dim, board.rng)

# --- Line Manipulation (Core Move Logic Helpers) ---

def _compress_line(line: List[int]) -> List[int]:
    """
    Compresses a single line to the left (moves all non-zero tiles to the "start").
    Args:
        line (List[int]): The line to compress.
    Returns:
        List[int]: The compressed line.
    """
    compressed = [i for i in line if i != 0]
    return compressed + [0] * (len(line) - len(compressed))

def _merge_line(line: List[int], sentinel: int) -> Tuple[List[int], int, bool]:
    """
    Merges adjacent identical numbers in a line (moving left / towards index 0).
    A tile takes part in at most one merge, so [2, 2, 2, 2] becomes [4, 4, 0, 0].
    Args:
        line (List[int]): A compressed line.
        sentinel (int): The winning tile value.
    Returns:
        Tuple[List[int], int, bool]: Merged line, score increase from merges,
                                     and whether a merge produced the sentinel.
    """
    n = len(line)
    score_increase = 0
    iswin = False
    merged_line = [0] * n
    write_idx = 0
    read_idx = 0

    while read_idx < n:
        current_val = line[read_idx]
        if current_val == 0:
            read_idx += 1
            continue

        if read_idx + 1 < n and current_val == line[read_idx + 1]:
            merged_value = current_val * 2
            merged_line[write_idx] = merged_value
            score_increase += merged_value
            if merged_value == sentinel:
                iswin = True
            read_idx += 2 # Skip current and next tile (which was merged)
        else:
            merged_line[write_idx] = current_val
            read_idx += 1
        write_idx += 1

    return merged_line, score_increase, iswin

def _process_single_line_leftwise(line: List[int], sentinel: int) -> Tuple[List[int], int, bool]:
    """
    Applies compress, merge, then compress again to a single line, moving left.
    Returns:
        Tuple[List[int], int, bool]: The processed line, score increase, and the win flag.
    """
    compressed_line = _compress_line(line)
    merged_line, score_delta, iswin = _merge_line(compressed_line, sentinel)
    return _compress_line(merged_line), score_delta, iswin

def _line_coordinates(n: int, direction: DIRECTION) -> List[List[Tuple[int, int]]]:
    """
    Lists the cells of every line of an n x n board, each line ordered from the
    edge the tiles slide towards. Rows serve LEFT/RIGHT, columns serve UP/DOWN.
    """
    if direction is DIRECTION.LEFT:
        return [[(r, c) for c in range(n)] for r in range(n)]
    elif direction is DIRECTION.RIGHT:
        return [[(r, c) for c in reversed(range(n))] for r in range(n)]
    elif direction is DIRECTION.UP:
        return [[(r, c) for r in range(n)] for c in range(n)]
    elif direction is DIRECTION.DOWN:
        return [[(r, c) for r in reversed(range(n))] for c in range(n)]
    raise InvalidArgumentError("move", f"{direction!r} is not a playable direction")

# --- Core Game Move Processing ---

def move(direction: DIRECTION, board: Board) -> MoveResult:
    """
    Slides every line of the board towards the given edge, merging equal tiles.
    Args:
        direction (DIRECTION): UP, DOWN, LEFT or RIGHT.
        board (Board): The board to move; it is modified in place.
    Returns:
        MoveResult: Whether any line changed, the score gained by the merges,
                    and whether a merge produced the sentinel value.
    Raises:
        InvalidArgumentError: If board is None or direction is not playable.
    """
    if board is None:
        logger.error("move(): NULL board argument")
        raise InvalidArgumentError("move", "board is required")
    if not isinstance(direction, DIRECTION):
        logger.error("move(): invalid direction %r", direction)
        raise InvalidArgumentError("move", f"{direction!r} is not a DIRECTION")

    moved = False
    iswin = False
    score_gained = 0
    for cells in _line_coordinates(board.dim, direction):
        line = [board.get(r, c) for r, c in cells]
        new_line, score_from_line, line_won = _process_single_line_leftwise(line, board.sentinel)
        if new_line != line:
            moved = True
            for (r, c), value in zip(cells, new_line):
                board.set(r, c, value)
        score_gained += score_from_line
        iswin = iswin or line_won

    logger.debug("move %s: moved=%s score+=%d win=%s", direction.name, moved, score_gained, iswin)
    return MoveResult(moved, score_gained, iswin)

def move_up(board: Board) -> MoveResult:
    return move(DIRECTION.UP, board)

def move_down(board: Board) -> MoveResult:
    return move(DIRECTION.DOWN, board)

def move_left(board: Board) -> MoveResult:
    return move(DIRECTION.LEFT, board)

def move_right(board: Board) -> MoveResult:
    return move(DIRECTION.RIGHT, board)

# --- Game State Checks ---

def is_game_over(board: Board, iswin: bool = False) -> bool:
    """
    A game is over either when a move produced the sentinel value, or when the
    board is full and no two adjacent tiles are equal.
    """
    return iswin or not (has_adjacent(board) or has_room(board))

def determine_game_status(board: Board, iswin: bool = False) -> GameProgressState:
    """
    Determines the current progress state of the game based on the board.
    Args:
        board (Board): The current game board.
        iswin (bool): Whether the last move produced the sentinel value.
    Returns:
        GameProgressState: The current state (IN_PROGRESS, GAME_WON, GAME_OVER).
    """
    if iswin:
        return GameProgressState.GAME_WON
    if is_game_over(board):
        return GameProgressState.GAME_OVER
    return GameProgressState.IN_PROGRESS
