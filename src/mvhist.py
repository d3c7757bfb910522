# mvhist.py
# Moves history: the undo, redo and replay stacks of game-state snapshots.

from typing import Iterable, Iterator, List, Optional
import logging

from errors import EmptyStackError, InvalidArgumentError
from gamestate import GameState

logger = logging.getLogger(__name__)

class GSNode:
    """
    One entry of a history stack: an owned game-state snapshot and its
    1-based position counted from the bottom of the stack.

    Nodes are created by HistoryStack.push only. The snapshot must be
    treated as read-only; copy it into a live game-state to use it.
    """
    __slots__ = ("state", "count")

    def __init__(self, state: GameState, count: int):
        self.state = state
        self.count = count

    def __repr__(self):
        return f"GSNode(count={self.count}, score={self.state.score})"


class HistoryStack:
    """A stack of GSNode, every push storing a deep copy of the given state."""

    def __init__(self):
        self._nodes: List[GSNode] = []

    @property
    def count(self) -> int:
        return len(self._nodes)

    def __len__(self):
        return len(self._nodes)

    def __iter__(self) -> Iterator[GSNode]:
        """Iterates from the top node down to the bottom one."""
        return reversed(self._nodes)

    def nodes_bottom_up(self) -> List[GSNode]:
        return list(self._nodes)

    def is_empty(self) -> bool:
        return not self._nodes

    def push(self, state: GameState) -> GSNode:
        if state is None:
            logger.error("HistoryStack.push(): NULL state argument")
            raise InvalidArgumentError("HistoryStack.push", "state is required")
        node = GSNode(state.copy(), len(self._nodes) + 1)
        self._nodes.append(node)
        return node

    def pop(self) -> GameState:
        """Removes the top node and hands back its snapshot."""
        if not self._nodes:
            raise EmptyStackError("pop from an empty history stack")
        return self._nodes.pop().state

    def peek(self) -> Optional[GSNode]:
        return self._nodes[-1] if self._nodes else None

    def node_at(self, count: int) -> GSNode:
        """The node at the given 1-based position from the bottom."""
        if not 1 <= count <= len(self._nodes):
            raise EmptyStackError(f"no node at position {count} (stack holds {len(self._nodes)})")
        return self._nodes[count - 1]

    def contains(self, node: GSNode) -> bool:
        return 1 <= node.count <= len(self._nodes) and self._nodes[node.count - 1] is node

    def clear(self) -> None:
        self._nodes.clear()


class MovesHistory:
    """
    Undo, redo and replay stacks of a game session.

    The undo stack records every played move, oldest at the bottom; its
    first node is the automatic initial spawn. The redo stack keeps undone
    moves, most recently undone on top. The replay stack is built on demand
    as the reverse of the undo stack (earliest move on top, latest at the
    bottom) and is navigated with an opaque cursor (a GSNode).
    """

    def __init__(self):
        self.undo = HistoryStack()
        self.redo = HistoryStack()
        self.replay = HistoryStack()
        self.didundo = False
        self.replay_nmoves = 0
        self.replay_delay = 0

    @classmethod
    def from_states(cls, states: Iterable[GameState], didundo: bool = False) -> "MovesHistory":
        """Builds a history whose undo stack holds the given states, earliest first."""
        mvhist = cls()
        for state in states:
            mvhist.push_undo(state)
        mvhist.didundo = didundo
        return mvhist

    def reset(self) -> None:
        self.undo.clear()
        self.redo.clear()
        self.replay.clear()
        self.didundo = False
        self.replay_nmoves = 0

    # --- undo stack ---

    def push_undo(self, state: GameState) -> None:
        node = self.undo.push(state)
        logger.debug("undo push -> %d nodes (score %d)", node.count, state.score)

    def pop_undo(self) -> Optional[GameState]:
        """Pops the undo stack; an empty stack is reported and left alone."""
        try:
            return self.undo.pop()
        except EmptyStackError:
            logger.debug("pop_undo() on an empty undo stack")
            return None

    def peek_undo_state(self) -> Optional[GameState]:
        node = self.undo.peek()
        return node.state if node is not None else None

    def peek_undo_count(self) -> int:
        return self.undo.count

    def is_empty_undo(self) -> bool:
        return self.undo.is_empty()

    def undo_states(self) -> List[GameState]:
        """Copies of the recorded states, in the order they were played."""
        return [node.state.copy() for node in self.undo.nodes_bottom_up()]

    # --- redo stack ---

    def push_redo(self, state: GameState) -> None:
        node = self.redo.push(state)
        logger.debug("redo push -> %d nodes", node.count)

    def pop_redo(self) -> Optional[GameState]:
        try:
            return self.redo.pop()
        except EmptyStackError:
            logger.debug("pop_redo() on an empty redo stack")
            return None

    def peek_redo_state(self) -> Optional[GameState]:
        node = self.redo.peek()
        return node.state if node is not None else None

    def peek_redo_count(self) -> int:
        return self.redo.count

    def is_empty_redo(self) -> bool:
        return self.redo.is_empty()

    def clear_redo(self) -> None:
        self.redo.clear()

    # --- replay stack ---

    def new_replay_stack(self, delay: int = 0) -> int:
        """
        Duplicates the undo stack in reverse order into a fresh replay stack.
        Returns the number of replayable moves.
        """
        self.free_replay_stack()
        for node in self.undo:
            self.replay.push(node.state)
        self.replay_nmoves = self.replay.count
        self.replay_delay = delay
        logger.debug("replay stack built with %d moves", self.replay_nmoves)
        return self.replay_nmoves

    def free_replay_stack(self) -> None:
        self.replay.clear()
        self.replay_nmoves = 0

    def has_replay(self) -> bool:
        return not self.replay.is_empty()

    def _check_cursor(self, it: GSNode, where: str) -> None:
        if it is None or not self.replay.contains(it):
            logger.error("%s(): cursor does not belong to the replay stack", where)
            raise InvalidArgumentError(where, "cursor does not belong to the replay stack")

    def iter_top(self) -> Optional[GSNode]:
        """Cursor on the top of the replay stack: the earliest move."""
        return self.replay.peek()

    def iter_bottom(self) -> Optional[GSNode]:
        """Cursor on the bottom of the replay stack: the latest move."""
        return self.replay.node_at(1) if self.has_replay() else None

    def iter_down(self, it: GSNode) -> GSNode:
        """One step towards the bottom (a later move); unchanged at the bottom."""
        self._check_cursor(it, "iter_down")
        if it.count == 1:
            return it
        return self.replay.node_at(it.count - 1)

    def iter_up(self, it: GSNode) -> GSNode:
        """One step towards the top (an earlier move); unchanged at the top."""
        self._check_cursor(it, "iter_up")
        if it.count == self.replay_nmoves:
            return it
        return self.replay.node_at(it.count + 1)

    def replay_position(self, it: GSNode) -> int:
        """1-based chronological move number of a replay cursor."""
        self._check_cursor(it, "replay_position")
        return self.replay_nmoves - it.count + 1
