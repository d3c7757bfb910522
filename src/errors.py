# errors.py
# Exception types shared by the board engine, the moves history and the replay codec.


class GameError(Exception):
    """Base class for every error raised by the game engine."""


class InvalidArgumentError(GameError, ValueError):
    """A required argument is missing or out of its allowed domain."""

    def __init__(self, where: str, detail: str):
        self.where = where
        self.detail = detail
        super().__init__(f"{where}(): {detail}")


class EmptyStackError(GameError, IndexError):
    """Pop or peek on a history stack that holds no nodes."""


class ReplayFileError(GameError):
    """A replay file could not be read or does not describe a valid game."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot load replay '{path}': {reason}")
