"""
Custom exceptions shared by the engine and the console layer.

Every one of them is recoverable: the engine raises, the coordinating loop decides what to do (re-prompt or stop).
"""

from typing import Any


class GameError(Exception):
    """Base class for anything the rules engine or its boundary layer can reject."""


class IllegalMoveError(GameError):
    """The requested move is not part of the current set of legal moves."""

    def __init__(self, move: Any, reason: str) -> None:
        self.move = move
        self.reason = reason
        super().__init__(f"Illegal move {move}: {reason}")


class GameStateError(GameError):
    """The game is not in a state that allows the requested action."""


class GameAlreadyOverError(GameStateError):
    """No further moves are accepted once the game reached a terminal outcome."""


class InvalidSquareError(GameError):
    """A coordinate outside of the board reached the board model, or a square name could not be parsed."""


class InvalidFENError(GameError):
    """The supplied string cannot be interpreted as FEN."""


class InvalidRequestError(GameError):
    """Player input at the console boundary could not be interpreted."""
