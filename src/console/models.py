"""Requests and options models for the console boundary (validated with pydantic before reaching the engine)"""

from string import ascii_letters, digits
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.engine.fen import STARTING_FEN, is_valid_fen
from src.engine.moves import Move
from src.engine.pieces import FEN_TO_PIECE, PROMOTION_OPTIONS, PieceType
from src.engine.square import Square

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

PROMOTION_LETTERS: dict[str, PieceType] = {
    letter: piece_type
    for letter, piece_type in FEN_TO_PIECE.items()
    if piece_type in PROMOTION_OPTIONS
}


# --- REQUEST MODELS ---
class MoveRequest(BaseModel):
    """A move as typed by a player: two square names and an optional promotion letter."""

    from_square: str
    to_square: str
    promote_to: Optional[str] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        def _is_algebraic_notation(value: str) -> bool:
            if len(value) != 2:
                return False

            first_character = value[0]
            second_character = value[1]
            if not (first_character in ascii_letters and second_character in digits):
                return False
            return True

        value = value.strip().lower()
        if not _is_algebraic_notation(value):
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        value = value.strip().lower()
        if value not in PROMOTION_LETTERS:
            raise InvalidRequestError(
                f"Cannot promote to {value!r}. Pick one of {', '.join(PROMOTION_LETTERS)}."
            )
        return value

    def to_move(self) -> Move:
        """Structured move for the engine. Off-board squares (like 'z9') are rejected here."""
        from_square = Square.from_algebraic(self.from_square)
        to_square = Square.from_algebraic(self.to_square)
        promotion = PROMOTION_LETTERS[self.promote_to] if self.promote_to else None
        return Move(from_square, to_square, promotion=promotion)


# --- OPTIONS ---
class GameOptions(BaseModel):
    """How to run a console game"""

    starting_fen: str = STARTING_FEN
    flip_board: bool = False
    unicode_pieces: bool = False
    log_level: LogLevel = "WARNING"

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_fen(value):
            raise InvalidRequestError(f"Cannot interpret {value!r} as a FEN string.")
        return value
