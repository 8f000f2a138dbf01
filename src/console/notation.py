"""
Text notation of moves: what the player types and what gets printed back.

The engine only deals with structured Move values, everything textual lives here.
"""

import re

from src.console.models import PROMOTION_LETTERS, MoveRequest
from src.core.exceptions import InvalidRequestError
from src.engine.moves import Move
from src.engine.pieces import DEFAULT_PROMOTION, PIECE_TO_FEN, PieceType

# 'e2e4', 'e2-e4', 'e2 e4', 'E2 E4', 'e7e8q', 'e7e8=Q', 'e7-e8 n'
MOVE_PATTERN = re.compile(
    r"^\s*(?P<from_square>[a-zA-Z][0-9])\s*[-\s]?\s*(?P<to_square>[a-zA-Z][0-9])\s*=?\s*(?P<promotion>[a-zA-Z])?\s*$"
)


def parse_move_text(text: str) -> MoveRequest:
    """
    Universal Chess Interface style input:
    ---
    ---
    <from_square><to_square>[promotion], optionally separated by a dash or a space

    examples:
    * "e2e4": move the piece that was on e2 to e4
    * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
    * "e1g1": the king castles king-side

    NOTE: Castling / En Passant flags are set by the engine, the player only names the squares.
    """
    match = MOVE_PATTERN.match(text)
    if match is None:
        raise InvalidRequestError(
            f"Cannot interpret {text.strip()!r} as a move. Use the squares of the move, like e2e4."
        )
    return MoveRequest(
        from_square=match["from_square"],
        to_square=match["to_square"],
        promote_to=match["promotion"],
    )


def parse_promotion(letter: str) -> PieceType:
    """Letter typed when asked what to promote to. Anything unrecognised becomes a queen."""
    return PROMOTION_LETTERS.get(letter.strip().lower(), DEFAULT_PROMOTION)


def move_to_uci(move: Move) -> str:
    """Convert into UCI notation"""
    piece_char = PIECE_TO_FEN[move.promotion] if move.promotion else ""
    return f"{move.from_square.to_algebraic()}{move.to_square.to_algebraic()}{piece_char}"
