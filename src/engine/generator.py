"""
Pseudo-legal move generation: every move that obeys the pieces' geometry and blocking rules,
without asking whether it leaves your own king in check (that is the job of legality.py).
"""

from typing import Optional, Protocol

from src.engine.board import Board
from src.engine.castling import CastlingRights
from src.engine.moves import MOVEMENT_RULES, Move, castling_moves, en_passant_moves
from src.engine.pieces import Color, PieceType
from src.engine.square import Square


class Position(Protocol):
    """Just the parts of the game state the generator needs"""

    board: Board
    castling_rights: CastlingRights
    en_passant_target: Optional[Square]


def pseudo_legal_moves(state: Position, color: Color) -> list[Move]:
    """
    Candidate moves for the player with the 'color' pieces
    ----

    1. generate candidate moves, using the basic movement rules for all pieces
    2. add candidate castling moves (for the king)
    3. add candidate en passant moves (if the last move was a pawn double step)

    Moves are returned ordered by their starting square (file, then rank). Moves of the same piece keep the order
    in which the movement rule produced them, so the result is reproducible.
    """
    board = state.board
    candidate_moves: list[Move] = []
    for square, piece in board.occupied_squares():
        if piece.color != color:
            continue
        movement_rule = MOVEMENT_RULES[piece.type]
        candidate_moves.extend(movement_rule(square, board, color))

        if piece.type == PieceType.KING:
            candidate_moves.extend(castling_moves(board, color, state.castling_rights))

    if state.en_passant_target is not None:
        candidate_moves.extend(en_passant_moves(state.en_passant_target, color, board))

    # stable sort: the en passant captures get slotted in behind the other moves of the same pawn
    candidate_moves.sort(key=lambda move: move.from_square)
    return candidate_moves
