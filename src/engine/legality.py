"""
Legality filter and game outcome detection.

A pseudo-legal move is legal when playing it does not leave (or put) your own king in check.
Every candidate is tried on a copy of the board: the live game state is never touched.
"""

from enum import Enum, auto
from typing import Optional, Protocol

from src.engine.board import Board
from src.engine.castling import CastlingRights
from src.engine.generator import pseudo_legal_moves
from src.engine.moves import Move, is_square_attacked, make_move_on_board
from src.engine.pieces import Color, PieceType
from src.engine.square import Square

# 50 moves by each player without a capture or pawn move
FIFTY_MOVE_HALFMOVES = 100
REPETITION_LIMIT = 3

MINOR_PIECES = (PieceType.BISHOP, PieceType.KNIGHT)


class GameOutcome(Enum):
    ONGOING = auto()
    CHECK = auto()
    CHECKMATE = auto()
    STALEMATE = auto()
    DRAW_FIFTY_MOVE = auto()
    DRAW_REPETITION = auto()
    DRAW_INSUFFICIENT_MATERIAL = auto()

    @property
    def is_terminal(self) -> bool:
        return self not in (GameOutcome.ONGOING, GameOutcome.CHECK)

    @property
    def is_draw(self) -> bool:
        return self in (
            GameOutcome.STALEMATE,
            GameOutcome.DRAW_FIFTY_MOVE,
            GameOutcome.DRAW_REPETITION,
            GameOutcome.DRAW_INSUFFICIENT_MATERIAL,
        )


class Position(Protocol):
    """Just the parts of the game state needed to judge a position"""

    board: Board
    active_color: Color
    castling_rights: CastlingRights
    en_passant_target: Optional[Square]
    halfmove_clock: int
    position_history: list[str]

    def fingerprint(self) -> str: ...


def is_in_check(board: Board, color: Color) -> bool:
    """Is the king of this color attacked by any of the opponent's pieces?"""
    king_square = board.king_square(color)
    if king_square is None:
        # positions without a king (only in tests / puzzles) cannot be in check
        return False
    return is_square_attacked(king_square, color.opponent, board)


def leaves_king_in_check(board: Board, move: Move, color: Color) -> bool:
    """Return True if the move puts (or leaves) you in check

    plan:
    1. Copy the board
    2. make the candidate move
    3. determine if king is in check on the new board
    """
    scratch_board = board.copy()
    make_move_on_board(scratch_board, move)
    return is_in_check(scratch_board, color)


def legal_moves(state: Position, color: Optional[Color] = None) -> list[Move]:
    """
    List of legal moves for the player with the 'color' pieces (the player to move if not specified)
    ----

    Pseudo-legal moves, minus those that would put (or leave) you in check. Order of the pseudo-legal moves is kept.
    """
    color = color or state.active_color
    return [
        move
        for move in pseudo_legal_moves(state, color)
        if not leaves_king_in_check(state.board, move, color)
    ]


def has_legal_move(state: Position, color: Color) -> bool:
    return any(
        not leaves_king_in_check(state.board, move, color)
        for move in pseudo_legal_moves(state, color)
    )


# --- CHECKS FOR ENDING THE GAME ---
def is_checkmate(state: Position) -> bool:
    color = state.active_color
    return is_in_check(state.board, color) and not has_legal_move(state, color)


def is_stalemate(state: Position) -> bool:
    color = state.active_color
    return not is_in_check(state.board, color) and not has_legal_move(state, color)


def is_fifty_move_draw(state: Position) -> bool:
    """100 consecutive half-moves without a capture or a pawn move"""
    return state.halfmove_clock >= FIFTY_MOVE_HALFMOVES


def is_threefold_repetition(state: Position) -> bool:
    """Check if the current position occurs (at least) 3 times in the history"""
    return state.position_history.count(state.fingerprint()) >= REPETITION_LIMIT


def _square_shade(square: Square) -> int:
    return (square.file + square.rank) % 2


def is_insufficient_material(board: Board) -> bool:
    """K vs K, K+B vs K, K+N vs K, K+B vs K+B (bishops on the same square color)."""
    non_kings = [
        (square, piece)
        for square, piece in board.occupied_squares()
        if piece.type != PieceType.KING
    ]

    # K vs K
    if not non_kings:
        return True

    # K+minor vs K
    if len(non_kings) == 1:
        _, piece = non_kings[0]
        return piece.type in MINOR_PIECES

    # K+B vs K+B with same-colour bishops
    if len(non_kings) == 2:
        (square_1, piece_1), (square_2, piece_2) = non_kings
        both_bishops = piece_1.type == piece_2.type == PieceType.BISHOP
        return (
            both_bishops
            and piece_1.color != piece_2.color
            and _square_shade(square_1) == _square_shade(square_2)
        )

    return False


def game_outcome(state: Position) -> GameOutcome:
    """
    Judge the position for the player to move
    ----

    1. No legal moves: checkmate if in check, stalemate otherwise.
    2. Draw rules (fifty-move, threefold repetition, insufficient material) take precedence over a check.
    3. Otherwise the game goes on (possibly with the king in check).
    """
    color = state.active_color
    in_check = is_in_check(state.board, color)

    if not has_legal_move(state, color):
        return GameOutcome.CHECKMATE if in_check else GameOutcome.STALEMATE

    if is_fifty_move_draw(state):
        return GameOutcome.DRAW_FIFTY_MOVE

    if is_threefold_repetition(state):
        return GameOutcome.DRAW_REPETITION

    if is_insufficient_material(state.board):
        return GameOutcome.DRAW_INSUFFICIENT_MATERIAL

    return GameOutcome.CHECK if in_check else GameOutcome.ONGOING
