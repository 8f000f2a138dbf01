"""Text rendering of the board and of the game's progress"""

from src.engine.board import Board
from src.engine.game import GameState
from src.engine.legality import GameOutcome
from src.engine.pieces import Color, Piece, PieceType
from src.engine.square import BOARD_DIMENSIONS, Square

EMPTY_SQUARE = "."

UNICODE_PIECES: dict[tuple[Color, PieceType], str] = {
    (Color.WHITE, PieceType.PAWN): "♙",
    (Color.WHITE, PieceType.KNIGHT): "♘",
    (Color.WHITE, PieceType.BISHOP): "♗",
    (Color.WHITE, PieceType.ROOK): "♖",
    (Color.WHITE, PieceType.QUEEN): "♕",
    (Color.WHITE, PieceType.KING): "♔",
    (Color.BLACK, PieceType.PAWN): "♟",
    (Color.BLACK, PieceType.KNIGHT): "♞",
    (Color.BLACK, PieceType.BISHOP): "♝",
    (Color.BLACK, PieceType.ROOK): "♜",
    (Color.BLACK, PieceType.QUEEN): "♛",
    (Color.BLACK, PieceType.KING): "♚",
}

OUTCOME_MESSAGES: dict[GameOutcome, str] = {
    GameOutcome.STALEMATE: "Stalemate! The game is a draw.",
    GameOutcome.DRAW_FIFTY_MOVE: "Draw by the fifty-move rule.",
    GameOutcome.DRAW_REPETITION: "Draw by threefold repetition.",
    GameOutcome.DRAW_INSUFFICIENT_MATERIAL: "Draw: neither side has enough material to checkmate.",
}


def piece_glyph(piece: Piece, unicode: bool = False) -> str:
    if unicode:
        return UNICODE_PIECES[(piece.color, piece.type)]
    return piece.to_fen()


def render_board(board: Board, perspective: Color = Color.WHITE, unicode: bool = False) -> str:
    """
    Board as text, facing the given player (their pieces at the bottom).
    File letters above and below, rank numbers left and right.
    """
    num_files, num_ranks = BOARD_DIMENSIONS
    files = list(range(num_files))
    ranks = list(range(num_ranks - 1, -1, -1))
    if perspective == Color.BLACK:
        files.reverse()
        ranks.reverse()

    file_labels = "  " + " ".join(Square(file, 0).to_algebraic()[0] for file in files)
    lines = [file_labels]
    for rank in ranks:
        cells = []
        for file in files:
            piece = board.occupant(Square(file, rank))
            cells.append(piece_glyph(piece, unicode) if piece else EMPTY_SQUARE)
        lines.append(f"{rank + 1} {' '.join(cells)} {rank + 1}")
    lines.append(file_labels)
    return "\n".join(lines)


def describe_turn(state: GameState) -> str:
    return f"Move {state.fullmove_number}: {state.active_color.name.lower()} to move."


def describe_outcome(state: GameState) -> str:
    """Message for the players after a move (empty when there is nothing to report)"""
    mover = state.active_color.name.capitalize()
    if state.outcome == GameOutcome.CHECK:
        return f"{mover} is in check!"
    if state.outcome == GameOutcome.CHECKMATE:
        # for the type checker: a checkmate always has a winner
        assert state.winner is not None
        return f"Checkmate! {state.winner.name.capitalize()} wins."
    return OUTCOME_MESSAGES.get(state.outcome, "")


def describe_captured(state: GameState, unicode: bool = False) -> str:
    """Material taken so far, grouped by the side that lost it (empty when nothing was taken yet)"""
    lines = []
    for color in Color:
        lost = [piece_glyph(piece, unicode) for piece in state.captured if piece.color == color]
        if lost:
            lines.append(f"{color.name.capitalize()} lost: {' '.join(lost)}")
    return "\n".join(lines)
