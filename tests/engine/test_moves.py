"""Unit tests for /src/engine/moves.py"""

import pytest

from src.engine.board import Board
from src.engine.castling import CastlingDirection, castling_from_fen
from src.engine.moves import (
    ATTACK_RULES,
    MOVEMENT_RULES,
    Move,
    candidate_bishop_moves,
    candidate_king_moves,
    candidate_knight_moves,
    candidate_pawn_moves,
    candidate_queen_moves,
    candidate_rook_moves,
    castling_moves,
    en_passant_capture_square,
    en_passant_moves,
    is_attacked_by_bishop,
    is_attacked_by_king,
    is_attacked_by_knight,
    is_attacked_by_pawn,
    is_attacked_by_queen,
    is_attacked_by_rook,
    is_square_attacked,
    make_move_on_board,
)
from src.engine.pieces import PROMOTION_OPTIONS, Color, Piece, PieceType
from src.engine.square import Square

EMPTY_FEN = "/".join(["8"] * 8)


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


def targets(moves: list[Move]) -> set[str]:
    return {move.to_square.to_algebraic() for move in moves}


def board_with(*placements: tuple[str, str]) -> Board:
    """Build a board from (fen character, square) pairs"""
    board = Board.from_fen(EMPTY_FEN)
    for fen_char, square in placements:
        board.place(sq(square), Piece.from_fen(fen_char))
    return board


def test_move_string() -> None:
    assert str(Move(sq("e2"), sq("e4"))) == "e2e4"


def test_move_equality_includes_flags() -> None:
    plain = Move(sq("e1"), sq("g1"))
    castle = Move(sq("e1"), sq("g1"), is_castle=True)
    assert plain != castle
    assert plain == Move(sq("e1"), sq("g1"))


def test_every_piece_type_has_rules() -> None:
    assert set(MOVEMENT_RULES) == set(PieceType)
    assert set(ATTACK_RULES) == set(PieceType)


# --- PAWNS ---
def test_pawn_on_start_rank_can_double_step() -> None:
    board = board_with(("P", "e2"))
    assert targets(candidate_pawn_moves(sq("e2"), board, Color.WHITE)) == {"e3", "e4"}

    board = board_with(("p", "d7"))
    assert targets(candidate_pawn_moves(sq("d7"), board, Color.BLACK)) == {"d6", "d5"}


def test_pawn_off_start_rank_single_step_only() -> None:
    board = board_with(("P", "e3"))
    assert targets(candidate_pawn_moves(sq("e3"), board, Color.WHITE)) == {"e4"}


@pytest.mark.parametrize("blocker", ["e3", "e4"])
def test_pawn_push_is_blocked(blocker: str) -> None:
    board = board_with(("P", "e2"), ("n", blocker))
    moves = candidate_pawn_moves(sq("e2"), board, Color.WHITE)
    expected = set() if blocker == "e3" else {"e3"}
    assert targets(moves) == expected


def test_pawn_captures_diagonally_only() -> None:
    board = board_with(("P", "e4"), ("p", "d5"), ("p", "e5"), ("P", "f5"))
    moves = candidate_pawn_moves(sq("e4"), board, Color.WHITE)
    assert moves == [Move(sq("e4"), sq("d5"), is_capture=True)]


def test_pawn_promotions() -> None:
    board = board_with(("p", "b2"), ("R", "a1"))
    moves = candidate_pawn_moves(sq("b2"), board, Color.BLACK)
    assert len(moves) == 2 * len(PROMOTION_OPTIONS)
    assert {move.promotion for move in moves} == set(PROMOTION_OPTIONS)
    assert all(move.is_capture for move in moves if move.to_square == sq("a1"))


# --- OTHER PIECES ---
def test_knight_jumps_over_pieces() -> None:
    board = Board.from_fen("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR")
    assert targets(candidate_knight_moves(sq("g1"), board, Color.WHITE)) == {"f3", "h3"}


def test_knight_in_the_corner() -> None:
    board = board_with(("N", "a1"), ("P", "b3"), ("p", "c2"))
    moves = candidate_knight_moves(sq("a1"), board, Color.WHITE)
    assert moves == [Move(sq("a1"), sq("c2"), is_capture=True)]


def test_rook_raycasting_stops_at_blockers() -> None:
    board = board_with(("R", "d4"), ("P", "d6"), ("p", "f4"))
    moves = candidate_rook_moves(sq("d4"), board, Color.WHITE)
    assert targets(moves) == {"d5", "d3", "d2", "d1", "e4", "f4", "c4", "b4", "a4"}
    captures = [move for move in moves if move.is_capture]
    assert captures == [Move(sq("d4"), sq("f4"), is_capture=True)]


def test_bishop_moves() -> None:
    board = board_with(("b", "c1"), ("p", "e3"))
    assert targets(candidate_bishop_moves(sq("c1"), board, Color.BLACK)) == {"d2", "b2", "a3"}


def test_queen_combines_rook_and_bishop() -> None:
    board = board_with(("Q", "d4"))
    queen_targets = targets(candidate_queen_moves(sq("d4"), board, Color.WHITE))
    rook_targets = targets(candidate_rook_moves(sq("d4"), board, Color.WHITE))
    bishop_targets = targets(candidate_bishop_moves(sq("d4"), board, Color.WHITE))
    assert queen_targets == rook_targets | bishop_targets
    assert len(queen_targets) == 27


def test_king_single_steps() -> None:
    board = board_with(("K", "a1"), ("P", "a2"))
    assert targets(candidate_king_moves(sq("a1"), board, Color.WHITE)) == {"b1", "b2"}


# --- ATTACKS ---
@pytest.mark.parametrize(
    "placements, square, by_color, attacked",
    [
        ([("P", "d4")], "e5", Color.WHITE, True),
        ([("P", "d4")], "d5", Color.WHITE, False),
        ([("P", "d4")], "c3", Color.WHITE, False),
        ([("p", "d5")], "e4", Color.BLACK, True),
        ([("p", "d5")], "e6", Color.BLACK, False),
    ],
)
def test_is_attacked_by_pawn(placements, square: str, by_color: Color, attacked: bool) -> None:
    assert is_attacked_by_pawn(sq(square), by_color, board_with(*placements)) is attacked


def test_is_attacked_by_knight() -> None:
    board = board_with(("n", "g8"))
    assert is_attacked_by_knight(sq("f6"), Color.BLACK, board)
    assert not is_attacked_by_knight(sq("g6"), Color.BLACK, board)
    assert not is_attacked_by_knight(sq("f6"), Color.WHITE, board)


def test_sliding_attacks_are_blocked() -> None:
    board = board_with(("R", "a1"), ("B", "c1"), ("Q", "h8"), ("n", "e5"))
    assert is_attacked_by_rook(sq("a8"), Color.WHITE, board)
    assert not is_attacked_by_rook(sq("d1"), Color.WHITE, board)
    assert is_attacked_by_bishop(sq("e3"), Color.WHITE, board)
    assert is_attacked_by_queen(sq("e5"), Color.WHITE, board)
    assert not is_attacked_by_queen(sq("d4"), Color.WHITE, board)


def test_is_attacked_by_king() -> None:
    board = board_with(("k", "e8"))
    assert is_attacked_by_king(sq("d7"), Color.BLACK, board)
    assert not is_attacked_by_king(sq("e6"), Color.BLACK, board)


def test_is_square_attacked_combines_rules() -> None:
    board = board_with(("n", "b8"), ("P", "h2"))
    assert is_square_attacked(sq("c6"), Color.BLACK, board)
    assert is_square_attacked(sq("g3"), Color.WHITE, board)
    assert not is_square_attacked(sq("h3"), Color.WHITE, board)


# --- CASTLING ---
def test_castling_moves_all_available(castling_board: Board) -> None:
    rights = castling_from_fen("KQkq")
    white = castling_moves(castling_board, Color.WHITE, rights)
    assert white == [
        Move(sq("e1"), sq("g1"), is_castle=True),
        Move(sq("e1"), sq("c1"), is_castle=True),
    ]
    assert targets(castling_moves(castling_board, Color.BLACK, rights)) == {"g8", "c8"}


def test_castling_requires_rights(castling_board: Board) -> None:
    rights = castling_from_fen("Qk")
    assert targets(castling_moves(castling_board, Color.WHITE, rights)) == {"c1"}
    assert targets(castling_moves(castling_board, Color.BLACK, rights)) == {"g8"}


def test_castling_requires_unmoved_pieces(castling_board: Board) -> None:
    castling_board.occupant(sq("h1")).has_moved = True
    rights = castling_from_fen("KQkq")
    assert targets(castling_moves(castling_board, Color.WHITE, rights)) == {"c1"}


def test_castling_path_must_be_empty(castling_board: Board) -> None:
    # b1 is not crossed by the king but still blocks the rook
    castling_board.place(sq("b1"), Piece.from_fen("N"))
    rights = castling_from_fen("KQkq")
    assert targets(castling_moves(castling_board, Color.WHITE, rights)) == {"g1"}


@pytest.mark.parametrize(
    "attacker_square, expected",
    [
        ("e5", set()),  # in check
        ("f5", {"c1"}),  # king passes f1
        ("g5", {"c1"}),  # king lands on g1
        ("b5", {"g1", "c1"}),  # b1 may be attacked
        ("d5", {"g1"}),
    ],
)
def test_castling_king_transit_must_be_safe(
    castling_board: Board, attacker_square: str, expected: set[str]
) -> None:
    castling_board.place(sq(attacker_square), Piece.from_fen("r"))
    rights = {direction: True for direction in CastlingDirection}
    assert targets(castling_moves(castling_board, Color.WHITE, rights)) == expected


# --- EN PASSANT ---
def test_en_passant_moves() -> None:
    board = board_with(("P", "e5"), ("p", "d5"), ("P", "c5"))
    moves = en_passant_moves(sq("d6"), Color.WHITE, board)
    assert moves == [
        Move(sq("c5"), sq("d6"), is_capture=True, is_en_passant=True),
        Move(sq("e5"), sq("d6"), is_capture=True, is_en_passant=True),
    ]


def test_en_passant_on_the_edge() -> None:
    board = board_with(("p", "b4"), ("P", "a4"))
    moves = en_passant_moves(sq("a3"), Color.BLACK, board)
    assert moves == [Move(sq("b4"), sq("a3"), is_capture=True, is_en_passant=True)]


def test_en_passant_requires_the_passed_pawn() -> None:
    board = board_with(("P", "e5"))
    assert en_passant_moves(sq("d6"), Color.WHITE, board) == []


def test_en_passant_capture_square() -> None:
    move = Move(sq("e5"), sq("d6"), is_capture=True, is_en_passant=True)
    assert en_passant_capture_square(move) == sq("d5")


# --- MAKING MOVES ---
def test_make_simple_move() -> None:
    board = board_with(("N", "g1"), ("p", "f3"))
    captured = make_move_on_board(board, Move(sq("g1"), sq("f3"), is_capture=True))
    assert captured == Piece.from_fen("p")
    assert board.occupant(sq("f3")).is_a(PieceType.KNIGHT, Color.WHITE)


def test_make_castling_move(castling_board: Board) -> None:
    captured = make_move_on_board(castling_board, Move(sq("e8"), sq("c8"), is_castle=True))
    assert captured is None
    assert castling_board.to_fen() == "2kr3r/8/8/8/8/8/8/R3K2R"


def test_make_castling_move_needs_castling_squares(castling_board: Board) -> None:
    with pytest.raises(ValueError):
        make_move_on_board(castling_board, Move(sq("e1"), sq("f1"), is_castle=True))


def test_make_en_passant_move() -> None:
    board = board_with(("P", "e5"), ("p", "d5"))
    captured = make_move_on_board(
        board, Move(sq("e5"), sq("d6"), is_capture=True, is_en_passant=True)
    )
    assert captured == Piece.from_fen("p")
    assert board.to_fen() == "8/8/3P4/8/8/8/8/8"


def test_make_promotion_move() -> None:
    board = board_with(("P", "g7"))
    make_move_on_board(board, Move(sq("g7"), sq("g8"), promotion=PieceType.KNIGHT))
    assert board.to_fen() == "6N1/8/8/8/8/8/8/8"
