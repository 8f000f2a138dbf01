"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures required for testing multiple layers.
"""

from typing import Callable

import pytest

from src.engine.board import Board
from src.engine.game import GameState
from src.engine.moves import Move
from src.engine.pieces import FEN_TO_PIECE, Piece
from src.engine.square import Square

EMPTY_FEN = "/".join(["8"] * 8)


@pytest.fixture
def empty_board() -> Board:
    return Board.from_fen(EMPTY_FEN)


@pytest.fixture
def castling_board() -> Board:
    """Create a board with only the Kings and the Rooks. Ready to perform any castling move (if allowed)."""
    board = Board.from_fen(EMPTY_FEN)
    for fen_char, algebraic in [
        ("K", "e1"),
        ("R", "a1"),
        ("R", "h1"),
        ("k", "e8"),
        ("r", "a8"),
        ("r", "h8"),
    ]:
        board.place(Square.from_algebraic(algebraic), Piece.from_fen(fen_char))
    return board


@pytest.fixture
def kings_only_board() -> Board:
    """Only the kings, on their canonical starting squares."""
    board = Board.from_fen(EMPTY_FEN)
    board.place(Square.from_algebraic("e1"), Piece.from_fen("K"))
    board.place(Square.from_algebraic("e8"), Piece.from_fen("k"))
    return board


@pytest.fixture
def make_move() -> Callable[[str], Move]:
    """Call the inner function with UCI text ('e2e4', 'e7e8q') to get the requested Move"""

    def _make_move(uci: str) -> Move:
        promotion = FEN_TO_PIECE[uci[4]] if len(uci) == 5 else None
        return Move(
            Square.from_algebraic(uci[:2]),
            Square.from_algebraic(uci[2:4]),
            promotion=promotion,
        )

    return _make_move


@pytest.fixture
def play(make_move: Callable[[str], Move]) -> Callable[[GameState, list[str]], GameState]:
    """Call the inner function with a state and a sequence of UCI moves to play them one after the other"""

    def _play(state: GameState, moves: list[str]) -> GameState:
        for uci in moves:
            state = state.apply_move(make_move(uci))
        return state

    return _play
