"""
The Board is a typed 8x8 grid: 64 direct-indexed slots holding at most one piece each.

It knows nothing about chess rules (no legality, no turns). Mutations are visible immediately to everyone holding the board,
so anything that wants to look ahead must work on a `copy()`.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Iterable, Optional, Self

from src.core.exceptions import InvalidSquareError
from src.engine.pieces import Color, Piece, PieceType
from src.engine.square import ALL_SQUARES, BOARD_DIMENSIONS, Square

NUM_SLOTS = BOARD_DIMENSIONS[0] * BOARD_DIMENSIONS[1]

BACK_RANK: list[PieceType] = [
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
]

# Pawns stand on the 2nd (white) / 7th (black) rank at the start of the game
PAWN_START_RANK: dict[Color, int] = {Color.WHITE: 1, Color.BLACK: BOARD_DIMENSIONS[1] - 2}


def _empty_slots() -> list[Optional[Piece]]:
    return [None] * NUM_SLOTS


@dataclass
class Board:
    slots: list[Optional[Piece]] = field(default_factory=_empty_slots)

    @classmethod
    def empty(cls) -> Self:
        return cls()

    @classmethod
    def initial(cls) -> Self:
        """Standard starting arrangement."""
        board = cls()
        for file, piece_type in enumerate(BACK_RANK):
            board.place(Square(file, 0), Piece(piece_type, Color.WHITE))
            board.place(Square(file, PAWN_START_RANK[Color.WHITE]), Piece(PieceType.PAWN, Color.WHITE))
            board.place(Square(file, PAWN_START_RANK[Color.BLACK]), Piece(PieceType.PAWN, Color.BLACK))
            board.place(Square(file, BOARD_DIMENSIONS[1] - 1), Piece(piece_type, Color.BLACK))
        return board

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the first part of a FEN string (the piece placement).

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.

        NOTE: FEN does not record whether a piece moved. Pawns away from their starting rank are marked as moved,
        kings and rooks are trusted to the castling rights that come with the rest of the FEN string.
        """
        board = cls()
        fen_by_ranks = fen_str.split("/")
        for rank_idx, fen_one_rank in enumerate(fen_by_ranks):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - 1 - rank_idx
            # ... but the first character is the a-file, so reads in normal direction
            file = 0
            for character in fen_one_rank:
                if character.isalpha():
                    # simple case: a letter directly denotes the piece that should be created
                    piece = Piece.from_fen(character)
                    if piece.type == PieceType.PAWN:
                        piece.has_moved = rank != PAWN_START_RANK[piece.color]
                    board.place(Square(file, rank), piece)
                    file += 1
                else:
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
        return board

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1] - 1, -1, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(BOARD_DIMENSIONS[0]):
            piece = self.occupant(Square(file, rank))

            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # --- GRID ACCESS ---
    @staticmethod
    def in_bounds(square: Square) -> bool:
        return square.is_within_bounds()

    def _slot(self, square: Square) -> int:
        """Slots are laid out file-major, so slot order is square-ascending order."""
        if not self.in_bounds(square):
            raise InvalidSquareError(f"Square {square} is not on the board.")
        return square.file * BOARD_DIMENSIONS[1] + square.rank

    def occupant(self, square: Square) -> Optional[Piece]:
        return self.slots[self._slot(square)]

    def place(self, square: Square, piece: Piece) -> None:
        self.slots[self._slot(square)] = piece

    def remove(self, square: Square) -> Optional[Piece]:
        slot = self._slot(square)
        piece = self.slots[slot]
        self.slots[slot] = None
        return piece

    def is_empty(self, square: Square) -> bool:
        return self.occupant(square) is None

    def is_any_occupied(self, squares: Iterable[Square]) -> bool:
        return any(not self.is_empty(square) for square in squares)

    # --- QUERIES ---
    def occupied_squares(self) -> list[tuple[Square, Piece]]:
        """All pieces on the board, square-ascending."""
        return [
            (square, piece)
            for square, piece in zip(ALL_SQUARES, self.slots)
            if piece is not None
        ]

    def locate_color(self, color: Color) -> list[Square]:
        return [square for square, piece in self.occupied_squares() if piece.color == color]

    def locate_pieces(self, piece_type: PieceType, color: Optional[Color] = None) -> list[Square]:
        return [
            square
            for square, piece in self.occupied_squares()
            if piece.type == piece_type and (color is None or piece.color == color)
        ]

    def king_square(self, color: Color) -> Optional[Square]:
        kings = self.locate_pieces(PieceType.KING, color)
        return kings[0] if kings else None

    # --- MUTATION ---
    def move_piece(self, from_square: Square, to_square: Square) -> Optional[Piece]:
        """Transfer the piece on `from_square` to `to_square`. Returns whatever stood on the target square."""
        piece = self.remove(from_square)
        if piece is None:
            raise InvalidSquareError(f"No piece to move on {from_square}.")
        captured = self.remove(to_square)
        piece.has_moved = True
        self.place(to_square, piece)
        return captured

    def copy(self) -> Board:
        """Independent snapshot (pieces included) to play speculative moves on."""
        return deepcopy(self)
