"""
Representation of a single position on the board. The part that can be encoded in a FEN string.

Used to load positions (tests, custom starting positions) and to fingerprint positions for the repetition rule.
"""

from dataclasses import dataclass
from string import ascii_lowercase, digits
from typing import Optional, Self

from src.core.exceptions import InvalidFENError
from src.engine.castling import CastlingRights, castling_from_fen, castling_to_fen
from src.engine.pieces import FEN_TO_PIECE, Color
from src.engine.square import BOARD_DIMENSIONS, Square

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
VALID_CASTLING_ENCODINGS = [
    "-",
    "K",
    "Q",
    "k",
    "q",
    "KQ",
    "Kk",
    "Kq",
    "Qk",
    "Qq",
    "kq",
    "KQk",
    "KQq",
    "Kkq",
    "Qkq",
    "KQkq",
]
# placement, active color, castling rights, en passant square: everything but the two move counters
FINGERPRINT_FIELDS = 4


def is_valid_fen(fen: str) -> bool:
    """
    Check if given string follows proper FEN notation.
    """

    # there should be 6 parts to the string
    parts = fen.split(" ")
    if len(parts) != 6:
        return False

    position = parts[0]
    if not (is_valid_position(position) and is_playable_position(position)):
        return False

    color = parts[1]
    if not is_valid_color_code(color):
        return False

    castling = parts[2]
    if not is_valid_castling_rights(castling):
        return False

    en_passant = parts[3]
    if not is_valid_en_passant(en_passant):
        return False

    half_move_counter = parts[4]
    full_move_counter = parts[5]
    if not (
        is_valid_move_counter(half_move_counter)
        and is_valid_move_counter(full_move_counter)
    ):
        return False
    return True


def is_valid_position(position: str) -> bool:
    """Only check the part of the FEN encoding for the board position."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = position.split("/")
    if len(rank_fens) != num_ranks:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            # make sure every character is valid
            if character in digits:
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                # immediately invalidate if the character is anything else
                return False

        # make sure you are creating a correctly sized board
        if file_count != num_files:
            return False
    return True


def is_playable_position(position: str) -> bool:
    """
    A well-formed placement can still be one no game ever reaches:
    * each side needs exactly one king
    * pawns never stand on the first or last rank (they promote on arrival)

    Assumes the placement already passed `is_valid_position`.
    """
    if position.count("K") != 1 or position.count("k") != 1:
        return False

    rank_fens = position.split("/")
    back_ranks = rank_fens[0] + rank_fens[-1]
    return "P" not in back_ranks and "p" not in back_ranks


def is_valid_color_code(color: str) -> bool:
    return color in {"w", "b"}


def is_valid_castling_rights(castling: str) -> bool:
    """A valid castling encoding has either KQkq, KQk, etc. or a '-' if all rights have been revoked."""
    return castling in VALID_CASTLING_ENCODINGS


def is_valid_en_passant(en_passant: str) -> bool:
    """Valid en passant square encoding should be a square that exists on the board or a '-'"""
    return (en_passant == "-") or is_valid_square(en_passant)


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    num_files, num_ranks = BOARD_DIMENSIONS
    if len(square) < 2:
        return False

    # NOTE: The following works as long as we do not go beyond 26 files. Seems like a reasonable assumption for now ;-)
    file_char, rank_char = square[0], square[1:]
    allowed_file_names = ascii_lowercase[:num_files]
    if file_char not in allowed_file_names:
        return False

    if not is_ascii_number(rank_char):
        return False

    if not (1 <= int(rank_char) <= num_ranks):
        return False

    return True


def is_valid_move_counter(counter: str) -> bool:
    return is_ascii_number(counter)


def is_ascii_number(text: str) -> bool:
    # str.isdigit() also accepts characters like '²' that int() refuses
    return text.isascii() and text.isdecimal()


def fingerprint_of(fen: str) -> str:
    """Drop the move counters: two positions are 'the same' regardless of when they occurred."""
    return " ".join(fen.split(" ")[:FINGERPRINT_FIELDS])


@dataclass
class FENState:
    """
    Data that can be constructed from a FEN string.
    ----

    FEN, or Forsyth-Edwards Notation, is a standard notation for describing a particular board position of a chess game.
    The purpose of FEN is to provide all the necessary information to restart a game from a particular position.

    <board position string><active color><castling rights><en passant square><# half move clock><number turns played>

    * The string to describe the board position is described in the Board class
    * The active color is either "w" or "b"
    * Castling rights are denoted as "k" for king-side or "q" for queen-side. Capital letters for the white pieces, small letters for the black pieces.
        In the starting position: KQkq (all rights available), and as rights get revoked a "-" is used instead of the designated letter.
    * The en passant square indicates the square a piece can move to / take on. If not available a "-" is used.
    * The half move clock count the number of moves made since the last pawn move or capture. (Used for a rule that says a draw is reached when this number reaches 100)
    * The number of turns starts at 1 and increments after every move black makes.

    ex) The standard starting position has a FEN
    rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1
    i.e. it is white to move, all castling options available, no en passant square, no half moves and we are in the first turn.
    """

    position: str
    color_to_move: Color
    castling_rights: CastlingRights
    en_passant_square: Optional[Square]
    half_move_clock: int
    num_turns: int

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """Parse the FEN into data"""

        # raise an exception if invalid FEN:
        if not is_valid_fen(fen):
            position = fen.split(" ")[0]
            if is_valid_position(position) and not is_playable_position(position):
                raise InvalidFENError(
                    f"Position cannot occur in a game (one king per side, no pawns on the first or last rank): {position}"
                )
            raise InvalidFENError(f"Cannot interpret supplied string as FEN: {fen}")

        # extract the different components. FEN is space separated
        (
            position,
            active_color,
            castling_str,
            en_passant_algebraic,
            half_move_clock,
            num_turns,
        ) = fen.split(" ")

        # Check which color is to move
        color_to_move = Color.WHITE if active_color == "w" else Color.BLACK

        # check the castling rights. Basically just check for "-", as the order in which it gets notated is always the same
        castling_rights = castling_from_fen(castling_str)

        # parse en passant target square
        en_passant_square = (
            Square.from_algebraic(en_passant_algebraic)
            if en_passant_algebraic != "-"
            else None
        )

        return cls(
            position,
            color_to_move,
            castling_rights,
            en_passant_square,
            int(half_move_clock),
            int(num_turns),
        )

    def to_fen(self) -> str:
        """reverse operation: write a FEN from the given data"""
        active_color = "w" if self.color_to_move == Color.WHITE else "b"
        castling_str = castling_to_fen(self.castling_rights)

        en_passant_algebraic = (
            self.en_passant_square.to_algebraic()
            if self.en_passant_square is not None
            else "-"
        )

        fen = f"{self.position} {active_color} {castling_str} {en_passant_algebraic} {self.half_move_clock} {self.num_turns}"
        return fen

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_FEN)
