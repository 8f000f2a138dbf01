"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase, digits

from src.core.exceptions import InvalidSquareError

# Chess board is always 8x8. Just in case we want to try some funky stuff, make it adjustable
BOARD_DIMENSIONS = (8, 8)


@dataclass(frozen=True, order=True)
class Square:
    """
    Zero-based coordinates: a1 is (0, 0), h8 is (7, 7).

    Ordering compares the file first and the rank second, which is the iteration order used everywhere in the engine.
    NOTE: Squares off the board can be created (handy for geometry), the Board refuses to address them.
    """

    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        if len(sq) != 2 or sq[1] not in digits:
            raise InvalidSquareError(f"Cannot interpret {sq!r} as a square name.")
        file = ord(sq[0].lower()) - ord("a")
        rank = int(sq[1]) - 1
        square = cls(file, rank)
        if not square.is_within_bounds():
            raise InvalidSquareError(f"Square {sq!r} is not on the board.")
        return square

    def to_algebraic(self) -> str:
        return f"{ascii_lowercase[self.file]}{self.rank + 1}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.file < BOARD_DIMENSIONS[0]) and (
            0 <= self.rank < BOARD_DIMENSIONS[1]
        )

    def offset(self, df: int, dr: int) -> Square:
        """The square reached by stepping along (df, dr). May lie off the board."""
        return Square(self.file + df, self.rank + dr)

    def __str__(self) -> str:
        if not self.is_within_bounds():
            return f"({self.file},{self.rank})"
        return self.to_algebraic()


# every square on the board in square-ascending order (file, then rank)
ALL_SQUARES: tuple[Square, ...] = tuple(
    Square(file, rank)
    for file in range(BOARD_DIMENSIONS[0])
    for rank in range(BOARD_DIMENSIONS[1])
)
