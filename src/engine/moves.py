"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define candidate move sets for each piece type.
Each rule is a pure function of (square, board, color).


Legality (not leaving your own king in check) is checked later in legality.py
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from src.engine.castling import CASTLING_RULES, CastlingRights, castling_direction_of, castling_options
from src.engine.pieces import PROMOTION_OPTIONS, Color, Piece, PieceType
from src.engine.square import BOARD_DIMENSIONS, Square


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def occupant(self, square: Square) -> Optional[Piece]: ...
    def place(self, square: Square, piece: Piece) -> None: ...
    def remove(self, square: Square) -> Optional[Piece]: ...
    def is_empty(self, square: Square) -> bool: ...
    def is_any_occupied(self, squares: list[Square]) -> bool: ...
    def move_piece(self, from_square: Square, to_square: Square) -> Optional[Piece]: ...


Vector = tuple[int, int]

ORTHOGONALS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
# Knights always move such that |delta_rank| + |delta_file| = 3
KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
KING_DELTAS: list[Vector] = ORTHOGONALS + DIAGONALS


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made. Flags are derived from the board at generation time."""

    from_square: Square
    to_square: Square
    promotion: Optional[PieceType] = None
    is_capture: bool = False
    is_castle: bool = False
    is_en_passant: bool = False

    def __str__(self) -> str:
        return f"{self.from_square}{self.to_square}"


def pawn_direction(color: Color) -> int:
    """White moves UP the board, black moves DOWN"""
    return 1 if color == Color.WHITE else -1


def promotion_rank(color: Color) -> int:
    return BOARD_DIMENSIONS[1] - 1 if color == Color.WHITE else 0


def pawn_start_rank(color: Color) -> int:
    return 1 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 2


# --- MOVEMENT RULES ---
def raycasting_move(
    square: Square, board: Board, color: Color, directions: list[Vector]
) -> list[Move]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    moves: list[Move] = []
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square.is_within_bounds():
            blocker = board.occupant(target_square)
            if blocker is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if blocker.color != color:
                    moves.append(Move(square, target_square, is_capture=True))
                break

            moves.append(Move(square, target_square))
            target_square = target_square.offset(df, dr)
    return moves


def single_step_move(
    square: Square, board: Board, color: Color, deltas: list[Vector]
) -> list[Move]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just can move a single step along a direction"""
    moves: list[Move] = []
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        occupant = board.occupant(target_square)
        if occupant is None:
            moves.append(Move(square, target_square))
        elif occupant.color != color:
            moves.append(Move(square, target_square, is_capture=True))

    return moves


def with_promotions(move: Move) -> list[Move]:
    """Return multiple copies of the pawn move with the piece type to promote into filled in."""
    return [
        Move(
            from_square=move.from_square,
            to_square=move.to_square,
            promotion=piece_type,
            is_capture=move.is_capture,
        )
        for piece_type in PROMOTION_OPTIONS
    ]


def candidate_pawn_moves(square: Square, board: Board, color: Color) -> list[Move]:
    """
    A pawn:
    - moves by a single square forward, onto an empty square only.
    - It can move by two in their first move (so when on their starting rank), if both squares are empty
    - takes diagonally (only when an enemy piece stands there)
    - turns into another piece when reaching the final rank

    NOTE: En passant is generated separately (it depends on the en passant target, not on the board alone)
    """
    moves: list[Move] = []
    forward = pawn_direction(color)

    one_step = square.offset(0, forward)
    if one_step.is_within_bounds() and board.is_empty(one_step):
        moves.append(Move(square, one_step))

        two_steps = one_step.offset(0, forward)
        if square.rank == pawn_start_rank(color) and board.is_empty(two_steps):
            moves.append(Move(square, two_steps))

    # pawns take diagonally:
    for df in (-1, 1):
        target_square = square.offset(df, forward)
        if not target_square.is_within_bounds():
            continue
        occupant = board.occupant(target_square)
        if occupant is not None and occupant.color != color:
            moves.append(Move(square, target_square, is_capture=True))

    promoted: list[Move] = []
    for move in moves:
        if move.to_square.rank == promotion_rank(color):
            promoted.extend(with_promotions(move))
        else:
            promoted.append(move)
    return promoted


def candidate_knight_moves(square: Square, board: Board, color: Color) -> list[Move]:
    """Knights jump: blockers in between do not matter"""
    return single_step_move(square, board, color, KNIGHT_DELTAS)


def candidate_bishop_moves(square: Square, board: Board, color: Color) -> list[Move]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(square, board, color, DIAGONALS)


def candidate_rook_moves(square: Square, board: Board, color: Color) -> list[Move]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(square, board, color, ORTHOGONALS)


def candidate_queen_moves(square: Square, board: Board, color: Color) -> list[Move]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return raycasting_move(square, board, color, ORTHOGONALS + DIAGONALS)


def candidate_king_moves(square: Square, board: Board, color: Color) -> list[Move]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move (see `castling_moves()`), as it depends on the castling rights.
    """
    return single_step_move(square, board, color, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Board, Color], list[Move]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    ---
    Similar to raycasting moves.
    However, where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_


    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color and that
    is allowed to move along the given direction?"_

    ---
    Returns TRUE if the first piece encountered along any direction is one of the specified types and color.
    """
    for df, dr in directions:
        target_square = square.offset(df, dr)
        while target_square.is_within_bounds():
            piece_found = board.occupant(target_square)
            if piece_found is not None:
                # only the first piece found can attack along this line, anything behind it is blocked.
                if piece_found.color == by_color and piece_found.type in by_piece_types:
                    return True
                break
            target_square = target_square.offset(df, dr)
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """
    Raycasting is for sliding pieces. This is the equivalent for pawns, kings, and knights that just can move a single step along a direction.
    Hence, they also can only attack along a single direction.

    ---
    Returns TRUE if the piece encountered is an opponent's piece or the specified type.
    """
    for df, dr in deltas:
        target_square = square.offset(df, dr)
        if not target_square.is_within_bounds():
            continue

        piece_found = board.occupant(target_square)
        if piece_found is not None and piece_found.is_a(by_piece_type, by_color):
            return True

    return False


def is_attacked_by_pawn(square: Square, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric, so to check IF a white pawn could move into your square -->
    Must look one rank DOWN the board. That is, you are asking "Could a white pawn, that moves UP the board, take on the specified square?"

    Hence, vectors are exactly opposite to the ones used to check if you could move to a square by taking (see `candidate_pawn_moves()`)
    """
    backwards = -pawn_direction(by_color)
    inverse_pawn_take_deltas: list[Vector] = [(1, backwards), (-1, backwards)]
    return single_step_attack(
        square, by_color, PieceType.PAWN, board, inverse_pawn_take_deltas
    )


def is_attacked_by_knight(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_by_bishop(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, (PieceType.BISHOP,), board, DIAGONALS)


def is_attacked_by_rook(square: Square, by_color: Color, board: Board) -> bool:
    return raycasting_attack(square, by_color, (PieceType.ROOK,), board, ORTHOGONALS)


def is_attacked_by_queen(square: Square, by_color: Color, board: Board) -> bool:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return raycasting_attack(
        square, by_color, (PieceType.QUEEN,), board, ORTHOGONALS + DIAGONALS
    )


def is_attacked_by_king(square: Square, by_color: Color, board: Board) -> bool:
    return single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Square, Color, Board], bool]
ATTACK_RULES: dict[PieceType, IsAttackedFn] = {
    PieceType.PAWN: is_attacked_by_pawn,
    PieceType.KNIGHT: is_attacked_by_knight,
    PieceType.BISHOP: is_attacked_by_bishop,
    PieceType.ROOK: is_attacked_by_rook,
    PieceType.QUEEN: is_attacked_by_queen,
    PieceType.KING: is_attacked_by_king,
}


def is_square_attacked(square: Square, by_color: Color, board: Board) -> bool:
    """Could any piece of `by_color` capture on this square?"""
    return any(rule(square, by_color, board) for rule in ATTACK_RULES.values())


def is_any_under_attack(squares: list[Square], by_color: Color, board: Board) -> bool:
    return any(is_square_attacked(square, by_color, board) for square in squares)


# -- CASTLING MOVES ---
def castling_moves(board: Board, color: Color, castling_rights: CastlingRights) -> list[Move]:
    """
    Candidate castling moves for the player with the 'color' pieces
    ---

    **you are allowed to castle if**

    * Castling rights in that direction are not yet revoked.
    * King and rook stand on their home squares and never moved.
    * All squares between king and rook are empty.
    * None of the squares the king stands on, passes over or lands on is under attack
      (so in particular, you cannot castle out of a check).
    """
    moves: list[Move] = []
    for direction in castling_options(color):
        if not castling_rights.get(direction, False):
            continue

        squares = CASTLING_RULES[direction]
        king = board.occupant(squares.king_from)
        rook = board.occupant(squares.rook_from)
        if king is None or not king.is_a(PieceType.KING, color) or king.has_moved:
            continue
        if rook is None or not rook.is_a(PieceType.ROOK, color) or rook.has_moved:
            continue

        if board.is_any_occupied(squares.path):
            continue

        if is_any_under_attack(squares.king_transit, color.opponent, board):
            continue

        moves.append(Move(squares.king_from, squares.king_to, is_castle=True))
    return moves


# -- EN PASSANT MOVES ---
def en_passant_moves(
    en_passant_square: Square, color: Color, board: Board
) -> list[Move]:
    """Given a target en passant square, check the adjacent files (in the rank one up/down from the en passant square) for pawns of the correct color."""

    # NOTE: En passant square is the square the opponent's pawn skipped over: that pawn stands one step further.
    opposite_direction = -pawn_direction(color)
    passed_pawn_square = en_passant_square.offset(0, opposite_direction)
    if not passed_pawn_square.is_within_bounds():
        return []
    passed_pawn = board.occupant(passed_pawn_square)
    if passed_pawn is None or not passed_pawn.is_a(PieceType.PAWN, color.opponent):
        return []

    # if there is a pawn on the adjacent file: Add this move to the list
    moves: list[Move] = []
    for df in (-1, 1):
        maybe_pawn_square = en_passant_square.offset(df, opposite_direction)
        if not maybe_pawn_square.is_within_bounds():
            continue
        piece_on_square = board.occupant(maybe_pawn_square)
        if piece_on_square is not None and piece_on_square.is_a(PieceType.PAWN, color):
            moves.append(
                Move(
                    from_square=maybe_pawn_square,
                    to_square=en_passant_square,
                    is_capture=True,
                    is_en_passant=True,
                )
            )

    return moves


def en_passant_capture_square(move: Move) -> Square:
    """The taken pawn stands on the file of the target square, on the rank the capturing pawn started from."""
    return Square(file=move.to_square.file, rank=move.from_square.rank)


# -- APPLYING A MOVE ---
def make_move_on_board(board: Board, move: Move) -> Optional[Piece]:
    """
    Update the position on the board
    ---

    * castling: move both the king and the rook
    * en passant: move the pawn diagonally + remove the pawn that got taken
    * promotion: the pawn that arrives turns into the chosen piece

    Returns the captured piece (if any).
    """
    if move.is_castle:
        direction = castling_direction_of(move.from_square, move.to_square)
        if direction is None:
            raise ValueError(f"{move} is flagged as castling but is not a castling move.")
        squares = CASTLING_RULES[direction]
        board.move_piece(squares.king_from, squares.king_to)
        board.move_piece(squares.rook_from, squares.rook_to)
        return None

    captured = board.move_piece(move.from_square, move.to_square)
    if move.is_en_passant:
        captured = board.remove(en_passant_capture_square(move))

    if move.promotion is not None:
        promoted_pawn = board.occupant(move.to_square)
        # for the type checker: move_piece just put it there
        assert promoted_pawn is not None
        promoted_pawn.promote_to(move.promotion)

    return captured
