"""
The GameState will be the entrypoint into the rules engine for the coordinating loop.
It is responsible for orchestrating all the business logic required to play a turn of the board game -->
the loop asks for legal moves, hands back the chosen one, and receives the successor state (with its outcome) to display.

Applying a move never mutates the state it is called on: a validated move produces a new GameState.
"""

import logging
from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Self

from src.core.exceptions import GameAlreadyOverError, IllegalMoveError
from src.engine.board import Board
from src.engine.castling import CASTLING_RULES, CastlingRights, castling_options
from src.engine.fen import STARTING_FEN, FENState, fingerprint_of
from src.engine.generator import pseudo_legal_moves
from src.engine.legality import GameOutcome, game_outcome
from src.engine.legality import legal_moves as legal_moves_for
from src.engine.moves import Move, make_move_on_board
from src.engine.pieces import DEFAULT_PROMOTION, Color, Piece, PieceType
from src.engine.square import Square

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    ACTIVE = auto()
    CHECK = auto()
    TERMINAL = auto()


@dataclass
class GameState:
    # --- ENGINE API CALLED BY THE COORDINATING LOOP ---

    board: Board
    active_color: Color
    castling_rights: CastlingRights
    en_passant_target: Optional[Square] = None
    halfmove_clock: int = 0
    fullmove_number: int = 1
    position_history: list[str] = field(default_factory=list)  # fingerprints, oldest first
    moves: list[Move] = field(default_factory=list)
    captured: list[Piece] = field(default_factory=list)  # pieces taken off the board, oldest first
    outcome: GameOutcome = GameOutcome.ONGOING

    @classmethod
    def new_game(cls) -> Self:
        """Standard starting arrangement, White to move, all castling rights available."""
        fen_state = FENState.starting_position()
        return cls._start(
            cls(
                board=Board.initial(),
                active_color=fen_state.color_to_move,
                castling_rights=fen_state.castling_rights,
            )
        )

    @classmethod
    def from_fen(cls, fen: str = STARTING_FEN) -> Self:
        """To start a game from a custom position."""
        fen_state = FENState.from_fen(fen)
        return cls._start(
            cls(
                board=Board.from_fen(fen_state.position),
                active_color=fen_state.color_to_move,
                castling_rights=fen_state.castling_rights,
                en_passant_target=fen_state.en_passant_square,
                halfmove_clock=fen_state.half_move_clock,
                fullmove_number=fen_state.num_turns,
            )
        )

    @classmethod
    def _start(cls, state: Self) -> Self:
        """The starting position counts towards the repetition rule, and may already be decided."""
        state.position_history.append(state.fingerprint())
        state.outcome = game_outcome(state)
        return state

    # --- READ-ONLY VIEWS ---
    def to_fen(self) -> str:
        return FENState(
            position=self.board.to_fen(),
            color_to_move=self.active_color,
            castling_rights=self.castling_rights,
            en_passant_square=self.en_passant_target,
            half_move_clock=self.halfmove_clock,
            num_turns=self.fullmove_number,
        ).to_fen()

    def fingerprint(self) -> str:
        """Placement, active color, castling rights and en passant target. Used to detect repetitions."""
        return fingerprint_of(self.to_fen())

    @property
    def phase(self) -> GamePhase:
        if self.outcome.is_terminal:
            return GamePhase.TERMINAL
        if self.outcome == GameOutcome.CHECK:
            return GamePhase.CHECK
        return GamePhase.ACTIVE

    @property
    def is_over(self) -> bool:
        return self.outcome.is_terminal

    @property
    def winner(self) -> Optional[Color]:
        """
        Only a checkmate has a winner.
        Given we know it is checkmate, the player who is to move just got mated and the opponent must be the winner
        """
        if self.outcome != GameOutcome.CHECKMATE:
            return None
        return self.active_color.opponent

    def legal_moves(self, color: Optional[Color] = None) -> list[Move]:
        """Legal moves of the given color (the player to move if not specified)"""
        return legal_moves_for(self, color)

    # --- STATE TRANSITION ---
    def apply_move(self, move: Move) -> "GameState":
        """
        Attempt to make a move
        -----

        1. make sure the game is not over yet
        2. match the request against the legal moves (promotion defaults to a queen)
        3. play the matched move on a copy of this state: board, castling rights, en passant square, clocks,
           history, color to move and outcome get updated there.

        The state this is called on is left untouched, also when the move gets rejected.
        """
        if self.is_over:
            raise GameAlreadyOverError(
                f"Game is over ({self.outcome.name.lower()}). No further moves accepted."
            )

        accepted_move = self._match_legal_move(move)
        successor = deepcopy(self)
        successor._play(accepted_move)
        return successor

    # -- PRIVATE HELPERS ---
    def _match_legal_move(self, move: Move) -> Move:
        """
        Find the legal move the request refers to.
        ---

        Only the squares and the promotion choice of the request matter: the flags (capture, castling, en passant)
        are taken from the generated legal move.
        """
        same_squares = [
            candidate
            for candidate in self.legal_moves()
            if candidate.from_square == move.from_square
            and candidate.to_square == move.to_square
        ]
        if not same_squares:
            raise IllegalMoveError(move, self._rejection_reason(move))

        promotions = [candidate for candidate in same_squares if candidate.promotion is not None]
        if not promotions:
            if move.promotion is not None:
                raise IllegalMoveError(
                    move, "only a pawn reaching the last rank can be promoted"
                )
            return same_squares[0]

        wanted = move.promotion or DEFAULT_PROMOTION
        for candidate in promotions:
            if candidate.promotion == wanted:
                return candidate
        raise IllegalMoveError(move, f"a pawn cannot be promoted to a {wanted.name.lower()}")

    def _rejection_reason(self, move: Move) -> str:
        """Tell the player why the move is not part of the legal moves"""
        if not (move.from_square.is_within_bounds() and move.to_square.is_within_bounds()):
            return "the move leaves the board"

        piece = self.board.occupant(move.from_square)
        if piece is None:
            return f"there is no piece on {move.from_square}"

        if piece.color != self.active_color:
            return f"the piece on {move.from_square} is not yours, {self.active_color.name.lower()} is to move"

        pseudo_legal = pseudo_legal_moves(self, self.active_color)
        if any(
            candidate.from_square == move.from_square and candidate.to_square == move.to_square
            for candidate in pseudo_legal
        ):
            return "it would leave your king in check"

        return f"the {piece.type.name.lower()} on {move.from_square} cannot move to {move.to_square}"

    def _play(self, move: Move) -> None:
        """
        Apply a validated move to this state
        ---

        NOTE update color to move AFTER doing the updates that depend on the player making the move.
        """
        moving_piece = self.board.occupant(move.from_square)
        # for the type checker: the move was matched against the legal moves
        assert moving_piece is not None
        # promotion changes the piece in place, so remember what moved
        moved_type = moving_piece.type

        captured = make_move_on_board(self.board, move)
        if captured is not None:
            self.captured.append(captured)

        self._revoke_castling_rights_if_needed(move, moved_type, captured)
        self.en_passant_target = self._determine_en_passant_square(move, moved_type)

        # move counters
        if moved_type == PieceType.PAWN or captured is not None:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1

        if self.active_color == Color.BLACK:
            self.fullmove_number += 1

        logger.debug("%s played %s", self.active_color.name.lower(), move)
        self.active_color = self.active_color.opponent
        self.moves.append(move)
        self.position_history.append(self.fingerprint())

        previous_outcome = self.outcome
        self.outcome = game_outcome(self)
        if self.outcome != previous_outcome:
            log_level = logging.INFO if self.outcome.is_terminal else logging.DEBUG
            logger.log(log_level, "outcome changed: %s -> %s", previous_outcome.name, self.outcome.name)

    def _revoke_castling_rights_if_needed(
        self, move: Move, moved_type: PieceType, captured: Optional[Piece]
    ) -> None:
        """
        Checks which rights should get revoked
        ----

        1. If you are moving your king (castling included) --> revoke both
        2. If you are moving a rook away from its starting square --> revoke the right in that direction
        3. If you are taking your opponent's rook on its starting square --> revoke that right of your opponent
        """
        player_color = self.active_color

        if moved_type == PieceType.KING:
            for direction in castling_options(player_color):
                self.castling_rights[direction] = False

        if moved_type == PieceType.ROOK:
            for direction in castling_options(player_color):
                if CASTLING_RULES[direction].rook_from == move.from_square:
                    self.castling_rights[direction] = False

        if captured is not None and captured.type == PieceType.ROOK:
            for direction in castling_options(player_color.opponent):
                if CASTLING_RULES[direction].rook_from == move.to_square:
                    self.castling_rights[direction] = False

    def _determine_en_passant_square(self, move: Move, moved_type: PieceType) -> Optional[Square]:
        """The possible en passant square for the next turn: the square a pawn skipped with its double step."""
        ranks_moved = abs(move.from_square.rank - move.to_square.rank)
        if moved_type != PieceType.PAWN or ranks_moved != 2:
            return None
        return Square(
            file=move.from_square.file,
            rank=(move.from_square.rank + move.to_square.rank) // 2,
        )


# --- ENGINE FACADE ---
def new_game() -> GameState:
    return GameState.new_game()


def legal_moves(state: GameState, color: Optional[Color] = None) -> list[Move]:
    return state.legal_moves(color)


def apply_move(state: GameState, move: Move) -> GameState:
    """Returns the successor state. Raises IllegalMoveError / GameAlreadyOverError and leaves `state` as it was."""
    return state.apply_move(move)


def outcome(state: GameState) -> GameOutcome:
    return state.outcome
