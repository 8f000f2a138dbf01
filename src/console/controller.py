"""
The coordinating loop: sequences the turns, calls into the rules engine, and relays results to the text view.

Input and output are injected (defaults: `input` / `print`), so the loop can be driven by a script.
"""

import logging
from dataclasses import replace
from typing import Callable

from src.console.models import GameOptions
from src.console.notation import move_to_uci, parse_move_text, parse_promotion
from src.console.view import describe_captured, describe_outcome, describe_turn, render_board
from src.core.exceptions import IllegalMoveError, InvalidRequestError, InvalidSquareError
from src.engine.game import GameState, apply_move, legal_moves
from src.engine.moves import Move
from src.engine.pieces import Color

logger = logging.getLogger(__name__)

MOVE_PROMPT = "Enter your move (e.g. e2e4), 'moves' to list legal moves, 'quit' to stop: "
PROMOTION_PROMPT = "Promote to (q, r, b, n): "
QUIT_COMMANDS = {"quit", "exit", "resign"}
LIST_COMMAND = "moves"


class GameController:
    """Plays one game between two players sitting at the same console."""

    def __init__(
        self,
        state: GameState,
        read_line: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
        options: GameOptions | None = None,
    ) -> None:
        self.state = state
        self.read_line = read_line
        self.write = write
        self.options = options or GameOptions()

    def run(self) -> GameState:
        """Keep playing turns until the game ends, the player quits, or the input runs dry."""
        while not self.state.is_over:
            try:
                keep_playing = self.play_turn()
            except EOFError:
                logger.info("input closed, stopping the game")
                break
            if not keep_playing:
                break

        if self.state.is_over:
            self.write(self._render())
        return self.state

    def play_turn(self) -> bool:
        """
        One prompt - one answer
        ----

        1. show the board, the material taken so far and whose turn it is
        2. read a command or a move
        3. hand the move to the engine. Illegal / unreadable input is reported and the player gets asked again next turn.

        Returns False when the player wants to stop.
        """
        self.write(self._render())
        captured = describe_captured(self.state, self.options.unicode_pieces)
        if captured:
            self.write(captured)
        self.write(describe_turn(self.state))

        text = self.read_line(MOVE_PROMPT)
        command = text.strip().lower()
        if command in QUIT_COMMANDS:
            return False

        if command == LIST_COMMAND:
            self.write(" ".join(move_to_uci(move) for move in legal_moves(self.state)))
            return True

        try:
            move = parse_move_text(text).to_move()
            move = self._ask_promotion_if_needed(move)
            self.state = apply_move(self.state, move)
        except (InvalidRequestError, InvalidSquareError, IllegalMoveError) as error:
            logger.debug("rejected %r: %s", text, error)
            self.write(str(error))
            return True

        message = describe_outcome(self.state)
        if message:
            self.write(message)
        return True

    # -- Internal helpers --
    def _render(self) -> str:
        perspective = self.state.active_color if self.options.flip_board else Color.WHITE
        return render_board(self.state.board, perspective, self.options.unicode_pieces)

    def _ask_promotion_if_needed(self, move: Move) -> Move:
        """A pawn reaching the last rank without a promotion letter: ask the player which piece they want."""
        if move.promotion is not None:
            return move

        is_promotion = any(
            candidate.from_square == move.from_square
            and candidate.to_square == move.to_square
            and candidate.promotion is not None
            for candidate in legal_moves(self.state)
        )
        if not is_promotion:
            return move
        return replace(move, promotion=parse_promotion(self.read_line(PROMOTION_PROMPT)))
