"""Command-line entry point: play a game of chess in the terminal."""

from __future__ import annotations

import argparse
import logging

from pydantic import ValidationError

from src.console.controller import GameController
from src.console.models import GameOptions
from src.core.exceptions import InvalidRequestError
from src.engine.fen import STARTING_FEN
from src.engine.game import GameState

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Two-player chess in the terminal")
    parser.add_argument("--fen", default=STARTING_FEN, help="Starting position (FEN)")
    parser.add_argument(
        "--flip", action="store_true", help="Turn the board towards the player to move"
    )
    parser.add_argument(
        "--unicode", action="store_true", help="Draw pieces with unicode chess symbols"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def build_options(args: argparse.Namespace) -> GameOptions:
    return GameOptions(
        starting_fen=args.fen,
        flip_board=args.flip,
        unicode_pieces=args.unicode,
        log_level=args.log_level,
    )


def run(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = build_options(args)
    except (InvalidRequestError, ValidationError) as error:
        parser.error(str(error))

    logging.basicConfig(level=options.log_level, format=LOG_FORMAT)

    state = GameState.from_fen(options.starting_fen)
    GameController(state, options=options).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
