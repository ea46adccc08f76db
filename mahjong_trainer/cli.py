"""
Practice in the terminal.

Usage:
    mahjong-trainer
    mahjong-trainer --seed 42 --rules riichi
    mahjong-trainer --symbols --verbose
"""

import argparse
import logging
import sys
from typing import Callable, List, Optional, TextIO

from .hand import DiscardSelector, InvalidSelector
from .renderer import TextRenderer
from .rules import RULE_PRESETS, get_rules
from .session import SessionOver, Trainer
from .tiles import MalformedTileCode, Tile


logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  <number>   discard the resting tile at that position
  <code>     discard a resting tile by code, e.g. m5 or z1
  t          discard the drawn tile (tsumogiri)
  h          show how every discard would leave the hand
  n [seed]   deal a new hand
  q          quit"""


def parse_number(text: str) -> Optional[int]:
    """Value of a plain ASCII integer such as "3" or "-1", else None"""
    digits = text[1:] if text.startswith("-") else text
    if digits.isascii() and digits.isdigit():
        return int(text)
    return None


def parse_selector(command: str, trainer: Trainer) -> DiscardSelector:
    """
    Turn a discard command into a selector.

    Raises:
        InvalidSelector: the command names no tile in hand
        MalformedTileCode: the command looks like a tile code but is not one
    """
    if command in ("t", "tsumogiri"):
        return DiscardSelector.held()
    position = parse_number(command)
    if position is not None:
        return DiscardSelector.at(position)
    tile = Tile.from_code(command)
    hand = trainer.session.hand
    if hand.held is not None and hand.held == tile and tile not in hand.tiles:
        return DiscardSelector.held()
    return DiscardSelector.at(hand.index_of(tile))


def format_discard_options(trainer: Trainer, limit: int = 5) -> str:
    options = trainer.session.discard_options()
    if not options:
        return "Nothing to discard."
    lines = ["Best discards:"]
    for option in options[:limit]:
        result = option.result
        if result.waits is not None:
            detail = f"tenpai on {', '.join(result.wait_codes) or 'nothing live'} ({result.ukeire} left)"
        else:
            detail = f"shanten {result.shanten}"
        lines.append(f"  {option.tile.code}: {detail}")
    return "\n".join(lines)


def handle_command(trainer: Trainer, renderer: TextRenderer, command: str, out: TextIO) -> bool:
    """
    Apply one command. Returns False when the user asked to quit.

    Bad input is reported and leaves the session untouched.
    """
    command = command.strip().lower()
    if not command:
        return True
    if command in ("q", "quit"):
        return False
    if command in ("?", "help"):
        out.write(HELP_TEXT + "\n")
        return True
    if command == "n" or command.startswith("n "):
        arg = command[1:].strip()
        seed = parse_number(arg) if arg else None
        if arg and (seed is None or seed < 0):
            out.write(f"Seed must be a number, got {arg}\n")
            return True
        trainer.request_new_session(seed)
        renderer.show()
        return True
    if command == "h":
        out.write(format_discard_options(trainer) + "\n")
        return True

    try:
        selector = parse_selector(command, trainer)
        trainer.request_discard(selector)
    except (InvalidSelector, MalformedTileCode) as e:
        out.write(f"{e}\n")
        return True
    except SessionOver:
        out.write("The session is over. Type 'n' for a new hand.\n")
        return True

    renderer.show()
    return True


def play(
    seed: Optional[int] = None,
    rules: str = "default",
    symbols: bool = False,
    read: Optional[Callable[[str], str]] = None,
    out: Optional[TextIO] = None,
) -> Trainer:
    """
    Run the interactive loop until the user quits or input ends.

    Args:
        seed: Seed for the first deal
        rules: Rule preset name
        symbols: Also show tiles as symbols
        read: Prompt function (``input`` by default)
        out: Output stream (stdout by default)
    """
    read = read or input
    out = out or sys.stdout
    renderer = TextRenderer(out, symbols=symbols)
    trainer = Trainer(get_rules(rules), renderer)

    out.write("=" * 60 + "\n")
    out.write("🀄 Mahjong Trainer\n")
    out.write("=" * 60 + "\n")
    out.write(HELP_TEXT + "\n\n")

    trainer.request_new_session(seed)
    renderer.show()

    while True:
        try:
            command = read("> ")
        except EOFError:
            break
        if not handle_command(trainer, renderer, command, out):
            break

    out.write("Thanks for playing!\n")
    return trainer


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Single-player Mahjong hand trainer")

    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for the first deal")
    parser.add_argument("--rules", type=str, default="default",
                        choices=sorted(RULE_PRESETS.keys()))
    parser.add_argument("--symbols", action="store_true",
                        help="Show tiles as symbols as well as codes")
    parser.add_argument("--verbose", action="store_true",
                        help="Log every turn")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    logger.debug(f"Starting trainer with {args}")

    play(seed=args.seed, rules=args.rules, symbols=args.symbols)


if __name__ == "__main__":
    main()
