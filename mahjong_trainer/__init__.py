"""
Mahjong Hand Trainer
Single-player draw/discard practice with shanten and wait analysis
"""

from .tiles import Tile, Suit, TileSet, MalformedTileCode, all_tiles, tiles_from_codes
from .wall import Wall, WallExhausted
from .hand import HandState, DiscardSelector, InvalidSelector
from .shanten import ShantenCalculator, ShantenResult, DiscardOption, calculate_shanten, get_waits
from .rules import TrainerRules, DEFAULT_RULES, RIICHI_RULES, STANDARD_ONLY_RULES
from .renderer import SessionRenderer, NullRenderer, TextRenderer
from .session import GameSession, SessionPhase, SessionSnapshot, Trainer, EngineInvariantError, SessionOver

__version__ = "0.1.0"
__all__ = [
    "Tile",
    "Suit",
    "TileSet",
    "MalformedTileCode",
    "all_tiles",
    "tiles_from_codes",
    "Wall",
    "WallExhausted",
    "HandState",
    "DiscardSelector",
    "InvalidSelector",
    "ShantenCalculator",
    "ShantenResult",
    "DiscardOption",
    "calculate_shanten",
    "get_waits",
    "TrainerRules",
    "DEFAULT_RULES",
    "RIICHI_RULES",
    "STANDARD_ONLY_RULES",
    "SessionRenderer",
    "NullRenderer",
    "TextRenderer",
    "GameSession",
    "SessionPhase",
    "SessionSnapshot",
    "Trainer",
    "EngineInvariantError",
    "SessionOver",
]
