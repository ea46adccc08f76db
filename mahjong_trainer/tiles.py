"""
Mahjong Trainer Tiles System

Defines the 136 tiles of a standard set:
- 9 Man (萬子) x4 = 36
- 9 Pin (筒子) x4 = 36
- 9 Sou (索子) x4 = 36
- 7 Honors (字牌: 東南西北白發中) x4 = 28
Total: 136 tiles

Tiles are serialized externally as two-character codes: a suit letter
(m, p, s, z) followed by the rank digit, e.g. "m1", "p9", "z7".
"""

from enum import IntEnum
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union
import numpy as np


class MalformedTileCode(ValueError):
    """Raised when an external tile code cannot be parsed into a Tile."""


class Suit(IntEnum):
    """Tile suits, in sort order"""
    MAN = 0     # 萬子 - Numbers 1-9
    PIN = 1     # 筒子 - Numbers 1-9
    SOU = 2     # 索子 - Numbers 1-9
    HONOR = 3   # 字牌 - 1-4 winds, 5-7 dragons


class HonorRank(IntEnum):
    """Honor tile ranks"""
    EAST = 1
    SOUTH = 2
    WEST = 3
    NORTH = 4
    WHITE = 5   # 白
    GREEN = 6   # 發
    RED = 7     # 中


SUIT_LETTERS = {Suit.MAN: "m", Suit.PIN: "p", Suit.SOU: "s", Suit.HONOR: "z"}
LETTER_SUITS = {letter: suit for suit, letter in SUIT_LETTERS.items()}

_SYMBOLS = {
    Suit.MAN: "一二三四五六七八九",
    Suit.PIN: "①②③④⑤⑥⑦⑧⑨",
    Suit.SOU: "１２３４５６７８９",
    Suit.HONOR: "東南西北白發中",
}


def _max_rank(suit: Suit) -> int:
    return 7 if suit == Suit.HONOR else 9


@dataclass(frozen=True, order=True)
class Tile:
    """
    Represents a tile identity.

    Copies of the same tile are interchangeable, so a tile is just its
    suit and rank. Ordering is by suit (man < pin < sou < honor), then rank.

    Attributes:
        suit: The suit of the tile
        rank: 1-9 for suited tiles, 1-7 for honors
    """
    suit: Suit
    rank: int

    def __post_init__(self):
        """Validate tile values"""
        if not 1 <= self.rank <= _max_rank(self.suit):
            raise ValueError(
                f"{self.suit.name} tiles must have rank 1-{_max_rank(self.suit)}, got {self.rank}"
            )

    @property
    def is_honor(self) -> bool:
        return self.suit == Suit.HONOR

    @property
    def is_terminal(self) -> bool:
        """Check if tile is a terminal (1 or 9 of a numbered suit)"""
        return not self.is_honor and self.rank in (1, 9)

    @property
    def is_terminal_or_honor(self) -> bool:
        return self.is_terminal or self.is_honor

    @property
    def tile_index(self) -> int:
        """
        Get unique index for this tile identity (0-33).
        m1-m9 = 0-8, p1-p9 = 9-17, s1-s9 = 18-26, z1-z7 = 27-33.
        """
        return self.suit * 9 + self.rank - 1

    @property
    def code(self) -> str:
        """External two-character code, e.g. 'm1' or 'z7'"""
        return f"{SUIT_LETTERS[self.suit]}{self.rank}"

    @property
    def symbol(self) -> str:
        """Single-character display symbol"""
        return _SYMBOLS[self.suit][self.rank - 1]

    def __repr__(self) -> str:
        return f"Tile({self.code})"

    def __str__(self) -> str:
        return self.code

    @classmethod
    def from_index(cls, tile_index: int) -> 'Tile':
        """Create a tile from its identity index (0-33)."""
        if not 0 <= tile_index < TileSet.NUM_TILE_TYPES:
            raise ValueError(f"Tile index must be 0-33, got {tile_index}")
        suit = Suit(tile_index // 9)
        return cls(suit, tile_index - suit * 9 + 1)

    @classmethod
    def from_code(cls, code: str) -> 'Tile':
        """
        Create tile from its external code.

        Args:
            code: String like "m1", "p5", "z7"

        Raises:
            MalformedTileCode: if the code is not a suit letter plus a valid rank
        """
        if not isinstance(code, str):
            raise MalformedTileCode(f"Tile code must be a string, got {code!r}")
        s = code.strip()
        if len(s) != 2 or s[0] not in LETTER_SUITS or s[1] not in "123456789":
            raise MalformedTileCode(f"Cannot parse tile code: {code!r}")
        suit = LETTER_SUITS[s[0]]
        rank = int(s[1])
        if not 1 <= rank <= _max_rank(suit):
            raise MalformedTileCode(f"Rank out of range in tile code: {code!r}")
        return cls(suit, rank)


def tiles_from_codes(codes: Union[str, Iterable[str]]) -> List[Tile]:
    """
    Parse several tile codes.

    Accepts an iterable of codes or a single whitespace/comma separated
    string such as "m1 m2 m3".
    """
    if isinstance(codes, str):
        codes = codes.replace(",", " ").split()
    return [Tile.from_code(c) for c in codes]


class TileSet:
    """
    An ordered collection of tiles, such as the full set a wall is
    shuffled from.
    """

    # Total number of unique tile types
    NUM_TILE_TYPES = 34
    # Total tiles in a complete set
    NUM_TILES = 136
    # Copies of each tile type
    COPIES_PER_TYPE = 4

    def __init__(self, tiles: Optional[Iterable[Tile]] = None):
        """Initialize tile set with optional tiles"""
        self.tiles: List[Tile] = list(tiles) if tiles else []

    @classmethod
    def create_full_set(cls) -> 'TileSet':
        """Create a complete set of 136 tiles"""
        return cls(all_tiles())

    def __len__(self) -> int:
        return len(self.tiles)

    def __iter__(self):
        return iter(self.tiles)

    def __getitem__(self, index):
        return self.tiles[index]

    def __repr__(self) -> str:
        return f"TileSet({len(self.tiles)} tiles)"

    def __str__(self) -> str:
        return " ".join(t.code for t in sorted(self.tiles))


def all_tiles() -> List[Tile]:
    """
    The 136-tile population in canonical order:
    m1..m9 x4, p1..p9 x4, s1..s9 x4, z1..z7 x4.
    """
    tiles = []
    for suit in Suit:
        for rank in range(1, _max_rank(suit) + 1):
            tiles.extend([Tile(suit, rank)] * TileSet.COPIES_PER_TYPE)
    return tiles


def counts_of(tiles: Iterable[Tile]) -> np.ndarray:
    """34-element int8 count array for any iterable of tiles"""
    counts = np.zeros(TileSet.NUM_TILE_TYPES, dtype=np.int8)
    for tile in tiles:
        counts[tile.tile_index] += 1
    return counts


# Convenience functions for creating specific tiles
def man(rank: int) -> Tile:
    return Tile(Suit.MAN, rank)

def pin(rank: int) -> Tile:
    return Tile(Suit.PIN, rank)

def sou(rank: int) -> Tile:
    return Tile(Suit.SOU, rank)

def honor(rank: int) -> Tile:
    return Tile(Suit.HONOR, rank)


# Named honor tiles
EAST = Tile(Suit.HONOR, int(HonorRank.EAST))
SOUTH = Tile(Suit.HONOR, int(HonorRank.SOUTH))
WEST = Tile(Suit.HONOR, int(HonorRank.WEST))
NORTH = Tile(Suit.HONOR, int(HonorRank.NORTH))
WHITE_DRAGON = Tile(Suit.HONOR, int(HonorRank.WHITE))
GREEN_DRAGON = Tile(Suit.HONOR, int(HonorRank.GREEN))
RED_DRAGON = Tile(Suit.HONOR, int(HonorRank.RED))

# Terminals and honors, the thirteen orphans
ORPHANS = [man(1), man(9), pin(1), pin(9), sou(1), sou(9),
           EAST, SOUTH, WEST, NORTH, WHITE_DRAGON, GREEN_DRAGON, RED_DRAGON]
