"""
Mahjong Trainer Wall Module

Handles the wall (tile pile), shuffling and drawing.
"""

import logging
import random
from typing import List, Optional, Sequence
from dataclasses import dataclass, field

from .tiles import Tile, TileSet


logger = logging.getLogger(__name__)


class WallExhausted(RuntimeError):
    """Raised when a draw is attempted on an empty wall."""


@dataclass
class Wall:
    """
    Represents the Mahjong wall.

    The live end of the wall is the end of ``tiles``: drawing pops from
    there. An optional dead wall can be set aside from the other end; its
    first tile is the revealed dora indicator.

    Attributes:
        tiles: Remaining live tiles in the wall
        dead_wall: Tiles set aside and never drawn
        dealt_count: Number of tiles that have been dealt/drawn
    """
    tiles: List[Tile] = field(default_factory=list)
    dead_wall: List[Tile] = field(default_factory=list)
    dealt_count: int = 0

    @classmethod
    def shuffle(cls, tiles: Sequence[Tile], rng: Optional[random.Random] = None) -> 'Wall':
        """
        Build a wall from a uniform random permutation of ``tiles``.

        Fisher-Yates: for i from the last index down to 1, swap element i
        with a uniformly random element j <= i. ``rng`` only needs a
        ``randint(a, b)`` method, so tests can pass a stub.
        """
        if rng is None:
            rng = random.Random()
        shuffled = list(tiles)
        for i in range(len(shuffled) - 1, 0, -1):
            j = rng.randint(0, i)
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
        return cls(tiles=shuffled)

    @classmethod
    def create(cls, seed: Optional[int] = None) -> 'Wall':
        """Create and shuffle a full 136-tile wall"""
        return cls.shuffle(TileSet.create_full_set(), random.Random(seed))

    def set_aside(self, count: int) -> List[Tile]:
        """
        Move ``count`` tiles from the non-live end into the dead wall.
        Returns the dead wall.
        """
        if count > len(self.tiles):
            raise WallExhausted(f"Cannot set aside {count} tiles from a wall of {len(self.tiles)}")
        self.dead_wall.extend(self.tiles[:count])
        del self.tiles[:count]
        logger.debug(f"Set aside {count} tiles, {self.remaining} live tiles remain")
        return self.dead_wall

    @property
    def dora_indicator(self) -> Optional[Tile]:
        """The revealed dora indicator, if a dead wall was set aside"""
        return self.dead_wall[0] if self.dead_wall else None

    def draw(self) -> Tile:
        """
        Draw one tile from the live end of the wall.

        Raises:
            WallExhausted: if the wall is empty
        """
        if not self.tiles:
            raise WallExhausted("Cannot draw from an empty wall")
        tile = self.tiles.pop()
        self.dealt_count += 1
        return tile

    def draw_many(self, count: int) -> List[Tile]:
        """
        Draw ``count`` tiles in pop order.
        The wall is left untouched if it holds fewer than ``count`` tiles.
        """
        if count > len(self.tiles):
            raise WallExhausted(f"Cannot draw {count} tiles, only {len(self.tiles)} remain")
        return [self.draw() for _ in range(count)]

    @property
    def remaining(self) -> int:
        """Number of tiles remaining in the wall"""
        return len(self.tiles)

    def __len__(self) -> int:
        return len(self.tiles)

    def __repr__(self) -> str:
        return f"Wall({self.remaining} tiles remaining)"
