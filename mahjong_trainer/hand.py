"""
Mahjong Trainer Hand Module

Holds the player's resting hand, the tile drawn this turn and the
discard pile.
"""

from enum import IntEnum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import numpy as np

from .tiles import Tile, counts_of
from .wall import Wall


HAND_SIZE = 13


class InvalidSelector(ValueError):
    """Raised when a discard selector does not refer to a tile in hand."""


class SelectorKind(IntEnum):
    """What a discard selector points at"""
    HELD = 0        # The tile drawn this turn
    POSITION = 1    # A tile of the sorted resting hand


@dataclass(frozen=True)
class DiscardSelector:
    """
    Chooses the tile to discard.

    Use ``DiscardSelector.held()`` for the drawn tile and
    ``DiscardSelector.at(i)`` for position i of the sorted resting hand.
    """
    kind: SelectorKind
    position: Optional[int] = None

    @classmethod
    def held(cls) -> 'DiscardSelector':
        return cls(SelectorKind.HELD)

    @classmethod
    def at(cls, position: int) -> 'DiscardSelector':
        return cls(SelectorKind.POSITION, position)

    def __repr__(self) -> str:
        if self.kind == SelectorKind.HELD:
            return "DiscardSelector(held)"
        return f"DiscardSelector({self.position})"


@dataclass
class HandState:
    """
    A single player's tiles.

    Attributes:
        tiles: The resting hand, always sorted by suit then rank
        held: The tile drawn this turn, kept apart until a discard
        discards: Discarded tiles in order
    """
    tiles: List[Tile] = field(default_factory=list)
    held: Optional[Tile] = None
    discards: List[Tile] = field(default_factory=list)

    def __post_init__(self):
        self.tiles.sort()

    @classmethod
    def deal_initial(cls, wall: Wall) -> 'HandState':
        """Draw 13 tiles from the wall, in pop order, into a sorted hand."""
        return cls(tiles=wall.draw_many(HAND_SIZE))

    def receive_draw(self, tile: Tile) -> None:
        """Hold a freshly drawn tile; the hand has 14 tiles until a discard."""
        if self.held is not None:
            raise RuntimeError(f"Already holding {self.held}, cannot receive {tile}")
        self.held = tile

    def discard(self, selector: DiscardSelector) -> Tile:
        """
        Discard the selected tile and return it.

        Discarding from the resting hand merges the held tile in and
        re-sorts. The hand is unchanged if the selector is rejected.

        Raises:
            InvalidSelector: nothing held, or position out of range
        """
        if self.held is None:
            if selector.kind == SelectorKind.HELD:
                raise InvalidSelector("No drawn tile is held")
            raise InvalidSelector("Cannot discard from a resting hand without a drawn tile")

        if selector.kind == SelectorKind.HELD:
            tile = self.held
        else:
            position = selector.position
            if isinstance(position, bool) or not isinstance(position, int):
                raise InvalidSelector(f"Position must be an integer, got {position!r}")
            if not 0 <= position < len(self.tiles):
                raise InvalidSelector(
                    f"Position {position} is out of range for a hand of {len(self.tiles)}"
                )
            tile = self.tiles.pop(position)
            self.tiles.append(self.held)
            self.tiles.sort()

        self.held = None
        self.discards.append(tile)
        return tile

    def all_tiles(self) -> List[Tile]:
        """Resting tiles plus the held tile, sorted"""
        if self.held is None:
            return list(self.tiles)
        return sorted(self.tiles + [self.held])

    def to_count_array(self, include_held: bool = True) -> np.ndarray:
        """34-element count array of the hand"""
        return counts_of(self.all_tiles() if include_held else self.tiles)

    def index_of(self, tile: Tile) -> int:
        """Position of the first resting copy of ``tile``"""
        try:
            return self.tiles.index(tile)
        except ValueError:
            raise InvalidSelector(f"{tile} is not in the resting hand") from None

    @property
    def size(self) -> int:
        return len(self.tiles) + (1 if self.held is not None else 0)

    @property
    def resting(self) -> Tuple[Tile, ...]:
        return tuple(self.tiles)

    def __str__(self) -> str:
        text = " ".join(t.code for t in self.tiles)
        if self.held is not None:
            text += f" + {self.held.code}"
        return text
