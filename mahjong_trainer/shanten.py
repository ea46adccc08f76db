"""
Shanten Calculator

Calculates the shanten number (distance to tenpai) for a closed hand,
the waits of a tenpai hand, and the effect of every possible discard.

Shanten values:
- -1: Complete hand (already won)
-  0: Tenpai (one tile away from winning)
-  1: Iishanten (one away from tenpai)
-  2+: Further from tenpai
"""

from functools import lru_cache
from typing import FrozenSet, Iterable, List, Optional, Tuple, Union
from dataclasses import dataclass
import numpy as np

from .tiles import Tile, TileSet, counts_of


HandLike = Union[np.ndarray, Iterable[Tile]]


@dataclass(frozen=True)
class ShantenResult:
    """
    Result of shanten calculation.

    ``waits`` is only set for a 13-tile hand in tenpai; it is None for
    every other hand.
    """
    shanten: int  # -1 = complete, 0 = tenpai, 1+ = tiles away
    waits: Optional[FrozenSet[Tile]] = None
    ukeire: int = 0  # Unseen copies of the waits
    standard: int = 8
    chiitoitsu: Optional[int] = None
    kokushi: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return self.shanten == -1

    @property
    def is_tenpai(self) -> bool:
        return self.shanten == 0

    @property
    def wait_codes(self) -> List[str]:
        return [t.code for t in sorted(self.waits)] if self.waits else []


@dataclass(frozen=True)
class DiscardOption:
    """The outcome of discarding ``tile`` from a 14-tile hand."""
    tile: Tile
    result: ShantenResult


def _is_suited(idx: int) -> bool:
    return idx < 27


def _rank_of(idx: int) -> int:
    return idx % 9 + 1


def _take(counts: Tuple[int, ...], *indices: int) -> Tuple[int, ...]:
    remaining = list(counts)
    for idx in indices:
        remaining[idx] -= 1
    return tuple(remaining)


@lru_cache(maxsize=1 << 16)
def _standard_search(counts: Tuple[int, ...], melds: int, partials: int, head: int) -> int:
    """
    Minimum standard-form shanten of the remaining tiles, given the groups
    already formed.

    The lowest tile still present must belong to a group it starts: a
    triplet, a run, the head pair, a partial (pair, adjacent or one-gap
    proto-run) or nothing (isolated). Trying all of them covers every
    grouping; results are memoized on the full argument tuple.
    """
    first = next((i for i, c in enumerate(counts) if c), -1)
    if first == -1:
        return 8 - 2 * melds - min(partials, 4 - melds) - head

    i = first
    c = counts[i]
    suited = _is_suited(i)
    rank = _rank_of(i)
    room = melds + partials < 4
    best = 8

    # Complete melds
    if c >= 3:
        best = min(best, _standard_search(_take(counts, i, i, i), melds + 1, partials, head))
    if suited and rank <= 7 and counts[i + 1] and counts[i + 2]:
        best = min(best, _standard_search(_take(counts, i, i + 1, i + 2), melds + 1, partials, head))
    if best == -1:
        return best

    # Head pair
    if c >= 2 and not head:
        best = min(best, _standard_search(_take(counts, i, i), melds, partials, 1))

    # Partial melds
    if room:
        if c >= 2:
            best = min(best, _standard_search(_take(counts, i, i), melds, partials + 1, head))
        if suited and rank <= 8 and counts[i + 1]:
            best = min(best, _standard_search(_take(counts, i, i + 1), melds, partials + 1, head))
        if suited and rank <= 7 and counts[i + 2]:
            best = min(best, _standard_search(_take(counts, i, i + 2), melds, partials + 1, head))

    # Isolated tile
    best = min(best, _standard_search(_take(counts, i), melds, partials, head))
    return best


class ShantenCalculator:
    """
    Shanten calculator for closed 13 and 14 tile hands.

    Calculates shanten for:
    - Standard form (4 melds + 1 pair)
    - Chiitoitsu (7 pairs)
    - Kokushi musou (13 orphans)

    and takes the minimum over the enabled forms.
    """

    # Terminal and honor tile indices
    TERMINALS = [0, 8, 9, 17, 18, 26]  # 1m, 9m, 1p, 9p, 1s, 9s
    HONORS = [27, 28, 29, 30, 31, 32, 33]  # E, S, W, N, Haku, Hatsu, Chun
    KOKUSHI_TILES = TERMINALS + HONORS  # 13 unique tiles for kokushi

    HAND_SIZES = (13, 14)

    def __init__(self, allow_chiitoitsu: bool = True, allow_kokushi: bool = True):
        self.allow_chiitoitsu = allow_chiitoitsu
        self.allow_kokushi = allow_kokushi

    @classmethod
    def from_rules(cls, rules) -> 'ShantenCalculator':
        return cls(allow_chiitoitsu=rules.allow_chiitoitsu, allow_kokushi=rules.allow_kokushi)

    def shanten(self, hand: HandLike) -> int:
        """Shanten of a 13 or 14 tile hand, minimum over the enabled forms."""
        counts = self._validated(hand)
        return self._best_shanten(counts)[0]

    def calculate(self, hand: HandLike, visible: Optional[np.ndarray] = None) -> ShantenResult:
        """
        Calculate shanten, and the waits when a 13-tile hand is in tenpai.

        Args:
            hand: 34-element array of tile counts, or an iterable of tiles
            visible: Optional 34-element array of copies seen outside the
                hand (discards); they are left out of ukeire

        Returns:
            ShantenResult with shanten value and waiting tiles
        """
        counts = self._validated(hand)
        best, standard, chiitoi, kokushi = self._best_shanten(counts)

        waits = None
        ukeire = 0
        if best == 0 and int(counts.sum()) == 13:
            waits = self._waits(counts)
            ukeire = self._ukeire(counts, waits, visible)

        return ShantenResult(
            shanten=best,
            waits=waits,
            ukeire=ukeire,
            standard=standard,
            chiitoitsu=chiitoi,
            kokushi=kokushi,
        )

    def waits(self, hand: HandLike) -> FrozenSet[Tile]:
        """
        Tiles that complete a 13-tile hand.
        Empty unless the hand is in tenpai.
        """
        counts = self._validated(hand)
        if int(counts.sum()) != 13:
            raise ValueError(f"Waits are defined for 13-tile hands, got {int(counts.sum())}")
        if self._best_shanten(counts)[0] != 0:
            return frozenset()
        return self._waits(counts)

    def evaluate_discards(self, hand: HandLike, visible: Optional[np.ndarray] = None) -> List[DiscardOption]:
        """
        Evaluate every distinct discard from a 14-tile hand.

        Returns options sorted best first: lowest shanten, then highest
        ukeire, then tile order.
        """
        counts = self._validated(hand)
        if int(counts.sum()) != 14:
            raise ValueError(f"Discards are evaluated for 14-tile hands, got {int(counts.sum())}")
        seen = np.zeros(TileSet.NUM_TILE_TYPES, dtype=np.int8) if visible is None else np.array(visible, dtype=np.int8)

        options = []
        for tile_idx in np.flatnonzero(counts):
            after = counts.copy()
            after[tile_idx] -= 1
            seen_after = seen.copy()
            seen_after[tile_idx] += 1
            options.append(DiscardOption(Tile.from_index(int(tile_idx)), self.calculate(after, seen_after)))

        options.sort(key=lambda o: (o.result.shanten, -o.result.ukeire, o.tile))
        return options

    def _validated(self, hand: HandLike) -> np.ndarray:
        if isinstance(hand, np.ndarray):
            counts = hand.astype(np.int8)
        else:
            counts = counts_of(hand)
        if counts.shape != (TileSet.NUM_TILE_TYPES,):
            raise ValueError(f"Expected 34 tile counts, got shape {counts.shape}")
        if np.any(counts < 0) or np.any(counts > TileSet.COPIES_PER_TYPE):
            raise ValueError("Tile counts must be between 0 and 4")
        total = int(counts.sum())
        if total not in self.HAND_SIZES:
            raise ValueError(f"Hand must hold 13 or 14 tiles, got {total}")
        return counts

    def _best_shanten(self, counts: np.ndarray) -> Tuple[int, int, Optional[int], Optional[int]]:
        standard = self._calculate_standard(counts)
        chiitoi = self._calculate_chiitoitsu(counts) if self.allow_chiitoitsu else None
        kokushi = self._calculate_kokushi(counts) if self.allow_kokushi else None
        best = min(s for s in (standard, chiitoi, kokushi) if s is not None)
        return best, standard, chiitoi, kokushi

    def _calculate_standard(self, counts: np.ndarray) -> int:
        """
        Calculate standard form shanten (4 melds + 1 pair).

        shanten = 8 - 2*melds - min(partials, 4 - melds) - head
        minimized over every grouping of the tiles.
        """
        return _standard_search(tuple(int(c) for c in counts), 0, 0, 0)

    def _calculate_chiitoitsu(self, counts: np.ndarray) -> int:
        """
        Calculate shanten for chiitoitsu (7 pairs).

        Shanten = 6 - pairs + max(0, 7 - distinct_tiles)
        Four of a kind is one pair, not two.
        """
        pairs = min(int(np.count_nonzero(counts >= 2)), 7)
        distinct = int(np.count_nonzero(counts))
        return 6 - pairs + max(0, 7 - distinct)

    def _calculate_kokushi(self, counts: np.ndarray) -> int:
        """
        Calculate shanten for kokushi musou (13 orphans).

        Need one of each terminal/honor + one pair among them.
        """
        orphans = counts[self.KOKUSHI_TILES]
        unique_count = int(np.count_nonzero(orphans))
        has_pair = bool(np.any(orphans >= 2))
        return 13 - unique_count - (1 if has_pair else 0)

    def _waits(self, counts: np.ndarray) -> FrozenSet[Tile]:
        """Trial-insert every identity and keep those that complete the hand."""
        waits = set()
        for tile_idx in range(TileSet.NUM_TILE_TYPES):
            if counts[tile_idx] >= TileSet.COPIES_PER_TYPE:
                continue  # No fifth copy to draw
            counts[tile_idx] += 1
            if self._best_shanten(counts)[0] == -1:
                waits.add(Tile.from_index(tile_idx))
            counts[tile_idx] -= 1
        return frozenset(waits)

    def _ukeire(self, counts: np.ndarray, waits: FrozenSet[Tile], visible: Optional[np.ndarray]) -> int:
        total = 0
        for tile in waits:
            idx = tile.tile_index
            seen = int(counts[idx]) + (int(visible[idx]) if visible is not None else 0)
            total += max(0, TileSet.COPIES_PER_TYPE - seen)
        return total


def calculate_shanten(hand: HandLike) -> int:
    """
    Convenience function to calculate shanten with every form enabled.

    Args:
        hand: 34-element array of tile counts, or an iterable of tiles

    Returns:
        Shanten value (-1 to 8)
    """
    return ShantenCalculator().shanten(hand)


def get_waits(hand: HandLike) -> FrozenSet[Tile]:
    """Tiles that would complete a 13-tile hand."""
    return ShantenCalculator().waits(hand)
