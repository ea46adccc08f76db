"""
Mahjong Trainer Session

Orchestrates the wall, the hand and the shanten calculator across
draw/discard turns, and reports every change to a renderer.
"""

import logging
from enum import IntEnum
from dataclasses import dataclass
from typing import List, Optional, Tuple
import numpy as np

from .hand import DiscardSelector, HandState
from .renderer import END_EXHAUSTIVE_DRAW, END_WIN, NullRenderer, SessionRenderer
from .rules import DEFAULT_RULES, TrainerRules
from .shanten import DiscardOption, ShantenCalculator, ShantenResult
from .tiles import Tile, TileSet, counts_of
from .wall import Wall, WallExhausted


logger = logging.getLogger(__name__)


class EngineInvariantError(RuntimeError):
    """Tile accounting no longer adds up. Always a bug, never user input."""


class SessionOver(RuntimeError):
    """Raised when acting on a session that has already ended."""


class SessionPhase(IntEnum):
    """Phases of a practice session"""
    NOT_STARTED = 0
    DRAWING = 1         # Resting 13, next step is a draw
    DISCARDING = 2      # Holding a drawn tile, waiting for a discard
    EXHAUSTED = 3       # Wall ran out
    WON = 4             # Drawn tile completed the hand


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of a session for presentation layers"""
    phase: SessionPhase
    hand: Tuple[Tile, ...]
    held: Optional[Tile]
    discards: Tuple[Tile, ...]
    wall_remaining: int
    result: Optional[ShantenResult]
    dora_indicator: Optional[Tile] = None
    end_reason: Optional[str] = None
    turn_count: int = 0

    @property
    def is_over(self) -> bool:
        return self.phase in (SessionPhase.EXHAUSTED, SessionPhase.WON)


class GameSession:
    """
    A single-player practice session.

    After the deal the player always holds exactly one drawn tile between
    discards: every discard is followed by a draw until the wall runs out.
    """

    def __init__(
        self,
        wall: Wall,
        rules: Optional[TrainerRules] = None,
        renderer: Optional[SessionRenderer] = None,
        seed: Optional[int] = None,
    ):
        """
        Prepare a session over an already shuffled wall.

        Args:
            wall: The wall to play from (its tiles are the whole population)
            rules: Rule set to use (default: DEFAULT_RULES)
            renderer: Presentation collaborator (default: NullRenderer)
            seed: Seed the wall was shuffled with, kept for display
        """
        self.rules = rules or DEFAULT_RULES
        self.renderer = renderer or NullRenderer()
        self.seed = seed
        self.wall = wall
        self.calculator = ShantenCalculator.from_rules(self.rules)
        self.hand = HandState()

        self.phase = SessionPhase.NOT_STARTED
        self.result: Optional[ShantenResult] = None
        self.end_reason: Optional[str] = None
        self.turn_count = 0

        self._population = counts_of(wall.tiles + wall.dead_wall)
        if np.any(self._population > TileSet.COPIES_PER_TYPE):
            raise EngineInvariantError("Wall holds more than 4 copies of a tile")

    @classmethod
    def new(
        cls,
        seed: Optional[int] = None,
        rules: Optional[TrainerRules] = None,
        renderer: Optional[SessionRenderer] = None,
    ) -> 'GameSession':
        """Shuffle a full set into a wall, deal, and draw the first tile."""
        wall = Wall.create(seed)
        session = cls(wall, rules, renderer, seed)
        session.start()
        return session

    def start(self) -> SessionSnapshot:
        """Set aside the dead wall, deal 13 tiles and make the first draw"""
        if self.phase != SessionPhase.NOT_STARTED:
            raise RuntimeError("Session already started")

        if self.rules.dead_wall_size:
            self.wall.set_aside(self.rules.dead_wall_size)
        self.hand = HandState.deal_initial(self.wall)
        self.phase = SessionPhase.DRAWING
        self._check_accounting()
        logger.info(f"New session (seed={self.seed}, rules={self.rules.name}): {self.hand}")

        self._evaluate()
        self.renderer.on_hand_changed(self.hand.resting, self.hand.held)
        self.renderer.on_discards_changed(tuple(self.hand.discards))
        self.renderer.on_wall_count_changed(self.wall.remaining)
        self.renderer.on_waits_changed(self.result)
        return self.draw_turn()

    def draw_turn(self) -> SessionSnapshot:
        """
        Draw a tile into the hand and evaluate the 14 tiles.

        An empty wall ends the session as an exhaustive draw.
        """
        self._ensure_active()
        if self.phase != SessionPhase.DRAWING:
            raise ValueError(f"Cannot draw in phase {self.phase.name}")

        try:
            tile = self.wall.draw()
        except WallExhausted:
            self._end(END_EXHAUSTIVE_DRAW)
            return self.snapshot()

        self.hand.receive_draw(tile)
        self.turn_count += 1
        self.phase = SessionPhase.DISCARDING
        self._check_accounting()
        self._evaluate()
        logger.debug(f"Turn {self.turn_count}: drew {tile}, shanten {self.result.shanten}")

        self.renderer.on_hand_changed(self.hand.resting, self.hand.held)
        self.renderer.on_wall_count_changed(self.wall.remaining)
        self.renderer.on_waits_changed(self.result)

        if self.result.is_complete and self.rules.end_on_win:
            self._end(END_WIN)
        return self.snapshot()

    def discard_turn(self, selector: DiscardSelector) -> SessionSnapshot:
        """
        Discard the selected tile, evaluate the resting 13, then draw.

        Raises:
            InvalidSelector: the selector is rejected; nothing changes
            SessionOver: the session has already ended
        """
        self._ensure_active()
        tile = self.hand.discard(selector)
        self.phase = SessionPhase.DRAWING
        self._check_accounting()
        self._evaluate()
        logger.debug(f"Turn {self.turn_count}: discarded {tile}, shanten {self.result.shanten}")

        self.renderer.on_hand_changed(self.hand.resting, self.hand.held)
        self.renderer.on_discards_changed(tuple(self.hand.discards))
        self.renderer.on_waits_changed(self.result)
        return self.draw_turn()

    def discard_options(self) -> List[DiscardOption]:
        """Shanten and waits after each possible discard of the held hand"""
        if self.hand.held is None:
            return []
        return self.calculator.evaluate_discards(self.hand.to_count_array(), self._visible_counts())

    @property
    def is_over(self) -> bool:
        return self.phase in (SessionPhase.EXHAUSTED, SessionPhase.WON)

    @property
    def wall_remaining(self) -> int:
        return self.wall.remaining

    @property
    def dora_indicator(self) -> Optional[Tile]:
        return self.wall.dora_indicator

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self.phase,
            hand=self.hand.resting,
            held=self.hand.held,
            discards=tuple(self.hand.discards),
            wall_remaining=self.wall.remaining,
            result=self.result,
            dora_indicator=self.wall.dora_indicator,
            end_reason=self.end_reason,
            turn_count=self.turn_count,
        )

    def tile_counts(self) -> np.ndarray:
        """Per-identity counts across wall, dead wall, hand and discards"""
        return (
            counts_of(self.wall.tiles)
            + counts_of(self.wall.dead_wall)
            + self.hand.to_count_array()
            + counts_of(self.hand.discards)
        )

    def _ensure_active(self) -> None:
        if self.is_over:
            raise SessionOver(f"Session is already over ({self.end_reason})")
        if self.phase == SessionPhase.NOT_STARTED:
            raise RuntimeError("Session has not started")

    def _end(self, reason: str) -> None:
        self.phase = SessionPhase.WON if reason == END_WIN else SessionPhase.EXHAUSTED
        self.end_reason = reason
        logger.info(f"Session ended: {reason} after {self.turn_count} draws")
        self.renderer.on_session_ended(reason)

    def _visible_counts(self) -> np.ndarray:
        visible = counts_of(self.hand.discards)
        if self.wall.dora_indicator is not None:
            visible[self.wall.dora_indicator.tile_index] += 1
        return visible

    def _evaluate(self) -> None:
        self.result = self.calculator.calculate(self.hand.to_count_array(), self._visible_counts())

    def _check_accounting(self) -> None:
        if not self.rules.check_invariants:
            return
        counts = self.tile_counts()
        if not np.array_equal(counts, self._population):
            diff = np.flatnonzero(counts != self._population)
            bad = ", ".join(Tile.from_index(int(i)).code for i in diff)
            raise EngineInvariantError(f"Tile accounting mismatch for {bad}")


class Trainer:
    """
    Owns the current session and the renderer it reports to.

    This is the entry point for user actions; a new session replaces the
    old one only once it has been fully dealt.
    """

    def __init__(self, rules: Optional[TrainerRules] = None, renderer: Optional[SessionRenderer] = None):
        self.rules = rules or DEFAULT_RULES
        self.renderer = renderer or NullRenderer()
        self.session: Optional[GameSession] = None

    def request_new_session(self, seed: Optional[int] = None) -> SessionSnapshot:
        session = GameSession.new(seed, self.rules, self.renderer)
        self.session = session
        return session.snapshot()

    def request_discard(self, selector: DiscardSelector) -> SessionSnapshot:
        if self.session is None:
            raise RuntimeError("No session in progress")
        return self.session.discard_turn(selector)
