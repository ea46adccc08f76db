"""
Presentation Interface

The session notifies a renderer after every state change. Renderers only
receive immutable values and never call back into the session, so the
engine can be driven by any front end:
1. NullRenderer for headless use and tests
2. TextRenderer for a terminal
3. Anything else implementing SessionRenderer (a web page, a GUI)
"""

import sys
from abc import ABC, abstractmethod
from typing import Optional, TextIO, Tuple

from .shanten import ShantenResult
from .tiles import Tile


END_EXHAUSTIVE_DRAW = "exhaustive_draw"
END_WIN = "win"


class SessionRenderer(ABC):
    """
    Abstract presentation collaborator.

    Every method is called synchronously by the session right after the
    corresponding state changed.
    """

    @abstractmethod
    def on_hand_changed(self, hand: Tuple[Tile, ...], held: Optional[Tile]) -> None:
        """Resting hand (sorted) and the held drawn tile, if any"""
        pass

    @abstractmethod
    def on_discards_changed(self, discards: Tuple[Tile, ...]) -> None:
        pass

    @abstractmethod
    def on_waits_changed(self, result: ShantenResult) -> None:
        """Latest shanten evaluation"""
        pass

    @abstractmethod
    def on_wall_count_changed(self, remaining: int) -> None:
        pass

    @abstractmethod
    def on_session_ended(self, reason: str) -> None:
        """``reason`` is END_EXHAUSTIVE_DRAW or END_WIN"""
        pass


class NullRenderer(SessionRenderer):
    """Renderer that ignores every notification."""

    def on_hand_changed(self, hand: Tuple[Tile, ...], held: Optional[Tile]) -> None:
        pass

    def on_discards_changed(self, discards: Tuple[Tile, ...]) -> None:
        pass

    def on_waits_changed(self, result: ShantenResult) -> None:
        pass

    def on_wall_count_changed(self, remaining: int) -> None:
        pass

    def on_session_ended(self, reason: str) -> None:
        pass


def format_tiles(tiles, symbols: bool = False) -> str:
    if symbols:
        return "".join(t.symbol for t in tiles)
    return " ".join(t.code for t in tiles)


class TextRenderer(SessionRenderer):
    """
    Plain-text renderer for a terminal.

    Notifications update the last known state; ``render`` builds the
    view and ``show`` writes it to the stream. The end of a session is
    written immediately.
    """

    def __init__(self, stream: Optional[TextIO] = None, symbols: bool = False):
        self.stream = stream or sys.stdout
        self.symbols = symbols
        self.hand: Tuple[Tile, ...] = ()
        self.held: Optional[Tile] = None
        self.discards: Tuple[Tile, ...] = ()
        self.result: Optional[ShantenResult] = None
        self.resting_result: Optional[ShantenResult] = None  # Last 13-tile evaluation
        self.wall_remaining = 0
        self.end_reason: Optional[str] = None

    def on_hand_changed(self, hand: Tuple[Tile, ...], held: Optional[Tile]) -> None:
        self.hand = hand
        self.held = held

    def on_discards_changed(self, discards: Tuple[Tile, ...]) -> None:
        self.discards = discards
        # An empty pile means a fresh deal
        if not discards:
            self.end_reason = None

    def on_waits_changed(self, result: ShantenResult) -> None:
        self.result = result
        if self.held is None:
            self.resting_result = result

    def on_wall_count_changed(self, remaining: int) -> None:
        self.wall_remaining = remaining

    def on_session_ended(self, reason: str) -> None:
        self.end_reason = reason
        if reason == END_WIN:
            self.stream.write("Tsumo! The hand is complete.\n")
        else:
            self.stream.write("Exhaustive draw: the wall is empty.\n")

    def describe_result(self) -> str:
        """One-line shanten summary, 'noten' style when not in tenpai"""
        return self._summarize(self.result)

    def describe_waits(self) -> str:
        """Summary of the resting 13 tiles as they stood before the draw"""
        return self._summarize(self.resting_result)

    @staticmethod
    def _summarize(result: Optional[ShantenResult]) -> str:
        if result is None:
            return ""
        if result.is_complete:
            return "Complete hand"
        if result.waits is not None:
            if not result.waits:
                return "Tenpai (no live waits)"
            return f"Tenpai, waits: {', '.join(result.wait_codes)} ({result.ukeire} left)"
        if result.is_tenpai:
            return "Tenpai after the right discard"
        return f"Noten, shanten {result.shanten}"

    def render(self) -> str:
        """Render as ASCII string."""
        lines = []
        lines.append(f"=== Mahjong Trainer - Wall: {self.wall_remaining} ===")
        positions = "  ".join(f"{i:>2}" for i in range(len(self.hand)))
        lines.append(f"Pos:  {positions}")
        tiles = "  ".join(f"{t.code:>2}" for t in self.hand)
        lines.append(f"Hand: {tiles}")
        if self.held is not None:
            lines.append(f"Drawn: {self.held.code}")
        if self.symbols:
            lines.append(f"       {format_tiles(self.hand, symbols=True)}")
        lines.append(f"Discards: {format_tiles(self.discards, self.symbols) or '-'}")
        if self.resting_result is not None and self.resting_result is not self.result:
            lines.append(f"Before the draw: {self.describe_waits()}")
        summary = self.describe_result()
        if summary:
            lines.append(summary)
        return "\n".join(lines)

    def show(self) -> None:
        self.stream.write(self.render() + "\n")
