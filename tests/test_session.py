"""
Tests for the practice session, the renderers and the terminal front end
"""

import io

import pytest
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mahjong_trainer.tiles import EAST, tiles_from_codes
from mahjong_trainer.wall import Wall
from mahjong_trainer.hand import DiscardSelector, InvalidSelector
from mahjong_trainer.rules import (
    TrainerRules, DEFAULT_RULES, RIICHI_RULES, STANDARD_ONLY_RULES, get_rules
)
from mahjong_trainer.renderer import SessionRenderer, TextRenderer, END_WIN, END_EXHAUSTIVE_DRAW
from mahjong_trainer.session import (
    GameSession, SessionPhase, SessionOver, Trainer, EngineInvariantError
)
from mahjong_trainer.shanten import ShantenResult
from mahjong_trainer import cli


PRACTICE_RULES = TrainerRules(name="Practice", end_on_win=False)


class RecordingRenderer(SessionRenderer):
    """Collects every notification in order"""

    def __init__(self):
        self.events = []

    def on_hand_changed(self, hand, held):
        self.events.append(("hand", hand, held))

    def on_discards_changed(self, discards):
        self.events.append(("discards", discards))

    def on_waits_changed(self, result):
        self.events.append(("waits", result))

    def on_wall_count_changed(self, remaining):
        self.events.append(("wall", remaining))

    def on_session_ended(self, reason):
        self.events.append(("ended", reason))

    def kinds(self):
        return [e[0] for e in self.events]

    def ended(self):
        return [e[1] for e in self.events if e[0] == "ended"]


def stacked_wall(hand_codes: str, draws: str) -> Wall:
    """Wall that deals ``hand_codes`` and then draws ``draws`` in order"""
    draw_tiles = tiles_from_codes(draws)
    return Wall(list(reversed(draw_tiles)) + tiles_from_codes(hand_codes))


class TestRules:
    """Test rule presets"""

    def test_presets(self):
        assert get_rules("default") is DEFAULT_RULES
        assert get_rules("Riichi") is RIICHI_RULES
        assert get_rules("standard") is STANDARD_ONLY_RULES
        assert RIICHI_RULES.reveals_dora
        assert not DEFAULT_RULES.reveals_dora

    def test_unknown_rules(self):
        with pytest.raises(ValueError):
            get_rules("mcr")

    def test_invalid_dead_wall(self):
        with pytest.raises(ValueError):
            TrainerRules(dead_wall_size=130)


class TestGameSession:
    """Test session turns"""

    def test_new_session(self):
        session = GameSession.new(seed=42)
        snap = session.snapshot()
        assert snap.phase == SessionPhase.DISCARDING
        assert len(snap.hand) == 13
        assert snap.held is not None
        assert snap.discards == ()
        assert snap.wall_remaining == 136 - 14
        assert snap.turn_count == 1
        assert snap.result is not None

    def test_all_tiles_accounted_at_start(self):
        session = GameSession.new(seed=1)
        counts = session.tile_counts()
        assert np.all(counts == 4)
        assert counts.sum() == 136

    def test_seed_is_deterministic(self):
        a = GameSession.new(seed=9).snapshot()
        b = GameSession.new(seed=9).snapshot()
        assert a.hand == b.hand
        assert a.held == b.held

    def test_accounting_through_exhaustive_draw(self):
        renderer = RecordingRenderer()
        session = GameSession.new(seed=7, rules=PRACTICE_RULES, renderer=renderer)
        turns = 0
        while not session.is_over:
            snap = session.snapshot()
            in_hand = len(snap.hand) + (1 if snap.held is not None else 0)
            assert snap.wall_remaining + in_hand + len(snap.discards) == 136
            assert np.all(session.tile_counts() == 4)
            session.discard_turn(DiscardSelector.held())
            turns += 1

        snap = session.snapshot()
        assert snap.phase == SessionPhase.EXHAUSTED
        assert snap.end_reason == END_EXHAUSTIVE_DRAW
        assert snap.wall_remaining == 0
        assert snap.held is None
        assert len(snap.hand) == 13
        assert len(snap.discards) == 123
        assert turns == 123
        assert renderer.ended() == [END_EXHAUSTIVE_DRAW]

    def test_exhausted_exactly_when_wall_empty(self):
        renderer = RecordingRenderer()
        wall = stacked_wall("m1 m4 m7 p1 p4 p7 s1 s4 s7 z1 z2 z3 z4", "z5")
        session = GameSession(wall, renderer=renderer)
        session.start()
        assert session.wall_remaining == 0
        assert session.phase == SessionPhase.DISCARDING
        assert renderer.ended() == []

        snap = session.discard_turn(DiscardSelector.held())
        assert snap.phase == SessionPhase.EXHAUSTED
        assert renderer.ended() == [END_EXHAUSTIVE_DRAW]
        assert renderer.events[-1] == ("ended", END_EXHAUSTIVE_DRAW)

    def test_actions_after_exhaustion(self):
        wall = stacked_wall("m1 m4 m7 p1 p4 p7 s1 s4 s7 z1 z2 z3 z4", "z5")
        session = GameSession(wall)
        session.start()
        session.discard_turn(DiscardSelector.at(0))
        with pytest.raises(SessionOver):
            session.discard_turn(DiscardSelector.held())
        with pytest.raises(SessionOver):
            session.draw_turn()

    def test_win_on_draw(self):
        renderer = RecordingRenderer()
        wall = stacked_wall("m2 m3 m4 p5 p5 p5 s6 s7 s8 m4 m4 z1 z1", "m9 z1")
        session = GameSession(wall, renderer=renderer)
        session.start()
        assert session.result.shanten == 0

        snap = session.discard_turn(DiscardSelector.held())
        assert snap.held == EAST
        assert snap.result.shanten == -1
        assert snap.phase == SessionPhase.WON
        assert renderer.ended() == [END_WIN]
        with pytest.raises(SessionOver):
            session.discard_turn(DiscardSelector.held())

    def test_win_can_be_played_through(self):
        wall = stacked_wall("m2 m3 m4 p5 p5 p5 s6 s7 s8 m4 m4 z1 z1", "z1 m9")
        session = GameSession(wall, rules=PRACTICE_RULES)
        snap = session.start()
        assert snap.result.is_complete
        assert snap.phase == SessionPhase.DISCARDING
        snap = session.discard_turn(DiscardSelector.held())
        assert snap.held.code == "m9"

    def test_tenpai_waits_after_discard(self):
        renderer = RecordingRenderer()
        wall = stacked_wall("m2 m3 p5 p5 p5 s6 s7 s8 z1 z1 z1 m7 m7", "z7 p1")
        session = GameSession(wall, renderer=renderer)
        session.start()
        session.discard_turn(DiscardSelector.held())
        waits_events = [e[1] for e in renderer.events if e[0] == "waits"]
        after_discard = waits_events[-2]
        assert isinstance(after_discard, ShantenResult)
        assert after_discard.wait_codes == ["m1", "m4"]
        assert waits_events[-1].waits is None

    def test_invalid_selector_leaves_state(self):
        session = GameSession.new(seed=3)
        before = session.snapshot()
        with pytest.raises(InvalidSelector):
            session.discard_turn(DiscardSelector.at(13))
        assert session.snapshot() == before

        session.discard_turn(DiscardSelector.at(0))
        assert len(session.snapshot().discards) == 1

    def test_notifications_on_discard(self):
        renderer = RecordingRenderer()
        session = GameSession.new(seed=5, renderer=renderer)
        renderer.events.clear()
        session.discard_turn(DiscardSelector.held())
        assert renderer.kinds() == ["hand", "discards", "waits", "hand", "wall", "waits"]
        hand_event = renderer.events[0]
        assert hand_event[2] is None
        assert len(hand_event[1]) == 13

    def test_draw_while_holding(self):
        session = GameSession.new(seed=5)
        with pytest.raises(ValueError):
            session.draw_turn()

    def test_riichi_dead_wall(self):
        session = GameSession.new(seed=2, rules=RIICHI_RULES)
        snap = session.snapshot()
        assert snap.dora_indicator is not None
        assert snap.wall_remaining == 136 - 14 - 14
        assert np.all(session.tile_counts() == 4)

    def test_discard_options(self):
        session = GameSession.new(seed=4)
        options = session.discard_options()
        assert options
        keys = [(o.result.shanten, -o.result.ukeire) for o in options]
        assert keys == sorted(keys)

    def test_accounting_mismatch_is_fatal(self):
        session = GameSession.new(seed=6)
        session.hand.discards.append(EAST)
        with pytest.raises(EngineInvariantError):
            session.discard_turn(DiscardSelector.held())


class TestTrainer:
    """Test the user-action boundary"""

    def test_discard_without_session(self):
        trainer = Trainer()
        with pytest.raises(RuntimeError):
            trainer.request_discard(DiscardSelector.held())

    def test_new_session_replaces(self):
        renderer = RecordingRenderer()
        trainer = Trainer(renderer=renderer)
        trainer.request_new_session(seed=1)
        first = trainer.session
        trainer.request_discard(DiscardSelector.held())

        snap = trainer.request_new_session(seed=1)
        assert trainer.session is not first
        assert snap.discards == ()
        assert snap.hand == GameSession.new(seed=1).snapshot().hand


class TestTextRenderer:
    """Test the terminal renderer"""

    def test_render(self):
        out = io.StringIO()
        renderer = TextRenderer(out, symbols=True)
        GameSession.new(seed=8, renderer=renderer)
        text = renderer.render()
        assert "Wall: 122" in text
        assert "Drawn:" in text
        assert "Discards: -" in text

    def test_describe_tenpai(self):
        renderer = TextRenderer(io.StringIO())
        wall = stacked_wall("m2 m3 p5 p5 p5 s6 s7 s8 z1 z1 z1 m7 m7", "z7 p1")
        session = GameSession(wall, renderer=renderer)
        session.start()
        session.discard_turn(DiscardSelector.held())
        # Latest result is the 14-tile hand after the auto draw
        assert renderer.describe_result() == "Tenpai after the right discard"
        assert renderer.describe_waits() == "Tenpai, waits: m1, m4 (8 left)"
        renderer.on_hand_changed(renderer.hand, None)
        renderer.on_waits_changed(ShantenResult(shanten=0, waits=frozenset([EAST]), ukeire=3))
        assert renderer.describe_result() == "Tenpai, waits: z1 (3 left)"
        renderer.on_waits_changed(ShantenResult(shanten=2))
        assert renderer.describe_result() == "Noten, shanten 2"

    def test_render_keeps_resting_waits_after_draw(self):
        out = io.StringIO()
        renderer = TextRenderer(out)
        trainer = Trainer(renderer=renderer)
        trainer.session = GameSession(
            stacked_wall("m2 m3 p5 p5 p5 s6 s7 s8 z1 z1 z1 m7 m7", "z7 p1"), renderer=renderer
        )
        trainer.session.start()
        assert renderer.result.waits is None
        assert "Before the draw: Tenpai, waits: m1, m4 (8 left)" in renderer.render()

        trainer.request_discard(DiscardSelector.held())
        text = renderer.render()
        assert "Drawn: p1" in text
        assert "Before the draw: Tenpai, waits: m1, m4 (8 left)" in text
        assert "Tenpai after the right discard" in text

    def test_new_deal_replaces_resting_waits(self):
        renderer = TextRenderer(io.StringIO())
        session = GameSession(
            stacked_wall("m2 m3 p5 p5 p5 s6 s7 s8 z1 z1 z1 m7 m7", "z7 p1"), renderer=renderer
        )
        session.start()
        session.discard_turn(DiscardSelector.held())
        old = renderer.resting_result
        GameSession.new(seed=4, renderer=renderer)
        assert renderer.resting_result is not old
        assert renderer.resting_result is not renderer.result
        assert renderer.held is not None

    def test_session_end_written(self):
        out = io.StringIO()
        renderer = TextRenderer(out)
        wall = stacked_wall("m2 m3 m4 p5 p5 p5 s6 s7 s8 m4 m4 z1 z1", "z1")
        GameSession(wall, renderer=renderer).start()
        assert "Tsumo" in out.getvalue()
        assert renderer.describe_result() == "Complete hand"


class TestCli:
    """Test the terminal front end"""

    def scripted(self, commands):
        it = iter(commands)

        def read(prompt):
            try:
                return next(it)
            except StopIteration:
                raise EOFError

        return read

    def test_play_session(self):
        out = io.StringIO()
        trainer = cli.play(seed=1, read=self.scripted(["t", "0", "h", "99", "zz", "q"]), out=out)
        text = out.getvalue()
        assert "out of range" in text
        assert "Cannot parse tile code" in text
        assert "Best discards:" in text
        assert "Thanks for playing!" in text
        assert len(trainer.session.snapshot().discards) == 2

    def test_discard_by_code(self):
        out = io.StringIO()
        renderer = TextRenderer(out)
        trainer = Trainer(renderer=renderer)
        trainer.request_new_session(seed=2)
        code = trainer.session.hand.tiles[5].code
        assert cli.handle_command(trainer, renderer, code, out)
        assert trainer.session.snapshot().discards[-1].code == code

    def test_new_and_quit(self):
        out = io.StringIO()
        renderer = TextRenderer(out)
        trainer = Trainer(renderer=renderer)
        trainer.request_new_session(seed=2)
        assert cli.handle_command(trainer, renderer, "n 3", out)
        assert trainer.session.snapshot().hand == GameSession.new(seed=3).snapshot().hand
        assert cli.handle_command(trainer, renderer, "n x", out)
        assert "Seed must be a number" in out.getvalue()
        assert not cli.handle_command(trainer, renderer, "q", out)

    @pytest.mark.parametrize("command", ["²", "1²", "٣", "--3", "m²", "n ²", "n -1"])
    def test_non_ascii_numbers_reprompt(self, command):
        out = io.StringIO()
        renderer = TextRenderer(out)
        trainer = Trainer(renderer=renderer)
        trainer.request_new_session(seed=2)
        before = trainer.session.snapshot()
        assert cli.handle_command(trainer, renderer, command, out)
        assert trainer.session.snapshot() == before
        assert out.getvalue()

    def test_parse_number(self):
        assert cli.parse_number("12") == 12
        assert cli.parse_number("-1") == -1
        assert cli.parse_number("٣") is None
        assert cli.parse_number("-") is None
        assert cli.parse_number("") is None

    def test_main_ends_on_eof(self, monkeypatch):
        def no_input(prompt):
            raise EOFError

        monkeypatch.setattr("builtins.input", no_input)
        cli.main(["--seed", "1", "--rules", "riichi"])
