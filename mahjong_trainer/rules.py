"""
Trainer Rule Sets

Defines the configurations a practice session can run under:
- Default (every tile is live, all hand forms count)
- Riichi (a 14-tile dead wall is set aside and a dora indicator revealed)
- Standard only (seven pairs and thirteen orphans are not evaluated)
"""

from dataclasses import dataclass


@dataclass
class TrainerRules:
    """
    Rule configuration for a practice session.

    The engine itself is the same for every preset; these switches only
    change which hand forms the shanten calculator considers and how the
    wall is laid out.
    """

    name: str = "Default"

    # Special hand forms evaluated alongside 4 melds + 1 pair
    allow_chiitoitsu: bool = True   # Seven pairs
    allow_kokushi: bool = True      # Thirteen orphans

    # Tiles set aside before the deal (0 = no dead wall).
    # The first dead-wall tile is the revealed dora indicator.
    dead_wall_size: int = 0

    # End the session as soon as a drawn tile completes the hand
    end_on_win: bool = True

    # Re-check tile accounting after every mutation
    check_invariants: bool = True

    def __post_init__(self):
        if not 0 <= self.dead_wall_size <= 136 - 14:
            raise ValueError(f"dead_wall_size must leave room for a deal, got {self.dead_wall_size}")

    @property
    def reveals_dora(self) -> bool:
        return self.dead_wall_size > 0

    def __repr__(self) -> str:
        return f"TrainerRules({self.name})"


# Plain practice: no dead wall, every form counts
DEFAULT_RULES = TrainerRules(
    name="Default",
    allow_chiitoitsu=True,
    allow_kokushi=True,
    dead_wall_size=0,
    end_on_win=True,
    check_invariants=True,
)


# Riichi-style wall with a 14-tile dead wall and a dora indicator
RIICHI_RULES = TrainerRules(
    name="Riichi",
    allow_chiitoitsu=True,
    allow_kokushi=True,
    dead_wall_size=14,
    end_on_win=True,
    check_invariants=True,
)


# Drill for 4 melds + 1 pair only
STANDARD_ONLY_RULES = TrainerRules(
    name="Standard",
    allow_chiitoitsu=False,
    allow_kokushi=False,
    dead_wall_size=0,
    end_on_win=True,
    check_invariants=True,
)


RULE_PRESETS = {
    "default": DEFAULT_RULES,
    "riichi": RIICHI_RULES,
    "standard": STANDARD_ONLY_RULES,
}


def get_rules(name: str) -> TrainerRules:
    """Look up a rule preset by name (case-insensitive)."""
    try:
        return RULE_PRESETS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown rules: {name}. Choose from {list(RULE_PRESETS.keys())}") from None
