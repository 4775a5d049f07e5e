"""Derived stat calculator over the bonus ledger.

Every total is the rulebook base plus whatever the ledger holds for that
(type, target). Catch-all ``'all'`` entries are added for defenses and
deflect; the ledger itself keeps them in their own bucket. Movement,
lifting/carrying capacity, recovery die, and senses range come from
attribute tables plus DERIVED bonuses.
"""

import math
from dataclasses import dataclass, field

from cosmere_planner.engine.ledger import BonusLedger, FormulaContext
from cosmere_planner.models.character import Character
from cosmere_planner.models.constants import (
    ATTRIBUTES,
    BASE_DEFENSE,
    DEFENSE_ATTRIBUTES,
    SKILL_GOVERNING_ATTRIBUTE,
    SURGE_SKILLS,
    BonusType,
    SkillType,
)


# Health gained on reaching each level, index 0 = level 1.
HEALTH_PER_LEVEL: tuple[int, ...] = (
    10, 5, 5, 5, 5,
    4, 4, 4, 4, 4,
    3, 3, 3, 3, 3,
    2, 2, 2, 2, 2,
    1,
)

# Levels at which Strength is added to maximum health again.
HEALTH_STRENGTH_LEVELS = (1, 6, 11, 16, 21)


def base_health(strength: int, level: int) -> int:
    """Health from levels alone: per-level gains plus Strength at each tier start."""
    level = max(1, min(level, len(HEALTH_PER_LEVEL)))
    gained = sum(HEALTH_PER_LEVEL[:level])
    strength_levels = sum(1 for lvl in HEALTH_STRENGTH_LEVELS if lvl <= level)
    return gained + strength * strength_levels


# Attribute-driven tables, indexed by attribute // 2 and capped at the last entry.
MOVEMENT_TABLE: tuple[int, ...] = (20, 25, 30, 40, 60, 80)               # speed, feet
LIFTING_TABLE: tuple[int, ...] = (100, 200, 500, 1000, 5000, 10000)     # strength, lb
CARRYING_TABLE: tuple[int, ...] = (50, 100, 250, 500, 2500, 5000)       # strength, lb
RECOVERY_DIE_TABLE: tuple[str, ...] = ("1d4", "1d6", "1d8", "1d10", "1d12", "1d20")  # willpower
SENSES_RANGE_TABLE: tuple[float, ...] = (5, 10, 20, 50, 100, math.inf)  # awareness, feet


def table_value(table: tuple, attribute: int):
    """Look up *attribute* in one of the tables above."""
    index = max(0, attribute // 2)
    return table[min(index, len(table) - 1)]


@dataclass
class CharacterStats:
    """Computed stat snapshot for a character."""

    # Attributes (base + ATTRIBUTE bonuses)
    attributes: dict[str, int] = field(default_factory=dict)

    # Defenses (10 + two attributes + DEFENSE bonuses)
    defenses: dict[str, int] = field(default_factory=dict)
    deflect: int = 0

    # Resources
    max_health: int = 0
    max_focus: int = 0
    max_investiture: int = 0

    # Skill totals (rank + governing attribute + SKILL bonuses)
    skills: dict[SkillType, int] = field(default_factory=dict)

    # Derived attributes (table value + DERIVED bonuses)
    movement: int = 0
    lifting_capacity: int = 0
    carrying_capacity: int = 0
    recovery_die: str = RECOVERY_DIE_TABLE[0]
    senses_range: float = 0


def _bonus(
    ledger: BonusLedger,
    bonus_type: BonusType,
    target: str,
    context: FormulaContext,
    *,
    with_all: bool = False,
) -> int:
    if with_all:
        return int(ledger.get_bonuses_for_with_all(bonus_type, target, context))
    return int(ledger.get_bonuses_for(bonus_type, target, context))


def compute_stats(character: Character) -> CharacterStats:
    """Compute attributes, defenses, deflect, resources, skill totals, and derived attributes."""
    ledger = character.bonuses
    context = character.formula_context()

    attributes = {
        name: character.attributes.get(name, 0)
        + _bonus(ledger, BonusType.ATTRIBUTE, name, context)
        for name in ATTRIBUTES
    }

    defenses: dict[str, int] = {}
    for defense, (first, second) in DEFENSE_ATTRIBUTES.items():
        defenses[defense] = (
            BASE_DEFENSE
            + attributes[first]
            + attributes[second]
            + _bonus(ledger, BonusType.DEFENSE, defense, context, with_all=True)
        )

    deflect = _bonus(ledger, BonusType.DEFLECT, "physical", context, with_all=True)

    max_health = base_health(attributes["strength"], character.level) + _bonus(
        ledger, BonusType.RESOURCE, "health", context
    )
    max_focus = 2 + attributes["willpower"] + _bonus(
        ledger, BonusType.RESOURCE, "focus", context
    )
    max_investiture = 0
    if character.has_spoken_ideal():
        max_investiture = (
            2
            + max(attributes["awareness"], attributes["presence"])
            + _bonus(ledger, BonusType.RESOURCE, "investiture", context)
        )

    skills: dict[SkillType, int] = {}
    for skill in SkillType:
        rank = character.skills.get_rank(skill)
        # Surges only count once the character can use them.
        if skill in SURGE_SKILLS and rank <= 0:
            continue
        governing = attributes[SKILL_GOVERNING_ATTRIBUTE[skill]]
        skills[skill] = (
            rank
            + governing
            + _bonus(ledger, BonusType.SKILL, skill.value.lower(), context)
        )

    def derived(target: str) -> int:
        return _bonus(ledger, BonusType.DERIVED, target, context)

    strength = attributes["strength"]
    movement = table_value(MOVEMENT_TABLE, attributes["speed"]) + derived("movement")
    lifting = table_value(LIFTING_TABLE, strength) + derived("lifting_capacity")
    carrying = table_value(CARRYING_TABLE, strength) + derived("carrying_capacity")
    senses = table_value(SENSES_RANGE_TABLE, attributes["awareness"]) + derived("senses_range")

    # DERIVED recovery_die bonuses step the die size along its table.
    die_step = max(0, attributes["willpower"] // 2) + derived("recovery_die")
    recovery_die = RECOVERY_DIE_TABLE[max(0, min(die_step, len(RECOVERY_DIE_TABLE) - 1))]

    return CharacterStats(
        attributes=attributes,
        defenses=defenses,
        deflect=deflect,
        max_health=max_health,
        max_focus=max_focus,
        max_investiture=max_investiture,
        skills=skills,
        movement=movement,
        lifting_capacity=lifting,
        carrying_capacity=carrying,
        recovery_die=recovery_die,
        senses_range=senses,
    )
