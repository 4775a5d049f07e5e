"""Cosmere RPG attributes, skills, bonus types, and source kinds.

Skill and attribute names follow the rulebook; enum values are the strings
used by the rules data and by persisted snapshots.
"""

from enum import Enum


class BonusType(str, Enum):
    """What a ledger entry modifies."""
    ATTRIBUTE = "attribute"
    SKILL = "skill"
    DEFENSE = "defense"
    RESOURCE = "resource"
    DERIVED = "derived"
    DEFLECT = "deflect"


class SkillType(str, Enum):
    """Skills, including the ten surge skills."""
    # Physical
    AGILITY = "AGILITY"
    ATHLETICS = "ATHLETICS"
    HEAVY_WEAPONRY = "HEAVY_WEAPONRY"
    LIGHT_WEAPONRY = "LIGHT_WEAPONRY"
    STEALTH = "STEALTH"
    THIEVERY = "THIEVERY"

    # Cognitive
    CRAFTING = "CRAFTING"
    DEDUCTION = "DEDUCTION"
    DISCIPLINE = "DISCIPLINE"
    INTIMIDATION = "INTIMIDATION"
    LORE = "LORE"
    MEDICINE = "MEDICINE"

    # Spiritual
    DECEPTION = "DECEPTION"
    INSIGHT = "INSIGHT"
    LEADERSHIP = "LEADERSHIP"
    PERCEPTION = "PERCEPTION"
    PERSUASION = "PERSUASION"
    SURVIVAL = "SURVIVAL"

    # Surges
    ADHESION = "ADHESION"
    GRAVITATION = "GRAVITATION"
    DIVISION = "DIVISION"
    ABRASION = "ABRASION"
    PROGRESSION = "PROGRESSION"
    ILLUMINATION = "ILLUMINATION"
    TRANSFORMATION = "TRANSFORMATION"
    TRANSPORTATION = "TRANSPORTATION"
    COHESION = "COHESION"
    TENSION = "TENSION"


SURGE_SKILLS = frozenset({
    SkillType.ADHESION,
    SkillType.GRAVITATION,
    SkillType.DIVISION,
    SkillType.ABRASION,
    SkillType.PROGRESSION,
    SkillType.ILLUMINATION,
    SkillType.TRANSFORMATION,
    SkillType.TRANSPORTATION,
    SkillType.COHESION,
    SkillType.TENSION,
})


# Attribute names in sheet order.
ATTRIBUTES: tuple[str, ...] = (
    "strength",
    "speed",
    "intellect",
    "willpower",
    "awareness",
    "presence",
)

DEFENSES: tuple[str, ...] = ("physical", "cognitive", "spiritual")

# Catch-all ledger target. Kept as its own bucket; callers that want
# "affects everything" query it alongside the specific target.
ALL_TARGET = "all"


# Governing attribute for each skill. Surge skills all key off Willpower.
SKILL_GOVERNING_ATTRIBUTE: dict[SkillType, str] = {
    SkillType.AGILITY: "speed",
    SkillType.ATHLETICS: "strength",
    SkillType.HEAVY_WEAPONRY: "strength",
    SkillType.LIGHT_WEAPONRY: "speed",
    SkillType.STEALTH: "speed",
    SkillType.THIEVERY: "speed",
    SkillType.CRAFTING: "intellect",
    SkillType.DEDUCTION: "intellect",
    SkillType.DISCIPLINE: "willpower",
    SkillType.INTIMIDATION: "willpower",
    SkillType.LORE: "intellect",
    SkillType.MEDICINE: "intellect",
    SkillType.DECEPTION: "presence",
    SkillType.INSIGHT: "awareness",
    SkillType.LEADERSHIP: "presence",
    SkillType.PERCEPTION: "awareness",
    SkillType.PERSUASION: "presence",
    SkillType.SURVIVAL: "awareness",
    **{surge: "willpower" for surge in SURGE_SKILLS},
}

# Defense = 10 + the two attributes below + DEFENSE bonuses.
DEFENSE_ATTRIBUTES: dict[str, tuple[str, str]] = {
    "physical": ("strength", "speed"),
    "cognitive": ("intellect", "willpower"),
    "spiritual": ("willpower", "presence"),
}

BASE_DEFENSE = 10


class SourceKind(str, Enum):
    """Namespaces for ledger source keys (``<kind>:<id>``)."""
    TALENT = "talent"
    FORM = "form"
    STANCE = "stance"
    EQUIPMENT = "equipment"
    CULTURE = "culture"


class ExpertiseSourceType(str, Enum):
    """Where an expertise came from.

    culture/talent grants are only removed by cascade; manual/gm grants can be
    removed directly by the player.
    """
    CULTURE = "culture"
    TALENT = "talent"
    GM = "gm"
    MANUAL = "manual"


class PrerequisiteType(str, Enum):
    TALENT = "talent"
    SKILL = "skill"
    ATTRIBUTE = "attribute"
    LEVEL = "level"
    IDEAL = "ideal"


class ProgressionMode(str, Enum):
    """Editing mode for the unlocked-talent set.

    CREATION is append-only; LEVEL_UP and EDIT allow removal.
    """
    CREATION = "creation"
    LEVEL_UP = "level_up"
    EDIT = "edit"
