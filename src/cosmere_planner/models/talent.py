"""Talent, singer form, and stance data models with typed prerequisites."""

import math
from dataclasses import dataclass, field

from cosmere_planner.models.bonus import BonusEffect
from cosmere_planner.models.constants import PrerequisiteType


# Action cost codes used by talent definitions.
ACTION_FREE = 0
ACTION_REACTION = -1
ACTION_SPECIAL = -2
ACTION_PASSIVE = math.inf


@dataclass(frozen=True, slots=True)
class TalentPrerequisite:
    """One gating condition.

    Examples: talent 'opportunist', skill 'deception' >= 1, level >= 5,
    ideal 'first'
    """
    type: PrerequisiteType
    target: str             # talent id, skill name, attribute name, or ideal tier
    value: int | None = None  # threshold (None treated as 0)
    is_or: bool = False     # True if this belongs to the OR-group

    @property
    def threshold(self) -> int:
        return self.value if self.value is not None else 0

    def to_dict(self) -> dict:
        payload: dict = {"type": self.type.value, "target": self.target}
        if self.value is not None:
            payload["value"] = self.value
        if self.is_or:
            payload["operator"] = "OR"
        return payload

    @classmethod
    def from_dict(cls, data: dict) -> "TalentPrerequisite":
        return cls(
            type=PrerequisiteType(data["type"]),
            target=str(data["target"]),
            value=data.get("value"),
            is_or=data.get("operator") == "OR",
        )


# A bare string is shorthand for "talent <id> must be unlocked".
Prerequisite = str | TalentPrerequisite


def talent_prereq(target: str, *, is_or: bool = False) -> TalentPrerequisite:
    return TalentPrerequisite(PrerequisiteType.TALENT, target, is_or=is_or)


def skill_prereq(target: str, value: int, *, is_or: bool = False) -> TalentPrerequisite:
    return TalentPrerequisite(PrerequisiteType.SKILL, target, value, is_or=is_or)


def attribute_prereq(target: str, value: int, *, is_or: bool = False) -> TalentPrerequisite:
    return TalentPrerequisite(PrerequisiteType.ATTRIBUTE, target, value, is_or=is_or)


def level_prereq(value: int, *, is_or: bool = False) -> TalentPrerequisite:
    return TalentPrerequisite(PrerequisiteType.LEVEL, "character", value, is_or=is_or)


def ideal_prereq(target: str = "first", *, is_or: bool = False) -> TalentPrerequisite:
    return TalentPrerequisite(PrerequisiteType.IDEAL, target, is_or=is_or)


def required_talent_id(prereq: Prerequisite) -> str | None:
    """Return the talent id a prerequisite points at, or None."""
    if isinstance(prereq, str):
        return prereq
    if prereq.type is PrerequisiteType.TALENT:
        return prereq.target
    return None


@dataclass(slots=True)
class TalentNode:
    """A talent definition. Singer forms are talent nodes too."""
    id: str
    name: str
    description: str = ""
    action_cost: float = ACTION_PASSIVE
    tier: int = 0
    prerequisites: list[Prerequisite] = field(default_factory=list)
    bonuses: list[BonusEffect] = field(default_factory=list)
    grants_advantage: list[str] = field(default_factory=list)
    grants_disadvantage: list[str] = field(default_factory=list)
    other_effects: list[str] = field(default_factory=list)
    path_requirement: str | None = None

    def required_talents(self) -> list[str]:
        ids: list[str] = []
        for prereq in self.prerequisites:
            talent_id = required_talent_id(prereq)
            if talent_id is not None and talent_id not in ids:
                ids.append(talent_id)
        return ids


@dataclass(slots=True)
class TalentTree:
    """A named group of talents (a specialty or the singer forms tree)."""
    path_name: str
    nodes: list[TalentNode] = field(default_factory=list)


@dataclass(slots=True)
class Stance:
    """A combat stance learned from a talent; active while selected."""
    id: str
    name: str
    description: str
    talent_id: str
    activation_cost: int = 1
    effects: list[str] = field(default_factory=list)
    bonuses: list[BonusEffect] = field(default_factory=list)
