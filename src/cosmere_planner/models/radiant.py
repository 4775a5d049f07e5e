"""Radiant order and universal ability models."""

from dataclasses import dataclass, field

from cosmere_planner.models.constants import SkillType


@dataclass(frozen=True, slots=True)
class RadiantOrderInfo:
    """Static facts about one Radiant order."""
    order: str
    spren_type: str
    surge_pair: tuple[SkillType, SkillType]
    philosophy: str = ""


@dataclass(frozen=True, slots=True)
class UniversalAbility:
    """A one-off ability outside the talent trees (e.g. Breathe Stormlight)."""
    id: str
    name: str
    description: str
    action_cost: str       # "1", "2", "free", "reaction", "special", "passive"
    category: str
    source: str            # e.g. "First Ideal"
    effects: tuple[str, ...] = field(default_factory=tuple)
