"""Configuration knobs for the talent engine.

Defaults follow the Cosmere RPG core rules. Tables or house rules may
override the skill cap, the level cap, or how strictly talent points apply.
"""

from dataclasses import dataclass

from cosmere_planner.models.constants import ProgressionMode
from cosmere_planner.models.skills import MAX_SKILL_RANK


@dataclass(slots=True)
class EngineConfig:
    """Tuneable parameters that aren't part of the rules data."""

    mode: ProgressionMode = ProgressionMode.CREATION
    max_skill_rank: int = MAX_SKILL_RANK
    ideal_surge_rank: int = 1        # Surge rank granted by the First Ideal
    max_level: int = 21
    enforce_talent_points: bool = False  # Reject unlocks that overspend
