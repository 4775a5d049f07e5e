"""Skill rank storage and skill-name lookup."""

from dataclasses import dataclass, field

from cosmere_planner.models.constants import SkillType


MAX_SKILL_RANK = 5


def match_skill(name: str) -> SkillType | None:
    """Resolve a free-form skill name ("Light Weaponry", "deception") to a SkillType.

    Matching ignores case, surrounding whitespace, and space/hyphen vs underscore.
    Returns None when nothing matches.
    """
    normalised = name.strip().upper().replace(" ", "_").replace("-", "_")
    if not normalised:
        return None
    try:
        return SkillType(normalised)
    except ValueError:
        return None


@dataclass
class SkillRanks:
    """Per-skill ranks, 0..max_rank. Missing skills are rank 0."""

    ranks: dict[SkillType, int] = field(default_factory=dict)
    max_rank: int = MAX_SKILL_RANK

    def get_rank(self, skill: SkillType) -> int:
        return self.ranks.get(skill, 0)

    def set_rank(self, skill: SkillType, rank: int) -> None:
        """Set a rank, clamped into 0..max_rank."""
        self.ranks[skill] = max(0, min(self.max_rank, int(rank)))

    def raise_to(self, skill: SkillType, rank: int) -> bool:
        """Raise a skill to at least *rank*. Never lowers. Returns True if changed."""
        if self.get_rank(skill) >= rank:
            return False
        self.set_rank(skill, rank)
        return True

    def as_dict(self) -> dict[str, int]:
        return {skill.value: rank for skill, rank in sorted(self.ranks.items())}

    @classmethod
    def from_dict(cls, data: dict[str, int], max_rank: int = MAX_SKILL_RANK) -> "SkillRanks":
        skills = cls(max_rank=max_rank)
        for name, rank in data.items():
            skills.set_rank(SkillType(name), rank)
        return skills
