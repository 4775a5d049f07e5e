"""Character aggregate.

Holds everything one player's sheet owns: attributes, skill ranks, the
unlocked talent and form sets, expertises with their provenance, the bonus
ledgers, and the Radiant path. One caller owns a Character at a time; engine
components receive it explicitly.

Character also satisfies the stat-snapshot protocol the prerequisite
evaluator reads (``level``, ``get_attribute``, ``get_skill_rank``,
``has_spoken_ideal``).
"""

from dataclasses import dataclass, field

from cosmere_planner.engine.ledger import AdvantageLedger, BonusLedger, FormulaContext
from cosmere_planner.engine.radiant_path import RadiantPath
from cosmere_planner.models.bonus import SourceRef
from cosmere_planner.models.constants import ATTRIBUTES, ExpertiseSourceType, SkillType, SourceKind
from cosmere_planner.models.expertise import ExpertiseSource
from cosmere_planner.models.skills import SkillRanks


# Starting attributes before the player spreads their points.
_DEFAULT_ATTRIBUTES: dict[str, int] = {name: 2 for name in ATTRIBUTES}


def tier_for_level(level: int) -> int:
    """Tier 1 covers levels 1-5, tier 2 levels 6-10, ... tier 5 is level 21."""
    return min(5, max(1, (level - 1) // 5 + 1))


@dataclass
class Character:
    """A Cosmere RPG character sheet."""

    # Identity
    name: str = "Unnamed"
    level: int = 1
    ancestry: str = "human"   # "human" or "singer"
    paths: list[str] = field(default_factory=list)   # heroic paths, e.g. ["agent"]
    cultures: list[str] = field(default_factory=list)

    # Attributes by name (strength, speed, intellect, willpower, awareness, presence)
    attributes: dict[str, int] = field(default_factory=lambda: dict(_DEFAULT_ATTRIBUTES))
    skills: SkillRanks = field(default_factory=SkillRanks)

    # Progression
    unlocked_talents: set[str] = field(default_factory=set)
    unlocked_forms: list[str] = field(default_factory=list)   # ordered, no duplicates
    locked_talents: set[str] = field(default_factory=set)     # committed at an earlier level
    selected_expertises: list[ExpertiseSource] = field(default_factory=list)

    # Active-exclusive selections
    active_form: str | None = None
    active_stance: str | None = None

    # Modifiers and the Radiant path
    bonuses: BonusLedger = field(default_factory=BonusLedger)
    advantages: AdvantageLedger = field(default_factory=AdvantageLedger)
    radiant: RadiantPath = field(default_factory=RadiantPath)

    # --- Stat snapshot -------------------------------------------------------

    def get_attribute(self, name: str) -> int | None:
        """Base attribute value, or None for an unknown attribute name."""
        return self.attributes.get(name.lower())

    def get_skill_rank(self, skill: SkillType) -> int:
        return self.skills.get_rank(skill)

    def has_spoken_ideal(self) -> bool:
        return self.radiant.has_spoken_ideal()

    @property
    def tier(self) -> int:
        return tier_for_level(self.level)

    def formula_context(self) -> FormulaContext:
        return FormulaContext(tier=self.tier, skill_ranks=dict(self.skills.ranks))

    # --- Forms ---------------------------------------------------------------

    def add_form(self, form_id: str) -> bool:
        """Add a singer form. Already-held forms are a no-op returning False."""
        if form_id in self.unlocked_forms:
            return False
        self.unlocked_forms.append(form_id)
        return True

    def remove_form(self, form_id: str) -> bool:
        if form_id not in self.unlocked_forms:
            return False
        self.unlocked_forms.remove(form_id)
        return True

    # --- Expertises ----------------------------------------------------------

    def _find_expertise(self, name: str) -> ExpertiseSource | None:
        wanted = name.strip().casefold()
        for record in self.selected_expertises:
            if record.name.casefold() == wanted:
                return record
        return None

    def has_expertise(self, name: str) -> bool:
        return self._find_expertise(name) is not None

    def expertise_names(self) -> list[str]:
        """Held expertise names, once each, in the order first granted."""
        names: list[str] = []
        for record in self.selected_expertises:
            if not any(n.casefold() == record.name.casefold() for n in names):
                names.append(record.name)
        return names

    def _has_record(self, name: str, source_id: str) -> bool:
        wanted = name.strip().casefold()
        return any(
            r.source_id == source_id and r.name.casefold() == wanted
            for r in self.selected_expertises
        )

    def add_expertise(
        self,
        name: str,
        source: ExpertiseSourceType = ExpertiseSourceType.MANUAL,
        source_id: str | None = None,
    ) -> bool:
        """Add an expertise. Returns False if one with that name is already held.

        A sourced grant of a name already held is still recorded under its
        own source_id, so the expertise stays while any grantor remains.
        """
        if self.has_expertise(name):
            if source_id is not None and not self._has_record(name, source_id):
                self.selected_expertises.append(
                    ExpertiseSource(name.strip(), source, source_id)
                )
            return False
        self.selected_expertises.append(ExpertiseSource(name.strip(), source, source_id))
        return True

    def remove_expertise(self, name: str) -> bool:
        """Remove a manual or GM expertise.

        Culture and talent expertises stay until their source is removed;
        asking to remove one returns False.
        """
        wanted = name.strip().casefold()
        for record in self.selected_expertises:
            if record.name.casefold() == wanted and record.can_remove:
                self.selected_expertises.remove(record)
                return True
        return False

    def remove_expertises_by_source(self, source_id: "SourceRef | str") -> list[str]:
        """Drop every expertise granted by *source_id*.

        Returns the names no longer held at all; names another source still
        grants stay held and are not reported.
        """
        key = str(source_id)
        dropped = [r.name for r in self.selected_expertises if r.source_id == key]
        if not dropped:
            return []
        self.selected_expertises = [
            r for r in self.selected_expertises if r.source_id != key
        ]
        return [name for name in dropped if not self.has_expertise(name)]

    def grant_culture_expertises(self, culture: str, expertises: list[str]) -> list[str]:
        """Record a culture and grant its expertises. Returns the names actually added."""
        source_id = SourceRef(SourceKind.CULTURE, culture.lower()).key
        if culture not in self.cultures:
            self.cultures.append(culture)
        return [
            name for name in expertises
            if self.add_expertise(name, ExpertiseSourceType.CULTURE, source_id)
        ]

    def remove_culture(self, culture: str) -> list[str]:
        if culture in self.cultures:
            self.cultures.remove(culture)
        return self.remove_expertises_by_source(SourceRef(SourceKind.CULTURE, culture.lower()))
