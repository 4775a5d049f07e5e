"""Expertise records with provenance for cascade removal."""

from dataclasses import dataclass

from cosmere_planner.models.constants import ExpertiseSourceType


_SOURCE_BADGES: dict[ExpertiseSourceType, str] = {
    ExpertiseSourceType.CULTURE: "Culture",
    ExpertiseSourceType.TALENT: "Talent",
    ExpertiseSourceType.GM: "GM",
    ExpertiseSourceType.MANUAL: "Manual",
}


@dataclass(frozen=True, slots=True)
class ExpertiseSource:
    """An expertise the character holds and where it came from.

    source_id names the granting source (e.g. "talent:plausible_excuse",
    "culture:alethi") so removing that source removes the expertise.
    """
    name: str
    source: ExpertiseSourceType
    source_id: str | None = None

    @property
    def can_remove(self) -> bool:
        """Only manual and GM grants can be removed by the player."""
        return self.source in (ExpertiseSourceType.MANUAL, ExpertiseSourceType.GM)

    @property
    def is_auto_granted(self) -> bool:
        return self.source in (ExpertiseSourceType.CULTURE, ExpertiseSourceType.TALENT)

    @property
    def badge(self) -> str:
        return _SOURCE_BADGES[self.source]

    def to_dict(self) -> dict:
        payload = {"name": self.name, "source": self.source.value}
        if self.source_id is not None:
            payload["source_id"] = self.source_id
        return payload

    @classmethod
    def from_dict(cls, data: "dict | str") -> "ExpertiseSource":
        # Older saves stored bare names; those were picked by hand.
        if isinstance(data, str):
            return cls(data, ExpertiseSourceType.MANUAL)
        return cls(
            name=str(data["name"]),
            source=ExpertiseSourceType(data.get("source", "manual")),
            source_id=data.get("source_id"),
        )


@dataclass(frozen=True, slots=True)
class ExpertiseGrant:
    """Expertises a talent hands out on unlock.

    kind="single": every name in `expertises` is granted.
    kind="choice": the player picks `choice_count` of `expertises`.
    """
    kind: str
    expertises: tuple[str, ...]
    choice_count: int = 1

    @property
    def is_choice(self) -> bool:
        return self.kind == "choice"
