"""Bonus entry and source reference models.

A talent, form, stance, or piece of equipment grants a list of BonusEffects.
The ledger stores them under the granting SourceRef so the whole group can be
retracted in one call.
"""

from dataclasses import dataclass

from cosmere_planner.models.constants import BonusType, SourceKind


@dataclass(frozen=True, slots=True)
class BonusEffect:
    """A single additive modifier: 'this gives +1 Strength'.

    Examples: DEFENSE/physical +1, DEFLECT/all +1, SKILL/athletics +2
    """
    type: BonusType
    target: str                  # e.g. "strength", "physical", "athletics", "all"
    value: float | None = None   # None counts as 0
    condition: str | None = None  # narrative only, e.g. "while in warform"
    formula: str | None = None   # e.g. "1 + tier", "perception.ranks / 2"
    scaling: bool = False

    @property
    def flat_value(self) -> float:
        return self.value if self.value is not None else 0

    def to_dict(self) -> dict:
        payload: dict = {"type": self.type.value, "target": self.target}
        if self.value is not None:
            payload["value"] = self.value
        if self.condition is not None:
            payload["condition"] = self.condition
        if self.formula is not None:
            payload["formula"] = self.formula
        if self.scaling:
            payload["scaling"] = True
        return payload

    @classmethod
    def from_dict(cls, data: dict) -> "BonusEffect":
        return cls(
            type=BonusType(data["type"]),
            target=str(data["target"]),
            value=data.get("value"),
            condition=data.get("condition"),
            formula=data.get("formula"),
            scaling=bool(data.get("scaling", False)),
        )


@dataclass(frozen=True, slots=True)
class SourceRef:
    """Typed provenance key. ``str(ref)`` gives the ``kind:id`` ledger key."""
    kind: SourceKind
    id: str

    @property
    def key(self) -> str:
        return f"{self.kind.value}:{self.id}"

    def __str__(self) -> str:
        return self.key

    @classmethod
    def talent(cls, talent_id: str) -> "SourceRef":
        return cls(SourceKind.TALENT, talent_id)

    @classmethod
    def form(cls, form_id: str) -> "SourceRef":
        return cls(SourceKind.FORM, form_id)

    @classmethod
    def stance(cls, stance_id: str) -> "SourceRef":
        return cls(SourceKind.STANCE, stance_id)

    @classmethod
    def parse(cls, key: str) -> "SourceRef":
        """Split a ``kind:id`` key. Only the first colon separates the kind."""
        kind, sep, ident = key.partition(":")
        if not sep or not ident:
            raise ValueError(f"Malformed source key: {key!r}")
        return cls(SourceKind(kind), ident)


def source_key(source: "SourceRef | str") -> str:
    """Normalise a SourceRef or raw string into the ledger's string key."""
    if isinstance(source, SourceRef):
        return source.key
    return str(source)
