"""Static rules table: talents, singer forms, stances, and Radiant orders.

The engine only reads from this table. RulesTable.defaults() bundles the
data shipped in ``cosmere_planner.data``; hosts that load the full game data
build their own table with from_trees().
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from cosmere_planner.data.orders import RADIANT_ORDERS
from cosmere_planner.data.singer_forms import SINGER_FORMS_TREE, TALENT_TO_SINGER_FORMS
from cosmere_planner.data.stances import DUELIST_TREE, STANCES
from cosmere_planner.data.talents import PATH_KEY_TALENTS, PATH_TREES
from cosmere_planner.models.expertise import ExpertiseGrant
from cosmere_planner.models.radiant import RadiantOrderInfo
from cosmere_planner.models.talent import Stance, TalentNode, TalentTree
from cosmere_planner.parser.effect_parser import parse_expertise_grants


@dataclass
class RulesTable:
    """Lookup tables the engine evaluates against.

    Singer forms are talent nodes, so they live in ``talents`` alongside
    ordinary talents; ``form_grants`` says which talent unlocks which forms.
    """

    talents: dict[str, TalentNode] = field(default_factory=dict)
    stances: dict[str, Stance] = field(default_factory=dict)
    orders: dict[str, RadiantOrderInfo] = field(default_factory=dict)
    form_grants: dict[str, tuple[str, ...]] = field(default_factory=dict)
    expertise_grants: dict[str, tuple[ExpertiseGrant, ...]] = field(default_factory=dict)
    path_key_talents: dict[str, str] = field(default_factory=dict)

    # --- Lookups -------------------------------------------------------------

    def get_talent(self, talent_id: str) -> TalentNode | None:
        return self.talents.get(talent_id)

    def get_stance(self, stance_id: str) -> Stance | None:
        return self.stances.get(stance_id)

    def get_form(self, form_id: str) -> TalentNode | None:
        """Return the form definition, or None if *form_id* is not a singer form."""
        if form_id not in self.form_ids():
            return None
        return self.talents.get(form_id)

    def form_ids(self) -> set[str]:
        return {form for forms in self.form_grants.values() for form in forms}

    def forms_granted_by(self, talent_id: str) -> tuple[str, ...]:
        return self.form_grants.get(talent_id, ())

    def stances_for(self, talent_id: str) -> list[Stance]:
        return [s for s in self.stances.values() if s.talent_id == talent_id]

    def expertise_grants_for(self, talent_id: str) -> tuple[ExpertiseGrant, ...]:
        """Declared grants for a talent, else whatever its other_effects text says."""
        declared = self.expertise_grants.get(talent_id)
        if declared is not None:
            return declared
        node = self.talents.get(talent_id)
        if node is None:
            return ()
        return tuple(parse_expertise_grants(node.other_effects))

    def key_talent_for(self, path: str) -> str | None:
        return self.path_key_talents.get(path.lower())

    # --- Construction --------------------------------------------------------

    @classmethod
    def from_trees(
        cls,
        trees: Iterable[TalentTree],
        *,
        stances: Mapping[str, Stance] | None = None,
        orders: Mapping[str, RadiantOrderInfo] | None = None,
        form_grants: Mapping[str, tuple[str, ...]] | None = None,
        expertise_grants: Mapping[str, tuple[ExpertiseGrant, ...]] | None = None,
        path_key_talents: Mapping[str, str] | None = None,
    ) -> "RulesTable":
        """Index talent trees by node id. Duplicate ids raise ValueError."""
        talents: dict[str, TalentNode] = {}
        for tree in trees:
            for node in tree.nodes:
                if node.id in talents:
                    raise ValueError(
                        f"Duplicate talent id {node.id!r} in tree {tree.path_name!r}"
                    )
                talents[node.id] = node

        return cls(
            talents=talents,
            stances=dict(stances or {}),
            orders=dict(orders or {}),
            form_grants=dict(form_grants or {}),
            expertise_grants=dict(expertise_grants or {}),
            path_key_talents=dict(path_key_talents or {}),
        )

    @classmethod
    def defaults(cls) -> "RulesTable":
        """Return the bundled rules data. Usable without any external files."""
        return cls.from_trees(
            [*PATH_TREES, DUELIST_TREE, SINGER_FORMS_TREE],
            stances=STANCES,
            orders=RADIANT_ORDERS,
            form_grants=TALENT_TO_SINGER_FORMS,
            path_key_talents=PATH_KEY_TALENTS,
        )
