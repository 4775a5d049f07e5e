"""Duelist stances and the talents that teach them."""

from cosmere_planner.models.bonus import BonusEffect
from cosmere_planner.models.constants import BonusType
from cosmere_planner.models.talent import Stance, TalentNode, TalentTree, skill_prereq, talent_prereq


BT = BonusType


DUELIST_TREE = TalentTree(
    path_name="Duelist",
    nodes=[
        TalentNode(
            id="vigilant_stance",
            name="Vigilant Stance",
            description="Learn Vigilant Stance. Reactive strikes gain advantage.",
            action_cost=1,
            tier=0,
        ),
        TalentNode(
            id="stonestance",
            name="Stonestance",
            description="Learn Stonestance. While in this stance, increase your deflect value by 1.",
            action_cost=1,
            tier=1,
            prerequisites=[talent_prereq("vigilant_stance")],
        ),
        TalentNode(
            id="feinting_strike",
            name="Feinting Strike",
            description="Spend focus to feint before a melee attack.",
            action_cost=1,
            tier=2,
            prerequisites=[talent_prereq("vigilant_stance")],
        ),
        TalentNode(
            id="bloodstance",
            name="Bloodstance",
            description="Learn Bloodstance. Your defenses decrease by 2 while your attacks hit harder.",
            action_cost=1,
            tier=3,
            prerequisites=[skill_prereq("heavy weaponry", 2), talent_prereq("feinting_strike")],
        ),
        TalentNode(
            id="surefooted",
            name="Surefooted",
            description="Increase your movement rate by 10. Reduce damage from dangerous "
            "terrain or falling by 2 x your tier.",
            tier=3,
            prerequisites=[talent_prereq("stonestance")],
            bonuses=[BonusEffect(BT.DERIVED, "movement", 10)],
            other_effects=["Reduce terrain/falling damage by 2x tier"],
        ),
        TalentNode(
            id="vinestance",
            name="Vinestance",
            description="Learn Vinestance. Your Physical and Cognitive defenses increase by 1.",
            action_cost=1,
            tier=4,
            prerequisites=[skill_prereq("athletics", 3), talent_prereq("feinting_strike")],
        ),
    ],
)


STANCES: dict[str, Stance] = {
    stance.id: stance
    for stance in (
        Stance(
            id="vigilant_stance",
            name="Vigilant Stance",
            description="Reactive strikes gain advantage.",
            talent_id="vigilant_stance",
            effects=["Advantage on reactive strikes"],
        ),
        Stance(
            id="stonestance",
            name="Stonestance",
            description="Increase your deflect value by 1.",
            talent_id="stonestance",
            effects=["Deflect +1"],
            bonuses=[BonusEffect(BT.DEFLECT, "all", 1, "while in stonestance")],
        ),
        Stance(
            id="bloodstance",
            name="Bloodstance",
            description="Physical, Cognitive, and Spiritual defenses decrease by 2.",
            talent_id="bloodstance",
            effects=["Defenses -2", "Extra damage on hits"],
            bonuses=[
                BonusEffect(BT.DEFENSE, "physical", -2, "while in bloodstance"),
                BonusEffect(BT.DEFENSE, "cognitive", -2, "while in bloodstance"),
                BonusEffect(BT.DEFENSE, "spiritual", -2, "while in bloodstance"),
            ],
        ),
        Stance(
            id="vinestance",
            name="Vinestance",
            description="Physical and Cognitive defenses increase by 1.",
            talent_id="vinestance",
            effects=["Physical and Cognitive defense +1"],
            bonuses=[
                BonusEffect(BT.DEFENSE, "physical", 1, "while in vinestance"),
                BonusEffect(BT.DEFENSE, "cognitive", 1, "while in vinestance"),
            ],
        ),
    )
}
