"""Heroic path and radiant talent trees bundled with the default rules table.

Only a representative slice of each path is included; tables for the rest of
the game are loaded by the host application.
"""

from cosmere_planner.models.bonus import BonusEffect
from cosmere_planner.models.constants import BonusType
from cosmere_planner.models.talent import (
    ACTION_REACTION,
    TalentNode,
    TalentTree,
    attribute_prereq,
    ideal_prereq,
    level_prereq,
    skill_prereq,
    talent_prereq,
)


BT = BonusType


AGENT_SPY_TREE = TalentTree(
    path_name="Spy",
    nodes=[
        TalentNode(
            id="opportunist",
            name="Opportunist",
            description="Once per round, reroll a plot die.",
            action_cost=ACTION_REACTION,
            tier=0,
        ),
        TalentNode(
            id="plausible_excuse",
            name="Plausible Excuse",
            description=(
                "Gain Sleight of Hand expertise. When discovered skulking, spend "
                "2 focus to feign innocence."
            ),
            action_cost=ACTION_REACTION,
            tier=1,
            prerequisites=[talent_prereq("opportunist"), skill_prereq("Deception", 1)],
            other_effects=["Gain Sleight of Hand expertise."],
        ),
        TalentNode(
            id="sure_outcome",
            name="Sure Outcome",
            description="Spend focus to turn a complication into an opportunity.",
            action_cost=ACTION_REACTION,
            tier=1,
            prerequisites=[talent_prereq("opportunist"), skill_prereq("insight", 1)],
        ),
        TalentNode(
            id="collected",
            name="Collected",
            description="Increase your Cognitive and Spiritual defenses by 2.",
            tier=2,
            prerequisites=[talent_prereq("sure_outcome")],
            bonuses=[
                BonusEffect(BT.DEFENSE, "cognitive", 2),
                BonusEffect(BT.DEFENSE, "spiritual", 2),
            ],
        ),
    ],
)


WARRIOR_SOLDIER_TREE = TalentTree(
    path_name="Soldier",
    nodes=[
        TalentNode(
            id="combat_training",
            name="Combat Training",
            description="Gain a weapon expertise and an armor expertise.",
            tier=1,
            prerequisites=[talent_prereq("vigilant_stance")],
            other_effects=["Gain a weapon expertise", "Gain an armor expertise"],
        ),
        TalentNode(
            id="steady_aim",
            name="Steady Aim",
            description="Your attacks gain +1 while you hold still; Physical defense +1.",
            tier=2,
            prerequisites=[talent_prereq("combat_training"), level_prereq(3)],
            bonuses=[BonusEffect(BT.DEFENSE, "physical", 1)],
        ),
        TalentNode(
            id="hardy",
            name="Hardy",
            description="Increase your maximum health by your tier plus one.",
            tier=2,
            prerequisites=[talent_prereq("combat_training"), attribute_prereq("strength", 2)],
            bonuses=[BonusEffect(BT.RESOURCE, "health", formula="1 + tier", scaling=True)],
        ),
    ],
)


SCHOLAR_SURGEON_TREE = TalentTree(
    path_name="Surgeon",
    nodes=[
        TalentNode(
            id="education",
            name="Education",
            description="Gain two cultural or utility expertises (choose two).",
            tier=0,
            other_effects=["choose two: Alethi, Thaylen, Armor Crafting, Weapon Crafting"],
        ),
        TalentNode(
            id="emergency_care",
            name="Emergency Care",
            description="Treat wounds as a reaction. Requires Medicine 2 or Education.",
            action_cost=ACTION_REACTION,
            tier=1,
            prerequisites=[
                skill_prereq("medicine", 2, is_or=True),
                talent_prereq("education", is_or=True),
            ],
            grants_advantage=["medicine"],
        ),
    ],
)


WINDRUNNER_TREE = TalentTree(
    path_name="Windrunner",
    nodes=[
        TalentNode(
            id="windrunner_bond",
            name="Honorspren Bond",
            description="Your honorspren lends you strength to protect others.",
            tier=0,
        ),
        TalentNode(
            id="basic_lashing",
            name="Basic Lashing",
            description="Spend Investiture to change the direction of gravity on a target.",
            action_cost=2,
            tier=1,
            prerequisites=[ideal_prereq("first"), skill_prereq("gravitation", 1)],
        ),
        TalentNode(
            id="second_ideal_wind",
            name="Second Ideal (Windrunner)",
            description="Swear to protect those you hate.",
            tier=2,
            prerequisites=[ideal_prereq("second")],
            bonuses=[BonusEffect(BT.DEFLECT, "all", 1)],
        ),
    ],
)


PATH_TREES: tuple[TalentTree, ...] = (
    AGENT_SPY_TREE,
    WARRIOR_SOLDIER_TREE,
    SCHOLAR_SURGEON_TREE,
    WINDRUNNER_TREE,
)


# Heroic path -> key talent granted for free when the path is chosen.
PATH_KEY_TALENTS: dict[str, str] = {
    "warrior": "vigilant_stance",
    "scholar": "education",
    "hunter": "seek_quarry",
    "leader": "decisive_command",
    "envoy": "rousing_presence",
    "agent": "opportunist",
}
