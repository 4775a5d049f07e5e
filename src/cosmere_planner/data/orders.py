"""Radiant orders and the abilities every Radiant gains with the First Ideal."""

from cosmere_planner.models.constants import SkillType
from cosmere_planner.models.radiant import RadiantOrderInfo, UniversalAbility


S = SkillType

RADIANT_ORDERS: dict[str, RadiantOrderInfo] = {
    info.order: info
    for info in (
        RadiantOrderInfo(
            "Windrunner", "Honorspren", (S.ADHESION, S.GRAVITATION),
            "Protect the innocent and the defenseless.",
        ),
        RadiantOrderInfo(
            "Skybreaker", "Highspren", (S.DIVISION, S.GRAVITATION),
            "Enforce the law and strive for justice.",
        ),
        RadiantOrderInfo(
            "Dustbringer", "Ashspren", (S.DIVISION, S.ABRASION),
            "Great power requires strong discipline.",
        ),
        RadiantOrderInfo(
            "Edgedancer", "Cultivationspren", (S.ABRASION, S.PROGRESSION),
            "Remember and serve those who others forget.",
        ),
        RadiantOrderInfo(
            "Truthwatcher", "Mistspren", (S.ILLUMINATION, S.PROGRESSION),
            "Search for fundamental truth and share it.",
        ),
        RadiantOrderInfo(
            "Lightweaver", "Cryptic", (S.ILLUMINATION, S.TRANSFORMATION),
            "Separate truth from lies.",
        ),
        RadiantOrderInfo(
            "Elsecaller", "Inkspren", (S.TRANSFORMATION, S.TRANSPORTATION),
            "Strive to reach your true potential.",
        ),
        RadiantOrderInfo(
            "Willshaper", "Lightspren", (S.COHESION, S.TRANSPORTATION),
            "Seek freedom and choice for all peoples.",
        ),
        RadiantOrderInfo(
            "Stoneward", "Peakspren", (S.COHESION, S.TENSION),
            "Be the support on which others can depend.",
        ),
        RadiantOrderInfo(
            "Bondsmith", "Unique spren", (S.ADHESION, S.TENSION),
            "Unite before you divide, and strive for peace before engaging in war.",
        ),
    )
}


RADIANT_UNIVERSAL_ABILITIES: tuple[UniversalAbility, ...] = (
    UniversalAbility(
        id="breathe_stormlight",
        name="Breathe Stormlight",
        description=(
            "Draw Stormlight from infused spheres within 5 feet and recover "
            "Investiture up to your maximum."
        ),
        action_cost="2",
        category="Radiant Universal",
        source="First Ideal",
        effects=(
            "Draw Stormlight from infused spheres within 5 feet",
            "Recover Investiture up to maximum",
            "Can be used even while Unconscious",
        ),
    ),
    UniversalAbility(
        id="enhance",
        name="Enhance",
        description=(
            "Spend 1 Investiture to infuse yourself with Stormlight, enhancing "
            "Strength and Speed until the end of your next turn."
        ),
        action_cost="free",
        category="Radiant Universal",
        source="First Ideal",
        effects=("Strength and Speed +1 while enhanced",),
    ),
    UniversalAbility(
        id="regenerate",
        name="Regenerate",
        description="Spend 1 Investiture to recover health equal to 1d6 + your tier.",
        action_cost="1",
        category="Radiant Universal",
        source="First Ideal",
        effects=("Recover 1d6 + tier health",),
    ),
)
