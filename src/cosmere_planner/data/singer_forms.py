"""Singer forms talent tree and the forms each "Forms of ..." talent grants."""

from cosmere_planner.models.bonus import BonusEffect
from cosmere_planner.models.constants import BonusType
from cosmere_planner.models.talent import TalentNode, TalentTree, skill_prereq, talent_prereq


BT = BonusType

_BASE = [talent_prereq("singer_ancestry"), talent_prereq("singer_change_form")]


def _form(
    form_id: str,
    name: str,
    description: str,
    granted_by: str,
    tier: int,
    bonuses: list[BonusEffect],
    *,
    extra_prereqs: tuple[str, ...] = (),
    grants_advantage: list[str] | None = None,
    other_effects: list[str] | None = None,
) -> TalentNode:
    prereqs = [*_BASE, talent_prereq(granted_by)]
    prereqs.extend(talent_prereq(p) for p in extra_prereqs)
    return TalentNode(
        id=form_id,
        name=name,
        description=description,
        tier=tier,
        prerequisites=prereqs,
        bonuses=bonuses,
        grants_advantage=grants_advantage or [],
        other_effects=other_effects or [],
    )


def _while(form_id: str) -> str:
    return f"while in {form_id}"


SINGER_FORMS_TREE = TalentTree(
    path_name="Singer Forms",
    nodes=[
        TalentNode(
            id="singer_ancestry",
            name="Singer Ancestry",
            description="You can assume singer forms during highstorms.",
            tier=0,
        ),
        TalentNode(
            id="singer_change_form",
            name="Change Form",
            description="During a highstorm, change into dullform, mateform, or another known form.",
            action_cost=3,
            tier=1,
            prerequisites=[talent_prereq("singer_ancestry")],
        ),
        TalentNode(
            id="forms_of_finesse",
            name="Forms of Finesse",
            description="Gain artform and nimbleform.",
            tier=2,
            prerequisites=list(_BASE),
        ),
        TalentNode(
            id="forms_of_wisdom",
            name="Forms of Wisdom",
            description="Gain meditationform and scholarform.",
            tier=2,
            prerequisites=list(_BASE),
        ),
        TalentNode(
            id="forms_of_resolve",
            name="Forms of Resolve",
            description="Gain warform and workform.",
            tier=2,
            prerequisites=list(_BASE),
        ),
        TalentNode(
            id="ambitious_mind",
            name="Ambitious Mind",
            description="Increase Cognitive defense by 2. You can bond a Voidspren.",
            tier=3,
            prerequisites=[*_BASE, skill_prereq("discipline", 3)],
            bonuses=[BonusEffect(BT.DEFENSE, "cognitive", 2)],
            other_effects=["You can bond a Voidspren"],
        ),
        TalentNode(
            id="forms_of_destruction",
            name="Forms of Destruction",
            description="Gain direform and stormform.",
            tier=4,
            prerequisites=[*_BASE, talent_prereq("ambitious_mind")],
        ),
        # Forms
        _form(
            "nimbleform", "Nimbleform", "Speed +1, Focus +2.", "forms_of_finesse", 2,
            [
                BonusEffect(BT.ATTRIBUTE, "speed", 1, _while("nimbleform")),
                BonusEffect(BT.RESOURCE, "focus", 2, _while("nimbleform")),
            ],
        ),
        _form(
            "artform", "Artform",
            "Awareness +1, expertise in Painting and Music, advantage on Crafting "
            "tests and tests to entertain.",
            "forms_of_finesse", 2,
            [BonusEffect(BT.ATTRIBUTE, "awareness", 1, _while("artform"))],
            grants_advantage=["crafting", "entertainment"],
            other_effects=["Expertise in Painting and Music"],
        ),
        _form(
            "meditationform", "Meditationform",
            "Presence +1, you can aid without spending focus.",
            "forms_of_wisdom", 2,
            [BonusEffect(BT.ATTRIBUTE, "presence", 1, _while("meditationform"))],
        ),
        _form(
            "scholarform", "Scholarform",
            "Intellect +1, temporarily gain a cultural or utility expertise.",
            "forms_of_wisdom", 2,
            [BonusEffect(BT.ATTRIBUTE, "intellect", 1, _while("scholarform"))],
        ),
        _form(
            "warform", "Warform", "Strength +2, Deflect +1.", "forms_of_resolve", 2,
            [
                BonusEffect(BT.ATTRIBUTE, "strength", 2, _while("warform")),
                BonusEffect(BT.DEFLECT, "physical", 1, _while("warform")),
            ],
        ),
        _form(
            "workform", "Workform",
            "Willpower +1, ignore Exhausted. You can disguise yourself as a parshman.",
            "forms_of_resolve", 2,
            [BonusEffect(BT.ATTRIBUTE, "willpower", 1, _while("workform"))],
        ),
        _form(
            "direform", "Direform", "Strength +2, Deflect +2.", "forms_of_destruction", 4,
            [
                BonusEffect(BT.ATTRIBUTE, "strength", 2, _while("direform")),
                BonusEffect(BT.DEFLECT, "physical", 2, _while("direform")),
            ],
            extra_prereqs=("ambitious_mind",),
        ),
        _form(
            "stormform", "Stormform", "Strength +1, Speed +1, Deflect +1.",
            "forms_of_destruction", 4,
            [
                BonusEffect(BT.ATTRIBUTE, "strength", 1, _while("stormform")),
                BonusEffect(BT.ATTRIBUTE, "speed", 1, _while("stormform")),
                BonusEffect(BT.DEFLECT, "physical", 1, _while("stormform")),
            ],
            extra_prereqs=("ambitious_mind",),
        ),
    ],
)


# Talent id -> singer forms unlocked alongside it.
TALENT_TO_SINGER_FORMS: dict[str, tuple[str, ...]] = {
    "forms_of_finesse": ("nimbleform", "artform"),
    "forms_of_wisdom": ("meditationform", "scholarform"),
    "forms_of_resolve": ("warform", "workform"),
    "forms_of_destruction": ("direform", "stormform"),
}
