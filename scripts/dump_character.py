"""Dump computed stats for a sample character.

Builds a sample singer agent with the bundled rules data, unlocks a few
talents, selects a form and a stance, and prints the resulting sheet to
exercise the full pipeline: talents -> ledger -> derived stats.

Usage:
    python -m scripts.dump_character [--json] [--verbose]
"""

import argparse
import json
import logging

from cosmere_planner.engine.engine_config import EngineConfig
from cosmere_planner.engine.snapshot import export_character
from cosmere_planner.engine.talent_engine import TalentEngine
from cosmere_planner.models.constants import ATTRIBUTES, ProgressionMode, SkillType
from cosmere_planner.models.derived_stats import compute_stats


S = SkillType

SAMPLE_UNLOCKS = (
    "plausible_excuse",
    "vigilant_stance",
    "stonestance",
    "singer_ancestry",
    "singer_change_form",
    "forms_of_resolve",
)


def build_sample() -> TalentEngine:
    """Level 6 singer agent with a few talents, warform, and Stonestance."""
    engine = TalentEngine.new_character(
        config=EngineConfig(mode=ProgressionMode.LEVEL_UP),
        name="Rlain",
        level=6,
        ancestry="singer",
        paths=["agent"],
    )
    char = engine.character
    char.attributes.update(
        strength=3, speed=2, intellect=2, willpower=3, awareness=3, presence=1,
    )
    for skill, rank in ((S.DECEPTION, 2), (S.ATHLETICS, 1), (S.DISCIPLINE, 2), (S.PERCEPTION, 2)):
        char.skills.set_rank(skill, rank)
    char.grant_culture_expertises("Listener", ["Listener"])
    char.add_expertise("Songs of the Listeners")

    for talent_id in SAMPLE_UNLOCKS:
        result = engine.unlock(talent_id)
        if not result.ok:
            logging.getLogger(__name__).warning(
                "Could not unlock %s: %s %s", talent_id, result.status.value, result.reasons
            )

    engine.set_active_form("warform")
    engine.set_active_stance("stonestance")
    return engine


def main():
    parser = argparse.ArgumentParser(description="Dump sample character stats")
    parser.add_argument("--json", action="store_true", help="Print the saved snapshot as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine decisions")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    engine = build_sample()
    char = engine.character

    if args.json:
        print(json.dumps(export_character(char, include_stats=True), indent=2))
        return

    stats = compute_stats(char)

    print(f"\n{'='*50}")
    print(f"  {char.name}, Level {char.level} (tier {char.tier})")
    print(f"{'='*50}")

    print("\n--- ATTRIBUTES ---")
    for name in ATTRIBUTES:
        base = char.attributes[name]
        effective = stats.attributes[name]
        bonus = effective - base
        bonus_str = f" ({bonus:+d})" if bonus else ""
        print(f"  {name.title():<14} {effective:>2}{bonus_str}")

    print("\n--- DEFENSES ---")
    for name, value in stats.defenses.items():
        print(f"  {name.title():<14} {value:>3}")
    print(f"  {'Deflect':<14} {stats.deflect:>3}")

    print("\n--- RESOURCES ---")
    print(f"  Health              {stats.max_health:>4}")
    print(f"  Focus               {stats.max_focus:>4}")
    print(f"  Investiture         {stats.max_investiture:>4}")

    print("\n--- DERIVED ---")
    print(f"  Movement            {stats.movement:>4} ft")
    print(f"  Lifting             {stats.lifting_capacity:>4} lb")
    print(f"  Carrying            {stats.carrying_capacity:>4} lb")
    print(f"  Recovery die        {stats.recovery_die:>4}")
    senses = "unlimited" if stats.senses_range == float("inf") else f"{stats.senses_range:>4} ft"
    print(f"  Senses range        {senses}")

    print("\n--- SKILLS ---")
    for skill, total in stats.skills.items():
        rank = char.skills.get_rank(skill)
        if rank:
            print(f"  {skill.value.replace('_', ' ').title():<16} {total:>3}  (rank {rank})")

    print("\n--- TALENTS ---")
    for talent_id in sorted(char.unlocked_talents):
        print(f"  {engine.rules.talents[talent_id].name}")
    print(f"  Forms: {', '.join(char.unlocked_forms) or '-'} (active: {char.active_form or '-'})")
    print(f"  Stance: {char.active_stance or '-'}")
    print(f"  Talent points left: {engine.available_talent_points()}")

    print("\n--- EXPERTISES ---")
    for record in char.selected_expertises:
        print(f"  {record.name:<24} [{record.badge}]")

    errors = engine.validate()
    if errors:
        print("\n--- PROBLEMS ---")
        for err in errors:
            print(f"  {err.category}: {err.message}")

    print()


if __name__ == "__main__":
    main()
