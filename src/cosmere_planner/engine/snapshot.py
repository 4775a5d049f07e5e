"""Export and import a character as a plain JSON-serialisable dict."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from cosmere_planner.engine.ledger import AdvantageLedger, BonusLedger
from cosmere_planner.engine.radiant_path import RadiantPath
from cosmere_planner.models.character import Character
from cosmere_planner.models.derived_stats import CharacterStats, compute_stats
from cosmere_planner.models.expertise import ExpertiseSource
from cosmere_planner.models.rules import RulesTable
from cosmere_planner.models.skills import MAX_SKILL_RANK, SkillRanks


SNAPSHOT_VERSION = 1


def _stats_payload(stats: CharacterStats) -> dict[str, Any]:
    return {
        "attributes": dict(stats.attributes),
        "defenses": dict(stats.defenses),
        "deflect": int(stats.deflect),
        "max_health": int(stats.max_health),
        "max_focus": int(stats.max_focus),
        "max_investiture": int(stats.max_investiture),
        "skills": {skill.value: total for skill, total in stats.skills.items()},
        "movement": int(stats.movement),
        "lifting_capacity": int(stats.lifting_capacity),
        "carrying_capacity": int(stats.carrying_capacity),
        "recovery_die": stats.recovery_die,
        # None means unlimited
        "senses_range": None if math.isinf(stats.senses_range) else int(stats.senses_range),
    }


def export_character(character: Character, *, include_stats: bool = False) -> dict[str, Any]:
    """Snapshot everything needed to restore *character*.

    With include_stats, computed totals are added under ``"stats"`` for
    display; import_character() ignores them.
    """
    payload: dict[str, Any] = {
        "version": SNAPSHOT_VERSION,
        "name": character.name,
        "level": character.level,
        "ancestry": character.ancestry,
        "paths": list(character.paths),
        "cultures": list(character.cultures),
        "attributes": dict(character.attributes),
        "skills": character.skills.as_dict(),
        "unlocked_talents": sorted(character.unlocked_talents),
        "unlocked_forms": list(character.unlocked_forms),
        "locked_talents": sorted(character.locked_talents),
        "expertises": [record.to_dict() for record in character.selected_expertises],
        "active_form": character.active_form,
        "active_stance": character.active_stance,
        "bonuses": character.bonuses.to_dict(),
        "advantages": character.advantages.to_dict(),
        "radiant": character.radiant.to_dict(),
    }
    if include_stats:
        payload["stats"] = _stats_payload(compute_stats(character))
    return payload


def import_character(
    payload: Mapping[str, Any],
    rules: RulesTable | None = None,
    *,
    max_skill_rank: int = MAX_SKILL_RANK,
) -> Character:
    """Rebuild a Character from export_character() output.

    Raises ValueError for ids the rules table does not know, for unknown
    enum values, and for active selections that are not unlocked.
    """
    rules = rules or RulesTable.defaults()
    version = payload.get("version", SNAPSHOT_VERSION)
    if version != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version {version!r}")

    talents = set(payload.get("unlocked_talents", []))
    unknown = sorted(t for t in talents if t not in rules.talents)
    if unknown:
        raise ValueError(f"Snapshot references unknown talents: {unknown}")

    forms: list[str] = []
    for form_id in payload.get("unlocked_forms", []):
        if rules.get_form(form_id) is None:
            raise ValueError(f"Snapshot references unknown form {form_id!r}")
        if form_id not in forms:
            forms.append(form_id)

    active_form = payload.get("active_form")
    if active_form is not None and active_form not in forms:
        raise ValueError(f"Active form {active_form!r} is not unlocked")
    active_stance = payload.get("active_stance")
    if active_stance is not None:
        stance = rules.get_stance(active_stance)
        if stance is None or stance.talent_id not in talents:
            raise ValueError(f"Active stance {active_stance!r} is not available")

    character = Character(
        name=payload.get("name", "Unnamed"),
        level=int(payload.get("level", 1)),
        ancestry=payload.get("ancestry", "human"),
        paths=list(payload.get("paths", [])),
        cultures=list(payload.get("cultures", [])),
        skills=SkillRanks.from_dict(payload.get("skills", {}), max_rank=max_skill_rank),
        unlocked_talents=talents,
        unlocked_forms=forms,
        locked_talents=set(payload.get("locked_talents", [])) & talents,
        selected_expertises=[
            ExpertiseSource.from_dict(record) for record in payload.get("expertises", [])
        ],
        active_form=active_form,
        active_stance=active_stance,
        bonuses=BonusLedger.from_dict(payload.get("bonuses", {})),
        advantages=AdvantageLedger.from_dict(payload.get("advantages", {})),
        radiant=RadiantPath.from_dict(payload.get("radiant", {}), rules.orders or None),
    )
    if "attributes" in payload:
        character.attributes.update(
            {name.lower(): int(value) for name, value in payload["attributes"].items()}
        )
    return character
