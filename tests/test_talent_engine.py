"""Tests for the talent engine (unlock / lock orchestration).

Uses the bundled rules data from RulesTable.defaults().
"""

import pytest

from cosmere_planner.engine.engine_config import EngineConfig
from cosmere_planner.engine.radiant_path import UnknownOrderError
from cosmere_planner.engine.snapshot import export_character, import_character
from cosmere_planner.engine.talent_engine import (
    LockStatus,
    TalentEngine,
    UnlockStatus,
)
from cosmere_planner.models.constants import BonusType, ExpertiseSourceType, ProgressionMode, SkillType
from cosmere_planner.models.derived_stats import compute_stats
from cosmere_planner.models.rules import RulesTable
from cosmere_planner.models.talent import TalentNode, TalentTree


BT = BonusType
S = SkillType


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _engine(mode: ProgressionMode = ProgressionMode.LEVEL_UP, **fields) -> TalentEngine:
    fields.setdefault("level", 5)
    return TalentEngine.new_character(config=EngineConfig(mode=mode), **fields)


def _unlock_all(engine: TalentEngine, *talent_ids: str) -> None:
    for talent_id in talent_ids:
        result = engine.unlock(talent_id)
        assert result.status is UnlockStatus.UNLOCKED, (talent_id, result.reasons)


def _singer(engine: TalentEngine, *talent_ids: str) -> None:
    _unlock_all(engine, "singer_ancestry", "singer_change_form", *talent_ids)


def _strength_bonus(engine: TalentEngine) -> float:
    return engine.character.bonuses.get_bonuses_for(BT.ATTRIBUTE, "strength")


# ---------------------------------------------------------------------------
# Unlock
# ---------------------------------------------------------------------------


class TestUnlock:
    def test_unknown_talent(self):
        result = _engine().unlock("no_such_talent")
        assert result.status is UnlockStatus.UNKNOWN
        assert not result.ok

    def test_unmet_prerequisites_report_reasons_and_change_nothing(self):
        engine = _engine(paths=["agent"])
        result = engine.unlock("plausible_excuse")
        assert result.status is UnlockStatus.PREREQUISITES_UNMET
        assert result.reasons == ["Deception rank >= 1"]
        assert "plausible_excuse" not in engine.character.unlocked_talents
        assert not engine.character.bonuses.has_source("talent:plausible_excuse")

    def test_unlock_adds_talent_bonuses(self):
        engine = _engine()
        engine.character.skills.set_rank(S.INSIGHT, 1)
        _unlock_all(engine, "opportunist", "sure_outcome", "collected")
        bonuses = engine.character.bonuses
        assert bonuses.get_bonuses_for(BT.DEFENSE, "cognitive") == 2
        assert bonuses.get_bonuses_for(BT.DEFENSE, "spiritual") == 2

    def test_already_unlocked(self):
        engine = _engine(paths=["agent"])
        result = engine.unlock("opportunist")
        assert result.status is UnlockStatus.ALREADY_UNLOCKED
        assert result.ok

    def test_path_key_talent_is_unlocked_for_free(self):
        engine = _engine(paths=["agent"])
        assert "opportunist" in engine.character.unlocked_talents

    def test_can_unlock_does_not_mutate(self):
        engine = _engine(paths=["agent"])
        before = set(engine.character.unlocked_talents)
        assert [engine.can_unlock("plausible_excuse") for _ in range(3)] == [False] * 3
        assert engine.character.unlocked_talents == before

    def test_or_prerequisites(self):
        engine = _engine()
        result = engine.unlock("emergency_care")
        assert result.status is UnlockStatus.PREREQUISITES_UNMET
        assert result.reasons == ["One of: Medicine rank >= 2 OR Talent: Education"]

        engine.character.skills.set_rank(S.MEDICINE, 2)
        assert engine.unlock("emergency_care").status is UnlockStatus.UNLOCKED
        assert engine.character.advantages.has_advantage("medicine")

    def test_available_talents_exclude_forms(self):
        engine = _engine()
        _singer(engine, "forms_of_resolve")
        available = engine.available_talents()
        assert "warform" not in available
        assert "forms_of_finesse" in available


class TestSingerForms:
    def test_granting_talent_adds_forms_once(self):
        engine = _engine()
        _singer(engine)
        result = engine.unlock("forms_of_finesse")
        assert result.granted_forms == ["nimbleform", "artform"]
        assert "nimbleform" in engine.character.unlocked_forms

        again = engine.unlock("forms_of_finesse")
        assert again.status is UnlockStatus.ALREADY_UNLOCKED
        assert len(engine.character.unlocked_forms) == 2
        assert engine.unlock("nimbleform").status is UnlockStatus.ALREADY_UNLOCKED
        assert len(engine.character.unlocked_forms) == 2

    def test_form_cannot_be_unlocked_before_its_talent(self):
        engine = _engine()
        _singer(engine)
        result = engine.unlock("warform")
        assert result.status is UnlockStatus.PREREQUISITES_UNMET
        assert "warform" not in engine.character.unlocked_forms

    def test_warform_strength_while_active(self):
        engine = _engine()
        _singer(engine, "forms_of_resolve")
        before = _strength_bonus(engine)
        base_strength = compute_stats(engine.character).attributes["strength"]

        assert engine.set_active_form("warform")
        assert _strength_bonus(engine) >= 2
        assert compute_stats(engine.character).attributes["strength"] == base_strength + 2
        assert engine.get_active_form().name == "Warform"

        assert engine.set_active_form(None)
        assert _strength_bonus(engine) == before
        assert engine.character.active_form is None

    def test_locked_form_cannot_be_selected(self):
        engine = _engine()
        _singer(engine, "forms_of_finesse")
        assert not engine.set_active_form("warform")
        assert engine.character.active_form is None

    def test_reselecting_active_form_does_not_stack(self):
        engine = _engine()
        _singer(engine, "forms_of_resolve")
        engine.set_active_form("warform")
        assert engine.set_active_form("warform")
        assert _strength_bonus(engine) == 2

    def test_switching_forms(self):
        engine = _engine()
        _singer(engine, "forms_of_resolve")
        engine.set_active_form("warform")
        engine.set_active_form("workform")
        assert _strength_bonus(engine) == 0
        assert engine.character.bonuses.get_bonuses_for(BT.ATTRIBUTE, "willpower") == 1
        assert engine.character.active_form == "workform"


class TestStances:
    def _duelist(self) -> TalentEngine:
        engine = _engine()
        engine.character.skills.set_rank(S.ATHLETICS, 3)
        _unlock_all(engine, "vigilant_stance", "stonestance", "feinting_strike", "vinestance")
        return engine

    def test_switching_stance_clears_previous_deflect(self):
        engine = self._duelist()
        engine.set_active_stance("stonestance")
        assert compute_stats(engine.character).deflect == 1

        assert engine.set_active_stance("vinestance")
        assert engine.character.bonuses.get_bonuses_for(BT.DEFLECT, "all") == 0
        stats = compute_stats(engine.character)
        assert stats.deflect == 0
        assert stats.defenses["physical"] == 15

    def test_reselecting_active_stance_does_not_stack(self):
        engine = self._duelist()
        engine.set_active_stance("vinestance")
        engine.set_active_stance("vinestance")
        assert engine.character.bonuses.get_bonuses_for(BT.DEFENSE, "physical") == 1

    def test_stance_needs_its_talent(self):
        engine = _engine()
        assert not engine.set_active_stance("stonestance")
        _unlock_all(engine, "vigilant_stance")
        assert [s.id for s in engine.available_stances()] == ["vigilant_stance"]
        assert engine.set_active_stance("vigilant_stance")
        assert engine.get_active_stance().name == "Vigilant Stance"

    def test_surefooted_raises_movement(self):
        engine = _engine()
        before = compute_stats(engine.character).movement
        _unlock_all(engine, "vigilant_stance", "stonestance", "surefooted")
        assert compute_stats(engine.character).movement == before + 10
        engine.lock("surefooted")
        assert compute_stats(engine.character).movement == before


# ---------------------------------------------------------------------------
# Expertise choices (two-phase unlock)
# ---------------------------------------------------------------------------


class TestExpertiseChoices:
    def test_choice_talent_waits_for_selection(self):
        engine = _engine()
        result = engine.unlock("education")
        assert result.status is UnlockStatus.PENDING_CHOICE
        assert result.pending.choices[0].choice_count == 2
        assert "education" not in engine.character.unlocked_talents
        assert engine.character.selected_expertises == []
        assert engine.pending_unlocks() == [result.pending]

    def test_commit_applies_canonical_names(self):
        engine = _engine()
        pending = engine.unlock("education").pending
        result = engine.commit_unlock(pending, [["alethi", "Weapon Crafting"]])
        assert result.status is UnlockStatus.UNLOCKED
        assert result.granted_expertises == ["Alethi", "Weapon Crafting"]
        record = engine.character.selected_expertises[0]
        assert record.source is ExpertiseSourceType.TALENT
        assert record.source_id == "talent:education"
        assert engine.pending_unlocks() == []

    @pytest.mark.parametrize(
        "selections, reason",
        [
            ([["Alethi"]], "pick 2, got 1"),
            ([["Alethi", "Shin"]], "'Shin' is not one of"),
            ([["Alethi", "alethi"]], "duplicate picks"),
            ([], "Expected 1 selection(s), got 0"),
        ],
    )
    def test_invalid_selection_changes_nothing(self, selections, reason):
        engine = _engine()
        pending = engine.unlock("education").pending
        result = engine.commit_unlock(pending, selections)
        assert result.status is UnlockStatus.INVALID_SELECTION
        assert any(reason in r for r in result.reasons)
        assert "education" not in engine.character.unlocked_talents
        assert engine.character.selected_expertises == []
        # The pending unlock can still be completed.
        assert engine.commit_unlock(pending, [["Thaylen", "Alethi"]]).ok

    def test_cancel_aborts_unlock(self):
        engine = _engine()
        pending = engine.unlock("education").pending
        engine.cancel_unlock(pending)
        assert engine.pending_unlocks() == []
        result = engine.commit_unlock(pending, [["Thaylen", "Alethi"]])
        assert result.status is UnlockStatus.INVALID_SELECTION
        assert "education" not in engine.character.unlocked_talents

    def test_one_shot_unlock_with_selections(self):
        engine = _engine()
        result = engine.unlock("education", [["Thaylen", "Armor Crafting"]])
        assert result.status is UnlockStatus.UNLOCKED
        assert engine.character.has_expertise("armor crafting")

    def test_single_option_category_is_granted_without_asking(self):
        engine = _engine()
        _unlock_all(engine, "vigilant_stance")
        result = engine.unlock("combat_training")
        assert result.status is UnlockStatus.PENDING_CHOICE
        assert len(result.pending.choices) == 1
        assert "Heavy Weaponry" in result.pending.choices[0].expertises

        done = engine.commit_unlock(result.pending, [["Heavy Weaponry"]])
        assert set(done.granted_expertises) == {"Armor Proficiency", "Heavy Weaponry"}

    def test_talent_gained_elsewhere_clears_its_pending_choice(self):
        engine = _engine()
        pending = engine.unlock("education").pending
        engine.character.unlocked_talents.add("education")

        assert engine.unlock("education").status is UnlockStatus.ALREADY_UNLOCKED
        assert engine.pending_unlocks() == []
        result = engine.commit_unlock(pending, [["Thaylen", "Alethi"]])
        assert result.status is UnlockStatus.INVALID_SELECTION


class TestFreePathTalents:
    def test_key_talent_choice_waits_for_picks(self):
        engine = _engine(paths=["scholar"])
        char = engine.character
        assert "education" in char.unlocked_talents
        assert char.selected_expertises == []

        [pending] = engine.pending_unlocks()
        assert pending.talent_id == "education"
        assert pending.talent_held
        assert pending.choices[0].choice_count == 2

        again = engine.unlock("education")
        assert again.status is UnlockStatus.PENDING_CHOICE
        assert again.pending is pending

    def test_key_talent_picks_are_granted(self):
        engine = _engine(paths=["scholar"])
        pending = engine.pending_unlocks()[0]

        result = engine.commit_unlock(pending, [["alethi", "Thaylen"]])
        assert result.status is UnlockStatus.UNLOCKED
        assert result.granted_expertises == ["Alethi", "Thaylen"]
        record = engine.character.selected_expertises[0]
        assert record.source_id == "talent:education"
        assert engine.pending_unlocks() == []
        assert engine.unlock("education").status is UnlockStatus.ALREADY_UNLOCKED

    def test_invalid_key_talent_picks_keep_choice_open(self):
        engine = _engine(paths=["scholar"])
        result = engine.unlock("education", [["Alethi"]])
        assert result.status is UnlockStatus.INVALID_SELECTION
        assert engine.character.selected_expertises == []
        assert len(engine.pending_unlocks()) == 1
        assert engine.unlock("education", [["Alethi", "Shin"]]).status is UnlockStatus.INVALID_SELECTION
        assert engine.unlock("education", [["Alethi", "Armor Crafting"]]).ok

    def test_open_key_talent_choice_survives_reload(self):
        engine = _engine(paths=["scholar"])
        restored = TalentEngine(import_character(export_character(engine.character)))
        assert [p.talent_id for p in restored.pending_unlocks()] == ["education"]

        restored.unlock("education", [["Alethi", "Thaylen"]])
        reloaded = TalentEngine(import_character(export_character(restored.character)))
        assert reloaded.pending_unlocks() == []

    def test_removing_key_talent_drops_its_choice(self):
        engine = _engine(paths=["scholar"])
        assert engine.lock("education").ok
        assert engine.pending_unlocks() == []

    def test_key_talent_without_choices_leaves_nothing_pending(self):
        assert _engine(paths=["agent"]).pending_unlocks() == []


# ---------------------------------------------------------------------------
# Lock
# ---------------------------------------------------------------------------


class TestLock:
    def test_removing_talent_cascades_its_expertise(self):
        engine = _engine(paths=["agent"])
        char = engine.character
        char.skills.set_rank(S.DECEPTION, 1)
        char.add_expertise("Disguise")

        result = engine.unlock("plausible_excuse")
        assert result.granted_expertises == ["Sleight of Hand"]
        assert char.has_expertise("Sleight of Hand")
        assert not char.remove_expertise("Sleight of Hand")

        removed = engine.lock("plausible_excuse")
        assert removed.status is LockStatus.REMOVED
        assert removed.removed_expertises == ["Sleight of Hand"]
        assert not char.has_expertise("Sleight of Hand")
        assert char.has_expertise("Disguise")

    def test_manual_copy_of_granted_expertise_survives(self):
        engine = _engine(paths=["agent"])
        char = engine.character
        char.skills.set_rank(S.DECEPTION, 1)
        char.add_expertise("Sleight of Hand")

        assert engine.unlock("plausible_excuse").granted_expertises == []
        engine.lock("plausible_excuse")
        assert char.has_expertise("Sleight of Hand")

    def test_dependents_block_removal(self):
        engine = _engine(paths=["agent"])
        engine.character.skills.set_rank(S.DECEPTION, 1)
        _unlock_all(engine, "plausible_excuse")

        blocked = engine.lock("opportunist")
        assert blocked.status is LockStatus.BLOCKED_BY_DEPENDENTS
        assert blocked.blocked_by == ["plausible_excuse"]
        assert "opportunist" in engine.character.unlocked_talents

        assert engine.lock("plausible_excuse").ok
        assert engine.lock("opportunist").ok
        assert engine.character.unlocked_talents == set()

    def test_removal_retracts_bonuses_and_advantages(self):
        engine = _engine()
        engine.character.skills.set_rank(S.MEDICINE, 2)
        _unlock_all(engine, "emergency_care")
        engine.lock("emergency_care")
        assert not engine.character.advantages.has_advantage("medicine")
        assert not engine.character.bonuses.has_source("talent:emergency_care")

    def test_not_unlocked(self):
        assert _engine().lock("opportunist").status is LockStatus.NOT_UNLOCKED

    def test_creation_mode_is_append_only(self):
        engine = _engine(mode=ProgressionMode.CREATION, paths=["agent"])
        result = engine.lock("opportunist")
        assert result.status is LockStatus.APPEND_ONLY
        assert "opportunist" in engine.character.unlocked_talents

        engine.set_mode(ProgressionMode.EDIT)
        assert engine.lock("opportunist").ok

    def test_committed_talents_are_locked_in(self):
        engine = _engine()
        _unlock_all(engine, "vigilant_stance")
        assert engine.commit_level() == 1
        assert engine.lock("vigilant_stance").status is LockStatus.LOCKED_IN

        _unlock_all(engine, "stonestance")
        assert engine.lock("stonestance").ok

    def test_removing_form_talent_drops_its_forms(self):
        engine = _engine()
        _singer(engine, "forms_of_resolve")
        engine.set_active_form("warform")

        result = engine.lock("forms_of_resolve")
        assert result.ok
        assert result.removed_forms == ["warform", "workform"]
        assert engine.character.unlocked_forms == []
        assert engine.character.active_form is None
        assert _strength_bonus(engine) == 0

    def test_form_talent_chain_is_protected(self):
        engine = _engine()
        _singer(engine, "forms_of_resolve")
        result = engine.lock("singer_change_form")
        assert result.status is LockStatus.BLOCKED_BY_DEPENDENTS
        assert result.blocked_by == ["forms_of_resolve"]

    def test_removing_stance_talent_clears_active_stance(self):
        engine = _engine()
        _unlock_all(engine, "vigilant_stance", "stonestance")
        engine.set_active_stance("stonestance")
        assert engine.lock("stonestance").ok
        assert engine.character.active_stance is None
        assert engine.character.bonuses.get_bonuses_for(BT.DEFLECT, "all") == 0


class TestSharedExpertise:
    def _engine(self) -> TalentEngine:
        nodes = [
            TalentNode(id=tid, name=tid.upper(), other_effects=["Gain Sleight of Hand expertise."])
            for tid in ("a", "b")
        ]
        rules = RulesTable.from_trees([TalentTree("Test", nodes)])
        return TalentEngine.new_character(rules, EngineConfig(mode=ProgressionMode.LEVEL_UP))

    def test_expertise_stays_while_another_grantor_is_held(self):
        engine = self._engine()
        char = engine.character
        assert engine.unlock("a").granted_expertises == ["Sleight of Hand"]
        assert engine.unlock("b").granted_expertises == []

        result = engine.lock("a")
        assert result.ok
        assert result.removed_expertises == []
        assert char.has_expertise("Sleight of Hand")
        assert char.selected_expertises[0].source_id == "talent:b"

        assert engine.lock("b").removed_expertises == ["Sleight of Hand"]
        assert not char.has_expertise("Sleight of Hand")

    def test_order_of_removal_does_not_matter(self):
        engine = self._engine()
        _unlock_all(engine, "a", "b")
        engine.lock("b")
        assert engine.character.has_expertise("Sleight of Hand")
        engine.lock("a")
        assert engine.character.selected_expertises == []


# ---------------------------------------------------------------------------
# Radiant path
# ---------------------------------------------------------------------------


class TestRadiant:
    def test_first_ideal_opens_surge_talents(self):
        engine = _engine()
        assert engine.grant_spren("Windrunner")
        assert not engine.can_unlock("basic_lashing")

        assert engine.speak_ideal()
        assert engine.character.skills.get_rank(S.GRAVITATION) == 1
        assert engine.unlock("basic_lashing").status is UnlockStatus.UNLOCKED

    def test_later_ideals_stay_locked(self):
        engine = _engine()
        engine.grant_spren("Windrunner")
        engine.speak_ideal()
        result = engine.unlock("second_ideal_wind")
        assert result.status is UnlockStatus.PREREQUISITES_UNMET
        assert result.reasons == ["Second Ideal spoken"]

    def test_unknown_order_is_a_hard_error(self):
        with pytest.raises(UnknownOrderError):
            _engine().grant_spren("Dragonsteel")

    def test_configured_surge_rank(self):
        engine = TalentEngine.new_character(config=EngineConfig(ideal_surge_rank=2))
        engine.grant_spren("Windrunner")
        engine.speak_ideal()
        assert engine.character.skills.get_rank(S.ADHESION) == 2


# ---------------------------------------------------------------------------
# Talent points and validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_fresh_character_is_valid(self):
        engine = _engine(paths=["agent"])
        assert engine.validate() == []
        assert engine.is_valid()

    def test_key_talent_is_free(self):
        engine = _engine(level=1, paths=["warrior"])
        assert "vigilant_stance" in engine.character.unlocked_talents
        assert engine.available_talent_points() == 2

    def test_overspend_is_reported(self):
        engine = _engine(level=1)
        _unlock_all(engine, "vigilant_stance", "stonestance", "feinting_strike")
        errors = engine.validate()
        assert [e.category for e in errors] == ["talent_points"]
        assert "overspent by 1" in errors[0].message

    def test_enforced_points_refuse_unlock(self):
        engine = TalentEngine.new_character(
            config=EngineConfig(mode=ProgressionMode.LEVEL_UP, enforce_talent_points=True),
            level=1,
        )
        _unlock_all(engine, "vigilant_stance", "stonestance")
        result = engine.unlock("feinting_strike")
        assert result.status is UnlockStatus.INSUFFICIENT_POINTS
        assert "feinting_strike" not in engine.character.unlocked_talents

    def test_broken_prerequisite_is_reported(self):
        engine = _engine(paths=["agent"])
        engine.character.skills.set_rank(S.DECEPTION, 1)
        _unlock_all(engine, "plausible_excuse")
        engine.character.skills.set_rank(S.DECEPTION, 0)

        errors = engine.validate()
        assert len(errors) == 1
        assert errors[0].category == "prerequisites"
        assert errors[0].talent_id == "plausible_excuse"
        assert "Deception rank >= 1" in errors[0].message

    def test_level_out_of_range(self):
        engine = _engine(level=30)
        assert "level" in [e.category for e in engine.validate()]
