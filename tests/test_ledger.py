"""Tests for the bonus and advantage ledgers."""

import logging
import random

from cosmere_planner.engine.ledger import (
    AdvantageLedger,
    BonusLedger,
    FormulaContext,
    evaluate_formula,
)
from cosmere_planner.models.bonus import BonusEffect, SourceRef
from cosmere_planner.models.constants import BonusType, SkillType


BT = BonusType


def _bonus(target: str = "physical", value: float | None = 1, bonus_type: BonusType = BT.DEFENSE):
    return BonusEffect(bonus_type, target, value)


# ---------------------------------------------------------------------------
# BonusLedger
# ---------------------------------------------------------------------------


class TestBonusLedger:
    def test_empty_total_is_zero(self):
        assert BonusLedger().get_bonuses_for(BT.ATTRIBUTE, "strength") == 0

    def test_sums_matching_entries_across_sources(self):
        ledger = BonusLedger()
        ledger.add_bonus("talent:a", _bonus("physical", 1))
        ledger.add_bonus(SourceRef.stance("vinestance"), _bonus("physical", 2))
        ledger.add_bonus("talent:a", _bonus("cognitive", 5))
        assert ledger.get_bonuses_for(BT.DEFENSE, "physical") == 3
        assert ledger.get_bonuses_for(BT.DEFENSE, "cognitive") == 5
        assert ledger.get_bonuses_for(BT.DEFLECT, "physical") == 0

    def test_source_ref_and_string_key_are_the_same_source(self):
        ledger = BonusLedger()
        ledger.add_bonus(SourceRef.talent("hardy"), _bonus())
        assert ledger.has_source("talent:hardy")
        ledger.remove_bonus("talent:hardy")
        assert not ledger.has_source(SourceRef.talent("hardy"))

    def test_remove_drops_every_entry_of_the_source(self):
        ledger = BonusLedger()
        ledger.add_bonuses("talent:a", [_bonus("physical", 1), _bonus("spiritual", 2)])
        ledger.add_bonus("talent:b", _bonus("physical", 4))
        ledger.remove_bonus("talent:a")
        assert ledger.get_bonuses_for(BT.DEFENSE, "physical") == 4
        assert ledger.get_bonuses_for(BT.DEFENSE, "spiritual") == 0

    def test_removing_unknown_source_is_noop(self):
        ledger = BonusLedger()
        ledger.add_bonus("talent:a", _bonus("physical", 1))
        ledger.remove_bonus("talent:never-added")
        assert ledger.get_bonuses_for(BT.DEFENSE, "physical") == 1

    def test_re_adding_a_source_accumulates(self):
        ledger = BonusLedger()
        ledger.add_bonus("stance:x", _bonus("physical", 1))
        ledger.add_bonus("stance:x", _bonus("physical", 1))
        assert ledger.get_bonuses_for(BT.DEFENSE, "physical") == 2
        assert len(ledger.entries_for("stance:x")) == 2

    def test_entries_without_value_count_as_zero(self):
        ledger = BonusLedger()
        ledger.add_bonus("talent:a", _bonus("athletics", None, BT.SKILL))
        ledger.add_bonus("talent:b", BonusEffect(BT.SKILL, "athletics", "lots"))
        ledger.add_bonus("talent:c", BonusEffect(BT.SKILL, "athletics", True))
        assert ledger.get_bonuses_for(BT.SKILL, "athletics") == 0

    def test_all_target_is_its_own_bucket(self):
        ledger = BonusLedger()
        ledger.add_bonus("stance:stonestance", _bonus("all", 1, BT.DEFLECT))
        ledger.add_bonus("form:warform", _bonus("physical", 1, BT.DEFLECT))
        assert ledger.get_bonuses_for(BT.DEFLECT, "physical") == 1
        assert ledger.get_bonuses_for(BT.DEFLECT, "all") == 1
        assert ledger.get_bonuses_for_with_all(BT.DEFLECT, "physical") == 2
        # Querying "all" itself does not count the bucket twice.
        assert ledger.get_bonuses_for_with_all(BT.DEFLECT, "all") == 1

    def test_skill_targets_match_any_spelling(self):
        ledger = BonusLedger()
        ledger.add_bonus("talent:a", _bonus("light weaponry", 1, BT.SKILL))
        ledger.add_bonus("talent:b", _bonus("Light-Weaponry", 2, BT.SKILL))
        assert ledger.get_bonuses_for(BT.SKILL, "light_weaponry") == 3
        assert ledger.get_bonuses_for(BT.SKILL, "LIGHT WEAPONRY") == 3
        assert ledger.get_bonuses_for(BT.SKILL, "heavy_weaponry") == 0

    def test_other_targets_match_exactly(self):
        ledger = BonusLedger()
        ledger.add_bonus("talent:a", _bonus("light weaponry", 1, BT.DEFENSE))
        assert ledger.get_bonuses_for(BT.DEFENSE, "light_weaponry") == 0
        ledger.add_bonus("talent:b", _bonus("basket weaving", 1, BT.SKILL))
        assert ledger.get_bonuses_for(BT.SKILL, "basket weaving") == 1
        assert ledger.get_bonuses_for(BT.SKILL, "basket_weaving") == 0

    def test_sources_and_clear(self):
        ledger = BonusLedger()
        ledger.add_bonus("talent:a", _bonus())
        ledger.add_bonus("form:b", _bonus())
        assert ledger.sources() == ["talent:a", "form:b"]
        ledger.clear()
        assert ledger.sources() == []

    def test_to_dict_from_dict_preserves_totals(self):
        ledger = BonusLedger()
        ledger.add_bonus("talent:a", BonusEffect(BT.DEFENSE, "physical", 1, "while in warform"))
        ledger.add_bonus("talent:b", BonusEffect(BT.RESOURCE, "health", formula="1 + tier", scaling=True))
        restored = BonusLedger.from_dict(ledger.to_dict())
        assert restored.to_dict() == ledger.to_dict()
        assert restored.entries_for("talent:a")[0].condition == "while in warform"
        assert restored.get_bonuses_for(BT.RESOURCE, "health", FormulaContext(tier=2)) == 3

    def test_total_matches_sum_of_present_entries(self):
        """Random add/remove sequences on distinct sources always sum what remains."""
        rng = random.Random(1234)
        ledger = BonusLedger()
        model: dict[str, list[int]] = {}
        for _ in range(300):
            key = f"talent:t{rng.randrange(8)}"
            if rng.random() < 0.35:
                ledger.remove_bonus(key)
                model.pop(key, None)
            else:
                value = rng.randint(-3, 3)
                ledger.add_bonus(key, _bonus("physical", value))
                model.setdefault(key, []).append(value)
            expected = sum(v for values in model.values() for v in values)
            assert ledger.get_bonuses_for(BT.DEFENSE, "physical") == expected


# ---------------------------------------------------------------------------
# Formulas
# ---------------------------------------------------------------------------


class TestFormulas:
    def test_tier_substitution(self):
        assert evaluate_formula("1 + tier", FormulaContext(tier=3)) == 4
        assert evaluate_formula("2 * tier - 1", FormulaContext(tier=3)) == 5

    def test_skill_ranks_are_floored(self):
        ctx = FormulaContext(skill_ranks={SkillType.PERCEPTION: 3})
        assert evaluate_formula("perception.ranks / 2", ctx) == 1

    def test_unknown_skill_ranks_are_zero(self):
        assert evaluate_formula("basketry.ranks + 1", FormulaContext()) == 1

    def test_invalid_formula_is_zero_and_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert evaluate_formula("__import__('os')", FormulaContext()) == 0
            assert evaluate_formula("1 +", FormulaContext()) == 0
        assert "Invalid bonus formula" in caplog.text

    def test_formula_needs_context_otherwise_value_is_used(self):
        ledger = BonusLedger()
        ledger.add_bonus("talent:hardy", BonusEffect(BT.RESOURCE, "health", 1, formula="1 + tier"))
        assert ledger.get_bonuses_for(BT.RESOURCE, "health") == 1
        assert ledger.get_bonuses_for(BT.RESOURCE, "health", FormulaContext(tier=4)) == 5


# ---------------------------------------------------------------------------
# AdvantageLedger
# ---------------------------------------------------------------------------


class TestAdvantageLedger:
    def test_advantage_and_disadvantage_cancel(self):
        adv = AdvantageLedger()
        adv.add_advantage("form:artform", "crafting")
        assert adv.has_advantage("crafting")
        adv.add_disadvantage("talent:clumsy", "crafting")
        assert not adv.has_advantage("crafting")
        assert not adv.has_disadvantage("crafting")

    def test_remove_source_removes_its_situations(self):
        adv = AdvantageLedger()
        adv.add_advantage("form:artform", "crafting")
        adv.add_advantage("form:artform", "entertainment")
        adv.add_disadvantage("talent:clumsy", "crafting")
        adv.remove_source("form:artform")
        assert adv.has_disadvantage("crafting")
        assert not adv.has_advantage("entertainment")
        assert adv.situations() == {"crafting"}

    def test_round_trip(self):
        adv = AdvantageLedger()
        adv.add_advantage("talent:emergency_care", "medicine")
        restored = AdvantageLedger.from_dict(adv.to_dict())
        assert restored.has_advantage("medicine")
