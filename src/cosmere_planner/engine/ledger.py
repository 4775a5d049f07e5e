"""Bonus ledger: additive modifiers grouped by the source that granted them.

Every entry lives under a source key (``talent:<id>``, ``stance:<id>``, ...).
Sources are added and removed as a unit, so retracting a talent or switching
stance never leaves a stray modifier behind.

Totals are plain sums. There is no min/max/override: a (type, target) pair
with no entries totals 0.
"""

from __future__ import annotations

import ast
import logging
import math
import operator
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from cosmere_planner.models.bonus import BonusEffect, SourceRef, source_key
from cosmere_planner.models.constants import ALL_TARGET, BonusType, SkillType
from cosmere_planner.models.skills import match_skill

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Formula evaluation
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class FormulaContext:
    """Character values a scaling bonus formula may reference."""

    tier: int = 1
    skill_ranks: Mapping[SkillType, int] = field(default_factory=dict)


_TIER_RE = re.compile(r"\btier\b")
_RANKS_RE = re.compile(r"\b([A-Za-z_]+)\.ranks\b")

_BIN_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
}
_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def _eval_node(node: ast.AST) -> float:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BIN_OPS:
        return _BIN_OPS[type(node.op)](_eval_node(node.left), _eval_node(node.right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    raise ValueError(f"Unsupported formula element: {ast.dump(node)}")


def evaluate_formula(formula: str, context: FormulaContext) -> int:
    """Evaluate a bonus formula such as ``"1 + tier"`` or ``"athletics.ranks / 2"``.

    Only numbers and + - * / // are allowed once names are substituted.
    The result is floored. Anything unparseable evaluates to 0.
    """
    def _rank(match: re.Match) -> str:
        skill = match_skill(match.group(1))
        if skill is None:
            return "0"
        return str(context.skill_ranks.get(skill, 0))

    expr = _TIER_RE.sub(str(context.tier), formula)
    expr = _RANKS_RE.sub(_rank, expr)
    try:
        result = _eval_node(ast.parse(expr, mode="eval"))
    except (SyntaxError, ValueError, ZeroDivisionError) as exc:
        log.warning("Invalid bonus formula %r: %s", formula, exc)
        return 0
    return math.floor(result)


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


def _target_matches(bonus_type: BonusType, target: str, wanted: str) -> bool:
    if target == wanted:
        return True
    if bonus_type == BonusType.SKILL:
        skill = match_skill(target)
        return skill is not None and skill is match_skill(wanted)
    return False


class BonusLedger:
    """Keyed store of BonusEffects grouped by source.

    Re-adding a source without removing it first accumulates. Callers that
    re-synchronise a source must remove it before adding it again.
    """

    __slots__ = ("_effects",)

    def __init__(self) -> None:
        self._effects: dict[str, list[BonusEffect]] = {}

    def add_bonus(self, source: SourceRef | str, effect: BonusEffect) -> None:
        """Append *effect* under *source*."""
        self._effects.setdefault(source_key(source), []).append(effect)

    def add_bonuses(self, source: SourceRef | str, effects: Iterable[BonusEffect]) -> None:
        for effect in effects:
            self.add_bonus(source, effect)

    def remove_bonus(self, source: SourceRef | str) -> None:
        """Drop every entry under *source*. Unknown sources are ignored."""
        removed = self._effects.pop(source_key(source), None)
        if removed:
            log.debug("Removed %d bonus(es) from %s", len(removed), source_key(source))

    def get_bonuses_for(
        self,
        bonus_type: BonusType,
        target: str,
        context: FormulaContext | None = None,
    ) -> float:
        """Sum every entry matching (bonus_type, target) exactly.

        SKILL targets compare by skill, so "light weaponry" and
        "light_weaponry" are the same target. ``'all'`` is its own bucket
        here; see get_bonuses_for_with_all().
        """
        total: float = 0
        for effects in self._effects.values():
            for effect in effects:
                if effect.type == bonus_type and _target_matches(bonus_type, effect.target, target):
                    total += self.evaluate(effect, context)
        return total

    def get_bonuses_for_with_all(
        self,
        bonus_type: BonusType,
        target: str,
        context: FormulaContext | None = None,
    ) -> float:
        """Specific target plus the ``'all'`` catch-all bucket."""
        total = self.get_bonuses_for(bonus_type, target, context)
        if target != ALL_TARGET:
            total += self.get_bonuses_for(bonus_type, ALL_TARGET, context)
        return total

    @staticmethod
    def evaluate(effect: BonusEffect, context: FormulaContext | None = None) -> float:
        """Numeric contribution of one entry. Missing values count as 0."""
        if effect.formula and context is not None:
            return evaluate_formula(effect.formula, context)
        value = effect.value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0
        return value

    # --- Introspection -------------------------------------------------------

    def has_source(self, source: SourceRef | str) -> bool:
        return source_key(source) in self._effects

    def sources(self) -> list[str]:
        return list(self._effects)

    def entries_for(self, source: SourceRef | str) -> list[BonusEffect]:
        return list(self._effects.get(source_key(source), []))

    def clear(self) -> None:
        self._effects.clear()

    # --- Persistence ---------------------------------------------------------

    def to_dict(self) -> dict[str, list[dict]]:
        return {
            key: [effect.to_dict() for effect in effects]
            for key, effects in self._effects.items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, list[dict]]) -> BonusLedger:
        ledger = cls()
        for key, effects in data.items():
            for effect in effects:
                ledger.add_bonus(key, BonusEffect.from_dict(effect))
        return ledger


class AdvantageLedger:
    """Advantage/disadvantage situations grouped by source.

    Advantage and disadvantage on the same situation cancel out.
    """

    __slots__ = ("_advantages", "_disadvantages")

    def __init__(self) -> None:
        self._advantages: dict[str, set[str]] = {}
        self._disadvantages: dict[str, set[str]] = {}

    def add_advantage(self, source: SourceRef | str, situation: str) -> None:
        self._advantages.setdefault(source_key(source), set()).add(situation)

    def add_disadvantage(self, source: SourceRef | str, situation: str) -> None:
        self._disadvantages.setdefault(source_key(source), set()).add(situation)

    def remove_source(self, source: SourceRef | str) -> None:
        key = source_key(source)
        self._advantages.pop(key, None)
        self._disadvantages.pop(key, None)

    def _count(self, table: dict[str, set[str]], situation: str) -> int:
        return sum(1 for situations in table.values() if situation in situations)

    def has_advantage(self, situation: str) -> bool:
        adv = self._count(self._advantages, situation)
        dis = self._count(self._disadvantages, situation)
        return adv > 0 and dis == 0

    def has_disadvantage(self, situation: str) -> bool:
        adv = self._count(self._advantages, situation)
        dis = self._count(self._disadvantages, situation)
        return dis > 0 and adv == 0

    def situations(self) -> set[str]:
        found: set[str] = set()
        for table in (self._advantages, self._disadvantages):
            for situations in table.values():
                found |= situations
        return found

    def clear(self) -> None:
        self._advantages.clear()
        self._disadvantages.clear()

    def to_dict(self) -> dict[str, dict[str, list[str]]]:
        return {
            "advantages": {k: sorted(v) for k, v in self._advantages.items()},
            "disadvantages": {k: sorted(v) for k, v in self._disadvantages.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, list[str]]]) -> AdvantageLedger:
        ledger = cls()
        for key, situations in data.get("advantages", {}).items():
            for situation in situations:
                ledger.add_advantage(key, situation)
        for key, situations in data.get("disadvantages", {}).items():
            for situation in situations:
                ledger.add_disadvantage(key, situation)
        return ledger
