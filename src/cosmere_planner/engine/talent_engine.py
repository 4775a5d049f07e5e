"""Talent engine: unlock and lock talents with full cascade semantics.

Orchestrates the rules table, the talent graph, the bonus ledgers, the
form/stance selectors, and the Radiant path for one Character.

Unlocking a talent (once its prerequisites hold):
  - adds it to the unlocked set,
  - pushes its bonuses into the ledger under ``talent:<id>``,
  - grants any singer forms and expertises it hands out.

Talents that offer an expertise choice unlock in two phases: unlock()
returns a PendingUnlock without touching the character, and
commit_unlock() applies it once the player has picked. cancel_unlock()
drops it with no partial state.

Locking (removing) a talent is refused in creation mode, for talents
committed at an earlier level, and while another unlocked talent depends
on it. Otherwise everything the talent granted is retracted with it.

Expected failures come back as result objects with a status and reasons;
only bad static data (an unknown Radiant order) raises.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from cosmere_planner.engine.active_selector import ActiveSelector
from cosmere_planner.engine.engine_config import EngineConfig
from cosmere_planner.engine.radiant_path import RadiantPath
from cosmere_planner.engine.talent_points import available_talent_points, free_talents
from cosmere_planner.graph.talent_graph import TalentGraph
from cosmere_planner.models.bonus import SourceRef
from cosmere_planner.models.character import Character
from cosmere_planner.models.constants import ExpertiseSourceType, ProgressionMode, SourceKind
from cosmere_planner.models.expertise import ExpertiseGrant
from cosmere_planner.models.rules import RulesTable
from cosmere_planner.models.skills import SkillRanks
from cosmere_planner.models.talent import Stance, TalentNode

log = logging.getLogger(__name__)

# One list of picked names per pending choice, in PendingUnlock.choices order.
Selections = Sequence[Sequence[str]]


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


class UnlockStatus(str, Enum):
    UNLOCKED = "unlocked"
    ALREADY_UNLOCKED = "already_unlocked"
    UNKNOWN = "unknown"
    PREREQUISITES_UNMET = "prerequisites_unmet"
    INSUFFICIENT_POINTS = "insufficient_points"
    PENDING_CHOICE = "pending_choice"
    INVALID_SELECTION = "invalid_selection"


class LockStatus(str, Enum):
    REMOVED = "removed"
    NOT_UNLOCKED = "not_unlocked"
    APPEND_ONLY = "append_only"
    LOCKED_IN = "locked_in"
    BLOCKED_BY_DEPENDENTS = "blocked_by_dependents"


@dataclass(slots=True)
class PendingUnlock:
    """An unlock waiting on the player's expertise picks."""

    talent_id: str
    choices: tuple[ExpertiseGrant, ...]
    # True for a free path talent already held; only its picks are outstanding.
    talent_held: bool = False


@dataclass(slots=True)
class UnlockResult:
    status: UnlockStatus
    talent_id: str
    reasons: list[str] = field(default_factory=list)
    pending: PendingUnlock | None = None
    granted_forms: list[str] = field(default_factory=list)
    granted_expertises: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True once the talent is held (newly or already)."""
        return self.status in (UnlockStatus.UNLOCKED, UnlockStatus.ALREADY_UNLOCKED)


@dataclass(slots=True)
class LockResult:
    status: LockStatus
    talent_id: str
    blocked_by: list[str] = field(default_factory=list)
    removed_forms: list[str] = field(default_factory=list)
    removed_expertises: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is LockStatus.REMOVED


@dataclass(slots=True)
class EngineError:
    """A single rule violation discovered during validation."""

    category: str      # "unknown" | "prerequisites" | "talent_points" | "level" | "form" | "stance"
    message: str
    talent_id: str | None = None


def _needs_choice(grant: ExpertiseGrant) -> bool:
    return grant.is_choice and len(grant.expertises) > grant.choice_count


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class TalentEngine:
    """Unlock orchestrator for one character.

    Reads the RulesTable and EngineConfig without modifying them. The
    Character is mutated in place; the engine keeps no copy of its state
    apart from the form and stance selectors, which write their active id
    back to the character after every change.
    """

    __slots__ = ("_character", "_rules", "_config", "_graph", "_forms", "_stances", "_pending")

    def __init__(
        self,
        character: Character,
        rules: RulesTable | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self._character = character
        self._rules = rules or RulesTable.defaults()
        self._config = config or EngineConfig()
        self._graph = TalentGraph.build(self._rules.talents.values())
        self._pending: dict[str, PendingUnlock] = {}

        form_defs = {
            fid: self._rules.talents[fid]
            for fid in self._rules.form_ids()
            if fid in self._rules.talents
        }
        self._forms = ActiveSelector(
            SourceKind.FORM,
            form_defs,
            lambda fid: fid in self._character.unlocked_forms,
            character.bonuses,
            character.advantages,
            active_id=character.active_form,
        )
        self._stances = ActiveSelector(
            SourceKind.STANCE,
            self._rules.stances,
            self._stance_available,
            character.bonuses,
            character.advantages,
            active_id=character.active_stance,
        )

        held_free = free_talents(character.paths, self._rules.path_key_talents)
        for talent_id in sorted(held_free & character.unlocked_talents):
            self._register_free_choices(talent_id)

    # --- Factories ---------------------------------------------------------

    @classmethod
    def new_character(
        cls,
        rules: RulesTable | None = None,
        config: EngineConfig | None = None,
        **fields,
    ) -> TalentEngine:
        """Create a blank character wired to the rules table's orders.

        Path key talents for any ``paths`` given are unlocked for free. Their
        fixed expertises are granted at once; expertise choices are left in
        pending_unlocks() until unlock() or commit_unlock() supplies picks.
        """
        rules = rules or RulesTable.defaults()
        config = config or EngineConfig()
        fields.setdefault("skills", SkillRanks(max_rank=config.max_skill_rank))
        fields.setdefault("radiant", RadiantPath(rules.orders))
        engine = cls(Character(**fields), rules, config)
        for talent_id in sorted(free_talents(engine.character.paths, rules.path_key_talents)):
            if talent_id in rules.talents:
                engine._grant_free_talent(rules.talents[talent_id])
        return engine

    def _grant_free_talent(self, node: TalentNode) -> None:
        grants = self._rules.expertise_grants_for(node.id)
        self._apply(node, [g for g in grants if not _needs_choice(g)], ())
        self._register_free_choices(node.id)

    def _register_free_choices(self, talent_id: str) -> None:
        """Leave a pending choice for a held free talent whose picks were never made."""
        choices = tuple(
            g for g in self._rules.expertise_grants_for(talent_id) if _needs_choice(g)
        )
        if not choices:
            return
        key = SourceRef.talent(talent_id).key
        options = {name.casefold() for grant in choices for name in grant.expertises}
        if any(
            r.source_id == key and r.name.casefold() in options
            for r in self._character.selected_expertises
        ):
            return
        self._pending[talent_id] = PendingUnlock(talent_id, choices, talent_held=True)
        log.debug("Free talent %s waiting on %d expertise choice(s)", talent_id, len(choices))

    # --- Properties --------------------------------------------------------

    @property
    def character(self) -> Character:
        return self._character

    @property
    def rules(self) -> RulesTable:
        return self._rules

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def graph(self) -> TalentGraph:
        return self._graph

    @property
    def mode(self) -> ProgressionMode:
        return self._config.mode

    def set_mode(self, mode: ProgressionMode) -> None:
        log.debug("Progression mode %s -> %s", self._config.mode.value, mode.value)
        self._config.mode = mode

    # --- Prerequisite queries ----------------------------------------------

    def can_unlock(self, talent_id: str) -> bool:
        return self._graph.can_unlock(
            talent_id, self._character.unlocked_talents, self._character
        )

    def unmet_prerequisites(self, talent_id: str) -> list[str]:
        return self._graph.unmet_prerequisites(
            talent_id, self._character.unlocked_talents, self._character
        )

    def available_talents(self) -> list[str]:
        """Talents that could be unlocked right now (singer forms excluded)."""
        return self._graph.available_talents(
            self._character.unlocked_talents,
            self._character,
            exclude=self._rules.form_ids(),
        )

    def available_talent_points(self) -> int:
        return available_talent_points(
            self._character.level,
            self._character.unlocked_talents,
            self._character.paths,
            self._rules.path_key_talents,
            exclude=self._rules.form_ids(),
        )

    # --- Unlock ------------------------------------------------------------

    def unlock(self, talent_id: str, selections: Selections | None = None) -> UnlockResult:
        """Unlock a talent, or a singer form whose granting talent is held.

        Talents offering an expertise choice return PENDING_CHOICE unless
        *selections* is given; nothing changes until the picks are supplied.
        """
        node = self._rules.get_talent(talent_id)
        if node is None:
            return UnlockResult(UnlockStatus.UNKNOWN, talent_id, [f"Unknown talent {talent_id!r}"])

        if talent_id in self._rules.form_ids():
            return self._unlock_form(node)

        char = self._character
        if talent_id in char.unlocked_talents:
            pending = self._pending.get(talent_id)
            if pending is not None and pending.talent_held:
                return self._resolve_held_choices(pending, selections)
            self._pending.pop(talent_id, None)
            log.debug("Talent %s already unlocked", talent_id)
            return UnlockResult(UnlockStatus.ALREADY_UNLOCKED, talent_id)

        unmet = self.unmet_prerequisites(talent_id)
        if unmet:
            return UnlockResult(UnlockStatus.PREREQUISITES_UNMET, talent_id, unmet)

        if self._config.enforce_talent_points and self._costs_point(talent_id):
            if self.available_talent_points() <= 0:
                return UnlockResult(
                    UnlockStatus.INSUFFICIENT_POINTS,
                    talent_id,
                    [f"No talent points left at level {char.level}"],
                )

        grants = self._rules.expertise_grants_for(talent_id)
        choices = tuple(g for g in grants if _needs_choice(g))
        if choices and selections is None:
            pending = PendingUnlock(talent_id, choices)
            self._pending[talent_id] = pending
            log.debug("Unlock of %s waiting on %d expertise choice(s)", talent_id, len(choices))
            return UnlockResult(UnlockStatus.PENDING_CHOICE, talent_id, pending=pending)

        picked: list[list[str]] = []
        if choices:
            errors = self._validate_selections(choices, selections or ())
            if errors:
                return UnlockResult(UnlockStatus.INVALID_SELECTION, talent_id, errors)
            picked = [self._canonical_picks(g, s) for g, s in zip(choices, selections or ())]

        fixed = [g for g in grants if not _needs_choice(g)]
        self._pending.pop(talent_id, None)
        return self._apply(node, fixed, picked)

    def commit_unlock(self, pending: PendingUnlock, selections: Selections) -> UnlockResult:
        """Finish a two-phase unlock. Prerequisites are checked again."""
        if self._pending.get(pending.talent_id) is not pending:
            return UnlockResult(
                UnlockStatus.INVALID_SELECTION,
                pending.talent_id,
                ["No pending unlock for this talent (cancelled or already committed)"],
            )
        return self.unlock(pending.talent_id, selections)

    def cancel_unlock(self, pending: PendingUnlock) -> None:
        """Abandon a pending unlock. The character was never modified."""
        if self._pending.pop(pending.talent_id, None) is not None:
            log.debug("Cancelled pending unlock of %s", pending.talent_id)

    def pending_unlocks(self) -> list[PendingUnlock]:
        return list(self._pending.values())

    def _unlock_form(self, node: TalentNode) -> UnlockResult:
        char = self._character
        if node.id in char.unlocked_forms:
            return UnlockResult(UnlockStatus.ALREADY_UNLOCKED, node.id)
        unmet = self.unmet_prerequisites(node.id)
        if unmet:
            return UnlockResult(UnlockStatus.PREREQUISITES_UNMET, node.id, unmet)
        char.add_form(node.id)
        return UnlockResult(UnlockStatus.UNLOCKED, node.id, granted_forms=[node.id])

    def _resolve_held_choices(
        self, pending: PendingUnlock, selections: Selections | None
    ) -> UnlockResult:
        """Grant the outstanding expertise picks of a talent already held."""
        talent_id = pending.talent_id
        if selections is None:
            return UnlockResult(UnlockStatus.PENDING_CHOICE, talent_id, pending=pending)
        errors = self._validate_selections(pending.choices, selections)
        if errors:
            return UnlockResult(UnlockStatus.INVALID_SELECTION, talent_id, errors)

        del self._pending[talent_id]
        source = SourceRef.talent(talent_id)
        granted = [
            name
            for grant, picks in zip(pending.choices, selections)
            for name in self._canonical_picks(grant, picks)
            if self._character.add_expertise(name, ExpertiseSourceType.TALENT, source.key)
        ]
        log.info("Resolved expertise choices for %s: %s", talent_id, granted)
        return UnlockResult(UnlockStatus.UNLOCKED, talent_id, granted_expertises=granted)

    def _costs_point(self, talent_id: str) -> bool:
        return talent_id not in free_talents(self._character.paths, self._rules.path_key_talents)

    def _validate_selections(
        self, choices: Sequence[ExpertiseGrant], selections: Selections
    ) -> list[str]:
        if len(selections) != len(choices):
            return [f"Expected {len(choices)} selection(s), got {len(selections)}"]

        errors: list[str] = []
        for index, (grant, picks) in enumerate(zip(choices, selections)):
            options = {name.casefold() for name in grant.expertises}
            if len(picks) != grant.choice_count:
                errors.append(
                    f"Choice {index + 1}: pick {grant.choice_count}, got {len(picks)}"
                )
            if len({p.casefold() for p in picks}) != len(picks):
                errors.append(f"Choice {index + 1}: duplicate picks")
            for pick in picks:
                if pick.casefold() not in options:
                    errors.append(
                        f"Choice {index + 1}: {pick!r} is not one of {', '.join(grant.expertises)}"
                    )
        return errors

    @staticmethod
    def _canonical_picks(grant: ExpertiseGrant, picks: Sequence[str]) -> list[str]:
        by_key = {name.casefold(): name for name in grant.expertises}
        return [by_key[p.casefold()] for p in picks]

    def _apply(
        self,
        node: TalentNode,
        fixed: Sequence[ExpertiseGrant],
        picked: Sequence[Sequence[str]],
    ) -> UnlockResult:
        char = self._character
        source = SourceRef.talent(node.id)

        char.unlocked_talents.add(node.id)
        char.bonuses.add_bonuses(source, node.bonuses)
        for situation in node.grants_advantage:
            char.advantages.add_advantage(source, situation)
        for situation in node.grants_disadvantage:
            char.advantages.add_disadvantage(source, situation)

        granted_forms = [
            form for form in self._rules.forms_granted_by(node.id) if char.add_form(form)
        ]

        names = [name for grant in fixed for name in grant.expertises]
        names.extend(name for picks in picked for name in picks)
        granted_expertises = [
            name for name in names
            if char.add_expertise(name, ExpertiseSourceType.TALENT, source.key)
        ]

        log.info(
            "Unlocked %s (%d bonus(es), forms=%s, expertises=%s)",
            node.id, len(node.bonuses), granted_forms, granted_expertises,
        )
        return UnlockResult(
            UnlockStatus.UNLOCKED,
            node.id,
            granted_forms=granted_forms,
            granted_expertises=granted_expertises,
        )

    # --- Lock --------------------------------------------------------------

    def lock(self, talent_id: str) -> LockResult:
        """Remove an unlocked talent and everything it granted."""
        char = self._character
        if talent_id not in char.unlocked_talents:
            return LockResult(LockStatus.NOT_UNLOCKED, talent_id)
        if self._config.mode is ProgressionMode.CREATION:
            return LockResult(LockStatus.APPEND_ONLY, talent_id)
        if talent_id in char.locked_talents:
            return LockResult(LockStatus.LOCKED_IN, talent_id)

        dependents = self._graph.unlocked_dependents(talent_id, char.unlocked_talents)
        if dependents:
            log.info("Cannot remove %s; required by %s", talent_id, dependents)
            return LockResult(LockStatus.BLOCKED_BY_DEPENDENTS, talent_id, blocked_by=dependents)

        source = SourceRef.talent(talent_id)
        self._pending.pop(talent_id, None)
        char.unlocked_talents.discard(talent_id)
        char.bonuses.remove_bonus(source)
        char.advantages.remove_source(source)
        removed_expertises = char.remove_expertises_by_source(source)

        # Stances this talent taught can no longer stay active.
        taught = [s.id for s in self._rules.stances_for(talent_id)]
        if self._stances.deselect_if(taught):
            char.active_stance = None

        removed_forms = self._drop_orphaned_forms(talent_id)

        log.info(
            "Removed %s (forms=%s, expertises=%s)", talent_id, removed_forms, removed_expertises
        )
        return LockResult(
            LockStatus.REMOVED,
            talent_id,
            removed_forms=removed_forms,
            removed_expertises=removed_expertises,
        )

    def _drop_orphaned_forms(self, talent_id: str) -> list[str]:
        """Remove forms granted by *talent_id* that no other held talent grants."""
        char = self._character
        still_granted = {
            form
            for tid in char.unlocked_talents
            for form in self._rules.forms_granted_by(tid)
        }
        orphaned = [
            form for form in self._rules.forms_granted_by(talent_id)
            if form not in still_granted and form in char.unlocked_forms
        ]
        if self._forms.deselect_if(orphaned):
            char.active_form = None
        for form in orphaned:
            char.remove_form(form)
        return orphaned

    def commit_level(self) -> int:
        """Lock in every currently unlocked talent. Returns how many were newly locked."""
        char = self._character
        new = char.unlocked_talents - char.locked_talents
        char.locked_talents |= new
        log.debug("Committed %d talent(s) at level %d", len(new), char.level)
        return len(new)

    # --- Forms and stances -------------------------------------------------

    def _stance_available(self, stance_id: str) -> bool:
        stance = self._rules.get_stance(stance_id)
        return stance is not None and stance.talent_id in self._character.unlocked_talents

    def available_stances(self) -> list[Stance]:
        return [
            stance for stance in self._rules.stances.values()
            if stance.talent_id in self._character.unlocked_talents
        ]

    def set_active_form(self, form_id: str | None) -> bool:
        """Select a singer form. Re-selecting the active form changes nothing."""
        if form_id is not None and form_id == self._forms.active_id:
            log.debug("Form %s already active", form_id)
            return True
        changed = self._forms.set_active(form_id)
        self._character.active_form = self._forms.active_id
        return changed

    def set_active_stance(self, stance_id: str | None) -> bool:
        """Select a combat stance. Re-selecting the active stance changes nothing."""
        if stance_id is not None and stance_id == self._stances.active_id:
            log.debug("Stance %s already active", stance_id)
            return True
        changed = self._stances.set_active(stance_id)
        self._character.active_stance = self._stances.active_id
        return changed

    def get_active_form(self) -> TalentNode | None:
        return self._forms.get_active()

    def get_active_stance(self) -> Stance | None:
        return self._stances.get_active()

    # --- Radiant path ------------------------------------------------------

    def grant_spren(self, order: str) -> bool:
        return self._character.radiant.grant_spren(order)

    def speak_ideal(self) -> bool:
        return self._character.radiant.speak_ideal(
            self._character.skills, self._config.ideal_surge_rank
        )

    # --- Validation --------------------------------------------------------

    def validate(self) -> list[EngineError]:
        """Check the character against the rules without changing it."""
        errors: list[EngineError] = []
        char = self._character

        if char.level < 1 or char.level > self._config.max_level:
            errors.append(EngineError(
                "level", f"Level {char.level} outside 1..{self._config.max_level}"
            ))

        for talent_id in sorted(char.unlocked_talents):
            node = self._rules.get_talent(talent_id)
            if node is None:
                errors.append(EngineError("unknown", f"Unknown talent {talent_id!r}", talent_id))
                continue
            for reason in self.unmet_prerequisites(talent_id):
                errors.append(EngineError(
                    "prerequisites", f"{node.name}: {reason}", talent_id
                ))

        remaining = self.available_talent_points()
        if remaining < 0:
            errors.append(EngineError(
                "talent_points",
                f"Talent points overspent by {-remaining} at level {char.level}",
            ))

        if char.active_form is not None and char.active_form not in char.unlocked_forms:
            errors.append(EngineError("form", f"Active form {char.active_form!r} is not unlocked"))
        if char.active_stance is not None and not self._stance_available(char.active_stance):
            errors.append(EngineError(
                "stance", f"Active stance {char.active_stance!r} is not available"
            ))
        return errors

    def is_valid(self) -> bool:
        return not self.validate()
