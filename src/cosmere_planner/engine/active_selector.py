"""Mutually exclusive active selection for singer forms or combat stances.

One selector per category. At most one id is active; its bonuses live in
the ledger under ``<kind>:<id>`` only while it stays active.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Protocol

from cosmere_planner.engine.ledger import AdvantageLedger, BonusLedger
from cosmere_planner.models.bonus import BonusEffect, SourceRef
from cosmere_planner.models.constants import SourceKind

log = logging.getLogger(__name__)


class Selectable(Protocol):
    """Anything with an id and a bonus list (a form's TalentNode, a Stance)."""

    id: str
    bonuses: list[BonusEffect]


class ActiveSelector:
    """Holds the active id for one category and keeps the ledger in step.

    Switching removes the previous source before adding the new one.
    set_active() with the id that is already active adds its bonuses again;
    callers that must not stack guard against repeat selections.
    """

    __slots__ = ("_kind", "_definitions", "_is_available", "_ledger", "_advantages", "_active_id")

    def __init__(
        self,
        kind: SourceKind,
        definitions: Mapping[str, Selectable],
        is_available: Callable[[str], bool],
        ledger: BonusLedger,
        advantages: AdvantageLedger | None = None,
        active_id: str | None = None,
    ) -> None:
        self._kind = kind
        self._definitions = definitions
        self._is_available = is_available
        self._ledger = ledger
        self._advantages = advantages
        self._active_id = active_id

    @property
    def kind(self) -> SourceKind:
        return self._kind

    @property
    def active_id(self) -> str | None:
        return self._active_id

    def _source(self, item_id: str) -> SourceRef:
        return SourceRef(self._kind, item_id)

    def _apply(self, item_id: str) -> None:
        definition = self._definitions.get(item_id)
        if definition is None:
            log.warning("No %s definition for %r; nothing applied", self._kind.value, item_id)
            return
        self._ledger.add_bonuses(self._source(item_id), definition.bonuses)
        if self._advantages is not None:
            for situation in getattr(definition, "grants_advantage", ()):
                self._advantages.add_advantage(self._source(item_id), situation)
            for situation in getattr(definition, "grants_disadvantage", ()):
                self._advantages.add_disadvantage(self._source(item_id), situation)

    def _retract(self, item_id: str) -> None:
        self._ledger.remove_bonus(self._source(item_id))
        if self._advantages is not None:
            self._advantages.remove_source(self._source(item_id))

    def set_active(self, item_id: str | None) -> bool:
        """Make *item_id* the active selection, or clear it with None.

        Returns False, changing nothing, if *item_id* is not available.
        """
        if item_id is None:
            if self._active_id is not None:
                self._retract(self._active_id)
                log.debug("Cleared active %s %s", self._kind.value, self._active_id)
            self._active_id = None
            return True

        if not self._is_available(item_id):
            log.debug("%s %r is not available", self._kind.value.capitalize(), item_id)
            return False

        previous = self._active_id
        if previous is not None and previous != item_id:
            self._retract(previous)
        self._apply(item_id)
        self._active_id = item_id
        return True

    def get_active(self) -> Selectable | None:
        """Definition of the active selection; None if unset or unresolvable."""
        if self._active_id is None:
            return None
        return self._definitions.get(self._active_id)

    def active_bonuses(self) -> list[BonusEffect]:
        if self._active_id is None:
            return []
        return self._ledger.entries_for(self._source(self._active_id))

    def deselect_if(self, item_ids: Iterable[str]) -> bool:
        """Clear the selection if the active id is among *item_ids*."""
        if self._active_id is not None and self._active_id in set(item_ids):
            return self.set_active(None)
        return False
