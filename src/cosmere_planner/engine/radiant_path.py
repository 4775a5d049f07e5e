"""Radiant path progression: spren bond, then the First Ideal.

    UNBOUND --grant_spren()--> BOUND --speak_ideal()--> IDEAL_SPOKEN

Transitions only go forward. reset() returns to UNBOUND and exists for
administrative use and tests.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum

from cosmere_planner.data.orders import RADIANT_ORDERS, RADIANT_UNIVERSAL_ABILITIES
from cosmere_planner.models.constants import SkillType
from cosmere_planner.models.radiant import RadiantOrderInfo, UniversalAbility
from cosmere_planner.models.skills import SkillRanks

log = logging.getLogger(__name__)


class UnknownOrderError(ValueError):
    """Raised for an order id missing from the order table (bad data, not bad input)."""


class RadiantState(str, Enum):
    UNBOUND = "unbound"
    BOUND = "bound"
    IDEAL_SPOKEN = "ideal_spoken"


class RadiantPath:
    """Spren-bond / ideal state for one character."""

    __slots__ = ("_orders", "_bound_order", "_ideal_spoken", "_surge_pair", "_spren_type")

    def __init__(self, orders: Mapping[str, RadiantOrderInfo] | None = None) -> None:
        self._orders = orders if orders is not None else RADIANT_ORDERS
        self._bound_order: str | None = None
        self._ideal_spoken = False
        self._surge_pair: tuple[SkillType, SkillType] | None = None
        self._spren_type: str | None = None

    # --- Transitions ---------------------------------------------------------

    def grant_spren(self, order: str) -> bool:
        """Bond a spren of *order*.

        Raises UnknownOrderError if *order* is not in the table. Returns False
        (state unchanged) if a spren is already bound.
        """
        info = self._orders.get(order)
        if info is None:
            raise UnknownOrderError(f"Invalid Radiant Order: {order}")
        if self._bound_order is not None:
            log.info("Spren already bound (%s); ignoring grant of %s", self._bound_order, order)
            return False
        self._bound_order = info.order
        self._spren_type = info.spren_type
        self._surge_pair = info.surge_pair
        self._ideal_spoken = False
        return True

    def speak_ideal(self, skills: SkillRanks, surge_rank: int = 1) -> bool:
        """Speak the First Ideal, opening both surge skills.

        Each surge skill is raised to *surge_rank* only if it is currently at
        rank 0 or lower; higher ranks the player already chose are kept.
        Returns False without a bound spren. Speaking again is a logged no-op.
        """
        if self._bound_order is None or self._surge_pair is None:
            log.warning("Cannot speak an ideal without a bound spren")
            return False
        if self._ideal_spoken:
            log.warning("First Ideal already spoken for %s", self._bound_order)
            return True

        for surge in self._surge_pair:
            if skills.get_rank(surge) <= 0:
                skills.set_rank(surge, surge_rank)
        self._ideal_spoken = True
        return True

    def reset(self) -> None:
        self._bound_order = None
        self._ideal_spoken = False
        self._surge_pair = None
        self._spren_type = None

    # --- Projections ---------------------------------------------------------

    @property
    def state(self) -> RadiantState:
        if self._bound_order is None:
            return RadiantState.UNBOUND
        if self._ideal_spoken:
            return RadiantState.IDEAL_SPOKEN
        return RadiantState.BOUND

    @property
    def bound_order(self) -> str | None:
        return self._bound_order

    @property
    def surge_pair(self) -> tuple[SkillType, SkillType] | None:
        return self._surge_pair

    @property
    def spren_type(self) -> str | None:
        return self._spren_type

    def has_spren(self) -> bool:
        return self._bound_order is not None

    def has_spoken_ideal(self) -> bool:
        return self._ideal_spoken

    def get_order_info(self) -> RadiantOrderInfo | None:
        if self._bound_order is None:
            return None
        return self._orders.get(self._bound_order)

    def get_order_tree(self) -> str | None:
        """Talent tree id for the bound order, e.g. "windrunner"."""
        if self._bound_order is None:
            return None
        return self._bound_order.lower()

    def get_surge_trees(self) -> list[str]:
        """Surge talent tree ids, available once the ideal is spoken."""
        if not self._ideal_spoken or self._surge_pair is None:
            return []
        return [surge.value.lower() for surge in self._surge_pair]

    def get_universal_abilities(self) -> list[UniversalAbility]:
        if not self._ideal_spoken:
            return []
        return list(RADIANT_UNIVERSAL_ABILITIES)

    # --- Persistence ---------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "bound_order": self._bound_order,
            "ideal_spoken": self._ideal_spoken,
            "surge_pair": [s.value for s in self._surge_pair] if self._surge_pair else None,
            "spren_type": self._spren_type,
        }

    @classmethod
    def from_dict(
        cls,
        data: Mapping,
        orders: Mapping[str, RadiantOrderInfo] | None = None,
    ) -> RadiantPath:
        """Restore a saved path. Payloads that break the state invariants raise ValueError."""
        path = cls(orders)
        bound = data.get("bound_order") or None
        ideal = bool(data.get("ideal_spoken", False))
        pair = data.get("surge_pair") or None

        if bound is None:
            if ideal or pair:
                raise ValueError("Radiant path has ideal/surges without a bound order")
            return path
        if bound not in path._orders:
            raise UnknownOrderError(f"Invalid Radiant Order: {bound}")

        path._bound_order = bound
        path._ideal_spoken = ideal
        if pair is not None:
            if len(pair) != 2:
                raise ValueError(f"Surge pair must have two skills, got {pair!r}")
            path._surge_pair = (SkillType(pair[0]), SkillType(pair[1]))
        else:
            path._surge_pair = path._orders[bound].surge_pair
        path._spren_type = data.get("spren_type") or path._orders[bound].spren_type
        return path
