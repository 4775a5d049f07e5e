"""Talent prerequisite evaluation and the talent dependency graph.

A talent's prerequisites are one flat list split into two groups:
  AND-group = every prerequisite without the OR flag (bare strings included)
  OR-group  = every prerequisite with it

    satisfied = all(AND-group) and (OR-group is empty or any(OR-group))

There is no nesting. An empty list is always satisfied.

Evaluation is pure: it reads the unlocked set and a stat snapshot and
never mutates either.
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Collection, Iterable, Mapping
from typing import Protocol

from cosmere_planner.models.constants import PrerequisiteType, SkillType
from cosmere_planner.models.skills import match_skill
from cosmere_planner.models.talent import Prerequisite, TalentNode, TalentPrerequisite


class StatSnapshot(Protocol):
    """Read-only character view the evaluator needs."""

    level: int

    def get_attribute(self, name: str) -> object: ...

    def get_skill_rank(self, skill: SkillType) -> int: ...

    def has_spoken_ideal(self) -> bool: ...


# ---------------------------------------------------------------------------
# Evaluation helpers
# ---------------------------------------------------------------------------


def _as_prerequisite(prereq: Prerequisite) -> TalentPrerequisite:
    if isinstance(prereq, str):
        return TalentPrerequisite(PrerequisiteType.TALENT, prereq)
    return prereq


def partition_prerequisites(
    prereqs: Iterable[Prerequisite],
) -> tuple[list[TalentPrerequisite], list[TalentPrerequisite]]:
    """Split into (AND-group, OR-group). Bare strings always go to AND."""
    and_group: list[TalentPrerequisite] = []
    or_group: list[TalentPrerequisite] = []
    for prereq in prereqs:
        structured = _as_prerequisite(prereq)
        (or_group if structured.is_or else and_group).append(structured)
    return and_group, or_group


def _check_talent(prereq: TalentPrerequisite, unlocked: Collection[str]) -> bool:
    return prereq.target in unlocked


def _check_skill(prereq: TalentPrerequisite, snapshot: StatSnapshot) -> bool:
    skill = match_skill(prereq.target)
    if skill is None:
        return False
    return snapshot.get_skill_rank(skill) >= prereq.threshold


def _check_attribute(prereq: TalentPrerequisite, snapshot: StatSnapshot) -> bool:
    actual = snapshot.get_attribute(prereq.target)
    if isinstance(actual, bool) or not isinstance(actual, (int, float)):
        return False
    return actual >= prereq.threshold


def _check_level(prereq: TalentPrerequisite, snapshot: StatSnapshot) -> bool:
    return snapshot.level >= prereq.threshold


def _check_ideal(prereq: TalentPrerequisite, snapshot: StatSnapshot) -> bool:
    # Only the First Ideal is tracked; later ideals never evaluate true yet.
    if prereq.target != "first":
        return False
    return snapshot.has_spoken_ideal()


def check_prerequisite(
    prereq: Prerequisite, unlocked: Collection[str], snapshot: StatSnapshot
) -> bool:
    """Dispatch evaluation by prerequisite type."""
    prereq = _as_prerequisite(prereq)
    if prereq.type is PrerequisiteType.TALENT:
        return _check_talent(prereq, unlocked)
    if prereq.type is PrerequisiteType.SKILL:
        return _check_skill(prereq, snapshot)
    if prereq.type is PrerequisiteType.ATTRIBUTE:
        return _check_attribute(prereq, snapshot)
    if prereq.type is PrerequisiteType.LEVEL:
        return _check_level(prereq, snapshot)
    if prereq.type is PrerequisiteType.IDEAL:
        return _check_ideal(prereq, snapshot)
    return False  # pragma: no cover


def can_unlock(
    node: TalentNode, unlocked: Collection[str], snapshot: StatSnapshot
) -> bool:
    """True if every AND prerequisite holds and at least one OR prerequisite does."""
    and_group, or_group = partition_prerequisites(node.prerequisites)
    if not all(check_prerequisite(p, unlocked, snapshot) for p in and_group):
        return False
    return not or_group or any(check_prerequisite(p, unlocked, snapshot) for p in or_group)


# ---------------------------------------------------------------------------
# Human-readable unmet descriptions
# ---------------------------------------------------------------------------


def describe_prerequisite(
    prereq: Prerequisite, talent_names: Mapping[str, str] | None = None
) -> str:
    """Return a short label for a single prerequisite."""
    prereq = _as_prerequisite(prereq)
    if prereq.type is PrerequisiteType.TALENT:
        name = (talent_names or {}).get(prereq.target, prereq.target)
        return f"Talent: {name}"
    if prereq.type is PrerequisiteType.SKILL:
        return f"{prereq.target.title()} rank >= {prereq.threshold}"
    if prereq.type is PrerequisiteType.ATTRIBUTE:
        return f"{prereq.target.title()} >= {prereq.threshold}"
    if prereq.type is PrerequisiteType.LEVEL:
        return f"Level >= {prereq.threshold}"
    if prereq.type is PrerequisiteType.IDEAL:
        return f"{prereq.target.title()} Ideal spoken"
    return str(prereq)  # pragma: no cover


def unmet_prerequisites(
    node: TalentNode,
    unlocked: Collection[str],
    snapshot: StatSnapshot,
    talent_names: Mapping[str, str] | None = None,
) -> list[str]:
    """Describe each failing AND prerequisite, then the OR-group if none of it holds."""
    and_group, or_group = partition_prerequisites(node.prerequisites)
    unmet = [
        describe_prerequisite(p, talent_names)
        for p in and_group
        if not check_prerequisite(p, unlocked, snapshot)
    ]
    if or_group and not any(check_prerequisite(p, unlocked, snapshot) for p in or_group):
        if len(or_group) == 1:
            unmet.append(describe_prerequisite(or_group[0], talent_names))
        else:
            parts = [describe_prerequisite(p, talent_names) for p in or_group]
            unmet.append("One of: " + " OR ".join(parts))
    return unmet


# ---------------------------------------------------------------------------
# TalentGraph
# ---------------------------------------------------------------------------


class TalentGraph:
    """DAG of talent nodes.

    Edges are talent-to-talent prerequisites, from either group. Skill,
    attribute, level, and ideal thresholds are evaluated against a snapshot,
    not modelled as edges.
    """

    __slots__ = ("_nodes", "_talent_deps", "_reverse_deps")

    def __init__(self) -> None:
        self._nodes: dict[str, TalentNode] = {}
        self._talent_deps: dict[str, list[str]] = defaultdict(list)
        self._reverse_deps: dict[str, list[str]] = defaultdict(list)

    # --- Construction --------------------------------------------------------

    @classmethod
    def build(cls, nodes: Iterable[TalentNode]) -> TalentGraph:
        graph = cls()
        for node in nodes:
            graph._nodes[node.id] = node
            for dep_id in node.required_talents():
                if dep_id not in graph._talent_deps[node.id]:
                    graph._talent_deps[node.id].append(dep_id)
                if node.id not in graph._reverse_deps[dep_id]:
                    graph._reverse_deps[dep_id].append(node.id)
        return graph

    # --- Queries -------------------------------------------------------------

    def __contains__(self, talent_id: str) -> bool:
        return talent_id in self._nodes

    def get_node(self, talent_id: str) -> TalentNode | None:
        return self._nodes.get(talent_id)

    def prerequisites_for(self, talent_id: str) -> list[Prerequisite] | None:
        node = self._nodes.get(talent_id)
        return list(node.prerequisites) if node else None

    def dependents_of(self, talent_id: str) -> list[str]:
        """Talent ids that list *talent_id* as a prerequisite (reverse deps)."""
        return list(self._reverse_deps.get(talent_id, []))

    def unlocked_dependents(self, talent_id: str, unlocked: Collection[str]) -> list[str]:
        return [tid for tid in self.dependents_of(talent_id) if tid in unlocked]

    def prerequisite_chain(self, talent_id: str) -> list[str]:
        """Transitive talent prerequisites (all ancestors), deepest first."""
        visited: set[str] = set()
        order: list[str] = []

        def _dfs(tid: str) -> None:
            if tid in visited:
                return
            visited.add(tid)
            for dep_id in self._talent_deps.get(tid, []):
                _dfs(dep_id)
            order.append(tid)

        for dep_id in self._talent_deps.get(talent_id, []):
            _dfs(dep_id)
        return order

    def topological_order(self) -> list[str]:
        """All talent ids, prerequisites before dependents (Kahn's algorithm).

        Ties are broken by id so the order is stable.
        """
        in_degree: dict[str, int] = {tid: 0 for tid in self._nodes}
        for tid, deps in self._talent_deps.items():
            if tid in self._nodes:
                in_degree[tid] = sum(1 for dep in deps if dep in self._nodes)

        queue: deque[str] = deque(
            tid for tid, deg in sorted(in_degree.items()) if deg == 0
        )
        result: list[str] = []

        while queue:
            tid = queue.popleft()
            result.append(tid)
            for dependent in sorted(self._reverse_deps.get(tid, [])):
                if dependent in in_degree:
                    in_degree[dependent] -= 1
                    if in_degree[dependent] == 0:
                        queue.append(dependent)

        return result

    # --- Eligibility ---------------------------------------------------------

    def can_unlock(
        self, talent_id: str, unlocked: Collection[str], snapshot: StatSnapshot
    ) -> bool:
        node = self._nodes.get(talent_id)
        if node is None:
            return False
        return can_unlock(node, unlocked, snapshot)

    def available_talents(
        self,
        unlocked: Collection[str],
        snapshot: StatSnapshot,
        exclude: Collection[str] = (),
    ) -> list[str]:
        """Ids not yet unlocked whose prerequisites are met, in graph order."""
        return [
            tid
            for tid in self.topological_order()
            if tid not in unlocked
            and tid not in exclude
            and can_unlock(self._nodes[tid], unlocked, snapshot)
        ]

    def unmet_prerequisites(
        self, talent_id: str, unlocked: Collection[str], snapshot: StatSnapshot
    ) -> list[str]:
        node = self._nodes.get(talent_id)
        if node is None:
            return [f"Unknown talent {talent_id!r}"]
        names = {tid: n.name for tid, n in self._nodes.items()}
        return unmet_prerequisites(node, unlocked, snapshot, names)
