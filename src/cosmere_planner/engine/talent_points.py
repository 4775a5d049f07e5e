"""Talent point budget per character level.

A character earns talent points as they level; the key talent of each
chosen heroic path is granted for free and never costs a point.
"""

from collections.abc import Iterable, Mapping


# Points earned at each level, index 0 = level 1.
TALENT_POINTS_PER_LEVEL: tuple[int, ...] = (
    2, 1, 1, 1, 1,
    2, 1, 1, 1, 1,
    2, 1, 1, 1, 1,
    2, 1, 1, 1, 1,
    1,
)

MAX_LEVEL = len(TALENT_POINTS_PER_LEVEL)


def points_at_level(level: int) -> int:
    """Points earned on reaching *level* (0 outside 1..MAX_LEVEL)."""
    if level < 1 or level > MAX_LEVEL:
        return 0
    return TALENT_POINTS_PER_LEVEL[level - 1]


def total_talent_points(level: int) -> int:
    """Cumulative points earned from level 1 through *level*."""
    level = min(level, MAX_LEVEL)
    return sum(TALENT_POINTS_PER_LEVEL[:max(level, 0)])


def free_talents(paths: Iterable[str], key_talents: Mapping[str, str]) -> set[str]:
    """Key talents granted by the given paths."""
    return {key_talents[p.lower()] for p in paths if p.lower() in key_talents}


def spent_talent_points(
    unlocked: Iterable[str],
    paths: Iterable[str],
    key_talents: Mapping[str, str],
    exclude: Iterable[str] = (),
) -> int:
    """Count unlocked talents that cost a point.

    Path key talents are free; *exclude* lists other ids that do not count
    (singer forms arrive with the talent that grants them).
    """
    free = free_talents(paths, key_talents) | set(exclude)
    return sum(1 for tid in unlocked if tid not in free)


def available_talent_points(
    level: int,
    unlocked: Iterable[str],
    paths: Iterable[str],
    key_talents: Mapping[str, str],
    exclude: Iterable[str] = (),
) -> int:
    """Remaining points; negative means the build is overspent."""
    return total_talent_points(level) - spent_talent_points(
        unlocked, paths, key_talents, exclude
    )
