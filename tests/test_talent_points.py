"""Tests for the talent point budget."""

import pytest

from cosmere_planner.engine.talent_points import (
    MAX_LEVEL,
    available_talent_points,
    free_talents,
    points_at_level,
    spent_talent_points,
    total_talent_points,
)


KEYS = {"agent": "opportunist", "warrior": "vigilant_stance"}


@pytest.mark.parametrize(
    "level, expected",
    [(1, 2), (2, 3), (5, 6), (6, 8), (11, 14), (21, 25), (0, 0), (-3, 0), (30, 25)],
)
def test_total_talent_points(level, expected):
    assert total_talent_points(level) == expected


def test_points_at_level():
    assert points_at_level(1) == 2
    assert points_at_level(2) == 1
    assert points_at_level(MAX_LEVEL + 1) == 0


def test_free_talents_match_paths_case_insensitively():
    assert free_talents(["Agent", "envoy"], KEYS) == {"opportunist"}
    assert free_talents([], KEYS) == set()


def test_spent_skips_free_and_excluded():
    unlocked = {"opportunist", "plausible_excuse", "warform", "stonestance"}
    assert spent_talent_points(unlocked, ["agent"], KEYS) == 3
    assert spent_talent_points(unlocked, ["agent"], KEYS, exclude={"warform"}) == 2


def test_available_goes_negative_when_overspent():
    unlocked = {"a", "b", "c"}
    assert available_talent_points(1, unlocked, [], KEYS) == -1
    assert available_talent_points(2, unlocked, [], KEYS) == 0
