import pytest

from academy.utils.leveling import level_for_xp, level_progress, threshold_for_level


def test_zero_xp_is_level_one():
    assert level_for_xp(0) == 1
    assert level_for_xp(-50) == 1
    assert level_for_xp(None) == 1


def test_thresholds():
    assert threshold_for_level(1) == 0
    assert threshold_for_level(2) == 100
    assert threshold_for_level(3) == 300
    assert threshold_for_level(4) == 600
    assert threshold_for_level(5) == 1000


def test_thresholds_follow_recurrence():
    for level in range(2, 60):
        assert threshold_for_level(level) == (
            (level - 1) * 100 + threshold_for_level(level - 1)
        )


@pytest.mark.parametrize(
    "xp, level",
    [(1, 1), (99, 1), (100, 2), (299, 2), (300, 3), (599, 3), (600, 4), (1000, 5)],
)
def test_level_boundaries(xp, level):
    assert level_for_xp(xp) == level


def test_level_brackets_xp():
    for xp in range(0, 20000, 7):
        level = level_for_xp(xp)
        assert threshold_for_level(level) <= xp < threshold_for_level(level + 1)


def test_threshold_maps_back_to_level():
    for level in range(1, 300):
        assert level_for_xp(threshold_for_level(level)) == level


def test_large_xp_keeps_precision():
    xp = 10**15 + 12345
    level = level_for_xp(xp)
    assert threshold_for_level(level) <= xp < threshold_for_level(level + 1)


def test_level_progress_midway():
    progress = level_progress(150)
    assert progress == {
        "level": 2,
        "current_level_xp": 100,
        "next_level_xp": 300,
        "progress_to_next_level": 25,
        "xp_to_next_level": 150,
    }


def test_level_progress_at_threshold():
    progress = level_progress(300)
    assert progress["level"] == 3
    assert progress["progress_to_next_level"] == 0
    assert progress["xp_to_next_level"] == 300
