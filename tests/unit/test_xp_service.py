"""Unit tests for the level formula and XP accounting."""
import pytest

from project50.schemas.progress import Progress
from project50.services import xp_service


@pytest.mark.parametrize("xp,level", [
    (0, 1),
    (20, 1),
    (99, 1),
    (100, 2),
    (399, 2),
    (400, 3),
    (899, 3),
    (900, 4),
    (10_000, 11),
])
def test_level_for_xp(xp, level):
    assert xp_service.level_for_xp(xp) == level


def test_threshold_is_inverse_of_level():
    for level in range(1, 30):
        threshold = xp_service.xp_threshold_for_level(level)
        assert xp_service.level_for_xp(threshold) == level
        if level > 1:
            assert xp_service.level_for_xp(threshold - 1) == level - 1


def test_threshold_rejects_level_zero():
    with pytest.raises(ValueError):
        xp_service.xp_threshold_for_level(0)


def test_level_progress_inside_level_two():
    # Level 2 spans [100, 400)
    assert xp_service.level_progress(150) == (50, 300)
    assert xp_service.level_progress(0) == (0, 100)


def test_toggle_sequence_keeps_level_in_step():
    progress = Progress()
    for _ in range(3):
        progress = xp_service.apply_xp(progress, xp_service.toggle_xp_delta(True))
    assert progress.xp == 30
    progress = xp_service.apply_xp(progress, xp_service.toggle_xp_delta(False))
    assert progress.xp == 20
    assert progress.level == xp_service.level_for_xp(20) == 1


def test_apply_xp_floors_at_zero():
    progress = xp_service.apply_xp(Progress(xp=5), -10)
    assert progress.xp == 0
    assert progress.level == 1


def test_apply_xp_recomputes_level_both_ways():
    up = xp_service.apply_xp(Progress(xp=90), 20)
    assert (up.xp, up.level) == (110, 2)
    down = xp_service.apply_xp(up, -20)
    assert (down.xp, down.level) == (90, 1)


def test_daily_completion_xp():
    assert xp_service.daily_completion_xp(3, 3) == 130
    assert xp_service.daily_completion_xp(1, 3) == 60
    assert xp_service.daily_completion_xp(0, 7) == 50


def test_focus_session_xp():
    assert xp_service.focus_session_xp(25) == 50
    assert xp_service.focus_session_xp(-5) == 0


def test_with_level_repairs_drifted_cache():
    drifted = Progress(xp=450, level=1)
    assert xp_service.with_level(drifted).level == 3
    in_step = Progress(xp=450, level=3)
    assert xp_service.with_level(in_step) is in_step
