"""Tests for the counter tween."""

import pytest

from waitlist_stage.client.tween import CounterTween


def test_small_change_steps_one_at_a_time() -> None:
    tween = CounterTween(start=1247, target=1250, duration=0.3)

    assert tween.steps == 3
    assert tween.step_duration == pytest.approx(0.1)
    assert tween.frames() == [1248, 1249, 1250]


def test_large_change_is_capped_and_ends_on_target() -> None:
    tween = CounterTween(start=0, target=1247, duration=0.8, max_steps=30)

    frames = tween.frames()

    assert len(frames) == 30
    assert frames[-1] == 1247
    assert frames == sorted(frames)


def test_downward_and_no_op_transitions() -> None:
    assert CounterTween(start=10, target=8).frames() == [9, 8]
    assert CounterTween(start=5, target=5).frames() == [5]
