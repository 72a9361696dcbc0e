import math

import pytest

from resume_reviewer.services.animation import (
    CIRCUMFERENCE,
    CounterAnimation,
    as_number,
    circle_offset,
    ease_out_cubic,
)


def test_ease_out_cubic_endpoints():
    assert ease_out_cubic(0) == 0
    assert ease_out_cubic(1) == 1
    assert ease_out_cubic(0.5) == pytest.approx(0.875)


def test_value_follows_curve_and_floors():
    anim = CounterAnimation("impact", 80, 1200)
    assert anim.value_at(0) == 0
    assert anim.value_at(600) == math.floor(80 * 0.875)
    assert anim.value_at(1199) < 80


def test_value_clamps_to_exact_target():
    anim = CounterAnimation("score_overall", 72, 1500)
    assert anim.value_at(1500) == 72
    assert anim.value_at(10_000) == 72
    assert anim.final_value == 72


def test_frames_are_monotonic_and_end_on_target():
    frames = list(CounterAnimation("score_overall", 72, 1500).frames())
    assert frames[0] == 0
    assert frames[-1] == 72
    assert frames == sorted(frames)


def test_fractional_target_is_kept_exactly():
    assert CounterAnimation("skills", 66.5, 1200).final_value == 66.5


def test_as_number():
    assert as_number(72) == 72
    assert as_number("65") == 65
    assert as_number("65%") == 65
    assert as_number("n/a") == 0
    assert as_number(None) == 0
    assert as_number(True) == 0


def test_circle_offset_is_proportional_to_score():
    assert circle_offset(0) == pytest.approx(CIRCUMFERENCE)
    assert circle_offset(100) == pytest.approx(0)
    assert circle_offset(72) == pytest.approx(CIRCUMFERENCE * 0.28)
    assert CIRCUMFERENCE == pytest.approx(2 * math.pi * 94)
