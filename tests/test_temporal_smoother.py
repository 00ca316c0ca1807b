from __future__ import annotations

import pytest

from pose_core.temporal_smoother import TemporalSmoother, smooth_keypoints
from pose_core.types import Keypoint, SmoothingState


def frame(*coords: tuple[float, float], start_id: int = 0) -> tuple[Keypoint, ...]:
    return tuple(Keypoint(id=start_id + i, x=x, y=y, confidence=0.8) for i, (x, y) in enumerate(coords))


def test_cold_start_passes_current_through():
    cur = frame((10.0, 20.0), (30.0, 40.0))
    assert smooth_keypoints(None, cur) == cur


def test_blend_weights_previous_by_alpha():
    prev = frame((0.0, 100.0))
    cur = frame((10.0, 0.0))

    out = smooth_keypoints(prev, cur, alpha=0.7)

    assert out[0].x == pytest.approx(3.0)
    assert out[0].y == pytest.approx(70.0)


@pytest.mark.parametrize("alpha", [0.0, 0.3, 0.7, 0.99, 1.0])
def test_identical_frames_are_a_fixed_point(alpha):
    cur = frame((0.1, 0.2), (123.456, 789.012), (1e-3, 1e6))

    assert smooth_keypoints(cur, cur, alpha=alpha) == cur


def test_size_mismatch_bypasses_smoothing():
    prev = frame((1.0, 1.0), (2.0, 2.0), (3.0, 3.0), (4.0, 4.0), (5.0, 5.0))
    cur = frame((10.0, 10.0), (20.0, 20.0), (30.0, 30.0), (40.0, 40.0))

    assert smooth_keypoints(prev, cur) == cur


def test_blend_is_positional_and_keeps_current_identity():
    prev = (Keypoint(id=3, x=0.0, y=0.0, confidence=0.5),)
    cur = (Keypoint(id=7, x=10.0, y=10.0, confidence=0.9),)

    out = smooth_keypoints(prev, cur, alpha=0.5)[0]

    assert out.id == 7
    assert out.confidence == 0.9
    assert (out.x, out.y) == pytest.approx((5.0, 5.0))


def test_step_threads_state_through():
    smoother = TemporalSmoother(alpha=0.5)
    state = SmoothingState()
    assert state.is_cold

    out1, state = smoother.step(state, frame((0.0, 0.0)))
    assert out1 == frame((0.0, 0.0))
    assert state.previous == out1

    out2, state = smoother.step(state, frame((10.0, 20.0)))
    assert (out2[0].x, out2[0].y) == pytest.approx((5.0, 10.0))
    assert state.previous == out2


def test_mismatch_resets_silently_to_current():
    smoother = TemporalSmoother()
    _, state = smoother.step(SmoothingState(), frame((0.0, 0.0), (1.0, 1.0)))

    out, state = smoother.step(state, frame((50.0, 50.0)))

    assert out == frame((50.0, 50.0))
    assert state.previous == out


@pytest.mark.parametrize("alpha", [0.1, 0.7, 0.9])
def test_blend_matches_weighted_sum_form(alpha):
    prev = frame((12.34, 567.8), (0.5, 0.25))
    cur = frame((98.7, 6.5), (300.0, 0.125))

    out = smooth_keypoints(prev, cur, alpha=alpha)

    for p, c, o in zip(prev, cur, out):
        assert o.x == pytest.approx(p.x * alpha + c.x * (1 - alpha), rel=1e-12, abs=1e-12)
        assert o.y == pytest.approx(p.y * alpha + c.y * (1 - alpha), rel=1e-12, abs=1e-12)
