from __future__ import annotations

from typing import Callable, Iterable

import numpy as np
import pytest

from pose_core.keypoints import NUM_KEYPOINTS


def make_heatmap(
    h: int,
    w: int,
    peaks: Iterable[tuple[int, int, int, float]] = (),
    k: int = NUM_KEYPOINTS,
    background: float = 0.0,
) -> np.ndarray:
    """构造 [1,h,w,k] 热力图；peaks 为 (keypoint_id, row, col, value)。"""
    hm = np.full((1, h, w, k), background, dtype=np.float32)
    for kp_id, row, col, value in peaks:
        hm[0, row, col, kp_id] = value
    return hm


@pytest.fixture
def heatmap_factory() -> Callable[..., np.ndarray]:
    return make_heatmap


class RecordingRenderer:
    def __init__(self) -> None:
        self.frames: list = []

    def set_overlay(self, frame) -> None:
        self.frames.append(frame)


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()
