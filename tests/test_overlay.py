from __future__ import annotations

import numpy as np

from pose_core.overlay import OverlayStyle, draw_overlay_bgr
from pose_core.types import Keypoint, OverlayFrame


def test_none_overlay_returns_frame_unchanged():
    frame = np.zeros((50, 50, 3), dtype=np.uint8)
    assert draw_overlay_bgr(frame, None) is frame


def test_points_and_edges_are_drawn_on_a_copy():
    frame = np.zeros((100, 100, 3), dtype=np.uint8)
    overlay = OverlayFrame(
        keypoints=(
            Keypoint(id=5, x=20.0, y=50.0, confidence=0.9),
            Keypoint(id=6, x=80.0, y=50.0, confidence=0.9),
        ),
        edges=((0, 1),),
    )
    style = OverlayStyle(point_radius=3, line_thickness=1)

    out = draw_overlay_bgr(frame, overlay, style)

    assert out is not frame
    assert not frame.any()
    assert tuple(out[50, 20]) == style.point_color
    assert tuple(out[50, 50]) == style.line_color


def test_out_of_range_edges_are_skipped():
    frame = np.zeros((20, 20, 3), dtype=np.uint8)
    overlay = OverlayFrame(keypoints=(Keypoint(id=0, x=10.0, y=10.0, confidence=1.0),), edges=((0, 3),))

    out = draw_overlay_bgr(frame, overlay)

    assert out.any()
