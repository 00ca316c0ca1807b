from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from .types import OverlayFrame


@dataclass(frozen=True)
class OverlayStyle:
    point_radius: int = 10
    line_thickness: int = 5
    point_color: tuple[int, int, int] = (255, 0, 0)  # BGR 蓝
    line_color: tuple[int, int, int] = (0, 255, 0)  # BGR 绿
    draw_labels: bool = False
    label_scale: float = 0.5


def draw_overlay_bgr(
    frame_bgr: np.ndarray,
    overlay: Optional[OverlayFrame],
    style: Optional[OverlayStyle] = None,
) -> np.ndarray:
    """在 BGR 帧上叠加骨架连线和关键点。

    输入: frame_bgr 原始图像；overlay 为流水线输出或 None。
    输出: 带可视化叠加的图像副本；overlay 为 None 时原样返回。
    作用: 先画连线再画点，点位于叠加层像素坐标（应与 frame 尺寸一致）。
    """
    if overlay is None:
        return frame_bgr
    st = style or OverlayStyle()

    out = frame_bgr.copy()
    pts = [(int(round(x)), int(round(y))) for x, y in overlay.points]

    for a, b in overlay.edges:
        if a >= len(pts) or b >= len(pts):
            continue
        cv2.line(out, pts[a], pts[b], st.line_color, st.line_thickness)

    for kp, (x, y) in zip(overlay.keypoints, pts):
        cv2.circle(out, (x, y), st.point_radius, st.point_color, -1)
        if st.draw_labels:
            cv2.putText(out, str(kp.id), (x + 4, y - 4),
                        cv2.FONT_HERSHEY_SIMPLEX, st.label_scale,
                        (255, 255, 255), 1, cv2.LINE_AA)
    return out
