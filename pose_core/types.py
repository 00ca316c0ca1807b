from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class Keypoint:
    """单个关键点，坐标位于输出（叠加层）像素空间。

    属性:
    - id: 解剖关节编号，取值 [0,16]。
    - x, y: 叠加层像素坐标，y 向下增大。
    - confidence: 置信度，范围 [0,1]。
    """

    id: int
    x: float
    y: float
    confidence: float

    @property
    def xy(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class SmoothingState:
    """平滑状态：上一帧输出的关键点序列；首帧前为 None。

    由流水线独占持有，每帧整体替换，不做局部修改。
    """

    previous: Optional[tuple[Keypoint, ...]] = None

    @property
    def is_cold(self) -> bool:
        return self.previous is None


@dataclass(frozen=True)
class OverlayFrame:
    """交给渲染层的一帧数据。

    属性:
    - keypoints: 平滑后的关键点（按 id 递增）。
    - edges: 指向 points 下标的连线对。
    - frame_index: 流水线内已渲染帧的序号（从 0 开始）。
    """

    keypoints: tuple[Keypoint, ...]
    edges: tuple[tuple[int, int], ...] = ()
    frame_index: int = 0

    @property
    def points(self) -> list[tuple[float, float]]:
        """返回渲染用的 (x,y) 列表，顺序与 keypoints 一致。"""
        return [kp.xy for kp in self.keypoints]

    def as_array(self) -> np.ndarray:
        """返回形状 (N,3) 的 numpy 数组：x,y,confidence。"""
        if not self.keypoints:
            return np.zeros((0, 3), dtype=np.float32)
        return np.array([[kp.x, kp.y, kp.confidence] for kp in self.keypoints], dtype=np.float32)
