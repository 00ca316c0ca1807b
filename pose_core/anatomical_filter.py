from __future__ import annotations

from typing import Iterable

import numpy as np

from .keypoints import L_HIP, L_KNEE, NUM_KEYPOINTS, R_HIP, R_KNEE
from .types import Keypoint

_HIPS = (L_HIP, R_HIP)
_KNEES = (L_KNEE, R_KNEE)


def apply_anatomical_constraints(keypoints: Iterable[Keypoint]) -> tuple[Keypoint, ...]:
    """剔除解剖上不合理的关键点。

    输入: keypoints 为解码结果（按 id 递增）。
    输出: 输入的子序列，顺序不变，不会新增关键点。
    作用: 同一帧中存在髋部时，膝盖的 y 必须不小于髋部的 y（图像坐标 y 向下），
    否则丢弃该膝盖。两侧髋部都在时以左髋为准。
    """
    ordered = sorted(keypoints, key=lambda kp: kp.id)

    # 按 id 索引的髋部 y 值，NaN 表示缺失
    hip_y = np.full((NUM_KEYPOINTS,), np.nan, dtype=np.float64)

    kept: list[Keypoint] = []
    for kp in ordered:
        if kp.id in _KNEES:
            ref = hip_y[L_HIP] if not np.isnan(hip_y[L_HIP]) else hip_y[R_HIP]
            if not np.isnan(ref) and kp.y < ref:
                continue
        if kp.id in _HIPS:
            hip_y[kp.id] = kp.y
        kept.append(kp)
    return tuple(kept)
