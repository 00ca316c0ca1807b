from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .keypoints import CONFIDENCE_THRESHOLD, NUM_KEYPOINTS
from .types import Keypoint

logger = logging.getLogger(__name__)


def _as_grid(heatmap: Optional[np.ndarray]) -> Optional[np.ndarray]:
    """把模型输出整理为 (H,W,K) 的 float 数组。

    输入: heatmap 为 [1,H,W,K] 或 (H,W,K) 数组，也可能为 None。
    输出: (H,W,K) 数组；无法解析或尺寸退化时返回 None。
    """
    if heatmap is None:
        return None
    arr = np.asarray(heatmap, dtype=np.float32)
    if arr.ndim == 4:
        if arr.shape[0] == 0:
            return None
        arr = arr[0]
    if arr.ndim != 3:
        logger.debug("heatmap has unexpected shape %s", arr.shape)
        return None
    h, w, k = arr.shape
    if h == 0 or w == 0 or k == 0:
        return None
    return arr


def decode_heatmap(
    heatmap: Optional[np.ndarray],
    out_w: float,
    out_h: float,
    threshold: float = CONFIDENCE_THRESHOLD,
    num_keypoints: int = NUM_KEYPOINTS,
) -> tuple[Keypoint, ...]:
    """从热力图中解码关键点。

    输入:
    - heatmap: 形状 [1,H,W,K] 的模型输出（原始激活值，不要求已归一化）。
    - out_w/out_h: 叠加层尺寸（像素）；尚未布局时可能为 0。
    - threshold: 置信度阈值，最大值低于它的关键点直接丢弃。
    - num_keypoints: 最多解码的通道数，上限为 NUM_KEYPOINTS（17），多出的通道忽略。

    输出:
    - 按 id 递增排列的 Keypoint 元组；没有关键点通过阈值、尺寸退化或输入无效时为空元组。

    作用:
    - 对每个通道在 H×W 网格上按行优先顺序取最大值（并列时取最先出现者），
      以格子中心 (col+0.5, row+0.5) 映射到叠加层坐标。
    """
    if out_w <= 0 or out_h <= 0:
        return ()

    grid = _as_grid(heatmap)
    if grid is None:
        return ()

    h, w, k = grid.shape
    x_scale = float(out_w) / w
    y_scale = float(out_h) / h

    n = min(k, int(num_keypoints), NUM_KEYPOINTS)
    # (K, H*W)，行优先展开，argmax 返回首个最大值
    flat = grid[:, :, :n].reshape(h * w, n).T
    flat = np.where(np.isnan(flat), -np.inf, flat)
    best = np.argmax(flat, axis=1)

    keypoints: list[Keypoint] = []
    for kp_id in range(n):
        idx = int(best[kp_id])
        score = float(flat[kp_id, idx])
        if not score >= threshold:
            continue
        row, col = divmod(idx, w)
        keypoints.append(
            Keypoint(
                id=kp_id,
                x=(col + 0.5) * x_scale,
                y=(row + 0.5) * y_scale,
                confidence=min(1.0, max(0.0, score)),
            )
        )

    logger.debug("Detected keypoints: %d", len(keypoints))
    if logger.isEnabledFor(logging.DEBUG):
        for kp in keypoints:
            logger.debug("Keypoint %d: (%.1f, %.1f) conf=%.3f", kp.id, kp.x, kp.y, kp.confidence)
    return tuple(keypoints)
