from __future__ import annotations

"""17 点人体骨架的连线表（用于画面叠加显示）。

索引遵循 COCO-17 关键点定义，见 pose_core.keypoints。
"""
from typing import Sequence

from .types import Keypoint

# 连接对 (a, b)，保持固定顺序以便绘制结果可复现
SKELETON_CONNECTIONS: tuple[tuple[int, int], ...] = (
    # face
    (0, 1),
    (0, 2),
    (1, 3),
    (2, 4),
    # shoulders + arms
    (5, 6),
    (5, 7),
    (7, 9),
    (6, 8),
    (8, 10),
    # torso
    (5, 11),
    (6, 12),
    (11, 12),
    # legs
    (11, 13),
    (13, 15),
    (12, 14),
    (14, 16),
)


def resolve_edges(keypoints: Sequence[Keypoint], by_id: bool = True) -> tuple[tuple[int, int], ...]:
    """把连线表转换为当前帧点序列中的下标对。

    输入:
    - keypoints: 本帧最终关键点序列。
    - by_id: True 时按关节 id 匹配，两端关节都存在才连线；
      False 时沿用旧行为，把连线表中的数字直接当作序列下标。

    输出: ((i, j), ...)，i/j 为 keypoints 中的位置。

    作用: 按 id 匹配时，某个关节被丢弃不会让其他连线错连到别的关节。
    """
    if not by_id:
        n = len(keypoints)
        return tuple((a, b) for a, b in SKELETON_CONNECTIONS if a < n and b < n)

    pos = {kp.id: i for i, kp in enumerate(keypoints)}
    return tuple((pos[a], pos[b]) for a, b in SKELETON_CONNECTIONS if a in pos and b in pos)
