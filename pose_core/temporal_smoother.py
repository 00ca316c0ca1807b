from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Sequence

from .keypoints import SMOOTHING_FACTOR
from .types import Keypoint, SmoothingState


def smooth_keypoints(
    previous: Optional[Sequence[Keypoint]],
    current: Sequence[Keypoint],
    alpha: float = SMOOTHING_FACTOR,
) -> tuple[Keypoint, ...]:
    """对当前帧关键点做指数滑动平均。

    输入:
    - previous: 上一帧输出；首帧为 None。
    - current: 当前帧（已过滤）的关键点。
    - alpha: 上一帧的权重，越大越平滑。

    输出: 平滑后的关键点元组。

    作用:
    - 上一帧不存在或数量不一致时直接返回当前帧（静默重置）；
    - 数量一致时按下标逐个混合：prev * alpha + curr * (1 - alpha)。
      对应关系按位置而非 id，依赖解码顺序在静止画面下保持稳定。
    """
    if previous is None or len(previous) != len(current):
        return tuple(current)

    a = float(alpha)
    out: list[Keypoint] = []
    for prev, cur in zip(previous, current):
        # 与 prev * a + cur * (1 - a) 代数等价，浮点结果可能相差一个 ulp；相同输入时逐位不变
        out.append(
            replace(
                cur,
                x=cur.x + a * (prev.x - cur.x),
                y=cur.y + a * (prev.y - cur.y),
            )
        )
    return tuple(out)


@dataclass(frozen=True)
class TemporalSmoother:
    """无状态平滑器：状态由调用方（流水线）持有并逐帧传入。"""

    alpha: float = SMOOTHING_FACTOR

    def step(
        self, state: SmoothingState, current: Sequence[Keypoint]
    ) -> tuple[tuple[Keypoint, ...], SmoothingState]:
        """返回 (本帧输出, 新状态)；新状态即本帧输出。"""
        out = smooth_keypoints(state.previous, current, self.alpha)
        return out, SmoothingState(previous=out)
