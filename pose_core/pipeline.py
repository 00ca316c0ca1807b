from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Protocol

import numpy as np

from .anatomical_filter import apply_anatomical_constraints
from .heatmap_decoder import decode_heatmap
from .heatmap_model import HeatmapEngine, prepare_model_input
from .keypoints import CONFIDENCE_THRESHOLD, NUM_KEYPOINTS, SMOOTHING_FACTOR
from .pose_connections import resolve_edges
from .temporal_smoother import TemporalSmoother
from .types import OverlayFrame, SmoothingState

logger = logging.getLogger(__name__)


class OverlayRenderer(Protocol):
    """渲染层接口：流水线每产出一帧调用一次。"""

    def set_overlay(self, frame: OverlayFrame) -> None: ...


@dataclass(frozen=True)
class PipelineConfig:
    # 阈值、平滑系数与关键点数是固定常量（见 pose_core.keypoints），不在此配置
    edges_by_id: bool = True  # False 时沿用按序列位置连线的旧行为


class PoseOverlayPipeline:
    """逐帧流水线：解码 -> 解剖约束过滤 -> 时间平滑 -> 交给渲染层。

    平滑状态由本对象独占；内部锁保证同一时刻只有一帧在修改状态。
    reset() 会结束当前会话：在 reset 之前开始、之后才完成的帧被丢弃，
    不会把旧会话的状态带进新会话。
    """

    def __init__(self, renderer: Optional[OverlayRenderer] = None, config: Optional[PipelineConfig] = None):
        self._cfg = config or PipelineConfig()
        self._renderer = renderer
        self._smoother = TemporalSmoother(alpha=SMOOTHING_FACTOR)
        self._state = SmoothingState()
        self._frames_rendered = 0
        self._session = 0
        self._lock = threading.RLock()

    @property
    def config(self) -> PipelineConfig:
        return self._cfg

    @property
    def state(self) -> SmoothingState:
        with self._lock:
            return self._state

    @property
    def frames_rendered(self) -> int:
        with self._lock:
            return self._frames_rendered

    def set_renderer(self, renderer: Optional[OverlayRenderer]) -> None:
        with self._lock:
            self._renderer = renderer

    def clear_renderer(self, renderer: OverlayRenderer) -> bool:
        """仅当当前渲染层仍是 renderer 时才解除绑定。

        输出: 是否解除了绑定；渲染层已被替换时返回 False，保留新的渲染层。
        """
        with self._lock:
            if self._renderer is not renderer:
                return False
            self._renderer = None
            return True

    def reset(self) -> None:
        """结束当前会话（例如摄像头停止）：丢弃平滑状态，下一帧重新冷启动。"""
        with self._lock:
            self._state = SmoothingState()
            self._frames_rendered = 0
            self._session += 1

    def _current_session(self) -> int:
        with self._lock:
            return self._session

    def process_heatmap(self, heatmap: Optional[np.ndarray], out_w: float, out_h: float) -> Optional[OverlayFrame]:
        """处理一帧热力图。

        输入:
        - heatmap: 模型输出 [1,H,W,K]；None 视为没有关键点。
        - out_w/out_h: 叠加层尺寸；为 0 时跳过本帧。

        输出:
        - 本帧交给渲染层的 OverlayFrame；没有关键点时返回 None。

        作用:
        - 没有关键点时不调用平滑、不通知渲染层、不修改状态，屏幕上保留上一次的骨架。
        """
        return self._process(heatmap, out_w, out_h, self._current_session())

    def _process(
        self,
        heatmap: Optional[np.ndarray],
        out_w: float,
        out_h: float,
        session: int,
    ) -> Optional[OverlayFrame]:
        keypoints = decode_heatmap(
            heatmap,
            out_w,
            out_h,
            threshold=CONFIDENCE_THRESHOLD,
            num_keypoints=NUM_KEYPOINTS,
        )
        keypoints = apply_anatomical_constraints(keypoints)
        if not keypoints:
            return None

        with self._lock:
            if session != self._session:
                logger.debug("frame from a finished session dropped")
                return None
            smoothed, self._state = self._smoother.step(self._state, keypoints)
            frame = OverlayFrame(
                keypoints=smoothed,
                edges=resolve_edges(smoothed, by_id=self._cfg.edges_by_id),
                frame_index=self._frames_rendered,
            )
            self._frames_rendered += 1
            renderer = self._renderer
            if renderer is not None:
                renderer.set_overlay(frame)
        return frame

    def process_frame(
        self,
        frame_bgr: np.ndarray,
        engine: HeatmapEngine,
        out_w: float,
        out_h: float,
    ) -> Optional[OverlayFrame]:
        """对一帧图像运行推理后进入 process_heatmap。推理失败按“没有关键点”处理。"""
        if out_w <= 0 or out_h <= 0:
            return None
        session = self._current_session()
        try:
            w, h = engine.input_size
            heatmap = engine(prepare_model_input(frame_bgr, w, h))
        except Exception:
            logger.exception("heatmap inference failed; frame skipped")
            return None
        return self._process(heatmap, out_w, out_h, session)
