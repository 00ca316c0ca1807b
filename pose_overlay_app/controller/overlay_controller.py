from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from typing import TypeGuard

import cv2
import numpy as np
from PySide6.QtCore import QObject, QThread, QTimer, Signal, Slot
from PySide6.QtCore import Qt
from PySide6.QtGui import QImage, QPixmap

import shiboken6

from pose_core.frame_slot import LatestFrameSlot
from pose_core.heatmap_model import HeatmapEngine, HeatmapModelConfig, HeatmapModelError, TFLiteHeatmapEngine
from pose_core.overlay import draw_overlay_bgr
from pose_core.pipeline import PipelineConfig, PoseOverlayPipeline
from pose_core.types import OverlayFrame

from .view_protocol import OverlayView

logger = logging.getLogger(__name__)


def _bgr_to_qpixmap(frame_bgr: np.ndarray, out_w: int, out_h: int) -> QPixmap:
    """BGR 帧转 QPixmap 并拉伸到叠加层尺寸。

    输入: frame_bgr (h,w,3) BGR 图像；out_w/out_h 叠加层尺寸。
    输出: QPixmap。
    作用: 预览图与叠加层共用同一坐标系，关键点才能对齐画面。
    """
    h, w = frame_bgr.shape[:2]
    rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
    qimg = QImage(rgb.data, w, h, rgb.strides[0], QImage.Format.Format_RGB888)
    pm = QPixmap.fromImage(qimg.copy())
    if out_w <= 0 or out_h <= 0:
        return pm
    return pm.scaled(
        out_w,
        out_h,
        Qt.AspectRatioMode.IgnoreAspectRatio,
        Qt.TransformationMode.SmoothTransformation,
    )


@dataclass(frozen=True)
class AppConfig:
    model_path: Optional[str] = None
    camera_index: int = 0
    tick_interval_ms: int = 33  # ~30fps
    num_threads: Optional[int] = None
    edges_by_id: bool = True


class InferenceWorker(QObject):
    """后台线程工作者：从单槽信箱取最新帧，跑推理与流水线。

    输入: 构造时提供信箱、引擎与流水线。
    输出: overlay_ready 信号发出 OverlayFrame；failed 信号用于反馈。
    作用: 推理在线程中执行，避免阻塞 UI；处理慢时旧帧由信箱直接丢弃。
    """
    overlay_ready = Signal(object)  # OverlayFrame
    failed = Signal(str)
    finished = Signal()

    def __init__(self, slot: LatestFrameSlot, engine: HeatmapEngine, pipeline: PoseOverlayPipeline):
        super().__init__()
        self._slot = slot
        self._engine = engine
        self._pipeline = pipeline
        self._surface = (0, 0)
        self._running = True
        # 流水线产出直接转成信号，交由 UI 线程绘制
        self._pipeline.set_renderer(self)

    def set_surface_size(self, width: int, height: int) -> None:
        self._surface = (int(width), int(height))

    def set_overlay(self, frame: OverlayFrame) -> None:
        self.overlay_ready.emit(frame)

    def stop(self) -> None:
        self._running = False
        self._slot.close()

    def run(self) -> None:
        """循环处理帧直到 stop()；引擎异常只跳过该帧。"""
        try:
            while self._running:
                item = self._slot.take(timeout=0.1)
                if item is None:
                    continue
                out_w, out_h = self._surface
                self._pipeline.process_frame(item.image, self._engine, out_w, out_h)
        except Exception as e:
            logger.exception("inference worker crashed")
            self.failed.emit(str(e))
        finally:
            # 新会话可能已换上自己的 worker，只解除自己的绑定
            self._pipeline.clear_renderer(self)
            self.finished.emit()


def _is_valid_thread(thread: Optional[QThread]) -> TypeGuard[QThread]:
    """判断线程对象是否有效。

    输入: thread 可为 None。
    输出: True 表示可安全使用；否则为 False。
    作用: 结合 shiboken6 判断 Qt 线程对象生命周期状态。
    """
    try:
        return thread is not None and shiboken6.isValid(thread)  # type: ignore[attr-defined]
    except Exception:
        return False


class OverlayController(QObject):
    """控制器：承接UI事件，驱动采集/推理/叠加；UI通过MainWindow暴露的接口更新。"""

    log_message = Signal(str)

    def __init__(self, view: OverlayView, config: Optional[AppConfig] = None):
        """初始化控制器。

        输入: view 为实现 OverlayView 协议的视图对象；config 为应用配置。
        输出: 无。
        作用: 准备计时器、流水线与单槽信箱；摄像头与模型在 start() 时打开。
        """
        super().__init__()
        self._view = view
        self._cfg = config or AppConfig()

        self._pipeline = PoseOverlayPipeline(config=PipelineConfig(edges_by_id=self._cfg.edges_by_id))
        self._slot: Optional[LatestFrameSlot] = None
        self._engine: Optional[HeatmapEngine] = None

        self._thread: Optional[QThread] = None
        self._worker: Optional[InferenceWorker] = None
        # stop() 等待超时仍在运行的旧线程；保留引用直到 finished
        self._retired: list[tuple[QThread, InferenceWorker]] = []

        # QTimer 必须归属 UI 线程；parent 设为 controller 可保证线程归属一致
        self._timer = QTimer(self)
        self._timer.setInterval(self._cfg.tick_interval_ms)
        self._timer.timeout.connect(self._on_tick)

        self._cap: Optional[cv2.VideoCapture] = None
        self._running = False

        # 最近一帧画面与叠加结果，用于保存截图
        self._last_frame: Optional[np.ndarray] = None
        self._last_surface: tuple[int, int] = (0, 0)
        self._last_overlay: Optional[OverlayFrame] = None

        self.log_message.connect(lambda msg: logger.info("%s", msg))

    @property
    def pipeline(self) -> PoseOverlayPipeline:
        return self._pipeline

    def _ensure_engine(self) -> Optional[HeatmapEngine]:
        """按需加载模型；失败时通知视图并返回 None。"""
        if self._engine is not None:
            return self._engine
        if not self._cfg.model_path:
            self._view.show_error("缺少模型", "请通过 --model 指定 .tflite 模型文件")
            return None
        try:
            self._engine = TFLiteHeatmapEngine(
                HeatmapModelConfig(model_path=self._cfg.model_path, num_threads=self._cfg.num_threads)
            )
        except HeatmapModelError as e:
            self._view.show_error("模型加载失败", str(e))
            return None
        self.log_message.emit(f"模型加载成功：{self._cfg.model_path}")
        return self._engine

    def start(self) -> None:
        """开始实时叠加：打开摄像头、启动推理线程与计时器。"""
        self.stop()

        engine = self._ensure_engine()
        if engine is None:
            return

        self._cap = cv2.VideoCapture(self._cfg.camera_index)
        if self._cap is None or not self._cap.isOpened():
            self._cap = None
            self._view.show_error("打开失败", "无法打开摄像头")
            return

        self._last_frame = None
        self._last_overlay = None
        self._slot = LatestFrameSlot()
        self._start_worker(self._slot, engine)

        self._running = True
        self._timer.start()
        self._view.set_status("摄像头已开启：正在检测姿态…", 2000)

    def _start_worker(self, slot: LatestFrameSlot, engine: HeatmapEngine) -> None:
        """启动推理后台线程，并连接结果/失败信号。"""
        thread = QThread()
        worker = InferenceWorker(slot, engine, self._pipeline)
        worker.moveToThread(thread)
        worker.set_surface_size(*self._view.overlay_size())

        thread.started.connect(worker.run)
        worker.overlay_ready.connect(self._on_overlay_ready)
        worker.failed.connect(self._on_worker_failed)

        # run() 占用线程且 UI 线程可能正阻塞在 wait()，quit 必须在工作线程内直接调用
        worker.finished.connect(thread.quit, Qt.ConnectionType.DirectConnection)
        worker.finished.connect(worker.deleteLater)
        thread.finished.connect(self._on_thread_finished)
        thread.finished.connect(thread.deleteLater)

        self._thread = thread
        self._worker = worker

        thread.start()

    @Slot()
    def _on_thread_finished(self) -> None:
        """清理已结束线程的引用。只清理发出信号的那个线程，不影响新会话。"""
        thread = self.sender()
        self._retired = [(t, w) for t, w in self._retired if t is not thread]
        if thread is self._thread:
            self._thread = None
            self._worker = None

    @Slot(object)
    def _on_overlay_ready(self, frame: object) -> None:
        if not self._running or not isinstance(frame, OverlayFrame):
            return
        self._last_overlay = frame
        self._view.set_overlay(frame)

    @Slot(str)
    def _on_worker_failed(self, msg: str) -> None:
        self.stop()
        self._view.show_error("推理线程异常", msg)

    def stop(self) -> None:
        """停止：停计时器、结束推理线程、释放摄像头，并结束平滑会话。"""
        self._running = False
        if self._timer.isActive():
            self._timer.stop()

        worker = self._worker
        if worker is not None and shiboken6.isValid(worker):  # type: ignore[attr-defined]
            worker.stop()
        if self._slot is not None:
            self._slot.close()
            self._slot = None
        thread = self._thread
        if _is_valid_thread(thread):
            thread.quit()
            if not thread.wait(1500) and worker is not None:
                logger.warning("inference thread still busy after stop; waiting for it in background")
                self._retired.append((thread, worker))
        self._thread = None
        self._worker = None

        if self._cap is not None:
            self._cap.release()
            self._cap = None

        self._pipeline.reset()
        self._view.clear_overlay()

    def _on_tick(self) -> None:
        """采集循环：读一帧，刷新预览并投递到信箱（只保留最新帧）。"""
        if not self._running or self._cap is None or self._slot is None:
            return
        ok, frame = self._cap.read()
        if not ok:
            self.stop()
            self._view.set_status("摄像头读取失败，已停止", 5000)
            return

        out_w, out_h = self._view.overlay_size()
        worker = self._worker
        if worker is not None and shiboken6.isValid(worker):  # type: ignore[attr-defined]
            worker.set_surface_size(out_w, out_h)
        self._last_frame = frame
        self._last_surface = (out_w, out_h)
        self._slot.put(frame)
        self._view.set_camera_pixmap(_bgr_to_qpixmap(frame, out_w, out_h))

    def close(self) -> None:
        """关闭控制器：停止流程、释放模型。应在窗口关闭时调用。"""
        self.stop()
        for thread, _ in self._retired:
            if _is_valid_thread(thread):
                thread.wait()
        self._retired.clear()
        if self._engine is not None:
            self._engine.close()
            self._engine = None

    def save_snapshot(self, path: str) -> bool:
        """保存最近一帧画面及其骨架叠加。

        输入: path 输出图片路径。
        输出: 是否写入成功；还没有画面时返回 False。
        作用: 画面先缩放到叠加层尺寸，再用 OpenCV 绘制关键点与连线。
        """
        if self._last_frame is None:
            return False
        img = self._last_frame
        out_w, out_h = self._last_surface
        if out_w > 0 and out_h > 0:
            img = cv2.resize(img, (out_w, out_h), interpolation=cv2.INTER_LINEAR)
        img = draw_overlay_bgr(img, self._last_overlay)
        return bool(cv2.imwrite(path, img))
