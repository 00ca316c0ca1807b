from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import cv2
import numpy as np

from .keypoints import MODEL_HEIGHT, MODEL_WIDTH

logger = logging.getLogger(__name__)


class HeatmapModelError(RuntimeError):
    pass


class HeatmapEngine(Protocol):
    """推理引擎接口：输入归一化图像张量，输出 [1,H,W,K] 热力图。"""

    @property
    def input_size(self) -> tuple[int, int]:
        """模型输入尺寸 (宽, 高)。"""
        ...

    def __call__(self, input_tensor: np.ndarray) -> np.ndarray: ...

    def close(self) -> None: ...


def prepare_model_input(
    frame_bgr: np.ndarray,
    width: int = MODEL_WIDTH,
    height: int = MODEL_HEIGHT,
) -> np.ndarray:
    """将 BGR 帧转换为模型输入张量。

    输入: frame_bgr (h,w,3) BGR 图像；width/height 为模型输入尺寸。
    输出: 形状 (1,height,width,3) 的 float32 数组，RGB 顺序，取值 [-1,1]。
    """
    resized = cv2.resize(frame_bgr, (int(width), int(height)), interpolation=cv2.INTER_LINEAR)
    rgb = cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)
    x = rgb.astype(np.float32) / 255.0
    x = (x - 0.5) * 2.0
    return x[np.newaxis, ...]


@dataclass(frozen=True)
class HeatmapModelConfig:
    model_path: str
    num_threads: Optional[int] = None
    output_index: int = 0


class TFLiteHeatmapEngine:
    """TFLite 解释器的薄封装。业务层只接触 numpy 张量，不接触解释器对象。"""

    def __init__(self, config: HeatmapModelConfig):
        """加载模型并分配张量。

        输入: config 指定模型路径、线程数与使用的输出张量下标。
        输出: 无（构造器）。
        作用: 延迟导入解释器，加载失败时抛出 HeatmapModelError。
        """
        self._config = config
        path = Path(config.model_path)
        if not path.is_file():
            raise HeatmapModelError(f"模型文件不存在：{path}")

        # 延迟导入，避免没有安装推理运行时时 import 直接炸
        try:
            from ai_edge_litert.interpreter import Interpreter
        except ImportError as e:
            raise HeatmapModelError(
                "未安装 TFLite 运行时，请执行: pip install ai-edge-litert"
            ) from e

        self._interpreter = Interpreter(model_path=str(path), num_threads=config.num_threads)
        self._interpreter.allocate_tensors()
        self._input = self._interpreter.get_input_details()[0]
        outputs = self._interpreter.get_output_details()
        if not outputs or config.output_index >= len(outputs):
            raise HeatmapModelError(f"模型没有第 {config.output_index} 个输出张量")
        self._output = outputs[config.output_index]

        logger.info("Number of outputs: %d", len(outputs))
        for i, det in enumerate(outputs):
            logger.info("Output tensor %d: name=%s, shape=%s, dtype=%s", i, det["name"], list(det["shape"]), det["dtype"])

    @property
    def input_size(self) -> tuple[int, int]:
        shape = self._input["shape"]
        return int(shape[2]), int(shape[1])

    def __call__(self, input_tensor: np.ndarray) -> np.ndarray:
        self._interpreter.set_tensor(self._input["index"], input_tensor.astype(self._input["dtype"], copy=False))
        self._interpreter.invoke()
        return np.array(self._interpreter.get_tensor(self._output["index"]))

    def close(self) -> None:
        self._interpreter = None
