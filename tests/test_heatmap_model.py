from __future__ import annotations

import numpy as np
import pytest

from pose_core.heatmap_model import (
    HeatmapModelConfig,
    HeatmapModelError,
    TFLiteHeatmapEngine,
    prepare_model_input,
)
from pose_core.keypoints import MODEL_HEIGHT, MODEL_WIDTH


def test_model_input_shape_and_range():
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    frame[..., 2] = 255  # BGR 红

    x = prepare_model_input(frame)

    assert x.shape == (1, MODEL_HEIGHT, MODEL_WIDTH, 3)
    assert x.dtype == np.float32
    # RGB 顺序：R 通道为 1，G/B 为 -1
    assert np.allclose(x[0, :, :, 0], 1.0)
    assert np.allclose(x[0, :, :, 1:], -1.0)


def test_model_input_custom_size():
    x = prepare_model_input(np.zeros((10, 10, 3), dtype=np.uint8), width=32, height=16)
    assert x.shape == (1, 16, 32, 3)


def test_missing_model_file_raises(tmp_path):
    with pytest.raises(HeatmapModelError):
        TFLiteHeatmapEngine(HeatmapModelConfig(model_path=str(tmp_path / "missing.tflite")))
