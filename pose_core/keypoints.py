from __future__ import annotations

"""17 点人体关键点布局（COCO 顺序）与固定策略常量。

这些值是编译期策略，不作为运行时配置暴露。
"""

# COCO-17 keypoint indices
NOSE = 0
L_EYE = 1
R_EYE = 2
L_EAR = 3
R_EAR = 4
L_SHOULDER = 5
R_SHOULDER = 6
L_ELBOW = 7
R_ELBOW = 8
L_WRIST = 9
R_WRIST = 10
L_HIP = 11
R_HIP = 12
L_KNEE = 13
R_KNEE = 14
L_ANKLE = 15
R_ANKLE = 16

KEYPOINT_NAMES: tuple[str, ...] = (
    "nose",
    "left_eye",
    "right_eye",
    "left_ear",
    "right_ear",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
)

NUM_KEYPOINTS = 17
CONFIDENCE_THRESHOLD = 0.4
SMOOTHING_FACTOR = 0.7  # 越大越平滑，但延迟越明显

# 模型输入尺寸（宽 x 高）
MODEL_WIDTH = 513
MODEL_HEIGHT = 257
