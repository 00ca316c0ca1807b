from __future__ import annotations

import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication

from pose_overlay_app.controller.overlay_controller import AppConfig
from pose_overlay_app.ui.main_window import MainWindow


def main() -> int:
    """应用入口：解析参数，创建 QApplication 与主窗口并运行事件循环。

    输入/输出: 命令行参数；返回应用退出码（int）。
    作用: 启动 GUI 程序并阻塞直到窗口关闭。
    """
    ap = argparse.ArgumentParser(prog="pose-overlay")
    ap.add_argument("--model", default=None, help="PoseNet heatmap model (.tflite)")
    ap.add_argument("--camera", type=int, default=0, help="Camera index for cv2.VideoCapture")
    ap.add_argument("--threads", type=int, default=None, help="Interpreter threads")
    ap.add_argument("--positional-edges", action="store_true",
                    help="Index skeleton edges by sequence position instead of joint id")
    ap.add_argument("--debug", action="store_true", help="Log decoded keypoints per frame")
    args, qt_args = ap.parse_known_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = AppConfig(
        model_path=args.model,
        camera_index=args.camera,
        num_threads=args.threads,
        edges_by_id=not args.positional_edges,
    )

    app = QApplication([sys.argv[0], *qt_args])
    w = MainWindow(config)
    w.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
